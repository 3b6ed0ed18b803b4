"""Deal submission review endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import get_db_session
from venturescope.schemas.submissions import AcceptSubmissionResponse, SubmissionResponse, SubmissionUpdateRequest
from venturescope.services.submission_service import SubmissionService

router = APIRouter(prefix="/submissions", tags=["submissions"])


@router.get("", response_model=list[SubmissionResponse])
def list_submissions(
    status_filter: str | None = Query(default=None, alias="status"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[SubmissionResponse]:
    user = authorize(db, authorization, scopes=["submissions.read"])
    submissions = SubmissionService(db).list_submissions(user.org_context(), status=status_filter)
    return [SubmissionResponse.model_validate(submission) for submission in submissions]


@router.get("/{submission_id}", response_model=SubmissionResponse)
def get_submission(
    submission_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SubmissionResponse:
    user = authorize(db, authorization, scopes=["submissions.read"])
    return SubmissionResponse.model_validate(SubmissionService(db).get_submission(user.org_context(), submission_id))


@router.patch("/{submission_id}", response_model=SubmissionResponse)
def update_submission(
    submission_id: int,
    payload: SubmissionUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SubmissionResponse:
    user = authorize(db, authorization, scopes=["submissions.review"])
    submission = SubmissionService(db).update_submission(
        user.org_context(), submission_id, payload.model_dump(exclude_unset=True)
    )
    return SubmissionResponse.model_validate(submission)


@router.post("/{submission_id}/accept", response_model=AcceptSubmissionResponse)
def accept_submission(
    submission_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> AcceptSubmissionResponse:
    user = authorize(db, authorization, scopes=["submissions.review"])
    company = SubmissionService(db).accept_submission(user.org_context(), submission_id)
    return AcceptSubmissionResponse(success=True, company_id=company.id)
