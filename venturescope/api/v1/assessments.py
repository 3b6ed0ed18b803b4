"""Assessment, sharing, and comment endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import CurrentUser, get_db_session
from venturescope.core.exceptions import ExternalServiceError, ValidationError
from venturescope.schemas.assessments import (
    AssessmentCreateRequest,
    AssessmentResponse,
    CommentCreateRequest,
    CommentResponse,
    ShareCreateRequest,
    ShareResponse,
)
from venturescope.schemas.common import SuccessResponse
from venturescope.services.assessment_service import AssessmentService
from venturescope.tasks.assessment_tasks import enqueue_assessment

router = APIRouter(prefix="/assessments", tags=["assessments"])


def _optional_context(user: CurrentUser):
    return user.org_context() if user.org_id is not None else None


@router.get("", response_model=list[AssessmentResponse])
def list_assessments(
    company_id: int | None = Query(default=None, alias="companyId"),
    status_filter: str | None = Query(default=None, alias="status"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[AssessmentResponse]:
    user = authorize(db, authorization)
    assessments = AssessmentService(db).list_assessments(
        user.org_context(), company_id=company_id, status=status_filter
    )
    return [AssessmentResponse.model_validate(assessment) for assessment in assessments]


@router.post("", response_model=AssessmentResponse, status_code=status.HTTP_201_CREATED)
def create_assessment(
    payload: AssessmentCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> AssessmentResponse:
    user = authorize(db, authorization, scopes=["assessments.write"])
    service = AssessmentService(db)
    assessment = service.create_assessment(user.org_context(), payload.company_id, payload.type)
    try:
        enqueue_assessment(assessment.id, org_id=user.org_id, user_id=user.user_id)
    except Exception as exc:
        service.mark_enqueue_failed(assessment, str(exc) or exc.__class__.__name__)
        raise ExternalServiceError("Failed to queue assessment generation") from exc
    db.refresh(assessment)
    return AssessmentResponse.model_validate(assessment)


@router.get("/{assessment_id}", response_model=AssessmentResponse)
def get_assessment(
    assessment_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> AssessmentResponse:
    user = authorize(db, authorization)
    return AssessmentResponse.model_validate(AssessmentService(db).get_assessment(user.org_context(), assessment_id))


@router.delete("/{assessment_id}", response_model=SuccessResponse)
def delete_assessment(
    assessment_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, scopes=["assessments.write"])
    AssessmentService(db).delete_assessment(user.org_context(), assessment_id)
    return SuccessResponse()


@router.get("/{assessment_id}/share", response_model=list[ShareResponse])
def list_shares(
    assessment_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[ShareResponse]:
    user = authorize(db, authorization)
    rows = AssessmentService(db).list_shares(user.org_context(), assessment_id)
    return [_share_response(share, target) for share, target in rows]


@router.post("/{assessment_id}/share", response_model=ShareResponse, status_code=status.HTTP_201_CREATED)
def share_assessment(
    assessment_id: int,
    payload: ShareCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> ShareResponse:
    user = authorize(db, authorization, scopes=["assessments.write"])
    if payload.email.strip().lower() == user.email:
        raise ValidationError("Cannot share an assessment with yourself")
    share, target = AssessmentService(db).share_assessment(
        user.org_context(), assessment_id, payload.email, payload.permission
    )
    return _share_response(share, target)


@router.delete("/{assessment_id}/share", response_model=SuccessResponse)
def remove_share(
    assessment_id: int,
    share_id: int | None = Query(default=None, alias="shareId"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, scopes=["assessments.write"])
    if share_id is None:
        raise ValidationError("Share ID required")
    AssessmentService(db).remove_share(user.org_context(), assessment_id, share_id)
    return SuccessResponse()


@router.get("/{assessment_id}/comments", response_model=list[CommentResponse])
def list_comments(
    assessment_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[CommentResponse]:
    user = authorize(db, authorization, require_org=False)
    comments = AssessmentService(db).list_comments(_optional_context(user), user.user_id, assessment_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


@router.post("/{assessment_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
def add_comment(
    assessment_id: int,
    payload: CommentCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> CommentResponse:
    user = authorize(db, authorization, require_org=False)
    comment = AssessmentService(db).add_comment(
        _optional_context(user),
        user.user_id,
        assessment_id,
        payload.content,
        parent_id=payload.parent_id,
    )
    return CommentResponse.model_validate(comment)


@router.delete("/{assessment_id}/comments", response_model=SuccessResponse)
def delete_comment(
    assessment_id: int,
    comment_id: int | None = Query(default=None, alias="commentId"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, require_org=False)
    if comment_id is None:
        raise ValidationError("Comment ID required")
    AssessmentService(db).delete_comment(_optional_context(user), user.user_id, assessment_id, comment_id)
    return SuccessResponse()


def _share_response(share, target) -> ShareResponse:
    return ShareResponse(
        id=share.id,
        assessment_id=share.assessment_id,
        shared_with_user_id=target.id,
        shared_with_email=target.email,
        shared_with_name=target.name,
        shared_by=share.shared_by,
        permission=share.permission,
        created_at=share.created_at,
    )
