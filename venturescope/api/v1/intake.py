"""Public deal intake endpoint for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session

from venturescope.core.dependencies import get_db_session
from venturescope.schemas.submissions import IntakeSubmissionRequest, IntakeSubmissionResponse
from venturescope.services.submission_service import SubmissionService, client_ip_from_headers

router = APIRouter(prefix="/intake", tags=["intake"])


@router.get("/{slug}")
def intake_form(slug: str, db: Session = Depends(get_db_session)) -> dict:
    org = SubmissionService(db).intake_org(slug)
    return {"organization": {"name": org.name, "slug": org.slug}}


@router.post("/{slug}", response_model=IntakeSubmissionResponse, status_code=status.HTTP_201_CREATED)
def submit_deal(
    slug: str,
    payload: IntakeSubmissionRequest,
    forwarded_for: str | None = Header(default=None, alias="X-Forwarded-For"),
    db: Session = Depends(get_db_session),
) -> IntakeSubmissionResponse:
    service = SubmissionService(db)
    org = service.intake_org(slug)
    ip_address = client_ip_from_headers(forwarded_for)
    service.check_rate_limit(org, ip_address)
    submission = service.submit(org, ip_address, payload.model_dump())
    return IntakeSubmissionResponse(success=True, id=submission.id)
