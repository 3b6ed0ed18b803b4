"""Public deal intake and submission review."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any

from venturescope.auth.tenant_context import OrgContext, enforce_org_match
from venturescope.core.config import Config, get_config
from venturescope.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)
from venturescope.models import (
    Company,
    CompanyStatus,
    DealSubmission,
    IntakeRateLimit,
    Organization,
    SubmissionStatus,
)
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown"


def client_ip_from_headers(forwarded_for: str | None, fallback: str | None = None) -> str:
    """First hop of ``X-Forwarded-For``, else the socket peer, else ``unknown``."""
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return fallback or UNKNOWN_IP


class SubmissionService(BaseService):
    def __init__(self, db=None, config: Config | None = None) -> None:
        super().__init__(db)
        self.config = config or get_config()

    # Public intake

    def intake_org(self, slug: str) -> Organization:
        org = self.db.query(Organization).filter(Organization.slug == slug).first()
        if org is None:
            raise NotFoundError("Organization not found")
        if not org.intake_enabled:
            raise AuthorizationError("Intake form is disabled for this organization")
        return org

    def check_rate_limit(self, org: Organization, ip_address: str) -> None:
        window_start = utcnow() - timedelta(hours=self.config.INTAKE_RATE_LIMIT_WINDOW_HOURS)
        recent = (
            self.db.query(IntakeRateLimit)
            .filter(
                IntakeRateLimit.org_id == org.id,
                IntakeRateLimit.ip_address == ip_address,
                IntakeRateLimit.created_at >= window_start,
            )
            .count()
        )
        if recent >= self.config.INTAKE_RATE_LIMIT_MAX:
            logger.warning(
                "intake.rate_limited",
                extra={"event": "intake.rate_limited", "org_id": org.id, "ip_address": ip_address},
            )
            raise RateLimitError("Rate limit exceeded. Please try again later.")

    def submit(self, org: Organization, ip_address: str, fields: dict[str, Any]) -> DealSubmission:
        """Record the rate-limit hit and the submission together."""
        submission = DealSubmission(
            org_id=org.id,
            ip_address=ip_address,
            status=SubmissionStatus.PENDING,
            **fields,
        )
        self.db.add(IntakeRateLimit(org_id=org.id, ip_address=ip_address))
        self.db.add(submission)
        self.commit()
        self.db.refresh(submission)
        logger.info(
            "intake.submission.created",
            extra={"event": "intake.submission.created", "org_id": org.id, "submission_id": submission.id},
        )
        return submission

    # Review

    def list_submissions(self, context: OrgContext, status: str | None = None) -> list[DealSubmission]:
        query = self.db.query(DealSubmission).filter(DealSubmission.org_id == context.org_id)
        if status and status != "all":
            try:
                query = query.filter(DealSubmission.status == SubmissionStatus(status))
            except ValueError as exc:
                raise ValidationError(f"Unknown submission status: {status}") from exc
        return query.order_by(DealSubmission.created_at.desc(), DealSubmission.id.desc()).all()

    def get_submission(self, context: OrgContext, submission_id: int) -> DealSubmission:
        submission = self.db.get(DealSubmission, submission_id)
        if submission is None:
            raise NotFoundError("Submission not found")
        enforce_org_match(submission.org_id, context, label="Submission")
        return submission

    def update_submission(self, context: OrgContext, submission_id: int, fields: dict[str, Any]) -> DealSubmission:
        updates = {key: value for key, value in fields.items() if key in {"status", "notes"}}
        if not updates:
            raise ValidationError("No valid fields to update")
        submission = self.get_submission(context, submission_id)
        if updates.get("status") is not None:
            submission.status = updates["status"]
            submission.reviewed_at = utcnow()
            submission.reviewed_by = context.user_id
        if "notes" in updates:
            submission.notes = updates["notes"]
        self.commit()
        self.db.refresh(submission)
        return submission

    def accept_submission(self, context: OrgContext, submission_id: int) -> Company:
        """Create the pipeline company and mark the submission accepted in one transaction."""
        submission = self.get_submission(context, submission_id)
        if submission.status == SubmissionStatus.ACCEPTED and submission.company_id:
            raise ConflictError("Submission already accepted", details={"companyId": submission.company_id})

        try:
            company = Company(
                org_id=context.org_id,
                name=submission.company_name,
                stage=submission.stage,
                sector=submission.sector,
                raise_amount=submission.raise_amount,
                website=submission.website,
                description=submission.description,
                status=CompanyStatus.ACTIVE,
                created_by=context.user_id,
                pipeline_position=0,
            )
            self.db.add(company)
            self.db.flush()
            submission.status = SubmissionStatus.ACCEPTED
            submission.company_id = company.id
            submission.reviewed_at = utcnow()
            submission.reviewed_by = context.user_id
            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(
                "submission.accept.failed",
                extra={"event": "submission.accept.failed", "org_id": context.org_id, "submission_id": submission_id},
            )
            raise

        logger.info(
            "submission.accepted",
            extra={
                "event": "submission.accepted",
                "org_id": context.org_id,
                "submission_id": submission_id,
                "company_id": company.id,
            },
        )
        return company
