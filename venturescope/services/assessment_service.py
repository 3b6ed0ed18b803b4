"""Assessment lifecycle, sharing, and threaded comments."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func

from venturescope.auth.tenant_context import OrgContext
from venturescope.billing.plans import can_create_assessment
from venturescope.core.exceptions import AuthorizationError, NotFoundError, QuotaExceededError, ValidationError
from venturescope.models import (
    Assessment,
    AssessmentComment,
    AssessmentShare,
    AssessmentStatus,
    AssessmentType,
    Company,
    Document,
    Organization,
    SharePermission,
    User,
)
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

QUOTA_EXCEEDED_MESSAGE = "Assessment limit reached for current plan"
IN_FLIGHT_STATUSES = (AssessmentStatus.PENDING, AssessmentStatus.PROCESSING)


def organize_comments(comments: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Nest flat comment rows under their parents, preserving input order at every level.

    Rows whose parent is missing are promoted to the root so no comment is lost.
    """
    by_id: dict[int, dict[str, Any]] = {}
    for comment in comments:
        by_id[comment["id"]] = {**comment, "replies": []}
    roots: list[dict[str, Any]] = []
    for comment in comments:
        node = by_id[comment["id"]]
        parent = by_id.get(comment.get("parent_id")) if comment.get("parent_id") is not None else None
        if parent is not None:
            parent["replies"].append(node)
        else:
            roots.append(node)
    return roots


class AssessmentService(BaseService):
    """Assessments belong to a company; org ownership is checked through it."""

    def _org_assessment(self, context: OrgContext, assessment_id: int) -> Assessment | None:
        return (
            self.db.query(Assessment)
            .join(Company, Company.id == Assessment.company_id)
            .filter(Assessment.id == assessment_id, Company.org_id == context.org_id)
            .first()
        )

    def in_flight_count(self, org_id: int) -> int:
        """Queued assessments not yet reflected in the monthly counter."""
        return (
            self.db.query(func.count(Assessment.id))
            .join(Company, Company.id == Assessment.company_id)
            .filter(Company.org_id == org_id, Assessment.status.in_(IN_FLIGHT_STATUSES))
            .scalar()
            or 0
        )

    def get_assessment(self, context: OrgContext, assessment_id: int) -> Assessment:
        assessment = self._org_assessment(context, assessment_id)
        if assessment is None:
            raise NotFoundError("Assessment not found")
        return assessment

    def list_assessments(
        self,
        context: OrgContext,
        company_id: int | None = None,
        status: str | None = None,
    ) -> list[Assessment]:
        query = (
            self.db.query(Assessment)
            .join(Company, Company.id == Assessment.company_id)
            .filter(Company.org_id == context.org_id)
        )
        if company_id is not None:
            query = query.filter(Assessment.company_id == company_id)
        if status:
            try:
                query = query.filter(Assessment.status == AssessmentStatus(status))
            except ValueError as exc:
                raise ValidationError(f"Unknown assessment status: {status}") from exc
        return query.order_by(Assessment.created_at.desc(), Assessment.id.desc()).all()

    def create_assessment(self, context: OrgContext, company_id: int, assessment_type: AssessmentType) -> Assessment:
        """Insert a processing assessment after the quota and document checks pass."""
        company = self.db.get(Company, company_id)
        if company is None or company.org_id != context.org_id:
            raise NotFoundError("Company not found")

        org = self.db.get(Organization, context.org_id)
        # The counter only moves on completion, so queued work holds a slot until then.
        used = org.assessments_used_this_month + self.in_flight_count(org.id)
        if not can_create_assessment(org.plan_tier, used):
            logger.info(
                "assessment.quota.exceeded",
                extra={
                    "event": "assessment.quota.exceeded",
                    "org_id": org.id,
                    "plan_tier": org.plan_tier.value,
                    "used": used,
                },
            )
            raise QuotaExceededError(QUOTA_EXCEEDED_MESSAGE)

        processed = (
            self.db.query(Document.id)
            .filter(
                Document.company_id == company.id,
                Document.processed_at.is_not(None),
                Document.extracted_text.is_not(None),
            )
            .first()
        )
        if processed is None:
            raise ValidationError("No processed documents available for assessment")

        assessment = Assessment(
            company_id=company.id,
            created_by=context.user_id,
            type=assessment_type,
            status=AssessmentStatus.PROCESSING,
        )
        self.db.add(assessment)
        self.commit()
        self.db.refresh(assessment)
        logger.info(
            "assessment.created",
            extra={
                "event": "assessment.created",
                "org_id": context.org_id,
                "assessment_id": assessment.id,
                "type": assessment_type.value,
            },
        )
        return assessment

    def mark_enqueue_failed(self, assessment: Assessment, reason: str) -> None:
        """Fail an assessment whose generation job never reached the queue, releasing its quota slot."""
        assessment.status = AssessmentStatus.FAILED
        assessment.error_message = f"Could not queue generation: {reason}"
        self.commit()
        logger.error(
            "assessment.enqueue.failed",
            extra={"event": "assessment.enqueue.failed", "assessment_id": assessment.id, "error": reason},
        )

    def delete_assessment(self, context: OrgContext, assessment_id: int) -> None:
        self.db.delete(self.get_assessment(context, assessment_id))
        self.commit()

    # Sharing

    def list_shares(self, context: OrgContext, assessment_id: int) -> list[tuple[AssessmentShare, User]]:
        self.get_assessment(context, assessment_id)
        return (
            self.db.query(AssessmentShare, User)
            .join(User, User.id == AssessmentShare.shared_with_user_id)
            .filter(AssessmentShare.assessment_id == assessment_id)
            .order_by(AssessmentShare.created_at.asc(), AssessmentShare.id.asc())
            .all()
        )

    def share_assessment(
        self,
        context: OrgContext,
        assessment_id: int,
        email: str,
        permission: SharePermission,
    ) -> tuple[AssessmentShare, User]:
        """Share with an existing user, or update the permission of an existing share."""
        self.get_assessment(context, assessment_id)
        target = self.db.query(User).filter(User.email == email.strip().lower()).first()
        if target is None:
            raise NotFoundError("User not found. They must have an account first.")

        share = (
            self.db.query(AssessmentShare)
            .filter(AssessmentShare.assessment_id == assessment_id, AssessmentShare.shared_with_user_id == target.id)
            .first()
        )
        if share is None:
            share = AssessmentShare(
                assessment_id=assessment_id,
                shared_with_user_id=target.id,
                shared_by=context.user_id,
                permission=permission,
            )
            self.db.add(share)
        else:
            share.permission = permission
        self.commit()
        self.db.refresh(share)
        logger.info(
            "assessment.shared",
            extra={"event": "assessment.shared", "assessment_id": assessment_id, "permission": permission.value},
        )
        return share, target

    def remove_share(self, context: OrgContext, assessment_id: int, share_id: int) -> None:
        self.get_assessment(context, assessment_id)
        deleted = (
            self.db.query(AssessmentShare)
            .filter(AssessmentShare.id == share_id, AssessmentShare.assessment_id == assessment_id)
            .delete()
        )
        if not deleted:
            raise NotFoundError("Share not found")
        self.commit()

    # Comments

    def _readable_assessment(self, context: OrgContext | None, user_id: int, assessment_id: int) -> tuple[Assessment, AssessmentShare | None]:
        """Resolve access as an org member first, then as a share grantee."""
        if context is not None:
            assessment = self._org_assessment(context, assessment_id)
            if assessment is not None:
                return assessment, None
        share = (
            self.db.query(AssessmentShare)
            .filter(AssessmentShare.assessment_id == assessment_id, AssessmentShare.shared_with_user_id == user_id)
            .first()
        )
        if share is None:
            raise NotFoundError("Assessment not found")
        return share.assessment, share

    def list_comments(self, context: OrgContext | None, user_id: int, assessment_id: int) -> list[dict[str, Any]]:
        self._readable_assessment(context, user_id, assessment_id)
        rows = (
            self.db.query(AssessmentComment, User)
            .join(User, User.id == AssessmentComment.user_id)
            .filter(AssessmentComment.assessment_id == assessment_id)
            .order_by(AssessmentComment.created_at.asc(), AssessmentComment.id.asc())
            .all()
        )
        return organize_comments([_comment_row(comment, author) for comment, author in rows])

    def add_comment(
        self,
        context: OrgContext | None,
        user_id: int,
        assessment_id: int,
        content: str,
        parent_id: int | None = None,
    ) -> dict[str, Any]:
        _, share = self._readable_assessment(context, user_id, assessment_id)
        if share is not None and share.permission == SharePermission.VIEW:
            raise AuthorizationError("No permission to comment")
        if not content.strip():
            raise ValidationError("Comment content is required")
        if parent_id is not None:
            parent = self.db.get(AssessmentComment, parent_id)
            if parent is None or parent.assessment_id != assessment_id:
                raise ValidationError("Parent comment does not belong to this assessment")

        comment = AssessmentComment(
            assessment_id=assessment_id,
            user_id=user_id,
            content=content.strip(),
            parent_id=parent_id,
        )
        self.db.add(comment)
        self.commit()
        self.db.refresh(comment)
        return {**_comment_row(comment, self.db.get(User, user_id)), "replies": []}

    def delete_comment(self, context: OrgContext | None, user_id: int, assessment_id: int, comment_id: int) -> None:
        self._readable_assessment(context, user_id, assessment_id)
        comment = self.db.get(AssessmentComment, comment_id)
        if comment is None or comment.assessment_id != assessment_id:
            raise NotFoundError("Comment not found")
        if comment.user_id != user_id:
            raise AuthorizationError("Cannot delete others comments")
        self.db.delete(comment)
        self.commit()


def _comment_row(comment: AssessmentComment, author: User | None) -> dict[str, Any]:
    return {
        "id": comment.id,
        "assessment_id": comment.assessment_id,
        "user_id": comment.user_id,
        "user_name": author.name if author else None,
        "content": comment.content,
        "parent_id": comment.parent_id,
        "created_at": comment.created_at,
    }
