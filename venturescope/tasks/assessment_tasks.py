"""Background assessment generation."""

from __future__ import annotations

import json
import logging
import uuid
from typing import Any

from sqlalchemy import update
from sqlalchemy.orm import Session

from venturescope.database.db import get_db_session
from venturescope.llm.assessment import generate_assessment
from venturescope.llm.client import LLMClient
from venturescope.llm.prompts import CompanyContext, DocumentContext
from venturescope.models import Assessment, AssessmentStatus, Document, Organization, UsageRecord
from venturescope.models.base import utcnow
from venturescope.tasks.celery_app import celery_app
from venturescope.tasks.hooks import after_task, before_task

logger = logging.getLogger(__name__)

TASK_NAME = "assessments.generate"


def _enum_value(value: Any) -> str | None:
    return getattr(value, "value", value)


def run_assessment(db: Session, assessment_id: int, client: LLMClient | None = None) -> Assessment:
    """Generate content for a pending assessment and settle usage accounting.

    Completion, the usage ledger row, and the org counter increment commit
    together. Any failure leaves no usage behind and marks the row failed.
    """
    assessment = db.get(Assessment, assessment_id)
    if assessment is None:
        raise LookupError(f"Assessment {assessment_id} does not exist")
    company = assessment.company
    assessment.status = AssessmentStatus.PROCESSING
    db.commit()

    try:
        documents = (
            db.query(Document)
            .filter(
                Document.company_id == company.id,
                Document.processed_at.is_not(None),
                Document.extracted_text.is_not(None),
            )
            .order_by(Document.created_at.asc(), Document.id.asc())
            .all()
        )
        generated = generate_assessment(
            assessment.type,
            CompanyContext(
                name=company.name,
                stage=_enum_value(company.stage),
                sector=company.sector,
                raise_amount=company.raise_amount,
                valuation=company.valuation,
                description=company.description,
                website=company.website,
            ),
            [
                DocumentContext(
                    file_name=doc.file_name,
                    classification=_enum_value(doc.classification) or "document",
                    extracted_text=doc.extracted_text or "",
                )
                for doc in documents
            ],
            client=client,
        )

        assessment.status = AssessmentStatus.COMPLETED
        assessment.content = json.dumps(generated.content)
        assessment.scores = {**generated.scores, "recommendation_detail": generated.recommendation_detail}
        assessment.recommendation = generated.recommendation
        assessment.overall_score = generated.overall_score
        assessment.processing_time_ms = generated.processing_time_ms
        assessment.completed_at = utcnow()
        assessment.error_message = None
        db.add(
            UsageRecord(
                org_id=company.org_id,
                assessment_type=assessment.type,
                assessment_id=assessment.id,
                tokens_used=generated.tokens_used,
            )
        )
        db.execute(
            update(Organization)
            .where(Organization.id == company.org_id)
            .values(assessments_used_this_month=Organization.assessments_used_this_month + 1)
        )
        db.commit()
    except Exception as exc:
        db.rollback()
        failed = db.get(Assessment, assessment_id)
        failed.status = AssessmentStatus.FAILED
        failed.error_message = str(exc) or exc.__class__.__name__
        db.commit()
        logger.error(
            "assessment.generation.failed",
            extra={"event": "assessment.generation.failed", "assessment_id": assessment_id, "error": str(exc)},
        )
        return failed

    db.refresh(assessment)
    logger.info(
        "assessment.generation.completed",
        extra={
            "event": "assessment.generation.completed",
            "assessment_id": assessment_id,
            "org_id": company.org_id,
            "overall_score": assessment.overall_score,
        },
    )
    return assessment


@celery_app.task(bind=True, name=TASK_NAME)
def generate_assessment_task(self, assessment_id: int, org_id: int | None = None, user_id: int | None = None) -> dict[str, Any]:
    context = {
        "org_id": org_id,
        "user_id": user_id,
        "task_id": getattr(self.request, "id", None),
        "trace_id": uuid.uuid4().hex,
    }
    logger.info("task.start", extra=before_task(TASK_NAME, context))
    with get_db_session() as db:
        assessment = run_assessment(db, assessment_id)
        status = _enum_value(assessment.status)
    logger.info("task.finish", extra=after_task(TASK_NAME, context, status=status, assessment_id=assessment_id))
    return {"assessment_id": assessment_id, "status": status}


def enqueue_assessment(assessment_id: int, org_id: int, user_id: int) -> str:
    """Queue generation and return the broker task id."""
    result = generate_assessment_task.delay(assessment_id=assessment_id, org_id=org_id, user_id=user_id)
    return result.id
