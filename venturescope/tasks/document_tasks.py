"""Background document extraction and classification."""

from __future__ import annotations

import logging
import uuid
from typing import Any

from venturescope.core.config import get_config
from venturescope.core.exceptions import VentureScopeException
from venturescope.database.db import get_db_session
from venturescope.llm.assessment import classify_document_with_ai
from venturescope.models import DocumentClassification
from venturescope.services.document_service import DocumentService
from venturescope.tasks.celery_app import celery_app
from venturescope.tasks.hooks import after_task, before_task

logger = logging.getLogger(__name__)

TASK_NAME = "documents.process"


def refine_classification(document) -> None:
    """Let the classification model relabel documents the filename rules could not place."""
    if document.classification != DocumentClassification.OTHER or not document.extracted_text:
        return
    if not get_config().LLM_API_KEY:
        return
    try:
        label = classify_document_with_ai(document.file_name, document.extracted_text)
    except VentureScopeException as exc:
        logger.warning(
            "document.classification.ai_failed",
            extra={"event": "document.classification.ai_failed", "document_id": document.id, "error": str(exc)},
        )
        return
    document.classification = DocumentClassification(label)


@celery_app.task(bind=True, name=TASK_NAME)
def process_document_task(self, document_id: int, org_id: int | None = None, user_id: int | None = None) -> dict[str, Any]:
    context = {
        "org_id": org_id,
        "user_id": user_id,
        "task_id": getattr(self.request, "id", None),
        "trace_id": uuid.uuid4().hex,
    }
    logger.info("task.start", extra=before_task(TASK_NAME, context))
    with get_db_session() as db:
        service = DocumentService(db)
        document = service.process_document(document_id)
        if document.error_message is None:
            refine_classification(document)
            service.commit()
        status = "failed" if document.error_message else "processed"
    logger.info("task.finish", extra=after_task(TASK_NAME, context, status=status, document_id=document_id))
    return {"document_id": document_id, "status": status}


def enqueue_document_processing(document_id: int, org_id: int, user_id: int) -> str:
    result = process_document_task.delay(document_id=document_id, org_id=org_id, user_id=user_id)
    return result.id
