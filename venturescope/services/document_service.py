"""Document upload, retrieval, deletion, and processing lifecycle."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from venturescope.auth.tenant_context import OrgContext, enforce_org_match
from venturescope.core.exceptions import NotFoundError, ValidationError
from venturescope.models import Company, Document
from venturescope.models.base import utcnow
from venturescope.services.base_service import BaseService
from venturescope.services.document_processing import EXTRACTION_VERSION, classify_document, extract_text
from venturescope.services.storage import StorageClient, build_storage_key

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 50 * 1024 * 1024


@dataclass(frozen=True)
class UploadedFile:
    file_name: str
    content_type: str
    data: bytes


class DocumentService(BaseService):
    """Documents inherit their org from the owning company."""

    def __init__(self, db=None, storage: StorageClient | None = None) -> None:
        super().__init__(db)
        self._storage = storage

    @property
    def storage(self) -> StorageClient:
        if self._storage is None:
            self._storage = StorageClient.from_config()
        return self._storage

    def _company_for(self, context: OrgContext, company_id: int) -> Company:
        company = self.db.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company not found")
        enforce_org_match(company.org_id, context, label="Company")
        return company

    def list_documents(self, context: OrgContext, company_id: int | None = None) -> list[Document]:
        query = (
            self.db.query(Document)
            .join(Company, Company.id == Document.company_id)
            .filter(Company.org_id == context.org_id)
        )
        if company_id is not None:
            query = query.filter(Document.company_id == company_id)
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    def get_document(self, context: OrgContext, document_id: int) -> Document:
        document = self.db.get(Document, document_id)
        if document is None:
            raise NotFoundError("Document not found")
        enforce_org_match(document.company.org_id, context, label="Document")
        return document

    def upload_document(self, context: OrgContext, company_id: int, upload: UploadedFile) -> Document:
        if not upload.file_name:
            raise ValidationError("No file provided")
        if len(upload.data) > MAX_UPLOAD_BYTES:
            raise ValidationError("File exceeds the 50MB upload limit")
        company = self._company_for(context, company_id)

        key = build_storage_key(context.org_id, company.id, upload.file_name)
        self.storage.upload(key, upload.data, upload.content_type)
        document = Document(
            company_id=company.id,
            uploaded_by=context.user_id,
            file_name=upload.file_name,
            file_type=upload.content_type,
            file_size=len(upload.data),
            file_path=key,
            doc_metadata={"original_name": upload.file_name, "upload_timestamp": utcnow().isoformat()},
        )
        self.db.add(document)
        self.commit()
        self.db.refresh(document)
        logger.info(
            "document.uploaded",
            extra={
                "event": "document.uploaded",
                "org_id": context.org_id,
                "company_id": company.id,
                "document_id": document.id,
                "file_size": document.file_size,
            },
        )
        return document

    def signed_url_for(self, document: Document, expires_in: int) -> str:
        return self.storage.create_signed_url(document.file_path, expires_in)

    def delete_document(self, context: OrgContext, document_id: int) -> None:
        document = self.get_document(context, document_id)
        self.storage.delete(document.file_path)
        self.db.delete(document)
        self.commit()
        logger.info(
            "document.deleted",
            extra={"event": "document.deleted", "org_id": context.org_id, "document_id": document_id},
        )

    def mark_enqueue_failed(self, document: Document, reason: str) -> None:
        document.error_message = f"Could not queue processing: {reason}"
        document.doc_metadata = {**(document.doc_metadata or {}), "processing_error": True}
        self.commit()
        logger.error(
            "document.enqueue.failed",
            extra={"event": "document.enqueue.failed", "document_id": document.id, "error": reason},
        )

    def process_document(self, document_id: int) -> Document:
        """Download, extract, and classify; failures are recorded on the row instead of raised."""
        document = self.db.get(Document, document_id)
        if document is None:
            raise NotFoundError("Document not found")
        try:
            data = self.storage.download(document.file_path)
            document.extracted_text = extract_text(data, document.file_type, document.file_name)
            document.classification = classify_document(document.file_name, document.file_type)
            document.processed_at = utcnow()
            document.error_message = None
            document.doc_metadata = {
                **(document.doc_metadata or {}),
                "processed_version": EXTRACTION_VERSION,
                "extraction_method": "basic",
            }
            self.commit()
        except Exception as exc:
            self.rollback()
            document = self.db.get(Document, document_id)
            document.error_message = str(exc) or "Processing failed"
            document.doc_metadata = {
                **(document.doc_metadata or {}),
                "processing_error": True,
                "error_timestamp": utcnow().isoformat(),
            }
            self.commit()
            logger.error(
                "document.processing.failed",
                extra={"event": "document.processing.failed", "document_id": document_id, "error": str(exc)},
            )
        self.db.refresh(document)
        return document
