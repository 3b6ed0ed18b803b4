"""Document upload and retrieval endpoints for API v1."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Form, Header, Query, UploadFile, status
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.config import get_config
from venturescope.core.dependencies import get_db_session
from venturescope.core.exceptions import ExternalServiceError, ValidationError
from venturescope.schemas.common import SuccessResponse
from venturescope.schemas.documents import DocumentDetailResponse, DocumentProcessRequest, DocumentResponse
from venturescope.services.document_service import MAX_UPLOAD_BYTES, DocumentService, UploadedFile
from venturescope.services.storage import get_storage_client
from venturescope.tasks.document_tasks import enqueue_document_processing

router = APIRouter(prefix="/documents", tags=["documents"])


def _enqueue_processing(service: DocumentService, document, org_id: int, user_id: int) -> str:
    try:
        return enqueue_document_processing(document.id, org_id=org_id, user_id=user_id)
    except Exception as exc:
        service.mark_enqueue_failed(document, str(exc) or exc.__class__.__name__)
        raise ExternalServiceError("Failed to queue document processing") from exc


@router.get("", response_model=list[DocumentResponse])
def list_documents(
    company_id: int | None = Query(default=None, alias="companyId"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[DocumentResponse]:
    user = authorize(db, authorization)
    documents = DocumentService(db).list_documents(user.org_context(), company_id=company_id)
    return [DocumentResponse.model_validate(document) for document in documents]


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
def upload_document(
    file: UploadFile | None = File(default=None),
    company_id: int | None = Form(default=None, alias="companyId"),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> DocumentResponse:
    user = authorize(db, authorization, scopes=["documents.write"])
    if file is None or not file.filename:
        raise ValidationError("No file provided")
    if company_id is None:
        raise ValidationError("No company ID provided")

    upload = UploadedFile(
        file_name=file.filename,
        content_type=file.content_type or "application/octet-stream",
        # One byte past the cap is enough for the service to reject oversized uploads.
        data=file.file.read(MAX_UPLOAD_BYTES + 1),
    )
    service = DocumentService(db, storage=get_storage_client())
    document = service.upload_document(user.org_context(), company_id, upload)
    _enqueue_processing(service, document, org_id=user.org_id, user_id=user.user_id)
    return DocumentResponse.model_validate(document)


@router.post("/process", status_code=status.HTTP_202_ACCEPTED)
def process_document(
    payload: DocumentProcessRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> dict:
    user = authorize(db, authorization, scopes=["documents.write"])
    service = DocumentService(db)
    document = service.get_document(user.org_context(), payload.document_id)
    task_id = _enqueue_processing(service, document, org_id=user.org_id, user_id=user.user_id)
    return {
        "success": True,
        "message": "Document processing started",
        "documentId": document.id,
        "taskId": task_id,
    }


@router.get("/{document_id}", response_model=DocumentDetailResponse)
def get_document(
    document_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> DocumentDetailResponse:
    user = authorize(db, authorization)
    service = DocumentService(db, storage=get_storage_client())
    document = service.get_document(user.org_context(), document_id)
    signed_url = service.signed_url_for(document, expires_in=get_config().SIGNED_URL_TTL_SECONDS)
    return DocumentDetailResponse.model_validate(document).model_copy(update={"signed_url": signed_url})


@router.delete("/{document_id}", response_model=SuccessResponse)
def delete_document(
    document_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, scopes=["documents.write"])
    DocumentService(db, storage=get_storage_client()).delete_document(user.org_context(), document_id)
    return SuccessResponse()
