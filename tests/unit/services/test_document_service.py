from __future__ import annotations

import pytest

from tests.factories import FakeStorage, make_company, make_org, make_user
from venturescope.auth.tenant_context import OrgContext
from venturescope.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from venturescope.models import DocumentClassification
from venturescope.services.document_processing import classify_document, extract_text
from venturescope.services.document_service import DocumentService, UploadedFile


@pytest.mark.parametrize(
    ("file_name", "file_type", "expected"),
    [
        ("Series A Pitch.pdf", "application/pdf", DocumentClassification.PITCH_DECK),
        ("2025 Forecast.xlsx", "application/vnd.ms-excel", DocumentClassification.FINANCIALS),
        ("ownership-breakdown.csv", "text/csv", DocumentClassification.CAP_TABLE),
        ("Mutual NDA.docx", "application/msword", DocumentClassification.LEGAL),
        ("walkthrough.mov", "video/quicktime", DocumentClassification.PRODUCT_DEMO),
        ("founder-intro.mp4", "video/mp4", DocumentClassification.FOUNDER_VIDEO),
        ("screen-recording.mp4", "video/mp4", DocumentClassification.PRODUCT_DEMO),
        ("customer-logos.png", "image/png", DocumentClassification.CUSTOMER_REFERENCE),
        ("notes.txt", "text/plain", DocumentClassification.OTHER),
    ],
)
def test_classify_document_by_filename(file_name, file_type, expected):
    assert classify_document(file_name, file_type) == expected


def test_extract_text_decodes_text_and_labels_binaries():
    assert extract_text(b"ARR: $1.2M", "text/plain", "metrics.txt") == "ARR: $1.2M"
    assert extract_text(b"%PDF", "application/pdf", "deck.pdf") == "[PDF document: deck.pdf]"
    assert extract_text(b"\x89PNG", "image/png", "logo.png") == "[Image: logo.png]"
    assert extract_text(b"", "application/zip", "bundle.zip") == ""


class BrokenStorage(FakeStorage):
    def download(self, key):
        raise ExternalServiceError("Storage download failed")


@pytest.fixture
def workspace(db_session):
    org = make_org(db_session)
    owner = make_user(db_session, "owner@acme.example", org=org)
    company = make_company(db_session, org)
    return org, company, OrgContext(org_id=org.id, user_id=owner.id, role="owner")


def test_upload_then_process_extracts_and_classifies(db_session, workspace):
    org, company, context = workspace
    storage = FakeStorage()
    service = DocumentService(db_session, storage=storage)

    document = service.upload_document(
        context, company.id, UploadedFile(file_name="Q3 revenue.csv", content_type="text/csv", data=b"month,revenue")
    )
    assert document.file_path.startswith(f"{org.id}/{company.id}/")
    assert document.file_path.endswith("-Q3_revenue.csv")
    assert document.file_path in storage.objects
    assert document.processed_at is None

    processed = service.process_document(document.id)
    assert processed.extracted_text == "month,revenue"
    assert processed.classification == DocumentClassification.FINANCIALS
    assert processed.processed_at is not None
    assert processed.doc_metadata["original_name"] == "Q3 revenue.csv"
    assert processed.doc_metadata["processed_version"] == "1.0"


def test_processing_failure_is_recorded_on_the_row(db_session, workspace):
    _, company, context = workspace
    service = DocumentService(db_session, storage=BrokenStorage())
    document = service.upload_document(
        context, company.id, UploadedFile(file_name="deck.pdf", content_type="application/pdf", data=b"%PDF")
    )

    failed = service.process_document(document.id)
    assert failed.error_message == "Storage download failed"
    assert failed.doc_metadata["processing_error"] is True
    assert failed.processed_at is None


def test_upload_validation_and_org_scope(db_session, workspace):
    _, company, context = workspace
    service = DocumentService(db_session, storage=FakeStorage())
    with pytest.raises(ValidationError, match="No file provided"):
        service.upload_document(context, company.id, UploadedFile(file_name="", content_type="text/plain", data=b""))

    other = make_org(db_session, name="Other Fund")
    foreign = OrgContext(org_id=other.id, user_id=context.user_id, role="owner")
    with pytest.raises(NotFoundError, match="Company not found"):
        service.upload_document(foreign, company.id, UploadedFile(file_name="a.txt", content_type="text/plain", data=b"a"))

    document = service.upload_document(context, company.id, UploadedFile(file_name="a.txt", content_type="text/plain", data=b"a"))
    with pytest.raises(NotFoundError, match="Document not found"):
        service.get_document(foreign, document.id)


def test_delete_removes_stored_object(db_session, workspace):
    _, company, context = workspace
    storage = FakeStorage()
    service = DocumentService(db_session, storage=storage)
    document = service.upload_document(context, company.id, UploadedFile(file_name="a.txt", content_type="text/plain", data=b"a"))

    service.delete_document(context, document.id)
    assert storage.deleted == [document.file_path]
    assert service.list_documents(context, company.id) == []


def test_storage_keys_are_org_prefixed_and_sanitized():
    from venturescope.services.storage import build_storage_key

    assert build_storage_key(4, 9, "Cap Table (v2).xlsx", now_ms=1700000000000) == "4/9/1700000000000-Cap_Table__v2_.xlsx"
