"""Company pipeline endpoints for API v1."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session

from venturescope.api.v1._authz import authorize
from venturescope.core.dependencies import get_db_session
from venturescope.core.exceptions import ExternalServiceError
from venturescope.schemas.common import SuccessResponse
from venturescope.schemas.companies import CompanyCreateRequest, CompanyResponse, CompanyUpdateRequest
from venturescope.services.company_service import CompanyService
from venturescope.services.storage import get_storage_client

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", response_model=list[CompanyResponse])
def list_companies(
    status_filter: str | None = Query(default=None, alias="status"),
    search: str | None = Query(default=None, max_length=200),
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> list[CompanyResponse]:
    user = authorize(db, authorization)
    rows = CompanyService(db).list_companies(user.org_context(), status=status_filter, search=search)
    return [
        CompanyResponse.model_validate(company).model_copy(
            update={"document_count": documents, "assessment_count": assessments}
        )
        for company, documents, assessments in rows
    ]


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
def create_company(
    payload: CompanyCreateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> CompanyResponse:
    user = authorize(db, authorization, scopes=["companies.write"])
    company = CompanyService(db).create_company(user.org_context(), payload.model_dump())
    return CompanyResponse.model_validate(company)


@router.get("/{company_id}", response_model=CompanyResponse)
def get_company(
    company_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> CompanyResponse:
    user = authorize(db, authorization)
    company = CompanyService(db).get_company(user.org_context(), company_id)
    return CompanyResponse.model_validate(company).model_copy(
        update={"document_count": len(company.documents), "assessment_count": len(company.assessments)}
    )


@router.patch("/{company_id}", response_model=CompanyResponse)
def update_company(
    company_id: int,
    payload: CompanyUpdateRequest,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> CompanyResponse:
    user = authorize(db, authorization, scopes=["companies.write"])
    company = CompanyService(db).update_company(
        user.org_context(), company_id, payload.model_dump(exclude_unset=True)
    )
    return CompanyResponse.model_validate(company)


@router.delete("/{company_id}", response_model=SuccessResponse)
def delete_company(
    company_id: int,
    authorization: str | None = Header(default=None, alias="Authorization"),
    db: Session = Depends(get_db_session),
) -> SuccessResponse:
    user = authorize(db, authorization, scopes=["companies.write"])
    storage_keys = CompanyService(db).delete_company(user.org_context(), company_id)
    if storage_keys:
        storage = get_storage_client()
        for key in storage_keys:
            try:
                storage.delete(key)
            except ExternalServiceError:
                logger.warning(
                    "company.storage_cleanup.failed",
                    extra={"event": "company.storage_cleanup.failed", "company_id": company_id, "key": key},
                )
    return SuccessResponse()
