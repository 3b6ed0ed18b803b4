"""Org-scoped company CRUD."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, or_

from venturescope.auth.tenant_context import OrgContext, enforce_org_match
from venturescope.core.exceptions import NotFoundError, ValidationError
from venturescope.models import Assessment, Company, CompanyStatus, Document
from venturescope.services.base_service import BaseService

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = (
    "name",
    "stage",
    "sector",
    "raise_amount",
    "valuation",
    "status",
    "website",
    "description",
    "pipeline_position",
)


class CompanyService(BaseService):
    """Company reads and writes always filter on the caller's org."""

    def list_companies(
        self,
        context: OrgContext,
        status: str | None = None,
        search: str | None = None,
    ) -> list[tuple[Company, int, int]]:
        """Return ``(company, document_count, assessment_count)`` rows, newest first."""
        document_counts = (
            self.db.query(Document.company_id, func.count(Document.id).label("n"))
            .group_by(Document.company_id)
            .subquery()
        )
        assessment_counts = (
            self.db.query(Assessment.company_id, func.count(Assessment.id).label("n"))
            .group_by(Assessment.company_id)
            .subquery()
        )
        query = (
            self.db.query(
                Company,
                func.coalesce(document_counts.c.n, 0),
                func.coalesce(assessment_counts.c.n, 0),
            )
            .outerjoin(document_counts, document_counts.c.company_id == Company.id)
            .outerjoin(assessment_counts, assessment_counts.c.company_id == Company.id)
            .filter(Company.org_id == context.org_id)
        )
        if status and status != "all":
            try:
                query = query.filter(Company.status == CompanyStatus(status))
            except ValueError as exc:
                raise ValidationError(f"Unknown company status: {status}") from exc
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(Company.name.ilike(pattern), Company.sector.ilike(pattern)))
        rows = query.order_by(Company.created_at.desc(), Company.id.desc()).all()
        return [(company, int(docs), int(assessments)) for company, docs, assessments in rows]

    def get_company(self, context: OrgContext, company_id: int) -> Company:
        company = self.db.get(Company, company_id)
        if company is None:
            raise NotFoundError("Company not found")
        enforce_org_match(company.org_id, context, label="Company")
        return company

    def create_company(self, context: OrgContext, fields: dict[str, Any]) -> Company:
        company = Company(org_id=context.org_id, created_by=context.user_id, **fields)
        company.name = company.name.strip()
        self.db.add(company)
        self.commit()
        self.db.refresh(company)
        logger.info(
            "company.created",
            extra={"event": "company.created", "org_id": context.org_id, "company_id": company.id},
        )
        return company

    def update_company(self, context: OrgContext, company_id: int, fields: dict[str, Any]) -> Company:
        company = self.get_company(context, company_id)
        for name in _UPDATABLE_FIELDS:
            if name in fields:
                setattr(company, name, fields[name])
        self.commit()
        self.db.refresh(company)
        return company

    def delete_company(self, context: OrgContext, company_id: int) -> list[str]:
        """Delete the company and its dependents; returns storage keys the caller should purge."""
        company = self.get_company(context, company_id)
        storage_keys = [document.file_path for document in company.documents]
        self.db.delete(company)
        self.commit()
        logger.info(
            "company.deleted",
            extra={"event": "company.deleted", "org_id": context.org_id, "company_id": company_id},
        )
        return storage_keys
