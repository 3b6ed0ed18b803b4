"""Streamlit review panel for deal-flow operators.

Run with ``streamlit run venturescope/dashboard.py``.
"""

from __future__ import annotations

import pandas as pd
import streamlit as st
from sqlalchemy.orm import Session

from venturescope.auth.tenant_context import OrgContext
from venturescope.billing.usage import build_usage_report, usage_window_start
from venturescope.database.db import get_db_session
from venturescope.models import Organization, OrgMembership, OrgRole, SubmissionStatus, UsageRecord
from venturescope.services.company_service import CompanyService
from venturescope.services.submission_service import SubmissionService

PIPELINE_COLUMNS = ["id", "name", "stage", "sector", "status", "documents", "assessments"]


def owner_context(db: Session, org: Organization) -> OrgContext | None:
    """Operators act with the organization owner's authority."""
    owner = (
        db.query(OrgMembership)
        .filter(OrgMembership.org_id == org.id, OrgMembership.role == OrgRole.OWNER)
        .first()
    )
    if owner is None:
        return None
    return OrgContext(org_id=org.id, user_id=owner.user_id, role=OrgRole.OWNER.value)


def pipeline_frame(db: Session, context: OrgContext) -> pd.DataFrame:
    rows = CompanyService(db).list_companies(context)
    return pd.DataFrame(
        [
            {
                "id": company.id,
                "name": company.name,
                "stage": company.stage.value if company.stage else None,
                "sector": company.sector,
                "status": company.status.value,
                "documents": documents,
                "assessments": assessments,
            }
            for company, documents, assessments in rows
        ],
        columns=PIPELINE_COLUMNS,
    )


def usage_snapshot(db: Session, org: Organization) -> dict:
    records = (
        db.query(UsageRecord)
        .filter(UsageRecord.org_id == org.id, UsageRecord.created_at >= usage_window_start(org.billing_cycle_start))
        .all()
    )
    return build_usage_report(org, records)


def render() -> None:
    st.set_page_config(page_title="VentureScope - Deal Review Panel", layout="wide")
    st.title("VentureScope - Deal Review Panel")

    with get_db_session() as db:
        orgs = db.query(Organization).order_by(Organization.name.asc()).all()
        if not orgs:
            st.info("No organizations yet.")
            st.stop()

        slug = st.sidebar.selectbox("Organization", [org.slug for org in orgs])
        org = next(org for org in orgs if org.slug == slug)
        context = owner_context(db, org)
        if context is None:
            st.error("This organization has no owner membership.")
            st.stop()

        report = usage_snapshot(db, org)
        usage = report["usage"]
        col1, col2, col3 = st.columns(3)
        col1.metric("Plan", report["plan"]["name"])
        limit = "Unlimited" if usage["isUnlimited"] else usage["assessmentsLimit"]
        col2.metric("Assessments used", f"{usage['assessmentsUsed']} / {limit}")
        col3.metric("Tokens this cycle", usage["totalTokens"])

        st.subheader("Pipeline")
        frame = pipeline_frame(db, context)
        if frame.empty:
            st.write("No companies in the pipeline.")
        else:
            st.dataframe(frame, use_container_width=True, hide_index=True)

        st.subheader("Inbound submissions")
        service = SubmissionService(db)
        pending = service.list_submissions(context, status=SubmissionStatus.PENDING.value)
        if not pending:
            st.success("No pending submissions")
            return

        for submission in pending:
            st.markdown("---")
            st.write(f"**{submission.company_name}** from {submission.founder_name} ({submission.founder_email})")
            if submission.description:
                st.write(submission.description)
            notes = st.text_area("Notes", value=submission.notes or "", key=f"notes_{submission.id}")

            accept_col, reject_col = st.columns(2)
            with accept_col:
                if st.button("Accept", key=f"accept_{submission.id}"):
                    company = service.accept_submission(context, submission.id)
                    st.success(f"Added to pipeline as company #{company.id}")
            with reject_col:
                if st.button("Reject", key=f"reject_{submission.id}"):
                    service.update_submission(
                        context,
                        submission.id,
                        {"status": SubmissionStatus.REJECTED, "notes": notes or None},
                    )
                    st.warning("Rejected.")


if __name__ == "__main__":
    render()
