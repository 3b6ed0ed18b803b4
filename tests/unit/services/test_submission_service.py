from __future__ import annotations

import pytest

from tests.factories import make_org, make_user
from venturescope.auth.tenant_context import OrgContext
from venturescope.core.config import get_config
from venturescope.core.exceptions import AuthorizationError, ConflictError, NotFoundError, RateLimitError, ValidationError
from venturescope.models import Company, CompanyStatus, DealSubmission, IntakeRateLimit, SubmissionStatus
from venturescope.services.submission_service import SubmissionService, client_ip_from_headers

FIELDS = {
    "company_name": "Orbit Robotics",
    "founder_name": "Sam Rivera",
    "founder_email": "sam@orbit.example",
    "sector": "Robotics",
    "raise_amount": 1500000.0,
}


def _owner_context(db):
    org = make_org(db)
    owner = make_user(db, "owner@acme.example", org=org)
    return org, OrgContext(org_id=org.id, user_id=owner.id, role="owner")


def test_client_ip_prefers_first_forwarded_hop():
    assert client_ip_from_headers("203.0.113.9, 10.0.0.1") == "203.0.113.9"
    assert client_ip_from_headers(None, fallback="198.51.100.4") == "198.51.100.4"
    assert client_ip_from_headers("", fallback=None) == "unknown"


def test_intake_org_requires_enabled_org(db_session):
    org = make_org(db_session, slug="acme")
    service = SubmissionService(db_session)
    assert service.intake_org("acme").id == org.id

    with pytest.raises(NotFoundError, match="Organization not found"):
        service.intake_org("missing")

    org.intake_enabled = False
    db_session.commit()
    with pytest.raises(AuthorizationError, match="disabled"):
        service.intake_org("acme")


def test_submit_records_rate_limit_hit_and_pending_submission(db_session):
    org = make_org(db_session)
    submission = SubmissionService(db_session).submit(org, "203.0.113.9", dict(FIELDS))

    assert submission.status == SubmissionStatus.PENDING
    assert submission.ip_address == "203.0.113.9"
    assert db_session.query(IntakeRateLimit).filter_by(org_id=org.id).count() == 1


def test_rate_limit_blocks_after_max_submissions_per_ip(db_session):
    org = make_org(db_session)
    service = SubmissionService(db_session)
    limit = get_config().INTAKE_RATE_LIMIT_MAX
    for _ in range(limit):
        service.check_rate_limit(org, "203.0.113.9")
        service.submit(org, "203.0.113.9", dict(FIELDS))

    with pytest.raises(RateLimitError):
        service.check_rate_limit(org, "203.0.113.9")
    # Another address is counted separately.
    service.check_rate_limit(org, "198.51.100.4")
    assert db_session.query(DealSubmission).count() == limit


def test_list_submissions_filters_by_status(db_session):
    org, context = _owner_context(db_session)
    service = SubmissionService(db_session)
    first = service.submit(org, "1.1.1.1", dict(FIELDS))
    service.submit(org, "1.1.1.2", {**FIELDS, "company_name": "Second"})
    service.update_submission(context, first.id, {"status": SubmissionStatus.REJECTED})

    assert len(service.list_submissions(context, "all")) == 2
    assert [row.id for row in service.list_submissions(context, "rejected")] == [first.id]
    with pytest.raises(ValidationError):
        service.list_submissions(context, "archived")


def test_update_submission_stamps_reviewer(db_session):
    org, context = _owner_context(db_session)
    service = SubmissionService(db_session)
    submission = service.submit(org, "1.1.1.1", dict(FIELDS))

    updated = service.update_submission(context, submission.id, {"status": SubmissionStatus.REVIEWING, "notes": "Call Monday"})
    assert updated.status == SubmissionStatus.REVIEWING
    assert updated.notes == "Call Monday"
    assert updated.reviewed_by == context.user_id
    assert updated.reviewed_at is not None

    with pytest.raises(ValidationError, match="No valid fields"):
        service.update_submission(context, submission.id, {"company_name": "Renamed"})


def test_accept_creates_active_company_once(db_session):
    org, context = _owner_context(db_session)
    service = SubmissionService(db_session)
    submission = service.submit(org, "1.1.1.1", dict(FIELDS))

    company = service.accept_submission(context, submission.id)
    db_session.refresh(submission)
    assert company.name == "Orbit Robotics"
    assert company.status == CompanyStatus.ACTIVE
    assert company.pipeline_position == 0
    assert company.raise_amount == 1500000.0
    assert submission.status == SubmissionStatus.ACCEPTED
    assert submission.company_id == company.id

    with pytest.raises(ConflictError) as excinfo:
        service.accept_submission(context, submission.id)
    assert excinfo.value.details == {"companyId": company.id}
    assert db_session.query(Company).count() == 1


def test_foreign_org_submission_is_not_found(db_session):
    org, _ = _owner_context(db_session)
    other = make_org(db_session, name="Other Fund")
    stranger = make_user(db_session, "other@fund.example", org=other)
    submission = SubmissionService(db_session).submit(org, "1.1.1.1", dict(FIELDS))

    foreign = OrgContext(org_id=other.id, user_id=stranger.id, role="owner")
    with pytest.raises(NotFoundError, match="Submission not found"):
        SubmissionService(db_session).get_submission(foreign, submission.id)
