from __future__ import annotations

import json

from tests.factories import FakeLLMClient, make_assessment, make_company, make_document, make_org, make_user
from venturescope.models import AssessmentStatus, AssessmentType, Recommendation, UsageRecord
from venturescope.tasks.assessment_tasks import run_assessment

FULL_RESPONSE = {
    "content": {"executiveSummary": "Solid seed-stage company"},
    "scores": {
        "market": {"score": 70},
        "team": {"score": 80},
        "product": {"score": 60},
        "traction": {"score": 60},
        "financials": {"score": 40},
        "competitive": {"score": 60},
    },
    "recommendation": {"recommendation": "conditional", "rationale": "Need more traction"},
}


def _pending_assessment(db, used=0):
    org = make_org(db, used=used)
    owner = make_user(db, "owner@acme.example", org=org)
    company = make_company(db, org)
    make_document(db, company)
    assessment = make_assessment(
        db, company, created_by=owner.id, status=AssessmentStatus.PROCESSING, assessment_type=AssessmentType.FULL
    )
    return org, assessment


def test_run_assessment_completes_and_records_usage(db_session):
    org, assessment = _pending_assessment(db_session, used=1)
    result = run_assessment(db_session, assessment.id, client=FakeLLMClient(text=json.dumps(FULL_RESPONSE)))

    assert result.status == AssessmentStatus.COMPLETED
    assert json.loads(result.content) == {"executiveSummary": "Solid seed-stage company"}
    assert result.recommendation == Recommendation.CONDITIONAL
    assert result.overall_score == 65
    assert result.scores["recommendation_detail"]["rationale"] == "Need more traction"
    assert result.completed_at is not None

    usage = db_session.query(UsageRecord).filter_by(assessment_id=assessment.id).one()
    assert usage.tokens_used == 150
    assert usage.assessment_type == AssessmentType.FULL
    db_session.refresh(org)
    assert org.assessments_used_this_month == 2


def test_run_assessment_failure_leaves_no_usage(db_session):
    org, assessment = _pending_assessment(db_session)
    result = run_assessment(db_session, assessment.id, client=FakeLLMClient(text="not json"))

    assert result.status == AssessmentStatus.FAILED
    assert "Could not parse JSON" in result.error_message
    assert db_session.query(UsageRecord).count() == 0
    db_session.refresh(org)
    assert org.assessments_used_this_month == 0
