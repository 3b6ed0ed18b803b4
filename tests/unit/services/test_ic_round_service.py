from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from tests.factories import make_assessment, make_company, make_org, make_user
from venturescope.auth.tenant_context import OrgContext
from venturescope.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from venturescope.models import OrgRole, RoundStatus, VoteChoice
from venturescope.models.base import utcnow
from venturescope.services.ic_round_service import (
    ICRoundService,
    determine_consensus,
    quorum_required,
    summarize_votes,
)


def test_quorum_rounds_up():
    assert quorum_required(5, 50) == 3
    assert quorum_required(4, 50) == 2
    assert quorum_required(3, 100) == 3
    assert quorum_required(0, 50) == 0


def test_consensus_thresholds():
    assert determine_consensus({}) == "mixed"
    assert determine_consensus({VoteChoice.STRONG_YES: 3, VoteChoice.YES: 4, VoteChoice.NO: 3}) == "positive"
    assert determine_consensus({VoteChoice.STRONG_NO: 7, VoteChoice.NEUTRAL: 3}) == "negative"
    assert determine_consensus({VoteChoice.NEUTRAL: 2, VoteChoice.YES: 1, VoteChoice.NO: 1}) == "neutral"
    assert determine_consensus({VoteChoice.YES: 1, VoteChoice.NO: 1}) == "mixed"


def test_summarize_votes_distribution_and_average():
    summary = summarize_votes(["strong_yes", "yes", "yes", "no"])
    by_vote = {row["vote"]: row for row in summary["vote_distribution"]}
    assert by_vote[VoteChoice.YES]["count"] == 2
    assert by_vote[VoteChoice.YES]["percentage"] == 50
    assert by_vote[VoteChoice.STRONG_YES]["label"] == "Strong Yes"
    assert by_vote[VoteChoice.STRONG_NO]["count"] == 0
    assert summary["average_score"] == 0.75
    assert summary["consensus"] == "positive"


def test_summarize_no_votes():
    summary = summarize_votes([])
    assert summary["average_score"] == 0.0
    assert summary["consensus"] == "mixed"
    assert all(row["percentage"] == 0 for row in summary["vote_distribution"])


@pytest.fixture
def committee(db_session):
    org = make_org(db_session)
    owner = make_user(db_session, "owner@acme.example", org=org, role=OrgRole.OWNER, name="Olivia Owner")
    partner = make_user(db_session, "partner@acme.example", org=org, role=OrgRole.MEMBER, name="Pat Partner")
    observer = make_user(db_session, "observer@acme.example", org=org, role=OrgRole.MEMBER)
    company = make_company(db_session, org, name="Nimbus Labs")
    assessment = make_assessment(db_session, company, created_by=owner.id)
    return {
        "org": org,
        "assessment": assessment,
        "owner": OrgContext(org_id=org.id, user_id=owner.id, role="owner"),
        "partner": OrgContext(org_id=org.id, user_id=partner.id, role="member"),
        "observer": OrgContext(org_id=org.id, user_id=observer.id, role="member"),
    }


def _open_round(db, committee, **overrides):
    fields = {
        "assessment_id": committee["assessment"].id,
        "deadline": utcnow() + timedelta(days=2),
        "participant_ids": [committee["owner"].user_id, committee["partner"].user_id],
        **overrides,
    }
    return ICRoundService(db).create_round(committee["owner"], fields)


def test_create_round_defaults_title_and_validates_participants(db_session, committee):
    round_ = _open_round(db_session, committee)
    assert round_.title == "IC vote: Nimbus Labs"
    assert round_.status == RoundStatus.OPEN
    assert round_.quorum_percentage == 50
    assert {p.user_id for p in round_.participants} == {committee["owner"].user_id, committee["partner"].user_id}

    outsider = make_user(db_session, "outsider@other.example")
    with pytest.raises(ValidationError, match="not organization members"):
        _open_round(db_session, committee, participant_ids=[outsider.id])
    with pytest.raises(AuthorizationError, match="Only admins can create"):
        ICRoundService(db_session).create_round(
            committee["partner"],
            {"assessment_id": committee["assessment"].id, "participant_ids": [committee["partner"].user_id]},
        )


def test_create_round_stores_deadline_as_naive_utc(db_session, committee):
    deadline = datetime(2030, 1, 1, 12, 0, tzinfo=timezone(timedelta(hours=2)))
    round_ = _open_round(db_session, committee, deadline=deadline)
    assert round_.deadline == datetime(2030, 1, 1, 10, 0)


def test_votes_are_sealed_until_reveal(db_session, committee):
    service = ICRoundService(db_session)
    round_ = _open_round(db_session, committee)

    _, created = service.cast_vote(committee["partner"], round_.id, "yes", "Strong team")
    assert created
    _, created = service.cast_vote(committee["partner"], round_.id, "strong_yes", "Changed my mind")
    assert not created
    service.cast_vote(committee["owner"], round_.id, "no", None)

    owner_view = service.serialize_round(committee["owner"], service.get_round(committee["owner"], round_.id))
    assert owner_view["votes_submitted"] == 2
    assert owner_view["user_has_voted"]
    sealed = [vote for vote in owner_view["votes"] if vote["user_id"] == committee["partner"].user_id]
    assert sealed[0]["vote"] is None
    assert sealed[0]["comment"] is None

    pending = service.summary(committee["owner"], round_.id)
    assert pending["message"] == "Votes have not been revealed yet"
    assert pending["quorum_met"]
    assert "vote_distribution" not in pending

    service.reveal(committee["owner"], round_.id)
    summary = service.summary(committee["observer"], round_.id)
    assert summary["is_revealed"]
    assert summary["status"] == RoundStatus.CLOSED
    assert summary["average_score"] == 0.5
    assert summary["comments"] == [{"user": "Pat Partner", "vote": "Strong Yes", "comment": "Changed my mind"}]

    observer_view = service.serialize_round(committee["observer"], service.get_round(committee["observer"], round_.id))
    assert not observer_view["is_participant"]
    assert {vote["vote"] for vote in observer_view["votes"]} == {VoteChoice.STRONG_YES, VoteChoice.NO}


def test_vote_rules(db_session, committee):
    service = ICRoundService(db_session)
    round_ = _open_round(db_session, committee)

    with pytest.raises(AuthorizationError, match="not a participant"):
        service.cast_vote(committee["observer"], round_.id, "yes")

    service.reveal(committee["owner"], round_.id)
    with pytest.raises(ValidationError, match="already been revealed"):
        service.reveal(committee["owner"], round_.id)
    with pytest.raises(ValidationError, match="not open"):
        service.cast_vote(committee["partner"], round_.id, "yes")

    expired = _open_round(db_session, committee, deadline=utcnow() - timedelta(hours=1))
    with pytest.raises(ValidationError, match="deadline has passed"):
        service.cast_vote(committee["partner"], expired.id, "yes")


def test_update_and_delete_are_admin_only(db_session, committee):
    service = ICRoundService(db_session)
    round_ = _open_round(db_session, committee)

    with pytest.raises(AuthorizationError):
        service.update_round(committee["partner"], round_.id, {"title": "Renamed"})
    with pytest.raises(ValidationError, match="No valid fields"):
        service.update_round(committee["owner"], round_.id, {"unknown": 1})

    updated = service.update_round(committee["owner"], round_.id, {"title": "Renamed", "quorum_percentage": 100})
    assert updated.title == "Renamed"
    assert updated.quorum_percentage == 100

    with pytest.raises(AuthorizationError):
        service.delete_round(committee["partner"], round_.id)
    service.delete_round(committee["owner"], round_.id)
    with pytest.raises(NotFoundError, match="Voting round not found"):
        service.get_round(committee["owner"], round_.id)


def test_rounds_are_org_scoped(db_session, committee):
    round_ = _open_round(db_session, committee)
    other = make_org(db_session, name="Other Fund")
    stranger = make_user(db_session, "s@other.example", org=other)
    foreign = OrgContext(org_id=other.id, user_id=stranger.id, role="owner")

    with pytest.raises(NotFoundError):
        ICRoundService(db_session).get_round(foreign, round_.id)
    assert ICRoundService(db_session).list_rounds(foreign) == []
    assert [r.id for r in ICRoundService(db_session).list_rounds(committee["owner"], status="open")] == [round_.id]
