from __future__ import annotations

from datetime import timedelta

from tests.factories import auth_headers, make_assessment, make_company, make_document, make_org, make_user
from venturescope.models import OrgMembership, OrgRole
from venturescope.models.base import utcnow

API = "/api/v1"
CHROME_MAC = "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"


def test_team_invite_role_change_and_removal(client, db_session):
    org = make_org(db_session)
    owner = make_user(db_session, "owner@acme.example", org=org)
    owner_headers = auth_headers(db_session, owner)
    recruit = make_user(db_session, "recruit@acme.example", name="Riley Recruit")

    invited = client.post(f"{API}/team", json={"email": "recruit@acme.example", "role": "member"}, headers=owner_headers)
    assert invited.status_code == 200
    assert invited.json()["name"] == "Riley Recruit"
    member_id = invited.json()["id"]

    recruit_headers = auth_headers(db_session, recruit)
    denied = client.post(f"{API}/team", json={"email": "owner@acme.example"}, headers=recruit_headers)
    assert denied.status_code == 403
    assert denied.json() == {"error": "Only owners and admins can invite members"}

    promoted = client.patch(f"{API}/team/{member_id}", json={"role": "admin"}, headers=owner_headers)
    assert promoted.json() == {"success": True, "role": "admin"}
    assert len(client.get(f"{API}/team", headers=recruit_headers).json()) == 2

    owner_member_id = db_session.query(OrgMembership).filter_by(user_id=owner.id).one().id
    blocked = client.delete(f"{API}/team/{owner_member_id}", headers=recruit_headers)
    assert blocked.status_code == 400
    assert blocked.json() == {"error": "Cannot remove the owner"}

    assert client.delete(f"{API}/team/{member_id}", headers=owner_headers).json() == {"success": True}
    assert client.get(f"{API}/team", headers=recruit_headers).status_code == 403


def test_ic_round_vote_reveal_summary(client, db_session):
    org = make_org(db_session)
    owner = make_user(db_session, "owner@acme.example", org=org, name="Olivia")
    partner = make_user(db_session, "partner@acme.example", org=org, role=OrgRole.MEMBER, name="Pat")
    owner_headers = auth_headers(db_session, owner)
    partner_headers = auth_headers(db_session, partner)
    company = make_company(db_session, org, name="Nimbus Labs")
    assessment = make_assessment(db_session, company, created_by=owner.id)

    created = client.post(
        f"{API}/ic-rounds",
        json={
            "assessment_id": assessment.id,
            "deadline": (utcnow() + timedelta(days=3)).isoformat() + "Z",
            "participant_ids": [owner.id, partner.id],
        },
        headers=owner_headers,
    )
    assert created.status_code == 201
    round_id = created.json()["id"]
    assert created.json()["title"] == "IC vote: Nimbus Labs"
    assert created.json()["company_name"] == "Nimbus Labs"

    forbidden = client.post(
        f"{API}/ic-rounds",
        json={"assessment_id": assessment.id, "deadline": "2031-01-01T00:00:00Z", "participant_ids": [partner.id]},
        headers=partner_headers,
    )
    assert forbidden.status_code == 403

    first = client.post(f"{API}/ic-rounds/{round_id}/vote", json={"vote": "yes", "comment": "Great team"}, headers=partner_headers)
    assert first.status_code == 201
    second = client.post(f"{API}/ic-rounds/{round_id}/vote", json={"vote": "strong_yes"}, headers=partner_headers)
    assert second.status_code == 200
    client.post(f"{API}/ic-rounds/{round_id}/vote", json={"vote": "yes"}, headers=owner_headers)

    sealed = client.get(f"{API}/ic-rounds/{round_id}", headers=owner_headers).json()
    assert sealed["votes_submitted"] == 2
    assert {vote["vote"] for vote in sealed["votes"] if vote["user_id"] == partner.id} == {None}
    assert client.get(f"{API}/ic-rounds/{round_id}/summary", headers=owner_headers).json()["message"] == (
        "Votes have not been revealed yet"
    )

    assert client.post(f"{API}/ic-rounds/{round_id}/reveal", headers=partner_headers).status_code == 403
    revealed = client.post(f"{API}/ic-rounds/{round_id}/reveal", headers=owner_headers)
    assert revealed.json()["status"] == "closed"

    summary = client.get(f"{API}/ic-rounds/{round_id}/summary", headers=partner_headers).json()
    assert summary["average_score"] == 1.5
    assert summary["consensus"] == "positive"
    assert summary["quorum_met"] is True

    listed = client.get(f"{API}/ic-rounds", params={"assessmentId": assessment.id}, headers=partner_headers).json()
    assert [row["id"] for row in listed] == [round_id]


def test_chat_thread_round_trip(client, db_session, fake_llm):
    org = make_org(db_session)
    owner = make_user(db_session, "owner@acme.example", org=org)
    headers = auth_headers(db_session, owner)
    company = make_company(db_session, org, name="Nimbus Labs")
    make_document(db_session, company, file_name="deck.pdf")
    fake_llm.text = "Revenue tripled [Source: deck.pdf]."

    assert client.get(f"{API}/chat", headers=headers).status_code == 400
    thread = client.post(f"{API}/chat", json={"company_id": company.id}, headers=headers)
    assert thread.status_code == 201
    thread_id = thread.json()["id"]

    reply = client.post(f"{API}/chat/{thread_id}/messages", json={"content": "How is revenue?"}, headers=headers)
    assert reply.status_code == 200
    body = reply.json()
    assert body["userMessage"]["content"] == "How is revenue?"
    assert body["assistantMessage"]["citations"] == [{"source": "deck.pdf", "text": "Revenue tripled"}]

    threads = client.get(f"{API}/chat", params={"companyId": company.id}, headers=headers).json()
    assert threads[0]["message_count"] == 2


def test_user_settings_and_sessions(client, db_session):
    org = make_org(db_session)
    user = make_user(db_session, "ana@acme.example", org=org)
    headers = auth_headers(db_session, user, user_agent=CHROME_MAC)
    auth_headers(db_session, user, user_agent="Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0")

    profile = client.patch(f"{API}/user/profile", json={"name": "Ana", "role": "partner"}, headers=headers)
    assert profile.json()["role"] == "partner"
    assert client.patch(f"{API}/user/profile", json={}, headers=headers).status_code == 400

    notifications = client.patch(f"{API}/user/notifications", json={"email_digest": True}, headers=headers).json()
    assert notifications["email_digest"] is True

    sessions = client.get(f"{API}/user/sessions", headers=headers).json()
    assert len(sessions) == 2
    current = [row for row in sessions if row["isCurrent"]]
    assert len(current) == 1
    assert current[0]["browser"] == "Chrome"
    assert current[0]["device"] == "Mac"

    assert client.delete(f"{API}/user/sessions", headers=headers).json() == {"success": True}
    assert len(client.get(f"{API}/user/sessions", headers=headers).json()) == 1
    assert client.delete(f"{API}/user/sessions/9999", headers=headers).status_code == 404
