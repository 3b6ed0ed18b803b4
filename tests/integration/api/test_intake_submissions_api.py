from __future__ import annotations

from tests.factories import auth_headers, make_org, make_user
from venturescope.core.config import get_config
from venturescope.models import Company, OrgRole

API = "/api/v1"

DEAL = {
    "company_name": "Orbit Robotics",
    "founder_name": "Sam Rivera",
    "founder_email": "sam@orbit.example",
    "website": "https://orbit.example",
    "stage": "seed",
    "raise_amount": 1500000,
}


def test_intake_form_lookup(client, db_session):
    org = make_org(db_session, name="Acme Ventures", slug="acme")
    assert client.get(f"{API}/intake/acme").json() == {"organization": {"name": "Acme Ventures", "slug": "acme"}}
    assert client.get(f"{API}/intake/nobody").status_code == 404

    org.intake_enabled = False
    db_session.commit()
    disabled = client.get(f"{API}/intake/acme")
    assert disabled.status_code == 403
    assert disabled.json() == {"error": "Intake form is disabled for this organization"}


def test_intake_is_rate_limited_per_ip(client, db_session):
    make_org(db_session, slug="acme")
    limit = get_config().INTAKE_RATE_LIMIT_MAX
    headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}
    for _ in range(limit):
        response = client.post(f"{API}/intake/acme", json=DEAL, headers=headers)
        assert response.status_code == 201
        assert response.json()["success"] is True

    blocked = client.post(f"{API}/intake/acme", json=DEAL, headers=headers)
    assert blocked.status_code == 429
    assert blocked.json() == {"error": "Rate limit exceeded. Please try again later."}
    assert client.post(f"{API}/intake/acme", json=DEAL, headers={"X-Forwarded-For": "198.51.100.4"}).status_code == 201


def test_intake_validates_payload(client, db_session):
    make_org(db_session, slug="acme")
    response = client.post(f"{API}/intake/acme", json={**DEAL, "founder_email": "not-an-email"})
    assert response.status_code == 400
    assert "founder_email" in response.json()["error"]


def test_review_and_accept_flow(client, db_session):
    org = make_org(db_session, slug="acme")
    admin = make_user(db_session, "admin@acme.example", org=org, role=OrgRole.ADMIN)
    headers = auth_headers(db_session, admin)
    submission_id = client.post(f"{API}/intake/acme", json=DEAL).json()["id"]

    pending = client.get(f"{API}/submissions", params={"status": "pending"}, headers=headers).json()
    assert [row["id"] for row in pending] == [submission_id]

    reviewing = client.patch(
        f"{API}/submissions/{submission_id}", json={"status": "reviewing", "notes": "Intro call booked"}, headers=headers
    )
    assert reviewing.json()["status"] == "reviewing"
    assert reviewing.json()["reviewed_by"] == admin.id

    accepted = client.post(f"{API}/submissions/{submission_id}/accept", headers=headers)
    assert accepted.status_code == 200
    company_id = accepted.json()["companyId"]
    assert accepted.json()["success"] is True

    company = db_session.get(Company, company_id)
    assert company.name == "Orbit Robotics"
    assert company.org_id == org.id

    again = client.post(f"{API}/submissions/{submission_id}/accept", headers=headers)
    assert again.status_code == 400
    assert again.json() == {"error": "Submission already accepted", "companyId": company_id}


def test_submissions_are_org_scoped(client, db_session):
    make_org(db_session, slug="acme")
    rival = make_org(db_session, name="Rival Capital")
    rival_headers = auth_headers(db_session, make_user(db_session, "r@rival.example", org=rival))
    submission_id = client.post(f"{API}/intake/acme", json=DEAL).json()["id"]

    assert client.get(f"{API}/submissions/{submission_id}", headers=rival_headers).status_code == 404
    assert client.get(f"{API}/submissions", headers=rival_headers).json() == []
