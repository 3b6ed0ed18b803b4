from __future__ import annotations

from tests.factories import auth_headers, make_company, make_document, make_org, make_user
from venturescope.models import OrgRole

API = "/api/v1"


def _owner(db, name="Acme Ventures", email="owner@acme.example"):
    org = make_org(db, name=name)
    user = make_user(db, email, org=org)
    return org, user, auth_headers(db, user)


def test_company_crud_with_counts(client, db_session):
    _, _, headers = _owner(db_session)

    created = client.post(
        f"{API}/companies",
        json={"name": "Nimbus Labs", "stage": "seed", "sector": "Health", "raise_amount": 2000000},
        headers=headers,
    )
    assert created.status_code == 201
    company_id = created.json()["id"]
    assert created.json()["status"] == "active"

    patched = client.patch(f"{API}/companies/{company_id}", json={"status": "watching"}, headers=headers)
    assert patched.json()["status"] == "watching"
    assert patched.json()["sector"] == "Health"

    listing = client.get(f"{API}/companies", params={"search": "nimbus"}, headers=headers).json()
    assert [row["id"] for row in listing] == [company_id]
    assert listing[0]["document_count"] == 0
    assert client.get(f"{API}/companies", params={"status": "passed"}, headers=headers).json() == []

    assert client.delete(f"{API}/companies/{company_id}", headers=headers).json() == {"success": True}
    assert client.get(f"{API}/companies/{company_id}", headers=headers).status_code == 404


def test_company_validation_error(client, db_session):
    _, _, headers = _owner(db_session)
    response = client.post(f"{API}/companies", json={}, headers=headers)
    assert response.status_code == 400
    assert response.json()["error"].startswith("Invalid request data: name")


def test_foreign_org_resources_look_missing(client, db_session):
    org, owner, _ = _owner(db_session)
    company = make_company(db_session, org, created_by=owner.id)
    document = make_document(db_session, company)
    _, _, intruder = _owner(db_session, name="Rival Capital", email="rival@rival.example")

    assert client.get(f"{API}/companies/{company.id}", headers=intruder).json() == {"error": "Company not found"}
    assert client.patch(f"{API}/companies/{company.id}", json={"name": "x"}, headers=intruder).status_code == 404
    assert client.get(f"{API}/documents/{document.id}", headers=intruder).status_code == 404
    assert client.get(f"{API}/documents", params={"companyId": company.id}, headers=intruder).json() == []
    assert client.post(
        f"{API}/assessments", json={"company_id": company.id, "type": "screening"}, headers=intruder
    ).status_code == 404


def test_document_upload_enqueues_processing(client, db_session, fake_storage, queued):
    org, owner, headers = _owner(db_session)
    company = make_company(db_session, org, created_by=owner.id)

    upload = client.post(
        f"{API}/documents",
        data={"companyId": str(company.id)},
        files={"file": ("Pitch Deck.pdf", b"%PDF-1.4", "application/pdf")},
        headers=headers,
    )
    assert upload.status_code == 201
    document_id = upload.json()["id"]
    assert queued == [("document", document_id)]
    assert len(fake_storage.objects) == 1

    detail = client.get(f"{API}/documents/{document_id}", headers=headers).json()
    assert detail["signedUrl"].startswith("https://storage.test/")

    reprocess = client.post(f"{API}/documents/process", json={"document_id": document_id}, headers=headers)
    assert reprocess.status_code == 202
    assert reprocess.json()["taskId"] == f"task-document-{document_id}"

    missing_file = client.post(f"{API}/documents", data={"companyId": str(company.id)}, headers=headers)
    assert missing_file.status_code == 400
    assert missing_file.json() == {"error": "No file provided"}

    assert client.delete(f"{API}/documents/{document_id}", headers=headers).status_code == 200
    assert fake_storage.objects == {}


def test_assessment_create_enqueues_and_enforces_quota(client, db_session, queued):
    org, owner, headers = _owner(db_session)
    company = make_company(db_session, org, created_by=owner.id)

    no_docs = client.post(f"{API}/assessments", json={"company_id": company.id}, headers=headers)
    assert no_docs.status_code == 400

    make_document(db_session, company)
    created = client.post(f"{API}/assessments", json={"company_id": company.id, "type": "full"}, headers=headers)
    assert created.status_code == 201
    assert created.json()["status"] == "processing"
    assert created.json()["company_name"] == company.name
    assert queued == [("assessment", created.json()["id"])]

    org.assessments_used_this_month = 3
    db_session.commit()
    blocked = client.post(f"{API}/assessments", json={"company_id": company.id}, headers=headers)
    assert blocked.status_code == 402
    assert blocked.json() == {"error": "Assessment limit reached for current plan"}


def test_assessment_sharing_and_comments(client, db_session):
    org, owner, headers = _owner(db_session)
    company = make_company(db_session, org, created_by=owner.id)
    make_document(db_session, company)
    assessment_id = client.post(f"{API}/assessments", json={"company_id": company.id}, headers=headers).json()["id"]
    guest = make_user(db_session, "guest@lp.example")
    guest_headers = auth_headers(db_session, guest)

    self_share = client.post(
        f"{API}/assessments/{assessment_id}/share", json={"email": "owner@acme.example"}, headers=headers
    )
    assert self_share.status_code == 400

    share = client.post(
        f"{API}/assessments/{assessment_id}/share",
        json={"email": "guest@lp.example", "permission": "comment"},
        headers=headers,
    )
    assert share.status_code == 201
    assert share.json()["shared_with_email"] == "guest@lp.example"

    comment = client.post(
        f"{API}/assessments/{assessment_id}/comments", json={"content": "Strong TAM"}, headers=guest_headers
    )
    assert comment.status_code == 201
    reply = client.post(
        f"{API}/assessments/{assessment_id}/comments",
        json={"content": "Agreed", "parent_id": comment.json()["id"]},
        headers=headers,
    )
    assert reply.status_code == 201

    thread = client.get(f"{API}/assessments/{assessment_id}/comments", headers=guest_headers).json()
    assert len(thread) == 1
    assert thread[0]["replies"][0]["content"] == "Agreed"

    share_id = share.json()["id"]
    assert client.delete(
        f"{API}/assessments/{assessment_id}/share", params={"shareId": share_id}, headers=headers
    ).status_code == 200
    assert client.get(f"{API}/assessments/{assessment_id}/comments", headers=guest_headers).status_code == 404


def test_member_role_cannot_review_submissions(client, db_session):
    org, _, _ = _owner(db_session)
    member = make_user(db_session, "member@acme.example", org=org, role=OrgRole.MEMBER)
    member_headers = auth_headers(db_session, member)

    assert client.get(f"{API}/submissions", headers=member_headers).status_code == 200
    denied = client.post(f"{API}/submissions/1/accept", headers=member_headers)
    assert denied.status_code == 403
    assert "submissions.review" in denied.json()["error"]
