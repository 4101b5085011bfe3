from richoz_api import models


def test_draft_then_submit(client, auth_headers, make_intervention, report_payload, db):
    intervention = make_intervention()
    res = client.put("/reports/draft", json=report_payload(intervention, text_content=None),
                     headers=auth_headers("technician"))
    assert res.status_code == 200
    draft = res.json()
    assert draft["status"] == "draft"
    assert draft["revision"] == 1
    db.expire_all()
    assert db.get(models.Intervention, intervention.id).status == "planifie"

    res = client.post("/reports/submit", json=report_payload(intervention, expected_revision=1),
                      headers=auth_headers("technician"))
    assert res.status_code == 200
    body = res.json()
    assert body["id"] == draft["id"]
    assert body["status"] == "submitted"
    assert body["revision"] == 2


def test_technician_cannot_write_for_someone_else(client, auth_headers, make_intervention, report_payload, users):
    intervention = make_intervention()
    payload = report_payload(intervention, technician_id=users["other_tech"].id)
    res = client.post("/reports/submit", json=payload, headers=auth_headers("technician"))
    assert res.status_code == 403


def test_pending_validate_and_reject(client, auth_headers, make_intervention, report_payload, automation, db):
    first = make_intervention()
    second = make_intervention(title="Robinet qui goutte")
    r1 = client.post("/reports/submit", json=report_payload(first), headers=auth_headers("technician")).json()
    r2 = client.post("/reports/submit", json=report_payload(second), headers=auth_headers("technician")).json()

    pending = client.get("/reports/pending", headers=auth_headers("secretary")).json()
    assert {r["id"] for r in pending} == {r1["id"], r2["id"]}

    res = client.post(f"/reports/{r1['id']}/validate", headers=auth_headers("secretary"))
    assert res.status_code == 200
    body = res.json()
    assert body["intervention_status"] == "ready_to_bill"
    assert body["already_validated"] is False
    assert body["pdf_url"] == automation.pdf_url

    again = client.post(f"/reports/{r1['id']}/validate", headers=auth_headers("secretary")).json()
    assert again["already_validated"] is True
    assert len(automation.pdf_requests) == 1

    res = client.post(f"/reports/{r2['id']}/reject", json={"reason": "Signature manquante"},
                      headers=auth_headers("secretary"))
    assert res.status_code == 200
    assert res.json()["status"] == "rejected"
    assert res.json()["rejection_reason"] == "Signature manquante"

    pending = client.get("/reports/pending", headers=auth_headers("secretary")).json()
    assert pending == []


def test_reject_requires_reason(client, auth_headers, make_intervention, report_payload):
    intervention = make_intervention()
    report = client.post("/reports/submit", json=report_payload(intervention), headers=auth_headers("technician")).json()
    res = client.post(f"/reports/{report['id']}/reject", json={"reason": ""}, headers=auth_headers("admin"))
    assert res.status_code == 400
    assert res.json()["details"][0]["field"] == "reason"


def test_intervention_report(client, auth_headers, make_intervention, report_payload):
    intervention = make_intervention()
    assert client.get(f"/interventions/{intervention.id}/report", headers=auth_headers("admin")).status_code == 404
    client.post("/reports/submit", json=report_payload(intervention), headers=auth_headers("technician"))
    res = client.get(f"/interventions/{intervention.id}/report", headers=auth_headers("technician"))
    assert res.status_code == 200
    assert res.json()["intervention_id"] == intervention.id


def test_technician_cannot_validate(client, auth_headers, make_intervention, report_payload):
    intervention = make_intervention()
    report = client.post("/reports/submit", json=report_payload(intervention), headers=auth_headers("technician")).json()
    res = client.post(f"/reports/{report['id']}/validate", headers=auth_headers("technician"))
    assert res.status_code == 403
