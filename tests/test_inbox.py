from datetime import datetime

from richoz_api import models


def _email(db, **kwargs):
    values = {
        "gmail_message_id": kwargs.pop("gmail_message_id", "msg-1"),
        "received_at": datetime(2026, 1, 15, 8, 30),
        "from_email": "gerance@acme-immo.ch",
        "subject": "URGENT fuite cuisine",
        "body_text": "Fuite sous l'évier",
        "extracted_data": {"address": "Rue du Lac 12", "tenant_name": "Mme Dupont", "tenant_phone": "079 000 00 00",
                           "email_type": "intervention"},
    }
    values.update(kwargs)
    email = models.EmailInbox(**values)
    db.add(email)
    db.commit()
    return email


def test_inbox_classifies_and_resolves_regie_at_read_time(client, auth_headers, regies, db):
    email = _email(db)
    _email(db, gmail_message_id="msg-2", from_email="x@gmail.com", extracted_data={})
    res = client.get("/inbox", headers=auth_headers("secretary"))
    assert res.status_code == 200
    by_id = {e["id"]: e for e in res.json()}
    assert by_id[email.id]["email_type"] == "intervention"
    assert by_id[email.id]["regie_id"] == regies["acme"].id
    other = [e for e in by_id.values() if e["id"] != email.id][0]
    assert other["email_type"] == "info"
    assert other["regie_id"] is None

    # Rien n'est écrit par la lecture
    db.expire_all()
    assert db.get(models.EmailInbox, email.id).regie_id is None


def test_inbox_status_filter(client, auth_headers, regies, db):
    _email(db)
    _email(db, gmail_message_id="msg-2", status="ignored")
    assert len(client.get("/inbox", headers=auth_headers("admin")).json()) == 1
    assert len(client.get("/inbox?status=ignored", headers=auth_headers("admin")).json()) == 1
    assert len(client.get("/inbox?status=", headers=auth_headers("admin")).json()) == 2


def test_plan_email_prefills_intervention(client, auth_headers, users, regies, db):
    email = _email(db)
    res = client.post(f"/inbox/{email.id}/plan", json={"technician_id": users["technician"].id},
                      headers=auth_headers("secretary"))
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "planifie"
    assert body["title"] == "URGENT fuite cuisine"
    assert body["address"] == "Rue du Lac 12"
    assert body["priority"] == 1
    assert body["source_type"] == "email"
    assert body["source_email_id"] == email.id
    assert body["regie_id"] == regies["acme"].id
    assert body["client_info"]["name"] == "Mme Dupont"

    db.expire_all()
    stored = db.get(models.EmailInbox, email.id)
    assert stored.status == "processed"
    assert stored.processed_at is not None
    assert stored.intervention_id == body["id"]


def test_plan_email_overrides(client, auth_headers, regies, db):
    email = _email(db)
    res = client.post(f"/inbox/{email.id}/plan",
                      json={"title": "Fuite évier", "status": "nouveau", "priority": 0, "regie_id": regies["beta"].id},
                      headers=auth_headers("secretary"))
    body = res.json()
    assert body["title"] == "Fuite évier"
    assert body["status"] == "nouveau"
    assert body["priority"] == 0
    assert body["regie_id"] == regies["beta"].id


def test_plan_refuses_terminal_status(client, auth_headers, regies, db):
    email = _email(db)
    res = client.post(f"/inbox/{email.id}/plan", json={"status": "termine"}, headers=auth_headers("secretary"))
    assert res.status_code == 400


def test_plan_twice_conflicts(client, auth_headers, regies, db):
    email = _email(db)
    assert client.post(f"/inbox/{email.id}/plan", json={}, headers=auth_headers("secretary")).status_code == 200
    res = client.post(f"/inbox/{email.id}/plan", json={}, headers=auth_headers("secretary"))
    assert res.status_code == 409
    assert db.query(models.Intervention).count() == 1


def test_ignore_email(client, auth_headers, regies, db):
    email = _email(db)
    res = client.post(f"/inbox/{email.id}/ignore", headers=auth_headers("secretary"))
    assert res.status_code == 200
    assert res.json()["status"] == "ignored"
    res = client.post(f"/inbox/{email.id}/plan", json={}, headers=auth_headers("secretary"))
    assert res.status_code == 409


def test_unknown_email(client, auth_headers):
    res = client.post("/inbox/inconnu/ignore", headers=auth_headers("secretary"))
    assert res.status_code == 404
