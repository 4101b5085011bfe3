from datetime import timedelta

from richoz_api import models
from richoz_api.utils import utcnow


def _validated_report(client, auth_headers, make_intervention, report_payload, **kwargs):
    intervention = make_intervention(**kwargs)
    report = client.post("/reports/submit", json=report_payload(intervention), headers=auth_headers("technician")).json()
    client.post(f"/reports/{report['id']}/validate", headers=auth_headers("secretary"))
    return intervention, report


def test_invoice_from_report_materials(client, auth_headers, make_intervention, report_payload, db):
    intervention, report = _validated_report(client, auth_headers, make_intervention, report_payload)
    res = client.post("/invoices", json={"report_id": report["id"]}, headers=auth_headers("secretary"))
    assert res.status_code == 201
    body = res.json()
    # Siphon 35.50 + TVA 2.7335 -> 2.73
    assert body["subtotal"] == 35.5
    assert body["vat_amount"] == 2.73
    assert body["total"] == 38.23
    assert body["line_items"][0]["description"] == "Siphon"
    assert body["status"] == "generated"
    assert body["is_overdue"] is False

    again = client.post("/invoices", json={"report_id": report["id"]}, headers=auth_headers("secretary"))
    assert again.status_code == 200
    assert again.json()["id"] == body["id"]
    db.expire_all()
    assert db.get(models.Intervention, intervention.id).status == "billed"


def test_invoice_requires_validated_report(client, auth_headers, make_intervention, report_payload):
    intervention = make_intervention()
    report = client.post("/reports/submit", json=report_payload(intervention), headers=auth_headers("technician")).json()
    res = client.post("/invoices", json={"report_id": report["id"]}, headers=auth_headers("secretary"))
    assert res.status_code == 409


def test_invoice_status_and_overdue_filter(client, auth_headers, make_intervention, report_payload, db):
    _, report = _validated_report(client, auth_headers, make_intervention, report_payload)
    invoice = client.post("/invoices", json={"report_id": report["id"]}, headers=auth_headers("secretary")).json()

    res = client.put(f"/invoices/{invoice['id']}/status", json={"status": "sent"}, headers=auth_headers("secretary"))
    assert res.json()["status"] == "sent"
    assert res.json()["sent_at"] is not None
    assert client.get("/invoices?status=overdue", headers=auth_headers("admin")).json() == []

    stored = db.get(models.Invoice, invoice["id"])
    stored.date = utcnow() - timedelta(days=45)
    db.commit()

    overdue = client.get("/invoices?status=overdue", headers=auth_headers("admin")).json()
    assert [i["id"] for i in overdue] == [invoice["id"]]
    assert overdue[0]["is_overdue"] is True
    assert overdue[0]["status"] == "sent"

    client.put(f"/invoices/{invoice['id']}/status", json={"status": "paid"}, headers=auth_headers("secretary"))
    assert client.get("/invoices?status=overdue", headers=auth_headers("admin")).json() == []
    assert len(client.get("/invoices?status=paid", headers=auth_headers("admin")).json()) == 1


def test_invoice_unknown_status(client, auth_headers):
    assert client.get("/invoices?status=bidon", headers=auth_headers("admin")).status_code == 400


def test_quote_lifecycle(client, auth_headers, regies):
    res = client.post("/quotes", json={
        "client_name": "ACME Immobilier",
        "regie_id": regies["acme"].id,
        "discount_regie": True,
        "title": "Remplacement chauffe-eau",
        "items": [{"description": "Chauffe-eau 200L", "quantity": 1, "unit_price": 1800},
                  {"description": "Main d'oeuvre", "quantity": 4, "unit_price": 95}],
    }, headers=auth_headers("secretary"))
    assert res.status_code == 201
    quote = res.json()
    # 2180 - 10% = 1962 ; TVA 151.074 -> 151.07
    assert quote["subtotal"] == 2180.0
    assert quote["discount_amount"] == 218.0
    assert quote["vat_amount"] == 151.07
    assert quote["total"] == 2113.07
    assert quote["quote_number"].startswith("D-")
    assert quote["status"] == "draft"

    res = client.put(f"/quotes/{quote['id']}/status", json={"status": "accepted"}, headers=auth_headers("secretary"))
    assert res.status_code == 409
    client.put(f"/quotes/{quote['id']}/status", json={"status": "sent"}, headers=auth_headers("secretary"))
    res = client.put(f"/quotes/{quote['id']}/status", json={"status": "accepted"}, headers=auth_headers("secretary"))
    assert res.json()["status"] == "accepted"
    assert res.json()["accepted_at"] is not None


def test_quote_requires_items(client, auth_headers):
    res = client.post("/quotes", json={"client_name": "X", "items": []}, headers=auth_headers("secretary"))
    assert res.status_code == 400


def test_quote_draft_by_agent(client, auth_headers, automation):
    res = client.post("/quotes/draft", json={"text": "Devis pour remplacement WC chez M. Rossi"},
                      headers=auth_headers("secretary"))
    assert res.status_code == 200
    assert res.json()["quote_id"] == "Q-1"
    assert automation.quote_texts == ["Devis pour remplacement WC chez M. Rossi"]
