from richoz_api.config import load_settings, normalize_database_url


def test_postgres_url_is_normalized():
    assert normalize_database_url("postgres://u:p@host/db") == "postgresql://u:p@host/db"
    assert normalize_database_url("postgresql://u:p@host/db") == "postgresql://u:p@host/db"
    assert normalize_database_url("sqlite://") == "sqlite://"


def test_load_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/richoz")
    monkeypatch.setenv("N8N_WEBHOOK_SECRET", "s3cret")
    monkeypatch.setenv("STAFF_EMAIL_DOMAINS", "Richoz.ch, exemple.ch")
    monkeypatch.setenv("VAT_RATE", "8.1")
    monkeypatch.setenv("AUTOMATION_TIMEOUT", "5")
    settings = load_settings()
    assert settings.database.url == "postgresql://u:p@db/richoz"
    assert settings.webhook_secret == "s3cret"
    assert settings.staff_email_domains == ["richoz.ch", "exemple.ch"]
    assert settings.vat_rate == 8.1
    assert settings.automation.timeout == 5.0


def test_root(client):
    assert client.get("/").status_code == 200
