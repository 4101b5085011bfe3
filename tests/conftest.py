import pytest
from datetime import timedelta
from fastapi.testclient import TestClient

from richoz_api import models, security
from richoz_api.config import AuthSettings, AutomationSettings, DatabaseSettings, Settings, StorageSettings
from richoz_api.dependencies import get_automation, get_storage
from richoz_api.errors import UpstreamError
from richoz_api.main import create_app
from richoz_api.models.interventions import PLANIFIE
from richoz_api.services.automation import AutomationClient
from richoz_api.services.storage import MediaStorage
from richoz_api.utils import utcnow

WEBHOOK_SECRET = "test-webhook-secret"
PASSWORD = "password123"


class FakeStorage(MediaStorage):
    """Stockage en mémoire : chaque upload renvoie une URL https factice."""

    def __init__(self):
        super().__init__(StorageSettings())
        self.uploads = []
        self.fail = False

    def upload(self, data, folder, public_id=None):
        if self.fail:
            raise UpstreamError("Échec upload: simulé")
        self.uploads.append((folder, public_id))
        return f"https://res.cloudinary.test/{folder}/{len(self.uploads)}.jpg"


class FakeAutomation(AutomationClient):
    def __init__(self):
        super().__init__(AutomationSettings(base_url="https://n8n.test", transcribe_webhook_url="https://n8n.test/t"))
        self.pdf_url = "https://res.cloudinary.test/reports/report.pdf"
        self.pdf_requests = []
        self.transcriptions = []
        self.quote_texts = []

    def generate_report_pdf(self, report_id):
        self.pdf_requests.append(report_id)
        return self.pdf_url

    def request_transcription(self, audio_url, callback_url, report_id=None, intervention_id=None):
        self.transcriptions.append({
            "audio_url": audio_url,
            "callback_url": callback_url,
            "report_id": report_id,
            "intervention_id": intervention_id,
        })

    def draft_quote(self, text):
        self.quote_texts.append(text)
        return {"message": "Devis généré avec succès.", "quote_id": "Q-1"}


@pytest.fixture(scope="session")
def hashed_password():
    return security.get_password_hash(PASSWORD)


@pytest.fixture
def settings():
    return Settings(
        app_url="https://api.richoz.test",
        webhook_secret=WEBHOOK_SECRET,
        log_level="WARNING",
        database=DatabaseSettings(url="sqlite://"),
        auth=AuthSettings(secret_key="test-secret-key"),
    )


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def automation():
    return FakeAutomation()


@pytest.fixture
def app(settings, storage, automation):
    app = create_app(settings)
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_automation] = lambda: automation
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def users(db, hashed_password):
    admin = models.User(email="admin@richoz.ch", hashed_password=hashed_password, role="admin",
                        first_name="Admin", last_name="Richoz")
    secretary = models.User(email="secretariat@richoz.ch", hashed_password=hashed_password, role="secretary",
                            first_name="Sophie", last_name="Bureau")
    technician = models.User(email="tech@richoz-sanitaire.ch", hashed_password=hashed_password, role="technician",
                             first_name="Marc", last_name="Terrain")
    other_tech = models.User(email="tech2@richoz-sanitaire.ch", hashed_password=hashed_password, role="technician",
                             first_name="Luc", last_name="Terrain")
    db.add_all([admin, secretary, technician, other_tech])
    db.commit()
    return {"admin": admin, "secretary": secretary, "technician": technician, "other_tech": other_tech}


@pytest.fixture
def regies(db):
    acme = models.Regie(name="ACME Immobilier", keyword="ACME", email_contact="gerance@acme-immo.ch",
                        email_domains=["acme-immo.ch"], discount_percentage=10)
    beta = models.Regie(name="Beta Gérance", keyword="BETA", email_contact="contact@beta.ch",
                        email_domains=["beta.ch", "beta-gerance.ch"])
    db.add_all([acme, beta])
    db.commit()
    return {"acme": acme, "beta": beta}


@pytest.fixture
def auth_headers(users, settings):
    def _headers(role="admin"):
        user = users[role]
        token = security.create_access_token({"sub": user.email, "role": user.role}, settings.auth)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def webhook_headers():
    return {"Authorization": f"Bearer {WEBHOOK_SECRET}"}


@pytest.fixture
def make_intervention(db, users):
    def _make(status=PLANIFIE, technician="technician", regie=None, **kwargs):
        intervention = models.Intervention(
            title=kwargs.pop("title", "Fuite sous évier"),
            address=kwargs.pop("address", "Rue du Lac 12, 1800 Vevey"),
            status=status,
            technician_id=users[technician].id if technician else None,
            regie_id=regie.id if regie else None,
            date_planned=utcnow() + timedelta(days=1),
            **kwargs,
        )
        db.add(intervention)
        db.commit()
        return intervention
    return _make


@pytest.fixture
def report_payload(users):
    def _payload(intervention, **overrides):
        payload = {
            "intervention_id": intervention.id,
            "technician_id": users["technician"].id,
            "text_content": "Remplacement du siphon, test d'étanchéité OK.",
            "photos": [],
            "checklist": [{"item": "Eau coupée", "done": True}],
            "is_billable": True,
            "work_duration_minutes": 45,
            "materials_used": [{"name": "Siphon", "quantity": 1, "unit_price": 35.5}],
        }
        payload.update(overrides)
        return payload
    return _payload
