"""Shared test fixtures for the Tenderly test suite."""

import os
import sys
import tempfile
from datetime import datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
BASE_DIR = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(BASE_DIR))

# Point the app at a throwaway SQLite file and disable every external
# service before any project module reads the environment.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="tenderly-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB_DIR}/tenderly_test.db"
os.environ["REDIS_URL"] = ""
for _key in ("OPENAI_API_KEY", "ANTHROPIC_API_KEY", "TRANSLATION_API_KEY", "ADMIN_WALLET_MNEMONIC"):
    os.environ[_key] = ""

from core.outcome import Err, Ok
from services.attestation import AttestationError, encode_attestation_note


# =========================================================================
# FAKE COLLABORATORS
# =========================================================================
class FakeLLM:
    """Stands in for LLMClient: returns canned completions and records calls."""

    is_configured = True
    provider_names = ["fake"]

    def __init__(self, responses=None, error=None):
        self.responses = list(responses or [])
        self.error = error
        self.calls = []

    def chat_completion(self, messages, **kwargs):
        self.calls.append({"messages": messages, **kwargs})
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]


class FakeAttestationClient:
    """Ledger double with the AttestationClient surface used by the routes."""

    is_available = True

    def __init__(self, fail=False, verified=True):
        self.fail = fail
        self.verified = verified
        self.created = []
        self.verify_calls = []

    def explorer_url(self, tx_id):
        return f"https://testnet.explorer.perawallet.app/tx/{tx_id}"

    def create_attestation(self, proposal_id, tender_title, user_id):
        if self.fail:
            raise AttestationError("algod unreachable")
        note = encode_attestation_note(proposal_id, tender_title, user_id)
        self.created.append(note)
        return {
            "txId": f"FAKETX{len(self.created)}",
            "confirmedRound": 1000 + len(self.created),
            "sender": "ADMINADDRESS",
            "note": note,
        }

    def verify_attestation(self, tx_id, proposal_id=None):
        self.verify_calls.append((tx_id, proposal_id))
        return self.verified

    def get_user_attestations(self, user_id, limit=100):
        return [
            {"txId": f"FAKETX{i + 1}", "note": note, "explorerUrl": self.explorer_url(f"FAKETX{i + 1}")}
            for i, note in enumerate(self.created)
            if note["userId"] == user_id
        ]


class FakeTranslator:
    is_available = True

    def __init__(self, error=None):
        self.error = error

    def translate(self, text, target_lang):
        if self.error:
            return Err(self.error)
        translated = f"[{target_lang}] {text}"
        return Ok({
            "translatedText": translated,
            "sourceLanguage": "en" if target_lang == "ms" else "ms",
            "targetLanguage": target_lang,
            "originalLength": len(text),
            "translatedLength": len(translated),
        })


# =========================================================================
# DATABASE
# =========================================================================
@pytest.fixture(autouse=True)
def reset_database():
    """Give every test empty tables and no sessions."""
    from database import Base, engine
    from core import security

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    security.user_sessions.clear()
    yield


@pytest.fixture
def db_session():
    from database import SessionLocal

    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_tender(db_session):
    """Factory inserting a tender and returning its id."""
    from database import TenderDB

    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        data = {
            "title": "Construction of Community Hall",
            "description": "Design and build of a community hall.",
            "agency": "Majlis Bandaraya Shah Alam",
            "category": "Construction",
            "location": "Selangor",
            "budget": "RM 1,000,000",
            "closing_date": datetime.utcnow() + timedelta(days=30),
            "reference_number": f"TEST/{counter['n']:03d}",
            "requirements": ["CIDB Grade G4 or higher", "Minimum 5 years experience", "ISO 9001 certification"],
        }
        data.update(overrides)
        tender = TenderDB(**data)
        db_session.add(tender)
        db_session.commit()
        return tender.id

    return _make


# =========================================================================
# API CLIENT
# =========================================================================
@pytest.fixture
def app():
    from app import app as fastapi_app
    return fastapi_app


@pytest.fixture
def client(app):
    """TestClient with startup run; collaborators are the unconfigured real ones."""
    from fastapi.testclient import TestClient

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def fake_ledger(app, client):
    ledger = FakeAttestationClient()
    app.state.attestation_client = ledger
    return ledger


@pytest.fixture
def fake_llm(app, client):
    """Install an AIAssistant backed by FakeLLM; set ``responses`` in the test."""
    from services.ai import AIAssistant

    llm = FakeLLM(responses=[""])
    app.state.ai_assistant = AIAssistant(llm)
    return llm


def signup(client, email="owner@example.com", name="Site Owner", password="s3cure-pass"):
    response = client.post("/api/auth/signup", json={"email": email, "password": password, "name": name})
    assert response.status_code == 201, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def auth_headers(client):
    return signup(client)


@pytest.fixture
def other_headers(client):
    return signup(client, email="rival@example.com", name="Rival Contractor")


SAMPLE_PROFILE = {
    "basicInfo": {
        "companyName": "Binaan Jaya Sdn Bhd",
        "registrationNumber": "201901012345",
        "address": "Jalan Tukang 16/4, Shah Alam",
        "phone": "+60 3-5511 2233",
        "email": "tender@binaanjaya.my",
        "website": "https://binaanjaya.my",
        "establishedYear": "2009",
    },
    "certifications": {
        "cidbGrade": "g5",
        "cidbExpiry": "2030-06-30",
        "iso9001": True,
        "iso14001": False,
        "ohsas18001": True,
        "contractorLicense": "PKK-123456",
        "licenseExpiry": "2031-01-31",
        "customCertifications": [{"name": "SIRIM QAS", "expiry": "2029-12-31"}],
    },
    "experience": {
        "yearsInOperation": "15 years",
        "totalProjects": 48,
        "totalValue": "RM 120 million",
        "specialties": ["Civil works", "Public buildings"],
        "majorProjects": [{"name": "Klinik Kesihatan Kota Kemuning", "value": "RM 8 million"}],
        "summary": "Fifteen years delivering public buildings across Selangor.",
    },
    "team": {
        "totalEmployees": "120",
        "engineers": 12,
        "supervisors": 20,
        "technicians": 30,
        "laborers": 58,
        "keyPersonnel": [{"name": "Ir. Aminah", "role": "Project Director"}],
    },
    "preferences": {"categories": ["Construction"], "locations": ["Selangor"], "budgetRange": "1M-10M"},
}


@pytest.fixture
def company_profile(client, auth_headers):
    response = client.put("/api/company", json=SAMPLE_PROFILE, headers=auth_headers)
    assert response.status_code == 200, response.text
    return response.json()
