"""HTTP API tests run against a SQLite database with fake collaborators."""

from datetime import datetime, timedelta

import pytest

from conftest import FakeAttestationClient, FakeTranslator, SAMPLE_PROFILE, signup


def generate(client, headers, tender_id):
    response = client.post("/api/generateProposal", json={"tenderId": tender_id}, headers=headers)
    assert response.status_code == 200, response.text
    return response.json()["proposalId"]


# =========================================================================
# AUTH
# =========================================================================
class TestAuth:

    def test_signup_returns_token_and_user(self, client):
        response = client.post(
            "/api/auth/signup",
            json={"email": "New@Example.com", "password": "s3cure-pass", "name": "New User"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["token"]
        assert body["user"]["email"] == "new@example.com"

    def test_duplicate_email(self, client, auth_headers):
        response = client.post(
            "/api/auth/signup",
            json={"email": "owner@example.com", "password": "another-pass", "name": "Again"},
        )
        assert response.status_code == 400
        assert response.json() == {"detail": "Email already registered"}

    @pytest.mark.parametrize("payload", [{}, {"email": "a@b.com", "password": "s3cure-pass"}])
    def test_signup_missing_fields(self, client, payload):
        assert client.post("/api/auth/signup", json=payload).status_code == 400

    def test_login(self, client, auth_headers):
        ok = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "s3cure-pass"})
        assert ok.status_code == 200
        assert ok.json()["user"]["name"] == "Site Owner"

        bad = client.post("/api/auth/login", json={"email": "owner@example.com", "password": "wrong-pass"})
        assert bad.status_code == 401

    def test_logout_revokes_token(self, client, auth_headers):
        assert client.post("/api/auth/logout", headers=auth_headers).status_code == 200
        response = client.get("/api/proposals", headers=auth_headers)
        assert response.status_code == 401
        assert response.json() == {"detail": "Invalid or expired token"}

    def test_missing_token(self, client):
        response = client.get("/api/proposals")
        assert response.status_code == 401
        assert response.json() == {"detail": "No authorization token provided"}

    def test_invalid_json_body(self, client):
        response = client.post(
            "/api/auth/login", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid JSON payload"}


# =========================================================================
# TENDERS
# =========================================================================
class TestTenders:

    def test_list_and_filters(self, client, make_tender):
        make_tender(title="Road Resurfacing", category="Construction", location="Selangor")
        make_tender(title="Hospital Cleaning", category="Services", location="Pahang", agency="KKM")
        make_tender(title="Old Tender", status="closed")

        all_tenders = client.get("/api/tenders").json()
        assert {t["title"] for t in all_tenders} == {"Road Resurfacing", "Hospital Cleaning"}

        by_text = client.get("/api/tenders", params={"q": "cleaning"}).json()
        assert [t["title"] for t in by_text] == ["Hospital Cleaning"]

        by_category = client.get("/api/tenders", params={"category": "Construction"}).json()
        assert [t["title"] for t in by_category] == ["Road Resurfacing"]

        by_location = client.get("/api/tenders", params={"location": "pahang"}).json()
        assert [t["title"] for t in by_location] == ["Hospital Cleaning"]

    def test_closing_after_filter(self, client, make_tender):
        make_tender(title="Soon", closing_date=datetime.utcnow() + timedelta(days=2))
        make_tender(title="Later", closing_date=datetime.utcnow() + timedelta(days=60))
        cutoff = (datetime.utcnow() + timedelta(days=30)).isoformat() + "Z"

        titles = [t["title"] for t in client.get("/api/tenders", params={"closingAfter": cutoff}).json()]
        assert titles == ["Later"]

    def test_detail(self, client, make_tender):
        tender_id = make_tender()
        body = client.get(f"/api/tenders/{tender_id}").json()
        assert body["agency"] == "Majlis Bandaraya Shah Alam"
        assert body["requirements"][0] == "CIDB Grade G4 or higher"
        assert body["referenceNumber"] == "TEST/001"

    def test_detail_not_found(self, client):
        response = client.get("/api/tenders/does-not-exist")
        assert response.status_code == 404
        assert response.json() == {"detail": "Tender not found"}


# =========================================================================
# COMPANY PROFILE
# =========================================================================
class TestCompany:

    def test_empty_skeleton(self, client, auth_headers):
        body = client.get("/api/company", headers=auth_headers).json()
        assert body["basicInfo"]["companyName"] == ""
        assert body["certifications"]["customCertifications"] == []

    def test_save_and_read_back(self, client, auth_headers, company_profile):
        body = client.get("/api/company", headers=auth_headers).json()
        assert body["basicInfo"]["companyName"] == "Binaan Jaya Sdn Bhd"
        assert body["basicInfo"]["establishedYear"] == 2009
        assert body["certifications"]["cidbGrade"] == "G5"
        assert body["certifications"]["licenseExpiry"] == "2031-01-31"
        assert body["experience"]["yearsInOperation"] == 15
        assert body["team"]["totalEmployees"] == 120
        assert body["preferences"]["locations"] == ["Selangor"]

    def test_update_replaces_document(self, client, auth_headers, company_profile):
        update = {**SAMPLE_PROFILE, "certifications": {**SAMPLE_PROFILE["certifications"], "iso9001": False}}
        body = client.put("/api/company", json=update, headers=auth_headers).json()
        assert body["certifications"]["iso9001"] is False

    @pytest.mark.parametrize("section", ["basicInfo", "certifications", "experience", "team", "preferences"])
    def test_non_object_section_rejected(self, client, auth_headers, section):
        response = client.put("/api/company", json={**SAMPLE_PROFILE, section: "x"}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"detail": f"{section} must be an object"}
        assert client.get("/api/company", headers=auth_headers).json()["basicInfo"]["companyName"] == ""

    def test_unusable_numbers_are_blank(self, client, auth_headers):
        document = {**SAMPLE_PROFILE, "team": {**SAMPLE_PROFILE["team"], "totalEmployees": "many"}}
        body = client.put("/api/company", json=document, headers=auth_headers).json()
        assert body["team"]["totalEmployees"] == ""

    def test_dashboard_counts(self, client, auth_headers, company_profile, make_tender):
        proposal_id = generate(client, auth_headers, make_tender())
        generate(client, auth_headers, make_tender())
        client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers)

        body = client.get("/api/dashboard", headers=auth_headers).json()
        assert body == {
            "totalProposals": 2,
            "draftProposals": 1,
            "submittedProposals": 1,
            "attestations": 1,
            "profileComplete": True,
        }


# =========================================================================
# PROPOSALS
# =========================================================================
class TestProposals:

    def test_generate_requires_profile(self, client, auth_headers, make_tender):
        response = client.post("/api/generateProposal", json={"tenderId": make_tender()}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"detail": "Complete your company profile first to generate proposals"}

    def test_generate_template_draft(self, client, auth_headers, company_profile, make_tender):
        response = client.post("/api/generateProposal", json={"tenderId": make_tender()}, headers=auth_headers)
        body = response.json()
        assert body["degraded"] is True
        assert body["degradedReason"] == "No LLM provider configured"

        proposal = client.get(f"/api/proposals/{body['proposalId']}", headers=auth_headers).json()
        assert proposal["status"] == "draft"
        assert proposal["version"] == 1
        assert proposal["content"].startswith("# Proposal for Construction of Community Hall")
        assert proposal["tender"]["agency"] == "Majlis Bandaraya Shah Alam"

        versions = client.get(f"/api/versions/{body['proposalId']}", headers=auth_headers).json()
        assert [v["version"] for v in versions] == [1]

    def test_generate_with_llm(self, client, auth_headers, company_profile, make_tender, fake_llm):
        fake_llm.responses = ["# Proposal for Construction of Community Hall\n\n## Executive Summary\n\nText."]
        body = client.post("/api/generateProposal", json={"tenderId": make_tender()}, headers=auth_headers).json()
        assert body == {"proposalId": body["proposalId"], "degraded": False}

    def test_save_draft_appends_versions(self, client, auth_headers, company_profile, make_tender):
        proposal_id = generate(client, auth_headers, make_tender())

        response = client.post(
            "/api/saveDraft",
            json={"proposalId": proposal_id, "content": "# Revised", "changesSummary": "Tightened scope"},
            headers=auth_headers,
        )
        assert response.json() == {"success": True, "version": 2}

        versions = client.get(f"/api/versions/{proposal_id}", headers=auth_headers).json()
        assert [v["version"] for v in versions] == [1, 2]
        assert versions[1]["content"] == "# Revised"
        assert versions[1]["changesSummary"] == "Tightened scope"

    def test_save_draft_validation(self, client, auth_headers):
        response = client.post("/api/saveDraft", json={"proposalId": "x"}, headers=auth_headers)
        assert response.status_code == 400
        response = client.post("/api/saveDraft", json={"proposalId": "missing", "content": ""}, headers=auth_headers)
        assert response.status_code == 404

    def test_other_users_cannot_read(self, client, auth_headers, other_headers, company_profile, make_tender):
        proposal_id = generate(client, auth_headers, make_tender())
        assert client.get(f"/api/proposals/{proposal_id}", headers=other_headers).status_code == 403
        assert client.get(f"/api/versions/{proposal_id}", headers=other_headers).status_code == 403
        assert client.get("/api/proposals", headers=other_headers).json() == []

    def test_delete_draft(self, client, auth_headers, company_profile, make_tender):
        proposal_id = generate(client, auth_headers, make_tender())
        assert client.delete(f"/api/proposals/{proposal_id}", headers=auth_headers).status_code == 200
        assert client.get(f"/api/proposals/{proposal_id}", headers=auth_headers).status_code == 404


# =========================================================================
# SUBMISSION AND ATTESTATIONS
# =========================================================================
class TestSubmission:

    def test_placeholder_when_ledger_unconfigured(self, client, auth_headers, company_profile, make_tender):
        proposal_id = generate(client, auth_headers, make_tender())

        body = client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers).json()

        assert body["status"] == "submitted"
        assert body["txId"].startswith("ALGO_FALLBACK_")
        assert body["blockchainStatus"] == "pending"
        assert body["blockchainError"] == "Algorand client is not available"
        assert body["explorerUrl"] is None
        assert body["degraded"] is True

    def test_confirmed_attestation(self, client, auth_headers, company_profile, make_tender, fake_ledger):
        proposal_id = generate(client, auth_headers, make_tender())

        body = client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers).json()

        assert body["txId"] == "FAKETX1"
        assert body["blockchainStatus"] == "confirmed"
        assert body["blockchainError"] is None
        assert body["explorerUrl"] == "https://testnet.explorer.perawallet.app/tx/FAKETX1"
        assert body["degraded"] is False

        proposal = client.get(f"/api/proposals/{proposal_id}", headers=auth_headers).json()
        assert proposal["blockchainTxId"] == "FAKETX1"
        assert proposal["submissionDate"] is not None

    def test_resubmission_is_idempotent(self, client, auth_headers, company_profile, make_tender, fake_ledger):
        proposal_id = generate(client, auth_headers, make_tender())
        first = client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers).json()
        second = client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers).json()

        assert second["txId"] == first["txId"]
        assert second["status"] == "submitted"
        assert second["alreadySubmitted"] is True
        assert len(fake_ledger.created) == 1
        assert len(client.get("/api/attestations", headers=auth_headers).json()) == 1

    def test_submitted_proposal_is_frozen(self, client, auth_headers, company_profile, make_tender):
        proposal_id = generate(client, auth_headers, make_tender())
        client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers)

        response = client.delete(f"/api/proposals/{proposal_id}", headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"detail": "Only draft proposals can be deleted"}

        response = client.post(
            "/api/saveDraft", json={"proposalId": proposal_id, "content": "late edit"}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_submit_errors(self, client, auth_headers, other_headers, company_profile, make_tender):
        assert client.post("/api/submitProposal", json={}, headers=auth_headers).status_code == 400
        assert client.post(
            "/api/submitProposal", json={"proposalId": "missing"}, headers=auth_headers
        ).status_code == 404

        proposal_id = generate(client, auth_headers, make_tender())
        assert client.post(
            "/api/submitProposal", json={"proposalId": proposal_id}, headers=other_headers
        ).status_code == 403


class TestAttestations:

    def test_on_demand_verification(self, client, auth_headers, company_profile, make_tender, fake_ledger):
        proposal_id = generate(client, auth_headers, make_tender())
        client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers)

        attestations = client.get("/api/attestations", headers=auth_headers).json()

        assert len(attestations) == 1
        assert attestations[0]["status"] == "verified"
        assert attestations[0]["proposalId"] == proposal_id
        assert attestations[0]["explorerUrl"].endswith("/tx/FAKETX1")
        assert fake_ledger.verify_calls == [("FAKETX1", proposal_id)]

        client.get("/api/attestations", headers=auth_headers)
        assert len(fake_ledger.verify_calls) == 1

    def test_placeholders_are_not_verified(self, app, client, auth_headers, company_profile, make_tender):
        proposal_id = generate(client, auth_headers, make_tender())
        client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers)

        ledger = FakeAttestationClient()
        app.state.attestation_client = ledger
        attestations = client.get("/api/attestations", headers=auth_headers).json()

        assert attestations[0]["status"] == "pending"
        assert attestations[0]["explorerUrl"] is None
        assert ledger.verify_calls == []

    def test_onchain_listing(self, client, auth_headers, company_profile, make_tender, fake_ledger):
        proposal_id = generate(client, auth_headers, make_tender())
        client.post("/api/submitProposal", json={"proposalId": proposal_id}, headers=auth_headers)

        body = client.get("/api/attestations/onchain", headers=auth_headers).json()
        assert [item["note"]["proposalId"] for item in body] == [proposal_id]

    def test_onchain_listing_unconfigured(self, client, auth_headers):
        assert client.get("/api/attestations/onchain", headers=auth_headers).status_code == 503


# =========================================================================
# AI ROUTES
# =========================================================================
class TestAIRoutes:

    def test_summarize_without_key(self, client, make_tender):
        response = client.post("/api/summarize", json={"tenderId": make_tender()})
        body = response.json()
        assert response.status_code == 200
        assert "Majlis Bandaraya Shah Alam" in body["summary"]
        assert body["degraded"] is True

    def test_summarize_survives_unexpected_llm_error(self, client, make_tender, fake_llm):
        fake_llm.error = IndexError("list index out of range")
        response = client.post("/api/summarize", json={"tenderId": make_tender()})
        body = response.json()
        assert response.status_code == 200
        assert body["degraded"] is True
        assert body["degradedReason"] == "Unexpected error: list index out of range"
        assert "Majlis Bandaraya Shah Alam" in body["summary"]

    def test_chat_fallback_with_structured_requirements(self, client, auth_headers, make_tender):
        tender_id = make_tender(requirements=[{"name": "CIDB Grade G4"}, 5])
        response = client.post(
            "/api/chatAssistant",
            json={"tenderId": tender_id, "userMessage": "What are the requirements?"},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["response"].startswith("Based on the tender requirements")

    def test_summarize_errors(self, client):
        assert client.post("/api/summarize", json={}).status_code == 400
        assert client.post("/api/summarize", json={"tenderId": "missing"}).status_code == 404

    def test_check_eligibility_requires_profile(self, client, auth_headers, make_tender):
        response = client.post("/api/checkEligibility", json={"tenderId": make_tender()}, headers=auth_headers)
        assert response.status_code == 400
        assert response.json() == {"detail": "Company profile not found. Please complete your profile first."}

    def test_check_eligibility_mock(self, client, auth_headers, company_profile, make_tender):
        body = client.post(
            "/api/checkEligibility", json={"tenderId": make_tender()}, headers=auth_headers
        ).json()
        assert len(body["eligibility"]) == 5
        assert body["degraded"] is True

    def test_eligibility_summary(self, client, auth_headers, company_profile, make_tender):
        matching = make_tender()
        body = client.post(
            "/api/eligibilitySummary", json={"tenderIds": [matching, "missing"]}, headers=auth_headers
        ).json()

        # G5 >= G4, 15 >= 5 years, ISO 9001 held
        assert body[matching]["score"] == 100
        assert body[matching]["status"] == "high_match"
        assert body["missing"] == {
            "score": 0,
            "status": "not_found",
            "message": "Tender not found",
            "matchedCriteria": [],
            "missingCriteria": [],
        }

    def test_eligibility_summary_without_profile(self, client, auth_headers, make_tender):
        tender_id = make_tender()
        body = client.post("/api/eligibilitySummary", json={"tenderIds": [tender_id]}, headers=auth_headers).json()
        assert body[tender_id]["status"] == "incomplete_profile"

    @pytest.mark.parametrize("payload", [{}, {"tenderIds": []}, {"tenderIds": "abc"}])
    def test_eligibility_summary_validation(self, client, auth_headers, payload):
        assert client.post("/api/eligibilitySummary", json=payload, headers=auth_headers).status_code == 400

    def test_chat_assistant(self, client, auth_headers, make_tender):
        tender_id = make_tender()
        body = client.post(
            "/api/chatAssistant",
            json={"tenderId": tender_id, "userMessage": "When is the deadline?", "chatHistory": "bad"},
            headers=auth_headers,
        ).json()
        assert body["response"].startswith("The tender closing date is")

        missing = client.post("/api/chatAssistant", json={"tenderId": tender_id}, headers=auth_headers)
        assert missing.status_code == 400

    def test_chat_assistant_with_llm(self, client, auth_headers, make_tender, fake_llm):
        fake_llm.responses = ["Lead with your G5 grade and fifteen years of public works."]
        body = client.post(
            "/api/chatAssistant",
            json={"tenderId": make_tender(), "userMessage": "How do I stand out?"},
            headers=auth_headers,
        ).json()
        assert body == {"response": "Lead with your G5 grade and fifteen years of public works.", "degraded": False}

    def test_improve_proposal_template(self, client, auth_headers, company_profile, make_tender):
        body = client.post(
            "/api/improveProposal",
            json={"tenderId": make_tender(), "proposalContent": "**Certifications:** ISO 9001"},
            headers=auth_headers,
        ).json()
        assert body["validation"] == "template"
        assert body["improvedContent"].startswith("**Certifications and Qualifications:** ISO 9001")
        assert len(body["insights"]) == 3
        assert body["degraded"] is True

    def test_improve_proposal_validation(self, client, auth_headers, make_tender):
        response = client.post(
            "/api/improveProposal", json={"tenderId": make_tender(), "proposalContent": "  "}, headers=auth_headers
        )
        assert response.status_code == 400


# =========================================================================
# TRANSLATION AND HEALTH
# =========================================================================
class TestTranslate:

    def test_unconfigured(self, client):
        response = client.post("/api/translate", json={"text": "Hello", "targetLang": "ms"})
        assert response.status_code == 503

    @pytest.mark.parametrize("payload", [{"text": "Hello"}, {"targetLang": "ms"}, {"text": "Hi", "targetLang": "fr"}])
    def test_validation(self, client, payload):
        assert client.post("/api/translate", json=payload).status_code == 400

    def test_translated(self, app, client):
        app.state.translator = FakeTranslator()
        body = client.post("/api/translate", json={"text": "Hello", "targetLang": "ms"}).json()
        assert body == {
            "translatedText": "[ms] Hello",
            "sourceLanguage": "en",
            "targetLanguage": "ms",
            "originalLength": 5,
            "translatedLength": 10,
        }

    def test_failure(self, app, client):
        app.state.translator = FakeTranslator(error="quota exceeded")
        response = client.post("/api/translate", json={"text": "Hello", "targetLang": "en"})
        assert response.status_code == 500
        assert response.json() == {"detail": "Translation failed: quota exceeded"}


class TestHealth:

    def test_reports_collaborators(self, client):
        body = client.get("/api/health").json()
        assert body["status"] == "ok"
        assert body["services"] == {"redis": False, "llm": False, "attestation": False, "translation": False}


def test_second_user_signup_helper(client):
    headers = signup(client, email="third@example.com")
    assert headers["Authorization"].startswith("Bearer ")
