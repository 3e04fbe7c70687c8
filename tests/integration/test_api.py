"""Integration tests for the HTTP API."""

from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from divorce_forms.api.app import app, get_config_manager, get_pipeline, get_response_store
from divorce_forms.config import ConfigurationManager
from divorce_forms.generators import InMemoryTemplateSource
from divorce_forms.mappings import FieldMappingRegistry
from divorce_forms.pipeline import DocumentGenerationPipeline, PipelineConfig
from divorce_forms.storage import DatabaseManager, ResponseStore

USER = {"X-User-Id": "user-123"}

SETTLEMENT_ANSWERS = {
    "petitioner-name": "Jane Doe",
    "respondent-name": "John Doe",
    "marriage-date": "2015-06-20",
    "has-children": "no",
    "has-marital-home": "no",
    "bank-account-approach": "keep_own",
    "retirement-division": "keep_own",
    "debt-approach": "own_debts",
    "maintenance-agreement": "none",
    "personal-property-approach": "already_divided",
    "attorney-fees": "own",
}


@pytest.fixture
def client(tmp_path, fillable_pdf):
    manager = ConfigurationManager()
    manager.load_builtin_schemas()

    registry = FieldMappingRegistry()
    templates = InMemoryTemplateSource(registry=registry)
    templates.add(
        "petition-no-children",
        fillable_pdf(text_fields=("PetitionerFullName", "RespondentFullName", "DateOfMarriage")),
    )
    pipeline = DocumentGenerationPipeline(
        config=PipelineConfig(flatten=False),
        registry=registry,
        template_source=templates,
        clock=lambda: datetime(2026, 10, 19, 15, 4),
    )

    db = DatabaseManager(f"sqlite:///{tmp_path / 'api.db'}")
    db.init_database()
    store = ResponseStore(db)

    app.dependency_overrides[get_config_manager] = lambda: manager
    app.dependency_overrides[get_pipeline] = lambda: pipeline
    app.dependency_overrides[get_response_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.clear()
    db.close()


def submit_settlement(client):
    response = client.post(
        "/api/responses/marital-settlement/submit",
        json={"responses": SETTLEMENT_ANSWERS},
        headers=USER,
    )
    assert response.status_code == 200
    return response


def test_list_questionnaires(client):
    response = client.get("/api/questionnaires")

    assert response.status_code == 200
    items = response.json()["questionnaires"]
    assert [item["id"] for item in items] == ["marital-settlement", "petition"]
    assert all(item["section_count"] > 0 for item in items)


def test_get_questionnaire(client):
    response = client.get("/api/questionnaires/petition")

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == "petition"
    question_ids = [q["id"] for s in data["sections"] for q in s["questions"]]
    assert "has-children" in question_ids
    assert "Marriage certificate" in data["metadata"]["required_supporting_documents"]


def test_unknown_questionnaire(client):
    assert client.get("/api/questionnaires/prenup").status_code == 404
    assert client.put(
        "/api/responses/prenup", json={"responses": {}}, headers=USER
    ).status_code == 404


def test_evaluate(client):
    hidden = client.post(
        "/api/questionnaires/marital-settlement/evaluate",
        json={"responses": {"has-children": "no"}},
    ).json()
    shown = client.post(
        "/api/questionnaires/marital-settlement/evaluate",
        json={"responses": {"has-children": "yes"}},
    ).json()

    assert hidden["schema_id"] == "marital-settlement"
    assert "child-support" not in hidden["visible_sections"]
    assert "child-support" in shown["visible_sections"]
    assert hidden["validation"]["valid"] is False
    assert hidden["validation"]["first_failing_question"] == "petitioner-name"
    assert 0 <= hidden["progress"]["progress_percentage"] < 100


def test_evaluate_rejects_non_object_responses(client):
    response = client.post(
        "/api/questionnaires/petition/evaluate", json={"responses": ["a", "b"]}
    )

    assert response.status_code == 400


def test_save_and_load_draft(client):
    saved = client.put(
        "/api/responses/marital-settlement",
        json={"responses": {"petitioner-name": "Jane Doe"}, "current_section_index": 1},
        headers=USER,
    )
    loaded = client.get("/api/responses/marital-settlement", headers=USER)

    assert saved.status_code == 200
    assert loaded.status_code == 200
    assert loaded.json()["status"] == "draft"
    assert loaded.json()["responses"] == {"petitioner-name": "Jane Doe"}
    assert loaded.json()["current_section"] == 1


def test_save_rejects_bad_section_index(client):
    response = client.put(
        "/api/responses/marital-settlement",
        json={"responses": {}, "current_section_index": -2},
        headers=USER,
    )

    assert response.status_code == 400


def test_load_missing_responses(client):
    assert client.get("/api/responses/petition", headers=USER).status_code == 404


def test_user_header_required(client):
    assert client.get("/api/responses/petition").status_code == 422


def test_submit_blocked_then_completed(client):
    blocked = client.post(
        "/api/responses/marital-settlement/submit",
        json={"responses": {"petitioner-name": "Jane Doe"}},
        headers=USER,
    )

    assert blocked.status_code == 422
    body = blocked.json()
    assert body["error_type"] == "SubmissionBlockedError"
    assert body["first_failing_question"] == "respondent-name"
    assert "respondent-name" in body["errors"]

    completed = submit_settlement(client)
    assert completed.json()["status"] == "completed"
    assert completed.json()["completed_at"] is not None


def test_generate_requires_submission(client):
    client.put(
        "/api/responses/marital-settlement",
        json={"responses": SETTLEMENT_ANSWERS},
        headers=USER,
    )

    response = client.post(
        "/api/documents/generate",
        json={"document_type": "marital-settlement-agreement"},
        headers=USER,
    )

    assert response.status_code == 409


def test_generate_without_answers(client):
    response = client.post(
        "/api/documents/generate", json={"document_type": "petition"}, headers=USER
    )

    assert response.status_code == 404


def test_generate_settlement_agreement(client):
    submit_settlement(client)

    response = client.post(
        "/api/documents/generate",
        json={"document_type": "marital-settlement-agreement"},
        headers=USER,
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["x-document-type"] == "marital-settlement-agreement"
    assert response.headers["x-generation-mode"] == "freeform"
    assert response.content.startswith(b"%PDF")


def test_generate_official_form(client):
    submit_settlement(client)

    response = client.post(
        "/api/documents/generate",
        json={"document_type": "petition-no-children", "questionnaire_type": "marital-settlement"},
        headers=USER,
    )

    assert response.status_code == 200
    assert response.headers["x-generation-mode"] == "official"


def test_generate_summary(client):
    submit_settlement(client)

    response = client.post(
        "/api/documents/generate",
        json={
            "document_type": "petition",
            "questionnaire_type": "marital-settlement",
            "generation_mode": "summary",
        },
        headers=USER,
    )

    assert response.status_code == 200
    assert response.headers["x-document-type"] == "petition-no-children"
    assert response.headers["x-generation-mode"] == "summary"
    assert response.content.startswith(b"%PDF")


def test_generate_unknown_mode(client):
    submit_settlement(client)

    response = client.post(
        "/api/documents/generate",
        json={"document_type": "petition", "questionnaire_type": "marital-settlement",
              "generation_mode": "draft"},
        headers=USER,
    )

    assert response.status_code == 400


def test_generate_unsupported_type(client):
    submit_settlement(client)

    response = client.post(
        "/api/documents/generate",
        json={"document_type": "prenuptial-agreement", "questionnaire_type": "marital-settlement"},
        headers=USER,
    )

    assert response.status_code == 404
    assert "marital-settlement-agreement" in response.json()["detail"]["supported_types"]


def test_generate_missing_template(client):
    submit_settlement(client)

    response = client.post(
        "/api/documents/generate",
        json={"document_type": "summons", "questionnaire_type": "marital-settlement"},
        headers=USER,
    )

    assert response.status_code == 502
    assert response.json()["detail"]["retryable"] is True


def test_generate_bad_request(client):
    assert client.post("/api/documents/generate", json={}, headers=USER).status_code == 400
    assert client.post(
        "/api/documents/generate", json={"document_type": "summons"}, headers=USER
    ).status_code == 400


def test_list_document_types(client):
    response = client.get("/api/documents/types")

    assert response.status_code == 200
    types = response.json()["document_types"]
    assert "petition-no-children" in types
    assert "marital-settlement-agreement" in types
