from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.database import get_db
from app.main import app
from app.services.language_service import FALLBACK_RESPONSES
from app.services.resolution_service import analyze_file


@pytest.fixture
def client(sqlite_session):
    def _override_get_db():
        yield sqlite_session

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def offline():
    """No Gemini key and no backup endpoint."""
    with patch("app.services.resolution_service.get_llm_provider", return_value=None), patch(
        "app.services.resolution_service.backup_service.fetch_backup_mapping", return_value=None
    ):
        yield


class TestChatEndpoint:
    @pytest.mark.parametrize("path", ["/api/ai/chat", "/api/ai/chat-anonymous"])
    def test_dataset_answer(self, client, make_entry, path):
        make_entry("greetings", "hello", "Hi! How can I help you today?")

        response = client.post(path, json={"message": "hello"})

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["response"] == "Hi! How can I help you today?"
        assert data["source"] == "custom-dataset"
        assert data["detectedLanguage"] == "english"
        assert data["matchType"] == "exact"
        assert data["confidence"] == 1.0
        assert data["category"] == "greetings"
        assert "timestamp" in data

    def test_final_fallback_omits_match_fields(self, client):
        response = client.post("/api/ai/chat", json={"message": "kya haal hai"})

        assert response.status_code == 200
        data = response.json()
        assert data["source"] == "final-fallback"
        assert data["response"] == FALLBACK_RESPONSES["hindi"]
        assert "confidence" not in data
        assert "matchType" not in data

    @pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}])
    def test_blank_message_is_rejected(self, client, body):
        response = client.post("/api/ai/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"success": False, "message": "Message is required"}

    def test_invalid_body_uses_error_envelope(self, client):
        response = client.post("/api/ai/chat", json={"message": 5})

        assert response.status_code == 422
        data = response.json()
        assert data["success"] is False
        assert data["message"] == "Invalid request"
        assert data["errors"][0]["loc"] == ["body", "message"]

    def test_unexpected_error_returns_500(self, sqlite_session):
        def _override_get_db():
            yield sqlite_session

        app.dependency_overrides[get_db] = _override_get_db
        try:
            with patch("app.routers.ai.resolve_message", side_effect=RuntimeError("boom")):
                client = TestClient(app, raise_server_exceptions=False)
                response = client.post("/api/ai/chat", json={"message": "hello"})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["success"] is False
        assert response.json()["message"] == "Internal server error"


class TestFileEndpoint:
    @pytest.mark.parametrize("path", ["/api/ai/file", "/api/ai/file-anonymous"])
    def test_text_file_falls_back_to_excerpt(self, client, path):
        response = client.post(
            path,
            files={"file": ("notes.txt", b"Meeting notes: ship on Friday.", "text/plain")},
            data={"customPrompt": "List the deadlines"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["source"] == "fallback"
        assert data["fileName"] == "notes.txt"
        assert data["fileType"] == "Text File"
        assert data["extractedTextLength"] == len("Meeting notes: ship on Friday.")
        assert data["additionalInfo"] == {"type": "Text File"}
        assert "Meeting notes: ship on Friday." in data["response"]

    def test_custom_prompt_is_forwarded(self, client):
        with patch("app.routers.ai.analyze_file", wraps=analyze_file) as mock_analyze:
            client.post(
                "/api/ai/file",
                files={"file": ("notes.txt", b"content", "text/plain")},
                data={"customPrompt": "Translate this"},
            )

        assert mock_analyze.call_args[0][1] == "notes.txt"
        assert mock_analyze.call_args[0][2] == "Translate this"

    def test_missing_file(self, client):
        response = client.post("/api/ai/file", data={"customPrompt": "Summarize"})

        assert response.status_code == 400
        assert response.json()["message"] == "No file provided"

    def test_unsupported_type(self, client):
        response = client.post("/api/ai/file", files={"file": ("photo.png", b"\x89PNG", "image/png")})

        assert response.status_code == 415
        assert response.json()["message"] == "Unsupported file type: image/png"

    def test_empty_text(self, client):
        response = client.post("/api/ai/file", files={"file": ("empty.txt", b"   \n", "text/plain")})

        assert response.status_code == 400

    def test_unreadable_pdf(self, client):
        response = client.post("/api/ai/file", files={"file": ("broken.pdf", b"not a pdf", "application/pdf")})

        assert response.status_code == 422

    @patch("app.routers.ai.MAX_UPLOAD_BYTES", 10)
    def test_file_too_large(self, client):
        response = client.post("/api/ai/file", files={"file": ("big.txt", b"x" * 11, "text/plain")})

        assert response.status_code == 413


class TestHealth:
    def test_health(self, client):
        assert client.get("/health").json() == {"status": "ok"}

    def test_db_check_counts_entries(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!")
        make_entry("greetings", "bye", "Bye!", is_active=False)

        assert client.get("/db-check").json() == {"status": "ok", "dataset_entries": 2, "active_entries": 1}
