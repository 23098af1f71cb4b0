import pytest
from fastapi.testclient import TestClient

from app.database import get_db
from app.main import app
from app.models import DatasetEntry

ADMIN = {"X-Admin-Token": "admin-token"}


@pytest.fixture
def client(sqlite_session, mock_env):
    def _override_get_db():
        yield sqlite_session

    app.dependency_overrides[get_db] = _override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestPublicEndpoints:
    def test_stats(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!", usage_count=2)
        make_entry("tech", "python", "A language")

        response = client.get("/api/dataset/stats")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "stats": {
                "totalResponses": 2,
                "totalCategories": 2,
                "totalUsage": 2,
                "categoryStats": {"greetings": 1, "tech": 1},
            },
        }

    def test_categories(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!")
        make_entry("fallback", "default", "Sorry")

        assert client.get("/api/dataset/categories").json() == {"success": True, "categories": ["greetings"]}

    def test_category(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!")

        data = client.get("/api/dataset/category/greetings").json()

        assert data == {"success": True, "category": "greetings", "responses": {"hello": "Hi!"}}

    def test_test_endpoint_reports_match(self, client, make_entry):
        make_entry("greetings", "good morning", "Good morning to you!")

        data = client.post("/api/dataset/test", json={"message": "good morning"}).json()

        assert data["hasMatch"] is True
        assert data["query"] == "good morning"
        assert data["match"]["matchType"] == "exact"
        assert data["match"]["matchedKey"] == "good morning"
        assert data["match"]["confidence"] == 1.0
        assert data["match"]["id"]

    def test_test_endpoint_without_match(self, client):
        data = client.post("/api/dataset/test", json={"message": "unknown words"}).json()

        assert data["hasMatch"] is False
        assert data["match"] is None

    def test_test_endpoint_requires_message(self, client):
        assert client.post("/api/dataset/test", json={}).status_code == 400

    def test_search(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!")

        data = client.get("/api/dataset/search", params={"q": "hel"}).json()

        assert data["count"] == 1
        assert data["results"][0]["key"] == "hello"

    def test_search_requires_query(self, client):
        response = client.get("/api/dataset/search")

        assert response.status_code == 400
        assert response.json()["message"] == "Search query is required"


class TestAdminAccess:
    def test_missing_token_is_forbidden(self, client):
        response = client.post("/api/dataset/add", json={"category": "a", "key": "b", "response": "c"})
        assert response.status_code == 403

    def test_wrong_token_is_forbidden(self, client):
        response = client.post(
            "/api/dataset/add",
            json={"category": "a", "key": "b", "response": "c"},
            headers={"X-Admin-Token": "nope"},
        )
        assert response.status_code == 403

    def test_unconfigured_token(self, client, monkeypatch):
        monkeypatch.delenv("DATASET_ADMIN_TOKEN")

        response = client.post("/api/dataset/add", json={"category": "a", "key": "b", "response": "c"}, headers=ADMIN)

        assert response.status_code == 500


class TestAdminEndpoints:
    def test_add_then_duplicate(self, client, sqlite_session):
        body = {"category": "Greetings", "key": "Namaste", "response": "Namaste ji!", "tags": ["hindi"], "priority": 2}

        first = client.post("/api/dataset/add", json=body, headers=ADMIN)
        second = client.post("/api/dataset/add", json=body, headers=ADMIN)

        assert first.status_code == 200
        assert first.json()["success"] is True
        assert second.status_code == 400
        entry = sqlite_session.query(DatasetEntry).one()
        assert (entry.category, entry.key, entry.priority, entry.tags) == ("greetings", "namaste", 2, ["hindi"])

    def test_add_rejects_confidence_out_of_range(self, client):
        response = client.post(
            "/api/dataset/add",
            json={"category": "a", "key": "b", "response": "c", "confidence": 1.5},
            headers=ADMIN,
        )
        assert response.status_code == 422
        assert response.json()["success"] is False
        assert response.json()["message"] == "Invalid request"
        assert response.json()["errors"][0]["loc"] == ["body", "confidence"]

    def test_update(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!")

        response = client.put(
            "/api/dataset/update",
            json={"category": "greetings", "key": "hello", "newResponse": "Hello there!"},
            headers=ADMIN,
        )

        assert response.status_code == 200
        assert response.json()["newResponse"] == "Hello there!"
        assert client.get("/api/dataset/category/greetings").json()["responses"] == {"hello": "Hello there!"}

    def test_update_missing(self, client):
        response = client.put(
            "/api/dataset/update",
            json={"category": "greetings", "key": "hello", "newResponse": "x"},
            headers=ADMIN,
        )
        assert response.status_code == 404

    def test_delete_then_readd_is_rejected(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!")

        deleted = client.request(
            "DELETE", "/api/dataset/delete", json={"category": "greetings", "key": "hello"}, headers=ADMIN
        )
        again = client.request(
            "DELETE", "/api/dataset/delete", json={"category": "greetings", "key": "hello"}, headers=ADMIN
        )
        readd = client.post(
            "/api/dataset/add", json={"category": "greetings", "key": "hello", "response": "Hey"}, headers=ADMIN
        )

        assert deleted.status_code == 200
        assert again.status_code == 404
        assert readd.status_code == 400

    def test_import(self, client, make_entry):
        make_entry("greetings", "hello", "Hi!")

        response = client.post(
            "/api/dataset/import",
            json={"responses": {"greetings": {"hello": "dup", "hey": "Hey!"}, "tech": {"python": "A language"}}},
            headers=ADMIN,
        )

        data = response.json()
        assert data["success"] is True
        assert data["successCount"] == 2
        assert data["errorCount"] == 1
        assert data["errors"] == ["Failed to add: greetings/hello"]
        assert data["message"] == "Import completed: 2 successful, 1 failed"

    def test_import_without_errors_omits_error_list(self, client):
        response = client.post(
            "/api/dataset/import", json={"responses": {"tech": {"python": "A language"}}}, headers=ADMIN
        )

        assert "errors" not in response.json()

    def test_import_counts_non_object_category(self, client):
        response = client.post(
            "/api/dataset/import",
            json={"responses": {"tech": {"python": "A language"}, "broken": ["not", "an", "object"]}},
            headers=ADMIN,
        )

        data = response.json()
        assert data["successCount"] == 1
        assert data["errorCount"] == 1
        assert data["errors"] == ["Invalid category broken: expected an object of responses"]
