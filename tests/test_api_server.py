"""
Test suite for the HTTP API.

Runs the FastAPI app through TestClient (lifespan included) against a
freshly seeded in-memory library per test.
"""

import pytest
from fastapi.testclient import TestClient

from peerlib.api_server import ServerConfig, app, app_state
from peerlib.seed import DEMO_RESOURCES


# ===== FIXTURES =====

@pytest.fixture
def client(monkeypatch):
    """Provide a client over a seeded library."""
    monkeypatch.setenv("SEED_DEMO_DATA", "true")
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def empty_client(monkeypatch):
    """Provide a client over an empty library."""
    monkeypatch.setenv("SEED_DEMO_DATA", "false")
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def members(client):
    """Map seeded usernames to account ids."""
    response = client.get("/api/v1/accounts")
    return {a["username"]: a["account_id"] for a in response.json()}


# ===== TESTS =====

@pytest.mark.integration
class TestAccountsAPI:
    """Test account and reputation endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["timestamp"].endswith("+00:00")

    def test_config_is_single_process(self, monkeypatch):
        """Test the in-memory server never fans out to worker processes."""
        monkeypatch.setenv("WORKERS", "4")
        config = ServerConfig.from_env()

        assert "workers" not in ServerConfig.model_fields
        assert not hasattr(config, "workers")

    def test_create_account(self, empty_client):
        response = empty_client.post(
            "/api/v1/accounts", json={"username": "dana", "email": "dana@university.edu"}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["tier"] == "Neutral"
        assert body["score"] == 0

    def test_duplicate_email_conflict(self, client):
        response = client.post(
            "/api/v1/accounts", json={"username": "alice", "email": "alice@university.edu"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "AlreadyExistsError"

    def test_invalid_email(self, client):
        response = client.post("/api/v1/accounts", json={"username": "x", "email": "nope"})
        assert response.status_code == 400

    def test_unknown_account(self, client):
        assert client.get("/api/v1/accounts/ghost").status_code == 404
        assert client.get("/api/v1/accounts/ghost/reputation").status_code == 404

    def test_reputation(self, client, members):
        response = client.get(f"/api/v1/accounts/{members['alice']}/reputation")

        assert response.status_code == 200
        body = response.json()
        assert body["tier"] == "Contributor"
        assert body["throttle"] == 1.0

    def test_access_check(self, client, members):
        """Test the reputation gate answers 200 or 403."""
        allowed = client.get(
            f"/api/v1/accounts/{members['alice']}/access", params={"required_score": 50}
        )
        denied = client.get(
            f"/api/v1/accounts/{members['charlie']}/access",
            params={"required_score": 1000, "action": "bulk download"},
        )

        assert allowed.status_code == 200
        assert allowed.json()["allowed"] is True
        assert denied.status_code == 403
        assert denied.json()["details"]["action"] == "bulk download"

    def test_leaderboard(self, client):
        board = client.get("/api/v1/leaderboard", params={"limit": 2}).json()

        assert len(board) == 2
        assert board[0]["score"] >= board[1]["score"]

    def test_network_stats_and_recalculate(self, client):
        recalculated = client.post("/api/v1/reputation/recalculate").json()
        stats = client.get("/api/v1/network/stats").json()

        assert recalculated == {"updated": 3, "skipped": []}
        assert stats["total_users"] == 3
        assert stats["contributors"] + stats["neutral"] + stats["leechers"] == 3


@pytest.mark.integration
class TestResourcesAPI:
    """Test resource endpoints."""

    def test_share_resource(self, client, members):
        response = client.post(
            "/api/v1/resources",
            json={"filename": "thermo.pdf", "size": 2048, "title": "Thermodynamics", "subject": "Physics"},
            headers={"X-Account-ID": members["charlie"]},
        )

        assert response.status_code == 201
        resource_id = response.json()["resource_id"]
        assert client.get(f"/api/v1/resources/{resource_id}").status_code == 200

    def test_share_requires_account(self, client):
        response = client.post("/api/v1/resources", json={"filename": "a.pdf", "size": 10})
        assert response.status_code == 400

    def test_share_unknown_account(self, client):
        response = client.post(
            "/api/v1/resources",
            json={"filename": "a.pdf", "size": 10},
            headers={"X-Account-ID": "ghost"},
        )
        assert response.status_code == 404

    def test_share_disallowed_type(self, client, members):
        response = client.post(
            "/api/v1/resources",
            json={"filename": "tool.exe", "size": 10},
            headers={"X-Account-ID": members["alice"]},
        )
        assert response.status_code == 400

    def test_store_failure_is_server_error(self, client, members, monkeypatch):
        """Test an unexpected store failure surfaces as a wrapped 500."""
        def broken_create(resource):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr(app_state.store, "create_resource", broken_create)
        response = client.post(
            "/api/v1/resources",
            json={"filename": "a.pdf", "size": 10},
            headers={"X-Account-ID": members["alice"]},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "OperationError"
        assert response.json()["details"]["operation"] == "upload"

    def test_download_and_rate(self, client, members):
        resource_id = client.get("/api/v1/resources/recent").json()[0]["resource_id"]

        download = client.post(
            f"/api/v1/resources/{resource_id}/download",
            headers={"X-Account-ID": members["charlie"]},
        )
        assert download.status_code == 200
        assert download.json()["resource"]["download_count"] == 1
        assert download.json()["throttle"] in (0.3, 0.7, 1.0)

        rated = client.post(f"/api/v1/resources/{resource_id}/rate", json={"rating": 5})
        assert rated.status_code == 200
        assert rated.json()["total_ratings"] == 3

        assert client.post(f"/api/v1/resources/{resource_id}/rate", json={"rating": 9}).status_code == 400

    def test_missing_resource(self, client):
        assert client.get("/api/v1/resources/missing").status_code == 404
        assert client.post("/api/v1/resources/missing/download").status_code == 404

    def test_tags(self, client):
        resource_id = client.get("/api/v1/resources/recent").json()[0]["resource_id"]
        response = client.post(f"/api/v1/resources/{resource_id}/tags", json={"tags": ["exam"]})

        assert response.status_code == 200
        assert "exam" in response.json()["tags"]

    def test_library_stats(self, client):
        stats = client.get("/api/v1/library/stats").json()

        assert stats["total_resources"] == len(DEMO_RESOURCES)
        assert stats["total_ratings"] == 2 * len(DEMO_RESOURCES)

    def test_categories(self, client):
        body = client.get("/api/v1/library/categories").json()

        assert "Computer Science" in body["subjects"]
        assert ".pdf" in body["file_types"]


@pytest.mark.integration
class TestSearchAPI:
    """Test search endpoints."""

    def test_search(self, client):
        body = client.get("/api/v1/search", params={"q": "computer"}).json()

        assert body["total_count"] >= 1
        assert body["page"] == 1
        assert body["results"][0]["relevance"] > 0

    def test_search_pagination(self, client):
        body = client.get("/api/v1/search", params={"page": 2, "page_size": 3}).json()

        assert body["total_count"] == len(DEMO_RESOURCES)
        assert body["page_size"] == 3
        assert len(body["results"]) == 3

    def test_search_type_filter(self, client):
        body = client.get("/api/v1/search", params={"type": "pdf"}).json()
        assert all(r["resource"]["resource_type"] == "pdf" for r in body["results"])

    def test_search_ignores_empty_filters(self, client):
        """Test empty filter values behave as if they were absent."""
        plain = client.get("/api/v1/search", params={"q": "go"}).json()
        response = client.get("/api/v1/search?q=go&subject=&type=&min_rating=&page=&page_size=")

        assert response.status_code == 200
        body = response.json()
        assert body["total_count"] == plain["total_count"]
        assert body["page"] == 1
        assert body["page_size"] == 10

    def test_search_ignores_malformed_numbers(self, client):
        """Test unparseable numeric filters fall back to their defaults."""
        response = client.get("/api/v1/search", params={"page": "abc", "page_size": "x", "min_rating": "high"})

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == 1
        assert body["total_count"] == len(DEMO_RESOURCES)

    def test_suggestions(self, client):
        suggestions = client.get("/api/v1/search/suggestions", params={"q": "go"}).json()

        assert "Go Programming Fundamentals" in suggestions
        assert suggestions == sorted(suggestions)

    def test_subject_and_tag(self, client):
        by_subject = client.get("/api/v1/search/subject/mathematics").json()
        by_tag = client.get("/api/v1/search/tag/MATH").json()

        assert len(by_subject) == 2
        assert len(by_tag) == 2
