"""
Integration tests for the Pulseboard HTTP API

Test coverage:
- Project endpoints (create, list, read, replace, status change)
- Status update endpoints and project existence checks
- Request validation mapped to 400 with generic messages
- Text refinement fallbacks
- Newsletter generation errors
- Health and root endpoints
"""

import pytest
from unittest.mock import Mock

from fastapi.testclient import TestClient

from pulseboard.api import create_app
from pulseboard.refine import FAILED_MESSAGE, NOT_CONFIGURED_MESSAGE
from pulseboard.storage import MemoryStorage


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def api_client(memory_storage, generator, test_settings):
    app = create_app(storage=memory_storage, generator=generator, settings=test_settings)
    return TestClient(app)


@pytest.fixture
def unconfigured_client(memory_storage, unconfigured_generator, test_settings):
    app = create_app(storage=memory_storage, generator=unconfigured_generator, settings=test_settings)
    return TestClient(app)


@pytest.fixture
def project_body(sample_project_fields):
    return dict(sample_project_fields)


@pytest.fixture
def created_project(api_client, project_body):
    response = api_client.post("/api/projects", json=project_body)
    assert response.status_code == 201
    return response.json()


def post_update(client, project_id, content="Finished load testing", commenter="Alex Kim"):
    return client.post(
        f"/api/projects/{project_id}/statuses",
        json={"content": content, "commenter": commenter},
    )


# =============================================================================
# PROJECT TESTS
# =============================================================================

class TestProjects:

    def test_create_returns_project(self, created_project, project_body):
        assert created_project["id"]
        assert created_project["created_at"]
        for name, value in project_body.items():
            assert created_project[name] == value

    def test_create_defaults_status(self, api_client, project_body):
        del project_body["status"]

        response = api_client.post("/api/projects", json=project_body)

        assert response.status_code == 201
        assert response.json()["status"] == "In Progress"

    def test_create_minimal_project(self, api_client):
        response = api_client.post("/api/projects", json={
            "title": "Mobile Wallet",
            "project_type": "Mobile",
            "solution_architect": "Dana Whitfield",
            "project_lead": "Luis Ortega",
        })

        assert response.status_code == 201
        assert response.json()["team_members"] == ""

    def test_ids_are_unique(self, api_client, project_body):
        ids = {api_client.post("/api/projects", json=project_body).json()["id"] for _ in range(3)}

        assert len(ids) == 3

    def test_list_newest_first(self, api_client, project_body):
        first = api_client.post("/api/projects", json={**project_body, "title": "First"}).json()
        second = api_client.post("/api/projects", json={**project_body, "title": "Second"}).json()

        listed = api_client.get("/api/projects").json()

        assert [p["id"] for p in listed] == [second["id"], first["id"]]

    @pytest.mark.parametrize("change", [
        {"project_type": "Hardware"},
        {"status": "Done"},
        {"title": None},
        {"title": "   "},
        {"title": "x" * 501},
        {"team_members": ["Alex", "Jordan"]},
    ])
    def test_create_invalid_returns_400(self, api_client, project_body, change):
        response = api_client.post("/api/projects", json={**project_body, **change})

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid project data"}
        assert api_client.get("/api/projects").json() == []

    def test_create_missing_field_returns_400(self, api_client, project_body):
        del project_body["project_lead"]

        response = api_client.post("/api/projects", json=project_body)

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid project data"

    def test_get_project(self, api_client, created_project):
        response = api_client.get(f"/api/projects/{created_project['id']}")

        assert response.status_code == 200
        assert response.json() == created_project

    def test_get_missing_returns_404(self, api_client):
        response = api_client.get("/api/projects/does-not-exist")

        assert response.status_code == 404
        assert response.json() == {"detail": "Project not found"}

    def test_replace_round_trip(self, api_client, created_project, project_body):
        new_body = {
            **project_body,
            "title": "Payments Platform Migration v2",
            "project_type": "Backend",
            "status": "On Hold",
            "wiki_link": "https://wiki.example.com/v2",
        }

        response = api_client.patch(f"/api/projects/{created_project['id']}", json=new_body)
        fetched = api_client.get(f"/api/projects/{created_project['id']}").json()

        assert response.status_code == 200
        assert fetched == response.json()
        assert fetched["id"] == created_project["id"]
        assert fetched["created_at"] == created_project["created_at"]
        for name, value in new_body.items():
            assert fetched[name] == value

    def test_replace_without_status_keeps_status(self, api_client, created_project, project_body):
        api_client.patch(f"/api/projects/{created_project['id']}/status", json={"status": "Completed"})
        del project_body["status"]

        response = api_client.patch(f"/api/projects/{created_project['id']}", json=project_body)

        assert response.json()["status"] == "Completed"

    def test_replace_with_same_values_returns_same_project(self, api_client, created_project, project_body):
        body = {name: created_project[name] for name in project_body}

        response = api_client.patch(f"/api/projects/{created_project['id']}", json=body)

        assert response.status_code == 200
        assert response.json() == created_project

    def test_replace_missing_returns_404(self, api_client, project_body):
        response = api_client.patch("/api/projects/does-not-exist", json=project_body)

        assert response.status_code == 404

    def test_replace_invalid_returns_400(self, api_client, created_project, project_body):
        response = api_client.patch(
            f"/api/projects/{created_project['id']}",
            json={**project_body, "project_type": "Hardware"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid project data"

    def test_change_status(self, api_client, created_project):
        response = api_client.patch(
            f"/api/projects/{created_project['id']}/status",
            json={"status": "Archived"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Archived"
        assert response.json()["title"] == created_project["title"]

    @pytest.mark.parametrize("body", [{"status": "Done"}, {"status": "archived"}, {}])
    def test_change_status_invalid_returns_400(self, api_client, created_project, body):
        response = api_client.patch(f"/api/projects/{created_project['id']}/status", json=body)

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid status value"}
        assert api_client.get(f"/api/projects/{created_project['id']}").json()["status"] == "In Progress"

    def test_change_status_missing_returns_404(self, api_client):
        response = api_client.patch("/api/projects/does-not-exist/status", json={"status": "Completed"})

        assert response.status_code == 404


# =============================================================================
# STATUS UPDATE TESTS
# =============================================================================

class TestStatusUpdates:

    def test_create_update(self, api_client, created_project):
        response = post_update(api_client, created_project["id"])

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert body["project_id"] == created_project["id"]
        assert body["content"] == "Finished load testing"
        assert body["commenter"] == "Alex Kim"

    def test_create_for_missing_project_returns_404(self, api_client):
        response = post_update(api_client, "does-not-exist")

        assert response.status_code == 404
        assert api_client.get("/api/all-statuses").json() == []

    @pytest.mark.parametrize("body", [
        {"commenter": "Alex Kim"},
        {"content": "Progress"},
        {"content": "", "commenter": "Alex Kim"},
        {"content": "Progress", "commenter": "  "},
        {"content": "y" * 10001, "commenter": "Alex Kim"},
    ])
    def test_create_invalid_returns_400(self, api_client, created_project, body):
        response = api_client.post(f"/api/projects/{created_project['id']}/statuses", json=body)

        assert response.status_code == 400
        assert response.json() == {"detail": "Invalid status update data"}
        assert api_client.get("/api/all-statuses").json() == []

    def test_list_for_project_newest_first(self, api_client, project_body):
        a = api_client.post("/api/projects", json=project_body).json()
        b = api_client.post("/api/projects", json=project_body).json()

        first = post_update(api_client, a["id"], content="first").json()
        post_update(api_client, b["id"], content="other project")
        second = post_update(api_client, a["id"], content="second").json()

        listed = api_client.get(f"/api/projects/{a['id']}/statuses").json()

        assert [u["id"] for u in listed] == [second["id"], first["id"]]

    def test_list_all_newest_first(self, api_client, project_body):
        a = api_client.post("/api/projects", json=project_body).json()
        b = api_client.post("/api/projects", json=project_body).json()

        u1 = post_update(api_client, a["id"]).json()
        u2 = post_update(api_client, b["id"]).json()

        listed = api_client.get("/api/all-statuses").json()

        assert [u["id"] for u in listed] == [u2["id"], u1["id"]]

    def test_list_for_unknown_project_is_empty(self, api_client):
        response = api_client.get("/api/projects/does-not-exist/statuses")

        assert response.status_code == 200
        assert response.json() == []


# =============================================================================
# REFINE TESTS
# =============================================================================

class TestRefineText:

    def test_refines_text(self, api_client, mock_client, mock_claude_response):
        mock_client.messages.create.return_value = mock_claude_response("We finished the migration.")

        response = api_client.post("/api/refine-text", json={"text": "we finsihed teh migration"})

        assert response.status_code == 200
        assert response.json() == {"refined": "We finished the migration.", "message": None}

    @pytest.mark.parametrize("body", [{}, {"text": ""}, {"text": "   "}, {"text": None}, {"text": 42}])
    def test_missing_text_returns_400(self, api_client, body):
        response = api_client.post("/api/refine-text", json=body)

        assert response.status_code == 400
        assert response.json() == {"detail": "Text is required"}

    def test_not_configured_returns_original(self, unconfigured_client):
        response = unconfigured_client.post("/api/refine-text", json={"text": "draft"})

        assert response.status_code == 200
        assert response.json() == {"refined": "draft", "message": NOT_CONFIGURED_MESSAGE}

    def test_failure_returns_original(self, api_client, mock_client):
        mock_client.messages.create.side_effect = ConnectionError("down")

        response = api_client.post("/api/refine-text", json={"text": "draft"})

        assert response.status_code == 200
        assert response.json() == {"refined": "draft", "message": FAILED_MESSAGE}


# =============================================================================
# NEWSLETTER TESTS
# =============================================================================

class TestNewsletter:

    def test_generates_newsletter(self, api_client, created_project, mock_client, mock_claude_response):
        post_update(api_client, created_project["id"])
        mock_client.messages.create.return_value = mock_claude_response("# October Newsletter")

        response = api_client.get("/api/newsletter")

        assert response.status_code == 200
        body = response.json()
        assert body["newsletter"] == "# October Newsletter"
        assert body["project_count"] == 1
        assert body["update_count"] == 1
        assert body["generated_at"]

    def test_not_configured_returns_400(self, unconfigured_client):
        response = unconfigured_client.get("/api/newsletter")

        assert response.status_code == 400
        assert "ANTHROPIC_API_KEY" in response.json()["detail"]

    def test_failure_returns_500(self, api_client, created_project, mock_client):
        mock_client.messages.create.side_effect = RuntimeError("overloaded")

        response = api_client.get("/api/newsletter")

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate newsletter"}


# =============================================================================
# SERVICE TESTS
# =============================================================================

class TestService:

    def test_root(self, api_client):
        body = api_client.get("/").json()

        assert body["status"] == "operational"
        assert "newsletter" in body["endpoints"]

    def test_health(self, api_client):
        body = api_client.get("/health").json()

        assert body["api"] == "healthy"
        assert body["storage"] == "connected (memory)"
        assert body["anthropic"] == "configured"
        assert "health" in body["services"]

    def test_health_reports_generator_calls(self, api_client):
        api_client.post("/api/refine-text", json={"text": "draft"})

        body = api_client.get("/health").json()

        assert body["services"]["health"]["anthropic"]["successful_calls"] == 1

    def test_health_without_generator(self, unconfigured_client):
        assert unconfigured_client.get("/health").json()["anthropic"] == "not configured"

    def test_unexpected_error_returns_500(self, test_settings, generator):
        storage = Mock(spec=MemoryStorage)
        storage.backend_name = "memory"
        storage.list_projects.side_effect = RuntimeError("disk on fire")
        app = create_app(storage=storage, generator=generator, settings=test_settings)
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/api/projects")

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal server error"}

    def test_seeds_demo_data(self, memory_storage, generator):
        from pulseboard.config import Settings

        app = create_app(storage=memory_storage, generator=generator, settings=Settings(seed_data=True))
        client = TestClient(app)

        assert len(client.get("/api/projects").json()) == 3
        assert len(client.get("/api/all-statuses").json()) == 5
