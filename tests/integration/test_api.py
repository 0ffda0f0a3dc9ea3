"""API tests through the FastAPI app with a SQLite session"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.deps.common import get_db_session
from app.main import app
from core.schemas import Language
from core.stores import ContentStore, ExternalVideoStore


@pytest.fixture
def client(db_session, seeded_account):
    app.dependency_overrides[get_db_session] = lambda: db_session
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


class TestHealth:

    def test_health_pings_database(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["ok"] is True
        assert response.json()["database"] == "ok"


class TestLinksApi:
    """Test candidate listing, auto-link and manual link endpoints"""

    def test_candidates_for_content(self, client, seeded_account):
        response = client.get("/api/v1/links/candidates", params={
            "account_id": seeded_account,
            "direction": "content-to-youtube",
            "source_id": "c-1",
            "language": "en",
        })

        assert response.status_code == 200
        assert [v["id"] for v in response.json()["videos"]] == ["yv-1"]

    def test_candidates_search_narrows_pool(self, client, seeded_account):
        response = client.get("/api/v1/links/candidates", params={
            "account_id": seeded_account,
            "direction": "youtube-to-content",
            "source_id": "yv-1",
            "search": "pasta",
        })

        body = response.json()
        assert body["language"] == "en"
        assert [c["id"] for c in body["content"]] == ["c-2"]

    def test_auto_link_content(self, client, db_session, seeded_account):
        response = client.post("/api/v1/links/auto", json={
            "account_id": seeded_account,
            "direction": "content-to-youtube",
            "source_id": "c-1",
            "language": "en",
        })

        body = response.json()
        assert response.status_code == 200
        assert body["linked"] is True
        assert body["match"]["external_id"] == "abc123"
        assert body["match"]["score"] == 0.75
        assert ExternalVideoStore(db_session).get("yv-1").linked_content_id == "c-1"

    def test_auto_link_video_uses_channel_language(self, client, db_session, seeded_account):
        response = client.post("/api/v1/links/auto", json={
            "account_id": seeded_account,
            "direction": "youtube-to-content",
            "source_id": "yv-4",
        })

        assert response.json()["match"]["language"] == "es"
        item = ContentStore(db_session).get(seeded_account, "c-1")
        assert item.variant(Language.ES).youtube_link == "https://youtube.com/watch?v=jkl012"
        assert item.variant(Language.EN).youtube_link is None

    def test_auto_link_no_match(self, client, seeded_account):
        response = client.post("/api/v1/links/auto", json={
            "account_id": seeded_account,
            "direction": "content-to-youtube",
            "source_id": "c-2",
            "language": "en",
        })

        assert response.status_code == 200
        assert response.json() == {"linked": False, "match": None, "message": "No suitable match found"}

    def test_auto_link_unknown_source(self, client, seeded_account):
        response = client.post("/api/v1/links/auto", json={
            "account_id": seeded_account,
            "direction": "content-to-youtube",
            "source_id": "c-missing",
        })

        error = response.json()["detail"]["error"]
        assert response.status_code == 422
        assert error["code"] == "CONTENT_NOT_FOUND"
        assert error["trace_id"].startswith("api_")

    def test_link_then_unlink_from_video(self, client, db_session, seeded_account):
        link = client.post("/api/v1/links", json={
            "account_id": seeded_account, "video_id": "yv-2", "content_id": "c-2",
        })
        assert link.status_code == 200
        assert link.json()["language"] == "en"

        unlink = client.request("DELETE", "/api/v1/links", json={
            "account_id": seeded_account, "direction": "youtube-to-content", "video_id": "yv-2",
        })

        assert unlink.status_code == 200
        assert unlink.json()["content_id"] == "c-2"
        assert ExternalVideoStore(db_session).get("yv-2").linked_content_id is None
        assert ContentStore(db_session).get(seeded_account, "c-2").variant(Language.EN).youtube_link is None

    def test_unlink_from_content_requires_content_id(self, client, seeded_account):
        response = client.request("DELETE", "/api/v1/links", json={
            "account_id": seeded_account, "direction": "content-to-youtube", "video_id": "yv-1",
        })
        assert response.status_code == 422
        assert response.json()["detail"]["error"]["code"] == "VALIDATION_FAILED"

    def test_reconcile(self, client, db_session, seeded_account):
        ExternalVideoStore(db_session).update("yv-3", {"content_video_id": "c-deleted"})

        response = client.post("/api/v1/links/reconcile", json={"account_id": seeded_account})

        assert response.status_code == 200
        assert response.json()["orphaned"] == ["yv-3"]
        assert response.json()["cleared"] == 1


class TestPlanningApi:
    """Test gap analysis and schedule preview/commit endpoints"""

    def test_gap_analysis(self, client, seeded_account):
        response = client.post("/api/v1/planning/gap", json={
            "account_id": seeded_account, "language": "en", "period": "1-month", "posts_per_week": 2,
        })

        body = response.json()
        assert response.status_code == 200
        assert body["available_drafts"] == 2
        assert body["shortfall"] == max(0, body["total_needed"] - 2)
        assert [gap["topic"] for gap in body["breakdown"]] == ["Food", "Rust"]

    def test_gap_custom_period_requires_date(self, client, seeded_account):
        response = client.post("/api/v1/planning/gap", json={"account_id": seeded_account, "period": "custom"})
        assert response.status_code == 422
        assert response.json()["detail"]["error"]["code"] == "VALIDATION_FAILED"

    def test_gap_rejects_bad_cadence(self, client, seeded_account):
        response = client.post("/api/v1/planning/gap", json={"account_id": seeded_account, "posts_per_week": 0})
        assert response.status_code == 422

    def test_schedule_preview_then_commit(self, client, db_session, seeded_account):
        preview = client.post("/api/v1/planning/schedule", json={
            "account_id": seeded_account,
            "language": "en",
            "preferences": {"days_of_week": [1, 3, 5], "frequency": 3},
            "start": "2025-01-05T09:00:00Z",
        })

        body = preview.json()
        assert preview.status_code == 200
        assert body["candidates"] == 2
        assert body["unscheduled"] == 0
        assert [a["content_id"] for a in body["assignments"]] == ["c-1", "c-2"]
        # Preview writes nothing
        assert ContentStore(db_session).get(seeded_account, "c-1").variant(Language.EN).publication_date is None

        commit = client.post("/api/v1/planning/schedule/commit", json={
            "account_id": seeded_account, "language": "en", "assignments": body["assignments"],
        })

        assert commit.status_code == 200
        assert commit.json() == {"applied": 2}
        item = ContentStore(db_session).get(seeded_account, "c-1")
        assert item.variant(Language.EN).publication_date == datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)

    def test_commit_rejects_duplicate_assignments(self, client, db_session, seeded_account):
        response = client.post("/api/v1/planning/schedule/commit", json={
            "account_id": seeded_account,
            "language": "en",
            "assignments": [
                {"content_id": "c-1", "date": "2025-01-06T09:00:00Z"},
                {"content_id": "c-1", "date": "2025-01-08T09:00:00Z"},
            ],
        })

        assert response.status_code == 422
        assert response.json()["detail"]["error"]["code"] == "DUPLICATE_ASSIGNMENT"
        assert ContentStore(db_session).get(seeded_account, "c-1").variant(Language.EN).publication_date is None

    def test_commit_unknown_record(self, client, seeded_account):
        response = client.post("/api/v1/planning/schedule/commit", json={
            "account_id": seeded_account,
            "language": "en",
            "assignments": [{"content_id": "c-missing", "date": "2025-01-06T09:00:00Z"}],
        })
        assert response.status_code == 422
        assert response.json()["detail"]["error"]["code"] == "CONTENT_NOT_FOUND"
