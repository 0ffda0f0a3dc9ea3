"""Integration tests for the SQL link store"""
import pytest

from core import models
from core.schemas import Language
from core.stores import ContentFilters, ContentStore, ExternalVideoStore, VideoFilters
from linking.link_store import LinkCommitError, SqlLinkStore
from linking.reconcile import LinkReconciler


class TestSqlLinkStore:
    """Test both sides of a link are written and cleared together"""

    def test_set_link_writes_both_sides(self, db_session, seeded_account):
        SqlLinkStore(db_session).set_link("yv-1", "c-1", Language.EN)

        video = ExternalVideoStore(db_session).get("yv-1")
        item = ContentStore(db_session).get(seeded_account, "c-1")
        assert video.linked_content_id == "c-1"
        assert item.variant(Language.EN).youtube_link == "https://youtube.com/watch?v=abc123"
        assert item.variant(Language.ES).youtube_link is None

    def test_set_link_unknown_video(self, db_session, seeded_account):
        with pytest.raises(LinkCommitError) as exc_info:
            SqlLinkStore(db_session).set_link("yv-missing", "c-1", Language.EN)
        assert exc_info.value.code == "VIDEO_NOT_FOUND"

    def test_unlink_one_language(self, db_session, seeded_account):
        store = SqlLinkStore(db_session)
        store.set_link("yv-1", "c-1", Language.EN)
        store.set_link("yv-4", "c-1", Language.ES)

        store.unlink("yv-1", "c-1", [Language.EN])

        item = ContentStore(db_session).get(seeded_account, "c-1")
        assert ExternalVideoStore(db_session).get("yv-1").linked_content_id is None
        assert item.variant(Language.EN).youtube_link is None
        assert item.variant(Language.ES).youtube_link.endswith("jkl012")

    def test_find_by_external_id(self, db_session, seeded_account):
        video = SqlLinkStore(db_session).find_by_external_id(seeded_account, "def456")
        assert video.id == "yv-2"
        assert SqlLinkStore(db_session).find_by_external_id(seeded_account, "nope") is None

    def test_find_orphaned(self, db_session, seeded_account):
        store = SqlLinkStore(db_session)
        store.set_link("yv-1", "c-1", Language.EN)
        ExternalVideoStore(db_session).update("yv-2", {"content_video_id": "c-deleted"})

        assert [v.id for v in store.find_orphaned(seeded_account)] == ["yv-2"]

    def test_reconcile_clears_orphan(self, db_session, seeded_account):
        store = SqlLinkStore(db_session)
        store.set_link("yv-1", "c-1", Language.EN)
        ExternalVideoStore(db_session).update("yv-2", {"content_video_id": "c-deleted"})

        report = LinkReconciler(store).run(seeded_account)

        assert report.orphaned == ["yv-2"]
        assert report.stale == []
        assert report.cleared == 1
        assert ExternalVideoStore(db_session).get("yv-2").linked_content_id is None
        assert ExternalVideoStore(db_session).get("yv-1").linked_content_id == "c-1"


class TestStores:
    """Test store listing and snapshot upserts"""

    def test_unscheduled_drafts_filter(self, db_session, seeded_account):
        items = ContentStore(db_session).list(
            seeded_account,
            ContentFilters(language=Language.EN, unscheduled_drafts_only=True),
        )
        assert [i.id for i in items] == ["c-1", "c-2"]

    def test_upsert_keeps_links_and_rows(self, db_session, seeded_account):
        store = ExternalVideoStore(db_session)
        SqlLinkStore(db_session).set_link("yv-1", "c-1", Language.EN)
        rows = [
            {"account_id": seeded_account, "channel_id": "UC_EN", "video_id": "abc123",
             "title": "Intro Rust Programming Tutorial (2025)", "view_count": 2000, "is_short": False},
            {"account_id": seeded_account, "channel_id": "UC_EN", "video_id": "new999",
             "title": "Brand New Upload", "view_count": 5, "is_short": True},
        ]

        store.upsert_snapshots([dict(r) for r in rows])
        store.upsert_snapshots([dict(r) for r in rows])

        assert db_session.query(models.YouTubeVideo).count() == 5
        refreshed = store.get("yv-1")
        assert refreshed.title == "Intro Rust Programming Tutorial (2025)"
        assert refreshed.view_count == 2000
        assert refreshed.linked_content_id == "c-1"

    def test_channel_language(self, db_session, seeded_account):
        store = ContentStore(db_session)
        assert store.channel_language(seeded_account, "UC_ES") == Language.ES
        assert store.channel_language(seeded_account, "UC_OTHER") is None

    def test_list_channel_videos_newest_first(self, db_session, seeded_account):
        store = ExternalVideoStore(db_session)
        store.update("yv-2", {"content_video_id": "c-2"})

        assert [v.id for v in store.list("UC_EN")] == ["yv-1", "yv-2", "yv-3"]
        assert [v.id for v in store.list("UC_EN", VideoFilters(unlinked_only=True))] == ["yv-1", "yv-3"]

    def test_clear_content_links(self, db_session, seeded_account):
        store = SqlLinkStore(db_session)
        store.set_link("yv-1", "c-1", Language.EN)
        store.set_link("yv-4", "c-1", Language.ES)

        store.clear_content_links("c-1", [Language.ES])

        item = ContentStore(db_session).get(seeded_account, "c-1")
        assert item.variant(Language.EN).youtube_link is not None
        assert item.variant(Language.ES).youtube_link is None


class TestSetLinkMissingContent:

    def test_unknown_content_rolls_back(self, db_session, seeded_account):
        with pytest.raises(LinkCommitError) as exc_info:
            SqlLinkStore(db_session).set_link("yv-1", "c-missing", Language.EN)

        assert exc_info.value.code == "CONTENT_NOT_FOUND"
        assert ExternalVideoStore(db_session).get("yv-1").linked_content_id is None
