"""Unit tests for link reconciliation"""
from core.schemas import Language
from linking.reconcile import LinkReconciler, is_plausible_link


class TestIsPlausibleLink:

    def test_shared_words(self, make_content, make_video):
        item = make_content("c-1", en_title="Intro to Rust Programming")
        assert is_plausible_link(make_video("v", title="Rust Programming Tutorial"), item)

    def test_matches_spanish_or_internal_title(self, make_content, make_video):
        video = make_video("v", title="Introducción a Rust")
        assert is_plausible_link(video, make_content("c-1", en_title="Pasta", es_title="Introducción a Rust"))
        assert is_plausible_link(video, make_content("c-2", internal_title="rust"))

    def test_unrelated_titles(self, make_content, make_video):
        item = make_content("c-1", en_title="Cooking Pasta at Home", internal_title="pasta")
        assert not is_plausible_link(make_video("v", title="Rust Programming Tutorial"), item)

    def test_record_without_titles_is_kept(self, make_content, make_video):
        assert is_plausible_link(make_video("v", title="Anything"), make_content("c-1"))

    def test_identical_title_of_short_words(self, make_content, make_video):
        """Titles with no word longer than two characters still match themselves"""
        assert is_plausible_link(make_video("v", title="Go vs C"), make_content("c-1", en_title="Go vs C"))

    def test_title_contained_despite_punctuation(self, make_content, make_video):
        assert is_plausible_link(make_video("v", title="RUST!"), make_content("c-1", en_title="Rust"))
        assert is_plausible_link(make_video("v", title="Go"), make_content("c-1", es_title="Go en 5 min"))

    def test_reconciler_keeps_exact_short_title_link(self, make_content, make_video, memory_link_store):
        store = memory_link_store(
            [make_video("v-1", title="Go vs C", linked_content_id="c-1")],
            [make_content("c-1", en_title="Go vs C")],
        )

        report = LinkReconciler(store).run("acct-1")

        assert report.stale == []
        assert store.videos["v-1"].linked_content_id == "c-1"


class TestLinkReconciler:
    """Test orphaned and stale link detection"""

    def _store(self, make_content, make_video, memory_link_store):
        items = [
            make_content("c-ok", en_title="Intro to Rust Programming"),
            make_content("c-stale", en_title="Cooking Pasta at Home"),
        ]
        videos = [
            make_video("v-ok", title="Rust Programming Tutorial", linked_content_id="c-ok"),
            make_video("v-stale", title="Gardening for Beginners", linked_content_id="c-stale"),
            make_video("v-orphan", title="Rust Programming", linked_content_id="c-deleted"),
            make_video("v-free", title="Unlinked"),
        ]
        return memory_link_store(videos, items)

    def test_clears_orphaned_and_stale(self, make_content, make_video, memory_link_store):
        store = self._store(make_content, make_video, memory_link_store)

        report = LinkReconciler(store).run("acct-1", trace_id="test_trace")

        assert report.checked == 3
        assert report.orphaned == ["v-orphan"]
        assert report.stale == ["v-stale"]
        assert report.cleared == 2
        assert store.videos["v-ok"].linked_content_id == "c-ok"
        assert store.videos["v-orphan"].linked_content_id is None
        assert store.videos["v-stale"].linked_content_id is None

    def test_dry_run_changes_nothing(self, make_content, make_video, memory_link_store):
        store = self._store(make_content, make_video, memory_link_store)

        report = LinkReconciler(store).run("acct-1", dry_run=True)

        assert report.dry_run
        assert report.cleared == 0
        assert len(report.orphaned) + len(report.stale) == 2
        assert store.videos["v-orphan"].linked_content_id == "c-deleted"

    def test_content_side_untouched(self, make_content, make_video, memory_link_store):
        store = self._store(make_content, make_video, memory_link_store)
        store.items["c-stale"].variant(Language.EN).youtube_link = "https://youtube.com/watch?v=ext-v-stale"

        LinkReconciler(store).run("acct-1")

        assert store.items["c-stale"].variant(Language.EN).youtube_link is not None

    def test_find_orphaned(self, make_content, make_video, memory_link_store):
        store = self._store(make_content, make_video, memory_link_store)
        assert [v.id for v in store.find_orphaned("acct-1")] == ["v-orphan"]
