"""Unit tests for title similarity scoring"""
import pytest

from linking.similarity import score, tokenize


class TestTokenize:
    """Test word extraction from titles"""

    def test_short_words_dropped(self):
        """Words of two characters or fewer are ignored"""
        assert tokenize("Intro to Rust in 10 min") == frozenset({"intro", "rust", "min"})

    def test_case_folded(self):
        assert tokenize("RUST Rust rust") == frozenset({"rust"})

    @pytest.mark.parametrize("text", [None, "", "   ", "a to be"])
    def test_no_tokens(self, text):
        assert tokenize(text) == frozenset()


class TestScore:
    """Test Jaccard similarity between titles"""

    def test_identical_titles(self):
        assert score("Intro to Rust Programming", "Intro to Rust Programming") == 1.0

    def test_disjoint_titles(self):
        assert score("Intro to Rust Programming", "Cooking Pasta at Home") == 0.0

    def test_partial_overlap(self):
        """Three shared words out of four distinct"""
        assert score("Intro to Rust Programming", "Intro Rust Programming Tutorial") == pytest.approx(0.75)

    def test_reordered_words_overlap_only_on_exact_tokens(self):
        """'intro' and 'introduction' are different tokens"""
        assert score("Intro to Rust", "Rust Introduction Tutorial") == pytest.approx(0.25)

    def test_symmetric(self):
        a, b = "Rust async runtime deep dive", "Deep dive into the Rust borrow checker"
        assert score(a, b) == score(b, a)

    def test_case_insensitive(self):
        assert score("RUST PROGRAMMING", "rust programming") == 1.0

    @pytest.mark.parametrize("a,b", [(None, "Rust"), ("Rust", None), ("", "Rust"), ("a b", "a b")])
    def test_empty_side_scores_zero(self, a, b):
        """No tokens on either side means no similarity, even for equal strings"""
        assert score(a, b) == 0.0

    def test_score_in_unit_interval(self):
        value = score("one two three four", "three four five six seven")
        assert 0.0 <= value <= 1.0
        assert value == pytest.approx(2 / 7)
