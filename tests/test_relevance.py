"""Tests for lexical relevance scoring."""

import pytest

from advanced_reason.core.relevance import coverage, relevance


class TestRelevance:
    def test_case_and_order_insensitive(self) -> None:
        assert relevance("Paris France", "france paris") > 0.1
        assert relevance("Paris France", "france paris") == 1.0

    def test_partial_overlap(self) -> None:
        # 2 shared words out of max(2, 4)
        assert relevance("capital france", "the capital of france") == pytest.approx(0.5)

    def test_no_overlap(self) -> None:
        assert relevance("apples", "oranges and pears") == 0.0

    @pytest.mark.parametrize(
        "query,content",
        [("", ""), ("", "some content"), ("some query", ""), ("   ", "word")],
    )
    def test_empty_input_scores_zero(self, query: str, content: str) -> None:
        assert relevance(query, content) == 0.0

    def test_repeated_words_do_not_count_extra(self) -> None:
        """Word sets, not multisets: repetition never changes the score."""
        assert relevance("cache cache cache", "cache miss") == relevance("cache", "cache miss")
        assert relevance("cache", "cache cache miss miss") == relevance("cache", "cache miss")

    def test_symmetric(self) -> None:
        a, b = "the quick brown fox", "a quick red fox jumps"
        assert relevance(a, b) == relevance(b, a)

    def test_deterministic(self) -> None:
        assert relevance("x y z", "z y w") == relevance("x y z", "z y w")

    def test_split_on_any_whitespace(self) -> None:
        assert relevance("alpha\tbeta", "beta\nalpha") == 1.0


class TestCoverage:
    def test_fraction_of_query_words_found(self) -> None:
        assert coverage("deploy rollback", "how to deploy a service safely") == pytest.approx(0.5)

    def test_long_content_not_diluted(self) -> None:
        content = "deployment workflow " + " ".join(f"filler{i}" for i in range(50)) + " deploy"
        assert coverage("deploy", content) == 1.0

    def test_empty_query(self) -> None:
        assert coverage("", "anything") == 0.0
