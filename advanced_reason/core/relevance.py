"""Lexical relevance between a query and stored text.

Both measures work on *distinct* lowercase whitespace-separated words, so
word order and repetition never change a score.  Empty input on either
side scores 0.0.
"""

from __future__ import annotations


def _words(text: str) -> set[str]:
    return set(text.lower().split())


def relevance(query: str, content: str) -> float:
    """Shared-word ratio: ``|Q ∩ C| / max(|Q|, |C|)``.

    Symmetric in its arguments and bounded to [0, 1].
    """
    query_words = _words(query)
    content_words = _words(content)
    if not query_words or not content_words:
        return 0.0
    common = query_words & content_words
    return len(common) / max(len(query_words), len(content_words))


def coverage(query: str, content: str) -> float:
    """Fraction of the query's words that appear in *content*.

    Used where the searched text is much longer than the query, e.g.
    system JSON descriptions, and ``relevance`` would be diluted.
    """
    query_words = _words(query)
    content_words = _words(content)
    if not query_words or not content_words:
        return 0.0
    return len(query_words & content_words) / len(query_words)
