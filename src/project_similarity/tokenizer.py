"""
Tokenizer adapter for Japanese free text.

Project descriptions have no whitespace word boundaries, so splitting on spaces would
treat a whole sentence as one token. TinySegmenter (a compact statistical segmenter)
splits the text into word-like units instead.

Usage:
    from project_similarity.tokenizer import tokenize

    tokenize("市道の舗装補修を実施する")
"""

from __future__ import annotations

from functools import cache

from tinysegmenter import TinySegmenter


class JapaneseTokenizer:
    """
    Callable wrapper around TinySegmenter.

    Applies:
    - Morphological segmentation (TinySegmenter)
    - Removal of empty and whitespace-only tokens

    Tokens are returned as segmented; no lowercasing or normalization.
    """

    def __init__(self):
        self._segmenter = TinySegmenter()

    def __call__(self, text: str) -> list[str]:
        """Tokenize text."""
        if not text or not text.strip():
            return []
        return [token for token in self._segmenter.tokenize(text) if token.strip()]


@cache
def _get_tokenizer() -> JapaneseTokenizer:
    return JapaneseTokenizer()


def tokenize(text: str) -> list[str]:
    """Tokenizes the input text into a list of terms."""
    return _get_tokenizer()(text)
