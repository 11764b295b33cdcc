"""Token counting and trimming for prompt context.

Uses ``tiktoken`` so README excerpts are cut by model tokens, not characters.
"""

from __future__ import annotations

import tiktoken

_ENCODING_NAME = "cl100k_base"
TRUNCATION_MARKER = "\n[… truncated to fit token budget]"

_encoder: tiktoken.Encoding | None = None


def _get_encoder() -> tiktoken.Encoding:
    global _encoder  # noqa: PLW0603
    if _encoder is None:
        _encoder = tiktoken.get_encoding(_ENCODING_NAME)
    return _encoder


def count_tokens(text: str) -> int:
    """Return the token count for *text* under cl100k_base."""
    return len(_get_encoder().encode(text))


def fit_to_budget(text: str, max_tokens: int) -> str:
    """Return *text* unchanged if it fits, else cut it at a line boundary.

    A cut text ends with :data:`TRUNCATION_MARKER`.
    """
    if max_tokens <= 0:
        return ""
    tokens = _get_encoder().encode(text)
    if len(tokens) <= max_tokens:
        return text

    truncated = _get_encoder().decode(tokens[:max_tokens])
    last_nl = truncated.rfind("\n")
    if last_nl > len(truncated) // 2:
        truncated = truncated[: last_nl + 1]
    return truncated.rstrip() + TRUNCATION_MARKER
