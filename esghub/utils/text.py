from __future__ import annotations
from typing import Tuple

TRUNCATION_NOTE = "[Document truncated: showing the first {shown} of {total} characters.]"


def clip_text(text: str, limit: int) -> Tuple[str, bool]:
    """Return (text clipped to `limit` characters, whether clipping happened)."""
    if limit <= 0 or len(text) <= limit:
        return text, False
    return text[:limit], True


def clip_with_note(text: str, limit: int) -> str:
    clipped, was_clipped = clip_text(text, limit)
    if not was_clipped:
        return clipped
    return clipped.rstrip() + "\n\n" + TRUNCATION_NOTE.format(shown=limit, total=len(text))
