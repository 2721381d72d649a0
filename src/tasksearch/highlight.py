#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Split text into highlighted and plain segments for display."""

from __future__ import annotations

from tasksearch.types import HighlightSegment


def highlight_term(text: str | None, term: str | None) -> list[HighlightSegment]:
    """Mark every case-insensitive, non-overlapping occurrence of ``term``.

    The original casing of ``text`` is preserved in every segment. Without
    text or a term the input comes back as a single plain segment.

    Examples
    --------
    >>> [s.text for s in highlight_term("Fix the bug", "BUG")]
    ['Fix the ', 'bug']

    """
    if not text or not term:
        return [HighlightSegment(text or "")]

    folded_text = text.lower()
    folded_term = term.lower()
    segments: list[HighlightSegment] = []
    cursor = 0
    index = folded_text.find(folded_term)
    while index != -1:
        if index > cursor:
            segments.append(HighlightSegment(text[cursor:index]))
        end = index + len(folded_term)
        segments.append(HighlightSegment(text[index:end], highlighted=True))
        cursor = end
        index = folded_text.find(folded_term, cursor)

    if cursor < len(text):
        segments.append(HighlightSegment(text[cursor:]))
    return segments


def render_highlighted(segments: list[HighlightSegment], open_marker: str = "<<", close_marker: str = ">>") -> str:
    """Join segments back into one string, wrapping highlights in markers."""
    return "".join(
        f"{open_marker}{segment.text}{close_marker}" if segment.highlighted else segment.text for segment in segments
    )
