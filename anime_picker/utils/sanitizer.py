"""Text cleanup helpers for AniList payloads.

AniList descriptions are HTML-ish (`<br>`, `<i>`, `<b>`, entities), so
they are reduced to plain text before being returned to the UI.
"""
from __future__ import annotations

from markupsafe import Markup


def strip_html(text: str | None) -> str:
    """Remove all markup tags from a string.

    Entities are unescaped and whitespace is collapsed to single spaces.

    Args:
        text: Raw string potentially containing HTML tags.

    Returns:
        Clean text, or an empty string for missing input.

    Examples:
        >>> strip_html("<p>Great <b>show</b></p>")
        'Great show'
        >>> strip_html(None)
        ''
    """
    if not text:
        return ""
    return Markup(text).striptags()
