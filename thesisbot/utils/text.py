"""Text helpers for search results, backend replies and upload filenames."""

import html
import re

JSON_FENCE_OPEN = "```json\n"
JSON_FENCE_CLOSE = "\n```"

OPENALEX_ID_PREFIX = "https://openalex.org/"

PDF_TITLE_CHARS = 50


def strip_json_fence(text: str) -> str:
    """Remove the markdown fence the backend wraps around JSON replies.

    Only the first exact ```` ```json\\n ```` and ```` \\n``` ```` are
    removed; other fence spellings are left untouched.
    """
    return text.replace(JSON_FENCE_OPEN, "", 1).replace(JSON_FENCE_CLOSE, "", 1)


def clean_title(text: str) -> str:
    """Clean title by removing HTML tags and normalizing whitespace.

    Search APIs occasionally return titles with inline markup
    (e.g. ``<i>in vivo</i>``) and HTML entities.

    Args:
        text: Raw title string

    Returns:
        Cleaned title string, or "(no title)" if empty
    """
    if not text or not isinstance(text, str):
        return "(no title)"

    text = re.sub(r"<[^>]+>", " ", text)
    text = html.unescape(text)
    text = " ".join(text.split()).strip()

    return text or "(no title)"


def short_openalex_id(value: str) -> str:
    """``https://openalex.org/W123`` → ``W123``; other values pass through."""
    if value and value.startswith(OPENALEX_ID_PREFIX):
        return value[len(OPENALEX_ID_PREFIX):]
    return value or ""


def pdf_filename(paper_id: str, title: str) -> str:
    """Upload filename for a paper: ``<paperId>_<first 50 chars of title>.pdf``."""
    return f"{paper_id}_{title[:PDF_TITLE_CHARS]}.pdf"


def split_name(name: str) -> tuple[str, str]:
    """Split a display name into (given names, last name) on the last space."""
    parts = name.split()
    if not parts:
        return "", ""
    return " ".join(parts[:-1]), parts[-1]
