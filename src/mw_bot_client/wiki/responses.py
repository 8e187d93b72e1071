"""
Helpers for destructuring action API responses.

Page collections arrive as a list with ``formatversion=2`` and as a mapping
keyed by page id otherwise; both shapes are accepted.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional


def first_page(pages: Any) -> Optional[Dict[str, Any]]:
    """Return the first page entry of a ``query.pages`` value, or None."""
    if isinstance(pages, dict):
        pages = list(pages.values())
    if not pages:
        return None
    return pages[0]


def titles_of(entries: Optional[Iterable[Dict[str, Any]]], key: str = "title") -> List[Any]:
    """Flatten a list of result entries to one field per entry."""
    return [entry.get(key) for entry in entries or []]
