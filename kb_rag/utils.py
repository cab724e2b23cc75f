"""Utility functions for ingestion and retrieval."""

from __future__ import annotations

import os
import re
from typing import Iterable, List, Optional

from .schemas import Category, SourceType


def safe_relpath(path: str, base: str) -> str:
    """Get relative path, falling back to absolute on error."""
    try:
        return os.path.relpath(path, base)
    except ValueError:
        return path


def normalize_text(text: str) -> str:
    """Normalize whitespace in text."""
    return " ".join(text.replace("\u00a0", " ").split())


def iter_batches(items: List, batch_size: int) -> Iterable[List]:
    """Yield batches of items."""
    if batch_size <= 0:
        raise ValueError("batch_size must be positive")
    for start in range(0, len(items), batch_size):
        yield items[start : start + batch_size]


def build_source_id(source_type: SourceType, origin: str) -> str:
    """
    Build a stable source ID from the origin kind and origin path.

    The same logical document always maps to the same ID, so a later
    ingestion run overwrites instead of duplicating it.
    """
    origin = origin.strip().replace("\\", "/")
    return f"{source_type.value}:{origin}"


_CASE_STUDY_TITLE = ("case", "example")
_PRICING_TITLE = ("pricing", "price", "cost")
_SERVICE_TITLE = ("service", "product", "offering")

_CASE_STUDY_CONTENT = ("case study",)
_PRICING_CONTENT = ("pricing",)
_SERVICE_CONTENT = ("offering", "offers", "our services")

# Dollar amounts such as "$2,500" or "$ 75"
_PRICE_RE = re.compile(r"\$\s?\d")


def _has_marker(text: str, markers: Iterable[str]) -> bool:
    return any(marker in text for marker in markers)


def infer_category(title_or_path: Optional[str], content: str) -> Category:
    """
    Classify a document from its title (or path) and body.

    Order matters: case-study markers win over pricing markers, which win
    over service markers. Anything else is technical.
    """
    title = (title_or_path or "").lower()
    body = content.lower()

    if _has_marker(title, _CASE_STUDY_TITLE) or _has_marker(body, _CASE_STUDY_CONTENT):
        return Category.CASE_STUDY
    if (
        _has_marker(title, _PRICING_TITLE)
        or _has_marker(body, _PRICING_CONTENT)
        or _PRICE_RE.search(body)
    ):
        return Category.PRICING
    if _has_marker(title, _SERVICE_TITLE) or _has_marker(body, _SERVICE_CONTENT):
        return Category.SERVICE
    return Category.TECHNICAL


def count_occurrences(text: str, needle: str) -> int:
    """Count non-overlapping, case-insensitive occurrences of needle in text."""
    if not needle:
        return 0
    return text.lower().count(needle.lower())
