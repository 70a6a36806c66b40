"""Parsing helpers shared by the eligibility heuristic."""

from __future__ import annotations

import re
from datetime import date, datetime
from typing import Iterable, Optional


GRADE_PATTERN = re.compile(r"G([1-7])", re.IGNORECASE)
YEARS_PATTERN = re.compile(r"(\d+)(?:\+)?\s*years?", re.IGNORECASE)
CERT_NAME_PATTERN = re.compile(r"ISO \d+|[A-Za-z]+ certification", re.IGNORECASE)
TRAILING_NUMBER_PATTERN = re.compile(r"(\d+)\s*$")


def contains_any(text: str, needles: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(needle in lowered for needle in needles)


def parse_company_grade(value: Optional[str]) -> Optional[int]:
    """'G5' -> 5. Returns None when no trailing number is present."""
    if not value:
        return None
    match = TRAILING_NUMBER_PATTERN.search(str(value).strip())
    return int(match.group(1)) if match else None


def parse_int(value: object) -> Optional[int]:
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return int(value)
        except (ValueError, OverflowError):
            return None
    match = re.search(r"\d+", str(value))
    return int(match.group()) if match else None


def parse_date(value: object) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.fromisoformat(str(value).strip()[:10]).date()
    except ValueError:
        return None
