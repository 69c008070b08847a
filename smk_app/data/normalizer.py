"""
SMK API item normalization.

Turns raw search API items into Artwork records. Items without any
production data, object name or acquisition date are rejected, as are items
whose acquisition year cannot be determined.
"""

import re
from collections import Counter
from typing import Any, Iterable, Optional

from .models import Artwork, DepictedPerson, Gender

_YEAR_RE = re.compile(r"\d{4}")


def normalize_gender(raw_gender: Optional[str]) -> str:
    """Map API gender values to Male, Female or Unknown."""
    if not raw_gender:
        return Gender.UNKNOWN

    normalized = raw_gender.lower().strip()
    if normalized in ("male", "m"):
        return Gender.MALE
    if normalized in ("female", "f"):
        return Gender.FEMALE

    return Gender.UNKNOWN


def extract_year(date_string: Optional[str]) -> Optional[int]:
    """First 4-digit run in a date string, as an int."""
    if not date_string or not isinstance(date_string, str):
        return None

    match = _YEAR_RE.search(date_string)
    return int(match.group(0)) if match else None


def validate_artwork(item: Any) -> bool:
    """True if the raw item carries enough data to be worth normalizing."""
    if not isinstance(item, dict):
        return False
    return bool(item.get("production") or item.get("object_names") or item.get("acquisition_date"))


def _first_dict(value: Any) -> dict[str, Any]:
    """First element of a list field, or {} when the field is missing or malformed."""
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return {}


def _parse_production_year(production_date: Any) -> Optional[int]:
    if isinstance(production_date, list):
        production_date = production_date[0] if production_date else None
    if not isinstance(production_date, dict):
        return None
    start = production_date.get("start")
    if not start:
        return None
    return extract_year(str(start))


def normalize_item(item: Any) -> Optional[Artwork]:
    """
    Normalize a single raw API item.

    Args:
        item: Raw item from the search API

    Returns:
        Artwork, or None if the item is rejected
    """
    if not validate_artwork(item):
        return None

    acquisition_year = extract_year(item.get("acquisition_date"))
    if acquisition_year is None:
        return None

    production = _first_dict(item.get("production"))
    first_name = _first_dict(item.get("object_names"))

    techniques = item.get("techniques")
    materials = item.get("materials")
    exhibitions = item.get("exhibitions")

    credit_line = item.get("credit_line")
    if not isinstance(credit_line, str) or not credit_line.strip():
        credit_line = "Unknown"

    depicted = []
    for person in item.get("content_person_full") or []:
        if not isinstance(person, dict):
            continue
        depicted.append(DepictedPerson(
            name=person.get("full_name") or "Unknown",
            gender=normalize_gender(person.get("gender")),
            nationality=person.get("nationality"),
        ))

    return Artwork(
        gender=normalize_gender(production.get("creator_gender")),
        nationality=production.get("creator_nationality") or "Unknown",
        object_type=first_name.get("name") or "Unknown",
        acquisition_year=acquisition_year,
        techniques=tuple(techniques) if isinstance(techniques, list) else (),
        materials=tuple(materials) if isinstance(materials, list) else (),
        production_year=_parse_production_year(item.get("production_date")),
        exhibitions=len(exhibitions) if isinstance(exhibitions, list) else 0,
        on_display=bool(item.get("on_display")),
        credit_line=credit_line,
        depicted_persons=tuple(depicted),
    )


def normalize_items(items: Iterable[Any]) -> list[Artwork]:
    """Normalize a page of raw items, dropping rejected ones."""
    return [artwork for artwork in map(normalize_item, items) if artwork is not None]


def group_by_year(records: Iterable[Artwork], gender: str) -> dict[int, int]:
    """Count acquisitions per year for one gender."""
    return dict(Counter(r.acquisition_year for r in records if r.gender == gender))
