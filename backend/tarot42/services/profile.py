# tarot42/services/profile.py
"""
Profile update mapping and completeness scoring.

Both operate on plain values so they can be tested without a database.
"""
from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from tarot42.schemas.profile import ProfileUpdateIn

# Profile fields that count toward completeness, in display order.
COMPLETENESS_FIELDS = (
    "zodiac_sign",
    "selected_element",
    "personal_goals",
    "focus_area",
    "gender",
    "age_range",
    "birth_date_time",
)

_TRIMMED_STRING_FIELDS = (
    "zodiac_sign",
    "personal_goals",
    "additional_details",
    "focus_area",
    "gender",
    "age_range",
    "birth_date_time",
)


class InvalidProfileUpdate(ValueError):
    pass


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def parse_birthday(raw: str) -> datetime:
    """
    Accepts an ISO date (``1990-04-12``) or datetime. Naive values are UTC.
    """
    value = raw.strip()
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        try:
            parsed = datetime.combine(date.fromisoformat(value), datetime.min.time())
        except ValueError:
            raise InvalidProfileUpdate("Invalid birthday format.") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def build_profile_update(payload: ProfileUpdateIn) -> dict[str, Any]:
    """
    Map a profile payload onto ``User`` column values.

    Blank strings are ignored rather than clearing the stored value.
    ``selectedElement`` (legacy) takes precedence over ``element``.

    Raises:
        InvalidProfileUpdate: unparseable birthday, or nothing to update
    """
    data: dict[str, Any] = {}

    for field in _TRIMMED_STRING_FIELDS:
        cleaned = _clean(getattr(payload, field))
        if cleaned is not None:
            data[field] = cleaned

    element = _clean(payload.selected_element) or _clean(payload.element)
    if element is not None:
        data["selected_element"] = element

    if payload.include_time is not None:
        data["include_time"] = payload.include_time

    if payload.birthday is not None and payload.birthday.strip():
        data["birthday"] = parse_birthday(payload.birthday)

    if not data:
        raise InvalidProfileUpdate("No update data provided.")
    return data


def _is_filled(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def compute_completeness(values: dict[str, Any]) -> dict[str, int]:
    total = len(COMPLETENESS_FIELDS)
    filled = sum(1 for field in COMPLETENESS_FIELDS if _is_filled(values.get(field)))
    percent = (Decimal(filled) * 100 / Decimal(total)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return {
        "completeness": int(percent),
        "total_fields": total,
        "filled_fields": filled,
        "missing_fields": total - filled,
    }
