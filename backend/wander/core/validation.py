"""
Validation of itinerary creation payloads.

The request body is checked field by field before any value is trusted, so
each failure maps to a specific, user-actionable error. The result is a
normalized request that the transactional writer can persist as-is.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from wander.core.errors import (
    InputValidationError,
    InvalidCoordinatesError,
    InvalidPayloadError,
    InvalidPinFieldError,
    InvalidPinTitleError,
    InvalidTitleError,
    NoPinsError,
)
from wander.core.pins import PinIcon, PinType, normalize_type_and_icon

logger = logging.getLogger(__name__)

# Column widths in wander.db.models
MAX_TITLE_LENGTH = 200
MAX_PIN_TITLE_LENGTH = 300
MAX_DESCRIPTION_LENGTH = 5000

_datetime_adapter = TypeAdapter(datetime)


class ValidatedPin(BaseModel):
    latitude: float
    longitude: float
    title: str
    description: Optional[str] = None
    type: PinType = PinType.CUSTOM
    icon: PinIcon = PinIcon.PIN
    order_index: int
    day: Optional[int] = None
    date: Optional[datetime] = None
    google_place_id: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)


class ValidatedItinerary(BaseModel):
    title: str
    description: Optional[str] = None
    is_public: bool = False
    pins: List[ValidatedPin]


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_integer(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def clean_text(value: Any) -> Optional[str]:
    """Trim a string; blank or non-string values become None"""
    if not isinstance(value, str):
        return None
    stripped = value.strip()
    return stripped or None


def _parse_pin_date(value: Any, position: int) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise InvalidPinFieldError(f"Pin {position + 1} has an invalid date")
    try:
        parsed = _datetime_adapter.validate_python(value.strip())
    except ValidationError:
        raise InvalidPinFieldError(f"Pin {position + 1} has an invalid date")
    return parsed


def _validate_pin(raw: Any, position: int) -> ValidatedPin:
    if not isinstance(raw, dict):
        raise InvalidCoordinatesError()

    latitude = raw.get("latitude")
    longitude = raw.get("longitude")
    if not (_is_number(latitude) and _is_number(longitude)):
        raise InvalidCoordinatesError()
    if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
        raise InvalidCoordinatesError("Pin coordinates are out of range")

    title = clean_text(raw.get("title"))
    if title is None:
        raise InvalidPinTitleError()
    if len(title) > MAX_PIN_TITLE_LENGTH:
        raise InvalidPinTitleError(
            f"Pin {position + 1} title must be at most {MAX_PIN_TITLE_LENGTH} characters"
        )

    description = clean_text(raw.get("description"))
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidPinFieldError(
            f"Pin {position + 1} description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )

    order_index = raw.get("orderIndex")
    if order_index is None:
        order_index = position
    elif not _is_integer(order_index):
        raise InvalidPinFieldError(f"Pin {position + 1} has an invalid orderIndex")

    day = raw.get("day")
    if day is not None and not _is_integer(day):
        raise InvalidPinFieldError(f"Pin {position + 1} has an invalid day")

    pin_type, pin_icon = normalize_type_and_icon(raw.get("type"), raw.get("icon"))

    return ValidatedPin(
        latitude=float(latitude),
        longitude=float(longitude),
        title=title,
        description=description,
        type=pin_type,
        icon=pin_icon,
        order_index=int(order_index),
        day=int(day) if day else None,
        date=_parse_pin_date(raw.get("date"), position),
    )


def validate_itinerary_payload(payload: Any) -> ValidatedItinerary:
    """
    Validate and normalize a manual itinerary creation payload.

    Raises an InputValidationError subclass naming the first problem found:
    title, then pin presence, then per pin coordinates and title. Text longer
    than its column is rejected rather than truncated.
    """
    if not isinstance(payload, dict):
        raise InvalidPayloadError()

    title = clean_text(payload.get("title"))
    if title is None:
        raise InvalidTitleError()
    if len(title) > MAX_TITLE_LENGTH:
        raise InvalidTitleError(f"Title must be at most {MAX_TITLE_LENGTH} characters")

    description = clean_text(payload.get("description"))
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        raise InputValidationError(
            f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )

    raw_pins = payload.get("pins")
    if not isinstance(raw_pins, list) or not raw_pins:
        raise NoPinsError()

    pins = [_validate_pin(raw, position) for position, raw in enumerate(raw_pins)]

    is_public = payload.get("isPublic", False)

    return ValidatedItinerary(
        title=title,
        description=description,
        is_public=is_public is True,
        pins=pins,
    )
