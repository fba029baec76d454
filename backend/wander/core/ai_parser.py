"""
Decoding of model output into a structured itinerary.

Models are asked for bare JSON but regularly wrap it in Markdown fences. The
fence is stripped, the remainder decoded, and the result checked just enough
for geocoding and pin creation to proceed. A response that does not meet the
contract yields ``None``; nothing here raises to the caller and nothing is
repaired or re-requested.
"""

import json
import logging
import re
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from wander.core.pins import PinType, normalize_pin_type
from wander.core.validation import clean_text

logger = logging.getLogger(__name__)

_OPENING_FENCE = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CLOSING_FENCE = re.compile(r"\s*```$")


class ItineraryLocation(BaseModel):
    name: str
    type: PinType = PinType.CUSTOM
    description: Optional[str] = None
    day: Optional[int] = None
    order: Optional[int] = None
    activities: List[str] = Field(default_factory=list)
    tips: List[str] = Field(default_factory=list)


class ParsedItinerary(BaseModel):
    title: str
    description: Optional[str] = None
    locations: List[ItineraryLocation]
    duration: Optional[int] = None
    budget: Optional[str] = None
    season: Optional[str] = None


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and its closing fence"""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = _OPENING_FENCE.sub("", cleaned, count=1)
        cleaned = _CLOSING_FENCE.sub("", cleaned, count=1)
    return cleaned.strip()


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def _coerce_location(raw: Any) -> Optional[ItineraryLocation]:
    if not isinstance(raw, dict):
        return None
    name = clean_text(raw.get("name"))
    if name is None:
        return None
    return ItineraryLocation(
        name=name,
        type=normalize_pin_type(raw.get("type")),
        description=clean_text(raw.get("description")),
        day=_int_or_none(raw.get("day")),
        order=_int_or_none(raw.get("order")),
        activities=_string_list(raw.get("activities")),
        tips=_string_list(raw.get("tips")),
    )


def parse_ai_response(text: Optional[str]) -> Optional[ParsedItinerary]:
    """Decode model output into a ParsedItinerary, or None when it is unusable"""
    if not text or not text.strip():
        logger.warning("AI response was empty")
        return None

    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse AI response: {e}")
        return None

    if not isinstance(data, dict):
        logger.warning("AI response is not a JSON object")
        return None

    title = clean_text(data.get("title"))
    raw_locations = data.get("locations")
    if title is None or not isinstance(raw_locations, list):
        logger.warning("AI response is missing a title or a locations list")
        return None

    locations = []
    for raw in raw_locations:
        location = _coerce_location(raw)
        if location is not None:
            locations.append(location)
    dropped = len(raw_locations) - len(locations)
    if dropped:
        logger.info(f"Dropped {dropped} AI locations without a usable name")

    return ParsedItinerary(
        title=title,
        description=clean_text(data.get("description")),
        locations=locations,
        duration=_int_or_none(data.get("duration")),
        budget=clean_text(data.get("budget")),
        season=clean_text(data.get("season")),
    )
