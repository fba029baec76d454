"""
Pin categories and the type/icon normalization rules.

Pin types and map icons are two separate closed sets. Free-form strings coming
from clients or from the AI model are folded onto them without ever raising:

    raw type  -> PinType member, else CUSTOM
    raw icon  -> PinIcon member, else ICON_FALLBACKS entry, else PIN

When no icon is supplied the normalized type is used as the icon candidate,
so HOTEL gets the HOTEL icon while CUSTOM (not an icon) ends up as PIN.
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple


class PinType(str, Enum):
    HOTEL = "HOTEL"
    FOOD = "FOOD"
    ATTRACTION = "ATTRACTION"
    CUSTOM = "CUSTOM"
    CAR = "CAR"
    PIN = "PIN"


class PinIcon(str, Enum):
    PIN = "PIN"
    CAR = "CAR"
    HOTEL = "HOTEL"
    FOOD = "FOOD"
    ATTRACTION = "ATTRACTION"


# Marker palette categories with no icon of their own
ICON_FALLBACKS: Dict[str, PinIcon] = {
    "START": PinIcon.PIN,
    "END": PinIcon.PIN,
    "BIKE": PinIcon.PIN,
    "RICKSHAW": PinIcon.PIN,
    "PLANE": PinIcon.PIN,
    "TRAIN": PinIcon.PIN,
}

DEFAULT_PIN_TYPE = PinType.CUSTOM
DEFAULT_PIN_ICON = PinIcon.PIN


def _clean(raw: Any) -> Optional[str]:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip().upper()
    return cleaned or None


def normalize_pin_type(raw: Any) -> PinType:
    """Map a case-insensitive type string onto PinType, defaulting to CUSTOM"""
    candidate = _clean(raw)
    if candidate in PinType.__members__:
        return PinType[candidate]
    return DEFAULT_PIN_TYPE


def normalize_pin_icon(raw_icon: Any, pin_type: PinType) -> PinIcon:
    """Map an icon string (or the pin type when absent) onto PinIcon"""
    candidate = _clean(raw_icon) or pin_type.value
    if candidate in PinIcon.__members__:
        return PinIcon[candidate]
    return ICON_FALLBACKS.get(candidate, DEFAULT_PIN_ICON)


def normalize_type_and_icon(raw_type: Any, raw_icon: Any = None) -> Tuple[PinType, PinIcon]:
    pin_type = normalize_pin_type(raw_type)
    return pin_type, normalize_pin_icon(raw_icon, pin_type)
