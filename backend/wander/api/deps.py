"""Shared request helpers and dependencies for the API routers"""

from typing import Any, Optional
from uuid import UUID

from fastapi import Depends, Request

from wander.core.ai import AIClient, get_ai_client
from wander.core.ai_itinerary import AIItineraryBuilder
from wander.core.errors import InputValidationError, InvalidPayloadError, NotFoundError
from wander.core.geocoding import Geocoder, get_geocoder
from wander.core.settings import Settings, get_settings


def parse_resource_id(raw: Optional[str], label: str) -> UUID:
    """
    Blank ids are a client error; ids that are not UUIDs cannot name a row
    and are reported as missing.
    """
    if raw is None or not str(raw).strip():
        raise InputValidationError(f"Missing {label} id")
    try:
        return UUID(str(raw).strip())
    except ValueError:
        raise NotFoundError(f"{label.capitalize()} not found")


async def read_json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError:
        raise InvalidPayloadError()


def get_ai_builder(
    ai: AIClient = Depends(get_ai_client),
    geocoder: Geocoder = Depends(get_geocoder),
    settings: Settings = Depends(get_settings),
) -> AIItineraryBuilder:
    return AIItineraryBuilder(ai, geocoder, settings)
