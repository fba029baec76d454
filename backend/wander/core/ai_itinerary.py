"""
AI-assisted itinerary drafts.

A free-text request (or a YouTube video's metadata) goes to the completion
backend, the reply is parsed into locations, the locations are geocoded in
parallel, and whatever resolved is stored through the same atomic writer the
manual editor uses. Drafts are always private.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from wander.core import prompts
from wander.core.ai import AIClient
from wander.core.ai_parser import ItineraryLocation, ParsedItinerary, parse_ai_response
from wander.core.errors import (
    InputValidationError,
    NoGeocodedLocationsError,
    ParseError,
    ServiceNotConfiguredError,
    UpstreamServiceError,
)
from wander.core.geocoding import GeocodeResult, Geocoder
from wander.core.itinerary_store import MapItinerary, create_itinerary_with_pins, shape_itinerary
from wander.core.pins import normalize_type_and_icon
from wander.core.settings import Settings
from wander.core.validation import (
    MAX_DESCRIPTION_LENGTH,
    MAX_PIN_TITLE_LENGTH,
    MAX_TITLE_LENGTH,
    ValidatedItinerary,
    ValidatedPin,
)
from wander.core.video import VideoMetadata, extract_youtube_id, fetch_youtube_metadata

logger = logging.getLogger(__name__)

VIDEO_TEMPERATURE = 0.6


def build_pin_description(location: ItineraryLocation) -> Optional[str]:
    """Location description with activities and tips appended"""
    description = location.description or ""
    if location.activities:
        description += f"\n\nActivities: {', '.join(location.activities)}"
    if location.tips:
        description += f"\n\nTips: {' '.join(location.tips)}"
    return description.strip()[:MAX_DESCRIPTION_LENGTH] or None


def build_pins(
    located: List[Tuple[ItineraryLocation, GeocodeResult]],
) -> List[ValidatedPin]:
    pins = []
    for position, (location, geo) in enumerate(located):
        pin_type, pin_icon = normalize_type_and_icon(location.type.value)
        meta: Dict[str, Any] = {
            "placeName": geo.place_name,
            "activities": location.activities,
            "tips": location.tips,
            "aiGenerated": True,
        }
        pins.append(ValidatedPin(
            latitude=geo.latitude,
            longitude=geo.longitude,
            title=location.name[:MAX_PIN_TITLE_LENGTH],
            description=build_pin_description(location),
            type=pin_type,
            icon=pin_icon,
            order_index=location.order if location.order is not None else position,
            day=location.day or None,
            google_place_id=geo.place_id,
            meta=meta,
        ))
    return pins


class AIItineraryBuilder:
    """Turns prompts and videos into stored draft itineraries"""

    def __init__(self, ai: AIClient, geocoder: Geocoder, settings: Settings):
        self.ai = ai
        self.geocoder = geocoder
        self.settings = settings

    def _ensure_configured(self) -> None:
        if not self.ai.configured:
            raise ServiceNotConfiguredError("AI service is not configured")
        if not self.geocoder.configured:
            raise ServiceNotConfiguredError("Geocoding service is not configured")

    async def _geocode_locations(
        self,
        parsed: ParsedItinerary,
    ) -> List[Tuple[ItineraryLocation, GeocodeResult]]:
        results = await self.geocoder.geocode_many([loc.name for loc in parsed.locations])
        located = [
            (location, geo)
            for location, geo in zip(parsed.locations, results)
            if geo is not None
        ]
        logger.info(f"Geocoded {len(located)}/{len(parsed.locations)} AI locations")
        if not located:
            raise NoGeocodedLocationsError()
        return located

    async def _store_draft(
        self,
        session: AsyncSession,
        owner_id: UUID,
        title: str,
        description: Optional[str],
        parsed: ParsedItinerary,
        thumbnail: Optional[str] = None,
    ) -> MapItinerary:
        located = await self._geocode_locations(parsed)
        # Model output is clipped to the column widths instead of rejected
        request = ValidatedItinerary(
            title=title[:MAX_TITLE_LENGTH],
            description=description[:MAX_DESCRIPTION_LENGTH] if description else None,
            is_public=False,
            pins=build_pins(located),
        )
        itinerary, pins = await create_itinerary_with_pins(
            session, request, owner_id, thumbnail=thumbnail
        )
        return shape_itinerary(itinerary, pins)

    async def from_prompt(self, session: AsyncSession, owner_id: UUID, prompt: str) -> MapItinerary:
        self._ensure_configured()

        response = await self.ai.complete(prompts.itinerary_messages(prompt))
        parsed = parse_ai_response(response)
        if parsed is None:
            raise ParseError()

        return await self._store_draft(
            session, owner_id, parsed.title, parsed.description, parsed
        )

    async def from_video(self, session: AsyncSession, owner_id: UUID, url: str) -> MapItinerary:
        self._ensure_configured()

        video_id = extract_youtube_id(url)
        if video_id is None:
            raise InputValidationError("Only YouTube links are supported")
        if not self.settings.YOUTUBE_API_KEY:
            raise ServiceNotConfiguredError("Video import is not configured")

        meta: Optional[VideoMetadata] = await run_in_threadpool(
            fetch_youtube_metadata, video_id, self.settings.YOUTUBE_API_KEY
        )
        if meta is None:
            raise UpstreamServiceError("Failed to fetch YouTube metadata")

        response = await self.ai.complete(
            prompts.video_messages(meta), temperature=VIDEO_TEMPERATURE
        )
        parsed = parse_ai_response(response)
        if parsed is None:
            raise ParseError()

        return await self._store_draft(
            session,
            owner_id,
            parsed.title or meta.title or "Untitled",
            parsed.description or meta.description or None,
            parsed,
            thumbnail=meta.thumbnail_url,
        )
