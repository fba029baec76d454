"""
Geocoding of AI-derived location names via Mapbox.

geopy's client is blocking, so each lookup runs in the threadpool and a batch
of names is resolved concurrently. Every lookup fails on its own: a miss or an
upstream error for one name yields ``None`` in that slot only.
"""

import asyncio
import logging
from typing import Any, List, Optional, Sequence

from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from geopy.exc import GeopyError
from geopy.geocoders import MapBox
from pydantic import BaseModel, Field

from wander.core.errors import ServiceNotConfiguredError
from wander.core.settings import Settings

logger = logging.getLogger(__name__)


class GeocodeResult(BaseModel):
    latitude: float
    longitude: float
    place_name: str
    place_id: Optional[str] = None
    context: List[str] = Field(default_factory=list)


class Geocoder:
    """Mapbox forward geocoding biased to the configured country and bbox"""

    def __init__(self, settings: Settings, client: Optional[Any] = None):
        self.country = settings.GEOCODE_COUNTRY or None
        self.bbox = settings.geocode_bbox_points
        self._client = client
        if self._client is None and settings.MAPBOX_TOKEN:
            self._client = MapBox(api_key=settings.MAPBOX_TOKEN, timeout=settings.GEOCODE_TIMEOUT)

    @property
    def configured(self) -> bool:
        return self._client is not None

    def _lookup(self, name: str) -> Optional[GeocodeResult]:
        location = self._client.geocode(
            name,
            exactly_one=True,
            country=self.country,
            bbox=self.bbox,
        )
        if location is None:
            return None

        raw = location.raw or {}
        context = [item.get("text", "") for item in raw.get("context") or [] if item.get("text")]
        return GeocodeResult(
            latitude=location.latitude,
            longitude=location.longitude,
            place_name=raw.get("place_name") or raw.get("text") or location.address or name,
            place_id=raw.get("id"),
            context=context,
        )

    async def geocode(self, name: str) -> Optional[GeocodeResult]:
        """Best match for a location name, or None"""
        if self._client is None:
            raise ServiceNotConfiguredError("Geocoding service is not configured")
        if not name or not name.strip():
            return None

        try:
            result = await run_in_threadpool(self._lookup, name.strip())
        except GeopyError as e:
            logger.warning(f"Geocoding failed for {name!r}: {type(e).__name__}: {e}")
            return None

        if result is None:
            logger.info(f"No geocoding match for {name!r}")
        return result

    async def geocode_many(self, names: Sequence[str]) -> List[Optional[GeocodeResult]]:
        """Geocode all names concurrently; results line up with the input"""
        if self._client is None:
            raise ServiceNotConfiguredError("Geocoding service is not configured")
        results = await asyncio.gather(
            *(self.geocode(name) for name in names), return_exceptions=True
        )
        located: List[Optional[GeocodeResult]] = []
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.warning(f"Geocoding failed for {name!r}: {type(result).__name__}: {result}")
                located.append(None)
            else:
                located.append(result)
        return located


def get_geocoder(request: Request) -> Geocoder:
    """The process-wide geocoder created by the application lifespan"""
    geocoder = getattr(request.app.state, "geocoder", None)
    if geocoder is None:
        raise RuntimeError("Geocoder not initialized")
    return geocoder
