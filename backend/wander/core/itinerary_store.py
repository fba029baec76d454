"""
Persistence and read shaping for itineraries and their pins.

An itinerary and all of its pins are written in one database transaction, so a
reader sees either nothing or the complete itinerary. Reads reshape rows into
the structure the map editor consumes.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wander.core.errors import ForbiddenError, NotFoundError, PersistenceError
from wander.core.pins import PinIcon, PinType
from wander.core.validation import ValidatedItinerary
from wander.db import crud
from wander.db.models import Itinerary, ItineraryPin

logger = logging.getLogger(__name__)


class MapPin(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: UUID
    lng_lat: Tuple[float, float]
    title: str = ""
    description: str = ""
    type: PinType = PinType.PIN
    icon: PinIcon = PinIcon.PIN
    order_index: int = 0
    # omitted from responses when absent
    day: Optional[int] = None
    meta: Dict[str, Any] = Field(default_factory=dict)


class MapItinerary(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: UUID
    title: str = ""
    description: str = ""
    is_public: bool = False
    pins: List[MapPin] = Field(default_factory=list)


async def create_itinerary_with_pins(
    session: AsyncSession,
    request: ValidatedItinerary,
    owner_id: UUID,
    thumbnail: Optional[str] = None,
) -> Tuple[Itinerary, List[ItineraryPin]]:
    """
    Write one itinerary and all of its pins atomically.

    Pins keep submission order. Any datastore failure rolls the whole unit back
    and surfaces as PersistenceError; there is no retry.
    """
    try:
        itinerary = Itinerary(
            title=request.title,
            description=request.description,
            thumbnail=thumbnail,
            created_by=owner_id,
            is_public=request.is_public,
        )
        session.add(itinerary)
        await session.flush()

        pins = [
            ItineraryPin(
                itinerary_id=itinerary.id,
                latitude=pin.latitude,
                longitude=pin.longitude,
                title=pin.title,
                description=pin.description,
                type=pin.type,
                icon=pin.icon,
                order_index=pin.order_index,
                day=pin.day,
                date=pin.date,
                created_by=owner_id,
                google_place_id=pin.google_place_id,
                meta_json=dict(pin.meta),
            )
            for pin in request.pins
        ]
        session.add_all(pins)
        await session.commit()

    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Failed to create itinerary for user {owner_id}: {e}", exc_info=True)
        raise PersistenceError("Failed to create itinerary") from e

    logger.info(f"Created itinerary {itinerary.id} with {len(pins)} pins for user {owner_id}")
    return itinerary, pins


def shape_pin(pin: ItineraryPin) -> MapPin:
    return MapPin(
        id=pin.id,
        lng_lat=(pin.longitude, pin.latitude),
        title=pin.title or "",
        description=pin.description or "",
        type=pin.type or PinType.PIN,
        icon=pin.icon or PinIcon.PIN,
        order_index=pin.order_index if pin.order_index is not None else 0,
        day=pin.day or None,
        meta=pin.meta_json or {},
    )


def shape_itinerary(itinerary: Itinerary, pins: List[ItineraryPin]) -> MapItinerary:
    return MapItinerary(
        id=itinerary.id,
        title=itinerary.title or "",
        description=itinerary.description or "",
        is_public=bool(itinerary.is_public),
        pins=[shape_pin(pin) for pin in pins],
    )


async def load_itinerary_for_map(
    session: AsyncSession,
    itinerary_id: UUID,
    user_id: UUID,
) -> MapItinerary:
    """Owner-only read of an itinerary with its pins in display order"""
    itinerary = await crud.get_itinerary_by_id(session, itinerary_id)
    if itinerary is None:
        raise NotFoundError("Itinerary not found")
    if itinerary.created_by != user_id:
        logger.warning(f"User {user_id} denied access to itinerary {itinerary_id}")
        raise ForbiddenError()

    pins = await crud.get_itinerary_pins(session, itinerary_id)
    return shape_itinerary(itinerary, pins)


async def load_shared_itinerary(session: AsyncSession, itinerary_id: UUID) -> MapItinerary:
    """Read for share links; private itineraries look missing"""
    itinerary = await crud.get_itinerary_by_id(session, itinerary_id)
    if itinerary is None or not itinerary.is_public:
        raise NotFoundError("Itinerary not found")

    pins = await crud.get_itinerary_pins(session, itinerary_id)
    return shape_itinerary(itinerary, pins)
