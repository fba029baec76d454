"""
Share links for itineraries and chats
"""

import logging
from datetime import timezone

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wander.api.deps import parse_resource_id
from wander.api.schemas import (
    MessageRead, SharedChatRead, ShareChatRequest, ShareChatResponse,
    ShareItineraryRequest, ShareItineraryResponse,
)
from wander.core.errors import ForbiddenError, GoneError, NotFoundError
from wander.core.rate_limit import limiter, RATE_LIMIT_READ, RATE_LIMIT_WRITE
from wander.core.security import AuthenticatedUser, get_current_user
from wander.core.settings import Settings, get_settings
from wander.db import crud
from wander.db.models import utcnow
from wander.db.session import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["share"])


def _share_link(settings: Settings, kind: str, resource_id) -> str:
    return f"{settings.APP_URL.rstrip('/')}/shared/{kind}/{resource_id}"


@router.post("/share/itinerary", response_model=ShareItineraryResponse)
@limiter.limit(RATE_LIMIT_WRITE)
async def share_itinerary(
    request: Request,
    payload: ShareItineraryRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Make an itinerary public and return its share link"""
    itinerary_id = parse_resource_id(payload.itinerary_id, "itinerary")

    itinerary = await crud.get_itinerary_by_id(session, itinerary_id)
    if itinerary is None:
        raise NotFoundError("Itinerary not found")
    if itinerary.created_by != current_user.id:
        raise ForbiddenError()

    await crud.set_itinerary_public(session, itinerary_id)

    return ShareItineraryResponse(
        share_link=_share_link(settings, "itinerary", itinerary_id),
        itinerary_id=itinerary_id,
    )


@router.post("/share/chat", response_model=ShareChatResponse)
@limiter.limit(RATE_LIMIT_WRITE)
async def share_chat(
    request: Request,
    payload: ShareChatRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
):
    """Create a time-limited share record for a chat"""
    chat_id = parse_resource_id(payload.chat_id, "chat")

    chat = await crud.get_chat(session, chat_id)
    if chat is None:
        raise NotFoundError("Chat not found")
    if chat.user_id != current_user.id:
        raise ForbiddenError()

    share = await crud.create_shared_chat(
        session, chat_id, current_user.id, settings.SHARED_CHAT_TTL_DAYS
    )

    return ShareChatResponse(
        share_link=_share_link(settings, "chat", share.id),
        share_id=share.id,
    )


@router.get("/shared/chats/{share_id}", response_model=SharedChatRead)
@limiter.limit(RATE_LIMIT_READ)
async def read_shared_chat(
    request: Request,
    share_id: str,
    session: AsyncSession = Depends(get_db_session),
):
    """Messages of a shared chat until the share expires"""
    share = await crud.get_shared_chat(session, parse_resource_id(share_id, "share"))
    if share is None:
        raise NotFoundError("Shared chat not found")

    expires_at = share.expires_at
    # SQLite hands back naive datetimes; stored values are UTC
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    if expires_at <= utcnow():
        raise GoneError("This share link has expired")

    chat = await crud.get_chat(session, share.chat_id)
    if chat is None:
        raise NotFoundError("Shared chat not found")

    messages = await crud.get_chat_messages(session, chat.id)
    return SharedChatRead(
        share_id=share.id,
        chat_id=chat.id,
        title=chat.title,
        expires_at=expires_at,
        messages=[MessageRead.model_validate(message) for message in messages],
    )
