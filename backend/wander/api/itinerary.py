"""
Itinerary API endpoints: manual creation, map reads, listings and AI drafts
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from wander.api.deps import get_ai_builder, parse_resource_id, read_json_body
from wander.api.schemas import (
    AIDraftData, AIDraftResponse, AIItineraryRequest, AuthorRead,
    CreatedItineraryData, CreateItineraryResponse, ItineraryRead, PinRead,
    PublicItineraryRead, VideoItineraryRequest,
)
from wander.core.ai_itinerary import AIItineraryBuilder
from wander.core.errors import InputValidationError
from wander.core.itinerary_store import (
    MapItinerary, create_itinerary_with_pins, load_itinerary_for_map, load_shared_itinerary,
)
from wander.core.rate_limit import (
    limiter, RATE_LIMIT_GENERATE, RATE_LIMIT_LIST, RATE_LIMIT_READ, RATE_LIMIT_WRITE,
)
from wander.core.security import AuthenticatedUser, get_current_user
from wander.core.settings import Settings, get_settings
from wander.core.validation import validate_itinerary_payload
from wander.db import crud
from wander.db.session import get_db_session

# Set up logging
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/itineraries", tags=["itineraries"])


def _draft_response(draft: MapItinerary) -> AIDraftResponse:
    return AIDraftResponse(data=AIDraftData(
        draft_id=draft.id,
        title=draft.title,
        description=draft.description,
        is_public=False,
        pins=draft.pins,
    ))


@router.post("", response_model=CreateItineraryResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMIT_WRITE)
async def create_itinerary_endpoint(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Create an itinerary and all of its pins in one transaction"""
    payload = await read_json_body(request)
    validated = validate_itinerary_payload(payload)

    itinerary, pins = await create_itinerary_with_pins(session, validated, current_user.id)

    return CreateItineraryResponse(data=CreatedItineraryData(
        itinerary=ItineraryRead.model_validate(itinerary),
        pins=[PinRead.model_validate(pin) for pin in pins],
    ))


@router.get("", response_model=List[ItineraryRead])
@limiter.limit(RATE_LIMIT_LIST)
async def list_my_itineraries(
    request: Request,
    limit: Optional[int] = Query(None, description="Maximum number of itineraries to return"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Caller's itineraries, most recently updated first"""
    itineraries = await crud.get_user_itineraries(
        session, current_user.id, limit=limit if limit and limit > 0 else None
    )
    return [ItineraryRead.model_validate(itinerary) for itinerary in itineraries]


@router.get("/public", response_model=List[PublicItineraryRead])
@limiter.limit(RATE_LIMIT_LIST)
async def list_public_itineraries(
    request: Request,
    limit: Optional[int] = Query(None, description="Maximum number of itineraries to return"),
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Public itineraries from all users, with their authors"""
    itineraries = await crud.get_public_itineraries(
        session, limit=limit if limit and limit > 0 else None
    )
    results = []
    for itinerary in itineraries:
        item = PublicItineraryRead.model_validate(itinerary)
        if itinerary.owner is not None:
            item.author = AuthorRead.model_validate(itinerary.owner)
        results.append(item)
    return results


@router.get(
    "/shared/{itinerary_id}",
    response_model=MapItinerary,
    response_model_exclude_none=True,
)
@limiter.limit(RATE_LIMIT_READ)
async def read_shared_itinerary(
    request: Request,
    itinerary_id: str,
    session: AsyncSession = Depends(get_db_session),
):
    """Public itinerary behind a share link; no session required"""
    return await load_shared_itinerary(session, parse_resource_id(itinerary_id, "itinerary"))


@router.get(
    "/{itinerary_id}",
    response_model=MapItinerary,
    response_model_exclude_none=True,
)
@limiter.limit(RATE_LIMIT_READ)
async def read_itinerary(
    request: Request,
    itinerary_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Owner-only read shaped for the map editor"""
    return await load_itinerary_for_map(
        session, parse_resource_id(itinerary_id, "itinerary"), current_user.id
    )


@router.post(
    "/ai",
    response_model=AIDraftResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(RATE_LIMIT_GENERATE)
async def create_ai_itinerary(
    request: Request,
    payload: AIItineraryRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    builder: AIItineraryBuilder = Depends(get_ai_builder),
    settings: Settings = Depends(get_settings),
):
    """Draft an itinerary from a free-text request or a video link"""
    prompt = (payload.prompt or "").strip()
    video_link = (payload.video_link or "").strip()

    if not prompt and not video_link:
        raise InputValidationError("Either prompt or videoLink is required")

    if video_link:
        logger.info(f"AI itinerary from video requested by {current_user.id}")
        draft = await builder.from_video(session, current_user.id, video_link)
        return _draft_response(draft)

    if len(prompt) > settings.MAX_PROMPT_LENGTH:
        raise InputValidationError(
            f"Prompt is too long (max {settings.MAX_PROMPT_LENGTH} characters)"
        )

    logger.info(f"AI itinerary from prompt requested by {current_user.id}")
    draft = await builder.from_prompt(session, current_user.id, prompt)
    return _draft_response(draft)


@router.post(
    "/ai/video",
    response_model=AIDraftResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(RATE_LIMIT_GENERATE)
async def create_itinerary_from_video(
    request: Request,
    payload: VideoItineraryRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    builder: AIItineraryBuilder = Depends(get_ai_builder),
):
    """Draft an itinerary from a YouTube video's title, tags and description"""
    url = (payload.video_url or payload.video_link or "").strip()
    if not url:
        raise InputValidationError("videoUrl is required")

    draft = await builder.from_video(session, current_user.id, url)
    return _draft_response(draft)
