"""
Chat API endpoints: AI assistant conversation with persisted history
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from wander.api.deps import parse_resource_id
from wander.api.schemas import ChatMessageRequest, ChatMessageResponse, ChatRead, MessageRead
from wander.core import prompts
from wander.core.ai import AIClient, get_ai_client
from wander.core.errors import (
    ForbiddenError, InputValidationError, NotFoundError, ServiceNotConfiguredError,
)
from wander.core.rate_limit import limiter, RATE_LIMIT_CHAT, RATE_LIMIT_LIST, RATE_LIMIT_READ
from wander.core.security import AuthenticatedUser, get_current_user
from wander.core.settings import Settings, get_settings
from wander.db import crud
from wander.db.models import utcnow
from wander.db.session import get_db_session

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chats"])

FALLBACK_REPLY = "Sorry, I couldn't think of a response."


@router.post("/chat", response_model=ChatMessageResponse)
@limiter.limit(RATE_LIMIT_CHAT)
async def send_chat_message(
    request: Request,
    payload: ChatMessageRequest,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
    ai: AIClient = Depends(get_ai_client),
    settings: Settings = Depends(get_settings),
):
    """
    Send a message to the travel assistant.

    Continues the caller's chat when ``chatId`` names one they own, otherwise
    starts a new chat. The message and the reply are persisted together
    once the reply exists.
    """
    message = payload.message.strip()
    if not message:
        raise InputValidationError("Message is required")
    if len(message) > settings.MAX_CHAT_MESSAGE_LENGTH:
        raise InputValidationError(
            f"Message is too long (max {settings.MAX_CHAT_MESSAGE_LENGTH} characters)"
        )
    if not ai.configured:
        raise ServiceNotConfiguredError("AI service is not configured")

    chat = None
    if payload.chat_id and payload.chat_id.strip():
        chat = await crud.get_chat(session, parse_resource_id(payload.chat_id, "chat"))
        if chat is not None and chat.user_id != current_user.id:
            raise ForbiddenError()

    sent_at = utcnow()
    reply = await ai.complete(prompts.chat_messages(message))
    reply = reply.strip() or FALLBACK_REPLY

    chat = await crud.save_chat_exchange(
        session, current_user.id, chat, message, reply, sent_at=sent_at
    )

    return ChatMessageResponse(reply=reply, chat_id=chat.id)


@router.get("/chats", response_model=List[ChatRead])
@limiter.limit(RATE_LIMIT_LIST)
async def list_chats(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Caller's chats, newest first"""
    chats = await crud.get_user_chats(session, current_user.id)
    return [ChatRead.model_validate(chat) for chat in chats]


@router.get("/chats/{chat_id}", response_model=List[MessageRead])
@limiter.limit(RATE_LIMIT_READ)
async def read_chat(
    request: Request,
    chat_id: str,
    current_user: AuthenticatedUser = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
):
    """Messages of one of the caller's chats, oldest first"""
    chat = await crud.get_chat(session, parse_resource_id(chat_id, "chat"))
    if chat is None:
        raise NotFoundError("Chat not found")
    if chat.user_id != current_user.id:
        raise ForbiddenError()

    messages = await crud.get_chat_messages(session, chat.id)
    return [MessageRead.model_validate(message) for message in messages]
