"""
CRUD operations for users, itineraries, chats and shares
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update, desc, asc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from wander.core.errors import PersistenceError
from wander.db.models import (
    User, UserType, Itinerary, ItineraryPin, Chat, Message, MessageSender,
    SharedChat, utcnow,
)

logger = logging.getLogger(__name__)

# ===== USER CRUD OPERATIONS =====

async def get_user_by_id(session: AsyncSession, user_id: UUID) -> Optional[User]:
    """Get user by ID"""
    result = await session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def upsert_user_profile(
    session: AsyncSession,
    user_id: UUID,
    email: str,
    username: Optional[str],
    full_name: Optional[str],
    user_type: UserType,
) -> User:
    """
    Insert or update the profile row keyed by the auth provider's user id.

    IntegrityError is re-raised after rollback so the caller can decide how to
    resolve unique-constraint conflicts.
    """
    try:
        user = await get_user_by_id(session, user_id)
        if user is None:
            user = User(id=user_id, email=email)
            session.add(user)
        user.email = email
        user.username = username
        user.full_name = full_name
        user.user_type = user_type
        user.updated_at = utcnow()
        await session.commit()
        logger.info(f"Upserted user profile: {user_id}")
        return user
    except SQLAlchemyError:
        await session.rollback()
        raise

# ===== ITINERARY CRUD OPERATIONS =====

async def get_itinerary_by_id(session: AsyncSession, itinerary_id: UUID) -> Optional[Itinerary]:
    try:
        result = await session.execute(
            select(Itinerary).where(Itinerary.id == itinerary_id)
        )
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error getting itinerary {itinerary_id}: {e}")
        raise PersistenceError("Failed to load itinerary") from e


async def get_itinerary_pins(session: AsyncSession, itinerary_id: UUID) -> List[ItineraryPin]:
    """Pins of an itinerary in display order"""
    try:
        result = await session.execute(
            select(ItineraryPin)
            .where(ItineraryPin.itinerary_id == itinerary_id)
            .order_by(asc(ItineraryPin.order_index))
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error getting pins for itinerary {itinerary_id}: {e}")
        raise PersistenceError("Failed to load itinerary pins") from e


async def get_user_itineraries(
    session: AsyncSession,
    user_id: UUID,
    limit: Optional[int] = None,
) -> List[Itinerary]:
    """Itineraries owned by a user, most recently updated first"""
    query = (
        select(Itinerary)
        .where(Itinerary.created_by == user_id)
        .order_by(desc(Itinerary.updated_at))
    )
    if limit:
        query = query.limit(limit)
    try:
        result = await session.execute(query)
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error getting itineraries for user {user_id}: {e}")
        raise PersistenceError("Failed to load itineraries") from e


async def get_public_itineraries(
    session: AsyncSession,
    limit: Optional[int] = None,
) -> List[Itinerary]:
    """Public itineraries from all users with their author loaded"""
    query = (
        select(Itinerary)
        .options(selectinload(Itinerary.owner))
        .where(Itinerary.is_public.is_(True))
        .order_by(desc(Itinerary.updated_at))
    )
    if limit:
        query = query.limit(limit)
    try:
        result = await session.execute(query)
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error getting public itineraries: {e}")
        raise PersistenceError("Failed to load itineraries") from e


async def set_itinerary_public(session: AsyncSession, itinerary_id: UUID) -> None:
    try:
        await session.execute(
            update(Itinerary)
            .where(Itinerary.id == itinerary_id)
            .values(is_public=True, updated_at=utcnow())
        )
        await session.commit()
        logger.info(f"Itinerary {itinerary_id} marked public")
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error sharing itinerary {itinerary_id}: {e}")
        raise PersistenceError("Failed to share itinerary") from e

# ===== CHAT CRUD OPERATIONS =====

async def get_chat(session: AsyncSession, chat_id: UUID) -> Optional[Chat]:
    try:
        result = await session.execute(select(Chat).where(Chat.id == chat_id))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error getting chat {chat_id}: {e}")
        raise PersistenceError("Failed to load chat") from e


async def get_user_chats(session: AsyncSession, user_id: UUID) -> List[Chat]:
    """Chats owned by a user, newest first"""
    try:
        result = await session.execute(
            select(Chat)
            .where(Chat.user_id == user_id)
            .order_by(desc(Chat.created_at))
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error getting chats for user {user_id}: {e}")
        raise PersistenceError("Failed to load chats") from e


async def get_chat_messages(session: AsyncSession, chat_id: UUID) -> List[Message]:
    """Messages of a chat, oldest first"""
    try:
        result = await session.execute(
            select(Message)
            .where(Message.chat_id == chat_id)
            .order_by(asc(Message.created_at))
        )
        return list(result.scalars().all())
    except SQLAlchemyError as e:
        logger.error(f"Error getting messages for chat {chat_id}: {e}")
        raise PersistenceError("Failed to load messages") from e


async def save_chat_exchange(
    session: AsyncSession,
    user_id: UUID,
    chat: Optional[Chat],
    user_message: str,
    reply: str,
    sent_at: datetime,
) -> Chat:
    """
    Persist one user message and its reply in a single transaction.

    A new "New Chat" row is created when ``chat`` is None, so a failed
    exchange never leaves an empty chat or an unanswered message behind.
    """
    try:
        if chat is None:
            chat = Chat(user_id=user_id, title="New Chat", created_at=sent_at, updated_at=sent_at)
            session.add(chat)
            await session.flush()
            logger.info(f"Created chat {chat.id} for user {user_id}")

        session.add_all([
            Message(chat_id=chat.id, sender=MessageSender.USER, content=user_message, created_at=sent_at),
            Message(chat_id=chat.id, sender=MessageSender.AI, content=reply),
        ])
        await session.execute(
            update(Chat).where(Chat.id == chat.id).values(updated_at=utcnow())
        )
        await session.commit()
        return chat
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error saving chat exchange for user {user_id}: {e}")
        raise PersistenceError("Failed to save message") from e


async def create_shared_chat(
    session: AsyncSession,
    chat_id: UUID,
    user_id: UUID,
    ttl_days: int,
) -> SharedChat:
    try:
        share = SharedChat(
            chat_id=chat_id,
            user_id=user_id,
            expires_at=utcnow() + timedelta(days=ttl_days),
        )
        session.add(share)
        await session.commit()
        logger.info(f"Created share {share.id} for chat {chat_id}")
        return share
    except SQLAlchemyError as e:
        await session.rollback()
        logger.error(f"Error sharing chat {chat_id}: {e}")
        raise PersistenceError("Failed to share chat") from e


async def get_shared_chat(session: AsyncSession, share_id: UUID) -> Optional[SharedChat]:
    try:
        result = await session.execute(select(SharedChat).where(SharedChat.id == share_id))
        return result.scalar_one_or_none()
    except SQLAlchemyError as e:
        logger.error(f"Error getting shared chat {share_id}: {e}")
        raise PersistenceError("Failed to load shared chat") from e
