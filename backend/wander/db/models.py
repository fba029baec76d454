import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Dict, Any
from uuid import UUID as PyUUID

from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, Index, CheckConstraint, JSON

from wander.core.pins import PinIcon, PinType


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enums
class UserType(str, Enum):
    TRAVELER = "TRAVELER"
    CREATOR = "CREATOR"

class MessageSender(str, Enum):
    USER = "user"
    AI = "ai"


class BaseModel(SQLModel):
    """Base model with common audit fields"""

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
        sa_column_kwargs={"onupdate": utcnow},
    )


# Models
class User(BaseModel, table=True):
    __tablename__ = "users"

    __table_args__ = (
        Index('idx_users_username', 'username'),
        Index('idx_users_email', 'email'),
        CheckConstraint('length(email) > 0', name='check_email_not_empty'),
    )

    # Same id as the auth provider's user
    id: PyUUID = Field(primary_key=True)
    email: str = Field(
        unique=True,
        nullable=False,
        max_length=255,
        description="User's email address"
    )
    username: Optional[str] = Field(
        default=None,
        unique=True,
        max_length=80,
        description="Public handle"
    )
    full_name: Optional[str] = Field(default=None, max_length=200)
    avatar_url: Optional[str] = Field(default=None, max_length=1000)
    bio: Optional[str] = Field(default=None, max_length=1000)
    user_type: UserType = Field(default=UserType.TRAVELER, nullable=False)

    # Relationships
    itineraries: List["Itinerary"] = Relationship(back_populates="owner")


class Itinerary(BaseModel, table=True):
    __tablename__ = "itineraries"

    __table_args__ = (
        Index('idx_itineraries_created_by', 'created_by'),
        Index('idx_itineraries_updated_at', 'updated_at'),
        Index('idx_itineraries_public', 'is_public'),
        CheckConstraint('length(title) > 0', name='check_title_not_empty'),
    )

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(max_length=200, description="Itinerary title")
    description: Optional[str] = Field(default=None, max_length=5000)
    thumbnail: Optional[str] = Field(default=None, max_length=1000)
    created_by: PyUUID = Field(
        foreign_key="users.id",
        nullable=False,
        description="Owner of this itinerary"
    )
    is_public: bool = Field(default=False, nullable=False)

    # Relationships
    owner: Optional[User] = Relationship(back_populates="itineraries")
    pins: List["ItineraryPin"] = Relationship(back_populates="itinerary")


class ItineraryPin(BaseModel, table=True):
    __tablename__ = "itinerary_pins"

    __table_args__ = (
        Index('idx_itinerary_pins_itinerary', 'itinerary_id'),
        Index('idx_itinerary_pins_order', 'itinerary_id', 'order_index'),
        CheckConstraint('latitude BETWEEN -90 AND 90', name='check_valid_latitude'),
        CheckConstraint('longitude BETWEEN -180 AND 180', name='check_valid_longitude'),
    )

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    itinerary_id: PyUUID = Field(foreign_key="itineraries.id", nullable=False)
    latitude: float = Field(description="Latitude coordinate")
    longitude: float = Field(description="Longitude coordinate")
    title: str = Field(max_length=300)
    description: Optional[str] = Field(default=None, max_length=5000)
    type: PinType = Field(default=PinType.CUSTOM, nullable=False)
    icon: PinIcon = Field(default=PinIcon.PIN, nullable=False)
    order_index: int = Field(default=0, description="Display order in the itinerary")
    day: Optional[int] = Field(default=None, description="Trip day, starting from 1")
    date: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    created_by: PyUUID = Field(nullable=False, description="Owner, copied from the itinerary")
    google_place_id: Optional[str] = Field(default=None, max_length=255)
    meta_json: Dict[str, Any] = Field(
        default_factory=dict,
        sa_column=Column(JSON, nullable=False),
        description="Free-form metadata (place name, activities, tips)"
    )

    itinerary: Optional[Itinerary] = Relationship(back_populates="pins")


class Chat(BaseModel, table=True):
    __tablename__ = "chats"

    __table_args__ = (
        Index('idx_chats_user_id', 'user_id'),
    )

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    user_id: PyUUID = Field(nullable=False, description="Owner of this chat")
    title: str = Field(default="New Chat", max_length=200)

    messages: List["Message"] = Relationship(back_populates="chat")


class Message(SQLModel, table=True):
    __tablename__ = "messages"

    __table_args__ = (
        Index('idx_messages_chat_created', 'chat_id', 'created_at'),
    )

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    chat_id: PyUUID = Field(foreign_key="chats.id", nullable=False)
    sender: MessageSender = Field(nullable=False)
    content: str
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )

    chat: Optional[Chat] = Relationship(back_populates="messages")


class SharedChat(SQLModel, table=True):
    __tablename__ = "shared_chats"

    id: PyUUID = Field(default_factory=uuid.uuid4, primary_key=True)
    chat_id: PyUUID = Field(foreign_key="chats.id", nullable=False)
    user_id: PyUUID = Field(nullable=False)
    expires_at: datetime = Field(sa_type=DateTime(timezone=True), nullable=False)
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        nullable=False,
    )
