from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel
from uuid import UUID
from datetime import datetime

from wander.core.itinerary_store import MapPin
from wander.core.pins import PinIcon, PinType
from wander.db.models import MessageSender


class CamelModel(BaseModel):
    """Request/response bodies use camelCase keys on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

# ===== USER SCHEMAS =====

class UserProfileUpsert(CamelModel):
    id: UUID
    email: EmailStr
    username: Optional[str] = Field(None, max_length=80)
    full_name: Optional[str] = Field(None, max_length=200)
    user_type: Optional[str] = None


class OkResponse(BaseModel):
    ok: bool = True

# ===== ITINERARY SCHEMAS =====

class ItineraryRead(CamelModel):
    id: UUID
    title: str
    description: Optional[str] = None
    thumbnail: Optional[str] = None
    created_by: UUID
    is_public: bool
    created_at: datetime
    updated_at: datetime


class PinRead(CamelModel):
    id: UUID
    itinerary_id: UUID
    latitude: float
    longitude: float
    title: str
    description: Optional[str] = None
    type: PinType
    icon: PinIcon
    order_index: int
    day: Optional[int] = None
    date: Optional[datetime] = None
    created_by: UUID
    google_place_id: Optional[str] = None
    meta_json: Dict[str, Any] = Field(default_factory=dict)


class CreatedItineraryData(CamelModel):
    itinerary: ItineraryRead
    pins: List[PinRead]


class CreateItineraryResponse(CamelModel):
    success: bool = True
    data: CreatedItineraryData


class AuthorRead(CamelModel):
    username: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None


class PublicItineraryRead(ItineraryRead):
    author: Optional[AuthorRead] = None

# ===== AI ITINERARY SCHEMAS =====

class AIItineraryRequest(CamelModel):
    prompt: Optional[str] = None
    video_link: Optional[str] = None


class VideoItineraryRequest(CamelModel):
    video_url: Optional[str] = None
    video_link: Optional[str] = None


class AIDraftData(CamelModel):
    draft_id: UUID
    title: str
    description: str = ""
    is_public: bool = False
    pins: List[MapPin]


class AIDraftResponse(CamelModel):
    success: bool = True
    data: AIDraftData

# ===== SHARE SCHEMAS =====

class ShareItineraryRequest(CamelModel):
    itinerary_id: Optional[str] = None


class ShareItineraryResponse(CamelModel):
    share_link: str
    itinerary_id: UUID


class ShareChatRequest(CamelModel):
    chat_id: Optional[str] = None


class ShareChatResponse(CamelModel):
    share_link: str
    share_id: UUID

# ===== CHAT SCHEMAS =====

class ChatRead(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    created_at: datetime
    updated_at: datetime


class MessageRead(CamelModel):
    id: UUID
    chat_id: UUID
    sender: MessageSender
    content: str
    created_at: datetime


class SharedChatRead(CamelModel):
    share_id: UUID
    chat_id: UUID
    title: str
    expires_at: datetime
    messages: List[MessageRead]


class ChatMessageRequest(CamelModel):
    message: str = Field(..., min_length=1)
    chat_id: Optional[str] = None


class ChatMessageResponse(CamelModel):
    reply: str
    chat_id: UUID
