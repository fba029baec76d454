"""
Database base configuration
Imports all models to ensure they're registered with SQLModel metadata
"""

from sqlmodel import SQLModel

# Import all models so they're registered with SQLModel.metadata
from wander.db.models import (
    User,
    Itinerary,
    ItineraryPin,
    Chat,
    Message,
    SharedChat,
)

Base = SQLModel.metadata

__all__ = [
    "Base",
    "SQLModel",
    "User",
    "Itinerary",
    "ItineraryPin",
    "Chat",
    "Message",
    "SharedChat",
]
