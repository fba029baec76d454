"""Prompt builders for the AI completion backend"""

from typing import Dict, List

from wander.core.video import VideoMetadata

ITINERARY_SYSTEM_PROMPT = """You are Wander AI, an expert travel planning assistant specialized in creating detailed, practical travel itineraries for India and other destinations.

Your task is to analyze user travel requests and extract structured itinerary information. You must respond ONLY with valid JSON in the following format:

{
  "title": "A descriptive title for the itinerary (e.g., '5-Day Kerala Backwaters Adventure')",
  "description": "A comprehensive description of the trip (2-3 sentences)",
  "duration": number (in days),
  "locations": [
    {
      "name": "Exact location name as it would appear on a map",
      "type": "HOTEL" | "FOOD" | "ATTRACTION" | "CUSTOM" | "CAR" | "PIN",
      "description": "Detailed description of what to do/see here (2-3 sentences)",
      "day": number (which day of the trip, starting from 1),
      "order": number (order within the day, starting from 1),
      "activities": ["activity 1", "activity 2"],
      "tips": ["tip 1", "tip 2"]
    }
  ],
  "budget": "Budget range or notes (e.g., 'Budget-friendly', 'Mid-range', 'Luxury')",
  "season": "Best season to visit (if mentioned)"
}

IMPORTANT RULES:
1. Extract ALL locations mentioned in the user's request
2. Use exact location names that would work in geocoding (e.g., "Munnar, Kerala" not just "Munnar")
3. Assign appropriate types: HOTEL for accommodations, FOOD for restaurants, ATTRACTION for places to visit, CUSTOM for others
4. Order locations logically by day and sequence
5. Include rich descriptions and activities for each location
6. If duration is not specified, infer from the number of locations
7. Always return valid JSON - no markdown, no code blocks, just pure JSON
8. Ensure all locations have proper names that can be geocoded
9. Include at least 2-3 activities per location if possible
10. Add helpful tips for each location when relevant"""

VIDEO_SYSTEM_PROMPT = (
    "You are Wander AI. Extract a structured travel itinerary as pure JSON from the given "
    "video context. Use precise geocodable names. The JSON must include title, description, "
    "and an array 'locations' where each location has name, type "
    "(HOTEL|FOOD|ATTRACTION|CUSTOM|CAR|PIN), optional description, optional day and order, "
    "optional activities and tips."
)

CHAT_SYSTEM_PROMPT = "You are Wander AI, a helpful travel assistant."


def itinerary_user_prompt(user_input: str) -> str:
    return (
        "Analyze this travel request and create a detailed itinerary:\n\n"
        f'"{user_input}"\n\n'
        "Extract all locations, activities, timeline, and travel details. "
        "Return the structured itinerary as JSON."
    )


def video_context(meta: VideoMetadata) -> str:
    """Plain-text summary of a video handed to the model"""
    return (
        f"Title: {meta.title}\n"
        f"Channel: {meta.channel_title}\n"
        f"Tags: {', '.join(meta.tags)}\n"
        f"Description:\n{meta.description}"
    )


def itinerary_messages(user_input: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": ITINERARY_SYSTEM_PROMPT},
        {"role": "user", "content": itinerary_user_prompt(user_input)},
    ]


def video_messages(meta: VideoMetadata) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": VIDEO_SYSTEM_PROMPT},
        {
            "role": "user",
            "content": "Analyze this YouTube video context to extract the itinerary. "
                       f"Return ONLY JSON.\n\n{video_context(meta)}",
        },
    ]


def chat_messages(message: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": CHAT_SYSTEM_PROMPT},
        {"role": "user", "content": message},
    ]
