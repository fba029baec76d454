"""
YouTube link parsing and metadata lookup for video-to-itinerary imports
"""

import logging
from typing import List, Optional
from urllib.parse import parse_qs, urlparse

import requests
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

YOUTUBE_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"

_PATH_PREFIXES = ("/shorts/", "/embed/", "/live/")


class VideoMetadata(BaseModel):
    id: str
    title: str = "Untitled Video"
    description: str = ""
    tags: List[str] = Field(default_factory=list)
    channel_title: str = ""
    published_at: Optional[str] = None
    duration: Optional[str] = None
    thumbnail_url: Optional[str] = None


def extract_youtube_id(url: Optional[str]) -> Optional[str]:
    """Video id from a youtu.be or youtube.com link, None for anything else"""
    if not url or not url.strip():
        return None

    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None

    host = (parsed.hostname or "").lower()

    if host == "youtu.be" or host.endswith(".youtu.be"):
        video_id = parsed.path.lstrip("/").split("/")[0]
        return video_id or None

    if host == "youtube.com" or host.endswith(".youtube.com"):
        if parsed.path == "/watch":
            values = parse_qs(parsed.query).get("v")
            return values[0] if values and values[0] else None
        for prefix in _PATH_PREFIXES:
            if parsed.path.startswith(prefix):
                video_id = parsed.path[len(prefix):].split("/")[0]
                return video_id or None

    return None


def fetch_youtube_metadata(
    video_id: str,
    api_key: str,
    timeout: int = 10,
) -> Optional[VideoMetadata]:
    """
    Fetch snippet and content details from the YouTube Data API.

    Blocking; call it from a thread pool in async code. Returns None when the
    key is missing, the request fails, or the video does not exist.
    """
    if not api_key:
        logger.error("YouTube API key is missing")
        return None

    params = {
        "part": "snippet,contentDetails",
        "id": video_id,
        "key": api_key,
    }

    try:
        response = requests.get(YOUTUBE_VIDEOS_URL, params=params, timeout=timeout)
        if response.status_code != 200:
            logger.error(f"YouTube API error ({response.status_code}) for video {video_id}")
            return None
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.error(f"Error fetching YouTube metadata for {video_id}: {e}")
        return None

    items = data.get("items") or []
    snippet = items[0].get("snippet") if items else None
    if not snippet:
        logger.warning(f"No video data found for ID: {video_id}")
        return None

    content_details = items[0].get("contentDetails") or {}
    thumbnails = snippet.get("thumbnails") or {}
    thumbnail = thumbnails.get("high") or thumbnails.get("medium") or thumbnails.get("default") or {}

    return VideoMetadata(
        id=video_id,
        title=snippet.get("title") or "Untitled Video",
        description=snippet.get("description") or "",
        tags=snippet.get("tags") or [],
        channel_title=snippet.get("channelTitle") or "",
        published_at=snippet.get("publishedAt"),
        duration=content_details.get("duration"),
        thumbnail_url=thumbnail.get("url"),
    )
