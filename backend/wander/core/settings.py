from functools import lru_cache
from pathlib import Path
from typing import Union
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # Database
    DB_URL: str = "postgresql://postgres:password@db:5432/wander"
    DB_ECHO: bool = False  # Set to True for SQL query logging in development
    DB_AUTO_CREATE: bool = False  # create_all on startup (local development)

    # Connection Pool Settings
    DB_POOL_SIZE: int = 10  # Number of connections to maintain in pool
    DB_MAX_OVERFLOW: int = 20  # Maximum overflow connections beyond pool_size
    DB_POOL_TIMEOUT: int = 30  # Timeout in seconds to get connection from pool
    DB_POOL_RECYCLE: int = 3600  # Recycle connections after 1 hour

    # Auth provider session tokens
    JWT_SECRET: str = "change_me"
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    SERVICE_ROLE_KEY: str = ""

    # AI completion backend (OpenAI-compatible API, Groq by default)
    AI_API_KEY: str = ""
    AI_BASE_URL: str = "https://api.groq.com/openai/v1"
    AI_MODEL: str = "llama-3.1-8b-instant"
    AI_TEMPERATURE: float = 0.7
    AI_MAX_TOKENS: int = 4096

    # Geocoding
    MAPBOX_TOKEN: str = ""
    GEOCODE_COUNTRY: str = "in"
    # minLng,minLat,maxLng,maxLat
    GEOCODE_BBOX: str = "68.1766451354,6.4626995853,97.4025614766,35.5087008017"
    GEOCODE_TIMEOUT: int = 10

    # Video import
    YOUTUBE_API_KEY: str = ""

    # Sharing
    APP_URL: str = "http://localhost:3000"
    SHARED_CHAT_TTL_DAYS: int = 30

    # Rate Limiting
    ENABLE_RATE_LIMITING: bool = True
    RATE_LIMIT_GENERATE: str = "5/minute"
    RATE_LIMIT_READ: str = "60/minute"
    RATE_LIMIT_LIST: str = "30/minute"
    RATE_LIMIT_WRITE: str = "30/minute"
    RATE_LIMIT_CHAT: str = "20/minute"

    # Application Settings
    MAX_PROMPT_LENGTH: int = 2000
    MAX_CHAT_MESSAGE_LENGTH: int = 4000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "app.log"

    # CORS
    ALLOWED_ORIGINS: Union[list, str] = ["http://localhost:3000", "http://localhost:3001"]

    @field_validator('ALLOWED_ORIGINS', mode='before')
    @classmethod
    def parse_allowed_origins(cls, v):
        """Parse ALLOWED_ORIGINS from comma-separated string or list"""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(',') if origin.strip()]
        return v

    @property
    def geocode_bbox_points(self):
        """GEOCODE_BBOX as two (lat, lng) corners, or None when unset"""
        if not self.GEOCODE_BBOX:
            return None
        min_lng, min_lat, max_lng, max_lat = (float(p) for p in self.GEOCODE_BBOX.split(","))
        return [(min_lat, min_lng), (max_lat, max_lng)]

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).parents[3] / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
