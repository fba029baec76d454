import logging
from typing import Dict, List, Optional

from fastapi import Request
from openai import AsyncOpenAI, OpenAIError

from wander.core.errors import ServiceNotConfiguredError, UpstreamServiceError
from wander.core.settings import Settings

logger = logging.getLogger(__name__)


class AIClient:
    """Chat completions against an OpenAI-compatible backend (Groq by default)"""

    def __init__(self, settings: Settings, client: Optional[AsyncOpenAI] = None):
        self.model = settings.AI_MODEL
        self.temperature = settings.AI_TEMPERATURE
        self.max_tokens = settings.AI_MAX_TOKENS
        self._client = client
        if self._client is None and settings.AI_API_KEY:
            self._client = AsyncOpenAI(
                api_key=settings.AI_API_KEY,
                base_url=settings.AI_BASE_URL,
            )

    @property
    def configured(self) -> bool:
        return self._client is not None

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Text of the first choice, or an empty string when the model returns none"""
        if self._client is None:
            raise ServiceNotConfiguredError("AI service is not configured")

        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature if temperature is None else temperature,
                max_tokens=max_tokens or self.max_tokens,
            )
        except OpenAIError as e:
            logger.error(f"AI completion failed: {type(e).__name__}: {e}")
            raise UpstreamServiceError("AI service request failed") from e

        if not completion.choices:
            return ""
        return completion.choices[0].message.content or ""

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()


def get_ai_client(request: Request) -> AIClient:
    """The process-wide client created by the application lifespan"""
    client = getattr(request.app.state, "ai", None)
    if client is None:
        raise RuntimeError("AI client not initialized")
    return client
