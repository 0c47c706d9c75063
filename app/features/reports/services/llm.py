from typing import Optional

from openai import AsyncOpenAI, OpenAIError

from app.platform.config import settings
from app.platform.errors import EnrichmentUpstreamFailure
from app.platform.logger import get_logger

logger = get_logger(__name__)


class CompletionService:
    """Single-prompt text completion through OpenRouter's OpenAI-compatible API."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        model: str,
        temperature: float = 0.4,
        timeout: float = 60.0,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.temperature = temperature
        self.timeout = timeout

    @classmethod
    def from_settings(cls) -> "CompletionService":
        return cls(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            model=settings.SUGGESTIONS_MODEL,
            temperature=settings.SUGGESTIONS_TEMPERATURE,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    def _client(self) -> AsyncOpenAI:
        return AsyncOpenAI(base_url=self.base_url, api_key=self.api_key, timeout=self.timeout)

    async def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise EnrichmentUpstreamFailure("OPENROUTER_API_KEY is not configured")

        try:
            completion = await self._client().chat.completions.create(
                extra_headers={
                    "HTTP-Referer": "https://a11y-audit-ai.com",
                    "X-Title": settings.APP_NAME,
                },
                model=self.model,
                messages=[
                    {
                        "role": "system",
                        "content": "You are a web accessibility expert. Always respond with valid JSON only."
                    },
                    {
                        "role": "user",
                        "content": prompt
                    }
                ],
                temperature=self.temperature,
            )
        except OpenAIError as e:
            logger.error(f"OpenRouter API call failed: {str(e)}")
            raise EnrichmentUpstreamFailure(str(e)) from e

        if not completion.choices:
            raise EnrichmentUpstreamFailure("Completion returned no choices")

        text = completion.choices[0].message.content or ""
        logger.info(f"Completion received from {self.model}: {len(text)} chars")
        return text

    async def validate_api_key(self) -> bool:
        """Cheap probe used by the health check."""
        if not self.api_key:
            return False
        try:
            await self._client().chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": "Test"}],
                max_tokens=1,
            )
            return True
        except OpenAIError as e:
            logger.warning(f"OpenRouter API key validation failed: {e}")
            return False
