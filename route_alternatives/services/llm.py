import logging
from typing import List, Optional

import anthropic
import openai
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from route_alternatives.core.config import settings
from route_alternatives.domain.routing.exceptions import SummaryFailure

logger = logging.getLogger(__name__)


class LLMService:
    """Text-generation client used by the route summary bridge."""

    def __init__(
        self,
        provider: Optional[str] = None,
        model: Optional[str] = None,
        *,
        anthropic_client: Optional[AsyncAnthropic] = None,
        openai_client: Optional[AsyncOpenAI] = None,
    ):
        self.provider = provider or settings.LLM_PROVIDER
        self.model = model or settings.LLM_MODEL
        self.anthropic_client = anthropic_client
        self.openai_client = openai_client

        if self.provider == "anthropic" and self.anthropic_client is None and settings.ANTHROPIC_API_KEY:
            self.anthropic_client = AsyncAnthropic(
                api_key=settings.ANTHROPIC_API_KEY,
                timeout=settings.LLM_TIMEOUT_SECONDS,
                max_retries=0,
            )
        elif self.provider == "openai" and self.openai_client is None and settings.OPENAI_API_KEY:
            self.openai_client = AsyncOpenAI(
                api_key=settings.OPENAI_API_KEY,
                timeout=settings.LLM_TIMEOUT_SECONDS,
                max_retries=0,
            )

        if not self.is_configured():
            logger.warning("⚠ No LLM provider configured, route summaries are disabled")

    def is_configured(self) -> bool:
        if self.provider == "anthropic":
            return self.anthropic_client is not None
        if self.provider == "openai":
            return self.openai_client is not None
        return False

    async def complete(self, system_prompt: str, user_prompt: str) -> List[str]:
        """Return the text fragments of the model answer, in order."""

        if not self.is_configured():
            raise SummaryFailure(503, f"LLM provider {self.provider!r} is not configured")

        try:
            return await self._request(system_prompt, user_prompt)
        except (anthropic.APIStatusError, openai.APIStatusError) as exc:
            logger.error("LLM request rejected: %s", exc.status_code)
            raise SummaryFailure(exc.status_code, exc.response.text) from exc
        except (anthropic.APIConnectionError, openai.APIConnectionError) as exc:
            logger.error("LLM request failed: %s", exc)
            raise SummaryFailure(503, str(exc)) from exc

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=1, min=1, max=3),
        retry=retry_if_exception_type((anthropic.APIConnectionError, openai.APIConnectionError)),
        reraise=True,
    )
    async def _request(self, system_prompt: str, user_prompt: str) -> List[str]:
        if self.provider == "anthropic":
            return await self._call_anthropic(system_prompt, user_prompt)
        return await self._call_openai(system_prompt, user_prompt)

    async def _call_anthropic(self, system_prompt: str, user_prompt: str) -> List[str]:
        message = await self.anthropic_client.messages.create(
            model=self.model,
            max_tokens=settings.LLM_MAX_TOKENS,
            temperature=0.3,
            system=system_prompt,
            messages=[
                {"role": "user", "content": user_prompt}
            ]
        )
        return [block.text for block in message.content if getattr(block, "type", None) == "text"]

    async def _call_openai(self, system_prompt: str, user_prompt: str) -> List[str]:
        response = await self.openai_client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            temperature=0.3,
            max_tokens=settings.LLM_MAX_TOKENS,
        )
        return [choice.message.content for choice in response.choices if choice.message.content]
