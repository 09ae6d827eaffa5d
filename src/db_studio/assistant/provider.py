"""AI completion provider capability and its OpenAI implementation."""

import logging
from typing import Any, Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from db_studio.errors import TransportError
from db_studio.models.config import AssistantConfig
from db_studio.utils import loads

logger = logging.getLogger(__name__)


class AssistantProvider(Protocol):
    """Opaque completion capability.

    Returns a mapping with ``message`` and optionally ``sqlQuery`` and
    ``explanation``. May raise anything; callers absorb failures.
    """

    async def generate(
        self,
        prompt: str,
        schema_context: Optional[str] = None,
        *,
        instructions: str,
        temperature: float,
    ) -> dict[str, Any]: ...


class OpenAIProvider:
    """Chat completions in JSON mode via the OpenAI SDK."""

    def __init__(self, config: AssistantConfig, client: Optional[AsyncOpenAI] = None):
        self.config = config
        if client is None and config.api_key:
            client = AsyncOpenAI(api_key=config.api_key)
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    async def generate(
        self,
        prompt: str,
        schema_context: Optional[str] = None,
        *,
        instructions: str,
        temperature: float,
    ) -> dict[str, Any]:
        """
        Ask the model for a JSON reply.

        Raises:
            TransportError: If no API key is configured, the API call fails,
                or the reply is not a JSON object
        """
        if self._client is None:
            raise TransportError("OpenAI API key is not configured")

        system_prompt = instructions
        if schema_context:
            system_prompt = (
                f"{instructions}\n\nAvailable tables and schema:\n{schema_context}"
            )

        try:
            response = await self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                response_format={"type": "json_object"},
                temperature=temperature,
            )
        except OpenAIError as e:
            raise TransportError(f"AI provider request failed: {e}") from e

        content = response.choices[0].message.content or "{}"
        try:
            payload = loads(content)
        except ValueError as e:
            raise TransportError("AI provider returned invalid JSON") from e

        if not isinstance(payload, dict):
            raise TransportError("AI provider returned a non-object reply")
        return payload

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
