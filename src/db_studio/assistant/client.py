"""Caller side of the assistant: transport selection, fallback and sessions.

Each call independently prefers the streamed channel when it is open and
healthy, and otherwise (or when the streamed attempt fails) uses the
synchronous HTTP endpoints. A conversation may therefore mix transports.
"""

import logging
from typing import Any, Optional, Protocol

import httpx
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import WebSocketException
from websockets.protocol import State

from db_studio.assistant.gateway import UNAVAILABLE_MESSAGE
from db_studio.errors import TransportError
from db_studio.models.assistant import (
    AI_CHAT,
    AI_EXPLAIN,
    AI_OPTIMIZE,
    AI_RESPONSE,
    ERROR,
    AIResponse,
    AssistantTurn,
    TurnState,
)
from db_studio.utils import dumps, loads

logger = logging.getLogger(__name__)

STREAM = "stream"
HTTP = "http"

# frame type -> (HTTP path, body key for content)
_HTTP_ROUTES = {
    AI_CHAT: ("/ai/generate", "prompt"),
    AI_OPTIMIZE: ("/ai/optimize", "sqlQuery"),
    AI_EXPLAIN: ("/ai/explain", "sqlQuery"),
}


class StreamChannel(Protocol):
    """A persistent request/reply channel with one request in flight."""

    @property
    def is_open(self) -> bool: ...

    async def request(self, frame: dict[str, Any]) -> dict[str, Any]: ...


class WebSocketChannel:
    """Streamed transport over a ``websockets`` client connection."""

    def __init__(self, url: str):
        self.url = url
        self._connection: Optional[ClientConnection] = None
        self.healthy = False

    async def open(self) -> None:
        try:
            self._connection = await connect(self.url)
        except (OSError, WebSocketException) as e:
            raise TransportError(f"Could not open assistant channel: {e}") from e
        self.healthy = True

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None
        self.healthy = False

    @property
    def is_open(self) -> bool:
        return (
            self.healthy
            and self._connection is not None
            and self._connection.state is State.OPEN
        )

    async def request(self, frame: dict[str, Any]) -> dict[str, Any]:
        if self._connection is None:
            raise TransportError("Assistant channel is not open")
        try:
            await self._connection.send(dumps(frame))
            raw = await self._connection.recv()
        except (OSError, WebSocketException) as e:
            self.healthy = False
            raise TransportError(f"Assistant channel failed: {e}") from e

        try:
            reply = loads(raw)
        except ValueError as e:
            self.healthy = False
            raise TransportError("Assistant channel sent invalid JSON") from e
        if not isinstance(reply, dict):
            self.healthy = False
            raise TransportError("Assistant channel sent a non-object frame")
        return reply

    async def __aenter__(self) -> "WebSocketChannel":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class AssistantClient:
    """generate / optimize / explain with per-call transport selection."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        channel: Optional[StreamChannel] = None,
        api_prefix: str = "/api",
    ):
        self.http = http
        self.channel = channel
        self.api_prefix = api_prefix.rstrip("/")
        self.last_transport: Optional[str] = None

    async def generate(
        self, prompt: str, table_schema: Optional[str] = None
    ) -> AIResponse:
        return await self._degrading(AI_CHAT, prompt, table_schema)

    async def optimize(self, sql_text: str) -> AIResponse:
        return await self._degrading(AI_OPTIMIZE, sql_text)

    async def explain(self, sql_text: str) -> AIResponse:
        return await self._degrading(AI_EXPLAIN, sql_text)

    async def request(
        self, frame_type: str, content: str, table_schema: Optional[str] = None
    ) -> AIResponse:
        """
        Send one request, streamed first when possible.

        Raises:
            TransportError: If the synchronous transport also fails
        """
        if frame_type not in _HTTP_ROUTES:
            raise ValueError(f"Unknown assistant request type: {frame_type}")

        if self.channel is not None and self.channel.is_open:
            try:
                response = await self._via_channel(frame_type, content, table_schema)
                self.last_transport = STREAM
                return response
            except TransportError as e:
                logger.warning(f"Streamed transport failed, using HTTP: {e}")

        response = await self._via_http(frame_type, content, table_schema)
        self.last_transport = HTTP
        return response

    async def _degrading(
        self, frame_type: str, content: str, table_schema: Optional[str] = None
    ) -> AIResponse:
        try:
            return await self.request(frame_type, content, table_schema)
        except TransportError as e:
            logger.error(f"Assistant unreachable: {e}")
            return AIResponse(message=UNAVAILABLE_MESSAGE)

    async def _via_channel(
        self, frame_type: str, content: str, table_schema: Optional[str]
    ) -> AIResponse:
        frame: dict[str, Any] = {"type": frame_type, "content": content}
        if table_schema:
            frame["tableSchema"] = table_schema

        reply = await self.channel.request(frame)  # type: ignore[union-attr]

        if reply.get("type") == AI_RESPONSE:
            try:
                return AIResponse.model_validate(reply.get("data"))
            except ValueError as e:
                raise TransportError(f"Malformed ai_response frame: {e}") from e
        if reply.get("type") == ERROR:
            raise TransportError(reply.get("message") or "Assistant channel error")
        raise TransportError(f"Unexpected frame type: {reply.get('type')}")

    async def _via_http(
        self, frame_type: str, content: str, table_schema: Optional[str]
    ) -> AIResponse:
        path, key = _HTTP_ROUTES[frame_type]
        body: dict[str, Any] = {key: content}
        if frame_type == AI_CHAT and table_schema:
            body["tableSchema"] = table_schema

        try:
            response = await self.http.post(f"{self.api_prefix}{path}", json=body)
            response.raise_for_status()
            return AIResponse.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            raise TransportError(f"Assistant request failed: {e}") from e


class AssistantSession:
    """Ephemeral conversation held by one caller.

    Turn lifecycle: IDLE -> SENT -> COMPLETED | FAILED. Only one turn may be
    in flight at a time.
    """

    def __init__(self, client: AssistantClient):
        self.client = client
        self.turns: list[AssistantTurn] = []
        self.state = TurnState.IDLE

    async def ask(self, prompt: str, table_schema: Optional[str] = None) -> AIResponse:
        return await self._turn(AI_CHAT, prompt, prompt, table_schema)

    async def optimize(self, sql_text: str) -> AIResponse:
        return await self._turn(
            AI_OPTIMIZE, sql_text, f"Optimize this query:\n{sql_text}"
        )

    async def explain(self, sql_text: str) -> AIResponse:
        return await self._turn(AI_EXPLAIN, sql_text, f"Explain this query:\n{sql_text}")

    async def _turn(
        self,
        frame_type: str,
        content: str,
        user_text: str,
        table_schema: Optional[str] = None,
    ) -> AIResponse:
        if self.state is TurnState.SENT:
            raise RuntimeError("A turn is already in flight on this session")

        self.turns.append(AssistantTurn(role="user", text=user_text))
        self.state = TurnState.SENT
        try:
            response = await self.client.request(frame_type, content, table_schema)
            self.state = TurnState.COMPLETED
        except TransportError as e:
            logger.error(f"Assistant turn failed: {e}")
            response = AIResponse(message=UNAVAILABLE_MESSAGE)
            self.state = TurnState.FAILED

        self.turns.append(
            AssistantTurn(
                role="assistant",
                text=response.message,
                sql_query=response.sql_query,
            )
        )
        return response

    def clear(self) -> None:
        self.turns.clear()
        self.state = TurnState.IDLE
