"""Server side of the streamed assistant transport (one WebSocket per client).

Frames carry no correlation id: replies go out in the order requests arrive,
so a client must keep at most one request outstanding per channel.
"""

import logging
from typing import TYPE_CHECKING, Any, Optional, Union

from fastapi import WebSocket
from pydantic import ValidationError as PydanticValidationError
from starlette.websockets import WebSocketState

from db_studio.assistant.gateway import AssistantGateway, resolve_schema_context
from db_studio.models.assistant import (
    AI_CHAT,
    AI_EXPLAIN,
    AI_OPTIMIZE,
    AIResponse,
    ErrorFrame,
    RequestFrame,
    ResponseFrame,
)
from db_studio.utils import dumps, loads

if TYPE_CHECKING:
    from db_studio.core.catalog import SchemaCatalog

logger = logging.getLogger(__name__)

FAILED_TO_PROCESS = "Failed to process message"


class ChannelRegistry:
    """Tracks open channels; each is served by its own task."""

    def __init__(self):
        self._channels: set["AssistantChannel"] = set()

    def register(self, channel: "AssistantChannel") -> None:
        self._channels.add(channel)

    def unregister(self, channel: "AssistantChannel") -> None:
        self._channels.discard(channel)

    def __len__(self) -> int:
        return len(self._channels)


class AssistantChannel:
    """Handle one client's frames sequentially until it disconnects."""

    def __init__(
        self,
        websocket: WebSocket,
        gateway: AssistantGateway,
        catalog: Optional["SchemaCatalog"] = None,
        include_schema_context: bool = True,
        registry: Optional[ChannelRegistry] = None,
    ):
        self.websocket = websocket
        self.gateway = gateway
        self.catalog = catalog
        self.include_schema_context = include_schema_context
        self.registry = registry

    async def serve(self) -> None:
        if self.registry is not None:
            self.registry.register(self)

        try:
            await self.websocket.accept()
            logger.info("AI WebSocket client connected")
            while True:
                message = await self.websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
                raw = message.get("text")
                if raw is None:
                    raw = message.get("bytes") or b""
                reply = await self.handle_frame(raw)
                if not await self._send(reply):
                    break
        finally:
            if self.registry is not None:
                self.registry.unregister(self)
            logger.info("AI WebSocket client disconnected")

    async def handle_frame(self, raw: Union[str, bytes]) -> dict[str, Any]:
        """Turn one inbound frame into exactly one outbound frame."""
        try:
            frame = RequestFrame.model_validate(loads(raw))
        except (ValueError, PydanticValidationError) as e:
            logger.warning(f"WebSocket message error: {e}")
            return ErrorFrame(message=FAILED_TO_PROCESS).to_json_dict()

        try:
            response = await self._dispatch(frame)
        except Exception as e:
            logger.error(f"WebSocket {frame.type} handling failed: {e}", exc_info=True)
            return ErrorFrame(message=FAILED_TO_PROCESS).to_json_dict()
        if response is None:
            return ErrorFrame(
                message=f"Unsupported message type: {frame.type}"
            ).to_json_dict()
        return ResponseFrame(data=response).to_json_dict()

    async def _dispatch(self, frame: RequestFrame) -> Optional[AIResponse]:
        if frame.type == AI_CHAT:
            context = await resolve_schema_context(
                frame.table_schema, self.catalog, self.include_schema_context
            )
            return await self.gateway.generate(frame.content, context)
        if frame.type == AI_OPTIMIZE:
            return await self.gateway.optimize(frame.content)
        if frame.type == AI_EXPLAIN:
            return await self.gateway.explain(frame.content)
        return None

    async def _send(self, frame: dict[str, Any]) -> bool:
        if self.websocket.client_state is not WebSocketState.CONNECTED:
            return False
        await self.websocket.send_text(dumps(frame))
        return True
