"""AI assistant: provider capability, gateway and both transports."""

from .channel import AssistantChannel, ChannelRegistry
from .client import AssistantClient, AssistantSession, StreamChannel, WebSocketChannel
from .gateway import AssistantGateway, resolve_schema_context
from .provider import AssistantProvider, OpenAIProvider

__all__ = [
    "AssistantProvider",
    "OpenAIProvider",
    "AssistantGateway",
    "resolve_schema_context",
    "AssistantChannel",
    "ChannelRegistry",
    "AssistantClient",
    "AssistantSession",
    "StreamChannel",
    "WebSocketChannel",
]
