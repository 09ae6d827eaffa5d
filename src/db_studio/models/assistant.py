"""Assistant responses, conversation turns and streamed channel frames."""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import Field

from db_studio.models.base import CamelModel


class AIResponse(CamelModel):
    """Contract returned by generate, optimize and explain."""

    message: str = Field(..., description="Human-readable reply")
    sql_query: Optional[str] = Field(None, description="Suggested SQL, if any")
    explanation: Optional[str] = Field(None, description="Detailed explanation")


class TurnState(str, Enum):
    """Lifecycle of one conversation turn."""

    IDLE = "idle"
    SENT = "sent"
    COMPLETED = "completed"
    FAILED = "failed"


class AssistantTurn(CamelModel):
    """One message in a session-local conversation. Never persisted."""

    role: Literal["user", "assistant"]
    text: str
    sql_query: Optional[str] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


# Streamed channel frames

AI_CHAT = "ai_chat"
AI_OPTIMIZE = "ai_optimize"
AI_EXPLAIN = "ai_explain"
AI_RESPONSE = "ai_response"
ERROR = "error"

REQUEST_FRAME_TYPES = frozenset({AI_CHAT, AI_OPTIMIZE, AI_EXPLAIN})


class RequestFrame(CamelModel):
    """Inbound frame. ``content`` is a prompt for ai_chat and SQL otherwise."""

    type: str
    content: str
    table_schema: Optional[str] = None


class ResponseFrame(CamelModel):
    type: Literal["ai_response"] = AI_RESPONSE
    data: AIResponse


class ErrorFrame(CamelModel):
    type: Literal["error"] = ERROR
    message: str
