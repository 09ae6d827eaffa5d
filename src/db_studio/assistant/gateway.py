"""Assistant operations with graceful degradation on provider failure."""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from pydantic import ValidationError as PydanticValidationError

from db_studio.assistant.provider import AssistantProvider
from db_studio.errors import CatalogError
from db_studio.models.assistant import AIResponse

if TYPE_CHECKING:
    from db_studio.core.catalog import SchemaCatalog

logger = logging.getLogger(__name__)

UNAVAILABLE_MESSAGE = (
    "I'm currently unavailable. Please try again later "
    "or write your SQL query manually."
)

_JSON_WITH_SQL = """Respond with JSON in this format:
{
  "message": "%s",
  "sqlQuery": "%s",
  "explanation": "%s"
}"""


@dataclass(frozen=True)
class Operation:
    """Prompting and fallback text for one assistant operation."""

    name: str
    instructions: str
    temperature: float
    default_message: str
    unavailable_message: str
    returns_sql: bool = True


GENERATE = Operation(
    name="generate",
    instructions=(
        "You are a SQL expert assistant for a database management system.\n"
        "Help users write SQL queries, optimize performance, and explain "
        "database concepts.\nAlways provide valid SQL syntax and explain your "
        "reasoning.\n\n"
        + _JSON_WITH_SQL
        % (
            "Your explanation or response",
            "SQL query if applicable",
            "Detailed explanation of the query",
        )
    ),
    temperature=0.3,
    default_message="I'm here to help with your database questions!",
    unavailable_message=UNAVAILABLE_MESSAGE,
)

OPTIMIZE = Operation(
    name="optimize",
    instructions=(
        "You are a SQL optimization expert.\n"
        "Analyze the provided SQL query and suggest optimizations for better "
        "performance.\nConsider indexes, query structure, and best practices.\n\n"
        + _JSON_WITH_SQL
        % (
            "Optimization summary",
            "Optimized SQL query",
            "Detailed explanation of optimizations made",
        )
    ),
    temperature=0.2,
    default_message="Here are some optimization suggestions:",
    unavailable_message=(
        "Unable to optimize query at the moment. Please try again later."
    ),
)

EXPLAIN = Operation(
    name="explain",
    instructions=(
        "You are a SQL education expert.\n"
        "Explain the provided SQL query in simple terms, breaking down each "
        "part.\nHelp users understand what the query does and how it works.\n\n"
        "Respond with JSON in this format:\n"
        "{\n"
        '  "message": "Simple explanation of the query",\n'
        '  "explanation": "Detailed breakdown of each part"\n'
        "}"
    ),
    temperature=0.3,
    default_message="Here's what this query does:",
    unavailable_message=(
        "Unable to explain query at the moment. Please try again later."
    ),
    returns_sql=False,
)


def _optional_text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


class AssistantGateway:
    """generate / optimize / explain over an opaque provider.

    Never raises to its caller: any provider exception or malformed reply is
    logged and replaced by a message-only ``AIResponse``.
    """

    def __init__(self, provider: Optional[AssistantProvider]):
        self.provider = provider

    async def generate(
        self, prompt: str, schema_context: Optional[str] = None
    ) -> AIResponse:
        return await self._run(GENERATE, prompt, schema_context)

    async def optimize(self, sql_text: str) -> AIResponse:
        return await self._run(
            OPTIMIZE,
            f"Please optimize this SQL query:\n\n{sql_text}",
            default_sql=sql_text,
        )

    async def explain(self, sql_text: str) -> AIResponse:
        return await self._run(EXPLAIN, f"Please explain this SQL query:\n\n{sql_text}")

    async def _run(
        self,
        operation: Operation,
        prompt: str,
        schema_context: Optional[str] = None,
        default_sql: Optional[str] = None,
    ) -> AIResponse:
        if self.provider is None:
            logger.warning(f"AI {operation.name} requested with no provider configured")
            return AIResponse(message=operation.unavailable_message)

        try:
            payload = await self.provider.generate(
                prompt,
                schema_context,
                instructions=operation.instructions,
                temperature=operation.temperature,
            )
            return self._to_response(operation, payload, default_sql)
        except Exception as e:
            logger.error(f"AI {operation.name} error: {e}", exc_info=True)
            return AIResponse(message=operation.unavailable_message)

    def _to_response(
        self, operation: Operation, payload: Any, default_sql: Optional[str]
    ) -> AIResponse:
        if not isinstance(payload, dict):
            raise TypeError(f"Provider returned {type(payload).__name__}, expected dict")

        message = payload.get("message")
        if message is not None and not isinstance(message, str):
            raise TypeError("Provider message is not a string")

        sql_query = None
        if operation.returns_sql:
            sql_query = _optional_text(payload.get("sqlQuery")) or default_sql

        try:
            return AIResponse(
                message=message or operation.default_message,
                sql_query=sql_query,
                explanation=_optional_text(payload.get("explanation")),
            )
        except PydanticValidationError as e:
            raise TypeError(f"Malformed provider reply: {e}") from e


async def resolve_schema_context(
    explicit: Optional[str],
    catalog: Optional["SchemaCatalog"],
    enabled: bool = True,
) -> Optional[str]:
    """Caller-supplied context wins; otherwise describe the live store."""
    if explicit:
        return explicit
    if catalog is None or not enabled:
        return None
    try:
        return await catalog.schema_context() or None
    except CatalogError as e:
        logger.warning(f"Continuing without schema context: {e}")
        return None
