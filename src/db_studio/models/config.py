"""Configuration models for the store, the assistant and the server."""

import os
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from sqlalchemy.engine.url import make_url

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///data/local.db"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class DatabaseConfig(BaseModel):
    """Configuration for the embedded store."""

    url: str = Field(
        default=DEFAULT_DATABASE_URL,
        description="Database connection URL (e.g., sqlite+aiosqlite:///data/local.db)",
    )
    echo_sql: bool = Field(
        default=False,
        description="Echo SQL statements to stdout",
    )
    seed_sample_data: bool = Field(
        default=True,
        description="Create and populate the sample tables on startup",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate database URL format."""
        try:
            url = make_url(v)
        except Exception as e:
            raise ValueError(f"Invalid database URL: {e}")

        dialect = url.drivername.split("+")[0]
        if dialect != "sqlite":
            raise ValueError(
                f"Unsupported database dialect: {dialect}. Supported: sqlite"
            )

        # Ensure async driver is specified
        if "+" not in url.drivername:
            raise ValueError("Async driver required. Example: sqlite+aiosqlite://")

        return v

    @property
    def dialect(self) -> str:
        """Extract database dialect from URL."""
        return make_url(self.url).drivername.split("+")[0]

    @property
    def driver(self) -> str:
        """Extract driver name from URL."""
        parts = make_url(self.url).drivername.split("+")
        return parts[1] if len(parts) > 1 else ""

    @property
    def database_path(self) -> Optional[str]:
        """Filesystem path of the database, None for in-memory stores."""
        database = make_url(self.url).database
        if not database or database == ":memory:":
            return None
        return database

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "sqlite+aiosqlite:///data/local.db",
                    "echo_sql": False,
                    "seed_sample_data": True,
                }
            ]
        }
    }


class AssistantConfig(BaseModel):
    """Configuration for the AI completion provider."""

    api_key: Optional[str] = Field(None, description="OpenAI API key")
    model: str = Field(default="gpt-4o", description="Chat completion model")
    include_schema_context: bool = Field(
        default=True,
        description="Send the live table schema when the caller supplies none",
    )


class ServerConfig(BaseModel):
    """Top-level configuration for the HTTP/WebSocket service."""

    host: str = Field(default="127.0.0.1", description="Bind address")
    port: int = Field(default=5000, ge=1, le=65535, description="Bind port")
    api_prefix: str = Field(default="/api", description="Prefix for HTTP routes")
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)

    @field_validator("api_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        v = v.rstrip("/")
        if v and not v.startswith("/"):
            raise ValueError("api_prefix must start with '/'")
        return v

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Build the configuration from environment variables."""
        return cls(
            host=os.getenv("DB_STUDIO_HOST", "127.0.0.1"),
            port=int(os.getenv("DB_STUDIO_PORT", "5000")),
            api_prefix=os.getenv("DB_STUDIO_API_PREFIX", "/api"),
            database=DatabaseConfig(
                url=os.getenv("DB_STUDIO_DATABASE_URL", DEFAULT_DATABASE_URL),
                echo_sql=_env_flag("DB_STUDIO_ECHO_SQL", False),
                seed_sample_data=_env_flag("DB_STUDIO_SEED_SAMPLE_DATA", True),
            ),
            assistant=AssistantConfig(
                api_key=os.getenv("OPENAI_API_KEY") or None,
                model=os.getenv("DB_STUDIO_AI_MODEL", "gpt-4o"),
                include_schema_context=_env_flag("DB_STUDIO_AI_SCHEMA_CONTEXT", True),
            ),
        )
