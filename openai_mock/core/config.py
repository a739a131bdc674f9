import logging
from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import List, Mapping, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_KEY = "sk-mock-openai-api-key-12345"
DEFAULT_EMBEDDING_DIMENSIONS = 1536

DEFAULT_EMBEDDING_DIMENSIONS_BY_MODEL: Mapping[str, int] = MappingProxyType(
    {
        "text-embedding-ada-002": 1536,
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-similarity-ada-001": 1024,
        "text-similarity-babbage-001": 2048,
        "text-similarity-curie-001": 4096,
        "text-similarity-davinci-001": 12288,
    }
)

DEFAULT_COMPLETION_TEXT_POOL: Tuple[str, ...] = (
    " Hello! How can I help you today?",
    " This is an interesting topic that deserves careful consideration and thoughtful analysis.",
    " There are several important factors to consider when approaching this subject matter.",
    " Once upon a time, in a land far away, there lived a curious explorer who discovered "
    "amazing secrets hidden in ancient ruins.",
    " The key to understanding this lies in examining the underlying principles and their "
    "practical applications.",
    "\n```python\ndef example():\n    print(\"Hello, world!\")\n    return True\n```",
    " This represents a fascinating area of study with many opportunities for further exploration.",
    " To understand this properly, we need to consider the historical context and how various "
    "factors have influenced its development over time.",
)

DEFAULT_CHAT_TEXT_POOL: Tuple[str, ...] = (
    "Hello! How can I assist you today?",
    "That's an interesting question. Let me provide you with a comprehensive answer based on my knowledge.",
    "Here's how you can approach this: I'll break it down into clear, actionable steps.",
    "There are several reasons for this. Let me explain the key factors involved.",
    "I can help you with programming! Here's a solution:\n\n```python\ndef example_function():\n"
    "    return \"Hello, World!\"\n```\n\nThis code demonstrates a basic function that returns a greeting.",
    "I'd be delighted to help with creative writing! Once upon a time, in a world where artificial "
    "intelligence and human creativity merged seamlessly, there lived a helpful assistant who loved "
    "to tell stories...",
    "I'm here to help! Please feel free to ask me anything, and I'll do my best to provide you with "
    "accurate and helpful information.",
)

_LOG_LEVEL_ALIASES = {"TRACE": "DEBUG", "WARN": "WARNING"}
_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class MockConfig:
    """Immutable configuration handed to every core component at startup."""

    api_key: str = DEFAULT_API_KEY
    default_embedding_dimensions_by_model: Mapping[str, int] = field(
        default_factory=lambda: DEFAULT_EMBEDDING_DIMENSIONS_BY_MODEL
    )
    default_embedding_dimensions: int = DEFAULT_EMBEDDING_DIMENSIONS
    completion_text_pool: Tuple[str, ...] = DEFAULT_COMPLETION_TEXT_POOL
    chat_text_pool: Tuple[str, ...] = DEFAULT_CHAT_TEXT_POOL

    def __post_init__(self) -> None:
        if not self.completion_text_pool or not self.chat_text_pool:
            raise ValueError("Text pools must contain at least one template")
        # Freeze caller-supplied containers so the config can be shared across requests.
        object.__setattr__(
            self,
            "default_embedding_dimensions_by_model",
            MappingProxyType(dict(self.default_embedding_dimensions_by_model)),
        )
        object.__setattr__(self, "completion_text_pool", tuple(self.completion_text_pool))
        object.__setattr__(self, "chat_text_pool", tuple(self.chat_text_pool))


class Settings(BaseSettings):
    """Process configuration read from ``OPENAI_MOCK_*`` variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_MOCK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    HOST: str = "0.0.0.0"
    PORT: int = Field(default=13673, ge=1, le=65535)
    API_KEY: str = DEFAULT_API_KEY
    REQUEST_TIMEOUT_SECS: int = Field(default=30, gt=0)
    ENABLE_CORS: bool = True
    ENABLE_LOGGING: bool = True
    LOG_LEVEL: str = "INFO"

    # Comma-separated list of allowed origins
    CORS_ORIGINS: str = "*"

    @field_validator("API_KEY")
    @classmethod
    def validate_api_key(cls, value: str) -> str:
        if not value:
            raise ValueError("API key cannot be empty")
        if not value.startswith("sk-"):
            raise ValueError("API key should start with 'sk-'")
        return value

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        level = _LOG_LEVEL_ALIASES.get(level, level)
        if level not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: '{value}'. Valid levels: trace, debug, info, warn, error, critical"
            )
        return level

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def log_level_value(self) -> int:
        return getattr(logging, self.LOG_LEVEL)

    @property
    def bind_address(self) -> str:
        return f"{self.HOST}:{self.PORT}"

    @property
    def base_url(self) -> str:
        host = "localhost" if self.HOST == "0.0.0.0" else self.HOST
        return f"http://{host}:{self.PORT}"

    @property
    def masked_api_key(self) -> str:
        return f"{self.API_KEY[:10]}***"

    def to_mock_config(self) -> MockConfig:
        return MockConfig(api_key=self.API_KEY)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached Settings instance."""

    return Settings()
