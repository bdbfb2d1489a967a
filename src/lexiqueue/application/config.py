from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from lexiqueue.domain.constants import (
    DEFAULT_API_BASE,
    DEFAULT_LIMIT,
    MAX_LIMIT,
    REQUEST_TIMEOUT,
)


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/lexiqueue/config.toml",
        Path.home() / ".lexiqueue.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for lexiqueue.
    Supports loading from:
    1. Environment variables (LEXIQUEUE_*)
    2. Config file (~/.config/lexiqueue/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="LEXIQUEUE_",
        extra="ignore",
        use_attribute_docstrings=True,
    )

    # Service
    api_base: str = DEFAULT_API_BASE
    token: str | None = None
    request_timeout: float = REQUEST_TIMEOUT

    # Session
    mode: Literal["learn", "review"] = "learn"
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=MAX_LIMIT)
    category: str | None = None

    # Engine behaviour
    auto_fetch: bool = True
    restart_on_empty: bool = False
    """
    Start a new batch (reset fetch) as soon as the queue drains. Off by default
    so a drained session stays `complete` until an explicit refresh; the
    hosted web client restarts automatically, which matches setting this on.
    """
    exact_rollback: bool = True

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (
            init_settings,
            env_settings,
        )

    @field_validator("api_base", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Any) -> str:
        return str(v).rstrip("/")

    @field_validator("category", "token", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/lexiqueue/config.toml (if exists)
    3. Environment variables (LEXIQUEUE_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
