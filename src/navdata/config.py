from functools import lru_cache
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import NavdataError


class ConfigError(NavdataError):
    """Configuration-related error."""
    pass


# ─────────────────────────────────────────────────────────────
# Section configs
# ─────────────────────────────────────────────────────────────


class LoggingSettings(BaseModel):
    level: Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"] = "INFO"
    format: str = (
        "%(asctime)-20s %(name)-30s %(levelname)-8s: %(message)s"
    )


class ChannelSettings(BaseModel):
    """Names of the three logical channels on the host message bus."""

    call: str = Field(
        "NAVIGRAPH_CallFunction",
        description="Channel the client sends call envelopes on.",
    )
    result: str = Field(
        "NAVIGRAPH_FunctionResult",
        description="Channel the peer answers calls on.",
    )
    event: str = Field(
        "NAVIGRAPH_Event",
        description="Channel the peer publishes events on.",
    )

    def validate_distinct(self) -> None:
        names = [self.call, self.result, self.event]
        if len(set(names)) != len(names):
            raise ConfigError(
                f"Channel names must be distinct, got call={self.call!r} "
                f"result={self.result!r} event={self.event!r}."
            )


class CallSettings(BaseModel):
    timeout_s: float | None = Field(
        default=None,
        gt=0,
        description="Default deadline for calls in seconds (None = wait forever).",
    )
    max_pending: int | None = Field(
        default=None,
        ge=1,
        description="Maximum number of outstanding calls (None = unbounded).",
    )


# ─────────────────────────────────────────────────────────────
# Top-level settings
# ─────────────────────────────────────────────────────────────


class AppSettings(BaseSettings):
    """
    Canonical configuration for a navdata client.

    Precedence (highest → lowest):

    1. Init kwargs (tests/overrides)
    2. Environment variables
    3. .env and .env.local
    4. Defaults in this class
    """

    model_config = SettingsConfigDict(
        env_prefix="NAVDATA_",  # NAVDATA_LOGGING__LEVEL, NAVDATA_CALLS__TIMEOUT_S, ...
        env_file=(".env", ".env.local"),  # .env.local overrides .env
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    app_name: str = "navdata"

    logging: LoggingSettings = LoggingSettings()
    channels: ChannelSettings = ChannelSettings()  # type: ignore[call-arg]
    calls: CallSettings = CallSettings()  # type: ignore[call-arg]


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> AppSettings:
    """
    Cached accessor for process-wide settings.

    `overrides` are init kwargs → highest precedence (handy in tests).
    """
    settings = AppSettings(**overrides)
    settings.channels.validate_distinct()
    return settings
