"""
Restriction configuration using Pydantic Settings.
"""

from functools import lru_cache
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RestrictSettings(BaseSettings):
    """
    Restriction hook configuration.

    Environment variables:
    - RESTRICT_HOOK_TEMPLATE: "restrict_{moniker}_resultset" (default)
    - RESTRICT_PREFIXED_HOOK_TEMPLATE: "restrict_{prefix}_{moniker}_resultset" (default)
    - RESTRICT_WRAP_HOOK_ERRORS: true (default)
    """

    model_config = SettingsConfigDict(
        env_prefix="RESTRICT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Hook naming
    hook_template: str = Field(
        default="restrict_{moniker}_resultset",
        description="Method name looked up on the user object",
    )
    prefixed_hook_template: str = Field(
        default="restrict_{prefix}_{moniker}_resultset",
        description="Method name looked up first when a prefix is bound",
    )

    # Error handling
    wrap_hook_errors: bool = Field(
        default=True,
        description="Wrap exceptions raised by hooks in RestrictionHookError",
    )

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="json or text")

    @field_validator("hook_template")
    @classmethod
    def validate_hook_template(cls, v: str) -> str:
        if "{moniker}" not in v:
            raise ValueError("hook_template must contain '{moniker}'")
        return v

    @field_validator("prefixed_hook_template")
    @classmethod
    def validate_prefixed_hook_template(cls, v: str) -> str:
        missing = [p for p in ("{prefix}", "{moniker}") if p not in v]
        if missing:
            raise ValueError(f"prefixed_hook_template must contain {missing}")
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        allowed = {"json", "text"}
        if v not in allowed:
            raise ValueError(f"log_format must be one of {allowed}")
        return v


@lru_cache
def get_settings() -> RestrictSettings:
    """Get cached settings instance."""
    return RestrictSettings()


# Shorthand
settings = get_settings()
