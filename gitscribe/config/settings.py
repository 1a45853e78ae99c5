"""Configuration settings models using Pydantic."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitConfig(BaseModel):
    """How the git binary is invoked."""

    binary: str = "git"
    timeout: Optional[float] = Field(default=30.0, ge=0.0)
    env: dict[str, str] = Field(
        default_factory=lambda: {"GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C"},
    )

    @field_validator("binary")
    @classmethod
    def validate_binary(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("binary cannot be empty")
        return v.strip()

    @field_validator("env", mode="before")
    @classmethod
    def drop_unset_env(cls, v: Optional[dict]) -> dict:
        """Drop entries whose ${VAR} expanded to nothing."""
        if v is None:
            return {}
        return {str(k): str(val) for k, val in v.items() if val is not None}


class LogConfig(BaseModel):
    """Defaults for history queries."""

    default_count: int = Field(default=30, ge=1)


class Settings(BaseSettings):
    """Main library settings."""

    model_config = SettingsConfigDict(
        env_prefix="GITSCRIBE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    git: GitConfig = Field(default_factory=GitConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    @property
    def effective_timeout(self) -> Optional[float]:
        """Timeout in seconds, or None when disabled with 0."""
        return self.git.timeout or None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # GITSCRIBE_* variables override values loaded from YAML files
        return env_settings, init_settings, dotenv_settings, file_secret_settings
