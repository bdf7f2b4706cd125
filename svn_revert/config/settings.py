from __future__ import annotations

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from svn_revert.constants import DEFAULT_REVERT_MESSAGE

# Load .env once at module import so every BaseSettings subclass sees the env vars
load_dotenv()


class SvnSettings(BaseSettings):
    """Subversion client settings. Env vars prefixed with SVN_."""

    model_config = SettingsConfigDict(env_prefix="SVN_")

    binary: str = "svn"
    username: str = ""  # empty = no default credentials
    password: str = ""
    non_interactive: bool = True
    trust_server_cert: bool = False
    command_timeout_s: float | None = Field(None, gt=0)  # None = wait for the server
    allow_anonymous: bool = True  # file:// and anonymous servers need no credentials

    @field_validator("binary")
    @classmethod
    def _validate_binary(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("SVN_BINARY must not be empty")
        return v


class RevertSettings(BaseSettings):
    """Revert behaviour settings. Env vars prefixed with REVERT_."""

    model_config = SettingsConfigDict(env_prefix="REVERT_")

    message: str = DEFAULT_REVERT_MESSAGE  # used verbatim for every module commit

    @field_validator("message")
    @classmethod
    def _validate_message(cls, v: str) -> str:
        if not v.strip():
            msg = "REVERT_MESSAGE must not be blank (svn rejects empty log messages)"
            raise ValueError(msg)
        return v


class LogSettings(BaseSettings):
    """Operational logging settings. Env vars prefixed with LOG_."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def _validate_level(cls, v: str) -> str:
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        upper = v.upper()
        if upper not in allowed:
            msg = f"LOG_LEVEL must be one of {allowed} (got '{v}')"
            raise ValueError(msg)
        return upper


class Settings(BaseSettings):
    """Root settings composing all sub-configurations."""

    model_config = SettingsConfigDict(extra="ignore")

    svn: SvnSettings = Field(default_factory=SvnSettings)
    revert: RevertSettings = Field(default_factory=RevertSettings)
    log: LogSettings = Field(default_factory=LogSettings)


def get_settings() -> Settings:
    """Load and validate settings. Raises ValidationError on invalid values."""
    return Settings()
