from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from pydantic import (
    Field,
    SecretStr,
    ValidationError,
    field_serializer,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import TomlConfigSettingsSource

from .client import DEFAULT_API_URL
from .errors import ConfigError
from .stream import DEFAULT_WS_URL

HOME_CONFIG_PATH = Path.home() / ".roarbot" / "roarbot.toml"


class RoarBotSettings(BaseSettings):
    model_config = SettingsConfigDict(
        extra="forbid",
        env_prefix="ROARBOT__",
        env_nested_delimiter="__",
    )

    username: str | None = None
    password: SecretStr | None = None
    admins: list[str] = Field(default_factory=list)
    banned: list[str] = Field(default_factory=list)
    api_url: str = DEFAULT_API_URL
    ws_url: str = DEFAULT_WS_URL
    http_timeout_s: float = Field(default=30, gt=0)

    @field_validator("username", mode="before")
    @classmethod
    def _validate_username(cls, value: Any) -> Any:
        if value is None:
            return None
        if not isinstance(value, str):
            raise ValueError("username must be a string")
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("username must be a non-empty string")
        return cleaned

    @field_validator("admins", "banned", mode="before")
    @classmethod
    def _validate_usernames(cls, value: Any, info) -> Any:
        if value is None:
            return []
        if isinstance(value, str) or not isinstance(value, (list, tuple)):
            raise ValueError(f"{info.field_name} must be a list of usernames")
        cleaned: list[str] = []
        for item in value:
            if not isinstance(item, str) or not item.strip():
                raise ValueError(
                    f"{info.field_name} entries must be non-empty strings"
                )
            cleaned.append(item.strip())
        return cleaned

    @field_serializer("password")
    def _dump_password(self, value: SecretStr | None) -> str | None:
        return value.get_secret_value() if value else None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )

    def require_credentials(self, config_path: Path | None = None) -> tuple[str, str]:
        where = f" in {config_path}" if config_path is not None else ""
        if self.username is None:
            raise ConfigError(f"Missing `username`{where}.")
        if self.password is None or not self.password.get_secret_value():
            raise ConfigError(f"Missing `password`{where}.")
        return self.username, self.password.get_secret_value()


def _resolve_config_path(path: str | Path | None) -> Path:
    return Path(path).expanduser() if path else HOME_CONFIG_PATH


def load_settings(path: str | Path | None = None) -> tuple[RoarBotSettings, Path]:
    """Load settings from the environment and the TOML config file.

    An explicit ``path`` has to exist; the default path is optional so that a
    bot can be configured from ``ROARBOT__*`` variables alone.
    """
    cfg_path = _resolve_config_path(path)
    if cfg_path.exists() and not cfg_path.is_file():
        raise ConfigError(f"Config path {cfg_path} exists but is not a file.") from None
    if path is not None and not cfg_path.exists():
        raise ConfigError(f"Missing config file {cfg_path}.") from None
    cfg = dict(RoarBotSettings.model_config)
    if cfg_path.exists():
        cfg["toml_file"] = cfg_path
    Bound = type(
        "RoarBotSettingsBound",
        (RoarBotSettings,),
        {"model_config": SettingsConfigDict(**cfg)},
    )
    try:
        return Bound(), cfg_path
    except ValidationError as exc:
        raise ConfigError(f"Invalid config in {cfg_path}: {exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Malformed TOML in {cfg_path}: {exc}") from None
