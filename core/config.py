"""Configuration models and loading."""

import os
from collections.abc import Mapping
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, ValidationError, field_validator

from core.exceptions import ConfigurationError

# Environment variable -> (section, field)
ENV_VARS: dict[str, tuple[str, str]] = {
    "API_BASE_URL": ("api", "public_prefix"),
    "API_TARGET": ("backend", "origin"),
    "API_PREFIX": ("backend", "prefix"),
    "API_TOKEN": ("backend", "token"),
    "API_TIMEOUT": ("backend", "timeout"),
    "PROXY_HOST": ("proxy", "host"),
    "PROXY_PORT": ("proxy", "port"),
    "PROXY_DEBUG": ("proxy", "debug"),
    "STATIC_DIR": ("static", "directory"),
}


class ProxySettings(BaseModel):
    host: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    debug: bool = False


class ApiSettings(BaseModel):
    public_prefix: str = "/api"

    @field_validator("public_prefix")
    @classmethod
    def _check_public_prefix(cls, value: str) -> str:
        value = value.rstrip("/")
        if not value.startswith("/"):
            raise ValueError("public prefix must start with '/' and not be the root")
        return value


class BackendSettings(BaseModel):
    origin: str = "https://botai.smartdataautomation.com"
    prefix: str = "/api_backend_ai"
    token: str = ""
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("origin")
    @classmethod
    def _check_origin(cls, value: str) -> str:
        value = value.rstrip("/")
        parts = urlsplit(value)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError(f"backend origin must be http(s)://host, got {value!r}")
        if parts.path or parts.query or parts.fragment:
            raise ValueError("backend origin must not carry a path; use API_PREFIX")
        return value

    @field_validator("prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        value = value.rstrip("/")
        if value and not value.startswith("/"):
            raise ValueError("backend prefix must start with '/'")
        return value


class StaticSettings(BaseModel):
    directory: str = "dist"


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    api: ApiSettings = Field(default_factory=ApiSettings)
    backend: BackendSettings = Field(default_factory=BackendSettings)
    static: StaticSettings = Field(default_factory=StaticSettings)


def load_config(environ: Mapping[str, str] | None = None) -> Config:
    """Load configuration from environment variables.

    Unset variables keep their defaults. Raises ConfigurationError when a
    value fails validation.
    """
    environ = os.environ if environ is None else environ
    data: dict[str, dict[str, str]] = {}
    for name, (section, field) in ENV_VARS.items():
        value = environ.get(name)
        if value is not None and value != "":
            data.setdefault(section, {})[field] = value

    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e


def effective_env(config: Config) -> dict[str, str]:
    """Map each environment variable to the value in effect."""
    dumped = config.model_dump()
    return {
        name: str(dumped[section][field])
        for name, (section, field) in ENV_VARS.items()
    }
