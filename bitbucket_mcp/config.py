"""Configuration loading from YAML and environment.

The server needs two values: the Bitbucket Server base URL and an HTTP
access token. Both come from the environment (BITBUCKET_URL,
BITBUCKET_TOKEN or BITBUCKET_TOKEN_FILE for Docker secrets), from a
local .env file, or from config.yaml with ${VAR} substitution. Never put
real tokens in config files committed to the repo.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Required configuration is missing; the server cannot start."""

    pass


# Injected by load_config so secrets can be read from env/file
_current_env: dict[str, str] = {}


def _read_secret(env_key: str, file_env_key: str) -> str | None:
    """Read secret from env var or from file path in env (e.g. Docker
    secrets)."""
    value = _current_env.get(env_key)
    if value:
        return value.strip()
    file_path = _current_env.get(file_env_key)
    if file_path:
        return Path(file_path).read_text().strip()
    return None


def _is_placeholder(value: str | None) -> bool:
    return not value or value.startswith("${")


class BitbucketConfig(BaseSettings):
    """Bitbucket Server connection settings."""

    model_config = SettingsConfigDict(env_prefix="BITBUCKET_", env_file=".env", extra="ignore")

    url: str | None = Field(default=None, description="Base URL, e.g. https://bitbucket.example.com")
    token: str | None = Field(default=None, description="HTTP access token; use env or secret file")
    timeout: float = Field(default=30, gt=0, description="HTTP timeout in seconds")


class ServerConfig(BaseSettings):
    """MCP server settings."""

    model_config = SettingsConfigDict(env_prefix="MCP_", env_file=".env", extra="ignore")

    name: str = Field(default="mcp-bitbucket-server", description="Server name announced to clients")
    transport: str = Field(default="stdio", description="stdio, http, sse or streamable-http")


class LoggingConfig(BaseSettings):
    """Logging settings."""

    model_config = SettingsConfigDict(env_prefix="LOGGING_", env_file=".env", extra="ignore")

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )


class AppConfig(BaseSettings):
    """Root application config from YAML + env."""

    model_config = SettingsConfigDict(extra="ignore")

    bitbucket: BitbucketConfig = Field(default_factory=BitbucketConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def bitbucket_url_resolved(self) -> str | None:
        """Base URL from config, else BITBUCKET_URL."""
        url = self.bitbucket.url
        if not _is_placeholder(url):
            return url.strip().rstrip("/")
        env_url = _current_env.get("BITBUCKET_URL")
        return env_url.strip().rstrip("/") if env_url else None

    @property
    def bitbucket_token_resolved(self) -> str | None:
        """Token from config, else BITBUCKET_TOKEN or BITBUCKET_TOKEN_FILE."""
        token = self.bitbucket.token
        if not _is_placeholder(token):
            return token.strip()
        return _read_secret("BITBUCKET_TOKEN", "BITBUCKET_TOKEN_FILE")

    def require_bitbucket(self) -> tuple[str, str]:
        """Return (url, token) or raise ConfigError naming what is missing."""
        url = self.bitbucket_url_resolved
        if not url:
            raise ConfigError("BITBUCKET_URL environment variable is required")
        token = self.bitbucket_token_resolved
        if not token:
            raise ConfigError("BITBUCKET_TOKEN environment variable is required")
        return url, token


def _substitute_env(value: Any) -> Any:
    """Replace ${VAR} and $VAR in strings with os.environ."""
    if isinstance(value, str):
        if value.startswith("${") and value.endswith("}"):
            key = value[2:-1].strip()
            return _current_env.get(key, value)
        if value.startswith("$") and not value.startswith("${"):
            key = value[1:].strip()
            return _current_env.get(key, value)
        return value
    if isinstance(value, dict):
        return {k: _substitute_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env(v) for v in value]
    return value


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load config from YAML file and environment.

    A missing YAML file is not an error: everything then comes from the
    environment. Use AppConfig.require_bitbucket() to check that the
    server can start.
    """
    global _current_env

    _current_env = dict(os.environ)

    path = config_path or Path("config.yaml")
    if not path.is_file():
        return AppConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    raw = _substitute_env(raw)

    bitbucket = BitbucketConfig(**(raw.get("bitbucket") or {}))
    server = ServerConfig(**(raw.get("server") or {}))
    logging = LoggingConfig(**(raw.get("logging") or {}))

    return AppConfig(bitbucket=bitbucket, server=server, logging=logging)
