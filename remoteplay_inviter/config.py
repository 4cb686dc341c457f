# =============================================================================
# Remote Play Inviter -- Local Configuration
# =============================================================================
#
# Two small TOML files next to the client's base path:
#   <base>.config.toml    uuid = "..."   generated once, then reused
#   <base>.endpoint.toml  url = "..."    optional endpoint override
# =============================================================================

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import tomlkit
import tomlkit.exceptions

from ._logging import logger
from .constants import DEFAULT_ENDPOINT_URL
from .errors import ConfigurationLoadError

APPIMAGE_ENV = "APPIMAGE"
ENDPOINT_ENV = "ENDPOINT_URL"
DEFAULT_BASE_PATH = Path.home() / ".remoteplay-inviter" / "inviter"


@dataclass
class ClientConfig:
    """Persistent client identity sent as the session ``token``."""

    uuid: str

    @classmethod
    def generate(cls) -> ClientConfig:
        return cls(uuid=str(uuid.uuid4()))


@dataclass
class EndpointConfig:
    """Endpoint override read from ``<base>.endpoint.toml``."""

    url: str


def base_path() -> Path:
    """Where configuration files live, minus their suffix.

    An AppImage bundle keeps its files next to the image; otherwise they go
    under ``~/.remoteplay-inviter``.
    """
    appimage = os.environ.get(APPIMAGE_ENV)
    if appimage:
        path = Path(appimage)
        if not path.exists():
            raise ConfigurationLoadError(f"APPIMAGE path does not exist: {path}")
        return path
    return DEFAULT_BASE_PATH


def config_path(base: Path | None = None) -> Path:
    base = base or base_path()
    return base.with_suffix(".config.toml")


def endpoint_path(base: Path | None = None) -> Path:
    base = base or base_path()
    return base.with_suffix(".endpoint.toml")


def read_endpoint_config(path: Path | None = None) -> EndpointConfig | None:
    """Read the endpoint override, or ``None`` when there is no override file."""
    path = path or endpoint_path()
    if not path.exists():
        return None
    document = _read_document(path)
    url = document.get("url")
    if not isinstance(url, str) or not url:
        raise ConfigurationLoadError(f"Endpoint config {path} has no 'url' string")
    return EndpointConfig(url=url)


def read_or_generate_config(
    path: Path | None = None,
    generate: Callable[[], ClientConfig] = ClientConfig.generate,
) -> ClientConfig:
    """Load the client identity, creating and saving it on first run."""
    path = path or config_path()
    if path.exists():
        document = _read_document(path)
        value = document.get("uuid")
        if not isinstance(value, str) or not value:
            raise ConfigurationLoadError(f"Config {path} has no 'uuid' string")
        return ClientConfig(uuid=value)

    config = generate()
    document = tomlkit.document()
    document.add("uuid", config.uuid)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(tomlkit.dumps(document), encoding="utf-8")
    except OSError as exc:
        raise ConfigurationLoadError(f"Unable to write config file {path}: {exc}") from exc
    logger.debug("Generated client config at %s", path)
    return config


def resolve_endpoint(override: str | None = None, path: Path | None = None) -> str:
    """Pick the endpoint URL: explicit override, endpoint file, env, default."""
    if override:
        return override
    endpoint = read_endpoint_config(path)
    if endpoint is not None:
        return endpoint.url
    return os.environ.get(ENDPOINT_ENV) or DEFAULT_ENDPOINT_URL


def _read_document(path: Path) -> dict:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationLoadError(f"Unable to read config file {path}: {exc}") from exc
    try:
        return tomlkit.parse(text).unwrap()
    except tomlkit.exceptions.ParseError as exc:
        raise ConfigurationLoadError(f"Unable to parse config file {path}: {exc}") from exc
