"""Runtime settings for peer sessions.

Values resolve in order: explicit override, YAML configuration file (either a
``peer:`` section or the root mapping), ``UNIX_PEER_*`` environment variables,
then built-in defaults. Example file::

    peer:
      socket: /run/example/daemon.sock
      read_timeout_ms: 500
      chunk_size: 65536
      log_level: DEBUG
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from services.unix_peer.telemetry import get_logger

LOGGER = get_logger("unix_peer.application.settings")

ENV_PREFIX = "UNIX_PEER_"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")
DEFAULT_READ_TIMEOUT_MS = 1000
DEFAULT_WRITE_TIMEOUT_MS = 1000
DEFAULT_CHUNK_SIZE = 64 * 1024


class SettingsError(RuntimeError):
    """Raised when configuration files or overrides are invalid."""


@dataclass(frozen=True)
class PeerSettings:
    """Resolved settings for a peer session.

    Attributes:
        socket_path: Filesystem path of the listening Unix socket.
        lazy_connect: Defer connecting until the first write.
        read_timeout_ms: How long to wait for data before giving up on a read.
        write_timeout_ms: How long to wait for buffer space between short writes.
        chunk_size: Capacity passed to each single-shot read.
        log_level: stdlib/structlog level name.
        log_format: ``"json"`` or ``"console"``.
        trace: Enable deep call tracing.
    """

    socket_path: Path
    lazy_connect: bool = False
    read_timeout_ms: int = DEFAULT_READ_TIMEOUT_MS
    write_timeout_ms: int = DEFAULT_WRITE_TIMEOUT_MS
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "INFO"
    log_format: str = "json"
    trace: bool = False


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load the ``peer`` mapping from a YAML configuration file."""

    try:
        content = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise SettingsError(f"Configuration file {config_path} not found") from exc
    except OSError as exc:
        raise SettingsError(f"Unable to read configuration file {config_path}") from exc

    try:
        raw_data = yaml.safe_load(content) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Configuration file {config_path} is not valid YAML") from exc
    if not isinstance(raw_data, dict):
        raise SettingsError("Configuration file must contain a mapping at the root.")

    peer_data = raw_data.get("peer", raw_data)
    if not isinstance(peer_data, dict):
        raise SettingsError("Peer configuration must be a mapping.")
    return peer_data


def _lookup(name: str, override: Any, config: Mapping[str, Any], environ: Mapping[str, str]) -> Any:
    if override not in (None, ""):
        return override
    candidate = config.get(name)
    if candidate not in (None, ""):
        return candidate
    env_value = environ.get(f"{ENV_PREFIX}{name.upper()}")
    if env_value not in (None, ""):
        return env_value
    return None


def _coerce_int(name: str, value: Any, default: int, *, minimum: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise SettingsError(f"Invalid integer value for '{name}': {value!r}")
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"Invalid integer value for '{name}': {value!r}") from exc
    if number < minimum:
        raise SettingsError(f"'{name}' must be at least {minimum}, got {number}")
    return number


def _coerce_bool(name: str, value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
    raise SettingsError(f"Invalid boolean value for '{name}': {value!r}")


def _coerce_choice(name: str, value: Any, default: str, choices: tuple[str, ...]) -> str:
    if value is None:
        return default
    text = str(value).strip()
    for choice in choices:
        if text.lower() == choice.lower():
            return choice
    raise SettingsError(f"Invalid value for '{name}': {value!r}; expected one of {choices}")


def load_settings(
    *,
    config_path: Path | None = None,
    overrides: Mapping[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> PeerSettings:
    """Resolve :class:`PeerSettings` from overrides, file, and environment.

    Args:
        config_path: Optional YAML file.
        overrides: Values taking precedence over every other source, keyed by
            field name (``socket`` for the socket path).
        environ: Environment mapping; defaults to :data:`os.environ`.

    Raises:
        SettingsError: If a value is missing or invalid.
    """

    env = os.environ if environ is None else environ
    given = dict(overrides or {})
    config = load_config_file(config_path) if config_path is not None else {}

    def pick(name: str) -> Any:
        return _lookup(name, given.get(name), config, env)

    socket_value = pick("socket")
    if socket_value is None:
        raise SettingsError(
            f"Missing required 'socket' setting in --socket, --config or {ENV_PREFIX}SOCKET."
        )

    settings = PeerSettings(
        socket_path=Path(str(socket_value)).expanduser(),
        lazy_connect=_coerce_bool("lazy_connect", pick("lazy_connect"), False),
        read_timeout_ms=_coerce_int(
            "read_timeout_ms", pick("read_timeout_ms"), DEFAULT_READ_TIMEOUT_MS, minimum=0
        ),
        write_timeout_ms=_coerce_int(
            "write_timeout_ms", pick("write_timeout_ms"), DEFAULT_WRITE_TIMEOUT_MS, minimum=0
        ),
        chunk_size=_coerce_int("chunk_size", pick("chunk_size"), DEFAULT_CHUNK_SIZE, minimum=1),
        log_level=_coerce_choice("log_level", pick("log_level"), "INFO", LOG_LEVELS),
        log_format=_coerce_choice("log_format", pick("log_format"), "json", ("json", "console")),
        trace=_coerce_bool("trace", pick("trace"), False),
    )
    LOGGER.debug(
        "settings.load_settings(config_path, overrides, environ) :: resolved",
        config=str(config_path) if config_path else None,
        socket=str(settings.socket_path),
        read_timeout_ms=settings.read_timeout_ms,
        chunk_size=settings.chunk_size,
    )
    return settings


__all__ = [
    "PeerSettings",
    "SettingsError",
    "load_config_file",
    "load_settings",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_READ_TIMEOUT_MS",
    "DEFAULT_WRITE_TIMEOUT_MS",
]
