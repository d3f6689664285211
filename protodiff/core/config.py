"""Process configuration read from the environment once at startup."""

from __future__ import annotations

import math
import os
import re
from dataclasses import dataclass

import structlog

log = structlog.get_logger(__name__)

DEFAULT_SCAN_INTERVAL = 30 * 60.0
REGISTRY_MODES = ("buf", "http", "fixture")

# Go-style durations: "90s", "30m", "1h30m", "1.5h", "250ms"
_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


@dataclass(frozen=True)
class Settings:
    configmap_namespace: str = "protodiff-system"
    configmap_name: str = "protodiff-mapping"
    bsr_template: str = ""
    scan_interval: float = DEFAULT_SCAN_INTERVAL
    registry_mode: str = "buf"
    bsr_token: str = ""
    bsr_url: str = "https://buf.build"
    rpc_timeout: float = 10.0
    registry_timeout: float = 30.0
    kubeconfig: str | None = None
    web_host: str = "0.0.0.0"
    web_port: int = 18080
    log_level: str = "INFO"
    log_format: str = "console"


def parse_duration(value: str) -> float:
    """Parse a duration string into seconds.

    Accepts a bare number of seconds (``"45"``) or a Go-style duration made of
    ``h``/``m``/``s``/``ms`` parts (``"1h30m"``). Raises ``ValueError`` for
    anything else, including non-positive durations.
    """
    text = value.strip()
    if not text:
        raise ValueError("empty duration")
    try:
        seconds = float(text)
    except ValueError:
        pos = 0
        seconds = 0.0
        for match in _DURATION_PART_RE.finditer(text):
            if match.start() != pos:
                raise ValueError(f"invalid duration: {value!r}") from None
            seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
            pos = match.end()
        if pos != len(text):
            raise ValueError(f"invalid duration: {value!r}") from None
    if not math.isfinite(seconds) or seconds <= 0:
        raise ValueError(f"duration must be positive: {value!r}")
    return seconds


def _env(key: str, default: str, *aliases: str) -> str:
    """First non-empty value among *key* and its legacy *aliases*."""
    for name in (key, *aliases):
        value = os.environ.get(name)
        if value:
            return value
    return default


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        log.warning("config.invalid_number", key=key, value=raw, default=default)
        return default


def parse_listen_addr(value: str, default_host: str = "0.0.0.0") -> tuple[str, int]:
    """Split ``host:port`` (``":18080"``, ``"127.0.0.1:8080"``, ``"[::1]:80"``).

    An empty host means all interfaces. Raises ``ValueError`` on a missing or
    invalid port.
    """
    host, sep, port = value.strip().rpartition(":")
    if not sep:
        raise ValueError(f"invalid listen address: {value!r}")
    port_num = int(port)
    if not 0 < port_num < 65536:
        raise ValueError(f"port out of range: {value!r}")
    host = host.strip("[]")
    return host or default_host, port_num


def _web_bind() -> tuple[str, int]:
    host = _env("PROTODIFF_WEB_HOST", "")
    port = os.environ.get("PROTODIFF_WEB_PORT")
    if not host and not port:
        raw_addr = os.environ.get("WEB_ADDR")
        if raw_addr:
            try:
                return parse_listen_addr(raw_addr)
            except ValueError:
                log.warning("config.invalid_web_addr", value=raw_addr, default=":18080")
    return host or "0.0.0.0", int(_env_float("PROTODIFF_WEB_PORT", 18080))


def load_settings() -> Settings:
    """Build :class:`Settings` from ``PROTODIFF_*`` and ``BSR_*`` variables.

    The unprefixed names (``SCAN_INTERVAL``, ``CONFIGMAP_NAMESPACE``,
    ``CONFIGMAP_NAME``, ``DEFAULT_BSR_TEMPLATE``, ``WEB_ADDR``) are read when
    the prefixed variable is unset.
    """
    scan_interval = DEFAULT_SCAN_INTERVAL
    raw_interval = _env("PROTODIFF_SCAN_INTERVAL", "", "SCAN_INTERVAL")
    if raw_interval:
        try:
            scan_interval = parse_duration(raw_interval)
        except ValueError:
            log.warning(
                "config.invalid_scan_interval",
                value=raw_interval,
                default_seconds=scan_interval,
            )

    registry_mode = _env("PROTODIFF_REGISTRY_MODE", "buf").lower()
    if registry_mode not in REGISTRY_MODES:
        log.warning("config.invalid_registry_mode", value=registry_mode, default="buf")
        registry_mode = "buf"

    web_host, web_port = _web_bind()

    settings = Settings(
        configmap_namespace=_env(
            "PROTODIFF_CONFIGMAP_NAMESPACE", "protodiff-system", "CONFIGMAP_NAMESPACE"
        ),
        configmap_name=_env("PROTODIFF_CONFIGMAP_NAME", "protodiff-mapping", "CONFIGMAP_NAME"),
        bsr_template=_env("PROTODIFF_BSR_TEMPLATE", "", "DEFAULT_BSR_TEMPLATE"),
        scan_interval=scan_interval,
        registry_mode=registry_mode,
        bsr_token=os.environ.get("BSR_TOKEN", ""),
        bsr_url=_env("BSR_URL", "https://buf.build").rstrip("/"),
        rpc_timeout=_env_float("PROTODIFF_RPC_TIMEOUT", 10.0),
        registry_timeout=_env_float("PROTODIFF_REGISTRY_TIMEOUT", 30.0),
        kubeconfig=os.environ.get("PROTODIFF_KUBECONFIG") or None,
        web_host=web_host,
        web_port=web_port,
        log_level=_env("PROTODIFF_LOG_LEVEL", "INFO"),
        log_format=_env("PROTODIFF_LOG_FORMAT", "console"),
    )
    log.info(
        "config.loaded",
        configmap=f"{settings.configmap_namespace}/{settings.configmap_name}",
        bsr_template=settings.bsr_template,
        registry_mode=settings.registry_mode,
        scan_interval_seconds=settings.scan_interval,
        web_addr=f"{settings.web_host}:{settings.web_port}",
    )
    return settings
