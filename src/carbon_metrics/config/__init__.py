"""Runtime configuration helpers for carbon-metrics."""

from __future__ import annotations
from functools import lru_cache
from dynaconf import Dynaconf
from carbon_metrics.config.defaults import _DEFAULTS
from carbon_metrics.config.reporter_settings import ReporterSettings


ENVVAR_PREFIX = "CARBON_METRICS"


def _build_loader() -> Dynaconf:
    """Create a Dynaconf loader wired to environment variables only."""
    return Dynaconf(
        envvar_prefix=ENVVAR_PREFIX,
        settings_files=[],  # No config files, env vars only
        load_dotenv=True,
        environments=False,
    )


def _normalize_settings(source: Dynaconf) -> Dynaconf:
    """Validate and fill defaults on the raw Dynaconf settings."""
    normalized = Dynaconf(
        envvar_prefix=ENVVAR_PREFIX,
        settings_files=[],
        load_dotenv=False,
        environments=False,
    )

    host = str(source.get("CARBON_HOST") or _DEFAULTS["CARBON_HOST"]).strip()
    if not host:
        msg = f"{ENVVAR_PREFIX}_CARBON_HOST must not be empty."
        raise ValueError(msg)
    normalized.set("CARBON_HOST", host)

    port_raw = source.get("CARBON_PORT", _DEFAULTS["CARBON_PORT"])
    try:
        port = int(port_raw)
    except (TypeError, ValueError) as exc:
        msg = f"{ENVVAR_PREFIX}_CARBON_PORT must be an integer."
        raise ValueError(msg) from exc
    if not 1 <= port <= 65535:
        msg = f"{ENVVAR_PREFIX}_CARBON_PORT must be between 1 and 65535."
        raise ValueError(msg)
    normalized.set("CARBON_PORT", port)

    for key in ("REPORT_INTERVAL_SECONDS", "TIMEOUT_SECONDS"):
        normalized.set(key, _positive_float(source.get(key, _DEFAULTS[key]), key))

    prefix = source.get("PREFIX")
    if prefix is None:
        prefix = _DEFAULTS["PREFIX"]
    normalized.set("PREFIX", str(prefix).strip().strip("."))

    return normalized


def _positive_float(value: object, key: str) -> float:
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        msg = f"{ENVVAR_PREFIX}_{key} must be a number."
        raise ValueError(msg) from exc
    if number <= 0:
        msg = f"{ENVVAR_PREFIX}_{key} must be greater than zero."
        raise ValueError(msg)
    return number


@lru_cache(maxsize=1)
def _load_settings() -> Dynaconf:
    """Load settings once and cache the normalized Dynaconf instance."""
    return _normalize_settings(_build_loader())


def get_settings(*, refresh: bool = False) -> Dynaconf:
    """Return the cached Dynaconf settings, reloading them if requested."""
    if refresh:
        _load_settings.cache_clear()
    return _load_settings()


def get_reporter_settings(*, refresh: bool = False) -> ReporterSettings:
    """Return the reporter settings derived from the environment."""
    return ReporterSettings.from_mapping(get_settings(refresh=refresh))


__all__ = [
    "ENVVAR_PREFIX",
    "ReporterSettings",
    "get_reporter_settings",
    "get_settings",
]
