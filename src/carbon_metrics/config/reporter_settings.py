"""Reporter configuration model and coercion helpers."""

from __future__ import annotations
from collections.abc import Mapping
from typing import Any, cast
from pydantic import BaseModel, ConfigDict, Field, field_validator
from carbon_metrics.config.defaults import _DEFAULTS


class ReporterSettings(BaseModel):
    """Where and how often metrics are shipped to Carbon."""

    model_config = ConfigDict(frozen=True)

    carbon_host: str = Field(default=str(_DEFAULTS["CARBON_HOST"]), min_length=1)
    carbon_port: int = Field(
        default=cast(int, _DEFAULTS["CARBON_PORT"]), ge=1, le=65535
    )
    report_interval_seconds: float = Field(
        default=cast(float, _DEFAULTS["REPORT_INTERVAL_SECONDS"]), gt=0
    )
    timeout_seconds: float = Field(
        default=cast(float, _DEFAULTS["TIMEOUT_SECONDS"]), gt=0
    )
    prefix: str = Field(default=str(_DEFAULTS["PREFIX"]))

    @field_validator("prefix")
    @classmethod
    def _strip_prefix(cls, value: str) -> str:
        return value.strip().strip(".")

    @classmethod
    def from_mapping(cls, source: Mapping[str, Any] | None) -> ReporterSettings:
        """Create settings from a mapping or Dynaconf instance."""
        raw = _coerce_mapping(source)
        values: dict[str, Any] = {}
        for field_name in cls.model_fields:
            # Normalized mappings use the model's snake_case keys.
            value = raw.get(field_name, raw.get(field_name.upper()))
            if value is not None:
                values[field_name] = value
        return cls(**values)


def _coerce_mapping(source: Mapping[str, Any] | None) -> dict[str, Any]:
    if source is None:
        return {}
    if hasattr(source, "as_dict"):
        return dict(source.as_dict())  # type: ignore[call-arg]
    if isinstance(source, Mapping):
        return dict(source)
    return {}


__all__ = ["ReporterSettings"]
