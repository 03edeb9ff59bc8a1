"""Default values for carbon-metrics settings."""

_DEFAULTS: dict[str, object] = {
    "CARBON_HOST": "localhost",
    "CARBON_PORT": 2003,
    "REPORT_INTERVAL_SECONDS": 60.0,
    "TIMEOUT_SECONDS": 5.0,
    "PREFIX": "",
}

__all__ = ["_DEFAULTS"]
