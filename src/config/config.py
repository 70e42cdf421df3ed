import os
import re

from config.errors import ConfigurationError

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value) -> float:
    """
    Parse a duration such as "500ms", "15s" or "1m30s" into seconds.

    Bare numbers are taken as seconds.

    Raises:
        ValueError: If the value is not a positive duration.
    """
    if isinstance(value, (int, float)):
        seconds = float(value)
    else:
        text = str(value).strip()
        try:
            seconds = float(text)
        except ValueError:
            pos = 0
            seconds = 0.0
            for match in _DURATION_PART.finditer(text):
                if match.start() != pos:
                    break
                seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
                pos = match.end()
            if not text or pos != len(text):
                raise ValueError(f"Invalid duration: {value!r}")
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


def parse_port(value) -> int:
    port = int(value)
    if not 0 <= port <= 65535:
        raise ValueError(f"Port out of range: {value!r}")
    return port


class Config:
    """
    Configuration class for environment variables and default settings.

    Values are kept as the raw strings from the environment; see ``setting``.
    """

    CONFIG_FILE = os.environ.get("HEALTHCHECK_CONFIG_FILE", "./sample.yml")
    LOG_FILE = os.environ.get("HEALTHCHECK_LOG_FILE", "./healthcheck.log")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    CHECK_INTERVAL = os.environ.get("HEALTHCHECK_INTERVAL", "15s")
    LATENCY_THRESHOLD = os.environ.get("HEALTHCHECK_LATENCY_THRESHOLD", "500ms")
    # Total deadline per probe, independent of the latency threshold
    REQUEST_TIMEOUT = os.environ.get("HEALTHCHECK_REQUEST_TIMEOUT", "1s")

    # 0 keeps the Prometheus endpoint closed
    METRICS_PORT = os.environ.get("METRICS_PORT", "0")

    ENV_VARS = {
        "CHECK_INTERVAL": "HEALTHCHECK_INTERVAL",
        "LATENCY_THRESHOLD": "HEALTHCHECK_LATENCY_THRESHOLD",
        "REQUEST_TIMEOUT": "HEALTHCHECK_REQUEST_TIMEOUT",
        "METRICS_PORT": "METRICS_PORT",
    }

    @classmethod
    def setting(cls, name: str, convert):
        """
        Convert the raw value of attribute ``name`` with ``convert``.

        Raises:
            ConfigurationError: If the value cannot be converted.
        """
        raw = getattr(cls, name)
        try:
            return convert(raw)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value {raw!r} for {cls.ENV_VARS.get(name, name)}: {e}"
            )
