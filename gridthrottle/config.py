"""gridthrottle - application configuration.

Loads .env variables into a typed config object that is built once at
process entry and handed to every component.
"""

import logging
import os
import re
from dataclasses import dataclass
from datetime import timedelta

from dotenv import load_dotenv

logger = logging.getLogger("gridthrottle")

DEFAULT_LOOKBACK = timedelta(hours=-3)
MAX_LOOKBACK = timedelta(days=366)
DEFAULT_WSDL_URL = "https://www.ote-cr.cz/services/PublicDataService"
DEFAULT_TIMEZONE = "Europe/Budapest"
DEFAULT_CPUFREQ_ROOT = "/sys/devices/system/cpu"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)([hms])")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


@dataclass(frozen=True)
class Config:
    """Typed configuration loaded from environment variables."""

    lookback: timedelta  # always <= 0
    wsdl_url: str
    timezone: str
    cpufreq_root: str
    cpu_count: int
    request_timeout: float  # seconds
    log_level: str


def parse_lookback(text: str | None) -> timedelta:
    """Parse the ``HOURS`` setting into a (non-positive) lookback offset.

    Accepts a bare signed integer, taken as hours (``"-2"``), or a
    duration made of ``h``/``m``/``s`` parts (``"-3h"``, ``"-1h30m"``).
    Empty or unparsable input, and anything longer than
    ``MAX_LOOKBACK``, falls back to three hours.  A positive value is
    negated so the window always ends at "now".
    """
    if not text or not text.strip():
        return DEFAULT_LOOKBACK

    raw = text.strip()
    try:
        offset = timedelta(hours=int(raw))
    except ValueError:
        offset = _parse_duration(raw)
    except OverflowError:
        offset = None

    if offset is None or abs(offset) > MAX_LOOKBACK:
        logger.info("Error parsing hours %s to duration. Setting -3h.", raw)
        return DEFAULT_LOOKBACK

    if offset > timedelta(0):
        return -offset
    return offset


def _parse_duration(raw: str) -> timedelta | None:
    sign = 1
    body = raw
    if body[0] in "+-":
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if not body:
        return None

    seconds = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(body):
        if match.start() != pos:
            return None
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()
    if pos != len(body):
        return None
    try:
        return timedelta(seconds=sign * seconds)
    except OverflowError:
        return None


def _int_var(name: str, default: int) -> int:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        parsed = int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None
    if parsed < 1:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


def _float_var(name: str, default: float) -> float:
    value = os.environ.get(name)
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {value!r}") from None
    if parsed <= 0:
        raise ValueError(f"{name} must be positive, got {parsed}")
    return parsed


def _log_level_var(name: str, default: str) -> str:
    value = (os.environ.get(name) or default).strip().upper()
    if not isinstance(logging.getLevelName(value), int):
        raise ValueError(f"{name} must be a logging level name, got {value!r}")
    return value


def load_config(env_path: str | None = None) -> Config:
    """Load configuration from environment variables.

    Raises ``ValueError`` naming the variable when a numeric setting or
    the log level is malformed.  ``HOURS`` never raises; see
    :func:`parse_lookback`.
    """
    load_dotenv(dotenv_path=env_path)

    return Config(
        lookback=parse_lookback(os.environ.get("HOURS")),
        wsdl_url=os.environ.get("WSDL") or DEFAULT_WSDL_URL,
        timezone=os.environ.get("MARKET_TIMEZONE") or DEFAULT_TIMEZONE,
        cpufreq_root=os.environ.get("CPUFREQ_ROOT") or DEFAULT_CPUFREQ_ROOT,
        cpu_count=_int_var("CPU_COUNT", os.cpu_count() or 1),
        request_timeout=_float_var("REQUEST_TIMEOUT_SECONDS", 30.0),
        log_level=_log_level_var("LOG_LEVEL", "INFO"),
    )
