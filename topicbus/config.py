# config.py – topicbus configuration
# ==================================
# Values are read from the environment once, at import time, and parsed
# lazily: a malformed value surfaces as ConfigError when it is first used.
# TopicRegistry falls back to these when no explicit argument is given,
# so tests can patch them (e.g. patch('topicbus.config.DISPATCH_MODE', 'live')).

import logging
import os

from topicbus.exceptions import ConfigError

# =============================================================================
# ABSCHNITT 1: DISPATCH
# =============================================================================

DISPATCH_SNAPSHOT = "snapshot"
DISPATCH_LIVE = "live"
DISPATCH_MODES = (DISPATCH_SNAPSHOT, DISPATCH_LIVE)

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


def parse_bool(name: str, raw) -> bool:
    """
    Parse a boolean setting as found in the environment.

    Accepts 1/0, true/false, yes/no, on/off (case-insensitive).
    Real bools are passed through unchanged.

    Raises:
        ConfigError: If the value is not recognised
    """
    if isinstance(raw, bool):
        return raw
    value = str(raw).strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(name, raw, "expected one of " + "/".join(_TRUE_VALUES + _FALSE_VALUES))


# "snapshot": iterate a copy of a topic's subscribers taken when dispatch starts
# "live":     iterate the list itself; entries appended mid-dispatch are reached
DISPATCH_MODE = os.environ.get("TOPICBUS_DISPATCH_MODE", DISPATCH_SNAPSHOT).strip().lower()

# False: a raising callback aborts dispatch and propagates to the publisher
# True:  the failure is logged and dispatch continues with the next subscriber
ISOLATE_CALLBACK_ERRORS = os.environ.get("TOPICBUS_ISOLATE_CALLBACK_ERRORS", "false")

# =============================================================================
# ABSCHNITT 2: LOGGING (used by topicbus.logging_setup only)
# =============================================================================

LOG_LEVEL = os.environ.get("TOPICBUS_LOG_LEVEL", "WARNING").strip().upper()
LOG_JSON = os.environ.get("TOPICBUS_LOG_JSON", "false")
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S.%fZ"


def validate_dispatch_mode(mode: str) -> str:
    """Normalise a dispatch mode and reject unknown ones."""
    normalised = str(mode).strip().lower()
    if normalised not in DISPATCH_MODES:
        raise ConfigError("DISPATCH_MODE", mode, "expected 'snapshot' or 'live'")
    return normalised


def validate_config() -> None:
    """
    Check the current module-level settings.

    Called by get_default_registry() before the default instance is built;
    applications constructing their own TopicRegistry may call it at startup.

    Raises:
        ConfigError: On the first invalid setting
    """
    validate_dispatch_mode(DISPATCH_MODE)
    parse_bool("ISOLATE_CALLBACK_ERRORS", ISOLATE_CALLBACK_ERRORS)
    parse_bool("LOG_JSON", LOG_JSON)
    if not isinstance(logging.getLevelName(LOG_LEVEL), int):
        raise ConfigError("LOG_LEVEL", LOG_LEVEL, "unknown logging level")
