# logging_setup.py - console logging for the topicbus logger tree
#
# The library never installs handlers on import. Applications (or a debugging
# session) call setup_logging() to see registry activity, either as plain text
# or as JSON lines via python-json-logger.
import logging
import sys
import time
from typing import Optional, TextIO

from pythonjsonlogger import jsonlogger

from topicbus import config
from topicbus.exceptions import ConfigError

LOGGER_NAME = "topicbus"

# Marker attribute identifying the handler installed here
_HANDLER_FLAG = "_topicbus_handler"


def format_utc_time(record, datefmt=None):
    """UTC timestamp for a record; supports %f (milliseconds) in datefmt."""
    ct = time.gmtime(record.created)
    if datefmt:
        if '%f' in datefmt:
            base_fmt = datefmt.replace('.%f', '').rstrip('Z')
            s = time.strftime(base_fmt, ct)
            s = f"{s}.{int(record.msecs):03d}"
            if datefmt.endswith('Z') and not s.endswith('Z'):
                s += 'Z'
        else:
            s = time.strftime(datefmt, ct)
    else:
        t = time.strftime("%Y-%m-%d %H:%M:%S", ct)
        s = f"{t},{int(record.msecs):03d}"
    return s


class UTCJsonFormatter(jsonlogger.JsonFormatter):
    def formatTime(self, record, datefmt=None):
        return format_utc_time(record, datefmt)


class UTCFormatter(logging.Formatter):
    def formatTime(self, record, datefmt=None):
        return format_utc_time(record, datefmt)


def _resolve_level(level) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    if not isinstance(resolved, int):
        raise ConfigError("LOG_LEVEL", level, "unknown logging level")
    return resolved


def setup_logging(level=None, json_format: Optional[bool] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a console handler to the "topicbus" logger.

    Calling it again replaces the handler installed by the previous call.

    Args:
        level: Level name or number (default: config.LOG_LEVEL)
        json_format: Emit JSON lines (default: config.LOG_JSON)
        stream: Target stream (default: sys.stderr)

    Returns:
        The configured "topicbus" logger
    """
    if level is None:
        level = config.LOG_LEVEL
    if json_format is None:
        json_format = config.LOG_JSON
    json_format = config.parse_bool("LOG_JSON", json_format)
    resolved_level = _resolve_level(level)

    root = logging.getLogger(LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_FLAG, False):
            root.removeHandler(handler)
            handler.close()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    if json_format:
        handler.setFormatter(UTCJsonFormatter(config.LOG_FORMAT, datefmt=config.LOG_DATEFMT))
    else:
        handler.setFormatter(UTCFormatter(config.LOG_FORMAT, datefmt=config.LOG_DATEFMT))
    setattr(handler, _HANDLER_FLAG, True)

    root.addHandler(handler)
    root.setLevel(resolved_level)
    return root
