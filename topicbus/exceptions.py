#!/usr/bin/env python3
"""
topicbus Exceptions

Registry operations never raise for bad arguments; they return a failure
sentinel or silently do nothing. Only configuration problems raise.
"""


class TopicBusError(Exception):
    """Base class for all topicbus errors."""
    pass


class ConfigError(TopicBusError, ValueError):
    """
    Raised when a configuration value is invalid.

    Attributes:
        name: Setting that failed validation (e.g. "DISPATCH_MODE")
        value: Offending value as it was supplied
    """

    def __init__(self, name: str, value, reason: str = ""):
        self.name = name
        self.value = value
        message = f"Invalid value for {name}: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
