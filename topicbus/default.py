#!/usr/bin/env python3
"""
Process-wide default registry.

Code that shares this module can subscribe/publish without holding a
registry instance:

    from topicbus import subscribe, publish

    subscribe("EXIT_FILLED", on_exit)
    publish("EXIT_FILLED", {"symbol": "BTC/USDT"})

Library code should prefer taking a TopicRegistry as a parameter; the
default instance is for the outermost composition point.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

from topicbus import config
from topicbus.registry import TopicRegistry
from topicbus.subscription import Callback, Handle

logger = logging.getLogger(__name__)

_REGISTRY: Optional[TopicRegistry] = None
_REGISTRY_LOCK = threading.RLock()


def get_default_registry() -> TopicRegistry:
    """
    Return the default registry, creating it from config on first use.

    The first call validates every setting in topicbus.config (fail-fast),
    not only the ones TopicRegistry itself reads.

    Raises:
        ConfigError: If a setting is invalid (nothing is created)
    """
    global _REGISTRY
    with _REGISTRY_LOCK:
        if _REGISTRY is None:
            config.validate_config()
            _REGISTRY = TopicRegistry()
            logger.debug("Default TopicRegistry created")
        return _REGISTRY


def reset_default_registry(registry: Optional[TopicRegistry] = None) -> Optional[TopicRegistry]:
    """
    Replace the default registry.

    Args:
        registry: New default, or None to have the next
            get_default_registry() call build a fresh one

    Returns:
        The previous default (None if none had been created)
    """
    global _REGISTRY
    with _REGISTRY_LOCK:
        previous, _REGISTRY = _REGISTRY, registry
    return previous


def subscribe(topics: str, callback: Callback, context: Any = None) -> Optional[Handle]:
    return get_default_registry().subscribe(topics, callback, context)


def unsubscribe(topics_or_handle: Any, callback: Optional[Callback] = None, context: Any = None) -> TopicRegistry:
    return get_default_registry().unsubscribe(topics_or_handle, callback, context)


def publish(topics: str, data: Any = None) -> TopicRegistry:
    return get_default_registry().publish(topics, data)
