#!/usr/bin/env python3
"""
Topic Registry - Synchronous In-Process Pub/Sub
===============================================

Callers subscribe callbacks to named topics; publishers push data to topics
and every subscriber is called synchronously, in subscription order.

Topic strings may name several topics separated by single spaces:

    registry = TopicRegistry()
    handle = registry.subscribe("orders fills", on_update)
    registry.publish("orders", {"id": 1})    # on_update("orders", {"id": 1})
    registry.unsubscribe(handle)

Unsubscribing while a publish is in flight (typically from inside a callback)
does not touch the subscription lists. The request is queued and replayed,
in order, once the outermost publish call has returned.

Callback failures propagate to the publisher unless isolate_callback_errors
is set; either way the registry leaves publishing mode and replays queued
unsubscribes before the publish call exits.
"""

from __future__ import annotations

import logging
from collections import deque
from threading import RLock
from typing import Any, Deque, Dict, List, Optional, Tuple

from topicbus import config
from topicbus.subscription import (
    Callback,
    Handle,
    Subscription,
    UnsubscribeRequest,
    iter_topics,
    iter_unique_topics,
    resolve_context,
)

logger = logging.getLogger(__name__)


def _describe(callback: Any) -> str:
    return getattr(callback, "__qualname__", None) or repr(callback)


class TopicRegistry:
    """
    Subscription registry with deferred unsubscription.

    Mapping and queue mutations are guarded by an RLock; callbacks are always
    invoked outside it so they may re-enter subscribe/unsubscribe/publish.
    """

    def __init__(
        self,
        dispatch_mode: Optional[str] = None,
        isolate_callback_errors: Optional[bool] = None,
    ) -> None:
        """
        Args:
            dispatch_mode: "snapshot" or "live" (default: config.DISPATCH_MODE)
            isolate_callback_errors: Log and continue when a callback raises
                (default: config.ISOLATE_CALLBACK_ERRORS)

        Raises:
            ConfigError: If either setting is invalid
        """
        if dispatch_mode is None:
            dispatch_mode = config.DISPATCH_MODE
        if isolate_callback_errors is None:
            isolate_callback_errors = config.ISOLATE_CALLBACK_ERRORS

        self.dispatch_mode = config.validate_dispatch_mode(dispatch_mode)
        self.isolate_callback_errors = config.parse_bool(
            "ISOLATE_CALLBACK_ERRORS", isolate_callback_errors
        )

        self._subscriptions: Dict[str, List[Subscription]] = {}
        self._deferred: Deque[Tuple[Any, Any, Any]] = deque()
        self._publish_depth = 0
        self._lock = RLock()

        logger.debug(
            f"TopicRegistry initialized (dispatch_mode={self.dispatch_mode}, "
            f"isolate_callback_errors={self.isolate_callback_errors})"
        )

    def __repr__(self) -> str:
        return (
            f"<TopicRegistry topics={len(self._subscriptions)} "
            f"publishing={self.publishing} pending={self.pending_unsubscribes}>"
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def subscribe(self, topics: str, callback: Callback, context: Any = None) -> Optional[Handle]:
        """
        Subscribe a callback to one or more topics.

        Repeated names within one call subscribe only once; subscribing the
        same callback again in a later call adds a second entry.

        Args:
            topics: Space-separated topic names (e.g. "orders fills")
            callback: Called as callback(topic, data), or
                callback(context, topic, data) when a context is given
            context: Receiver passed as first argument; falsy means none

        Returns:
            Handle for unsubscribe(), or None if the arguments are invalid
        """
        if not isinstance(topics, str) or not topics or not callable(callback):
            logger.debug(f"subscribe rejected: topics={topics!r}, callback={callback!r}")
            return None

        context = resolve_context(context)
        entry = Subscription(callback, context)

        with self._lock:
            for topic in iter_unique_topics(topics):
                self._subscriptions.setdefault(topic, []).append(entry)
                logger.debug(f"Subscribed to topic '{topic}': {_describe(callback)}")

        return Handle(topics, callback, context)

    def unsubscribe(
        self,
        topics_or_handle: Any,
        callback: Optional[Callback] = None,
        context: Any = None,
    ) -> "TopicRegistry":
        """
        Remove subscriptions.

        Without a callable callback every subscriber of each named topic is
        removed. Otherwise the first entry matching both callback and context
        is removed from each topic. Unknown topics and callbacks are ignored.

        While a publish is running the raw arguments are queued instead and
        replayed after the outermost publish returns.

        Args:
            topics_or_handle: Space-separated topic names, or a Handle
            callback: Overrides the handle's callback when given
            context: Overrides the handle's context when given

        Returns:
            self
        """
        with self._lock:
            if self._publish_depth > 0:
                self._deferred.append((topics_or_handle, callback, context))
                logger.debug(
                    f"Deferred unsubscribe while publishing: {topics_or_handle!r} "
                    f"(queued={len(self._deferred)})"
                )
                return self

        request = UnsubscribeRequest.resolve(topics_or_handle, callback, context)
        if request is None:
            logger.debug(f"unsubscribe ignored: no topics in {topics_or_handle!r}")
            return self

        via = "handle" if request.from_handle else "topics"
        logger.debug(
            f"unsubscribe via {via}: topics={request.topics!r}, remove_all={request.removes_all}"
        )

        with self._lock:
            for topic in iter_unique_topics(request.topics):
                entries = self._subscriptions.get(topic)
                if entries is None:
                    continue

                if request.removes_all:
                    del self._subscriptions[topic]
                    logger.debug(f"Removed all subscribers from topic '{topic}'")
                    continue

                for index, entry in enumerate(entries):
                    if entry.matches(request.callback, request.context):
                        del entries[index]
                        logger.debug(f"Unsubscribed from topic '{topic}': {_describe(request.callback)}")
                        break

        return self

    def publish(self, topics: str, data: Any = None) -> "TopicRegistry":
        """
        Publish data to one or more topics.

        Topics are dispatched left to right; a name repeated in the string is
        dispatched once per occurrence. Non-string or empty topics dispatch
        nothing but still release queued unsubscribes.

        Args:
            topics: Space-separated topic names
            data: Payload handed to every subscriber

        Returns:
            self

        Raises:
            Exception: Whatever a callback raised, unless
                isolate_callback_errors is set
        """
        with self._lock:
            self._publish_depth += 1

        try:
            if isinstance(topics, str) and topics:
                for topic in iter_topics(topics):
                    self._dispatch(topic, data)
            else:
                logger.debug(f"publish with no valid topics: {topics!r}")
        finally:
            with self._lock:
                self._publish_depth -= 1
                outermost = self._publish_depth == 0
            if outermost:
                self._replay_deferred()

        return self

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    @property
    def publishing(self) -> bool:
        """True while any publish call on this registry is in progress."""
        return self._publish_depth > 0

    @property
    def pending_unsubscribes(self) -> int:
        return len(self._deferred)

    def topics(self) -> List[str]:
        """Topic keys currently present (a topic may have zero entries)."""
        with self._lock:
            return list(self._subscriptions)

    def subscribers(self, topic: str) -> List[Subscription]:
        """Copy of a topic's entries in dispatch order."""
        with self._lock:
            return list(self._subscriptions.get(topic, ()))

    def stats(self, topic: Optional[str] = None) -> Dict[str, int]:
        """
        Get subscriber counts for debugging.

        Args:
            topic: Specific topic, or None for all

        Returns:
            Dict mapping topic names to subscriber counts
        """
        with self._lock:
            if topic is not None:
                return {topic: len(self._subscriptions.get(topic, ()))}
            return {name: len(entries) for name, entries in self._subscriptions.items()}

    def clear(self) -> None:
        """Drop all subscriptions and queued unsubscribes. Primarily for testing."""
        with self._lock:
            self._subscriptions.clear()
            self._deferred.clear()
        logger.debug("All subscriptions cleared")

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _dispatch(self, topic: str, data: Any) -> None:
        with self._lock:
            entries = self._subscriptions.get(topic)
            if not entries:
                return
            if self.dispatch_mode == config.DISPATCH_SNAPSHOT:
                entries = list(entries)

        # Live mode iterates the stored list: entries appended by a callback
        # during this loop are reached by it. Removals cannot happen here
        # because unsubscribe is deferred while publishing.
        for entry in entries:
            if not self.isolate_callback_errors:
                entry.invoke(topic, data)
                continue
            try:
                entry.invoke(topic, data)
            except Exception:
                logger.exception(
                    f"Subscriber {_describe(entry.callback)} failed for topic '{topic}'"
                )

    def _replay_deferred(self) -> None:
        while True:
            # Gate check and removal share one lock hold so a publish starting
            # on another thread cannot requeue the popped request at the tail
            with self._lock:
                # A publish started by another caller will replay on its own exit
                if not self._deferred or self._publish_depth > 0:
                    return
                args = self._deferred.popleft()
                logger.debug(f"Replaying deferred unsubscribe: {args[0]!r}")
                self.unsubscribe(*args)


__all__ = ["TopicRegistry"]
