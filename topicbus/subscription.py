#!/usr/bin/env python3
"""
Subscription Data Types
=======================

Value types shared by the registry:

- Subscription: one (callback, context) entry in a topic's list
- Handle: returned by subscribe(), accepted back by unsubscribe()
- UnsubscribeRequest: the resolved target of an unsubscribe() call
- DEFAULT_CONTEXT: placeholder context shared by every subscription
  that did not specify one

Topic strings hold one or more topic names separated by single spaces.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Iterator, Optional

TOPIC_SEPARATOR = " "

Callback = Callable[..., Any]


class _DefaultContext:
    """Process-wide placeholder used when no context is supplied."""

    _instance: Optional["_DefaultContext"] = None

    def __new__(cls) -> "_DefaultContext":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "DEFAULT_CONTEXT"

    def __reduce__(self):
        return (_DefaultContext, ())


DEFAULT_CONTEXT = _DefaultContext()


def resolve_context(context: Any) -> Any:
    """Falsy contexts (None, 0, "", empty containers) collapse to DEFAULT_CONTEXT."""
    return context or DEFAULT_CONTEXT


def iter_topics(topics: str) -> Iterator[str]:
    """Yield the non-empty topic names in a space-separated string, in order."""
    for topic in topics.split(TOPIC_SEPARATOR):
        if topic:
            yield topic


def iter_unique_topics(topics: str) -> Iterator[str]:
    """Like iter_topics(), but each name is yielded only on its first occurrence."""
    seen = set()
    for topic in iter_topics(topics):
        if topic in seen:
            continue
        seen.add(topic)
        yield topic


def same_callback(a: Any, b: Any) -> bool:
    """
    Identity match for callbacks.

    Bound methods are recreated on every attribute access, so two of them
    match when they wrap the same function on the same instance.
    """
    if a is b:
        return True
    if inspect.ismethod(a) and inspect.ismethod(b):
        return a.__func__ is b.__func__ and a.__self__ is b.__self__
    return False


@dataclass(frozen=True, eq=False)
class Subscription:
    """One subscriber entry; dispatch order is list order."""
    callback: Callback
    context: Any = DEFAULT_CONTEXT

    @property
    def has_context(self) -> bool:
        return self.context is not DEFAULT_CONTEXT

    def matches(self, callback: Any, context: Any) -> bool:
        return same_callback(self.callback, callback) and self.context is context

    def invoke(self, topic: str, data: Any) -> Any:
        """
        Call the subscriber.

        An explicit context is passed as the receiver (first positional
        argument), the way `self` binds to a plain function.
        """
        if self.has_context:
            return self.callback(self.context, topic, data)
        return self.callback(topic, data)


@dataclass(frozen=True, eq=False)
class Handle:
    """
    Opaque record returned by subscribe().

    Carries the original (unsplit) topics string, the callback and the
    resolved context so it can be passed straight back to unsubscribe().
    It does not own the subscription; dropping it changes nothing.
    """
    topics: str
    callback: Callback
    context: Any = DEFAULT_CONTEXT


@dataclass(frozen=True)
class UnsubscribeRequest:
    """
    Resolved unsubscribe() target.

    from_handle records which variant was supplied: a plain topics string
    or a handle-shaped value (anything with a string `topics` attribute).
    """
    topics: str
    callback: Optional[Callback]
    context: Any
    from_handle: bool = False

    @property
    def removes_all(self) -> bool:
        """No usable callback means every subscriber of each topic goes."""
        return not callable(self.callback)

    @classmethod
    def resolve(
        cls,
        topics_or_handle: Any,
        callback: Optional[Callback] = None,
        context: Any = None,
    ) -> Optional["UnsubscribeRequest"]:
        """
        Build a request from raw unsubscribe() arguments.

        Explicit callback/context arguments win over the handle's fields;
        falsy ones count as not given.

        Returns:
            UnsubscribeRequest, or None if neither a topics string nor a
            handle-shaped value was given
        """
        if isinstance(topics_or_handle, str):
            if not topics_or_handle:
                return None
            return cls(topics_or_handle, callback, resolve_context(context))

        handle_topics = getattr(topics_or_handle, "topics", None)
        if not isinstance(handle_topics, str) or not handle_topics:
            return None

        if not callback:
            callback = getattr(topics_or_handle, "callback", None)
        if not context:
            context = getattr(topics_or_handle, "context", None)
        return cls(handle_topics, callback, resolve_context(context), from_handle=True)
