#!/usr/bin/env python3
"""
Unit Tests for subscription value types and topic parsing
"""

import pickle
import unittest
from types import SimpleNamespace

from topicbus.subscription import (
    DEFAULT_CONTEXT,
    Handle,
    Subscription,
    UnsubscribeRequest,
    iter_topics,
    iter_unique_topics,
    resolve_context,
    same_callback,
)


def _noop(topic, data):
    return None


class TestTopicParsing(unittest.TestCase):

    def test_split_on_single_spaces_only(self):
        self.assertEqual(list(iter_topics("a  b\tc ")), ["a", "b\tc"])

    def test_publish_parsing_keeps_duplicates(self):
        self.assertEqual(list(iter_topics("a a b")), ["a", "a", "b"])

    def test_unique_parsing_keeps_first_occurrence_order(self):
        self.assertEqual(list(iter_unique_topics("b a b  a c")), ["b", "a", "c"])


class TestDefaultContext(unittest.TestCase):

    def test_falsy_values_resolve_to_default(self):
        for value in (None, 0, "", [], {}, False):
            self.assertIs(resolve_context(value), DEFAULT_CONTEXT)

    def test_truthy_values_pass_through(self):
        ctx = object()
        self.assertIs(resolve_context(ctx), ctx)

    def test_placeholder_survives_pickling(self):
        self.assertIs(pickle.loads(pickle.dumps(DEFAULT_CONTEXT)), DEFAULT_CONTEXT)


class TestSameCallback(unittest.TestCase):

    def test_identity(self):
        self.assertTrue(same_callback(_noop, _noop))
        self.assertFalse(same_callback(_noop, lambda topic, data: None))

    def test_bound_methods(self):
        class Listener:
            def on_event(self, topic, data):
                pass

            def other(self, topic, data):
                pass

        a, b = Listener(), Listener()
        self.assertTrue(same_callback(a.on_event, a.on_event))
        self.assertFalse(same_callback(a.on_event, b.on_event))
        self.assertFalse(same_callback(a.on_event, a.other))


class TestSubscription(unittest.TestCase):

    def test_invoke_without_context(self):
        calls = []
        entry = Subscription(lambda *args: calls.append(args))

        entry.invoke("t", 1)

        self.assertFalse(entry.has_context)
        self.assertEqual(calls, [("t", 1)])

    def test_invoke_with_context(self):
        calls = []
        ctx = object()
        entry = Subscription(lambda *args: calls.append(args), ctx)

        entry.invoke("t", 1)

        self.assertTrue(entry.has_context)
        self.assertEqual(calls, [(ctx, "t", 1)])

    def test_matches_requires_same_context(self):
        ctx = object()
        entry = Subscription(_noop, ctx)

        self.assertTrue(entry.matches(_noop, ctx))
        self.assertFalse(entry.matches(_noop, DEFAULT_CONTEXT))


class TestUnsubscribeRequest(unittest.TestCase):

    def test_plain_topics(self):
        request = UnsubscribeRequest.resolve("a b", _noop)

        self.assertEqual(request.topics, "a b")
        self.assertIs(request.callback, _noop)
        self.assertIs(request.context, DEFAULT_CONTEXT)
        self.assertFalse(request.from_handle)
        self.assertFalse(request.removes_all)

    def test_plain_topics_without_callback_removes_all(self):
        self.assertTrue(UnsubscribeRequest.resolve("a").removes_all)

    def test_handle_fields_fill_missing_arguments(self):
        ctx = object()
        request = UnsubscribeRequest.resolve(Handle("a", _noop, ctx))

        self.assertTrue(request.from_handle)
        self.assertIs(request.callback, _noop)
        self.assertIs(request.context, ctx)

    def test_explicit_arguments_win(self):
        ctx, other_ctx = object(), object()

        def other(topic, data):
            pass

        request = UnsubscribeRequest.resolve(Handle("a", _noop, ctx), other, other_ctx)

        self.assertIs(request.callback, other)
        self.assertIs(request.context, other_ctx)

    def test_falsy_explicit_arguments_count_as_missing(self):
        ctx = object()
        request = UnsubscribeRequest.resolve(Handle("a", _noop, ctx), 0, "")

        self.assertIs(request.callback, _noop)
        self.assertIs(request.context, ctx)

    def test_invalid_targets(self):
        for target in (None, "", 3, SimpleNamespace(topics=None), SimpleNamespace(topics="")):
            self.assertIsNone(UnsubscribeRequest.resolve(target))


if __name__ == '__main__':
    unittest.main()
