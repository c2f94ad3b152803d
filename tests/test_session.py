#!/usr/bin/env python3
"""
Design Session Store Tests

PURPOSE:
    Check the in-memory session store, its expiry and the fallback from
    Redis when the server cannot be reached.

USAGE:
    pytest tests/test_session.py
"""

import json
import unittest
from unittest import mock

import redis

from cakeshop.app.config import Config
from cakeshop.app.session import SessionManager


class TestMemorySessions(unittest.TestCase):

    def setUp(self):
        self.sessions = SessionManager(use_redis=False)

    def test_create_and_get(self):
        self.assertTrue(self.sessions.create_session("abc", {"stage": "welcome"}))
        data = self.sessions.get_session("abc")
        self.assertEqual(data["stage"], "welcome")
        self.assertEqual(data["messages"], [])
        self.assertIn("created_at", data)

    def test_create_existing_returns_false(self):
        self.sessions.create_session("abc", {"stage": "welcome"})
        self.assertFalse(self.sessions.create_session("abc", {"stage": "preview"}))
        self.assertEqual(self.sessions.get_session("abc")["stage"], "welcome")

    def test_returned_data_is_a_copy(self):
        self.sessions.create_session("abc", {"stage": "welcome", "config": {}})
        data = self.sessions.get_session("abc")
        data["config"]["flavor"] = "Mint"
        self.assertEqual(self.sessions.get_session("abc")["config"], {})

    def test_messages_are_capped(self):
        self.sessions.create_session("abc", {})
        for i in range(8):
            self.assertTrue(self.sessions.add_message("abc", "assistant", f"message {i}"))
        recent = self.sessions.get_recent_messages("abc", max_messages=3)
        self.assertEqual([m["text"] for m in recent], ["message 5", "message 6", "message 7"])

    def test_add_message_to_missing_session(self):
        self.assertFalse(self.sessions.add_message("nope", "assistant", "hi"))
        self.assertEqual(self.sessions.get_recent_messages("nope"), [])

    def test_clear(self):
        self.sessions.create_session("abc", {})
        self.assertTrue(self.sessions.clear_session("abc"))
        self.assertIsNone(self.sessions.get_session("abc"))
        self.assertFalse(self.sessions.clear_session("abc"))

    @mock.patch("cakeshop.app.session.time.time")
    def test_sessions_expire_after_ttl(self, now):
        now.return_value = 1000.0
        self.sessions.create_session("abc", {"stage": "welcome"})

        now.return_value = 1000.0 + Config.DESIGN_SESSION_TTL - 1
        self.assertIsNotNone(self.sessions.get_session("abc"))

        now.return_value = 1000.0 + Config.DESIGN_SESSION_TTL
        self.assertIsNone(self.sessions.get_session("abc"))
        self.assertNotIn("abc", self.sessions.memory_sessions)
        self.assertNotIn("abc", self.sessions.memory_expiry)

    @mock.patch("cakeshop.app.session.time.time")
    def test_writes_extend_the_lifetime(self, now):
        now.return_value = 1000.0
        self.sessions.create_session("abc", {})
        now.return_value = 1000.0 + Config.DESIGN_SESSION_TTL - 1
        self.sessions.add_message("abc", "assistant", "still here")

        now.return_value = 1000.0 + Config.DESIGN_SESSION_TTL + 1
        self.assertEqual(len(self.sessions.get_session("abc")["messages"]), 1)

    @mock.patch("cakeshop.app.session.time.time")
    def test_expired_session_can_be_recreated(self, now):
        now.return_value = 1000.0
        self.sessions.create_session("abc", {"stage": "preview"})
        now.return_value = 1000.0 + Config.DESIGN_SESSION_TTL
        self.assertTrue(self.sessions.create_session("abc", {"stage": "welcome"}))
        self.assertEqual(self.sessions.get_session("abc")["stage"], "welcome")


class TestRedisSessions(unittest.TestCase):

    @mock.patch("cakeshop.app.session.redis.Redis")
    def test_falls_back_to_memory_when_redis_is_down(self, redis_cls):
        redis_cls.return_value.ping.side_effect = redis.ConnectionError("connection refused")
        sessions = SessionManager(use_redis=True)
        self.assertFalse(sessions.use_redis)
        self.assertIsNone(sessions.redis_client)
        self.assertTrue(sessions.create_session("abc", {"stage": "welcome"}))
        self.assertEqual(sessions.get_session("abc")["stage"], "welcome")

    @mock.patch("cakeshop.app.session.redis.Redis")
    def test_writes_with_ttl(self, redis_cls):
        client = redis_cls.return_value
        client.get.return_value = None
        sessions = SessionManager(use_redis=True)
        self.assertTrue(sessions.use_redis)

        sessions.create_session("abc", {"stage": "welcome"})
        key, ttl, payload = client.setex.call_args[0]
        self.assertEqual(key, "design:abc")
        self.assertEqual(ttl, Config.DESIGN_SESSION_TTL)
        self.assertEqual(json.loads(payload)["stage"], "welcome")

    @mock.patch("cakeshop.app.session.redis.Redis")
    def test_reads_and_deletes_by_key(self, redis_cls):
        client = redis_cls.return_value
        client.get.return_value = json.dumps({"stage": "preview"})
        client.delete.return_value = 1
        sessions = SessionManager(use_redis=True)

        self.assertEqual(sessions.get_session("abc")["stage"], "preview")
        client.get.assert_called_with("design:abc")
        self.assertTrue(sessions.clear_session("abc"))
        client.delete.assert_called_with("design:abc")


if __name__ == "__main__":
    unittest.main()
