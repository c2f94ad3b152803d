#!/usr/bin/env python3
"""
Session management for the cake design wizard.

Each design session holds the wizard stage, the cake configuration built so
far and the assistant's messages. Sessions live in Redis with a TTL, or in
process memory when Redis is unavailable. Both expire after
DESIGN_SESSION_TTL seconds without a write.
"""

import json
import time
import redis
from typing import Dict, List, Any, Optional
from datetime import datetime
from .config import Config
from ..utils.logger import get_logger

logger = get_logger()


class SessionManager:
    """Stores design sessions keyed by session id."""

    def __init__(self, use_redis: Optional[bool] = None):
        """Initialize the session manager with Redis connection or fallback to in-memory."""
        self.use_redis = Config.USE_REDIS if use_redis is None else use_redis
        self.memory_sessions: Dict[str, Dict[str, Any]] = {}  # Fallback in-memory storage
        self.memory_expiry: Dict[str, float] = {}
        self.redis_client = None

        if not self.use_redis:
            return
        try:
            self.redis_client = redis.Redis(
                host=Config.REDIS_HOST,
                port=Config.REDIS_PORT,
                db=Config.REDIS_DB,
                decode_responses=True
            )
            # Test Redis connection
            self.redis_client.ping()
            logger.info("[DESIGN] Using Redis for design sessions")
        except redis.RedisError as e:
            logger.warning(f"[DESIGN] Redis not available ({e}), using in-memory design sessions")
            self.use_redis = False
            self.redis_client = None

    def _get_session_key(self, session_id: str) -> str:
        """
        Generate Redis key for a session.

        Args:
            session_id: Unique session identifier

        Returns:
            Redis key for the session
        """
        return f"design:{session_id}"

    def create_session(self, session_id: str, data: Dict[str, Any]) -> bool:
        """
        Create a new session.

        Args:
            session_id: Unique session identifier
            data: Initial session payload (stage, config, ...)

        Returns:
            True if session was created, False if it already exists
        """
        if self.get_session(session_id) is not None:
            return False

        now = datetime.now().isoformat()
        session_data = dict(data)
        session_data.setdefault("messages", [])
        session_data["created_at"] = now
        session_data["last_updated"] = now
        self._write(session_id, session_data)
        return True

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve session data.

        Args:
            session_id: Unique session identifier

        Returns:
            Session data or None if not found
        """
        if self.use_redis:
            session_data = self.redis_client.get(self._get_session_key(session_id))
            if session_data:
                return json.loads(session_data)
            return None
        expires_at = self.memory_expiry.get(session_id)
        if expires_at is not None and expires_at <= time.time():
            # same lifetime Redis gives the key via SETEX
            self._evict(session_id)
            return None
        stored = self.memory_sessions.get(session_id)
        # Hand out copies so callers cannot mutate stored state behind our back
        return json.loads(json.dumps(stored)) if stored is not None else None

    def save_session(self, session_id: str, data: Dict[str, Any]) -> None:
        data = dict(data)
        data["last_updated"] = datetime.now().isoformat()
        self._write(session_id, data)

    def add_message(self, session_id: str, role: str, text: str) -> bool:
        """
        Add a message to the session conversation history.

        Returns:
            True if successful, False if the session does not exist
        """
        session_data = self.get_session(session_id)
        if not session_data:
            return False

        session_data.setdefault("messages", []).append({
            "role": role,
            "text": text,
            "timestamp": datetime.now().isoformat()
        })
        self.save_session(session_id, session_data)
        return True

    def get_recent_messages(self, session_id: str, max_messages: int = 5) -> List[Dict[str, str]]:
        session_data = self.get_session(session_id)
        if not session_data:
            return []
        messages = session_data.get("messages", [])
        return messages[-max_messages:] if messages else []

    def clear_session(self, session_id: str) -> bool:
        """
        Clear session data.

        Returns:
            True if a session was removed
        """
        if self.use_redis:
            return bool(self.redis_client.delete(self._get_session_key(session_id)))
        return self._evict(session_id)

    def _write(self, session_id: str, data: Dict[str, Any]) -> None:
        if self.use_redis:
            self.redis_client.setex(
                self._get_session_key(session_id),
                Config.DESIGN_SESSION_TTL,
                json.dumps(data),
            )
        else:
            self.memory_sessions[session_id] = json.loads(json.dumps(data))
            self.memory_expiry[session_id] = time.time() + Config.DESIGN_SESSION_TTL

    def _evict(self, session_id: str) -> bool:
        self.memory_expiry.pop(session_id, None)
        return self.memory_sessions.pop(session_id, None) is not None
