"""
YDA Portal - Cache Service
==========================
Redis-backed session revocation and sign-in throttling.
Every operation degrades open when Redis is unavailable.
"""

from datetime import timedelta
from typing import Optional

import redis.asyncio as redis

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger

logger = get_logger("cache_service")
settings = get_settings()


class CacheService:
    """Redis client wrapper used by the auth layer."""

    def __init__(self):
        self._client: Optional[redis.Redis] = None

    async def _ensure_client(self) -> Optional[redis.Redis]:
        if self._client is None:
            await self.connect()
        return self._client

    async def connect(self):
        """Initialize Redis connection."""
        try:
            self._client = redis.from_url(
                settings.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
            await self._client.ping()
            logger.info("redis_connected", host=settings.redis_host)
        except Exception as e:
            logger.error("redis_connection_failed", error=str(e))
            self._client = None

    async def disconnect(self):
        """Close Redis connection."""
        if self._client:
            await self._client.close()
            self._client = None

    @property
    def connected(self) -> bool:
        return self._client is not None

    # ── Session revocation ──

    async def revoke_session(self, session_id: str, ttl: timedelta):
        client = await self._ensure_client()
        if not client:
            return
        try:
            await client.setex(f"session:revoked:{session_id}", ttl, "1")
        except Exception as e:
            logger.warning("session_revoke_error", error=str(e))

    async def is_session_revoked(self, session_id: str) -> bool:
        client = await self._ensure_client()
        if not client:
            return False
        try:
            return await client.exists(f"session:revoked:{session_id}") > 0
        except Exception:
            return False

    # ── Sign-in throttling ──

    async def register_failed_sign_in(self, email: str) -> int:
        client = await self._ensure_client()
        if not client:
            return 0
        key = f"signin:failed:{email.lower()}"
        try:
            count = await client.incr(key)
            await client.expire(key, settings.login_lockout_minutes * 60)
            return int(count)
        except Exception:
            return 0

    async def clear_failed_sign_ins(self, email: str):
        client = await self._ensure_client()
        if not client:
            return
        try:
            await client.delete(f"signin:failed:{email.lower()}")
        except Exception as e:
            logger.warning("signin_throttle_clear_error", error=str(e))

    async def is_locked_out(self, email: str) -> bool:
        client = await self._ensure_client()
        if not client:
            return False
        try:
            val = await client.get(f"signin:failed:{email.lower()}")
            return int(val or 0) >= settings.login_max_attempts
        except Exception:
            return False


# Singleton
cache_service = CacheService()
