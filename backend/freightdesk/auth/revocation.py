"""JWT token revocation using a Redis blacklist.

Two kinds of entry exist:

  * ``revoked:{token}``          one token, e.g. when the profile behind it
                                 disappears
  * ``revoked-session:{sid}``    every token of one login (access and
                                 refresh alike), written on logout

Entries stay until the last token they cover would have expired anyway.
"""

import logging
import time

import redis.asyncio as redis

from freightdesk.config import settings
from freightdesk.utils.cache import get_redis

logger = logging.getLogger(__name__)


class TokenRevocation:
    """Manage JWT token revocation with Redis."""

    @staticmethod
    async def _blacklist(key: str, ttl: int) -> bool:
        if ttl <= 0:
            return True
        try:
            redis_client = await get_redis()
            await redis_client.setex(key, ttl, str(int(time.time())))
            return True
        except redis.RedisError as e:
            logger.error("Failed to revoke %s: %s", key.split(":", 1)[0], e)
            return False

    @staticmethod
    async def revoke_token(token: str, expires_at: float) -> bool:
        """Add a token to the revocation list until ``expires_at`` (unix time)."""
        return await TokenRevocation._blacklist(
            f"revoked:{token}", int(expires_at - time.time())
        )

    @staticmethod
    async def revoke_session(session_id: str) -> bool:
        """Revoke every token issued for one login.

        Refresh re-issues tokens under the same session id, so no token of
        the session outlives the refresh lifetime from now.
        """
        return await TokenRevocation._blacklist(
            f"revoked-session:{session_id}",
            settings.refresh_token_expire_days * 86400,
        )

    @staticmethod
    async def is_revoked(token: str, session_id: str | None = None) -> bool:
        keys = [f"revoked:{token}"]
        if session_id:
            keys.append(f"revoked-session:{session_id}")
        try:
            redis_client = await get_redis()
            return await redis_client.exists(*keys) > 0
        except redis.RedisError as e:
            logger.error("Failed to check token revocation: %s", e)
            # Fail closed
            return True
