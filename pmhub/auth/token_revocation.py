"""Redis-backed JWT deny-list.

Stores a revoked token's ``jti`` (JWT ID) claim in Redis with a TTL
matching the token's remaining lifetime, e.g. after a user is removed
from the hierarchy and their outstanding sessions must stop working::

    await revoke_token(redis, jti, expires_in_seconds=1800)
    assert await is_token_revoked(redis, jti)
"""

from redis.asyncio import Redis

_DENY_PREFIX = "pmhub:token:deny:"


async def revoke_token(redis: Redis, jti: str, expires_in_seconds: int) -> None:
    """Add *jti* to the deny-list with a TTL equal to the token's remaining lifetime."""
    if expires_in_seconds > 0:
        await redis.setex(f"{_DENY_PREFIX}{jti}", expires_in_seconds, "1")


async def is_token_revoked(redis: Redis, jti: str) -> bool:
    """Return ``True`` if *jti* has been revoked."""
    return await redis.exists(f"{_DENY_PREFIX}{jti}") > 0
