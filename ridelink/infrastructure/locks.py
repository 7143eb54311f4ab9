"""
Redis-based distributed lock.

Held per ride around transfer mutations so that two API processes do not
interleave the read-check-write sequence of a handover.  The version
column on ``rides`` remains the final arbiter if a lock expires early.

Implementation uses SET NX EX for acquire and a Lua script for
atomic check-and-delete on release.
"""

from __future__ import annotations

import uuid

import redis.asyncio as aioredis

from ridelink.domain.exceptions import ResourceLockedError

_RELEASE_SCRIPT = """
if redis.call("get", KEYS[1]) == ARGV[1] then
    return redis.call("del", KEYS[1])
else
    return 0
end
"""


class DistributedLock:
    def __init__(
        self, client: aioredis.Redis, key: str, ttl_seconds: int = 30
    ):
        self.redis = client
        self.key = f"lock:{key}"
        self.ttl = ttl_seconds
        self.token = str(uuid.uuid4())

    async def acquire(self) -> bool:
        """Try to acquire. Returns True on success."""
        return bool(
            await self.redis.set(self.key, self.token, nx=True, ex=self.ttl)
        )

    async def release(self) -> None:
        """Release only if we still own the lock (atomic via Lua)."""
        await self.redis.eval(_RELEASE_SCRIPT, 1, self.key, self.token)

    # context-manager support
    async def __aenter__(self):
        acquired = await self.acquire()
        if not acquired:
            raise ResourceLockedError(
                f"{self.key} is held by another request, try again"
            )
        return self

    async def __aexit__(self, *args):
        await self.release()


def ride_lock(client: aioredis.Redis, ride_id: str, ttl_seconds: int) -> DistributedLock:
    return DistributedLock(client, f"ride:{ride_id}", ttl_seconds=ttl_seconds)
