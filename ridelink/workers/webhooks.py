"""
Background Webhook Dispatcher
=============================

Outbound webhooks (ride requests, driver registrations) are
fire-and-forget: workflows enqueue a payload and return immediately, and a
single background task POSTs each payload as JSON.

* Failures (transport errors, non-2xx answers) are logged and dropped.
  There are no retries.
* Each POST is bounded by ``webhook_timeout_seconds``.
* When the dispatcher is not running, enqueued events are dropped with a
  warning.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from ridelink.config import settings

logger = logging.getLogger(__name__)

_queue: asyncio.Queue | None = None
_task: asyncio.Task | None = None


# ── Public API ────────────────────────────────────────────────────────


async def start_dispatcher() -> None:
    global _queue, _task
    _queue = asyncio.Queue()
    _task = asyncio.create_task(_loop(_queue))
    logger.info(
        "Webhook dispatcher started (timeout=%.1fs)", settings.webhook_timeout_seconds
    )


async def stop_dispatcher() -> None:
    global _queue, _task
    if _task:
        _task.cancel()
        try:
            await _task
        except asyncio.CancelledError:
            pass
    if _queue and not _queue.empty():
        logger.warning("Dropping %d undelivered webhook events", _queue.qsize())
    _task = None
    _queue = None
    logger.info("Webhook dispatcher stopped")


def enqueue(url: str, payload: dict[str, Any]) -> bool:
    """Schedule *payload* for delivery.  Returns False if it was dropped."""
    if _queue is None:
        logger.warning(
            "Webhook dispatcher not running; dropping %s event", payload.get("type")
        )
        return False
    _queue.put_nowait((url, payload))
    return True


async def deliver(client: httpx.AsyncClient, url: str, payload: dict[str, Any]) -> bool:
    """POST one payload.  Returns True on a 2xx answer."""
    try:
        response = await client.post(url, json=payload)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("Webhook %s to %s failed: %s", payload.get("type"), url, exc)
        return False
    logger.info("Webhook %s delivered to %s", payload.get("type"), url)
    return True


# ── Internals ─────────────────────────────────────────────────────────


async def _loop(queue: asyncio.Queue) -> None:
    async with httpx.AsyncClient(timeout=settings.webhook_timeout_seconds) as client:
        while True:
            url, payload = await queue.get()
            try:
                await deliver(client, url, payload)
            except Exception:
                logger.exception("Unhandled error delivering webhook")
            finally:
                queue.task_done()
