"""Topic-keyed publish/subscribe channel for pipeline observers."""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from typing import Any, Awaitable, Callable, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)

STATUS_TOPIC = "status"
KEYWORDS_TOPIC = "keywords"

Subscriber = Callable[[Any], Union[None, Awaitable[None]]]


class StatusEvent(BaseModel):
    """One status notification published on the ``status`` topic."""

    state: str
    status: str  # "progress" | "complete" | "error"
    message: str = ""
    kind: str | None = None
    file_path: str | None = None
    error_kind: str | None = None


class NotificationChannel:
    """Delivers payloads to zero or more subscribers per topic.

    Subscribers may be plain callables or coroutine functions. A subscriber
    that raises is logged and skipped; publishing never fails the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Subscriber]] = defaultdict(list)

    def subscribe(self, topic: str, callback: Subscriber) -> Callable[[], None]:
        """Register a callback; returns a function that unsubscribes it."""
        self._subscribers[topic].append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers[topic]:
                self._subscribers[topic].remove(callback)

        return _unsubscribe

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, []))

    async def publish(self, topic: str, payload: Any) -> None:
        for callback in list(self._subscribers.get(topic, [])):
            try:
                result = callback(payload)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.error("Subscriber on topic %r failed", topic, exc_info=True)
