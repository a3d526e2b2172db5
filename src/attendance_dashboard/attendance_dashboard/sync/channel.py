"""Broadcast channels between contexts ("tabs") that share one storage origin."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, List

logger = logging.getLogger(__name__)

MessageHandler = Callable[[str], None]


class BroadcastHub:
    """One origin. Every tab opens its own channel on the hub."""

    def __init__(self):
        self._channels: List["BroadcastChannel"] = []

    def channel(self) -> "BroadcastChannel":
        ch = BroadcastChannel(self)
        self._channels.append(ch)
        return ch

    def _deliver(self, sender: "BroadcastChannel", topic: str, token: str) -> int:
        delivered = 0
        for ch in list(self._channels):
            if ch is sender:
                continue
            delivered += ch._receive(topic, token)
        return delivered

    def _detach(self, ch: "BroadcastChannel") -> None:
        if ch in self._channels:
            self._channels.remove(ch)


class BroadcastChannel:
    """A tab's end of the hub. Messages it publishes reach the other tabs only."""

    def __init__(self, hub: BroadcastHub):
        self._hub = hub
        self._handlers: Dict[str, List[MessageHandler]] = defaultdict(list)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, topic: str, token: str) -> int:
        """Send ``token`` to other channels subscribed to ``topic``; returns the number of handlers reached."""
        if self._closed:
            return 0
        return self._hub._deliver(self, topic, token)

    def subscribe(self, topic: str, handler: MessageHandler) -> None:
        self._handlers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: MessageHandler) -> None:
        handlers = self._handlers.get(topic)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def close(self) -> None:
        self._closed = True
        self._handlers.clear()
        self._hub._detach(self)

    def _receive(self, topic: str, token: str) -> int:
        count = 0
        for handler in list(self._handlers.get(topic, ())):
            count += 1
            try:
                handler(token)
            except Exception:
                logger.exception("Broadcast handler for %r failed", topic)
        return count
