from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Mapping

logger = logging.getLogger(__name__)

Handler = Callable[[Mapping[str, Any]], None]


class ChangeNotifier:
    """In-tab publish/subscribe keyed by event name.

    Handlers run synchronously in subscription order. A failing handler is
    logged and does not stop the others.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def on(self, event: str, handler: Handler) -> None:
        self._handlers[event].append(handler)

    def off(self, event: str, handler: Handler) -> None:
        handlers = self._handlers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Mapping[str, Any]) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                handler(payload)
            except Exception:
                logger.exception("Handler for %s failed", event)

    def clear(self) -> None:
        self._handlers.clear()
