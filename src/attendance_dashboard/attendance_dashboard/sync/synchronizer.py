from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

from ..common.datetime_utils import epoch_millis, now_local
from ..core.constants import DATA_SYNC, SYNC_KEY
from ..events.notifier import ChangeNotifier
from ..storage.adapter import DurableStore
from .channel import BroadcastChannel

logger = logging.getLogger(__name__)


class CrossTabSynchronizer:
    """Reload the whole model when another tab reports a write.

    There is no merge: the persisted snapshot replaces the in-memory one, so
    the last writer wins.
    """

    def __init__(
        self,
        *,
        channel: BroadcastChannel,
        store: DurableStore,
        notifier: ChangeNotifier,
        replace_model: Callable[[Dict[str, Any]], None],
        clock: Callable = now_local,
    ):
        self._channel = channel
        self._store = store
        self._notifier = notifier
        self._replace_model = replace_model
        self._clock = clock
        self._last_token: Optional[Dict[str, Any]] = None
        channel.subscribe(SYNC_KEY, self._on_message)

    @property
    def last_token(self) -> Optional[Dict[str, Any]]:
        return self._last_token

    def _on_message(self, token: str) -> None:
        try:
            message = json.loads(token)
        except (TypeError, ValueError):
            logger.warning("Ignoring undecodable sync message: %r", token)
            return
        if not isinstance(message, dict):
            logger.warning("Ignoring sync message that is not an object: %r", token)
            return

        document = self._store.load()
        if document is None:
            logger.warning("Sync ping received but no snapshot could be loaded")
            return

        self._last_token = message
        self._replace_model(document)
        logger.debug("Reloaded snapshot after %s in another tab", message.get("action"))
        timestamp = message.get("timestamp")
        if timestamp is None:
            timestamp = epoch_millis(self._clock())
        self._notifier.emit(DATA_SYNC, {"source": "crossTab", "timestamp": timestamp})

    def close(self) -> None:
        self._channel.unsubscribe(SYNC_KEY, self._on_message)
