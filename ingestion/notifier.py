"""
Fan-out of "weights refreshed" events to interested listeners
"""

import inspect
from typing import Awaitable, Callable, List, Union
from models.base import Game
import logging

logger = logging.getLogger(__name__)

Listener = Callable[[Game], Union[None, Awaitable[None]]]


class RefreshNotifier:
    """
    Best-effort broadcaster.

    Listeners may be plain or async callables. Each one is called in
    isolation: a failing listener is logged and the rest still run.
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns an unsubscribe callable."""
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    async def broadcast(self, game: Game) -> int:
        """
        Notify every listener that data for this game was refreshed.

        Returns:
            Number of listeners that completed without error
        """
        delivered = 0
        for listener in list(self._listeners):
            try:
                outcome = listener(game)
                if inspect.isawaitable(outcome):
                    await outcome
                delivered += 1
            except Exception:
                logger.exception(f"[{game.value}] Refresh listener {listener!r} failed")

        logger.debug(f"[{game.value}] Refresh delivered to {delivered}/{len(self._listeners)} listeners")
        return delivered
