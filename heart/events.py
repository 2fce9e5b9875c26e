"""Synchronous listener registration for state-transition notifications.

The engine notifies its collaborators (animation/voice, public output,
autonomous action dispatch) through ``Listeners`` instances. Delivery is
synchronous and happens once per transition. A failing listener is logged
and does not prevent delivery to the remaining listeners.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, List, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Listener = Callable[[T], None]


class Listeners(Generic[T]):
    """An ordered set of callbacks receiving one payload type."""

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Listener] = []

    def connect(self, listener: Listener) -> Listener:
        """Register a listener. Returns it so this works as a decorator."""
        if listener not in self._listeners:
            self._listeners.append(listener)
        return listener

    def disconnect(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, payload: T) -> int:
        """Deliver payload to every listener.

        Returns:
            Number of listeners that handled the payload without raising.
        """
        delivered = 0
        for listener in list(self._listeners):
            try:
                listener(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"{self.name} listener failed: {e}")
        return delivered

    def __len__(self) -> int:
        return len(self._listeners)

    def __bool__(self) -> bool:
        return bool(self._listeners)
