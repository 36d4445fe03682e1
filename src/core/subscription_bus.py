"""
Typed publish/subscribe registry.

Listeners register against a member of an event-kind enum and receive the
payload published for that kind. Each registration returns its own
unsubscribe handle, so detaching one listener never affects another.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Enum)

Callback = Callable[[Any], None]


@dataclass(frozen=True)
class Subscription(Generic[K]):
    """A single listener registration."""

    event_kind: K
    callback: Callback
    id: int


class Unsubscribe:
    """Handle that removes exactly one registration when called."""

    def __init__(self, bus: SubscriptionBus[Any], subscription: Subscription[Any]) -> None:
        self._bus = bus
        self._subscription: Subscription[Any] | None = subscription

    def __call__(self) -> None:
        if self._subscription is None:
            return
        self._bus._remove(self._subscription)
        self._subscription = None

    @property
    def active(self) -> bool:
        """Whether the registration is still attached."""
        return self._subscription is not None


class SubscriptionBus(Generic[K]):
    """
    Registry of listeners keyed by event kind.

    Listeners of one kind are invoked synchronously, in subscription order.
    A listener that raises is logged and the remaining listeners still run.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._subscriptions: dict[K, dict[int, Subscription[K]]] = {}

    def subscribe(self, event_kind: K, callback: Callback) -> Unsubscribe:
        """
        Register a listener for an event kind.

        Args:
            event_kind: The kind of event to listen for
            callback: Called with the published payload

        Returns:
            Handle removing this registration
        """
        subscription = Subscription(event_kind=event_kind, callback=callback, id=next(self._ids))
        self._subscriptions.setdefault(event_kind, {})[subscription.id] = subscription
        return Unsubscribe(self, subscription)

    def publish(self, event_kind: K, payload: Any = None) -> None:
        """Deliver a payload to every listener currently registered for the kind."""
        # Snapshot so listeners may (un)subscribe while being notified
        for subscription in list(self._subscriptions.get(event_kind, {}).values()):
            try:
                subscription.callback(payload)
            except Exception:
                logger.exception(f"Listener {subscription.id} for {event_kind.name} raised")

    def listener_count(self, event_kind: K) -> int:
        return len(self._subscriptions.get(event_kind, {}))

    def clear(self) -> None:
        """Drop every registration."""
        self._subscriptions.clear()

    def _remove(self, subscription: Subscription[K]) -> None:
        listeners = self._subscriptions.get(subscription.event_kind)
        if listeners is not None:
            listeners.pop(subscription.id, None)
