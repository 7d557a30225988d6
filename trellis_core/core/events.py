from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable


Callback = Callable[..., object]


@dataclass(eq=False)
class Subscription:
    emitter: "EventEmitter"
    name: str
    callback: Callback
    active: bool = field(default=True)

    def cancel(self) -> None:
        if not self.active:
            return
        self.active = False
        self.emitter._discard(self)


class EventEmitter:
    """Synchronous named-event dispatch; callbacks run in subscription order."""

    def __init__(self) -> None:
        self._listeners: dict[str, list[Subscription]] = {}

    def on(self, name: str, callback: Callback) -> Subscription:
        if not name or not isinstance(name, str):
            raise ValueError("event name must be a non-empty string")
        if not callable(callback):
            raise TypeError("event callback must be callable")
        subscription = Subscription(emitter=self, name=name, callback=callback)
        self._listeners.setdefault(name, []).append(subscription)
        return subscription

    def off(self, name: str | None = None, callback: Callback | None = None) -> int:
        names = list(self._listeners) if name is None else [name]
        removed = 0
        for key in names:
            for subscription in list(self._listeners.get(key, ())):
                if callback is None or subscription.callback == callback:
                    subscription.cancel()
                    removed += 1
        return removed

    def trigger(self, name: str, *args: object) -> int:
        # Snapshot so callbacks may subscribe or cancel during dispatch.
        listeners = list(self._listeners.get(name, ()))
        invoked = 0
        for subscription in listeners:
            if not subscription.active:
                continue
            subscription.callback(*args)
            invoked += 1
        return invoked

    def listener_count(self, name: str) -> int:
        return len(self._listeners.get(name, ()))

    def _discard(self, subscription: Subscription) -> None:
        listeners = self._listeners.get(subscription.name)
        if not listeners:
            return
        try:
            listeners.remove(subscription)
        except ValueError:
            return
        if not listeners:
            del self._listeners[subscription.name]
