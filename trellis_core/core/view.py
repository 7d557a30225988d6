from __future__ import annotations

from dataclasses import dataclass, field
import itertools
import logging
from typing import Any, Callable, Mapping

from trellis_core.dom.element import Element


LOGGER = logging.getLogger(__name__)

_ID_COUNTER = itertools.count(1)


def unique_id(prefix: str = "view") -> str:
    return f"{prefix}{next(_ID_COUNTER)}"


@dataclass(frozen=True)
class DomEvent:
    event_type: str
    target: Element
    current_target: Element
    payload: Mapping[str, Any] = field(default_factory=dict)


EventHandler = Callable[[DomEvent], object]
EventsSpec = Mapping[str, "str | EventHandler"]


@dataclass(frozen=True)
class DelegatedHandler:
    event_type: str
    selector: str
    handler: EventHandler


class View:
    """Minimal view primitive: a root element plus delegated event handling.

    `events` maps `"event_type selector"` to a handler method name (or a
    callable). An empty selector binds the root element itself.
    """

    tag_name: str = "div"
    class_name: str | None = None
    element_id: str | None = None
    attributes: Mapping[str, Any] = {}
    events: EventsSpec = {}

    def __init__(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        opts: dict[str, Any] = {**(options or {}), **kwargs}
        self.cid = unique_id("view")
        self.model = opts.get("model")
        self.collection = opts.get("collection")
        self._delegated: list[DelegatedHandler] = []
        self.el = self._ensure_element(opts.get("el"))
        self.initialize(opts)
        self.delegate_events()

    def initialize(self, options: Mapping[str, Any]) -> None:
        _ = options

    def render(self) -> "View":
        return self

    def query(self, selector: str) -> list[Element]:
        return self.el.select(selector)

    def set_element(self, element: Element, delegate: bool = True) -> "View":
        self.undelegate_events()
        self.el = element
        if delegate:
            self.delegate_events()
        return self

    def delegate_events(self, events: EventsSpec | None = None) -> "View":
        mapping = self.events if events is None else events
        self.undelegate_events()
        for key, handler in mapping.items():
            event_type, _, selector = key.strip().partition(" ")
            callback = handler if callable(handler) else getattr(self, handler, None)
            if not callable(callback):
                LOGGER.debug("%s: no handler `%s` for `%s`; skipped", self.cid, handler, key)
                continue
            self._delegated.append(DelegatedHandler(event_type, selector.strip(), callback))
        return self

    def undelegate_events(self) -> "View":
        self._delegated.clear()
        return self

    @property
    def delegated_handlers(self) -> tuple[DelegatedHandler, ...]:
        return tuple(self._delegated)

    def dispatch(
        self,
        event_type: str,
        target: Element | None = None,
        payload: Mapping[str, Any] | None = None,
    ) -> int:
        """Bubble a synthetic event from `target` up to the root; return handlers invoked."""

        origin = target if target is not None else self.el
        path = self.el.path_to(origin)
        invoked = 0
        for node in path:
            for delegated in list(self._delegated):
                if delegated.event_type != event_type:
                    continue
                if delegated.selector:
                    if node == self.el or not node.matches(delegated.selector, scope=self.el):
                        continue
                elif node != self.el:
                    continue
                delegated.handler(DomEvent(event_type, origin, node, dict(payload or {})))
                invoked += 1
        return invoked

    def _ensure_element(self, el: Element | str | None) -> Element:
        if isinstance(el, Element):
            return el
        if isinstance(el, str):
            return Element.from_markup(el)
        if el is not None:
            raise TypeError(f"`el` must be an Element or markup string, got {type(el).__name__}")
        attrs = dict(self.attributes)
        if self.element_id:
            attrs.setdefault("id", self.element_id)
        if self.class_name:
            attrs.setdefault("class", self.class_name)
        return Element.create(self.tag_name, attrs)
