from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import TYPE_CHECKING, Any, Callable, Iterator, Mapping

from trellis_core.core.events import Subscription
from trellis_core.dom.element import Element

if TYPE_CHECKING:
    from .layout import LayoutView


LOGGER = logging.getLogger(__name__)

SNAPSHOT_METHODS = ("to_view_json", "to_json")
ITEMS_KEY = "items"


@dataclass(frozen=True)
class Binding:
    attribute: str
    element: Element
    subscription: Subscription

    @property
    def active(self) -> bool:
        return self.subscription.active

    def release(self) -> None:
        self.subscription.cancel()


class BindingSet:
    """Bindings created by every render of one view, oldest render first.

    Rendering never releases earlier bindings; callers that need re-render to
    be idempotent call `release()` before rendering again.
    """

    def __init__(self) -> None:
        self._renders: list[tuple[Binding, ...]] = []

    def record(self, bindings: tuple[Binding, ...]) -> None:
        self._renders.append(bindings)

    @property
    def current(self) -> tuple[Binding, ...]:
        return self._renders[-1] if self._renders else ()

    @property
    def render_count(self) -> int:
        return len(self._renders)

    def release(self) -> int:
        released = 0
        for binding in self:
            if binding.active:
                binding.release()
                released += 1
        self._renders.clear()
        return released

    def __iter__(self) -> Iterator[Binding]:
        for bindings in self._renders:
            yield from bindings

    def __len__(self) -> int:
        return sum(len(bindings) for bindings in self._renders)


def project(view: "LayoutView") -> dict[str, Any]:
    """Build the template context for `view`.

    First available wins: model curated snapshot, model snapshot, collection
    curated snapshot, collection snapshot, then the view's options. The view's
    unique id is always stamped under the configured id key.
    """

    snapshot: Any = None
    for source in (view.model, view.collection):
        if source is None:
            continue
        snapshot = _snapshot(source)
        if snapshot is not None:
            break
    if snapshot is None:
        snapshot = view.options
    if isinstance(snapshot, Mapping):
        context = dict(snapshot)
    else:
        context = {ITEMS_KEY: list(snapshot)}
    context[view.settings.id_key] = view.cid
    return context


def create_bindings(view: "LayoutView") -> tuple[Binding, ...]:
    """Subscribe every marked element in the view's output to its model attribute."""

    model = view.model
    if model is None:
        return ()
    marker = view.settings.bind_attribute
    bindings: list[Binding] = []
    for element in view.query(f"[{marker}]"):
        attribute = (element.get(marker) or "").strip()
        if not attribute:
            continue
        subscription = model.on(f"change:{attribute}", _updater(view, attribute, element))
        bindings.append(Binding(attribute=attribute, element=element, subscription=subscription))
    LOGGER.debug("%s: created %d binding(s)", view.cid, len(bindings))
    return tuple(bindings)


def _updater(view: "LayoutView", attribute: str, element: Element) -> Callable[[Any, Any], None]:
    def update(_model: Any, value: Any) -> None:
        element.set_html(view.format(attribute, value))

    return update


def _snapshot(source: object) -> Any:
    for method_name in SNAPSHOT_METHODS:
        method = getattr(source, method_name, None)
        if callable(method):
            return method()
    return None
