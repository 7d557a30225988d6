from __future__ import annotations

from typing import Any, Iterable, Mapping, TypeVar


EVENTS_KEY = "events"

ViewClass = TypeVar("ViewClass", bound=type)


def mixin(view_cls: ViewClass, *sources: Mapping[str, Any] | object) -> ViewClass:
    """Copy each source's own members onto `view_cls`, later sources winning.

    `events` is merged into the class's existing events map instead of
    replacing it. The merged map is a new dict, so base classes sharing the
    previous map are unaffected.
    """

    for source in sources:
        for key, value in _own_items(source):
            if key == EVENTS_KEY:
                merged = dict(getattr(view_cls, EVENTS_KEY, None) or {})
                merged.update(value or {})
                setattr(view_cls, EVENTS_KEY, merged)
                continue
            setattr(view_cls, key, value)
    return view_cls


def _own_items(source: Mapping[str, Any] | object) -> Iterable[tuple[str, Any]]:
    if isinstance(source, Mapping):
        return list(source.items())
    namespace = vars(source)
    return [(key, value) for key, value in namespace.items() if not (key.startswith("__") and key.endswith("__"))]
