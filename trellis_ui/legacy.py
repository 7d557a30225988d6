"""Deprecated `views` option: selector -> view (or list of views).

Kept for older layouts only. New code declares children with
`LayoutView.declare_child()` or a `child_views` class attribute.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Mapping, Sequence

from trellis_core.core.view import View

from .children import attach_child

if TYPE_CHECKING:
    from .layout import LayoutView


LOGGER = logging.getLogger(__name__)

LEGACY_VIEWS_OPTION = "views"
DIAGNOSTIC_SINK_OPTION = "diagnostic_sink"

DiagnosticSink = Callable[[dict[str, object]], None]
LegacyViews = Mapping[str, "View | Sequence[View]"]


def render_legacy_views(view: "LayoutView", views: LegacyViews) -> list[View]:
    """Render `views` into `view`'s output; warns but never fails."""

    if view.settings.warn_legacy_views:
        _warn(view, list(views))
    rendered: list[View] = []
    for selector, entry in views.items():
        target = view.el.select_one(selector)
        if target is None:
            continue
        if isinstance(entry, View):
            rendered.append(attach_child(entry, target))
            continue
        # Several views share one container: each keeps its own root, appended in order.
        target.set_html("")
        for child in entry:
            child.render()
            target.append(child.el)
            rendered.append(child)
    return rendered


def _warn(view: "LayoutView", selectors: list[str]) -> None:
    LOGGER.warning(
        "%s (%s) uses the deprecated `%s` option; declare child views instead",
        view.cid,
        type(view).__name__,
        LEGACY_VIEWS_OPTION,
    )
    sink: Any = view.options.get(DIAGNOSTIC_SINK_OPTION)
    if callable(sink):
        sink(
            {
                "action": "legacy_views_rendered",
                "view": view.cid,
                "selectors": selectors,
            }
        )
