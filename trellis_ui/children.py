from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from trellis_core.core.view import View
from trellis_core.dom.element import Element

from .registry import resolve_children

if TYPE_CHECKING:
    from .layout import LayoutView


LOGGER = logging.getLogger(__name__)


def attach_child(child: View, element: Element) -> View:
    """Rebind `child` onto `element` and run its full render."""

    child.set_element(element)
    return child.render()


def render_children(view: "LayoutView") -> list[View]:
    descriptors = resolve_children(type(view))
    if not descriptors:
        return []
    rendered: list[View] = []
    for descriptor in descriptors:
        child = getattr(view, descriptor.name, None)
        if child is None:
            LOGGER.debug("%s: child `%s` not provided; skipped", view.cid, descriptor.name)
            continue
        target = view.el.select_one(descriptor.selector)
        if target is None:
            LOGGER.debug("%s: no element for child `%s` (%s)", view.cid, descriptor.name, descriptor.selector)
            continue
        rendered.append(attach_child(child, target))
    return rendered
