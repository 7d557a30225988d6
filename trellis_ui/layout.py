from __future__ import annotations

import inspect
import logging
from typing import Any, Literal, Mapping

from trellis_core.core.view import View
from trellis_core.dom.element import Element
from trellis_core.render.escaping import escape
from trellis_core.render.templates import TemplateFunction, as_template

from .bindings import Binding, BindingSet, create_bindings, project
from .children import render_children
from .legacy import LEGACY_VIEWS_OPTION, render_legacy_views
from .mixins import mixin
from .registry import (
    TEMPLATE_OPTION,
    ChildDescriptor,
    apply_option_properties,
    declare_child,
    register_option_property,
    resolve_children,
    resolve_option_properties,
)
from .settings import DEFAULT_SETTINGS, ViewSettings


LOGGER = logging.getLogger(__name__)

ViewState = Literal["uninitialized", "initialized", "rendered"]


class LayoutView(View):
    """View with declared option properties, child views and model bindings.

    `render()` always runs the same steps, in order:

    1. evaluate `template` with `to_json()` and replace the root's content
    2. cache the elements named in `els` (selector -> attribute name)
    3. bind `[data-bind]` elements to model attributes
    4. `after_render()`
    5. render the deprecated `views` option, if given
    6. render declared child views

    Children render last so the parent's element cache and bindings never
    capture nodes from a child's subtree.
    """

    defaults: Mapping[str, Any] = {}
    els: Mapping[str, str] = {}
    settings: ViewSettings = DEFAULT_SETTINGS
    template: TemplateFunction | None = None

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        namespace = cls.__dict__
        for name in namespace.get("option_properties", ()):
            register_option_property(cls, name)
        for name, selector in dict(namespace.get("child_views", {})).items():
            declare_child(cls, name, selector)
        if isinstance(namespace.get(TEMPLATE_OPTION), str):
            cls.template = as_template(namespace[TEMPLATE_OPTION])

    def __init__(self, options: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        self.state: ViewState = "uninitialized"
        self.options: dict[str, Any] = {}
        self.elements: dict[str, Element | None] = {}
        self.bindings = BindingSet()
        super().__init__(options, **kwargs)

    @classmethod
    def declare_option_property(cls, name: str) -> None:
        register_option_property(cls, name)

    @classmethod
    def declare_child(cls, name: str, selector: str) -> ChildDescriptor:
        return declare_child(cls, name, selector)

    @classmethod
    def option_property_names(cls) -> tuple[str, ...]:
        return resolve_option_properties(cls)

    @classmethod
    def child_descriptors(cls) -> tuple[ChildDescriptor, ...]:
        return resolve_children(cls)

    @classmethod
    def mixin(cls, *sources: Mapping[str, Any] | object) -> type["LayoutView"]:
        return mixin(cls, *sources)

    @classmethod
    def configure(cls, settings: ViewSettings) -> None:
        cls.settings = settings

    def initialize(self, options: Mapping[str, Any] | None = None) -> "LayoutView":
        self.options = {**self.defaults, **self.options, **(options or {})}
        apply_option_properties(self, self.options)
        self.template = as_template(self._declared_template())
        self.el.data[self.settings.element_data_key] = self
        if self.model is not None:
            self.model.view = self
        if self.collection is not None:
            self.collection.view = self
        self.state = "initialized"
        return self

    def set_element(self, element: Element, delegate: bool = True) -> "LayoutView":
        super().set_element(element, delegate)
        self.el.data[self.settings.element_data_key] = self
        return self

    def render(self) -> "LayoutView":
        LOGGER.debug("%s: render (%s)", self.cid, type(self).__name__)
        self._render_template()
        self._cache_elements()
        self.create_bindings()
        self.after_render()
        legacy_views = self.options.get(LEGACY_VIEWS_OPTION)
        if legacy_views:
            render_legacy_views(self, legacy_views)
        render_children(self)
        self.state = "rendered"
        return self

    def after_render(self) -> None:
        pass

    def to_json(self) -> dict[str, Any]:
        return project(self)

    def create_bindings(self) -> tuple[Binding, ...]:
        bindings = create_bindings(self)
        self.bindings.record(bindings)
        return bindings

    def format(self, attribute: str, value: Any) -> str:
        _ = attribute
        return escape(value)

    def _declared_template(self) -> Any:
        # Raw lookup: a function declared in a class body stays unbound.
        template = inspect.getattr_static(self, TEMPLATE_OPTION, None)
        if isinstance(template, staticmethod):
            return template.__func__
        return template

    def _render_template(self) -> None:
        if self.template is None:
            return
        self.el.set_html(self.template(self.to_json()))

    def _cache_elements(self) -> None:
        if not self.els:
            return
        for selector, name in self.els.items():
            element = self.el.select_one(selector)
            self.elements[name] = element
            setattr(self, name, element)


register_option_property(LayoutView, TEMPLATE_OPTION)
