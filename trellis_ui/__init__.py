"""Composable layout views: declared options, child views and model bindings."""

from .app import AppManifest, build_root_view, load_manifest
from .bindings import Binding, BindingSet, create_bindings, project
from .children import attach_child, render_children
from .layout import LayoutView, ViewState
from .legacy import render_legacy_views
from .mixins import mixin
from .registry import (
    TEMPLATE_OPTION,
    ChildDescriptor,
    DeclarationRegistry,
    ViewDeclarationError,
    apply_option_properties,
    declare_child,
    register_option_property,
    resolve_children,
    resolve_option_properties,
)
from .settings import DEFAULT_SETTINGS, ViewSettings, load_view_settings, validate_view_settings

__all__ = [
    "AppManifest",
    "Binding",
    "BindingSet",
    "ChildDescriptor",
    "DEFAULT_SETTINGS",
    "DeclarationRegistry",
    "LayoutView",
    "TEMPLATE_OPTION",
    "ViewDeclarationError",
    "ViewSettings",
    "ViewState",
    "apply_option_properties",
    "attach_child",
    "build_root_view",
    "create_bindings",
    "declare_child",
    "load_manifest",
    "load_view_settings",
    "mixin",
    "project",
    "register_option_property",
    "render_children",
    "render_legacy_views",
    "resolve_children",
    "resolve_option_properties",
    "validate_view_settings",
]
