from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar
import weakref

from trellis_core.errors import TrellisError


T = TypeVar("T")

TEMPLATE_OPTION = "template"


class ViewDeclarationError(TrellisError, ValueError):
    """Raised for an invalid option-property or child-view declaration."""


@dataclass(frozen=True)
class ChildDescriptor:
    name: str
    selector: str

    def __post_init__(self) -> None:
        _check_name(self.name, "child view name")
        if not isinstance(self.selector, str) or not self.selector.strip():
            raise ViewDeclarationError(f"child view `{self.name}` needs a non-empty selector")


class DeclarationRegistry(Generic[T]):
    """Append-only per-class declarations, resolved ancestor-first over the MRO.

    Duplicates are kept. Resolution is cached per class and the whole cache is
    dropped on any new declaration, since a base-class declaration changes every
    subclass's resolved sequence.
    """

    def __init__(self, label: str) -> None:
        self.label = label
        self._own: "weakref.WeakKeyDictionary[type, list[T]]" = weakref.WeakKeyDictionary()
        self._resolved: "weakref.WeakKeyDictionary[type, tuple[T, ...]]" = weakref.WeakKeyDictionary()

    def declare(self, owner: type, item: T) -> None:
        if not isinstance(owner, type):
            raise TypeError(f"{self.label} must be declared on a class, got {type(owner).__name__}")
        self._own.setdefault(owner, []).append(item)
        self._resolved.clear()

    def own(self, owner: type) -> tuple[T, ...]:
        return tuple(self._own.get(owner, ()))

    def resolve(self, owner: type) -> tuple[T, ...]:
        cached = self._resolved.get(owner)
        if cached is not None:
            return cached
        items: list[T] = []
        for klass in reversed(owner.__mro__):
            items.extend(self._own.get(klass, ()))
        resolved = tuple(items)
        self._resolved[owner] = resolved
        return resolved


OPTION_PROPERTIES: DeclarationRegistry[str] = DeclarationRegistry("option property")
CHILD_VIEWS: DeclarationRegistry[ChildDescriptor] = DeclarationRegistry("child view")


def register_option_property(view_cls: type, name: str) -> None:
    _check_name(name, "option property name")
    OPTION_PROPERTIES.declare(view_cls, name)


def resolve_option_properties(view_cls: type) -> tuple[str, ...]:
    return OPTION_PROPERTIES.resolve(view_cls)


def apply_option_properties(instance: object, options: Mapping[str, Any]) -> list[str]:
    """Copy declared options onto `instance`; absent or `None` values are skipped."""

    applied: list[str] = []
    for name in resolve_option_properties(type(instance)):
        value = options.get(name)
        if value is None:
            continue
        setattr(instance, name, value)
        applied.append(name)
    return applied


def declare_child(view_cls: type, name: str, selector: str) -> ChildDescriptor:
    descriptor = ChildDescriptor(name=name, selector=selector)
    register_option_property(view_cls, name)
    CHILD_VIEWS.declare(view_cls, descriptor)
    return descriptor


def resolve_children(view_cls: type) -> tuple[ChildDescriptor, ...]:
    return CHILD_VIEWS.resolve(view_cls)


def _check_name(name: object, what: str) -> None:
    if not isinstance(name, str) or not name:
        raise ViewDeclarationError(f"{what} must be a non-empty string")
    if not name.isidentifier():
        raise ViewDeclarationError(f"{what} `{name}` must be a valid identifier")
