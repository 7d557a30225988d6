from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping

from .events import EventEmitter


_MISSING = object()


class Model(EventEmitter):
    """Attribute store with per-attribute change notification.

    Setting attributes emits `change:<name>` with `(model, value)` for each
    attribute whose value changed, then a single `change` with `(model,)`.
    Subclasses may add `to_view_json()` to expose a curated snapshot for views.
    """

    defaults: Mapping[str, Any] = {}

    def __init__(self, attributes: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        super().__init__()
        self.attributes: dict[str, Any] = {**self.defaults, **(attributes or {}), **kwargs}
        self.changed: dict[str, Any] = {}
        self.collection: Collection | None = None
        self.view: object | None = None

    def get(self, key: str, default: Any = None) -> Any:
        return self.attributes.get(key, default)

    def has(self, key: str) -> bool:
        return self.attributes.get(key) is not None

    def set(self, key: str | Mapping[str, Any], value: Any = _MISSING) -> dict[str, Any]:
        if isinstance(key, Mapping):
            if value is not _MISSING:
                raise TypeError("set() takes either a mapping or a key and value")
            updates = dict(key)
        else:
            if value is _MISSING:
                raise TypeError("set() with a key requires a value")
            updates = {key: value}

        changes = {
            name: new_value
            for name, new_value in updates.items()
            if name not in self.attributes or self.attributes[name] != new_value
        }
        self.attributes.update(updates)
        self.changed = changes
        for name, new_value in changes.items():
            self.trigger(f"change:{name}", self, new_value)
        if changes:
            self.trigger("change", self)
        return changes

    def unset(self, key: str) -> bool:
        if key not in self.attributes:
            return False
        del self.attributes[key]
        self.changed = {key: None}
        self.trigger(f"change:{key}", self, None)
        self.trigger("change", self)
        return True

    def to_json(self) -> dict[str, Any]:
        return dict(self.attributes)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.attributes!r})"


class Collection(EventEmitter):
    """Ordered list of models; emits `add`, `remove` and `reset`."""

    model_class: type[Model] = Model

    def __init__(self, models: Iterable[Model | Mapping[str, Any]] | None = None) -> None:
        super().__init__()
        self.models: list[Model] = []
        self.view: object | None = None
        for model in models or ():
            self._attach(model)

    def add(self, model: Model | Mapping[str, Any]) -> Model:
        added = self._attach(model)
        self.trigger("add", added, self)
        return added

    def remove(self, model: Model) -> bool:
        if model not in self.models:
            return False
        self.models.remove(model)
        if model.collection is self:
            model.collection = None
        self.trigger("remove", model, self)
        return True

    def reset(self, models: Iterable[Model | Mapping[str, Any]] | None = None) -> None:
        for model in self.models:
            if model.collection is self:
                model.collection = None
        self.models = []
        for model in models or ():
            self._attach(model)
        self.trigger("reset", self)

    def get(self, index: int) -> Model:
        return self.models[index]

    def to_json(self) -> list[dict[str, Any]]:
        return [model.to_json() for model in self.models]

    def __len__(self) -> int:
        return len(self.models)

    def __iter__(self) -> Iterator[Model]:
        return iter(self.models)

    def _attach(self, model: Model | Mapping[str, Any]) -> Model:
        if not isinstance(model, Model):
            model = self.model_class(model)
        model.collection = self
        self.models.append(model)
        return model
