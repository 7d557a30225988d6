from __future__ import annotations

from trellis_core.core.model import Collection, Model
from trellis_core.core.view import DomEvent
from trellis_ui.layout import LayoutView


class Todo(Model):
    defaults = {"title": "", "done": False}

    def to_view_json(self) -> dict[str, object]:
        data = self.to_json()
        data["status"] = "done" if data["done"] else "open"
        return data


class TodoList(Collection):
    model_class = Todo

    def to_view_json(self) -> list[dict[str, object]]:
        return [todo.to_view_json() for todo in self.models]

    def remaining(self) -> int:
        return sum(1 for todo in self.models if not todo.get("done"))


class HeaderView(LayoutView):
    template = "<h1 class='title' data-bind='title'>{{ title }}</h1><span class='count'></span>"
    els = {".count": "count_el"}
    option_properties = ("todos",)
    todos: TodoList | None = None

    def after_render(self) -> None:
        if self.count_el is not None and self.todos is not None:
            self.count_el.set_text(f"{self.todos.remaining()} left")


class ItemsView(LayoutView):
    template = (
        "{% for item in items %}"
        "<li class='item {{ item.status }}' data-index='{{ loop.index0 }}'>{{ item.title }}</li>"
        "{% endfor %}"
    )
    events = {"click li.item": "toggle"}

    def toggle(self, event: DomEvent) -> None:
        index = int(event.current_target.get("data-index") or 0)
        todo = self.collection.get(index)
        todo.set("done", not todo.get("done"))
        self.render()


class TodoAppView(LayoutView):
    class_name = "todo-app"
    template = "<header class='header'></header><ul class='items'></ul>"
    child_views = {"header": ".header", "items": ".items"}


def build_view(todos: list[dict[str, object]] | None = None) -> TodoAppView:
    collection = TodoList(todos if todos is not None else [{"title": "write docs"}, {"title": "ship", "done": True}])
    header = HeaderView(model=Model({"title": "Todo"}), todos=collection)
    items = ItemsView(collection=collection)
    app = TodoAppView(header=header, items=items)
    return app.render()
