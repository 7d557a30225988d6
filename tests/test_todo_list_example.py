from __future__ import annotations

import unittest

from examples.todo_list.app_main import build_view


class TodoListExampleTests(unittest.TestCase):
    def test_build_view_renders_header_and_items(self) -> None:
        app = build_view()
        self.assertEqual(app.el.get("class"), "todo-app")

        heading = app.el.select_one("header h1.title")
        assert heading is not None
        self.assertEqual(heading.text(), "Todo")
        count = app.el.select_one("header .count")
        assert count is not None
        self.assertEqual(count.text(), "1 left")

        items = app.el.select("ul.items > li")
        self.assertEqual([li.text() for li in items], ["write docs", "ship"])
        self.assertEqual([li.get("class") for li in items], ["item open", "item done"])

    def test_click_toggles_item(self) -> None:
        app = build_view()
        first = app.items.el.select("li")[0]
        self.assertEqual(app.items.dispatch("click", first), 1)

        self.assertTrue(app.items.collection.get(0).get("done"))
        self.assertEqual(app.items.el.select("li")[0].get("class"), "item done")

    def test_model_change_updates_heading(self) -> None:
        app = build_view([{"title": "only"}])
        app.header.model.set("title", "Chores & more")
        heading = app.el.select_one("h1")
        assert heading is not None
        self.assertEqual(heading.text(), "Chores & more")


if __name__ == "__main__":
    unittest.main()
