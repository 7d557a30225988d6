from __future__ import annotations

import unittest

from trellis_core.core.model import Collection, Model
from trellis_core.render.templates import TemplateRenderError
from trellis_ui.layout import LayoutView


class TitleView(LayoutView):
    defaults = {"title": "untitled"}
    els = {".title": "title_el"}
    template = "<h1 class='title'>{{title}}</h1>"


class ChildView(LayoutView):
    template = "<p class='title'>child</p><span data-bind='name'>?</span>"


class ParentView(LayoutView):
    template = "<div class='slot'></div><p class='title'>parent</p>"
    els = {".title": "title_el"}
    child_views = {"child": ".slot"}


class LifecycleTests(unittest.TestCase):
    def test_cached_title_element_holds_rendered_option(self) -> None:
        view = TitleView({"title": "Hello"}).render()
        self.assertEqual(view.title_el.text(), "Hello")
        self.assertIs(view.elements["title_el"], view.title_el)

    def test_defaults_fill_missing_options(self) -> None:
        view = TitleView().render()
        self.assertEqual(view.title_el.text(), "untitled")

    def test_reinitialize_keeps_previous_own_options(self) -> None:
        class Counter(LayoutView):
            defaults = {"a": 1}
            option_properties = ("a",)

        view = Counter(a=2)
        view.initialize({})
        self.assertEqual(view.options["a"], 2)
        self.assertEqual(view.a, 2)
        view.initialize({"a": 3})
        self.assertEqual(view.a, 3)

    def test_state_transitions_and_chaining(self) -> None:
        view = TitleView()
        self.assertEqual(view.state, "initialized")
        self.assertIs(view.render(), view)
        self.assertEqual(view.state, "rendered")
        view.render()
        self.assertEqual(view.state, "rendered")

    def test_render_without_template_leaves_output(self) -> None:
        view = LayoutView(el="<div><p>keep</p></div>").render()
        self.assertEqual(view.el.html(), "<p>keep</p>")
        self.assertEqual(view.state, "rendered")

    def test_missing_els_match_caches_none(self) -> None:
        class Sparse(LayoutView):
            template = "<p>no title</p>"
            els = {".title": "title_el"}

        view = Sparse().render()
        self.assertIsNone(view.title_el)

    def test_back_references(self) -> None:
        model = Model()
        collection = Collection()
        view = LayoutView(model=model, collection=collection)
        self.assertIs(view.el.data["view"], view)
        self.assertIs(model.view, view)
        self.assertIs(collection.view, view)

    def test_template_option_string_and_callable(self) -> None:
        self.assertEqual(LayoutView(template="<b>{{ x }}</b>", x=1).render().el.html(), "<b>1</b>")
        view = LayoutView(template=lambda ctx: f"<i>{ctx['cid']}</i>").render()
        self.assertEqual(view.el.text(), view.cid)

    def test_class_level_function_template(self) -> None:
        def render_heading(context: dict[str, object]) -> str:
            return f"<h3>{context['label']}</h3>"

        class FunctionTemplateView(LayoutView):
            template = render_heading

        class Subclassed(FunctionTemplateView):
            pass

        self.assertEqual(FunctionTemplateView(label="a").render().el.html(), "<h3>a</h3>")
        self.assertEqual(Subclassed(label="b").render().el.html(), "<h3>b</h3>")
        self.assertEqual(LayoutView(template=render_heading, label="c").render().el.html(), "<h3>c</h3>")

    def test_html_template_with_void_elements_renders(self) -> None:
        view = LayoutView(template="<label>{{ name }}<br><input type='text' disabled></label>", name="Name").render()
        field = view.el.select_one("label input")
        assert field is not None
        self.assertEqual(field.get("disabled"), "")
        self.assertEqual(view.el.text(), "Name")

    def test_template_errors_surface(self) -> None:
        with self.assertRaises(TemplateRenderError):
            LayoutView(template="{% for x in %}")

    def test_template_output_is_escaped(self) -> None:
        view = LayoutView(template="<p>{{ v }}</p>", v="<script>").render()
        self.assertEqual(view.el.text(), "<script>")
        self.assertEqual(view.el.select("script"), [])

    def test_after_render_runs_after_bindings_and_before_children(self) -> None:
        observed: dict[str, object] = {}

        class Observed(ParentView):
            def after_render(self) -> None:
                observed["title"] = self.title_el.text()
                observed["bindings"] = self.bindings.render_count
                observed["child_html"] = self.child.el.html()

        child = ChildView()
        Observed(child=child, model=Model()).render()
        self.assertEqual(observed["title"], "parent")
        self.assertEqual(observed["bindings"], 1)
        self.assertEqual(observed["child_html"], "")
        self.assertIn("child", child.el.text())


class ChildRenderingTests(unittest.TestCase):
    def test_children_render_after_parent_caches_elements(self) -> None:
        child = ChildView()
        parent = ParentView(child=child).render()

        self.assertEqual(parent.title_el.text(), "parent")
        titles = parent.el.select(".title")
        self.assertEqual([el.text() for el in titles], ["child", "parent"])

    def test_parent_bindings_do_not_capture_child_markup(self) -> None:
        model = Model({"name": "n"})
        parent = ParentView(child=ChildView(), model=model).render()
        self.assertEqual(parent.bindings.current, ())
        self.assertEqual(model.listener_count("change:name"), 0)

    def test_child_is_rebound_to_selector_match(self) -> None:
        child = ChildView()
        parent = ParentView(child=child).render()
        slot = parent.el.select_one(".slot")
        self.assertEqual(child.el, slot)
        self.assertIs(child.el.data["view"], child)
        self.assertEqual(child.state, "rendered")

    def test_rerender_rebinds_child_to_new_output(self) -> None:
        child = ChildView()
        parent = ParentView(child=child).render()
        first_slot = child.el
        parent.render()
        self.assertNotEqual(child.el, first_slot)
        self.assertEqual(child.el, parent.el.select_one(".slot"))
        self.assertIn("child", parent.el.text())

    def test_missing_child_or_target_is_skipped(self) -> None:
        self.assertEqual(ParentView().render().state, "rendered")

        class NoSlot(ParentView):
            template = "<p class='title'>only parent</p>"

        child = ChildView()
        NoSlot(child=child).render()
        self.assertEqual(child.state, "initialized")

    def test_children_render_recursively_in_declared_order(self) -> None:
        order: list[str] = []

        class Leaf(LayoutView):
            template = "<em>leaf</em>"

            def after_render(self) -> None:
                order.append(self.options["label"])

        class Middle(LayoutView):
            template = "<div class='leaf'></div>"
            child_views = {"leaf": ".leaf"}

            def after_render(self) -> None:
                order.append("middle")

        class Root(LayoutView):
            template = "<div class='b'></div><div class='a'></div>"
            child_views = {"first": ".a", "second": ".b"}

        root = Root(
            first=Middle(leaf=Leaf(label="leaf-a")),
            second=Leaf(label="leaf-b"),
        ).render()
        self.assertEqual(order, ["middle", "leaf-a", "leaf-b"])
        self.assertEqual(root.el.select(".a em")[0].text(), "leaf")


class ProjectionTests(unittest.TestCase):
    def test_options_projection_stamps_cid_without_mutating_options(self) -> None:
        view = LayoutView(cid="stale", extra=1)
        context = view.to_json()
        self.assertEqual(context["cid"], view.cid)
        self.assertEqual(context["extra"], 1)
        self.assertEqual(view.options["cid"], "stale")

    def test_model_curated_snapshot_wins(self) -> None:
        class Curated(Model):
            def to_view_json(self) -> dict[str, object]:
                return {"label": self.get("name", "").upper()}

        view = LayoutView(model=Curated({"name": "ada"}), collection=Collection([{"n": 1}]), other=2)
        self.assertEqual(view.to_json(), {"label": "ADA", "cid": view.cid})

    def test_model_snapshot_beats_collection(self) -> None:
        view = LayoutView(model=Model({"a": 1}), collection=Collection([{"n": 1}]))
        self.assertEqual(view.to_json(), {"a": 1, "cid": view.cid})

    def test_collection_snapshot_is_wrapped_as_items(self) -> None:
        view = LayoutView(collection=Collection([{"n": 1}, {"n": 2}]))
        self.assertEqual(view.to_json(), {"items": [{"n": 1}, {"n": 2}], "cid": view.cid})

    def test_collection_curated_snapshot_wins_over_full(self) -> None:
        class Names(Collection):
            def to_view_json(self) -> dict[str, object]:
                return {"names": [m.get("name") for m in self.models]}

        view = LayoutView(collection=Names([{"name": "a"}]))
        self.assertEqual(view.to_json()["names"], ["a"])


if __name__ == "__main__":
    unittest.main()
