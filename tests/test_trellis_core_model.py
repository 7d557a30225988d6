from __future__ import annotations

import unittest

from trellis_core.core.events import EventEmitter
from trellis_core.core.model import Collection, Model


class EventEmitterTests(unittest.TestCase):
    def test_callbacks_fire_in_subscription_order(self) -> None:
        emitter = EventEmitter()
        calls: list[str] = []
        emitter.on("ping", lambda value: calls.append(f"a:{value}"))
        emitter.on("ping", lambda value: calls.append(f"b:{value}"))
        self.assertEqual(emitter.trigger("ping", 1), 2)
        self.assertEqual(calls, ["a:1", "b:1"])

    def test_cancel_and_off(self) -> None:
        emitter = EventEmitter()
        calls: list[int] = []

        def record(value: int) -> None:
            calls.append(value)

        sub = emitter.on("n", record)
        emitter.on("n", record)
        sub.cancel()
        sub.cancel()
        self.assertEqual(emitter.listener_count("n"), 1)
        self.assertEqual(emitter.off("n", record), 1)
        self.assertEqual(emitter.trigger("n", 5), 0)
        self.assertEqual(calls, [])

    def test_callback_cancelled_during_dispatch_is_skipped(self) -> None:
        emitter = EventEmitter()
        calls: list[str] = []
        second = None

        def first(_: object) -> None:
            calls.append("first")
            assert second is not None
            second.cancel()

        emitter.on("e", first)
        second = emitter.on("e", lambda _: calls.append("second"))
        emitter.trigger("e", None)
        self.assertEqual(calls, ["first"])

    def test_rejects_bad_subscriptions(self) -> None:
        emitter = EventEmitter()
        with self.assertRaises(ValueError):
            emitter.on("", lambda: None)
        with self.assertRaises(TypeError):
            emitter.on("x", "not callable")  # type: ignore[arg-type]


class ModelTests(unittest.TestCase):
    def test_defaults_and_overrides(self) -> None:
        class Item(Model):
            defaults = {"title": "untitled", "done": False}

        item = Item({"title": "a"}, done=True)
        self.assertEqual(item.to_json(), {"title": "a", "done": True})

    def test_set_emits_attribute_then_change(self) -> None:
        model = Model({"a": 1, "b": 2})
        events: list[tuple[str, object]] = []
        model.on("change:a", lambda m, v: events.append(("change:a", v)))
        model.on("change:b", lambda m, v: events.append(("change:b", v)))
        model.on("change", lambda m: events.append(("change", m is model)))

        changed = model.set({"a": 10, "b": 2})
        self.assertEqual(changed, {"a": 10})
        self.assertEqual(events, [("change:a", 10), ("change", True)])

        events.clear()
        self.assertEqual(model.set("a", 10), {})
        self.assertEqual(events, [])

    def test_unset_emits_none(self) -> None:
        model = Model({"a": 1})
        seen: list[object] = []
        model.on("change:a", lambda m, v: seen.append(v))
        self.assertTrue(model.unset("a"))
        self.assertFalse(model.unset("a"))
        self.assertEqual(seen, [None])
        self.assertFalse(model.has("a"))

    def test_set_argument_validation(self) -> None:
        model = Model()
        with self.assertRaises(TypeError):
            model.set("a")
        with self.assertRaises(TypeError):
            model.set({"a": 1}, 2)

    def test_to_json_is_a_copy(self) -> None:
        model = Model({"a": 1})
        snapshot = model.to_json()
        snapshot["a"] = 2
        self.assertEqual(model.get("a"), 1)


class CollectionTests(unittest.TestCase):
    def test_add_remove_reset(self) -> None:
        collection = Collection([{"n": 1}])
        events: list[str] = []
        collection.on("add", lambda m, c: events.append("add"))
        collection.on("remove", lambda m, c: events.append("remove"))
        collection.on("reset", lambda c: events.append("reset"))

        added = collection.add({"n": 2})
        self.assertIs(added.collection, collection)
        self.assertEqual(collection.to_json(), [{"n": 1}, {"n": 2}])

        self.assertTrue(collection.remove(added))
        self.assertIsNone(added.collection)
        self.assertFalse(collection.remove(added))

        collection.reset([Model({"n": 3})])
        self.assertEqual(len(collection), 1)
        self.assertEqual([m.get("n") for m in collection], [3])
        self.assertEqual(events, ["add", "remove", "reset"])

    def test_model_class_converts_mappings(self) -> None:
        class Item(Model):
            defaults = {"done": False}

        class Items(Collection):
            model_class = Item

        items = Items([{"title": "x"}])
        self.assertIsInstance(items.get(0), Item)
        self.assertEqual(items.get(0).to_json(), {"done": False, "title": "x"})


if __name__ == "__main__":
    unittest.main()
