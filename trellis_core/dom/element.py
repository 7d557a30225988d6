from __future__ import annotations

from html.parser import HTMLParser
from typing import Any, Mapping
import weakref
import xml.etree.ElementTree as ET

from markupsafe import escape

from trellis_core.errors import TrellisError

from .selectors import build_parent_map, iter_matches, parse_selector


_FRAGMENT_TAG = "trellis-fragment"
VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)
_NODE_DATA: "weakref.WeakKeyDictionary[ET.Element, dict[str, Any]]" = weakref.WeakKeyDictionary()


class MarkupError(TrellisError, ValueError):
    """Raised when markup cannot be parsed into elements."""


class Element:
    """Handle on one markup node.

    Handles are cheap and may be created many times for the same node; equality,
    hashing and the `data` store all follow the underlying node.
    """

    __slots__ = ("_node",)

    def __init__(self, node: ET.Element) -> None:
        if not isinstance(node, ET.Element):
            raise TypeError(f"Element expects an ElementTree node, got {type(node).__name__}")
        self._node = node

    @classmethod
    def create(cls, tag: str = "div", attributes: Mapping[str, Any] | None = None) -> "Element":
        if not tag or not isinstance(tag, str):
            raise ValueError("element tag must be a non-empty string")
        node = ET.Element(tag)
        for name, value in (attributes or {}).items():
            if value is not None:
                node.set(name, str(value))
        return cls(node)

    @classmethod
    def from_markup(cls, markup: str) -> "Element":
        """Parse markup with exactly one root element."""

        fragment = _parse_fragment(markup)
        nodes = list(fragment)
        if len(nodes) != 1 or (fragment.text or "").strip() or (nodes[0].tail or "").strip():
            raise MarkupError("markup must contain exactly one root element")
        nodes[0].tail = None
        return cls(nodes[0])

    @property
    def node(self) -> ET.Element:
        return self._node

    @property
    def tag(self) -> str:
        return self._node.tag

    @property
    def data(self) -> dict[str, Any]:
        store = _NODE_DATA.get(self._node)
        if store is None:
            store = {}
            _NODE_DATA[self._node] = store
        return store

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._node.get(name, default)

    def set(self, name: str, value: Any) -> "Element":
        if value is None:
            self._node.attrib.pop(name, None)
        else:
            self._node.set(name, str(value))
        return self

    @property
    def attributes(self) -> dict[str, str]:
        return dict(self._node.attrib)

    @property
    def classes(self) -> list[str]:
        return (self._node.get("class") or "").split()

    def add_class(self, name: str) -> "Element":
        classes = self.classes
        if name not in classes:
            classes.append(name)
            self._node.set("class", " ".join(classes))
        return self

    def children(self) -> list["Element"]:
        return [Element(child) for child in self._node]

    def append(self, child: "Element") -> "Element":
        self._node.append(child.node)
        return self

    def html(self) -> str:
        parts = [str(escape(self._node.text or ""))]
        parts.extend(ET.tostring(child, encoding="unicode", method="html") for child in self._node)
        return "".join(parts)

    def set_html(self, markup: str) -> "Element":
        """Replace this element's content (not its attributes) with parsed `markup`."""

        fragment = _parse_fragment(markup)
        del self._node[:]
        self._node.text = fragment.text
        self._node.extend(list(fragment))
        return self

    def text(self) -> str:
        return "".join(self._node.itertext())

    def set_text(self, value: Any) -> "Element":
        del self._node[:]
        self._node.text = "" if value is None else str(value)
        return self

    def outer_html(self) -> str:
        tail, self._node.tail = self._node.tail, None
        try:
            return ET.tostring(self._node, encoding="unicode", method="html")
        finally:
            self._node.tail = tail

    def select(self, selector: str) -> list["Element"]:
        return [Element(node) for node in iter_matches(self._node, selector)]

    def select_one(self, selector: str) -> "Element | None":
        return next((Element(node) for node in iter_matches(self._node, selector)), None)

    def matches(self, selector: str, scope: "Element | None" = None) -> bool:
        """Match against `selector`; ancestors are resolved within `scope` (default: self)."""

        root = scope.node if scope is not None else self._node
        return parse_selector(selector).matches(self._node, build_parent_map(root))

    def path_to(self, descendant: "Element") -> list["Element"]:
        """Return `descendant` and its ancestors up to and including self; empty if unrelated."""

        parents = build_parent_map(self._node)
        node: ET.Element | None = descendant.node
        path: list[Element] = []
        while node is not None:
            path.append(Element(node))
            if node is self._node:
                return path
            node = parents.get(node)
        return []

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Element):
            return NotImplemented
        return self._node is other._node

    def __hash__(self) -> int:
        return id(self._node)

    def __repr__(self) -> str:
        attrs = "".join(f" {k}={v!r}" for k, v in self._node.attrib.items())
        return f"<Element {self._node.tag}{attrs}>"


class _FragmentBuilder(HTMLParser):
    """Builds ElementTree nodes from an HTML fragment.

    Void elements never take children or end tags. Every other element must be
    closed explicitly and in order.
    """

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self._builder = ET.TreeBuilder()
        self._open: list[str] = []
        self._builder.start(_FRAGMENT_TAG, {})

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._builder.start(tag, {name: "" if value is None else value for name, value in attrs})
        if tag in VOID_ELEMENTS:
            self._builder.end(tag)
        else:
            self._open.append(tag)

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        self._builder.start(tag, {name: "" if value is None else value for name, value in attrs})
        self._builder.end(tag)

    def handle_endtag(self, tag: str) -> None:
        if tag in VOID_ELEMENTS:
            return
        if not self._open or self._open[-1] != tag:
            expected = self._open[-1] if self._open else None
            raise MarkupError(f"invalid markup: unexpected </{tag}> (open element: {expected})")
        self._open.pop()
        self._builder.end(tag)

    def handle_data(self, data: str) -> None:
        self._builder.data(data)

    def finish(self) -> ET.Element:
        self.close()
        if self._open:
            raise MarkupError(f"invalid markup: unclosed <{self._open[-1]}>")
        self._builder.end(_FRAGMENT_TAG)
        return self._builder.close()


def _parse_fragment(markup: str) -> ET.Element:
    if not isinstance(markup, str):
        raise TypeError(f"markup must be a string, got {type(markup).__name__}")
    builder = _FragmentBuilder()
    builder.feed(markup)
    return builder.finish()
