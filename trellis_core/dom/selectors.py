from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
import re
from typing import Iterator, Mapping
import xml.etree.ElementTree as ET

from trellis_core.errors import TrellisError


Combinator = str
ParentMap = Mapping[ET.Element, ET.Element]

_IDENT = r"-?[_a-zA-Z][_a-zA-Z0-9-]*"
_TOKEN = re.compile(
    rf"""
    (?P<ws>\s+)
    |(?P<child>>)
    |(?P<comma>,)
    |(?P<tag>{_IDENT}|\*)
    |\#(?P<id>{_IDENT})
    |\.(?P<cls>{_IDENT})
    |\[\s*(?P<attr>{_IDENT})\s*
        (?:=\s*(?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\]\s'"]+))\s*)?
    \]
    """,
    re.VERBOSE,
)


class SelectorError(TrellisError, ValueError):
    """Raised for malformed or unsupported selectors."""


@dataclass(frozen=True)
class CompoundSelector:
    tag: str | None = None
    element_id: str | None = None
    classes: tuple[str, ...] = ()
    attributes: tuple[tuple[str, str | None], ...] = ()

    def matches(self, node: ET.Element) -> bool:
        if self.tag is not None and self.tag != "*" and node.tag.lower() != self.tag:
            return False
        if self.element_id is not None and node.get("id") != self.element_id:
            return False
        if self.classes:
            present = set((node.get("class") or "").split())
            if not all(name in present for name in self.classes):
                return False
        for name, expected in self.attributes:
            actual = node.get(name)
            if actual is None:
                return False
            if expected is not None and actual != expected:
                return False
        return True


@dataclass(frozen=True)
class ComplexSelector:
    """Compound selectors joined by combinators, matched right to left."""

    parts: tuple[CompoundSelector, ...]
    combinators: tuple[Combinator, ...] = ()

    def __post_init__(self) -> None:
        if not self.parts:
            raise SelectorError("selector must contain at least one compound")
        if len(self.combinators) != len(self.parts) - 1:
            raise SelectorError("combinator count must be one less than compound count")

    def matches(self, node: ET.Element, parents: ParentMap) -> bool:
        return self._matches_at(len(self.parts) - 1, node, parents)

    def _matches_at(self, index: int, node: ET.Element, parents: ParentMap) -> bool:
        if not self.parts[index].matches(node):
            return False
        if index == 0:
            return True
        parent = parents.get(node)
        if self.combinators[index - 1] == ">":
            return parent is not None and self._matches_at(index - 1, parent, parents)
        while parent is not None:
            if self._matches_at(index - 1, parent, parents):
                return True
            parent = parents.get(parent)
        return False


@dataclass(frozen=True)
class SelectorGroup:
    source: str
    selectors: tuple[ComplexSelector, ...] = field(default=())

    def matches(self, node: ET.Element, parents: ParentMap) -> bool:
        return any(selector.matches(node, parents) for selector in self.selectors)


@lru_cache(maxsize=512)
def parse_selector(source: str) -> SelectorGroup:
    """Parse a CSS selector subset into a `SelectorGroup`.

    Supported: type and universal selectors, `#id`, `.class`, `[attr]`,
    `[attr=value]`, descendant and child combinators, and `,` groups.
    """

    if not isinstance(source, str):
        raise SelectorError(f"selector must be a string, got {type(source).__name__}")
    text = source.strip()
    if not text:
        raise SelectorError("selector must be non-empty")

    selectors: list[ComplexSelector] = []
    parts: list[CompoundSelector] = []
    combinators: list[Combinator] = []
    current: dict[str, object] = _empty_compound()
    pending: Combinator | None = None

    def flush() -> None:
        nonlocal current, pending
        if _is_empty(current):
            return
        if parts:
            combinators.append(pending or " ")
        parts.append(_build_compound(current))
        current = _empty_compound()
        pending = None

    def close_group() -> None:
        nonlocal parts, combinators, pending
        flush()
        if pending == ">" or not parts:
            raise SelectorError(f"incomplete selector: {source!r}")
        selectors.append(ComplexSelector(parts=tuple(parts), combinators=tuple(combinators)))
        parts = []
        combinators = []
        pending = None

    pos = 0
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise SelectorError(f"unsupported selector syntax at offset {pos}: {source!r}")
        pos = match.end()
        kind = match.lastgroup
        if kind == "ws":
            if not _is_empty(current):
                flush()
                pending = " "
            continue
        if kind == "child":
            flush()
            if not parts:
                raise SelectorError(f"child combinator without left operand: {source!r}")
            pending = ">"
            continue
        if kind == "comma":
            close_group()
            continue
        if match.group("tag") is not None:
            if not _is_empty(current):
                raise SelectorError(f"type selector must start a compound: {source!r}")
            current["tag"] = match.group("tag").lower()
        elif match.group("id") is not None:
            if current["element_id"] is not None:
                raise SelectorError(f"compound has more than one id: {source!r}")
            current["element_id"] = match.group("id")
        elif match.group("cls") is not None:
            current["classes"].append(match.group("cls"))  # type: ignore[union-attr]
        else:
            value = next(
                (match.group(name) for name in ("dq", "sq", "bare") if match.group(name) is not None),
                None,
            )
            current["attributes"].append((match.group("attr"), value))  # type: ignore[union-attr]
    close_group()
    return SelectorGroup(source=text, selectors=tuple(selectors))


def build_parent_map(root: ET.Element) -> dict[ET.Element, ET.Element]:
    return {child: parent for parent in root.iter() for child in parent}


def iter_matches(root: ET.Element, source: str) -> Iterator[ET.Element]:
    """Yield descendants of `root` (not `root` itself) matching `source`, in document order."""

    group = parse_selector(source)
    parents = build_parent_map(root)
    for node in root.iter():
        if node is root:
            continue
        if group.matches(node, parents):
            yield node


def _empty_compound() -> dict[str, object]:
    return {"tag": None, "element_id": None, "classes": [], "attributes": []}


def _is_empty(compound: dict[str, object]) -> bool:
    return (
        compound["tag"] is None
        and compound["element_id"] is None
        and not compound["classes"]
        and not compound["attributes"]
    )


def _build_compound(compound: dict[str, object]) -> CompoundSelector:
    return CompoundSelector(
        tag=compound["tag"],  # type: ignore[arg-type]
        element_id=compound["element_id"],  # type: ignore[arg-type]
        classes=tuple(compound["classes"]),  # type: ignore[arg-type]
        attributes=tuple(compound["attributes"]),  # type: ignore[arg-type]
    )
