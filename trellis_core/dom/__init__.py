"""Markup element handles and the selector subset used to query them."""

from .element import Element, MarkupError
from .selectors import (
    ComplexSelector,
    CompoundSelector,
    SelectorError,
    SelectorGroup,
    build_parent_map,
    iter_matches,
    parse_selector,
)

__all__ = [
    "ComplexSelector",
    "CompoundSelector",
    "Element",
    "MarkupError",
    "SelectorError",
    "SelectorGroup",
    "build_parent_map",
    "iter_matches",
    "parse_selector",
]
