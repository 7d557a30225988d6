from __future__ import annotations

from typing import Any

from markupsafe import escape as _markup_escape


def escape(value: Any) -> str:
    """Escape `value` for element content; `None` renders as the empty string."""

    if value is None:
        return ""
    return str(_markup_escape(value))
