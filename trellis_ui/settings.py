from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path
import re
import tomllib
from typing import Any, Mapping


_ATTRIBUTE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_.:-]*$")
SETTINGS_TABLE = "trellis"


@dataclass(frozen=True)
class ViewSettings:
    """Markup conventions shared by layout views."""

    bind_attribute: str = "data-bind"
    id_key: str = "cid"
    element_data_key: str = "view"
    warn_legacy_views: bool = True


DEFAULT_SETTINGS = ViewSettings()


def validate_view_settings(overrides: Mapping[str, Any] | None = None) -> ViewSettings:
    """Validate and merge overrides against the default settings."""

    raw: dict[str, Any] = asdict(DEFAULT_SETTINGS)
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown view setting: {key}")
            raw[key] = value

    if not isinstance(raw["bind_attribute"], str) or not _ATTRIBUTE_NAME.match(raw["bind_attribute"]):
        raise ValueError("Setting `bind_attribute` must be a valid markup attribute name")
    for key in ("id_key", "element_data_key"):
        if not isinstance(raw[key], str) or not raw[key].strip():
            raise ValueError(f"Setting `{key}` must be a non-empty string")
    if not isinstance(raw["warn_legacy_views"], bool):
        raise ValueError("Setting `warn_legacy_views` must be a boolean")

    return ViewSettings(
        bind_attribute=raw["bind_attribute"],
        id_key=raw["id_key"],
        element_data_key=raw["element_data_key"],
        warn_legacy_views=raw["warn_legacy_views"],
    )


def load_view_settings(path: str | Path) -> ViewSettings:
    """Read the `[trellis]` table of a TOML file; a file without one yields defaults."""

    settings_path = Path(path)
    if not settings_path.exists():
        raise FileNotFoundError(f"settings file not found: {settings_path}")
    with settings_path.open("rb") as f:
        raw = tomllib.load(f)
    table = raw.get(SETTINGS_TABLE, {})
    if not isinstance(table, dict):
        raise ValueError(f"`{SETTINGS_TABLE}` must be a TOML table")
    return validate_view_settings(table)
