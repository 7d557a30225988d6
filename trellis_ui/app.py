from __future__ import annotations

from dataclasses import dataclass
import importlib.util
from pathlib import Path
import tomllib

from trellis_core.core.view import View


MANIFEST_NAME = "app.toml"


@dataclass(frozen=True)
class AppManifest:
    """An app folder's `app.toml`: `entrypoint` names a `module:factory` returning the root view."""

    app_id: str
    entrypoint: str
    title: str | None = None

    def __post_init__(self) -> None:
        module_name, sep, factory_name = self.entrypoint.partition(":")
        if not sep or not module_name.strip() or not factory_name.strip():
            raise ValueError(f"entrypoint must use `module:symbol` format, got {self.entrypoint!r}")

    @property
    def module_name(self) -> str:
        return self.entrypoint.partition(":")[0].strip()

    @property
    def factory_name(self) -> str:
        return self.entrypoint.partition(":")[2].strip()

    def module_path(self, app_dir: Path) -> Path:
        return app_dir.joinpath(*self.module_name.split(".")).with_suffix(".py")


def load_manifest(app_dir: str | Path) -> AppManifest:
    manifest_path = Path(app_dir) / MANIFEST_NAME
    if not manifest_path.exists():
        raise FileNotFoundError(f"app manifest not found: {manifest_path}")
    with manifest_path.open("rb") as f:
        raw = tomllib.load(f)
    try:
        app_id = str(raw["app_id"])
        entrypoint = str(raw["entrypoint"])
    except KeyError as exc:
        raise ValueError(f"manifest missing required field: {exc.args[0]}") from exc
    title = raw.get("title")
    if title is not None and not isinstance(title, str):
        raise ValueError("manifest field `title` must be a string")
    return AppManifest(app_id=app_id, entrypoint=entrypoint, title=title)


def build_root_view(app_dir: str | Path) -> View:
    """Import the app's factory module from its folder and call the factory for the root view.

    The module is loaded fresh on every call under `trellis_app.<app_id>.<module>`
    and is not added to `sys.modules`.
    """

    app_path = Path(app_dir).resolve()
    manifest = load_manifest(app_path)
    module_path = manifest.module_path(app_path)
    if not module_path.is_file():
        raise ValueError(f"entrypoint module file not found: {manifest.module_name} ({module_path})")
    module_spec = importlib.util.spec_from_file_location(
        f"trellis_app.{manifest.app_id}.{manifest.module_name}", module_path
    )
    if module_spec is None or module_spec.loader is None:
        raise ValueError(f"unable to load entrypoint module: {manifest.module_name}")
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)

    factory = getattr(module, manifest.factory_name, None)
    if not callable(factory):
        raise ValueError(f"entrypoint symbol is not callable: {manifest.entrypoint}")
    view = factory()
    if not isinstance(view, View):
        raise TypeError(f"entrypoint `{manifest.entrypoint}` must return a View, got {type(view).__name__}")
    return view
