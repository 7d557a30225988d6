from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path

from trellis_ui.app import build_root_view, load_manifest
from trellis_ui.layout import LayoutView
from trellis_ui.settings import load_view_settings


LOGGER = logging.getLogger("trellis")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(prog="trellis")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level for render diagnostics.",
    )
    parser.add_argument("--settings", type=Path, default=None, help="TOML file with a [trellis] table.")
    sub = parser.add_subparsers(dest="command", required=True)

    render = sub.add_parser("render-app", help="Render an app folder (app.toml + entrypoint) and print its markup.")
    render.add_argument("app_dir", type=Path)

    inspect = sub.add_parser("inspect-app", help="Print the app manifest and root view declarations as JSON.")
    inspect.add_argument("app_dir", type=Path)
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s")
    if args.settings is not None:
        LayoutView.configure(load_view_settings(args.settings))

    if args.command == "render-app":
        view = build_root_view(args.app_dir)
        LOGGER.info("rendered %s from %s", view.cid, args.app_dir)
        print(view.el.outer_html())
        return

    if args.command == "inspect-app":
        manifest = load_manifest(args.app_dir)
        view = build_root_view(args.app_dir)
        payload: dict[str, object] = {
            "app_id": manifest.app_id,
            "entrypoint": manifest.entrypoint,
            "title": manifest.title,
            "view": type(view).__name__,
        }
        if isinstance(view, LayoutView):
            payload["option_properties"] = list(view.option_property_names())
            payload["children"] = [
                {"name": child.name, "selector": child.selector} for child in view.child_descriptors()
            ]
            payload["state"] = view.state
        print(json.dumps(payload, indent=2, sort_keys=True))
        return

    raise RuntimeError(f"unsupported command: {args.command}")


if __name__ == "__main__":
    main()
