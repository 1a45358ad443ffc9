"""CLI entry point for the chipselect picker.

Runs the multi-select widget inline in the terminal and prints the final
selection once the user exits.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from chipselect.catalog import FRAMEWORKS, FRAMEWORKS_PRESET, Catalog, CatalogError, load_catalog
from chipselect.components.multi_select import DefaultMultiSelectTheme, MultiSelect
from chipselect.controller import MultiSelectController, MultiSelectState
from chipselect.keybindings import KeybindingsManager
from chipselect.settings import load_settings

logger = logging.getLogger(__name__)

DEFAULT_MAX_VISIBLE = 5


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="chipselect",
        description="Pick items from a catalog as removable chips",
    )
    parser.add_argument("--catalog", help="JSON file with a list of {value, label} items")
    parser.add_argument(
        "--select",
        action="append",
        dest="preset",
        metavar="VALUE",
        help="Preselect an item by value (repeatable)",
    )
    parser.add_argument("--settings", help="Settings file (default: ~/.chipselect/settings.json)")
    parser.add_argument("--max-visible", type=int, dest="max_visible", help="Suggestions shown at once")
    parser.add_argument("--json", dest="json_output", action="store_true", help="Print the selection as JSON")
    parser.add_argument("--log-level", default="warning", choices=["debug", "info", "warning", "error"])
    parser.add_argument("--log-file", help="Write logs to this file instead of stderr")
    return parser.parse_args(argv)


def _setup_logging(args: argparse.Namespace) -> None:
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        filename=args.log_file,
    )


def _preset_setting(settings: dict[str, Any]) -> list[str] | None:
    preset = settings.get("preset")
    if preset is None:
        return None
    if isinstance(preset, list) and all(isinstance(value, str) for value in preset):
        return preset
    logger.warning("Ignoring invalid preset setting %r: expected a list of values", preset)
    return None


def _max_visible_setting(settings: dict[str, Any]) -> int:
    value = settings.get("maxVisible")
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    if value is not None:
        logger.warning("Ignoring invalid maxVisible setting %r", value)
    return DEFAULT_MAX_VISIBLE


def _resolve_catalog(settings: dict[str, Any]) -> tuple[Catalog, list[str]]:
    """Return the catalog and the preset values to start with."""
    catalog_path = settings.get("catalog")
    preset = _preset_setting(settings)
    if catalog_path is not None and not isinstance(catalog_path, str):
        raise CatalogError(f"Catalog setting must be a file path, got {catalog_path!r}")

    if catalog_path:
        catalog = load_catalog(catalog_path)
        return catalog, list(preset or [])

    preset_values = list(FRAMEWORKS_PRESET) if preset is None else list(preset)
    return FRAMEWORKS, preset_values


def build_widget(settings: dict[str, Any]) -> MultiSelect:
    """Create the controller and widget described by *settings*."""
    catalog, preset = _resolve_catalog(settings)
    controller = MultiSelectController(catalog, preset)
    return MultiSelect(
        controller,
        DefaultMultiSelectTheme(),
        max_visible=_max_visible_setting(settings),
        placeholder=str(settings.get("placeholder") or ""),
        keybindings=KeybindingsManager(settings.get("keybindings") or {}),
    )


def format_selection(state: MultiSelectState, as_json: bool = False) -> str:
    if as_json:
        return json.dumps([{"value": item.value, "label": item.label} for item in state.selected])
    return "\n".join(item.label for item in state.selected)


async def _run(widget: MultiSelect) -> MultiSelectState:
    from chipselect.app import MultiSelectApp
    from chipselect.terminal import ProcessTerminal

    app = MultiSelectApp(ProcessTerminal(), widget)
    return await app.run()


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    _setup_logging(args)

    overrides = {
        "catalog": args.catalog,
        "preset": args.preset,
        "maxVisible": args.max_visible,
    }
    settings, error = load_settings(args.settings, overrides)
    if error is not None:
        logger.warning("Ignoring unreadable settings file: %s", error)

    try:
        widget = build_widget(settings)
    except CatalogError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if not sys.stdin.isatty():
        print("Error: chipselect needs an interactive terminal", file=sys.stderr)
        sys.exit(1)

    state = asyncio.run(_run(widget))
    output = format_selection(state, as_json=args.json_output)
    if output:
        print(output)


if __name__ == "__main__":
    main()
