"""
Command-line interface: `forest-invasives`.

Commands that touch the network (`forests`, `fields`, `map`) exit with status
1 and a one-line message on stderr when a request or response fails.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import requests

from forest_invasives import __version__
from forest_invasives.config import get_settings
from forest_invasives.datasources import usfs
from forest_invasives.errors import ForestInvasivesError
from forest_invasives.flows.explore import explore_forest
from forest_invasives.services.esri import fetch_layer_info


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="forest-invasives",
        description="Query Esri REST services for invasive species inside national forests",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")

    # 'url' command - print the boundary query URL without sending it
    url_parser = subparsers.add_parser("url", help="Print the forest boundary query URL")
    url_parser.add_argument("--forest", type=str, default=None, help="Forest name")

    # 'forests' command - search forest names
    forests_parser = subparsers.add_parser("forests", help="Search national forest names")
    forests_parser.add_argument("text", type=str, help="Case-insensitive name fragment")

    # 'fields' command - describe a layer before writing a where clause
    fields_parser = subparsers.add_parser("fields", help="List a layer's fields")
    fields_parser.add_argument(
        "layer",
        choices=["forests", "invasives"],
        help="Which layer to describe",
    )

    # 'map' command - run the explore flow
    map_parser = subparsers.add_parser("map", help="Map invasive species inside a forest")
    map_parser.add_argument("--forest", type=str, default=None, help="Forest name")
    map_parser.add_argument(
        "--where",
        type=str,
        default="1=1",
        help="Extra SQL filter for the invasive species layer (default: 1=1)",
    )
    map_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Output HTML path (default: <output_dir>/<forest>.html)",
    )
    map_parser.add_argument(
        "--show-excluded",
        action="store_true",
        help="Also show observations outside the boundary",
    )

    return parser


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Forest layer: {settings.forest_layer_url}")
    print(f"Invasives layer: {settings.invasives_layer_url}")
    return 0


def cmd_url(args: argparse.Namespace) -> int:
    """Handle the 'url' command."""
    settings = get_settings()
    forest = args.forest or settings.default_forest
    query = usfs.forest_boundary_query(forest, layer_url=settings.forest_layer_url)
    print(query.url())
    return 0


def cmd_forests(args: argparse.Namespace) -> int:
    """Handle the 'forests' command."""
    settings = get_settings()
    names = usfs.search_forests(args.text, layer_url=settings.forest_layer_url)
    if not names:
        print(f"No forests matching {args.text!r}", file=sys.stderr)
        return 1
    for name in names:
        print(name)
    return 0


def cmd_fields(args: argparse.Namespace) -> int:
    """Handle the 'fields' command."""
    settings = get_settings()
    url = settings.forest_layer_url if args.layer == "forests" else settings.invasives_layer_url
    info = fetch_layer_info(url)
    print(f"Layer: {info.name}")
    print(f"Geometry: {info.geometry_type or 'none'}")
    print(f"Spatial reference: {info.wkid or 'unknown'}")
    print(f"Max records per query: {info.max_record_count or 'unknown'}")
    for field in info.fields:
        alias = f" ({field.alias})" if field.alias and field.alias != field.name else ""
        print(f"  {field.name}{alias}: {field.type}")
    return 0


def cmd_map(args: argparse.Namespace) -> int:
    """Handle the 'map' command."""
    if args.debug:
        print(f"Debug mode enabled. Settings: {get_settings()}")
    result = explore_forest(
        args.forest,
        where=args.where,
        output=args.output,
        show_excluded=args.show_excluded,
    )
    if "error" in result:
        print(f"Error: {result['error']}", file=sys.stderr)
        return 1
    print(f"Map: {result['output']} ({result['retained']} of {result['candidates']} inside)")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "url": cmd_url,
        "forests": cmd_forests,
        "fields": cmd_fields,
        "map": cmd_map,
    }

    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1

    try:
        return handler(args)
    except (ForestInvasivesError, requests.RequestException) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
