# edgex_bridge/cli/args.py
from __future__ import annotations

import argparse
from typing import Any, Dict, Optional

from edgex_bridge.app.config import OPTION_TYPES


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="edgex-bridge")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr.")
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("sources", help="List registered source types.")

    ps = sub.add_parser("subscribe", help="Subscribe and print every tuple as a JSON line.")
    ps.add_argument("--source", default="edgex", help="Source type (see: edgex-bridge sources).")
    ps.add_argument("--config", default=None, help="YAML file with a 'default' section and named sections.")
    ps.add_argument("--conf-key", default=None, help="Named section overlaid on 'default'.")
    ps.add_argument("--protocol", default=None)
    ps.add_argument("--server", default=None)
    ps.add_argument("--port", type=int, default=None)
    ps.add_argument("--topic", default=None)
    ps.add_argument("--secs", type=float, default=None, help="Stop after this many seconds.")
    ps.add_argument("--buffer", type=int, default=1024, help="Output queue size.")

    return parser


def option_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Source options given on the command line (only those actually set)."""
    return {
        name: getattr(args, name)
        for name in OPTION_TYPES
        if getattr(args, name, None) is not None
    }


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    args = build_parser().parse_args(argv)
    if getattr(args, "conf_key", None) and not args.config:
        build_parser().error("--conf-key requires --config")
    return args
