# edgex_bridge/cli/main.py
from __future__ import annotations

from pathlib import Path
from typing import Optional

from edgex_bridge.core.errors import ConnectorError

from edgex_bridge.cli.args import parse_args
from edgex_bridge.cli.commands import (
    cmd_sources,
    cmd_subscribe,
    configure_logging,
    print_error,
)


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(
        verbose=args.verbose,
        log_file=Path(args.log_file) if args.log_file else None,
    )

    try:
        if args.cmd == "sources":
            return cmd_sources()
        if args.cmd == "subscribe":
            return cmd_subscribe(args)

        return 2
    except ConnectorError as e:
        print_error(e)
        return 1
