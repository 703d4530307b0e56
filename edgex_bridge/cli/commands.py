# edgex_bridge/cli/commands.py
from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Optional

from edgex_bridge.app.config import load_source_options
from edgex_bridge.app.source_registry import SourceRegistry
from edgex_bridge.core.errors import ConnectorError
from edgex_bridge.interfaces import TupleSink
from edgex_bridge.model.source_tuple import SourceTuple
from edgex_bridge.runtime.source_node import SourceNode

from edgex_bridge.cli.args import option_overrides


# ---------------- Tuple sink ----------------

class PrintTupleSink(TupleSink):
    """Print tuples to stdout, one JSON document per line."""
    def on_tuple(self, tup: SourceTuple) -> None:
        print(json.dumps(tup.as_dict(), sort_keys=True, default=str), flush=True)

    def close(self) -> None:
        return None

# ---------------- Logging ----------------

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(*, verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Console logging on stderr, plus an optional file handler (idempotent).
    Kept in CLI (presentation-layer concern).
    """
    root = logging.getLogger()
    level = logging.DEBUG if verbose else logging.INFO
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    root.setLevel(level)

    if log_file is not None:
        configure_file_logging(log_file)


def configure_file_logging(app_log_path: Path) -> None:
    root = logging.getLogger()
    app_log_path.parent.mkdir(parents=True, exist_ok=True)
    target = str(app_log_path.resolve())

    for h in root.handlers:
        if isinstance(h, logging.FileHandler) and getattr(h, "baseFilename", None) == target:
            return

    fh = logging.FileHandler(app_log_path, encoding="utf-8", delay=True)
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)

# ---------------- Error printing ----------------

def print_error(e: BaseException) -> None:
    if isinstance(e, ConnectorError):
        print(f"ERROR: {e.message}")
        if e.hint:
            print(f"Hint: {e.hint}")
    else:
        print(f"ERROR: {e}")

# ---------------- Commands ----------------

def cmd_sources(*, registry: Optional[SourceRegistry] = None) -> int:
    registry = registry or SourceRegistry.default()
    print("Available sources:")
    for name in registry.names():
        print(f"  {name}")
    return 0


def cmd_subscribe(args, *, registry: Optional[SourceRegistry] = None, sink: Optional[TupleSink] = None) -> int:
    options = load_source_options(args.config, args.conf_key) if args.config else {}
    options.update(option_overrides(args))

    node = SourceNode(
        source_type=args.source,
        options=options,
        registry=registry,
        buffer_size=args.buffer,
    )
    sink = sink or PrintTupleSink()

    try:
        with node:
            t0 = time.time()
            while args.secs is None or time.time() - t0 < args.secs:
                # sampled first: a finished worker has already queued its errors
                running = node.is_running
                tup = node.poll(timeout=0.2)
                if tup is not None:
                    sink.on_tuple(tup)

                errs = node.errors()
                if errs:
                    for e in errs:
                        print_error(e)
                    return 1

                if not running and node.output.empty():
                    break
        return 0
    except KeyboardInterrupt:
        print("Interrupted.")
        return 0
    finally:
        sink.close()
