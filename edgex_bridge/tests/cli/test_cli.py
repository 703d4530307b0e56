from __future__ import annotations

import json
import threading

import pytest

from edgex_bridge.app.source_registry import SourceRegistry
from edgex_bridge.cli.args import option_overrides, parse_args
from edgex_bridge.cli.commands import PrintTupleSink, cmd_sources, cmd_subscribe
from edgex_bridge.cli.main import main
from edgex_bridge.core.errors import BusConnectError
from edgex_bridge.model.source_tuple import SourceTuple


class FakeSource:
    """Emits its tuples, then ends the subscription by itself."""
    def __init__(self, tuples=(), *, error=None):
        self.tuples = list(tuples)
        self.error = error
        self.props = None
        self.closed = threading.Event()

    def configure(self, props) -> None:
        self.props = props

    def open(self, ctx, consumer, errors) -> None:
        if self.error is not None:
            errors.put(self.error)
            return
        for t in self.tuples:
            consumer.put(t)

    def close(self) -> None:
        self.closed.set()


class CollectSink:
    def __init__(self):
        self.tuples = []
        self.closed = False

    def on_tuple(self, tup) -> None:
        self.tuples.append(tup)

    def close(self) -> None:
        self.closed = True


def test_parse_args_collects_option_overrides():
    args = parse_args(["subscribe", "--server", "core-data", "--port", "5570"])
    assert option_overrides(args) == {"server": "core-data", "port": 5570}


def test_conf_key_requires_config():
    with pytest.raises(SystemExit):
        parse_args(["subscribe", "--conf-key", "plant_a"])


def test_cmd_sources_lists_registered_types(capsys):
    assert cmd_sources() == 0
    assert "edgex" in capsys.readouterr().out


def test_print_tuple_sink_writes_one_json_line(capsys):
    PrintTupleSink().on_tuple(SourceTuple(values={"t": 1}, metadata={"device": "d"}))
    line = capsys.readouterr().out.strip()
    assert json.loads(line) == {"values": {"t": 1}, "metadata": {"device": "d"}}


def test_cmd_subscribe_merges_config_file_and_flags(tmp_path):
    cfg = tmp_path / "edgex.yaml"
    cfg.write_text("default:\n  server: core-data\n  port: 5570\nplant:\n  topic: plant\n", encoding="utf-8")

    tup = SourceTuple(values={"a": 1}, metadata={})
    src = FakeSource([tup])
    sink = CollectSink()
    args = parse_args(["subscribe", "--config", str(cfg), "--conf-key", "plant", "--port", "6000", "--secs", "2"])

    rc = cmd_subscribe(args, registry=SourceRegistry({"edgex": lambda: src}), sink=sink)

    assert rc == 0
    assert src.props == {"server": "core-data", "port": 6000, "topic": "plant"}
    assert sink.tuples == [tup]
    assert sink.closed is True
    assert src.closed.is_set()


def test_cmd_subscribe_reports_setup_error(capsys):
    err = BusConnectError("Failed to connect to edgex message bus.", hint="refused")
    src = FakeSource(error=err)
    args = parse_args(["subscribe", "--secs", "2"])

    rc = cmd_subscribe(args, registry=SourceRegistry({"edgex": lambda: src}), sink=CollectSink())

    out = capsys.readouterr().out
    assert rc == 1
    assert "ERROR: Failed to connect to edgex message bus." in out
    assert "Hint: refused" in out


def test_main_config_error_exits_1(tmp_path, capsys):
    cfg = tmp_path / "edgex.yaml"
    cfg.write_text("default:\n  port: 'abc'\n", encoding="utf-8")

    rc = main(["subscribe", "--config", str(cfg)])

    assert rc == 1
    assert "ERROR: Invalid value for source option 'port'." in capsys.readouterr().out


def test_main_unknown_source_exits_1(capsys):
    assert main(["subscribe", "--source", "mqtt"]) == 1
    assert "ERROR: Source type 'mqtt' is not registered." in capsys.readouterr().out


def test_main_sources(capsys):
    assert main(["sources"]) == 0
    assert "edgex" in capsys.readouterr().out
