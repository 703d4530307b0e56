# edgex_bridge/app/config.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from edgex_bridge.core.errors import ConnectorConfigError

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceConfig:
    """
    Resolved connection options of an EdgeX source.
    """
    protocol: str = "tcp"
    server: str = "localhost"
    port: int = 5563
    topic: str = ""

    @property
    def uri(self) -> str:
        return f"{self.protocol}://{self.server}:{self.port}"


# option name -> expected schema type
OPTION_TYPES: Dict[str, str] = {
    "protocol": "str",
    "server": "str",
    "port": "int",
    "topic": "str",
}


def resolve_options(props: Optional[Mapping[str, Any]] = None) -> SourceConfig:
    """
    Decode a loosely-typed option bag into a SourceConfig.

    Omitted options (or options set to None) take their defaults; unknown keys
    are ignored. A value of the wrong type raises ConnectorConfigError.
    """
    props = props or {}
    resolved: Dict[str, Any] = {}

    for key in props:
        if key not in OPTION_TYPES:
            _log.debug("EDGEX_OPTION_IGNORED key=%s", key)

    for name, type_name in OPTION_TYPES.items():
        value = props.get(name)
        if value is None:
            continue

        try:
            resolved[name] = _cast_option(value, type_name)
        except (TypeError, ValueError) as e:
            raise ConnectorConfigError(
                f"Invalid value for source option '{name}'.",
                hint=str(e),
                details={"option": name, "value": value, "expected_type": type_name},
            ) from None

    return SourceConfig(**resolved)


def _cast_option(value: Any, type_name: str) -> Any:
    if type_name == "str":
        if not isinstance(value, str):
            raise TypeError(f"Expected str, got {type(value).__name__}")
        return value

    if type_name == "int":
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"Expected int, got {type(value).__name__}")
        if not 0 < value < 65536:
            raise ValueError(f"Port {value} out of range 1..65535")
        return value

    # unknown schema type
    raise TypeError(f"Unknown schema type '{type_name}'")


def load_source_options(path: str | Path, conf_key: Optional[str] = None) -> Dict[str, Any]:
    """
    Load source options from a YAML file.

    Layout:
        default:
          server: localhost
          port: 5563
        <conf_key>:
          port: 5570

    The section named by conf_key is overlaid key-by-key on `default`.
    """
    full_path = Path(path)
    if not full_path.exists():
        raise ConnectorConfigError(
            f"Missing source config file: {full_path}",
            hint="Pass an existing YAML file via --config.",
            details={"path": str(full_path)},
        )

    try:
        with open(full_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConnectorConfigError(
            f"Failed to parse source config file: {full_path}",
            hint=str(e),
            details={"path": str(full_path)},
        ) from None

    if not isinstance(data, dict):
        raise ConnectorConfigError(
            f"Source config file root must be a mapping: {full_path}",
            details={"path": str(full_path)},
        )

    options: Dict[str, Any] = {}
    for key in ("default", conf_key):
        if key is None:
            continue
        if key not in data:
            if key == "default":
                continue
            raise ConnectorConfigError(
                f"Unknown source config key '{key}'.",
                hint=f"Valid keys: {sorted(str(k) for k in data.keys() if k != 'default')}",
                details={"path": str(full_path), "conf_key": key},
            )

        section = data[key] or {}
        if not isinstance(section, dict):
            raise ConnectorConfigError(
                f"Source config section '{key}' must be a mapping.",
                details={"path": str(full_path), "conf_key": key},
            )
        options.update(section)

    return options
