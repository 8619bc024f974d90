import csv
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict

from depviz.core.registry import DEFAULT_TIMEOUT
from depviz.core.render import DEFAULT_RASTER_COMMAND, DEFAULT_VISUALIZER

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


class ConfigError(Exception):
    pass


@dataclass
class Config:
    package_name: str
    output_file_path: str
    max_depth: int
    repository_url: str
    visualizer_path: str = DEFAULT_VISUALIZER
    raster_command: str = DEFAULT_RASTER_COMMAND
    request_timeout: float = DEFAULT_TIMEOUT
    skip_cycles: bool = False

    @property
    def output_base_name(self) -> str:
        """Output path with its .dot extension stripped."""
        if self.output_file_path.endswith(".dot"):
            return self.output_file_path[:-len(".dot")]
        return self.output_file_path


REQUIRED_FIELDS = ("packageName", "outputFilePath", "maxDepth", "repositoryUrl")

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off", "")


def load_config(path: str) -> Config:
    """
    Reads the run configuration from a CSV file (header plus one row) or
    a TOML file, picked by extension.
    """
    if not os.path.exists(path):
        raise ConfigError(f"Configuration file not found: {path}")

    logging.debug(f"Loading configuration from {path}")

    if path.endswith(".toml"):
        raw = _read_toml(path)
    else:
        raw = _read_csv(path)

    return _build_config(raw)


def _read_csv(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            rows = list(csv.DictReader(f))
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        raise ConfigError(f"Error reading {path}: {e}")

    if not rows:
        raise ConfigError(f"No configuration row in {path}")

    # Last row wins
    row = rows[-1]
    return {k.strip(): (v or "").strip() for k, v in row.items() if k}


def _read_toml(path: str) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Error reading {path}: {e}")

    return data.get("depviz", data)


def _build_config(raw: Dict[str, Any]) -> Config:
    missing = [k for k in REQUIRED_FIELDS if raw.get(k) in (None, "")]
    if missing:
        raise ConfigError(f"Missing configuration fields: {', '.join(missing)}")

    max_depth = _parse_int("maxDepth", raw["maxDepth"])
    if max_depth < 1:
        raise ConfigError(f"maxDepth must be at least 1, got {max_depth}")

    timeout = raw.get("requestTimeout") or DEFAULT_TIMEOUT
    try:
        timeout = float(timeout)
    except (TypeError, ValueError):
        raise ConfigError(f"requestTimeout must be a number, got {timeout!r}")

    return Config(
        package_name=str(raw["packageName"]),
        output_file_path=str(raw["outputFilePath"]),
        max_depth=max_depth,
        repository_url=str(raw["repositoryUrl"]),
        visualizer_path=str(raw.get("visualizerPath") or DEFAULT_VISUALIZER),
        raster_command=str(raw.get("rasterCommand") or DEFAULT_RASTER_COMMAND),
        request_timeout=timeout,
        skip_cycles=_parse_bool("skipCycles", raw.get("skipCycles", False)),
    )


def _parse_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"{key} must be true or false, got {value!r}")


def _parse_int(key: str, value: Any) -> int:
    # TOML gives typed values: only real integers pass, not floats or booleans
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ConfigError(f"{key} must be an integer, got {value!r}")
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}")
