"""Converter configuration and its YAML loader

All knobs have defaults matching the behavior of the vendor tool chain, so
a missing config file is the common case.

Usage:
    from refdbc.config import load_config

    # From a file
    config = load_config("refdbc.yaml")

    # From a YAML string
    config = load_config('''
    converter:
      node_name: LOGGER
      default_dlc: 8
    ''')

YAML Schema
============

Either a flat mapping or the same keys nested under ``converter:``::

    converter:
      node_name: VECTOR__XXX            # sender/receiver placeholder
      default_dlc: 8                    # DLC for lines without a usable DLC
      message_name_format: CAN_MSG_{id} # str.format template, {id} = message ID
      encoding: utf-8                   # text encoding of entries and output
      warn_on_numeric_fallback: false   # warn when a numeric field falls back to 0
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import TypeGuard

import yaml  # type: ignore[import-untyped]

from .errors import ConfigError

DEFAULT_NODE_NAME = "VECTOR__XXX"
DEFAULT_DLC = 8
DEFAULT_MESSAGE_NAME_FORMAT = "CAN_MSG_{id}"


@dataclass(frozen=True)
class ConverterConfig:
    """Settings shared by the parser, the writer and the exporters."""

    node_name: str = DEFAULT_NODE_NAME
    default_dlc: int = DEFAULT_DLC
    message_name_format: str = DEFAULT_MESSAGE_NAME_FORMAT
    encoding: str = "utf-8"
    warn_on_numeric_fallback: bool = False

    def message_name(self, msg_id: int) -> str:
        """Synthesize the message name for *msg_id*."""
        return self.message_name_format.format(id=msg_id)


DEFAULT_CONFIG = ConverterConfig()


# ============================================================================
# Type guards and field accessors
# ============================================================================

def _is_str_dict(val: object) -> TypeGuard[dict[str, object]]:
    """Narrow an unknown value to ``dict[str, object]``."""
    return isinstance(val, dict)


def _get_str(d: dict[str, object], key: str) -> str:
    val = d[key]
    if not isinstance(val, str) or not val:
        raise ConfigError(f"'{key}' must be a non-empty string")
    return val


def _get_int(d: dict[str, object], key: str) -> int:
    val = d[key]
    if isinstance(val, int) and not isinstance(val, bool):
        return val
    raise ConfigError(f"'{key}' must be an integer")


def _get_bool(d: dict[str, object], key: str) -> bool:
    val = d[key]
    if isinstance(val, bool):
        return val
    raise ConfigError(f"'{key}' must be true or false")


# ============================================================================
# Public API
# ============================================================================

def load_config(source: str | Path | None = None) -> ConverterConfig:
    """Load converter settings from a YAML file or YAML string.

    Args:
        source: Path to a .yaml/.yml file, a YAML string, or None for defaults

    Returns:
        ConverterConfig with the given keys overriding the defaults

    Raises:
        ConfigError: Unknown key or value of the wrong type
        FileNotFoundError: File path doesn't exist
    """
    if source is None:
        return DEFAULT_CONFIG

    raw = _load_yaml(source)
    if raw is None:
        return DEFAULT_CONFIG
    if not _is_str_dict(raw):
        raise ConfigError("configuration must be a YAML mapping")

    if "converter" in raw:
        section = raw["converter"]
        if section is None:
            return DEFAULT_CONFIG
        if not _is_str_dict(section):
            raise ConfigError("'converter' must be a mapping")
        return config_from_dict(section)

    return config_from_dict(raw)


def config_from_dict(d: dict[str, object]) -> ConverterConfig:
    """Build a ConverterConfig from an already-parsed mapping."""
    known = {f.name for f in fields(ConverterConfig)}
    unknown = sorted(set(d) - known)
    if unknown:
        raise ConfigError(f"unknown configuration key(s): {', '.join(unknown)}")

    overrides: dict[str, object] = {}
    for key in ("node_name", "message_name_format", "encoding"):
        if key in d:
            overrides[key] = _get_str(d, key)
    if "default_dlc" in d:
        dlc = _get_int(d, "default_dlc")
        if dlc < 0:
            raise ConfigError("'default_dlc' must not be negative")
        overrides["default_dlc"] = dlc
    if "warn_on_numeric_fallback" in d:
        overrides["warn_on_numeric_fallback"] = _get_bool(d, "warn_on_numeric_fallback")

    config = replace(DEFAULT_CONFIG, **overrides)  # type: ignore[arg-type]
    _validate(config)
    return config


# ============================================================================
# Internal helpers
# ============================================================================

def _validate(config: ConverterConfig) -> None:
    """Reject settings that would only fail later, mid-conversion."""
    if any(c.isspace() for c in config.node_name):
        raise ConfigError(f"'node_name' must not contain whitespace: {config.node_name!r}")

    try:
        config.message_name(0)
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigError(
            f"'message_name_format' is not a valid template: {config.message_name_format!r}"
        ) from exc

    try:
        codecs.lookup(config.encoding)
    except LookupError as exc:
        raise ConfigError(f"unknown encoding: {config.encoding!r}") from exc

    # Entries are split on raw newline bytes before decoding
    try:
        delimiters = "\n,".encode(config.encoding)
    except LookupError as exc:
        raise ConfigError(f"'encoding' is not a text encoding: {config.encoding!r}") from exc
    if delimiters != b"\n,":
        raise ConfigError(
            f"'encoding' must be ASCII-compatible: {config.encoding!r}"
        )


def _load_yaml(source: str | Path) -> object:
    """Load YAML from a file path or string.

    Returns the raw parsed object; caller must validate structure.
    """
    if isinstance(source, Path):
        return _load_yaml_file(source)

    # String: detect whether it's a file path or inline YAML
    if "\n" in source or (":" in source and not source.endswith((".yaml", ".yml"))):
        return _safe_load(source)

    path = Path(source)
    if not path.exists():
        raise FileNotFoundError(f"config file not found: {source}")
    return _load_yaml_file(path)


def _load_yaml_file(path: Path) -> object:
    if not path.exists():
        raise FileNotFoundError(f"config file not found: {path}")
    with open(path, encoding="utf-8") as f:
        return _safe_load(f.read())


def _safe_load(text: str) -> object:
    try:
        return yaml.safe_load(text)  # type: ignore[no-any-return]
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML: {exc}") from exc
