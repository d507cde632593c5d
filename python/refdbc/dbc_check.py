"""Read generated DBC text back with cantools and compare it to the model

Uses cantools to parse DBC text and converts both the cantools database and
the in-memory model to the same JSON structure, so the two can be diffed
field by field.
"""

from __future__ import annotations

import math
from collections.abc import Mapping

try:
    import cantools
except ImportError:
    raise ImportError(
        "cantools is required for DBC read-back. "
        "Install it with: pip install cantools"
    )

from .config import DEFAULT_CONFIG, ConverterConfig
from .dbc_writer import format_dbc
from .errors import DBCReadBackError
from .model import Message, Signal
from .protocols import DBCDefinition, DBCMessage, DBCSignal

_SIGNAL_FIELDS = (
    "startBit", "length", "byteOrder", "signed",
    "factor", "offset", "minimum", "maximum", "unit",
)


# ============================================================================
# cantools → JSON
# ============================================================================

def load_dbc_string(text: str) -> cantools.database.Database:
    """Parse DBC text with cantools, keeping signals in file order.

    Non-strict: overlapping or out-of-frame signals are accepted.

    Raises:
        DBCReadBackError: cantools rejected the text
    """
    try:
        return cantools.database.load_string(
            text, database_format="dbc", strict=False, sort_signals=None,
        )
    except cantools.database.UnsupportedDatabaseFormatError as exc:
        raise DBCReadBackError(f"cantools could not parse DBC text: {exc}") from exc


def signal_to_json(signal: cantools.database.can.Signal) -> DBCSignal:
    """Convert a cantools Signal to JSON format."""
    byte_order = "little_endian" if signal.byte_order == "little_endian" else "big_endian"

    # cantools drops a [0|0] range to None
    return {
        "name": signal.name,
        "startBit": signal.start,
        "length": signal.length,
        "byteOrder": byte_order,
        "signed": signal.is_signed,
        "factor": signal.scale,
        "offset": signal.offset,
        "minimum": signal.minimum if signal.minimum is not None else 0.0,
        "maximum": signal.maximum if signal.maximum is not None else 0.0,
        "unit": signal.unit if signal.unit else "",
    }


def message_to_json(message: cantools.database.can.Message) -> DBCMessage:
    """Convert a cantools Message to JSON format."""
    return {
        "id": message.frame_id,
        "name": message.name,
        "dlc": message.length,
        "sender": message.senders[0] if message.senders else "",
        "signals": [signal_to_json(sig) for sig in message.signals],
    }


def dbc_to_json(db: cantools.database.Database) -> DBCDefinition:
    """Convert a cantools Database to JSON format, messages sorted by ID."""
    messages = sorted(db.messages, key=lambda m: m.frame_id)
    return {
        "version": db.version if db.version else "",
        "messages": [message_to_json(msg) for msg in messages],
    }


# ============================================================================
# model → JSON
# ============================================================================

def model_signal_to_json(signal: Signal) -> DBCSignal:
    return {
        "name": signal.name,
        "startBit": signal.start_bit,
        "length": signal.length,
        "byteOrder": signal.byte_order.value,
        "signed": signal.is_signed,
        "factor": signal.factor,
        "offset": signal.offset,
        "minimum": signal.min,
        "maximum": signal.max,
        "unit": signal.unit,
    }


def model_to_json(
    messages: Mapping[int, Message],
    config: ConverterConfig | None = None,
) -> DBCDefinition:
    """Convert the message model to the JSON structure, messages sorted by ID."""
    node = (config or DEFAULT_CONFIG).node_name
    return {
        "version": "",
        "messages": [
            {
                "id": msg.id,
                "name": msg.name,
                "dlc": msg.dlc,
                "sender": node,
                "signals": [model_signal_to_json(sig) for sig in msg.signals],
            }
            for msg in (messages[i] for i in sorted(messages))
        ],
    }


# ============================================================================
# Comparison
# ============================================================================

def _same(expected: object, actual: object) -> bool:
    if isinstance(expected, float) and isinstance(actual, (int, float)):
        if math.isnan(expected):
            return isinstance(actual, float) and math.isnan(actual)
        return math.isclose(expected, actual, rel_tol=1e-12, abs_tol=0.0)
    return expected == actual


def _compare_signals(msg: DBCMessage, got: DBCMessage) -> list[str]:
    problems: list[str] = []
    expected_names = [s["name"] for s in msg["signals"]]
    actual_names = [s["name"] for s in got["signals"]]
    if expected_names != actual_names:
        problems.append(
            f"message {msg['id']}: signals {expected_names} read back as {actual_names}"
        )
        return problems

    for sig, back in zip(msg["signals"], got["signals"]):
        for key in _SIGNAL_FIELDS:
            if not _same(sig[key], back[key]):  # type: ignore[literal-required]
                problems.append(
                    f"message {msg['id']} signal {sig['name']}: {key} "
                    + f"{sig[key]!r} read back as {back[key]!r}"  # type: ignore[literal-required]
                )
    return problems


def compare_model(
    messages: Mapping[int, Message],
    text: str | None = None,
    config: ConverterConfig | None = None,
) -> list[str]:
    """Re-read DBC *text* and list differences from *messages*.

    Args:
        messages: The model the text was generated from
        text: DBC text (default: freshly formatted from *messages*)
        config: Converter settings used when writing

    Returns:
        Human-readable mismatch descriptions; empty when the text
        reproduces the model exactly

    Raises:
        DBCReadBackError: cantools could not parse the text at all
    """
    if text is None:
        text = format_dbc(messages, config)

    expected = model_to_json(messages, config)
    actual = dbc_to_json(load_dbc_string(text))
    by_id = {m["id"]: m for m in actual["messages"]}

    problems: list[str] = []
    for msg in expected["messages"]:
        got = by_id.pop(msg["id"], None)
        if got is None:
            problems.append(f"message {msg['id']} ({msg['name']}) missing from DBC")
            continue
        for key in ("name", "dlc"):
            if msg[key] != got[key]:  # type: ignore[literal-required]
                problems.append(
                    f"message {msg['id']}: {key} {msg[key]!r} "  # type: ignore[literal-required]
                    + f"read back as {got[key]!r}"  # type: ignore[literal-required]
                )
        problems.extend(_compare_signals(msg, got))

    for extra_id in sorted(by_id):
        problems.append(f"unexpected message {extra_id} in DBC")

    return problems
