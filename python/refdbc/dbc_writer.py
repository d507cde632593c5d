"""DBC text serializer

Renders the message/signal model as a DBC file. Output is deterministic:
messages in ascending numeric ID order, signals in the order they were
read, one placeholder node for every sender and receiver.
"""

from __future__ import annotations

import io
from collections.abc import Mapping
from typing import TextIO

from .config import DEFAULT_CONFIG, ConverterConfig
from .model import Message, Signal

_NS_KEYWORDS = (
    "CM_", "BA_DEF_", "BA_", "VAL_", "CAT_DEF_", "CAT_", "FILTER",
    "BA_DEF_DEF_", "EV_DATA_", "ENVVAR_DATA_", "SGTYPE_", "SGTYPE_VAL_",
    "BA_DEF_SGTYPE_", "BA_SGTYPE_", "SIG_TYPE_REF_", "VAL_TABLE_",
    "SIG_GROUP_", "SIG_VALTYPE_", "SIGTYPE_VALTYPE_", "BO_TX_BU_",
    "BA_DEF_REL_", "BA_REL_", "BA_DEF_DEF_REL_", "BU_SG_REL_",
    "BU_EV_REL_", "BU_BO_REL_", "SG_MUL_VAL_",
)


def format_number(value: float) -> str:
    """Shortest round-trippable text for *value*, without a trailing ``.0``.

    >>> format_number(0.25), format_number(-40.0), format_number(1e-05)
    ('0.25', '-40', '1e-05')
    """
    text = repr(float(value))
    if text.endswith(".0"):
        return text[:-2]
    return text


def format_preamble(node: str) -> str:
    """Version, namespace, bus-speed and node sections."""
    ns = "".join(f"\t{kw}\n" for kw in _NS_KEYWORDS)
    return (
        'VERSION ""\n\n'
        + f"NS_ :\n{ns}"
        + "\nBS_:\n\n"
        + f"BU_: {node}\n\n"
    )


def format_message(message: Message) -> str:
    return f"BO_ {message.id} {message.name}: {message.dlc} {message.node}\n"


def format_signal(signal: Signal, receiver: str) -> str:
    order_sign = signal.byte_order.dbc_code + signal.sign_code
    return (
        f" SG_ {signal.name} : {signal.start_bit}|{signal.length}@{order_sign}"
        + f" ({format_number(signal.factor)},{format_number(signal.offset)})"
        + f" [{format_number(signal.min)}|{format_number(signal.max)}]"
        + f' "{signal.unit}" {receiver}\n'
    )


def write_dbc(
    messages: Mapping[int, Message],
    sink: TextIO,
    config: ConverterConfig | None = None,
) -> None:
    """Write *messages* as DBC text to *sink*.

    Write errors from the sink propagate unchanged.
    """
    node = (config or DEFAULT_CONFIG).node_name
    sink.write(format_preamble(node))

    for msg_id in sorted(messages):
        message = messages[msg_id]
        sink.write(format_message(message))
        for signal in message.signals:
            sink.write(format_signal(signal, node))
        sink.write("\n")


def format_dbc(
    messages: Mapping[int, Message],
    config: ConverterConfig | None = None,
) -> str:
    """Return the DBC text for *messages* as a string."""
    buf = io.StringIO()
    write_dbc(messages, buf, config)
    return buf.getvalue()
