"""Signal-definition line parser

Each decompressed line describes one signal::

    name,msg_id,unit,start_bit,length,offset,factor,max,min,signed|unsigned,Intel|Motorola[,dlc]

Leading/trailing spaces, tabs and commas are ignored. Malformed lines are
skipped with a warning; nothing here is fatal.

Numeric fields (start bit through min) are parsed leniently: a value that
does not parse becomes 0 and the line is kept. Set
``ConverterConfig.warn_on_numeric_fallback`` to have each such fallback
reported as a ``NUMERIC_FALLBACK`` warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Callable, TypeVar

from .config import DEFAULT_CONFIG, ConverterConfig
from .model import ConversionWarning, Message, ParseResult, Signal
from .protocols import ByteOrder, WarningKind

logger = logging.getLogger(__name__)

_T = TypeVar("_T", int, float)

_MIN_FIELDS = 11
_MAX_MESSAGE_ID = 0xFFFF_FFFF

# Field positions
_NAME = 0
_MSG_ID = 1
_UNIT = 2
_START_BIT = 3
_LENGTH = 4
_OFFSET = 5
_FACTOR = 6
_MAX = 7
_MIN = 8
_SIGNED = 9
_BYTE_ORDER = 10
_DLC = 11


# ============================================================================
# Field parsers
# ============================================================================

def split_fields(line: str) -> list[str]:
    """Trim surrounding spaces, tabs and commas, then split on commas."""
    return line.strip(" \t,").split(",")


def parse_message_id(text: str) -> int | None:
    """Parse an unsigned decimal 32-bit message ID, or None if invalid."""
    if not (text.isascii() and text.isdigit()):
        return None
    value = int(text)
    if value > _MAX_MESSAGE_ID:
        return None
    return value


def parse_int(text: str) -> int | None:
    try:
        return int(text)
    except ValueError:
        return None


def parse_float(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def parse_byte_order(text: str) -> ByteOrder:
    """``Intel`` (any case) is little-endian, anything else big-endian."""
    if text.lower() == "intel":
        return ByteOrder.LITTLE_ENDIAN
    return ByteOrder.BIG_ENDIAN


def parse_signed(text: str) -> bool:
    return text.lower() == "signed"


# ============================================================================
# Line parser
# ============================================================================

class _LineParser:
    """Accumulates messages and warnings across one run's lines."""

    def __init__(self, config: ConverterConfig) -> None:
        self.config = config
        self.result = ParseResult()

    def warn(
        self,
        kind: WarningKind,
        message: str,
        line_number: int,
        line: str,
    ) -> None:
        self.result.warnings.append(ConversionWarning(
            kind=kind,
            message=message,
            line_number=line_number,
            context=line,
        ).log(logger))

    def _lenient(
        self,
        parse: Callable[[str], _T | None],
        parts: list[str],
        index: int,
        field_name: str,
        line_number: int,
        line: str,
    ) -> _T:
        value = parse(parts[index])
        if value is not None:
            return value
        if self.config.warn_on_numeric_fallback:
            self.warn(
                WarningKind.NUMERIC_FALLBACK,
                f"line #{line_number} has invalid {field_name} '{parts[index]}', using 0",
                line_number,
                line,
            )
        return 0  # type: ignore[return-value]

    def _dlc(self, parts: list[str], line_number: int, line: str) -> int:
        default = self.config.default_dlc
        if len(parts) <= _DLC:
            self.warn(
                WarningKind.MISSING_DLC,
                f"line #{line_number} is missing DLC field, assuming default of {default}",
                line_number,
                line,
            )
            return default

        dlc = parse_int(parts[_DLC])
        if dlc is None:
            self.warn(
                WarningKind.INVALID_DLC,
                f"line #{line_number} has invalid DLC '{parts[_DLC]}', assuming {default}. Line: {line}",
                line_number,
                line,
            )
            return default
        return dlc

    def feed(self, line_number: int, line: str) -> None:
        parts = split_fields(line)
        if len(parts) < _MIN_FIELDS:
            self.warn(
                WarningKind.SHORT_LINE,
                f"skipping malformed line #{line_number} (not enough fields): {line}",
                line_number,
                line,
            )
            return

        msg_id = parse_message_id(parts[_MSG_ID])
        if msg_id is None:
            self.warn(
                WarningKind.INVALID_MESSAGE_ID,
                f"skipping line #{line_number} (invalid message ID): {line}",
                line_number,
                line,
            )
            return

        def lenient_int(index: int, field_name: str) -> int:
            return self._lenient(parse_int, parts, index, field_name, line_number, line)

        def lenient_float(index: int, field_name: str) -> float:
            return float(self._lenient(parse_float, parts, index, field_name, line_number, line))

        signal = Signal(
            name=parts[_NAME],
            unit=parts[_UNIT],
            start_bit=lenient_int(_START_BIT, "start bit"),
            length=lenient_int(_LENGTH, "length"),
            offset=lenient_float(_OFFSET, "offset"),
            factor=lenient_float(_FACTOR, "factor"),
            max=lenient_float(_MAX, "max"),
            min=lenient_float(_MIN, "min"),
            is_signed=parse_signed(parts[_SIGNED]),
            byte_order=parse_byte_order(parts[_BYTE_ORDER]),
        )
        dlc = self._dlc(parts, line_number, line)

        message = self.result.messages.get(msg_id)
        if message is None:
            message = Message(
                id=msg_id,
                name=self.config.message_name(msg_id),
                dlc=dlc,
                node=self.config.node_name,
            )
            self.result.messages[msg_id] = message
        elif dlc > message.dlc:
            # A later signal may declare a longer frame
            message.dlc = dlc

        message.signals.append(signal)


def parse_signal_lines(
    lines: Iterable[str],
    config: ConverterConfig | None = None,
) -> ParseResult:
    """Group signal-definition lines into messages keyed by ID.

    Args:
        lines: Decompressed lines in container order
        config: Converter settings (node name, default DLC, naming)

    Returns:
        ParseResult with one Message per distinct ID, signals in line order
    """
    parser = _LineParser(config or DEFAULT_CONFIG)
    for line_number, line in enumerate(lines, start=1):
        parser.feed(line_number, line)
    return parser.result
