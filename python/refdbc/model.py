"""In-memory message/signal model and per-stage result objects

Every object here lives for exactly one conversion run: the container
reader produces ``ContainerContents``, the line parser builds a
``ParseResult`` and the converter wraps both into a ``ConversionResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .protocols import ByteOrder, WarningKind


@dataclass
class Signal:
    """One bit-packed field within a CAN message."""

    name: str
    start_bit: int
    length: int
    byte_order: ByteOrder
    is_signed: bool
    factor: float
    offset: float
    min: float
    max: float
    unit: str = ""

    @property
    def sign_code(self) -> str:
        return "-" if self.is_signed else "+"


@dataclass
class Message:
    """A CAN frame definition owning its signals in input order."""

    id: int
    name: str
    dlc: int
    node: str
    signals: list[Signal] = field(default_factory=list)


@dataclass(frozen=True)
class ConversionWarning:
    """A recorded non-fatal anomaly.

    ``line_number`` is the 1-based position in the accumulated line list,
    ``entry_number`` the 1-based container entry. Either may be None when the
    warning is not tied to a line or entry.
    """

    kind: WarningKind
    message: str
    line_number: int | None = None
    entry_number: int | None = None
    context: str = ""

    def __str__(self) -> str:
        return self.message

    def log(self, logger: logging.Logger) -> ConversionWarning:
        """Emit this warning on *logger* and return it for chaining."""
        level = logging.INFO if self.kind is WarningKind.MISSING_DLC else logging.WARNING
        logger.log(level, "%s", self.message)
        return self


@dataclass
class ContainerContents:
    """Decoded payload of a reference container."""

    header: str
    serial: str
    entry_count: int
    serial_blob: bytes = b""
    lines: list[str] = field(default_factory=list)
    warnings: list[ConversionWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)


@dataclass
class ParseResult:
    """Messages keyed by ID plus the warnings raised while parsing lines."""

    messages: dict[int, Message] = field(default_factory=dict)
    warnings: list[ConversionWarning] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def signal_count(self) -> int:
        return sum(len(msg.signals) for msg in self.messages.values())


@dataclass
class ConversionResult:
    """Outcome of one file's conversion."""

    messages: dict[int, Message]
    warnings: list[ConversionWarning]
    entry_count: int = 0
    line_count: int = 0
    output_path: Path | None = None

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def signal_count(self) -> int:
        return sum(len(msg.signals) for msg in self.messages.values())

    def warnings_of(self, kind: WarningKind) -> list[ConversionWarning]:
        """Return the recorded warnings of a single kind."""
        return [w for w in self.warnings if w.kind is kind]
