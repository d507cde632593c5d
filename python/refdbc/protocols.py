"""Type definitions for structured data

Enums shared by the pipeline stages and TypedDict shapes for the JSON
view of a converted database.
"""

from __future__ import annotations

from enum import Enum
from typing import TypedDict


class ByteOrder(str, Enum):
    """CAN signal byte order"""
    LITTLE_ENDIAN = "little_endian"  # Intel
    BIG_ENDIAN = "big_endian"  # Motorola

    @property
    def dbc_code(self) -> str:
        """Single-character byte order code used after ``@`` in SG_ lines."""
        return "1" if self is ByteOrder.LITTLE_ENDIAN else "0"


class WarningKind(str, Enum):
    """Non-fatal anomaly categories reported during a conversion"""
    ENTRY_DECOMPRESSION = "entry_decompression"
    SERIAL_DECOMPRESSION = "serial_decompression"
    TRAILING_DATA = "trailing_data"
    SHORT_LINE = "short_line"
    INVALID_MESSAGE_ID = "invalid_message_id"
    INVALID_DLC = "invalid_dlc"
    MISSING_DLC = "missing_dlc"
    NUMERIC_FALLBACK = "numeric_fallback"


# ============================================================================
# DBC Structure Types (JSON view)
# ============================================================================

class DBCSignal(TypedDict):
    """DBC signal definition structure"""
    name: str
    startBit: int
    length: int
    byteOrder: str  # "little_endian" | "big_endian"
    signed: bool
    factor: float
    offset: float
    minimum: float
    maximum: float
    unit: str


class DBCMessage(TypedDict):
    """DBC message definition structure"""
    id: int
    name: str
    dlc: int
    sender: str
    signals: list[DBCSignal]


class DBCDefinition(TypedDict):
    """Complete DBC file structure"""
    version: str
    messages: list[DBCMessage]
