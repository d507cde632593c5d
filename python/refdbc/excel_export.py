"""Excel export of the converted signal table

Writes one row per signal to a "DBC" sheet, using the column layout of the
DBC signal-table template so the workbook can be reviewed or edited by
technicians and loaded back by spreadsheet-driven tooling.

Excel Sheet Layout
==================

**DBC**: one row per signal::

    Message ID | Message Name | DLC | Signal | Start Bit | Length |
    Byte Order | Signed | Factor | Offset | Min | Max | Unit

Messages appear in ascending ID order, signals in input order.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import TypeAlias

from openpyxl.styles import Font
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from .model import Message, Signal

CellValue: TypeAlias = str | int | float | bool | None

DBC_HEADERS = [
    "Message ID", "Message Name", "DLC", "Signal", "Start Bit", "Length",
    "Byte Order", "Signed", "Factor", "Offset", "Min", "Max", "Unit",
]

DBC_SHEET = "DBC"


def signal_row(message: Message, signal: Signal) -> list[CellValue]:
    """Cell values for one signal, in ``DBC_HEADERS`` order."""
    return [
        message.id,
        message.name,
        message.dlc,
        signal.name,
        signal.start_bit,
        signal.length,
        signal.byte_order.value,
        signal.is_signed,
        signal.factor,
        signal.offset,
        signal.min,
        signal.max,
        signal.unit or None,
    ]


def _write_header_row(ws: Worksheet, headers: list[str]) -> None:
    """Write bold header row to a worksheet."""
    bold = Font(bold=True)
    for col_idx, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col_idx, value=header)
        cell.font = bold


def export_signal_table(
    messages: Mapping[int, Message],
    path: str | Path,
    *,
    overwrite: bool = False,
) -> int:
    """Write the signal table of *messages* to an .xlsx workbook.

    Args:
        messages: Converted messages keyed by ID
        path: Output path for the .xlsx file
        overwrite: Replace an existing file instead of refusing

    Returns:
        Number of signal rows written

    Raises:
        FileExistsError: File already exists and *overwrite* is False
    """
    p = Path(path)
    if p.exists() and not overwrite:
        raise FileExistsError(f"File already exists: {path}")

    wb = Workbook()
    ws = wb.active
    assert ws is not None
    ws.title = DBC_SHEET
    _write_header_row(ws, DBC_HEADERS)

    rows = 0
    for msg_id in sorted(messages):
        message = messages[msg_id]
        for signal in message.signals:
            ws.append(signal_row(message, signal))
            rows += 1

    wb.save(str(p))
    return rows
