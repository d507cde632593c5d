"""Reference container reader

Walks a vendor reference file and returns the signal-definition lines
held in its zlib-compressed entries.

Container Layout
================

All integers are big-endian::

    header text             free-form, CR LF terminated
    serial text             CR LF terminated
    u16 length + bytes      zlib-compressed serial blob
    u16 entry_count
    entry_count x (u16 length + bytes)
                            zlib-compressed, newline-separated CSV-like text

Any framing failure before the last entry is read is fatal
(``ContainerError``). A single entry that does not decompress is skipped
with a warning, as is data left over after the final entry.

Example:
    from refdbc.container import read_container

    with open("track.ref", "rb") as f:
        contents = read_container(f)

    for line in contents.lines:
        print(line)
"""

from __future__ import annotations

import logging
import struct
import zlib
from typing import BinaryIO

from .errors import ContainerError
from .model import ContainerContents, ConversionWarning
from .protocols import WarningKind

logger = logging.getLogger(__name__)

_CRLF = b"\r\n"
_U16 = struct.Struct(">H")


# ============================================================================
# Low-level readers
# ============================================================================

def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    """Read exactly *size* bytes or raise ContainerError naming *what*."""
    chunks: list[bytes] = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            got = size - remaining
            raise ContainerError(
                f"could not read {what} (expected {size} bytes, got {got})"
            )
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


def _read_u16(stream: BinaryIO, what: str) -> int:
    (value,) = _U16.unpack(_read_exact(stream, _U16.size, what))
    return int(value)


def _read_text_field(stream: BinaryIO, what: str) -> bytes:
    """Read a free-text header field and its two-byte CR LF delimiter.

    The delimiter is consumed but not returned. Running out of data before
    the delimiter is fatal.
    """
    field = bytearray()
    while True:
        b = stream.read(1)
        if not b:
            raise ContainerError(
                f"could not read {what}: stream ended before CR LF delimiter"
            )
        field += b
        if field.endswith(_CRLF):
            return bytes(field[:-2])


def _read_block(stream: BinaryIO, what: str) -> bytes:
    """Read one length-prefixed block: u16 length followed by payload."""
    length = _read_u16(stream, f"{what} length")
    return _read_exact(stream, length, f"{what} data")


def decompress_block(payload: bytes) -> bytes:
    """Decompress one zlib stream.

    Raises:
        zlib.error: Invalid stream, or a stream that ends before its end marker
    """
    decompressor = zlib.decompressobj()
    data = decompressor.decompress(payload)
    if not decompressor.eof:
        raise zlib.error("incomplete or truncated zlib stream")
    return data


def split_lines(data: bytes, encoding: str = "utf-8") -> list[str]:
    """Split decompressed entry text into its non-blank lines."""
    lines: list[str] = []
    for raw in data.split(b"\n"):
        if raw.endswith(b"\r"):
            raw = raw[:-1]
        if not raw.strip():
            continue
        lines.append(raw.decode(encoding, errors="surrogateescape"))
    return lines


# ============================================================================
# Public API
# ============================================================================

def read_container(stream: BinaryIO, *, encoding: str = "utf-8") -> ContainerContents:
    """Read every signal-definition line out of a reference container.

    Args:
        stream: Binary stream positioned at the start of the container
        encoding: Text encoding of the header fields and entry text

    Returns:
        ContainerContents with the lines in entry order and any warnings

    Raises:
        ContainerError: Truncated or malformed header, framing or payload
    """
    header = _read_text_field(stream, "header")
    serial = _read_text_field(stream, "serial string")
    serial_block = _read_block(stream, "zlib serial block")
    entry_count = _read_u16(stream, "total entries count")
    logger.debug("container holds %d entries", entry_count)

    contents = ContainerContents(
        header=header.decode(encoding, errors="surrogateescape"),
        serial=serial.decode(encoding, errors="surrogateescape"),
        entry_count=entry_count,
    )

    try:
        contents.serial_blob = decompress_block(serial_block)
    except zlib.error as exc:
        contents.warnings.append(ConversionWarning(
            kind=WarningKind.SERIAL_DECOMPRESSION,
            message=f"could not decompress serial block: {exc}",
        ).log(logger))

    for number in range(1, entry_count + 1):
        payload = _read_block(stream, f"entry #{number}")
        try:
            data = decompress_block(payload)
        except zlib.error as exc:
            contents.warnings.append(ConversionWarning(
                kind=WarningKind.ENTRY_DECOMPRESSION,
                message=f"could not decompress entry #{number}: {exc}",
                entry_number=number,
            ).log(logger))
            continue
        contents.lines.extend(split_lines(data, encoding))

    _check_trailing_data(stream, contents)
    return contents


def _check_trailing_data(stream: BinaryIO, contents: ContainerContents) -> None:
    """Record a warning if anything follows the final entry."""
    try:
        extra = stream.read(1)
    except OSError as exc:
        raise ContainerError(f"error while checking for remaining data: {exc}") from exc

    if extra:
        contents.warnings.append(ConversionWarning(
            kind=WarningKind.TRAILING_DATA,
            message="the file was processed, but there is unparsed data remaining at the end",
        ).log(logger))
