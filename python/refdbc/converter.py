"""Reference container to DBC conversion pipeline

Runs container reading, line parsing and DBC writing for one file.

Example:
    from refdbc import convert_file

    result = convert_file("track.ref")          # writes track.dbc
    if result.has_warnings:
        for w in result.warnings:
            print(w)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import BinaryIO, TextIO

from .config import DEFAULT_CONFIG, ConverterConfig
from .container import read_container
from .dbc_writer import write_dbc
from .lines import parse_signal_lines
from .model import ConversionResult

logger = logging.getLogger(__name__)

DBC_SUFFIX = ".dbc"


def default_output_path(input_path: str | Path) -> Path:
    """Same directory and stem as *input_path*, with a ``.dbc`` suffix."""
    p = Path(input_path)
    return p.with_name(p.stem + DBC_SUFFIX)


def read_messages(
    stream: BinaryIO,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """Read and parse a container without writing anything.

    Raises:
        ContainerError: Fatal container framing problem
    """
    cfg = config or DEFAULT_CONFIG
    contents = read_container(stream, encoding=cfg.encoding)
    logger.debug(
        "read %d line(s) from %d entries", len(contents.lines), contents.entry_count
    )

    parsed = parse_signal_lines(contents.lines, cfg)
    return ConversionResult(
        messages=parsed.messages,
        warnings=contents.warnings + parsed.warnings,
        entry_count=contents.entry_count,
        line_count=len(contents.lines),
    )


def convert_stream(
    stream: BinaryIO,
    sink: TextIO,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """Convert an open container stream, writing DBC text to *sink*."""
    result = read_messages(stream, config)
    write_dbc(result.messages, sink, config)
    return result


def convert_file(
    input_path: str | Path,
    output_path: str | Path | None = None,
    config: ConverterConfig | None = None,
) -> ConversionResult:
    """Convert one reference file to a DBC file.

    The output file is only created once the whole container has been read
    and parsed, so a fatal input error never leaves a partial DBC behind.

    Args:
        input_path: Path to the reference container
        output_path: DBC destination (default: ``default_output_path``)
        config: Converter settings

    Returns:
        ConversionResult with the written path and all warnings

    Raises:
        FileNotFoundError: Input file doesn't exist
        ContainerError: Fatal container framing problem
        OSError: Output could not be written
    """
    cfg = config or DEFAULT_CONFIG
    src = Path(input_path)
    if not src.exists():
        raise FileNotFoundError(f"input file not found: {input_path}")
    dst = Path(output_path) if output_path is not None else default_output_path(src)

    with open(src, "rb") as f:
        result = read_messages(f, cfg)

    with open(dst, "w", encoding=cfg.encoding, errors="surrogateescape", newline="\n") as out:
        write_dbc(result.messages, out, cfg)

    result.output_path = dst
    logger.info(
        "wrote %d message(s), %d signal(s) to %s",
        len(result.messages), result.signal_count, dst,
    )
    return result
