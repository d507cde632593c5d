"""refdbc - Convert vendor reference containers to CAN DBC files

A reference container holds zlib-compressed, CSV-like signal definitions.
The pipeline reads the container, groups the signal lines into messages
and writes a DBC database:

    from refdbc import convert_file

    result = convert_file("track.ref")      # writes track.dbc
    print(f"{len(result.messages)} messages, {result.signal_count} signals")
    for warning in result.warnings:
        print(f"{warning.kind.value}: {warning}")

The stages can also be used on their own:

    from refdbc import read_container, parse_signal_lines, format_dbc

    with open("track.ref", "rb") as f:
        contents = read_container(f)
    parsed = parse_signal_lines(contents.lines)
    text = format_dbc(parsed.messages)

Fatal problems raise ``RefDbcError`` subclasses; everything recoverable is
reported as ``ConversionWarning`` records on the result objects.
"""

from refdbc.config import ConverterConfig, load_config
from refdbc.container import read_container
from refdbc.converter import (
    convert_file,
    convert_stream,
    default_output_path,
    read_messages,
)
from refdbc.dbc_writer import format_dbc, write_dbc
from refdbc.errors import (
    ConfigError,
    ContainerError,
    DBCReadBackError,
    RefDbcError,
)
from refdbc.lines import parse_signal_lines
from refdbc.model import (
    ContainerContents,
    ConversionResult,
    ConversionWarning,
    Message,
    ParseResult,
    Signal,
)
from refdbc.protocols import ByteOrder, WarningKind

__version__ = "0.1.0"
__all__ = [
    "ByteOrder",
    "ConfigError",
    "ContainerContents",
    "ContainerError",
    "ConversionResult",
    "ConversionWarning",
    "ConverterConfig",
    "DBCReadBackError",
    "Message",
    "ParseResult",
    "RefDbcError",
    "Signal",
    "WarningKind",
    "convert_file",
    "convert_stream",
    "default_output_path",
    "format_dbc",
    "load_config",
    "parse_signal_lines",
    "read_container",
    "read_messages",
    "write_dbc",
]
