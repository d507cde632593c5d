"""Command-line interface for the reference-to-DBC converter

Subcommands:
    convert  convert one or more reference containers to .dbc files
    signals  list the messages and signals held in a reference container

Usage:
    python -m refdbc convert track.ref
    python -m refdbc convert -i track.ref -o vehicle.dbc --verify
    python -m refdbc convert --config refdbc.yaml --xlsx *.ref
    python -m refdbc signals --json track.ref
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn, TextIO, TypedDict

from .config import ConverterConfig, load_config
from .converter import convert_file, default_output_path, read_messages
from .dbc_check import compare_model, model_to_json
from .errors import RefDbcError
from .excel_export import export_signal_table
from .model import ConversionResult
from .protocols import DBCDefinition, DBCSignal


# ============================================================================
# Exit codes
# ============================================================================

_EXIT_OK = 0
_EXIT_WARNINGS = 1
_EXIT_ERROR = 2


class _FileReport(TypedDict):
    input: str
    output: str
    status: str  # "ok" | "warnings" | "error"
    messages: int
    signals: int
    warnings: list[str]
    error: str


# ============================================================================
# Helpers
# ============================================================================

def _die(msg: str) -> NoReturn:
    """Print error to stderr and exit with code 2."""
    print(f"Error: {msg}", file=sys.stderr)
    sys.exit(_EXIT_ERROR)


if TYPE_CHECKING:
    _StderrHandler = logging.StreamHandler[TextIO]
else:
    _StderrHandler = logging.StreamHandler


class CliLogHandler(_StderrHandler):
    """stderr handler installed by the CLI; at most one per logger."""


def _configure_logging(verbose: bool) -> None:
    """Route refdbc log records to stderr; INFO only with --verbose."""
    log = logging.getLogger("refdbc")
    for handler in list(log.handlers):
        if isinstance(handler, CliLogHandler):
            log.removeHandler(handler)

    handler = CliLogHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    log.addHandler(handler)
    log.setLevel(logging.INFO if verbose else logging.WARNING)


def _load_config_arg(args: argparse.Namespace) -> ConverterConfig:
    config_path: str | None = getattr(args, "config", None)
    if config_path is None:
        return load_config(None)
    p = Path(config_path)
    if not p.exists():
        _die(f"config file not found: {config_path}")
    return load_config(p)


def _collect_inputs(args: argparse.Namespace) -> list[str]:
    """Inputs from -i first, then positional arguments."""
    inputs: list[str] = []
    if args.input:
        inputs.append(args.input)
    inputs.extend(args.files)
    return inputs


def _output_for(inputs: list[str], current: str, output_flag: str | None) -> Path:
    if len(inputs) == 1 and output_flag:
        return Path(output_flag)
    return default_output_path(current)


# ============================================================================
# Subcommand: convert
# ============================================================================

def _post_process(
    args: argparse.Namespace,
    result: ConversionResult,
    config: ConverterConfig,
) -> list[str]:
    """Run --verify and --xlsx on a written file. Returns issue descriptions."""
    issues: list[str] = []
    output = result.output_path
    assert output is not None

    if args.verify:
        text = output.read_text(encoding=config.encoding, errors="surrogateescape")
        try:
            issues.extend(compare_model(result.messages, text, config))
        except RefDbcError as exc:
            issues.append(str(exc))

    if args.xlsx:
        xlsx_path = output.with_suffix(".xlsx")
        rows = export_signal_table(result.messages, xlsx_path, overwrite=True)
        if not args.json:
            print(f"Signal table ({rows} rows) written to: {xlsx_path}")

    return issues


def _convert_one(
    args: argparse.Namespace,
    inputs: list[str],
    current: str,
    config: ConverterConfig,
) -> _FileReport:
    output = _output_for(inputs, current, args.output)
    report: _FileReport = {
        "input": current,
        "output": str(output),
        "status": "ok",
        "messages": 0,
        "signals": 0,
        "warnings": [],
        "error": "",
    }

    if not args.json:
        print(f"\n--- Processing file: {current} ---")
        print(f"Output will be written to: {output}")

    try:
        result = convert_file(current, output, config)
        issues = _post_process(args, result, config)
    except (RefDbcError, OSError) as exc:
        print(f"ERROR processing {current}: {exc}", file=sys.stderr)
        report["status"] = "error"
        report["error"] = str(exc)
        return report

    report["messages"] = len(result.messages)
    report["signals"] = result.signal_count
    report["warnings"] = [str(w) for w in result.warnings] + issues
    if report["warnings"]:
        report["status"] = "warnings"

    if not args.json:
        print(
            f"Found {result.entry_count} entries: "
            + f"{len(result.messages)} messages, {result.signal_count} signals"
        )
        for issue in issues:
            print(f"Verification: {issue}", file=sys.stderr)

    return report


def _cmd_convert(args: argparse.Namespace) -> int:
    """Convert reference containers to DBC files."""
    inputs = _collect_inputs(args)
    if not inputs:
        _die("no input file specified (use -i or positional arguments)")

    config = _load_config_arg(args)

    if len(inputs) > 1 and args.output and not args.json:
        print("Warning: -o flag is ignored when more than one input file is provided.")

    reports = [_convert_one(args, inputs, current, config) for current in inputs]
    processed = sum(1 for r in reports if r["status"] != "error")
    had_errors = processed != len(reports)
    had_warnings = any(r["status"] == "warnings" for r in reports)

    if args.json:
        out = {
            "processed": processed,
            "total": len(reports),
            "files": reports,
        }
        print(json.dumps(out, indent=2))
    else:
        print("\n--- Finished ---")
        print(f"Successfully processed {processed} out of {len(reports)} file(s).")
        if had_errors or had_warnings:
            print("\nNOTE: Errors or warnings were issued during processing (see details above).")

    if had_errors:
        return _EXIT_ERROR
    return _EXIT_WARNINGS if had_warnings else _EXIT_OK


# ============================================================================
# Subcommand: signals
# ============================================================================

def _format_signal_line(sig: DBCSignal) -> str:
    """Format a single signal as a one-line summary."""
    name = sig["name"]
    start = sig["startBit"]
    length = sig["length"]
    order = "LE" if sig["byteOrder"] == "little_endian" else "BE"
    sign = "signed" if sig["signed"] else "unsigned"
    factor = sig["factor"]
    offset = sig["offset"]
    unit = sig["unit"]
    minimum = sig["minimum"]
    maximum = sig["maximum"]

    offset_str = f"+{offset}" if offset >= 0 else str(offset)
    range_str = f"[{minimum}, {maximum}]" if minimum != 0 or maximum != 0 else ""

    return (
        f"  {name:<20s} bits[{start}:{length}]"
        + f"   {order}  {sign:<10s}"
        + f"  x{factor} {offset_str}"
        + f"  {unit:>6s}  {range_str}"
    )


def _print_signals_text(dbc: DBCDefinition) -> None:
    """Print messages and signals in human-readable text format."""
    messages = dbc["messages"]
    total_signals = 0

    for msg in messages:
        print(f"Message 0x{msg['id']:X} {msg['name']} (DLC {msg['dlc']})")
        for sig in msg["signals"]:
            total_signals += 1
            print(_format_signal_line(sig))
        print()

    print(f"{len(messages)} messages, {total_signals} signals")


def _cmd_signals(args: argparse.Namespace) -> int:
    """List messages and signals held in a reference container."""
    config = _load_config_arg(args)
    p = Path(args.file)
    if not p.exists():
        _die(f"input file not found: {args.file}")

    with open(p, "rb") as f:
        result = read_messages(f, config)
    dbc = model_to_json(result.messages, config)

    if args.json:
        print(json.dumps(dbc, indent=2))
    else:
        _print_signals_text(dbc)

    return _EXIT_WARNINGS if result.has_warnings else _EXIT_OK


# ============================================================================
# Argument parser
# ============================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="refdbc",
        description="Convert vendor reference containers to CAN DBC files",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="also log informational notices")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # -- convert -------------------------------------------------------------
    p_convert = subparsers.add_parser(
        "convert",
        help="convert reference containers to .dbc files",
    )
    p_convert.add_argument("files", nargs="*", help="reference container files")
    p_convert.add_argument("-i", "--input", help="input file path (combined with positional files)")
    p_convert.add_argument("-o", "--output", help="output path (only used with a single input file)")
    p_convert.add_argument("--config", help=".yaml converter configuration")
    p_convert.add_argument("--verify", action="store_true", help="read the DBC back with cantools and compare")
    p_convert.add_argument("--xlsx", action="store_true", help="also write the signal table as .xlsx")
    p_convert.add_argument("--json", action="store_true", help="output a JSON summary")

    # -- signals -------------------------------------------------------------
    p_signals = subparsers.add_parser(
        "signals",
        help="list messages and signals in a reference container",
    )
    p_signals.add_argument("file", help="reference container file")
    p_signals.add_argument("--config", help=".yaml converter configuration")
    p_signals.add_argument("--json", action="store_true", help="output as JSON")

    return parser


# ============================================================================
# Entry point
# ============================================================================

_COMMANDS = {
    "convert": _cmd_convert,
    "signals": _cmd_signals,
}


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code."""
    parser = _build_parser()

    try:
        args = parser.parse_args(argv)
        _configure_logging(args.verbose)
        handler = _COMMANDS[args.command]
        return handler(args)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else _EXIT_ERROR
    except (FileNotFoundError, ValueError, RefDbcError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return _EXIT_ERROR
