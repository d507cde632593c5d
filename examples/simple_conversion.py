#!/usr/bin/env python3
"""Simple conversion example

Builds a small reference container in a temporary directory, converts it
to DBC and reads the result back with cantools.

Usage:
    python3 simple_conversion.py
"""

import struct
import sys
import tempfile
import zlib
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "python"))

from refdbc import convert_file
from refdbc.dbc_check import compare_model

SIGNAL_LINES = [
    "EngineSpeed,256,rpm,0,16,0,0.25,8000,0,unsigned,Intel,8",
    "EngineTemp,256,degC,16,8,-40,1,215,-40,signed,Intel,8",
    "BrakePressure,512,bar,7,16,0,0.1,6553.5,0,unsigned,Motorola,2",
]


def build_reference_file(path: Path) -> None:
    """Write a container with one entry per signal line"""
    def block(payload: bytes) -> bytes:
        return struct.pack(">H", len(payload)) + payload

    data = b"Example Reference File\r\n" + b"000001\r\n"
    data += block(zlib.compress(b"000001"))
    data += struct.pack(">H", len(SIGNAL_LINES))
    for line in SIGNAL_LINES:
        data += block(zlib.compress(line.encode()))
    path.write_bytes(data)


def main():
    print("=== refdbc Simple Conversion Example ===\n")

    with tempfile.TemporaryDirectory() as tmp:
        ref_file = Path(tmp) / "example.ref"
        build_reference_file(ref_file)
        print(f"Reference file: {ref_file}")

        result = convert_file(ref_file)
        print(f"✓ Wrote {result.output_path}")
        print(f"  {len(result.messages)} messages, {result.signal_count} signals\n")

        for warning in result.warnings:
            print(f"  {warning.kind.value}: {warning}")

        print(result.output_path.read_text())

        problems = compare_model(result.messages, result.output_path.read_text())
        if problems:
            for problem in problems:
                print(f"✗ {problem}")
            return 1
        print("✓ cantools read-back matches the converted model")

    return 0


if __name__ == '__main__':
    sys.exit(main())
