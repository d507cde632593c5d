#!/usr/bin/env python3
"""
Batch Conversion Example

Converts every *.ref file in a directory and writes a signal table
workbook next to each generated DBC file:
- Per-file errors are reported and the batch continues
- Warnings are grouped by kind
- A custom node name is applied through the YAML configuration

Usage:
    python3 batch_convert.py DIRECTORY
"""

import sys
from collections import Counter
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent.parent / "python"))

from refdbc import RefDbcError, convert_file, load_config
from refdbc.excel_export import export_signal_table

CONFIG_YAML = """
converter:
  node_name: DATALOGGER
  message_name_format: "REF_{id:03X}"
"""


def main():
    if len(sys.argv) != 2:
        print(__doc__)
        return 2

    directory = Path(sys.argv[1])
    config = load_config(CONFIG_YAML)
    kinds: Counter[str] = Counter()
    failed = 0

    ref_files = sorted(directory.glob("*.ref"))
    print(f"Found {len(ref_files)} reference file(s) in {directory}\n")

    for ref_file in ref_files:
        try:
            result = convert_file(ref_file, config=config)
        except (RefDbcError, OSError) as e:
            print(f"✗ {ref_file.name}: {e}")
            failed += 1
            continue

        xlsx = result.output_path.with_suffix(".xlsx")
        rows = export_signal_table(result.messages, xlsx, overwrite=True)
        kinds.update(w.kind.value for w in result.warnings)
        print(f"✓ {ref_file.name}: {len(result.messages)} messages, {rows} signals")

    if kinds:
        print("\nWarnings by kind:")
        for kind, count in kinds.most_common():
            print(f"  {kind:<22s} {count}")

    return 1 if failed else 0


if __name__ == '__main__':
    sys.exit(main())
