"""Shared test fixtures for all test modules

Provides builders for in-memory reference containers so every test can
describe its input as plain signal lines.
"""

import struct
import zlib
from collections.abc import Callable

import pytest


def _block(payload: bytes) -> bytes:
    return struct.pack(">H", len(payload)) + payload


def build_entry(*lines: str, encoding: str = "utf-8") -> bytes:
    """Compress signal lines into one container entry payload."""
    return zlib.compress("\n".join(lines).encode(encoding))


def build_container(
    entries: list[bytes],
    *,
    header: bytes = b"Racelogic Reference File V1",
    serial: bytes = b"012345",
    serial_blob: bytes | None = None,
    trailing: bytes = b"",
) -> bytes:
    """Assemble a complete container from already-compressed entries."""
    blob = zlib.compress(serial) if serial_blob is None else serial_blob
    out = bytearray()
    out += header + b"\r\n"
    out += serial + b"\r\n"
    out += _block(blob)
    out += struct.pack(">H", len(entries))
    for payload in entries:
        out += _block(payload)
    out += trailing
    return bytes(out)


@pytest.fixture
def make_entry() -> Callable[..., bytes]:
    """Factory: signal lines -> compressed entry payload"""
    return build_entry


@pytest.fixture
def make_container() -> Callable[..., bytes]:
    """Factory: compressed entries -> container bytes"""
    return build_container


@pytest.fixture
def sample_lines() -> list[str]:
    """Three signals across two messages, as found in a typical entry"""
    return [
        "EngineSpeed,256,rpm,0,16,0,0.25,8000,0,unsigned,Intel,8",
        "EngineTemp,256,degC,16,8,-40,1,215,-40,signed,Intel,8",
        "BrakePressure,512,bar,7,16,0,0.1,6553.5,0,unsigned,Motorola,2",
    ]


@pytest.fixture
def sample_container(sample_lines: list[str]) -> bytes:
    """Container with one entry per sample line"""
    return build_container([build_entry(line) for line in sample_lines])


@pytest.fixture
def sample_ref_file(tmp_path, sample_container: bytes):
    """Sample container written to disk as track.ref"""
    path = tmp_path / "track.ref"
    path.write_bytes(sample_container)
    return path
