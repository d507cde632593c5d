"""Unit tests for the DBC serializer

Tests cover:
- Preamble: version, namespace keywords, bus speed, node
- Frame blocks: ascending numeric ID order, blank-line separation
- Signal lines: byte order / sign codes, scaling, ranges, units
- Number formatting: shortest round-trip text without trailing .0
- Sinks: write errors propagate
"""

import io

import pytest

from refdbc.config import ConverterConfig
from refdbc.dbc_writer import (
    format_dbc,
    format_number,
    format_preamble,
    format_signal,
    write_dbc,
)
from refdbc.model import Message, Signal
from refdbc.protocols import ByteOrder


def _signal(name: str = "S", **overrides) -> Signal:
    fields = {
        "name": name,
        "start_bit": 0,
        "length": 8,
        "byte_order": ByteOrder.BIG_ENDIAN,
        "is_signed": False,
        "factor": 1.0,
        "offset": 0.0,
        "min": 0.0,
        "max": 255.0,
        "unit": "",
    }
    fields.update(overrides)
    return Signal(**fields)


def _message(msg_id: int, *signals: Signal, dlc: int = 8) -> Message:
    return Message(
        id=msg_id,
        name=f"CAN_MSG_{msg_id}",
        dlc=dlc,
        node="VECTOR__XXX",
        signals=list(signals),
    )


_EMPTY_DBC = (
    'VERSION ""\n'
    "\n"
    "NS_ :\n"
    "\tCM_\n\tBA_DEF_\n\tBA_\n\tVAL_\n\tCAT_DEF_\n\tCAT_\n\tFILTER\n"
    "\tBA_DEF_DEF_\n\tEV_DATA_\n\tENVVAR_DATA_\n\tSGTYPE_\n\tSGTYPE_VAL_\n"
    "\tBA_DEF_SGTYPE_\n\tBA_SGTYPE_\n\tSIG_TYPE_REF_\n\tVAL_TABLE_\n"
    "\tSIG_GROUP_\n\tSIG_VALTYPE_\n\tSIGTYPE_VALTYPE_\n\tBO_TX_BU_\n"
    "\tBA_DEF_REL_\n\tBA_REL_\n\tBA_DEF_DEF_REL_\n\tBU_SG_REL_\n"
    "\tBU_EV_REL_\n\tBU_BO_REL_\n\tSG_MUL_VAL_\n"
    "\n"
    "BS_:\n"
    "\n"
    "BU_: VECTOR__XXX\n"
    "\n"
)


# ============================================================================
# Preamble
# ============================================================================

class TestPreamble:
    """Test the fixed file header"""

    def test_empty_model(self):
        assert format_dbc({}) == _EMPTY_DBC

    def test_no_frames_without_messages(self):
        assert "BO_ " not in format_dbc({})

    def test_custom_node(self):
        text = format_preamble("LOGGER")
        assert text.endswith("BU_: LOGGER\n\n")


# ============================================================================
# Frame blocks
# ============================================================================

class TestFrames:
    """Test message ordering and frame lines"""

    def test_frame_line(self):
        text = format_dbc({256: _message(256, dlc=6)})
        assert "BO_ 256 CAN_MSG_256: 6 VECTOR__XXX\n" in text

    def test_ascending_numeric_order(self):
        messages = {
            1000: _message(1000),
            20: _message(20),
            3: _message(3),
            200: _message(200),
        }
        text = format_dbc(messages)
        ids = [int(line.split()[1]) for line in text.splitlines() if line.startswith("BO_ ")]
        assert ids == [3, 20, 200, 1000]

    def test_blank_line_after_each_frame(self):
        text = format_dbc({1: _message(1, _signal("A")), 2: _message(2)})
        body = text[len(_EMPTY_DBC):]
        assert body == (
            "BO_ 1 CAN_MSG_1: 8 VECTOR__XXX\n"
            ' SG_ A : 0|8@0+ (1,0) [0|255] "" VECTOR__XXX\n'
            "\n"
            "BO_ 2 CAN_MSG_2: 8 VECTOR__XXX\n"
            "\n"
        )

    def test_signal_order_preserved(self):
        msg = _message(5, _signal("A", start_bit=16), _signal("B", start_bit=0), _signal("C", start_bit=8))
        lines = [l for l in format_dbc({5: msg}).splitlines() if l.startswith(" SG_ ")]
        assert [l.split()[1] for l in lines] == ["A", "B", "C"]


# ============================================================================
# Signal lines
# ============================================================================

class TestSignalLines:
    """Test SG_ line rendering"""

    def test_unsigned_big_endian(self):
        line = format_signal(_signal(is_signed=False, byte_order=ByteOrder.BIG_ENDIAN), "VECTOR__XXX")
        assert "@0+ " in line

    def test_signed_little_endian(self):
        line = format_signal(_signal(is_signed=True, byte_order=ByteOrder.LITTLE_ENDIAN), "VECTOR__XXX")
        assert "@1- " in line

    def test_full_line(self):
        sig = _signal(
            "EngineTemp",
            start_bit=16,
            length=8,
            byte_order=ByteOrder.LITTLE_ENDIAN,
            is_signed=True,
            factor=1.0,
            offset=-40.0,
            min=-40.0,
            max=215.0,
            unit="degC",
        )
        assert format_signal(sig, "VECTOR__XXX") == (
            ' SG_ EngineTemp : 16|8@1- (1,-40) [-40|215] "degC" VECTOR__XXX\n'
        )

    def test_receiver_follows_config(self):
        text = format_dbc({1: _message(1, _signal("A"))}, ConverterConfig(node_name="ECU"))
        assert ' SG_ A : 0|8@0+ (1,0) [0|255] "" ECU\n' in text


# ============================================================================
# Number formatting
# ============================================================================

class TestFormatNumber:
    """Test general float rendering"""

    @pytest.mark.parametrize("value,expected", [
        (0.0, "0"),
        (1.0, "1"),
        (-40.0, "-40"),
        (0.25, "0.25"),
        (0.1, "0.1"),
        (6553.5, "6553.5"),
        (0.001, "0.001"),
        (1e-05, "1e-05"),
        (100000.0, "100000"),
        (1e+16, "1e+16"),
        (3, "3"),
    ])
    def test_values(self, value, expected):
        assert format_number(value) == expected

    def test_round_trip(self):
        for value in (0.1, 1 / 3, 655.35, -0.0001, 123456.789):
            assert float(format_number(value)) == value


# ============================================================================
# Sinks
# ============================================================================

class _FullDisk(io.StringIO):
    def write(self, s: str) -> int:
        raise OSError(28, "No space left on device")


class TestSinks:
    """Test writing to text sinks"""

    def test_write_dbc_matches_format_dbc(self):
        messages = {7: _message(7, _signal("A"))}
        buf = io.StringIO()
        write_dbc(messages, buf)
        assert buf.getvalue() == format_dbc(messages)

    def test_write_error_propagates(self):
        with pytest.raises(OSError, match="No space left"):
            write_dbc({}, _FullDisk())
