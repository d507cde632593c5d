"""Unit tests for the converter configuration loader

Tests cover:
- Defaults: None, empty YAML, empty converter section
- Overrides: flat mapping and nested converter section, file and string
- Validation: unknown keys, wrong types, bad templates and encodings
"""

from pathlib import Path

import pytest

from refdbc.config import (
    DEFAULT_CONFIG,
    ConverterConfig,
    config_from_dict,
    load_config,
)
from refdbc.errors import ConfigError, RefDbcError


# ============================================================================
# Defaults
# ============================================================================

class TestDefaults:
    """Test default settings"""

    def test_default_values(self):
        config = ConverterConfig()
        assert config.node_name == "VECTOR__XXX"
        assert config.default_dlc == 8
        assert config.message_name(256) == "CAN_MSG_256"
        assert config.encoding == "utf-8"
        assert config.warn_on_numeric_fallback is False

    def test_none_source(self):
        assert load_config(None) == DEFAULT_CONFIG

    def test_empty_converter_section(self):
        assert load_config("converter:\n") == DEFAULT_CONFIG


# ============================================================================
# Overrides
# ============================================================================

class TestOverrides:
    """Test YAML keys overriding defaults"""

    def test_nested_section(self):
        config = load_config(
            "converter:\n"
            + "  node_name: LOGGER\n"
            + "  default_dlc: 64\n"
            + "  warn_on_numeric_fallback: true\n"
        )
        assert config.node_name == "LOGGER"
        assert config.default_dlc == 64
        assert config.warn_on_numeric_fallback is True
        assert config.encoding == "utf-8"

    def test_flat_mapping(self):
        config = load_config("message_name_format: 'MSG_{id:X}'\n")
        assert config.message_name(255) == "MSG_FF"

    def test_single_line_yaml_string(self):
        assert load_config("node_name: ECU").node_name == "ECU"

    def test_from_path(self, tmp_path: Path):
        p = tmp_path / "refdbc.yaml"
        p.write_text("converter:\n  encoding: cp1252\n")
        assert load_config(p).encoding == "cp1252"

    def test_from_path_string(self, tmp_path: Path):
        p = tmp_path / "refdbc.yaml"
        p.write_text("default_dlc: 4\n")
        assert load_config(str(p)).default_dlc == 4

    def test_config_from_dict(self):
        assert config_from_dict({"node_name": "GW"}).node_name == "GW"


# ============================================================================
# Validation
# ============================================================================

class TestValidation:
    """Test rejected configurations"""

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")

    def test_missing_file_as_string(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.yaml"))

    def test_unknown_key(self):
        with pytest.raises(ConfigError, match="unknown configuration key"):
            load_config("converter:\n  node: X\n")

    @pytest.mark.parametrize("yaml_text,key", [
        ("default_dlc: eight\n", "default_dlc"),
        ("default_dlc: true\n", "default_dlc"),
        ("node_name: 5\n", "node_name"),
        ("node_name: ''\n", "node_name"),
        ("warn_on_numeric_fallback: maybe\n", "warn_on_numeric_fallback"),
    ])
    def test_wrong_type(self, yaml_text, key):
        with pytest.raises(ConfigError, match=key):
            load_config(yaml_text)

    def test_negative_dlc(self):
        with pytest.raises(ConfigError, match="default_dlc"):
            load_config("default_dlc: -1\n")

    def test_node_name_with_space(self):
        with pytest.raises(ConfigError, match="whitespace"):
            load_config("node_name: 'A B'\n")

    def test_bad_template(self):
        with pytest.raises(ConfigError, match="message_name_format"):
            load_config("message_name_format: 'MSG_{name}'\n")

    def test_unknown_encoding(self):
        with pytest.raises(ConfigError, match="encoding"):
            load_config("encoding: no-such-codec\n")

    @pytest.mark.parametrize("codec", ["base64", "hex", "zlib_codec"])
    def test_binary_codec_rejected(self, codec):
        with pytest.raises(ConfigError, match="not a text encoding"):
            load_config(f"encoding: {codec}\n")

    @pytest.mark.parametrize("codec", ["utf-16", "utf-32-le", "cp037"])
    def test_non_ascii_compatible_encoding_rejected(self, codec):
        with pytest.raises(ConfigError, match="ASCII-compatible"):
            load_config(f"encoding: {codec}\n")

    @pytest.mark.parametrize("codec", ["latin-1", "cp1252", "UTF-8"])
    def test_ascii_compatible_encoding_accepted(self, codec):
        assert load_config(f"encoding: {codec}\n").encoding == codec

    def test_not_a_mapping(self):
        with pytest.raises(ConfigError, match="mapping"):
            load_config("- a\n- b\n")

    def test_invalid_yaml(self):
        with pytest.raises(ConfigError, match="invalid YAML"):
            load_config("converter: [unclosed\n")

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            load_config("bogus: 1\n")
        assert issubclass(ConfigError, RefDbcError)
