"""
Tests for configuration loading.
"""

import pytest
import yaml
from src.sheets.config import (
    ConversionConfig,
    SheetsConfig,
    dict_to_config,
    load_config,
    load_yaml_config,
    merge_configs,
)


class TestConversionConfig:
    """Test conversion settings."""

    def test_defaults(self):
        """Test default values."""
        config = ConversionConfig()
        assert config.output_format == "sky-studio-json"
        assert config.key_layout is None
        assert config.encoding == "utf-8"
        assert config.output_dir == "output"
        assert config.error_logs is True

    def test_empty_format(self):
        """Test an empty output format is rejected."""
        with pytest.raises(ValueError, match="output_format"):
            ConversionConfig(output_format="")

    def test_empty_encoding(self):
        """Test an empty encoding is rejected."""
        with pytest.raises(ValueError, match="encoding"):
            ConversionConfig(encoding="")


class TestMergeConfigs:
    """Test dictionary merging."""

    def test_nested_merge(self):
        """Test nested sections are merged key by key."""
        base = {'conversion': {'output_format': 'a', 'encoding': 'utf-8'}, 'logging': {'verbose': False}}
        merged = merge_configs(base, {'conversion': {'output_format': 'b'}})
        assert merged['conversion'] == {'output_format': 'b', 'encoding': 'utf-8'}
        assert merged['logging'] == {'verbose': False}

    def test_none_is_ignored(self):
        """Test None overrides keep the base value."""
        merged = merge_configs({'a': 1}, {'a': None, 'b': 2})
        assert merged == {'a': 1, 'b': 2}

    def test_base_not_modified(self):
        """Test merging does not mutate the base."""
        base = {'a': {'b': 1}}
        merge_configs(base, {'a': {'b': 2}})
        assert base == {'a': {'b': 1}}


class TestLoadConfig:
    """Test building the effective configuration."""

    def test_defaults(self):
        """Test no file and no overrides."""
        assert load_config() == SheetsConfig()

    def test_yaml_file(self, tmp_path):
        """Test values from a YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.safe_dump({
            'conversion': {'output_format': 'piano-wizard-yp', 'output_dir': 'out'},
            'logging': {'verbose': True},
        }))
        config = load_config(str(config_file))

        assert config.conversion.output_format == 'piano-wizard-yp'
        assert config.conversion.output_dir == 'out'
        assert config.conversion.encoding == 'utf-8'
        assert config.logging.verbose is True

    def test_overrides_win(self, tmp_path):
        """Test command-line values override the file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("conversion:\n  output_format: piano-wizard-yp\n")
        config = load_config(str(config_file), {'conversion': {'output_format': 'sky-studio-abc'}})
        assert config.conversion.output_format == 'sky-studio-abc'

    def test_empty_file(self, tmp_path):
        """Test an empty YAML file gives the defaults."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")
        assert load_yaml_config(str(config_file)) == {}
        assert load_config(str(config_file)) == SheetsConfig()

    def test_missing_file(self, tmp_path):
        """Test a missing config file."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "missing.yaml"))

    def test_unknown_key(self):
        """Test unknown settings are rejected."""
        with pytest.raises(TypeError):
            dict_to_config({'conversion': {'unknown': 1}})

    def test_to_dict(self):
        """Test the nested dictionary form."""
        data = SheetsConfig().to_dict()
        assert data['conversion']['output_format'] == 'sky-studio-json'
        assert data['logging'] == {'verbose': False}
