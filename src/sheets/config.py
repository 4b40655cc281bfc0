"""Configuration for batch sheet conversion.

Handles loading YAML config and merging with command-line arguments.
Command-line arguments have higher priority than config file values.
"""

import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict


@dataclass
class ConversionConfig:
    """Conversion configuration."""
    output_format: str = "sky-studio-json"
    key_layout: Optional[str] = None  # Path to a key layout JSON file
    encoding: str = "utf-8"
    output_dir: str = "output"
    error_logs: bool = True  # Write [ERR]<file>.log next to the outputs

    def __post_init__(self):
        if not self.output_format:
            raise ValueError("output_format must not be empty")
        if not self.encoding:
            raise ValueError("encoding must not be empty")


@dataclass
class LoggingConfig:
    """Logging configuration."""
    verbose: bool = False


@dataclass
class SheetsConfig:
    """Complete configuration."""
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_yaml_config(config_path: str) -> Dict[str, Any]:
    """Load configuration from YAML file."""
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        config_dict = yaml.safe_load(f)

    return config_dict or {}


def merge_configs(base_config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override config into base config."""
    merged = base_config.copy()

    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        elif value is not None:  # Only override if value is not None
            merged[key] = value

    return merged


def dict_to_config(config_dict: Dict[str, Any]) -> SheetsConfig:
    """Convert dictionary to SheetsConfig dataclass."""
    return SheetsConfig(
        conversion=ConversionConfig(**(config_dict.get('conversion') or {})),
        logging=LoggingConfig(**(config_dict.get('logging') or {}))
    )


def load_config(config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> SheetsConfig:
    """
    Build the effective configuration.

    Args:
        config_path: Optional YAML file
        overrides: Values from the command line; None entries are ignored

    Returns:
        SheetsConfig with defaults, file values and overrides applied
    """
    config_dict = SheetsConfig().to_dict()
    if config_path:
        config_dict = merge_configs(config_dict, load_yaml_config(config_path))
    if overrides:
        config_dict = merge_configs(config_dict, overrides)
    return dict_to_config(config_dict)
