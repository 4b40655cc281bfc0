#!/usr/bin/env python3
"""
Sheet Convertor - rhythm-game music sheet conversion

Main entry point. Runs the sheets CLI, using config.yaml next to this file
as the default configuration for the convert command.

Version: 0.1.0
"""

import sys
from pathlib import Path

from src.sheets.cli import main as cli_main

DEFAULT_CONFIG = Path(__file__).parent / "config.yaml"


def with_default_config(argv: list) -> list:
    """Add --config for the convert command when none is given."""
    command = next((arg for arg in argv if not arg.startswith("-")), None)
    if command == "convert" and "--config" not in argv and DEFAULT_CONFIG.exists():
        return argv + ["--config", str(DEFAULT_CONFIG)]
    return argv


def main():
    """Main entry point."""
    return cli_main(with_default_config(sys.argv[1:]))


if __name__ == "__main__":
    sys.exit(main())
