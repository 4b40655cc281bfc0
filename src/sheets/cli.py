"""
CLI tool for sheet conversion.

Usage:
    # Convert a batch of sheets to the lyre player script
    python -m src.sheets.cli convert song1.txt song2.json \
        --to fengxu-genshin-2 \
        --output-dir converted

    # List known formats
    python -m src.sheets.cli formats

    # Export a sheet as MIDI
    python -m src.sheets.cli to-midi song.yp.txt --output song.mid
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import SheetsConfig, load_config
from .convertor import FormatOptions, MusicConvertor, ParseOptions
from .errors import SheetError
from .handlers import default_convertor
from .midi_export import MIDIExporter
from .utils import file_stem

__version__ = "0.1.0"

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def output_name(filename: str, extension: str) -> str:
    """Name of the converted file for an input file name."""
    return file_stem(filename, '.yp.txt') + extension


def convert_files(
    inputs: List[Path],
    config: SheetsConfig,
    convertor: Optional[MusicConvertor] = None
) -> int:
    """
    Convert every input file, writing results to the output directory.

    A failing file is logged (and written as ``[ERR]<name>.log`` when enabled)
    without stopping the batch.

    Returns:
        Number of files that failed
    """
    convertor = convertor or default_convertor()
    conversion = config.conversion
    label = conversion.output_format
    extension = convertor.extension_for(label)

    key_layout = None
    if conversion.key_layout:
        key_layout = Path(conversion.key_layout).read_text(encoding=conversion.encoding)
    format_options = FormatOptions(key_layout=key_layout)

    output_dir = Path(conversion.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    failed = 0
    for path in inputs:
        try:
            content = path.read_text(encoding=conversion.encoding)
            result = convertor.convert(label, content, ParseOptions(filename=path.name), format_options)
        except (SheetError, OSError, UnicodeDecodeError) as e:
            failed += 1
            logger.error(f"Failed to convert {path}: {e}")
            if conversion.error_logs:
                (output_dir / f"[ERR]{path.name}.log").write_text(str(e), encoding='utf-8')
            continue
        target = output_dir / output_name(path.name, extension)
        target.write_text(result, encoding='utf-8')
        logger.info(f"{path} -> {target}")

    logger.info(f"Converted {len(inputs) - failed}/{len(inputs)} files")
    return failed


def run_convert(args) -> int:
    """Convert sheets to another format."""
    config = load_config(args.config, {
        'conversion': {
            'output_format': args.to,
            'key_layout': args.key_layout,
            'encoding': args.encoding,
            'output_dir': args.output_dir,
        },
        'logging': {
            'verbose': True if args.verbose or args.convert_verbose else None,
        },
    })
    if config.logging.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    failed = convert_files([Path(p) for p in args.inputs], config)
    return 1 if failed else 0


def run_formats(args) -> int:
    """List registered formats."""
    convertor = default_convertor()
    for label in dict.fromkeys(convertor.parser_labels + convertor.formatter_labels):
        modes = []
        if label in convertor.parser_labels:
            modes.append('parse')
        if label in convertor.formatter_labels:
            modes.append('format')
        print(f"{label:<20} {'/'.join(modes):<14} {convertor.extension_for(label)}")
    return 0


def run_to_midi(args) -> int:
    """Export a sheet as a MIDI file."""
    path = Path(args.input)
    content = path.read_text(encoding=args.encoding)
    notation = default_convertor().parse_music(content, ParseOptions(filename=path.name))
    logger.info(f"Parsed {notation.beat_count} beats at {notation.bpm} bpm")
    MIDIExporter(base_pitch=args.base_pitch).export(notation, args.output)
    return 0


def create_arg_parser() -> argparse.ArgumentParser:
    """Create argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        description="Convert rhythm-game music sheets between formats"
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # convert command
    convert_parser = subparsers.add_parser(
        'convert',
        help='Convert sheets to another format'
    )
    convert_parser.add_argument(
        'inputs',
        nargs='+',
        help='Sheet files to convert'
    )
    convert_parser.add_argument(
        '--to',
        type=str,
        default=None,
        help='Output format label (default from config: sky-studio-json)'
    )
    convert_parser.add_argument(
        '--output-dir',
        type=str,
        default=None,
        help='Directory for converted files (default: output)'
    )
    convert_parser.add_argument(
        '--key-layout',
        type=str,
        default=None,
        help='Key layout JSON file overriding the format default'
    )
    convert_parser.add_argument(
        '--encoding',
        type=str,
        default=None,
        help='Input file encoding (default: utf-8)'
    )
    convert_parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='YAML configuration file'
    )
    convert_parser.add_argument(
        '-v', '--verbose',
        dest='convert_verbose',
        action='store_true',
        help='Enable debug logging'
    )
    convert_parser.set_defaults(func=run_convert)

    # formats command
    formats_parser = subparsers.add_parser(
        'formats',
        help='List registered formats'
    )
    formats_parser.set_defaults(func=run_formats)

    # to-midi command
    midi_parser = subparsers.add_parser(
        'to-midi',
        help='Export a sheet as a MIDI file'
    )
    midi_parser.add_argument(
        'input',
        help='Sheet file'
    )
    midi_parser.add_argument(
        '--output',
        type=str,
        required=True,
        help='Output MIDI file path'
    )
    midi_parser.add_argument(
        '--base-pitch',
        type=int,
        default=60,
        help='MIDI note of tone 0 (default: 60)'
    )
    midi_parser.add_argument(
        '--encoding',
        type=str,
        default='utf-8',
        help='Input file encoding (default: utf-8)'
    )
    midi_parser.set_defaults(func=run_to_midi)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_arg_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(args.verbose)
    try:
        return args.func(args)
    except (SheetError, OSError) as e:
        logger.error(str(e))
        return 1


if __name__ == '__main__':
    sys.exit(main())
