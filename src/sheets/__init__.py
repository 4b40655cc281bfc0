"""
Sheet conversion module.

Converts rhythm-game music sheets between textual and JSON formats through a
shared notation model.
"""

from .rate import Rate
from .notation import Beat, MusicNotation, KeyLayout, HitAction
from .errors import (
    SheetError,
    SheetSyntaxError,
    SheetRangeError,
    SheetTypeError,
    MissingKeyError,
    UnknownFormatError,
    NoParserMatchedError,
)
from .music import (
    basic_note_to_12tet,
    tet12_to_basic_note,
    is_semitone,
    is_natural,
    find_suitable_offset,
    create_hit_actions,
    parse_key_layout,
)
from .convertor import Handler, MusicConvertor, ParseOptions, FormatOptions
from .handlers import default_convertor
from .midi_export import MIDIExporter

__all__ = [
    'Rate',
    'Beat',
    'MusicNotation',
    'KeyLayout',
    'HitAction',
    'SheetError',
    'SheetSyntaxError',
    'SheetRangeError',
    'SheetTypeError',
    'MissingKeyError',
    'UnknownFormatError',
    'NoParserMatchedError',
    'basic_note_to_12tet',
    'tet12_to_basic_note',
    'is_semitone',
    'is_natural',
    'find_suitable_offset',
    'create_hit_actions',
    'parse_key_layout',
    'Handler',
    'MusicConvertor',
    'ParseOptions',
    'FormatOptions',
    'default_convertor',
    'MIDIExporter',
]
