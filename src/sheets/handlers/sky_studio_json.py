"""
Structured event sheets (JSON).

A sheet is a JSON array whose first element holds the song metadata and a
list of timed key presses:

    [{"name": "...", "bpm": 120, "pitchLevel": 0, "bitsPerPage": 16,
      "songNotes": [{"time": 0, "key": "1Key0"}, ...]}]
"""

import json
import re
from typing import Any, Dict, List

from ..convertor import FormatOptions, Handler, MusicFormatter, MusicParser, ParseOptions
from ..errors import SheetRangeError, SheetSyntaxError, SheetTypeError
from ..music import MS_PER_MINUTE, basic_note_to_12tet, create_hit_actions
from ..notation import Beat, KeyLayout, MusicNotation
from ..rate import Rate
from ..utils import check_bpm, check_pitch_level, group_by, is_integer

SKY_STUDIO_JSON_LABEL = 'sky-studio-json'

KEY_COUNT = 15
BITS_PER_PAGE = 16

_KEY_INDEX = re.compile(r'Key(\d+)')


def sky_studio_json_formatter() -> MusicFormatter:
    layout = KeyLayout(range(KEY_COUNT))

    def format_(notation: MusicNotation, options: FormatOptions) -> str:
        song_notes = []
        time = 0
        for action in create_hit_actions(notation, layout):
            keys = sorted(action.locations, reverse=True)
            song_notes.extend(
                {'time': time, 'key': f"{2 if i else 1}Key{key}"} for i, key in enumerate(keys)
            )
            time += action.post_delay

        sheet = {
            'name': notation.name,
            'author': notation.author,
            'transcribedBy': notation.transcribed_by,
            'bitsPerPage': BITS_PER_PAGE,
            'pitchLevel': notation.key_note % 12,
            'bpm': notation.bpm,
            'songNotes': song_notes,
        }
        return json.dumps([sheet], ensure_ascii=False, separators=(',', ':'))

    return format_


def _load_sheet(text: str) -> Dict[str, Any]:
    try:
        sheets = json.loads(text)
    except json.JSONDecodeError as e:
        raise SheetSyntaxError(f"JSON syntax error: {e.msg}", index=e.pos, line=e.lineno, column=e.colno) from e
    if not isinstance(sheets, list):
        raise SheetTypeError('Data type error')
    if not sheets:
        raise SheetRangeError('Sheets is empty')
    sheet = sheets[0]
    if not isinstance(sheet, dict):
        raise SheetTypeError('Data type error')
    if sheet.get('isEncrypted'):
        raise SheetRangeError('Encrypted not support')
    return sheet


def _check_song_notes(value: Any) -> List[Dict[str, Any]]:
    if not isinstance(value, list):
        raise SheetTypeError('"songNotes" must be an array')
    for note in value:
        if not isinstance(note, dict):
            raise SheetTypeError('"songNotes" items must be objects')
    return value


def _check_note_time(value: Any) -> int:
    # JSON writers may emit whole times as 480.0
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not is_integer(value):
        raise SheetTypeError('"time" must be an integer')
    if value < 0:
        raise SheetRangeError('"time" must be greater than 0')
    return value


def _check_key_index(value: Any) -> int:
    match = _KEY_INDEX.search(value) if isinstance(value, str) else None
    if match:
        key = int(match.group(1))
        if key < KEY_COUNT:
            return key
    raise SheetRangeError(f"Unknown key: {value}")


def sky_studio_json_parser() -> MusicParser:

    def parse(text: str, options: ParseOptions) -> MusicNotation:
        sheet = _load_sheet(text)
        notation = MusicNotation(
            name=sheet.get('name') or 'Unknown',
            author=sheet.get('author') or '',
            transcribed_by=sheet.get('transcribedBy') or '',
            key_note=check_pitch_level(sheet.get('pitchLevel')),
            bpm=check_bpm(sheet.get('bpm')),
        )

        # Notes sharing a time form a chord
        chords = group_by(_check_song_notes(sheet.get('songNotes')), lambda n: _check_note_time(n.get('time')))
        previous_time = 0
        tones: List[int] = []
        for time in sorted(chords):
            # A gap of g ms lasts g / (60000 / bpm) beats
            gap = time - previous_time
            if gap:
                notation.beats.append(Beat(Rate(gap * notation.bpm, MS_PER_MINUTE), tones))
            previous_time = time
            tones = [basic_note_to_12tet(_check_key_index(n.get('key'))) for n in chords[time]]
        notation.beats.append(Beat(Rate(4, 1), tones))
        return notation

    return parse


handler = Handler(
    label=SKY_STUDIO_JSON_LABEL,
    parser=sky_studio_json_parser,
    formatter=sky_studio_json_formatter,
    extension='.json',
)
