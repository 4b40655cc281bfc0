"""
Numbered-cipher sheets.

    /**
     * name: Twinkle
     * author: ...
     * arrangedBy:
     * transcribedBy: ...
     */
    [1=C,4/4,120]
    1,1,5,5,6,6,5*2,4&6-,0/2,3+#,

Digits 1-7 are scale degrees and 0 is a rest. ``&`` joins a chord. ``+``/``-``
shift octaves and ``#``/``b`` shift semitones, each optionally followed by a
count. A trailing ``*N``/``/N`` chain scales the beat length.
"""

import re
from typing import Dict, Optional

from ..convertor import FormatOptions, Handler, MusicFormatter, MusicParser, ParseOptions
from ..errors import SheetRangeError, SheetSyntaxError
from ..music import NATURALS, basic_note_to_12tet, is_semitone
from ..notation import Beat, MusicNotation
from ..rate import Rate
from ..utils import check_bpm, file_stem, unique

PIANO_WIZARD_YP_LABEL = 'piano-wizard-yp'

_BLOCK_COMMENT = re.compile(r'/\*[\d\D]*?\*/')
_LINE_COMMENT = re.compile(r'//[^\n]*')
_SPACES = re.compile(r'\s+')
_HEADER_FIELD = re.compile(r'^[\s*]*(name|author|arrangedBy|transcribedBy)\s*:[ \t]*(.*?)[ \t\r]*$', re.MULTILINE)

_NOTE = r'\d(?:[-+#b]\d*)*'
_CHORD = rf'{_NOTE}(?:&{_NOTE})*(?:[*/]\d+)*'
_MUSIC_SYNTAX = re.compile(rf'^\[1=([A-G][#b]?),\d+/\d+,(\d+)\]({_CHORD}(?:,{_CHORD})*),?$')
_BEAT = re.compile(r'^([^*/]+)((?:[*/]\d+)*)$')
_RATE_STEP = re.compile(r'([*/])(\d+)')
_MODIFIER = re.compile(r'([-+#b])(\d*)')

# Letter of each natural degree of C major
_LETTERS = 'CDEFGAB'


def _compile_note(tet12: int) -> str:
    """Spell a 12-TET tone; accidentals become the natural below plus ``#``."""
    octave, pitch_class = divmod(tet12, 12)
    semitone = is_semitone(pitch_class)
    if semitone:
        pitch_class -= 1
    result = str(NATURALS.index(pitch_class) + 1)
    if octave == 1:
        result += '+'
    elif octave == -1:
        result += '-'
    elif octave > 0:
        result += f"+{octave}"
    elif octave < 0:
        result += str(octave)
    if semitone:
        result += '#'
    return result


def _format_beat(beat: Beat) -> str:
    notes = '&'.join(_compile_note(tone) for tone in beat.tones) or '0'
    rate = beat.rate.copy().simplify()
    if rate.a <= 0:
        return ''
    if rate.a != 1:
        notes += f"*{rate.a}"
    if rate.b != 1:
        notes += f"/{rate.b}"
    return notes + ','


def _format_key_note(key_note: int) -> str:
    pitch_class = key_note % 12
    semitone = is_semitone(pitch_class)
    letter = _LETTERS[NATURALS.index(pitch_class - 1 if semitone else pitch_class)]
    return letter + '#' if semitone else letter


def piano_wizard_yp_formatter() -> MusicFormatter:

    def format_(notation: MusicNotation, options: FormatOptions) -> str:
        content = (
            "/**\n"
            f" * name: {notation.name}\n"
            f" * author: {notation.author}\n"
            " * arrangedBy: \n"
            f" * transcribedBy: {notation.transcribed_by}\n"
            " */\n"
            f"[1={_format_key_note(notation.key_note)},4/4,{notation.bpm}]\n"
        )
        return content + ''.join(_format_beat(beat) for beat in notation.beats)

    return format_


def _read_header(text: str) -> Dict[str, str]:
    """Collect ``key: value`` lines from the first block comment."""
    match = _BLOCK_COMMENT.search(text)
    if not match:
        return {}
    return {key: value for key, value in _HEADER_FIELD.findall(match.group(0)) if value}


def _strip(text: str) -> str:
    text = _BLOCK_COMMENT.sub('', text)
    text = _LINE_COMMENT.sub('', text)
    return _SPACES.sub('', text)


def _parse_key_note(key: str) -> int:
    key_note = basic_note_to_12tet(_LETTERS.index(key[0]))
    if key[1:] == '#':
        key_note += 1
    elif key[1:] == 'b':
        key_note -= 1
    return key_note


def _parse_rate(chain: str) -> Rate:
    rate = Rate()
    for op, digits in _RATE_STEP.findall(chain):
        n = int(digits)
        if n <= 0:
            raise SheetRangeError(f"Unsupported rate: {op}{digits}")
        if op == '/':
            rate = Rate(rate.a, rate.b * n)
        else:
            rate = Rate(rate.a * n, rate.b)
    return rate


def _parse_note(text: str) -> Optional[int]:
    """
    Parse one note; returns None for a rest.

    ``+2b`` raises two octaves and lowers a semitone; ``-#2`` lowers an
    octave and raises two semitones. A missing count means 1.
    """
    degree = int(text[0])
    if degree > 7:
        raise SheetRangeError(f"Unsupported note: {text[0]}")
    if not degree:
        return None
    tone = basic_note_to_12tet(degree - 1)
    for sign, digits in _MODIFIER.findall(text[1:]):
        n = int(digits) if digits else 1
        if sign == '+':
            tone += n * 12
        elif sign == '-':
            tone -= n * 12
        elif sign == '#':
            tone += n
        else:
            tone -= n
    return tone


def _parse_beat(text: str) -> Beat:
    match = _BEAT.match(text)
    if not match:
        raise SheetSyntaxError(f"Beat syntax error: {text}")
    tones = (_parse_note(note) for note in match.group(1).split('&'))
    return Beat(_parse_rate(match.group(2)), unique(t for t in tones if t is not None))


def piano_wizard_yp_parser() -> MusicParser:

    def parse(text: str, options: ParseOptions) -> MusicNotation:
        match = _MUSIC_SYNTAX.match(_strip(text))
        if not match:
            raise SheetSyntaxError('Syntax error')
        key, bpm, beats = match.groups()

        header = _read_header(text)
        name = header.get('name')
        if not name and options.filename:
            name = file_stem(options.filename, '.yp.')
        return MusicNotation(
            name=name or '',
            author=header.get('author', ''),
            transcribed_by=header.get('transcribedBy', ''),
            key_note=_parse_key_note(key),
            bpm=check_bpm(int(bpm)),
            beats=[_parse_beat(beat) for beat in beats.split(',') if beat],
        )

    return parse


handler = Handler(
    label=PIANO_WIZARD_YP_LABEL,
    parser=piano_wizard_yp_parser,
    formatter=piano_wizard_yp_formatter,
    extension='.yp.txt',
)
