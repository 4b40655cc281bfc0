"""
Letter-pitch sheets.

    <DontCopyThisLine> 480 0 16 author transcriber
    A1 . B1C3 . . A2 . .

Key tokens are a row letter A-C and a column digit 1-5; adjacent tokens form
a chord. Each ``.`` adds one unit to the current beat. The header bpm is the
tempo of a single unit.
"""

import math
from typing import List, Tuple

from ..convertor import FormatOptions, Handler, MusicFormatter, MusicParser, ParseOptions
from ..errors import SheetRangeError, SheetSyntaxError
from ..music import basic_note_to_12tet, tet12_to_basic_note
from ..notation import Beat, MusicNotation
from ..rate import Rate
from ..utils import check_bpm, check_pitch_level, file_stem, parse_int, unique

SKY_STUDIO_ABC_LABEL = 'sky-studio-abc'

HEADER_MARK = '<DontCopyThisLine>'
ROWS = 'ABC'
COLUMNS = 5
BITS_PER_PAGE = 16
# Units given to the last chord when the sheet ends without trailing dots
TAIL_UNITS = 3


def sky_studio_abc_formatter() -> MusicFormatter:

    def format_(notation: MusicNotation, options: FormatOptions) -> str:
        # Common denominator of every beat, so each beat is a whole number of units
        lcm = 1
        for beat in notation.beats:
            lcm = math.lcm(lcm, Rate(beat.rate.a, beat.rate.b).simplify().b)
        header = (
            f"{HEADER_MARK} {notation.bpm * lcm} {notation.key_note % 12} {BITS_PER_PAGE} "
            f"{notation.author} {notation.transcribed_by}"
        )

        tokens = []
        for beat in notation.beats:
            units = Rate(beat.rate.a * lcm, beat.rate.b).simplify()
            if units.b != 1:
                raise SheetRangeError(f"Unsupported rate: {beat.rate.a}/{beat.rate.b}")
            dot_count = units.a - 1
            if dot_count < 0:
                continue
            if beat.tones:
                tokens.append(''.join(_format_key(tone) for tone in beat.tones))
                tokens.extend('.' * dot_count)
            else:
                tokens.extend('.' * (dot_count + 1))
        return header + '\n' + ''.join(f"{token} " for token in tokens)

    return format_


def _format_key(tone: int) -> str:
    note = tet12_to_basic_note(tone)
    if note < 0 or note >= len(ROWS) * COLUMNS:
        raise SheetRangeError(f"Unknown note: {note}")
    return ROWS[note // COLUMNS] + str(note % COLUMNS + 1)


def _split_header(text: str) -> Tuple[str, str]:
    text = text.strip().replace('\r\n', '\n').replace('\r', '\n')
    if not text:
        raise SheetSyntaxError('Content is empty')
    if HEADER_MARK not in text:
        raise SheetSyntaxError('Syntax error')
    gt = text.index('>')
    lf = text.find('\n', gt)
    if lf < 0:
        raise SheetSyntaxError('Missing Character: "\\n"')
    return text[gt + 1:lf].strip(), text[lf + 1:]


def _parse_info(line: str, filename: str) -> MusicNotation:
    infos = line.split() + [''] * 5
    return MusicNotation(
        name=file_stem(filename),
        author=infos[3],
        transcribed_by=infos[4],
        key_note=check_pitch_level(parse_int(infos[1])),
        bpm=check_bpm(parse_int(infos[0])),
    )


class _KeyScanner:
    """Scans the key lines, tracking the line/column of each character."""

    def __init__(self, text: str):
        self.text = text
        self.line = 2
        self.line_start = -1

    def error_at(self, i: int) -> SheetSyntaxError:
        column = i - self.line_start
        char = self.text[i] if i < len(self.text) else ''
        return SheetSyntaxError(
            f"Parse error(line: {self.line}, column: {column}, char: {char})",
            index=i, line=self.line, column=column,
        )

    def read_keys(self, i: int, notes: List[int]) -> int:
        """
        Read adjacent key tokens starting at ``i``.

        Returns:
            Index of the last consumed character
        """
        text = self.text
        while i < len(text) and text[i] in ROWS:
            row = ROWS.index(text[i])
            if i + 1 >= len(text):
                raise self.error_at(i)
            digit = text[i + 1]
            if not '1' <= digit <= str(COLUMNS):
                raise self.error_at(i + 1)
            notes.append(basic_note_to_12tet(row * COLUMNS + int(digit) - 1))
            i += 2
        return i - 1

    def scan(self, notation: MusicNotation) -> None:
        text = self.text
        dot_count = 0
        notes: List[int] = []

        def flush(dots: int) -> None:
            # The key group itself counts as one unit
            units = dots + 1 if notes else dots
            if units:
                notation.beats.append(Beat(Rate(units), unique(notes)))
            notes.clear()

        i = 0
        while i < len(text):
            ch = text[i]
            if ch == '\n':
                self.line_start = i
                self.line += 1
            elif ch == '.':
                dot_count += 1
            elif ch in ROWS:
                flush(dot_count)
                dot_count = 0
                i = self.read_keys(i, notes)
            elif not ch.isspace():
                raise self.error_at(i)
            i += 1
        if notes:
            flush(max(dot_count, TAIL_UNITS))


def sky_studio_abc_parser() -> MusicParser:

    def parse(text: str, options: ParseOptions) -> MusicNotation:
        info, keys = _split_header(text)
        notation = _parse_info(info, options.filename or 'Unknown')
        _KeyScanner(keys).scan(notation)
        return notation

    return parse


handler = Handler(
    label=SKY_STUDIO_ABC_LABEL,
    parser=sky_studio_abc_parser,
    formatter=sky_studio_abc_formatter,
    extension='.txt',
)
