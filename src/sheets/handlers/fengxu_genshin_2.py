"""
Timeline sheets for the lyre player script.

A sheet is a single call:

    parseGenshinImpactMusic("name", "250 {C2}<250>{D2}<500>{E2}<750>", 2)

Timeline tokens:
    {C2}     press a key; consecutive groups press together. A 4-character
             name (``{C2D2}``) is the semitone between two whole-tone keys
    <200>    hold the keys for 200 ms and wait 200 ms
    (200)    hold the keys for 200 ms without waiting
    300      wait 300 ms

So ``{A3}(200) 300 {B3}`` releases A3 after 200 ms and presses B3 after 300 ms,
the same as ``{A3}<200> 100 {B3}``.
"""

import ast
import json
from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional

from ..convertor import FormatOptions, Handler, MusicFormatter, MusicParser, ParseOptions
from ..errors import SheetRangeError, SheetSyntaxError, SheetTypeError
from ..music import MS_PER_MINUTE, basic_note_to_12tet, create_hit_actions, parse_key_layout
from ..notation import Beat, KeyLayout, MusicNotation
from ..rate import Rate
from ..utils import check_bpm, group_by, is_integer, unique

FENGXU_GENSHIN_2_LABEL = 'fengxu-genshin-2'

FUNC_NAME = 'parseGenshinImpactMusic'
VERSION = 2

DEFAULT_KEY_NAMES = 'C2,D2,E2,F2,G2,A3,B3,C3,D3,E3,F3,G3,A4,B4,C4,D4,E4,F4,G4,A5,B5'.split(',')
DEFAULT_KEY_OFFSET = -7


def fengxu_genshin_2_formatter() -> MusicFormatter:
    default_layout = KeyLayout([f"{{{name}}}" for name in DEFAULT_KEY_NAMES], DEFAULT_KEY_OFFSET)

    def format_(notation: MusicNotation, options: FormatOptions) -> str:
        layout = parse_key_layout(options.key_layout) if options.key_layout else default_layout
        content = ''
        for action in create_hit_actions(notation, layout):
            content += ''.join(str(layout.keys[i]) for i in action.locations)
            # Keys with a zero delay sound together with the next group
            if not action.locations:
                content += f"{action.post_delay} "
            elif action.post_delay:
                content += f"<{action.post_delay}>"
        name = json.dumps(notation.name, ensure_ascii=False)
        timeline = json.dumps(content, ensure_ascii=False)
        return f'{FUNC_NAME}({name}, {timeline}, {VERSION})\n'

    return format_


def parse_key_name(name: str) -> Optional[int]:
    """
    Convert a key name such as ``C2`` or ``C2D2`` to 12-TET.

    Returns None for an unknown name.
    """
    if len(name) == 2:
        letter, digit = name
        if not ('A' <= letter <= 'G' and '0' <= digit <= '9'):
            return None
        base = (ord(letter) - ord('A') - 2) % 7
        octave = int(digit) - 4
        # The player names C..G one octave low
        if base < 5:
            octave += 1
        return basic_note_to_12tet(base) + octave * 12
    if len(name) == 4:
        lower = parse_key_name(name[:2])
        upper = parse_key_name(name[2:])
        if lower is not None and upper is not None and lower + 1 == upper - 1:
            return lower + 1
    return None


@dataclass
class _KeyPress:
    keys: List[int]
    start: int
    wait: int = 0
    hold: int = 0


class _TimedBeat(NamedTuple):
    start: int
    time: int
    keys: List[int]


@dataclass
class _ScanState:
    """Cursor, clock and pending press of one timeline scan."""
    text: str
    pos: int = 0
    clock: int = 0
    after_key: bool = False
    pending: _KeyPress = field(default_factory=lambda: _KeyPress([], 0))
    presses: List[_KeyPress] = field(default_factory=list)

    @property
    def char(self) -> str:
        return self.text[self.pos]

    @property
    def at_end(self) -> bool:
        return self.pos >= len(self.text)


def _error_at(index: int) -> SheetSyntaxError:
    return SheetSyntaxError(f"Parse error(index: {index})", index=index)


def _read_keys(state: _ScanState) -> List[int]:
    """Read one or more adjacent ``{NAME}`` groups."""
    keys = []
    while not state.at_end and state.char == '{':
        state.pos += 1
        name = ''
        while not state.at_end and state.char != '}':
            ch = state.char
            if not ('A' <= ch <= 'G' or '0' <= ch <= '9'):
                raise _error_at(state.pos)
            name += ch
            state.pos += 1
        if state.at_end:
            raise _error_at(state.pos - 1)
        key = parse_key_name(name)
        if key is None:
            raise _error_at(state.pos)
        keys.append(key)
        state.pos += 1
    return keys


def _read_time(state: _ScanState, close: str) -> int:
    """Read ``<N>`` or ``(N)``; N must be positive."""
    state.pos += 1
    time = 0
    while not state.at_end and state.char != close:
        if not '0' <= state.char <= '9':
            raise _error_at(state.pos)
        time = time * 10 + int(state.char)
        state.pos += 1
    if state.at_end:
        raise _error_at(state.pos - 1)
    if not time:
        raise _error_at(state.pos)
    state.pos += 1
    return time


def _read_number(state: _ScanState) -> int:
    start = state.pos
    while not state.at_end and '0' <= state.char <= '9':
        state.pos += 1
    return int(state.text[start:state.pos])


def _scan(text: str) -> List[_KeyPress]:
    state = _ScanState(text)
    while not state.at_end:
        ch = state.char
        if ch.isspace():
            state.pos += 1
        elif ch == '{':
            keys = _read_keys(state)
            if state.pending.keys or state.pending.wait:
                state.presses.append(state.pending)
            state.pending = _KeyPress(keys, state.clock)
            state.after_key = True
        elif ch == '<' or ch == '(':
            if not state.after_key:
                raise _error_at(state.pos)
            time = _read_time(state, '>' if ch == '<' else ')')
            state.pending.hold += time
            if ch == '<':
                state.pending.wait += time
                state.clock += time
            state.after_key = False
        elif '0' <= ch <= '9':
            number = _read_number(state)
            state.pending.wait += number
            state.clock += number
            state.after_key = False
        else:
            raise _error_at(state.pos)
    state.presses.append(state.pending)
    return state.presses


def _to_timed_beats(presses: List[_KeyPress]) -> List[_TimedBeat]:
    beats = []
    for start, group in group_by(presses, lambda p: p.start).items():
        keys = [key for press in group for key in press.keys]
        wait = max(press.wait for press in group)
        hold = max(press.hold for press in group)
        if keys and hold and wait > hold:
            # Released before the next press: sound for hold, rest for the remainder
            beats.append(_TimedBeat(start, hold, keys))
            beats.append(_TimedBeat(start + hold, wait - hold, []))
        else:
            beats.append(_TimedBeat(start, wait, keys))
    beats.sort(key=lambda beat: beat.start)
    return beats


def parse_timeline(name: str, content: str, version: int) -> MusicNotation:
    """
    Parse the arguments of one ``parseGenshinImpactMusic`` call.

    Durations are expressed in units of the shortest nonzero beat, which also
    sets the tempo.
    """
    if version != VERSION:
        raise SheetRangeError(f"Unexpect version: {version}")
    timed = _to_timed_beats(_scan(content))
    times = [beat.time for beat in timed if beat.time]
    if not times:
        raise SheetRangeError('Keys is empty')
    unit = min(times)
    return MusicNotation(
        name=name,
        bpm=check_bpm(MS_PER_MINUTE // unit),
        beats=[Beat(Rate(beat.time or unit * 4, unit), unique(beat.keys)) for beat in timed],
    )


def _read_calls(text: str) -> List[List[Any]]:
    """Extract the literal arguments of every top-level call."""
    try:
        tree = ast.parse(text)
    except SyntaxError as e:
        raise SheetSyntaxError(f"Syntax error: {e.msg}", line=e.lineno, column=e.offset) from e

    calls = []
    for stmt in tree.body:
        call = stmt.value if isinstance(stmt, ast.Expr) else None
        if not (
            isinstance(call, ast.Call)
            and isinstance(call.func, ast.Name)
            and call.func.id == FUNC_NAME
            and not call.keywords
        ):
            raise SheetSyntaxError(
                f"Expected a {FUNC_NAME} call at line {stmt.lineno}",
                line=stmt.lineno, column=stmt.col_offset,
            )
        try:
            calls.append([ast.literal_eval(arg) for arg in call.args])
        except ValueError as e:
            raise SheetSyntaxError(f"Non-literal argument at line {stmt.lineno}", line=stmt.lineno) from e
    return calls


def fengxu_genshin_2_parser() -> MusicParser:

    def parse(text: str, options: ParseOptions) -> MusicNotation:
        calls = _read_calls(text)
        if not calls:
            raise SheetSyntaxError('Unknown error')
        # The script plays the last call
        args = calls[-1]
        if len(args) != 3:
            raise SheetTypeError(f"{FUNC_NAME} takes 3 arguments, got {len(args)}")
        name, content, version = args
        if not isinstance(name, str) or not isinstance(content, str) or not is_integer(version):
            raise SheetTypeError(f"{FUNC_NAME} expects (str, str, int)")
        return parse_timeline(name, content, version)

    return parse


handler = Handler(
    label=FENGXU_GENSHIN_2_LABEL,
    parser=fengxu_genshin_2_parser,
    formatter=fengxu_genshin_2_formatter,
    extension='.js',
)
