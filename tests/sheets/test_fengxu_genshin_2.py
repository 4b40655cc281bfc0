"""
Tests for timeline script sheets.
"""

import ast
import json

import pytest
from src.sheets.convertor import FormatOptions, ParseOptions
from src.sheets.errors import (
    MissingKeyError,
    NoParserMatchedError,
    SheetRangeError,
    SheetSyntaxError,
    SheetTypeError,
)
from src.sheets.handlers import FENGXU_GENSHIN_2_LABEL, default_convertor
from src.sheets.handlers.fengxu_genshin_2 import (
    fengxu_genshin_2_formatter,
    fengxu_genshin_2_parser,
    parse_key_name,
    parse_timeline,
)
from src.sheets.notation import Beat, MusicNotation
from src.sheets.rate import Rate

SAMPLE = "250 {C2}<250>{D2}<500>{E2}<750>"


@pytest.fixture
def parse():
    parser = fengxu_genshin_2_parser()
    return lambda text: parser(text, ParseOptions())


@pytest.fixture
def format_():
    formatter = fengxu_genshin_2_formatter()
    return lambda notation, key_layout=None: formatter(notation, FormatOptions(key_layout=key_layout))


def call(content, name="Song", version=2):
    return f'parseGenshinImpactMusic({json.dumps(name)}, {json.dumps(content)}, {version})'


class TestParseKeyName:
    """Test key name resolution."""

    @pytest.mark.parametrize("name,expected", [
        ('C2', -12),
        ('D2', -10),
        ('A3', -3),
        ('B3', -1),
        ('C3', 0),
        ('G4', 19),
        ('C2D2', -11),
    ])
    def test_known_names(self, name, expected):
        """Test names map to 12-TET pitches."""
        assert parse_key_name(name) == expected

    @pytest.mark.parametrize("name", ['C2E2', 'E2F2', 'H2', 'C', 'CC', 'C2D'])
    def test_unknown_names(self, name):
        """Test names that are not keys."""
        assert parse_key_name(name) is None


class TestParseTimeline:
    """Test timeline content parsing."""

    def test_parse(self):
        """Test a leading wait, presses and hold durations."""
        notation = parse_timeline("Song", SAMPLE, 2)

        assert notation.name == "Song"
        # Shortest beat is 250 ms
        assert notation.bpm == 240
        assert notation.beats == [
            Beat(Rate(250, 250), []),
            Beat(Rate(250, 250), [-12]),
            Beat(Rate(500, 250), [-10]),
            Beat(Rate(750, 250), [-8]),
        ]

    def test_hold_shorter_than_wait(self):
        """Test a release before the next press inserts a rest."""
        notation = parse_timeline("Song", "{C3}(200) 300 {D3}<100>", 2)

        assert notation.bpm == 600
        assert notation.beats == [
            Beat(Rate(200, 100), [0]),
            Beat(Rate(100, 100), []),
            Beat(Rate(100, 100), [2]),
        ]

    def test_simultaneous_groups_merge(self):
        """Test groups pressed at the same time form one chord."""
        notation = parse_timeline("Song", "{C3} {E3}<100>", 2)
        assert notation.beats == [Beat(Rate(100, 100), [0, 4])]

    def test_adjacent_keys_form_chord(self):
        """Test adjacent key groups press together."""
        notation = parse_timeline("Song", "{C3}{E3}{C3}<100>", 2)
        assert notation.beats == [Beat(Rate(100, 100), [0, 4])]

    def test_final_beat_without_time(self):
        """Test a press without duration lasts four units."""
        notation = parse_timeline("Song", "{C3}<100>{D3}", 2)
        assert notation.beats[-1] == Beat(Rate(400, 100), [2])

    def test_semitone_key(self):
        """Test four-character names."""
        notation = parse_timeline("Song", "{C3D3}<100>", 2)
        assert notation.beats[0].tones == [1]

    def test_wrong_version(self):
        """Test only version 2 is supported."""
        with pytest.raises(SheetRangeError, match="version"):
            parse_timeline("Song", SAMPLE, 1)

    def test_tempo_below_one_bpm(self):
        """Test beats longer than a minute give no valid tempo."""
        with pytest.raises(SheetRangeError, match='"bpm"'):
            parse_timeline("Song", "{C2}<70000>{D2}<70000>", 2)

    def test_slow_timeline_rejected_by_convertor(self):
        """Test a tempo of zero fails inside the parser race."""
        with pytest.raises(NoParserMatchedError) as exc_info:
            default_convertor().parse_music(call("{C2}<70000>{D2}<70000>"))
        assert isinstance(exc_info.value.failures[FENGXU_GENSHIN_2_LABEL], SheetRangeError)

    def test_no_durations(self):
        """Test a timeline with nothing timed."""
        with pytest.raises(SheetRangeError, match="empty"):
            parse_timeline("Song", "{C3}", 2)
        with pytest.raises(SheetRangeError):
            parse_timeline("Song", "", 2)

    @pytest.mark.parametrize("content,index", [
        ("{C2}<0>", 6),
        ("<100>", 0),
        ("{C2", 2),
        ("{X2}", 1),
        ("{C2}x", 4),
        ("{CC}", 3),
        ("{C2}<1a>", 6),
        ("{C2}<100", 7),
    ])
    def test_error_index(self, content, index):
        """Test syntax errors report the failing character index."""
        with pytest.raises(SheetSyntaxError) as exc_info:
            parse_timeline("Song", content, 2)
        assert exc_info.value.index == index


class TestFengxuGenshin2Parser:
    """Test reading the script call."""

    def test_parse(self, parse):
        """Test the call arguments."""
        notation = parse(call(SAMPLE, name="Twinkle"))
        assert notation.name == "Twinkle"
        assert notation.bpm == 240

    def test_last_call_wins(self, parse):
        """Test the script plays the last call."""
        text = call("{C3}<100>", name="First") + "\n" + call("{C3}<200>", name="Second") + ";\n"
        notation = parse(text)
        assert notation.name == "Second"
        assert notation.bpm == 300

    def test_not_a_script(self, parse):
        """Test non-script input."""
        with pytest.raises(SheetSyntaxError):
            parse("[1=C,4/4,90]1,")

    def test_other_statement(self, parse):
        """Test statements other than the call are rejected."""
        with pytest.raises(SheetSyntaxError, match="Expected"):
            parse("x = 1\n" + call(SAMPLE))

    def test_non_literal_argument(self, parse):
        """Test arguments must be literals."""
        with pytest.raises(SheetSyntaxError, match="Non-literal"):
            parse(f'parseGenshinImpactMusic(name, "{SAMPLE}", 2)')

    def test_empty(self, parse):
        """Test an empty script."""
        with pytest.raises(SheetSyntaxError):
            parse("")

    def test_argument_count(self, parse):
        """Test the call takes three arguments."""
        with pytest.raises(SheetTypeError, match="3 arguments"):
            parse(f'parseGenshinImpactMusic("{SAMPLE}", 2)')

    def test_argument_types(self, parse):
        """Test argument types."""
        with pytest.raises(SheetTypeError):
            parse(f'parseGenshinImpactMusic("Song", "{SAMPLE}", "2")')
        with pytest.raises(SheetTypeError):
            parse(f'parseGenshinImpactMusic(1, "{SAMPLE}", 2)')


class TestFengxuGenshin2Formatter:
    """Test writing the script call."""

    def test_round_trip(self, format_):
        """Test formatting a parsed timeline restores it."""
        notation = parse_timeline("Song", SAMPLE, 2)
        assert format_(notation) == call(SAMPLE) + "\n"

    def test_name_is_escaped(self, format_):
        """Test the name is a string literal."""
        notation = MusicNotation(name='Say "hi"', bpm=60, beats=[Beat(Rate(1), [0])])
        assert format_(notation).startswith('parseGenshinImpactMusic("Say \\"hi\\"", ')

    def test_custom_layout(self, format_):
        """Test a chromatic key layout."""
        layout = '{"keys": ["{X}", "{Y}", "{Z}"], "keyOffset": 0, "semitone": true}'
        notation = MusicNotation(name="Song", bpm=60, beats=[Beat(Rate(1), [0]), Beat(Rate(1), [2])])
        assert format_(notation, layout) == call("{X}<1000>{Z}<1000>") + "\n"

    def test_zero_delay_joins_next_group(self, format_):
        """Test a beat truncated to 0 ms is written without a time and parses back."""
        notation = MusicNotation(name="Song", bpm=60, beats=[Beat(Rate(0), [0]), Beat(Rate(1), [4])])
        output = format_(notation)

        assert output == call("{C3}{E3}<1000>") + "\n"
        parsed = fengxu_genshin_2_parser()(output, ParseOptions())
        assert parsed.beats[0].tones == [0, 4]

    def test_timeline_is_escaped(self, format_):
        """Test custom key labels are written as a string literal."""
        layout = json.dumps({'keys': ['a"', 'b\\'], 'keyOffset': 0, 'semitone': True})
        notation = MusicNotation(name="Song", bpm=60, beats=[Beat(Rate(1), [0]), Beat(Rate(1), [1])])
        output = format_(notation, layout)

        call_node = ast.parse(output).body[0].value
        assert ast.literal_eval(call_node.args[1]) == 'a"<1000>b\\<1000>'

    def test_unplayable(self, format_):
        """Test notes that no transposition fits."""
        notation = MusicNotation(bpm=60, beats=[Beat(Rate(1), [0, 1, 2])])
        with pytest.raises(MissingKeyError):
            format_(notation)
