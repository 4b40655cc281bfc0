"""
Tests for shared handler helpers.
"""

import pytest
from src.sheets.errors import SheetRangeError, SheetTypeError
from src.sheets.utils import check_bpm, check_pitch_level, file_stem, group_by, parse_int, unique


class TestCollections:
    """Test grouping and deduplication."""

    def test_group_by_keeps_order(self):
        """Test groups follow first-seen key order."""
        groups = group_by([3, 1, 4, 1, 5], lambda n: n % 2)
        assert list(groups.items()) == [(1, [3, 1, 1, 5]), (0, [4])]

    def test_unique(self):
        """Test duplicates are dropped, keeping first occurrences."""
        assert unique([4, 0, 4, 7, 0]) == [4, 0, 7]


class TestParseInt:
    """Test leading integer parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("120", 120),
        (" 42abc", 42),
        ("-3", -3),
        (7, 7),
        ("", None),
        ("abc", None),
        (None, None),
        (True, None),
    ])
    def test_parse_int(self, value, expected):
        """Test strings, ints and rejected values."""
        assert parse_int(value) == expected


class TestChecks:
    """Test bpm and pitch level validation."""

    def test_valid(self):
        """Test valid values pass through."""
        assert check_bpm(120) == 120
        assert check_pitch_level(0) == 0
        assert check_pitch_level(11) == 11

    @pytest.mark.parametrize("value", [0, -60])
    def test_bpm_range(self, value):
        """Test non-positive tempos."""
        with pytest.raises(SheetRangeError, match='"bpm"'):
            check_bpm(value)

    @pytest.mark.parametrize("value", [None, "120", 1.5, True])
    def test_bpm_type(self, value):
        """Test non-integer tempos."""
        with pytest.raises(SheetTypeError):
            check_bpm(value)

    @pytest.mark.parametrize("value", [-1, 12])
    def test_pitch_level_range(self, value):
        """Test pitch levels outside 0-11."""
        with pytest.raises(SheetRangeError, match='"pitchLevel"'):
            check_pitch_level(value)


class TestFileStem:
    """Test extension stripping."""

    @pytest.mark.parametrize("filename,compound,expected", [
        ("song.txt", "", "song"),
        ("my.song.txt", "", "my.song"),
        ("song.yp.txt", ".yp.", "song"),
        ("song.txt", ".yp.", "song"),
        ("README", "", "README"),
        (".hidden", "", ".hidden"),
    ])
    def test_file_stem(self, filename, compound, expected):
        """Test simple, compound and missing extensions."""
        assert file_stem(filename, compound) == expected
