"""
Notation data structures shared by every sheet format.

Parsers build a MusicNotation, formatters consume it.
"""

from dataclasses import dataclass, field
from typing import Any, Iterator, List, Tuple

from .rate import Rate


@dataclass
class Beat:
    """
    A single timed event: a chord, a single note or a rest.

    Attributes:
        rate: Duration relative to one reference beat
        tones: 12-TET offsets relative to the notation key; empty for a rest
    """
    rate: Rate = field(default_factory=Rate)
    tones: List[int] = field(default_factory=list)

    @property
    def is_rest(self) -> bool:
        """True when the beat sounds nothing."""
        return not self.tones


@dataclass
class MusicNotation:
    """
    Format-independent representation of a sheet.

    Attributes:
        name: Song name
        author: Original author
        transcribed_by: Who transcribed the sheet
        key_note: 12-TET offset of the tonic; only ``key_note % 12`` is a pitch class
        bpm: Beats per minute of the reference beat
        beats: Ordered list of beats
    """
    name: str = ''
    author: str = ''
    transcribed_by: str = ''
    key_note: int = 0
    bpm: int = 0
    beats: List[Beat] = field(default_factory=list)

    @property
    def beat_count(self) -> int:
        return len(self.beats)

    def iter_pitches(self) -> Iterator[int]:
        """Yield the absolute pitch (tone + key_note) of every sounding tone."""
        for beat in self.beats:
            for tone in beat.tones:
                yield tone + self.key_note


@dataclass(frozen=True)
class KeyLayout:
    """
    Keys available on a target instrument, ordered from low to high.

    Attributes:
        keys: Format-specific key labels
        key_offset: Pitch of the first key
        semitone: True if consecutive keys are semitones apart, False if they
            follow the natural (white-key) degrees
    """
    keys: Tuple[Any, ...] = ()
    key_offset: int = 0
    semitone: bool = False

    def __post_init__(self):
        object.__setattr__(self, 'keys', tuple(self.keys))

    @property
    def key_count(self) -> int:
        return len(self.keys)


@dataclass
class HitAction:
    """
    Keys to press for one beat and the delay before the next action.

    Attributes:
        locations: Key indices within a KeyLayout
        post_delay: Milliseconds to wait after pressing
    """
    locations: List[int] = field(default_factory=list)
    post_delay: int = 0
