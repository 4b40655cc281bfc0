"""
Pitch algebra and key-layout resolution.

Maps natural ("basic") note numbers to and from 12-TET semitone numbers and
places a notation onto the keys of a concrete instrument.
"""

import json
import logging
from typing import Dict, List

from .errors import MissingKeyError, SheetRangeError, SheetSyntaxError, SheetTypeError
from .notation import HitAction, KeyLayout, MusicNotation
from .utils import check_bpm

logger = logging.getLogger(__name__)

# Accidentals (black keys) of an octave starting at 0
SEMITONES = (1, 3, 6, 8, 10)
# Naturals (white keys) of an octave starting at 0
NATURALS = (0, 2, 4, 5, 7, 9, 11)

MS_PER_MINUTE = 60_000


def is_semitone(tet12: int) -> bool:
    """Check whether a 12-TET pitch is an accidental (black key)."""
    return tet12 % 12 in SEMITONES


def is_natural(tet12: int) -> bool:
    """Check whether a 12-TET pitch is a natural (white key)."""
    return tet12 % 12 in NATURALS


def basic_note_to_12tet(basic: int) -> int:
    """
    Convert a natural note number to 12-TET.

    Args:
        basic: Natural note number; 0-6 is one octave, other values wrap

    Returns:
        12-TET pitch, 0-11 for the first octave
    """
    octave, degree = divmod(basic, 7)
    return NATURALS[degree] + octave * 12


def tet12_to_basic_note(tet12: int) -> int:
    """
    Convert a 12-TET pitch to a natural note number.

    Raises:
        SheetRangeError: If the pitch is an accidental
    """
    octave, pitch_class = divmod(tet12, 12)
    if pitch_class not in NATURALS:
        raise SheetRangeError(f"The note cannot be natural: {tet12}")
    return NATURALS.index(pitch_class) + octave * 7


def key_pitch(layout: KeyLayout, index: int) -> int:
    """12-TET pitch of the key at ``index``."""
    note = index + layout.key_offset
    return note if layout.semitone else basic_note_to_12tet(note)


def find_suitable_offset(notation: MusicNotation, layout: KeyLayout) -> int:
    """
    Find a transposition that puts every pitch of the notation on a key.

    Non-negative offsets are tried first in ascending order, then negative
    offsets by increasing magnitude.

    Args:
        notation: Notation to place
        layout: Available keys

    Returns:
        Offset to add to every absolute pitch

    Raises:
        MissingKeyError: If no offset fits
    """
    producer = {key_pitch(layout, i) for i in range(layout.key_count)}
    consumer = set(notation.iter_pitches())

    if not producer:
        raise MissingKeyError()
    if not consumer:
        return 0

    # min_offset aligns the lowest pitches, max_offset the highest
    min_offset = min(producer) - min(consumer)
    max_offset = max(producer) - max(consumer)

    def fits(offset: int) -> bool:
        return all(pitch + offset in producer for pitch in consumer)

    for offset in range(max(0, min_offset), max_offset + 1):
        if fits(offset):
            return offset
    for offset in range(min(-1, max_offset), min_offset - 1, -1):
        if fits(offset):
            return offset

    raise MissingKeyError()


def create_hit_actions(notation: MusicNotation, layout: KeyLayout) -> List[HitAction]:
    """
    Resolve every beat into key presses on a layout.

    Args:
        notation: Notation to resolve
        layout: Target key layout

    Returns:
        One HitAction per beat

    Raises:
        SheetRangeError: If the tempo is not positive
        MissingKeyError: If the notation does not fit the layout
    """
    check_bpm(notation.bpm)
    offset = find_suitable_offset(notation, layout)
    if offset:
        logger.debug(f"Transposing '{notation.name}' by {offset} semitones")
    keys_map: Dict[int, int] = {key_pitch(layout, i): i for i in range(layout.key_count)}

    actions = []
    for beat in notation.beats:
        locations = []
        for tone in beat.tones:
            key = keys_map.get(tone + notation.key_note + offset)
            if key is None:
                raise MissingKeyError()
            locations.append(key)
        post_delay = (beat.rate.a * MS_PER_MINUTE) // (notation.bpm * beat.rate.b)
        actions.append(HitAction(locations, post_delay))
    return actions


def parse_key_layout(text: str) -> KeyLayout:
    """
    Parse a key layout from JSON.

    Expected format:
    {"keys": [...], "keyOffset": -7, "semitone": false}
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SheetSyntaxError(f"Invalid key layout: {e.msg}", index=e.pos, line=e.lineno, column=e.colno) from e
    if not isinstance(data, dict):
        raise SheetTypeError('Key layout must be an object')
    keys = data.get('keys')
    key_offset = data.get('keyOffset')
    semitone = data.get('semitone')
    if not isinstance(keys, list):
        raise SheetTypeError('"keys" must be an array')
    if not isinstance(key_offset, int) or isinstance(key_offset, bool):
        raise SheetTypeError('"keyOffset" must be an integer')
    if not isinstance(semitone, bool):
        raise SheetTypeError('"semitone" must be a boolean')
    return KeyLayout(keys, key_offset, semitone)

