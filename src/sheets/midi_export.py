"""
MIDI export of a notation.

Writes a single-track Standard MIDI File so a converted sheet can be checked
in any sequencer.
"""

import logging
from fractions import Fraction
from pathlib import Path
from typing import List, Tuple, Union

import mido

from .errors import SheetRangeError
from .notation import MusicNotation

logger = logging.getLogger(__name__)


class MIDIExporter:
    """
    Converts a MusicNotation to a MIDI file.

    Attributes:
        base_pitch: MIDI note of tone 0 with key_note 0 (60 = C4)
        velocity: Note-on velocity
        ticks_per_beat: Resolution of the reference beat
    """

    def __init__(self, base_pitch: int = 60, velocity: int = 80, ticks_per_beat: int = 480):
        self.base_pitch = base_pitch
        self.velocity = velocity
        self.ticks_per_beat = ticks_per_beat

    def build(self, notation: MusicNotation) -> mido.MidiFile:
        """Build the MIDI file in memory."""
        midi = mido.MidiFile(ticks_per_beat=self.ticks_per_beat)
        track = mido.MidiTrack()
        midi.tracks.append(track)

        if notation.name:
            track.append(mido.MetaMessage('track_name', name=notation.name))
        track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(notation.bpm)))

        events = self._create_midi_events(notation)
        # Note-offs sort before note-ons at the same tick
        events.sort(key=lambda event: (event[0], event[1].type == 'note_on'))

        current_tick = 0
        for tick, msg in events:
            msg.time = tick - current_tick
            track.append(msg)
            current_tick = tick
        return midi

    def export(self, notation: MusicNotation, output_path: Union[str, Path]) -> None:
        """
        Export a notation to a MIDI file.

        Args:
            notation: Notation to export
            output_path: Output MIDI file path
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.build(notation).save(str(output_path))
        logger.info(f"MIDI written to {output_path}")

    def _create_midi_events(self, notation: MusicNotation) -> List[Tuple[int, mido.Message]]:
        """Create note on/off events, one chord per beat."""
        events = []
        position = Fraction(0)
        for beat in notation.beats:
            start = round(position * self.ticks_per_beat)
            position += beat.rate.to_fraction()
            end = round(position * self.ticks_per_beat)
            if end <= start:
                continue
            for tone in beat.tones:
                pitch = self.base_pitch + notation.key_note + tone
                if not 0 <= pitch <= 127:
                    raise SheetRangeError(f"Pitch out of MIDI range: {pitch}")
                events.append((start, mido.Message('note_on', note=pitch, velocity=self.velocity, time=0)))
                events.append((end, mido.Message('note_off', note=pitch, velocity=0, time=0)))
        return events
