"""midi_conversion.midi_parser

Reads Standard MIDI Files (SMF) with mido and turns them into per-track
``RawEvent`` streams for the converter.

Features:
- Multi-track MIDI file support
- Delta times accumulated into absolute ticks per track
- Only program changes, note on/off and tempo changes are kept

Container errors raised by mido are reported as ``MIDIParsingError`` and
memory exhaustion as ``ResourceExhaustedError``.
"""
import io
import logging
from typing import List, Tuple

import mido

from .events import NoteOff, NoteOn, ProgramChange, RawEvent, TempoChange
from .exceptions import MIDIParsingError, ResourceExhaustedError

logger = logging.getLogger(__name__)


def _convert_message(msg: mido.Message):
    if msg.type == 'program_change':
        return ProgramChange(msg.channel, msg.program)
    if msg.type == 'note_on':
        # velocity 0 is kept as a note-on; the converter skips it
        return NoteOn(msg.channel, msg.note, msg.velocity)
    if msg.type == 'note_off':
        return NoteOff(msg.channel, msg.note)
    if msg.type == 'set_tempo':
        return TempoChange(msg.tempo)
    return None


def events_from_midi_file(mid: mido.MidiFile) -> Tuple[List[List[RawEvent]], int]:
    """Extract per-track event streams from a parsed MIDI file.

    Args:
        mid: A mido.MidiFile object containing MIDI tracks.

    Returns:
        ``(events_by_track, ticks_per_quarter)``. Each track list holds the
        relevant messages of that track in stream order with absolute ticks.

    Example:
        >>> mid = mido.MidiFile('song.mid')
        >>> tracks, tpq = events_from_midi_file(mid)
        >>> tracks[0][0]
        RawEvent(tick=0, payload=TempoChange(microseconds_per_quarter=500000))
    """
    events_by_track: List[List[RawEvent]] = []
    for track in mid.tracks:
        abs_tick = 0
        events: List[RawEvent] = []
        for msg in track:
            abs_tick += msg.time
            payload = _convert_message(msg)
            if payload is not None:
                events.append(RawEvent(abs_tick, payload))
        events_by_track.append(events)
    return events_by_track, mid.ticks_per_beat


def _open(**kwargs) -> mido.MidiFile:
    try:
        return mido.MidiFile(**kwargs)
    except MemoryError:
        raise ResourceExhaustedError("Out of memory while parsing MIDI file; the file is too large")
    except Exception as e:
        # mido raises assorted types (OSError, EOFError, KeySignatureError, ...)
        raise MIDIParsingError(f"Invalid MIDI data: {e}") from e


def read_midi_bytes(data: bytes) -> Tuple[List[List[RawEvent]], int]:
    """Parse raw MIDI bytes into ``(events_by_track, ticks_per_quarter)``.

    Raises:
        MIDIParsingError: If the bytes are not a valid MIDI file.
        ResourceExhaustedError: If parsing runs out of memory.
    """
    mid = _open(file=io.BytesIO(data))
    logger.debug("Parsed MIDI data: %d tracks, %d ticks per beat", len(mid.tracks), mid.ticks_per_beat)
    return events_from_midi_file(mid)


def read_midi_file(path: str) -> Tuple[List[List[RawEvent]], int]:
    """Parse a MIDI file from disk into ``(events_by_track, ticks_per_quarter)``."""
    mid = _open(filename=path)
    logger.debug("Parsed %s: %d tracks, %d ticks per beat", path, len(mid.tracks), mid.ticks_per_beat)
    return events_from_midi_file(mid)
