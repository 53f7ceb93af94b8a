"""midi_conversion.midi_converter

Converts per-track MIDI event streams into a note-block ``Song``.

The conversion walks every track on its own, resolving ticks to absolute
time through the global tempo map, and maps each note-on to a palette note
(or skips it). Once all tracks are done the notes are sorted by time and the
song is shifted so that it starts after a fixed lead-in.

Example:
    >>> from midi_conversion.events import RawEvent, NoteOn, NoteOff
    >>> song = convert([[RawEvent(0, NoteOn(0, 60, 100)), RawEvent(500, NoteOff(0, 60))]], 500)
    >>> [(n.time, n.note_id, n.velocity) for n in song.notes]
    [(0, 6, 78)]
"""
import logging
import os
import time
from typing import Callable, Dict, Optional, Sequence, Tuple

from .config import ConversionConfig, resolve_config
from .events import PAYLOAD_TYPES, PERCUSSION_CHANNEL, NoteOff, NoteOn, ProgramChange, RawEvent, TempoChange
from .exceptions import ResourceExhaustedError
from .instruments import resolve_instrument_note, resolve_percussion_note
from .midi_parser import read_midi_bytes, read_midi_file
from .song import ConversionStats, Note, Song
from .tempo_resolver import TempoResolver, collect_tempo_events
from .validators import (ValidationError, validate_events_by_track, validate_midi_file_path, validate_midi_value,
                         validate_tempo, validate_ticks_per_quarter)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, int], None]


def scale_velocity(velocity: int) -> int:
    """Scale a MIDI velocity (0-127) to the note-block range (0-100), truncating."""
    return velocity * 100 // 127


def _validate_track(track_index: int, track: Sequence[RawEvent]) -> None:
    prev_tick = 0
    for i, event in enumerate(track):
        where = f"track {track_index}, event {i}"
        if not isinstance(event, RawEvent):
            raise ValidationError(f"{where}: expected RawEvent, got {type(event).__name__}", 'events_by_track')
        tick = event.tick
        if isinstance(tick, bool) or not isinstance(tick, int) or tick < 0:
            raise ValidationError(f"{where}: tick must be a non-negative integer, got {tick!r}", 'tick')
        if tick < prev_tick:
            raise ValidationError(f"{where}: tick {tick} goes back in time (previous {prev_tick})", 'tick')
        prev_tick = tick

        payload = event.payload
        if not isinstance(payload, PAYLOAD_TYPES):
            raise ValidationError(f"{where}: unsupported payload {type(payload).__name__}", 'payload')
        try:
            if isinstance(payload, TempoChange):
                validate_tempo(payload.microseconds_per_quarter)
                continue
            validate_midi_value(payload.channel, 'channel', 15)
            if isinstance(payload, ProgramChange):
                validate_midi_value(payload.program, 'program', 127)
            else:
                validate_midi_value(payload.pitch, 'pitch', 127)
                if isinstance(payload, NoteOn):
                    validate_midi_value(payload.velocity, 'velocity', 127)
        except ValidationError as e:
            raise ValidationError(f"{where}: {e}", e.parameter_name, e.expected) from e


def normalize_song(song: Song, lead_in_ms: int) -> None:
    """Shift a sorted song so its first note starts at ``lead_in_ms``.

    Note times are only moved when the first note starts after the lead-in,
    but the length is always reduced by ``first_time - lead_in_ms``. A song
    whose first note is earlier than the lead-in therefore gets longer while
    its notes stay put.
    """
    if not song.notes:
        return
    shift = song.notes[0].time - lead_in_ms
    if song.notes[0].time > lead_in_ms:
        for note in song.notes:
            note.time -= shift
    song.length -= shift


class _Progress:
    """Throttled progress reporting and cooperative yielding."""

    def __init__(self, callback: Optional[ProgressCallback], total: int, config: ConversionConfig):
        self.callback = callback
        self.total = total
        self.interval = config.progress_interval
        self.yield_interval = config.yield_interval
        self.processed = 0

    def step(self) -> None:
        self.processed += 1
        if self.callback is not None and self.processed % self.interval == 0:
            self.callback(int(self.processed * 100.0 / self.total), self.processed, self.total)
        if self.processed % self.yield_interval == 0:
            # let other threads (e.g. a UI loop) run during long conversions
            time.sleep(0)

    def finish(self) -> None:
        if self.callback is not None:
            self.callback(100, self.total, self.total)


def convert(events_by_track: Sequence[Sequence[RawEvent]],
            ticks_per_quarter: int,
            progress: Optional[ProgressCallback] = None,
            *,
            name: str = '',
            config: Optional[ConversionConfig] = None) -> Song:
    """Convert per-track MIDI events into a note-block song.

    Args:
        events_by_track: One sequence of RawEvent per track, each in stream
            order with absolute, non-decreasing ticks.
        ticks_per_quarter: Stream resolution (ticks per quarter note).
        progress: Optional ``callback(percent, processed, total)``. Called every
            ``config.progress_interval`` events and once with 100 at the end.
        name: Name stored on the returned song.
        config: Conversion settings; the built-in defaults (1000ms lead-in)
            are used when omitted. No configuration file is read here.

    Returns:
        A new Song with time-sorted notes, its length and conversion stats.

    Raises:
        FormatError: If the input is not a valid event stream.
    """
    validate_ticks_per_quarter(ticks_per_quarter)
    validate_events_by_track(events_by_track)
    for track_index, track in enumerate(events_by_track):
        _validate_track(track_index, track)
    config = resolve_config(config, load_default=False)

    song = Song(name=name)
    stats = ConversionStats()
    tempo_events = collect_tempo_events(events_by_track)
    reporter = _Progress(progress, sum(len(track) for track in events_by_track), config)

    # 每个轨道和通道分别记录乐器
    programs: Dict[Tuple[int, int], int] = {}

    for track_index, track in enumerate(events_by_track):
        resolver = TempoResolver(tempo_events, ticks_per_quarter)
        for event in track:
            micro_time = resolver.advance(event.tick)
            payload = event.payload

            if isinstance(payload, ProgramChange):
                programs[(track_index, payload.channel)] = payload.program
            elif isinstance(payload, NoteOn):
                stats.total_notes += 1
                velocity = scale_velocity(payload.velocity)
                if velocity == 0:
                    # velocity 0 is a note-off; 1 still scales down to 0
                    stats.skipped_notes += 1
                else:
                    if payload.channel == PERCUSSION_CHANNEL:
                        note_id = resolve_percussion_note(payload.pitch)
                    else:
                        program = programs.get((track_index, payload.channel), 0)
                        note_id = resolve_instrument_note(program, payload.pitch)

                    note_time = micro_time // 1000
                    if note_id is not None:
                        song.add(Note(note_time, note_id, velocity))
                        stats.converted_notes += 1
                    else:
                        stats.skipped_notes += 1
                    song.length = max(song.length, note_time)
            elif isinstance(payload, NoteOff):
                song.length = max(song.length, micro_time // 1000)
            # TempoChange needs no per-track work: it is applied through the global tempo map

            reporter.step()
        logger.debug("Track %d done: %d/%d events processed", track_index, reporter.processed, reporter.total)

    reporter.finish()

    song.stats = stats
    song.sort()
    normalize_song(song, config.lead_in_ms)
    logger.info("Converted %s: %s", name or '<unnamed>', song.conversion_stats)
    return song


def _check_size(size: int, config: ConversionConfig) -> None:
    if size > config.max_file_bytes:
        raise ResourceExhaustedError(
            f"MIDI file is too large ({size} bytes, limit {config.max_file_bytes})",
            size=size, limit=config.max_file_bytes)


def song_from_bytes(data: bytes, name: str = '',
                    progress: Optional[ProgressCallback] = None,
                    config: Optional[ConversionConfig] = None) -> Song:
    """Parse MIDI bytes with mido and convert them.

    Raises:
        MIDIParsingError: If the data is not a MIDI file.
        ResourceExhaustedError: If the data exceeds ``max_file_bytes`` or
            parsing runs out of memory.
    """
    config = resolve_config(config)
    _check_size(len(data), config)
    events_by_track, ticks_per_quarter = read_midi_bytes(data)
    return convert(events_by_track, ticks_per_quarter, progress, name=name, config=config)


def song_from_file(path: str,
                   progress: Optional[ProgressCallback] = None,
                   config: Optional[ConversionConfig] = None) -> Song:
    """Parse a MIDI file with mido and convert it; the song is named after the file."""
    validate_midi_file_path(path)
    config = resolve_config(config)
    _check_size(os.path.getsize(path), config)
    events_by_track, ticks_per_quarter = read_midi_file(path)
    return convert(events_by_track, ticks_per_quarter, progress, name=os.path.basename(path), config=config)
