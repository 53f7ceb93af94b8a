"""midi_conversion.events

The closed set of events the converter understands.

A track is a sequence of ``RawEvent`` objects in stream order. ``tick`` is the
absolute tick position within the track; ``payload`` is exactly one of
``ProgramChange``, ``NoteOn``, ``NoteOff`` or ``TempoChange``.
"""
from dataclasses import dataclass
from typing import Union

PERCUSSION_CHANNEL = 9
DEFAULT_TEMPO = 500000  # 120 BPM


@dataclass(frozen=True)
class ProgramChange:
    channel: int
    program: int


@dataclass(frozen=True)
class NoteOn:
    channel: int
    pitch: int
    velocity: int


@dataclass(frozen=True)
class NoteOff:
    channel: int
    pitch: int


@dataclass(frozen=True)
class TempoChange:
    microseconds_per_quarter: int


Payload = Union[ProgramChange, NoteOn, NoteOff, TempoChange]

PAYLOAD_TYPES = (ProgramChange, NoteOn, NoteOff, TempoChange)


@dataclass(frozen=True)
class RawEvent:
    """A payload positioned at an absolute tick of its track."""

    tick: int
    payload: Payload


@dataclass(frozen=True)
class TempoEvent:
    """A tempo change on the global timeline."""

    tick: int
    microseconds_per_quarter: int
