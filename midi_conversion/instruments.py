"""midi_conversion.instruments

Note-block palette and the lookup tables that map General MIDI sounds onto it.

The palette has 16 instrument classes. Each class plays 25 consecutive
semitones starting at its ``offset`` (a MIDI pitch), so a palette note id is
``(pitch - offset) + instrument_id * 25``.

Melodic programs map to an ordered tuple of candidate instruments; the first
candidate whose range contains the pitch wins. Percussion keys (channel 10 in
GM numbering) map directly to a note id. Programs and keys without a sensible
counterpart are absent on purpose and resolve to None.

Both tables are built once at import time and exposed read-only.
"""
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

NOTES_PER_INSTRUMENT = 25


class Instrument(Enum):
    """Note-block instrument classes as ``(instrument_id, offset)``."""

    HARP = (0, 54)
    BASEDRUM = (1, 0)
    SNARE = (2, 0)
    HAT = (3, 0)
    BASS = (4, 30)
    FLUTE = (5, 66)
    BELL = (6, 78)
    GUITAR = (7, 42)
    CHIME = (8, 78)
    XYLOPHONE = (9, 78)
    IRON_XYLOPHONE = (10, 54)
    COW_BELL = (11, 66)
    DIDGERIDOO = (12, 30)
    BIT = (13, 54)
    BANJO = (14, 54)
    PLING = (15, 54)

    def __init__(self, instrument_id: int, offset: int):
        self.instrument_id = instrument_id
        self.offset = offset

    def contains(self, pitch: int) -> bool:
        return self.offset <= pitch <= self.offset + NOTES_PER_INSTRUMENT - 1

    def note_id(self, pitch: int) -> int:
        return (pitch - self.offset) + self.instrument_id * NOTES_PER_INSTRUMENT


INSTRUMENT_COUNT = len(Instrument)
MAX_NOTE_ID = INSTRUMENT_COUNT * NOTES_PER_INSTRUMENT - 1

_I = Instrument

# Candidate orderings shared by several GM families
_PIANO = (_I.HARP, _I.BASS, _I.BELL)
_SYNTH_KEYS = (_I.BIT, _I.DIDGERIDOO, _I.BELL)
_MALLETS = (_I.IRON_XYLOPHONE, _I.BASS, _I.XYLOPHONE)
_ORGAN = (_I.DIDGERIDOO, _I.BIT, _I.XYLOPHONE)
_GUITAR = (_I.GUITAR, _I.HARP, _I.BASS, _I.BELL)
_BASS = (_I.BASS, _I.HARP, _I.BELL)
_BOWED = (_I.FLUTE, _I.GUITAR, _I.BASS, _I.BELL)
_HARP = (_I.HARP, _I.BASS, _I.CHIME)
_WIND = (_I.FLUTE, _I.DIDGERIDOO, _I.IRON_XYLOPHONE, _I.BELL)
_PLUCKED = (_I.BANJO, _I.BASS, _I.BELL)
_DRONE = (_I.HARP, _I.DIDGERIDOO, _I.BELL)


def _build_instrument_map() -> Dict[int, Tuple[Instrument, ...]]:
    table: Dict[int, Tuple[Instrument, ...]] = {}

    def assign(programs, candidates):
        for program in programs:
            table[program] = candidates

    # Piano
    assign((0, 1, 3, 6, 7), _PIANO)
    assign((2, 4, 5), _SYNTH_KEYS)
    # Chromatic percussion
    assign(range(8, 16), _MALLETS)
    # Organ
    assign(range(16, 24), _ORGAN)
    # Guitar
    assign((24, 25, 26, 27, 28, 31), _GUITAR)
    assign((29, 30), _ORGAN)
    # Bass
    assign(range(32, 36), _BASS)
    assign(range(36, 40), _ORGAN)
    # Strings
    assign(range(40, 44), _BOWED)
    assign((44,), _SYNTH_KEYS)
    assign((45, 47), _PIANO)
    assign((46,), _HARP)
    # Ensemble
    assign(range(48, 56), _PIANO)
    # Brass
    assign(range(56, 64), _SYNTH_KEYS)
    # Reed, pipe
    assign(range(64, 80), _WIND)
    # Synth lead, synth pad
    assign(range(80, 96), _PIANO)
    # Synth effects (96 and 97 have no counterpart)
    assign((98,), _SYNTH_KEYS)
    assign(range(99, 104), _PIANO)
    # Ethnic
    assign(range(104, 109), _PLUCKED)
    assign(range(109, 112), _DRONE)
    # Percussive (sound effects 120-127 have no counterpart)
    assign(range(112, 120), _MALLETS)
    return table


# GM percussion key -> (pitch within instrument, instrument)
_PERCUSSION_SOURCE: Dict[int, Tuple[int, Instrument]] = {
    35: (10, _I.BASEDRUM),
    36: (6, _I.BASEDRUM),
    37: (6, _I.HAT),
    38: (8, _I.SNARE),
    39: (6, _I.HAT),
    40: (4, _I.SNARE),
    41: (6, _I.BASEDRUM),
    42: (22, _I.SNARE),
    43: (13, _I.BASEDRUM),
    44: (22, _I.SNARE),
    45: (15, _I.BASEDRUM),
    46: (18, _I.SNARE),
    47: (20, _I.BASEDRUM),
    48: (23, _I.BASEDRUM),
    49: (17, _I.SNARE),
    50: (23, _I.BASEDRUM),
    51: (24, _I.SNARE),
    52: (8, _I.SNARE),
    53: (13, _I.SNARE),
    54: (18, _I.HAT),
    55: (18, _I.SNARE),
    56: (1, _I.HAT),
    57: (13, _I.SNARE),
    58: (2, _I.HAT),
    59: (13, _I.SNARE),
    60: (9, _I.HAT),
    61: (2, _I.HAT),
    62: (8, _I.HAT),
    63: (22, _I.BASEDRUM),
    64: (15, _I.BASEDRUM),
    65: (13, _I.SNARE),
    66: (8, _I.SNARE),
    67: (8, _I.HAT),
    68: (3, _I.HAT),
    69: (20, _I.HAT),
    70: (23, _I.HAT),
    71: (24, _I.HAT),
    72: (24, _I.HAT),
    73: (17, _I.HAT),
    74: (11, _I.HAT),
    75: (18, _I.HAT),
    76: (9, _I.HAT),
    77: (5, _I.HAT),
    78: (22, _I.HAT),
    79: (19, _I.SNARE),
    80: (17, _I.HAT),
    81: (22, _I.HAT),
    82: (22, _I.SNARE),
    83: (24, _I.CHIME),
    84: (24, _I.CHIME),
    85: (21, _I.HAT),
    86: (14, _I.BASEDRUM),
    87: (7, _I.BASEDRUM),
}

INSTRUMENT_MAP: Mapping[int, Tuple[Instrument, ...]] = MappingProxyType(_build_instrument_map())

PERCUSSION_MAP: Mapping[int, int] = MappingProxyType({
    key: pitch + NOTES_PER_INSTRUMENT * instrument.instrument_id
    for key, (pitch, instrument) in _PERCUSSION_SOURCE.items()
})


def resolve_instrument(program: int, pitch: int) -> Optional[Instrument]:
    """Return the first candidate instrument of ``program`` able to play ``pitch``."""
    for candidate in INSTRUMENT_MAP.get(program, ()):
        if candidate.contains(pitch):
            return candidate
    return None


def resolve_instrument_note(program: int, pitch: int) -> Optional[int]:
    """Map a melodic (program, pitch) pair to a palette note id.

    Args:
        program: GM program number (0-127) active on the channel.
        pitch: MIDI pitch (0-127).

    Returns:
        The note id, or None when the program has no table entry or the pitch
        lies outside every candidate's 25-semitone window.

    Example:
        >>> resolve_instrument_note(0, 60)   # piano -> HARP, offset 54
        6
        >>> resolve_instrument_note(0, 20) is None
        True
    """
    instrument = resolve_instrument(program, pitch)
    if instrument is None:
        return None
    return instrument.note_id(pitch)


def resolve_percussion_note(pitch: int) -> Optional[int]:
    """Map a percussion key to a palette note id, or None if it has no entry."""
    return PERCUSSION_MAP.get(pitch)
