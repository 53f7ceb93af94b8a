"""midi_conversion.tempo_resolver

Tick to microsecond conversion across tempo changes.

Tempo changes are gathered from every track into one global list. Each track
then walks that list with its own ``TempoResolver``, so a tempo change stored
in one track (usually the conductor track) applies to all of them.
"""
import logging
from typing import List, Sequence

from .events import DEFAULT_TEMPO, RawEvent, TempoChange, TempoEvent

logger = logging.getLogger(__name__)


def collect_tempo_events(events_by_track: Sequence[Sequence[RawEvent]]) -> List[TempoEvent]:
    """Build the global tempo map by scanning all tracks for tempo changes.

    Args:
        events_by_track: Per-track event sequences.

    Returns:
        TempoEvents sorted by tick. The sort is stable, so changes at the same
        tick keep their encounter order (track order, then stream order).

    Example:
        >>> tracks = [[RawEvent(0, TempoChange(500000)), RawEvent(1920, TempoChange(428571))]]
        >>> collect_tempo_events(tracks)
        [TempoEvent(tick=0, microseconds_per_quarter=500000), TempoEvent(tick=1920, microseconds_per_quarter=428571)]
    """
    tempo_events = [
        TempoEvent(event.tick, event.payload.microseconds_per_quarter)
        for track in events_by_track
        for event in track
        if isinstance(event.payload, TempoChange)
    ]
    tempo_events.sort(key=lambda e: e.tick)
    logger.debug("Collected %d tempo events", len(tempo_events))
    return tempo_events


class TempoResolver:
    """Per-track cursor over the global tempo map.

    ``advance`` must be called with non-decreasing ticks. The duration of each
    stretch is ``(tempo // ticks_per_quarter) * delta_ticks``: the division is
    truncated before multiplying, and the resulting drift is part of the
    expected output.

    Attributes:
        micro_time: Microseconds elapsed at ``prev_tick``.
        tempo: Microseconds per quarter note currently in effect.
        prev_tick: Last tick accounted for.
        cursor: Index of the next tempo event not yet applied.
    """

    def __init__(self, tempo_events: Sequence[TempoEvent], ticks_per_quarter: int):
        self.tempo_events = tempo_events
        self.ticks_per_quarter = ticks_per_quarter
        self.micro_time = 0
        self.tempo = DEFAULT_TEMPO
        self.prev_tick = 0
        self.cursor = 0

    def _accumulate(self, tick: int) -> None:
        self.micro_time += (self.tempo // self.ticks_per_quarter) * (tick - self.prev_tick)
        self.prev_tick = tick

    def advance(self, tick: int) -> int:
        """Move the cursor to ``tick`` and return the absolute time in microseconds.

        Tempo events strictly before ``tick`` are applied first; a tempo event
        at exactly ``tick`` only affects later ticks. A tempo of 0 is invalid
        and leaves the current tempo unchanged.
        """
        events = self.tempo_events
        while self.cursor < len(events) and events[self.cursor].tick < tick:
            event = events[self.cursor]
            self._accumulate(event.tick)
            if event.microseconds_per_quarter != 0:
                self.tempo = event.microseconds_per_quarter
            self.cursor += 1
        self._accumulate(tick)
        return self.micro_time
