"""midi_conversion.song

Data classes for converted songs.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field


@dataclass
class Note:
    """A playable note-block note.

    Attributes:
        time: Milliseconds from the start of the song.
        note_id: Index into the note-block palette (instrument_id * 25 + pitch).
        velocity: Volume in [1, 100].
    """

    time: int
    note_id: int
    velocity: int

    def to_dict(self) -> Dict[str, int]:
        return {'time': self.time, 'note_id': self.note_id, 'velocity': self.velocity}


@dataclass
class ConversionStats:
    """Counters gathered while converting note-on events."""

    total_notes: int = 0
    converted_notes: int = 0
    skipped_notes: int = 0

    @property
    def skipped_percentage(self) -> float:
        if self.total_notes == 0:
            return 0.0
        return self.skipped_notes * 100.0 / self.total_notes

    def summary(self) -> str:
        """Human readable one-line summary.

        Example:
            >>> ConversionStats(4, 3, 1).summary()
            'Total notes: 4, converted: 3, skipped: 1 (25.0%)'
        """
        return (f"Total notes: {self.total_notes}, converted: {self.converted_notes}, "
                f"skipped: {self.skipped_notes} ({self.skipped_percentage:.1f}%)")

    def to_dict(self) -> Dict[str, int]:
        return {
            'total_notes': self.total_notes,
            'converted_notes': self.converted_notes,
            'skipped_notes': self.skipped_notes,
        }


@dataclass
class Song:
    """Container for a converted song."""

    name: str = ''
    notes: List[Note] = field(default_factory=list)
    length: int = 0
    stats: Optional[ConversionStats] = None

    @property
    def conversion_stats(self) -> str:
        return self.stats.summary() if self.stats is not None else ''

    def add(self, note: Note) -> None:
        self.notes.append(note)

    def sort(self) -> None:
        """Stable sort of the notes by time."""
        self.notes.sort(key=lambda n: n.time)

    def to_dict(self) -> Dict[str, Any]:
        """Convert song to dictionary.

        Returns:
            Dictionary representation of the song
        """
        return {
            'name': self.name,
            'length': self.length,
            'notes': [n.to_dict() for n in self.notes],
            'stats': self.stats.to_dict() if self.stats is not None else None,
            'conversion_stats': self.conversion_stats,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Song':
        """Create Song from dictionary.

        Args:
            data: Dictionary produced by ``to_dict``

        Returns:
            Song instance
        """
        stats = data.get('stats')
        return cls(
            name=data.get('name', ''),
            notes=[Note(n['time'], n['note_id'], n['velocity']) for n in data.get('notes', [])],
            length=data.get('length', 0),
            stats=ConversionStats(**stats) if stats else None,
        )
