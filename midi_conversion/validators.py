"""midi_conversion.validators

Input validation functions for MIDI conversion.
"""
import os
from typing import Any, Sequence

from .exceptions import InvalidInputError


class ValidationError(InvalidInputError):
    """Exception raised when validation fails."""
    pass


def validate_midi_file_path(path: str) -> None:
    """Validate MIDI file path exists and is readable.

    Args:
        path: Path to MIDI file

    Raises:
        ValidationError: If path is invalid or file doesn't exist
    """
    if not isinstance(path, (str, os.PathLike)):
        raise ValidationError(f"path must be a string, got {type(path).__name__}", 'path')
    if not str(path):
        raise ValidationError("path cannot be empty", 'path')
    if not os.path.exists(path):
        raise ValidationError(f"MIDI file not found: {path}", 'path')
    if not os.path.isfile(path):
        raise ValidationError(f"path is not a file: {path}", 'path')


def validate_ticks_per_quarter(ticks_per_quarter: int) -> None:
    """Validate the stream resolution (ticks per quarter note).

    Args:
        ticks_per_quarter: Ticks per quarter note value

    Raises:
        ValidationError: If value is not a positive integer
    """
    if isinstance(ticks_per_quarter, bool) or not isinstance(ticks_per_quarter, int):
        raise ValidationError(
            f"ticks_per_quarter must be an integer, got {type(ticks_per_quarter).__name__}",
            'ticks_per_quarter', 'positive integer')
    if ticks_per_quarter <= 0:
        raise ValidationError(
            f"ticks_per_quarter must be positive, got {ticks_per_quarter}",
            'ticks_per_quarter', 'positive integer')


def validate_tempo(tempo: int) -> None:
    """Validate tempo value (microseconds per quarter note).

    Zero is accepted here; the tempo resolver ignores it.

    Raises:
        ValidationError: If tempo is negative or not an integer
    """
    if isinstance(tempo, bool) or not isinstance(tempo, int):
        raise ValidationError(f"tempo must be an integer, got {type(tempo).__name__}", 'tempo')
    if tempo < 0:
        raise ValidationError(f"tempo must not be negative, got {tempo}", 'tempo')


def validate_midi_value(value: Any, name: str, upper: int) -> None:
    """Validate an integer field of a channel message lies in ``[0, upper]``.

    Raises:
        ValidationError: If value is not an integer in range
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {type(value).__name__}", name)
    if not 0 <= value <= upper:
        raise ValidationError(f"{name} must be between 0 and {upper}, got {value}", name, f"0..{upper}")


def validate_events_by_track(events_by_track: Sequence) -> None:
    """Validate the outer container of a multi-track event stream.

    Raises:
        ValidationError: If the container or any track is not a sequence
    """
    if isinstance(events_by_track, (str, bytes)) or not isinstance(events_by_track, Sequence):
        raise ValidationError(
            f"events_by_track must be a sequence of tracks, got {type(events_by_track).__name__}",
            'events_by_track')
    for i, track in enumerate(events_by_track):
        if isinstance(track, (str, bytes)) or not isinstance(track, Sequence):
            raise ValidationError(f"Track at index {i} must be a sequence, got {type(track).__name__}",
                                  'events_by_track')


def validate_config_path(config_path: str) -> None:
    """Validate configuration file path.

    Args:
        config_path: Path to configuration file

    Raises:
        ValidationError: If path is invalid
    """
    if not isinstance(config_path, (str, os.PathLike)):
        raise ValidationError(f"config_path must be a string, got {type(config_path).__name__}", 'config_path')
    if not str(config_path):
        raise ValidationError("config_path cannot be empty", 'config_path')
