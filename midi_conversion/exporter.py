"""midi_conversion.exporter

Export converted songs to various formats (JSON, CSV, YAML, text).
"""
import json
import csv

import yaml

from .song import Song


class ExportError(Exception):
    """Exception raised when export fails."""
    pass


def export_json(song: Song, output_path: str) -> None:
    """Export song to JSON file.

    Args:
        song: Song instance
        output_path: Path to output JSON file

    Raises:
        ExportError: If export fails
    """
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(song.to_dict(), f, indent=2, ensure_ascii=False)
    except (OSError, TypeError, ValueError) as e:
        raise ExportError(f"Failed to export JSON: {e}") from e


def export_csv(song: Song, output_path: str) -> None:
    """Export song notes to CSV file (time, note_id, velocity).

    Raises:
        ExportError: If the song has no notes or export fails
    """
    if not song.notes:
        raise ExportError("No notes to export")
    try:
        with open(output_path, 'w', encoding='utf-8', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=['time', 'note_id', 'velocity'])
            writer.writeheader()
            writer.writerows(n.to_dict() for n in song.notes)
    except (OSError, csv.Error) as e:
        raise ExportError(f"Failed to export CSV: {e}") from e


def export_yaml(song: Song, output_path: str) -> None:
    """Export song to YAML file.

    Raises:
        ExportError: If export fails
    """
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(song.to_dict(), f, default_flow_style=False, allow_unicode=True, sort_keys=False)
    except (OSError, yaml.YAMLError) as e:
        raise ExportError(f"Failed to export YAML: {e}") from e


def export_text(song: Song, output_path: str) -> None:
    """Export song to human-readable text file.

    Raises:
        ExportError: If export fails
    """
    try:
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write("=== Song Conversion Report ===\n\n")

            if song.name:
                f.write(f"Name: {song.name}\n")
            f.write(f"Length: {song.length / 1000.0:.2f}s\n")
            if song.conversion_stats:
                f.write(f"{song.conversion_stats}\n")
            f.write("\n")

            if song.notes:
                f.write(f"Notes ({len(song.notes)} total):\n")
                for note in song.notes[:20]:
                    f.write(f"  {note.time}ms: note {note.note_id}, velocity {note.velocity}\n")
                if len(song.notes) > 20:
                    f.write(f"  ... and {len(song.notes) - 20} more\n")
    except OSError as e:
        raise ExportError(f"Failed to export text: {e}") from e


def export_song(song: Song, output_path: str, format: str = 'json') -> None:
    """Export song to specified format.

    Args:
        song: Song instance
        output_path: Path to output file
        format: Export format ('json', 'csv', 'yaml', 'text')

    Raises:
        ExportError: If format is unsupported or export fails
    """
    format = format.lower()

    if format == 'json':
        export_json(song, output_path)
    elif format == 'csv':
        export_csv(song, output_path)
    elif format == 'yaml':
        export_yaml(song, output_path)
    elif format == 'text' or format == 'txt':
        export_text(song, output_path)
    else:
        raise ExportError(f"Unsupported export format: {format}. Supported formats: json, csv, yaml, text")
