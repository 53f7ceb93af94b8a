from .events import RawEvent, ProgramChange, NoteOn, NoteOff, TempoChange, TempoEvent
from .instruments import Instrument, INSTRUMENT_MAP, PERCUSSION_MAP, resolve_instrument_note, resolve_percussion_note
from .tempo_resolver import TempoResolver, collect_tempo_events
from .song import Song, Note, ConversionStats
from .midi_parser import events_from_midi_file, read_midi_bytes, read_midi_file
from .midi_converter import convert, normalize_song, song_from_bytes, song_from_file
from .song_loader import SongLoader, resolve_song_path
from .config import ConversionConfig, load_conversion_config
from .validators import ValidationError
from .exceptions import (MIDIConversionError, FormatError, MIDIParsingError, ResourceExhaustedError,
                         ConfigurationError, SongNotFoundError, InvalidInputError)
from .exporter import export_song, export_json, export_csv, export_yaml, export_text, ExportError

__all__ = [
	'RawEvent', 'ProgramChange', 'NoteOn', 'NoteOff', 'TempoChange', 'TempoEvent',
	'Instrument', 'INSTRUMENT_MAP', 'PERCUSSION_MAP', 'resolve_instrument_note', 'resolve_percussion_note',
	'TempoResolver', 'collect_tempo_events',
	'Song', 'Note', 'ConversionStats',
	'events_from_midi_file', 'read_midi_bytes', 'read_midi_file',
	'convert', 'normalize_song', 'song_from_bytes', 'song_from_file',
	'SongLoader', 'resolve_song_path',
	'ConversionConfig', 'load_conversion_config',
	'ValidationError',
	'MIDIConversionError', 'FormatError', 'MIDIParsingError', 'ResourceExhaustedError',
	'ConfigurationError', 'SongNotFoundError', 'InvalidInputError',
	'export_song', 'export_json', 'export_csv', 'export_yaml', 'export_text', 'ExportError'
]
