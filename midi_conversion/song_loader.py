"""midi_conversion.song_loader

Loads a song from a location by trying each registered format in turn.

A parser is a callable ``parser(data, name, progress) -> Song`` that raises
``FormatError`` when the bytes are not in its format. The loader moves on to
the next parser in that case; ``ResourceExhaustedError`` and other errors
abort the load. Only MIDI is registered by default, other formats can be
added with ``register``.
"""
import logging
import os
from typing import Callable, List, Optional, Tuple

from .config import ConversionConfig, resolve_config
from .exceptions import FormatError, SongNotFoundError
from .midi_converter import ProgressCallback, song_from_bytes
from .song import Song

logger = logging.getLogger(__name__)

SONG_EXTENSIONS = ('.mid', '.midi', '.nbs')

Parser = Callable[[bytes, str, Optional[ProgressCallback]], Song]
StageListener = Callable[[int, str], None]

# Share of the overall load given to the MIDI conversion progress
MIDI_PROGRESS_START = 25
MIDI_PROGRESS_SPAN = 45


def resolve_song_path(song_dir: str, location: str) -> str:
    """Find the file for ``location`` in ``song_dir``, trying known extensions.

    Raises:
        SongNotFoundError: If no candidate file exists.
    """
    base = os.path.join(song_dir, location)
    for candidate in (base,) + tuple(base + ext for ext in SONG_EXTENSIONS):
        if os.path.isfile(candidate):
            return candidate
    raise SongNotFoundError(f"Could not find song: {location}")


class SongLoader:
    """Format-sniffing song loader with staged progress.

    Attributes:
        parsers: Ordered list of ``(format_name, parser)`` pairs.
        progress: Last reported overall percentage (-1 after a failure).
        stage: Last reported stage description.

    Example:
        >>> loader = SongLoader(stage_listener=lambda pct, stage: print(pct, stage))
        >>> song = loader.load('song', 'songs/')
    """

    def __init__(self, parsers: Optional[List[Tuple[str, Parser]]] = None,
                 stage_listener: Optional[StageListener] = None,
                 config: Optional[ConversionConfig] = None) -> None:
        self.config = resolve_config(config)
        if parsers is None:
            parsers = [('MIDI', self._parse_midi)]
        self.parsers: List[Tuple[str, Parser]] = list(parsers)
        self.stage_listener = stage_listener
        self.progress = 0
        self.stage = ''
        self._last_reported = None

    def register(self, format_name: str, parser: Parser) -> None:
        """Append a parser tried after the existing ones."""
        self.parsers.append((format_name, parser))

    def _parse_midi(self, data: bytes, name: str, progress: Optional[ProgressCallback]) -> Song:
        return song_from_bytes(data, name, progress, self.config)

    def _update(self, percentage: int, stage: str) -> None:
        self.progress = percentage
        self.stage = stage
        # only notify when the percentage moves
        if self.stage_listener is not None and percentage != self._last_reported:
            self._last_reported = percentage
            self.stage_listener(percentage, stage)

    def _midi_progress(self, percentage: int, processed: int, total: int) -> None:
        self._update(MIDI_PROGRESS_START + percentage * MIDI_PROGRESS_SPAN // 100, "Converting MIDI...")

    def load_bytes(self, data: bytes, name: str) -> Song:
        """Convert ``data`` with the first parser that accepts it.

        Raises:
            FormatError: If no registered parser accepts the data.
            ResourceExhaustedError: If the data is too large.
        """
        try:
            song = None
            count = len(self.parsers)
            for index, (format_name, parser) in enumerate(self.parsers):
                start = MIDI_PROGRESS_START + index * (100 - MIDI_PROGRESS_START) // count
                self._update(start, f"Trying {format_name} format...")
                progress = self._midi_progress if format_name == 'MIDI' else None
                try:
                    song = parser(data, name, progress)
                except FormatError as e:
                    logger.debug("%s is not in %s format: %s", name, format_name, e)
                    self._update(start + 5, f"Not a {format_name} file")
                    continue
                logger.debug("Loaded %s as %s", name, format_name)
                break

            if song is None:
                raise FormatError("Invalid song format")

            self._update(100, song.conversion_stats or "Song loaded")
            return song
        except Exception as e:
            self._update(-1, f"Loading failed: {e}")
            raise

    def load(self, location: str, song_dir: str = '.') -> Song:
        """Read the song file for ``location`` and convert it."""
        self._update(0, "Loading file...")
        try:
            path = resolve_song_path(song_dir, location)
            with open(path, 'rb') as f:
                data = f.read()
        except (OSError, SongNotFoundError) as e:
            self._update(-1, f"Loading failed: {e}")
            raise
        self._update(20, "File loaded")
        return self.load_bytes(data, os.path.basename(path))
