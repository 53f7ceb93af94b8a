"""midi_conversion.exceptions

Custom exception classes for MIDI conversion errors.
"""


class MIDIConversionError(Exception):
    """Base exception for all MIDI conversion errors."""
    pass


class FormatError(MIDIConversionError):
    """Exception raised when the input is not a valid event stream for this format."""
    pass


class MIDIParsingError(FormatError):
    """Exception raised when the MIDI container cannot be parsed."""
    pass


class ResourceExhaustedError(MIDIConversionError):
    """Exception raised when the input is too large to be converted."""

    def __init__(self, message: str, size: int = None, limit: int = None):
        super().__init__(message)
        self.size = size
        self.limit = limit


class ConfigurationError(MIDIConversionError):
    """Exception raised when configuration is invalid."""
    pass


class SongNotFoundError(MIDIConversionError):
    """Exception raised when a song location cannot be resolved to a file."""
    pass


class InvalidInputError(FormatError):
    """Exception raised when input parameters are invalid."""

    def __init__(self, message: str, parameter_name: str = None, expected: str = None):
        super().__init__(message)
        self.parameter_name = parameter_name
        self.expected = expected
