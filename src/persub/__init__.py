"""
persub - Context-aware Persian subtitle translator.

Features:
- Tolerant SRT and VTT parsing
- Per-line translation with neighbouring lines as context
- Subject profiles (Film, TV Series, Documentary, ...)
- Resumable runs and retry of failed lines only
- Output in the original subtitle format
"""

__version__ = "1.0.0"

from .models import Cue, SubtitleFormat, ProcessingState, FAILURE_MARKER
from .errors import PersubError, ParseError, UnsupportedFormat, TranslationFailure, ConfigurationError
from .parser import parse_srt, parse_vtt, parse_subtitles, detect_format, load_subtitle_file, validate_subtitle_file
from .formatter import format_srt, format_vtt, format_subtitles, output_filename, save_subtitles
from .translator import TranslationGateway
from .config import TranslatorConfig, SUBTITLE_SUBJECTS, AVAILABLE_TEXT_MODELS
from .progress import CueOutcome, TranslationProgress
from .session import TranslationSession

__all__ = [
    # Models
    "Cue",
    "SubtitleFormat",
    "ProcessingState",
    "FAILURE_MARKER",
    "CueOutcome",
    "TranslationProgress",
    "TranslatorConfig",
    # Errors
    "PersubError",
    "ParseError",
    "UnsupportedFormat",
    "TranslationFailure",
    "ConfigurationError",
    # Parsing
    "parse_srt",
    "parse_vtt",
    "parse_subtitles",
    "detect_format",
    "load_subtitle_file",
    "validate_subtitle_file",
    # Formatting
    "format_srt",
    "format_vtt",
    "format_subtitles",
    "output_filename",
    "save_subtitles",
    # Translation
    "TranslationGateway",
    "TranslationSession",
    "SUBTITLE_SUBJECTS",
    "AVAILABLE_TEXT_MODELS",
]
