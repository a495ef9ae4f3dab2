"""Exception types raised by persub."""

from __future__ import annotations


class PersubError(RuntimeError):
    """Base class for all persub errors."""


class ParseError(PersubError, ValueError):
    """Non-empty subtitle content produced no cues."""


class UnsupportedFormat(PersubError, ValueError):
    """The file extension is neither .srt nor .vtt."""


class ConfigurationError(PersubError):
    """Translation client or settings are unavailable."""


class TranslationFailure(PersubError):
    """A single cue could not be translated."""

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
