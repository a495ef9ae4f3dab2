"""Configuration and constants."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Load environment variables once
load_dotenv()


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"

DEFAULT_MODEL = "gemini-2.5-flash-preview-04-17"
# 可选模型白名单
AVAILABLE_TEXT_MODELS = (DEFAULT_MODEL,)

SUBTITLE_SUBJECTS = (
    "Film",
    "TV Series",
    "Music Video",
    "General Education",
    "Specialized Education",
    "Specialized Programming Education",
    "Specialized Computer Education",
    "Documentary",
)

# Number of lines before and after each cue sent as context
DEFAULT_CONTEXT_WINDOW = 4
MAX_CONTEXT_WINDOW = 10

# Supported file extensions
SUPPORTED_EXTENSIONS = {".srt", ".vtt"}

OUTPUT_PREFIX = "translated_"

API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")


def clamp_context_window(size: int) -> int:
    """Clamp a context window size into 0..MAX_CONTEXT_WINDOW."""
    return max(0, min(MAX_CONTEXT_WINDOW, int(size)))


def api_key_from_env() -> Optional[str]:
    for name in API_KEY_ENV_VARS:
        value = os.environ.get(name)
        if value:
            return value
    return None


@dataclass
class TranslatorConfig:
    """Configuration for subtitle translator."""

    # API settings
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    model_name: str = DEFAULT_MODEL
    timeout: float = 60.0
    max_retries: int = 3

    # Translation settings
    subject: str = SUBTITLE_SUBJECTS[0]
    context_window: int = DEFAULT_CONTEXT_WINDOW

    # Automatic retry-failed passes after the main run
    retry_passes: int = 0

    def __post_init__(self):
        """Load API key from environment if not provided."""
        if self.api_key is None:
            self.api_key = api_key_from_env()
        self.context_window = clamp_context_window(self.context_window)

    @classmethod
    def from_args(cls, args) -> "TranslatorConfig":
        """Create config from argparse namespace."""
        api_key = getattr(args, 'api_key', None) or api_key_from_env()
        base_url = (
            getattr(args, 'base_url', None)
            or os.environ.get("PERSUB_BASE_URL")
            or DEFAULT_BASE_URL
        )

        return cls(
            api_key=api_key,
            base_url=base_url,
            model_name=getattr(args, 'model_name', DEFAULT_MODEL),
            subject=getattr(args, 'subject', SUBTITLE_SUBJECTS[0]),
            context_window=getattr(args, 'context_window', DEFAULT_CONTEXT_WINDOW),
            retry_passes=getattr(args, 'retries', 0),
        )

    def validate(self) -> Optional[str]:
        """
        Validate configuration.

        Returns:
            Error message if invalid, None if valid
        """
        if not self.api_key:
            return (
                "Gemini API Key is not configured. Set GEMINI_API_KEY (or API_KEY) "
                "or use --api-key. Translation functionality will be disabled."
            )

        if self.model_name not in AVAILABLE_TEXT_MODELS:
            return f"Unknown model {self.model_name!r}, choose one of: {', '.join(AVAILABLE_TEXT_MODELS)}"

        if self.subject not in SUBTITLE_SUBJECTS:
            return f"Unknown subject {self.subject!r}"

        if self.retry_passes < 0 or self.retry_passes > 10:
            return f"Retries must be 0-10, got {self.retry_passes}"

        return None
