"""Translation gateway: one cue in, one Persian line out."""

from __future__ import annotations

import logging
from typing import Dict, Sequence, Tuple

from openai import AsyncOpenAI

from .config import AVAILABLE_TEXT_MODELS, TranslatorConfig, clamp_context_window
from .errors import ConfigurationError
from .llm_client import call_llm_async, create_client

logger = logging.getLogger(__name__)


DEFAULT_INSTRUCTION = "You are an expert subtitle translator."

SUBJECT_INSTRUCTIONS: Dict[str, str] = {
    "Film": "You are an expert subtitle translator specializing in Film scripts and dialogue.",
    "TV Series": "You are an expert subtitle translator specializing in dialogue for TV Series.",
    "Music Video": (
        "You are an expert subtitle translator specializing in song lyrics and dialogue "
        "for Music Videos. Pay attention to rhythm and artistic expression if applicable."
    ),
    "General Education": (
        "You are an expert subtitle translator specializing in general educational content."
    ),
    "Specialized Education": (
        "You are an expert subtitle translator specializing in specific academic or "
        "professional educational material."
    ),
    "Specialized Programming Education": (
        "You are an expert subtitle translator specializing in technical content for "
        "Programming Education. Maintain accuracy of technical terms and code-related phrasing."
    ),
    "Specialized Computer Education": (
        "You are an expert subtitle translator specializing in technical content for "
        "Computer Education and IT. Maintain accuracy of technical terms."
    ),
    "Documentary": (
        "You are an expert subtitle translator specializing in narration and interviews "
        "for Documentaries."
    ),
}

NO_PREVIOUS_LINES = "(No previous lines for context)"
NO_FOLLOWING_LINES = "(No following lines for context)"


def subject_instruction(subject: str) -> str:
    """Return the framing sentence for a subject profile."""
    return SUBJECT_INSTRUCTIONS.get(subject, DEFAULT_INSTRUCTION)


def trim_context(
    preceding: Sequence[str],
    following: Sequence[str],
    window: int
) -> Tuple[list[str], list[str]]:
    """Keep the last ``window`` preceding and the first ``window`` following lines."""
    window = max(0, window)
    if window == 0:
        return [], []
    return list(preceding[-window:]), list(following[:window])


def _build_translation_prompt(
    subject: str,
    main_text: str,
    context_prev: Sequence[str],
    context_next: Sequence[str],
) -> tuple[str, str]:
    """Build translation prompts."""

    system_prompt = subject_instruction(subject)

    prev_str = "\n".join(context_prev) or NO_PREVIOUS_LINES
    next_str = "\n".join(context_next) or NO_FOLLOWING_LINES

    user_prompt = f"""{system_prompt} Your task is to translate the **MAIN_TEXT** from its original language into fluent, accurate, and natural-sounding Persian.
Use the **PREVIOUS_LINES** and **FOLLOWING_LINES** provided below strictly for contextual understanding to improve the translation of the **MAIN_TEXT**.
Do NOT translate the PREVIOUS_LINES or FOLLOWING_LINES themselves.
Only provide the Persian translation for the **MAIN_TEXT**. Output only the translated text, with no extra commentary or labels.

**PREVIOUS_LINES:**
{prev_str}

**MAIN_TEXT:**
{main_text}

**FOLLOWING_LINES:**
{next_str}

Persian Translation of MAIN_TEXT:
"""

    return system_prompt, user_prompt


class TranslationGateway:
    """Adapter around the chat completion API for single-cue translation."""

    def __init__(
        self,
        client: AsyncOpenAI,
        temperature: float = 0.3,
        max_retries: int = 3,
    ):
        self.client = client
        self.temperature = temperature
        self.max_retries = max_retries

    @classmethod
    def from_config(cls, config: TranslatorConfig) -> "TranslationGateway":
        """Build a gateway from config; raises ConfigurationError without an API key."""
        client = create_client(config.api_key, config.base_url, config.timeout)
        return cls(client, max_retries=config.max_retries)

    async def translate(
        self,
        main_text: str,
        preceding_lines: Sequence[str],
        following_lines: Sequence[str],
        subject: str,
        model: str,
        context_window: int,
    ) -> str:
        """
        Translate ``main_text`` into Persian.

        Context lines are trimmed here, so callers may pass more than needed.

        Raises:
            ConfigurationError: model is not in the allow-list
            TranslationFailure: the request failed or returned nothing
        """
        if model not in AVAILABLE_TEXT_MODELS:
            raise ConfigurationError(f"Model {model!r} is not available")

        prev, nxt = trim_context(
            preceding_lines, following_lines, clamp_context_window(context_window)
        )
        system_prompt, user_prompt = _build_translation_prompt(subject, main_text, prev, nxt)

        logger.debug(f"Translating with {len(prev)} previous / {len(nxt)} following lines")

        return await call_llm_async(
            self.client, model,
            [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            temperature=self.temperature,
            max_retries=self.max_retries,
        )
