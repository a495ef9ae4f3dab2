"""Translation session: drives the gateway over a parsed subtitle file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import AsyncIterator, List, Optional, Tuple, TYPE_CHECKING

from .config import (
    AVAILABLE_TEXT_MODELS,
    DEFAULT_CONTEXT_WINDOW,
    DEFAULT_MODEL,
    SUBTITLE_SUBJECTS,
    clamp_context_window,
)
from .errors import ConfigurationError, ParseError, PersubError, TranslationFailure, UnsupportedFormat
from .formatter import format_subtitles, output_filename
from .models import FAILURE_MARKER, Cue, ProcessingState, SubtitleFormat
from .parser import detect_format, parse_subtitles
from .progress import CueOutcome, RunMode, TranslationProgress

if TYPE_CHECKING:
    from .translator import TranslationGateway

logger = logging.getLogger(__name__)

NOTHING_TO_RETRY = "No failed translations to retry."


class TranslationSession:
    """
    Holds one loaded subtitle file and its translation state.

    ``original`` is never modified after loading. ``translated`` is an
    index-aligned list of copies whose ``translated_text`` records the outcome
    for each cue. Both ``run`` and ``retry_failed`` are async generators that
    yield one CueOutcome per processed index, so callers can observe
    ``progress`` and ``translated`` after every step.
    """

    def __init__(
        self,
        gateway: Optional["TranslationGateway"] = None,
        subject: str = SUBTITLE_SUBJECTS[0],
        model: str = DEFAULT_MODEL,
        context_window: int = DEFAULT_CONTEXT_WINDOW,
    ):
        self.gateway = gateway
        self.subject = subject
        self.model = model
        self._context_window = clamp_context_window(context_window)

        self.original: List[Cue] = []
        self.translated: List[Cue] = []
        self.source_name: Optional[str] = None
        self.source_format: Optional[SubtitleFormat] = None

        self.state = ProcessingState.IDLE
        self.progress = 0.0
        self.last_processed_index = -1
        self.notices: List[str] = []
        self.current_action = ""
        self.last_run: Optional[TranslationProgress] = None

    @property
    def context_window(self) -> int:
        return self._context_window

    @context_window.setter
    def context_window(self, size: int) -> None:
        self._context_window = clamp_context_window(size)

    @property
    def error(self) -> Optional[str]:
        """All user-visible notices as one message, or None."""
        return "\n".join(self.notices) if self.notices else None

    @property
    def translation_available(self) -> bool:
        return self.gateway is not None

    # ------------------------------------------------------------------
    # Loading

    def reset(self) -> None:
        """Discard the loaded file and all translation state."""
        self.original = []
        self.translated = []
        self.source_name = None
        self.source_format = None
        self.state = ProcessingState.IDLE
        self.progress = 0.0
        self.last_processed_index = -1
        self.notices = []
        self.current_action = ""
        self.last_run = None

    def load(self, content: str, filename: str) -> List[Cue]:
        """
        Parse ``content`` as the file ``filename`` and start a fresh session.

        Always resets first, even when the new file parses to the same length.

        Raises:
            UnsupportedFormat: extension is neither .srt nor .vtt
            ParseError: content is not blank but holds no cues
        """
        self.reset()
        self.state = ProcessingState.PARSING
        self.source_name = Path(filename).name

        try:
            fmt = detect_format(filename)
            cues = parse_subtitles(content, fmt)
        except (UnsupportedFormat, ParseError) as e:
            logger.error(str(e))
            self.notices.append(str(e))
            self.state = ProcessingState.ERROR
            raise

        self.source_format = fmt
        self.original = cues
        self.translated = [cue.copy(translated_text=None) for cue in cues]
        self.state = ProcessingState.IDLE
        logger.info(f"Loaded {len(cues)} cues from {self.source_name}")
        return cues

    def load_file(self, path: Path) -> List[Cue]:
        """Read a subtitle file from disk and load it."""
        content = path.read_text(encoding="utf-8-sig")
        return self.load(content, path.name)

    # ------------------------------------------------------------------
    # Inspection

    def context_for(self, index: int) -> Tuple[List[str], List[str]]:
        """Original text of the cues around ``index`` within the context window."""
        w = self._context_window
        n = len(self.original)
        prev = [c.text for c in self.original[max(0, index - w):index]]
        nxt = [c.text for c in self.original[index + 1:min(n, index + 1 + w)]]
        return prev, nxt

    def failed_indices(self) -> List[int]:
        return [i for i, c in enumerate(self.translated) if c.is_failed]

    def unattempted_indices(self) -> List[int]:
        return [i for i, c in enumerate(self.translated) if c.is_pending]

    def retry_targets(self) -> List[int]:
        """Indices that are either failed or were never reached, in file order."""
        return [i for i, c in enumerate(self.translated) if c.is_failed or c.is_pending]

    @property
    def failure_count(self) -> int:
        return len(self.failed_indices())

    @property
    def resume_index(self) -> int:
        """Index a plain ``run()`` starts from."""
        return self.last_processed_index + 1

    @property
    def has_pending_work(self) -> bool:
        """True when something after the cursor still needs translating."""
        remaining = self.translated[self.last_processed_index + 1:]
        return self.last_processed_index > -1 and any(not c.is_translated for c in remaining)

    @property
    def can_download(self) -> bool:
        return self.state is ProcessingState.DONE and any(c.is_translated for c in self.translated)

    def export(self, fmt: Optional[SubtitleFormat] = None) -> str:
        """Render the translated cues; untranslated cues keep their original text."""
        fmt = fmt or self.source_format or SubtitleFormat.SRT
        cues = self.translated if self.translated else self.original
        return format_subtitles(cues, fmt)

    def output_filename(self) -> str:
        return output_filename(
            self.source_name, self.subject, self.source_format or SubtitleFormat.SRT
        )

    # ------------------------------------------------------------------
    # Translation

    def _check_ready(self) -> None:
        if self.gateway is None:
            raise ConfigurationError("Cannot translate: API Key not configured.")
        if self.model not in AVAILABLE_TEXT_MODELS:
            raise ConfigurationError(f"Model {self.model!r} is not available")
        if not self.original:
            raise PersubError("No subtitles to translate.")

    async def _translate_at(self, index: int, retry: bool) -> CueOutcome:
        cue = self.original[index]
        prev, nxt = self.context_for(index)
        verb = "Retrying" if retry else "Translating"
        self.current_action = f"{verb} line {cue.id}..."

        try:
            text = await self.gateway.translate(
                cue.text, prev, nxt, self.subject, self.model, self._context_window
            )
        except TranslationFailure as e:
            logger.warning(f"Error translating line {cue.id}: {e}")
            self.translated[index] = cue.copy(translated_text=FAILURE_MARKER)
            self.notices.append(f"Error translating line {cue.id}.")
            return CueOutcome(index, cue.id, cue.text, FAILURE_MARKER, success=False, error=str(e))

        self.translated[index] = cue.copy(translated_text=text)
        return CueOutcome(index, cue.id, cue.text, text, success=True)

    async def run(self, start_index: Optional[int] = None) -> AsyncIterator[CueOutcome]:
        """
        Translate cues from ``start_index`` to the end, one at a time.

        With no ``start_index`` the run resumes after ``last_processed_index``.
        Entries that already hold a successful translation are skipped. A
        failed cue is marked with FAILURE_MARKER and the run carries on.

        Raises (on first iteration):
            ConfigurationError: no gateway or unknown model
            PersubError: nothing loaded
        """
        self._check_ready()

        n = len(self.original)
        start = self.resume_index if start_index is None else start_index
        if not 0 <= start <= n:
            raise ValueError(f"start_index must be within 0..{n}, got {start}")

        if start == 0 or len(self.translated) != n:
            self.translated = [cue.copy(translated_text=None) for cue in self.original]

        self.state = ProcessingState.TRANSLATING
        self.notices = []
        run = TranslationProgress.create(RunMode.FRESH if start == 0 else RunMode.RESUME, n - start)
        self.last_run = run
        logger.info(f"Translating cues {start + 1}-{n} of {n}")

        try:
            for i in range(start, n):
                existing = self.translated[i]
                if existing.is_translated:
                    outcome = CueOutcome(
                        i, existing.id, existing.text, existing.translated_text,
                        success=True, skipped=True,
                    )
                else:
                    outcome = await self._translate_at(i, retry=False)

                run.record(outcome)
                self.last_processed_index = i
                self.progress = (i + 1) / n * 100
                yield outcome

            self.state = ProcessingState.DONE
            self.current_action = ""
            failures = self.failure_count
            if failures:
                self.notices.append(
                    f"{failures} line(s) failed to translate. "
                    f"You can try 'Retry Failed Translations'."
                )
            logger.info(run.summary())
        finally:
            # 中途停止迭代：保留进度，可继续
            if self.state is ProcessingState.TRANSLATING:
                self.state = ProcessingState.IDLE

    async def retry_failed(self) -> AsyncIterator[CueOutcome]:
        """
        Translate again every cue that failed or was never attempted.

        Context comes from the full original sequence. Progress is measured
        against the retry batch, not the whole file.
        """
        targets = self.retry_targets()
        if not targets:
            logger.info(NOTHING_TO_RETRY)
            self.notices.append(NOTHING_TO_RETRY)
            return

        self._check_ready()

        self.state = ProcessingState.TRANSLATING
        self.notices = []
        self.progress = 0.0
        run = TranslationProgress.create(RunMode.RETRY, len(targets))
        self.last_run = run
        logger.info(
            f"Retrying {len(targets)} cues "
            f"({len(self.failed_indices())} failed, {len(self.unattempted_indices())} not attempted)"
        )

        try:
            for done, i in enumerate(targets, 1):
                outcome = await self._translate_at(i, retry=True)
                run.record(outcome)
                self.progress = done / len(targets) * 100
                yield outcome

            self.state = ProcessingState.DONE
            self.current_action = ""
            remaining = self.failure_count
            if remaining:
                self.notices.append(f"{remaining} line(s) still failed to translate after retry.")
            logger.info(run.summary())
        finally:
            if self.state is ProcessingState.TRANSLATING:
                self.state = ProcessingState.IDLE

    async def translate_all(self, retries: int = 0) -> TranslationProgress:
        """Run to completion, then make up to ``retries`` retry passes."""
        async for _ in self.run():
            pass
        for _ in range(retries):
            if not self.retry_targets():
                break
            async for _ in self.retry_failed():
                pass
        return self.last_run
