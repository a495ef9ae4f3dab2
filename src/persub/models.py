"""Data models for subtitle cues."""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


# 翻译失败时写入译文位置的标记
FAILURE_MARKER = "[Translation Error]"


class SubtitleFormat(Enum):
    """Supported subtitle file formats."""
    SRT = "srt"
    VTT = "vtt"

    @property
    def extension(self) -> str:
        return f".{self.value}"


class ProcessingState(Enum):
    """Processing states of a translation session."""
    IDLE = "idle"
    PARSING = "parsing"
    TRANSLATING = "translating"
    DONE = "done"
    ERROR = "error"


@dataclass
class Cue:
    """Represents a single subtitle cue."""

    id: int
    start: str
    end: str
    text: str
    translated_text: Optional[str] = None

    # 缓存时间戳解析结果
    _start_cache: Optional[float] = field(default=None, repr=False, compare=False)
    _end_cache: Optional[float] = field(default=None, repr=False, compare=False)

    @property
    def timecode(self) -> str:
        """Return the timecode line as stored."""
        return f"{self.start} --> {self.end}"

    @property
    def is_translated(self) -> bool:
        """True when the cue holds a successful translation."""
        return bool(self.translated_text) and self.translated_text != FAILURE_MARKER

    @property
    def is_failed(self) -> bool:
        return self.translated_text == FAILURE_MARKER

    @property
    def is_pending(self) -> bool:
        """True when no translation has been attempted yet."""
        return self.translated_text is None

    @property
    def output_text(self) -> str:
        """Text written on export: the translation, falling back to the original."""
        return self.translated_text or self.text

    @property
    def start_seconds(self) -> float:
        """Convert start timecode to seconds (cached)."""
        if self._start_cache is None:
            self._start_cache = self._time_str_to_seconds(self.start)
        return self._start_cache

    @property
    def end_seconds(self) -> float:
        """Convert end timecode to seconds (cached)."""
        if self._end_cache is None:
            self._end_cache = self._time_str_to_seconds(self.end)
        return self._end_cache

    @staticmethod
    def _time_str_to_seconds(t_str: str) -> float:
        """Convert an SRT or VTT timecode string to seconds."""
        try:
            parts = t_str.replace(',', '.').split(':')
            if len(parts) == 2:
                # VTT 允许省略小时
                parts.insert(0, '0')
            h, m, s_full = parts
            s, ms = s_full.split('.')
            return int(h) * 3600 + int(m) * 60 + int(s) + int(ms) / 1000.0
        except (ValueError, AttributeError):
            return 0.0

    def copy(self, **changes) -> "Cue":
        """Create a copy with optional field changes."""
        return Cue(
            id=changes.get('id', self.id),
            start=changes.get('start', self.start),
            end=changes.get('end', self.end),
            text=changes.get('text', self.text),
            translated_text=changes.get('translated_text', self.translated_text),
        )


@dataclass(frozen=True)
class ParsedBlock:
    """A block the parser turned into a cue."""
    cue: Cue
    line_no: int


@dataclass(frozen=True)
class SkippedMalformedBlock:
    """A block (or single line) the parser could not use and stepped over."""
    line_no: int
    line: str
    reason: str


BlockOutcome = Union[ParsedBlock, SkippedMalformedBlock]
