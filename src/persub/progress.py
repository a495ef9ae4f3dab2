"""Progress tracking for translation runs."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class RunMode(Enum):
    """Which operation produced a run."""
    FRESH = "fresh"
    RESUME = "resume"
    RETRY = "retry"


@dataclass
class CueOutcome:
    """单条 cue 的处理结果。"""
    index: int
    cue_id: int
    original: str
    translated: Optional[str]
    success: bool
    skipped: bool = False
    error: str = ""


@dataclass
class TranslationProgress:
    """翻译进度记录。"""

    mode: RunMode
    total: int
    completed: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    started_at: str = field(default_factory=lambda: datetime.now().isoformat())
    updated_at: str = ""

    @classmethod
    def create(cls, mode: RunMode, total: int) -> "TranslationProgress":
        """创建新的进度记录。"""
        progress = cls(mode=mode, total=total)
        progress.updated_at = progress.started_at
        return progress

    def record(self, outcome: CueOutcome) -> None:
        """记录一条结果。"""
        if outcome.skipped:
            self.skipped.append(outcome.index)
        elif outcome.success:
            self.completed.append(outcome.index)
        else:
            self.failed.append(outcome.index)
        self.updated_at = datetime.now().isoformat()

    @property
    def is_complete(self) -> bool:
        """检查是否全部完成。"""
        return len(self.completed) + len(self.failed) + len(self.skipped) >= self.total

    @property
    def completion_rate(self) -> float:
        """完成率 (0-1)。"""
        if self.total == 0:
            return 1.0
        return (len(self.completed) + len(self.failed) + len(self.skipped)) / self.total

    def summary(self) -> str:
        return (
            f"{self.mode.value}: {len(self.completed)} translated, "
            f"{len(self.failed)} failed, {len(self.skipped)} already done "
            f"(of {self.total})"
        )
