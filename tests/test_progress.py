"""Tests for progress tracking."""

import pytest
from persub.progress import CueOutcome, RunMode, TranslationProgress


def _outcome(index, success=True, skipped=False):
    return CueOutcome(index, index + 1, "text", "ترجمه" if success else None, success, skipped)


class TestTranslationProgress:

    def test_create(self):
        progress = TranslationProgress.create(RunMode.FRESH, 3)
        assert progress.total == 3
        assert progress.started_at == progress.updated_at
        assert not progress.is_complete
        assert progress.completion_rate == 0.0

    def test_record(self):
        progress = TranslationProgress.create(RunMode.RESUME, 3)
        progress.record(_outcome(0, skipped=True))
        progress.record(_outcome(1, success=False))
        progress.record(_outcome(2))

        assert progress.skipped == [0]
        assert progress.failed == [1]
        assert progress.completed == [2]
        assert progress.is_complete
        assert progress.completion_rate == 1.0

    def test_empty_run_is_complete(self):
        progress = TranslationProgress.create(RunMode.RETRY, 0)
        assert progress.completion_rate == 1.0

    def test_summary(self):
        progress = TranslationProgress.create(RunMode.RETRY, 2)
        progress.record(_outcome(0, success=False))
        assert progress.summary() == "retry: 0 translated, 1 failed, 0 already done (of 2)"
