"""Tests for Cue model."""

import pytest
from persub.models import Cue, FAILURE_MARKER, SubtitleFormat


class TestCue:

    def test_creation(self):
        cue = Cue(1, "00:00:01,000", "00:00:03,500", "Hello world")
        assert cue.id == 1
        assert cue.text == "Hello world"
        assert cue.translated_text is None

    def test_timecode_property(self):
        cue = Cue(1, "00:00:01,000", "00:00:03,500", "Test")
        assert cue.timecode == "00:00:01,000 --> 00:00:03,500"

    def test_start_seconds_cached(self):
        cue = Cue(1, "01:30:45,500", "01:30:50,000", "Test")
        # First call
        result1 = cue.start_seconds
        # Second call should use cache
        result2 = cue.start_seconds
        assert result1 == result2 == 5445.5

    def test_vtt_timecode_seconds(self):
        cue = Cue(1, "00:00:02.250", "01:02.500", "Test")
        assert cue.start_seconds == 2.25
        assert cue.end_seconds == 62.5

    def test_invalid_timecode(self):
        cue = Cue(1, "invalid", "00:00:01,000", "Test")
        assert cue.start_seconds == 0.0

    def test_copy(self):
        cue = Cue(1, "00:00:01,000", "00:00:03,500", "Hello")
        copied = cue.copy(translated_text="سلام", end="00:00:05,000")

        # Original unchanged
        assert cue.translated_text is None
        assert cue.end == "00:00:03,500"

        # Copy has new values
        assert copied.translated_text == "سلام"
        assert copied.end == "00:00:05,000"
        assert copied.start == cue.start  # Unchanged field


class TestTranslationState:

    def test_pending(self):
        cue = Cue(1, "a", "b", "Hello")
        assert cue.is_pending
        assert not cue.is_translated
        assert not cue.is_failed

    def test_failed(self):
        cue = Cue(1, "a", "b", "Hello", FAILURE_MARKER)
        assert cue.is_failed
        assert not cue.is_translated
        assert not cue.is_pending

    def test_translated(self):
        cue = Cue(1, "a", "b", "Hello", "سلام")
        assert cue.is_translated
        assert cue.output_text == "سلام"

    def test_output_text_falls_back_to_original(self):
        assert Cue(1, "a", "b", "Hello").output_text == "Hello"
        assert Cue(1, "a", "b", "Hello", "").output_text == "Hello"


class TestSubtitleFormat:

    @pytest.mark.parametrize("fmt,ext", [(SubtitleFormat.SRT, ".srt"), (SubtitleFormat.VTT, ".vtt")])
    def test_extension(self, fmt, ext):
        assert fmt.extension == ext
