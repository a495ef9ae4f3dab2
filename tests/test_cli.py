"""Tests for the command-line front end."""

import asyncio

import pytest

from persub import cli
from persub.errors import TranslationFailure
from persub.models import Cue, FAILURE_MARKER


SRT = (
    "1\n00:00:01,000 --> 00:00:02,000\nHello\n\n"
    "2\n00:00:03,000 --> 00:00:04,000\nWorld\n"
)


class StubGateway:

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)

    async def translate(self, main_text, *args):
        if main_text in self.fail_on:
            raise TranslationFailure("nope")
        return f"fa:{main_text}"


@pytest.fixture
def no_env_key(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)


def use_gateway(monkeypatch, gateway):
    monkeypatch.setattr(cli.TranslationGateway, "from_config", classmethod(lambda cls, config: gateway))


class TestParseArguments:

    def test_defaults(self):
        args = cli.parse_arguments(["movie.srt"])
        assert args.input_path == "movie.srt"
        assert args.output_path is None
        assert args.subject == "Film"
        assert args.context_window == 4
        assert args.start == 1
        assert args.retries == 0

    def test_subject_choice(self):
        args = cli.parse_arguments(["movie.srt", "--subject", "TV Series"])
        assert args.subject == "TV Series"
        with pytest.raises(SystemExit):
            cli.parse_arguments(["movie.srt", "--subject", "Cooking"])


class TestReviewTable:

    def test_rows(self):
        cues = [
            Cue(1, "00:00:01,000", "00:00:02,000", "Hello\nthere", "سلام"),
            Cue(2, "00:00:03,000", "00:00:04,000", "World", FAILURE_MARKER),
            Cue(3, "00:00:05,000", "00:00:06,000", "Again"),
        ]
        lines = cli.format_review_table(cues).splitlines()
        assert lines[0].startswith("#")
        assert "Hello / there" in lines[2]
        assert FAILURE_MARKER in lines[3]
        assert lines[4].endswith("-")

    def test_long_text_truncated(self):
        cues = [Cue(1, "a", "b", "x" * 100)]
        table = cli.format_review_table(cues, width=20)
        assert "x" * 17 + "..." in table
        assert "x" * 18 not in table


class TestMainAsync:

    def test_translates_and_writes_output(self, tmp_path, monkeypatch):
        source = tmp_path / "movie.srt"
        source.write_text(SRT, encoding="utf-8")
        use_gateway(monkeypatch, StubGateway())

        args = cli.parse_arguments([str(source), "--api-key", "k", "--subject", "Documentary"])
        assert asyncio.run(cli.main_async(args)) == 0

        output = tmp_path / "translated_movie_documentary.srt"
        assert output.read_text(encoding="utf-8") == (
            "1\n00:00:01,000 --> 00:00:02,000\nfa:Hello\n\n"
            "2\n00:00:03,000 --> 00:00:04,000\nfa:World\n"
        )

    def test_explicit_output_path(self, tmp_path, monkeypatch):
        source = tmp_path / "movie.srt"
        source.write_text(SRT, encoding="utf-8")
        use_gateway(monkeypatch, StubGateway(fail_on={"World"}))

        target = tmp_path / "out.srt"
        args = cli.parse_arguments([str(source), str(target), "--api-key", "k", "--retries", "1"])
        assert asyncio.run(cli.main_async(args)) == 0
        assert FAILURE_MARKER in target.read_text(encoding="utf-8")

    def test_missing_key(self, tmp_path, no_env_key, capsys):
        source = tmp_path / "movie.srt"
        source.write_text(SRT, encoding="utf-8")

        args = cli.parse_arguments([str(source), "--review"])
        assert asyncio.run(cli.main_async(args)) == 1
        # 原文仍可查看
        assert "Hello" in capsys.readouterr().out
        assert list(tmp_path.iterdir()) == [source]

    def test_malformed_input(self, tmp_path):
        source = tmp_path / "movie.vtt"
        source.write_text("just some text\n", encoding="utf-8")

        args = cli.parse_arguments([str(source), "--api-key", "k"])
        assert asyncio.run(cli.main_async(args)) == 1

    def test_nothing_translated(self, tmp_path, monkeypatch):
        source = tmp_path / "movie.srt"
        source.write_text(SRT, encoding="utf-8")
        use_gateway(monkeypatch, StubGateway(fail_on={"Hello", "World"}))

        args = cli.parse_arguments([str(source), "--api-key", "k"])
        assert asyncio.run(cli.main_async(args)) == 1
        assert list(tmp_path.iterdir()) == [source]

    def test_start_out_of_range(self, tmp_path):
        source = tmp_path / "movie.srt"
        source.write_text(SRT, encoding="utf-8")

        args = cli.parse_arguments([str(source), "--api-key", "k", "--start", "5"])
        assert asyncio.run(cli.main_async(args)) == 1
