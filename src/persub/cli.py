"""Command-line interface for persub."""

from __future__ import annotations

import asyncio
import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from tqdm import tqdm

from .config import (
    AVAILABLE_TEXT_MODELS,
    DEFAULT_CONTEXT_WINDOW,
    DEFAULT_MODEL,
    MAX_CONTEXT_WINDOW,
    SUBTITLE_SUBJECTS,
    TranslatorConfig,
)
from .errors import PersubError
from .formatter import save_subtitles
from .models import Cue
from .parser import validate_subtitle_file
from .session import TranslationSession
from .translator import TranslationGateway

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%H:%M:%S"
    )


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Translate SRT / VTT subtitles into Persian with a language model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s movie.srt                          # Basic translation
  %(prog)s movie.vtt -o out.vtt               # Specify output
  %(prog)s lecture.srt --subject Documentary  # Pick a subject profile
  %(prog)s movie.srt --retries 2              # Retry failed lines twice
  %(prog)s movie.srt --review                 # Print a review table
        """
    )

    # Positional arguments
    parser.add_argument("input_path", help="Input .srt or .vtt file path")
    parser.add_argument("output_path", nargs='?', default=None, help="Output file path")
    parser.add_argument("-o", "--output", dest="output_option", default=None, help=argparse.SUPPRESS)

    # Translation options
    parser.add_argument("--subject", choices=SUBTITLE_SUBJECTS, default=SUBTITLE_SUBJECTS[0],
                        help="Subject profile used to frame the translation")
    parser.add_argument("--model", dest="model_name", choices=AVAILABLE_TEXT_MODELS, default=DEFAULT_MODEL)
    parser.add_argument("--context-window", type=int, default=DEFAULT_CONTEXT_WINDOW,
                        help=f"Lines of context before and after each cue (0-{MAX_CONTEXT_WINDOW})")
    parser.add_argument("--start", type=int, default=1, help="Start at the N-th cue (1-based)")
    parser.add_argument("--retries", type=int, default=0, help="Retry passes over failed lines")

    # API options
    parser.add_argument("--api-key", help="API key (or set GEMINI_API_KEY)")
    parser.add_argument("--base-url", default=None, help="OpenAI-compatible endpoint")

    # Output
    parser.add_argument("--review", action="store_true", help="Print a review table when done")

    # Misc
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")

    return parser.parse_args(argv)


def _one_line(text: str, width: int) -> str:
    text = text.replace("\n", " / ")
    if len(text) > width:
        return text[:width - 3] + "..."
    return text


def format_review_table(cues: Sequence[Cue], width: int = 40) -> str:
    """Render cues as a plain text table: id, time, original, translation."""
    rows = [("#", "Time", "Original", "Persian")]
    for cue in cues:
        if cue.translated_text is None:
            translated = "-"
        else:
            translated = cue.translated_text
        rows.append((
            str(cue.id),
            cue.timecode,
            _one_line(cue.text, width),
            _one_line(translated, width),
        ))

    widths = [max(len(row[col]) for row in rows) for col in range(4)]
    lines = []
    for n, row in enumerate(rows):
        lines.append(" | ".join(cell.ljust(widths[col]) for col, cell in enumerate(row)).rstrip())
        if n == 0:
            lines.append("-+-".join("-" * w for w in widths))
    return "\n".join(lines)


async def run_translation(session: TranslationSession, start_index: int, retries: int) -> None:
    """Drive a full run plus retry passes with progress bars."""
    total = len(session.original) - start_index
    with tqdm(total=total, desc="Translating", unit="line") as bar:
        async for outcome in session.run(start_index):
            bar.update(1)
            if not outcome.success:
                bar.set_postfix_str(f"failed: {session.failure_count}")

    for attempt in range(1, retries + 1):
        targets = session.retry_targets()
        if not targets:
            break
        logger.info(f"Retry pass {attempt}/{retries}: {len(targets)} line(s)")
        with tqdm(total=len(targets), desc=f"Retry {attempt}", unit="line") as bar:
            async for _ in session.retry_failed():
                bar.update(1)


async def main_async(args: argparse.Namespace) -> int:
    """Main async workflow."""
    config = TranslatorConfig.from_args(args)

    # 验证输入文件
    in_path = Path(args.input_path).expanduser().resolve()
    error = validate_subtitle_file(in_path)
    if error:
        logger.error(error)
        return 1

    session = TranslationSession(
        subject=config.subject,
        model=config.model_name,
        context_window=config.context_window,
    )

    logger.info(f"Reading: {in_path}")
    try:
        cues = session.load_file(in_path)
    except PersubError as e:
        logger.error(str(e))
        return 1

    if not cues:
        logger.error("No subtitle cues to translate")
        return 1

    # 配置错误只阻止翻译，不阻止查看原文
    error = config.validate()
    if error:
        logger.error(error)
        if args.review:
            print(format_review_table(session.original))
        return 1

    if not 1 <= args.start <= len(cues):
        logger.error(f"--start must be within 1-{len(cues)}, got {args.start}")
        return 1

    session.gateway = TranslationGateway.from_config(config)

    await run_translation(session, args.start - 1, config.retry_passes)

    if session.error:
        logger.warning(session.error)

    if args.review:
        print(format_review_table(session.translated))

    if not session.can_download:
        logger.error("No line was translated, nothing written")
        return 1

    output = args.output_path or args.output_option
    if output:
        out_path = Path(output)
    else:
        out_path = in_path.with_name(session.output_filename())

    save_subtitles(session.translated, out_path, session.source_format)

    ok = sum(1 for c in session.translated if c.is_translated)
    failed = session.failure_count
    logger.info(f"Done! {ok}/{len(cues)} translated, {failed} failed. Saved to {out_path}")

    return 0


def main() -> None:
    """CLI entry point."""
    args = parse_arguments()
    setup_logging(args.verbose)

    try:
        exit_code = asyncio.run(main_async(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
        sys.exit(130)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
