"""Render cues back to SRT / VTT text."""

from __future__ import annotations

import re
import logging
from pathlib import Path
from typing import Optional, Sequence

from .config import OUTPUT_PREFIX
from .models import Cue, SubtitleFormat

logger = logging.getLogger(__name__)


def format_srt(cues: Sequence[Cue]) -> str:
    """
    Render cues as SRT.

    Translated text is used when present, the original otherwise. Timecodes
    use ``,`` as the sub-second separator.
    """
    blocks = []
    for cue in cues:
        start = cue.start.replace('.', ',')
        end = cue.end.replace('.', ',')
        blocks.append(f"{cue.id}\n{start} --> {end}\n{cue.output_text}\n")
    return "\n".join(blocks)


def format_vtt(cues: Sequence[Cue]) -> str:
    """Render cues as WebVTT, without cue identifiers."""
    blocks = []
    for cue in cues:
        start = cue.start.replace(',', '.')
        end = cue.end.replace(',', '.')
        blocks.append(f"{start} --> {end}\n{cue.output_text}")
    return "WEBVTT\n\n" + "\n\n".join(blocks)


def format_subtitles(cues: Sequence[Cue], fmt: SubtitleFormat) -> str:
    if fmt is SubtitleFormat.VTT:
        return format_vtt(cues)
    return format_srt(cues)


def output_filename(
    input_name: Optional[str],
    subject: str,
    fmt: SubtitleFormat
) -> str:
    """
    Derive the output file name.

    ``movie.srt`` with subject ``TV Series`` becomes
    ``translated_movie_tv-series.srt``.
    """
    if not input_name:
        return f"{OUTPUT_PREFIX}subtitles{fmt.extension}"

    name = Path(input_name).name
    base = name[:name.rfind('.')] if '.' in name else name
    slug = re.sub(r'\s+', '-', subject.lower())
    return f"{OUTPUT_PREFIX}{base}_{slug}{fmt.extension}"


def save_subtitles(cues: Sequence[Cue], path: Path, fmt: SubtitleFormat) -> None:
    """
    Save cues to a subtitle file.

    Args:
        cues: Cues to save
        path: Output file path
        fmt: Output format
    """
    # 确保父目录存在
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8") as f:
        f.write(format_subtitles(cues, fmt))

    logger.info(f"Saved {len(cues)} cues to {path}")
