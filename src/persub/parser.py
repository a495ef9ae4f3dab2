"""SRT and VTT parsing and loading utilities."""

from __future__ import annotations

import re
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from .config import SUPPORTED_EXTENSIONS
from .errors import ParseError, UnsupportedFormat
from .models import BlockOutcome, Cue, ParsedBlock, SkippedMalformedBlock, SubtitleFormat

logger = logging.getLogger(__name__)

TIMECODE_SEPARATOR = "-->"

# 与 parseInt 一致：只看开头的整数部分
_LEADING_INT = re.compile(r'^[+-]?\d+')

MAX_FILE_SIZE = 50 * 1024 * 1024


def _split_lines(content: str) -> List[str]:
    return content.replace('\r\n', '\n').replace('\r', '\n').split('\n')


def _parse_int(line: str) -> Optional[int]:
    match = _LEADING_INT.match(line.strip())
    return int(match.group()) if match else None


def _split_timecode(line: str) -> Optional[Tuple[str, str]]:
    parts = line.split(TIMECODE_SEPARATOR)
    if len(parts) != 2:
        return None
    return parts[0].strip(), parts[1].strip()


def scan_srt_blocks(content: str) -> Iterator[BlockOutcome]:
    """
    Walk SRT content block by block.

    Yields a ParsedBlock for every usable block and a SkippedMalformedBlock
    for every position the scanner had to step over. Line numbers are 1-based.
    """
    lines = _split_lines(content)
    n = len(lines)
    i = 0

    while i < n:
        id_line = lines[i].strip()

        if not id_line:
            i += 1
            continue

        cue_id = _parse_int(id_line)
        if cue_id is None or i + 1 >= n or TIMECODE_SEPARATOR not in lines[i + 1]:
            reason = "not an identifier" if cue_id is None else "no timecode line follows"
            yield SkippedMalformedBlock(i + 1, id_line, reason)
            i += 1
            continue

        i += 1
        time_line = lines[i].strip()
        timecode = _split_timecode(time_line)
        if timecode is None:
            yield SkippedMalformedBlock(i + 1, time_line, "malformed timecode line")
            i += 1
            continue

        block_start = i
        i += 1
        text_block: List[str] = []
        while i < n and lines[i].strip() != '':
            text_block.append(lines[i].strip())
            i += 1

        if text_block:
            start, end = timecode
            yield ParsedBlock(Cue(cue_id, start, end, '\n'.join(text_block)), block_start)
        else:
            yield SkippedMalformedBlock(block_start + 1, time_line, "no text")

        if i < n and lines[i].strip() == '':
            i += 1


def scan_vtt_blocks(content: str) -> Iterator[BlockOutcome]:
    """Walk VTT content cue by cue, yielding tagged outcomes like scan_srt_blocks."""
    lines = _split_lines(content)
    n = len(lines)
    i = 0
    id_counter = 1

    # 跳过 WEBVTT 头以及开头的空行、NOTE
    while i < n:
        line = lines[i].strip()
        if line.startswith('WEBVTT'):
            i += 1
            continue
        if not line.startswith('NOTE') and line != '':
            break
        i += 1

    while i < n:
        while i < n and (lines[i].strip() == '' or lines[i].strip().startswith('NOTE')):
            i += 1
        if i >= n:
            break

        current = lines[i].strip()

        if TIMECODE_SEPARATOR in current:
            time_line = current
            text_start = i + 1
        elif i + 1 < n and TIMECODE_SEPARATOR in lines[i + 1]:
            # 当前行是 cue 标识符，丢弃
            time_line = lines[i + 1].strip()
            text_start = i + 2
        else:
            yield SkippedMalformedBlock(i + 1, current, "no timecode line")
            i += 1
            continue

        timecode = _split_timecode(time_line)
        if timecode is None:
            yield SkippedMalformedBlock(text_start, time_line, "malformed timecode line")
            i = text_start
            continue
        start, end = (t.replace(',', '.') for t in timecode)

        text_block: List[str] = []
        i = text_start
        while i < n and lines[i].strip() != '':
            text_line = lines[i].strip()
            if not text_line.startswith('NOTE'):
                text_block.append(text_line)
            i += 1

        if text_block:
            yield ParsedBlock(Cue(id_counter, start, end, '\n'.join(text_block)), text_start)
            id_counter += 1
        else:
            yield SkippedMalformedBlock(text_start, time_line, "no text")


def _collect(outcomes: Iterator[BlockOutcome], label: str) -> List[Cue]:
    cues: List[Cue] = []
    for outcome in outcomes:
        if isinstance(outcome, ParsedBlock):
            cues.append(outcome.cue)
        else:
            logger.debug(f"{label}: skipped line {outcome.line_no} ({outcome.reason}): {outcome.line!r}")
    return cues


def parse_srt(content: str) -> List[Cue]:
    """
    Parse SRT file content into a list of Cue objects.

    Malformed blocks are skipped, never fatal.

    Args:
        content: Raw SRT file content as string

    Returns:
        List of parsed cues in file order
    """
    if not content or not content.strip():
        return []

    cues = _collect(scan_srt_blocks(content), "SRT")
    if not cues:
        logger.warning("No valid SRT entries found in content")
    return cues


def parse_vtt(content: str) -> List[Cue]:
    """
    Parse VTT file content into a list of Cue objects.

    Cue identifiers are discarded; ids are numbered from 1 in file order.
    """
    if not content or not content.strip():
        return []

    cues = _collect(scan_vtt_blocks(content), "VTT")
    if not cues:
        logger.warning("No valid VTT cues found in content")
    return cues


def detect_format(filename: str | Path) -> SubtitleFormat:
    """
    Determine the subtitle format from a file name.

    Raises:
        UnsupportedFormat: extension is neither .srt nor .vtt
    """
    suffix = Path(filename).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormat("Unsupported file type. Please upload an .srt or .vtt file.")
    return SubtitleFormat(suffix[1:])


def parse_subtitles(content: str, fmt: SubtitleFormat) -> List[Cue]:
    """
    Parse content in the given format.

    Blank content yields an empty list. Non-blank content that yields no
    cues raises ParseError.
    """
    content = content.lstrip('\ufeff')
    if fmt is SubtitleFormat.SRT:
        cues = parse_srt(content)
    else:
        cues = parse_vtt(content)

    if not cues and content.strip():
        name = fmt.value.upper()
        raise ParseError(
            f"Could not parse {name} file. It might be empty, malformed, "
            f"or not a valid {name} file."
        )
    return cues


def validate_subtitle_file(path: Path) -> Optional[str]:
    """
    Validate subtitle file before processing.

    Args:
        path: Path to SRT or VTT file

    Returns:
        Error message if invalid, None if valid
    """
    if not path.exists():
        return f"File not found: {path}"

    if not path.is_file():
        return f"Not a file: {path}"

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        return f"Invalid file extension: {suffix} (expected .srt or .vtt)"

    size = path.stat().st_size
    if size > MAX_FILE_SIZE:
        return f"File too large: {size / 1024 / 1024:.1f}MB (max 50MB)"

    return None


def load_subtitle_file(path: Path) -> Tuple[List[Cue], SubtitleFormat]:
    """Read, detect and parse a subtitle file."""
    fmt = detect_format(path)
    content = path.read_text(encoding="utf-8-sig")
    cues = parse_subtitles(content, fmt)
    logger.info(f"Parsed {len(cues)} cues from {path.name}")
    return cues, fmt
