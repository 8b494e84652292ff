"""Parse lessons files into a topic index, and topic selection helpers."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from .models import TopicIndex

logger = logging.getLogger(__name__)

DEFAULT_TOPIC_ANNOUNCE = "### "
DEFAULT_SEPARATOR = ";"
COMMENT_PREFIX = "#"
DEFAULT_TOPIC_ID = ""

_SERIES_PATTERN = re.compile(r"^\d+([,:]\d+)*$")


class LessonsFileError(ValueError):
    """Lessons file cannot be read or contains a malformed line."""


@dataclass(frozen=True)
class ParsingParameters:
    """Markers used to split a lessons file into topics and entries."""

    topic_announce: str = DEFAULT_TOPIC_ANNOUNCE
    separator: str = DEFAULT_SEPARATOR


def parse_topics(lines: Iterable[str], params: ParsingParameters, source: str = "<input>") -> TopicIndex:
    """Build a topic index from the lines of a lessons file."""
    if not params.topic_announce or not params.separator:
        raise ValueError("Topic announce and question/answer separator must both be non-empty.")

    topics = TopicIndex()
    current = DEFAULT_TOPIC_ID
    for line_number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        if line.startswith(params.topic_announce):
            current = line[len(params.topic_announce) :].strip()
            topics.get_or_create(current)
            logger.debug("Found topic %r at line %d", current, line_number)
            continue
        if line.startswith(COMMENT_PREFIX):
            continue
        if params.separator not in line:
            raise LessonsFileError(
                f"{source}:{line_number}: expected 'question{params.separator}answer' or a topic line "
                f"starting with {params.topic_announce!r}, got {line!r}"
            )
        question, answer = (part.strip() for part in line.split(params.separator, 1))
        if not question or not answer:
            raise LessonsFileError(f"{source}:{line_number}: question and answer must both be non-empty: {line!r}")
        topics.get_or_create(current).add_entry(question, answer)

    logger.debug("Parsed %d topic(s), %d question(s) from %s", len(topics), topics.question_count(), source)
    return topics


def load_topics_file(path: Path | str, params: ParsingParameters) -> TopicIndex:
    """Read and parse one lessons file."""
    file_path = Path(path)
    try:
        text = file_path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as exc:
        raise LessonsFileError(f"Lessons file not found: {file_path}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise LessonsFileError(f"Could not read lessons file {file_path}: {exc}") from exc
    return parse_topics(text.splitlines(), params, source=str(file_path))


def parse_number_series(series: str) -> list[int]:
    """Expand a topic selection such as ``1:3,5,8:6`` into its numbers.

    ``n:m`` is an inclusive range in either direction. Chained ranges like
    ``1:3:1`` turn around without repeating the pivot.
    """
    text = series.strip()
    if not _SERIES_PATTERN.match(text):
        raise ValueError(f"Invalid topic series {series!r}: use numbers joined by ',' or ':'.")

    numbers: list[int] = []
    for group in text.split(","):
        bounds = [int(part) for part in group.split(":")]
        if len(bounds) == 1:
            numbers.append(bounds[0])
            continue
        for k in range(len(bounds) - 1):
            start, end = bounds[k], bounds[k + 1]
            if start == end:
                if k == 0:
                    numbers.append(start)
                continue
            step = 1 if end > start else -1
            if k >= 1:
                start += step
            numbers.extend(range(start, end + step, step))
    return numbers


def format_topic_ids(numbers: Iterable[int], width: int) -> list[str]:
    """Zero-pad numbers to topic ids of ``width`` digits."""
    return [f"{number:0{width}d}" for number in numbers]


def compute_ranges(numbers: Iterable[int]) -> str:
    """Summarize numbers as comma-separated ``a:b`` runs, e.g. ``1:2,4:6``."""
    ordered = sorted(set(numbers))
    if not ordered:
        return ""

    runs: list[str] = []
    start = previous = ordered[0]
    for number in ordered[1:]:
        if number == previous + 1:
            previous = number
            continue
        runs.append(_format_run(start, previous))
        start = previous = number
    runs.append(_format_run(start, previous))
    return ",".join(runs)


def _format_run(start: int, end: int) -> str:
    return str(start) if start == end else f"{start}:{end}"
