"""
Small text helpers shared by the analyzers.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from a11y_audit.app.schemas.issues import Issue


CHARS_PER_PAGE = 3000
LINES_PER_PAGE = 50

SENTENCE_TERMINATORS = (".", "!", "?")

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "is", "are", "was", "were", "be", "been", "being", "have",
        "has", "had", "do", "does", "did", "will", "would", "could", "should",
        "may", "might", "must", "can", "this", "that", "these", "those", "i",
        "you", "he", "she", "it", "we", "they", "me", "him", "her", "us", "them",
    }
)


def split_lines(text: str) -> List[str]:
    return text.split("\n")


def line_offsets(lines: List[str]) -> List[int]:
    """Character offset of the start of each line in the joined text."""
    offsets: List[int] = []
    position = 0
    for line in lines:
        offsets.append(position)
        position += len(line) + 1
    return offsets


def page_for_offset(offset: int) -> int:
    return offset // CHARS_PER_PAGE + 1


def page_for_line(line_number: int) -> int:
    return line_number // LINES_PER_PAGE + 1


def ends_sentence(text: str) -> bool:
    return text.rstrip().endswith(SENTENCE_TERMINATORS)


def file_stem(file_name: str) -> str:
    """File name without directory or final extension."""
    base = file_name.replace("\\", "/").rsplit("/", 1)[-1]
    stem, dot, _ = base.rpartition(".")
    return stem if dot and stem else base


def find_issue(issues: Iterable[Issue], prefix: str) -> Optional[Issue]:
    for issue in issues:
        if issue.description.startswith(prefix):
            return issue
    return None


def window(lines: List[str], index: int, before: int, after: int) -> Tuple[int, int]:
    return max(0, index - before), min(len(lines), index + after + 1)
