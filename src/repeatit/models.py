"""Core domain models: question banks, topic index and session configuration."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum

DEFAULT_PAUSE_SECONDS = 2.0
DEFAULT_PASS_LIMIT = 1


class QuestionIndexError(IndexError):
    """Raised when a question bank is read outside of its bounds."""


class Order(Enum):
    """Order in which questions of one pass are presented."""

    LINEAR = "linear"
    RANDOM = "random"


class Mode(Enum):
    """Top-level action requested on the command line."""

    DRILL = "drill"
    SUMMARY = "summary"
    SHELL = "shell"


@dataclass
class QuestionBank:
    """Ordered question/answer pairs; answers[i] matches questions[i]."""

    questions: list[str] = field(default_factory=list)
    answers: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if len(self.questions) != len(self.answers):
            raise ValueError(
                f"Questions and answers differ in length ({len(self.questions)} != {len(self.answers)})."
            )

    def count(self) -> int:
        """Return the number of pairs."""
        return len(self.questions)

    def __len__(self) -> int:
        return len(self.questions)

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(zip(self.questions, self.answers))

    def question(self, index: int) -> str:
        """Return the question stored at ``index``."""
        self._check_index(index)
        return self.questions[index]

    def answer(self, index: int) -> str:
        """Return the answer stored at ``index``."""
        self._check_index(index)
        return self.answers[index]

    def add_entry(self, question: str, answer: str) -> None:
        """Append one matched pair."""
        self.questions.append(question)
        self.answers.append(answer)

    def concatenate(self, *banks: QuestionBank) -> None:
        """Append every pair of ``banks``, in argument order."""
        for bank in banks:
            if bank.count() == 0:
                continue
            self.questions.extend(bank.questions)
            self.answers.extend(bank.answers)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self.questions):
            raise QuestionIndexError(f"Question index {index} out of range [0, {len(self.questions)}).")


def topic_sort_key(topic_id: str) -> tuple[int, int, str]:
    """Sort numeric topic ids numerically, before any non-numeric id."""
    if topic_id.isdecimal():
        return (0, int(topic_id), topic_id)
    return (1, 0, topic_id)


class TopicIndex:
    """Maps topic ids to the question bank of that topic."""

    def __init__(self) -> None:
        self._banks: dict[str, QuestionBank] = {}

    def __contains__(self, topic_id: object) -> bool:
        return topic_id in self._banks

    def __len__(self) -> int:
        return len(self._banks)

    def get_or_create(self, topic_id: str) -> QuestionBank:
        """Return the stored bank for ``topic_id``, creating an empty one if absent.

        The returned bank is the instance held by the index, so mutating it
        updates the index.
        """
        bank = self._banks.get(topic_id)
        if bank is None:
            bank = QuestionBank()
            self._banks[topic_id] = bank
        return bank

    def names(self) -> set[str]:
        """Return the known topic ids."""
        return set(self._banks)

    def sorted_names(self) -> list[str]:
        """Return topic ids in display order."""
        return sorted(self._banks, key=topic_sort_key)

    def question_count(self) -> int:
        """Return the number of pairs across all topics."""
        return sum(bank.count() for bank in self._banks.values())

    def build_flat_set(self, *topic_ids: str) -> QuestionBank:
        """Flatten the named topics, or every topic when none is named, into one bank.

        Unknown ids contribute nothing but are registered as empty topics.
        """
        selected = topic_ids if topic_ids else tuple(self.sorted_names())
        flat = QuestionBank()
        for topic_id in selected:
            flat.concatenate(self.get_or_create(topic_id))
        return flat


@dataclass(frozen=True)
class SessionConfig:
    """Resolved drill options; fixed for the duration of a session."""

    interactive: bool = False
    pause: float = DEFAULT_PAUSE_SECONDS
    order: Order = Order.RANDOM
    reversed: bool = False
    pass_limit: int = DEFAULT_PASS_LIMIT
    no_repeat: bool = False

    def __post_init__(self) -> None:
        if self.pass_limit < 1:
            raise ValueError(f"Number of loops must be at least 1, got {self.pass_limit}.")
        if self.pause < 0:
            raise ValueError(f"Pause must not be negative, got {self.pause}.")
