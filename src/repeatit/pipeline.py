"""Delivery pipeline: merge question and command streams and render them."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from .channels import Channel, ChannelClosed

logger = logging.getLogger(__name__)

ANSWER_PREFIX = "     --> "
SEPARATOR_LINE = "-" * 27


class EventKind(Enum):
    """Kind of item travelling through the publish stream."""

    QUESTION = "question"
    ANSWER = "answer"
    COMMAND = "command"


@dataclass(frozen=True)
class Event:
    """One item on its way to the output sink."""

    kind: EventKind
    text: str


class DeliveryPipeline:
    """Three worker threads turning session events into rendered lines.

    Two merge stages relay the ``questions`` and ``commands`` channels into a
    shared ``publisher`` channel; the render stage writes publisher items to
    ``output`` and stops on its own once ``pass_limit`` passes are rendered.
    """

    def __init__(self, output: TextIO, question_count: int, pass_limit: int) -> None:
        if question_count < 1:
            raise ValueError("A delivery pipeline needs at least one question per pass.")
        self.output = output
        self.question_count = question_count
        self.pass_limit = pass_limit
        self.questions: Channel[Event] = Channel("questions")
        self.commands: Channel[Event] = Channel("commands")
        self.publisher: Channel[Event] = Channel("publisher")
        self.loops_rendered = 0
        self.limit_reached = False
        self.error: Exception | None = None
        self._active_merges = 0
        self._merge_lock = threading.Lock()
        self._threads: list[threading.Thread] = []

    def start(self) -> None:
        """Start the merge and render threads."""
        if self._threads:
            raise RuntimeError("Delivery pipeline already started.")
        self._active_merges = 2
        self._threads = [
            threading.Thread(target=self._merge, args=(self.questions,), name="repeatit-merge-questions"),
            threading.Thread(target=self._render, name="repeatit-render"),
            threading.Thread(target=self._merge, args=(self.commands,), name="repeatit-merge-commands"),
        ]
        for thread in self._threads:
            thread.start()

    def close_inputs(self) -> None:
        """Close the session-facing channels; the stages then wind down."""
        self.questions.close()
        self.commands.close()

    def join(self) -> None:
        """Wait for every stage to stop and re-raise a render failure, if any."""
        for thread in self._threads:
            thread.join()
        if self.error is not None:
            raise self.error

    def _merge(self, source: Channel[Event]) -> None:
        try:
            for event in source:
                if not event.text:
                    continue
                try:
                    self.publisher.send(event)
                except ChannelClosed:
                    logger.debug("Publisher closed, %s stage stops relaying", source.name)
                    source.close()
                    return
        finally:
            with self._merge_lock:
                self._active_merges -= 1
                last = self._active_merges == 0
            if last:
                self.publisher.close()

    def _render(self) -> None:
        per_pass = 2 * self.question_count
        items = 0
        try:
            self._write(f"Nb of questions: {self.question_count}")
            if not self._next_pass():
                return
            while True:
                try:
                    event = self.publisher.recv()
                except ChannelClosed:
                    logger.debug("Publisher closed after %d item(s), render stage stops", items)
                    return
                if event.kind is EventKind.COMMAND:
                    logger.debug("Command received: %r", event.text)
                    continue
                items += 1
                if items % 2 == 1:
                    self._write(event.text)
                else:
                    self._write(ANSWER_PREFIX + event.text)
                    self._write(SEPARATOR_LINE)
                if items % per_pass == 0 and not self._next_pass():
                    return
        except Exception as exc:
            logger.debug("Render stage failed: %r", exc)
            self.error = exc
        finally:
            self.publisher.close()

    def _next_pass(self) -> bool:
        """Announce the next pass, or the end of the drill once the limit is passed."""
        self.loops_rendered += 1
        if self.loops_rendered > self.pass_limit:
            self.limit_reached = True
            self._write(f"Limit reached. Exiting. Number of loops set to: {self.pass_limit}")
            return False
        self._write(f"Loop ({self.loops_rendered}/{self.pass_limit})")
        return True

    def _write(self, line: str) -> None:
        self.output.write(line + "\n")
        self.output.flush()
