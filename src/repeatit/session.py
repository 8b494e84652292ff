"""Drill session: sequence questions over repeated passes."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable
from typing import TextIO

from .models import Order, QuestionBank, SessionConfig
from .pipeline import DeliveryPipeline, Event, EventKind

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], None]


class EmptyQuestionSetError(ValueError):
    """The selected topics contain no question."""


class DrillSession:
    """Push the questions of a bank through a delivery pipeline, pass after pass."""

    def __init__(
        self,
        bank: QuestionBank,
        config: SessionConfig,
        pipeline: DeliveryPipeline | None = None,
        *,
        input_stream: TextIO,
        output: TextIO,
        rng: random.Random | None = None,
        sleep: SleepFn = time.sleep,
    ) -> None:
        if bank.count() == 0:
            raise EmptyQuestionSetError("Number of questions is zero. Please check your file and topic selection.")
        self.bank = bank
        self.config = config
        self.input_stream = input_stream
        self.output = output
        self.rng = rng if rng is not None else random.Random()
        self.sleep = sleep
        self.index = 0
        self.emitted = 0
        self.loops = 0
        self.used: set[int] = set()
        self.pipeline = pipeline

    def run(self) -> int:
        """Run the drill to completion and return the number of questions asked."""
        pipeline = self.pipeline
        if pipeline is None:
            pipeline = DeliveryPipeline(self.output, self.bank.count(), self.config.pass_limit)
            self.pipeline = pipeline
        pipeline.start()
        try:
            self._drill(pipeline)
        finally:
            pipeline.close_inputs()
            # raises the render failure, if any, in place of ChannelClosed
            pipeline.join()
        passes = min(self.loops, self.config.pass_limit)
        logger.info("Session over after %d question(s) in %d pass(es)", self.emitted, passes)
        return self.emitted

    def _drill(self, pipeline: DeliveryPipeline) -> None:
        total = self.bank.count()
        while True:
            if self.emitted % total == 0:
                self.loops += 1
                self.used.clear()
                if self.loops > self.config.pass_limit:
                    logger.debug("Pass limit %d reached", self.config.pass_limit)
                    return

            index = self._select_index(total)
            question, answer = self.bank.question(index), self.bank.answer(index)
            if self.config.reversed:
                question, answer = answer, question

            logger.debug("Asking question #%d: %r", index, question)
            pipeline.questions.send(Event(EventKind.QUESTION, question))
            if self.config.interactive:
                line = self.input_stream.readline()
                if not line:
                    logger.warning("Input closed, ending the session early")
                    return
                pipeline.commands.send(Event(EventKind.COMMAND, line.rstrip("\r\n")))
            else:
                self.sleep(self.config.pause)
            pipeline.questions.send(Event(EventKind.ANSWER, answer))

            if self.config.order is Order.LINEAR:
                self.index = (self.index + 1) % total
            self.emitted += 1

    def _select_index(self, total: int) -> int:
        match self.config.order:
            case Order.LINEAR:
                index = self.index
            case Order.RANDOM:
                index = self.rng.randrange(total)
                if self.config.no_repeat:
                    while index in self.used:
                        index = self.rng.randrange(total)
                    self.used.add(index)
                self.index = index
        return index


def run_drill(
    bank: QuestionBank,
    config: SessionConfig,
    input_stream: TextIO,
    output: TextIO,
    *,
    rng: random.Random | None = None,
    sleep: SleepFn = time.sleep,
) -> int:
    """Drill ``bank`` with ``config`` and return the number of questions asked."""
    session = DrillSession(bank, config, input_stream=input_stream, output=output, rng=rng, sleep=sleep)
    return session.run()
