import io

import pytest

from repeatit.pipeline import ANSWER_PREFIX, SEPARATOR_LINE, DeliveryPipeline, Event, EventKind


def _question(text: str) -> Event:
    return Event(EventKind.QUESTION, text)


def _answer(text: str) -> Event:
    return Event(EventKind.ANSWER, text)


def test_renders_passes_and_stops_at_limit() -> None:
    output = io.StringIO()
    pipeline = DeliveryPipeline(output, question_count=1, pass_limit=2)
    pipeline.start()
    for _ in range(2):
        pipeline.questions.send(_question("Q"))
        pipeline.questions.send(_answer("A"))
    pipeline.close_inputs()
    pipeline.join()

    assert output.getvalue().splitlines() == [
        "Nb of questions: 1",
        "Loop (1/2)",
        "Q",
        ANSWER_PREFIX + "A",
        SEPARATOR_LINE,
        "Loop (2/2)",
        "Q",
        ANSWER_PREFIX + "A",
        SEPARATOR_LINE,
        "Limit reached. Exiting. Number of loops set to: 2",
    ]
    assert pipeline.limit_reached is True
    assert pipeline.loops_rendered == 3
    assert pipeline.publisher.closed is True


def test_commands_are_not_rendered_nor_counted() -> None:
    output = io.StringIO()
    pipeline = DeliveryPipeline(output, question_count=1, pass_limit=1)
    pipeline.start()
    pipeline.questions.send(_question("Q"))
    pipeline.commands.send(Event(EventKind.COMMAND, "typed text"))
    pipeline.commands.send(Event(EventKind.COMMAND, ""))
    pipeline.questions.send(_answer("A"))
    pipeline.close_inputs()
    pipeline.join()

    lines = output.getvalue().splitlines()
    assert "typed text" not in output.getvalue()
    assert lines[2:] == ["Q", ANSWER_PREFIX + "A", SEPARATOR_LINE, "Limit reached. Exiting. Number of loops set to: 1"]


def test_empty_items_are_dropped_by_merge_stage() -> None:
    output = io.StringIO()
    pipeline = DeliveryPipeline(output, question_count=1, pass_limit=1)
    pipeline.start()
    pipeline.questions.send(_question(""))
    pipeline.questions.send(_question("Q"))
    pipeline.questions.send(_answer("A"))
    pipeline.close_inputs()
    pipeline.join()

    assert output.getvalue().splitlines()[2:4] == ["Q", ANSWER_PREFIX + "A"]


def test_closing_inputs_early_stops_render_without_limit_line() -> None:
    output = io.StringIO()
    pipeline = DeliveryPipeline(output, question_count=2, pass_limit=1)
    pipeline.start()
    pipeline.questions.send(_question("Q0"))
    pipeline.close_inputs()
    pipeline.join()

    assert output.getvalue().splitlines() == ["Nb of questions: 2", "Loop (1/1)", "Q0"]
    assert pipeline.limit_reached is False
    assert pipeline.publisher.closed is True


def test_question_is_written_before_send_returns() -> None:
    output = io.StringIO()
    pipeline = DeliveryPipeline(output, question_count=1, pass_limit=1)
    pipeline.start()
    pipeline.questions.send(_question("visible"))
    assert output.getvalue().splitlines()[-1] == "visible"
    pipeline.questions.send(_answer("A"))
    pipeline.close_inputs()
    pipeline.join()


def test_pipeline_requires_questions_and_single_start() -> None:
    with pytest.raises(ValueError):
        DeliveryPipeline(io.StringIO(), question_count=0, pass_limit=1)

    pipeline = DeliveryPipeline(io.StringIO(), question_count=1, pass_limit=1)
    pipeline.start()
    with pytest.raises(RuntimeError):
        pipeline.start()
    pipeline.close_inputs()
    pipeline.join()


class _BrokenOutput(io.StringIO):
    def __init__(self, fail_after: int) -> None:
        super().__init__()
        self.fail_after = fail_after

    def write(self, text: str) -> int:
        if self.fail_after == 0:
            raise BrokenPipeError(32, "Broken pipe")
        self.fail_after -= 1
        return super().write(text)


def test_render_failure_is_raised_by_join() -> None:
    pipeline = DeliveryPipeline(_BrokenOutput(fail_after=0), question_count=1, pass_limit=1)
    pipeline.start()
    pipeline.close_inputs()
    with pytest.raises(BrokenPipeError):
        pipeline.join()
    assert isinstance(pipeline.error, BrokenPipeError)
    assert pipeline.publisher.closed
