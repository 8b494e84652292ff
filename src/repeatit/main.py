"""CLI entrypoint for the repeatit drill tool."""

from __future__ import annotations

import argparse
import functools
import logging
import sys
from collections.abc import Callable
from dataclasses import replace
from typing import Any, TextIO

from . import __version__
from .config import ConfigError, Settings, load_settings
from .content_loader import (
    LessonsFileError,
    compute_ranges,
    format_topic_ids,
    load_topics_file,
    parse_number_series,
)
from .logging_config import DEFAULT_LEVEL, setup_logging
from .models import Mode, SessionConfig, TopicIndex
from .session import EmptyQuestionSetError, run_drill

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]
PrintFn = Callable[[str], None]
SHELL_QUIT_COMMANDS = {"quit", "q"}
SHELL_HELP = (
    "Commands:",
    "  select <series>  drill the given lessons, e.g. 'select 1:3,5'",
    "  list             show the available lessons",
    "  help             show this help",
    "  quit             leave the shell",
)


def build_parser() -> argparse.ArgumentParser:
    """Create the command line parser."""
    parser = argparse.ArgumentParser(
        prog="repeatit",
        description="Memorize questions and answers by repetition.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", help="config file (default: $REPEATIT_CONFIG or ~/.repeatit.yml)")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--log-level", help="log level written to stderr (default: WARNING)")
    verbosity.add_argument("--debug", action="store_true", default=None, help="same as --log-level DEBUG")
    parser.add_argument("command", choices=[mode.value for mode in Mode], help="what to do with the lessons file")
    parser.add_argument("lessons_file", help="file of 'question;answer' lines grouped under '### <topic>' lines")
    parser.add_argument(
        "-i",
        "--interactive",
        action="store_true",
        default=None,
        help="press Return to reveal each answer instead of waiting",
    )
    parser.add_argument("-t", "--time", type=int, dest="pause_ms", help="milliseconds before the answer (default 2000)")
    parser.add_argument(
        "-l",
        "--list",
        action="append",
        dest="topics",
        default=[],
        help="comma-separated topics to drill (repeatable, default: all)",
    )
    parser.add_argument(
        "-r", "--reversed", action="store_true", default=None, help="ask the answers and reveal the questions"
    )
    parser.add_argument("--linear", action="store_true", default=None, help="ask in file order instead of randomly")
    parser.add_argument("--loop", type=int, dest="pass_limit", help="number of passes over the questions (default 1)")
    parser.add_argument(
        "--no-repeat",
        action="store_true",
        default=None,
        help="in random order, ask every question exactly once per pass",
    )
    return parser


def run(
    argv: list[str] | None = None,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
) -> int:
    """Run the CLI application and return the process exit status."""
    in_stream = stdin if stdin is not None else sys.stdin
    out_stream = stdout if stdout is not None else sys.stdout
    err_stream = stderr if stderr is not None else sys.stderr

    args = build_parser().parse_args(argv)
    cli_level = "DEBUG" if args.debug else args.log_level
    setup_logging(cli_level or DEFAULT_LEVEL, err_stream)
    print_fn: PrintFn = functools.partial(print, file=out_stream, flush=True)

    try:
        settings = _resolve_settings(args)
        if cli_level is None:
            setup_logging(settings.log_level, err_stream)
        session_config = _session_config(settings)
        topics = load_topics_file(args.lessons_file, settings.parsing_parameters())
        match Mode(args.command):
            case Mode.SUMMARY:
                return summary_flow(topics, print_fn)
            case Mode.DRILL:
                return drill_flow(topics, session_config, _split_topics(args.topics), in_stream, out_stream)
            case Mode.SHELL:
                input_fn = _stream_input(in_stream, out_stream)
                return shell_flow(topics, session_config, input_fn, print_fn, in_stream, out_stream)
    except (ConfigError, LessonsFileError, EmptyQuestionSetError) as exc:
        print(f"Error: {exc}", file=err_stream)
        return 1
    except OSError as exc:
        logger.debug("I/O failure", exc_info=True)
        print(f"Error: I/O failure: {exc}", file=err_stream)
        return 1
    return 0


def _resolve_settings(args: argparse.Namespace) -> Settings:
    """Overlay command line flags on the config file settings."""
    settings = load_settings(args.config, required=args.config is not None)
    overrides: dict[str, Any] = {}
    for name in ("pause_ms", "interactive", "reversed", "linear", "pass_limit", "no_repeat"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return replace(settings, **overrides)


def _session_config(settings: Settings) -> SessionConfig:
    try:
        return settings.session_config()
    except ValueError as exc:
        source = settings.source or "command line"
        raise ConfigError(f"Invalid drill option ({source}): {exc}") from exc


def _split_topics(raw_topics: list[str]) -> list[str]:
    """Flatten repeated, comma-separated -l values."""
    return [item.strip() for raw in raw_topics for item in raw.split(",") if item.strip()]


def _stream_input(in_stream: TextIO, out_stream: TextIO) -> InputFn:
    """Build an ``input()`` lookalike bound to the given streams."""

    def read(prompt: str) -> str:
        out_stream.write(prompt)
        out_stream.flush()
        line = in_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\r\n")

    return read


def summary_flow(topics: TopicIndex, print_fn: PrintFn) -> int:
    """Print the topics of the lessons file."""
    names = topics.sorted_names()
    if not names:
        print_fn("No topic found in this file")
        return 0
    print_fn("List of topics:")
    print_fn("===============")
    for name in names:
        print_fn(f"  * {name}")
    return 0


def drill_flow(
    topics: TopicIndex,
    config: SessionConfig,
    topic_ids: list[str],
    in_stream: TextIO,
    out_stream: TextIO,
) -> int:
    """Drill the selected topics, or every topic when none is selected."""
    unknown = [topic_id for topic_id in topic_ids if topic_id not in topics]
    if unknown:
        logger.warning("Unknown topic(s) ignored: %s", ", ".join(unknown))
    if not topic_ids:
        logger.info("No topic selected, drilling all %d topic(s)", len(topics))
    bank = topics.build_flat_set(*topic_ids)
    run_drill(bank, config, in_stream, out_stream)
    return 0


def shell_flow(
    topics: TopicIndex,
    config: SessionConfig,
    input_fn: InputFn,
    print_fn: PrintFn,
    in_stream: TextIO,
    out_stream: TextIO,
) -> int:
    """Run the command interpreter: pick lessons and drill them repeatedly."""
    summary_flow(topics, print_fn)
    lesson_numbers = [int(name) for name in topics.names() if name.isdecimal()]
    id_width = len(str(len(lesson_numbers)))
    while True:
        try:
            user_input = input_fn("> ").strip()
        except EOFError:
            print_fn("")
            return 0

        if not user_input:
            continue
        if user_input.startswith("select"):
            selected = user_input[len("select") :].strip()
            try:
                numbers = parse_number_series(selected)
            except ValueError as exc:
                print_fn(f"Error: error while parsing the list of lessons: {exc}")
                continue
            topic_ids = [topic_id for topic_id in format_topic_ids(numbers, id_width) if topic_id in topics]
            if not topic_ids:
                print_fn(f"Error: no lesson matches {selected!r}. Use list to see the available lessons.")
                continue
            bank = topics.build_flat_set(*topic_ids)
            try:
                run_drill(bank, config, in_stream, out_stream)
            except EmptyQuestionSetError as exc:
                print_fn(f"Error: {exc}")
                continue
            print_fn("Session is over...")
        elif user_input == "list":
            print_fn(f"Lessons available: {compute_ranges(lesson_numbers)}")
        elif user_input == "help":
            for line in SHELL_HELP:
                print_fn(line)
        elif user_input in SHELL_QUIT_COMMANDS:
            print_fn("Exiting on user request.")
            return 0
        else:
            print_fn(f"Error: {user_input!r} is an invalid command. Use help to get the full list of supported commands")


def main_entry(argv: list[str] | None = None) -> None:
    """Console script entrypoint."""
    raise SystemExit(run(argv))


if __name__ == "__main__":  # pragma: no cover
    main_entry()
