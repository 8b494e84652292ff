import sys

import pytest

import repeatit.__main__ as module_main
import repeatit.main as main


def test_module_entrypoint_passes_process_arguments(monkeypatch) -> None:
    received: dict[str, object] = {}
    monkeypatch.setattr(sys, "argv", ["repeatit", "summary", "lessons.txt"])
    monkeypatch.setattr(module_main, "main_entry", lambda argv: received.__setitem__("argv", argv))
    module_main.main()
    assert received["argv"] == ["summary", "lessons.txt"]


def test_main_entry_exits_with_run_status(monkeypatch) -> None:
    monkeypatch.setattr(main, "run", lambda argv=None: 3)
    with pytest.raises(SystemExit) as excinfo:
        main.main_entry(["drill", "x"])
    assert excinfo.value.code == 3
