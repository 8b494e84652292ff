from __future__ import annotations

import shutil
import sys
from collections.abc import Iterator
from pathlib import Path
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

SAMPLE_LESSONS = """\
# sample lessons file
### 1
bonjour;hello
merci;thank you

### 2
chat;cat
chien;dog
oiseau;bird
"""


def _tmp_path_fixture() -> Iterator[Path]:
    """Provide per-test temporary directory path inside the workspace.

    Overrides pytest's builtin ``tmp_path`` so that temporary lessons and
    config files stay under ``.tmp_pytest/`` in the project directory.
    """
    base = ROOT / ".tmp_pytest"
    base.mkdir(parents=True, exist_ok=True)
    path = base / str(uuid4())
    path.mkdir(parents=True, exist_ok=False)
    try:
        yield path
    finally:
        shutil.rmtree(path, ignore_errors=True)
        try:
            next(base.iterdir())
        except StopIteration:
            base.rmdir()
        except FileNotFoundError:
            pass


tmp_path = pytest.fixture(name="tmp_path")(_tmp_path_fixture)


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the default config lookup at a file that does not exist."""
    path = tmp_path / "no-such-config.yml"
    monkeypatch.setenv("REPEATIT_CONFIG", str(path))
    return path


@pytest.fixture
def lessons_file(tmp_path: Path) -> Path:
    path = tmp_path / "lessons.txt"
    path.write_text(SAMPLE_LESSONS, encoding="utf-8")
    return path
