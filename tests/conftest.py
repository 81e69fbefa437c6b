"""
Shared fixtures for craftc tests.

Provides a fake C toolchain: `cc` and `ar` wrappers around a small Python
script that records every invocation in a log file and writes the artifact
named on its command line. Source file directives steer its behaviour:

    #error   compilation fails with a diagnostic on stderr
    #sleep   compilation hangs (used to exercise cancellation)
    ARFAIL   archiving an object built from this source fails

Linking fails when -lfail is passed.
"""

import logging
import os
import shlex
import stat
import sys
import time
from pathlib import Path
from typing import List

import pytest

FAKE_TOOL = '''
import os
import sys
import time

LOG = {log!r}


def write(path, text):
    with open(path, "w") as f:
        f.write(text)


def read(path):
    with open(path) as f:
        return f.read()


def compile_or_link(args):
    out = args[args.index("-o") + 1]
    if "-c" in args:
        source = args[-1]
        text = read(source)
        if "#sleep" in text:
            time.sleep(30)
        if "#error" in text:
            sys.stderr.write(source + ":1:1: error: #error directive\\n")
            return 1
        write(out, "OBJ " + text)
        return 0
    if "-lfail" in args:
        sys.stderr.write("undefined reference to `missing'\\n")
        return 1
    inputs = [a for a in args[args.index("-o") + 2:] if os.path.isfile(a)]
    write(out, "EXE " + " ".join(inputs))
    return 0


def archive(args):
    path, objects = args[1], args[2:]
    contents = [read(obj) for obj in objects]
    if any("ARFAIL" in text for text in contents):
        sys.stderr.write("ar: bad object\\n")
        return 1
    write(path, "ARCHIVE " + " ".join(objects))
    return 0


def main():
    tool, args = sys.argv[1], sys.argv[2:]
    with open(LOG, "a") as f:
        f.write(tool + " " + " ".join(args) + "\\n")
    if tool == "ar":
        return archive(args)
    return compile_or_link(args)


sys.exit(main())
'''


class FakeToolchain:
    """Paths to the fake tools plus helpers to inspect their invocation log."""

    def __init__(self, root: Path):
        root.mkdir(parents=True, exist_ok=True)
        self.log = root / "invocations.log"
        self.log.touch()
        script = root / "fake_tool.py"
        script.write_text(FAKE_TOOL.format(log=str(self.log)))
        self.cc = str(self._wrapper(root / "cc", script, "cc"))
        self.ar = str(self._wrapper(root / "ar", script, "ar"))

    @staticmethod
    def _wrapper(path: Path, script: Path, tool: str) -> Path:
        path.write_text(
            "#!/bin/sh\n"
            f"exec {shlex.quote(sys.executable)} {shlex.quote(str(script))} {tool} \"$@\"\n"
        )
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    def invocations(self, tool: str = "") -> List[str]:
        lines = [line for line in self.log.read_text().splitlines() if line]
        if tool:
            lines = [line for line in lines if line.split(" ", 1)[0] == tool]
        return lines

    def count(self, tool: str = "") -> int:
        return len(self.invocations(tool))

    def reset(self) -> None:
        self.log.write_text("")


def set_age(path: Path, seconds_ago: float) -> None:
    """Set a file's mtime to the given number of seconds in the past."""
    when = time.time() - seconds_ago
    os.utime(path, (when, when))


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo handler and level changes made by configure_logging()."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def toolchain(tmp_path):
    """Fake cc/ar pair recording their invocations."""
    if sys.platform == "win32":
        pytest.skip("fake toolchain uses /bin/sh wrappers")
    return FakeToolchain(tmp_path / "toolchain")


@pytest.fixture
def src_dir(tmp_path):
    """Directory for test sources."""
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def write_source(src_dir):
    """Write a C source whose mtime lies well in the past."""
    def _write(name: str, text: str = "int f(void) { return 0; }\n") -> Path:
        path = src_dir / name
        path.write_text(text)
        set_age(path, 200)
        return path
    return _write


@pytest.fixture
def age():
    """The set_age helper, for moving mtimes into the past."""
    return set_age
