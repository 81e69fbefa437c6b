"""Per-command build configuration.

A BuildConfig is created once by the CLI (or by library callers) and handed to
exactly one builder. It is immutable; builders that need a narrower
cancellation scope derive a copy with with_cancel().
"""

import os
import shlex
import threading
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional, Sequence, Union

from .errors import CancelledError, InvalidInputError

FileList = Union[str, Sequence[Union[str, Path]]]


class CancelToken:
    """Cancellation context shared by every step of one command.

    A child token reports cancelled when it or any of its ancestors has been
    cancelled, so a fan-out step can abort its own workers without touching
    the caller's token.
    """

    def __init__(self, parent: Optional["CancelToken"] = None):
        self._event = threading.Event()
        self._parent = parent

    def cancel(self) -> None:
        """Request cancellation. Thread-safe and idempotent."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._parent is not None and self._parent.cancelled

    def child(self) -> "CancelToken":
        return CancelToken(parent=self)

    def raise_if_cancelled(self, what: str = "Build") -> None:
        if self.cancelled:
            raise CancelledError(f"{what} cancelled")


def default_jobs() -> int:
    """Default worker count: the number of available processing units."""
    return os.cpu_count() or 1


@dataclass(frozen=True)
class BuildConfig:
    """Settings shared by all build steps of one command.

    Attributes:
        cc: Compiler driver, also used for linking
        objdir: Directory receiving object files
        cflags: Extra compiler flags, shell-quoted
        force: Rebuild every artifact regardless of timestamps
        ar: Archiver used for static libraries
        jobs: Upper bound on concurrent compiler processes
        cancel: Cancellation context for this command
    """

    cc: str
    objdir: Path
    cflags: str = ""
    force: bool = False
    ar: str = "ar"
    jobs: int = field(default_factory=default_jobs)
    cancel: CancelToken = field(default_factory=CancelToken, compare=False)

    def __post_init__(self):
        if not self.cc:
            raise InvalidInputError("No compiler specified")
        object.__setattr__(self, "objdir", Path(self.objdir))
        if self.jobs < 1:
            raise InvalidInputError(f"Worker count must be at least 1, got {self.jobs}")

    @property
    def cflag_list(self) -> List[str]:
        return split_flags(self.cflags)

    def with_cancel(self, cancel: CancelToken) -> "BuildConfig":
        """Return a copy of this config bound to another cancel token."""
        return replace(self, cancel=cancel)


def split_flags(flags: Optional[str]) -> List[str]:
    """Split a flag string the way a POSIX shell would."""
    if not flags:
        return []
    return shlex.split(flags)


def parse_file_list(files: Optional[FileList]) -> List[Path]:
    """Parse a space-delimited file list (or a sequence of paths).

    Entries are trimmed and empty entries dropped; order is preserved. An
    empty result is returned as-is, callers decide whether that is an error.
    """
    if files is None:
        return []
    if isinstance(files, str):
        entries = files.split()
    else:
        entries = [str(entry).strip() for entry in files]
    return [Path(entry) for entry in entries if entry]
