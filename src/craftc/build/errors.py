"""Exceptions raised by the craftc build core.

Every failure surfaced by a builder derives from BuildError so the CLI can
report it with a single handler:

    BuildError
    ├── InvalidInputError    malformed or empty file lists
    ├── MissingInputError    a referenced source or library is absent
    ├── ToolError            an external tool exited non-zero
    │   ├── CompileError
    │   ├── ArchiveError
    │   └── LinkError
    └── CancelledError       the command's cancel token fired
"""

from pathlib import Path
from typing import List, Optional


class BuildError(Exception):
    """Base exception for build errors."""
    pass


class InvalidInputError(BuildError):
    """Raised when a file list is empty or otherwise malformed."""
    pass


class MissingInputError(BuildError):
    """Raised when an input file required by a build step does not exist."""

    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(f"Input file not found: {self.path}")


class ToolError(BuildError):
    """Raised when an external tool (compiler, archiver, linker) fails.

    Attributes:
        returncode: Exit code of the tool process
        stderr: Captured standard error of the tool
        cmd: Command line that was executed
    """

    action = "Tool invocation"

    def __init__(
        self,
        target: Path,
        returncode: int,
        stderr: str = "",
        cmd: Optional[List[str]] = None
    ):
        self.target = Path(target)
        self.returncode = returncode
        self.stderr = stderr
        self.cmd = list(cmd or [])
        super().__init__(
            f"{self.action} failed for {self.target.name} (exit code {returncode})"
        )


class CompileError(ToolError):
    """Raised when the compiler exits non-zero."""

    action = "Compilation"


class ArchiveError(ToolError):
    """Raised when the archiver exits non-zero."""

    action = "Archive creation"


class LinkError(ToolError):
    """Raised when the linker exits non-zero."""

    action = "Linking"


class CancelledError(BuildError):
    """Raised when a build step is cancelled before or while running."""
    pass
