"""
Single-object compilation.

This module provides ObjectBuilder, which compiles one C source file into one
object file inside the configured object directory, skipping the compiler
entirely when the object is already newer than its source.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .builder import BuildResult, IBuilder
from .config import BuildConfig
from .errors import CompileError, InvalidInputError
from .staleness import StalenessChecker
from .tool_runner import ToolRunner

logger = logging.getLogger(__name__)

OBJECT_SUFFIX = ".o"


def object_path_for(source: Path, objdir: Path) -> Path:
    """Object file path for a source: <objdir>/<source stem>.o"""
    return Path(objdir) / (Path(source).stem + OBJECT_SUFFIX)


class ObjectBuilder(IBuilder):
    """
    Compiles a single source file to an object file.

    Example usage:
        config = BuildConfig(cc="gcc", objdir=Path("build/obj"), cflags="-O2")
        result = ObjectBuilder(config, Path("src/main.c")).run()
        if result.built:
            print(f"compiled {result.output_path}")
    """

    def __init__(
        self,
        config: BuildConfig,
        source: Path,
        checker: Optional[StalenessChecker] = None
    ):
        """
        Initialize object builder.

        Args:
            config: Command configuration
            source: C source file to compile
            checker: Staleness checker (default: a new StalenessChecker)
        """
        if not str(source).strip():
            raise InvalidInputError("No source file specified")
        self.config = config
        self.source = Path(str(source).strip())
        self.checker = checker or StalenessChecker()

    @property
    def object_path(self) -> Path:
        return object_path_for(self.source, self.config.objdir)

    def build_command(self) -> List[str]:
        """Build the compiler command line."""
        cmd = [self.config.cc]
        cmd.extend(self.config.cflag_list)
        cmd.extend(['-c', '-o', str(self.object_path), str(self.source)])
        return cmd

    def run(self) -> BuildResult:
        """
        Compile the source if its object is missing or out of date.

        Returns:
            BuildResult with built=False when the object was already current

        Raises:
            MissingInputError: If the source does not exist
            CompileError: If the compiler fails
            CancelledError: If the command is cancelled
        """
        self.config.cancel.raise_if_cancelled(f"Compilation of {self.source.name}")

        obj_path = self.object_path
        if not self.checker.is_stale(obj_path, [self.source], self.config.force):
            logger.info(f"  {self.source.name} (up to date)")
            return BuildResult(built=False, output_path=obj_path, outputs=(obj_path,))

        # exist_ok keeps concurrent workers from racing on the directory
        self.config.objdir.mkdir(parents=True, exist_ok=True)

        logger.info(f"  Compiling {self.source.name}")
        ToolRunner(self.config.cancel).run_checked(
            self.build_command(), obj_path, CompileError
        )

        return BuildResult(
            built=True, output_path=obj_path, outputs=(obj_path,), built_count=1
        )
