"""
Executable linking.

This module provides ExecutableBuilder, which brings a program's objects up
to date and relinks the executable when it is older than any object or any
library it links against. A library rebuilt by a separate craftc invocation
therefore triggers a relink.
"""

import logging
from pathlib import Path
from typing import List, Optional

from .builder import BuildResult, IBuilder
from .config import BuildConfig, FileList, parse_file_list, split_flags
from .errors import InvalidInputError, LinkError
from .object_set import ObjectSetBuilder
from .staleness import StalenessChecker
from .tool_runner import ToolRunner

logger = logging.getLogger(__name__)


class ExecutableBuilder(IBuilder):
    """
    Links object files and libraries into an executable.

    The compiler driver (config.cc) is used as the linker.
    """

    def __init__(
        self,
        config: BuildConfig,
        sources: FileList,
        exe_path: Path,
        lib_paths: Optional[FileList] = None,
        ldflags: str = "",
        checker: Optional[StalenessChecker] = None
    ):
        """
        Initialize executable builder.

        Args:
            config: Command configuration
            sources: Space-delimited source list, or a sequence of paths
            exe_path: Path for the output executable
            lib_paths: Libraries to link against (space-delimited or sequence)
            ldflags: Extra linker flags, shell-quoted
            checker: Staleness checker (default: a new StalenessChecker)
        """
        if not str(exe_path).strip():
            raise InvalidInputError("No executable path specified")
        self.config = config
        self.exe_path = Path(str(exe_path).strip())
        self.lib_paths = parse_file_list(lib_paths)
        self.ldflags = ldflags
        self.checker = checker or StalenessChecker()
        self.objects = ObjectSetBuilder(config, sources, self.checker)

    def build_command(self, object_files: List[Path]) -> List[str]:
        """Build the link command line.

        Libraries follow the objects and linker flags come last, so
        -l options resolve symbols referenced by everything before them.
        """
        cmd = [self.config.cc]
        cmd.extend(self.config.cflag_list)
        cmd.extend(['-o', str(self.exe_path)])
        cmd.extend(str(obj) for obj in object_files)
        cmd.extend(str(lib) for lib in self.lib_paths)
        cmd.extend(split_flags(self.ldflags))
        return cmd

    def run(self) -> BuildResult:
        """
        Bring the objects and then the executable up to date.

        Returns:
            BuildResult for the executable; outputs lists its objects

        Raises:
            BuildError: From object compilation (linker never runs)
            MissingInputError: If a library does not exist
            LinkError: If the link fails
            CancelledError: If the command is cancelled
        """
        objects = self.objects.run()
        object_files = list(objects.outputs)
        inputs = object_files + self.lib_paths

        if not self.checker.is_stale(self.exe_path, inputs, self.config.force):
            logger.info(f"  {self.exe_path.name} (up to date)")
            return BuildResult(
                built=False,
                output_path=self.exe_path,
                outputs=objects.outputs,
                built_count=objects.built_count,
            )

        self.config.cancel.raise_if_cancelled(f"Linking {self.exe_path.name}")
        self.exe_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"  Linking {self.exe_path.name}")
        ToolRunner(self.config.cancel).run_checked(
            self.build_command(object_files), self.exe_path, LinkError
        )

        return BuildResult(
            built=True,
            output_path=self.exe_path,
            outputs=objects.outputs,
            built_count=objects.built_count,
        )
