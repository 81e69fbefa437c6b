"""Static library creation.

This module handles building static library archives (.a files) from C
sources: the objects are brought up to date first, then the archiver runs
only if the archive is older than any of them.

Design:
    - Object files, not sources, are the archive's inputs
    - Archives are written to a temporary path and renamed into place, so the
      result holds exactly the given objects and a failed run leaves the
      previous archive untouched
    - 'rcs' flags: r=insert/replace, c=create, s=index (ranlib)
"""

import logging
from pathlib import Path
from typing import List, Optional

from .builder import BuildResult, IBuilder
from .config import BuildConfig, FileList
from .errors import ArchiveError, InvalidInputError
from .object_set import ObjectSetBuilder
from .staleness import StalenessChecker
from .tool_runner import ToolRunner

logger = logging.getLogger(__name__)


class StaticLibraryBuilder(IBuilder):
    """Builds a static library from a set of source files.

    This class handles:
    - Compiling stale objects through ObjectSetBuilder
    - Deciding whether the archive is stale against its objects
    - Running the archiver and replacing the archive atomically
    """

    def __init__(
        self,
        config: BuildConfig,
        sources: FileList,
        lib_path: Path,
        checker: Optional[StalenessChecker] = None
    ):
        """Initialize static library builder.

        Args:
            config: Command configuration
            sources: Space-delimited source list, or a sequence of paths
            lib_path: Path for the output archive
            checker: Staleness checker (default: a new StalenessChecker)
        """
        if not str(lib_path).strip():
            raise InvalidInputError("No library path specified")
        self.config = config
        self.lib_path = Path(str(lib_path).strip())
        self.checker = checker or StalenessChecker()
        self.objects = ObjectSetBuilder(config, sources, self.checker)

    def build_command(self, archive_path: Path, object_files: List[Path]) -> List[str]:
        """Build the archiver command line."""
        cmd = [self.config.ar, "rcs", str(archive_path)]
        cmd.extend(str(obj) for obj in object_files)
        return cmd

    def run(self) -> BuildResult:
        """Bring the objects and then the archive up to date.

        Returns:
            BuildResult for the archive; outputs lists its objects

        Raises:
            BuildError: From object compilation (archiver never runs)
            ArchiveError: If the archiver fails
            CancelledError: If the command is cancelled
        """
        objects = self.objects.run()
        object_files = list(objects.outputs)

        if not self.checker.is_stale(self.lib_path, object_files, self.config.force):
            logger.info(f"  {self.lib_path.name} (up to date)")
            return BuildResult(
                built=False,
                output_path=self.lib_path,
                outputs=objects.outputs,
                built_count=objects.built_count,
            )

        self.config.cancel.raise_if_cancelled(f"Archiving {self.lib_path.name}")
        self.lib_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.lib_path.with_name(self.lib_path.name + ".tmp")
        temp_path.unlink(missing_ok=True)

        logger.info(f"  Archiving {self.lib_path.name} from {len(object_files)} objects")
        try:
            ToolRunner(self.config.cancel).run_checked(
                self.build_command(temp_path, object_files), self.lib_path, ArchiveError
            )
            if not temp_path.exists():
                raise ArchiveError(self.lib_path, 0, f"Archive was not created: {temp_path}")
            temp_path.replace(self.lib_path)
        finally:
            temp_path.unlink(missing_ok=True)

        return BuildResult(
            built=True,
            output_path=self.lib_path,
            outputs=objects.outputs,
            built_count=objects.built_count,
        )
