"""
Parallel compilation of a set of source files.

This module fans a source list out to ObjectBuilder workers on a bounded
thread pool. Each worker blocks on one compiler process; workers share only
the read-only configuration, so no locking is needed around compilation.

The first failing worker cancels a run-scoped token, which terminates
in-flight siblings and makes queued ones fail fast. The call returns only
after every worker has finished, then reports that first failure.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Dict, List, Optional

from .builder import BuildResult, IBuilder
from .compiler import ObjectBuilder, object_path_for
from .config import BuildConfig, FileList, parse_file_list
from .errors import CancelledError, InvalidInputError
from .staleness import StalenessChecker

logger = logging.getLogger(__name__)


class ObjectSetBuilder(IBuilder):
    """
    Compiles multiple source files to individual object files in parallel.

    Example usage:
        config = BuildConfig(cc="gcc", objdir=Path("build/obj"))
        result = ObjectSetBuilder(config, "src/a.c src/b.c").run()
        print(f"{result.built_count} of {len(result.outputs)} objects rebuilt")
    """

    def __init__(
        self,
        config: BuildConfig,
        sources: FileList,
        checker: Optional[StalenessChecker] = None
    ):
        """
        Initialize object set builder.

        Args:
            config: Command configuration
            sources: Space-delimited source list, or a sequence of paths
            checker: Staleness checker shared by all workers
        """
        self.config = config
        self.sources = sources
        self.checker = checker or StalenessChecker()

    def source_paths(self) -> List[Path]:
        """Parse and validate the source list.

        Raises:
            InvalidInputError: If the list is empty or two sources share an
                object file name
        """
        sources = parse_file_list(self.sources)
        if not sources:
            raise InvalidInputError("No source files specified")

        seen: Dict[Path, Path] = {}
        for source in sources:
            obj_path = object_path_for(source, self.config.objdir)
            if obj_path in seen:
                raise InvalidInputError(
                    f"{seen[obj_path]} and {source} both compile to {obj_path}"
                )
            seen[obj_path] = source
        return sources

    def object_paths(self) -> List[Path]:
        """Object files this builder produces, in source order."""
        return [object_path_for(s, self.config.objdir) for s in self.source_paths()]

    def run(self) -> BuildResult:
        """
        Bring every object in the set up to date.

        Returns:
            BuildResult with built_count and the object paths in source order

        Raises:
            InvalidInputError: If the source list is invalid
            BuildError: The first worker failure, after all workers finished
        """
        self.config.cancel.raise_if_cancelled("Compilation")
        sources = self.source_paths()

        abort = self.config.cancel.child()
        worker_config = self.config.with_cancel(abort)
        builders = [ObjectBuilder(worker_config, s, self.checker) for s in sources]

        results: List[Optional[BuildResult]] = [None] * len(builders)
        first_error: Optional[Exception] = None
        max_workers = min(self.config.jobs, len(builders))
        logger.debug(f"Compiling {len(builders)} sources with {max_workers} workers")

        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="compile") as executor:
            futures = {executor.submit(b.run): i for i, b in enumerate(builders)}
            try:
                for future in as_completed(futures):
                    try:
                        results[futures[future]] = future.result()
                    except Exception as e:
                        abort.cancel()
                        # Siblings we cancelled ourselves are not the cause
                        if first_error is None or (
                            isinstance(first_error, CancelledError)
                            and not isinstance(e, CancelledError)
                        ):
                            first_error = e
            except KeyboardInterrupt:
                abort.cancel()
                raise

        if first_error is not None:
            raise first_error

        built_count = sum(r.built_count for r in results)
        logger.info(f"  {built_count} of {len(results)} objects compiled")
        return BuildResult(
            built=built_count > 0,
            output_path=self.config.objdir,
            outputs=tuple(r.output_path for r in results),
            built_count=built_count,
        )
