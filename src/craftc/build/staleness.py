"""Timestamp-based staleness checks.

The filesystem is the only build ledger: an artifact is fresh when it exists
and its modification time is not older than any of its inputs. Ties count as
fresh, matching make.

Timestamps are compared at the resolution the filesystem records. On
filesystems with coarse (one or two second) mtimes an input edited within the
same tick as its output was written is not detected. This is an accepted
limitation of timestamp-driven builds; use --force when in doubt.
"""

import logging
from pathlib import Path
from typing import Iterable, List

from .errors import MissingInputError

logger = logging.getLogger(__name__)


class StalenessChecker:
    """Decides whether an output artifact must be regenerated."""

    def is_stale(self, output: Path, inputs: Iterable[Path], force: bool = False) -> bool:
        """
        Check whether output needs to be rebuilt from inputs.

        Args:
            output: Artifact path
            inputs: Files the artifact is built from
            force: Treat the artifact as stale regardless of timestamps

        Returns:
            True if output is missing, older than an input, or force is set

        Raises:
            MissingInputError: If any input does not exist
        """
        output = Path(output)
        input_mtimes = self._input_mtimes(inputs)

        if force:
            logger.debug(f"{output}: forced rebuild")
            return True

        try:
            output_mtime = output.stat().st_mtime_ns
        except FileNotFoundError:
            logger.debug(f"{output}: does not exist")
            return True

        newest_input = max(input_mtimes, default=0)
        stale = output_mtime < newest_input
        logger.debug(f"{output}: {'stale' if stale else 'up to date'}")
        return stale

    @staticmethod
    def _input_mtimes(inputs: Iterable[Path]) -> List[int]:
        mtimes = []
        for path in inputs:
            path = Path(path)
            try:
                mtimes.append(path.stat().st_mtime_ns)
            except FileNotFoundError:
                raise MissingInputError(path) from None
        return mtimes
