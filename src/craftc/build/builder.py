"""Common contract for craftc builders.

Every command (obj, objs, static-lib, exe) is backed by one builder exposing
run(). Builders raise a BuildError subclass on failure and return a
BuildResult on success.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Tuple


@dataclass(frozen=True)
class BuildResult:
    """Result of a build step.

    Attributes:
        built: Whether any tool was invoked to regenerate an artifact
        output_path: Artifact path (object directory for multi-object steps)
        outputs: Object files produced or confirmed current, in input order
        built_count: Number of objects that were recompiled
    """
    built: bool
    output_path: Path
    outputs: Tuple[Path, ...] = ()
    built_count: int = 0

    @property
    def skipped(self) -> bool:
        return not self.built


class IBuilder(ABC):
    """Interface for build commands."""

    @abstractmethod
    def run(self) -> BuildResult:
        """Bring the builder's artifact up to date.

        Returns:
            BuildResult describing what was done

        Raises:
            BuildError: If any step fails or is cancelled
        """
        pass
