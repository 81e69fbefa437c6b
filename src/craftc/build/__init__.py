"""
Build core for craftc.

This package provides the incremental build engine:
- Timestamp staleness checks
- Single and parallel object compilation
- Static library archiving
- Executable linking
"""

from .builder import BuildResult, IBuilder
from .config import BuildConfig, CancelToken, parse_file_list, split_flags
from .errors import (
    ArchiveError,
    BuildError,
    CancelledError,
    CompileError,
    InvalidInputError,
    LinkError,
    MissingInputError,
    ToolError,
)
from .staleness import StalenessChecker
from .compiler import ObjectBuilder
from .object_set import ObjectSetBuilder
from .archive_creator import StaticLibraryBuilder
from .linker import ExecutableBuilder

__all__ = [
    'ArchiveError',
    'BuildConfig',
    'BuildError',
    'BuildResult',
    'CancelToken',
    'CancelledError',
    'CompileError',
    'ExecutableBuilder',
    'IBuilder',
    'InvalidInputError',
    'LinkError',
    'MissingInputError',
    'ObjectBuilder',
    'ObjectSetBuilder',
    'StalenessChecker',
    'StaticLibraryBuilder',
    'ToolError',
    'parse_file_list',
    'split_flags',
]
