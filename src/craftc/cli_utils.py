"""CLI utility functions for craftc.

This module provides common utilities used across CLI commands including:
- Logging setup for normal and verbose runs
- Error handling and formatting
- Reporting of ignored command-line arguments
"""

import logging
import sys
from typing import List

from craftc.build import BuildError, ToolError


def configure_logging(verbose: bool) -> None:
    """Route craftc's log records to stderr.

    Verbose runs show per-step progress (INFO); otherwise only warnings.
    """
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        stream=sys.stderr,
        force=True,
    )


class ErrorFormatter:
    """Formats and displays error messages with ANSI color codes."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_failure(prog: str, command: str, error: BuildError, verbose: bool = False) -> None:
        """Print the one-line failure report for a command.

        Tool diagnostics (compiler errors and the like) follow the line; in
        verbose mode the failing command line is shown too.

        Args:
            prog: Program name
            command: Subcommand that failed
            error: The build error
            verbose: Whether to print the failing command line
        """
        print(
            f"{ErrorFormatter.RED}❌ {prog}: cmd `{command}` failed:{ErrorFormatter.RESET} {error}",
            file=sys.stderr,
        )
        if isinstance(error, ToolError):
            if verbose and error.cmd:
                print(f"  $ {' '.join(error.cmd)}", file=sys.stderr)
            if error.stderr:
                print(error.stderr.rstrip(), file=sys.stderr)

    @staticmethod
    def print_success(message: str) -> None:
        """Print formatted success message.

        Args:
            message: Success message
        """
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def print_warning(message: str) -> None:
        """Print formatted warning message.

        Args:
            message: Warning message
        """
        print(f"{ErrorFormatter.YELLOW}⚠️  {message}{ErrorFormatter.RESET}", file=sys.stderr)

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Handle KeyboardInterrupt with standard formatting."""
        ErrorFormatter.print_warning("Build interrupted")
        sys.exit(130)  # Standard exit code for SIGINT


class IgnoredArgsReporter:
    """Reports arguments dropped by --ignore."""

    @staticmethod
    def report(ignored: List[str], verbose: bool) -> None:
        """Print one warning per ignored argument, in verbose mode only.

        Args:
            ignored: Arguments argparse did not recognize
            verbose: Whether verbose output is enabled
        """
        if not verbose:
            return
        for arg in ignored:
            ErrorFormatter.print_warning(f"Ignoring unknown arg: {arg!r}")
