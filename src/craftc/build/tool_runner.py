"""Tool Runner.

This module executes external build tools (compiler, archiver, linker) as
subprocesses while honouring a cancellation token.

Design:
    - Wraps subprocess.Popen so a running tool can be stopped mid-flight
    - Captures stdout/stderr for error reporting
    - Polls the cancel token while waiting for the tool to exit
    - On cancellation, terminates the whole process tree (compiler drivers
      spawn cc1/as/ld children) and escalates to kill after a grace period
"""

import logging
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Type

import psutil

from .config import CancelToken
from .errors import CancelledError, ToolError

logger = logging.getLogger(__name__)

# Seconds between cancel-token polls while a tool is running
POLL_INTERVAL = 0.05

# Seconds a terminated process tree gets before it is killed
TERMINATE_GRACE = 3.0


@dataclass
class ToolResult:
    """Result of running an external tool."""
    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


def get_subprocess_creation_flags() -> int:
    """Keep tools from flashing console windows on Windows."""
    if sys.platform == "win32":
        return subprocess.CREATE_NO_WINDOW
    return 0


class ToolRunner:
    """Runs one external tool invocation at a time, cancellably."""

    def __init__(self, cancel: CancelToken):
        """
        Initialize tool runner.

        Args:
            cancel: Token that aborts the running tool when cancelled
        """
        self.cancel = cancel

    def run(self, cmd: List[str]) -> ToolResult:
        """
        Execute a tool and wait for it to exit.

        Args:
            cmd: Command line, executable first

        Returns:
            ToolResult with exit code and captured output

        Raises:
            CancelledError: If cancelled before or while the tool runs
            OSError: If the tool cannot be started
        """
        self.cancel.raise_if_cancelled(cmd[0])
        logger.debug(f"Running: {' '.join(cmd)}")

        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            creationflags=get_subprocess_creation_flags(),
        )

        try:
            while True:
                try:
                    stdout, stderr = proc.communicate(timeout=POLL_INTERVAL)
                    break
                except subprocess.TimeoutExpired:
                    if self.cancel.cancelled:
                        self._terminate(proc)
                        raise CancelledError(f"{cmd[0]} cancelled") from None
        except KeyboardInterrupt:
            self._terminate(proc)
            raise

        return ToolResult(returncode=proc.returncode, stdout=stdout, stderr=stderr)

    def run_checked(
        self,
        cmd: List[str],
        target: Path,
        error_type: Type[ToolError]
    ) -> ToolResult:
        """
        Execute a tool, raising error_type if it cannot start or exits non-zero.

        Args:
            cmd: Command line, executable first
            target: Artifact the tool produces, used in error messages
            error_type: ToolError subclass to raise on failure

        Returns:
            ToolResult of the successful run
        """
        try:
            result = self.run(cmd)
        except OSError as e:
            # Mirror the shell's "command not found" exit status
            raise error_type(target, 127, str(e), cmd) from e

        if not result.success:
            raise error_type(target, result.returncode, result.stderr, cmd)

        if result.stderr:
            logger.info(result.stderr.rstrip())
        return result

    def _terminate(self, proc: subprocess.Popen) -> None:
        """Terminate a tool and every process it spawned."""
        try:
            root = psutil.Process(proc.pid)
            processes = root.children(recursive=True) + [root]
        except psutil.NoSuchProcess:
            processes = []

        # Children first so the driver cannot respawn them
        for process in processes:
            try:
                process.terminate()
            except psutil.NoSuchProcess:
                pass

        _gone, alive = psutil.wait_procs(processes, timeout=TERMINATE_GRACE)
        for process in alive:
            try:
                process.kill()
                logger.warning(f"Force killed stubborn process {process.pid}")
            except psutil.NoSuchProcess:
                pass

        # Reap the Popen handle and drain its pipes
        proc.communicate()
