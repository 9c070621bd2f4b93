from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


class ToolError(RuntimeError):
    """Raised when an external tool is missing or fails."""
    pass


@dataclass
class SubprocessResult:
    stdout: bytes
    stderr: bytes
    returncode: int

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessRunner(Protocol):
    """Spawns a command, waits for it and captures its raw output."""

    def run(self, cmd: Sequence[str]) -> SubprocessResult:
        """
        Run `cmd` to completion.
        Raises OSError when the process cannot be launched at all.
        """
        ...


class SubprocessRunner:
    def run(self, cmd: Sequence[str]) -> SubprocessResult:
        # Output stays as bytes: decoding is the caller's decision.
        # subprocess.run kills and reaps the child if the wait is interrupted.
        try:
            proc = subprocess.run(
                list(cmd),
                capture_output=True,
                check=False,
            )
        except ValueError as exc:
            # e.g. an embedded NUL byte: the process was never launched
            raise OSError(f"cannot launch {cmd[0]!r}: {exc}") from exc

        return SubprocessResult(
            stdout=proc.stdout,
            stderr=proc.stderr,
            returncode=proc.returncode,
        )


class BaseTool:
    def __init__(self, name: str, binary: str, runner: Optional[ProcessRunner] = None) -> None:
        self.name = name
        self.binary = binary
        self.runner: ProcessRunner = runner if runner is not None else SubprocessRunner()

    def run_command(self, args: List[str]) -> SubprocessResult:
        """
        Run the tool binary with `args`.
        OSError from the runner propagates: each tool decides what a launch
        failure means.
        """
        cmd = [self.binary] + args
        logger.debug("Running %s: %s", self.name, " ".join(cmd))
        result = self.runner.run(cmd)
        logger.debug("%s exited with status %d", self.name, result.returncode)
        return result
