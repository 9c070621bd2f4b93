from __future__ import annotations

import logging
import os
import re
from typing import List, Optional, Union

from ..errors import (
    CantRun,
    DdError,
    InvalidEncoding,
    InvalidOutputFormat,
    Missing,
    NoInput,
    OldVersion,
)
from ..models import DdOutcome, Version
from .base import BaseTool, ProcessRunner

logger = logging.getLogger(__name__)

PathArg = Union[str, "os.PathLike[str]"]

VERSION_FLAG = "--version"
FAILED_PLACEHOLDER = "dd command failed"

_U16_MAX = 0xFFFF
_UNSIGNED_RE = re.compile(r"\+?[0-9]+")


def _parse_version_part(text: str) -> int:
    # Anything that is not an unsigned 16-bit integer counts as 0.
    if not _UNSIGNED_RE.fullmatch(text):
        return 0
    value = int(text)
    return value if value <= _U16_MAX else 0


def parse_version_output(text: str) -> Version:
    """
    Extract the version from `dd --version` output.
    The third whitespace-separated token must look like "<major>.<minor>",
    e.g. "dd (coreutils) 9.4".
    """
    tokens = text.split()
    if len(tokens) < 3:
        raise InvalidOutputFormat()

    parts = tokens[2].split(".")
    if len(parts) != 2:
        raise InvalidOutputFormat()

    return Version(_parse_version_part(parts[0]), _parse_version_part(parts[1]))


def _non_negative(name: str, value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} expects an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
    return value


class Dd(BaseTool):
    """
    Fluent builder and runner for the `dd` utility.

        out = Dd("dd").input("src.img").output("dst.img").bs("4M").status("none").spawn()

    Every setter returns the instance. `spawn` always runs the version check
    first and raises one of the DdError subclasses on failure.
    """

    def __init__(self, binary: str, runner: Optional[ProcessRunner] = None) -> None:
        super().__init__(name="dd", binary=binary, runner=runner)
        self._min_version: Optional[Version] = None
        self._input: Optional[str] = None
        self._output: Optional[str] = None
        self.options: List[str] = []

    # ---- configuration -----------------------------------------------------

    def min_version(self, major: int, minor: int) -> "Dd":
        self._min_version = Version(major, minor)
        return self

    def input(self, path: PathArg) -> "Dd":
        self._input = os.fspath(path)
        return self

    def output(self, path: PathArg) -> "Dd":
        self._output = os.fspath(path)
        return self

    def arg(self, key: str, value: object) -> "Dd":
        self.options.append(f"{key}={value}")
        return self

    def bs(self, value: str) -> "Dd":
        return self.arg("bs", value)

    def ibs(self, value: str) -> "Dd":
        return self.arg("ibs", value)

    def obs(self, value: str) -> "Dd":
        return self.arg("obs", value)

    def cbs(self, value: str) -> "Dd":
        return self.arg("cbs", value)

    def count(self, value: int) -> "Dd":
        return self.arg("count", _non_negative("count", value))

    def seek(self, value: int) -> "Dd":
        return self.arg("seek", _non_negative("seek", value))

    def skip(self, value: int) -> "Dd":
        return self.arg("skip", _non_negative("skip", value))

    def status(self, value: str) -> "Dd":
        return self.arg("status", value)

    def conv(self, value: str) -> "Dd":
        return self.arg("conv", value)

    def iflag(self, value: str) -> "Dd":
        return self.arg("iflag", value)

    def oflag(self, value: str) -> "Dd":
        return self.arg("oflag", value)

    # ---- execution ---------------------------------------------------------

    def check(self) -> Version:
        """
        Make sure the binary can be launched and is recent enough.
        Returns the version it reported.
        """
        try:
            result = self.run_command([VERSION_FLAG])
        except OSError as exc:
            logger.warning("Cannot launch %s: %s", self.binary, exc)
            raise Missing() from exc

        if not result.success:
            try:
                stderr = result.stderr.decode("utf-8").strip()
            except UnicodeDecodeError as exc:
                raise InvalidEncoding() from exc
            logger.warning("%s %s failed: %s", self.binary, VERSION_FLAG, stderr)
            raise CantRun(stderr)

        try:
            stdout = result.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncoding() from exc

        version = parse_version_output(stdout)
        logger.debug("%s reports version %s", self.binary, version)

        if self._min_version is not None and version < self._min_version:
            logger.warning(
                "%s version %s is older than required %s",
                self.binary,
                version,
                self._min_version,
            )
            raise OldVersion(version, self._min_version)

        return version

    def args(self) -> List[str]:
        """Arguments for the copy itself: if=, then of=, then options in call order."""
        if self._input is None:
            raise NoInput()

        args = [f"if={self._input}"]
        if self._output is not None:
            args.append(f"of={self._output}")
        args.extend(self.options)
        return args

    def spawn(self) -> str:
        """Check the binary, run the copy and return its stdout."""
        self.check()
        args = self.args()

        try:
            result = self.run_command(args)
        except OSError as exc:
            logger.warning("Error spawning %s: %s", self.binary, exc)
            raise CantRun(str(exc)) from exc

        if not result.success:
            try:
                diagnostic = result.stderr.decode("utf-8").strip()
            except UnicodeDecodeError:
                diagnostic = ""
            logger.warning("%s exited with status %d", self.binary, result.returncode)
            raise CantRun(diagnostic or FAILED_PLACEHOLDER)

        try:
            return result.stdout.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidEncoding() from exc

    def run(self) -> DdOutcome:
        """Like `spawn`, but returns the failure instead of raising it."""
        try:
            return DdOutcome(output=self.spawn())
        except DdError as exc:
            return DdOutcome(error=exc)
