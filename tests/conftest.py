from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import Callable, List, Sequence, Union

import pytest

from pydd.tools.base import SubprocessResult

Response = Union[SubprocessResult, BaseException]

posix_only = pytest.mark.skipif(
    sys.platform.startswith("win"), reason="stub binaries are POSIX shell scripts"
)


def ok(stdout: bytes = b"", stderr: bytes = b"") -> SubprocessResult:
    return SubprocessResult(stdout=stdout, stderr=stderr, returncode=0)


def failed(stderr: bytes = b"", returncode: int = 1) -> SubprocessResult:
    return SubprocessResult(stdout=b"", stderr=stderr, returncode=returncode)


class StubRunner:
    """Replays queued responses and records every command it was asked to run."""

    def __init__(self, *responses: Response) -> None:
        self.responses: List[Response] = list(responses)
        self.calls: List[List[str]] = []

    def run(self, cmd: Sequence[str]) -> SubprocessResult:
        self.calls.append(list(cmd))
        if not self.responses:
            raise AssertionError(f"unexpected command: {cmd}")
        response = self.responses.pop(0)
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def make_stub_dd(tmp_path: Path) -> Callable[..., Path]:
    """
    Write an executable shell script standing in for dd.
    Every invocation appends its arguments to <script>.log. With copies=True
    the script copies the if= file to the of= file like dd would.
    """

    def _make(
        version_text: str = "dd (stub) 8.32",
        copy_stdout: str = "",
        copy_exit: int = 0,
        copies: bool = False,
        name: str = "dd-stub",
    ) -> Path:
        script = tmp_path / name
        log = tmp_path / f"{name}.log"
        if copies:
            body = (
                'for arg in "$@"; do\n'
                '  case "$arg" in\n'
                '    if=*) src="${arg#if=}" ;;\n'
                '    of=*) dst="${arg#of=}" ;;\n'
                "  esac\n"
                "done\n"
                'cat "$src" > "$dst" || exit 1\n'
            )
        else:
            body = f"printf '%s' '{copy_stdout}'\nexit {copy_exit}\n"
        script.write_text(
            "#!/bin/sh\n"
            f'echo "$*" >> "{log}"\n'
            'if [ "$1" = "--version" ]; then\n'
            f"  printf '%s\\n' '{version_text}'\n"
            "  exit 0\n"
            "fi\n" + body
        )
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


def invocations(script: Path) -> List[str]:
    log = Path(f"{script}.log")
    if not log.exists():
        return []
    return log.read_text().splitlines()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith("PYDD_"):
            monkeypatch.delenv(name, raising=False)
