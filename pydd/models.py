from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, cast

if TYPE_CHECKING:
    from .errors import DdError


@dataclass(frozen=True, order=True)
class Version:
    major: int
    minor: int

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}"


@dataclass
class DdOutcome:
    """Either the captured stdout of a dd run or the error that stopped it."""

    output: Optional[str] = None
    error: Optional["DdError"] = None

    def __post_init__(self) -> None:
        if (self.output is None) == (self.error is None):
            raise ValueError("DdOutcome needs exactly one of output or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> str:
        if self.error is not None:
            raise self.error
        return cast(str, self.output)
