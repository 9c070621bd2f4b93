from __future__ import annotations

from typing import Optional

from .models import Version
from .tools.base import ToolError


class DdError(ToolError):
    """Base for every way a dd invocation can fail."""

    message = "dd failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


class Missing(DdError):
    message = "The 'dd' binary is missing or corrupted."


class CantRun(DdError):
    """dd launched but exited unsuccessfully, or could not be launched for the copy."""

    def __init__(self, diagnostic: str) -> None:
        self.diagnostic = diagnostic
        super().__init__(f"An error occurred while running 'dd': {diagnostic}")


class InvalidEncoding(DdError):
    message = "Unable to decode 'dd' output as UTF-8."


class InvalidOutputFormat(DdError):
    message = "Invalid output format returned from 'dd --version'."


class OldVersion(DdError):
    def __init__(self, found: Version, required: Version) -> None:
        self.found = found
        self.required = required
        super().__init__(
            f"The 'dd' binary version {found} is older than the minimum {required}."
        )


class NoInput(DdError):
    message = "No input given to 'dd'."
