from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .lib.command import CmdResult


class BuildError(RuntimeError):
    """Base class for failures that abort an image build."""


class ConfigError(BuildError):
    """Raised when the build config file cannot be processed."""


class CommandError(BuildError):
    """An external command exited nonzero."""

    def __init__(self, message: str, result: "CmdResult") -> None:
        super().__init__(message)
        self.result = result

    @property
    def returncode(self) -> int:
        return self.result.returncode


class IntegrityError(BuildError):
    """A downloaded artifact did not match its published checksum."""
