"""Exceptions raised by setup steps.

Only the CLI layer turns these into ``typer.Exit`` codes.
"""


class SetupError(Exception):
    """Base class for setup workflow errors."""


class FatalSetupError(SetupError):
    """The run cannot continue (exit code 1)."""

    def __init__(self, message: str, hint: str | None = None):
        super().__init__(message)
        self.hint = hint


class SetupCancelled(SetupError):
    """The operator stopped the run before anything was changed (exit code 0)."""
