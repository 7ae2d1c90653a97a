"""Exception types raised by talk2text."""

from typing import Optional


class Talk2TextError(Exception):
    """Base class for all talk2text errors."""


class ConfigurationError(Talk2TextError, ValueError):
    """Configuration is invalid or incomplete. Raised before anything is spawned."""


class ExecutableNotFoundError(Talk2TextError, FileNotFoundError):
    """A required external program could not be resolved."""

    def __init__(self, program: str, message: Optional[str] = None):
        self.program = program
        super().__init__(message or f"Executable not found: {program}")


class SubprocessFailedError(Talk2TextError, RuntimeError):
    """An external process exited with an unexpected nonzero code."""

    def __init__(self, phase: str, returncode: Optional[int], message: Optional[str] = None):
        self.phase = phase
        self.returncode = returncode
        super().__init__(message or f"{phase} failed (exit code {returncode})")


class EmptyTranscriptionError(Talk2TextError, RuntimeError):
    """The inference engine exited cleanly but produced no text."""


class InstallationError(Talk2TextError, RuntimeError):
    """The inference engine or its model cannot be installed automatically."""


class PreflightVetoError(Talk2TextError, RuntimeError):
    """A pre-flight hook refused to start the operation."""
