"""Data models for the talk2text application."""

from .process import ExitStatus, ProcessResult, classify_exit
from .session import Session, InsertionTarget
from .install import (
    InstallStage,
    Reentry,
    InstallAction,
    InstallationState,
    Transition,
)

__all__ = [
    "ExitStatus",
    "ProcessResult",
    "classify_exit",
    "Session",
    "InsertionTarget",
    # Installer state machine
    "InstallStage",
    "Reentry",
    "InstallAction",
    "InstallationState",
    "Transition",
]
