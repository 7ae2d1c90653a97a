"""Transcription module for talk2text."""

from .engine import TranscriptionController, build_transcription_command, clean_output
from .progress import ProgressIndicator, parse_progress
from .publisher import TranscriptionPublisher

__all__ = [
    "TranscriptionController",
    "build_transcription_command",
    "clean_output",
    "ProgressIndicator",
    "parse_progress",
    "TranscriptionPublisher",
]
