"""Audio capture module."""

from .capture import CaptureController, build_capture_command

__all__ = [
    'CaptureController',
    'build_capture_command'
]
