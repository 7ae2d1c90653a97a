"""External process management."""

from .loop import CallbackLoop
from .runner import ProcessRunner, ProcessHandle

__all__ = [
    'CallbackLoop',
    'ProcessRunner',
    'ProcessHandle'
]
