"""Storage for transcripts and documents."""

from .document import TextDocument, FileDocument
from .file_manager import FileManager, temp_audio_path

__all__ = [
    'TextDocument',
    'FileDocument',
    'FileManager',
    'temp_audio_path'
]
