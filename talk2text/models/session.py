"""Session-related data models."""

from dataclasses import dataclass
from typing import Optional, Any

from ..storage.document import TextDocument


@dataclass
class InsertionTarget:
    """Where transcribed text goes: a document and a cursor position in it."""
    document: TextDocument
    position: int

    @classmethod
    def at_end(cls, document: TextDocument) -> "InsertionTarget":
        return cls(document=document, position=document.length())


@dataclass
class Session:
    """State of the single dictation session.

    Holds at most one capture process and one transcription process. Both are
    set only briefly at the same time, while capture hands off to
    transcription.
    """
    capture: Optional[Any] = None          # ProcessHandle of ffmpeg
    transcription: Optional[Any] = None    # ProcessHandle of the inference engine
    target: Optional[InsertionTarget] = None
    input_file: Optional[str] = None
    settings: Optional[Any] = None         # Talk2TextConfig snapshot

    @property
    def capture_live(self) -> bool:
        return self.capture is not None and self.capture.is_alive()

    @property
    def transcription_live(self) -> bool:
        return self.transcription is not None and self.transcription.is_alive()

    def clear(self) -> None:
        self.capture = None
        self.transcription = None
        self.target = None
        self.input_file = None
        self.settings = None
