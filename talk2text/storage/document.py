"""Text documents that transcriptions can be inserted into."""

import os
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class TextDocument(ABC):
    """A document with character positions that text can be inserted at."""

    name: str = "document"

    @property
    @abstractmethod
    def read_only(self) -> bool:
        """True if text cannot be inserted."""
        pass

    @abstractmethod
    def length(self) -> int:
        """Number of characters in the document."""
        pass

    @abstractmethod
    def insert(self, position: int, text: str) -> None:
        """Insert text at a character position."""
        pass


class FileDocument(TextDocument):
    """A UTF-8 text file on disk. Missing files are created on first insert."""

    def __init__(self, path: str):
        self.path = Path(path)
        self.name = str(self.path)

    @property
    def read_only(self) -> bool:
        if self.path.exists():
            return not os.access(self.path, os.W_OK)
        return not os.access(self.path.parent if str(self.path.parent) else ".", os.W_OK)

    def _read(self) -> str:
        if not self.path.exists():
            return ""
        # newline="" keeps \r\n so character offsets match the file
        with open(self.path, 'r', encoding='utf-8', newline='') as f:
            return f.read()

    def length(self) -> int:
        return len(self._read())

    def insert(self, position: int, text: str) -> None:
        content = self._read()
        position = max(0, min(position, len(content)))
        with open(self.path, 'w', encoding='utf-8', newline='') as f:
            f.write(content[:position] + text + content[position:])
        logger.info(f"Inserted {len(text)} characters into {self.path} at {position}")
