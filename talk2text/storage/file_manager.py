"""File management for transcripts, logs and the capture scratch file."""

import tempfile
import logging
from pathlib import Path
from datetime import datetime
from typing import List, Optional


logger = logging.getLogger(__name__)

TEMP_AUDIO_NAME = "talk2text.wav"


def temp_audio_path(config=None) -> Path:
    """Fixed scratch path that every capture overwrites."""
    configured = config.get('capture.temp_file') if config is not None else None
    if configured:
        return Path(configured)
    return Path(tempfile.gettempdir()) / TEMP_AUDIO_NAME


class FileManager:
    """Manages file storage and organization for transcripts and logs."""

    def __init__(self, data_dir: str = "./data"):
        """Initialize file manager with data directory.

        Args:
            data_dir: Base directory for storing all data
        """
        self.data_dir = Path(data_dir)
        self.transcripts_dir = self.data_dir / "transcripts"
        self.logs_dir = self.data_dir / "logs"

        # Create directory structure
        self._ensure_directories()

        logger.info(f"FileManager initialized with data_dir: {self.data_dir}")

    def _ensure_directories(self) -> None:
        """Ensure all required directories exist."""
        for directory in [self.data_dir, self.transcripts_dir, self.logs_dir]:
            directory.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured directory exists: {directory}")

    def save_transcript(self, text: str, created: Optional[datetime] = None) -> Path:
        """Write text to a new transcript file labelled with its creation time.

        Args:
            text: Transcribed text
            created: Creation time used for the label, defaults to now

        Returns:
            Path to the new transcript file
        """
        created = created or datetime.now()
        label = created.strftime("%Y%m%d_%H%M%S")
        transcript_path = self.transcripts_dir / f"transcript_{label}.txt"

        # Never overwrite an earlier transcript from the same second
        counter = 1
        while transcript_path.exists():
            transcript_path = self.transcripts_dir / f"transcript_{label}_{counter}.txt"
            counter += 1

        with open(transcript_path, 'w', encoding='utf-8') as f:
            f.write(text)
            if not text.endswith("\n"):
                f.write("\n")

        logger.info(f"Transcript saved: {transcript_path} ({len(text)} characters)")
        return transcript_path

    def list_transcripts(self) -> List[Path]:
        """List transcript files, oldest first."""
        transcripts = sorted(self.transcripts_dir.glob("transcript_*.txt"))
        logger.debug(f"Found {len(transcripts)} transcripts")
        return transcripts
