"""talk2text - dictation through ffmpeg and whisper.cpp."""

__version__ = "0.1.0"
