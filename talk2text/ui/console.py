"""Terminal front end: prompts, status line and results."""

import logging
from pathlib import Path
from typing import List, Optional

from pubsub import pub
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm

from ..services.publisher import (
    ERROR_TOPIC,
    STATUS_TOPIC,
    STATUS_INSTALLING,
    STATUS_RECORDING,
    STATUS_TRANSCRIBING,
)
from ..transcription.publisher import PROGRESS_TOPIC, TEXT_TOPIC

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    STATUS_INSTALLING: ("🔧 Installing... press Ctrl+C to abort", "blue"),
    STATUS_RECORDING: ("🎙  Recording... press Ctrl+C to stop", "red"),
    STATUS_TRANSCRIBING: ("✍  Transcribing... press Ctrl+C to cancel", "yellow"),
}


class ConsoleFrontend:
    """Renders session events with rich and asks the user questions."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()
        self.errors: List[Exception] = []
        self.texts: List[str] = []

        pub.subscribe(self._on_status, STATUS_TOPIC)
        pub.subscribe(self._on_error, ERROR_TOPIC)
        pub.subscribe(self._on_progress, PROGRESS_TOPIC)
        pub.subscribe(self._on_text, TEXT_TOPIC)

    def confirm(self, question: str) -> bool:
        """Yes/no prompt. Ctrl+C or end of input answers no."""
        try:
            return Confirm.ask(question, console=self.console)
        except (KeyboardInterrupt, EOFError):
            self.console.print()
            return False

    def report(self, error: Exception) -> None:
        self.errors.append(error)
        self.console.print(f"❌ {error}", style="bold red")

    def close(self) -> None:
        pub.unsubscribe(self._on_status, STATUS_TOPIC)
        pub.unsubscribe(self._on_error, ERROR_TOPIC)
        pub.unsubscribe(self._on_progress, PROGRESS_TOPIC)
        pub.unsubscribe(self._on_text, TEXT_TOPIC)

    def _on_status(self, status: str) -> None:
        message = STATUS_MESSAGES.get(status)
        if message:
            text, style = message
            self.console.print(text, style=style)

    def _on_error(self, error: Exception) -> None:
        self.report(error)

    def _on_progress(self, percent: int) -> None:
        if percent > 0:
            self.console.print(f"   {percent:3d}%", style="dim", end="\r")

    def _on_text(self, text: str, path: Optional[Path] = None) -> None:
        self.texts.append(text)
        title = f"Saved to {path}" if path else "Inserted"
        self.console.print(Panel(text, title=title, border_style="green"))
