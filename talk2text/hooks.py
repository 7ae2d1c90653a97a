"""Extension points around a dictation session."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .errors import PreflightVetoError
from .models.session import InsertionTarget

logger = logging.getLogger(__name__)

PreflightHook = Callable[[Optional[InsertionTarget]], Optional[bool]]
PreProcessHook = Callable[[Path], None]
PostProcessHook = Callable[[str], Optional[str]]
AfterTranscriptionHook = Callable[[str], None]


def refuse_read_only_target(target: Optional[InsertionTarget]) -> None:
    """Pre-flight hook: veto when the insertion target cannot be written."""
    if target is not None and target.document.read_only:
        raise PreflightVetoError(f"Cannot insert into read-only document {target.document.name}")


@dataclass
class Hooks:
    """Callbacks run at fixed points of a session.

    before_run: called with the insertion target before anything starts. A
        hook vetoes by raising PreflightVetoError or returning False.
    pre_process: called with the captured audio file before inference.
    post_process: called with the transcribed text, returns the replacement
        text (None keeps it unchanged).
    after_transcription: called with the delivered text.
    """
    before_run: List[PreflightHook] = field(default_factory=lambda: [refuse_read_only_target])
    pre_process: List[PreProcessHook] = field(default_factory=list)
    post_process: List[PostProcessHook] = field(default_factory=list)
    after_transcription: List[AfterTranscriptionHook] = field(default_factory=list)

    def run_before_run(self, target: Optional[InsertionTarget]) -> None:
        for hook in self.before_run:
            if hook(target) is False:
                raise PreflightVetoError(f"Operation vetoed by {getattr(hook, '__name__', hook)}")

    def run_pre_process(self, audio_path: Path) -> None:
        for hook in self.pre_process:
            hook(audio_path)

    def run_post_process(self, text: str) -> str:
        for hook in self.post_process:
            result = hook(text)
            if result is not None:
                text = result
        return text

    def run_after_transcription(self, text: str) -> None:
        for hook in self.after_transcription:
            hook(text)
