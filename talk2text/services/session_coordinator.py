"""Session coordinator: the single "do what I mean" entry point."""

import shutil
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..audio.capture import CaptureController
from ..config import Talk2TextConfig
from ..config.validation import validate_settings
from ..errors import ConfigurationError, ExecutableNotFoundError
from ..hooks import Hooks
from ..install.installer import DependencyInstaller
from ..models.install import InstallStage
from ..models.session import InsertionTarget, Session
from ..process.runner import ProcessRunner
from ..transcription.engine import TranscriptionController
from ..transcription.publisher import TranscriptionPublisher
from .publisher import (
    SessionPublisher,
    STATUS_IDLE,
    STATUS_INSTALLING,
    STATUS_RECORDING,
    STATUS_TRANSCRIBING,
)

logger = logging.getLogger(__name__)


class DispatchAction(Enum):
    """What a call to dispatch() did."""
    CANCELLED_TRANSCRIPTION = "cancelled_transcription"
    KEPT_TRANSCRIPTION = "kept_transcription"
    STOPPED_CAPTURE = "stopped_capture"
    INTERRUPTED_INSTALL = "interrupted_install"
    STARTED = "started"
    ABORTED = "aborted"  # started, but the user declined before anything ran


class SessionCoordinator:
    """Owns the session and routes every user action to the right component."""

    def __init__(self,
                 config: Talk2TextConfig,
                 runner: ProcessRunner,
                 confirm: Callable[[str], bool],
                 hooks: Optional[Hooks] = None,
                 publisher: Optional[SessionPublisher] = None,
                 transcription_publisher: Optional[TranscriptionPublisher] = None):
        """Initialize session coordinator.

        Args:
            config: Application configuration, snapshotted at every session start
            runner: Process runner shared by all components
            confirm: Asks the user a yes/no question
            hooks: Session hooks, defaults to refusing read-only targets
            publisher: Publishes status changes and asynchronous errors
            transcription_publisher: Publishes progress and delivered text
        """
        self.config = config
        self.runner = runner
        self.confirm = confirm
        self.hooks = hooks or Hooks()
        self.publisher = publisher or SessionPublisher()
        self.session = Session()

        self.installer = DependencyInstaller(
            runner,
            confirm,
            on_ready=self._start_capture,
            on_error=self._on_failure,
            on_stop=self._finish,
            on_step_started=self._on_install_step,
        )
        self.capture = CaptureController(
            runner,
            self.session,
            on_captured=self._on_captured,
            on_error=self._on_failure,
        )
        self.transcriber = TranscriptionController(
            runner,
            self.session,
            self.hooks,
            on_error=self._on_failure,
            on_done=self._finish,
            publisher=transcription_publisher,
        )

    def is_idle(self) -> bool:
        return not (self.session.transcription_live
                    or self.session.capture_live
                    or self.installer.is_running)

    def dispatch(self, input_file: Optional[str] = None,
                 target: Optional[InsertionTarget] = None) -> DispatchAction:
        """Do the right thing for the current state.

        Cancels a running transcription (after confirmation), stops a running
        recording, interrupts a running installation step, or starts a new
        session when idle.

        Args:
            input_file: Transcribe this file instead of the microphone
            target: Document and position the text is inserted at

        Raises:
            ConfigurationError, ExecutableNotFoundError, PreflightVetoError,
            InstallationError: when a new session cannot start
        """
        if self.session.transcription_live:
            if self.confirm("Cancel transcription?"):
                self.transcriber.cancel()
                return DispatchAction.CANCELLED_TRANSCRIPTION
            return DispatchAction.KEPT_TRANSCRIPTION

        if self.session.capture_live:
            self.capture.stop()
            return DispatchAction.STOPPED_CAPTURE

        if self.installer.is_running:
            self.installer.interrupt()
            return DispatchAction.INTERRUPTED_INSTALL

        self._start(input_file, target)
        return DispatchAction.ABORTED if self.is_idle() else DispatchAction.STARTED

    def transcribe_file(self, input_file: str,
                        target: Optional[InsertionTarget] = None) -> DispatchAction:
        """Transcribe an audio or video file instead of recording."""
        return self.dispatch(input_file=input_file, target=target)

    def _start(self, input_file: Optional[str], target: Optional[InsertionTarget]) -> None:
        settings = self.config.snapshot()
        self.session.clear()
        self.session.settings = settings
        self.session.target = target

        try:
            self.hooks.run_before_run(target)
            validate_settings(settings)

            if input_file is not None:
                path = Path(input_file).expanduser()
                if not path.is_file():
                    raise ConfigurationError(f"Input file not found: {input_file}")
                self.session.input_file = str(path.absolute())

            if settings.get_auto_install() is False:
                self._check_user_engine(settings)
                self._start_capture()
            else:
                self.installer.start(settings)
        except Exception:
            self._reset()
            raise

    def _check_user_engine(self, settings) -> None:
        command = settings.get('whisper.command')
        if not command or shutil.which(str(command)) is None:
            raise ExecutableNotFoundError(
                str(command or "whisper.command"),
                f"Inference engine '{command}' not found. Automatic installation is disabled, "
                f"so whisper.command must name an installed engine")

    def _start_capture(self) -> None:
        self.capture.start()
        self.publisher.publish_status(STATUS_RECORDING)

    def _on_install_step(self, stage: InstallStage) -> None:
        self.publisher.publish_status(STATUS_INSTALLING)

    def _on_captured(self, audio_path: Path) -> None:
        try:
            self.transcriber.start(audio_path)
        except Exception as e:
            self._on_failure(e)
            return
        self.publisher.publish_status(STATUS_TRANSCRIBING)

    def _on_failure(self, error: Exception) -> None:
        self.publisher.publish_error(error)
        self._finish()

    def _finish(self) -> None:
        """Return to idle once nothing is running any more."""
        if self.is_idle():
            self._reset()

    def _reset(self) -> None:
        self.session.clear()
        self.publisher.publish_status(STATUS_IDLE)
