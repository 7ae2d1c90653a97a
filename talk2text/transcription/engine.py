"""Transcription through the whisper.cpp command line engine."""

import logging
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from ..errors import EmptyTranscriptionError, SubprocessFailedError
from ..hooks import Hooks
from ..install import layout
from ..models.process import ExitStatus, ProcessResult
from ..models.session import Session
from ..process.runner import ProcessHandle, ProcessRunner
from ..storage.file_manager import FileManager
from .progress import ProgressIndicator
from .publisher import TranscriptionPublisher

logger = logging.getLogger(__name__)


def engine_program(config) -> str:
    """The inference engine: the installed binary, or whisper.command without auto-install."""
    if config.get_auto_install() is False:
        return str(config.get('whisper.command'))
    binary = layout.find_engine_binary(config)
    if binary is None:
        binary = layout.engine_dir(config) / layout.default_binary_name()
    return str(binary)


def build_transcription_command(config, audio_path: Path) -> List[str]:
    command = [engine_program(config)]

    threads = config.get('whisper.threads')
    if threads:
        command += ["--threads", str(threads)]
    if config.get('whisper.speed_up'):
        command.append("--speed-up")
    if config.get('whisper.translate'):
        command.append("--translate")
    if config.get('whisper.print_progress'):
        command.append("--print-progress")

    command += [
        "--language", config.get('whisper.language'),
        "--model", str(layout.resolved_model_file(config)),
        "--no-timestamps",
        "--file", str(audio_path),
    ]
    return command


def clean_output(output: Union[str, Iterable[str]]) -> str:
    """Drop leading and trailing blank lines and surrounding whitespace."""
    if not isinstance(output, str):
        output = "\n".join(output)
    return output.strip()


class TranscriptionController:
    """Runs the engine over an audio file and delivers the text."""

    def __init__(self,
                 runner: ProcessRunner,
                 session: Session,
                 hooks: Hooks,
                 on_error: Callable[[Exception], None],
                 on_done: Callable[[], None],
                 publisher: Optional[TranscriptionPublisher] = None):
        """Initialize transcription controller.

        Args:
            runner: Process runner used to spawn the engine
            session: Session whose transcription handle this controller owns
            hooks: Pre-process, post-process and after-transcription hooks
            on_error: Receives failures, after cleanup has run
            on_done: Called once the transcription process is fully handled
            publisher: Publishes progress and delivered text
        """
        self.runner = runner
        self.session = session
        self.hooks = hooks
        self.on_error = on_error
        self.on_done = on_done
        self.publisher = publisher or TranscriptionPublisher()
        self.progress = ProgressIndicator(self.publisher)
        self.staging: Optional[List[str]] = None

    def start(self, audio_path: Path) -> ProcessHandle:
        """Start the engine on audio_path."""
        settings = self.session.settings
        self.hooks.run_pre_process(audio_path)
        command = build_transcription_command(settings, audio_path)

        self.staging = []
        self.progress.reset()
        on_stderr_line = self.progress.feed if settings.get('whisper.print_progress') else None

        handle = self.runner.run(
            command,
            on_exit=self._on_exit,
            on_stdout_line=self._stage_line,
            on_stderr_line=on_stderr_line,
            name="transcription",
        )
        self.session.transcription = handle
        logger.info(f"Transcribing {audio_path}")
        return handle

    def cancel(self) -> None:
        """Terminate the engine. Cleanup runs from its exit callback."""
        if self.session.transcription_live:
            self.session.transcription.terminate()

    def _stage_line(self, line: str) -> None:
        if self.staging is not None:
            self.staging.append(line)

    def _on_exit(self, handle: ProcessHandle, result: ProcessResult) -> None:
        error = None
        try:
            if result.status is ExitStatus.FINISHED:
                self._deliver(self.staging or [])
            elif result.status is ExitStatus.FAILED:
                raise SubprocessFailedError("Transcription", result.returncode)
            else:
                logger.info("Transcription cancelled")
        except Exception as e:
            logger.error(f"Transcription failed: {e}", exc_info=not isinstance(e, (
                SubprocessFailedError, EmptyTranscriptionError)))
            error = e
        finally:
            self._cleanup(handle)

        if error is not None:
            self.on_error(error)
        self.on_done()

    def _deliver(self, staged: List[str]) -> None:
        text = clean_output(staged)
        if not text:
            raise EmptyTranscriptionError("Transcription produced no output")

        text = self.hooks.run_post_process(text)
        settings = self.session.settings
        target = self.session.target
        path = None

        if settings.get('output.insert_text_at_point', True) and target is not None:
            target.document.insert(target.position, text)
            if not settings.get('output.return_cursor_to_start', True):
                target.position += len(text)
        else:
            path = FileManager(settings.get_data_directory()).save_transcript(text)

        logger.info(f"📝 Transcribed: '{text[:60]}'")
        self.publisher.publish_text(text, path)
        self.hooks.run_after_transcription(text)

    def _cleanup(self, handle: ProcessHandle) -> None:
        """Dispose the staging buffer, reset progress and release the session slot."""
        self.staging = None
        self.progress.reset()
        if self.session.transcription is handle:
            self.session.transcription = None
