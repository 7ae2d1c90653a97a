"""Audio capture through an external ffmpeg process."""

import sys
import shutil
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import ConfigurationError, ExecutableNotFoundError, SubprocessFailedError
from ..models.process import ExitStatus, ProcessResult
from ..models.session import Session
from ..process.runner import ProcessHandle, ProcessRunner
from ..storage.file_manager import temp_audio_path

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000
CHANNELS = 1

# Default ffmpeg input format and device per platform
PLATFORM_INPUTS: Dict[str, Tuple[Optional[str], Optional[str]]] = {
    "linux": ("pulse", "default"),
    "darwin": ("avfoundation", ":default"),
    "win32": ("dshow", None),  # dshow needs an explicit "audio=<name>" device
}


def default_input(platform: Optional[str] = None) -> Tuple[Optional[str], Optional[str]]:
    platform = platform or sys.platform
    for prefix, value in PLATFORM_INPUTS.items():
        if platform.startswith(prefix):
            return value
    return None, None


def resolve_input(config, platform: Optional[str] = None) -> Tuple[Optional[str], Optional[str]]:
    """Configured input format and device, falling back to platform defaults."""
    default_format, default_device = default_input(platform)
    input_format = config.get('capture.input_format') or default_format
    input_device = config.get('capture.input_device')
    if not input_device and input_format == default_format:
        input_device = default_device
    return input_format, input_device


def build_capture_command(config, output_path: Path, input_file: Optional[str] = None,
                          platform: Optional[str] = None) -> List[str]:
    """ffmpeg command that records (or converts input_file) to 16 kHz mono WAV."""
    command = [config.get('capture.program', 'ffmpeg')]

    if input_file:
        command += ["-i", str(input_file)]
    else:
        input_format, input_device = resolve_input(config, platform)
        if not input_format or not input_device:
            raise ConfigurationError(
                "No audio input configured, set capture.input_format and capture.input_device")
        command += ["-f", input_format, "-i", input_device]
        timeout = config.get('capture.timeout_seconds')
        if timeout:
            command += ["-t", str(timeout)]

    command += ["-ar", str(SAMPLE_RATE), "-ac", str(CHANNELS), "-y", str(output_path)]
    return command


def is_benign_exit(config, input_format: Optional[str], returncode: Optional[int]) -> bool:
    """True if ffmpeg's nonzero code for this input format means it stopped on its own.

    The table comes from capture.benign_exit_codes. The shipped entry (dshow
    exits 255 when its time limit elapses) is observed behaviour only.
    """
    table = config.get('capture.benign_exit_codes') or {}
    if not input_format or returncode is None:
        return False
    return returncode in (table.get(input_format) or [])


class CaptureController:
    """Starts and stops ffmpeg and hands the recorded file on."""

    def __init__(self,
                 runner: ProcessRunner,
                 session: Session,
                 on_captured: Callable[[Path], None],
                 on_error: Callable[[Exception], None]):
        """Initialize capture controller.

        Args:
            runner: Process runner used to spawn ffmpeg
            session: Session whose capture handle this controller owns
            on_captured: Called with the audio file once recording has finished
            on_error: Called with the failure if ffmpeg exits abnormally
        """
        self.runner = runner
        self.session = session
        self.on_captured = on_captured
        self.on_error = on_error
        self.output_path: Optional[Path] = None
        self.input_format: Optional[str] = None

    def start(self) -> ProcessHandle:
        """Start recording (or converting the session's input file).

        Raises:
            ExecutableNotFoundError: ffmpeg is not installed
            ConfigurationError: no input file and no usable input device
        """
        settings = self.session.settings
        program = settings.get('capture.program', 'ffmpeg')
        if shutil.which(program) is None:
            raise ExecutableNotFoundError(program, f"{program} not found, it is needed to record audio")

        self.output_path = temp_audio_path(settings)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        command = build_capture_command(settings, self.output_path, self.session.input_file)
        self.input_format = None if self.session.input_file else resolve_input(settings)[0]

        handle = self.runner.run(command, on_exit=self._on_exit, name="capture")
        self.session.capture = handle

        if self.session.input_file:
            logger.info(f"Converting {self.session.input_file}")
        else:
            logger.info("Recording audio...")
        return handle

    def stop(self) -> None:
        """Stop recording. ffmpeg finalizes the file and exits."""
        if self.session.capture_live:
            self.session.capture.interrupt()

    def _on_exit(self, handle: ProcessHandle, result: ProcessResult) -> None:
        if self.session.capture is handle:
            self.session.capture = None

        if result.status in (ExitStatus.FINISHED, ExitStatus.INTERRUPTED) or \
                is_benign_exit(self.session.settings, self.input_format, result.returncode):
            logger.info(f"Capture finished: {self.output_path}")
            self.on_captured(self.output_path)
            return

        if self.session.input_file:
            message = f"Couldn't convert {self.session.input_file} (ffmpeg exit code {result.returncode})"
        else:
            message = f"Couldn't record audio from the input device (ffmpeg exit code {result.returncode})"
        self.on_error(SubprocessFailedError("Recording", result.returncode, message))
