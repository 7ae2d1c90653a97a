"""Main application entry point for talk2text."""

import sys
import argparse
import logging
from pathlib import Path
from typing import Optional

from . import __version__
from .config import Talk2TextConfig
from .errors import Talk2TextError
from .models.session import InsertionTarget
from .process import CallbackLoop, ProcessRunner
from .services.session_coordinator import SessionCoordinator
from .storage.document import FileDocument
from .ui.console import ConsoleFrontend

logger = logging.getLogger(__name__)


class Application:
    """Wires the coordinator to a terminal and runs the callback loop."""

    def __init__(self, config_path: Optional[str] = None, log_level: Optional[str] = None):
        # Load configuration
        self.config = Talk2TextConfig(config_path)
        # Set up logging (override config with command line if specified)
        level = log_level or self.config.get('logging.level', 'INFO')
        setup_logging(self.config, level)

        self.loop = CallbackLoop()
        self.runner = ProcessRunner(self.loop)
        self.frontend = ConsoleFrontend()
        self.coordinator = SessionCoordinator(self.config, self.runner, self.frontend.confirm)

    def run(self, input_file: Optional[str] = None, target: Optional[InsertionTarget] = None) -> int:
        """Start a session and drive it until it is idle again.

        Ctrl+C while the session runs is forwarded to the coordinator: it stops
        the recording, offers to cancel the transcription, or aborts an install.

        Returns:
            Process exit code
        """
        try:
            self.coordinator.dispatch(input_file=input_file, target=target)
        except Talk2TextError as e:
            logger.error(f"Could not start: {e}")
            self.frontend.report(e)
            return 1

        while True:
            try:
                self.loop.run_until(self.coordinator.is_idle)
                break
            except KeyboardInterrupt:
                self.frontend.console.print()
                if not self.coordinator.is_idle():
                    self.coordinator.dispatch()

        self.frontend.close()
        return 1 if self.frontend.errors else 0


def parse_target(value: Optional[str]) -> Optional[InsertionTarget]:
    """Parse FILE or FILE:OFFSET into an insertion target (end of file by default)."""
    if not value:
        return None
    path, offset = value, None
    head, sep, tail = value.rpartition(":")
    if sep and head and tail.isdigit():
        path, offset = head, int(tail)
    document = FileDocument(path)
    if offset is None:
        return InsertionTarget.at_end(document)
    return InsertionTarget(document=document, position=offset)


FILE_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'
CONSOLE_LOG_FORMAT = '%(levelname)s: %(message)s'


def setup_logging(config, level: str = "INFO") -> str:
    """Send all records to the log file and warnings to stderr.

    stdout stays free for the rich status output.

    Returns:
        Path of the log file
    """
    log_file_path = config.get_log_file_path()
    Path(log_file_path).parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_file_path, encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    handlers = [file_handler]

    if config.get('logging.console_output', True):
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter(CONSOLE_LOG_FORMAT))
        handlers.append(console_handler)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in handlers:
        root_logger.addHandler(handler)

    logger.info(f"talk2text {__version__} starting, config: {config.config_file or 'defaults'}")
    logger.info(f"Log file: {log_file_path} (level {level})")
    return log_file_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="talk2text",
        description="talk2text - speech to text with ffmpeg and whisper.cpp",
        epilog="Press Ctrl+C to stop recording, cancel a transcription or abort an install"
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to configuration YAML file (default: talk2text.yaml if present)"
    )

    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Set logging level (default: from config, else INFO)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"talk2text {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command")

    run_parser = subparsers.add_parser("run", help="Record from the microphone and transcribe")
    run_parser.add_argument(
        "--file",
        type=str,
        help="Transcribe this audio/video file instead of recording"
    )
    run_parser.add_argument(
        "--into",
        type=str,
        metavar="FILE[:OFFSET]",
        help="Insert the text into FILE at OFFSET (default: end of file) instead of saving a transcript"
    )

    file_parser = subparsers.add_parser("file", help="Transcribe an audio/video file")
    file_parser.add_argument("path", type=str, help="File to transcribe")
    file_parser.add_argument(
        "--into",
        type=str,
        metavar="FILE[:OFFSET]",
        help="Insert the text into FILE at OFFSET (default: end of file) instead of saving a transcript"
    )

    return parser


def main(argv=None) -> None:
    """Main entry point for talk2text."""
    parser = build_parser()
    args = parser.parse_args(argv)

    command = args.command or "run"
    input_file = args.path if command == "file" else getattr(args, "file", None)
    target = parse_target(getattr(args, "into", None))

    try:
        app = Application(args.config, args.log_level)
    except (FileNotFoundError, ValueError) as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        sys.exit(2)

    sys.exit(app.run(input_file=input_file, target=target))


if __name__ == "__main__":
    main()
