"""On-demand installation of the whisper.cpp engine and its models."""

import shlex
import shutil
import logging
from collections import deque
from pathlib import Path
from typing import Callable, Deque, List, Optional, Tuple

from ..errors import InstallationError, SubprocessFailedError, Talk2TextError
from ..models.install import (
    InstallAction,
    InstallationState,
    InstallStage,
    Reentry,
    Transition,
)
from ..models.process import ExitStatus, ProcessResult
from ..process.runner import ProcessHandle, ProcessRunner
from . import layout
from .state_machine import STAGE_LABELS, decide

logger = logging.getLogger(__name__)

_REENTRY_BY_STATUS = {
    ExitStatus.FINISHED: Reentry.FINISHED,
    ExitStatus.INTERRUPTED: Reentry.INTERRUPTED,
    ExitStatus.FAILED: Reentry.FAILED,
}


class DependencyInstaller:
    """Drives the install state machine, one subprocess at a time.

    Every call to `check` probes the disk again and asks the state machine
    what to do. When a step's subprocess exits, `check` runs again with the
    step's outcome.
    """

    def __init__(self,
                 runner: ProcessRunner,
                 confirm: Callable[[str], bool],
                 on_ready: Callable[[], None],
                 on_error: Callable[[Exception], None],
                 on_stop: Optional[Callable[[], None]] = None,
                 on_step_started: Optional[Callable[[InstallStage], None]] = None,
                 max_log_lines: int = 500):
        """Initialize installer.

        Args:
            runner: Process runner for build and download steps
            confirm: Asks the user a yes/no question
            on_ready: Called when everything is installed and capture may start
            on_error: Receives failures raised after a step's subprocess exited
            on_stop: Called when installation ends without reaching ready
            on_step_started: Called after a step's subprocess was spawned
            max_log_lines: Size of the in-memory output log
        """
        self.runner = runner
        self.confirm = confirm
        self.on_ready = on_ready
        self.on_error = on_error
        self.on_stop = on_stop
        self.on_step_started = on_step_started

        self.settings = None
        self.process: Optional[ProcessHandle] = None
        self.stage: Optional[InstallStage] = None
        self.output: Deque[str] = deque(maxlen=max_log_lines)

    @property
    def is_running(self) -> bool:
        return self.process is not None and self.process.is_alive()

    def start(self, settings) -> Transition:
        """Begin a fresh installation check for a session.

        Errors found before any subprocess runs are raised to the caller.
        """
        self.settings = settings
        return self.check(Reentry.INITIAL)

    def interrupt(self) -> None:
        """Interrupt the running step. Its exit triggers the rollback."""
        if self.is_running:
            logger.info(f"Interrupting {STAGE_LABELS[self.stage]}")
            self.process.interrupt()

    def check(self,
              reentry: Reentry = Reentry.INITIAL,
              last_stage: Optional[InstallStage] = None,
              result: Optional[ProcessResult] = None) -> Transition:
        """Probe the disk, decide the next transition and carry it out."""
        if self.settings is None:
            raise RuntimeError("Installer has no settings, call start() first")

        state = layout.probe(self.settings)
        transition = decide(state, reentry, last_stage, self.settings.get_auto_install())
        logger.info(f"Installer {reentry.value}: {transition.action.value} {transition.stage.value}")

        if transition.action is InstallAction.SPAWN:
            self._spawn(state, transition)
        elif transition.action is InstallAction.READY:
            self._ready(transition)
        elif transition.action is InstallAction.ROLLBACK:
            self._rollback(state, transition)
        else:
            self._fail(state, transition, reentry, result)
        return transition

    def _spawn(self, state: InstallationState, transition: Transition) -> None:
        if transition.confirm and not self.confirm(transition.message):
            logger.info(f"User declined: {transition.message}")
            self._stop()
            return

        command, cwd = self._command_for(state, transition.stage)
        if transition.stage is InstallStage.BUILD_ENGINE:
            state.engine_dir.parent.mkdir(parents=True, exist_ok=True)

        self.output.clear()
        self.process = self.runner.run(
            command,
            on_exit=self._on_step_exit,
            on_stdout_line=self._log_line,
            on_stderr_line=self._log_line,
            cwd=str(cwd),
            name=transition.stage.value,
        )
        self.stage = transition.stage
        logger.info(f"{STAGE_LABELS[transition.stage]}...")
        if self.on_step_started:
            self.on_step_started(transition.stage)

    def _ready(self, transition: Transition) -> None:
        if transition.confirm and not self.confirm(transition.message):
            logger.info("Installation complete, recording not started")
            self._stop()
            return
        self.on_ready()

    def _rollback(self, state: InstallationState, transition: Transition) -> None:
        """Remove what the interrupted step left behind, then stop."""
        if transition.stage is InstallStage.BUILD_ENGINE:
            if state.engine_dir.exists():
                logger.warning(f"Removing partial installation {state.engine_dir}")
                shutil.rmtree(state.engine_dir, ignore_errors=True)
        else:
            self._remove_partial_model(state, transition.stage)
        logger.info(transition.message)
        self._stop()

    def _fail(self, state: InstallationState, transition: Transition,
              reentry: Reentry, result: Optional[ProcessResult]) -> None:
        self._stop()
        if reentry is Reentry.FAILED:
            if transition.stage in (InstallStage.DOWNLOAD_MODEL, InstallStage.QUANTIZE_MODEL):
                self._remove_partial_model(state, transition.stage)
            tail = "\n".join(list(self.output)[-5:])
            message = transition.message
            if tail:
                message = f"{message}:\n{tail}"
            raise SubprocessFailedError(STAGE_LABELS[transition.stage],
                                        result.returncode if result else None, message)
        raise InstallationError(transition.message)

    def _remove_partial_model(self, state: InstallationState, stage: InstallStage) -> None:
        partial = state.quantized_file if stage is InstallStage.QUANTIZE_MODEL else state.model_file
        if partial is not None and partial.exists() and not state.model_override:
            logger.warning(f"Removing partial model file {partial}")
            try:
                partial.unlink()
            except OSError as e:
                logger.error(f"Could not remove partial model file {partial}: {e}")

    def _stop(self) -> None:
        if self.on_stop:
            self.on_stop()

    def _on_step_exit(self, handle: ProcessHandle, result: ProcessResult) -> None:
        if handle is not self.process:
            logger.debug(f"Ignoring exit of untracked process {handle}")
            return

        stage = self.stage
        self.process = None
        self.stage = None

        try:
            self.check(_REENTRY_BY_STATUS[result.status], stage, result)
        except Talk2TextError as e:
            self.on_error(e)

    def _log_line(self, line: str) -> None:
        self.output.append(line)
        logger.debug(f"[install] {line}")

    def _command_for(self, state: InstallationState, stage: InstallStage) -> Tuple[List[str], Path]:
        """Command line and working directory of a step."""
        engine_dir = state.engine_dir

        if stage is InstallStage.BUILD_ENGINE:
            if state.source_present:
                return ["make", "-C", str(engine_dir)], engine_dir.parent
            url = self.settings.get('install.repository_url')
            script = (f"git clone --depth 1 {shlex.quote(url)} {shlex.quote(str(engine_dir))}"
                      f" && make -C {shlex.quote(str(engine_dir))}")
            return ["sh", "-c", script], engine_dir.parent

        if stage is InstallStage.DOWNLOAD_MODEL:
            model = self.settings.get('whisper.model')
            script_path = Path(layout.MODELS_DIR_NAME) / layout.DOWNLOAD_SCRIPT
            return ["sh", str(script_path), model], engine_dir

        if stage is InstallStage.QUANTIZE_MODEL:
            quantize = self.settings.get('whisper.quantize')
            source = state.model_file.relative_to(engine_dir)
            target = state.quantized_file.relative_to(engine_dir)
            script = (f"make quantize && ./quantize {shlex.quote(str(source))} "
                      f"{shlex.quote(str(target))} {shlex.quote(quantize)}")
            return ["sh", "-c", script], engine_dir

        raise ValueError(f"No command for stage {stage}")
