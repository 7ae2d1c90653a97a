"""Asynchronous external process runner."""

import os
import shutil
import signal
import subprocess
import logging
from threading import Thread
from typing import Callable, List, Optional, Sequence

from ..errors import ExecutableNotFoundError
from ..models.process import ProcessResult, classify_exit
from .loop import CallbackLoop

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]
ExitCallback = Callable[["ProcessHandle", ProcessResult], None]

_WINDOWS = os.name == "nt"


class ProcessHandle:
    """A spawned external process."""

    def __init__(self, name: str, command: List[str], popen: subprocess.Popen):
        self.name = name
        self.command = command
        self.popen = popen
        self.cancel_requested = False
        self.result: Optional[ProcessResult] = None

    @property
    def pid(self) -> int:
        return self.popen.pid

    def is_alive(self) -> bool:
        """True until the exit callback has been delivered."""
        return self.result is None

    def interrupt(self) -> None:
        """Ask the process group to stop, the way Ctrl+C would."""
        if self.popen.poll() is not None:
            return
        self.cancel_requested = True
        logger.info(f"Interrupting {self.name} (pid {self.pid})")
        if _WINDOWS:
            self._signal(signal.CTRL_BREAK_EVENT)
        else:
            self._signal(signal.SIGINT)

    def terminate(self) -> None:
        """Ask the process group to terminate."""
        if self.popen.poll() is not None:
            return
        self.cancel_requested = True
        logger.info(f"Terminating {self.name} (pid {self.pid})")
        if _WINDOWS:
            self.popen.terminate()
        else:
            self._signal(signal.SIGTERM)

    def _signal(self, signum: int) -> None:
        # Children lead their own session: signal the whole group, not just the shell.
        try:
            if _WINDOWS:
                self.popen.send_signal(signum)
            else:
                os.killpg(self.popen.pid, signum)
        except ProcessLookupError:
            logger.debug(f"{self.name} already gone")

    def __repr__(self) -> str:
        return f"<ProcessHandle {self.name} pid={self.pid}>"


class ProcessRunner:
    """Spawns external commands and reports their output and exit through a CallbackLoop."""

    def __init__(self, loop: CallbackLoop):
        """Initialize process runner.

        Args:
            loop: Loop that receives output lines and exit notifications
        """
        self.loop = loop

    def run(self,
            command: Sequence[str],
            on_exit: ExitCallback,
            on_stdout_line: Optional[LineCallback] = None,
            on_stderr_line: Optional[LineCallback] = None,
            cwd: Optional[str] = None,
            name: Optional[str] = None) -> ProcessHandle:
        """Start a command without a shell and return immediately.

        Args:
            command: Program followed by its arguments
            on_exit: Called with (handle, result) once the process has ended
                and all of its output lines have been delivered
            on_stdout_line: Called for every stdout line, output discarded if None
            on_stderr_line: Called for every stderr line, output discarded if None
            cwd: Working directory for the process
            name: Label used in logs

        Raises:
            ExecutableNotFoundError: if the program cannot be found
        """
        command = [str(part) for part in command]
        name = name or os.path.basename(command[0])

        program = command[0]
        if os.sep not in program and (os.altsep is None or os.altsep not in program):
            if shutil.which(program) is None:
                raise ExecutableNotFoundError(program)

        kwargs = {}
        if _WINDOWS:
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        else:
            # Keep terminal Ctrl+C away from children; we forward it ourselves.
            kwargs["start_new_session"] = True

        logger.info(f"Starting {name}: {' '.join(command)}")
        try:
            popen = subprocess.Popen(
                command,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE if on_stdout_line else subprocess.DEVNULL,
                stderr=subprocess.PIPE if on_stderr_line else subprocess.DEVNULL,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                **kwargs
            )
        except FileNotFoundError as e:
            raise ExecutableNotFoundError(program) from e
        except PermissionError as e:
            raise ExecutableNotFoundError(program, f"Executable not runnable: {program} ({e})") from e

        handle = ProcessHandle(name, command, popen)

        readers = []
        if on_stdout_line:
            readers.append(self._start_reader(handle, popen.stdout, on_stdout_line, "stdout"))
        if on_stderr_line:
            readers.append(self._start_reader(handle, popen.stderr, on_stderr_line, "stderr"))

        waiter = Thread(target=self._wait, args=(handle, readers, on_exit), daemon=True)
        waiter.name = f"{name}-waiter"
        waiter.start()
        return handle

    def _start_reader(self, handle: ProcessHandle, stream, callback: LineCallback, label: str) -> Thread:
        thread = Thread(target=self._read_lines, args=(stream, callback), daemon=True)
        thread.name = f"{handle.name}-{label}"
        thread.start()
        return thread

    def _read_lines(self, stream, callback: LineCallback) -> None:
        """Internal method: forward each line of a pipe to the loop."""
        with stream:
            for line in stream:
                self.loop.call_soon(callback, line.rstrip("\r\n"))

    def _wait(self, handle: ProcessHandle, readers: List[Thread], on_exit: ExitCallback) -> None:
        """Internal method: wait for exit in a background thread, then notify the loop."""
        returncode = handle.popen.wait()
        for reader in readers:
            reader.join()
        self.loop.call_soon(self._deliver_exit, handle, returncode, on_exit)

    def _deliver_exit(self, handle: ProcessHandle, returncode: int, on_exit: ExitCallback) -> None:
        result = ProcessResult(classify_exit(returncode, handle.cancel_requested), returncode)
        handle.result = result
        logger.info(f"{handle.name} exited: {result.status.value} (code {returncode})")
        on_exit(handle, result)
