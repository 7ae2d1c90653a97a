"""Pytest configuration and fixtures for talk2text tests."""

import pytest
import tempfile
import logging
import shutil
import wave
from pathlib import Path
from typing import List, Optional

import numpy as np
from pubsub import pub

from talk2text.config import Talk2TextConfig
from talk2text.install import layout
from talk2text.models.process import ProcessResult, classify_exit
from talk2text.storage.document import TextDocument


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    for marker in ("unit", "integration", "hardware"):
        config.addinivalue_line("markers", f"{marker}: {marker} tests")


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def sample_audio_file(temp_data_dir):
    """Create a one second 16 kHz mono WAV file (440 Hz sine)."""
    file_path = Path(temp_data_dir) / "test_audio.wav"

    t = np.linspace(0, 1.0, 16000, False)
    audio_data = (np.sin(2 * np.pi * 440 * t) * 32767).astype(np.int16)

    with wave.open(str(file_path), 'wb') as wf:
        wf.setnchannels(1)
        wf.setsampwidth(2)
        wf.setframerate(16000)
        wf.writeframes(audio_data.tobytes())

    return str(file_path)


@pytest.fixture
def make_config(temp_data_dir):
    """Build a configuration rooted in the temporary directory."""
    root = Path(temp_data_dir)

    def _make(**sections) -> Talk2TextConfig:
        values = {
            "install": {"directory": str(root / "install")},
            "storage": {"data_directory": str(root / "data")},
            "capture": {
                "temp_file": str(root / "capture.wav"),
                "input_format": "pulse",
                "input_device": "default",
            },
        }
        for section, overrides in sections.items():
            values.setdefault(section, {}).update(overrides)
        return Talk2TextConfig(values=values)

    return _make


@pytest.fixture
def config(make_config):
    return make_config()


@pytest.fixture
def ffmpeg_available(monkeypatch):
    """Pretend every external program is on PATH."""
    monkeypatch.setattr(shutil, "which", lambda program, *args, **kwargs: f"/usr/bin/{program}")


def install_engine(config, with_model: bool = True) -> Path:
    """Create the files an installed engine (and model) would leave on disk."""
    engine_dir = layout.engine_dir(config)
    engine_dir.mkdir(parents=True, exist_ok=True)
    (engine_dir / "Makefile").write_text("all:\n")
    binary = engine_dir / layout.default_binary_name()
    binary.write_text("#!/bin/sh\n")
    if with_model:
        install_model(config)
    return binary


def install_model(config, quantize: Optional[str] = None) -> Path:
    model = layout.model_file(config, quantize)
    model.parent.mkdir(parents=True, exist_ok=True)
    model.write_bytes(b"ggml")
    return model


class FakeHandle:
    """Stand-in for ProcessHandle that never spawns anything."""

    def __init__(self, name, command, on_exit, on_stdout_line, on_stderr_line, cwd):
        self.name = name
        self.command = command
        self.on_exit = on_exit
        self.on_stdout_line = on_stdout_line
        self.on_stderr_line = on_stderr_line
        self.cwd = cwd
        self.result: Optional[ProcessResult] = None
        self.cancel_requested = False
        self.interrupts = 0
        self.terminations = 0

    def is_alive(self) -> bool:
        return self.result is None

    def interrupt(self) -> None:
        self.interrupts += 1
        self.cancel_requested = True

    def terminate(self) -> None:
        self.terminations += 1
        self.cancel_requested = True


class FakeRunner:
    """Records commands; tests drive output and exits by hand."""

    def __init__(self):
        self.handles: List[FakeHandle] = []

    def run(self, command, on_exit, on_stdout_line=None, on_stderr_line=None, cwd=None, name=None):
        handle = FakeHandle(name, [str(c) for c in command], on_exit, on_stdout_line, on_stderr_line, cwd)
        self.handles.append(handle)
        return handle

    @property
    def names(self) -> List[str]:
        return [h.name for h in self.handles]

    def last(self, name: Optional[str] = None) -> FakeHandle:
        for handle in reversed(self.handles):
            if name is None or handle.name == name:
                return handle
        raise AssertionError(f"No process named {name} was started")

    def stdout(self, handle: FakeHandle, *lines: str) -> None:
        for line in lines:
            handle.on_stdout_line(line)

    def stderr(self, handle: FakeHandle, *lines: str) -> None:
        for line in lines:
            if handle.on_stderr_line:
                handle.on_stderr_line(line)

    def finish(self, handle: FakeHandle, returncode: int = 0) -> None:
        handle.result = ProcessResult(classify_exit(returncode, handle.cancel_requested), returncode)
        handle.on_exit(handle, handle.result)


@pytest.fixture
def fake_runner():
    return FakeRunner()


class Answers:
    """Scripted replies for confirmation prompts."""

    def __init__(self, *replies: bool, default: bool = True):
        self.replies = list(replies)
        self.default = default
        self.questions: List[str] = []

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        if self.replies:
            return self.replies.pop(0)
        return self.default


@pytest.fixture
def answers():
    return Answers()


class MemoryDocument(TextDocument):
    """In-memory document used as an insertion target."""

    def __init__(self, text: str = "", read_only: bool = False):
        self.text = text
        self._read_only = read_only
        self.name = "memory"

    @property
    def read_only(self) -> bool:
        return self._read_only

    def length(self) -> int:
        return len(self.text)

    def insert(self, position: int, text: str) -> None:
        self.text = self.text[:position] + text + self.text[position:]
