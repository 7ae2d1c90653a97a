"""Unit tests for ffmpeg audio capture."""

import pytest
from pathlib import Path

from talk2text.audio.capture import (
    CaptureController,
    build_capture_command,
    default_input,
    is_benign_exit,
    resolve_input,
)
from talk2text.errors import ConfigurationError, ExecutableNotFoundError, SubprocessFailedError
from talk2text.models.session import Session


@pytest.fixture
def session(config):
    return Session(settings=config)


@pytest.fixture
def outcome():
    return {"captured": [], "errors": []}


@pytest.fixture
def controller(fake_runner, session, outcome):
    return CaptureController(
        fake_runner,
        session,
        on_captured=outcome["captured"].append,
        on_error=outcome["errors"].append,
    )


@pytest.mark.unit
class TestCaptureCommand:
    """ffmpeg command lines."""

    def test_live_recording(self, config):
        command = build_capture_command(config, Path("/tmp/out.wav"))

        assert command == [
            "ffmpeg", "-f", "pulse", "-i", "default", "-t", "300",
            "-ar", "16000", "-ac", "1", "-y", "/tmp/out.wav",
        ]

    def test_without_timeout(self, make_config):
        config = make_config(capture={"timeout_seconds": None})

        command = build_capture_command(config, Path("/tmp/out.wav"))

        assert "-t" not in command

    def test_file_conversion(self, config):
        command = build_capture_command(config, Path("/tmp/out.wav"), input_file="/media/talk.mp4")

        assert command == [
            "ffmpeg", "-i", "/media/talk.mp4",
            "-ar", "16000", "-ac", "1", "-y", "/tmp/out.wav",
        ]

    def test_dshow_requires_device(self, make_config):
        config = make_config(capture={"input_format": None, "input_device": None})

        with pytest.raises(ConfigurationError, match="input_device"):
            build_capture_command(config, Path("out.wav"), platform="win32")

    @pytest.mark.parametrize("platform, expected", [
        ("linux", ("pulse", "default")),
        ("darwin", ("avfoundation", ":default")),
        ("win32", ("dshow", None)),
        ("sunos5", (None, None)),
    ])
    def test_platform_defaults(self, platform, expected):
        assert default_input(platform) == expected

    def test_configured_format_without_device_gets_no_default(self, make_config):
        config = make_config(capture={"input_format": "alsa", "input_device": None})

        assert resolve_input(config, "linux") == ("alsa", None)

    def test_benign_exit_codes(self, config):
        assert is_benign_exit(config, "dshow", 255)
        assert not is_benign_exit(config, "dshow", 1)
        assert not is_benign_exit(config, "pulse", 255)
        assert not is_benign_exit(config, None, 255)


@pytest.mark.unit
class TestCaptureController:
    """Test cases for CaptureController."""

    def test_missing_ffmpeg(self, controller, monkeypatch, fake_runner):
        monkeypatch.setattr("talk2text.audio.capture.shutil.which", lambda program: None)

        with pytest.raises(ExecutableNotFoundError, match="ffmpeg"):
            controller.start()

        assert fake_runner.handles == []

    def test_start_records_into_temp_file(self, controller, session, fake_runner, ffmpeg_available,
                                          temp_data_dir):
        handle = controller.start()

        assert handle.name == "capture"
        assert session.capture is handle
        assert session.capture_live
        assert handle.command[-1] == str(Path(temp_data_dir) / "capture.wav")

    def test_stop_interrupts_and_hands_file_on(self, controller, session, fake_runner,
                                               ffmpeg_available, outcome):
        handle = controller.start()

        controller.stop()
        assert handle.interrupts == 1
        fake_runner.finish(handle, 255)

        assert outcome["captured"] == [controller.output_path]
        assert outcome["errors"] == []
        assert session.capture is None

    def test_timeout_finishes_normally(self, controller, fake_runner, ffmpeg_available, outcome):
        handle = controller.start()

        fake_runner.finish(handle, 0)

        assert outcome["captured"] == [controller.output_path]

    def test_dshow_timeout_code_is_not_an_error(self, make_config, fake_runner, ffmpeg_available, outcome):
        config = make_config(capture={"input_format": "dshow", "input_device": "audio=Mic"})
        controller = CaptureController(fake_runner, Session(settings=config),
                                       outcome["captured"].append, outcome["errors"].append)
        handle = controller.start()

        fake_runner.finish(handle, 255)

        assert outcome["captured"] == [controller.output_path]
        assert outcome["errors"] == []

    def test_device_failure(self, controller, session, fake_runner, ffmpeg_available, outcome):
        handle = controller.start()

        fake_runner.finish(handle, 1)

        assert outcome["captured"] == []
        error = outcome["errors"][0]
        assert isinstance(error, SubprocessFailedError)
        assert error.returncode == 1
        assert "input device" in str(error)
        assert session.capture is None

    def test_conversion_failure_names_the_file(self, controller, session, fake_runner,
                                               ffmpeg_available, outcome):
        session.input_file = "/media/broken.mp4"
        handle = controller.start()
        assert handle.command[1:3] == ["-i", "/media/broken.mp4"]

        fake_runner.finish(handle, 1)

        assert "Couldn't convert /media/broken.mp4" in str(outcome["errors"][0])

    def test_stop_without_capture_is_noop(self, controller, fake_runner):
        controller.stop()

        assert fake_runner.handles == []
