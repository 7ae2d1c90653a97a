"""Unit tests for the YAML configuration loader."""

import pytest
from pathlib import Path

from talk2text.config import Talk2TextConfig


@pytest.mark.unit
class TestTalk2TextConfig:
    """Test cases for Talk2TextConfig."""

    def test_defaults_without_file(self, monkeypatch, temp_data_dir):
        monkeypatch.chdir(temp_data_dir)
        config = Talk2TextConfig()

        assert config.config_file is None
        assert config.get('whisper.model') == "base"
        assert config.get('whisper.language') == "en"
        assert config.get('capture.program') == "ffmpeg"
        assert config.get('capture.benign_exit_codes') == {"dshow": [255]}
        assert config.get_auto_install() is True

    def test_missing_explicit_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            Talk2TextConfig(str(Path(temp_data_dir) / "missing.yaml"))

    def test_load_merges_with_defaults(self, temp_data_dir):
        config_path = Path(temp_data_dir) / "talk2text.yaml"
        config_path.write_text(
            "whisper:\n"
            "  model: small.en\n"
            "  threads: 4\n"
            "install:\n"
            "  directory: engines\n"
            "  auto_install: manual\n"
        )

        config = Talk2TextConfig(str(config_path))

        assert config.get('whisper.model') == "small.en"
        assert config.get('whisper.threads') == 4
        assert config.get('whisper.language') == "en"
        assert config.get_auto_install() == "manual"
        # Relative paths resolve against the config file
        assert config.get_install_directory() == (Path(temp_data_dir) / "engines").absolute()

    def test_invalid_yaml(self, temp_data_dir):
        config_path = Path(temp_data_dir) / "bad.yaml"
        config_path.write_text("whisper: [unclosed\n")

        with pytest.raises(ValueError, match="Invalid YAML"):
            Talk2TextConfig(str(config_path))

    def test_uses_talk2text_yaml_in_working_directory(self, monkeypatch, temp_data_dir):
        Path(temp_data_dir, "talk2text.yaml").write_text("whisper:\n  language: de\n")
        monkeypatch.chdir(temp_data_dir)

        config = Talk2TextConfig()

        assert config.get('whisper.language') == "de"

    def test_get_and_set_dotted_keys(self, config):
        config.set('whisper.threads', 8)
        config.set('extra.nested.value', "x")

        assert config.get('whisper.threads') == 8
        assert config.get('extra.nested.value') == "x"
        assert config.get('whisper.unknown', "fallback") == "fallback"

    def test_snapshot_is_independent(self, config):
        snapshot = config.snapshot()
        config.set('whisper.model', "tiny")

        assert snapshot.get('whisper.model') == "base"
        assert config.get('whisper.model') == "tiny"

    @pytest.mark.parametrize("raw, expected", [
        (True, True), (False, False), ("manual", "manual"), ("Manual", "manual"),
        ("yes", True), ("off", False),
    ])
    def test_auto_install_modes(self, make_config, raw, expected):
        config = make_config(install={"auto_install": raw})
        assert config.get_auto_install() == expected

    def test_log_file_defaults_to_data_directory(self, config, temp_data_dir):
        assert Path(config.get_log_file_path()) == Path(temp_data_dir).absolute() / "data" / "logs" / "talk2text.log"
