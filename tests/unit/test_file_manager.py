"""Unit tests for transcript storage and text documents."""

import pytest
import tempfile
from pathlib import Path
from datetime import datetime

from talk2text.main import parse_target
from talk2text.models.session import InsertionTarget
from talk2text.storage.document import FileDocument
from talk2text.storage.file_manager import FileManager, TEMP_AUDIO_NAME, temp_audio_path


@pytest.mark.unit
class TestFileManager:
    """Test cases for FileManager class."""

    def test_initialization(self, temp_data_dir):
        """Test FileManager initialization."""
        fm = FileManager(temp_data_dir)

        assert fm.data_dir == Path(temp_data_dir)
        assert fm.transcripts_dir == Path(temp_data_dir) / "transcripts"
        assert fm.logs_dir == Path(temp_data_dir) / "logs"

        # Check directories were created
        assert fm.transcripts_dir.exists()
        assert fm.logs_dir.exists()

    def test_save_transcript(self, temp_data_dir):
        """Test saving a transcript labelled with its creation time."""
        fm = FileManager(temp_data_dir)
        created = datetime(2024, 3, 1, 9, 30, 15)

        path = fm.save_transcript("Hello world", created)

        assert path.name == "transcript_20240301_093015.txt"
        assert path.read_text(encoding="utf-8") == "Hello world\n"

    def test_same_second_does_not_overwrite(self, temp_data_dir):
        fm = FileManager(temp_data_dir)
        created = datetime(2024, 3, 1, 9, 30, 15)

        first = fm.save_transcript("first", created)
        second = fm.save_transcript("second\n", created)

        assert first != second
        assert second.name == "transcript_20240301_093015_1.txt"
        assert first.read_text(encoding="utf-8") == "first\n"
        assert second.read_text(encoding="utf-8") == "second\n"
        assert fm.list_transcripts() == [first, second]

    def test_unicode_text(self, temp_data_dir):
        fm = FileManager(temp_data_dir)

        path = fm.save_transcript("Grüße, 世界")

        assert path.read_text(encoding="utf-8") == "Grüße, 世界\n"


@pytest.mark.unit
class TestTempAudioPath:
    """Capture scratch file."""

    def test_default_location(self):
        assert temp_audio_path() == Path(tempfile.gettempdir()) / TEMP_AUDIO_NAME

    def test_configured_location(self, config, temp_data_dir):
        assert temp_audio_path(config) == Path(temp_data_dir) / "capture.wav"


@pytest.mark.unit
class TestFileDocument:
    """Test cases for FileDocument."""

    def test_insert_into_existing_file(self, temp_data_dir):
        path = Path(temp_data_dir) / "notes.txt"
        path.write_text("Hello !", encoding="utf-8")
        document = FileDocument(str(path))

        document.insert(6, "world")

        assert path.read_text(encoding="utf-8") == "Hello world!"
        assert document.length() == 12

    def test_insert_creates_missing_file(self, temp_data_dir):
        path = Path(temp_data_dir) / "new.txt"
        document = FileDocument(str(path))

        assert document.length() == 0
        assert not document.read_only
        document.insert(0, "first words")

        assert path.read_text(encoding="utf-8") == "first words"

    def test_position_past_end_appends(self, temp_data_dir):
        path = Path(temp_data_dir) / "notes.txt"
        path.write_text("abc", encoding="utf-8")

        FileDocument(str(path)).insert(99, "d")

        assert path.read_text(encoding="utf-8") == "abcd"

    def test_line_endings_preserved(self, temp_data_dir):
        path = Path(temp_data_dir) / "dos.txt"
        path.write_bytes(b"one\r\ntwo")
        document = FileDocument(str(path))

        document.insert(document.length(), "\r\nthree")

        assert path.read_bytes() == b"one\r\ntwo\r\nthree"


@pytest.mark.unit
class TestParseTarget:
    """--into argument parsing."""

    def test_none(self):
        assert parse_target(None) is None

    def test_end_of_file_by_default(self, temp_data_dir):
        path = Path(temp_data_dir) / "notes.txt"
        path.write_text("12345", encoding="utf-8")

        target = parse_target(str(path))

        assert isinstance(target, InsertionTarget)
        assert target.document.path == path
        assert target.position == 5

    def test_explicit_offset(self, temp_data_dir):
        path = Path(temp_data_dir) / "notes.txt"

        target = parse_target(f"{path}:3")

        assert target.document.path == path
        assert target.position == 3

    def test_colon_without_number_is_part_of_path(self):
        target = parse_target("C:notes.txt")

        assert target.document.path == Path("C:notes.txt")
