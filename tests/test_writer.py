from pathlib import Path

from qrbatch.dispatcher import JobStatus
from qrbatch.records import Record
from qrbatch.writer import FileWriter


def test_write_success_reports_size(tmp_path, encoder):
    dest = tmp_path / "alice.png"
    outcome = FileWriter(encoder, "Q", 128).write(Record("alice", "123"), dest, index=3)

    assert outcome.status is JobStatus.WRITTEN
    assert outcome.index == 3
    assert outcome.path == dest
    assert outcome.size == dest.stat().st_size > 0
    assert encoder.calls == [("123", "Q", 128, dest)]


def test_encoder_failure_is_contained(tmp_path, failing_encoder):
    dest = tmp_path / "alice.png"
    outcome = FileWriter(failing_encoder).write(Record("alice", "123"), dest)

    assert outcome.status is JobStatus.FAILED
    assert outcome.path == dest
    assert "exploded" in outcome.error


def test_empty_file_fails_validation(tmp_path):
    def empty_encoder(payload, level, size, destination):
        Path(destination).write_bytes(b"")

    dest = tmp_path / "empty.png"
    outcome = FileWriter(empty_encoder).write(Record("empty", "x"), dest)
    assert outcome.status is JobStatus.FAILED
    assert outcome.error == "file is empty"


def test_missing_file_fails_validation(tmp_path):
    def silent_encoder(payload, level, size, destination):
        pass

    dest = tmp_path / "ghost.png"
    outcome = FileWriter(silent_encoder).write(Record("ghost", "x"), dest)
    assert outcome.status is JobStatus.FAILED
    assert outcome.path == dest


def test_unreadable_file_fails_validation(tmp_path, encoder, monkeypatch):
    monkeypatch.setattr("qrbatch.writer.os.access", lambda path, mode: False)

    dest = tmp_path / "locked.png"
    outcome = FileWriter(encoder).write(Record("locked", "x"), dest)
    assert outcome.status is JobStatus.FAILED
    assert outcome.error == "file is not readable"
