import gzip
from datetime import datetime
from pathlib import Path

import pytest

from rotation import RotatingWriter, RotationSettings, default_log_path
from rotation.backups import backup_path, cleanup_backups, list_backups, unique_backup_path


def _touch(path: Path, text: str = "old\n") -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def _all_text(directory: Path) -> str:
    return "".join(entry.read_text(encoding="utf-8") for entry in sorted(directory.iterdir()))


def test_backup_path_uses_millisecond_timestamp(tmp_path: Path) -> None:
    now = datetime(2024, 1, 2, 3, 4, 5, 678000)

    assert backup_path(tmp_path / "multus.log", now) == tmp_path / "multus-2024-01-02T03-04-05.678.log"


def test_unique_backup_path_skips_taken_names(tmp_path: Path) -> None:
    now = datetime(2024, 1, 2, 3, 4, 5, 678000)
    _touch(tmp_path / "multus-2024-01-02T03-04-05.678.log")
    _touch(tmp_path / "multus-2024-01-02T03-04-05.679.log.gz")

    assert unique_backup_path(tmp_path / "multus.log", now) == tmp_path / "multus-2024-01-02T03-04-05.680.log"


def test_writer_opens_lazily_and_creates_dirs(tmp_path: Path) -> None:
    log_path = tmp_path / "nested" / "dir" / "multus.log"
    writer = RotatingWriter(RotationSettings(filename=str(log_path)))
    assert not log_path.exists()

    writer.write("line\n")
    writer.close()

    assert log_path.read_text(encoding="utf-8") == "line\n"


def test_writer_appends_to_existing_file(tmp_path: Path) -> None:
    log_path = _touch(tmp_path / "multus.log")
    writer = RotatingWriter(RotationSettings(filename=str(log_path)))

    writer.write("new\n")
    writer.close()

    assert log_path.read_text(encoding="utf-8") == "old\nnew\n"
    assert list_backups(log_path) == []


def test_writer_reopens_after_close(tmp_path: Path) -> None:
    log_path = tmp_path / "multus.log"
    writer = RotatingWriter(RotationSettings(filename=str(log_path)))

    writer.write("a\n")
    writer.close()
    writer.write("b\n")
    writer.close()

    assert log_path.read_text(encoding="utf-8") == "a\nb\n"


def test_writer_without_filename_uses_default_path(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setattr("tempfile.gettempdir", lambda: str(tmp_path))
    monkeypatch.setattr("sys.argv", ["/opt/cni/bin/multus"])
    writer = RotatingWriter(RotationSettings())

    writer.write("line\n")
    writer.close()

    assert default_log_path() == tmp_path / "multus-rotating.log"
    assert (tmp_path / "multus-rotating.log").read_text(encoding="utf-8") == "line\n"


def test_writer_rotates_when_size_exceeded(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("rotation.writer.MEGABYTE", 32)
    log_path = tmp_path / "multus.log"
    writer = RotatingWriter(RotationSettings(filename=str(log_path), max_size=1))

    writer.write("a" * 20)
    writer.write("b" * 20)
    writer.close()

    backups = list_backups(log_path)
    assert len(backups) == 1
    assert backups[0].path.read_text(encoding="utf-8") == "a" * 20
    assert log_path.read_text(encoding="utf-8") == "b" * 20


def test_writer_rotates_oversized_existing_file_on_open(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("rotation.writer.MEGABYTE", 32)
    log_path = _touch(tmp_path / "multus.log", "x" * 30)
    writer = RotatingWriter(RotationSettings(filename=str(log_path), max_size=1))

    writer.write("y" * 5)
    writer.close()

    assert log_path.read_text(encoding="utf-8") == "y" * 5
    assert len(list_backups(log_path)) == 1


def test_rotations_in_same_millisecond_keep_every_backup(tmp_path: Path) -> None:
    log_path = tmp_path / "multus.log"
    writer = RotatingWriter(RotationSettings(filename=str(log_path)))
    now = datetime(2024, 1, 2, 3, 4, 5, 678000)

    writer.write("first\n")
    writer.rotate(now=now)
    writer.write("second\n")
    writer.rotate(now=now)
    writer.close()

    names = sorted(backup.path.name for backup in list_backups(log_path))
    assert names == [
        "multus-2024-01-02T03-04-05.678.log",
        "multus-2024-01-02T03-04-05.679.log",
    ]
    assert _all_text(tmp_path) == "first\nsecond\n"


def test_cleanup_failure_does_not_lose_the_line(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("rotation.writer.MEGABYTE", 32)

    def failing_cleanup(*_args, **_kwargs):
        raise OSError("cannot prune")

    monkeypatch.setattr("rotation.writer.cleanup_backups", failing_cleanup)
    log_path = tmp_path / "multus.log"
    writer = RotatingWriter(RotationSettings(filename=str(log_path), max_size=1))
    writer.write("a" * 20)

    with pytest.raises(OSError):
        writer.write("b" * 20)
    writer.close()

    assert log_path.read_text(encoding="utf-8") == "b" * 20
    assert len(list_backups(log_path)) == 1


def test_rotate_compresses_backup(tmp_path: Path) -> None:
    log_path = tmp_path / "multus.log"
    writer = RotatingWriter(RotationSettings(filename=str(log_path), compress=True))
    writer.write("first\n")

    writer.rotate(now=datetime(2024, 1, 2, 3, 4, 5, 678000))
    writer.close()

    compressed = tmp_path / "multus-2024-01-02T03-04-05.678.log.gz"
    assert compressed.exists()
    assert not (tmp_path / "multus-2024-01-02T03-04-05.678.log").exists()
    with gzip.open(compressed, "rt", encoding="utf-8") as f:
        assert f.read() == "first\n"
    assert not log_path.exists()


def test_cleanup_keeps_newest_backups(tmp_path: Path) -> None:
    log_path = tmp_path / "multus.log"
    _touch(tmp_path / "multus-2024-01-01T00-00-00.000.log")
    _touch(tmp_path / "multus-2024-01-02T00-00-00.000.log")
    _touch(tmp_path / "multus-2024-01-03T00-00-00.000.log")
    _touch(tmp_path / "other-2024-01-01T00-00-00.000.log")

    cleanup_backups(log_path, max_backups=2, max_age=0, compress=False, now=datetime(2024, 1, 4))

    remaining = sorted(entry.name for entry in tmp_path.iterdir())
    assert remaining == [
        "multus-2024-01-02T00-00-00.000.log",
        "multus-2024-01-03T00-00-00.000.log",
        "other-2024-01-01T00-00-00.000.log",
    ]


def test_cleanup_removes_expired_backups(tmp_path: Path) -> None:
    log_path = tmp_path / "multus.log"
    _touch(tmp_path / "multus-2024-01-01T00-00-00.000.log")
    _touch(tmp_path / "multus-2024-01-09T12-00-00.000.log")

    cleanup_backups(log_path, max_backups=0, max_age=1, compress=False, now=datetime(2024, 1, 10))

    remaining = sorted(entry.name for entry in tmp_path.iterdir())
    assert remaining == ["multus-2024-01-09T12-00-00.000.log"]


def test_list_backups_includes_compressed_and_ignores_noise(tmp_path: Path) -> None:
    log_path = _touch(tmp_path / "multus.log")
    _touch(tmp_path / "multus-2024-01-01T00-00-00.000.log.gz")
    _touch(tmp_path / "multus-2024-01-02T00-00-00.000.log")
    _touch(tmp_path / "multus-garbage.log")

    backups = list_backups(log_path)

    assert [backup.path.name for backup in backups] == [
        "multus-2024-01-02T00-00-00.000.log",
        "multus-2024-01-01T00-00-00.000.log.gz",
    ]
