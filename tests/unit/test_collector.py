# tests/unit/test_collector.py
import errno
import os
from pathlib import Path
from typing import Iterator

import pytest

from pairdiff.adapters.filesystem.local_fs import LocalFS
from pairdiff.domain.errors import DirectoryUnreadable
from pairdiff.services.collector_service import FileSetCollector


def test_collects_only_regular_files_sorted(tmp_path: Path):
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "sub").mkdir()
    (tmp_path / "sub" / "nested.txt").write_text("not collected")

    fs = FileSetCollector(LocalFS()).collect(tmp_path)

    assert [p.name for p in fs] == ["a.txt", "b.txt"]
    assert fs.directory == tmp_path
    assert len(fs) == 2
    assert fs[0] == tmp_path / "a.txt"


def test_symlinks_are_excluded(tmp_path: Path):
    target = tmp_path / "real.txt"
    target.write_text("x")
    try:
        os.symlink(target, tmp_path / "link.txt")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks not supported here")

    fs = FileSetCollector(LocalFS()).collect(tmp_path)
    assert [p.name for p in fs] == ["real.txt"]


def test_empty_directory_gives_empty_set(tmp_path: Path):
    assert len(FileSetCollector(LocalFS()).collect(tmp_path)) == 0


def test_missing_directory_raises(tmp_path: Path):
    missing = tmp_path / "nope"
    with pytest.raises(DirectoryUnreadable) as excinfo:
        FileSetCollector(LocalFS()).collect(missing)
    assert excinfo.value.directory == str(missing)
    assert str(missing) in str(excinfo.value)


def test_regular_file_as_directory_raises(tmp_path: Path):
    f = tmp_path / "file.txt"
    f.write_text("x")
    with pytest.raises(DirectoryUnreadable):
        FileSetCollector(LocalFS()).collect(f)


class ShortPathFS(LocalFS):
    """Pretends the platform path limit is tiny."""

    def path_max(self, directory: Path) -> int:
        return len(os.fsencode(str(directory))) + 8


def test_too_long_paths_are_skipped(tmp_path: Path, caplog):
    (tmp_path / "ok.txt").write_text("x")
    (tmp_path / "a_much_longer_name.txt").write_text("y")

    with caplog.at_level("WARNING"):
        fs = FileSetCollector(ShortPathFS()).collect(tmp_path)

    assert [p.name for p in fs] == ["ok.txt"]
    assert "too long" in caplog.text


class FSWithBadLookup(LocalFS):
    def list_dir(self, directory: Path) -> Iterator[str]:
        yield from [".", "..", "ok.txt", "gone.txt", "huge.txt"]

    def is_regular_file(self, path: Path) -> bool:
        if path.name == "gone.txt":
            raise FileNotFoundError(errno.ENOENT, "No such file or directory")
        if path.name == "huge.txt":
            raise OSError(errno.ENAMETOOLONG, "File name too long")
        return True


def test_dot_entries_and_failed_lookups_are_skipped(tmp_path: Path):
    fs = FileSetCollector(FSWithBadLookup()).collect(tmp_path)
    assert [p.name for p in fs] == ["ok.txt"]
