# tests/cli/test_cli_compare.py
import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pairdiff.adapters.filesystem.local_fs import LocalFS
from pairdiff.cli.app import app

runner = CliRunner()


def _make_dirs(tmp_path: Path) -> tuple[Path, Path]:
    d1 = tmp_path / "d1"
    d2 = tmp_path / "d2"
    d1.mkdir()
    d2.mkdir()
    (d1 / "a.txt").write_text("foo")
    (d2 / "b.txt").write_text("foo")
    (d2 / "c.txt").write_text("bar")
    return d1, d2


def _pair_lines(stdout: str) -> list[str]:
    return [ln for ln in stdout.splitlines() if " result=" in ln]


def test_compare_reports_each_pair(tmp_path: Path):
    d1, d2 = _make_dirs(tmp_path)

    r = runner.invoke(app, [str(d1), str(d2), "2"])

    assert r.exit_code == 0, r.output
    lines = _pair_lines(r.stdout)
    assert len(lines) == 2
    assert any("a.txt <-> b.txt bytes=3 result=EQUAL" in ln for ln in lines)
    assert any("a.txt <-> c.txt bytes=3 result=DIFFER" in ln for ln in lines)


def test_header_and_summary(tmp_path: Path):
    d1, d2 = _make_dirs(tmp_path)

    r = runner.invoke(app, [str(d1), str(d2), "1", "--header", "--summary"])

    assert r.exit_code == 0, r.output
    out = r.stdout.splitlines()
    assert out[0] == "files_a=1 files_b=2 N=1"
    assert out[-1] == "equal=1 differ=1 error=0 launch_failed=0 bytes=6"


def test_empty_first_directory_exits_zero(tmp_path: Path):
    d1 = tmp_path / "empty"
    d1.mkdir()
    _, d2 = _make_dirs(tmp_path)

    r = runner.invoke(app, [str(d1), str(d2), "3"])

    assert r.exit_code == 0, r.output
    assert _pair_lines(r.stdout) == []


@pytest.mark.parametrize("n", ["0", "-1", "abc", "1.5"])
def test_bad_n_exits_2_without_touching_directories(tmp_path: Path, monkeypatch, n: str):
    d1, d2 = _make_dirs(tmp_path)
    listed = []

    def spy_list_dir(self, directory):
        listed.append(directory)
        return iter(())

    monkeypatch.setattr(LocalFS, "list_dir", spy_list_dir, raising=True)

    r = runner.invoke(app, [str(d1), str(d2), n])

    assert r.exit_code == 2
    assert listed == []


def test_wrong_argument_count_exits_2(tmp_path: Path):
    r = runner.invoke(app, [str(tmp_path)])
    assert r.exit_code == 2


def test_missing_directory_exits_1_and_names_it(tmp_path: Path):
    _, d2 = _make_dirs(tmp_path)
    missing = tmp_path / "does-not-exist"

    r = runner.invoke(app, [str(missing), str(d2), "2"])

    assert r.exit_code == 1
    assert str(missing) in r.output
    assert _pair_lines(r.stdout) == []


def test_unknown_mode_is_a_usage_error(tmp_path: Path):
    d1, d2 = _make_dirs(tmp_path)
    r = runner.invoke(app, [str(d1), str(d2), "2", "--mode", "green-threads"])
    assert r.exit_code == 2


def test_no_size_check_flag(tmp_path: Path):
    d1 = tmp_path / "d1"
    d2 = tmp_path / "d2"
    d1.mkdir()
    d2.mkdir()
    (d1 / "short").write_bytes(b"abc")
    (d2 / "long").write_bytes(b"abcdef")

    fast = runner.invoke(app, [str(d1), str(d2), "1"])
    slow = runner.invoke(app, [str(d1), str(d2), "1", "--no-size-check"])

    assert "bytes=0 result=DIFFER" in fast.stdout
    assert "bytes=3 result=DIFFER" in slow.stdout


def test_out_directory_gets_pairs_file(tmp_path: Path):
    d1, d2 = _make_dirs(tmp_path)
    out_dir = tmp_path / "reports"
    out_dir.mkdir()

    r = runner.invoke(app, [str(d1), str(d2), "2", "--out", str(out_dir), "--fmt", "json"])

    assert r.exit_code == 0, r.output
    data = json.loads((out_dir / "pairs.json").read_text(encoding="utf-8"))
    assert sorted(rec["verdict"] for rec in data) == ["DIFFER", "EQUAL"]


def test_unknown_fmt_fails_cleanly(tmp_path: Path):
    d1, d2 = _make_dirs(tmp_path)
    r = runner.invoke(app, [str(d1), str(d2), "2", "--out", str(tmp_path / "x"), "--fmt", "xml"])
    assert r.exit_code != 0
    assert "Unknown format" in r.output


def test_verbose_and_process_mode(tmp_path: Path):
    d1, d2 = _make_dirs(tmp_path)
    r = runner.invoke(app, [str(d1), str(d2), "2", "--mode", "process", "--verbose"])
    assert r.exit_code == 0, r.output
    assert len(_pair_lines(r.stdout)) == 2


def test_fatal_run_leaves_existing_out_file_alone(tmp_path: Path):
    _, d2 = _make_dirs(tmp_path)
    keep = tmp_path / "keep.json"
    keep.write_text('[{"precious": 1}]', encoding="utf-8")

    r = runner.invoke(app, [str(tmp_path / "missing"), str(d2), "2", "--out", str(keep)])

    assert r.exit_code == 1
    assert keep.read_text(encoding="utf-8") == '[{"precious": 1}]'


def test_workers_that_cannot_start_exit_1(tmp_path: Path, monkeypatch):
    from pairdiff.services import dispatch_service

    d1, d2 = _make_dirs(tmp_path)

    def no_workers(settings):
        raise OSError(11, "Resource temporarily unavailable")

    monkeypatch.setattr(dispatch_service, "make_executor", no_workers, raising=True)

    r = runner.invoke(app, [str(d1), str(d2), "2"])

    assert r.exit_code == 1
    assert "launch failed" in r.output
    assert _pair_lines(r.stdout) == []
