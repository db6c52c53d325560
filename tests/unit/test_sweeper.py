"""Tests for the retention sweep: aged pairs, aged PDFs and orphans."""

from pathlib import Path

import pytest

from conftest import DAY, NOW, set_mtime
from domains.retention import RetentionSweeper


def _file(path: Path, age_days: float) -> Path:
    path.write_bytes(b"data")
    set_mtime(path, NOW - age_days * DAY)
    return path


@pytest.fixture
def sweeper(dirs):
    input_dir, output_dir = dirs
    return RetentionSweeper(input_dir, output_dir, max_age_days=7, clock=lambda: NOW)


def test_fresh_pair_survives(dirs, sweeper):
    input_dir, output_dir = dirs
    source = _file(input_dir / "deck.pptx", 0)
    output = _file(output_dir / "deck.pdf", 0)

    report = sweeper.sweep()

    assert source.exists() and output.exists()
    assert report.deleted_count == 0
    assert report.errors == []


def test_old_pair_is_deleted(dirs, sweeper):
    """Scenario B: both files 10 days old with a 7 day window."""
    input_dir, output_dir = dirs
    source = _file(input_dir / "deck.pptx", 10)
    output = _file(output_dir / "deck.pdf", 10)

    report = sweeper.sweep()

    assert not source.exists()
    assert not output.exists()
    assert set(report.deleted) == {source, output}


def test_orphan_is_deleted_regardless_of_age(dirs, sweeper):
    """Scenario C: a brand new PDF without a presentation still goes."""
    _, output_dir = dirs
    orphan = _file(output_dir / "orphan.pdf", 0)

    report = sweeper.sweep()

    assert not orphan.exists()
    assert report.deleted == [orphan]


def test_old_source_takes_fresh_output_with_it(dirs, sweeper):
    input_dir, output_dir = dirs
    source = _file(input_dir / "deck.ppt", 10)
    output = _file(output_dir / "deck.pdf", 1)

    sweeper.sweep()

    assert not source.exists()
    assert not output.exists()


def test_old_output_of_fresh_source_is_deleted(dirs, sweeper):
    input_dir, output_dir = dirs
    source = _file(input_dir / "deck.pptx", 1)
    output = _file(output_dir / "deck.pdf", 10)

    report = sweeper.sweep()

    assert source.exists()
    assert not output.exists()
    assert report.deleted == [output]


def test_age_equal_to_window_is_kept(dirs, sweeper):
    input_dir, output_dir = dirs
    source = _file(input_dir / "deck.pptx", 7)
    output = _file(output_dir / "deck.pdf", 7)

    sweeper.sweep()

    assert source.exists() and output.exists()


def test_unrelated_files_are_ignored(dirs, sweeper):
    input_dir, output_dir = dirs
    notes = _file(input_dir / "notes.txt", 30)
    readme = _file(output_dir / "readme.txt", 30)

    report = sweeper.sweep()

    assert notes.exists()
    assert readme.exists()
    assert report.deleted_count == 0


def test_stale_partial_write_is_deleted(dirs, sweeper):
    _, output_dir = dirs
    stale = _file(output_dir / ".deck.k3j9x.tmp", 8)
    in_progress = _file(output_dir / ".other.a1b2c.tmp", 0)

    report = sweeper.sweep()

    assert not stale.exists()
    assert in_progress.exists()
    assert report.deleted == [stale]


def test_visible_tmp_file_is_not_a_partial_write(dirs, sweeper):
    _, output_dir = dirs
    scratch = _file(output_dir / "scratch.tmp", 30)

    sweeper.sweep()

    assert scratch.exists()


def test_pairing_is_case_sensitive(dirs, sweeper):
    input_dir, output_dir = dirs
    _file(input_dir / "Deck.pptx", 0)
    lower = _file(output_dir / "deck.pdf", 0)
    upper = _file(output_dir / "Deck.pdf", 0)

    sweeper.sweep()

    assert not lower.exists()
    assert upper.exists()


def test_uppercase_pdf_extension_is_swept(dirs, sweeper):
    _, output_dir = dirs
    orphan = _file(output_dir / "SCAN.PDF", 0)

    sweeper.sweep()

    assert not orphan.exists()


def test_missing_input_dir_keeps_outputs(tmp_path):
    """Without a readable input folder nothing can be called an orphan."""
    output_dir = tmp_path / "pdf"
    output_dir.mkdir()
    output = _file(output_dir / "deck.pdf", 0)
    sweeper = RetentionSweeper(tmp_path / "missing", output_dir, 7, clock=lambda: NOW)

    report = sweeper.sweep()

    assert output.exists()
    assert len(report.errors) == 2


def test_missing_output_dir_still_sweeps_sources(tmp_path):
    input_dir = tmp_path / "pptx"
    input_dir.mkdir()
    source = _file(input_dir / "deck.pptx", 10)
    sweeper = RetentionSweeper(input_dir, tmp_path / "missing", 7, clock=lambda: NOW)

    report = sweeper.sweep()

    assert not source.exists()
    assert len(report.errors) == 1


def test_failed_source_delete_still_removes_pdf(dirs, sweeper, monkeypatch):
    input_dir, output_dir = dirs
    source = _file(input_dir / "deck.pptx", 10)
    output = _file(output_dir / "deck.pdf", 10)
    original_unlink = Path.unlink

    def flaky_unlink(self, *args, **kwargs):
        if self == source:
            raise PermissionError("read-only")
        return original_unlink(self, *args, **kwargs)

    monkeypatch.setattr(Path, "unlink", flaky_unlink)

    report = sweeper.sweep()

    assert source.exists()
    assert not output.exists()
    assert report.deleted == [output]
    assert len(report.errors) == 1


def test_summary_is_logged(dirs, sweeper, log_messages):
    sweeper.sweep()
    assert "No old or orphaned files found" in log_messages

    _, output_dir = dirs
    _file(output_dir / "orphan.pdf", 0)
    sweeper.sweep()
    assert "Files deleted: 1" in log_messages


def test_zero_day_window_expires_everything_older_than_now(dirs):
    input_dir, output_dir = dirs
    source = _file(input_dir / "deck.pptx", 1 / DAY)
    output = _file(output_dir / "deck.pdf", 1 / DAY)
    sweeper = RetentionSweeper(input_dir, output_dir, max_age_days=0, clock=lambda: NOW)

    report = sweeper.sweep()

    assert not source.exists() and not output.exists()
    assert report.deleted_count == 2
