from pathlib import Path

import pytest

from hulk_runner.discover import find_files
from hulk_runner.errors import ConfigError, PipelineIOError


def test_directory_is_sorted_and_not_recursive(reads: Path):
    (reads / "nested").mkdir()
    (reads / "nested" / "deep.fa").write_text(">x\nA\n")
    files = find_files([str(reads)])
    assert files == sorted(str(reads / n) for n in ("sample1.fa", "sample2.fa", "sample3.fa"))


def test_files_and_dirs_mix_without_duplicates(reads: Path):
    one = str(reads / "sample2.fa")
    files = find_files([one, str(reads), one])
    assert len(files) == 3
    assert files == sorted(files)


def test_pattern_filters_directory_entries(reads: Path):
    (reads / "notes.txt").write_text("hi")
    files = find_files([str(reads)], pattern=r"\.fa$")
    assert all(f.endswith(".fa") for f in files)
    assert len(files) == 3


def test_missing_path(tmp_path: Path):
    with pytest.raises(PipelineIOError):
        find_files([str(tmp_path / "missing")])


def test_empty_result_is_config_error(tmp_path: Path):
    with pytest.raises(ConfigError, match="No input files"):
        find_files([str(tmp_path)])


def test_bad_pattern(reads: Path):
    with pytest.raises(ConfigError):
        find_files([str(reads)], pattern="(")
