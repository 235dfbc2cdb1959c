from pathlib import Path

import pytest

from hulk_runner import cli, pipeline
from hulk_runner.config import PipelineConfig
from hulk_runner.errors import ConfigError, IncompleteOutputError, RunError


def test_three_files_default_config(tmp_path, reads, sketcher, smash, plotter):
    config = PipelineConfig(query=[str(reads)], out_dir=tmp_path / "hulk-out")
    report = pipeline.run(config, sketcher_run=sketcher, comparator=smash, plotter=plotter)

    assert len(report.files) == 3
    assert len(list(config.paths.sketch_dir.glob("*.sketch"))) == 3
    lines = report.distance_path.read_text().splitlines()
    assert len(lines) == 4
    assert lines[0].split("\t") == ["", "sample1.fa", "sample2.fa", "sample3.fa"]
    for line in lines[1:]:
        values = line.split("\t")[1:]
        assert len(values) == 3
        assert all(len(v) == 6 for v in values)


def test_aliases_reach_matrix_labels(tmp_path, reads, sketcher, smash, plotter):
    alias_file = tmp_path / "aliases.tab"
    alias_file.write_text("sample_name\talias\nsample1.fa\tS1\n")
    config = PipelineConfig(query=[str(reads)], out_dir=tmp_path / "out",
                            alias_file=str(alias_file))
    report = pipeline.run(config, sketcher_run=sketcher, comparator=smash, plotter=plotter)

    lines = report.distance_path.read_text().splitlines()
    header = lines[0].split("\t")
    row_labels = [line.split("\t")[0] for line in lines[1:]]
    assert "S1" in header and "S1" in row_labels
    assert not any(label.startswith("sample1") for label in header + row_labels)


def test_failed_sketch_stops_before_compare(tmp_path, reads, fakes, smash, plotter):
    config = PipelineConfig(query=[str(reads)], out_dir=tmp_path / "out")
    with pytest.raises(IncompleteOutputError):
        pipeline.run(config, sketcher_run=fakes.Sketcher(fail_on={"sample2.fa"}),
                     comparator=smash, plotter=plotter)
    assert smash.calls == []


def test_runner_error_stops_before_compare(tmp_path, reads, smash, plotter):
    def broken(commands, label, concurrency, backend="parallel"):
        raise RunError("Failed to run jobs in parallel")

    config = PipelineConfig(query=[str(reads)], out_dir=tmp_path / "out")
    with pytest.raises(RunError):
        pipeline.run(config, sketcher_run=broken, comparator=smash, plotter=plotter)
    assert smash.calls == []


def test_pool_backend_with_real_shell(tmp_path, reads, monkeypatch, smash, plotter):
    # stand-in "hulk" that writes <-o>.sketch like the real one
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    hulk = bin_dir / "hulk"
    hulk.write_text(
        "#!/bin/sh\n"
        "while [ $# -gt 0 ]; do\n"
        "  if [ \"$1\" = -o ]; then out=$2; fi\n"
        "  shift\n"
        "done\n"
        "echo sketch > \"$out.sketch\"\n"
    )
    hulk.chmod(0o755)
    monkeypatch.setenv("PATH", f"{bin_dir}:{Path('/bin')}:{Path('/usr/bin')}")

    config = PipelineConfig(query=[str(reads)], out_dir=tmp_path / "out",
                            job_backend="pool", job_concurrency=2)
    report = pipeline.run(config, comparator=smash, plotter=plotter)
    assert len(report.sketch.sketches) == 3


def test_config_validation():
    with pytest.raises(ConfigError):
        PipelineConfig(query=[])
    with pytest.raises(ConfigError):
        PipelineConfig(query=["x"], kmer_size=0)
    with pytest.raises(ConfigError):
        PipelineConfig(query=["x"], job_backend="slurm")
    assert PipelineConfig(query=["x"]).out_dir == Path.cwd() / "hulk-out"


def test_cli_parses_flags(tmp_path):
    args = cli.build_parser().parse_args(
        ["-q", "a.fa", "b.fa", "-o", str(tmp_path), "-k", "21", "-i", "5", "-f", "-w",
         "-b", "/opt/bin", "--job-backend", "pool"])
    config = cli.config_from_args(args)
    assert config.query == ("a.fa", "b.fa")
    assert config.kmer_size == 21
    assert config.interval == 5
    assert config.min_kmer_count == 1
    assert config.reads_are_fasta and config.create_weighted_matrix
    assert config.bin_dir == "/opt/bin"
    assert config.job_backend == "pool"


def test_cli_reports_errors(tmp_path, capsys):
    rc = cli.main(["-q", str(tmp_path / "missing"), "-o", str(tmp_path / "out")])
    assert rc == 1
    assert "Error: " in capsys.readouterr().err
