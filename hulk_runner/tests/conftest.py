"""
Stand-ins for the external programs, so stage tests never need hulk, GNU
parallel or R installed.
"""

import shlex
from types import SimpleNamespace
from pathlib import Path

import pytest

from hulk_runner.tools import ExternalTool, ToolResult


class FakeSketcher:
    """Job runner that 'runs' hulk sketch commands by touching the output."""

    def __init__(self, fail_on=()):
        self.batches = []
        self.fail_on = set(fail_on)

    def __call__(self, commands, label, concurrency, backend="parallel"):
        self.batches.append(list(commands))
        for command in commands:
            argv = shlex.split(command)
            src = argv[argv.index("-f") + 1]
            if Path(src).name in self.fail_on:
                continue
            out_prefix = argv[argv.index("-o") + 1]
            Path(out_prefix + ".sketch").write_text(f"sketch of {src}\n")


class FakeSmash(ExternalTool):
    """hulk smash look-alike: 100 on the diagonal, ``off`` elsewhere."""

    def __init__(self, off=50.0, returncode=0, stderr="", write=True, trailer="\n"):
        super().__init__("hulk")
        self.off = off
        self.returncode = returncode
        self.stderr = stderr
        self.write = write
        self.trailer = trailer
        self.calls = []

    def invoke(self, args):
        args = [str(a) for a in args]
        self.calls.append(args)
        if self.returncode == 0 and self.write:
            sketch_dir = Path(args[args.index("-d") + 1])
            prefix = args[args.index("--outFile") + 1]
            kind = "wjs" if "--wjsMatrix" in args else "js"
            names = sorted(str(p) for p in sketch_dir.glob("*.sketch"))
            lines = [",".join(names)]
            for i in range(len(names)):
                lines.append(",".join(
                    "100" if i == j else f"{self.off}" for j in range(len(names))))
            Path(f"{prefix}.{kind}-matrix.csv").write_text("\n".join(lines) + self.trailer)
        return ToolResult(cmd=[self.exe, *args], returncode=self.returncode,
                          stdout="", stderr=self.stderr)


class FakePlotter(ExternalTool):
    def __init__(self, returncode=0):
        super().__init__("make_figures.r")
        self.returncode = returncode
        self.calls = []

    def invoke(self, args):
        args = [str(a) for a in args]
        self.calls.append(args)
        return ToolResult(cmd=[self.exe, *args], returncode=self.returncode,
                          stdout="", stderr="plot failed" if self.returncode else "")


@pytest.fixture
def fakes():
    return SimpleNamespace(Sketcher=FakeSketcher, Smash=FakeSmash, Plotter=FakePlotter)


@pytest.fixture
def sketcher():
    return FakeSketcher()


@pytest.fixture
def smash():
    return FakeSmash()


@pytest.fixture
def plotter():
    return FakePlotter()


@pytest.fixture
def reads(tmp_path: Path) -> Path:
    """Directory with three small FASTA files."""
    d = tmp_path / "reads"
    d.mkdir()
    for name in ("sample1.fa", "sample2.fa", "sample3.fa"):
        (d / name).write_text(f">{name}\nACGTACGTACGT\n")
    return d
