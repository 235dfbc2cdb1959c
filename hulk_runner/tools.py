"""
Thin, typed wrappers around the external programs the pipeline drives:

  hulk sketch       one per input file, batched through the job runner
  hulk smash        once, all-pairs similarity over the sketch directory
  make_figures.r    once, plots from the distance matrix

Each *Options dataclass owns the argument list for one program, including
the rules for leaving options out so that the tool's own default applies.
ExternalTool is the only place a one-shot subprocess is spawned; tests swap
in fakes that implement the same ``invoke``.
"""

from __future__ import annotations

import shlex
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import (HULK_EXE, MAKE_FIGURES, MAX_THREADS, SKETCH_SUFFIX,
                     SMASH_PREFIX, PipelineConfig)
from .errors import ExternalToolError
from .log import get_logger

LOGGER = get_logger("tools")


@dataclass(frozen=True)
class ToolResult:
    cmd: List[str]
    returncode: int
    stdout: str
    stderr: str


class ExternalTool:
    def __init__(self, exe):
        self.exe = str(exe)

    def __repr__(self):
        return f"ExternalTool({self.exe!r})"

    def invoke(self, args: Sequence[str]) -> ToolResult:
        """Run ``exe args...`` to completion, capturing text output."""
        cmd = [self.exe, *[str(a) for a in args]]
        LOGGER.debug("Running: %s", shlex.join(cmd))
        try:
            proc = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ExternalToolError(self.exe, f'Failed to run "{self.exe}": {e}') from e
        return ToolResult(cmd=cmd, returncode=proc.returncode,
                          stdout=proc.stdout, stderr=proc.stderr)

    def check(self, result: ToolResult) -> ToolResult:
        if result.returncode != 0:
            raise ExternalToolError(
                self.exe,
                f"Error ({result.returncode}) from {shlex.join(result.cmd)}",
                returncode=result.returncode,
                stderr=_tail(result.stderr),
            )
        return result


def _tail(text: str, lines: int = 20) -> str:
    return "\n".join(text.rstrip("\n").splitlines()[-lines:])


@dataclass(frozen=True)
class SketchOptions:
    kmer_size: Optional[int] = None
    min_kmer_count: Optional[int] = None
    sketch_size: Optional[int] = None
    interval: Optional[int] = None
    num_threads: Optional[int] = None
    reads_are_fasta: bool = False
    exe: str = HULK_EXE

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "SketchOptions":
        return cls(
            kmer_size=config.kmer_size,
            min_kmer_count=config.min_kmer_count,
            sketch_size=config.sketch_size,
            interval=config.interval,
            num_threads=config.num_threads,
            reads_are_fasta=config.reads_are_fasta,
        )

    def build_args(self) -> List[str]:
        """Options shared by every sketch job."""
        args: List[str] = []

        def _add(flag: str, val: Optional[int], keep: bool = True):
            if val is not None and keep:
                args.extend([flag, str(val)])

        t = self.num_threads
        _add("-p", t, t is not None and 0 < t < MAX_THREADS)
        _add("-k", self.kmer_size)
        # hulk counts every k-mer by default
        _add("-m", self.min_kmer_count, (self.min_kmer_count or 0) > 1)
        _add("-s", self.sketch_size)
        _add("-i", self.interval, (self.interval or 0) > 0)
        if self.reads_are_fasta:
            args.append("--fasta")
        return args

    def build_command(self, input_file: str, out_prefix) -> List[str]:
        """``hulk sketch`` writes ``<out_prefix>.sketch``."""
        return [self.exe, "sketch", *self.build_args(),
                "-o", str(out_prefix), "-f", str(input_file)]

    def shell_command(self, input_file: str, out_prefix) -> str:
        return shlex.join(self.build_command(input_file, out_prefix))

    @staticmethod
    def artifact(out_prefix) -> Path:
        return Path(f"{out_prefix}{SKETCH_SUFFIX}")


@dataclass(frozen=True)
class SmashOptions:
    sketch_dir: Path
    fig_dir: Path
    weighted: bool = False
    prefix: str = SMASH_PREFIX

    @property
    def matrix_flag(self) -> str:
        return "--wjsMatrix" if self.weighted else "--jsMatrix"

    @property
    def out_prefix(self) -> Path:
        return Path(self.fig_dir) / self.prefix

    @property
    def output_csv(self) -> Path:
        kind = "wjs" if self.weighted else "js"
        return Path(self.fig_dir) / f"{self.prefix}.{kind}-matrix.csv"

    def build_args(self) -> List[str]:
        # hulk wants the trailing slash on the directory
        sketch_dir = str(self.sketch_dir).rstrip("/") + "/"
        return ["smash", self.matrix_flag, "-d", sketch_dir,
                "--outFile", str(self.out_prefix)]


@dataclass(frozen=True)
class FigureOptions:
    fig_dir: Path
    matrix: Path

    def build_args(self) -> List[str]:
        return ["-o", str(self.fig_dir), "-m", str(self.matrix)]


def figures_exe(bin_dir: Optional[str] = None) -> Path:
    if bin_dir:
        return Path(bin_dir) / MAKE_FIGURES
    return Path(MAKE_FIGURES)


def default_tools(config: PipelineConfig):
    """(comparator, plotter) bound to the real executables."""
    return ExternalTool(HULK_EXE), ExternalTool(figures_exe(config.bin_dir))
