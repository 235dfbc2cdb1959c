"""
Defaults and the validated run configuration for the HULK pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from .errors import ConfigError

# sketching parameters (hulk's own defaults apply to anything we omit)
KMER_SIZE = 11
MIN_KMER_COUNT = 1
INTERVAL = 0  # 0 disables read sampling
SKETCH_SIZE = 256
NUM_THREADS = 8
MAX_THREADS = 64  # thread count is only passed through when 0 < t < MAX_THREADS

# batch execution
JOB_CONCURRENCY = 8
JOB_BACKENDS = ("parallel", "pool")

# layout / naming
DEFAULT_OUT_DIR_NAME = "hulk-out"
SKETCH_SUFFIX = ".sketch"
DISTANCE_FILE = "distance.tab"
SMASH_PREFIX = "hulk"

# external executables
HULK_EXE = "hulk"
PARALLEL_EXE = "parallel"
MAKE_FIGURES = "make_figures.r"


@dataclass
class Paths:
    """Bundle of output locations derived from the output directory."""
    out_dir: Path
    sketch_dir: Path
    fig_dir: Path

    @classmethod
    def from_root(cls, out_dir):
        root = Path(out_dir)
        return cls(
            out_dir=root,
            sketch_dir=root / "sketches",
            fig_dir=root / "figures",
        )


def default_out_dir() -> Path:
    return Path.cwd() / DEFAULT_OUT_DIR_NAME


@dataclass(frozen=True)
class PipelineConfig:
    query: Tuple[str, ...]
    out_dir: Path = field(default_factory=default_out_dir)
    alias_file: Optional[str] = None
    kmer_size: int = KMER_SIZE
    min_kmer_count: int = MIN_KMER_COUNT
    interval: int = INTERVAL
    sketch_size: int = SKETCH_SIZE
    num_threads: int = NUM_THREADS
    reads_are_fasta: bool = False
    create_weighted_matrix: bool = False
    bin_dir: Optional[str] = None
    job_concurrency: int = JOB_CONCURRENCY
    job_backend: str = "parallel"

    def __post_init__(self):
        # normalise list-like query / str out_dir without breaking frozenness
        object.__setattr__(self, "query", tuple(self.query))
        object.__setattr__(self, "out_dir", Path(self.out_dir))

        if not self.query:
            raise ConfigError("At least one query file or directory is required")
        for name in ("kmer_size", "sketch_size", "min_kmer_count"):
            if getattr(self, name) < 1:
                raise ConfigError(f"{name} must be a positive integer, got {getattr(self, name)}")
        for name in ("interval", "num_threads"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} cannot be negative, got {getattr(self, name)}")
        if self.job_concurrency < 1:
            raise ConfigError(f"job_concurrency must be >= 1, got {self.job_concurrency}")
        if self.job_backend not in JOB_BACKENDS:
            raise ConfigError(
                f"Unknown job backend {self.job_backend!r}; choose from {', '.join(JOB_BACKENDS)}")

    @property
    def paths(self) -> Paths:
        return Paths.from_root(self.out_dir)
