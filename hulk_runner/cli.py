"""
Command-line interface for sketching sequence files with HULK and turning
the all-pairs similarity matrix into a labelled distance matrix + figures.

Examples:

# Sketch every file in a directory and compare them:
run-hulk -q /data/reads -o /scratch/hulk-out

# Weighted Jaccard, FASTA input, sample aliases, plotting script in ./bin:
run-hulk -q /data/reads/*.fa -a aliases.csv -f -w -b ./bin
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from . import config as cfg
from .config import PipelineConfig
from .errors import PipelineError
from .log import set_verbosity
from .pipeline import run

VERSION = "0.1.0"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="run-hulk", description="Run HULK")
    ap.add_argument("-q", "--query", nargs="+", required=True, metavar="FILE_OR_DIR",
                    help="File or input directory")
    ap.add_argument("-o", "--out-dir", metavar="DIR",
                    help=f"Output directory (default: ./{cfg.DEFAULT_OUT_DIR_NAME})")
    ap.add_argument("-a", "--alias", metavar="FILE", help="Aliases for sample names")
    ap.add_argument("-k", "--kmer-size", type=int, default=cfg.KMER_SIZE, metavar="INT",
                    help="K-mer size")
    ap.add_argument("-m", "--min-kmer-count", type=int, default=cfg.MIN_KMER_COUNT,
                    metavar="INT", help="Minimum k-mer count")
    ap.add_argument("-i", "--interval", type=int, default=cfg.INTERVAL, metavar="INT",
                    help="Size of read sampling interval (0 = off)")
    ap.add_argument("-s", "--sketch-size", type=int, default=cfg.SKETCH_SIZE, metavar="INT",
                    help="Sketch size")
    ap.add_argument("-t", "--num-threads", type=int, default=cfg.NUM_THREADS, metavar="INT",
                    help=f"Threads per sketch job (used only when 0 < t < {cfg.MAX_THREADS})")
    ap.add_argument("-f", "--reads-are-fasta", action="store_true",
                    help="Input reads are in FASTA format")
    ap.add_argument("-w", "--create-weighted-matrix", action="store_true",
                    help="Create a pairwise weighted Jaccard Similarity matrix")
    ap.add_argument("-b", "--bin-dir", metavar="DIR", help="Location of binaries")
    ap.add_argument("-j", "--jobs", type=int, default=cfg.JOB_CONCURRENCY, metavar="INT",
                    help="Concurrent sketch jobs")
    ap.add_argument("--job-backend", choices=cfg.JOB_BACKENDS, default="parallel",
                    help="Run sketch jobs with GNU parallel or an in-process pool")
    ap.add_argument("--pattern", metavar="REGEX",
                    help="Only take directory entries whose path matches")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    ap.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return ap


def config_from_args(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        query=args.query,
        out_dir=Path(args.out_dir) if args.out_dir else cfg.default_out_dir(),
        alias_file=args.alias,
        kmer_size=args.kmer_size,
        min_kmer_count=args.min_kmer_count,
        interval=args.interval,
        sketch_size=args.sketch_size,
        num_threads=args.num_threads,
        reads_are_fasta=args.reads_are_fasta,
        create_weighted_matrix=args.create_weighted_matrix,
        bin_dir=args.bin_dir,
        job_concurrency=args.jobs,
        job_backend=args.job_backend,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    set_verbosity(args.verbose)
    try:
        report = run(config_from_args(args), pattern=args.pattern)
    except PipelineError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(report.distance_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
