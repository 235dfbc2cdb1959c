"""
Sketch stage: one ``hulk sketch`` job per input file, skipping any file
whose ``<sketch_dir>/<name>.sketch`` already exists, then a recount of the
sketch directory to prove every input has exactly one artifact.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from .aliases import AliasTable, basename, load_aliases
from .config import SKETCH_SUFFIX, PipelineConfig
from .errors import IncompleteOutputError, PipelineIOError
from .jobs import run_jobs
from .log import get_logger
from .tools import SketchOptions

LOGGER = get_logger("sketch")


@dataclass
class SketchResult:
    sketch_dir: Path
    sketches: List[Path] = field(default_factory=list)
    # input files that got a new job / were already sketched
    submitted: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    alias_skips: List[List[str]] = field(default_factory=list)


def ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise PipelineIOError(f'Cannot create directory "{path}": {e}') from e
    return path


def list_sketches(sketch_dir: Path) -> List[Path]:
    """Regular ``*.sketch`` files directly inside ``sketch_dir``, sorted."""
    return sorted(p for p in sketch_dir.iterdir()
                  if p.is_file() and p.name.endswith(SKETCH_SUFFIX))


def plan_jobs(files: Sequence[str], sketch_dir: Path, options: SketchOptions,
              aliases: Optional[AliasTable] = None):
    """
    Split ``files`` into shell commands for the ones still to sketch and the
    list of files whose artifact is already on disk.
    """
    jobs, todo, cached = [], [], []
    for file in files:
        out_prefix = sketch_dir / basename(file, aliases)
        if options.artifact(out_prefix).exists():
            cached.append(file)
            continue
        jobs.append(options.shell_command(file, out_prefix))
        todo.append(file)
    return jobs, todo, cached


def sketch_files(config: PipelineConfig, files: Sequence[str],
                 run: Callable = run_jobs,
                 aliases: Optional[AliasTable] = None) -> SketchResult:
    sketch_dir = ensure_dir(config.paths.sketch_dir)
    options = SketchOptions.from_config(config)
    if aliases is None:
        aliases = load_aliases(config.alias_file)

    jobs, todo, cached = plan_jobs(files, sketch_dir, options, aliases)
    for file in cached:
        LOGGER.debug("Sketch exists for %s, skipping", file)

    if jobs:
        run(jobs, "Sketching files", config.job_concurrency, backend=config.job_backend)
    else:
        LOGGER.info("No sketch jobs to run, skipping this step")

    sketches = list_sketches(sketch_dir)
    if len(sketches) != len(files):
        raise IncompleteOutputError("Failed to create all sketches",
                                    expected=len(files), found=len(sketches))

    LOGGER.info("Sketches ready in %s (%d new, %d cached)",
                sketch_dir, len(todo), len(cached))
    return SketchResult(
        sketch_dir=sketch_dir,
        sketches=sketches,
        submitted=todo,
        skipped=cached,
        alias_skips=list(aliases.skipped),
    )
