"""
End-to-end driver: discover inputs, sketch them, compare the sketches and
plot the resulting distance matrix. Stages run strictly in order; the first
error aborts the run.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Pattern, Union

from .aliases import load_aliases
from .config import DISTANCE_FILE, PipelineConfig
from .discover import find_files
from .jobs import run_jobs
from .log import get_logger
from .matrix import smash_sketches
from .sketch import SketchResult, ensure_dir, sketch_files
from .tools import ExternalTool

LOGGER = get_logger("pipeline")


@dataclass
class PipelineReport:
    files: List[str]
    sketch: SketchResult
    fig_dir: Path

    @property
    def distance_path(self) -> Path:
        return self.fig_dir / DISTANCE_FILE


def run(config: PipelineConfig,
        pattern: Optional[Union[str, Pattern]] = None,
        sketcher_run: Callable = run_jobs,
        comparator: Optional[ExternalTool] = None,
        plotter: Optional[ExternalTool] = None) -> PipelineReport:
    LOGGER.debug("config %s", config)

    files = find_files(config.query, pattern)
    LOGGER.info("Will process %d file%s", len(files), "" if len(files) == 1 else "s")

    ensure_dir(config.out_dir)
    aliases = load_aliases(config.alias_file)

    sketch = sketch_files(config, files, run=sketcher_run, aliases=aliases)
    LOGGER.info("Sketch dir = %s", sketch.sketch_dir)

    fig_dir = smash_sketches(config, sketch.sketch_dir, comparator=comparator,
                             plotter=plotter, aliases=aliases)
    LOGGER.info('Done, see output in "%s"', fig_dir)
    return PipelineReport(files=files, sketch=sketch, fig_dir=fig_dir)
