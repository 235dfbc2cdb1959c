"""
Compare stage: run ``hulk smash`` over the sketch directory, turn its
all-pairs similarity CSV (0-100 scale) into a tab-separated distance matrix
(``1 - s/100``, four decimals), then hand that file to the plotting script.

Similarity CSV, as written by hulk:

    path/a.fa.sketch,path/b.fa.sketch,path/c.fa.sketch
    100,42.5,10
    42.5,100,7.25
    10,7.25,100
    <blank>

Rows carry no label of their own; row i is the sample of header column i.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import numpy as np

from .aliases import display_name
from .config import DISTANCE_FILE, PipelineConfig
from .errors import ExternalToolError, MatrixFormatError, PipelineIOError
from .log import get_logger
from .sketch import ensure_dir, list_sketches
from .tools import ExternalTool, FigureOptions, SmashOptions, default_tools

LOGGER = get_logger("matrix")


@dataclass
class SimilarityMatrix:
    labels: List[str]
    rows: List[np.ndarray] = field(default_factory=list)
    # cells that did not parse as numbers and were left out
    dropped_cells: int = 0

    @property
    def size(self) -> int:
        return len(self.labels)


def similarity_to_distance(values) -> np.ndarray:
    return 1.0 - np.asarray(values, dtype=np.float64) / 100.0


def format_distance(value: float) -> str:
    return f"{value:.4f}"


def _parse_cells(line: str):
    values, dropped = [], 0
    for cell in line.split(","):
        try:
            values.append(float(cell))
        except ValueError:
            dropped += 1
    return np.array(values, dtype=np.float64), dropped


def parse_similarity_csv(text: str,
                         aliases: Optional[Mapping[str, str]] = None) -> SimilarityMatrix:
    lines = [line.rstrip("\r") for line in text.split("\n")]
    if not lines[0].strip():
        raise MatrixFormatError("Similarity matrix has no header line")

    # a trailing comma leaves an empty column name; it names nothing
    header = [x for x in lines[0].split(",") if x.strip()]
    matrix = SimilarityMatrix(labels=[display_name(x, aliases) for x in header])
    for line in lines[1:]:
        if line == "":
            # end of data; anything after a blank line is ignored
            break
        values, dropped = _parse_cells(line)
        matrix.rows.append(values)
        matrix.dropped_cells += dropped

    n = matrix.size
    if len(matrix.rows) != n:
        raise MatrixFormatError(
            f"Similarity matrix has {n} column label(s) but {len(matrix.rows)} data row(s)")
    for i, row in enumerate(matrix.rows):
        if len(row) != n:
            LOGGER.warning("Row %d (%s) has %d value(s), expected %d",
                           i + 1, matrix.labels[i], len(row), n)
    if matrix.dropped_cells:
        LOGGER.warning("Dropped %d non-numeric cell(s) from similarity matrix",
                       matrix.dropped_cells)
    return matrix


def check_labels(labels: Sequence[str], sketches: Sequence[Path],
                 aliases: Optional[Mapping[str, str]] = None) -> None:
    """Header labels must name each sketch exactly once."""
    dupes = sorted(name for name, count in Counter(labels).items() if count > 1)
    if dupes:
        raise MatrixFormatError(f"Duplicate matrix labels: {', '.join(dupes)}")
    expected = {display_name(p.name, aliases) for p in sketches}
    if set(labels) != expected:
        missing = sorted(expected - set(labels))
        extra = sorted(set(labels) - expected)
        raise MatrixFormatError(
            f"Matrix labels do not match sketches (missing: {missing}, unexpected: {extra})")


def write_distance_matrix(matrix: SimilarityMatrix, path: Path) -> Path:
    try:
        with open(path, "w") as out:
            out.write("\t" + "\t".join(matrix.labels) + "\n")
            for label, row in zip(matrix.labels, matrix.rows):
                cells = [format_distance(d) for d in similarity_to_distance(row)]
                out.write(label + "\t" + "\t".join(cells) + "\n")
    except OSError as e:
        raise PipelineIOError(f'Cannot write "{path}": {e}') from e
    return path


def smash_sketches(config: PipelineConfig, sketch_dir: Path,
                   comparator: Optional[ExternalTool] = None,
                   plotter: Optional[ExternalTool] = None,
                   aliases: Optional[Mapping[str, str]] = None) -> Path:
    fig_dir = ensure_dir(config.paths.fig_dir)
    if comparator is None or plotter is None:
        default_comparator, default_plotter = default_tools(config)
        comparator = comparator or default_comparator
        plotter = plotter or default_plotter

    smash = SmashOptions(sketch_dir=Path(sketch_dir), fig_dir=fig_dir,
                         weighted=config.create_weighted_matrix)
    LOGGER.info("Comparing sketches in %s", sketch_dir)
    comparator.check(comparator.invoke(smash.build_args()))

    out_file = smash.output_csv
    if not out_file.is_file():
        raise ExternalToolError(comparator.exe, f'Failed to create HULK output "{out_file}"')

    matrix = parse_similarity_csv(out_file.read_text(), aliases)
    check_labels(matrix.labels, list_sketches(Path(sketch_dir)), aliases)

    dist = write_distance_matrix(matrix, fig_dir / DISTANCE_FILE)
    LOGGER.info("Wrote %dx%d distance matrix to %s", matrix.size, matrix.size, dist)

    LOGGER.info("Making figures")
    figures = FigureOptions(fig_dir=fig_dir, matrix=dist)
    plotter.check(plotter.invoke(figures.build_args()))
    return fig_dir
