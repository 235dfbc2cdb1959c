"""
Sample-name -> display alias table, and the basename rule shared by the
sketch and matrix stages.

The alias file is a delimited table with (at least) the columns
``sample_name`` and ``alias``; a ``.csv`` extension selects commas, anything
else tabs. Rows lacking either value are skipped with a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import pandas as pd

from .errors import ConfigError
from .log import get_logger

LOGGER = get_logger("aliases")

NAME_COL = "sample_name"
ALIAS_COL = "alias"


@dataclass
class AliasTable:
    aliases: Dict[str, str] = field(default_factory=dict)
    # fields of every record that was skipped, as read from the file
    skipped: List[List[str]] = field(default_factory=list)

    def get(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.aliases.get(name, default)

    def __contains__(self, name) -> bool:
        return name in self.aliases

    def __len__(self) -> int:
        return len(self.aliases)

    def __bool__(self) -> bool:
        # an empty table behaves exactly like having no table at all
        return bool(self.aliases)


def delimiter_for(path) -> str:
    return "," if Path(path).suffix == ".csv" else "\t"


def _present(value) -> bool:
    return isinstance(value, str) and value != ""


def load_aliases(alias_file: Optional[str]) -> AliasTable:
    """
    Read the alias table. Without a path the table is empty (identity
    mapping). An unreadable file is a ConfigError; a bad row is not.
    """
    table = AliasTable()
    if not alias_file:
        return table

    def _bad_line(fields: List[str]) -> None:
        # too many fields; too few are filled in by pandas and caught below
        table.skipped.append(list(fields))
        LOGGER.warning("Skipping malformed alias record %s in %s", fields, alias_file)

    try:
        df = pd.read_csv(alias_file, sep=delimiter_for(alias_file), dtype=str,
                         keep_default_na=False, engine="python", on_bad_lines=_bad_line)
    except pd.errors.EmptyDataError:
        LOGGER.warning("Alias file %s is empty", alias_file)
        return table
    except (OSError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise ConfigError(f'Failed to open "{alias_file}": {e}') from e

    has_cols = NAME_COL in df.columns and ALIAS_COL in df.columns
    for row in df.to_dict("records"):
        name = row.get(NAME_COL) if has_cols else None
        alias = row.get(ALIAS_COL) if has_cols else None
        if _present(name) and _present(alias):
            table.aliases[name] = alias
        else:
            fields = [v if isinstance(v, str) else "" for v in row.values()]
            table.skipped.append(fields)
            LOGGER.warning("Missing %s or %s in record %s of %s",
                           NAME_COL, ALIAS_COL, fields, alias_file)

    LOGGER.info("Loaded %d alias%s from %s (%d skipped)",
                len(table), "" if len(table) == 1 else "es", alias_file, len(table.skipped))
    return table


def basename(filename: str, aliases: Optional[Mapping[str, str]] = None) -> str:
    """Final path segment of ``filename``, replaced by its alias if it has one."""
    name = filename.rsplit("/", 1)[-1]
    if aliases:
        return aliases.get(name, name)
    return name


def display_name(filename: str, aliases: Optional[Mapping[str, str]] = None) -> str:
    """Matrix label for a comparator column: basename minus extension, aliased."""
    stem = Path(filename.strip().rsplit("/", 1)[-1]).stem
    if aliases:
        return aliases.get(stem, stem)
    return stem
