from __future__ import annotations

import os
import re
from typing import Iterable, List, Optional, Pattern, Union

from .errors import ConfigError, PipelineIOError
from .log import get_logger

LOGGER = get_logger("discover")


def find_files(paths: Iterable[str],
               pattern: Optional[Union[str, Pattern]] = None) -> List[str]:
    """
    Resolve query paths into a sorted, de-duplicated list of input files.

    Files are taken as given; directories contribute their immediate regular
    files (no recursion) whose full path matches ``pattern``, if one is set.
    """
    try:
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    except re.error as e:
        raise ConfigError(f"Bad file pattern {pattern!r}: {e}") from e
    paths = list(paths)
    found = set()

    for path in paths:
        try:
            if os.path.isfile(path):
                found.add(path)
                continue
            if not os.path.isdir(path):
                raise PipelineIOError(f'"{path}": no such file or directory')
            with os.scandir(path) as it:
                for entry in it:
                    if not entry.is_file():
                        continue
                    name = os.path.join(path, entry.name)
                    if regex is None or regex.search(name):
                        found.add(name)
        except PipelineIOError:
            raise
        except OSError as e:
            raise PipelineIOError(f'Cannot read "{path}": {e}') from e

    if not found:
        raise ConfigError(f'No input files from query "{paths}"')

    files = sorted(found)
    LOGGER.debug("Discovered %d file(s) from %d query path(s)", len(files), len(paths))
    return files
