"""
Error taxonomy for the sketch/compare pipeline.

Every failure is fatal at the point it is detected; the CLI turns any
PipelineError into a one-line message and a non-zero exit status.
"""

from __future__ import annotations

from typing import List, Optional


class PipelineError(Exception):
    """Base class for all pipeline failures."""


class ConfigError(PipelineError):
    """Bad or missing inputs: query paths, empty discovery, alias file."""


class PipelineIOError(PipelineError, OSError):
    """Filesystem access failed during discovery or directory creation."""


class RunError(PipelineError):
    """The batch executor could not start or reported an overall failure."""

    def __init__(self, message: str, failed: Optional[List[str]] = None):
        super().__init__(message)
        self.failed = list(failed or [])


class IncompleteOutputError(PipelineError):
    def __init__(self, message: str, expected: int, found: int):
        super().__init__(f"{message} (expected {expected}, found {found})")
        self.expected = expected
        self.found = found


class ExternalToolError(PipelineError):
    """A one-shot external invocation failed or left no output behind."""

    def __init__(self, tool: str, message: str,
                 returncode: Optional[int] = None, stderr: str = ""):
        text = message
        if stderr.strip():
            text = f"{message}: {stderr.strip()}"
        super().__init__(text)
        self.tool = tool
        self.returncode = returncode
        self.stderr = stderr


class MatrixFormatError(PipelineError):
    """Similarity CSV disagrees with its own header or with the sketch set."""
