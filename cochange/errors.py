"""Exceptions raised by cochange.

The clustering engine itself never raises these; they come from the
I/O stages around it (reading history, writing the image).
"""

from pathlib import Path


class CochangeError(Exception):
    """Base class for cochange errors."""

    pass


class HistoryUnavailable(CochangeError):
    """Git history could not be read at all.

    Raised when git cannot be executed, times out, or the target
    directory is not a repository.
    """

    pass


class MalformedChangeSet(CochangeError):
    """The change list of a single commit could not be produced."""

    def __init__(self, commit: str, reason: str):
        self.commit = commit
        self.reason = reason
        super().__init__(f"commit {commit}: {reason}")


class RenderFailure(CochangeError):
    """The output image could not be written."""

    def __init__(self, output_path: str | Path, reason: str):
        self.output_path = Path(output_path)
        self.reason = reason
        super().__init__(f"could not write {self.output_path}: {reason}")
