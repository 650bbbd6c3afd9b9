"""History source interface and an in-memory implementation."""

from collections.abc import Iterable, Iterator, Mapping
from typing import Protocol, runtime_checkable

from cochange.analyzers.clustering import ChangeSet


@runtime_checkable
class HistorySource(Protocol):
    """Anything that can produce the change sets of a commit history."""

    def list_commits(self) -> list[str]:
        """Return commit ids, most recent first."""
        ...

    def changed_files(self, commit: str) -> ChangeSet:
        """Return the files touched by one commit."""
        ...

    def change_sets(self) -> Iterator[ChangeSet]:
        """Yield one change set per commit, in list_commits() order."""
        ...


class StaticHistorySource:
    """History held in memory.

    Accepts either a mapping of commit id to changed files or a plain
    sequence of change sets, in which case commits are numbered from 0.
    """

    def __init__(self, commits: Mapping[str, Iterable[str]] | Iterable[Iterable[str]]):
        if isinstance(commits, Mapping):
            items = commits.items()
        else:
            items = ((str(i), files) for i, files in enumerate(commits))
        self._commits: dict[str, ChangeSet] = {
            commit: frozenset(files) for commit, files in items
        }
        self.skipped: list[tuple[str, str]] = []

    def list_commits(self) -> list[str]:
        return list(self._commits)

    def changed_files(self, commit: str) -> ChangeSet:
        return self._commits[commit]

    def change_sets(self) -> Iterator[ChangeSet]:
        yield from self._commits.values()
