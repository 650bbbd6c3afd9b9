"""Group files that change together into disjoint clusters.

Each commit's change set is a hyperedge over files. The clusters are the
connected components of that hypergraph: any two files that ever appear
in the same change set end up in the same group, and groups are as
fine-grained as that rule allows.

Two implementations are provided:
- ClusterEngine / cluster(): incremental union-find, near-linear in the
  total number of file occurrences.
- cluster_by_scan(): merges each change set into every group it touches
  by scanning the current groups. Quadratic, kept for comparison.

Both produce the same set of groups for any ordering of the input.
"""

from collections.abc import Hashable, Iterable

ChangeSet = frozenset[str]
Partition = list[set[str]]


class DisjointSet:
    """Union-find forest with path halving and union by size.

    Elements are added lazily. Iteration order of ``groups()`` follows
    the order in which each group's earliest element was added.
    """

    __slots__ = ("_parent", "_size")

    def __init__(self) -> None:
        self._parent: dict[Hashable, Hashable] = {}
        self._size: dict[Hashable, int] = {}

    def __len__(self) -> int:
        return len(self._parent)

    def __contains__(self, item: Hashable) -> bool:
        return item in self._parent

    def add(self, item: Hashable) -> None:
        """Add an element as a singleton set if not already present."""
        if item not in self._parent:
            self._parent[item] = item
            self._size[item] = 1

    def find(self, item: Hashable) -> Hashable:
        """Find the root of an element's set.

        Raises:
            KeyError: If the element was never added.
        """
        parent = self._parent
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    def union(self, a: Hashable, b: Hashable) -> Hashable:
        """Merge the sets containing a and b.

        Returns:
            Root of the merged set.
        """
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return ra
        if self._size[ra] < self._size[rb]:
            ra, rb = rb, ra
        self._parent[rb] = ra
        self._size[ra] += self._size.pop(rb)
        return ra

    def members(self, item: Hashable) -> set:
        """Return every element in the same set as item."""
        root = self.find(item)
        return {other for other in self._parent if self.find(other) == root}

    def set_count(self) -> int:
        """Number of disjoint sets currently in the forest."""
        return len(self._size)

    def groups(self) -> list[set]:
        """Reconstruct all sets, ordered by first-added member."""
        by_root: dict[Hashable, set] = {}
        for item in self._parent:
            by_root.setdefault(self.find(item), set()).add(item)
        return list(by_root.values())


def _checked_change_set(change_set: Iterable[str]) -> ChangeSet:
    """Normalize one change set, rejecting malformed input.

    Raises:
        TypeError: If the change set is a bare string or has non-string
            members.
    """
    if isinstance(change_set, (str, bytes)):
        raise TypeError(
            f"change set must be a collection of file paths, got {type(change_set).__name__}"
        )
    files = frozenset(change_set)
    for file_id in files:
        if not isinstance(file_id, str):
            raise TypeError(f"file ids must be str, got {type(file_id).__name__}: {file_id!r}")
    return files


class ClusterEngine:
    """Incrementally cluster change sets into disjoint file groups.

    Feed change sets with ``add()`` in any order and read the current
    partition with ``groups()``. Not thread-safe: serialize calls to
    ``add()``.

    Example:
        engine = ClusterEngine()
        engine.add({"a.py", "b.py"})
        engine.add({"b.py", "c.py"})
        engine.groups()  # [{"a.py", "b.py", "c.py"}]
    """

    def __init__(self) -> None:
        self._forest = DisjointSet()
        self.commits_seen = 0
        self.empty_skipped = 0

    def __len__(self) -> int:
        """Number of groups in the current partition."""
        return self._forest.set_count()

    @property
    def file_count(self) -> int:
        return len(self._forest)

    def add(self, change_set: Iterable[str]) -> None:
        """Merge one change set into the partition.

        All groups the change set touches are fused in this call; the
        forest is consistent again when it returns.

        Raises:
            TypeError: If the change set is malformed.
        """
        files = _checked_change_set(change_set)
        self.commits_seen += 1

        if not files:
            self.empty_skipped += 1
            return

        # Sorted so the forest shape doesn't depend on set hashing
        members = sorted(files)
        anchor = members[0]
        self._forest.add(anchor)
        for file_id in members[1:]:
            self._forest.add(file_id)
            anchor = self._forest.union(anchor, file_id)

    def update(self, commits: Iterable[Iterable[str]]) -> None:
        """Add every change set of a commit sequence."""
        for change_set in commits:
            self.add(change_set)

    def group_of(self, file_id: str) -> set[str]:
        """Return the group currently containing a file.

        Raises:
            KeyError: If the file has not been seen.
        """
        return self._forest.members(file_id)

    def groups(self) -> Partition:
        """Return the current partition in discovery order."""
        return self._forest.groups()


def cluster(commits: Iterable[Iterable[str]]) -> Partition:
    """Cluster a commit sequence into the coarsest co-change partition.

    Args:
        commits: Change sets, one per commit. Empty change sets are
            skipped. The input is not modified.

    Returns:
        Disjoint groups of file paths covering every file seen.

    Raises:
        TypeError: If a change set is malformed.
    """
    engine = ClusterEngine()
    engine.update(commits)
    return engine.groups()


def cluster_by_scan(commits: Iterable[Iterable[str]]) -> Partition:
    """Cluster by scanning existing groups for every change set.

    Every group the change set intersects is merged, together with the
    change set, into one group that takes the position of the first
    touched group. A change set touching nothing becomes a new group at
    the end.

    Args:
        commits: Change sets, one per commit.

    Returns:
        Disjoint groups of file paths.

    Raises:
        TypeError: If a change set is malformed.
    """
    groups: Partition = []

    for change_set in commits:
        files = _checked_change_set(change_set)
        if not files:
            continue

        touched = [i for i, group in enumerate(groups) if not group.isdisjoint(files)]

        if not touched:
            groups.append(set(files))
            continue

        merged = set(files)
        for i in touched:
            merged |= groups[i]

        first = touched[0]
        groups[first] = merged
        for i in reversed(touched[1:]):
            del groups[i]

    return groups
