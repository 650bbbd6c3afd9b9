"""Tests for the co-change clustering engine."""

import copy
import itertools
import random

import pytest

from cochange.analyzers.clustering import (
    ClusterEngine,
    DisjointSet,
    cluster,
    cluster_by_scan,
)
from cochange.analyzers.cochange_graph import cochange_graph, components


def as_sets(groups: list[set[str]]) -> set[frozenset[str]]:
    """Partition as an unordered set of frozensets."""
    return {frozenset(g) for g in groups}


def random_commits(seed: int, commits: int = 200, files: int = 60) -> list[set[str]]:
    rng = random.Random(seed)
    paths = [f"f{i}.py" for i in range(files)]
    history = []
    for _ in range(commits):
        size = rng.choice([0, 1, 1, 2, 2, 3, 4])
        history.append(set(rng.sample(paths, size)))
    return history


@pytest.fixture(params=[cluster, cluster_by_scan], ids=["union_find", "scan"])
def clusterer(request: pytest.FixtureRequest):
    """Run each test against both implementations."""
    return request.param


class TestDisjointSet:
    """Tests for the union-find forest."""

    def test_singletons(self) -> None:
        """Added elements start in their own sets."""
        ds = DisjointSet()
        for item in "abc":
            ds.add(item)

        assert len(ds) == 3
        assert ds.set_count() == 3
        assert ds.find("a") == "a"

    def test_add_is_idempotent(self) -> None:
        """Adding an existing element does not reset its set."""
        ds = DisjointSet()
        ds.add("a")
        ds.add("b")
        ds.union("a", "b")
        ds.add("b")

        assert ds.find("a") == ds.find("b")
        assert ds.set_count() == 1

    def test_union_merges_sets(self) -> None:
        """Union joins sets transitively."""
        ds = DisjointSet()
        for item in "abcd":
            ds.add(item)
        ds.union("a", "b")
        ds.union("c", "d")
        ds.union("b", "c")

        assert ds.set_count() == 1
        assert ds.members("d") == {"a", "b", "c", "d"}

    def test_union_by_size_keeps_larger_root(self) -> None:
        """The root of the larger set survives a union."""
        ds = DisjointSet()
        for item in "abcx":
            ds.add(item)
        big = ds.union("a", "b")
        big = ds.union(big, "c")

        assert ds.union("x", "a") == big

    def test_find_unknown_raises(self) -> None:
        """Looking up an element that was never added is an error."""
        with pytest.raises(KeyError):
            DisjointSet().find("missing")

    def test_contains(self) -> None:
        ds = DisjointSet()
        ds.add("a")
        assert "a" in ds
        assert "b" not in ds

    def test_groups_in_first_added_order(self) -> None:
        """Groups come out ordered by their earliest element."""
        ds = DisjointSet()
        for item in ["x", "y", "a", "b"]:
            ds.add(item)
        ds.union("b", "y")

        assert ds.groups() == [{"x"}, {"y", "b"}, {"a"}]


class TestClusterExamples:
    """Worked examples run against both implementations."""

    def test_chain_and_separate_group(self, clusterer, example_commits) -> None:
        """{A,B}, {B,C}, {D,E} gives {A,B,C} and {D,E}."""
        assert as_sets(clusterer(example_commits)) == {
            frozenset({"A", "B", "C"}),
            frozenset({"D", "E"}),
        }

    def test_bridge_merges_all_touched_groups(self, clusterer) -> None:
        """A change set touching two groups fuses both."""
        groups = clusterer([{"A", "B"}, {"C", "D"}, {"B", "C"}])
        assert as_sets(groups) == {frozenset({"A", "B", "C", "D"})}

    def test_bridge_over_three_groups(self, clusterer) -> None:
        """One change set can bridge three or more groups at once."""
        commits = [{"A", "B"}, {"C", "D"}, {"E", "F"}, {"G"}, {"A", "D", "F"}]
        assert as_sets(clusterer(commits)) == {
            frozenset("ABCDEF"),
            frozenset({"G"}),
        }

    def test_single_file(self, clusterer) -> None:
        """A lone file forms its own group."""
        assert clusterer([{"A"}]) == [{"A"}]

    def test_empty_sequence(self, clusterer) -> None:
        """No commits means no groups."""
        assert clusterer([]) == []

    def test_only_empty_change_sets(self, clusterer) -> None:
        """Empty change sets contribute nothing."""
        assert clusterer([set(), frozenset(), []]) == []

    def test_empty_change_sets_are_skipped(self, clusterer) -> None:
        assert as_sets(clusterer([{"A"}, set(), {"B"}])) == {
            frozenset({"A"}),
            frozenset({"B"}),
        }

    def test_duplicate_entries_are_harmless(self, clusterer) -> None:
        """Repeated paths in one change set are treated as one."""
        assert clusterer([["A", "A", "B"]]) == [{"A", "B"}]

    def test_paths_are_not_normalized(self, clusterer) -> None:
        """Differently spelled paths stay distinct files."""
        groups = clusterer([{"src/A.py"}, {"src/a.py"}, {"src\\a.py"}])
        assert len(groups) == 3

    def test_accepts_generator(self, clusterer) -> None:
        groups = clusterer(frozenset(pair) for pair in [("A", "B"), ("B", "C")])
        assert as_sets(groups) == {frozenset("ABC")}


class TestClusterOrdering:
    """Tests for discovery order of groups."""

    def test_union_find_orders_by_first_seen_file(self, example_commits) -> None:
        assert cluster(example_commits) == [{"A", "B", "C"}, {"D", "E"}]

    def test_scan_keeps_position_of_first_touched_group(self) -> None:
        """The merged group replaces the first group it touched."""
        groups = cluster_by_scan([{"A", "B"}, {"C", "D"}, {"E"}, {"B", "C"}])
        assert groups == [{"A", "B", "C", "D"}, {"E"}]

    def test_scan_appends_untouched_change_set(self) -> None:
        groups = cluster_by_scan([{"A"}, {"B"}, {"C"}])
        assert groups == [{"A"}, {"B"}, {"C"}]


class TestClusterProperties:
    """Partition invariants on generated histories."""

    @pytest.mark.parametrize("seed", range(5))
    def test_invariants(self, clusterer, seed: int) -> None:
        """Groups are disjoint, cover all files and contain each change set."""
        commits = random_commits(seed)
        groups = clusterer(commits)

        seen: set[str] = set()
        for group in groups:
            assert group, "groups are never empty"
            assert seen.isdisjoint(group)
            seen |= group

        all_files = set().union(*commits)
        assert seen == all_files

        owner = {f: i for i, group in enumerate(groups) for f in group}
        for change_set in commits:
            assert len({owner[f] for f in change_set}) <= 1

    @pytest.mark.parametrize("seed", range(5))
    def test_coarsest_partition(self, clusterer, seed: int) -> None:
        """Groups equal the connected components of the co-change graph."""
        commits = random_commits(seed)
        graph = cochange_graph(commits, max_set_size=len(commits))

        assert as_sets(clusterer(commits)) == as_sets(components(graph))

    @pytest.mark.parametrize("seed", range(5))
    def test_implementations_agree(self, seed: int) -> None:
        commits = random_commits(seed)
        assert as_sets(cluster(commits)) == as_sets(cluster_by_scan(commits))

    def test_order_independence_all_permutations(self, clusterer) -> None:
        """Every ordering of the commits yields the same groups."""
        commits = [{"A", "B"}, {"C", "D"}, {"B", "C"}, {"E"}, {"F", "E"}]
        expected = as_sets(clusterer(commits))

        for ordering in itertools.permutations(commits):
            assert as_sets(clusterer(list(ordering))) == expected

    @pytest.mark.parametrize("seed", range(3))
    def test_order_independence_shuffled(self, clusterer, seed: int) -> None:
        commits = random_commits(seed)
        expected = as_sets(clusterer(commits))

        shuffled = list(commits)
        random.Random(seed + 100).shuffle(shuffled)

        assert as_sets(clusterer(shuffled)) == expected

    def test_input_not_mutated(self, clusterer) -> None:
        commits = [{"A", "B"}, {"C", "D"}, {"B", "C"}]
        snapshot = copy.deepcopy(commits)

        clusterer(commits)

        assert commits == snapshot


class TestMalformedInput:
    """Precondition violations are reported, not absorbed."""

    def test_bare_string_change_set(self, clusterer) -> None:
        """A string would otherwise be split into characters."""
        with pytest.raises(TypeError, match="collection of file paths"):
            clusterer(["a.py"])

    def test_non_string_member(self, clusterer) -> None:
        with pytest.raises(TypeError, match="file ids must be str"):
            clusterer([{"a.py", 3}])


class TestClusterEngine:
    """Tests for the incremental engine interface."""

    def test_incremental_adds(self) -> None:
        """Groups reflect every change set added so far."""
        engine = ClusterEngine()
        engine.add({"A", "B"})
        engine.add({"C", "D"})
        assert len(engine) == 2

        engine.add({"B", "C"})
        assert len(engine) == 1
        assert engine.groups() == [{"A", "B", "C", "D"}]

    def test_counters(self) -> None:
        engine = ClusterEngine()
        engine.update([{"A", "B"}, set(), {"C"}, []])

        assert engine.commits_seen == 4
        assert engine.empty_skipped == 2
        assert engine.file_count == 3

    def test_group_of(self, example_commits) -> None:
        engine = ClusterEngine()
        engine.update(example_commits)

        assert engine.group_of("C") == {"A", "B", "C"}
        with pytest.raises(KeyError):
            engine.group_of("Z")

    def test_failed_add_leaves_state_intact(self) -> None:
        """A rejected change set does not change the partition."""
        engine = ClusterEngine()
        engine.add({"A", "B"})

        with pytest.raises(TypeError):
            engine.add({"B", 7})

        assert engine.groups() == [{"A", "B"}]
        assert engine.commits_seen == 1

    def test_large_chain(self) -> None:
        """A long chain of overlapping commits collapses into one group."""
        commits = [{f"f{i}", f"f{i + 1}"} for i in range(5000)]
        groups = cluster(commits)

        assert len(groups) == 1
        assert len(groups[0]) == 5001
