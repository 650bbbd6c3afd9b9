#!/usr/bin/env python3
"""Benchmark clustering: union-find vs group scan.

Times both clustering implementations on the history of a real
repository, or on synthetic change sets when no path is given.

Usage:
    python scripts/benchmark_clustering.py /path/to/repo
    python scripts/benchmark_clustering.py --synthetic 20000
"""

import argparse
import json
import random
import sys
import time
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from cochange.analyzers.clustering import cluster, cluster_by_scan
from cochange.history import GitHistorySource


def format_time(seconds: float) -> str:
    """Format time in human-readable format."""
    if seconds < 0.001:
        return f"{seconds * 1_000_000:.1f}µs"
    elif seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    else:
        return f"{seconds:.2f}s"


def benchmark_function(func, *args, **kwargs) -> tuple[float, object]:
    """Run a function and return (elapsed_time, result)."""
    start = time.perf_counter()
    result = func(*args, **kwargs)
    elapsed = time.perf_counter() - start
    return elapsed, result


def synthetic_change_sets(commits: int, files: int, seed: int = 0) -> list[frozenset[str]]:
    """Generate change sets touching 1-5 random files each."""
    rng = random.Random(seed)
    paths = [f"src/module_{i}.py" for i in range(files)]
    return [frozenset(rng.sample(paths, rng.randint(1, 5))) for _ in range(commits)]


def run_benchmarks(change_sets: list[frozenset[str]], iterations: int = 3) -> dict:
    """Time both implementations on the same change sets.

    Args:
        change_sets: Commit sequence to cluster.
        iterations: Number of iterations for timing (default 3).

    Returns:
        Dict with benchmark results.
    """
    results: dict = {"commits": len(change_sets), "benchmarks": {}}

    print(f"{'Algorithm':<20} {'Time':<12} {'Groups':<10}")
    print("-" * 44)

    reference = None
    for name, func in (("union_find", cluster), ("scan", cluster_by_scan)):
        times = []
        groups = []
        for _ in range(iterations):
            elapsed, groups = benchmark_function(func, change_sets)
            times.append(elapsed)
        avg = sum(times) / len(times)
        print(f"{name:<20} {format_time(avg):<12} {len(groups):<10}")

        as_sets = {frozenset(g) for g in groups}
        if reference is None:
            reference = as_sets
        elif as_sets != reference:
            print(f"⚠️  {name} disagrees with union_find", file=sys.stderr)

        results["benchmarks"][name] = {"time": avg, "groups": len(groups)}

    return results


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Benchmark clustering: union-find vs scan")
    parser.add_argument("repo_path", nargs="?", help="Repository whose history to cluster")
    parser.add_argument(
        "--synthetic",
        type=int,
        metavar="N",
        help="Use N synthetic commits instead of a repository",
    )
    parser.add_argument("--files", type=int, default=5000, help="Synthetic file count")
    parser.add_argument(
        "-n", "--iterations",
        type=int,
        default=3,
        help="Number of iterations for timing (default: 3)",
    )
    parser.add_argument("-o", "--output", help="Output JSON file for results")
    args = parser.parse_args()

    if args.synthetic:
        change_sets = synthetic_change_sets(args.synthetic, args.files)
    elif args.repo_path:
        change_sets = list(GitHistorySource(args.repo_path).change_sets())
    else:
        parser.error("give a repository path or --synthetic N")

    print(f"Clustering {len(change_sets)} change sets\n")
    results = run_benchmarks(change_sets, args.iterations)

    if args.output:
        Path(args.output).write_text(json.dumps(results, indent=2))
        print(f"\nResults saved to {args.output}")


if __name__ == "__main__":
    main()
