"""Read change sets from a git repository.

Commits are listed with ``git log`` (newest first) and each commit's
changed files with ``git diff-tree -z``, so paths arrive unquoted and
NUL-separated.
"""

import re
import subprocess
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from cochange.analyzers.clustering import ChangeSet
from cochange.config import Settings
from cochange.errors import HistoryUnavailable, MalformedChangeSet
from cochange.logging import logger, progress_bar

# SHA-1 or SHA-256 object names
_OBJECT_ID = re.compile(r"^(?:[0-9a-f]{40}|[0-9a-f]{64})$")


class GitHistorySource:
    """Change sets of a git repository.

    Attributes:
        repo_path: Repository root (resolved).
        skipped: (commit, reason) pairs for commits dropped during the
            last ``change_sets()`` pass.
    """

    def __init__(
        self,
        repo_path: str | Path,
        git_executable: str = "git",
        max_commits: int | None = None,
        include_root: bool = False,
        workers: int = 1,
        timeout: float = 30.0,
    ):
        """Initialize the source.

        Args:
            repo_path: Path to the repository (any directory inside it).
            git_executable: git executable name or absolute path.
            max_commits: Only read this many recent commits.
            include_root: Report the files added by root commits.
            workers: Threads used to fetch per-commit change lists.
            timeout: Seconds allowed for each git call.
        """
        self.repo_path = Path(repo_path).resolve()
        self.git_executable = git_executable
        self.max_commits = max_commits
        self.include_root = include_root
        self.workers = max(1, workers)
        self.timeout = timeout
        self.skipped: list[tuple[str, str]] = []

    @classmethod
    def from_settings(cls, settings: Settings) -> "GitHistorySource":
        return cls(
            settings.repo_path,
            git_executable=settings.git_executable,
            max_commits=settings.max_commits,
            include_root=settings.include_root,
            workers=settings.workers,
            timeout=settings.git_timeout,
        )

    def _git(self, *args: str) -> subprocess.CompletedProcess[bytes]:
        """Run a git subcommand in the repository.

        Raises:
            HistoryUnavailable: If git cannot be executed or times out.
        """
        try:
            return subprocess.run(
                [self.git_executable, *args],
                cwd=self.repo_path,
                capture_output=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise HistoryUnavailable(
                f"git executable not found: {self.git_executable}"
            ) from e
        except subprocess.TimeoutExpired as e:
            raise HistoryUnavailable(
                f"git {args[0]} timed out after {self.timeout}s in {self.repo_path}"
            ) from e
        except OSError as e:
            raise HistoryUnavailable(f"could not run {self.git_executable}: {e}") from e

    def list_commits(self) -> list[str]:
        """List commit ids reachable from HEAD, most recent first.

        A repository without commits yields an empty list.

        Raises:
            HistoryUnavailable: If the path is not a git repository.
        """
        if not self.repo_path.is_dir():
            raise HistoryUnavailable(f"Not a directory: {self.repo_path}")

        probe = self._git("rev-parse", "--git-dir")
        if probe.returncode != 0:
            raise HistoryUnavailable(
                f"Not a git repository: {self.repo_path} "
                f"({_decode_stderr(probe.stderr)})"
            )

        head = self._git("rev-parse", "--verify", "--quiet", "HEAD^{commit}")
        if head.returncode != 0:
            if self._on_unborn_branch():
                logger.info("Repository %s has no commits yet", self.repo_path)
                return []
            raise HistoryUnavailable(f"HEAD does not resolve to a commit in {self.repo_path}")

        args = ["log", "--pretty=format:%H"]
        if self.max_commits is not None:
            args.append(f"-n{self.max_commits}")

        result = self._git(*args)
        if result.returncode != 0:
            raise HistoryUnavailable(f"git log failed: {_decode_stderr(result.stderr)}")

        commits = []
        for line in result.stdout.decode("utf-8", errors="replace").splitlines():
            line = line.strip()
            if not line:
                continue
            if not _OBJECT_ID.match(line):
                logger.warning("Ignoring unexpected git log line: %r", line)
                continue
            commits.append(line)

        return commits

    def _on_unborn_branch(self) -> bool:
        """True when HEAD names a branch that has no ref yet (fresh repository)."""
        symref = self._git("symbolic-ref", "--quiet", "HEAD")
        if symref.returncode != 0:
            return False
        branch = symref.stdout.decode("utf-8", errors="replace").strip()
        # --verify only reads the ref; it does not require the object to exist
        return self._git("rev-parse", "--verify", "--quiet", branch).returncode != 0

    def changed_files(self, commit: str) -> ChangeSet:
        """List the files touched by one commit.

        Merge commits, and root commits unless ``include_root`` is set,
        have no listed diff and yield an empty set.

        Raises:
            MalformedChangeSet: If git rejects the commit or its output
                cannot be decoded.
            HistoryUnavailable: If git cannot be executed.
        """
        args = ["diff-tree", "--no-commit-id", "--name-only", "-r", "-z"]
        if self.include_root:
            args.append("--root")
        args.append(commit)

        result = self._git(*args)
        if result.returncode != 0:
            raise MalformedChangeSet(commit, f"git diff-tree failed: {_decode_stderr(result.stderr)}")

        try:
            output = result.stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedChangeSet(commit, f"output is not valid UTF-8 ({e.reason})") from e

        return frozenset(path for path in output.split("\0") if path)

    def _fetch(self, commit: str) -> ChangeSet | MalformedChangeSet:
        try:
            return self.changed_files(commit)
        except MalformedChangeSet as e:
            return e

    def _fetch_all(self, commits: list[str]) -> Iterator[ChangeSet | MalformedChangeSet]:
        """Fetch change lists in commit order, optionally on a thread pool."""
        if self.workers == 1:
            yield from map(self._fetch, commits)
            return

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            # map() yields in submission order regardless of completion order
            yield from executor.map(self._fetch, commits)

    def change_sets(self) -> Iterator[ChangeSet]:
        """Yield one change set per commit, newest first.

        Commits whose change list is malformed are logged, recorded in
        ``skipped`` and left out.

        Raises:
            HistoryUnavailable: If the history cannot be read.
        """
        commits = self.list_commits()
        self.skipped = []

        results = progress_bar(
            self._fetch_all(commits), desc="Reading commits", total=len(commits), unit="commits"
        )
        for commit, result in zip(commits, results):
            if isinstance(result, MalformedChangeSet):
                logger.warning("Skipping %s", result)
                self.skipped.append((commit, result.reason))
                continue
            yield result


def _decode_stderr(stderr: bytes) -> str:
    return stderr.decode("utf-8", errors="replace").strip()
