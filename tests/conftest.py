"""Pytest configuration and shared fixtures."""

import shutil
import subprocess
import tempfile
from pathlib import Path

import pytest


class GitRepo:
    """A throwaway git repository driven through the git CLI."""

    def __init__(self, path: Path):
        self.path = path
        self.commits: list[str] = []
        self._git("init", "-q")

    def _git(self, *args: str) -> str:
        result = subprocess.run(
            [
                "git",
                "-c", "user.name=Test",
                "-c", "user.email=test@example.com",
                "-c", "commit.gpgsign=false",
                *args,
            ],
            cwd=self.path,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout

    def commit(self, files: dict[str, str], message: str = "change") -> str:
        """Write files, commit them and return the commit id."""
        for name, content in files.items():
            target = self.path / name
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        self._git("add", "-A")
        self._git("commit", "-q", "-m", message)
        sha = self._git("rev-parse", "HEAD").strip()
        self.commits.append(sha)
        return sha


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def empty_git_repo(temp_dir: Path) -> GitRepo:
    """Initialized repository without commits."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    repo_dir = temp_dir / "repo"
    repo_dir.mkdir()
    return GitRepo(repo_dir)


@pytest.fixture
def git_repo(empty_git_repo: GitRepo) -> GitRepo:
    """Repository with four commits.

    Oldest first:
        1. a.py, b.py            (root commit)
        2. a.py, c.py
        3. d.py, e.py
        4. e.py, "docs/read me.md"
    """
    repo = empty_git_repo
    repo.commit({"a.py": "a = 1\n", "b.py": "b = 1\n"}, "initial")
    repo.commit({"a.py": "a = 2\n", "c.py": "c = 1\n"}, "touch a and c")
    repo.commit({"d.py": "d = 1\n", "e.py": "e = 1\n"}, "add d and e")
    repo.commit({"e.py": "e = 2\n", "docs/read me.md": "# docs\n"}, "document e")
    return repo


@pytest.fixture
def example_commits() -> list[set[str]]:
    """Change sets with two groups: {A, B, C} and {D, E}."""
    return [{"A", "B"}, {"B", "C"}, {"D", "E"}]
