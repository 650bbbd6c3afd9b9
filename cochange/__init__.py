"""cochange - group files that change together in git history."""

# Keep in sync with pyproject.toml [project] version.
__version__ = "0.1.0"
