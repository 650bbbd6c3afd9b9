"""Runtime configuration.

Settings come from COCHANGE_* environment variables, read at call time
so a .env file loaded by the CLI (or monkeypatched env in tests) is
honoured. Explicit overrides win over the environment.
"""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

# field name -> environment variable
ENV_VARS = {
    "repo_path": "COCHANGE_REPO",
    "git_executable": "COCHANGE_GIT",
    "output_path": "COCHANGE_OUTPUT",
    "max_commits": "COCHANGE_MAX_COMMITS",
    "workers": "COCHANGE_WORKERS",
    "git_timeout": "COCHANGE_GIT_TIMEOUT",
    "include_root": "COCHANGE_INCLUDE_ROOT",
}


class Settings(BaseModel):
    """Configuration for one cochange run."""

    repo_path: Path = Field(
        default_factory=Path.cwd, description="Root of the git repository to inspect"
    )
    git_executable: str = Field(default="git", description="git executable name or path")
    output_path: Path = Field(default=Path("graph.png"), description="Where to write the PNG")
    max_commits: int | None = Field(
        default=None, ge=1, description="Only read this many recent commits"
    )
    workers: int = Field(
        default=1, ge=1, description="Threads used to fetch per-commit change lists"
    )
    git_timeout: float = Field(default=30.0, gt=0, description="Seconds allowed per git call")
    include_root: bool = Field(
        default=False, description="List the files of root commits as a change set"
    )


def load_settings(**overrides: Any) -> Settings:
    """Build Settings from the environment plus explicit overrides.

    Args:
        **overrides: Field values that take precedence over the
            environment. ``None`` values are ignored so CLI options
            left unset fall through to the environment.

    Returns:
        Validated Settings.

    Raises:
        pydantic.ValidationError: If a value is invalid.
    """
    values: dict[str, Any] = {}

    for field_name, env_var in ENV_VARS.items():
        raw = os.getenv(env_var)
        if raw is not None and raw.strip():
            values[field_name] = raw.strip()

    values.update({k: v for k, v in overrides.items() if v is not None})

    return Settings(**values)
