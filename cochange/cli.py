"""CLI interface for cochange.

Reads the git history of a repository, groups files that changed
together, prints the groups and writes a PNG summary.
"""

import sys

import click
from dotenv import load_dotenv
from pydantic import ValidationError

# Load .env before reading settings
load_dotenv()

from cochange import __version__  # noqa: E402
from cochange.analyzers import ClusterEngine, cochange_graph  # noqa: E402
from cochange.config import Settings, load_settings  # noqa: E402
from cochange.errors import HistoryUnavailable, RenderFailure  # noqa: E402
from cochange.history import GitHistorySource  # noqa: E402
from cochange.logging import log_operation  # noqa: E402
from cochange.models.partition import build_report  # noqa: E402
from cochange.render import render_partition  # noqa: E402


def _echo_groups(groups: list[set[str]]) -> None:
    for index, group in enumerate(groups, start=1):
        click.echo(f"Group {index}:")
        for file_path in sorted(group):
            click.echo(f"\t{file_path}")


@click.command()
@click.version_option(version=__version__, prog_name="cochange")
@click.argument(
    "repo_path",
    required=False,
    type=click.Path(resolve_path=True),
)
@click.option(
    "--output",
    "output_path",
    type=click.Path(dir_okay=False),
    help="PNG file to write (default: graph.png)",
)
@click.option("--commits", "max_commits", type=int, help="Only read the N most recent commits")
@click.option("--workers", type=int, help="Threads used to read commits (default: 1)")
@click.option(
    "--include-root",
    is_flag=True,
    help="Count the files added by the root commit as a change set",
)
@click.option("--json", "as_json", is_flag=True, help="Print a JSON report instead of text")
@click.option("--no-image", is_flag=True, help="Skip writing the PNG")
def cli(
    repo_path: str | None,
    output_path: str | None,
    max_commits: int | None,
    workers: int | None,
    include_root: bool,
    as_json: bool,
    no_image: bool,
) -> None:
    """Group files that change together in git history.

    REPO_PATH: Repository to analyze (default: current directory).
    """
    try:
        settings: Settings = load_settings(
            repo_path=repo_path,
            output_path=output_path,
            max_commits=max_commits,
            workers=workers,
            include_root=include_root or None,
        )
    except ValidationError as e:
        raise click.UsageError(f"Invalid configuration: {e}") from e

    source = GitHistorySource.from_settings(settings)
    engine = ClusterEngine()
    change_sets = []

    try:
        with log_operation("cluster", repo=settings.repo_path) as stats:
            for change_set in source.change_sets():
                engine.add(change_set)
                if as_json:
                    change_sets.append(change_set)
            stats.record(
                commits=engine.commits_seen,
                skipped=len(source.skipped),
                files=engine.file_count,
                groups=len(engine),
            )
    except HistoryUnavailable as e:
        click.echo(f"History unavailable: {e}", err=True)
        sys.exit(1)

    groups = engine.groups()

    if as_json:
        report = build_report(
            groups,
            commits_analyzed=engine.commits_seen,
            commits_skipped=len(source.skipped),
            graph=cochange_graph(change_sets),
            source_directory=str(settings.repo_path),
        )
        click.echo(report.model_dump_json(indent=2))
    else:
        _echo_groups(groups)

    if no_image:
        return

    try:
        written = render_partition(groups, settings.output_path)
    except RenderFailure as e:
        click.echo(f"Rendering failed: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote {written}", err=True)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
