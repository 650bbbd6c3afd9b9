"""Serializable models for clustering results."""

from collections.abc import Iterable
from datetime import datetime

import networkx as nx
from pydantic import BaseModel, Field

from cochange import __version__
from cochange.analyzers.cochange_graph import group_cohesion


class FileGroup(BaseModel):
    """A group of files that changed together."""

    index: int = Field(ge=1, description="1-based position in the partition")
    files: list[str] = Field(description="Member file paths, sorted")
    size: int = Field(ge=1, description="Number of files")
    cohesion: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Share of file pairs in the group that changed together",
    )


class ClusterMetadata(BaseModel):
    """Metadata about a clustering run."""

    analyzer: str = Field(default="cochange")
    version: str = Field(default=__version__)
    generated_at: datetime = Field(default_factory=lambda: datetime.now(tz=None))
    commits_analyzed: int = Field(description="Number of change sets fed to the engine")
    commits_skipped: int = Field(default=0, description="Commits dropped as malformed")
    file_count: int = Field(default=0, description="Distinct files seen")
    group_count: int = Field(default=0, description="Number of groups")
    source_directory: str | None = Field(
        default=None, description="Repository that was analyzed"
    )


class PartitionReport(BaseModel):
    """Complete partition with metadata."""

    groups: list[FileGroup] = Field(default_factory=list)
    metadata: ClusterMetadata


def build_report(
    groups: Iterable[set[str]],
    *,
    commits_analyzed: int,
    commits_skipped: int = 0,
    graph: nx.Graph | None = None,
    source_directory: str | None = None,
) -> PartitionReport:
    """Convert a partition into a PartitionReport.

    Args:
        groups: Partition in output order.
        commits_analyzed: Number of change sets clustered.
        commits_skipped: Number of commits dropped before clustering.
        graph: Optional co-change graph; when given, each group gets a
            cohesion score.
        source_directory: Repository path for the metadata.

    Returns:
        PartitionReport with 1-based group indices.
    """
    file_groups = []
    for i, group in enumerate(groups, start=1):
        cohesion = round(group_cohesion(graph, group), 3) if graph is not None else None
        file_groups.append(
            FileGroup(index=i, files=sorted(group), size=len(group), cohesion=cohesion)
        )

    return PartitionReport(
        groups=file_groups,
        metadata=ClusterMetadata(
            commits_analyzed=commits_analyzed,
            commits_skipped=commits_skipped,
            file_count=sum(g.size for g in file_groups),
            group_count=len(file_groups),
            source_directory=source_directory,
        ),
    )
