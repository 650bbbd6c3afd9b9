"""Sources of commit change sets."""

from cochange.history.base import HistorySource, StaticHistorySource
from cochange.history.git import GitHistorySource

__all__ = ["GitHistorySource", "HistorySource", "StaticHistorySource"]
