"""
Free-text project search for the search box.

Matching is a case-insensitive substring test against the project title
and the firm name. There is no ranking: suggestions come back in the order
of the pool they were drawn from. An empty query suggests nothing.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from mapstate.models import Project

logger = logging.getLogger(__name__)


def matches_query(project: Project, needle: str) -> bool:
    """*needle* must already be lowercased."""
    return needle in project.title.lower() or needle in project.firm_name.lower()


class SearchIndex:
    """Search-box state: the typed query and its current suggestions."""

    def __init__(self, limit: Optional[int] = None) -> None:
        self.limit = limit
        self._query = ""
        self._suggestions: list[Project] = []
        self._showing = False

    @property
    def query(self) -> str:
        return self._query

    @property
    def suggestions(self) -> list[Project]:
        return list(self._suggestions)

    def suggest(self, query: str, pool: Sequence[Project]) -> list[Project]:
        """Projects in *pool* whose title or firm name contains *query*."""
        if not query:
            return []
        needle = query.lower()
        out: list[Project] = []
        for project in pool:
            if matches_query(project, needle):
                out.append(project)
                if self.limit is not None and len(out) >= self.limit:
                    break
        return out

    def update(self, query: str, pool: Sequence[Project]) -> list[Project]:
        """Record a new query and recompute suggestions against *pool*."""
        self._query = query
        self._suggestions = self.suggest(query, pool)
        self._showing = bool(query)
        return self.suggestions

    def refresh(self, pool: Sequence[Project]) -> list[Project]:
        """Recompute an open suggestion list against a changed pool."""
        if self._showing:
            self._suggestions = self.suggest(self._query, pool)
        return self.suggestions

    def choose(self, project: Project) -> None:
        """A suggestion was picked: show its title, hide the list."""
        self._query = project.title
        self._suggestions = []
        self._showing = False

    def clear(self) -> bool:
        """Empty query and suggestions. Returns False if already empty."""
        if not self._query and not self._suggestions:
            return False
        self._query = ""
        self._suggestions = []
        self._showing = False
        return True
