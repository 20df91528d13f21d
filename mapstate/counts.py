"""
Live option counts for the filter panel badges.

``OptionCounter.count(option, dimension, context)`` answers "how many
projects would be visible if *option* were chosen in *dimension*, with the
other dimensions as in *context*". Counting ``ALL`` leaves *context*
unchanged in that dimension, so ``count(ALL, d, ctx)`` always equals the
size of the filtered set for ``ctx``.

Counts are a pure function of the pool and the context. The memo used by
``counts()`` lives only for one call; nothing is cached across renders.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from mapstate.filters import ALL, Dimension, FilterSelection
from mapstate.models import Project


class OptionCounter:

    def __init__(self, projects: Sequence[Project]) -> None:
        self._projects = tuple(projects)

    @property
    def pool_size(self) -> int:
        return len(self._projects)

    def hypothetical(self, option, dimension: Dimension,
                     context: FilterSelection) -> FilterSelection:
        """The selection whose match count is the badge for *option*."""
        if option is ALL:
            return context
        return context.with_values(dimension, (option,))

    def _matches(self, selection: FilterSelection) -> int:
        return sum(1 for p in self._projects if selection.matches(p))

    def count(self, option, dimension: Dimension, context: FilterSelection) -> int:
        return self._matches(self.hypothetical(option, dimension, context))

    def counts(self, dimension: Dimension, options: Iterable,
               context: FilterSelection) -> dict:
        """Badge counts for every option of one dimension, in option order.

        Options that produce the same hypothetical selection are counted
        once per call.
        """
        memo: dict[FilterSelection, int] = {}
        result: dict = {}
        for option in options:
            selection = self.hypothetical(option, dimension, context)
            if selection not in memo:
                memo[selection] = self._matches(selection)
            result[option] = memo[selection]
        return result
