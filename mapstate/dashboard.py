"""
Dashboard: one object that receives every user intent and keeps the filter
state, the filter panel, the search box and the map consistent.

Wiring::

    FilterState --change--> markers re-synced
                            viewport retargeted (province change or clear)
                            open search suggestions refreshed
    PendingFilterState --apply--> FilterState
    SearchIndex --suggestion--> MapController.select_project(SEARCH)
    marker click ------------> MapController.select_project(MARKER)

The filtered project list and the option counts are recomputed from the
current state on every access; nothing derived is cached between changes.

Usage::

    from mapstate import Dashboard, InMemoryMapWidget, ManualScheduler
    from mapstate.repository import ProjectRepository

    dash = Dashboard(InMemoryMapWidget(), ManualScheduler())
    dash.load(ProjectRepository("http://localhost:5000/api").load())
    dash.select_statuses(["Completed"])
    dash.marker_clicked("PJ001")
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from mapstate.controller import FocusSource, MapController
from mapstate.counts import OptionCounter
from mapstate.filters import ALL, Dimension, FilterChange, FilterSelection, FilterState
from mapstate.legend import popup_fields
from mapstate.models import Project
from mapstate.pending import PendingFilterState
from mapstate.repository import (
    LoadResult,
    prepare_pool,
    sector_options,
    status_options,
    year_options,
)
from mapstate.scheduler import Scheduler
from mapstate.search import SearchIndex
from mapstate.widget import MapWidget
from utils.config import MapSettings

logger = logging.getLogger(__name__)


class Dashboard:

    def __init__(self, widget: MapWidget, scheduler: Scheduler,
                 settings: Optional[MapSettings] = None,
                 search_limit: Optional[int] = None) -> None:
        self.settings = settings or MapSettings()
        self.filters = FilterState()
        self.pending = PendingFilterState(self.filters)
        self.search = SearchIndex(limit=search_limit)
        self.controller = MapController(widget, scheduler, self.settings)

        self._pool: tuple[Project, ...] = ()
        self._by_id: dict[str, Project] = {}
        self._counter = OptionCounter(())
        self._options: dict[Dimension, list[str]] = {d: [] for d in Dimension}
        self.error: Optional[str] = None
        self.from_fallback = False

        self.filters.subscribe(self._on_filters_changed)

    # ── loading ───────────────────────────────────────────────────────────

    def load(self, result: LoadResult) -> None:
        """Install a freshly loaded dataset and show the region view."""
        pool = prepare_pool(result.projects, self.settings.excluded_statuses)
        self._pool = tuple(pool)
        self._by_id = {p.id: p for p in self._pool}
        self._counter = OptionCounter(self._pool)
        self._options = {
            Dimension.PROVINCE: list(result.provinces),
            Dimension.STATUS: status_options(self._pool),
            Dimension.SECTOR: sector_options(self._pool),
            Dimension.YEAR: year_options(self._pool),
        }
        self.error = result.error
        self.from_fallback = result.from_fallback
        excluded = len(result.projects) - len(self._pool)
        logger.info("Dashboard loaded %d projects (%d excluded)%s",
                    len(self._pool), excluded,
                    " from fallback data" if result.from_fallback else "")

        self.search.clear()
        self.controller.on_resize()
        self.controller.reset_view()
        self.controller.sync_markers(self.filtered_projects)

    # ── derived state ─────────────────────────────────────────────────────

    @property
    def projects(self) -> tuple[Project, ...]:
        return self._pool

    @property
    def filtered_projects(self) -> list[Project]:
        return self.filters.filtered_projects(self._pool)

    def options(self, dimension: Dimension) -> list:
        """Choices for *dimension* with ALL first."""
        return [ALL, *self._options[dimension]]

    def option_counts(self, dimension: Dimension) -> dict:
        """Badge counts for every option of *dimension*.

        While the filter panel is open the counts describe the pending
        selection, otherwise the applied one.
        """
        context = self.pending.selection
        return self._counter.counts(dimension, self.options(dimension), context)

    def pending_match_count(self) -> int:
        """Projects the pending selection would show ("Show N results")."""
        return self._counter.count(ALL, Dimension.PROVINCE, self.pending.selection)

    def has_active_filters(self) -> bool:
        return not self.filters.selection.is_unfiltered

    def can_clear_all(self) -> bool:
        return self.has_active_filters() or self.pending.has_changes()

    def applied_chips(self) -> list[tuple[Dimension, str]]:
        return self.filters.selection.chips()

    def pending_chips(self) -> list[tuple[Dimension, str]]:
        return self.pending.selection.chips()

    @property
    def focused_project(self) -> Optional[Project]:
        return self.controller.focused_project

    def popup_content(self) -> Optional[list[tuple[str, str]]]:
        project = self.controller.focused_project
        return popup_fields(project) if project is not None else None

    @property
    def suggestions(self) -> list[Project]:
        return self.search.suggestions

    def project(self, project_id: str) -> Optional[Project]:
        return self._by_id.get(project_id)

    # ── filter intents ────────────────────────────────────────────────────

    def select_provinces(self, provinces) -> bool:
        return self.filters.set_dimension(Dimension.PROVINCE, _as_values(provinces))

    def select_statuses(self, statuses) -> bool:
        return self.filters.set_dimension(Dimension.STATUS, _as_values(statuses))

    def select_sector(self, sector) -> bool:
        return self.filters.toggle(Dimension.SECTOR, sector)

    def select_year(self, year) -> bool:
        return self.filters.toggle(Dimension.YEAR, year)

    def toggle_option(self, dimension: Dimension, value) -> FilterSelection:
        """A click on a panel option: edits the pending copy."""
        return self.pending.toggle(dimension, value)

    def remove_chip(self, dimension: Dimension, value, pending: bool = False) -> None:
        if pending:
            self.pending.remove(dimension, value)
        else:
            self.filters.apply(self.filters.selection.without(dimension, value))

    def clear_all_filters(self) -> None:
        self.filters.clear()

    # ── panel intents ─────────────────────────────────────────────────────

    def panel_opened(self) -> None:
        self.pending.open_from()

    def panel_applied(self) -> bool:
        return self.pending.apply()

    def panel_cancelled(self) -> None:
        self.pending.cancel()

    def panel_reset(self) -> None:
        self.pending.reset()

    # ── search intents ────────────────────────────────────────────────────

    def search_query_changed(self, query: str) -> list[Project]:
        """New text in the search box.

        Typing releases any focused project, whichever way it was chosen.
        """
        if self.controller.is_focused:
            self.controller.close_focus()
        return self.search.update(query, self.filtered_projects)

    def suggestion_clicked(self, project_id: str) -> bool:
        project = self._visible_project(project_id)
        if project is None:
            return False
        self.search.choose(project)
        return self.controller.select_project(project, FocusSource.SEARCH)

    def clear_search(self) -> bool:
        """Empty the search box.

        A focus that came from search is released and the camera returns
        to the province selection (or the region view). Returns False if
        there was nothing to clear.
        """
        searched_focus = self.controller.focus_source is FocusSource.SEARCH
        cleared = self.search.clear()
        if searched_focus:
            self.controller.close_focus()
            self.controller.zoom_to_provinces(self.filters.selection.provinces)
        return cleared or searched_focus

    # ── map intents ───────────────────────────────────────────────────────

    def marker_clicked(self, project_id: str) -> bool:
        project = self._visible_project(project_id)
        if project is None:
            return False
        return self.controller.select_project(project, FocusSource.MARKER)

    def popup_closed(self) -> bool:
        released = self.controller.close_focus()
        self.search.clear()
        return released

    def reset_view(self) -> bool:
        """Return to the region view from anywhere; refused while the panel is open."""
        if self.pending.is_open:
            logger.debug("Reset view ignored: filter panel is open")
            return False
        self.search.clear()
        self.controller.reset_view()
        return True

    def viewport_resized(self, size: Optional[tuple[float, float]] = None) -> float:
        return self.controller.on_resize(size)

    # ── internals ─────────────────────────────────────────────────────────

    def _visible_project(self, project_id: str) -> Optional[Project]:
        project = self._by_id.get(project_id)
        if project is None or not self.filters.selection.matches(project):
            logger.warning("Project %s is not in the visible set", project_id)
            return None
        return project

    def _on_filters_changed(self, change: FilterChange) -> None:
        visible = self.filtered_projects
        self.controller.sync_markers(visible)
        if change.cleared or change.provinces_changed:
            self.controller.zoom_to_provinces(change.current.provinces)
        self.search.refresh(visible)
        logger.debug("Filters changed %s: %d visible",
                     sorted(d.value for d in change.changed), len(visible))


def _as_values(values) -> Sequence:
    if values is ALL or values is None:
        return ALL
    if isinstance(values, str):
        return (values,)
    values = tuple(values)
    if ALL in values:
        return ALL
    return values
