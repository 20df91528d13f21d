"""
Map-state package -- client-side filtering and map coordination for the
Region 1 assistance-projects dashboard.

Re-exports key entry points so callers can do::

    from mapstate import Dashboard, FilterSelection, InMemoryMapWidget
"""

from mapstate.controller import ControllerSnapshot, FocusSource, FocusState, MapController
from mapstate.counts import OptionCounter
from mapstate.dashboard import Dashboard
from mapstate.filters import ALL, Dimension, FilterSelection, FilterState, filtered_projects
from mapstate.markers import MarkerRegistry
from mapstate.models import Project, normalize_year
from mapstate.pending import PendingFilterState
from mapstate.repository import LoadResult, ProjectRepository
from mapstate.scheduler import ManualScheduler
from mapstate.search import SearchIndex
from mapstate.widget import InMemoryMapWidget, MapWidget

__all__ = [
    "ALL",
    "ControllerSnapshot",
    "Dashboard",
    "Dimension",
    "FilterSelection",
    "FilterState",
    "FocusSource",
    "FocusState",
    "InMemoryMapWidget",
    "LoadResult",
    "ManualScheduler",
    "MapController",
    "MapWidget",
    "MarkerRegistry",
    "OptionCounter",
    "PendingFilterState",
    "Project",
    "ProjectRepository",
    "SearchIndex",
    "filtered_projects",
    "normalize_year",
]
