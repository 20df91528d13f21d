"""
Map controller: viewport targeting and the focus lifecycle.

The focus lifecycle is an explicit state machine::

    IDLE --select--> FOCUS_REQUESTED --focus delay--> LOCKED
      ^                   |                             |
      |                 close                         close
      |                   v                             v
      +---guard window--- UNLOCKING <-------------------+

- FOCUS_REQUESTED: the camera was recentred once on the project at the
  current zoom; a single cancellable timer is pending.
- LOCKED: the zoom range is pinned to the zoom at lock time, all six
  interaction handlers are off, the marker popup is open and a zoom-end
  listener re-opens it after any external zoom change.
- UNLOCKING: interaction and the operable zoom range are restored; zoom
  events are ignored until the guard window elapses.

Every timer carries the generation number it was scheduled under. A
callback whose generation is no longer current does nothing, so a fast
second selection can never open the first project's popup.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from mapstate.markers import MarkerRegistry
from mapstate.models import Project
from mapstate.scheduler import Scheduler, TimerHandle
from mapstate.viewport import (
    DEFAULT_VIEW,
    REGION_BOUNDARY,
    LatLng,
    ViewTarget,
    bounds_zoom,
    view_for_provinces,
)
from mapstate.widget import INTERACTION_HANDLERS, ZOOM_END, MapEvent, MapWidget
from utils.config import MapSettings

logger = logging.getLogger(__name__)


class FocusState(enum.Enum):
    IDLE = "idle"
    FOCUS_REQUESTED = "focus_requested"
    LOCKED = "locked"
    UNLOCKING = "unlocking"


class FocusSource(enum.Enum):
    MARKER = "marker"
    SEARCH = "search"


@dataclass(frozen=True)
class ControllerSnapshot:
    """Observable controller and camera state at one instant."""

    state: FocusState
    focused_id: Optional[str]
    source: Optional[FocusSource]
    center: LatLng
    zoom: float
    min_zoom: float
    max_zoom: float
    handlers: tuple[tuple[str, bool], ...]
    zoom_listener_attached: bool


class MapController:

    def __init__(self, widget: MapWidget, scheduler: Scheduler,
                 settings: Optional[MapSettings] = None) -> None:
        self.widget = widget
        self.scheduler = scheduler
        self.settings = settings or MapSettings()
        self.markers = MarkerRegistry(widget)

        self._state = FocusState.IDLE
        self._focused: Optional[Project] = None
        self._source: Optional[FocusSource] = None
        self._generation = 0

        self._focus_timer: Optional[TimerHandle] = None
        self._guard_timer: Optional[TimerHandle] = None
        self._reopen_timer: Optional[TimerHandle] = None
        self._zoom_listener_attached = False

        self._operable_min_zoom = self.settings.min_zoom

    # ── inspection ────────────────────────────────────────────────────────

    @property
    def state(self) -> FocusState:
        return self._state

    @property
    def focused_project(self) -> Optional[Project]:
        return self._focused

    @property
    def focus_source(self) -> Optional[FocusSource]:
        return self._source

    @property
    def is_focused(self) -> bool:
        return self._focused is not None

    @property
    def zoom_controls_enabled(self) -> bool:
        """The +/- zoom buttons are greyed out while a project is focused."""
        return self._focused is None

    @property
    def operable_min_zoom(self) -> float:
        return self._operable_min_zoom

    def snapshot(self) -> ControllerSnapshot:
        w = self.widget
        return ControllerSnapshot(
            state=self._state,
            focused_id=self._focused.id if self._focused else None,
            source=self._source,
            center=w.get_center(),
            zoom=w.get_zoom(),
            min_zoom=w.get_min_zoom(),
            max_zoom=w.get_max_zoom(),
            handlers=tuple((n, w.handler_enabled(n)) for n in INTERACTION_HANDLERS),
            zoom_listener_attached=self._zoom_listener_attached,
        )

    # ── focus transitions ─────────────────────────────────────────────────

    def select_project(self, project: Project,
                       source: FocusSource = FocusSource.MARKER) -> bool:
        """Focus *project*. Returns False if it was already focused."""
        if self._focused is not None and self._focused.id == project.id:
            logger.debug("Project %s already focused; ignoring", project.id)
            return False

        was_engaged = self._state in (FocusState.FOCUS_REQUESTED, FocusState.LOCKED)
        self._cancel_timers()
        self._detach_zoom_listener()
        if was_engaged:
            self._restore_interaction()

        self._generation += 1
        self._focused = project
        self._source = source
        self._state = FocusState.FOCUS_REQUESTED
        logger.debug("Focus requested: %s (via %s)", project.id, source.value)

        if project.has_location:
            self.widget.set_view(LatLng(project.latitude, project.longitude),
                                 self.widget.get_zoom())
        else:
            logger.warning("Project %s has no coordinates; not recentring", project.id)

        self._focus_timer = self.scheduler.call_later(
            self.settings.focus_delay, self._on_focus_elapsed, self._generation)
        return True

    def close_focus(self) -> bool:
        """Release the focused project. Returns False if nothing was focused."""
        if self._focused is None:
            return False
        project_id = self._focused.id
        self._cancel_timers()
        self._detach_zoom_listener()
        self._focused = None
        self._source = None
        self._generation += 1
        self._restore_interaction()
        self.widget.close_popup()
        self._state = FocusState.UNLOCKING
        self._guard_timer = self.scheduler.call_later(
            self.settings.unlock_guard, self._on_guard_elapsed, self._generation)
        logger.debug("Focus released: %s", project_id)
        return True

    def reset_view(self) -> None:
        """Drop focus and timers, restore interaction, show the whole region."""
        self._cancel_timers()
        self._detach_zoom_listener()
        self._focused = None
        self._source = None
        self._generation += 1
        self._restore_interaction()
        self.widget.close_popup()
        self._state = FocusState.IDLE
        self._apply_target(DEFAULT_VIEW)
        logger.debug("View reset to region default")

    # ── viewport targeting ────────────────────────────────────────────────

    def zoom_to_provinces(self, provinces: Iterable[str]) -> bool:
        """Retarget the camera for a province selection.

        Callers invoke this when the province selection changes, never on
        every render. Skipped while a project holds the viewport. Returns
        True if the camera was moved.
        """
        selected = tuple(provinces)
        if self._state in (FocusState.FOCUS_REQUESTED, FocusState.LOCKED):
            logger.debug("Province retarget skipped: viewport held by %s",
                         self._focused.id if self._focused else None)
            return False
        target = view_for_provinces(selected)
        if target is None:
            logger.warning("No predefined view for provinces %s", list(selected))
            return False
        self._apply_target(target)
        return True

    def on_resize(self, size: Optional[tuple[float, float]] = None) -> float:
        """Recompute the minimum zoom that keeps the region boundary visible.

        Applied to the map immediately unless a project holds the viewport,
        in which case it takes effect on unlock.
        """
        size = size or self.widget.get_size()
        try:
            zoom = bounds_zoom(REGION_BOUNDARY, size)
        except ValueError:
            logger.warning("Ignoring resize to degenerate size %s", size)
            return self._operable_min_zoom
        self._operable_min_zoom = max(0, min(zoom, self.settings.max_zoom))
        if self._state not in (FocusState.FOCUS_REQUESTED, FocusState.LOCKED):
            self.widget.set_min_zoom(self._operable_min_zoom)
        return self._operable_min_zoom

    def sync_markers(self, projects: Iterable[Project]) -> None:
        """Mirror the filtered set on the map; drop focus if its marker left."""
        self.markers.sync(projects)
        if self._focused is not None and self._focused.id not in self.markers:
            logger.debug("Focused project %s filtered out", self._focused.id)
            self.close_focus()

    # ── internals ─────────────────────────────────────────────────────────

    def _apply_target(self, target: ViewTarget) -> None:
        if target.is_fit:
            self.widget.fit_bounds(target.bounds)
        else:
            self.widget.set_view(target.center, target.zoom)

    def _on_focus_elapsed(self, generation: int) -> None:
        if generation != self._generation or self._state is not FocusState.FOCUS_REQUESTED:
            return
        zoom = self.widget.get_zoom()
        self.widget.set_min_zoom(zoom)
        self.widget.set_max_zoom(zoom)
        self.widget.set_interaction(False)
        self._state = FocusState.LOCKED
        self.markers.open_popup(self._focused.id)
        self.widget.on(ZOOM_END, self._on_zoom_end)
        self._zoom_listener_attached = True
        logger.debug("Viewport locked on %s at zoom %s", self._focused.id, zoom)

    def _on_zoom_end(self, event: MapEvent) -> None:
        if self._state is not FocusState.LOCKED or self._focused is None:
            return
        if not self.markers.is_attached(self._focused.id):
            return
        if self._reopen_timer is not None:
            self._reopen_timer.cancel()
        self._reopen_timer = self.scheduler.call_later(
            self.settings.popup_reopen_delay, self._on_reopen_elapsed, self._generation)

    def _on_reopen_elapsed(self, generation: int) -> None:
        self._reopen_timer = None
        if generation != self._generation or self._state is not FocusState.LOCKED:
            return
        self.markers.open_popup(self._focused.id)

    def _on_guard_elapsed(self, generation: int) -> None:
        if generation == self._generation and self._state is FocusState.UNLOCKING:
            self._state = FocusState.IDLE

    def _restore_interaction(self) -> None:
        self.widget.set_interaction(True)
        self.widget.set_max_zoom(self.settings.max_zoom)
        self.widget.set_min_zoom(self._operable_min_zoom)

    def _detach_zoom_listener(self) -> None:
        if self._zoom_listener_attached:
            self.widget.off(ZOOM_END, self._on_zoom_end)
            self._zoom_listener_attached = False

    def _cancel_timers(self) -> None:
        for timer in (self._focus_timer, self._guard_timer, self._reopen_timer):
            if timer is not None:
                timer.cancel()
        self._focus_timer = None
        self._guard_timer = None
        self._reopen_timer = None
