"""
Map widget capability set.

``MapWidget`` is the contract the core drives: camera (view, zoom, zoom
range, fit-bounds), the six interaction handlers, a zoom-end event, markers
with popups, and an attachment check for marker handles. Any interactive
map library can be adapted to it.

``InMemoryMapWidget`` implements the contract headlessly with the camera
rules of a Leaflet map: zoom is clamped into [min_zoom, max_zoom],
narrowing the range moves the zoom into it, and a ``zoomend`` event fires
whenever the zoom level actually changes. It backs the test-suite and the
``explore_projects.py`` CLI.
"""

from __future__ import annotations

import itertools
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from mapstate.viewport import (
    BoundingBox,
    LatLng,
    MAX_ZOOM,
    MIN_ZOOM,
    REGION_CENTER,
    REGION_DEFAULT_ZOOM,
    bounds_zoom,
)

logger = logging.getLogger(__name__)

INTERACTION_HANDLERS = (
    "dragging",
    "scroll_wheel_zoom",
    "double_click_zoom",
    "touch_zoom",
    "box_zoom",
    "keyboard",
)

ZOOM_END = "zoomend"
MOVE_END = "moveend"


@dataclass(frozen=True)
class MapEvent:
    type: str
    zoom: float
    center: LatLng


EventHandler = Callable[[MapEvent], None]


class MapWidget(ABC):
    """Capabilities the core needs from an interactive map."""

    # ── camera ────────────────────────────────────────────────────────────

    @abstractmethod
    def set_view(self, center: LatLng, zoom: float) -> None:
        """Centre the map on *center* at *zoom*."""

    @abstractmethod
    def fit_bounds(self, bounds: BoundingBox) -> None:
        """Move the camera so that *bounds* is fully visible."""

    @abstractmethod
    def get_zoom(self) -> float:
        ...

    @abstractmethod
    def set_zoom(self, zoom: float) -> None:
        ...

    @abstractmethod
    def get_center(self) -> LatLng:
        ...

    @abstractmethod
    def get_min_zoom(self) -> float:
        ...

    @abstractmethod
    def get_max_zoom(self) -> float:
        ...

    @abstractmethod
    def set_min_zoom(self, zoom: float) -> None:
        ...

    @abstractmethod
    def set_max_zoom(self, zoom: float) -> None:
        ...

    @abstractmethod
    def get_size(self) -> tuple[float, float]:
        """Viewport size in pixels as (width, height)."""

    # ── interaction handlers ──────────────────────────────────────────────

    @abstractmethod
    def enable_handler(self, name: str) -> None:
        ...

    @abstractmethod
    def disable_handler(self, name: str) -> None:
        ...

    @abstractmethod
    def handler_enabled(self, name: str) -> bool:
        ...

    # ── events ────────────────────────────────────────────────────────────

    @abstractmethod
    def on(self, event: str, handler: EventHandler) -> None:
        ...

    @abstractmethod
    def off(self, event: str, handler: EventHandler) -> None:
        """Remove *handler*; removing one that is not registered is a no-op."""

    # ── markers and popups ────────────────────────────────────────────────

    @abstractmethod
    def add_marker(self, project_id: str, position: LatLng) -> object:
        """Place a marker and return an opaque handle for it."""

    @abstractmethod
    def remove_marker(self, handle: object) -> None:
        ...

    @abstractmethod
    def marker_attached(self, handle: object) -> bool:
        """True while *handle* refers to a marker that is on the live map."""

    @abstractmethod
    def open_marker_popup(self, handle: object) -> None:
        ...

    @abstractmethod
    def close_popup(self) -> None:
        ...

    # ── helpers shared by every widget ────────────────────────────────────

    def set_interaction(self, enabled: bool) -> None:
        """Enable or disable all six interaction handlers."""
        for name in INTERACTION_HANDLERS:
            if enabled:
                self.enable_handler(name)
            else:
                self.disable_handler(name)

    def interaction_enabled(self) -> dict[str, bool]:
        return {name: self.handler_enabled(name) for name in INTERACTION_HANDLERS}


@dataclass
class _Marker:
    handle_id: int
    project_id: str
    position: LatLng
    attached: bool = True


class InMemoryMapWidget(MapWidget):
    """Headless map with Leaflet camera semantics."""

    def __init__(self, center: LatLng = REGION_CENTER,
                 zoom: float = REGION_DEFAULT_ZOOM,
                 min_zoom: float = MIN_ZOOM, max_zoom: float = MAX_ZOOM,
                 size: tuple[float, float] = (1024, 768)) -> None:
        self._center = LatLng(*center)
        self._min_zoom = min_zoom
        self._max_zoom = max_zoom
        self._zoom = self._clamp(zoom)
        self._size = size
        self._handlers = {name: True for name in INTERACTION_HANDLERS}
        self._listeners: dict[str, list[EventHandler]] = {}
        self._markers: dict[int, _Marker] = {}
        self._ids = itertools.count(1)
        self.open_popup_project: Optional[str] = None
        self.popup_open_count = 0
        self.last_fit_bounds: Optional[BoundingBox] = None

    # ── camera ────────────────────────────────────────────────────────────

    def _clamp(self, zoom: float) -> float:
        return max(self._min_zoom, min(self._max_zoom, zoom))

    def set_view(self, center: LatLng, zoom: float) -> None:
        old_zoom = self._zoom
        self._center = LatLng(*center)
        self._zoom = self._clamp(zoom)
        self.fire(MOVE_END)
        if self._zoom != old_zoom:
            self.fire(ZOOM_END)

    def fit_bounds(self, bounds: BoundingBox) -> None:
        self.last_fit_bounds = bounds
        self.set_view(bounds.center, bounds_zoom(bounds, self._size))

    def get_zoom(self) -> float:
        return self._zoom

    def set_zoom(self, zoom: float) -> None:
        self.set_view(self._center, zoom)

    def get_center(self) -> LatLng:
        return self._center

    def get_min_zoom(self) -> float:
        return self._min_zoom

    def get_max_zoom(self) -> float:
        return self._max_zoom

    def set_min_zoom(self, zoom: float) -> None:
        self._min_zoom = zoom
        if self._zoom < zoom:
            self.set_zoom(zoom)

    def set_max_zoom(self, zoom: float) -> None:
        self._max_zoom = zoom
        if self._zoom > zoom:
            self.set_zoom(zoom)

    def get_size(self) -> tuple[float, float]:
        return self._size

    def resize(self, width: float, height: float) -> None:
        self._size = (width, height)

    # ── interaction handlers ──────────────────────────────────────────────

    def _check_handler(self, name: str) -> None:
        if name not in self._handlers:
            raise ValueError(f"Unknown interaction handler: {name}")

    def enable_handler(self, name: str) -> None:
        self._check_handler(name)
        self._handlers[name] = True

    def disable_handler(self, name: str) -> None:
        self._check_handler(name)
        self._handlers[name] = False

    def handler_enabled(self, name: str) -> bool:
        self._check_handler(name)
        return self._handlers[name]

    # ── events ────────────────────────────────────────────────────────────

    def on(self, event: str, handler: EventHandler) -> None:
        self._listeners.setdefault(event, []).append(handler)

    def off(self, event: str, handler: EventHandler) -> None:
        handlers = self._listeners.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, []))

    def fire(self, event: str) -> None:
        payload = MapEvent(type=event, zoom=self._zoom, center=self._center)
        for handler in list(self._listeners.get(event, [])):
            handler(payload)

    # ── markers and popups ────────────────────────────────────────────────

    def add_marker(self, project_id: str, position: LatLng) -> object:
        marker = _Marker(handle_id=next(self._ids), project_id=project_id,
                         position=LatLng(*position))
        self._markers[marker.handle_id] = marker
        return marker

    def remove_marker(self, handle: object) -> None:
        if not isinstance(handle, _Marker):
            return
        handle.attached = False
        self._markers.pop(handle.handle_id, None)
        if self.open_popup_project == handle.project_id:
            self.open_popup_project = None

    def marker_attached(self, handle: object) -> bool:
        return (isinstance(handle, _Marker) and handle.attached
                and handle.handle_id in self._markers)

    def open_marker_popup(self, handle: object) -> None:
        if not self.marker_attached(handle):
            raise RuntimeError("cannot open a popup on a detached marker")
        self.open_popup_project = handle.project_id
        self.popup_open_count += 1

    def close_popup(self) -> None:
        self.open_popup_project = None

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    def marker_project_ids(self) -> list[str]:
        return [m.project_id for m in self._markers.values()]
