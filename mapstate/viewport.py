"""
Viewport geometry for the Region 1 map.

Holds the predefined province views, the region default view and boundary,
bounding-box union, and ``bounds_zoom()``: the Web-Mercator zoom at which a
bounding box fits a viewport of a given pixel size (256 px tiles), snapped
the way Leaflet's ``getBoundsZoom`` snaps.

Usage::

    from mapstate.viewport import view_for_provinces

    view = view_for_provinces(["Ilocos Norte", "Ilocos Sur"])
    view.bounds     # union of both provinces' boxes
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Mapping, NamedTuple, Optional

TILE_SIZE = 256
MAX_LATITUDE = 85.0511287798


class LatLng(NamedTuple):
    lat: float
    lng: float


@dataclass(frozen=True)
class BoundingBox:
    """South-west / north-east corners in degrees."""

    south: float
    west: float
    north: float
    east: float

    @classmethod
    def from_corners(cls, corners) -> "BoundingBox":
        """From ``[[south, west], [north, east]]`` as written in config."""
        (s, w), (n, e) = corners
        return cls(south=float(s), west=float(w), north=float(n), east=float(e))

    @property
    def is_valid(self) -> bool:
        """Non-degenerate: strictly positive extent in both axes."""
        return self.south < self.north and self.west < self.east

    @property
    def center(self) -> LatLng:
        return LatLng((self.south + self.north) / 2, (self.west + self.east) / 2)

    def contains(self, point: LatLng) -> bool:
        return (self.south <= point.lat <= self.north
                and self.west <= point.lng <= self.east)

    def as_corners(self) -> list[list[float]]:
        return [[self.south, self.west], [self.north, self.east]]


@dataclass(frozen=True)
class ProvinceView:
    center: LatLng
    bounds: BoundingBox
    zoom: int


# ── Region 1 constants ────────────────────────────────────────────────────────

REGION_CENTER = LatLng(18.1, 120.7)
REGION_DEFAULT_ZOOM = 8
REGION_BOUNDARY = BoundingBox.from_corners([[15.4, 119.9], [19.0, 121.3]])
MIN_ZOOM = 8
MAX_ZOOM = 14

PROVINCE_VIEWS: Mapping[str, ProvinceView] = {
    "Ilocos Norte": ProvinceView(
        center=LatLng(18.1686, 120.7056),
        bounds=BoundingBox.from_corners([[17.8, 120.3], [18.5, 121.1]]),
        zoom=9,
    ),
    "Ilocos Sur": ProvinceView(
        center=LatLng(17.5667, 120.3833),
        bounds=BoundingBox.from_corners([[17.2, 120.0], [17.9, 120.7]]),
        zoom=9,
    ),
    "La Union": ProvinceView(
        center=LatLng(16.5, 120.3333),
        bounds=BoundingBox.from_corners([[16.1, 120.0], [16.9, 120.7]]),
        zoom=9,
    ),
    "Pangasinan": ProvinceView(
        center=LatLng(15.9167, 120.3333),
        bounds=BoundingBox.from_corners([[15.5, 119.8], [16.3, 120.8]]),
        zoom=8,
    ),
}


# ── Targets ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ViewTarget:
    """Where the camera should go: either a centre+zoom or a box to fit."""

    center: Optional[LatLng] = None
    zoom: Optional[int] = None
    bounds: Optional[BoundingBox] = None

    @property
    def is_fit(self) -> bool:
        return self.bounds is not None


DEFAULT_VIEW = ViewTarget(center=REGION_CENTER, zoom=REGION_DEFAULT_ZOOM)


def union_bounds(boxes: Iterable[BoundingBox]) -> Optional[BoundingBox]:
    """Smallest box enclosing every box; None if *boxes* is empty."""
    south = west = math.inf
    north = east = -math.inf
    seen = False
    for box in boxes:
        seen = True
        south = min(south, box.south)
        west = min(west, box.west)
        north = max(north, box.north)
        east = max(east, box.east)
    if not seen:
        return None
    return BoundingBox(south=south, west=west, north=north, east=east)


def view_for_provinces(provinces: Iterable[str],
                       views: Mapping[str, ProvinceView] = PROVINCE_VIEWS,
                       ) -> Optional[ViewTarget]:
    """Camera target for a province selection.

    - no provinces (All): the region default view
    - one known province: its predefined centre and zoom
    - several: fit the union of their predefined bounds

    Returns None when there is nothing to do: a single unknown province, or
    several whose known boxes do not form a valid union.
    """
    selected = list(provinces)
    if not selected:
        return DEFAULT_VIEW
    if len(selected) == 1:
        view = views.get(selected[0])
        if view is None:
            return None
        return ViewTarget(center=view.center, zoom=view.zoom)
    box = union_bounds(views[p].bounds for p in selected if p in views)
    if box is None or not box.is_valid:
        return None
    return ViewTarget(bounds=box)


# ── Web Mercator ──────────────────────────────────────────────────────────────


def project(point: LatLng, zoom: float) -> tuple[float, float]:
    """Pixel coordinates of *point* at *zoom* (EPSG:3857, 256 px tiles)."""
    scale = TILE_SIZE * (2 ** zoom)
    lat = max(-MAX_LATITUDE, min(MAX_LATITUDE, point.lat))
    x = scale * (point.lng + 180.0) / 360.0
    sin_lat = math.sin(math.radians(lat))
    y = scale * (0.5 - math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi))
    return x, y


def bounds_zoom(bounds: BoundingBox, size: tuple[float, float],
                inside: bool = False, snap: float = 1.0) -> float:
    """Zoom at which *bounds* fits a viewport of *size* pixels.

    With ``inside=False`` the whole box is visible; with ``inside=True`` the
    viewport is entirely covered by the box. Results within 1% of a snap
    level are rounded onto it, then floored (or ceiled when *inside*).
    """
    width, height = size
    nw_x, nw_y = project(LatLng(bounds.north, bounds.west), 0)
    se_x, se_y = project(LatLng(bounds.south, bounds.east), 0)
    box_w = abs(se_x - nw_x)
    box_h = abs(se_y - nw_y)
    if box_w <= 0 or box_h <= 0 or width <= 0 or height <= 0:
        raise ValueError("bounds and size must have positive extent")
    scale_x = width / box_w
    scale_y = height / box_h
    scale = max(scale_x, scale_y) if inside else min(scale_x, scale_y)
    zoom = math.log2(scale)
    if snap:
        zoom = round(zoom * 100 / snap) * snap / 100
        zoom = math.ceil(zoom / snap) * snap if inside else math.floor(zoom / snap) * snap
    return zoom
