"""
Registry of on-map markers keyed by project id.

Markers are inserted when a project enters the filtered set and removed
when it leaves. Callers never see a raw handle: they can only ask whether
a project's marker is attached and request its popup. Every popup request
goes through the attachment check, so a stale handle is a silent no-op.
"""

from __future__ import annotations

import logging
from typing import Iterable

from mapstate.models import Project
from mapstate.viewport import LatLng
from mapstate.widget import MapWidget

logger = logging.getLogger(__name__)


class MarkerRegistry:

    def __init__(self, widget: MapWidget) -> None:
        self._widget = widget
        self._handles: dict[str, object] = {}

    def __contains__(self, project_id: str) -> bool:
        return project_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def project_ids(self) -> list[str]:
        return list(self._handles)

    def sync(self, projects: Iterable[Project]) -> tuple[int, int]:
        """Make the registry mirror *projects*.

        Projects without coordinates get no marker. Returns
        ``(added, removed)``.
        """
        wanted: dict[str, Project] = {}
        for project in projects:
            if project.has_location:
                wanted.setdefault(project.id, project)
            else:
                logger.warning("Project %s has no coordinates; no marker placed",
                               project.id)

        removed = 0
        for project_id in [pid for pid in self._handles if pid not in wanted]:
            self.release(project_id)
            removed += 1

        added = 0
        for project_id, project in wanted.items():
            if project_id not in self._handles:
                position = LatLng(project.latitude, project.longitude)
                self._handles[project_id] = self._widget.add_marker(project_id, position)
                added += 1

        if added or removed:
            logger.debug("Markers synced: +%d -%d (%d on map)",
                         added, removed, len(self._handles))
        return added, removed

    def release(self, project_id: str) -> None:
        """Remove the marker for *project_id*; unknown ids are ignored."""
        handle = self._handles.pop(project_id, None)
        if handle is not None:
            self._widget.remove_marker(handle)

    def release_all(self) -> None:
        for project_id in list(self._handles):
            self.release(project_id)

    def is_attached(self, project_id: str) -> bool:
        handle = self._handles.get(project_id)
        return handle is not None and self._widget.marker_attached(handle)

    def open_popup(self, project_id: str) -> bool:
        """Open the popup of *project_id*'s marker if it is still on the map.

        Returns True if a popup was opened.
        """
        if not self.is_attached(project_id):
            logger.debug("Popup for %s skipped: marker not attached", project_id)
            return False
        self._widget.open_marker_popup(self._handles[project_id])
        return True
