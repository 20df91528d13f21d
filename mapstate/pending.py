"""
Staging buffer for the filter panel.

While the panel is open, toggles edit a private copy of the selection; the
map keeps showing the applied one. ``apply()`` pushes the copy to the
``FilterState`` in one atomic step and closes the panel; ``cancel()``
discards it. If the applied selection changes from elsewhere while the
panel is open (a chip removed, "clear all"), the copy is re-synced to it.
"""

from __future__ import annotations

import logging
from typing import Optional

from mapstate.filters import ALL, Dimension, FilterChange, FilterSelection, FilterState

logger = logging.getLogger(__name__)


class PendingFilterState:

    def __init__(self, live: FilterState) -> None:
        self._live = live
        self._pending: Optional[FilterSelection] = None
        self._applying = False
        self._unsubscribe = live.subscribe(self._on_live_change)

    # ── lifecycle ─────────────────────────────────────────────────────────

    @property
    def is_open(self) -> bool:
        return self._pending is not None

    @property
    def selection(self) -> FilterSelection:
        """The pending copy, or the live selection when the panel is closed."""
        return self._pending if self._pending is not None else self._live.selection

    def open_from(self, current: Optional[FilterSelection] = None) -> FilterSelection:
        """Open the panel with a snapshot of *current* (default: live)."""
        self._pending = current if current is not None else self._live.selection
        logger.debug("Filter panel opened with %s", self._pending)
        return self._pending

    def toggle(self, dimension: Dimension, value) -> FilterSelection:
        """Toggle *value* in the pending copy; opens the panel if needed."""
        if self._pending is None:
            self.open_from()
        self._pending = self._pending.toggle(dimension, value)
        return self._pending

    def set_dimension(self, dimension: Dimension, values) -> FilterSelection:
        if self._pending is None:
            self.open_from()
        self._pending = self._pending.with_values(dimension, values)
        return self._pending

    def remove(self, dimension: Dimension, value) -> FilterSelection:
        """Remove a pending chip."""
        if self._pending is None:
            self.open_from()
        self._pending = self._pending.without(dimension, value)
        return self._pending

    def has_changes(self) -> bool:
        return self._pending is not None and self._pending != self._live.selection

    def apply(self) -> bool:
        """Push pending edits to the live state and close the panel.

        The whole copy goes through one FilterState.apply(), so listeners see
        a single change and dimensions that did not differ stay untouched.
        Returns True if the live selection changed.
        """
        if self._pending is None:
            return False
        pending = self._pending
        self._applying = True
        try:
            changed = self._live.apply(pending)
        finally:
            self._applying = False
            self._pending = None
        logger.debug("Filter panel applied (changed=%s)", changed)
        return changed

    def cancel(self) -> None:
        """Discard pending edits and close the panel."""
        self._pending = None

    def reset(self) -> FilterSelection:
        """Discard pending edits without closing the panel."""
        if self._pending is not None:
            self._pending = self._live.selection
        return self.selection

    def clear(self) -> FilterSelection:
        """Set every pending dimension to All without touching the live state."""
        if self._pending is None:
            self.open_from()
        for dimension in Dimension:
            self._pending = self._pending.with_values(dimension, ALL)
        return self._pending

    def close(self) -> None:
        self._unsubscribe()

    def _on_live_change(self, change: FilterChange) -> None:
        if self._pending is not None and not self._applying:
            logger.debug("Live filters changed while panel open; resyncing")
            self._pending = change.current
