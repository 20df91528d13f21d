"""
Applied filter selection and the filtered-project derivation.

Four dimensions constrain the project pool:

    provinces  multi-select   (toggle membership)
    statuses   multi-select   (toggle membership)
    sector     single-select  (choosing replaces)
    year       single-select  (choosing replaces; matched on the normalized year)

``ALL`` means "no constraint from this dimension". It is a dedicated
sentinel object, so a sector or year literally named "All" in the data is
an ordinary value. Inside ``FilterSelection`` the "All" state of a
multi-select dimension is the empty tuple and that of a single-select
dimension is ``None``; concrete values and All can never coexist.

Usage::

    from mapstate.filters import FilterSelection, FilterState, Dimension

    state = FilterState()
    state.apply(FilterSelection(statuses=("Completed",)))
    visible = state.filtered_projects(pool)
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional, Sequence

from mapstate.models import Project

logger = logging.getLogger(__name__)


class _AllSentinel:
    """The "no constraint" choice. Never equal to any data value."""

    _instance: Optional["_AllSentinel"] = None

    def __new__(cls) -> "_AllSentinel":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ALL"

    def __reduce__(self):
        return (_AllSentinel, ())


ALL = _AllSentinel()


class Dimension(str, enum.Enum):
    PROVINCE = "province"
    STATUS = "status"
    SECTOR = "sector"
    YEAR = "year"

    @property
    def multi_select(self) -> bool:
        return self in (Dimension.PROVINCE, Dimension.STATUS)

    @property
    def reselect_clears(self) -> bool:
        """Choosing the current single value again reverts to All."""
        return self is Dimension.SECTOR


def _dedupe(values: Iterable[str]) -> tuple[str, ...]:
    seen: list[str] = []
    for value in values:
        if value is ALL:
            raise ValueError("ALL cannot be mixed with concrete values")
        if value not in seen:
            seen.append(value)
    return tuple(seen)


@dataclass(frozen=True, eq=False)
class FilterSelection:
    """An immutable four-dimension selection.

    Equality ignores the order in which multi-select values were chosen;
    the stored order is kept for display (chips).
    """

    provinces: tuple[str, ...] = ()
    statuses: tuple[str, ...] = ()
    sector: Optional[str] = None
    year: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "provinces", _dedupe(self.provinces))
        object.__setattr__(self, "statuses", _dedupe(self.statuses))
        if self.sector is ALL:
            object.__setattr__(self, "sector", None)
        if self.year is ALL:
            object.__setattr__(self, "year", None)

    # ── equality ──────────────────────────────────────────────────────────

    def _key(self):
        return (frozenset(self.provinces), frozenset(self.statuses),
                self.sector, self.year)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FilterSelection):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    # ── inspection ────────────────────────────────────────────────────────

    def is_all(self, dimension: Dimension) -> bool:
        if dimension is Dimension.PROVINCE:
            return not self.provinces
        if dimension is Dimension.STATUS:
            return not self.statuses
        if dimension is Dimension.SECTOR:
            return self.sector is None
        if dimension is Dimension.YEAR:
            return self.year is None
        raise ValueError(f"Unknown dimension: {dimension!r}")

    def values(self, dimension: Dimension) -> tuple[str, ...]:
        """Concrete values chosen in *dimension*; () when it is All."""
        if dimension is Dimension.PROVINCE:
            return self.provinces
        if dimension is Dimension.STATUS:
            return self.statuses
        if dimension is Dimension.SECTOR:
            return () if self.sector is None else (self.sector,)
        if dimension is Dimension.YEAR:
            return () if self.year is None else (self.year,)
        raise ValueError(f"Unknown dimension: {dimension!r}")

    def is_selected(self, dimension: Dimension, value) -> bool:
        """True if *value* (or ALL) is the current state of *dimension*."""
        if value is ALL:
            return self.is_all(dimension)
        return value in self.values(dimension)

    @property
    def is_unfiltered(self) -> bool:
        return all(self.is_all(d) for d in Dimension)

    def chips(self) -> list[tuple[Dimension, str]]:
        """Active (dimension, value) pairs in display order."""
        out: list[tuple[Dimension, str]] = []
        for dimension in (Dimension.YEAR, Dimension.STATUS,
                          Dimension.PROVINCE, Dimension.SECTOR):
            out.extend((dimension, v) for v in self.values(dimension))
        return out

    # ── transformations (each returns a new selection) ───────────────────

    def with_values(self, dimension: Dimension, values) -> "FilterSelection":
        """Force *dimension* to *values*: ALL, a single value or an iterable.

        For single-select dimensions an iterable must hold at most one value.
        """
        if values is ALL:
            concrete: tuple[str, ...] = ()
        elif isinstance(values, str):
            concrete = (values,)
        else:
            concrete = _dedupe(values)

        if dimension is Dimension.PROVINCE:
            return replace(self, provinces=concrete)
        if dimension is Dimension.STATUS:
            return replace(self, statuses=concrete)
        if len(concrete) > 1:
            raise ValueError(f"{dimension.value} is single-select")
        single = concrete[0] if concrete else None
        if dimension is Dimension.SECTOR:
            return replace(self, sector=single)
        if dimension is Dimension.YEAR:
            return replace(self, year=single)
        raise ValueError(f"Unknown dimension: {dimension!r}")

    def toggle(self, dimension: Dimension, value) -> "FilterSelection":
        """Apply the All/concrete exclusivity rule for one user toggle.

        - ALL clears the dimension.
        - Multi-select: a concrete value toggles membership; removing the
          last one reverts to All.
        - Single-select: a concrete value replaces the current one;
          re-choosing the current sector reverts to All, re-choosing the
          current year keeps it.
        """
        if value is ALL:
            return self.with_values(dimension, ALL)
        current = self.values(dimension)
        if dimension.multi_select:
            if value in current:
                remaining = tuple(v for v in current if v != value)
                return self.with_values(dimension, remaining or ALL)
            return self.with_values(dimension, current + (value,))
        if current and current[0] == value and dimension.reselect_clears:
            return self.with_values(dimension, ALL)
        return self.with_values(dimension, value)

    def without(self, dimension: Dimension, value) -> "FilterSelection":
        """Drop one concrete value (chip removal); the last one leaves All."""
        remaining = tuple(v for v in self.values(dimension) if v != value)
        return self.with_values(dimension, remaining or ALL)

    # ── matching ──────────────────────────────────────────────────────────

    def matches(self, project: Project) -> bool:
        if self.provinces and project.province not in self.provinces:
            return False
        if self.statuses and project.status not in self.statuses:
            return False
        if self.sector is not None and project.sector != self.sector:
            return False
        if self.year is not None and project.normalized_year != self.year:
            return False
        return True


def filtered_projects(selection: FilterSelection,
                      projects: Sequence[Project]) -> list[Project]:
    """Projects matching *selection*, in input order. Pure."""
    return [p for p in projects if selection.matches(p)]


# ── Live state ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class FilterChange:
    """Notification payload sent to FilterState listeners."""

    previous: FilterSelection
    current: FilterSelection
    changed: frozenset = field(default_factory=frozenset)
    cleared: bool = False

    @property
    def provinces_changed(self) -> bool:
        return Dimension.PROVINCE in self.changed


FilterListener = Callable[[FilterChange], None]


class FilterState:
    """Holder of the currently applied selection.

    Listeners are notified synchronously after every effective change. The
    dashboard subscribes to re-sync markers and, on province changes or a
    clear, retarget the viewport.
    """

    def __init__(self, selection: Optional[FilterSelection] = None) -> None:
        self._selection = selection or FilterSelection()
        self._listeners: list[FilterListener] = []

    @property
    def selection(self) -> FilterSelection:
        return self._selection

    def subscribe(self, listener: FilterListener) -> Callable[[], None]:
        """Register *listener*; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def apply(self, selection: FilterSelection) -> bool:
        """Replace the selection atomically. Returns True if it changed."""
        return self._commit(selection, cleared=False)

    def set_dimension(self, dimension: Dimension, values) -> bool:
        return self.apply(self._selection.with_values(dimension, values))

    def toggle(self, dimension: Dimension, value) -> bool:
        return self.apply(self._selection.toggle(dimension, value))

    def clear(self) -> None:
        """Reset every dimension to All.

        Listeners always hear about a clear, even when nothing was
        filtered, so the viewport returns to the region view.
        """
        self._commit(FilterSelection(), cleared=True, force=True)

    def filtered_projects(self, projects: Sequence[Project]) -> list[Project]:
        return filtered_projects(self._selection, projects)

    def _commit(self, selection: FilterSelection, *, cleared: bool,
                force: bool = False) -> bool:
        previous = self._selection
        changed = frozenset(
            d for d in Dimension
            if frozenset(previous.values(d)) != frozenset(selection.values(d))
        )
        if not changed and not force:
            return False
        self._selection = selection
        logger.debug("Filters applied: %s -> %s", previous, selection)
        event = FilterChange(previous=previous, current=selection,
                             changed=changed, cleared=cleared)
        for listener in list(self._listeners):
            listener(event)
        return bool(changed)
