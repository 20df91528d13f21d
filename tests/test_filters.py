"""
Tests for mapstate/filters.py: FilterSelection rules, filtered_projects()
and FilterState notifications
"""
import pytest

from mapstate.filters import (
    ALL,
    Dimension,
    FilterSelection,
    FilterState,
    filtered_projects,
)

from conftest import make_project


@pytest.fixture()
def scenario_pool():
    return [
        make_project("A", province="Ilocos Norte", status="Completed"),
        make_project("B", province="Ilocos Sur", status="Ongoing"),
        make_project("C", province="La Union", status="Completed"),
        make_project("D", province="Pangasinan", status="Ongoing"),
    ]


# ── Selection rules ───────────────────────────────────────────────────────────

class TestAllExclusivity:
    def test_default_is_all_everywhere(self):
        sel = FilterSelection()
        assert sel.is_unfiltered
        for dim in Dimension:
            assert sel.is_all(dim)
            assert sel.is_selected(dim, ALL)

    @pytest.mark.parametrize("dim", list(Dimension))
    def test_concrete_value_removes_all(self, dim):
        sel = FilterSelection().toggle(dim, "x")
        assert not sel.is_all(dim)
        assert sel.values(dim) == ("x",)

    @pytest.mark.parametrize("dim", [Dimension.PROVINCE, Dimension.STATUS])
    def test_deselecting_last_value_reverts_to_all(self, dim):
        sel = FilterSelection().toggle(dim, "x").toggle(dim, "x")
        assert sel.is_all(dim)

    def test_multi_select_toggles_membership(self):
        sel = FilterSelection().toggle(Dimension.STATUS, "Completed")
        sel = sel.toggle(Dimension.STATUS, "Ongoing")
        assert sel.statuses == ("Completed", "Ongoing")
        sel = sel.toggle(Dimension.STATUS, "Completed")
        assert sel.statuses == ("Ongoing",)

    def test_choosing_all_clears_dimension(self):
        sel = FilterSelection(provinces=("La Union", "Pangasinan"))
        assert sel.toggle(Dimension.PROVINCE, ALL).is_all(Dimension.PROVINCE)

    def test_single_select_replaces(self):
        sel = FilterSelection().toggle(Dimension.SECTOR, "Textile")
        sel = sel.toggle(Dimension.SECTOR, "Agriculture")
        assert sel.sector == "Agriculture"

    def test_reselecting_sector_reverts_to_all(self):
        sel = FilterSelection(sector="Textile").toggle(Dimension.SECTOR, "Textile")
        assert sel.sector is None

    def test_reselecting_year_keeps_it(self):
        sel = FilterSelection(year="2023").toggle(Dimension.YEAR, "2023")
        assert sel.year == "2023"

    def test_all_mixed_with_values_rejected(self):
        with pytest.raises(ValueError):
            FilterSelection(provinces=("La Union", ALL))

    def test_single_select_rejects_many(self):
        with pytest.raises(ValueError):
            FilterSelection().with_values(Dimension.YEAR, ["2022", "2023"])

    def test_all_sentinel_in_constructor_is_all(self):
        sel = FilterSelection(sector=ALL, year=ALL)
        assert sel.sector is None and sel.year is None


class TestSelectionValue:
    def test_equality_ignores_order(self):
        a = FilterSelection(provinces=("La Union", "Pangasinan"))
        b = FilterSelection(provinces=("Pangasinan", "La Union"))
        assert a == b
        assert hash(a) == hash(b)

    def test_duplicates_collapsed(self):
        assert FilterSelection(statuses=("Ongoing", "Ongoing")).statuses == ("Ongoing",)

    def test_chips_in_display_order(self):
        sel = FilterSelection(provinces=("La Union",), statuses=("Ongoing",),
                              sector="Textile", year="2023")
        assert sel.chips() == [
            (Dimension.YEAR, "2023"),
            (Dimension.STATUS, "Ongoing"),
            (Dimension.PROVINCE, "La Union"),
            (Dimension.SECTOR, "Textile"),
        ]

    def test_without_removes_one_value(self):
        sel = FilterSelection(statuses=("Completed", "Ongoing"))
        assert sel.without(Dimension.STATUS, "Completed").statuses == ("Ongoing",)

    def test_without_year_leaves_all(self):
        sel = FilterSelection(year="2023").without(Dimension.YEAR, "2023")
        assert sel.year is None

    def test_literal_all_string_is_ordinary_value(self):
        sel = FilterSelection(sector="All")
        assert not sel.is_all(Dimension.SECTOR)
        assert sel.matches(make_project("x", sector="All"))
        assert not sel.matches(make_project("y", sector="Textile"))


# ── filtered_projects ─────────────────────────────────────────────────────────

class TestFilteredProjects:
    def test_status_selection_preserves_order(self, scenario_pool):
        sel = FilterSelection(statuses=("Completed",))
        assert [p.id for p in filtered_projects(sel, scenario_pool)] == ["A", "C"]

    def test_year_range_normalized(self):
        pool = [make_project("r", year="2022-2023"), make_project("s", year="2024")]
        sel = FilterSelection(year="2022")
        assert [p.id for p in filtered_projects(sel, pool)] == ["r"]
        sel = FilterSelection(year="2024")
        assert [p.id for p in filtered_projects(sel, pool)] == ["s"]

    def test_empty_year_never_matches_concrete_year(self):
        pool = [make_project("blank", year=""), make_project("y", year="2023")]
        assert [p.id for p in filtered_projects(FilterSelection(year="2023"), pool)] == ["y"]
        assert [p.id for p in filtered_projects(FilterSelection(year=""), pool)] == ["blank"]

    def test_dimensions_combine_with_and(self, projects):
        sel = FilterSelection(provinces=("Pangasinan",), statuses=("Completed",))
        assert [p.id for p in filtered_projects(sel, projects)] == ["PJ005"]

    def test_pure_and_repeatable(self, projects):
        sel = FilterSelection(statuses=("Ongoing",), year="2023")
        first = filtered_projects(sel, projects)
        second = filtered_projects(sel, projects)
        assert first == second
        assert [p.id for p in first] == ["PJ002", "PJ008"]

    def test_unfiltered_returns_everything(self, projects):
        assert filtered_projects(FilterSelection(), projects) == list(projects)


# ── FilterState ───────────────────────────────────────────────────────────────

class TestFilterState:
    def test_apply_notifies_with_changed_dimensions(self):
        state = FilterState()
        events = []
        state.subscribe(events.append)
        assert state.apply(FilterSelection(provinces=("La Union",), year="2023"))
        assert len(events) == 1
        assert events[0].changed == {Dimension.PROVINCE, Dimension.YEAR}
        assert events[0].provinces_changed

    def test_apply_same_selection_is_silent(self):
        state = FilterState(FilterSelection(statuses=("Ongoing",)))
        events = []
        state.subscribe(events.append)
        assert not state.apply(FilterSelection(statuses=("Ongoing",)))
        assert events == []

    def test_clear_always_notifies(self):
        state = FilterState()
        events = []
        state.subscribe(events.append)
        state.clear()
        assert len(events) == 1
        assert events[0].cleared

    def test_unsubscribe(self):
        state = FilterState()
        events = []
        unsubscribe = state.subscribe(events.append)
        unsubscribe()
        unsubscribe()
        state.toggle(Dimension.STATUS, "Ongoing")
        assert events == []

    def test_set_dimension_and_toggle(self, projects):
        state = FilterState()
        state.set_dimension(Dimension.PROVINCE, ["Ilocos Sur"])
        state.toggle(Dimension.STATUS, "Terminated")
        assert [p.id for p in state.filtered_projects(projects)] == ["PJ006"]
