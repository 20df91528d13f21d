"""
Tests for mapstate/controller.py: focus state machine, viewport targeting
and resize handling
"""
import pytest

from mapstate.controller import FocusSource, FocusState, MapController
from mapstate.viewport import REGION_CENTER, BoundingBox, LatLng
from mapstate.widget import ZOOM_END
from utils.config import MapSettings

from conftest import make_project

PROJECT_A = make_project("A", latitude=18.2, longitude=120.6, province="Ilocos Norte")
PROJECT_B = make_project("B", latitude=16.5, longitude=120.3, province="La Union")


@pytest.fixture()
def controller(widget, scheduler):
    ctrl = MapController(widget, scheduler, MapSettings())
    ctrl.sync_markers([PROJECT_A, PROJECT_B])
    return ctrl


def lock(controller, scheduler, project=PROJECT_A, source=FocusSource.MARKER):
    controller.select_project(project, source)
    scheduler.advance(controller.settings.focus_delay)


class TestSelectProject:
    def test_requests_focus_and_recenters_at_current_zoom(self, controller, widget):
        widget.set_zoom(11)
        assert controller.select_project(PROJECT_A)
        assert controller.state is FocusState.FOCUS_REQUESTED
        assert controller.focused_project is PROJECT_A
        assert widget.get_center() == LatLng(18.2, 120.6)
        assert widget.get_zoom() == 11

    def test_popup_waits_for_focus_delay(self, controller, widget, scheduler):
        controller.select_project(PROJECT_A)
        scheduler.advance(0.29)
        assert widget.open_popup_project is None
        scheduler.advance(0.02)
        assert widget.open_popup_project == "A"

    def test_project_without_location_is_not_recentred(self, controller, widget):
        center = widget.get_center()
        controller.select_project(make_project("nowhere", latitude=None))
        assert widget.get_center() == center
        assert controller.state is FocusState.FOCUS_REQUESTED


class TestFocusLock:
    def test_lock_pins_zoom_and_disables_handlers(self, controller, widget, scheduler):
        widget.set_zoom(10)
        lock(controller, scheduler)
        assert controller.state is FocusState.LOCKED
        assert widget.get_min_zoom() == widget.get_max_zoom() == 10
        assert not any(widget.interaction_enabled().values())
        assert widget.listener_count(ZOOM_END) == 1
        assert not controller.zoom_controls_enabled

    def test_reselecting_focused_project_is_noop(self, controller, scheduler):
        lock(controller, scheduler)
        before = controller.snapshot()
        pending = scheduler.pending
        assert not controller.select_project(PROJECT_A)
        assert controller.snapshot() == before
        assert scheduler.pending == pending

    def test_reselect_during_focus_request_is_noop(self, controller, widget, scheduler):
        controller.select_project(PROJECT_A)
        assert not controller.select_project(PROJECT_A)
        scheduler.advance(0.3)
        assert widget.popup_open_count == 1

    def test_external_zoom_reopens_popup(self, controller, widget, scheduler):
        lock(controller, scheduler)
        widget.close_popup()
        widget.fire(ZOOM_END)
        scheduler.advance(0.15)
        assert widget.open_popup_project == "A"
        assert widget.popup_open_count == 2

    def test_zoom_burst_keeps_one_reopen_pending(self, controller, widget, scheduler):
        lock(controller, scheduler)
        before = scheduler.pending
        widget.close_popup()
        for _ in range(100):
            widget.fire(ZOOM_END)
        assert scheduler.pending == before + 1
        scheduler.advance(0.16)
        assert widget.open_popup_project == "A"
        assert widget.popup_open_count == 2
        assert scheduler.pending == before

    def test_second_selection_supersedes_first(self, controller, widget, scheduler):
        controller.select_project(PROJECT_A)
        scheduler.advance(0.1)
        controller.select_project(PROJECT_B)
        scheduler.advance(1)
        assert widget.open_popup_project == "B"
        assert widget.popup_open_count == 1
        assert controller.focused_project is PROJECT_B

    def test_switching_locked_project_relocks(self, controller, widget, scheduler):
        lock(controller, scheduler)
        lock(controller, scheduler, PROJECT_B)
        assert controller.state is FocusState.LOCKED
        assert widget.open_popup_project == "B"
        assert widget.listener_count(ZOOM_END) == 1
        assert widget.get_center() == LatLng(16.5, 120.3)


class TestCloseFocus:
    def test_close_restores_interaction(self, controller, widget, scheduler):
        lock(controller, scheduler)
        assert controller.close_focus()
        assert controller.state is FocusState.UNLOCKING
        assert controller.focused_project is None
        assert all(widget.interaction_enabled().values())
        assert widget.get_max_zoom() == 14
        assert widget.get_min_zoom() == controller.operable_min_zoom
        assert widget.listener_count(ZOOM_END) == 0
        assert widget.open_popup_project is None

    def test_guard_window_then_idle(self, controller, scheduler):
        lock(controller, scheduler)
        controller.close_focus()
        scheduler.advance(0.49)
        assert controller.state is FocusState.UNLOCKING
        scheduler.advance(0.02)
        assert controller.state is FocusState.IDLE

    def test_zoom_during_unlock_does_not_reopen(self, controller, widget, scheduler):
        lock(controller, scheduler)
        widget.fire(ZOOM_END)
        controller.close_focus()
        widget.fire(ZOOM_END)
        scheduler.run_all()
        assert widget.open_popup_project is None
        assert widget.popup_open_count == 1

    def test_close_before_lock_cancels_popup(self, controller, widget, scheduler):
        controller.select_project(PROJECT_A)
        controller.close_focus()
        scheduler.run_all()
        assert widget.popup_open_count == 0
        assert controller.state is FocusState.IDLE

    def test_close_when_idle_is_noop(self, controller):
        assert not controller.close_focus()
        assert controller.state is FocusState.IDLE

    def test_double_close(self, controller, widget, scheduler):
        lock(controller, scheduler)
        assert controller.close_focus()
        assert not controller.close_focus()
        assert widget.listener_count(ZOOM_END) == 0


class TestStaleMarkers:
    def test_filtered_out_focus_is_released(self, controller, widget, scheduler):
        lock(controller, scheduler)
        controller.sync_markers([PROJECT_B])
        assert controller.focused_project is None
        assert controller.state is FocusState.UNLOCKING
        assert all(widget.interaction_enabled().values())

    def test_pending_popup_for_removed_marker_is_skipped(self, controller, widget, scheduler):
        controller.select_project(PROJECT_A)
        controller.markers.release("A")
        scheduler.advance(0.3)
        assert widget.popup_open_count == 0
        assert controller.state is FocusState.LOCKED


class TestViewportTargeting:
    def test_single_province(self, controller, widget):
        assert controller.zoom_to_provinces(["La Union"])
        assert widget.get_center() == LatLng(16.5, 120.3333)
        assert widget.get_zoom() == 9

    def test_multiple_provinces_fit_union(self, controller, widget):
        controller.zoom_to_provinces(["Ilocos Norte", "Ilocos Sur"])
        assert widget.last_fit_bounds == BoundingBox(17.2, 120.0, 18.5, 121.1)

    def test_all_resets_to_region(self, controller, widget):
        controller.zoom_to_provinces(["La Union"])
        controller.zoom_to_provinces([])
        assert widget.get_center() == REGION_CENTER
        assert widget.get_zoom() == 8

    def test_skipped_while_focused(self, controller, widget, scheduler):
        lock(controller, scheduler)
        assert not controller.zoom_to_provinces(["La Union"])
        assert widget.get_center() == LatLng(18.2, 120.6)

    def test_allowed_while_unlocking(self, controller, widget, scheduler):
        lock(controller, scheduler)
        controller.close_focus()
        assert controller.zoom_to_provinces(["La Union"])

    def test_unknown_province(self, controller):
        assert not controller.zoom_to_provinces(["Abra"])

    def test_reset_view_from_locked(self, controller, widget, scheduler):
        widget.set_zoom(12)
        lock(controller, scheduler)
        controller.reset_view()
        assert controller.state is FocusState.IDLE
        assert controller.focused_project is None
        assert widget.get_center() == REGION_CENTER
        assert widget.get_zoom() == 8
        assert all(widget.interaction_enabled().values())
        assert scheduler.run_all() == 0


class TestResize:
    def test_min_zoom_follows_viewport(self, controller, widget):
        assert controller.on_resize((400, 300)) == 6
        assert widget.get_min_zoom() == 6

    def test_resize_is_idempotent(self, controller, widget):
        controller.on_resize((400, 300))
        controller.on_resize((400, 300))
        assert widget.get_min_zoom() == 6

    def test_resize_while_locked_applies_on_unlock(self, controller, widget, scheduler):
        lock(controller, scheduler)
        controller.on_resize((400, 300))
        assert widget.get_min_zoom() == 8
        controller.close_focus()
        assert widget.get_min_zoom() == 6

    def test_degenerate_size_ignored(self, controller):
        before = controller.operable_min_zoom
        assert controller.on_resize((0, 0)) == before
