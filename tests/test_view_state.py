"""Tests for the immutable timeline view state."""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from lifeflow.core.view_state import (
    TimelineDisplayMode,
    TimelineOrientation,
    TimelineViewState,
)
from lifeflow.core.zoom import ZoomTier, calculate_pixels_per_day, calculate_zoom_tier


def assert_in_sync(state: TimelineViewState) -> None:
    """Derived zoom fields must always match zoom_level."""
    assert state.zoom_tier is calculate_zoom_tier(state.zoom_level)
    assert state.pixels_per_day == pytest.approx(calculate_pixels_per_day(state.zoom_level))


# =============================================================================
# Construction
# =============================================================================


class TestConstruction:
    """Tests for view state defaults and validation."""

    def test_defaults(self) -> None:
        """Default state is vertical, maximal, week tier."""
        state = TimelineViewState()

        assert state.orientation is TimelineOrientation.VERTICAL
        assert state.display_mode is TimelineDisplayMode.MAXIMAL
        assert state.zoom_level == 0.5
        assert state.zoom_tier is ZoomTier.WEEK
        assert state.pixels_per_day == pytest.approx(30.1)
        assert state.expanded_cluster_ids == frozenset()

    def test_stale_derived_fields_are_recomputed(self) -> None:
        """Explicit tier and scale values cannot contradict zoom_level."""
        state = TimelineViewState(zoom_level=0.1, zoom_tier=ZoomTier.FOCUS, pixels_per_day=99.0)

        assert state.zoom_tier is ZoomTier.YEAR
        assert_in_sync(state)

    def test_zoom_level_is_clamped(self) -> None:
        """Construction clamps zoom_level into [0, 1]."""
        assert TimelineViewState(zoom_level=3.0).zoom_level == 1.0
        assert TimelineViewState(zoom_level=-3.0).zoom_tier is ZoomTier.YEAR

    def test_frozen(self) -> None:
        """Assignment is rejected."""
        state = TimelineViewState()

        with pytest.raises(ValidationError):
            state.zoom_level = 0.9


# =============================================================================
# Functional Updates
# =============================================================================


class TestUpdates:
    """Tests for the update helpers."""

    def test_with_zoom_level_updates_derived_fields(self) -> None:
        """Changing zoom recomputes tier and scale."""
        state = TimelineViewState().with_zoom_level(0.3)

        assert state.zoom_tier is ZoomTier.MONTH
        assert state.pixels_per_day == pytest.approx(18.14)

    def test_updates_return_new_instances(self) -> None:
        """The original state is left untouched."""
        original = TimelineViewState()
        updated = original.with_zoom_level(0.9)

        assert updated is not original
        assert original.zoom_level == 0.5
        assert updated.zoom_tier is ZoomTier.FOCUS

    def test_every_helper_keeps_fields_in_sync(self) -> None:
        """A chain of updates never leaves derived fields stale."""
        state = TimelineViewState()
        steps = [
            lambda s: s.zoom_in(),
            lambda s: s.with_orientation(TimelineOrientation.HORIZONTAL),
            lambda s: s.zoom_out(0.5),
            lambda s: s.with_display_mode(TimelineDisplayMode.MINIMAL),
            lambda s: s.toggle_cluster("month_2024-01"),
            lambda s: s.pan(250.0),
            lambda s: s.select_event("evt-1"),
            lambda s: s.with_zoom_level(2.0),
        ]

        for step in steps:
            state = step(state)
            assert_in_sync(state)

    def test_zoom_in_and_out(self) -> None:
        """Zoom helpers step by 0.15 by default."""
        state = TimelineViewState()

        assert state.zoom_in().zoom_level == pytest.approx(0.65)
        assert state.zoom_out().zoom_level == pytest.approx(0.35)
        assert state.zoom_out().zoom_tier is ZoomTier.MONTH

    def test_orientation_and_display_mode(self) -> None:
        """Orientation and display mode are plain replacements."""
        state = (
            TimelineViewState()
            .with_orientation(TimelineOrientation.HORIZONTAL)
            .with_display_mode(TimelineDisplayMode.MINIMAL)
        )

        assert state.orientation is TimelineOrientation.HORIZONTAL
        assert state.display_mode is TimelineDisplayMode.MINIMAL

    def test_pan_clamps_at_zero(self) -> None:
        """The viewport never starts before position 0."""
        state = TimelineViewState().with_viewport_start(100.0)

        assert state.pan(50.0).viewport_start_px == 150.0
        assert state.pan(-150.0).viewport_start_px == 0.0

    def test_focus_and_selection(self) -> None:
        """Focused date and selection can be set and cleared."""
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        state = TimelineViewState().with_focused_date(when).select_event("evt-9")

        assert state.focused_date == when
        assert state.selected_event_id == "evt-9"
        assert state.select_event(None).selected_event_id is None


# =============================================================================
# Progressive Disclosure
# =============================================================================


class TestClusterExpansion:
    """Tests for expanding and collapsing clusters."""

    def test_expand_zooms_in(self) -> None:
        """Expanding a cluster adds it and zooms in one step."""
        state = TimelineViewState().toggle_cluster("month_2024-01")

        assert "month_2024-01" in state.expanded_cluster_ids
        assert state.zoom_level == pytest.approx(0.65)

    def test_collapse_keeps_zoom(self) -> None:
        """Collapsing removes the cluster without changing zoom."""
        expanded = TimelineViewState().toggle_cluster("month_2024-01")
        collapsed = expanded.toggle_cluster("month_2024-01")

        assert "month_2024-01" not in collapsed.expanded_cluster_ids
        assert collapsed.zoom_level == expanded.zoom_level

    def test_with_expanded_clusters_keeps_zoom(self) -> None:
        """Bulk expansion leaves zoom alone."""
        state = TimelineViewState().with_expanded_clusters(["year_2023", "year_2024"])

        assert state.expanded_cluster_ids == frozenset({"year_2023", "year_2024"})
        assert state.zoom_level == 0.5


# =============================================================================
# Axis Mapping
# =============================================================================


class TestAxisMapping:
    """Tests for the view state's date/position helpers."""

    def test_round_trip_at_current_scale(self) -> None:
        """Mapping uses the state's own pixels_per_day."""
        state = TimelineViewState(zoom_level=0.7)
        min_date = datetime(2024, 1, 1, tzinfo=timezone.utc)
        date = min_date + timedelta(days=42)

        position = state.date_to_position(date, min_date)

        assert position == pytest.approx(42 * state.pixels_per_day)
        assert state.position_to_date(position, min_date) == date

    def test_calculate_helpers_match_fields(self) -> None:
        """calculate_* helpers agree with the stored fields."""
        state = TimelineViewState(zoom_level=0.45)

        assert state.calculate_zoom_tier() is state.zoom_tier
        assert state.calculate_pixels_per_day() == pytest.approx(state.pixels_per_day)
