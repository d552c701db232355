"""Tests for the multi-person river flow builder."""

from datetime import datetime, timedelta, timezone

import pytest

from lifeflow.core.models import Point
from lifeflow.engine.river import (
    STREAM_COLORS,
    RiverFlowBuilder,
    RiverFlowConfig,
    all_participant_ids,
    color_for_person,
    color_from_hash,
    events_for_person,
    format_person_name,
    shared_events,
)

BASE = datetime(2024, 3, 1, 12, tzinfo=timezone.utc)


@pytest.fixture
def builder() -> RiverFlowBuilder:
    return RiverFlowBuilder()


# =============================================================================
# Event Helpers
# =============================================================================


class TestEventHelpers:
    """Tests for participant and shared-event helpers."""

    def test_all_participant_ids_first_seen(self, family_events) -> None:
        """Owners and participants in first-seen order."""
        assert all_participant_ids(family_events) == ["P1", "P2", "P3"]

    def test_events_for_person_sorted(self, family_events) -> None:
        """A person's events come back oldest first."""
        events = events_for_person(list(reversed(family_events)), "P2")

        assert [e.id for e in events] == ["picnic", "solo-p2"]

    def test_shared_events(self, family_events) -> None:
        """Only events with at least two of the given people."""
        assert [e.id for e in shared_events(family_events, ["P2", "P3"])] == ["picnic"]
        assert shared_events(family_events, ["P1"]) == []
        assert shared_events(family_events, []) == []


# =============================================================================
# Paths
# =============================================================================


class TestPaths:
    """Tests for per-person paths."""

    def test_one_path_per_person(self, builder, family_events) -> None:
        """Every involved person gets exactly one path, in lane order."""
        layout = builder.build(family_events)

        assert [p.person_id for p in layout.paths] == ["P1", "P2", "P3"]
        assert [p.lane_index for p in layout.paths] == [0, 1, 2]

    def test_lane_order_follows_time_not_input(self, builder, make_event) -> None:
        """Lane order comes from chronological first appearance."""
        late = make_event("late", BASE + timedelta(days=5), owner_id="zoe")
        early = make_event("early", BASE, owner_id="adam")

        layout = builder.build([late, early])

        assert [p.person_id for p in layout.paths] == ["adam", "zoe"]

    def test_solo_event_single_membership(self, builder, make_event) -> None:
        """An owner-only event lands on one path and makes no intersection."""
        layout = builder.build([make_event("solo", BASE, owner_id="P1")])

        assert len(layout.paths) == 1
        assert layout.intersections == ()
        node = layout.paths[0].nodes[0]
        assert not node.is_junction
        assert node.position == Point(x=75.0, y=0.0)

    def test_node_positions(self, builder, family_events) -> None:
        """x is the lane center, y is days since the first event times the scale."""
        p2 = builder.build(family_events).path_for("P2")

        solo = p2.nodes[-1]
        assert solo.event.id == "solo-p2"
        assert solo.position == Point(x=225.0, y=60.0)

    def test_path_geometry(self, builder, family_events) -> None:
        """The polyline runs from the origin through every node."""
        p1 = builder.build(family_events).path_for("P1")

        assert p1.origin_position == Point(x=75.0, y=0.0)
        assert p1.path.points[0] == p1.origin_position
        assert list(p1.path.points[1:]) == [n.position for n in p1.nodes]
        assert p1.event_ids == ["solo-p1", "picnic"]

    def test_custom_geometry(self, family_events) -> None:
        """Lane width and scale come from RiverFlowConfig."""
        builder = RiverFlowBuilder(RiverFlowConfig(lane_width=100, pixels_per_day=1))

        p2 = builder.build(family_events).path_for("P2")

        assert p2.nodes[-1].position == Point(x=150.0, y=20.0)

    def test_names(self, builder, make_event) -> None:
        """Display names come from the map, else from the id."""
        event = make_event("e", BASE, owner_id="user_jane-doe", participant_ids=("P2",))

        layout = builder.build([event], person_names={"P2": "Grandma"})

        assert layout.path_for("user_jane-doe").person_name == "Jane Doe"
        assert layout.path_for("P2").person_name == "Grandma"

    def test_format_person_name(self) -> None:
        """Prefixes and separators are cleaned up."""
        assert format_person_name("person_max_power") == "Max Power"
        assert format_person_name("P1") == "P1"

    def test_empty(self, builder) -> None:
        """No events, no paths."""
        layout = builder.build([])

        assert layout.is_empty
        assert layout.intersections == ()
        assert layout.min_date is None


# =============================================================================
# Intersections
# =============================================================================


class TestIntersections:
    """Tests for shared moments."""

    def test_three_person_event(self, builder, make_event) -> None:
        """P1 with P2 and P3 makes one intersection naming all three."""
        event = make_event("party", BASE, owner_id="P1", participant_ids=("P2", "P3"))

        layout = builder.build([event])

        assert len(layout.intersections) == 1
        assert set(layout.intersections[0].participant_ids) == {"P1", "P2", "P3"}
        assert len(layout.paths) == 3

    def test_junction_shared_by_all_streams(self, builder, family_events) -> None:
        """Every stream through a shared event bends to the same point."""
        layout = builder.build(family_events)
        intersection = layout.intersections[0]

        junctions = [
            node for path in layout.paths for node in path.nodes if node.event.id == "picnic"
        ]

        assert len(junctions) == 3
        assert all(n.is_junction for n in junctions)
        assert {n.position for n in junctions} == {intersection.position}
        assert intersection.position == Point(x=225.0, y=30.0)

    def test_person_filter(self, builder, family_events) -> None:
        """Selecting people limits streams but keeps full participant lists."""
        layout = builder.build(family_events, person_ids=["P1", "P2"])

        assert [p.person_id for p in layout.paths] == ["P1", "P2"]
        assert layout.path_for("P3") is None
        assert layout.intersections[0].participant_ids == ("P1", "P2", "P3")
        assert layout.intersections[0].position.x == pytest.approx(150.0)

    def test_unknown_person_gets_no_path(self, builder, family_events) -> None:
        """A selected person without events never appears."""
        layout = builder.build(family_events, person_ids=["zed"])

        assert layout.is_empty


# =============================================================================
# Colors
# =============================================================================


class TestColors:
    """Tests for stream color assignment."""

    def test_palette_by_index(self) -> None:
        """The first eight people take palette colors in order."""
        assert color_for_person("anyone", 0) == STREAM_COLORS[0]
        assert color_for_person("anyone", 7) == STREAM_COLORS[7]
        assert STREAM_COLORS[0].to_hex() == "#3B82F6FF"

    def test_hash_beyond_palette(self) -> None:
        """Later people get a stable hash-derived palette color."""
        color = color_for_person("person-nine", 8)

        assert color == color_from_hash("person-nine")
        assert color in STREAM_COLORS
        assert color_for_person("person-nine", 8) == color

    def test_build_is_deterministic(self, builder, make_event) -> None:
        """Identical inputs give identical layouts, colors included."""
        events = [
            make_event(f"e{i}", BASE + timedelta(days=i), owner_id=f"p{i}", participant_ids=("hub",))
            for i in range(10)
        ]

        first = builder.build(events)
        second = RiverFlowBuilder().build(events)

        assert first == second
        assert len({p.color for p in first.paths[:8]}) == 8
