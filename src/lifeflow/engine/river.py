"""River Flow Builder - Multi-person "river" view of shared timelines.

Every person involved in any event (as owner or participant) gets a stream:
a lane on the cross axis and a time-ordered list of nodes on the shared time
axis. Events with two or more people become intersections where the streams
of everyone involved meet.

Geometry:
- lane i is centered at x = i * lane_width + lane_width / 2
- y = whole days since the earliest event * pixels_per_day
- a shared event sits at the mean x of the lanes involved, so every stream
  through it bends to the same junction point

Colors are assigned from a fixed palette in lane order. People beyond the
palette size get a palette entry picked by a SHA-256 hash of their id, which
is stable across runs and processes.

Example:
    >>> layout = RiverFlowBuilder().build(events)
    >>> [path.person_id for path in layout.paths]
    ['alice', 'bob']
    >>> layout.intersections[0].participant_ids
    ('alice', 'bob')
"""

from __future__ import annotations

import hashlib
import logging
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime
from statistics import mean

from pydantic import BaseModel, ConfigDict, Field

from lifeflow.core.models import ColorRGBA, Point, Polyline, TimelineEvent
from lifeflow.core.zoom import days_between
from lifeflow.engine.clustering import sort_events

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration and Palette
# =============================================================================


class RiverFlowConfig(BaseModel):
    """Configuration for river flow geometry.

    Attributes:
        lane_width: Cross-axis distance between neighbouring streams
        pixels_per_day: Time-axis scale
        stream_width: Stroke width hint for the presentation layer
        glow_intensity: Glow multiplier hint for the presentation layer
        show_labels: Presentation hint
        show_intersection_cards: Presentation hint
    """

    lane_width: float = Field(default=150.0, gt=0)
    pixels_per_day: float = Field(default=3.0, gt=0)
    stream_width: float = Field(default=4.0, gt=0)
    glow_intensity: float = Field(default=1.0, ge=0)
    show_labels: bool = True
    show_intersection_cards: bool = True

    def lane_x(self, lane_index: int) -> float:
        """Cross-axis center of a lane."""
        return lane_index * self.lane_width + self.lane_width / 2


STREAM_COLORS: tuple[ColorRGBA, ...] = tuple(
    ColorRGBA.from_argb(value)
    for value in (
        0xFF3B82F6,  # Electric Blue
        0xFFEC4899,  # Hot Pink
        0xFF22C55E,  # Lime Green
        0xFFF97316,  # Sunset Orange
        0xFFA855F7,  # Electric Purple
        0xFF06B6D4,  # Cyan
        0xFFEF4444,  # Red
        0xFFFACC15,  # Yellow
    )
)


def color_from_hash(person_id: str, palette: Sequence[ColorRGBA] = STREAM_COLORS) -> ColorRGBA:
    """Pick a palette color from a stable hash of the person id."""
    digest = hashlib.sha256(person_id.encode("utf-8")).hexdigest()
    return palette[int(digest, 16) % len(palette)]


def color_for_person(
    person_id: str, index: int, palette: Sequence[ColorRGBA] = STREAM_COLORS
) -> ColorRGBA:
    """Palette color by insertion index, hash-derived once the palette runs out.

    Args:
        person_id: Person id.
        index: Position of the person in lane order.
        palette: Colors to choose from.

    Returns:
        The stream color for this person.
    """
    if 0 <= index < len(palette):
        return palette[index]
    return color_from_hash(person_id, palette)


# =============================================================================
# Output Models
# =============================================================================


class RiverFlowNode(BaseModel):
    """An event placed on one person's stream.

    Attributes:
        event: The event
        position: Node position
        is_junction: True when two or more people share the event
        participant_ids: Owner followed by participants
    """

    model_config = ConfigDict(frozen=True)

    event: TimelineEvent
    position: Point
    is_junction: bool
    participant_ids: tuple[str, ...]


class RiverFlowPath(BaseModel):
    """One person's stream.

    Attributes:
        person_id: Person id
        person_name: Display name
        lane_index: Lane number in insertion order
        color: Stream color
        origin_position: Top of the stream
        nodes: Time-ordered nodes
        path: Polyline through the origin and every node
    """

    model_config = ConfigDict(frozen=True)

    person_id: str
    person_name: str
    lane_index: int
    color: ColorRGBA
    origin_position: Point
    nodes: tuple[RiverFlowNode, ...]
    path: Polyline

    @property
    def event_ids(self) -> list[str]:
        return [node.event.id for node in self.nodes]


class RiverFlowIntersection(BaseModel):
    """A shared moment where two or more streams meet."""

    model_config = ConfigDict(frozen=True)

    position: Point
    event: TimelineEvent
    participant_ids: tuple[str, ...]


class RiverFlowLayout(BaseModel):
    """Complete river view: one path per person plus all intersections."""

    model_config = ConfigDict(frozen=True)

    paths: tuple[RiverFlowPath, ...] = ()
    intersections: tuple[RiverFlowIntersection, ...] = ()
    min_date: datetime | None = None

    def path_for(self, person_id: str) -> RiverFlowPath | None:
        for path in self.paths:
            if path.person_id == person_id:
                return path
        return None

    @property
    def is_empty(self) -> bool:
        return not self.paths


# =============================================================================
# Event Helpers
# =============================================================================


def all_participant_ids(events: Iterable[TimelineEvent]) -> list[str]:
    """Distinct owners and participants in first-seen order."""
    seen: dict[str, None] = {}
    for event in events:
        for person_id in event.people:
            seen.setdefault(person_id, None)
    return list(seen)


def events_for_person(events: Iterable[TimelineEvent], person_id: str) -> list[TimelineEvent]:
    """Events a person owns or participates in, oldest first."""
    return sort_events(e for e in events if e.involves(person_id))


def shared_events(events: Iterable[TimelineEvent], person_ids: Sequence[str]) -> list[TimelineEvent]:
    """Events involving at least two of the given people.

    Returns an empty list when fewer than two people are given.
    """
    wanted = set(person_ids)
    if len(wanted) < 2:
        return []
    return [e for e in events if len(wanted.intersection(e.people)) >= 2]


# =============================================================================
# Builder
# =============================================================================


class RiverFlowBuilder:
    """Derives river paths and intersections from events.

    Paths are derived, never pre-declared: a person appears only if at least
    one event involves them.

    Attributes:
        config: River geometry configuration.
        palette: Stream colors.
    """

    def __init__(
        self,
        config: RiverFlowConfig | None = None,
        palette: Sequence[ColorRGBA] = STREAM_COLORS,
    ) -> None:
        self.config = config or RiverFlowConfig()
        self.palette = tuple(palette)

    def build(
        self,
        events: Sequence[TimelineEvent],
        person_names: Mapping[str, str] | None = None,
        person_ids: Iterable[str] | None = None,
    ) -> RiverFlowLayout:
        """Build the river layout.

        Args:
            events: Filtered events, any order.
            person_names: Optional display names by person id.
            person_ids: Optional subset of people to draw streams for; events
                not involving any of them are ignored.

        Returns:
            RiverFlowLayout with paths in lane order and intersections in
            chronological order.
        """
        ordered = sort_events(events)
        if person_ids is not None:
            selected = set(person_ids)
            ordered = [e for e in ordered if selected.intersection(e.people)]
        if not ordered:
            return RiverFlowLayout()

        people = all_participant_ids(ordered)
        if person_ids is not None:
            people = [p for p in people if p in selected]
        lanes = {person_id: index for index, person_id in enumerate(people)}
        min_date = ordered[0].timestamp

        positions = {event.id: self._event_position(event, lanes, min_date) for event in ordered}

        paths = tuple(
            self._build_path(person_id, lanes[person_id], ordered, positions, person_names)
            for person_id in people
        )
        intersections = tuple(
            RiverFlowIntersection(
                position=positions[event.id],
                event=event,
                participant_ids=tuple(event.people),
            )
            for event in ordered
            if event.is_shared()
        )

        logger.debug(
            f"River built: {len(paths)} paths, {len(intersections)} intersections "
            f"from {len(ordered)} events"
        )
        return RiverFlowLayout(paths=paths, intersections=intersections, min_date=min_date)

    def _event_position(
        self, event: TimelineEvent, lanes: Mapping[str, int], min_date: datetime
    ) -> Point:
        y = days_between(min_date, event.timestamp) * self.config.pixels_per_day
        xs = [self.config.lane_x(lanes[p]) for p in event.people if p in lanes]
        return Point(x=mean(xs), y=y)

    def _build_path(
        self,
        person_id: str,
        lane_index: int,
        ordered: Sequence[TimelineEvent],
        positions: Mapping[str, Point],
        person_names: Mapping[str, str] | None,
    ) -> RiverFlowPath:
        lane_x = self.config.lane_x(lane_index)
        nodes = []
        for event in events_for_person(ordered, person_id):
            shared = event.is_shared()
            position = positions[event.id] if shared else Point(x=lane_x, y=positions[event.id].y)
            nodes.append(
                RiverFlowNode(
                    event=event,
                    position=position,
                    is_junction=shared,
                    participant_ids=tuple(event.people),
                )
            )

        origin = Point(x=lane_x, y=0.0)
        name = (person_names or {}).get(person_id) or format_person_name(person_id)
        return RiverFlowPath(
            person_id=person_id,
            person_name=name,
            lane_index=lane_index,
            color=color_for_person(person_id, lane_index, self.palette),
            origin_position=origin,
            nodes=tuple(nodes),
            path=Polyline(points=(origin, *(node.position for node in nodes))),
        )


def format_person_name(person_id: str) -> str:
    """Readable fallback name from an id like "user_jane-doe"."""
    name = person_id
    for prefix in ("user_", "person_"):
        if name.startswith(prefix):
            name = name[len(prefix):]
    words = name.replace("-", " ").replace("_", " ").split()
    return " ".join(word.capitalize() for word in words) or person_id
