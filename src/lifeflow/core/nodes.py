"""Render nodes - the units the layout engine positions.

A RenderNode is either a single event (EventNode) or an aggregate of
temporally close events (ClusterNode). The two variants share a time span,
a zoom tier and a computed primary-axis position, and are told apart by the
``kind`` discriminator so a union field round-trips through serialization.

Nodes are immutable. The layout engine places a node by copying it with a
new ``primary_px`` rather than mutating the input.

Example:
    >>> cluster = ClusterNode.from_events("month_2024-01", events, tier=ZoomTier.MONTH)
    >>> cluster.label
    '2 events'
    >>> cluster.dominant_type
    <EventType.PHOTO: 'photo'>
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Sequence
from datetime import datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from lifeflow.core.errors import InvalidInputError
from lifeflow.core.models import EventType, Point, Rectangle, TimelineEvent
from lifeflow.core.zoom import ZoomTier


class RenderNode(BaseModel):
    """Common fields of every render node.

    Attributes:
        start: Earliest timestamp covered
        end: Latest timestamp covered (equal to start for single events)
        tier: Zoom tier the node was built for
        primary_px: Position on the primary axis, set by the layout engine
    """

    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    tier: ZoomTier = ZoomTier.DAY
    primary_px: float = 0.0

    @property
    @abstractmethod
    def id(self) -> str:
        """Stable node id."""

    @property
    @abstractmethod
    def label(self) -> str:
        """Text shown next to the marker."""

    @property
    @abstractmethod
    def event_count(self) -> int:
        """Number of events the node stands for."""

    @property
    def is_point(self) -> bool:
        """True for zero-duration spans, rendered as point markers."""
        return self.start == self.end

    def with_primary_px(self, primary_px: float) -> RenderNode:
        """Return a copy placed at primary_px."""
        return self.model_copy(update={"primary_px": primary_px})


class EventNode(RenderNode):
    """A single event on the timeline."""

    kind: Literal["event"] = "event"
    event_id: str
    event_type: EventType = EventType.OTHER
    title: str = "Untitled Event"
    has_media: bool = False
    tags: tuple[str, ...] = ()
    timestamp: datetime

    @property
    def id(self) -> str:
        return self.event_id

    @property
    def label(self) -> str:
        return self.title

    @property
    def event_count(self) -> int:
        return 1

    @classmethod
    def from_event(cls, event: TimelineEvent, tier: ZoomTier = ZoomTier.DAY) -> EventNode:
        """Wrap one TimelineEvent."""
        return cls(
            event_id=event.id,
            event_type=event.type,
            title=event.title or "Untitled Event",
            has_media=event.has_media,
            tags=event.tags,
            timestamp=event.timestamp,
            start=event.timestamp,
            end=event.timestamp,
            tier=tier,
        )


class ClusterNode(RenderNode):
    """An aggregate of one or more events.

    Attributes:
        cluster_id: Synthetic id, e.g. "month_2024-01"
        count: Number of member events
        type_counts: Members per event type, in first-seen order
        dominant_type: Most frequent type; ties go to the type that reached
            the maximum count first while scanning the members in order
        event_ids: Member event ids in input order
    """

    kind: Literal["cluster"] = "cluster"
    cluster_id: str
    count: int = Field(ge=1)
    type_counts: dict[EventType, int]
    dominant_type: EventType
    event_ids: tuple[str, ...]

    @property
    def id(self) -> str:
        return self.cluster_id

    @property
    def label(self) -> str:
        return f"{self.count} events"

    @property
    def event_count(self) -> int:
        return self.count

    @classmethod
    def from_events(
        cls,
        cluster_id: str,
        events: Sequence[TimelineEvent],
        tier: ZoomTier = ZoomTier.DAY,
    ) -> ClusterNode:
        """Build a cluster from its member events.

        Args:
            cluster_id: Synthetic cluster id.
            events: Member events, in the order they should be scanned.
            tier: Zoom tier the cluster belongs to.

        Returns:
            A ClusterNode covering the events.

        Raises:
            InvalidInputError: If events is empty.
        """
        if not events:
            raise InvalidInputError("Cannot create cluster from empty event list")

        type_counts: dict[EventType, int] = {}
        dominant_type = EventType.OTHER
        max_count = 0
        for event in events:
            event_type = event.type
            type_counts[event_type] = type_counts.get(event_type, 0) + 1
            # Strict ">" keeps the first type to reach a given count
            if type_counts[event_type] > max_count:
                max_count = type_counts[event_type]
                dominant_type = event_type

        timestamps = [event.timestamp for event in events]
        return cls(
            cluster_id=cluster_id,
            count=len(events),
            type_counts=type_counts,
            dominant_type=dominant_type,
            event_ids=tuple(event.id for event in events),
            start=min(timestamps),
            end=max(timestamps),
            tier=tier,
        )


AnyRenderNode = Annotated[Union[EventNode, ClusterNode], Field(discriminator="kind")]


class LayoutNode(BaseModel):
    """A render node paired with its computed visual geometry.

    Produced fresh on every layout pass.

    Attributes:
        node: The positioned render node
        card_rect: Card rectangle, None in minimal mode or when the card
            did not fit
        marker_center: Marker position on the axis
        is_label_visible: Whether the label should be drawn
        is_selected: Whether this node holds the selected event
    """

    model_config = ConfigDict(frozen=True)

    node: AnyRenderNode
    card_rect: Rectangle | None = None
    marker_center: Point
    is_label_visible: bool = True
    is_selected: bool = False

    @property
    def has_card(self) -> bool:
        return self.card_rect is not None
