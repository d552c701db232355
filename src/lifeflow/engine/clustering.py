"""Clustering Engine - Tier-aware aggregation of events into render nodes.

This module turns a flat list of events into the EventNodes and ClusterNodes
shown at a given zoom tier:

- Events are bucketed by calendar year, calendar month, ISO week or calendar
  day depending on the tier (FOCUS never buckets)
- A bucket larger than its tier threshold becomes one ClusterNode
- Smaller buckets pass their events through as individual EventNodes
- Expanded clusters (progressive disclosure) always show their members

Every input event inside the visible window ends up in exactly one node.

Example:
    >>> engine = ClusteringEngine()
    >>> nodes = engine.build_nodes(events, ZoomTier.MONTH)
    >>> [node.label for node in nodes]
    ['2 events', 'Garden planted']
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta

from pydantic import BaseModel, Field

from lifeflow.core.models import TimelineEvent, ensure_utc
from lifeflow.core.nodes import ClusterNode, EventNode, RenderNode
from lifeflow.core.zoom import ZoomTier

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


class ClusteringConfig(BaseModel):
    """Per-tier clustering thresholds.

    A bucket becomes a cluster when it holds MORE events than its tier's
    threshold. FOCUS never clusters.

    Attributes:
        year_threshold: Max events shown individually per calendar year
        month_threshold: Max events shown individually per calendar month
        week_threshold: Max events shown individually per ISO week
        day_threshold: Max events shown individually per calendar day
        proximity_gap_days: Gap that splits groups in cluster_by_proximity

    Example:
        >>> ClusteringConfig(day_threshold=3).threshold_for(ZoomTier.DAY)
        3
    """

    year_threshold: int = Field(default=1, ge=1)
    month_threshold: int = Field(default=1, ge=1)
    week_threshold: int = Field(default=1, ge=1)
    day_threshold: int = Field(default=8, ge=1)
    proximity_gap_days: int = Field(default=7, ge=0)

    def threshold_for(self, tier: ZoomTier) -> int | None:
        """Return the bucket threshold for a tier, None when it never clusters."""
        return {
            ZoomTier.YEAR: self.year_threshold,
            ZoomTier.MONTH: self.month_threshold,
            ZoomTier.WEEK: self.week_threshold,
            ZoomTier.DAY: self.day_threshold,
        }.get(tier)


# =============================================================================
# Bucketing Helpers
# =============================================================================


def bucket_key(timestamp: datetime, tier: ZoomTier) -> str | None:
    """Return the temporal bucket key of a timestamp at a tier.

    Args:
        timestamp: Event timestamp.
        tier: Zoom tier.

    Returns:
        "2024", "2024-01", "2024-W03" or "2024-01-15"; None for FOCUS.
    """
    if tier is ZoomTier.YEAR:
        return f"{timestamp.year:04d}"
    if tier is ZoomTier.MONTH:
        return f"{timestamp.year:04d}-{timestamp.month:02d}"
    if tier is ZoomTier.WEEK:
        iso_year, iso_week, _ = timestamp.isocalendar()
        return f"{iso_year:04d}-W{iso_week:02d}"
    if tier is ZoomTier.DAY:
        return timestamp.strftime("%Y-%m-%d")
    return None


def cluster_id_for(key: str, tier: ZoomTier) -> str:
    """Synthetic cluster id for a bucket, e.g. "month_2024-01"."""
    return f"{tier.value}_{key}"


def sort_events(events: Iterable[TimelineEvent]) -> list[TimelineEvent]:
    """Stable chronological sort; events at the same instant keep input order."""
    return sorted(events, key=lambda e: e.timestamp)


# =============================================================================
# Engine
# =============================================================================


class ClusteringEngine:
    """Groups events into render nodes for a zoom tier.

    The engine is stateless apart from its configuration and is safe to call
    concurrently.

    Attributes:
        config: Clustering thresholds.
    """

    def __init__(self, config: ClusteringConfig | None = None) -> None:
        """Initialize the engine.

        Args:
            config: Thresholds to use (defaults to ClusteringConfig()).
        """
        self.config = config or ClusteringConfig()

    def bucket_events(
        self, events: Sequence[TimelineEvent], tier: ZoomTier
    ) -> dict[str, list[TimelineEvent]]:
        """Partition events into cluster-id keyed buckets.

        Bucket order follows the first event of each bucket; events keep
        their relative order inside a bucket.

        Args:
            events: Events to partition.
            tier: Zoom tier deciding bucket width.

        Returns:
            Mapping of cluster id to member events (empty for FOCUS).
        """
        buckets: dict[str, list[TimelineEvent]] = {}
        for event in events:
            key = bucket_key(event.timestamp, tier)
            if key is None:
                continue
            buckets.setdefault(cluster_id_for(key, tier), []).append(event)
        return buckets

    def build_nodes(
        self,
        events: Sequence[TimelineEvent],
        tier: ZoomTier,
        expanded_cluster_ids: Iterable[str] = (),
        visible_start: datetime | None = None,
        visible_end: datetime | None = None,
    ) -> list[RenderNode]:
        """Build the render nodes shown at a zoom tier.

        Args:
            events: Events to aggregate, any order.
            tier: Current zoom tier.
            expanded_cluster_ids: Clusters whose members must render
                individually.
            visible_start: Only events strictly after this instant are used.
            visible_end: Only events strictly before this instant are used.

        Returns:
            EventNodes and ClusterNodes sorted by (start, id).
        """
        # Naive window bounds are UTC, like event timestamps
        if visible_start is not None:
            visible_start = ensure_utc(visible_start)
        if visible_end is not None:
            visible_end = ensure_utc(visible_end)

        visible = [
            event
            for event in sort_events(events)
            if (visible_start is None or event.timestamp > visible_start)
            and (visible_end is None or event.timestamp < visible_end)
        ]
        if not visible:
            return []

        threshold = self.config.threshold_for(tier)
        nodes: list[RenderNode] = []
        if threshold is None:
            nodes.extend(EventNode.from_event(e, tier=tier) for e in visible)
        else:
            expanded = set(expanded_cluster_ids)
            for cluster_id, members in self.bucket_events(visible, tier).items():
                if len(members) > threshold and cluster_id not in expanded:
                    nodes.append(ClusterNode.from_events(cluster_id, members, tier=tier))
                else:
                    nodes.extend(EventNode.from_event(e, tier=tier) for e in members)

        nodes.sort(key=lambda n: (n.start, n.id))
        logger.debug(
            f"Built {len(nodes)} nodes from {len(visible)} events at tier {tier.value}"
        )
        return nodes

    def group_by_proximity(self, events: Sequence[TimelineEvent]) -> list[list[TimelineEvent]]:
        """Group events using the configured proximity gap."""
        return cluster_by_proximity(events, timedelta(days=self.config.proximity_gap_days))


# =============================================================================
# Proximity Grouping and Summaries
# =============================================================================


def cluster_by_proximity(
    events: Sequence[TimelineEvent], gap: timedelta = timedelta(days=7)
) -> list[list[TimelineEvent]]:
    """Group events whose distance to the previous event is at most gap.

    Unlike tier bucketing, groups can span calendar boundaries.

    Args:
        events: Events to group, any order.
        gap: Largest allowed distance between consecutive events of a group.

    Returns:
        Chronological list of non-empty groups.
    """
    groups: list[list[TimelineEvent]] = []
    for event in sort_events(events):
        if groups and event.timestamp - groups[-1][-1].timestamp <= gap:
            groups[-1].append(event)
        else:
            groups.append([event])
    return groups


def summarize_cluster(cluster: ClusterNode) -> str:
    """Human-readable summary, e.g. "12 events over 3d 4h"."""
    duration = cluster.end - cluster.start
    if duration <= timedelta(0):
        return f"{cluster.count} events"
    return f"{cluster.count} events over {format_duration(duration)}"


def format_duration(duration: timedelta) -> str:
    """Format a duration with its two most significant units."""
    total_seconds = int(duration.total_seconds())
    days, remainder = divmod(total_seconds, 86400)
    hours, remainder = divmod(remainder, 3600)
    minutes, seconds = divmod(remainder, 60)

    if days:
        return f"{days}d {hours}h" if hours else f"{days}d"
    if hours:
        return f"{hours}h {minutes}m" if minutes else f"{hours}h"
    if minutes:
        return f"{minutes}m {seconds}s" if seconds else f"{minutes}m"
    return f"{seconds}s"
