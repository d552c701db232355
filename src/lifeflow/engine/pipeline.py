"""Render pipeline for the lifeflow layout engine.

Ties the engine components together for one frame:

1. Filter events with the render config
2. Cluster the survivors for the view state's zoom tier
3. Lay out the resulting nodes for the viewport
4. Optionally cull nodes outside the visible window

The river view runs as an alternate path directly on filtered events.

Typical usage:
    >>> from lifeflow.engine.pipeline import render_timeline
    >>>
    >>> result = render_timeline(events, TimelineViewState(zoom_level=0.3))
    >>> print(result.to_summary())
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime

from lifeflow.core.models import Size, TimelineEvent
from lifeflow.core.nodes import ClusterNode, LayoutNode
from lifeflow.core.view_state import TimelineViewState
from lifeflow.core.zoom import ZoomTier
from lifeflow.engine.clustering import ClusteringEngine
from lifeflow.engine.layout import LayoutEngine, visible_layout_nodes
from lifeflow.engine.render_config import TimelineRenderConfig, filter_events
from lifeflow.engine.river import RiverFlowBuilder, RiverFlowLayout

logger = logging.getLogger(__name__)

DEFAULT_VIEWPORT = Size(width=800.0, height=600.0)


@dataclass
class TimelineRenderResult:
    """Complete result of rendering one timeline frame.

    Attributes:
        layout_nodes: Positioned nodes (main output).
        tier: Zoom tier the nodes were built for.
        min_date: Anchor date at primary position 0, None when empty.
        max_date: Latest filtered event timestamp, None when empty.
        total_events: Events handed to the pipeline.
        filtered_events: Events left after filtering.
    """

    layout_nodes: list[LayoutNode] = field(default_factory=list)
    tier: ZoomTier = ZoomTier.WEEK
    min_date: datetime | None = None
    max_date: datetime | None = None
    total_events: int = 0
    filtered_events: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.layout_nodes

    @property
    def cluster_count(self) -> int:
        return sum(1 for n in self.layout_nodes if isinstance(n.node, ClusterNode))

    def to_summary(self) -> str:
        """Generate human-readable summary.

        Returns:
            Multi-line summary string.
        """
        lines = [
            "Render Results:",
            f"  Tier: {self.tier.value}",
            f"  Events: {self.filtered_events}/{self.total_events} after filtering",
            f"  Nodes: {len(self.layout_nodes)} ({self.cluster_count} clusters)",
        ]
        if self.min_date is not None and self.max_date is not None:
            lines.append(f"  Range: {self.min_date.date()} to {self.max_date.date()}")
        return "\n".join(lines)


def render_timeline(
    events: Sequence[TimelineEvent],
    view_state: TimelineViewState,
    config: TimelineRenderConfig | None = None,
    viewport: Size = DEFAULT_VIEWPORT,
    clustering: ClusteringEngine | None = None,
    layout: LayoutEngine | None = None,
    visible_only: bool = False,
    overscan: float = 0.0,
) -> TimelineRenderResult:
    """Filter, cluster and lay out events for one frame.

    Args:
        events: All events of the timeline, any order.
        view_state: Zoom, orientation, display mode, selection and expansion.
        config: Filter state (defaults to TimelineRenderConfig.defaults()).
        viewport: Viewport size.
        clustering: Clustering engine to use.
        layout: Layout engine to use.
        visible_only: Drop nodes outside the viewport window.
        overscan: Extra pixels kept around the window when culling.

    Returns:
        TimelineRenderResult, empty when no event survives filtering.
    """
    config = config or TimelineRenderConfig.defaults()
    clustering = clustering or ClusteringEngine()
    layout = layout or LayoutEngine()

    filtered = filter_events(events, config)
    result = TimelineRenderResult(
        tier=view_state.zoom_tier,
        total_events=len(events),
        filtered_events=len(filtered),
    )
    if not filtered:
        logger.debug("Nothing to render after filtering")
        return result

    result.min_date = min(e.timestamp for e in filtered)
    result.max_date = max(e.timestamp for e in filtered)

    nodes = clustering.build_nodes(
        filtered,
        view_state.zoom_tier,
        expanded_cluster_ids=view_state.expanded_cluster_ids,
    )
    layout_nodes = layout.layout(nodes, view_state, result.min_date, viewport)
    if visible_only:
        layout_nodes = visible_layout_nodes(layout_nodes, view_state, viewport, overscan)

    result.layout_nodes = layout_nodes
    return result


def render_river(
    events: Iterable[TimelineEvent],
    config: TimelineRenderConfig | None = None,
    builder: RiverFlowBuilder | None = None,
    person_names: Mapping[str, str] | None = None,
    person_ids: Iterable[str] | None = None,
) -> RiverFlowLayout:
    """Filter events and build the river view.

    Args:
        events: All events of the timeline.
        config: Filter state (defaults to TimelineRenderConfig.defaults()).
        builder: River builder to use.
        person_names: Optional display names by person id.
        person_ids: Optional subset of people to draw.

    Returns:
        RiverFlowLayout, empty when no event survives filtering.
    """
    config = config or TimelineRenderConfig.defaults()
    builder = builder or RiverFlowBuilder()
    return builder.build(
        filter_events(events, config),
        person_names=person_names,
        person_ids=person_ids,
    )
