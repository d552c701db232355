"""Layout engine components.

- **ClusteringEngine**: Tier-aware aggregation of events into render nodes
- **LayoutEngine**: Marker and card geometry along the timeline axis
- **RiverFlowBuilder**: Multi-person stream paths and intersections
- **TimelineRenderConfig**: Theme, view mode and event filters
- **render_timeline / render_river**: One-call pipelines
"""

from lifeflow.engine.clustering import (
    ClusteringConfig,
    ClusteringEngine,
    cluster_by_proximity,
    summarize_cluster,
)
from lifeflow.engine.layout import LayoutConfig, LayoutEngine, visible_layout_nodes
from lifeflow.engine.pipeline import TimelineRenderResult, render_river, render_timeline
from lifeflow.engine.render_config import (
    TimelineRenderConfig,
    TimelineTheme,
    TimelineViewMode,
    filter_events,
)
from lifeflow.engine.river import (
    RiverFlowBuilder,
    RiverFlowConfig,
    RiverFlowIntersection,
    RiverFlowLayout,
    RiverFlowNode,
    RiverFlowPath,
    all_participant_ids,
    events_for_person,
    shared_events,
)

__all__ = [
    # Clustering
    "ClusteringConfig",
    "ClusteringEngine",
    "cluster_by_proximity",
    "summarize_cluster",
    # Layout
    "LayoutConfig",
    "LayoutEngine",
    "visible_layout_nodes",
    # River
    "RiverFlowBuilder",
    "RiverFlowConfig",
    "RiverFlowPath",
    "RiverFlowNode",
    "RiverFlowIntersection",
    "RiverFlowLayout",
    "all_participant_ids",
    "events_for_person",
    "shared_events",
    # Render config
    "TimelineRenderConfig",
    "TimelineTheme",
    "TimelineViewMode",
    "filter_events",
    # Pipeline
    "TimelineRenderResult",
    "render_timeline",
    "render_river",
]
