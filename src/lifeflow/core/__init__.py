"""Core data models for the lifeflow layout engine.

This package contains the value types every engine component depends on:

- **TimelineEvent**: The event record consumed from collaborators
- **ZoomState / ZoomTier**: Zoom level to tier and scale mapping
- **TimelineViewState**: Immutable view state with update helpers
- **EventNode / ClusterNode / LayoutNode**: Render and layout nodes

Example:
    >>> from lifeflow.core import TimelineViewState, ZoomTier
    >>> state = TimelineViewState(zoom_level=0.5)
    >>> state.zoom_tier is ZoomTier.WEEK
    True
"""

from lifeflow.core.errors import InvalidInputError, TimelineError
from lifeflow.core.models import (
    ColorRGBA,
    EventType,
    Point,
    Polyline,
    Rectangle,
    Size,
    TimelineEvent,
)
from lifeflow.core.nodes import (
    AnyRenderNode,
    ClusterNode,
    EventNode,
    LayoutNode,
    RenderNode,
)
from lifeflow.core.view_state import (
    TimelineDisplayMode,
    TimelineOrientation,
    TimelineViewState,
)
from lifeflow.core.zoom import (
    ZoomState,
    ZoomTier,
    calculate_pixels_per_day,
    calculate_zoom_tier,
    date_to_position,
    days_between,
    position_to_date,
)

__all__ = [
    # Errors
    "TimelineError",
    "InvalidInputError",
    # Event + geometry
    "TimelineEvent",
    "EventType",
    "ColorRGBA",
    "Point",
    "Size",
    "Rectangle",
    "Polyline",
    # Zoom
    "ZoomTier",
    "ZoomState",
    "calculate_zoom_tier",
    "calculate_pixels_per_day",
    "date_to_position",
    "position_to_date",
    "days_between",
    # View state
    "TimelineViewState",
    "TimelineOrientation",
    "TimelineDisplayMode",
    # Nodes
    "RenderNode",
    "EventNode",
    "ClusterNode",
    "LayoutNode",
    "AnyRenderNode",
]
