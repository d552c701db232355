"""Layout Engine - Positions render nodes along the timeline axis.

Computes orientation-agnostic geometry for render nodes:

- primary_px from the node start date (day granularity, see zoom module)
- a marker on the axis for every node
- in MAXIMAL mode, a card on alternating sides of the axis
- label visibility based on marker density in MINIMAL mode

Card packing works per side of the axis. Cards on one side are kept disjoint
along the primary axis; cards on opposite sides never share cross-axis
space. A card is tried at full length and then shrunk by shrink_ratio. Each
length is tried on the preferred side and then on the other side. A card may
shift along the primary axis by at most max_card_shift. When nothing fits
the card and its label are dropped. Visible cards therefore never overlap.

Example:
    >>> engine = LayoutEngine()
    >>> layout = engine.layout(nodes, view_state, min_date, Size(width=800, height=600))
    >>> layout[0].marker_center
    Point(x=400.0, y=0.0)
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from lifeflow.core.models import Point, Rectangle, Size
from lifeflow.core.nodes import ClusterNode, EventNode, LayoutNode, RenderNode
from lifeflow.core.view_state import (
    TimelineDisplayMode,
    TimelineOrientation,
    TimelineViewState,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================


class LayoutConfig(BaseModel):
    """Card and marker dimensions used by the layout engine.

    Attributes:
        card_width: Card size across the axis (vertical) or along it
            (horizontal)
        card_min_height: Height of a plain event card
        card_media_height: Height of an event card with media
        cluster_card_height: Height of a cluster card
        gutter: Gap between the axis and the cards
        marker_size: Marker diameter
        min_card_spacing: Minimum gap between cards on the same side
        max_card_shift: Largest distance a card may drift from its marker
        shrink_ratio: Length multiplier for shrunken cards
        min_label_spacing: Markers closer than this share one visible label
    """

    card_width: float = Field(default=280.0, gt=0)
    card_min_height: float = Field(default=120.0, gt=0)
    card_media_height: float = Field(default=240.0, gt=0)
    cluster_card_height: float = Field(default=100.0, gt=0)
    gutter: float = Field(default=24.0, ge=0)
    marker_size: float = Field(default=12.0, gt=0)
    min_card_spacing: float = Field(default=16.0, ge=0)
    max_card_shift: float = Field(default=120.0, ge=0)
    shrink_ratio: float = Field(default=0.5, gt=0, le=1)
    min_label_spacing: float = Field(default=40.0, ge=0)


class CardSide(str, Enum):
    """Side of the axis a card is placed on.

    LEADING is left of a vertical axis or above a horizontal one.
    """

    LEADING = "leading"
    TRAILING = "trailing"

    @property
    def opposite(self) -> CardSide:
        return CardSide.TRAILING if self is CardSide.LEADING else CardSide.LEADING


# =============================================================================
# Engine
# =============================================================================


class LayoutEngine:
    """Computes LayoutNodes for a list of render nodes.

    Each call allocates fresh output and never mutates its inputs, so
    identical inputs always produce identical layouts.

    Attributes:
        config: Card and marker dimensions.
    """

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def layout(
        self,
        nodes: Sequence[RenderNode],
        view_state: TimelineViewState,
        min_date: datetime,
        viewport: Size,
    ) -> list[LayoutNode]:
        """Compute the layout for render nodes.

        Args:
            nodes: Output of the clustering engine.
            view_state: Orientation, display mode, scale and selection.
            min_date: Anchor date at primary position 0.
            viewport: Viewport size; the axis runs through its center.

        Returns:
            LayoutNodes ordered by primary position.
        """
        if not nodes:
            return []

        placed = sorted(
            (node.with_primary_px(view_state.date_to_position(node.start, min_date)) for node in nodes),
            key=lambda n: (n.primary_px, n.id),
        )

        vertical = view_state.orientation is TimelineOrientation.VERTICAL
        axis = viewport.width / 2 if vertical else viewport.height / 2

        if view_state.display_mode is TimelineDisplayMode.MAXIMAL:
            result = self._layout_cards(placed, axis, vertical, view_state.selected_event_id)
        else:
            result = self._layout_markers(placed, axis, vertical, view_state.selected_event_id)

        logger.debug(
            f"Laid out {len(result)} nodes ({view_state.display_mode.value}, "
            f"{view_state.orientation.value})"
        )
        return result

    # =========================================================================
    # Minimal Mode
    # =========================================================================

    def _layout_markers(
        self,
        nodes: list[RenderNode],
        axis: float,
        vertical: bool,
        selected_event_id: str | None,
    ) -> list[LayoutNode]:
        result: list[LayoutNode] = []
        previous_px: float | None = None

        for node in nodes:
            # One label per run of markers closer than min_label_spacing
            label_visible = (
                previous_px is None
                or node.primary_px - previous_px >= self.config.min_label_spacing
            )
            previous_px = node.primary_px

            result.append(
                LayoutNode(
                    node=node,
                    card_rect=None,
                    marker_center=_marker(node.primary_px, axis, vertical),
                    is_label_visible=label_visible,
                    is_selected=_contains_event(node, selected_event_id),
                )
            )
        return result

    # =========================================================================
    # Maximal Mode
    # =========================================================================

    def _layout_cards(
        self,
        nodes: list[RenderNode],
        axis: float,
        vertical: bool,
        selected_event_id: str | None,
    ) -> list[LayoutNode]:
        result: list[LayoutNode] = []
        # Primary-axis position where the next card on each side may start
        cursors = {CardSide.LEADING: float("-inf"), CardSide.TRAILING: float("-inf")}
        preferred = CardSide.LEADING
        dropped = 0

        for node in nodes:
            length = self.estimate_card_length(node, vertical)
            depth = self.config.card_width if vertical else self.estimate_card_height(node)

            placement = self._place(node.primary_px, length, preferred, cursors)
            card_rect = None
            if placement is not None:
                side, start, placed_length = placement
                cursors[side] = start + placed_length + self.config.min_card_spacing
                card_rect = self._card_rect(side, start, placed_length, depth, axis, vertical)
                preferred = side.opposite
            else:
                dropped += 1
                preferred = preferred.opposite

            result.append(
                LayoutNode(
                    node=node,
                    card_rect=card_rect,
                    marker_center=_marker(node.primary_px, axis, vertical),
                    is_label_visible=card_rect is not None,
                    is_selected=_contains_event(node, selected_event_id),
                )
            )

        if dropped:
            logger.debug(f"Dropped {dropped} cards that could not be placed without overlap")
        return result

    def _place(
        self,
        center: float,
        length: float,
        preferred: CardSide,
        cursors: dict[CardSide, float],
    ) -> tuple[CardSide, float, float] | None:
        """Find a side, start and length for a card centered on center."""
        candidates = (length, length * self.config.shrink_ratio)
        for candidate in dict.fromkeys(candidates):
            for side in (preferred, preferred.opposite):
                start = max(center - candidate / 2, cursors[side])
                if start - (center - candidate / 2) <= self.config.max_card_shift:
                    return side, start, candidate
        return None

    def _card_rect(
        self,
        side: CardSide,
        start: float,
        length: float,
        depth: float,
        axis: float,
        vertical: bool,
    ) -> Rectangle:
        gutter = self.config.gutter
        cross = axis - gutter - depth if side is CardSide.LEADING else axis + gutter
        if vertical:
            return Rectangle(x=cross, y=start, width=depth, height=length)
        return Rectangle(x=start, y=cross, width=length, height=depth)

    def estimate_card_height(self, node: RenderNode) -> float:
        """Estimate card height from node content."""
        if isinstance(node, EventNode):
            return self.config.card_media_height if node.has_media else self.config.card_min_height
        if isinstance(node, ClusterNode):
            return self.config.cluster_card_height
        return self.config.card_min_height

    def estimate_card_length(self, node: RenderNode, vertical: bool) -> float:
        """Card extent along the primary axis."""
        return self.estimate_card_height(node) if vertical else self.config.card_width


# =============================================================================
# Viewport Helpers
# =============================================================================


def primary_span(layout_node: LayoutNode, vertical: bool) -> tuple[float, float]:
    """Primary-axis extent covered by a node's marker and card."""
    px = layout_node.node.primary_px
    low, high = px, px
    rect = layout_node.card_rect
    if rect is not None:
        low = min(low, rect.top if vertical else rect.left)
        high = max(high, rect.bottom if vertical else rect.right)
    return low, high


def visible_layout_nodes(
    layout_nodes: Sequence[LayoutNode],
    view_state: TimelineViewState,
    viewport: Size,
    overscan: float = 0.0,
) -> list[LayoutNode]:
    """Keep the nodes whose marker or card intersects the viewport window.

    Args:
        layout_nodes: Output of LayoutEngine.layout().
        view_state: Supplies orientation and viewport_start_px.
        viewport: Viewport size.
        overscan: Extra pixels kept on both ends of the window.

    Returns:
        Visible nodes, in input order.
    """
    vertical = view_state.orientation is TimelineOrientation.VERTICAL
    extent = viewport.height if vertical else viewport.width
    window_start = view_state.viewport_start_px - overscan
    window_end = view_state.viewport_start_px + extent + overscan

    visible = []
    for layout_node in layout_nodes:
        low, high = primary_span(layout_node, vertical)
        if high >= window_start and low <= window_end:
            visible.append(layout_node)
    return visible


def content_extent(layout_nodes: Sequence[LayoutNode], vertical: bool = True) -> float:
    """Primary-axis length needed to show every marker and card."""
    if not layout_nodes:
        return 0.0
    return max(primary_span(node, vertical)[1] for node in layout_nodes)


def _marker(primary_px: float, axis: float, vertical: bool) -> Point:
    if vertical:
        return Point(x=axis, y=primary_px)
    return Point(x=primary_px, y=axis)


def _contains_event(node: RenderNode, event_id: str | None) -> bool:
    if event_id is None:
        return False
    if isinstance(node, EventNode):
        return node.event_id == event_id
    if isinstance(node, ClusterNode):
        return event_id in node.event_ids
    return False
