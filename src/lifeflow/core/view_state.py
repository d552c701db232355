"""Timeline view state.

Holds orientation, display density, zoom, viewport position, selection and
progressive-disclosure state for one timeline view. The model is frozen;
every update helper returns a new instance, and zoom_tier / pixels_per_day
are recomputed from zoom_level on every construction, so they can never be
out of sync with it.

Example:
    >>> state = TimelineViewState()
    >>> state = state.with_zoom_level(0.1).toggle_cluster("year_2023")
    >>> state.zoom_tier, "year_2023" in state.expanded_cluster_ids
    (<ZoomTier.MONTH: 'month'>, True)
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from lifeflow.core.zoom import (
    ZOOM_STEP,
    ZoomTier,
    calculate_pixels_per_day,
    calculate_zoom_tier,
    clamp_zoom_level,
    date_to_position,
    position_to_date,
)


class TimelineOrientation(str, Enum):
    """Direction of the time axis.

    Attributes:
        VERTICAL: Time flows top to bottom
        HORIZONTAL: Time flows left to right
    """

    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class TimelineDisplayMode(str, Enum):
    """Display density.

    Attributes:
        MINIMAL: Icon-only markers, no cards
        MAXIMAL: Full event cards next to the axis
    """

    MINIMAL = "minimal"
    MAXIMAL = "maximal"


class TimelineViewState(BaseModel):
    """Unified, immutable timeline view state.

    Attributes:
        orientation: Axis orientation
        display_mode: Display density
        zoom_level: Continuous zoom, 0.0 (out) to 1.0 (in), clamped
        zoom_tier: Derived from zoom_level
        pixels_per_day: Derived from zoom_level (0.2 to 60.0)
        viewport_start_px: Viewport offset along the primary axis
        focused_date: Date currently centered, if any
        selected_event_id: Selected event, if any
        expanded_cluster_ids: Clusters opened by the user
    """

    model_config = ConfigDict(frozen=True)

    orientation: TimelineOrientation = TimelineOrientation.VERTICAL
    display_mode: TimelineDisplayMode = TimelineDisplayMode.MAXIMAL
    zoom_level: float = 0.5
    zoom_tier: ZoomTier = ZoomTier.WEEK
    pixels_per_day: float = Field(default=30.1, gt=0)
    viewport_start_px: float = 0.0
    focused_date: datetime | None = None
    selected_event_id: str | None = None
    expanded_cluster_ids: frozenset[str] = frozenset()

    @model_validator(mode="before")
    @classmethod
    def derive_zoom_fields(cls, data: Any) -> Any:
        """Clamp zoom_level and derive tier and scale from it."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        level = clamp_zoom_level(data.get("zoom_level", 0.5))
        data["zoom_level"] = level
        data["zoom_tier"] = calculate_zoom_tier(level)
        data["pixels_per_day"] = calculate_pixels_per_day(level)
        return data

    # =========================================================================
    # Functional Updates
    # =========================================================================

    def _replace(self, **changes: Any) -> TimelineViewState:
        values = {name: getattr(self, name) for name in type(self).model_fields}
        values.update(changes)
        return type(self)(**values)

    def with_zoom_level(self, level: float) -> TimelineViewState:
        """Return a copy at a new zoom level (clamped to [0, 1])."""
        return self._replace(zoom_level=level)

    def zoom_in(self, step: float = ZOOM_STEP) -> TimelineViewState:
        return self._replace(zoom_level=self.zoom_level + step)

    def zoom_out(self, step: float = ZOOM_STEP) -> TimelineViewState:
        return self._replace(zoom_level=self.zoom_level - step)

    def with_orientation(self, orientation: TimelineOrientation) -> TimelineViewState:
        return self._replace(orientation=orientation)

    def with_display_mode(self, mode: TimelineDisplayMode) -> TimelineViewState:
        return self._replace(display_mode=mode)

    def with_viewport_start(self, position: float) -> TimelineViewState:
        return self._replace(viewport_start_px=position)

    def pan(self, delta: float) -> TimelineViewState:
        """Move the viewport by delta pixels, never before position 0."""
        return self._replace(viewport_start_px=max(0.0, self.viewport_start_px + delta))

    def with_focused_date(self, date: datetime | None) -> TimelineViewState:
        return self._replace(focused_date=date)

    def select_event(self, event_id: str | None) -> TimelineViewState:
        return self._replace(selected_event_id=event_id)

    def with_expanded_clusters(self, cluster_ids: Iterable[str]) -> TimelineViewState:
        """Return a copy with extra clusters expanded, keeping the zoom."""
        return self._replace(expanded_cluster_ids=self.expanded_cluster_ids | frozenset(cluster_ids))

    def toggle_cluster(self, cluster_id: str) -> TimelineViewState:
        """Expand or collapse a cluster.

        Expanding also zooms in one step so the opened members get room;
        collapsing keeps the current zoom.

        Args:
            cluster_id: Synthetic cluster id (e.g. "month_2024-01").

        Returns:
            Updated view state.
        """
        expanded = set(self.expanded_cluster_ids)
        if cluster_id in expanded:
            expanded.discard(cluster_id)
            return self._replace(expanded_cluster_ids=frozenset(expanded))
        expanded.add(cluster_id)
        return self._replace(
            expanded_cluster_ids=frozenset(expanded),
            zoom_level=self.zoom_level + ZOOM_STEP,
        )

    # =========================================================================
    # Axis Mapping
    # =========================================================================

    def calculate_zoom_tier(self) -> ZoomTier:
        return calculate_zoom_tier(self.zoom_level)

    def calculate_pixels_per_day(self) -> float:
        return calculate_pixels_per_day(self.zoom_level)

    def date_to_position(self, date: datetime, min_date: datetime) -> float:
        """Primary-axis position of date relative to min_date."""
        return date_to_position(date, min_date, self.pixels_per_day)

    def position_to_date(self, position: float, min_date: datetime) -> datetime:
        """Date at a primary-axis position relative to min_date."""
        return position_to_date(position, min_date, self.pixels_per_day)
