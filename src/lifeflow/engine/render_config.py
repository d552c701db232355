"""Render Config - Theme, view mode and filter state for a timeline view.

The render config is carried alongside the view state. Apart from filtering,
the layout core treats it as opaque: theme values are handed to the
presentation layer untouched.

Filtering rules:
- private events are dropped unless show_private_events is set
- start_date keeps events strictly after it
- end_date keeps events before the start of the following day, so the whole
  end day is included
- filter_tags keeps events sharing at least one tag
- event_filter keeps a single category ("photos", "milestones", "text"),
  comparing trimmed, lower-cased type tags

Example:
    >>> config = TimelineRenderConfig.defaults().model_copy(update={"filter_tags": {"family"}})
    >>> [e.id for e in filter_events(events, config)]
    ['evt-2']
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lifeflow.core.models import ColorRGBA, TimelineEvent, ensure_utc, normalize_type_tag

logger = logging.getLogger(__name__)


class TimelineViewMode(str, Enum):
    """Timeline visualization modes."""

    CHRONOLOGICAL = "chronological"
    RIVER = "river"
    GRID = "grid"
    ENHANCED = "enhanced"


class TimelineTheme(BaseModel):
    """Colors and spacing for the presentation layer.

    Attributes:
        primary_color: Axis and accent color
        background_color: Canvas background
        event_color: Default marker and card color
        text_color: Label color
        event_spacing: Preferred spacing between events
        line_width: Axis stroke width
    """

    model_config = ConfigDict(frozen=True)

    primary_color: ColorRGBA = Field(default_factory=lambda: ColorRGBA.from_argb(0xFF2196F3))
    background_color: ColorRGBA = Field(default_factory=lambda: ColorRGBA.from_argb(0xFFFFFFFF))
    event_color: ColorRGBA = Field(default_factory=lambda: ColorRGBA.from_argb(0xFF03A9F4))
    text_color: ColorRGBA = Field(default_factory=lambda: ColorRGBA.from_argb(0xFF000000))
    event_spacing: float = Field(default=16.0, ge=0)
    line_width: float = Field(default=2.0, gt=0)


# Category filter name -> event_type tag
EVENT_FILTERS: dict[str, str] = {
    "photos": "photo",
    "milestones": "milestone",
    "text": "text",
}


class TimelineRenderConfig(BaseModel):
    """Configuration for rendering a timeline.

    Attributes:
        theme: Presentation colors and spacing
        view_mode: Which visualization to produce
        show_private_events: Keep events flagged private
        start_date: Keep only events after this instant
        end_date: Keep only events on or before this day
        filter_tags: Keep only events sharing one of these tags
        event_filter: Category filter ("all", "photos", "milestones", "text")
        selected_event_ids: Events highlighted by the host
        zoom_level: Initial zoom level
        custom_settings: Opaque host settings
    """

    model_config = ConfigDict(frozen=True)

    theme: TimelineTheme = Field(default_factory=TimelineTheme)
    view_mode: TimelineViewMode = TimelineViewMode.CHRONOLOGICAL
    show_private_events: bool = False
    start_date: datetime | None = None
    end_date: datetime | None = None
    filter_tags: frozenset[str] | None = None
    event_filter: str | None = None
    selected_event_ids: frozenset[str] = frozenset()
    zoom_level: float = Field(default=1.0, ge=0.0, le=1.0)
    custom_settings: dict[str, Any] = Field(default_factory=dict)

    @field_validator("start_date", "end_date", mode="after")
    @classmethod
    def ensure_aware(cls, v: datetime | None) -> datetime | None:
        """Treat naive bounds as UTC, like event timestamps."""
        return ensure_utc(v) if v is not None else None

    @classmethod
    def defaults(cls) -> TimelineRenderConfig:
        """Chronological view, private events hidden, no filters."""
        return cls()


def filter_events(
    events: Iterable[TimelineEvent], config: TimelineRenderConfig
) -> list[TimelineEvent]:
    """Apply the config's privacy, date, tag and category filters.

    Args:
        events: Events in any order.
        config: Render config holding the filter state.

    Returns:
        Matching events in input order.
    """
    end_limit = config.end_date + timedelta(days=1) if config.end_date is not None else None
    wanted_tags = set(config.filter_tags) if config.filter_tags else None
    wanted_type = EVENT_FILTERS.get(config.event_filter or "all")

    result = []
    total = 0
    for event in events:
        total += 1
        if event.is_private and not config.show_private_events:
            continue
        if config.start_date is not None and not event.timestamp > config.start_date:
            continue
        if end_limit is not None and not event.timestamp < end_limit:
            continue
        if wanted_tags is not None and wanted_tags.isdisjoint(event.tags):
            continue
        if wanted_type is not None and normalize_type_tag(event.event_type) != wanted_type:
            continue
        result.append(event)

    if len(result) != total:
        logger.debug(f"Filtered {total} events down to {len(result)}")
    return result
