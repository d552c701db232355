"""Zoom State - Semantic zoom tiers and time scale calculations.

A continuous zoom level in [0, 1] drives two derived values that must always
move together:

- the discrete ZoomTier that controls how aggressively events are aggregated
- the pixels-per-day scale used to place events on the primary axis

Tier boundaries (half-open, inclusive lower bound):

    level < 0.20  -> YEAR
    level < 0.40  -> MONTH
    level < 0.60  -> WEEK
    level < 0.85  -> DAY
    otherwise     -> FOCUS

Scale: pixels_per_day = lerp(0.2, 60.0, level) = 0.2 + 59.8 * level

Example:
    >>> state = ZoomState.from_level(0.5)
    >>> state.tier
    <ZoomTier.WEEK: 'week'>
    >>> round(state.pixels_per_day, 1)
    30.1
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict

from lifeflow.core.models import ensure_utc


# =============================================================================
# Constants
# =============================================================================

MIN_ZOOM_LEVEL = 0.0
MAX_ZOOM_LEVEL = 1.0

MIN_PIXELS_PER_DAY = 0.2
MAX_PIXELS_PER_DAY = 60.0

# Zoom in/out step used by interactive controls
ZOOM_STEP = 0.15

# Exclusive upper bounds for YEAR, MONTH, WEEK and DAY
_TIER_UPPER_BOUNDS = (0.20, 0.40, 0.60, 0.85)

# Absorbs float error in position / pixels_per_day so a whole day is never lost
_FLOOR_EPSILON = 1e-9


# =============================================================================
# Enums
# =============================================================================


class ZoomTier(str, Enum):
    """Semantic zoom tier, coarsest to finest.

    Attributes:
        YEAR: One marker per year
        MONTH: Aggregated month markers
        WEEK: Compact week markers
        DAY: Individual events visible
        FOCUS: Selected event emphasized
    """

    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    DAY = "day"
    FOCUS = "focus"

    @property
    def rank(self) -> int:
        """Granularity rank, 0 for YEAR up to 4 for FOCUS."""
        return _TIER_ORDER.index(self)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, ZoomTier):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, ZoomTier):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, ZoomTier):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, ZoomTier):
            return NotImplemented
        return self.rank >= other.rank


_TIER_ORDER = (ZoomTier.YEAR, ZoomTier.MONTH, ZoomTier.WEEK, ZoomTier.DAY, ZoomTier.FOCUS)


# =============================================================================
# Pure Functions
# =============================================================================


def clamp_zoom_level(level: float) -> float:
    """Clamp a zoom level into [0, 1]."""
    return max(MIN_ZOOM_LEVEL, min(MAX_ZOOM_LEVEL, float(level)))


def calculate_zoom_tier(level: float) -> ZoomTier:
    """Derive the zoom tier for a zoom level.

    Args:
        level: Zoom level, 0.0 (zoomed out) to 1.0 (zoomed in).

    Returns:
        The ZoomTier whose half-open interval contains the level.
    """
    for tier, upper in zip(_TIER_ORDER, _TIER_UPPER_BOUNDS):
        if level < upper:
            return tier
    return ZoomTier.FOCUS


def tier_ranges() -> list[tuple[ZoomTier, float, float]]:
    """Zoom interval of every tier as (tier, lower, upper), coarsest first.

    Intervals are half-open except FOCUS, which includes 1.0.
    """
    lowers = (MIN_ZOOM_LEVEL, *_TIER_UPPER_BOUNDS)
    uppers = (*_TIER_UPPER_BOUNDS, MAX_ZOOM_LEVEL)
    return list(zip(_TIER_ORDER, lowers, uppers))


def calculate_pixels_per_day(level: float) -> float:
    """Linear interpolation between 0.2 and 60.0 pixels per day.

    Args:
        level: Zoom level, 0.0 (zoomed out) to 1.0 (zoomed in).

    Returns:
        Pixels per day on the primary axis.
    """
    return MIN_PIXELS_PER_DAY + (MAX_PIXELS_PER_DAY - MIN_PIXELS_PER_DAY) * level


def days_between(start: datetime, end: datetime) -> int:
    """Whole days from start to end, truncated toward zero.

    Naive datetimes are treated as UTC.

    Example:
        >>> days_between(datetime(2024, 1, 1), datetime(2024, 1, 3, 23, 0))
        2
    """
    return int((ensure_utc(end) - ensure_utc(start)) / timedelta(days=1))


def date_to_position(date: datetime, min_date: datetime, pixels_per_day: float) -> float:
    """Convert a date into a primary-axis position.

    Sub-day precision is dropped: every instant within the same elapsed day
    maps to the same position.

    Args:
        date: Date to place.
        min_date: Anchor date at position 0.
        pixels_per_day: Current scale.

    Returns:
        Position in pixels relative to min_date.
    """
    return days_between(min_date, date) * pixels_per_day


def position_to_date(position: float, min_date: datetime, pixels_per_day: float) -> datetime:
    """Convert a primary-axis position back into a date.

    Args:
        position: Position in pixels relative to min_date.
        min_date: Anchor date at position 0.
        pixels_per_day: Current scale.

    Returns:
        min_date (as UTC when naive) plus the whole number of days covered
        by position.
    """
    day_index = math.floor(position / pixels_per_day + _FLOOR_EPSILON)
    return ensure_utc(min_date) + timedelta(days=day_index)


# =============================================================================
# Value Type
# =============================================================================


class ZoomState(BaseModel):
    """Immutable bundle of a zoom level and its derived tier and scale.

    Always build through from_level() so the derived fields cannot drift.

    Attributes:
        level: Clamped zoom level
        tier: Derived zoom tier
        pixels_per_day: Derived scale
    """

    model_config = ConfigDict(frozen=True)

    level: float
    tier: ZoomTier
    pixels_per_day: float

    @classmethod
    def from_level(cls, level: float) -> ZoomState:
        """Create a zoom state for a (clamped) zoom level."""
        clamped = clamp_zoom_level(level)
        return cls(
            level=clamped,
            tier=calculate_zoom_tier(clamped),
            pixels_per_day=calculate_pixels_per_day(clamped),
        )

    def zoomed_in(self, step: float = ZOOM_STEP) -> ZoomState:
        return ZoomState.from_level(self.level + step)

    def zoomed_out(self, step: float = ZOOM_STEP) -> ZoomState:
        return ZoomState.from_level(self.level - step)

    def date_to_position(self, date: datetime, min_date: datetime) -> float:
        return date_to_position(date, min_date, self.pixels_per_day)

    def position_to_date(self, position: float, min_date: datetime) -> datetime:
        return position_to_date(position, min_date, self.pixels_per_day)
