"""Core Data Models for the lifeflow layout engine.

This module defines the event record the engine consumes and the plain
geometry types it produces. Events are owned by the caller and are frozen
once handed to the core; geometry values are simple data, not drawable
objects.

Example:
    >>> from datetime import datetime, timezone
    >>>
    >>> event = TimelineEvent(
    ...     id="evt-1",
    ...     timestamp=datetime(2024, 1, 1, tzinfo=timezone.utc),
    ...     event_type="photo",
    ...     owner_id="alice",
    ...     participant_ids=["bob"],
    ... )
    >>> event.people
    ['alice', 'bob']
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


# =============================================================================
# Enums
# =============================================================================


class EventType(str, Enum):
    """Simplified event categories used for cluster icons and colors.

    Attributes:
        MILESTONE: Life milestones (first steps, graduations, launches)
        PHOTO: Photo-centric events
        NOTE: Text notes and journal entries
        OTHER: Anything else, including unknown type tags
    """

    MILESTONE = "milestone"
    PHOTO = "photo"
    NOTE = "note"
    OTHER = "other"

    @classmethod
    def from_tag(cls, tag: str | None) -> EventType:
        """Map a free-form event type tag onto an EventType.

        Args:
            tag: Event type tag as stored on the event (e.g. "photo").

        Returns:
            Matching EventType, or OTHER for unknown or empty tags.
        """
        if not tag:
            return cls.OTHER
        try:
            return cls(normalize_type_tag(tag))
        except ValueError:
            return cls.OTHER


def ensure_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; aware values pass through unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def normalize_type_tag(tag: str) -> str:
    """Canonical form of an event type tag: trimmed and lower-case."""
    return tag.strip().lower()


# =============================================================================
# Geometry
# =============================================================================


class ColorRGBA(BaseModel):
    """An RGBA color with 8-bit channels.

    Attributes:
        r: Red channel (0-255)
        g: Green channel (0-255)
        b: Blue channel (0-255)
        a: Alpha channel (0-255, 255 is opaque)
    """

    model_config = ConfigDict(frozen=True)

    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)
    a: int = Field(default=255, ge=0, le=255)

    @classmethod
    def from_argb(cls, value: int) -> ColorRGBA:
        """Build a color from a packed 0xAARRGGBB integer."""
        return cls(
            a=(value >> 24) & 0xFF,
            r=(value >> 16) & 0xFF,
            g=(value >> 8) & 0xFF,
            b=value & 0xFF,
        )

    def to_hex(self) -> str:
        """Return the color as #RRGGBBAA."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}{self.a:02X}"


class Point(BaseModel):
    """A 2D point in layout pixels."""

    model_config = ConfigDict(frozen=True)

    x: float
    y: float


class Size(BaseModel):
    """Viewport or card dimensions in pixels."""

    model_config = ConfigDict(frozen=True)

    width: float = Field(ge=0)
    height: float = Field(ge=0)


class Rectangle(BaseModel):
    """Axis-aligned rectangle anchored at its top-left corner.

    Attributes:
        x: Left edge
        y: Top edge
        width: Horizontal extent
        height: Vertical extent
    """

    model_config = ConfigDict(frozen=True)

    x: float
    y: float
    width: float = Field(ge=0)
    height: float = Field(ge=0)

    @property
    def left(self) -> float:
        return self.x

    @property
    def top(self) -> float:
        return self.y

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Point:
        return Point(x=self.x + self.width / 2, y=self.y + self.height / 2)

    def overlaps(self, other: Rectangle) -> bool:
        """Check whether two rectangles share any interior area.

        Rectangles that only touch along an edge do not overlap.
        """
        return (
            self.left < other.right
            and other.left < self.right
            and self.top < other.bottom
            and other.top < self.bottom
        )

    def shift(self, dx: float = 0.0, dy: float = 0.0) -> Rectangle:
        """Return a copy translated by (dx, dy)."""
        return Rectangle(x=self.x + dx, y=self.y + dy, width=self.width, height=self.height)


class Polyline(BaseModel):
    """An open polyline through an ordered list of points."""

    model_config = ConfigDict(frozen=True)

    points: tuple[Point, ...] = ()

    def __len__(self) -> int:
        return len(self.points)

    def length(self) -> float:
        """Total euclidean length of all segments."""
        total = 0.0
        for a, b in zip(self.points, self.points[1:]):
            total += ((b.x - a.x) ** 2 + (b.y - a.y) ** 2) ** 0.5
        return total


# =============================================================================
# Event Record
# =============================================================================


class TimelineEvent(BaseModel):
    """A single event recorded on a personal, pet, project or business timeline.

    Events are produced by collaborators (storage, sync, import) and passed
    into the layout core read-only.

    Attributes:
        id: Unique event identifier
        timestamp: When the event happened (timezone-aware, naive values are
            treated as UTC)
        event_type: Free-form type tag ("photo", "milestone", "pet_milestone"...)
        title: Optional short title
        description: Optional longer text
        participant_ids: People involved besides the owner
        owner_id: Person who owns the event
        tags: User tags
        has_media: True when at least one media asset is attached
        media_count: Number of attached media assets
        custom_attributes: Context-specific attribute map
        is_private: Hidden from shared views unless explicitly shown
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    timestamp: datetime
    event_type: str = "other"
    title: str | None = None
    description: str | None = None
    participant_ids: tuple[str, ...] = ()
    owner_id: str = Field(min_length=1)
    tags: tuple[str, ...] = ()
    has_media: bool = False
    media_count: int = Field(default=0, ge=0)
    custom_attributes: dict[str, Any] = Field(default_factory=dict)
    is_private: bool = False

    @field_validator("timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, v: Any) -> Any:
        """Accept ISO strings and epoch seconds as well as datetimes."""
        if isinstance(v, str):
            try:
                return datetime.fromisoformat(v)
            except ValueError:
                return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return datetime.fromtimestamp(v, tz=timezone.utc)
        return v

    @field_validator("title", "description", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Normalize empty strings to None and strip whitespace."""
        if isinstance(v, str):
            return v.strip() or None
        return v

    @model_validator(mode="after")
    def normalize(self) -> TimelineEvent:
        """Make timestamps timezone-aware and keep media fields consistent."""
        if self.timestamp.tzinfo is None:
            object.__setattr__(self, "timestamp", ensure_utc(self.timestamp))
        if self.media_count > 0 and not self.has_media:
            object.__setattr__(self, "has_media", True)
        return self

    @property
    def type(self) -> EventType:
        """Simplified event category."""
        return EventType.from_tag(self.event_type)

    @property
    def people(self) -> list[str]:
        """Owner followed by distinct participants, in first-seen order."""
        seen: dict[str, None] = {self.owner_id: None}
        for pid in self.participant_ids:
            if pid:
                seen.setdefault(pid, None)
        return list(seen)

    def involves(self, person_id: str) -> bool:
        """Check whether a person owns or participates in this event."""
        return self.owner_id == person_id or person_id in self.participant_ids

    def is_shared(self) -> bool:
        """True when two or more distinct people are involved."""
        return len(self.people) >= 2
