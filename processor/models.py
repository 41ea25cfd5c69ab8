"""Data models for calendar event processing and note generation."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Tuple


@dataclass(frozen=True)
class EventBoundary:
    """Start or end of a raw event: a precise instant or a whole-day date."""
    date_time: Optional[str] = None
    date: Optional[str] = None
    time_zone: Optional[str] = None


@dataclass(frozen=True)
class RawAttendee:
    """Participant record as supplied by the calendar API."""
    email: Optional[str] = None
    display_name: Optional[str] = None
    organizer: bool = False


@dataclass(frozen=True)
class RawOrganizer:
    """Organizer record as supplied by the calendar API."""
    email: Optional[str] = None


@dataclass(frozen=True)
class RawEvent:
    """Raw event from the calendar API."""
    id: str
    status: str = 'confirmed'
    start: EventBoundary = field(default_factory=EventBoundary)
    end: EventBoundary = field(default_factory=EventBoundary)
    summary: Optional[str] = None
    attendees: Tuple[RawAttendee, ...] = ()
    organizer: Optional[RawOrganizer] = None


@dataclass(frozen=True)
class Calendar:
    """Calendar visible to the authenticated user."""
    id: str
    summary: str
    primary: bool = False


@dataclass(frozen=True)
class Attendee:
    """Normalized event attendee."""
    email: str
    display_name: Optional[str] = None
    is_organizer: bool = False


@dataclass(frozen=True)
class NormalizedEvent:
    """Calendar event mapped into local date and time fields."""
    id: str
    title: str
    date: str
    start_time: str
    end_time: str
    start_iso: str
    is_all_day: bool
    attendees: Tuple[Attendee, ...] = ()
    organizer_email: Optional[str] = None


@dataclass(frozen=True)
class IdentityBlock:
    """Deduplication key embedded in every generated note."""
    calendar_event_id: str
    calendar_event_start: str

    @classmethod
    def for_event(cls, event: NormalizedEvent) -> 'IdentityBlock':
        return cls(
            calendar_event_id=event.id,
            calendar_event_start=event.start_iso
        )


class ConflictPolicy(str, Enum):
    """What to do when a note for the same event or filename already exists."""
    SKIP = 'skip'
    OVERWRITE = 'overwrite'
    SUFFIX = 'suffix'


@dataclass(frozen=True)
class TimeRange:
    """Start/end instant pair for calendar queries."""
    start: datetime
    end: datetime


@dataclass(frozen=True)
class WriteOutcome:
    """Result of writing a single note."""
    created: bool
    filename: str
    reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return not self.created


@dataclass
class GenerationResult:
    """Result of a note generation run."""
    created: List[str] = field(default_factory=list)
    skipped: List[Tuple[str, str]] = field(default_factory=list)


@dataclass(frozen=True)
class EventSelection:
    """
    Immutable set of selected event ids.

    Every change returns a new selection; nothing is shared between callers.
    """
    event_ids: FrozenSet[str] = frozenset()

    @classmethod
    def all_of(cls, events: Iterable[NormalizedEvent]) -> 'EventSelection':
        return cls(frozenset(event.id for event in events))

    @classmethod
    def none(cls) -> 'EventSelection':
        return cls()

    def is_selected(self, event_id: str) -> bool:
        return event_id in self.event_ids

    def with_event(self, event_id: str) -> 'EventSelection':
        return EventSelection(self.event_ids | {event_id})

    def without_event(self, event_id: str) -> 'EventSelection':
        return EventSelection(self.event_ids - {event_id})

    def toggle(self, event_id: str) -> 'EventSelection':
        if self.is_selected(event_id):
            return self.without_event(event_id)
        return self.with_event(event_id)

    def apply(self, events: Iterable[NormalizedEvent]) -> List[NormalizedEvent]:
        """Return the selected events in their original order."""
        return [event for event in events if event.id in self.event_ids]

    def __len__(self) -> int:
        return len(self.event_ids)
