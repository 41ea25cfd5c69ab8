"""Event normalizer for mapping calendar API events to the internal model."""
import logging
from typing import List

from processor.models import Attendee, NormalizedEvent, RawAttendee, RawEvent
from processor.time_range import format_date_local, format_time_local, parse_instant

logger = logging.getLogger(__name__)


class EventNormalizer:
    """Normalizer for raw calendar events."""

    FALLBACK_TITLE = 'Untitled event'
    CANCELLED_STATUS = 'cancelled'

    def normalize_all(self, raw_events: List[RawEvent]) -> List[NormalizedEvent]:
        """
        Normalize raw events, dropping cancelled ones.

        Args:
            raw_events: List of RawEvent objects from the calendar client

        Returns:
            List of NormalizedEvent objects in input order
        """
        active_events = self.filter_cancelled(raw_events)
        normalized = [self.normalize(event) for event in active_events]

        logger.info(
            f"Normalized {len(normalized)} events out of "
            f"{len(raw_events)} total events"
        )
        return normalized

    def filter_cancelled(self, raw_events: List[RawEvent]) -> List[RawEvent]:
        """Keep every event whose status is not cancelled."""
        return [
            event for event in raw_events
            if event.status != self.CANCELLED_STATUS
        ]

    def normalize(self, event: RawEvent) -> NormalizedEvent:
        """
        Normalize a single event.

        Missing or malformed date fields never raise; they degrade to
        empty strings.

        Args:
            event: Raw event from the calendar API

        Returns:
            NormalizedEvent object
        """
        is_all_day = not event.start.date_time

        if is_all_day:
            date = event.start.date or ''
            start_time = ''
            end_time = ''
            start_iso = date
        else:
            start_iso = event.start.date_time
            date, start_time = self._local_date_and_time(event, start_iso)
            end_raw = event.end.date_time or event.end.date or ''
            _, end_time = self._local_date_and_time(event, end_raw)

        title = (event.summary or '').strip() or self.FALLBACK_TITLE
        organizer_email = event.organizer.email if event.organizer else None

        return NormalizedEvent(
            id=event.id,
            title=title,
            date=date,
            start_time=start_time,
            end_time=end_time,
            start_iso=start_iso,
            is_all_day=is_all_day,
            attendees=tuple(
                self._normalize_attendee(attendee)
                for attendee in event.attendees
            ),
            organizer_email=organizer_email
        )

    def _local_date_and_time(self, event: RawEvent, value: str) -> tuple[str, str]:
        """
        Convert an RFC 3339 instant to local date and time strings.

        Returns:
            Tuple of (YYYY-MM-DD, HH:mm), both empty if parsing fails
        """
        if not value:
            return '', ''

        try:
            instant = parse_instant(value)
        except ValueError:
            logger.warning(
                f"Invalid timestamp for event '{event.id}': {value}"
            )
            return '', ''

        return format_date_local(instant), format_time_local(instant)

    def _normalize_attendee(self, attendee: RawAttendee) -> Attendee:
        return Attendee(
            email=attendee.email or '',
            display_name=attendee.display_name,
            is_organizer=bool(attendee.organizer)
        )
