"""Attendee formatting as wiki links for note templates."""
from typing import Iterable, List, Optional

from processor.models import Attendee


class AttendeeFormatter:
    """Formatter for attendee lists."""

    def format_attendees(self, attendees: Iterable[Attendee]) -> str:
        """
        Format attendees as a comma-separated list of wiki links.

        The organizer is excluded and attendees are deduplicated by
        lowercase email, keeping the first occurrence.

        Args:
            attendees: Attendees in calendar order

        Returns:
            String like "[[Alice]], [[Bob]]", or "" when nobody remains
        """
        attendees = list(attendees)
        organizer_email = self._organizer_email(attendees)

        seen = set()
        labels: List[str] = []

        for attendee in attendees:
            email = attendee.email.lower()

            if email in seen:
                continue
            if organizer_email and email == organizer_email:
                continue

            seen.add(email)
            labels.append(f"[[{self.display_name(attendee)}]]")

        return ', '.join(labels)

    def display_name(self, attendee: Attendee) -> str:
        """Display name if set, otherwise the local part of the email."""
        if attendee.display_name and attendee.display_name.strip():
            return attendee.display_name.strip()

        local_part, _, _ = attendee.email.partition('@')
        return local_part

    def _organizer_email(self, attendees: List[Attendee]) -> Optional[str]:
        for attendee in attendees:
            if attendee.is_organizer:
                return attendee.email.lower() or None
        return None
