"""Google Calendar API client."""
import logging
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from google_calendar.oauth import OAuthService
from processor.models import (
    Calendar,
    EventBoundary,
    RawAttendee,
    RawEvent,
    RawOrganizer,
    TimeRange,
)
from processor.time_range import to_api_string

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """Client for the Google Calendar v3 API."""

    BASE_URL = 'https://www.googleapis.com/calendar/v3'
    MAX_RESULTS = 250
    MAX_RETRIES = 3
    BASE_DELAY = 1  # seconds

    def __init__(self, oauth_service: OAuthService, timeout: int = 30):
        """
        Initialize the calendar client.

        Args:
            oauth_service: Source of access tokens
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.oauth_service = oauth_service
        self.timeout = timeout

    def list_calendars(self) -> List[Calendar]:
        """
        Get the calendars accessible by the user.

        Returns:
            List of Calendar objects
        """
        data = self._get(f"{self.BASE_URL}/users/me/calendarList")

        calendars = [
            Calendar(
                id=item['id'],
                summary=item.get('summary', ''),
                primary=bool(item.get('primary', False))
            )
            for item in data.get('items', [])
        ]
        logger.info(f"Fetched {len(calendars)} calendars")
        return calendars

    def list_events(self, calendar_id: str, time_range: TimeRange) -> List[RawEvent]:
        """
        Get events from a calendar within a time range.

        Recurring events are expanded into individual instances.

        Args:
            calendar_id: Calendar ID ('primary' for the primary calendar)
            time_range: Time range to fetch events for

        Returns:
            List of RawEvent objects ordered by start time
        """
        url = f"{self.BASE_URL}/calendars/{quote(calendar_id, safe='')}/events"
        params = {
            'timeMin': to_api_string(time_range.start),
            'timeMax': to_api_string(time_range.end),
            'singleEvents': 'true',
            'orderBy': 'startTime',
            'maxResults': str(self.MAX_RESULTS),
        }

        logger.info(
            f"Fetching events for calendar '{calendar_id}' from "
            f"{params['timeMin']} to {params['timeMax']}"
        )

        events = []
        page_token: Optional[str] = None

        while True:
            if page_token:
                params['pageToken'] = page_token
            data = self._get(url, params=params)

            for item in data.get('items', []):
                try:
                    events.append(self._parse_event(item))
                except (KeyError, TypeError) as e:
                    logger.warning(f"Failed to parse event item: {e}")
                    continue

            page_token = data.get('nextPageToken')
            if not page_token:
                break

        logger.info(f"Successfully fetched {len(events)} events")
        return events

    def list_primary_events(self, time_range: TimeRange) -> List[RawEvent]:
        return self.list_events('primary', time_range)

    def _get(self, url: str, params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """
        Perform an authorized GET request with retry logic.

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        for attempt in range(self.MAX_RETRIES):
            try:
                response = requests.get(
                    url,
                    params=params,
                    headers={
                        'Authorization': f"Bearer {self.oauth_service.get_access_token()}"
                    },
                    timeout=self.timeout
                )
                response.raise_for_status()
                return response.json()

            except requests.RequestException as e:
                if attempt < self.MAX_RETRIES - 1:
                    delay = self.BASE_DELAY * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{self.MAX_RETRIES}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {self.MAX_RETRIES} retry attempts failed. Last error: {e}"
                    )
                    raise

    def _parse_event(self, item: Dict[str, Any]) -> RawEvent:
        organizer = item.get('organizer')

        return RawEvent(
            id=item['id'],
            status=item.get('status', 'confirmed'),
            start=self._parse_boundary(item.get('start')),
            end=self._parse_boundary(item.get('end')),
            summary=item.get('summary'),
            attendees=tuple(
                RawAttendee(
                    email=attendee.get('email'),
                    display_name=attendee.get('displayName'),
                    organizer=bool(attendee.get('organizer', False))
                )
                for attendee in item.get('attendees', [])
            ),
            organizer=RawOrganizer(
                email=organizer.get('email')
            ) if organizer else None
        )

    def _parse_boundary(self, boundary: Optional[Dict[str, Any]]) -> EventBoundary:
        if not boundary:
            return EventBoundary()
        return EventBoundary(
            date_time=boundary.get('dateTime'),
            date=boundary.get('date'),
            time_zone=boundary.get('timeZone')
        )
