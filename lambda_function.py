"""AWS Lambda handler for Calendar Notes Sync."""
import json
import logging
import os
import time
from typing import Any, Dict, FrozenSet, Optional

from google_calendar.calendar_client import GoogleCalendarClient
from google_calendar.oauth import InMemoryTokenStorage, OAuthService, OAuthTokens
from processor.event_normalizer import EventNormalizer
from processor.models import ConflictPolicy, EventSelection, TimeRange
from processor.note_writer import NoteWriter
from processor.time_range import current_day_range, custom_range, parse_instant
from storage.note_store import LocalNoteStore, NoteStore
from storage.s3_note_store import S3NoteStore


class ConfigurationError(Exception):
    """Raised when the run cannot start because of missing or invalid settings."""


# Attributes every LogRecord has; anything else came in through `extra`
RESERVED_LOG_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', (), None))) | {'message', 'asctime'}


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON, including `extra` fields."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        for key, value in vars(record).items():
            if key not in RESERVED_LOG_ATTRS and key not in log_data:
                log_data[key] = value

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def create_note_store(backend: str) -> NoteStore:
    """Build the storage backend named by STORAGE_BACKEND."""
    if backend == 's3':
        return S3NoteStore(bucket=os.environ.get('NOTES_BUCKET', 'calendar-notes'))
    if backend == 'local':
        return LocalNoteStore(root=os.environ.get('NOTES_ROOT', '.'))
    raise ConfigurationError(f"Unknown storage backend: {backend}")


def load_template(store: NoteStore, template_path: str) -> str:
    """
    Read the template note, checking the configuration first.

    Raises:
        ConfigurationError: If no template is configured or it does not exist
    """
    if not template_path:
        raise ConfigurationError('No template note path configured')
    if not store.exists(template_path):
        raise ConfigurationError(f"Template note not found: {template_path}")
    return store.read(template_path)


def parse_conflict_policy(value: str) -> ConflictPolicy:
    try:
        return ConflictPolicy(value.strip().lower())
    except ValueError:
        raise ConfigurationError(f"Unknown conflict policy: {value}") from None


def resolve_time_range(event: Dict[str, Any]) -> TimeRange:
    """
    Time range from the invocation payload, or the current local day.

    Raises:
        ConfigurationError: If only one bound is given or a bound is malformed
    """
    start = event.get('start')
    end = event.get('end')

    if not start and not end:
        return current_day_range()
    if not start or not end:
        raise ConfigurationError('Both start and end are required for a custom range')

    try:
        return custom_range(parse_instant(start), parse_instant(end))
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid time range: {e}") from None


def parse_event_ids(event: Dict[str, Any]) -> Optional[FrozenSet[str]]:
    """
    Event ids selected in the payload, or None to select every event.

    Raises:
        ConfigurationError: If event_ids is not a list of strings
    """
    event_ids = event.get('event_ids')
    if event_ids is None:
        return None
    if not isinstance(event_ids, list) or not all(isinstance(i, str) for i in event_ids):
        raise ConfigurationError('event_ids must be a list of event id strings')
    return frozenset(event_ids)


def resolve_selection(event_ids: Optional[FrozenSet[str]], events) -> EventSelection:
    """Selection of the given event ids, or every event."""
    if event_ids is None:
        return EventSelection.all_of(events)
    return EventSelection(event_ids)


def error_response(
    status_code: int,
    message: str,
    error: Exception,
    start_time: float
) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'body': json.dumps({
            'message': message,
            'error': str(error),
            'error_type': type(error).__name__,
            'duration_seconds': round(time.time() - start_time, 2)
        })
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler function for Calendar Notes Sync.

    Args:
        event: EventBridge or direct invocation payload. Optional keys:
            start, end (ISO timestamps), event_ids, folder, conflict_policy
        context: Lambda context object

    Returns:
        Response dict with statusCode and summary statistics
    """
    event = event or {}

    # Read configuration from environment variables
    backend = os.environ.get('STORAGE_BACKEND', 's3')
    folder = event.get('folder') or os.environ.get('NOTES_FOLDER', 'Meetings')
    template_path = os.environ.get('TEMPLATE_PATH', '')
    policy_name = event.get('conflict_policy') or os.environ.get('CONFLICT_POLICY', 'skip')
    calendar_id = os.environ.get('CALENDAR_ID', 'primary')
    client_id = os.environ.get('GOOGLE_CLIENT_ID', '')
    client_secret = os.environ.get('GOOGLE_CLIENT_SECRET', '')
    refresh_token = os.environ.get('GOOGLE_REFRESH_TOKEN', '')
    log_level = os.environ.get('LOG_LEVEL', 'INFO')
    timeout_seconds = int(os.environ.get('TIMEOUT_SECONDS', '30'))

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    logger.info(
        "Lambda execution started",
        extra={
            'storage_backend': backend,
            'folder': folder,
            'calendar_id': calendar_id,
            'conflict_policy': policy_name
        }
    )

    try:
        # Configuration problems block the run before anything is fetched
        try:
            policy = parse_conflict_policy(policy_name)
            if not refresh_token:
                raise ConfigurationError('Not connected: GOOGLE_REFRESH_TOKEN is not set')
            time_range = resolve_time_range(event)
            event_ids = parse_event_ids(event)
            store = create_note_store(backend)
            template = load_template(store, template_path)
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            return error_response(400, 'Invalid configuration', e, start_time)

        oauth_service = OAuthService(
            client_id=client_id,
            client_secret=client_secret,
            storage=InMemoryTokenStorage(
                OAuthTokens(access_token='', refresh_token=refresh_token, expires_at=0)
            ),
            timeout=timeout_seconds
        )
        calendar_client = GoogleCalendarClient(oauth_service, timeout=timeout_seconds)
        normalizer = EventNormalizer()
        writer = NoteWriter(store)

        try:
            logger.info("Fetching events from calendar")
            raw_events = calendar_client.list_events(calendar_id, time_range)
            logger.info(f"Fetched {len(raw_events)} raw events from calendar")
        except Exception as e:
            logger.error(
                f"Failed to fetch events from calendar: {str(e)}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return error_response(500, 'Failed to fetch calendar events', e, start_time)

        logger.info("Normalizing events")
        events = normalizer.normalize_all(raw_events)
        selected = resolve_selection(event_ids, events).apply(events)
        logger.info(f"Selected {len(selected)} of {len(events)} events")

        logger.info("Writing notes")
        result = writer.write_many(selected, template, folder, policy)

        duration = time.time() - start_time
        logger.info(
            "Lambda execution completed successfully",
            extra={
                'duration_seconds': round(duration, 2),
                'notes_created': len(result.created),
                'notes_skipped': len(result.skipped)
            }
        )

        return {
            'statusCode': 200,
            'body': json.dumps({
                'message': 'Note generation completed successfully',
                'statistics': {
                    'raw_events_fetched': len(raw_events),
                    'events_normalized': len(events),
                    'events_selected': len(selected),
                    'notes_created': len(result.created),
                    'notes_skipped': len(result.skipped),
                    'duration_seconds': round(duration, 2)
                },
                'created': result.created,
                'skipped': [
                    {'filename': filename, 'reason': reason}
                    for filename, reason in result.skipped
                ]
            })
        }

    except Exception as e:
        logger.error(
            f"Lambda execution failed: {str(e)}",
            extra={
                'duration_seconds': round(time.time() - start_time, 2),
                'error_type': type(e).__name__
            },
            exc_info=True
        )
        return error_response(500, 'Note generation failed', e, start_time)
