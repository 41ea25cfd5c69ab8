"""Frontmatter codec for the identity block embedded in notes."""
import re
from typing import Dict, Optional

from processor.models import IdentityBlock

EVENT_ID_KEY = 'calendarEventId'
EVENT_START_KEY = 'calendarEventStart'
DELIMITER = '---'


class FrontmatterCodec:
    """
    Codec for the identity frontmatter block.

    Frontmatter format:
        ---
        calendarEventId: <id>
        calendarEventStart: <iso-datetime or date>
        ---
    """

    FRONTMATTER_PATTERN = re.compile(r'^---\n(.*?)\n---', re.DOTALL)
    TIMESTAMP_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}')
    SPECIAL_CHARS = (':', '#', "'", '"')

    def encode(self, identity: IdentityBlock) -> str:
        """Generate the frontmatter block for an identity."""
        event_id = self._format_value(identity.calendar_event_id)
        event_start = self._format_value(identity.calendar_event_start)

        return (
            f"{DELIMITER}\n"
            f"{EVENT_ID_KEY}: {event_id}\n"
            f"{EVENT_START_KEY}: {event_start}\n"
            f"{DELIMITER}"
        )

    def decode(self, content: str) -> Optional[IdentityBlock]:
        """
        Parse the identity from note content.

        Args:
            content: Full note text

        Returns:
            IdentityBlock, or None if the block is missing, unterminated
            or lacks either field
        """
        if not content:
            return None

        match = self.FRONTMATTER_PATTERN.match(content)
        if not match or not match.group(1):
            return None

        fields = self._parse_fields(match.group(1))

        event_id = fields.get(EVENT_ID_KEY)
        event_start = fields.get(EVENT_START_KEY)
        if not event_id or not event_start:
            return None

        return IdentityBlock(
            calendar_event_id=event_id,
            calendar_event_start=event_start
        )

    def matches(self, content: str, target: IdentityBlock) -> bool:
        """Check whether the note's identity equals the target exactly."""
        return self.decode(content) == target

    def prepend(self, identity: IdentityBlock, body: str) -> str:
        """Prepend the identity block to a note body, separated by a blank line."""
        return f"{self.encode(identity)}\n\n{body}"

    def _parse_fields(self, block: str) -> Dict[str, str]:
        fields = {}

        for line in block.split('\n'):
            key, separator, value = line.partition(':')
            if not separator:
                continue

            value = value.strip()
            if len(value) >= 2 and value[0] == value[-1] == '"':
                value = value[1:-1].replace('\\"', '"')
            elif len(value) >= 2 and value[0] == value[-1] == "'":
                value = value[1:-1]

            fields[key.strip()] = value

        return fields

    def _format_value(self, value: str) -> str:
        """Quote values that would otherwise break key/value parsing."""
        if self.TIMESTAMP_PATTERN.match(value):
            return value

        if any(char in value for char in self.SPECIAL_CHARS):
            escaped = value.replace('"', '\\"')
            return f'"{escaped}"'

        return value
