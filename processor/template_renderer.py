"""Template rendering with {{variable}} substitution."""
import re
from typing import List, Mapping


class TemplateRenderer:
    """
    Renderer for note templates.

    Supported variables:
        {{title}} - Event title
        {{date}} - Date in YYYY-MM-DD format
        {{startTime}} - Start time in HH:mm format
        {{endTime}} - End time in HH:mm format
        {{attendees}} - Formatted attendee list
        {{calendarEventId}} - Event ID used for deduplication
        {{calendarEventStart}} - Event start as supplied by the calendar
    """

    VARIABLE_PATTERN = re.compile(r'\{\{(\w+)\}\}')

    def render(self, template: str, variables: Mapping[str, str]) -> str:
        """
        Render a template by substituting variables with their values.

        Unknown variables are replaced with an empty string.

        Args:
            template: Template string with {{variable}} placeholders
            variables: Mapping of variable names to values

        Returns:
            Rendered string
        """
        return self.VARIABLE_PATTERN.sub(
            lambda match: variables.get(match.group(1), ''),
            template
        )

    def variable_names(self, template: str) -> List[str]:
        """Unique variable names in the template, in encounter order."""
        names = {}
        for match in self.VARIABLE_PATTERN.finditer(template):
            names.setdefault(match.group(1), None)
        return list(names)

    def references_any(self, template: str, names: List[str]) -> bool:
        """Check whether the template uses any of the given variables."""
        used = set(self.variable_names(template))
        return any(name in used for name in names)
