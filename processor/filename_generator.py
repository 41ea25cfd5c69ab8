"""Filename generation for meeting notes."""
import re
from typing import Optional


class FilenameGenerator:
    """
    Generator for sanitized note filenames.

    Filename format: YYYY-MM-DD - <sanitized title>.md
    """

    FALLBACK_TITLE = 'Untitled meeting'
    MAX_FILENAME_LENGTH = 255
    EXTENSION = '.md'

    # Characters illegal in filenames on Windows/Mac/Linux
    ILLEGAL_CHARS = re.compile(r'[/\\:*?"<>|]')
    WHITESPACE = re.compile(r'\s+')

    def sanitize(self, text: str) -> str:
        """
        Sanitize a string for use in a filename.

        Removes illegal characters, collapses whitespace runs to a single
        space and trims the result.
        """
        text = self.ILLEGAL_CHARS.sub('', text)
        return self.WHITESPACE.sub(' ', text).strip()

    def generate(self, date: str, title: str) -> str:
        """
        Generate a filename from date and title.

        Args:
            date: Date string in YYYY-MM-DD format
            title: Event title (will be sanitized)

        Returns:
            Filename like "2024-03-15 - Team Standup.md"
        """
        return self._compose(date, title)

    def generate_with_suffix(self, date: str, title: str, suffix: int) -> str:
        """
        Generate a filename with a numeric suffix for conflict resolution.

        Returns:
            Filename like "2024-03-15 - Team Standup (1).md"
        """
        return self._compose(date, title, suffix)

    def _compose(self, date: str, title: str, suffix: Optional[int] = None) -> str:
        final_title = self.sanitize(title) or self.FALLBACK_TITLE

        prefix = f"{date} - "
        ending = f" ({suffix}){self.EXTENSION}" if suffix is not None else self.EXTENSION
        max_title_length = self.MAX_FILENAME_LENGTH - len(prefix) - len(ending)

        if len(final_title) > max_title_length:
            final_title = final_title[:max(max_title_length, 0)]

        return f"{prefix}{final_title}{ending}"
