"""Unit tests for FrontmatterCodec."""
import pytest

from processor.frontmatter import FrontmatterCodec
from processor.models import IdentityBlock


@pytest.fixture
def codec():
    return FrontmatterCodec()


@pytest.fixture
def identity():
    return IdentityBlock(
        calendar_event_id='abc123',
        calendar_event_start='2024-03-15T09:00:00Z'
    )


class TestEncode:
    """Test cases for encode."""

    def test_encode_plain_values(self, codec, identity):
        assert codec.encode(identity) == (
            '---\n'
            'calendarEventId: abc123\n'
            'calendarEventStart: 2024-03-15T09:00:00Z\n'
            '---'
        )

    def test_timestamp_with_offset_not_quoted(self, codec):
        block = codec.encode(IdentityBlock('id', '2024-03-15T09:00:00+01:00'))

        assert 'calendarEventStart: 2024-03-15T09:00:00+01:00\n' in block

    def test_value_with_colon_is_quoted(self, codec):
        block = codec.encode(IdentityBlock('series:42', '2024-03-15'))

        assert 'calendarEventId: "series:42"\n' in block

    def test_internal_quotes_escaped(self, codec):
        block = codec.encode(IdentityBlock('say "hi"', '2024-03-15'))

        assert 'calendarEventId: "say \\"hi\\""\n' in block

    def test_hash_is_quoted(self, codec):
        block = codec.encode(IdentityBlock('id#1', '2024-03-15'))

        assert 'calendarEventId: "id#1"\n' in block


class TestDecode:
    """Test cases for decode."""

    @pytest.mark.parametrize('event_id,event_start', [
        ('abc123', '2024-03-15T09:00:00Z'),
        ('abc123_20240315T090000Z', '2024-03-15'),
        ('series:42', '2024-03-15T09:00:00.000-05:00'),
        ("it's #1", '2024-03-15'),
        ('say "hi"', '2024-03-15'),
    ])
    def test_round_trip(self, codec, event_id, event_start):
        identity = IdentityBlock(event_id, event_start)

        assert codec.decode(codec.encode(identity)) == identity

    def test_decode_with_body_and_extra_fields(self, codec, identity):
        content = (
            '---\n'
            'title: Standup\n'
            'calendarEventId: abc123\n'
            'tags\n'
            'calendarEventStart: 2024-03-15T09:00:00Z\n'
            '---\n\n# Standup\n'
        )

        assert codec.decode(content) == identity

    def test_strips_single_quotes(self, codec):
        content = "---\ncalendarEventId: 'abc'\ncalendarEventStart: '2024-03-15'\n---"

        assert codec.decode(content) == IdentityBlock('abc', '2024-03-15')

    def test_only_first_block_is_read(self, codec):
        content = (
            '---\ncalendarEventId: first\ncalendarEventStart: 2024-03-15\n---\n'
            '---\ncalendarEventId: second\ncalendarEventStart: 2024-03-16\n---\n'
        )

        assert codec.decode(content) == IdentityBlock('first', '2024-03-15')

    @pytest.mark.parametrize('content', [
        '',
        '# Just a note\n',
        '---\ncalendarEventId: abc\n',
        '---\ncalendarEventId: abc\n---',
        '---\ncalendarEventStart: 2024-03-15\n---',
        '---\ncalendarEventId:\ncalendarEventStart: 2024-03-15\n---',
        '\n---\ncalendarEventId: abc\ncalendarEventStart: 2024-03-15\n---',
    ])
    def test_returns_none_for_missing_or_incomplete_block(self, codec, content):
        assert codec.decode(content) is None


class TestMatches:
    """Test cases for matches and prepend."""

    def test_matches_same_identity(self, codec, identity):
        content = codec.prepend(identity, '# Body')

        assert codec.matches(content, identity)

    def test_no_block_does_not_match(self, codec, identity):
        assert not codec.matches('# Body only', identity)

    @pytest.mark.parametrize('other', [
        IdentityBlock('abc124', '2024-03-15T09:00:00Z'),
        IdentityBlock('abc123', '2024-03-16T09:00:00Z'),
    ])
    def test_altered_field_does_not_match(self, codec, identity, other):
        content = codec.prepend(other, '# Body')

        assert not codec.matches(content, identity)

    def test_equivalent_timestamps_in_other_format_do_not_match(self, codec, identity):
        """Test that matching compares strings, not instants."""
        content = codec.prepend(
            IdentityBlock('abc123', '2024-03-15T09:00:00+00:00'),
            '# Body'
        )

        assert not codec.matches(content, identity)

    def test_prepend_separates_with_blank_line(self, codec, identity):
        content = codec.prepend(identity, '# Body')

        assert content.endswith('---\n\n# Body')
        assert content.startswith('---\ncalendarEventId: abc123\n')
