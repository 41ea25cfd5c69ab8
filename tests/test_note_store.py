"""Unit tests for the note store backends."""
import boto3
import pytest
from botocore.exceptions import ClientError
from moto import mock_aws

from storage.note_store import LocalNoteStore, basename, join_path
from storage.s3_note_store import S3NoteStore

BUCKET = 'test-calendar-notes'
REGION = 'us-east-1'


@pytest.fixture
def s3_bucket(monkeypatch):
    """Create a mock S3 bucket for testing."""
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    with mock_aws():
        s3 = boto3.client('s3', region_name=REGION)
        s3.create_bucket(Bucket=BUCKET)
        yield s3


@pytest.fixture
def s3_store(s3_bucket):
    """Create S3NoteStore instance with mock bucket."""
    return S3NoteStore(BUCKET, region_name=REGION)


@pytest.fixture
def local_store(tmp_path):
    return LocalNoteStore(str(tmp_path))


def test_join_path():
    assert join_path('Meetings', 'a.md') == 'Meetings/a.md'
    assert join_path('Meetings/', 'a.md') == 'Meetings/a.md'
    assert join_path('', 'a.md') == 'a.md'
    assert join_path('/', 'a.md') == 'a.md'


def test_basename():
    assert basename('Meetings/2024/a.md') == 'a.md'
    assert basename('a.md') == 'a.md'


class TestLocalNoteStore:
    """Test cases for LocalNoteStore."""

    def test_create_and_read(self, local_store, tmp_path):
        local_store.create('Meetings/a.md', 'héllo')

        assert local_store.exists('Meetings/a.md')
        assert local_store.read('Meetings/a.md') == 'héllo'
        assert (tmp_path / 'Meetings' / 'a.md').read_text(encoding='utf-8') == 'héllo'

    def test_create_existing_fails(self, local_store):
        local_store.create('a.md', 'one')

        with pytest.raises(FileExistsError):
            local_store.create('a.md', 'two')

        assert local_store.read('a.md') == 'one'

    def test_modify(self, local_store):
        local_store.create('a.md', 'one')

        local_store.modify('a.md', 'two')

        assert local_store.read('a.md') == 'two'

    def test_modify_missing_fails(self, local_store):
        with pytest.raises(FileNotFoundError):
            local_store.modify('missing.md', 'text')

    def test_list_children_is_not_recursive(self, local_store):
        local_store.create('Meetings/b.md', '')
        local_store.create('Meetings/a.md', '')
        local_store.create('Meetings/Archive/old.md', '')

        assert local_store.list_children('Meetings') == ['Meetings/a.md', 'Meetings/b.md']

    def test_list_children_missing_folder(self, local_store):
        assert local_store.list_children('Nope') == []


class TestS3NoteStore:
    """Test cases for S3NoteStore."""

    def test_exists_missing(self, s3_store):
        assert not s3_store.exists('Meetings/a.md')

    def test_create_and_read(self, s3_store, s3_bucket):
        s3_store.create('Meetings/a.md', 'héllo')

        assert s3_store.exists('Meetings/a.md')
        assert s3_store.read('Meetings/a.md') == 'héllo'

        head = s3_bucket.head_object(Bucket=BUCKET, Key='Meetings/a.md')
        assert head['ContentType'] == 'text/markdown; charset=utf-8'

    def test_create_existing_fails(self, s3_store):
        s3_store.create('a.md', 'one')

        with pytest.raises(FileExistsError):
            s3_store.create('a.md', 'two')

        assert s3_store.read('a.md') == 'one'

    def test_modify(self, s3_store):
        s3_store.create('a.md', 'one')

        s3_store.modify('a.md', 'two')

        assert s3_store.read('a.md') == 'two'

    def test_modify_missing_fails(self, s3_store):
        with pytest.raises(FileNotFoundError):
            s3_store.modify('missing.md', 'text')

    def test_list_children_is_not_recursive(self, s3_store, s3_bucket):
        s3_bucket.put_object(Bucket=BUCKET, Key='Meetings/', Body=b'')
        for key in ('Meetings/a.md', 'Meetings/b.md', 'Meetings/Archive/old.md', 'Other/c.md'):
            s3_bucket.put_object(Bucket=BUCKET, Key=key, Body=b'x')

        assert sorted(s3_store.list_children('Meetings')) == [
            'Meetings/a.md',
            'Meetings/b.md',
        ]

    def test_list_children_root(self, s3_store, s3_bucket):
        s3_bucket.put_object(Bucket=BUCKET, Key='top.md', Body=b'')
        s3_bucket.put_object(Bucket=BUCKET, Key='Meetings/a.md', Body=b'')

        assert s3_store.list_children('') == ['top.md']

    def test_missing_bucket_raises(self, s3_bucket):
        store = S3NoteStore('no-such-bucket', region_name=REGION)

        with pytest.raises(ClientError):
            store.list_children('Meetings')
