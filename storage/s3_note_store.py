"""S3 backend for the notes vault."""
import logging
from typing import List, Optional

import boto3
from botocore.exceptions import ClientError

from storage.note_store import NoteStore

logger = logging.getLogger(__name__)


class S3NoteStore(NoteStore):
    """Note store keeping each note as an object in an S3 bucket."""

    CONTENT_TYPE = 'text/markdown; charset=utf-8'
    NOT_FOUND_CODES = ('404', 'NoSuchKey', 'NotFound')

    def __init__(self, bucket: str, region_name: Optional[str] = None):
        """
        Initialize S3 client and bucket reference.

        Args:
            bucket: Name of the bucket holding the vault
            region_name: AWS region (default: from the environment)
        """
        self.bucket = bucket
        self.s3 = boto3.client('s3', region_name=region_name)
        logger.info(f"Initialized S3NoteStore for bucket: {bucket}")

    def exists(self, path: str) -> bool:
        try:
            self.s3.head_object(Bucket=self.bucket, Key=self._key(path))
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in self.NOT_FOUND_CODES:
                return False
            logger.error(f"Error checking object {path}: {e}")
            raise

    def read(self, path: str) -> str:
        try:
            response = self.s3.get_object(Bucket=self.bucket, Key=self._key(path))
            return response['Body'].read().decode('utf-8')
        except ClientError as e:
            logger.error(f"Error reading object {path}: {e}")
            raise

    def create(self, path: str, content: str) -> None:
        if self.exists(path):
            raise FileExistsError(f"File already exists: {path}")
        self._put(path, content)

    def modify(self, path: str, content: str) -> None:
        if not self.exists(path):
            raise FileNotFoundError(f"No file to modify at: {path}")
        self._put(path, content)

    def list_children(self, folder: str) -> List[str]:
        """
        List objects directly under a folder prefix.

        Uses the '/' delimiter so nested folders are not descended into.
        """
        prefix = f"{folder.strip('/')}/" if folder.strip('/') else ''
        paths = []

        try:
            paginator = self.s3.get_paginator('list_objects_v2')
            for page in paginator.paginate(
                Bucket=self.bucket, Prefix=prefix, Delimiter='/'
            ):
                for item in page.get('Contents', []):
                    key = item['Key']
                    # Skip the folder marker object itself
                    if key == prefix:
                        continue
                    paths.append(key)
        except ClientError as e:
            logger.error(f"Error listing folder {folder}: {e}")
            raise

        logger.debug(f"Listed {len(paths)} objects under '{prefix}'")
        return paths

    def _put(self, path: str, content: str) -> None:
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=self._key(path),
                Body=content.encode('utf-8'),
                ContentType=self.CONTENT_TYPE
            )
        except ClientError as e:
            logger.error(f"Error writing object {path}: {e}")
            raise

    def _key(self, path: str) -> str:
        return path.strip('/')
