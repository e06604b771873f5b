"""Storage for the published events artifact and the sync checkpoint."""
import logging
from pathlib import Path
from typing import Optional

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = 'public/events.json'
DEFAULT_CHECKPOINT_PATH = '.last-sync'


class ArtifactStore:
    """Where events.json and the last-sync checkpoint are kept."""

    def read_events(self) -> Optional[str]:
        """Return the published events JSON, or None if nothing was published."""
        raise NotImplementedError

    def write_events(self, content: str) -> str:
        """Publish events JSON and return its location."""
        raise NotImplementedError

    def read_checkpoint(self) -> Optional[str]:
        """Return the stored checkpoint timestamp, or None if never synced."""
        raise NotImplementedError

    def write_checkpoint(self, timestamp: str) -> None:
        raise NotImplementedError


class LocalArtifactStore(ArtifactStore):
    """Artifact store backed by the local filesystem."""

    def __init__(self, output_path: str = DEFAULT_OUTPUT_PATH,
                 checkpoint_path: str = DEFAULT_CHECKPOINT_PATH):
        """
        Initialize the filesystem store.

        Args:
            output_path: Path of the published events.json
            checkpoint_path: Path of the last-sync timestamp file
        """
        self.output_path = Path(output_path)
        self.checkpoint_path = Path(checkpoint_path)

    def read_events(self) -> Optional[str]:
        try:
            return self.output_path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return None

    def write_events(self, content: str) -> str:
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(content, encoding='utf-8')
        return str(self.output_path)

    def read_checkpoint(self) -> Optional[str]:
        try:
            content = self.checkpoint_path.read_text(encoding='utf-8').strip()
        except FileNotFoundError:
            return None
        return content or None

    def write_checkpoint(self, timestamp: str) -> None:
        self.checkpoint_path.parent.mkdir(parents=True, exist_ok=True)
        self.checkpoint_path.write_text(timestamp, encoding='utf-8')


class S3ArtifactStore(ArtifactStore):
    """Artifact store backed by an S3 bucket, for Lambda deployments."""

    MISSING_KEY_CODES = ('NoSuchKey', '404', 'NotFound')

    def __init__(self, bucket: str, output_key: str = DEFAULT_OUTPUT_PATH,
                 checkpoint_key: str = DEFAULT_CHECKPOINT_PATH):
        """
        Initialize S3 client and object keys.

        Args:
            bucket: Name of the S3 bucket
            output_key: Object key of the published events.json
            checkpoint_key: Object key of the last-sync timestamp
        """
        self.bucket = bucket
        self.output_key = output_key
        self.checkpoint_key = checkpoint_key
        self.s3 = boto3.client('s3')
        logger.info(f"Initialized S3ArtifactStore for bucket: {bucket}")

    def _get_text(self, key: str) -> Optional[str]:
        try:
            response = self.s3.get_object(Bucket=self.bucket, Key=key)
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in self.MISSING_KEY_CODES:
                return None
            logger.error(f"Error reading s3://{self.bucket}/{key}: {e}")
            raise
        return response['Body'].read().decode('utf-8')

    def _put_text(self, key: str, content: str, content_type: str) -> None:
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content.encode('utf-8'),
                ContentType=content_type
            )
        except ClientError as e:
            logger.error(f"Error writing s3://{self.bucket}/{key}: {e}")
            raise

    def read_events(self) -> Optional[str]:
        return self._get_text(self.output_key)

    def write_events(self, content: str) -> str:
        self._put_text(self.output_key, content, 'application/json')
        return f"s3://{self.bucket}/{self.output_key}"

    def read_checkpoint(self) -> Optional[str]:
        content = self._get_text(self.checkpoint_key)
        if content is None:
            return None
        return content.strip() or None

    def write_checkpoint(self, timestamp: str) -> None:
        self._put_text(self.checkpoint_key, timestamp, 'text/plain')
