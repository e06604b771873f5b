"""Configuration loaded from environment variables."""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from storage.artifact_store import (
    ArtifactStore,
    DEFAULT_CHECKPOINT_PATH,
    DEFAULT_OUTPUT_PATH,
    LocalArtifactStore,
    S3ArtifactStore,
)


class ConfigurationError(RuntimeError):
    """Required configuration is missing or invalid."""


@dataclass
class Settings:
    """Runtime settings for the sync scripts and the Lambda handler."""
    notion_api_key: str
    database_id: str
    output_path: str = DEFAULT_OUTPUT_PATH
    checkpoint_path: str = DEFAULT_CHECKPOINT_PATH
    artifact_bucket: Optional[str] = None
    log_level: str = 'INFO'
    timeout_seconds: int = 30
    settle_delay_seconds: float = 1.0
    max_workers: int = 8

    def build_store(self) -> ArtifactStore:
        """S3 store when a bucket is configured, local files otherwise."""
        if self.artifact_bucket:
            return S3ArtifactStore(
                self.artifact_bucket,
                output_key=self.output_path,
                checkpoint_key=self.checkpoint_path
            )
        return LocalArtifactStore(self.output_path, self.checkpoint_path)


def load_env_file() -> None:
    """Load a .env file from the working directory, if there is one."""
    load_dotenv(override=False)


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Build settings from environment variables.

    Args:
        env: Mapping to read from (default: os.environ)

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If credentials are missing or a number is invalid
    """
    if env is None:
        env = os.environ

    api_key = env.get('NOTION_API_KEY')
    if not api_key:
        raise ConfigurationError("NOTION_API_KEY environment variable is not set")

    database_id = (
        env.get('NOTION_EVENTS_DATABASE') or env.get('NOTION_EVENTS_DATABASE_ID')
    )
    if not database_id:
        raise ConfigurationError(
            "NOTION_EVENTS_DATABASE environment variable is not set"
        )

    try:
        return Settings(
            notion_api_key=api_key,
            database_id=database_id,
            output_path=env.get('OUTPUT_PATH', DEFAULT_OUTPUT_PATH),
            checkpoint_path=env.get('CHECKPOINT_PATH', DEFAULT_CHECKPOINT_PATH),
            artifact_bucket=env.get('ARTIFACT_BUCKET') or None,
            log_level=env.get('LOG_LEVEL', 'INFO'),
            timeout_seconds=int(env.get('TIMEOUT_SECONDS', '30')),
            settle_delay_seconds=float(env.get('SETTLE_DELAY_SECONDS', '1.0')),
            max_workers=int(env.get('MAX_WORKERS', '8'))
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid numeric setting: {e}") from e
