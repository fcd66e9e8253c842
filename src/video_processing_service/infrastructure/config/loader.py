"""Configuration loading and validation."""

import os
import yaml
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional, Dict, Any

from video_processing_service.domain.exceptions import ConfigurationError
from video_processing_service.domain.models import DEFAULT_PROCESSED_PREFIX, DEFAULT_TARGET_HEIGHT
from video_processing_service.shared.logging import get_logger

logger = get_logger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServiceConfig:
    """Configuration for the video processing service."""

    # Remote namespaces
    raw_bucket: str = "raw-videos"
    processed_bucket: str = "processed-videos"

    # Local staging
    raw_staging_dir: Path = Path("./raw-videos")
    processed_staging_dir: Path = Path("./processed-videos")

    # Naming and transform
    processed_prefix: str = DEFAULT_PROCESSED_PREFIX
    target_height: int = DEFAULT_TARGET_HEIGHT
    ffmpeg_binary: str = "ffmpeg"

    # Object store connection
    s3_endpoint: Optional[str] = None
    s3_region: Optional[str] = None
    s3_access_key: Optional[str] = None
    s3_secret_key: Optional[str] = None
    public_base_url: Optional[str] = None

    # HTTP
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def __post_init__(self):
        self.raw_staging_dir = Path(self.raw_staging_dir)
        self.processed_staging_dir = Path(self.processed_staging_dir)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
        self.log_level = str(self.log_level).upper()
        self._validate()

    def _validate(self):
        """Validate configuration values."""
        if not self.raw_bucket or not self.processed_bucket:
            raise ConfigurationError("raw_bucket and processed_bucket are required")

        if self.raw_bucket == self.processed_bucket:
            raise ConfigurationError(
                f"raw_bucket and processed_bucket must differ, both are {self.raw_bucket!r}"
            )

        if self.raw_staging_dir.resolve() == self.processed_staging_dir.resolve():
            raise ConfigurationError("raw and processed staging directories must differ")

        if not self.processed_prefix:
            raise ConfigurationError("processed_prefix must not be empty")

        if not isinstance(self.target_height, int) or self.target_height <= 0:
            raise ConfigurationError(f"target_height must be a positive integer, got: {self.target_height}")

        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigurationError(f"Invalid port: {self.port}")

        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(f"Invalid log_level: {self.log_level}")

        if bool(self.s3_access_key) != bool(self.s3_secret_key):
            raise ConfigurationError("s3_access_key and s3_secret_key must be set together")


class ConfigLoader:
    """Loads and validates configuration from YAML files and environment variables."""

    # env var -> field name
    ENV_MAP = {
        "RAW_BUCKET": "raw_bucket",
        "PROCESSED_BUCKET": "processed_bucket",
        "RAW_STAGING_DIR": "raw_staging_dir",
        "PROCESSED_STAGING_DIR": "processed_staging_dir",
        "PROCESSED_PREFIX": "processed_prefix",
        "TARGET_HEIGHT": "target_height",
        "FFMPEG_BINARY": "ffmpeg_binary",
        "S3_ENDPOINT": "s3_endpoint",
        "S3_REGION": "s3_region",
        "S3_ACCESS_KEY": "s3_access_key",
        "S3_SECRET_KEY": "s3_secret_key",
        "PUBLIC_BASE_URL": "public_base_url",
        "HOST": "host",
        "PORT": "port",
        "LOG_LEVEL": "log_level",
        "LOG_FILE": "log_file",
    }

    INT_FIELDS = ("target_height", "port")

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config loader.

        Args:
            config_path: Optional path to YAML config file. When omitted,
                ``config.yaml`` in the working directory is used if present.
        """
        self._explicit_path = config_path is not None
        self.config_path = Path(config_path) if config_path else Path("config.yaml")
        self._logger = get_logger(__name__)

    def load(self, overrides: Optional[Dict[str, Any]] = None) -> ServiceConfig:
        """
        Load configuration from file, environment and runtime overrides.

        Later sources win: YAML < environment < overrides.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config_dict: Dict[str, Any] = {}

        config_dict.update(self._load_from_file())
        config_dict.update(self._load_from_env())

        if overrides:
            config_dict.update({k: v for k, v in overrides.items() if v is not None})

        valid_fields = {f.name for f in fields(ServiceConfig)}
        unknown = sorted(set(config_dict) - valid_fields)
        if unknown:
            self._logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}

        try:
            return ServiceConfig(**filtered)
        except TypeError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def _load_from_file(self) -> Dict[str, Any]:
        if not self.config_path.exists():
            if self._explicit_path:
                raise ConfigurationError(f"Config file not found: {self.config_path}")
            return {}

        self._logger.info(f"Loading config from {self.config_path}")
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {self.config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"{self.config_path} must contain a mapping")
        return data

    def _load_from_env(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        for env_name, field_name in self.ENV_MAP.items():
            value = os.getenv(env_name)
            if not value:
                continue

            if field_name in self.INT_FIELDS:
                try:
                    env_config[field_name] = int(value)
                except ValueError:
                    self._logger.warning(f"Invalid {env_name} value: {value}")
                continue

            env_config[field_name] = value

        return env_config
