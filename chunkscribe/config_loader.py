"""Handles loading configuration from YAML files and validating it into Settings."""

import yaml
import os
import logging
from dataclasses import asdict, fields
from typing import Any, Optional

from .exceptions import ConfigurationError
from .models import Settings

logger = logging.getLogger(__name__)

# Every recognized key with its default value
DEFAULT_CONFIG = asdict(Settings())

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.debug(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if config is None:
            # An empty file means "all defaults"
            config = {}
        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    def load_or_default(self, config_path: Optional[str], required: bool = False) -> dict:
        """
        Loads the config file if present, otherwise returns an empty mapping.

        Args:
            config_path: Path to the YAML file, or None.
            required: When True a missing file is an error instead of
                      silently falling back to defaults.

        Raises:
            FileNotFoundError: If `required` is set and the file is missing.
            ConfigurationError: If the file exists but is invalid.
        """
        if config_path and (required or os.path.exists(config_path)):
            return self.load_config(config_path)
        logger.debug("No configuration file found, using built-in defaults.")
        return {}


def _number(config: dict, key: str, kind: type) -> Any:
    value = config[key]
    # bool is an int subclass, but "true" is never a valid number of seconds
    if isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}")
    try:
        return kind(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"'{key}' must be a number, got {value!r}") from e


def _optional_str(config: dict, key: str) -> Optional[str]:
    value = config[key]
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def build_settings(config: dict) -> Settings:
    """
    Merges a raw configuration mapping over the defaults and validates it.

    Args:
        config: Mapping as returned by `ConfigLoader.load_config`, possibly
                with CLI overrides applied.

    Returns:
        A frozen Settings instance.

    Raises:
        ConfigurationError: If any value has the wrong type or violates a
                            constraint (e.g. overlap >= chunk length).
    """
    unknown = sorted(set(config) - set(DEFAULT_CONFIG))
    for key in unknown:
        logger.warning(f"Ignoring unknown configuration key: {key}")

    merged = dict(DEFAULT_CONFIG)
    merged.update({k: v for k, v in config.items() if k in DEFAULT_CONFIG})

    chunk_seconds = _number(merged, 'chunk_seconds', float)
    overlap_seconds = _number(merged, 'overlap_seconds', float)
    if chunk_seconds <= 0:
        raise ConfigurationError(f"chunk_seconds must be > 0, got {chunk_seconds}")
    if overlap_seconds < 0:
        raise ConfigurationError(f"overlap_seconds must be >= 0, got {overlap_seconds}")
    if overlap_seconds >= chunk_seconds:
        raise ConfigurationError("chunk_seconds must be greater than overlap_seconds")

    model = _optional_str(merged, 'model')
    if not model:
        raise ConfigurationError("'model' must name a transcription model")

    min_overlap_chars = _number(merged, 'min_overlap_chars', int)
    max_overlap_chars = _number(merged, 'max_overlap_chars', int)
    scan_slack_chars = _number(merged, 'scan_slack_chars', int)
    if min_overlap_chars < 1:
        raise ConfigurationError(f"min_overlap_chars must be >= 1, got {min_overlap_chars}")
    if max_overlap_chars < min_overlap_chars:
        raise ConfigurationError("max_overlap_chars must be >= min_overlap_chars")
    if scan_slack_chars < 0:
        raise ConfigurationError(f"scan_slack_chars must be >= 0, got {scan_slack_chars}")

    max_retries = _number(merged, 'max_retries', int)
    if max_retries < 1:
        raise ConfigurationError(f"max_retries must be >= 1, got {max_retries}")
    request_timeout = _number(merged, 'request_timeout', float)
    if request_timeout <= 0:
        raise ConfigurationError(f"request_timeout must be > 0, got {request_timeout}")

    prompt = merged['prompt']
    settings = Settings(
        chunk_seconds=chunk_seconds,
        overlap_seconds=overlap_seconds,
        model=model,
        language=_optional_str(merged, 'language'),
        prompt=str(prompt) if prompt else None,
        min_overlap_chars=min_overlap_chars,
        max_overlap_chars=max_overlap_chars,
        scan_slack_chars=scan_slack_chars,
        max_retries=max_retries,
        request_timeout=request_timeout,
        openai_api_key=_optional_str(merged, 'openai_api_key'),
        temp_dir=_optional_str(merged, 'temp_dir'),
        keep_chunks=bool(merged['keep_chunks']),
        progress_bar=bool(merged['progress_bar']),
        ffmpeg_path=_optional_str(merged, 'ffmpeg_path'),
        ffprobe_path=_optional_str(merged, 'ffprobe_path'),
        log_dir=_optional_str(merged, 'log_dir') or 'logs',
        log_file=_optional_str(merged, 'log_file') or 'chunkscribe.log',
    )
    logger.debug(
        "Settings: "
        + ", ".join(f"{f.name}={getattr(settings, f.name)!r}" for f in fields(settings) if f.name != 'openai_api_key')
    )
    return settings
