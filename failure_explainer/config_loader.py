"""Load harness configuration from YAML files."""

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from failure_explainer.config import API_KEY_ENV_VAR, HarnessConfig

log = logging.getLogger(__name__)


def load_harness_config(config_path: Path) -> HarnessConfig:
    """Load and validate a harness configuration file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Validated harness configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML or fails validation

    """
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        data = yaml.safe_load(config_path.read_text()) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {config_path}")

    try:
        config = HarnessConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

    log.info("Loaded harness configuration from '%s'", config_path)
    return config


def resolve_explainer_settings(
    config: HarnessConfig, environ: Mapping[str, str]
) -> dict[str, Any]:
    """Return explainer settings with the API key taken from the environment.

    The environment variable wins over the file so credentials can stay out
    of version control.
    """
    settings = dict(config.explainer_config)
    if api_key := environ.get(API_KEY_ENV_VAR):
        settings["api_key"] = api_key
    return settings
