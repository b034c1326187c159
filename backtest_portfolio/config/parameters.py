"""
Aggregation configuration using Pydantic.

This module provides type-safe validation and loading of the user-adjustable
portfolio aggregation settings.
"""

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..models.exceptions import InputFileError


logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENT_POSITIONS = 3


class AggregationConfig(BaseModel):
    """
    Configuration for a portfolio aggregation run.

    Attributes:
        max_concurrent_positions: Maximum simultaneously active deals across
            all aggregated backtests (default: 3, minimum 1). Accepts the
            camelCase alias ``maxConcurrentPositions``.
        position_blocking: When True, a deal is also rejected while another
            deal with the same symbol and algorithm is active (default: False).

    Examples:
        >>> AggregationConfig(maxConcurrentPositions=2).max_concurrent_positions
        2
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max_concurrent_positions: int = Field(
        default=DEFAULT_MAX_CONCURRENT_POSITIONS,
        ge=1,
        alias="maxConcurrentPositions",
    )
    position_blocking: bool = Field(default=False, alias="positionBlocking")


def load_aggregation_config(config_dict: dict | None = None) -> AggregationConfig:
    """
    Load and validate aggregation settings from a configuration dictionary.

    Args:
        config_dict: Optional dictionary of overrides (snake_case or camelCase
            keys). If None, default values are used.

    Returns:
        Validated AggregationConfig instance.

    Raises:
        pydantic.ValidationError: If any value is out of range.

    Examples:
        >>> load_aggregation_config({"max_concurrent_positions": 5})
        AggregationConfig(max_concurrent_positions=5, position_blocking=False)
    """
    if config_dict is None:
        return AggregationConfig()
    return AggregationConfig.model_validate(config_dict)


def load_aggregation_config_file(path: Path) -> AggregationConfig:
    """
    Load aggregation settings from a JSON file.

    Args:
        path: Path to a JSON object with aggregation settings.

    Returns:
        Validated AggregationConfig instance.

    Raises:
        InputFileError: If the file is missing, unreadable or not a JSON object.
        pydantic.ValidationError: If any value is out of range.
    """
    if not path.exists():
        raise InputFileError(f"Aggregation config file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise InputFileError(f"Cannot read aggregation config {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise InputFileError(f"Aggregation config {path} must contain a JSON object")

    config = load_aggregation_config(data)
    logger.debug("Loaded aggregation config from %s: %s", path, config)
    return config
