"""
Configuration management and loading.

Handles detector settings for the operator-facing commands.
The hook itself always runs with the built-in families.
"""

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

import yaml

from ..core.patterns import DEFAULT_FAMILIES, PatternFamily, compile_pattern

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorConfig:
    """Complete detector configuration."""
    families: Tuple[PatternFamily, ...]

    def __post_init__(self):
        """Validate at least one family is configured."""
        if not self.families:
            raise ValueError("at least one family must be configured")


def default_detector_config() -> DetectorConfig:
    """Built-in rate limit and usage families."""
    return DetectorConfig(families=DEFAULT_FAMILIES)


def load_detector_config(path: str) -> DetectorConfig:
    """Load and validate detector configuration from YAML file.

    Unknown keys are rejected so that a typo never silently disables
    a keyword family.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated DetectorConfig object

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If YAML is invalid
        ValueError: If configuration is invalid
    """
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Detector config file not found: {path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            raw_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Invalid YAML in config file {path}: {e}")

    if not raw_config:
        raise ValueError("Configuration file is empty")
    if not isinstance(raw_config, dict):
        raise ValueError("Configuration must be a dictionary")

    allowed_top_keys = {'families'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ValueError(f"Unknown configuration keys: {unknown_keys}")

    if 'families' not in raw_config:
        raise ValueError("Missing required 'families' section")

    families_data = raw_config['families']
    if not isinstance(families_data, dict):
        raise ValueError("'families' must be a dictionary")
    if not families_data:
        raise ValueError("'families' must define at least one family")

    families = []
    for family_name, family_data in families_data.items():
        if not isinstance(family_data, dict):
            raise ValueError(f"Family '{family_name}' must be a dictionary")
        families.append(_parse_family(str(family_name), family_data, f"families.{family_name}"))

    logger.debug("Loaded %d families from %s", len(families), path)
    return DetectorConfig(families=tuple(families))


def _parse_family(name: str, data: Dict, path: str) -> PatternFamily:
    """Parse and validate a keyword family.

    Args:
        name: Family name
        data: Family configuration data
        path: Path for error messages

    Returns:
        Validated PatternFamily

    Raises:
        ValueError: If configuration is invalid
    """
    allowed_keys = {'label', 'pattern', 'notice'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ValueError(f"Unknown keys in {path}: {unknown_keys}")

    for key in ('label', 'pattern'):
        if key not in data:
            raise ValueError(f"Missing required '{key}' in {path}")
        if not isinstance(data[key], str) or not data[key].strip():
            raise ValueError(f"'{key}' in {path} must be a non-empty string")

    label = data['label'].strip()
    if '\n' in label:
        raise ValueError(f"'label' in {path} must be a single line")

    try:
        pattern = compile_pattern(data['pattern'])
    except re.error as e:
        raise ValueError(f"'pattern' in {path} is not a valid regular expression: {e}")

    notice = data.get('notice', f"{label.capitalize()} detected")
    if not isinstance(notice, str):
        raise ValueError(f"'notice' in {path} must be a string")

    return PatternFamily(name=name, label=label, pattern=pattern, notice=notice)
