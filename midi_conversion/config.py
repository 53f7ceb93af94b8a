"""midi_conversion.config

Conversion settings loaded from YAML.

If no path is given, ``data/conversion_config.yaml`` inside the package is
used when present. Missing files, empty documents and invalid values fall
back to the defaults below.
"""
import logging
import os
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError
from .validators import validate_config_path

logger = logging.getLogger(__name__)

# 默认配置值
DEFAULT_LEAD_IN_MS = 1000
DEFAULT_PROGRESS_INTERVAL = 100
DEFAULT_YIELD_INTERVAL = 1000
DEFAULT_MAX_FILE_BYTES = 10 * 1024 * 1024

DEFAULT_CONFIG_PATH = os.path.join(os.path.dirname(__file__), 'data', 'conversion_config.yaml')


@dataclass(frozen=True)
class ConversionConfig:
    """Tunables of a conversion run.

    Attributes:
        lead_in_ms: Time the first note is moved to when it starts later.
        progress_interval: Number of processed events between progress calls.
        yield_interval: Number of processed events between cooperative yields.
        max_file_bytes: Largest MIDI payload accepted by the byte/file loaders.
    """

    lead_in_ms: int = DEFAULT_LEAD_IN_MS
    progress_interval: int = DEFAULT_PROGRESS_INTERVAL
    yield_interval: int = DEFAULT_YIELD_INTERVAL
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


DEFAULT_CONFIG = ConversionConfig()

_DEFAULTS: Dict[str, int] = DEFAULT_CONFIG.to_dict()


def _coerce(key: str, value: Any) -> int:
    default = _DEFAULTS[key]
    if isinstance(value, bool) or not isinstance(value, int):
        logger.warning("Ignoring %s=%r from configuration: not an integer", key, value)
        return default
    # lead_in_ms may be 0, the intervals and the size limit may not
    minimum = 0 if key == 'lead_in_ms' else 1
    if value < minimum:
        logger.warning("Ignoring %s=%r from configuration: must be >= %d", key, value, minimum)
        return default
    return value


def config_from_dict(doc: Optional[Dict[str, Any]]) -> ConversionConfig:
    """Build a ConversionConfig from a mapping, keeping defaults for bad or missing keys."""
    if not doc or not isinstance(doc, dict):
        return DEFAULT_CONFIG
    values = {key: _coerce(key, doc[key]) if key in doc else default for key, default in _DEFAULTS.items()}
    return ConversionConfig(**values)


def load_conversion_config(config_path: Optional[str] = None) -> ConversionConfig:
    """从 YAML 文件加载转换配置。

    Args:
        config_path: YAML file path. If None, the default conversion_config.yaml
            is tried.

    Returns:
        ConversionConfig with defaults for anything missing or invalid.

    Raises:
        ValidationError: If an explicit config_path is not a non-empty string.
    """
    if config_path is None:
        if not os.path.exists(DEFAULT_CONFIG_PATH):
            return DEFAULT_CONFIG
        config_path = DEFAULT_CONFIG_PATH
    else:
        validate_config_path(config_path)

    if not os.path.exists(config_path):
        logger.warning("Configuration file %s not found, using defaults", config_path)
        return DEFAULT_CONFIG

    with open(config_path, 'r', encoding='utf-8') as f:
        try:
            doc = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.warning("Configuration file %s is not valid YAML (%s), using defaults", config_path, e)
            return DEFAULT_CONFIG

    if not isinstance(doc, dict):
        # 文件为空或格式不正确，使用默认值
        return DEFAULT_CONFIG
    return config_from_dict(doc)


def resolve_config(config: Optional[ConversionConfig], load_default: bool = True) -> ConversionConfig:
    """Return ``config``, or the default configuration when it is None.

    With ``load_default`` the default comes from the configuration file,
    otherwise the built-in DEFAULT_CONFIG is returned without touching disk.

    Raises:
        ConfigurationError: If config is neither None nor a ConversionConfig.
    """
    if config is None:
        return load_conversion_config() if load_default else DEFAULT_CONFIG
    if not isinstance(config, ConversionConfig):
        raise ConfigurationError(f"config must be a ConversionConfig, got {type(config).__name__}")
    return config
