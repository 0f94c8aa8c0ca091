"""
===============================================================================
QUATCORE - Configuration
===============================================================================
YAML-backed settings for the command-line tools. The library itself takes
its tolerances as keyword arguments; this module only decides which values
the CLI passes in.

    epsilon          unit-norm check applied to `extract` input only.
                     Approximate equality (==) and the axis-extraction
                     singularity test always use constants.EPSILON.
    slerp_threshold  linear-fallback threshold for `slerp`, in (0, 1).
    precision        decimal places of printed numbers.
    samples          default number of `slerp` steps.
    log_level        root logging level (--verbose forces DEBUG).

Example file (config/quatcore.yaml):

    quatcore:
      epsilon: 1.0e-6
      slerp_threshold: 0.9995
      precision: 6
      samples: 11
      log_level: INFO
===============================================================================
"""

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

import yaml

from quatcore.constants import EPSILON, SLERP_DOT_THRESHOLD

logger = logging.getLogger(__name__)

_LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass(frozen=True)
class QuatConfig:
    """Settings shared by the quatcore CLI subcommands."""
    epsilon: float = EPSILON
    slerp_threshold: float = SLERP_DOT_THRESHOLD
    precision: int = 6
    samples: int = 11
    log_level: str = 'INFO'

    def validate(self) -> 'QuatConfig':
        """
        Check value ranges and return self.

        Raises
        ------
        ValueError
            On a non-positive epsilon, a threshold outside (0, 1), fewer
            than two samples, a negative precision or an unknown log level.
        """
        if self.epsilon <= 0.0:
            raise ValueError(f"epsilon must be positive, got {self.epsilon}")
        if not 0.0 < self.slerp_threshold < 1.0:
            raise ValueError(
                f"slerp_threshold must be in (0, 1), got {self.slerp_threshold}"
            )
        if self.samples < 2:
            raise ValueError(f"samples must be at least 2, got {self.samples}")
        if self.precision < 0:
            raise ValueError(f"precision must be non-negative, got {self.precision}")
        if self.log_level.upper() not in _LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {', '.join(_LOG_LEVELS)}, "
                f"got {self.log_level!r}"
            )
        return self


def load_config(config_path: Optional[Union[str, Path]] = None) -> QuatConfig:
    """
    Load settings from a YAML file.

    Args:
        config_path: Path to a YAML file with a top-level ``quatcore``
            mapping. ``None`` returns the defaults.

    Returns:
        Validated QuatConfig

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: on unknown keys or out-of-range values
    """
    config = QuatConfig()
    if config_path is None:
        return config

    logger.info("Loading configuration from: %s", config_path)
    with open(config_path, 'r') as f:
        raw = yaml.safe_load(f) or {}

    section = raw.get('quatcore', {}) if isinstance(raw, dict) else None
    if not isinstance(section, dict):
        raise ValueError(f"{config_path}: 'quatcore' must be a mapping")

    known = {f.name for f in fields(QuatConfig)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise ValueError(f"{config_path}: unknown settings {', '.join(unknown)}")

    overrides = {}
    for key, value in section.items():
        try:
            if key in ('precision', 'samples'):
                overrides[key] = int(value)
            elif key == 'log_level':
                overrides[key] = str(value).upper()
            else:
                overrides[key] = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{config_path}: invalid value for {key}: {value!r}") from exc

    return replace(config, **overrides).validate()
