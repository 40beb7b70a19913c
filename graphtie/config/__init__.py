"""
Graphtie v0.1.0

Configuration management for Graphtie.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

from .schema import DEFAULT_CONFIG, ConfigValidationError, load_config, apply_overrides, save_config_template, validate_config
from .settings import ExtractionSettings

__all__ = [
    "DEFAULT_CONFIG",
    "load_config",
    "apply_overrides",
    "save_config_template",
    "validate_config",
    "ConfigValidationError",
    "ExtractionSettings",
]
