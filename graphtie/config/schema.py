"""
Graphtie v0.1.0

Configuration schema for Graphtie.

Defines all available configuration parameters with defaults and validation.

Author: Graphtie Development Team
License: Dual License (Academic/Commercial) - See LICENSE_ACADEMIC.md and LICENSE_COMMERCIAL.md
"""

import copy
from typing import Dict, Any, Optional, List
from pathlib import Path
import yaml


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


VALID_POLICIES = ['greedy', 'overlapping']
VALID_LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


# Default configuration values
DEFAULT_CONFIG = {
    # ========================================================================
    # Inputs
    # ========================================================================
    'input': {
        'graph_file': None,  # path_id<TAB>12+ 7- ... per line
        'node_file': None,  # id<TAB>sequence per line
    },

    # ========================================================================
    # Target Region
    # ========================================================================
    'target': {
        'path_id': None,
        'start': 0,  # First node index included
        'stop': None,  # First node index excluded (None = end of path)
    },

    # ========================================================================
    # Chain Matching
    # ========================================================================
    'matching': {
        'min_fraction': 0.5,  # Fraction of distinct target nodes a window must share
        'context_size': 0,  # Nodes added on each side of an accepted window
        'policy': 'greedy',  # 'greedy', 'overlapping'
    },

    # ========================================================================
    # Graph Properties
    # ========================================================================
    'graph': {
        'kmer_size': 0,  # 0 = nodes do not overlap
        'gfa_version': '1.0',
        'include_sequence': True,
        'max_inline_sequence': 100000,  # Longer sequences written as '*'
    },

    # ========================================================================
    # Output
    # ========================================================================
    'output': {
        'gfa': 'subgraph.gfa',
        'tmp_dir': None,  # Link log directory (default: next to the GFA)

        'colors': {
            'enabled': False,
            'path': None,
        },
        'coordinates': {
            'enabled': False,
            'path': None,
        },

        # Logging
        'logging': {
            'level': 'INFO',  # 'DEBUG', 'INFO', 'WARNING', 'ERROR'
            'log_file': None,
        },
    },
}


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from file or return defaults.

    Args:
        config_path: Path to YAML config file (None = use defaults)

    Returns:
        Configuration dictionary

    Raises:
        ConfigValidationError: If the file or one of its sections is not a mapping
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        config_path = Path(config_path)
        if config_path.exists():
            with open(config_path) as f:
                user_config = yaml.safe_load(f)

            if user_config is not None and not isinstance(user_config, dict):
                raise ConfigValidationError(
                    [f"{config_path}: top level must be a mapping, got {type(user_config).__name__}"]
                )
            if user_config:
                # Deep merge user config into defaults
                config = _deep_merge(config, user_config)

            errors = _mapping_errors(config, DEFAULT_CONFIG)
            if errors:
                raise ConfigValidationError(errors)

    return config


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if value is None and isinstance(result.get(key), dict):
            # Empty section: keep defaults
            continue
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _mapping_errors(config: Dict[str, Any], defaults: Dict[str, Any], prefix: str = '') -> List[str]:
    """List every section that the defaults define as a mapping but the config does not."""
    errors = []
    for key, default in defaults.items():
        if not isinstance(default, dict):
            continue
        value = config.get(key)
        if not isinstance(value, dict):
            errors.append(f"Invalid section {prefix}{key}: must be a mapping, got {type(value).__name__}")
        else:
            errors.extend(_mapping_errors(value, default, f"{prefix}{key}."))
    return errors


def apply_overrides(config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply command-line overrides to a configuration.

    Args:
        config: Configuration dictionary
        overrides: Values keyed by dotted path (e.g., 'matching.min_fraction');
                   None values are ignored

    Returns:
        New configuration dictionary with overrides applied
    """
    result = copy.deepcopy(config)

    for key, value in overrides.items():
        if value is None:
            continue

        keys = key.split('.')
        target = result
        for k in keys[:-1]:
            if not isinstance(target.get(k), dict):
                target[k] = {}
            target = target[k]
        target[keys[-1]] = value

    return result


def save_config_template(output_path: Path):
    """
    Save a configuration template to file.

    Args:
        output_path: Output file path
    """
    with open(output_path, 'w') as f:
        yaml.dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _section(parent: Dict[str, Any], key: str, name: str, errors: List[str]) -> Dict[str, Any]:
    """Return a config section, recording an error if it is not a mapping."""
    value = parent.get(key)
    if value is None:
        value = {}
    if not isinstance(value, dict):
        errors.append(f"Invalid section {name}: must be a mapping, got {type(value).__name__}")
        return {}
    return value


def validate_config(config: Dict[str, Any]) -> List[str]:
    """
    Validate configuration dictionary.

    Sections that are empty or not mappings are reported instead of read,
    so a hand-edited file yields errors rather than a crash.

    Args:
        config: Configuration to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    # Inputs
    inputs = _section(config, 'input', 'input', errors)
    for key in ['graph_file', 'node_file']:
        if not inputs.get(key):
            errors.append(f"Missing required setting: input.{key}")

    # Target range
    target = _section(config, 'target', 'target', errors)
    if not target.get('path_id'):
        errors.append("Missing required setting: target.path_id")

    start = target.get('start', 0)
    stop = target.get('stop')
    if not _is_int(start) or start < 0:
        errors.append(f"Invalid target.start: {start} (must be an integer >= 0)")
    if stop is not None:
        if not _is_int(stop):
            errors.append(f"Invalid target.stop: {stop} (must be an integer)")
        elif _is_int(start) and stop <= start:
            errors.append(f"Invalid target range: stop ({stop}) must be greater than start ({start})")

    # Matching
    matching = _section(config, 'matching', 'matching', errors)
    fraction = matching.get('min_fraction')
    if not isinstance(fraction, (int, float)) or isinstance(fraction, bool) or not 0.0 <= fraction <= 1.0:
        errors.append(f"Invalid matching.min_fraction: {fraction} (must be within [0, 1])")

    context = matching.get('context_size')
    if not _is_int(context) or context < 0:
        errors.append(f"Invalid matching.context_size: {context} (must be an integer >= 0)")

    if matching.get('policy') not in VALID_POLICIES:
        errors.append(f"Invalid matching.policy: {matching.get('policy')} (choose from {', '.join(VALID_POLICIES)})")

    # Graph
    graph = _section(config, 'graph', 'graph', errors)
    kmer = graph.get('kmer_size')
    if not _is_int(kmer) or kmer < 0:
        errors.append(f"Invalid graph.kmer_size: {kmer} (must be an integer >= 0)")

    max_inline = graph.get('max_inline_sequence', 100000)
    if not _is_int(max_inline) or max_inline < 0:
        errors.append(f"Invalid graph.max_inline_sequence: {max_inline} (must be an integer >= 0)")

    # Outputs
    output = _section(config, 'output', 'output', errors)
    if not output.get('gfa'):
        errors.append("Missing required setting: output.gfa")

    for table in ['colors', 'coordinates']:
        section = _section(output, table, f"output.{table}", errors)
        if section.get('enabled') and not section.get('path'):
            errors.append(f"output.{table}.enabled requires output.{table}.path")

    level = _section(output, 'logging', 'output.logging', errors).get('level', 'INFO')
    if str(level).upper() not in VALID_LOG_LEVELS:
        errors.append(f"Invalid output.logging.level: {level}")

    return errors
