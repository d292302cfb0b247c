# core/config.py
# -*- coding: utf-8 -*-
"""
PSO and data-generation parameters: defaults, validation and INI files.

Parameters travel as plain dictionaries. ``build_pso_params`` merges
caller overrides over ``DEFAULT_PSO_PARAMS`` and validates the result,
raising ``PSOConfigError`` on the first invalid value. Configuration
files are INI files with a ``[PSO]`` and a ``[DATA_GENERATION]``
section; ``[PSO]`` may alternatively carry all engine parameters as a
single JSON object under the ``params`` key.
"""

import configparser
import json
import logging
import os
from typing import Any, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class PSOConfigError(ValueError):
    """Raised for invalid engine or data-generation parameters."""


DEFAULT_PSO_PARAMS: Dict[str, Any] = {
    'swarm_size': 30,
    'iterations': 200,
    'inertia_weight': 0.7,      # w
    'cognitive_coeff': 1.5,     # c1
    'social_coeff': 1.5,        # c2
    'velocity_clamp': 5,
    'random_seed': None,
    'mutation_rate': 0.02,
    'adaptive_inertia': True,
    'use_2opt_mutation': True,
    'stagnation_threshold': 20,
}

DEFAULT_DATA_PARAMS: Dict[str, Any] = {
    'num_points': 15,
    'width': 100.0,
    'height': 100.0,
    'center_latitude': None,
    'center_longitude': None,
    'radius_km': 5.0,
    'seed': None,
}

# camelCase names used by the original front-end configuration
PARAM_ALIASES = {
    'swarmSize': 'swarm_size',
    'inertiaWeight': 'inertia_weight',
    'cognitiveCoeff': 'cognitive_coeff',
    'socialCoeff': 'social_coeff',
    'velocityClamp': 'velocity_clamp',
    'randomSeed': 'random_seed',
    'mutationRate': 'mutation_rate',
    'adaptiveInertia': 'adaptive_inertia',
    'use2OptMutation': 'use_2opt_mutation',
    'stagnationThreshold': 'stagnation_threshold',
}

_INT_PARAMS = ('swarm_size', 'iterations', 'velocity_clamp', 'stagnation_threshold')
_FLOAT_PARAMS = ('inertia_weight', 'cognitive_coeff', 'social_coeff', 'mutation_rate')
_BOOL_PARAMS = ('adaptive_inertia', 'use_2opt_mutation')
_TRUE_STRINGS = ('true', 'yes', '1', 'on')
_FALSE_STRINGS = ('false', 'no', '0', 'off')


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def normalize_param_keys(params: Dict[str, Any]) -> Dict[str, Any]:
    """Maps camelCase aliases onto their snake_case parameter names."""
    return {PARAM_ALIASES.get(key, key): value for key, value in params.items()}


def validate_pso_params(params: Dict[str, Any]) -> Dict[str, Any]:
    """
    Checks a complete PSO parameter dictionary.

    Returns:
        A copy of ``params`` with floats coerced to ``float``.

    Raises:
        PSOConfigError: for unknown keys or out-of-range values.
    """
    unknown = sorted(set(params) - set(DEFAULT_PSO_PARAMS))
    if unknown:
        raise PSOConfigError(f"Unknown PSO parameter(s): {', '.join(unknown)}")

    for key in ('swarm_size', 'iterations', 'velocity_clamp'):
        if not _is_int(params[key]) or params[key] <= 0:
            raise PSOConfigError(f"{key} must be a positive integer, got {params[key]!r}.")
    if not _is_int(params['stagnation_threshold']) or params['stagnation_threshold'] < 0:
        raise PSOConfigError(
            f"stagnation_threshold must be a non-negative integer, got {params['stagnation_threshold']!r}."
        )
    for key in ('inertia_weight', 'mutation_rate'):
        if not _is_number(params[key]) or not (0.0 <= params[key] <= 1.0):
            raise PSOConfigError(f"{key} must be between 0.0 and 1.0, got {params[key]!r}.")
    for key in ('cognitive_coeff', 'social_coeff'):
        if not _is_number(params[key]) or params[key] < 0:
            raise PSOConfigError(f"{key} must be a non-negative number, got {params[key]!r}.")
    for key in _BOOL_PARAMS:
        if not isinstance(params[key], bool):
            raise PSOConfigError(f"{key} must be a boolean, got {params[key]!r}.")
    seed = params['random_seed']
    if seed is not None and not _is_int(seed):
        raise PSOConfigError(f"random_seed must be an integer or None, got {seed!r}.")

    validated = dict(params)
    for key in _FLOAT_PARAMS:
        validated[key] = float(validated[key])
    return validated


def build_pso_params(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merges ``overrides`` over the defaults and validates the result."""
    pso_params = DEFAULT_PSO_PARAMS.copy()
    if overrides:
        if not isinstance(overrides, dict):
            raise PSOConfigError(f"PSO parameters must be a dictionary, got {type(overrides).__name__}.")
        pso_params.update(normalize_param_keys(overrides))
    return validate_pso_params(pso_params)


def build_data_params(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merges ``overrides`` over the data-generation defaults and validates them."""
    data_params = DEFAULT_DATA_PARAMS.copy()
    if overrides:
        data_params.update(overrides)

    unknown = sorted(set(data_params) - set(DEFAULT_DATA_PARAMS))
    if unknown:
        raise PSOConfigError(f"Unknown data generation parameter(s): {', '.join(unknown)}")
    if not _is_int(data_params['num_points']) or data_params['num_points'] < 0:
        raise PSOConfigError("num_points must be a non-negative integer.")
    for key in ('width', 'height', 'radius_km'):
        if not _is_number(data_params[key]) or data_params[key] < 0:
            raise PSOConfigError(f"{key} must be a non-negative number.")
    has_lat = data_params['center_latitude'] is not None
    has_lon = data_params['center_longitude'] is not None
    if has_lat != has_lon:
        raise PSOConfigError("center_latitude and center_longitude must be given together.")
    if data_params['seed'] is not None and not _is_int(data_params['seed']):
        raise PSOConfigError("seed must be an integer or None.")
    return data_params


# --- INI Files ---

def _parse_value(raw: str, default: Any, section: str, key: str) -> Any:
    """Converts an INI string using the type of the default value."""
    value_str = raw.strip()
    if value_str.lower() in ('', 'none'):
        return None
    try:
        if isinstance(default, bool) or key in _BOOL_PARAMS:
            lowered = value_str.lower()
            if lowered in _TRUE_STRINGS:
                return True
            if lowered in _FALSE_STRINGS:
                return False
            raise ValueError(f"not a boolean: {value_str!r}")
        if key in _INT_PARAMS or key in ('random_seed', 'num_points', 'seed'):
            return int(float(value_str)) if float(value_str).is_integer() else float(value_str)
        return float(value_str)
    except ValueError as e:
        raise PSOConfigError(f"Invalid value for [{section}] {key}: {raw!r} ({e})") from e


def _read_section(config: configparser.ConfigParser, section: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
    values = {}
    if not config.has_section(section):
        return values
    for option, raw in config.items(section):
        if option == 'params':
            continue
        key = PARAM_ALIASES.get(option, option)
        values[key] = _parse_value(raw, defaults.get(key), section, key)
    return values


def load_config(path: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Loads PSO and data-generation parameters from an INI file.

    Args:
        path: Path to the INI file.

    Returns:
        (pso_params, data_params), both merged over the defaults and
        validated. A missing file yields the defaults.

    Raises:
        PSOConfigError: if the file cannot be parsed or holds invalid values.
    """
    if not os.path.exists(path):
        logger.warning("Config file not found: %s. Using default parameters.", path)
        return build_pso_params(), build_data_params()

    config = configparser.ConfigParser(interpolation=None)
    # Keep option names case-sensitive so camelCase aliases survive
    config.optionxform = str
    try:
        config.read(path, encoding='utf-8')
    except configparser.Error as e:
        raise PSOConfigError(f"Error parsing config file {path}: {e}") from e

    pso_overrides = {}
    if config.has_option('PSO', 'params'):
        try:
            json_params = json.loads(config.get('PSO', 'params'))
        except json.JSONDecodeError as e:
            raise PSOConfigError(f"[PSO] params is not valid JSON: {e}") from e
        if not isinstance(json_params, dict):
            raise PSOConfigError("[PSO] params must hold a JSON object.")
        pso_overrides.update(json_params)
    pso_overrides.update(_read_section(config, 'PSO', DEFAULT_PSO_PARAMS))
    data_overrides = _read_section(config, 'DATA_GENERATION', DEFAULT_DATA_PARAMS)

    logger.info("Configuration loaded from %s.", path)
    return build_pso_params(pso_overrides), build_data_params(data_overrides)


def save_config(path: str, pso_params: Dict[str, Any], data_params: Optional[Dict[str, Any]] = None) -> None:
    """Writes parameters to an INI file readable by ``load_config``."""
    config = configparser.ConfigParser(interpolation=None)
    config.optionxform = str
    config['PSO'] = {key: str(value) for key, value in build_pso_params(pso_params).items()}
    config['DATA_GENERATION'] = {key: str(value) for key, value in build_data_params(data_params).items()}

    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as configfile:
        config.write(configfile)
    logger.info("Configuration saved to %s.", path)
