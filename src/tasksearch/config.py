#  Copyright (c) 2025 Tom Villani, Ph.D.

"""Configuration file discovery and loading.

Search options can be stored in ``.tasksearch.toml``, ``.tasksearch.yaml``,
``.tasksearch.yml``, ``.tasksearch.json`` or in the ``[tool.tasksearch]``
table of ``pyproject.toml``. Options may sit at the top level of the file or
under a ``search`` section; the browser client's camelCase names
(``matchType``, ``debounceDelay``...) are accepted as aliases.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found,unused-ignore]

import yaml

from tasksearch.constants import CONFIG_FILENAMES
from tasksearch.exceptions import ConfigurationError
from tasksearch.options.search import SearchOptions

logger = logging.getLogger(__name__)

_KEY_ALIASES = {
    "searchFields": "search_fields",
    "matchType": "match_type",
    "caseInsensitive": "case_insensitive",
    "rankResults": "rank_results",
    "maxResults": "max_results",
    "debounceDelay": "debounce_delay_ms",
    "debounceDelayMs": "debounce_delay_ms",
    "sortBy": "sort_by",
    "historyLimit": "history_limit",
    "maxSuggestions": "max_suggestions",
    "minSuggestionLength": "min_suggestion_length",
    "fuzzyThreshold": "fuzzy_threshold",
}


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Return the ``[tool.tasksearch]`` table, or an empty dict when absent."""
    data = _load_toml_config(pyproject_path)
    section = data.get("tool", {}).get("tasksearch", {})
    if not isinstance(section, dict):
        raise ConfigurationError(
            f"[tool.tasksearch] section in {pyproject_path} must be a table, got {type(section).__name__}",
            config_path=pyproject_path,
        )
    return section


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Walk from ``start_dir`` (default: cwd) to the root looking for a config file.

    Dedicated config files win over ``pyproject.toml`` in the same directory,
    and ``pyproject.toml`` only counts when it has a ``[tool.tasksearch]``
    table. Unreadable ``pyproject.toml`` files are skipped.
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except ConfigurationError as exc:
                logger.debug("Skipping unreadable %s: %s", pyproject_path, exc)

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def discover_config_file(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find a config file in the parent directories, then the home directory."""
    found = find_config_in_parents(start_dir)
    if found:
        return found

    home = Path.home()
    for filename in CONFIG_FILENAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path

    return None


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load a JSON, TOML, YAML or ``pyproject.toml`` configuration file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        Configuration dictionary loaded from file

    Raises
    ------
    ConfigurationError
        If the file is missing, unreadable, malformed or of an unknown type

    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigurationError(f"Configuration file does not exist: {config_path}", config_path=config_path)
    if not config_path.is_file():
        raise ConfigurationError(f"Configuration path is not a file: {config_path}", config_path=config_path)

    ext = config_path.suffix.lower()
    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)
    if ext == ".toml":
        return _load_toml_config(config_path)
    if ext in (".yaml", ".yml"):
        return _load_yaml_config(config_path)
    if ext == ".json":
        return _load_json_config(config_path)
    raise ConfigurationError(
        f"Unsupported config file format: {ext}. Use .json, .toml, or .yaml", config_path=config_path
    )


def _load_toml_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in config file {config_path}: {e}", config_path, e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading TOML config {config_path}: {e}", config_path, e) from e


def _load_json_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in config file {config_path}: {e}", config_path, e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading JSON config {config_path}: {e}", config_path, e) from e

    if not isinstance(config, dict):
        raise ConfigurationError(
            f"JSON config file must contain an object, got {type(config).__name__}", config_path=config_path
        )
    return config


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}", config_path, e) from e
    except OSError as e:
        raise ConfigurationError(f"Error reading YAML config {config_path}: {e}", config_path, e) from e

    # An empty YAML document loads as None
    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigurationError(
            f"YAML config file must contain a mapping, got {type(config).__name__}", config_path=config_path
        )
    return config


def load_config_with_priority(
    explicit_path: Optional[str | Path] = None,
    env_var_path: Optional[str] = None,
    *,
    start_dir: Optional[Path] = None,
) -> Dict[str, Any]:
    """Load configuration with proper priority handling.

    Priority order (highest to lowest):
    1. Explicit config file path (``--config``)
    2. Environment variable config path (``TASKSEARCH_CONFIG``)
    3. Auto-discovered config file

    Returns an empty dict when nothing is configured.
    """
    if explicit_path:
        return load_config_file(explicit_path)
    if env_var_path:
        return load_config_file(env_var_path)

    discovered = discover_config_file(start_dir)
    if discovered is None:
        return {}
    logger.debug("Using configuration file %s", discovered)
    return load_config_file(discovered)


def options_from_config(config: Mapping[str, Any], base: SearchOptions | None = None) -> SearchOptions:
    """Build :class:`SearchOptions` from a loaded configuration mapping.

    Unknown keys are logged and ignored. Invalid values raise
    :class:`ConfigurationError`.
    """
    options = base or SearchOptions()
    section = config.get("search", config)
    if not isinstance(section, Mapping):
        raise ConfigurationError(f"'search' section must be a mapping, got {type(section).__name__}")

    valid_fields = SearchOptions.field_names()
    updates: Dict[str, Any] = {}
    for key, value in section.items():
        name = _KEY_ALIASES.get(key, key)
        if name not in valid_fields:
            logger.warning("Ignoring unknown search option '%s'", key)
            continue
        updates[name] = tuple(value) if name == "search_fields" and isinstance(value, list) else value

    if not updates:
        return options
    try:
        return options.create_updated(**updates)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Invalid search configuration: {exc}", original_error=exc) from exc
