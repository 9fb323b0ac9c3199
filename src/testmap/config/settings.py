"""
testmap Configuration Loader.

Loads project settings from .testmap/config.yaml and locates the
repository root they apply to.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

import yaml

from testmap.config.loader import ComponentConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = ".testmap"
CONFIG_FILE = "config.yaml"

# Directories that mark a repo root, in order of preference
ROOT_MARKERS = (CONFIG_DIR, "components")


def load_testmap_config(repo_root: Path) -> Dict[str, Any]:
    """
    Load .testmap/config.yaml configuration file.

    Args:
        repo_root: Repository root path

    Returns:
        Parsed configuration dict, or empty dict if file doesn't exist

    Example config:
        components:
          paths:
            - components/
            - extra/storage.yaml
        mapping:
          unknown_component: Unknown
          unknown_jira_component: Unknown
          fail_on_ambiguous: false
    """
    config_path = repo_root / CONFIG_DIR / CONFIG_FILE

    if not config_path.exists():
        return {}

    try:
        with open(config_path) as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning("Ignoring unreadable settings %s: %s", config_path, e)
        return {}

    if not isinstance(config, dict):
        return {}
    return config


def _section(repo_root: Path, name: str, defaults: Dict[str, Any]) -> Dict[str, Any]:
    config = load_testmap_config(repo_root)
    section = config.get(name) or {}
    if not isinstance(section, dict):
        logger.warning("Ignoring settings section '%s': expected a mapping", name)
        section = {}

    for key, default_value in defaults.items():
        if section.get(key) is None:
            section[key] = default_value

    return section


def get_components_config(repo_root: Path) -> Dict[str, Any]:
    """
    Get component discovery configuration.

    Returns:
        Components configuration dict with defaults applied
    """
    return _section(repo_root, "components", {"paths": ["components"]})


def get_mapping_config(repo_root: Path) -> Dict[str, Any]:
    """
    Get test mapping configuration.

    Returns:
        Mapping configuration dict with defaults applied
    """
    defaults = {
        "unknown_component": "Unknown",
        "unknown_jira_component": "Unknown",
        "fail_on_ambiguous": False,
    }
    return _section(repo_root, "mapping", defaults)


def component_paths(repo_root: Path) -> List[Path]:
    """
    Resolve configured component paths relative to the repo root.

    Raises:
        ComponentConfigError: If components.paths is not a path or a list of paths
    """
    paths = get_components_config(repo_root)["paths"]
    if isinstance(paths, str):
        paths = [paths]
    if not isinstance(paths, list) or not all(isinstance(p, str) for p in paths):
        raise ComponentConfigError(
            f"{repo_root / CONFIG_DIR / CONFIG_FILE}: components.paths: "
            "expected a path or a list of paths"
        )
    return [repo_root / p for p in paths]


def find_repo_root(start: Path = None) -> Path:
    """
    Find the mapping repository root by searching upward.

    A directory is the root if it holds .testmap/ settings or, failing
    that, a components/ directory. The nearest directory holding either
    marker wins.

    Args:
        start: Starting directory (default: cwd)

    Returns:
        Path to repo root, or the starting directory if no marker is found
    """
    start = (start or Path.cwd()).resolve()

    for current in (start, *start.parents):
        for marker in ROOT_MARKERS:
            if (current / marker).is_dir():
                logger.debug("Found repo root %s (%s/)", current, marker)
                return current

    logger.debug("No repo root marker above %s, using it as root", start)
    return start
