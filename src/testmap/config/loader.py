"""
Component definition loader.

Reads component definitions from YAML files and builds Component objects.
A file may hold a `components:` list, a bare list, or a single component
mapping. Directories are scanned for `*.yaml` / `*.yml` files in sorted order.

Example:
    components:
      - name: Networking / router
        jira_project: OCPBUGS
        jira_component: Networking / router
        operators: [ingress]
        namespaces: [openshift-ingress]
        matchers:
          - sig: sig-network
            include_all: [Router]
            capabilities: [Routing]
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

import yaml

from testmap.config.component import Component, ComponentMatcher

logger = logging.getLogger(__name__)

COMPONENT_KEYS = {
    "name", "jira_project", "jira_component", "matchers", "operators",
    "namespaces", "variants", "test_renames",
}
MATCHER_KEYS = {
    "sig", "suite", "include_all", "include_any", "exclude_all", "exclude_any",
    "jira_component", "capabilities", "priority",
}
_LIST_FIELDS = ("include_all", "include_any", "exclude_all", "exclude_any", "capabilities")


class ComponentConfigError(Exception):
    """Raised when a component definition cannot be loaded."""


def _string(value: Any, where: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, (str, int, float)) or isinstance(value, bool):
        raise ComponentConfigError(f"{where}: expected a string, got {type(value).__name__}")
    return str(value)


def _string_list(value: Any, where: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ComponentConfigError(f"{where}: expected a list, got {type(value).__name__}")
    return [_string(item, where) for item in value]


def _warn_unknown(data: Dict[str, Any], known: set, where: str) -> None:
    for key in sorted(set(data) - known):
        logger.warning("%s: ignoring unknown key '%s'", where, key)


def parse_matcher(data: Any, default_jira_component: str, where: str) -> ComponentMatcher:
    """Build a ComponentMatcher; jira_component defaults to the component's."""
    if not isinstance(data, dict):
        raise ComponentConfigError(f"{where}: matcher must be a mapping")
    _warn_unknown(data, MATCHER_KEYS, where)

    priority = data.get("priority", 0)
    if not isinstance(priority, int) or isinstance(priority, bool):
        raise ComponentConfigError(f"{where}: priority must be an integer")

    lists = {key: _string_list(data.get(key), f"{where}.{key}") for key in _LIST_FIELDS}
    return ComponentMatcher(
        sig=_string(data.get("sig"), f"{where}.sig"),
        suite=_string(data.get("suite"), f"{where}.suite"),
        jira_component=_string(data.get("jira_component"), f"{where}.jira_component")
        or default_jira_component,
        priority=priority,
        **lists,
    )


def parse_component(data: Any, where: str = "component") -> Component:
    """Build a Component from a parsed YAML mapping."""
    if not isinstance(data, dict):
        raise ComponentConfigError(f"{where}: component must be a mapping")

    name = _string(data.get("name"), f"{where}.name")
    if not name:
        raise ComponentConfigError(f"{where}: component is missing 'name'")
    where = f"{where} '{name}'"
    _warn_unknown(data, COMPONENT_KEYS, where)

    jira_component = _string(data.get("jira_component"), f"{where}.jira_component")

    raw_matchers = data.get("matchers") or []
    if not isinstance(raw_matchers, list):
        raise ComponentConfigError(f"{where}.matchers: expected a list")
    matchers = [
        parse_matcher(m, jira_component, f"{where}.matchers[{i}]")
        for i, m in enumerate(raw_matchers)
    ]

    renames = data.get("test_renames") or {}
    if not isinstance(renames, dict):
        raise ComponentConfigError(f"{where}.test_renames: expected a mapping")

    return Component(
        name=name,
        default_jira_project=_string(data.get("jira_project"), f"{where}.jira_project"),
        default_jira_component=jira_component,
        matchers=matchers,
        operators=_string_list(data.get("operators"), f"{where}.operators"),
        namespaces=_string_list(data.get("namespaces"), f"{where}.namespaces"),
        variants=_string_list(data.get("variants"), f"{where}.variants"),
        test_renames={
            _string(k, f"{where}.test_renames"): _string(v, f"{where}.test_renames")
            for k, v in renames.items()
        },
    )


def parse_components(document: Any, source: str = "<string>") -> List[Component]:
    """Build components from a parsed YAML document."""
    if document is None:
        return []
    if isinstance(document, dict) and "components" in document:
        document = document["components"] or []
    if isinstance(document, dict):
        document = [document]
    if not isinstance(document, list):
        raise ComponentConfigError(
            f"{source}: expected a component mapping or list, got {type(document).__name__}"
        )
    return [
        parse_component(item, f"{source}[{i}]") for i, item in enumerate(document)
    ]


def load_component_file(path: Path) -> List[Component]:
    """Load every component defined in one YAML file."""
    try:
        with open(path) as f:
            document = yaml.safe_load(f)
    except OSError as e:
        raise ComponentConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ComponentConfigError(f"Invalid YAML in {path}: {e}") from e

    components = parse_components(document, str(path))
    logger.debug("Loaded %d component(s) from %s", len(components), path)
    return components


def load_components(paths: Iterable[Path]) -> List[Component]:
    """
    Load components from files and directories.

    Args:
        paths: YAML files, or directories scanned for *.yaml / *.yml

    Returns:
        Components in load order

    Raises:
        ComponentConfigError: If a path is missing or a definition is malformed
    """
    components: List[Component] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            files = sorted(
                p for p in path.rglob("*") if p.is_file() and p.suffix in (".yaml", ".yml")
            )
            for file in files:
                components.extend(load_component_file(file))
        elif path.is_file():
            components.extend(load_component_file(path))
        else:
            raise ComponentConfigError(f"Component path not found: {path}")

    logger.info("Loaded %d component(s)", len(components))
    return components
