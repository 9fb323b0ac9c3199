"""
Shared fixtures for testmap tests.

Provides a small set of components modelled on real cluster teams, plus
helpers to write component and corpus files into a temporary repository.
"""
import textwrap
from pathlib import Path

import pytest

from testmap.config.component import Component, ComponentMatcher
from testmap.registry import ComponentRegistry


@pytest.fixture
def router() -> Component:
    """Networking / router: owns ingress namespaces and Router tests."""
    return Component(
        name="Networking / router",
        default_jira_project="OCPBUGS",
        default_jira_component="Networking / router",
        matchers=[
            ComponentMatcher(
                sig="sig-network",
                include_all=["Router"],
                exclude_any=["DNS"],
                jira_component="Networking / router",
                capabilities=["Routing"],
            ),
            ComponentMatcher(
                include_any=["ns/openshift-console disruption"],
                jira_component="Networking / router",
                capabilities=["Disruption"],
                priority=20,
            ),
        ],
        operators=["ingress"],
        namespaces=["openshift-ingress", "openshift-ingress-operator"],
        variants=["Network:ovn"],
        test_renames={"[sig-network] Router serves routes": "[sig-network] router works"},
    )


@pytest.fixture
def storage() -> Component:
    """Storage: owns storage namespaces and sig-storage tests."""
    return Component(
        name="Storage",
        default_jira_project="OCPBUGS",
        default_jira_component="Storage",
        matchers=[
            ComponentMatcher(sig="sig-storage", jira_component="Storage"),
        ],
        operators=["storage"],
        namespaces=["storage", "openshift-cluster-csi-drivers"],
    )


@pytest.fixture
def console() -> Component:
    """Management Console: owns the console namespace only."""
    return Component(
        name="Management Console",
        default_jira_project="OCPBUGS",
        default_jira_component="Management Console",
        namespaces=["openshift-console"],
    )


@pytest.fixture
def registry(router, storage, console) -> ComponentRegistry:
    return ComponentRegistry([router, storage, console])


@pytest.fixture
def write_file(tmp_path):
    """Write dedented text to a file under tmp_path and return its path."""

    def _write(relative: str, content: str) -> Path:
        path = tmp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(content))
        return path

    return _write


COMPONENTS_YAML = """
components:
  - name: Networking / router
    jira_project: OCPBUGS
    jira_component: Networking / router
    operators: [ingress]
    namespaces: [openshift-ingress]
    test_renames:
      "[sig-network] Router serves routes": "[sig-network] router works"
    matchers:
      - sig: sig-network
        include_all: [Router]
        capabilities: [Routing]
  - name: Storage
    jira_project: OCPBUGS
    jira_component: Storage
    namespaces: [storage]
    matchers:
      - sig: sig-storage
"""


@pytest.fixture
def components_file(write_file) -> Path:
    return write_file("components/components.yaml", COMPONENTS_YAML)
