"""
Registry tests: cross-component arbitration and ownership records.
"""
import logging

import pytest

from testmap.api.types import TestInfo
from testmap.config.component import Component, ComponentMatcher
from testmap.registry import ComponentRegistry


pytestmark = pytest.mark.registry


def test_higher_priority_matcher_beats_namespace_owner(registry):
    """
    Given: Router claims console disruption tests at priority 20
    When: Identifying a test in ns/openshift-console
    Then: Router wins over the console namespace owner (priority 10)
    """
    test = TestInfo(name="[sig-network] ns/openshift-console disruption should be zero")

    result = registry.identify(test)

    assert sorted(c.component.name for c in result.candidates) == [
        "Management Console", "Networking / router"
    ]
    assert result.chosen.component.name == "Networking / router"
    assert not result.is_ambiguous


def test_namespace_owner_wins_when_alone(registry):
    ownership = registry.ownership(TestInfo(name="pods ready ns/openshift-console"))

    assert ownership.component == "Management Console"
    assert ownership.jira_component == "Management Console"
    assert ownership.priority == 10


def test_tie_at_top_priority_is_ambiguous(caplog):
    """
    Given: Two components whose matchers claim the same test at priority 0
    When: Identifying the test
    Then: No owner is chosen and a warning names both components
    """
    registry = ComponentRegistry([
        Component(name="A", matchers=[ComponentMatcher(include_any=["shared"])]),
        Component(name="B", matchers=[ComponentMatcher(include_any=["shared"])]),
    ])

    with caplog.at_level(logging.WARNING, logger="testmap.registry"):
        result = registry.identify(TestInfo(name="shared test"))

    assert result.is_ambiguous
    assert result.chosen is None
    assert [c.component.name for c in result.contenders] == ["A", "B"]
    assert "A, B" in caplog.text


def test_unmatched_test_goes_to_unknown(registry):
    test = TestInfo(name="[sig-auth] tokens expire", suite="openshift-tests")

    result = registry.identify(test)
    ownership = registry.ownership(test, unknown_component="Unowned", unknown_jira_component="Triage")

    assert not result.is_matched
    assert not result.is_ambiguous
    assert ownership.component == "Unowned"
    assert ownership.jira_component == "Triage"
    assert ownership.oldest_name == test.name
    assert ownership.id == test.id


def test_ownership_record_carries_matcher_metadata(registry):
    test = TestInfo(name="[sig-network] Router serves routes", suite="openshift-tests")

    ownership = registry.ownership(test)

    assert ownership.to_dict() == {
        "id": test.id,
        "name": test.name,
        "suite": "openshift-tests",
        "component": "Networking / router",
        "jira_project": "OCPBUGS",
        "jira_component": "Networking / router",
        "capabilities": ["Routing"],
        "priority": 0,
        "oldest_name": "[sig-network] router works",
    }


def test_matcher_without_jira_component_uses_component_default():
    registry = ComponentRegistry([
        Component(name="Etcd", default_jira_component="Etcd",
                  matchers=[ComponentMatcher(include_any=["etcd"])]),
    ])

    assert registry.ownership(TestInfo(name="etcd is healthy")).jira_component == "Etcd"


def test_test_id_is_stable_and_suite_scoped():
    a = TestInfo(name="same name", suite="one")
    assert a.id == TestInfo(name="same name", suite="one").id
    assert a.id != TestInfo(name="same name", suite="two").id


def test_registry_accessors(registry, router):
    assert len(registry) == 3
    assert registry.get("Networking / router") is router
    assert registry.get("missing") is None
    assert [c.name for c in registry.components] == [
        "Management Console", "Networking / router", "Storage"
    ]


def test_register_replaces_duplicate_name(router):
    registry = ComponentRegistry([router])
    replacement = Component(name=router.name)

    registry.register(replacement)

    assert registry.get(router.name) is replacement
    assert len(registry) == 1


def test_namespace_owners(registry):
    assert registry.namespace_owners() == {
        "openshift-cluster-csi-drivers": ["Storage"],
        "openshift-console": ["Management Console"],
        "openshift-ingress": ["Networking / router"],
        "openshift-ingress-operator": ["Networking / router"],
        "storage": ["Storage"],
    }
