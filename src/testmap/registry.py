"""
Component Registry
==================
Coordinates ownership resolution across every component.

Each component resolves a test independently. The registry collects every
component that claims the test and keeps the one with the highest priority.
When several components tie at the highest priority the test is ambiguous
and is not attributed to any of them.

Architecture:
- Candidate: a component together with the rule that matched
- Identification: arbitration outcome for one test
- ComponentRegistry: holds components, arbitrates, builds TestOwnership records
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from testmap.api.types import TestInfo, TestOwnership
from testmap.config.component import Component, ComponentMatcher

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    component: Component
    matcher: ComponentMatcher

    @property
    def priority(self) -> int:
        return self.matcher.priority


@dataclass
class Identification:
    """
    Result of identifying the owner of a test.

    Attributes:
        test: The test being identified
        candidates: Every component that claimed the test, in registry order
        chosen: The winning candidate, or None if unmatched or ambiguous
    """
    test: TestInfo
    candidates: List[Candidate] = field(default_factory=list)
    chosen: Optional[Candidate] = None

    @property
    def is_matched(self) -> bool:
        return self.chosen is not None

    @property
    def is_ambiguous(self) -> bool:
        """True if several components tie at the highest priority."""
        return bool(self.candidates) and self.chosen is None

    @property
    def contenders(self) -> List[Candidate]:
        """Candidates sharing the highest priority."""
        if not self.candidates:
            return []
        top = max(c.priority for c in self.candidates)
        return [c for c in self.candidates if c.priority == top]


class ComponentRegistry:
    """Registry of all components a test may be attributed to."""

    def __init__(self, components: Optional[Iterable[Component]] = None):
        self._components: Dict[str, Component] = {}
        for component in components or []:
            self.register(component)

    def register(self, component: Component) -> None:
        """Register a component; a later registration replaces an earlier one."""
        if component.name in self._components:
            logger.warning("Component '%s' registered twice, replacing", component.name)
        self._components[component.name] = component

    def get(self, name: str) -> Optional[Component]:
        return self._components.get(name)

    @property
    def components(self) -> List[Component]:
        """Registered components sorted by name."""
        return [self._components[name] for name in sorted(self._components)]

    def __len__(self) -> int:
        return len(self._components)

    def identify(self, test: TestInfo) -> Identification:
        """
        Resolve a test against every component and arbitrate by priority.
        """
        candidates = []
        for component in self._components.values():
            matcher = component.find_match(test)
            if matcher is not None:
                candidates.append(Candidate(component, matcher))

        result = Identification(test=test, candidates=candidates)
        contenders = result.contenders
        if len(contenders) == 1:
            result.chosen = contenders[0]
        elif contenders:
            logger.warning(
                "Test %r claimed by %d components at priority %d: %s",
                test.name,
                len(contenders),
                contenders[0].priority,
                ", ".join(c.component.name for c in contenders),
            )
        return result

    def ownership(
        self,
        test: TestInfo,
        unknown_component: str = "Unknown",
        unknown_jira_component: str = "Unknown",
    ) -> TestOwnership:
        """
        Build the ownership record for a test.

        Unmatched and ambiguous tests are attributed to the unknown component.
        """
        return self.to_ownership(
            self.identify(test), unknown_component, unknown_jira_component
        )

    def to_ownership(
        self,
        result: Identification,
        unknown_component: str = "Unknown",
        unknown_jira_component: str = "Unknown",
    ) -> TestOwnership:
        test = result.test
        if result.chosen is None:
            return TestOwnership(
                id=test.id,
                name=test.name,
                suite=test.suite,
                component=unknown_component,
                jira_component=unknown_jira_component,
                oldest_name=test.name,
            )

        component = result.chosen.component
        matcher = result.chosen.matcher
        return TestOwnership(
            id=test.id,
            name=test.name,
            suite=test.suite,
            component=component.name,
            jira_project=component.jira_project(),
            jira_component=matcher.jira_component or component.default_jira_component,
            capabilities=list(matcher.capabilities),
            priority=matcher.priority,
            oldest_name=self.oldest_name(component, test.name),
        )

    @staticmethod
    def oldest_name(component: Component, test_name: str) -> str:
        """Follow the component's rename table to the oldest name of a test."""
        return component.test_renames.get(test_name, test_name)

    def namespace_owners(self) -> Dict[str, List[str]]:
        """Map every namespace to the components that own it."""
        owners: Dict[str, List[str]] = {}
        for component in self.components:
            for namespace in component.list_namespaces():
                owners.setdefault(namespace, []).append(component.name)
        return {ns: owners[ns] for ns in sorted(owners)}
