"""
Test identity and ownership records.

TestInfo is the input to ownership resolution; TestOwnership is the record
the registry emits once a test has been attributed to a component.
"""
from __future__ import annotations

import hashlib
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class TestInfo:
    """A single test as reported by CI: its display name and suite."""

    __test__ = False  # not a pytest test class

    name: str
    suite: str = ""

    @property
    def id(self) -> str:
        """Stable identifier derived from suite and name."""
        return hashlib.md5(f"{self.suite}.{self.name}".encode("utf-8")).hexdigest()


@dataclass
class TestOwnership:
    """
    Ownership record for one test.

    Attributes:
        id: Stable test identifier (see TestInfo.id)
        name: Test display name
        suite: Test suite
        component: Name of the owning component
        jira_project: Jira project the component files bugs in
        jira_component: Jira component the test is attributed to
        capabilities: Capabilities exercised by the test
        priority: Priority of the winning match
        oldest_name: Oldest known name of the test (follows renames)
    """

    __test__ = False

    id: str
    name: str
    suite: str
    component: str
    jira_project: str = ""
    jira_component: str = ""
    capabilities: List[str] = field(default_factory=list)
    priority: int = 0
    oldest_name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
