"""
Test corpus mapper.

Attributes every test in a corpus file to a component and produces an
ownership report.

Corpus format (YAML or JSON):
    tests:
      - name: "[sig-network] Router should serve routes"
        suite: openshift-tests
      - "[sig-storage] bare test names use the default suite"

Usage:
    testmap map tests.yaml
    testmap map tests.json --format json -o ownership.json
"""
from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

from testmap.api.types import TestInfo, TestOwnership
from testmap.registry import ComponentRegistry

logger = logging.getLogger(__name__)


class TestCorpusError(Exception):
    """Raised when a test corpus cannot be loaded."""

    __test__ = False


@dataclass
class MappingReport:
    """Ownership of every test in a corpus."""

    ownerships: List[TestOwnership] = field(default_factory=list)
    matched: int = 0
    # {"name", "suite"} per test
    unmatched: List[Dict[str, str]] = field(default_factory=list)
    # {"name", "suite", "components"} per test
    ambiguous: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_ambiguous(self) -> bool:
        return bool(self.ambiguous)

    def component_counts(self) -> Dict[str, int]:
        counts = Counter(o.component for o in self.ownerships)
        return {name: counts[name] for name in sorted(counts)}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "total": len(self.ownerships),
                "matched": self.matched,
                "unmatched": len(self.unmatched),
                "ambiguous": len(self.ambiguous),
                "components": self.component_counts(),
            },
            "unmatched": [dict(entry) for entry in self.unmatched],
            "ambiguous": [dict(entry) for entry in self.ambiguous],
            "tests": [o.to_dict() for o in self.ownerships],
        }


def _parse_test(item: Any, default_suite: str, index: int) -> TestInfo:
    if isinstance(item, str):
        return TestInfo(name=item, suite=default_suite)
    if isinstance(item, dict) and isinstance(item.get("name"), str):
        suite = item.get("suite", default_suite)
        return TestInfo(name=item["name"], suite="" if suite is None else str(suite))
    raise TestCorpusError(f"tests[{index}]: expected a test name or a mapping with 'name'")


class TestMapper:
    """Map a test corpus onto the components in a registry."""

    __test__ = False

    def __init__(self, registry: ComponentRegistry, mapping_config: Optional[Dict[str, Any]] = None):
        self.registry = registry
        config = mapping_config or {}
        self.unknown_component = config.get("unknown_component", "Unknown")
        self.unknown_jira_component = config.get("unknown_jira_component", "Unknown")

    def load_tests(self, path: Path, default_suite: str = "") -> List[TestInfo]:
        """
        Load a corpus file.

        Args:
            path: YAML or JSON file
            default_suite: Suite for entries that don't declare one

        Raises:
            TestCorpusError: If the file is unreadable or malformed
        """
        try:
            with open(path) as f:
                if path.suffix == ".json":
                    document = json.load(f)
                else:
                    document = yaml.safe_load(f)
        except OSError as e:
            raise TestCorpusError(f"Cannot read {path}: {e}") from e
        except (ValueError, yaml.YAMLError) as e:
            raise TestCorpusError(f"Cannot parse {path}: {e}") from e

        if isinstance(document, dict):
            document = document.get("tests")
        if document is None:
            return []
        if not isinstance(document, list):
            raise TestCorpusError(f"{path}: expected a list of tests")

        tests = [_parse_test(item, default_suite, i) for i, item in enumerate(document)]
        logger.info("Loaded %d test(s) from %s", len(tests), path)
        return tests

    def map_tests(self, tests: Iterable[TestInfo]) -> MappingReport:
        """Identify the owner of every test."""
        report = MappingReport()
        for test in tests:
            result = self.registry.identify(test)
            if result.is_matched:
                report.matched += 1
            elif result.is_ambiguous:
                report.ambiguous.append({
                    "name": test.name,
                    "suite": test.suite,
                    "components": [c.component.name for c in result.contenders],
                })
            else:
                report.unmatched.append({"name": test.name, "suite": test.suite})
            report.ownerships.append(
                self.registry.to_ownership(
                    result, self.unknown_component, self.unknown_jira_component
                )
            )

        logger.info(
            "Mapped %d test(s): %d unmatched, %d ambiguous",
            len(report.ownerships), len(report.unmatched), len(report.ambiguous),
        )
        return report
