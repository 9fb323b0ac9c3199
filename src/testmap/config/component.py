"""
Component ownership rules.
==========================
A Component describes a team or subsystem and the rules used to decide
whether a CI test belongs to it. Resolution runs four stages in order and
stops at the first stage that produces a match:

1. Explicit `[Jira:"..."]` tag naming the component's Jira component
2. Operator test heuristics for the operators the component owns
3. The component's matchers, in declared order (first match wins)
4. Namespace ownership (`ns/<name>` or `namespace/<name>` in the test name)

Namespace ownership runs last so that a matcher can claim a test whose
namespace belongs to another component. For example ns/console disruption
tests can be moved to router, because it's much more likely to be an ingress
problem. Callers compare `priority` across components to pick the winner.
"""
from __future__ import annotations

import ast
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from testmap.api.types import TestInfo
from testmap.utils.operators import identify_operator_test
from testmap.utils.testname import extract_test_field, is_sig_test

logger = logging.getLogger(__name__)

# Priority assigned to namespace ownership matches
NAMESPACE_PRIORITY = 10

JIRA_FIELD = "Jira"

_NAMESPACE_SHORT = re.compile(r"ns/(?P<namespace>[-\w]+)")
_NAMESPACE_FULL = re.compile(r"namespace/(?P<namespace>[-\w]+)")

_MATCHER_SEQUENCE_FIELDS = (
    "include_all", "include_any", "exclude_all", "exclude_any", "capabilities",
)


def extract_namespace_from_test_name(test_name: str) -> str:
    """
    Extract the namespace a test refers to.

    The short form `ns/<name>` is checked before `namespace/<name>`.

    Returns:
        Namespace name, or "" if the test names no namespace
    """
    for pattern in (_NAMESPACE_SHORT, _NAMESPACE_FULL):
        match = pattern.search(test_name)
        if match:
            return match.group("namespace")
    return ""


def unquote_field(raw: str) -> str:
    r"""
    Strip one layer of quoting from an extracted field value.

    Supports double-quoted and back-quoted strings, and single-quoted
    characters (escapes such as '\n' and '\'' included). Anything that is
    not validly quoted is returned as-is.
    """
    if len(raw) < 2 or raw[0] != raw[-1]:
        return raw

    quote = raw[0]
    inner = raw[1:-1]
    if quote == '"':
        try:
            value = json.loads(raw)
        except ValueError:
            return raw
        return value if isinstance(value, str) else raw
    if quote == "`":
        return raw if "`" in inner else inner
    if quote == "'":
        try:
            value = ast.literal_eval(raw)
        except (ValueError, SyntaxError):
            return raw
        return value if isinstance(value, str) and len(value) == 1 else raw
    return raw


@dataclass(frozen=True)
class ComponentMatcher:
    """
    A single ownership rule.

    The fields sig, suite, include_all and include_any are ANDed together:
    every one that has a value must match. Within include_all every substring
    must be present; within include_any one is enough. Use separate matchers
    for an OR across fields.

    exclude_all vetoes the rule when every listed substring is present;
    exclude_any vetoes it when any one is present.

    jira_component, capabilities and priority are metadata returned with a
    successful match.

    Substring and capability lists are stored as tuples, so a matcher is
    immutable and hashable.
    """

    sig: str = ""
    suite: str = ""
    include_all: Tuple[str, ...] = ()
    include_any: Tuple[str, ...] = ()
    exclude_all: Tuple[str, ...] = ()
    exclude_any: Tuple[str, ...] = ()

    jira_component: str = ""
    capabilities: Tuple[str, ...] = ()
    priority: int = 0

    def __post_init__(self) -> None:
        for name in _MATCHER_SEQUENCE_FIELDS:
            object.__setattr__(self, name, tuple(getattr(self, name)))

    def is_suite_test(self, test: TestInfo) -> bool:
        return test.suite == self.suite

    def is_substring_all_test(self, all_of: Sequence[str], test: TestInfo) -> bool:
        return all(value in test.name for value in all_of)

    def is_substring_any_test(self, any_of: Sequence[str], test: TestInfo) -> bool:
        return any(value in test.name for value in any_of)

    def is_excluded(self, test: TestInfo) -> bool:
        """True if an exclusion list vetoes this matcher for the test."""
        # If all the exclusions are present, we force a non-match
        if self.exclude_all and self.is_substring_all_test(self.exclude_all, test):
            return True
        # If any of the exclusions are present, we force a non-match
        if self.exclude_any and self.is_substring_any_test(self.exclude_any, test):
            return True
        return False

    def matches(self, test: TestInfo) -> bool:
        """Evaluate the rule against a test."""
        if self.is_excluded(test):
            return False

        sig_match = is_sig_test(test.name, self.sig) if self.sig else True
        suite_match = self.is_suite_test(test) if self.suite else True
        include_all_match = (
            self.is_substring_all_test(self.include_all, test) if self.include_all else True
        )
        include_any_match = (
            self.is_substring_any_test(self.include_any, test) if self.include_any else True
        )

        return sig_match and suite_match and include_all_match and include_any_match


@dataclass
class Component:
    """
    Ownership configuration for a team or subsystem.

    Attributes:
        name: Component name
        default_jira_project: Jira project bugs are filed in
        default_jira_component: Jira component used for tag, operator and
            namespace matches
        matchers: Ordered ownership rules
        operators: Operators the component is responsible for
        namespaces: Namespaces the component owns
        variants: Variants the component is responsible for, formatted as
            variantCategory:variantValue
        test_renames: Maps a renamed test to the oldest version of its name,
            so results can be compared across releases
    """

    name: str
    default_jira_project: str = ""
    default_jira_component: str = ""
    matchers: List[ComponentMatcher] = field(default_factory=list)
    operators: List[str] = field(default_factory=list)
    namespaces: List[str] = field(default_factory=list)
    variants: List[str] = field(default_factory=list)
    test_renames: Dict[str, str] = field(default_factory=dict)

    @property
    def stages(self) -> Tuple[Callable[[TestInfo], Optional[ComponentMatcher]], ...]:
        """Resolution stages, in precedence order."""
        return (
            self.match_jira_tag,
            self.match_operator,
            self.match_rules,
            self.match_namespace,
        )

    def find_match(self, test: TestInfo) -> Optional[ComponentMatcher]:
        """
        Resolve whether this component owns a test.

        Returns:
            The matching rule (or a synthesized one carrying the component's
            Jira component), or None if the component does not own the test
        """
        for stage in self.stages:
            match = stage(test)
            if match is not None:
                logger.debug(
                    "%s: %s matched %r", self.name, stage.__name__, test.name
                )
                return match
        return None

    def match_jira_tag(self, test: TestInfo) -> Optional[ComponentMatcher]:
        """Match an explicit [Jira:"..."] tag naming this component."""
        wanted = self.default_jira_component.casefold()
        for raw in extract_test_field(test.name, JIRA_FIELD):
            if unquote_field(raw).casefold() == wanted:
                return ComponentMatcher(jira_component=self.default_jira_component)
        return None

    def match_operator(self, test: TestInfo) -> Optional[ComponentMatcher]:
        """Match operator install/upgrade/conditions tests."""
        is_operator, capabilities = self.is_operator_test(test)
        if is_operator:
            return ComponentMatcher(
                jira_component=self.default_jira_component,
                capabilities=capabilities,
            )
        return None

    def match_rules(self, test: TestInfo) -> Optional[ComponentMatcher]:
        """Return the first matcher that matches the test."""
        for matcher in self.matchers:
            if matcher.matches(test):
                return matcher
        return None

    def match_namespace(self, test: TestInfo) -> Optional[ComponentMatcher]:
        """Match on namespace ownership; a namespace owned elsewhere never matches."""
        namespace, ok = self.is_namespace_test(test.name)
        if ok and self.is_in_namespace(namespace):
            return ComponentMatcher(
                jira_component=self.default_jira_component,
                priority=NAMESPACE_PRIORITY,
            )
        return None

    def is_operator_test(self, test: TestInfo) -> Tuple[bool, List[str]]:
        for operator in self.operators:
            is_operator, capabilities = identify_operator_test(operator, test.name)
            if is_operator:
                return True, capabilities
        return False, []

    def is_namespace_test(self, test_name: str) -> Tuple[str, bool]:
        namespace = extract_namespace_from_test_name(test_name)
        return namespace, bool(namespace)

    def list_namespaces(self) -> List[str]:
        return sorted(set(self.namespaces))

    def is_in_namespace(self, namespace: str) -> bool:
        return namespace in self.namespaces

    def identify_variants(self) -> List[str]:
        return self.variants

    def jira_project(self) -> str:
        return self.default_jira_project
