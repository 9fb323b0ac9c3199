"""
Test name annotation helpers.

CI test names carry bracketed annotations that tooling reads back out:

    [sig-network][Jira:"Networking / router"] Router should serve routes

- `[sig-...]` labels name the SIG that wrote the test
- `[Field:value]` labels carry machine-readable fields such as the Jira
  component (`[Jira:"Networking / router"]`)
"""

import re
from functools import lru_cache
from typing import List


@lru_cache(maxsize=None)
def _field_pattern(field: str) -> "re.Pattern[str]":
    return re.compile(r"\[" + re.escape(field) + r":(.*?)\]")


def extract_test_field(test_name: str, field: str) -> List[str]:
    """
    Extract every `[field:value]` annotation from a test name.

    Args:
        test_name: Test display name
        field: Annotation label, e.g. "Jira"

    Returns:
        Raw values in order of appearance, quotes left intact

    Example:
        >>> extract_test_field('[Jira:"Storage"] foo [Jira:etcd]', "Jira")
        ['"Storage"', 'etcd']
    """
    return _field_pattern(field).findall(test_name)


def is_sig_test(test_name: str, sig: str) -> bool:
    """True if the test name carries the `[sig]` label, e.g. `[sig-network]`."""
    return f"[{sig}]" in test_name
