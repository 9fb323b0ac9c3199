"""
Operator test identification.

Cluster operators are exercised by a family of synthetic tests whose names
end with the operator name, for example:

    operator conditions kube-apiserver
    [sig-cluster-lifecycle] operator install kube-apiserver
    Cluster upgrade.Operator upgrade kube-apiserver

Each phrase maps to the capability the test exercises.
"""

from typing import List, Tuple

# (phrase preceding the operator name, capability)
OPERATOR_TEST_PHRASES: Tuple[Tuple[str, str], ...] = (
    ("operator conditions", "Operator Conditions"),
    ("operator install", "Operator Install"),
    ("operator upgrade", "Operator Upgrade"),
)

BUGZILLA_TAG_CAPABILITY = "Operator Bugzilla Tag"


def identify_operator_test(operator: str, test_name: str) -> Tuple[bool, List[str]]:
    """
    Determine whether a test checks the given operator.

    Args:
        operator: Operator name, e.g. "kube-apiserver"
        test_name: Test display name

    Returns:
        (is_operator_test, capabilities)
    """
    if not operator:
        return False, []

    lowered = test_name.lower()
    target = operator.lower()
    for phrase, capability in OPERATOR_TEST_PHRASES:
        if lowered.endswith(f"{phrase} {target}"):
            return True, [capability]

    if f"[bz-{target}]" in lowered:
        return True, [BUGZILLA_TAG_CAPABILITY]

    return False, []
