#!/usr/bin/env python3
"""
testmap - attribute CI tests to the components that own them.

Commands:
- resolve: Show which component owns a single test
- map: Map a whole test corpus and print an ownership report
- components: List configured components
- namespaces: List namespaces and the components that own them

Usage:
    testmap resolve "[sig-network] Router should serve routes"
    testmap resolve "operator conditions ingress" --format json
    testmap map tests.yaml                   # Ownership report (YAML)
    testmap map tests.json -o out.json --format json
    testmap map tests.yaml --strict          # Exit 1 on ambiguous tests
    testmap components                       # List components
    testmap namespaces                       # Namespace ownership
    testmap --components extra/ components   # Override component paths
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

import yaml

from testmap.api.types import TestInfo
from testmap.commands.mapper import TestCorpusError, TestMapper
from testmap.config.loader import ComponentConfigError, load_components
from testmap.config.settings import component_paths, find_repo_root, get_mapping_config
from testmap.registry import ComponentRegistry


def _render(data: Any, format: str) -> str:
    if format == "json":
        return json.dumps(data, indent=2)
    return yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)


class MappingCoordinator:
    """Load components once and run mapping commands against them."""

    def __init__(self, repo_root: Path = None, paths: Optional[List[Path]] = None):
        self.repo_root = repo_root or find_repo_root()
        self.mapping_config = get_mapping_config(self.repo_root)
        self.paths = paths or component_paths(self.repo_root)
        self.registry = ComponentRegistry(load_components(self.paths))

    def run_resolve(self, name: str, suite: str = "", format: str = "yaml") -> int:
        """Resolve a single test and print every candidate."""
        test = TestInfo(name=name, suite=suite)
        result = self.registry.identify(test)
        ownership = self.registry.to_ownership(
            result,
            self.mapping_config["unknown_component"],
            self.mapping_config["unknown_jira_component"],
        )
        data = {
            "ownership": ownership.to_dict(),
            "ambiguous": result.is_ambiguous,
            "candidates": [
                {
                    "component": c.component.name,
                    "jira_component": c.matcher.jira_component,
                    "capabilities": list(c.matcher.capabilities),
                    "priority": c.priority,
                }
                for c in result.candidates
            ],
        }
        print(_render(data, format))
        return 0

    def run_map(
        self,
        input_path: Path,
        output: Optional[Path] = None,
        format: str = "yaml",
        suite: str = "",
        strict: bool = False,
    ) -> int:
        """Map a test corpus and write the ownership report."""
        mapper = TestMapper(self.registry, self.mapping_config)
        tests = mapper.load_tests(input_path, default_suite=suite)
        report = mapper.map_tests(tests)

        rendered = _render(report.to_dict(), format)
        if output:
            output.write_text(rendered)
            print(f"Wrote ownership for {len(report.ownerships)} test(s) to {output}")
        else:
            print(rendered)

        if report.has_ambiguous and (strict or self.mapping_config["fail_on_ambiguous"]):
            print(
                f"Error: {len(report.ambiguous)} test(s) claimed by several components "
                "at the same priority",
                file=sys.stderr,
            )
            return 1
        return 0

    def list_components(self, format: str = "yaml") -> int:
        data = [
            {
                "name": c.name,
                "jira_project": c.jira_project(),
                "jira_component": c.default_jira_component,
                "matchers": len(c.matchers),
                "operators": list(c.operators),
                "namespaces": c.list_namespaces(),
                "variants": c.identify_variants(),
            }
            for c in self.registry.components
        ]
        print(_render(data, format))
        return 0

    def list_namespaces(self, format: str = "yaml") -> int:
        print(_render(self.registry.namespace_owners(), format))
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="testmap",
        description="testmap - attribute CI tests to owning components",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s resolve "[sig-storage] CSI volumes ns/openshift-cluster-csi-drivers"
  %(prog)s map tests.yaml                  Ownership report (YAML)
  %(prog)s map tests.json --format json    Ownership report (JSON)
  %(prog)s map tests.yaml --strict         Fail on ambiguous ownership
  %(prog)s components                      List components
  %(prog)s namespaces                      Namespace ownership
        """
    )
    parser.add_argument(
        "--components", "-c",
        action="append",
        type=Path,
        help="Component YAML file or directory (repeatable, overrides .testmap/config.yaml)"
    )
    parser.add_argument(
        "--repo",
        type=Path,
        help="Repository root (default: search upward for .testmap/ or components/)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose logging"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # ----- testmap resolve <name> -----
    resolve_parser = subparsers.add_parser(
        "resolve",
        help="Show which component owns a test"
    )
    resolve_parser.add_argument("name", type=str, help="Test name")
    resolve_parser.add_argument("--suite", "-s", type=str, default="", help="Test suite")
    resolve_parser.add_argument(
        "--format", "-f", choices=["yaml", "json"], default="yaml",
        help="Output format (default: yaml)"
    )

    # ----- testmap map <input> -----
    map_parser = subparsers.add_parser(
        "map",
        help="Map a test corpus to components"
    )
    map_parser.add_argument("input", type=Path, help="Corpus file (YAML or JSON)")
    map_parser.add_argument("--output", "-o", type=Path, help="Output file (default: stdout)")
    map_parser.add_argument(
        "--format", "-f", choices=["yaml", "json"], default="yaml",
        help="Output format (default: yaml)"
    )
    map_parser.add_argument(
        "--suite", "-s", type=str, default="",
        help="Suite for tests that don't declare one"
    )
    map_parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit 1 if any test is claimed by several components at the same priority"
    )

    # ----- testmap components / namespaces -----
    for command, help_text in (
        ("components", "List configured components"),
        ("namespaces", "List namespace ownership"),
    ):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument(
            "--format", "-f", choices=["yaml", "json"], default="yaml",
            help="Output format (default: yaml)"
        )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 0

    try:
        coordinator = MappingCoordinator(repo_root=args.repo, paths=args.components)

        if args.command == "resolve":
            return coordinator.run_resolve(args.name, suite=args.suite, format=args.format)
        if args.command == "map":
            return coordinator.run_map(
                args.input,
                output=args.output,
                format=args.format,
                suite=args.suite,
                strict=args.strict,
            )
        if args.command == "components":
            return coordinator.list_components(format=args.format)
        if args.command == "namespaces":
            return coordinator.list_namespaces(format=args.format)
    except (ComponentConfigError, TestCorpusError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
