"""
Command-line summary of a JMH results file.

    benchcore results/jmh-results.json
    benchcore results/ --csv comparisons.csv --json tree.json
    python -m benchcore --provider-a BC --provider-b Jostle results/
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from benchcore import __version__
from benchcore.classifier import Classifier
from benchcore.config import CONFIG, refresh_config, validate_config
from benchcore.env_loader import load_env_files
from benchcore.exceptions import ConfigError, DataIntegrityError
from benchcore.formatters import (
    comparison_rows,
    format_node_name,
    format_ratio,
)
from benchcore.hierarchy import HierarchyNode
from benchcore.jmh import load_results
from benchcore.matcher import PairMatcher
from benchcore.pipeline import PipelineResult, run_pipeline


def node_to_dict(node: HierarchyNode) -> Dict[str, Any]:
    return {
        "name": node.name,
        "path": node.path,
        "comparison_count": len(node.comparisons),
        "children": [node_to_dict(child) for child in node.children],
    }


def _print_tree(node: HierarchyNode, depth: int = 0, category: Optional[str] = None) -> None:
    for child in node.children:
        cat = category or child.name
        label = format_node_name(child.name, depth, cat)
        line = f"{'  ' * depth}{label} ({len(child.comparisons)})"
        if child.is_leaf and len(child.comparisons) == 1:
            ratio = child.comparisons[0].ratio()
            line += f"  ratio {format_ratio(ratio)}"
        print(line)
        _print_tree(child, depth + 1, cat)


def _print_summary(result: PipelineResult, load_errors: List[tuple]) -> None:
    print("=" * 60)
    print("JMH Provider Comparison")
    print("=" * 60)
    print(f"Records:     {result.record_count}")
    print(f"Classified:  {result.classified_count}")
    print(f"Excluded:    {result.excluded_count}")
    print(f"Comparisons: {len(result.comparisons)}")
    print()

    if result.is_empty:
        print("No data.")
    else:
        _print_tree(result.hierarchy.root)

    counts = {k: v for k, v in result.anomaly_counts().items() if v}
    if counts or load_errors:
        print()
        print("Anomalies:")
        for kind, count in counts.items():
            print(f"  {kind}: {count}")
        if load_errors:
            print(f"  load_errors: {len(load_errors)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="benchcore",
        description="Pair JMH results from two crypto providers and print the comparison tree",
    )
    parser.add_argument(
        "results",
        nargs="?",
        default=None,
        help="JMH JSON file or directory (default: CONFIG RESULTS_PATH)",
    )
    parser.add_argument("--provider-a", default=None, help="Baseline provider (default: CONFIG PROVIDER_A)")
    parser.add_argument("--provider-b", default=None, help="Compared provider (default: CONFIG PROVIDER_B)")
    parser.add_argument("--strict", action="store_true", help="Fail on duplicate entries and unit mismatches")
    parser.add_argument("--csv", type=Path, default=None, help="Write the flat comparison table to this CSV file")
    parser.add_argument("--json", type=Path, default=None, help="Write the tree to this JSON file")
    parser.add_argument("--quiet", action="store_true", help="Skip the printed summary")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_env_files()
    try:
        refresh_config()
        # command-line providers obey the same rules as PROVIDER_A/PROVIDER_B
        cfg = dict(CONFIG)
        cfg["PROVIDER_A"] = args.provider_a or CONFIG["PROVIDER_A"]
        cfg["PROVIDER_B"] = args.provider_b or CONFIG["PROVIDER_B"]
        validate_config(cfg)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    provider_a = cfg["PROVIDER_A"]
    provider_b = cfg["PROVIDER_B"]
    classifier = Classifier(providers=(provider_a, provider_b))
    matcher = PairMatcher(
        provider_a,
        provider_b,
        strict_duplicates=True if args.strict else None,
        strict_units=True if args.strict else None,
    )

    records, load_errors = load_results(args.results or CONFIG["RESULTS_PATH"])
    try:
        result = run_pipeline(records, classifier=classifier, matcher=matcher)
    except DataIntegrityError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not args.quiet:
        _print_summary(result, load_errors)

    if args.csv:
        pd.DataFrame(comparison_rows(result.comparisons)).to_csv(args.csv, index=False)
        print(f"\nCSV: {args.csv}")
    if args.json:
        args.json.write_text(json.dumps(node_to_dict(result.hierarchy.root), indent=2), encoding="utf-8")
        print(f"JSON: {args.json}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
