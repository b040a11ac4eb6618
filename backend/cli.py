"""
Command-line converter: YAML rule document -> Mermaid flowchart.

Usage:
  rulechart rules/order_approval.yaml
  rulechart rules/order_approval.yaml --out chart.mmd --metadata chart.json --strict
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from backend.translator import TranslationError, translate
from backend.utils.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rulechart",
        description="Translate a YAML rule document to a Mermaid flowchart.",
    )
    parser.add_argument("rules", type=Path, help="Path to the rules YAML file")
    parser.add_argument("--out", type=Path, help="Write the diagram here instead of stdout")
    parser.add_argument("--metadata", type=Path, help="Write node metadata JSON here")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail when a branch continues to a condition that does not exist",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for messages on stderr (warnings are shown by default)",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=args.log_level, log_to_file=False)
    if not args.rules.is_file():
        print(f"Rules file not found: {args.rules}", file=sys.stderr)
        return 1
    try:
        result = translate(args.rules.read_text(encoding="utf-8"), strict=args.strict, source=str(args.rules))
    except TranslationError as e:
        print(f"Error: {e}", file=sys.stderr)
        for err in getattr(e, "errors", []):
            print(f"  {'.'.join(err['loc'])}: {err['msg']}", file=sys.stderr)
        return 1

    if args.out:
        args.out.write_text(result.diagram, encoding="utf-8")
    else:
        sys.stdout.write(result.diagram)
    if args.metadata:
        args.metadata.write_text(json.dumps(result.metadata_json(), indent=2), encoding="utf-8")
    return 0


if __name__ == "__main__":
    sys.exit(main())
