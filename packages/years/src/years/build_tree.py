"""
years - build a time-ordered waypoint tree from a directory and print it.

Each waypoint is printed as:

{
  "identifier": <path of the entry>,
  "name": <name of the file or directory>,
  "kind": <"hierarchy" | "metadata">,
  "time": <resolved time, ISO 8601, or null for non-calendar entries>,
  "unit": <most specific unit of the entry's layout segment>,
  "is_container": <true for directories>,
  "depth": <depth below the scanned root>,
  "parent": <path of the parent directory (null for root)>,
  "children": [<paths of direct children, oldest first>]
}

Usage (CLI):
    years <directory> --layout "2006/Jan/2006-01-02.txt" [--direction future] [--nodes leaves]
    years <directory> --layout "2006/Jan/2006-01-02.txt" --navigate yesterday
    years <directory> --metadata modified --tree

Usage (library):
    from years.build_tree import build_tree
    root = build_tree("/path/to/dir", "2006/Jan/2006-01-02.txt")
"""

import argparse
import json
import logging
import sys

from years.components.node import Waypoint, flatten_records, to_record, to_tree
from years.components.parser import ParserOptions, TimeParser, get_parser_defaults
from years.components.scanner import build_hierarchy, build_metadata_tree
from years.components.voyager import NAVIGATION_LAYOUTS, Direction, NodesMode, Voyager
from years.exceptions import YearsError

logger = logging.getLogger(__name__)


def build_tree(root: str, layout: str = "", metadata: str | None = None) -> Waypoint:
    """Scan *root* and return the waypoint tree.

    With *metadata* set (e.g. ``"modified"``) times come from file metadata
    instead of being parsed from names with *layout*.
    """
    if metadata:
        return build_metadata_tree(root, metadata)
    return build_hierarchy(root, layout)


def _parser_from_args(args: argparse.Namespace) -> TimeParser:
    options: ParserOptions = get_parser_defaults()
    layouts = tuple(args.parser_layout or NAVIGATION_LAYOUTS)
    options = options.with_layouts(*layouts)
    if args.epoch_millis:
        options = options.merged(accept_epoch_millis=True)
    return TimeParser(options)


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="years",
        description="Build a time-ordered tree of a directory and walk or search it.",
    )
    parser.add_argument("directory", help="Root directory to scan")
    parser.add_argument(
        "--layout",
        "-l",
        default="",
        help='Path layout, one segment per level, e.g. "2006/Jan/2006-01-02.txt"',
    )
    parser.add_argument(
        "--metadata",
        "-m",
        metavar="KEY",
        help="Take times from file metadata (modified, accessed, changed) instead of names",
    )
    parser.add_argument(
        "--direction",
        choices=[d.value for d in Direction],
        default=Direction.PAST.value,
    )
    parser.add_argument(
        "--nodes",
        choices=[n.value for n in NodesMode],
        default=NodesMode.ALL.value,
    )
    parser.add_argument(
        "--non-calendar",
        action="store_true",
        help="Include entries whose names carry no date",
    )
    lookup = parser.add_mutually_exclusive_group()
    lookup.add_argument("--navigate", metavar="QUERY", help="Print the first waypoint at QUERY")
    lookup.add_argument("--find", metavar="QUERY", help="Print every waypoint at QUERY")
    lookup.add_argument("--tree", action="store_true", help="Print the nested tree")
    parser.add_argument(
        "--parser-layout",
        action="append",
        metavar="LAYOUT",
        help="Layout accepted in queries (repeatable)",
    )
    parser.add_argument(
        "--epoch-millis",
        action="store_true",
        help="Also accept millisecond epochs in queries",
    )
    parser.add_argument(
        "--output",
        "-o",
        metavar="FILE",
        help="Write JSON output to FILE instead of stdout",
    )
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not args.layout and not args.metadata:
        print("error: one of --layout or --metadata is required", file=sys.stderr)
        return 2

    try:
        root = build_tree(args.directory, args.layout, args.metadata)
    except OSError as exc:
        print(f"error: cannot read {args.directory}: {exc}", file=sys.stderr)
        return 1

    voyager = Voyager(root, _parser_from_args(args))
    status = 0

    try:
        if args.tree:
            payload = to_tree(root)
        elif args.navigate:
            found = voyager.navigate(args.navigate)
            payload = to_record(found).model_dump(mode="json") if found else None
            status = 0 if found else 1
        elif args.find:
            payload = [to_record(w).model_dump(mode="json") for w in voyager.find(args.find)]
        else:
            by_identifier = {r.identifier: r for r in flatten_records(root)}
            ordered = voyager.waypoints(
                direction=args.direction,
                nodes=args.nodes,
                include_non_calendar=args.non_calendar,
            )
            payload = [by_identifier[w.identifier()].model_dump(mode="json") for w in ordered]
    except YearsError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    output = json.dumps(payload, indent=2)

    if args.output:
        with open(args.output, "w", encoding="utf-8") as f:
            f.write(output)
        count = len(payload) if isinstance(payload, list) else 1
        print(f"Waypoints written to {args.output} ({count} entries)")
    else:
        print(output)

    return status


if __name__ == "__main__":
    sys.exit(main())
