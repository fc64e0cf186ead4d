#!/usr/bin/env python3
"""
glsldeps CLI

Builds the dependency graph of a glslify shader and prints the resolved,
transformed module list in various formats.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from depgraph import DependencyGraph, DepGraphError
from exporters import to_ascii, to_json


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="glsldeps",
        description="Build the dependency graph of a glslify shader.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  glsldeps shader.frag                     # JSON module list to stdout
  glsldeps shader.frag -f ascii            # Tree of imports
  glsldeps - < shader.frag                 # Read the entry from stdin
  glsldeps shader.frag -t glsl_hex         # Apply a local transform
  glsldeps shader.frag -g ./strip.py       # Apply a global transform
  glsldeps shader.frag --async -o out.json # Asyncio build, write to file
        """,
    )

    # Positional arguments
    parser.add_argument(
        "entry",
        help="Entry shader file, or '-' to read the source from stdin",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=["json", "ascii"],
        default="json",
        help="Output format (default: json)",
    )

    parser.add_argument(
        "--ascii-style",
        choices=["tree", "ascii"],
        default="tree",
        help="ASCII output style: 'tree' (Unicode) or 'ascii' (pure ASCII)",
    )

    parser.add_argument(
        "--no-source",
        action="store_true",
        help="Leave module sources out of JSON output",
    )

    # Build options
    parser.add_argument(
        "--cwd",
        type=str,
        default=None,
        help="Working directory for transforms and stdin sources (default: current directory)",
    )

    parser.add_argument(
        "-t", "--transform",
        action="append",
        default=[],
        help="Transform applied to local files (repeatable)",
    )

    parser.add_argument(
        "-g", "--global-transform",
        action="append",
        default=[],
        help="Transform applied to every file, vendored ones included (repeatable)",
    )

    parser.add_argument(
        "--async",
        dest="async_mode",
        action="store_true",
        help="Build with asyncio, resolving imports concurrently",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log build progress to stderr",
    )

    return parser.parse_args(args)


def build(parsed: argparse.Namespace, source: Optional[str] = None) -> List[Any]:
    """Build the dependency list for the parsed arguments."""
    graph = DependencyGraph(parsed.cwd, async_mode=parsed.async_mode)

    for name in parsed.transform:
        graph.transform(name)
    for name in parsed.global_transform:
        graph.transform(name, {"global": True})

    if source is not None:
        result = graph.inline(source, graph.cwd)
    else:
        result = graph.add(parsed.entry)

    if parsed.async_mode:
        return asyncio.run(result)
    return result


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    source = None
    if parsed.entry == "-":
        source = sys.stdin.read()
    elif not Path(parsed.entry).is_file():
        print(f"Error: '{parsed.entry}' is not a file", file=sys.stderr)
        return 1

    if parsed.cwd is not None and not Path(parsed.cwd).is_dir():
        print(f"Error: '{parsed.cwd}' is not a directory", file=sys.stderr)
        return 1

    # Build the graph
    try:
        nodes = build(parsed, source)
    except DepGraphError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Generate output
    if parsed.format == "ascii":
        base = parsed.cwd or Path.cwd()
        output = to_ascii(nodes, base=base, style=parsed.ascii_style)
    else:
        output = to_json(nodes, include_source=not parsed.no_source)

    # Write output
    if parsed.output:
        try:
            with open(parsed.output, "w", encoding="utf-8") as f:
                f.write(output)
            print(f"Output written to: {parsed.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 0


if __name__ == "__main__":
    sys.exit(main())
