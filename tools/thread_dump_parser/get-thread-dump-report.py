#!/usr/bin/env python3
"""
Thread Dump Report - parse jstack thread dumps into threads and locks.

Usage:
    python get-thread-dump-report.py threaddump.1555401600000.txt
    python get-thread-dump-report.py dump1.txt dump2.txt --format md
    jstack <pid> | python get-thread-dump-report.py -
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from thread_dump_parser.parser import parse_thread_dump, validate_thread_dump
from thread_dump_parser.analyzer import analyze_thread_dump, DEFAULT_STACK_LINES, DEFAULT_MIN_GROUP_SIZE
from thread_dump_parser.reporter import generate_report, REPORT_FORMATS

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1  # Unreadable or invalid input


def read_dump(dump_file: str):
    """Return (content, filename) for a path or '-' (stdin)."""
    if dump_file == "-":
        return sys.stdin.read(), None

    dump_path = Path(dump_file)
    if not dump_path.is_file():
        print(f"Error: file not found: {dump_path}", file=sys.stderr)
        sys.exit(EXIT_ERROR)
    try:
        return dump_path.read_text(encoding="utf-8", errors="replace"), dump_path.name
    except OSError as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        sys.exit(EXIT_ERROR)


def main():
    parser = argparse.ArgumentParser(
        description="Thread Dump Report: threads, contended locks and similar stacks of jstack dumps",
        epilog="Example: jstack <pid> | python get-thread-dump-report.py -"
    )
    parser.add_argument(
        "dump_files",
        nargs="+",
        help="Thread dump files, or '-' to read from stdin"
    )
    parser.add_argument(
        "--format",
        choices=REPORT_FORMATS,
        default="txt",
        help="Output format (default: txt)"
    )
    parser.add_argument(
        "--stack-lines",
        type=int,
        default=DEFAULT_STACK_LINES,
        help=f"Frames compared when grouping similar stacks (default: {DEFAULT_STACK_LINES})"
    )
    parser.add_argument(
        "--min-group-size",
        type=int,
        default=DEFAULT_MIN_GROUP_SIZE,
        help=f"Smallest similar-stack group reported (default: {DEFAULT_MIN_GROUP_SIZE})"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Show warnings for lines the parser does not understand"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.WARNING if args.verbose else logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
    )

    all_findings = []
    for dump_file in args.dump_files:
        content, filename = read_dump(dump_file)

        if not validate_thread_dump(content):
            print(f"Error: Invalid format - expected jstack thread dump: {dump_file}", file=sys.stderr)
            sys.exit(EXIT_ERROR)

        dump = parse_thread_dump(content, filename=filename)
        if not dump.threads:
            print(f"Warning: No threads found in {dump_file}", file=sys.stderr)

        findings = analyze_thread_dump(dump, args.stack_lines, args.min_group_size)
        all_findings.append(findings)

    if args.format == "json" and len(all_findings) > 1:
        print(json.dumps(all_findings, indent=2))
    else:
        print("\n".join(generate_report(f, format=args.format) for f in all_findings))
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
