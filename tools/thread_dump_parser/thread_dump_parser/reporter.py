# thread_dump_parser/reporter.py

import json
from typing import Dict

REPORT_FORMATS = ("txt", "md", "json")

# Frames printed per stack group
FRAMES_IN_REPORT = 5


def generate_summary_line(findings: Dict) -> str:
    """One-liner for incident channels."""
    thread_stats = findings.get("thread_stats", {})
    locks = findings.get("locks", [])
    groups = findings.get("stack_groups", [])

    total = thread_stats.get("total_threads", 0)
    blocked = thread_stats.get("blocked", 0)
    summary = f"{total} threads"
    if blocked > 0:
        summary += f" ({blocked} blocked)"

    summary += f" | {len(locks)} contended lock{'s' if len(locks) != 1 else ''}"
    if locks:
        top = locks[0]
        summary += f" (max {len(top['waiters'])} waiters on {top['id']})"
    summary += f" | {len(groups)} similar stack group{'s' if len(groups) != 1 else ''}"
    return summary


def generate_report(findings: Dict, format: str = "txt") -> str:
    """Render analyzer findings as plain text, markdown or JSON."""
    if format not in REPORT_FORMATS:
        raise ValueError(f"Unknown report format: {format}")

    if format == "json":
        return json.dumps(findings, indent=2)

    md = format == "md"
    lines = []
    thread_stats = findings.get("thread_stats", {})

    # Header
    if md:
        lines.append("# Thread Dump Report")
        lines.append("")
        if findings.get("filename"):
            lines.append(f"**File:** {findings['filename']}")
        if findings.get("date"):
            lines.append(f"**Date:** {findings['date']}")
        if findings.get("jvm_info"):
            lines.append(f"**JVM:** {findings['jvm_info']}")
        lines.append("")
        lines.append(f"**Summary:** {generate_summary_line(findings)}")
        lines.append("")
    else:
        lines.append("=== Thread Dump Report ===")
        if findings.get("filename"):
            lines.append(f"File: {findings['filename']}")
        if findings.get("date"):
            lines.append(f"Date: {findings['date']}")
        if findings.get("jvm_info"):
            lines.append(f"JVM: {findings['jvm_info']}")
        lines.append(f"Summary: {generate_summary_line(findings)}")
        lines.append("")

    # Thread statistics
    states = thread_stats.get("states", {})
    if md:
        lines.append("## Thread Statistics")
        lines.append(f"**Total threads:** {thread_stats.get('total_threads', 0)}")
        lines.append(f"**Daemon threads:** {thread_stats.get('daemon_threads', 0)}")
        lines.append("")
        lines.append("| State | Count |")
        lines.append("|-------|-------|")
        for state, count in states.items():
            if count:
                lines.append(f"| {state} | {count} |")
        lines.append("")
    else:
        lines.append("Thread Statistics")
        lines.append(f"  {'Total:':<15}{thread_stats.get('total_threads', 0)}")
        lines.append(f"  {'Daemon:':<15}{thread_stats.get('daemon_threads', 0)}")
        for state, count in states.items():
            if count:
                lines.append(f"  {state + ':':<15}{count}")
        lines.append("")

    # Contended locks
    locks = findings.get("locks", [])
    lines.append("## Contended Locks" if md else "Contended Locks")
    if not locks:
        lines.append("  - none")
    for lock in locks:
        owner = lock["owner"] or "no owner (waiting for notification)"
        lines.append(f"  - <{lock['id']}> ({lock['class_name']}) held by {owner}, "
                     f"{len(lock['waiters'])} waiting: {', '.join(lock['waiters'])}")
    lines.append("")

    # Similar stacks
    groups = findings.get("stack_groups", [])
    lines.append("## Similar Stacks" if md else "Similar Stacks")
    if not groups:
        lines.append("  - none")
    for group in groups:
        states_str = ", ".join(f"{s}={c}" for s, c in group["states"].items())
        lines.append(f"  - {group['count']} threads ({states_str}): {', '.join(group['thread_names'])}")
        frames = group["frames"][:FRAMES_IN_REPORT]
        if md:
            lines.append("```")
            lines.extend(f"at {frame}" for frame in frames)
            lines.append("```")
        else:
            lines.extend(f"        at {frame}" for frame in frames)
    lines.append("")

    return "\n".join(lines)
