# thread_dump_parser/analyzer.py

from typing import List, Dict
from collections import Counter, defaultdict
from .model import ThreadDump, ThreadStatus

# Frames compared when grouping threads by stack
DEFAULT_STACK_LINES = 10
DEFAULT_MIN_GROUP_SIZE = 2


def compute_thread_state_summary(dump: ThreadDump) -> Dict:
    """
    Compute summary statistics on thread states.
    """
    state_counts = Counter(t.status.value for t in dump.threads)
    daemon_count = sum(1 for t in dump.threads if t.daemon)

    return {
        "total_threads": len(dump.threads),
        "daemon_threads": daemon_count,
        "states": {status.value: state_counts.get(status.value, 0) for status in ThreadStatus},
        "runnable": state_counts.get(ThreadStatus.RUNNABLE.value, 0),
        "waiting": state_counts.get(ThreadStatus.WAITING.value, 0),
        "timed_waiting": state_counts.get(ThreadStatus.TIMED_WAITING.value, 0),
        "blocked": state_counts.get(ThreadStatus.BLOCKED.value, 0),
    }


def summarize_locks(dump: ThreadDump) -> List[Dict]:
    """
    List locks other threads are waiting on, most contended first.

    Owner is None for locks freed while their waiters wait for a notification.
    """
    contended = [lock for lock in dump.locks if lock.waiting]
    contended.sort(key=lambda lock: len(lock.waiting), reverse=True)

    return [
        {
            "id": lock.id,
            "class_name": lock.class_name,
            "owner": lock.owner.name if lock.owner else None,
            "waiters": [t.name for t in lock.waiting],
        }
        for lock in contended
    ]


def group_similar_stacks(
    dump: ThreadDump,
    lines_to_consider: int = DEFAULT_STACK_LINES,
    min_group_size: int = DEFAULT_MIN_GROUP_SIZE,
) -> List[Dict]:
    """
    Group threads whose top `lines_to_consider` frames are identical.

    Pattern: many threads parked on the same frames are usually one pool
    idling, or one bottleneck.
    """
    groups = defaultdict(list)
    for thread in dump.threads:
        if not thread.stack_trace:
            continue
        key = tuple(thread.stack_trace[:lines_to_consider])
        groups[key].append(thread)

    result = []
    for frames, threads in groups.items():
        if len(threads) < min_group_size:
            continue
        threads = sorted(threads, key=lambda t: t.name)
        result.append({
            "count": len(threads),
            "frames": list(frames),
            "thread_names": [t.name for t in threads],
            "states": dict(Counter(t.status.value for t in threads)),
        })

    # stable sort keeps first-seen order between equal sizes
    result.sort(key=lambda g: g["count"], reverse=True)
    return result


def analyze_thread_dump(
    dump: ThreadDump,
    lines_to_consider: int = DEFAULT_STACK_LINES,
    min_group_size: int = DEFAULT_MIN_GROUP_SIZE,
) -> Dict:
    """
    Main analysis orchestrator - collects the read-only views of a dump.
    """
    return {
        "filename": dump.filename,
        "date": dump.date.isoformat() if dump.date else None,
        "jvm_info": dump.jvm_info,
        "thread_stats": compute_thread_state_summary(dump),
        "locks": summarize_locks(dump),
        "stack_groups": group_similar_stacks(dump, lines_to_consider, min_group_size),
    }
