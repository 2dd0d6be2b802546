# thread_dump_parser/classifier.py

import re
from enum import Enum
from typing import Optional
from dataclasses import dataclass

from .model import ThreadStatus


class RecordKind(Enum):
    THREAD_HEADER = "thread_header"
    STACK_FRAME = "stack_frame"
    THREAD_STATE = "thread_state"
    SYNC_STATUS = "sync_status"
    HELD_LOCK = "held_lock"
    JVM_INFO = "jvm_info"
    DEADLOCK_REPORT = "deadlock_report"
    IGNORABLE = "ignorable"
    UNRECOGNIZED = "unrecognized"


@dataclass(frozen=True)
class LineRecord:
    """One classified line. Only the fields relevant to `kind` are set."""
    kind: RecordKind
    text: str
    name: Optional[str] = None
    thread_id: Optional[int] = None
    daemon: bool = False
    frame: Optional[str] = None
    state: Optional[str] = None
    verb: Optional[str] = None
    lock_id: Optional[str] = None
    class_name: Optional[str] = None


THREAD_HEADER_PREFIX = '"'

# Thread header:
# "pool-1-thread-3" #15 daemon prio=5 os_prio=0 tid=0x00007f... nid=0x1234 waiting on condition
NAME_PATTERN = re.compile(r'^"(.*)"(?=\s|$)')
NID_PATTERN = re.compile(r'\snid=([0-9a-fA-Fx,]+)')
DAEMON_PATTERN = re.compile(r'(?:^|\s)daemon(?=\s|$)')

# Stack frame: "	at java.lang.Object.wait(Native Method)"
FRAME_PATTERN = re.compile(r'^\s+at (.*)')

# Thread state line: java.lang.Thread.State: WAITING (parking)
THREAD_STATE_PATTERN = re.compile(r'Thread\.State:\s*(\S*)')

# Synchronization status: - waiting on <0x00000000e1234567> (a java.lang.Object)
# jdk 11+ pads the verb: - parking to wait for  <0x...> (a ...)
SYNC_STATUS_PATTERN = re.compile(r'^\s+- (.*?) +<([x0-9a-fA-F]+)> \(a (.*)\)')

# Ownable synchronizer held: - <0x000000076ab62208> (a java.util.concurrent.locks.ReentrantLock$NonfairSync)
HELD_LOCK_PATTERN = re.compile(r'^\s+- <([x0-9a-fA-F]+)> \(a (.*)\)')

# Informational lines carrying nothing we keep
LOCKED_OWNABLE_SYNCHRONIZERS_PATTERN = re.compile(r'^\s+Locked ownable synchronizers:')
NONE_HELD_PATTERN = re.compile(r'^\s+- None')
JNI_REFERENCES_PATTERN = re.compile(r'^\s?JNI global (?:references|refs): (\d+)')

# Full thread dump OpenJDK 64-Bit Server VM (17.0.1+12 mixed mode):
JVM_INFO_PATTERN = re.compile(r'^Full thread dump ')

# Appendix jstack prints after the threads, repeating their names and locks:
# Found one Java-level deadlock:
DEADLOCK_REPORT_PATTERN = re.compile(r'^Found (?:one|\d+) (?:Java-level )?deadlock')


def parse_native_id(token: str) -> Optional[int]:
    """Convert an nid token (0x1a or 26) to an int, None if it is not a number."""
    token = token.replace(",", "")
    try:
        if token.lower().startswith("0x"):
            return int(token, 16)
        return int(token)
    except ValueError:
        return None


def _classify_header(line: str) -> LineRecord:
    name_match = NAME_PATTERN.match(line)
    if name_match:
        name = name_match.group(1).strip()
        rest = line[name_match.end():]
    else:
        # unterminated quote, keep whatever follows it
        name = line[1:].strip()
        rest = ""

    nid_match = NID_PATTERN.search(rest)
    thread_id = parse_native_id(nid_match.group(1)) if nid_match else None

    return LineRecord(
        kind=RecordKind.THREAD_HEADER,
        text=line,
        name=name,
        thread_id=thread_id,
        daemon=DAEMON_PATTERN.search(rest) is not None,
    )


def classify_line(line: str) -> LineRecord:
    """
    Classify one line of a thread dump.

    Every line maps to exactly one record; lines that match nothing are
    returned as UNRECOGNIZED rather than raising.
    """
    if line.startswith(THREAD_HEADER_PREFIX):
        return _classify_header(line)

    if not line.strip():
        return LineRecord(kind=RecordKind.IGNORABLE, text=line)

    frame_match = FRAME_PATTERN.match(line)
    if frame_match:
        return LineRecord(kind=RecordKind.STACK_FRAME, text=line, frame=frame_match.group(1))

    state_match = THREAD_STATE_PATTERN.search(line)
    if state_match:
        return LineRecord(
            kind=RecordKind.THREAD_STATE,
            text=line,
            state=state_match.group(1),
        )

    sync_match = SYNC_STATUS_PATTERN.match(line)
    if sync_match:
        return LineRecord(
            kind=RecordKind.SYNC_STATUS,
            text=line,
            verb=sync_match.group(1),
            lock_id=sync_match.group(2),
            class_name=sync_match.group(3),
        )

    held_match = HELD_LOCK_PATTERN.match(line)
    if held_match:
        return LineRecord(
            kind=RecordKind.HELD_LOCK,
            text=line,
            lock_id=held_match.group(1),
            class_name=held_match.group(2),
        )

    if (LOCKED_OWNABLE_SYNCHRONIZERS_PATTERN.match(line)
            or NONE_HELD_PATTERN.match(line)
            or JNI_REFERENCES_PATTERN.match(line)):
        return LineRecord(kind=RecordKind.IGNORABLE, text=line)

    if JVM_INFO_PATTERN.match(line):
        return LineRecord(kind=RecordKind.JVM_INFO, text=line)

    if DEADLOCK_REPORT_PATTERN.match(line):
        return LineRecord(kind=RecordKind.DEADLOCK_REPORT, text=line)

    return LineRecord(kind=RecordKind.UNRECOGNIZED, text=line)


def thread_status_from_string(state: str) -> ThreadStatus:
    """
    Map a Thread.State token to ThreadStatus.

    Exact member names win; otherwise BLOCKED*, WAITING* and TIME_WAITING*
    prefixes are tried in that order, and anything else is UNKNOWN.
    """
    if state in ThreadStatus.__members__:
        return ThreadStatus[state]

    if state.startswith("BLOCKED"):
        return ThreadStatus.BLOCKED
    if state.startswith("WAITING"):
        return ThreadStatus.WAITING
    if state.startswith("TIME_WAITING"):
        return ThreadStatus.TIMED_WAITING

    return ThreadStatus.UNKNOWN
