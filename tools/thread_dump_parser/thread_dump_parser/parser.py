# thread_dump_parser/parser.py

import logging
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .classifier import LineRecord, RecordKind, classify_line, thread_status_from_string
from .model import Lock, Thread, ThreadDump, ThreadStatus

logger = logging.getLogger(__name__)

# threaddump.1555401600000.txt -> epoch millis
FILENAME_DATE_PATTERN = re.compile(r'\.(\d*)\.txt$')

WAIT_VERBS = ("waiting on", "parking to wait for", "waiting to lock")
LOCKED_VERB = "locked"
ELIMINATED_VERB = "eliminated"

# Statuses for which a thread without an explicit wait target gets one guessed
ANONYMOUS_WAIT_STATUSES = (ThreadStatus.BLOCKED, ThreadStatus.TIMED_WAITING, ThreadStatus.WAITING)


def date_from_filename(filename: Optional[str]) -> Optional[datetime]:
    """Capture date encoded in the dump's filename, or None."""
    if not filename:
        return None
    match = FILENAME_DATE_PATTERN.search(filename)
    if not match or not match.group(1):
        return None
    try:
        return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return None


class LockRegistry:
    """Deduplicates locks by id within one dump. The dump's lock list is the storage."""

    def __init__(self, locks: List[Lock]):
        self._locks = locks
        self._by_id: Dict[str, Lock] = {lock.id: lock for lock in locks}

    def fetch_or_create(self, lock_id: str, class_name: str) -> Lock:
        lock = self._by_id.get(lock_id)
        if lock is None:
            lock = Lock(id=lock_id, class_name=class_name)
            self._locks.append(lock)
            self._by_id[lock_id] = lock
        return lock


def _drop_held(thread: Thread, lock: Lock) -> None:
    if lock in thread.locks_held:
        thread.locks_held.remove(lock)
    if lock in thread.classical_locks_held:
        thread.classical_locks_held.remove(lock)
    if lock.owner is thread:
        lock.owner = None


def _wait_on(thread: Thread, lock: Lock) -> None:
    """Make `lock` the thread's wait target, keeping both sides of the link in agreement."""
    previous = thread.waiting_on
    if previous is not None and previous is not lock and thread in previous.waiting:
        previous.waiting.remove(thread)

    _drop_held(thread, lock)
    if thread not in lock.waiting:
        lock.waiting.append(thread)
    thread.waiting_on = lock


def _hold(thread: Thread, lock: Lock, classical: bool) -> None:
    lock.owner = thread
    if lock not in thread.locks_held:
        thread.locks_held.append(lock)
    if classical and lock not in thread.classical_locks_held:
        thread.classical_locks_held.append(lock)


def identify_anonymous_synchronizers(threads: List[Thread]) -> None:
    """
    Guess the wait target of waiting/blocked threads the dump doesn't name one for.

    A thread waiting for a notification is sometimes printed without any
    "waiting on" line. We assume it waits on the first monitor it holds,
    which is a best guess: a thread holding several monitors gives no hint
    which one it released.
    """
    for thread in threads:
        if thread.waiting_on is not None or thread.status not in ANONYMOUS_WAIT_STATUSES:
            continue
        if not thread.classical_locks_held:
            continue

        lock = thread.classical_locks_held[0]
        lock.owner = None
        _wait_on(thread, lock)


class ThreadDumpParser:
    """
    Parsing session for a single dump.

    Holds the "current thread" cursor and the lock registry, so separate
    dumps can be parsed independently.

    Everything after the JVM's "Found one Java-level deadlock:" banner is
    skipped: that appendix re-lists threads and their locks in a shorter form.
    """

    def __init__(self, filename: Optional[str] = None):
        self.dump = ThreadDump(date=date_from_filename(filename), filename=filename)
        self.locks = LockRegistry(self.dump.locks)
        self.current_thread: Optional[Thread] = None
        self.in_deadlock_report = False

    def feed(self, line: str) -> None:
        if self.in_deadlock_report:
            return

        record = classify_line(line)

        if record.kind is RecordKind.THREAD_HEADER:
            self._start_thread(record)
            return

        if record.kind is RecordKind.JVM_INFO:
            if self.dump.jvm_info is None:
                self.dump.jvm_info = record.text.strip()
            return

        if record.kind is RecordKind.DEADLOCK_REPORT:
            self.in_deadlock_report = True
            self.current_thread = None
            return

        if record.kind is RecordKind.IGNORABLE:
            return

        # Preamble lines before the first thread belong to nobody
        if self.current_thread is None:
            return

        if record.kind is RecordKind.STACK_FRAME:
            self.current_thread.stack_trace.append(record.frame)
        elif record.kind is RecordKind.THREAD_STATE:
            self.current_thread.status = thread_status_from_string(record.state)
        elif record.kind is RecordKind.SYNC_STATUS:
            self._synchronization_status(record)
        elif record.kind is RecordKind.HELD_LOCK:
            self._held_lock(record)
        else:
            logger.warning("Unable to parse line: %s", line)

    def finish(self) -> ThreadDump:
        identify_anonymous_synchronizers(self.dump.threads)
        self.current_thread = None
        return self.dump

    def _start_thread(self, record: LineRecord) -> None:
        thread = Thread(name=record.name, id=record.thread_id, daemon=record.daemon)
        self.dump.threads.append(thread)
        self.current_thread = thread

    def _synchronization_status(self, record: LineRecord) -> None:
        thread = self.current_thread

        if record.verb in WAIT_VERBS:
            lock = self.locks.fetch_or_create(record.lock_id, record.class_name)
            _wait_on(thread, lock)
        elif record.verb == LOCKED_VERB:
            if thread.waiting_on is not None and thread.waiting_on.id == record.lock_id:
                # monitor released while waiting for the notification
                return
            lock = self.locks.fetch_or_create(record.lock_id, record.class_name)
            _hold(thread, lock, classical=True)
        elif record.verb == ELIMINATED_VERB:
            # lock removed by escape analysis
            return
        else:
            logger.warning("Unknown synchronization status: %s", record.text)

    def _held_lock(self, record: LineRecord) -> None:
        thread = self.current_thread
        if thread.waiting_on is not None and thread.waiting_on.id == record.lock_id:
            return
        lock = self.locks.fetch_or_create(record.lock_id, record.class_name)
        _hold(thread, lock, classical=False)


def parse_thread_dump(content: str, filename: Optional[str] = None) -> ThreadDump:
    """
    Parse a jstack thread dump into threads and the locks linking them.

    Args:
        content: Raw thread dump text (from jstack output)
        filename: Name of the file the dump came from; its `.<millis>.txt`
            suffix, when present, becomes the dump date

    Returns:
        ThreadDump with threads in order of appearance and deduplicated locks
    """
    session = ThreadDumpParser(filename)
    for line in content.splitlines():
        session.feed(line)
    return session.finish()


def validate_thread_dump(content: str) -> bool:
    """
    Check if content looks like a thread dump.

    Returns True if it has the jstack banner or at least one thread header
    with a native id.
    """
    if not content:
        return False

    if "Full thread dump" in content:
        return True

    for line in content.splitlines():
        record = classify_line(line)
        if record.kind is RecordKind.THREAD_HEADER and record.thread_id is not None:
            return True

    return False
