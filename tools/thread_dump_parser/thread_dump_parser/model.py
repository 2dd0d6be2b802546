# thread_dump_parser/model.py

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from dataclasses import dataclass, field


class ThreadStatus(Enum):
    RUNNABLE = "RUNNABLE"
    BLOCKED = "BLOCKED"
    WAITING = "WAITING"
    TIMED_WAITING = "TIMED_WAITING"
    NEW = "NEW"
    TERMINATED = "TERMINATED"
    UNKNOWN = "UNKNOWN"


@dataclass(eq=False)
class Lock:
    """A monitor or ownable synchronizer, unique per dump by id."""
    id: str
    class_name: str
    owner: Optional["Thread"] = field(default=None, repr=False)
    waiting: List["Thread"] = field(default_factory=list, repr=False)


@dataclass(eq=False)
class Thread:
    """Represents a single thread from a thread dump."""
    name: str
    id: Optional[int] = None  # native id (nid)
    daemon: bool = False
    status: ThreadStatus = ThreadStatus.UNKNOWN
    stack_trace: List[str] = field(default_factory=list)
    locks_held: List[Lock] = field(default_factory=list)
    classical_locks_held: List[Lock] = field(default_factory=list)  # monitors only
    waiting_on: Optional[Lock] = None


@dataclass
class ThreadDump:
    """Represents a complete thread dump."""
    date: Optional[datetime] = None
    filename: Optional[str] = None
    jvm_info: Optional[str] = None
    threads: List[Thread] = field(default_factory=list)
    locks: List[Lock] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Plain structure for JSON output; locks and threads refer to each other by id/index."""
        index = {id(t): i for i, t in enumerate(self.threads)}

        def thread_ref(thread: Optional[Thread]) -> Optional[Dict]:
            if thread is None:
                return None
            return {"index": index.get(id(thread)), "name": thread.name}

        return {
            "date": self.date.isoformat() if self.date else None,
            "filename": self.filename,
            "jvm_info": self.jvm_info,
            "threads": [
                {
                    "id": t.id,
                    "name": t.name,
                    "daemon": t.daemon,
                    "status": t.status.value,
                    "stack_trace": list(t.stack_trace),
                    "locks_held": [lock.id for lock in t.locks_held],
                    "classical_locks_held": [lock.id for lock in t.classical_locks_held],
                    "waiting_on": t.waiting_on.id if t.waiting_on else None,
                }
                for t in self.threads
            ],
            "locks": [
                {
                    "id": lock.id,
                    "class_name": lock.class_name,
                    "owner": thread_ref(lock.owner),
                    "waiting": [thread_ref(t) for t in lock.waiting],
                }
                for lock in self.locks
            ],
        }
