import enum
import secrets
import string
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional


class JobStatus(enum.Enum):
    """Audit job status state machine"""
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"


TERMINAL_STATUSES = frozenset({JobStatus.completed, JobStatus.failed})

ALLOWED_TRANSITIONS = {
    JobStatus.pending: {JobStatus.running},
    JobStatus.running: {JobStatus.completed, JobStatus.failed},
    JobStatus.completed: set(),
    JobStatus.failed: set(),
}

_ID_ALPHABET = string.digits + string.ascii_lowercase


class InvalidJobTransition(ValueError):
    pass


def generate_job_id(suffix_length: int = 9) -> str:
    """Millisecond timestamp plus a random base36 suffix, e.g. ``test_1760000000000_k3j9x0a2b``."""
    millis = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(suffix_length))
    return f"test_{millis}_{suffix}"


@dataclass
class Job:
    url: str
    options: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=generate_job_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    status: JobStatus = JobStatus.pending
    error: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def transition(self, new_status: JobStatus) -> None:
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidJobTransition(
                f"Job {self.id}: cannot move from {self.status.value} to {new_status.value}"
            )
        self.status = new_status

    def start(self) -> None:
        self.transition(JobStatus.running)

    def complete(self) -> None:
        self.transition(JobStatus.completed)

    def fail(self, error: str) -> None:
        self.transition(JobStatus.failed)
        self.error = error
