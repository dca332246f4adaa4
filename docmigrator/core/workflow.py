from __future__ import annotations
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

PR_REFERENCE_RE = re.compile(r"\[#\d+\]\s*")


class JobStage(str, Enum):
    QUEUED = "QUEUED"
    FETCHING = "FETCHING"
    CONVERTING = "CONVERTING"
    WRITING = "WRITING"
    VERIFYING = "VERIFYING"
    PUBLISHING = "PUBLISHING"
    DONE = "DONE"
    FAILED = "FAILED"

    def __str__(self) -> str:
        return self.value


PIPELINE = [
    JobStage.FETCHING,
    JobStage.CONVERTING,
    JobStage.WRITING,
    JobStage.VERIFYING,
    JobStage.PUBLISHING,
]

_ORDER = {stage: i for i, stage in enumerate([JobStage.QUEUED, *PIPELINE, JobStage.DONE])}
TERMINAL = {JobStage.DONE, JobStage.FAILED}


def has_pr_reference(title: str) -> bool:
    return PR_REFERENCE_RE.search(title) is not None


def linked_title(title: str, pr_number: int) -> str:
    """Ticket title once a change request exists: ``[#<pr>] <title>``."""
    return f"[#{pr_number}] {PR_REFERENCE_RE.sub('', title, count=1)}"


@dataclass
class MigrationJob:
    """One ticket-driven migration of a single source page."""
    issue_number: int
    title: str
    source_url: Optional[str] = None
    stage: JobStage = JobStage.QUEUED
    pr_number: Optional[int] = None
    error_message: Optional[str] = None
    artifacts: Dict[str, Any] = field(default_factory=dict)

    @property
    def id(self) -> str:
        return str(self.issue_number)

    @property
    def is_terminal(self) -> bool:
        return self.stage in TERMINAL

    def advance(self, stage: JobStage) -> None:
        """Move the job forward. Terminal jobs and backwards moves are rejected."""
        if self.is_terminal:
            raise ValueError(f"Job #{self.issue_number} is already {self.stage}")
        if stage is JobStage.FAILED:
            self.stage = stage
            return
        if _ORDER[stage] <= _ORDER[self.stage]:
            raise ValueError(f"Job #{self.issue_number} cannot move from {self.stage} to {stage}")
        self.stage = stage

    def fail(self, message: str) -> None:
        self.advance(JobStage.FAILED)
        self.error_message = message
