"""Submission records and the ordered store shared by the monitor loops."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable


class StatusGroup(str, Enum):
    SUCCESS = "success"
    IN_PROGRESS = "in_progress"
    FAILURE = "failure"
    INTERNAL_ERROR = "internal_error"


class Status(Enum):
    WAITING_JUDGE = ("WJ", StatusGroup.IN_PROGRESS)
    WAITING_REJUDGE = ("WR", StatusGroup.IN_PROGRESS)
    JUDGING = ("...", StatusGroup.IN_PROGRESS)
    ACCEPTED = ("AC", StatusGroup.SUCCESS)
    WRONG_ANSWER = ("WA", StatusGroup.FAILURE)
    TIME_LIMIT_EXCEEDED = ("TLE", StatusGroup.FAILURE)
    MEMORY_LIMIT_EXCEEDED = ("MLE", StatusGroup.FAILURE)
    RUNTIME_ERROR = ("RE", StatusGroup.FAILURE)
    COMPILE_ERROR = ("CE", StatusGroup.FAILURE)
    OUTPUT_LIMIT_EXCEEDED = ("OLE", StatusGroup.FAILURE)
    INTERNAL_ERROR = ("IE", StatusGroup.INTERNAL_ERROR)
    UNKNOWN = ("?", StatusGroup.FAILURE)

    def __init__(self, code: str, group: StatusGroup) -> None:
        self.code = code
        self.group = group

    def __str__(self) -> str:
        return self.code

    @property
    def in_progress(self) -> bool:
        return self.group is StatusGroup.IN_PROGRESS

    @classmethod
    def parse(cls, text: str) -> Status:
        """Map a display code to a status.

        Progress counters such as ``3/12`` mean the submission is being
        judged. Anything unrecognised becomes ``UNKNOWN`` so a new remote
        state never takes the screen down.
        """
        code = text.strip()
        if "/" in code:
            return cls.JUDGING
        return _BY_CODE.get(code, cls.UNKNOWN)


_BY_CODE: dict[str, Status] = {
    s.code: s for s in Status if s is not Status.UNKNOWN
}


@dataclass(frozen=True)
class Record:
    id: int
    time: datetime
    problem: str
    language: str
    score: int
    code_size: str
    status: Status
    execution_time: str | None
    memory: str | None
    detail: str


class RecordStore:
    """Records keyed by id, iterated in order of first appearance.

    Every access takes the lock for the length of one dict copy or one batch
    merge, so readers never see half of a batch.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: dict[int, Record] = {}

    def upsert_batch(self, records: Iterable[Record]) -> None:
        batch = list(records)
        with self._lock:
            for record in batch:
                # Assigning to an existing key keeps its position.
                self._records[record.id] = record

    def snapshot(self) -> list[Record]:
        with self._lock:
            return list(self._records.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
