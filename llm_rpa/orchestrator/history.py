"""
Generation records and the keyed history store.

Each user-initiated generation is one LLMExecutionState. Records are
immutable; a status change replaces the record under its id. Because every
completion writes only the entry for its own id, concurrent completions
cannot overwrite each other.

Lifecycle:
    generating -> ready | error
    ready -> completed   (reserved for a "steps were executed" signal)
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Literal

from llm_rpa.llm_runner.models import RpaActionConfig
from llm_rpa.utils.time import utc_now

ExecutionStatus = Literal["generating", "ready", "completed", "error"]


def new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class LLMExecutionState:
    """
    Tracked lifecycle of one generation.

    Attributes:
        instruction: Originating instruction text
        status: Lifecycle status
        generated_actions: Plan steps (empty until the generation finishes)
        error: Error message when status is "error"
        message: Message returned with the plan, if any
        source_url: Page the plan targets
        timestamp: Creation time (UTC)
        id: Stable record identifier
    """

    instruction: str
    status: ExecutionStatus = "generating"
    generated_actions: tuple[RpaActionConfig, ...] = ()
    error: str | None = None
    message: str | None = None
    source_url: str | None = None
    timestamp: datetime = field(default_factory=utc_now)
    id: str = field(default_factory=new_record_id)


class ExecutionHistory:
    """Insertion-ordered store of generation records keyed by record id."""

    def __init__(self):
        self._records: dict[str, LLMExecutionState] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    def append(self, record: LLMExecutionState) -> None:
        self._records[record.id] = record

    def get(self, record_id: str) -> LLMExecutionState | None:
        return self._records.get(record_id)

    def update(self, record_id: str, **changes) -> LLMExecutionState | None:
        """
        Replace one record with updated fields.

        Returns:
            The new record, or None if the id is no longer in the history
        """
        current = self._records.get(record_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self._records[record_id] = updated
        return updated

    def clear(self) -> None:
        self._records.clear()

    def records(self) -> tuple[LLMExecutionState, ...]:
        """All records, oldest first."""
        return tuple(self._records.values())

    def newest_first(self) -> tuple[LLMExecutionState, ...]:
        return tuple(reversed(self._records.values()))

    def any_generating(self) -> bool:
        return any(r.status == "generating" for r in self._records.values())
