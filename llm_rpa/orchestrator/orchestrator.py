"""
Execution orchestrator: the public "generate actions for this instruction" surface.

ExecutionOrchestrator owns the generation history and dispatches each
request as its own asyncio task. Consumers (a UI panel, the CLI) use only:

- request_generation(instruction) -> record id
- dismiss_error(), clear_history() / cancel_all()
- history, history_newest_first(), is_generating, last_error, subscribe()

Concurrency model:
    Generations run concurrently and may finish in any order. Each task
    writes only its own history entry (keyed by record id), and only while
    it is still the registered task for that record. Clearing the history
    cancels in-flight tasks; a completion that races the clear finds its
    record gone and is dropped.

Example:
    >>> async with ExecutionOrchestrator(settings) as orchestrator:
    ...     record_id = orchestrator.request_generation("Click search")
    ...     record = await orchestrator.wait_for(record_id)
    >>> record.status
    'ready'
"""

import asyncio
import logging
from collections.abc import Callable

from llm_rpa.config.settings import LLMSettings
from llm_rpa.exceptions import InstructionValidationError, InvalidTransitionError
from llm_rpa.llm_runner.completion_client import CompletionClient
from llm_rpa.llm_runner.models import LLMAction, LLMRpaRequest
from llm_rpa.orchestrator.history import ExecutionHistory, LLMExecutionState
from llm_rpa.orchestrator.targets import QUICK_EXAMPLES, BrowserTargets
from llm_rpa.utils.logging import log_with_context

logger = logging.getLogger(__name__)

BLANK_INSTRUCTION_ERROR = "Please enter an instruction"

HistoryListener = Callable[[tuple[LLMExecutionState, ...]], None]


class ExecutionOrchestrator:
    """
    Tracks generations from request to terminal status.

    Attributes:
        settings: Settings shared with the completion client
        completion_client: Completion boundary (never raises)
        targets: Browser targets supplying the default source URL
    """

    def __init__(
        self,
        settings: LLMSettings,
        completion_client: CompletionClient | None = None,
        targets: BrowserTargets | None = None,
    ):
        self.settings = settings
        self.completion_client = (
            completion_client
            if completion_client is not None
            else CompletionClient(settings)
        )
        self.targets = targets if targets is not None else BrowserTargets()

        self._history = ExecutionHistory()
        self._tasks: dict[str, asyncio.Task] = {}
        self._listeners: list[HistoryListener] = []
        self._last_error: str | None = None
        self._current_instruction = ""
        self._closed = False

    async def __aenter__(self) -> "ExecutionOrchestrator":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def history(self) -> tuple[LLMExecutionState, ...]:
        """All records, oldest first."""
        return self._history.records()

    def history_newest_first(self) -> tuple[LLMExecutionState, ...]:
        return self._history.newest_first()

    def get(self, record_id: str) -> LLMExecutionState | None:
        return self._history.get(record_id)

    @property
    def is_generating(self) -> bool:
        """
        True while at least one record is still generating.

        Stays True after aclose() when generations were cancelled in flight:
        their records are left in "generating" and never finish.
        """
        return self._history.any_generating()

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def current_instruction(self) -> str:
        return self._current_instruction

    def subscribe(self, listener: HistoryListener) -> Callable[[], None]:
        """
        Register a listener called with the history after every change.

        Returns:
            Callable that unregisters the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        snapshot = self._history.records()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception as e:
                logger.warning(f"History listener failed: {e}", exc_info=True)

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def request_generation(
        self,
        instruction: str,
        source_url: str | None = None,
    ) -> str:
        """
        Start generating a plan for an instruction.

        The record is created synchronously in "generating" status; the
        completion runs as an independent asyncio task. Must be called from
        a running event loop.

        Args:
            instruction: Natural-language instruction
            source_url: Target page; defaults to the selected browser tab

        Returns:
            str: Stable record id

        Raises:
            InstructionValidationError: If the instruction is blank (no record
                is created and last_error is set)
            RuntimeError: If the orchestrator is closed or no loop is running
        """
        return self._start(instruction, source_url, clear_draft=False)

    def _start(
        self, instruction: str, source_url: str | None, clear_draft: bool
    ) -> str:
        if self._closed:
            raise RuntimeError("Orchestrator is closed")

        if not instruction or instruction.isspace():
            self._last_error = BLANK_INSTRUCTION_ERROR
            raise InstructionValidationError(BLANK_INSTRUCTION_ERROR)

        loop = asyncio.get_running_loop()

        self._last_error = None
        target_url = source_url or self.targets.source_url

        record = LLMExecutionState(instruction=instruction, source_url=target_url)
        self._history.append(record)

        request = LLMRpaRequest(
            actions=[LLMAction(instruction=instruction)],
            source_url=target_url,
        )
        task = loop.create_task(
            self._run(record.id, request, clear_draft),
            name=f"llm-rpa-generation-{record.id}",
        )
        self._tasks[record.id] = task
        task.add_done_callback(lambda t, rid=record.id: self._forget_task(rid, t))

        log_with_context(
            logger,
            logging.INFO,
            "Generation requested",
            context={"source_url": target_url},
            record_id=record.id,
        )
        self._notify()
        return record.id

    def _forget_task(self, record_id: str, task: asyncio.Task) -> None:
        if self._tasks.get(record_id) is task:
            del self._tasks[record_id]

    def _is_live(self, record_id: str) -> bool:
        """A task may write only while it is the registered task of a present record."""
        return (
            record_id in self._history
            and self._tasks.get(record_id) is asyncio.current_task()
        )

    async def _run(
        self, record_id: str, request: LLMRpaRequest, clear_draft: bool
    ) -> None:
        try:
            response = await self.completion_client.complete(request)
            steps = tuple(response.configuration)
            message = response.message
        except Exception as e:
            # complete() is not expected to raise
            logger.error(f"Unexpected completion failure: {e}", exc_info=True)
            steps, message = (), str(e) or "Unknown error occurred"

        if not self._is_live(record_id):
            logger.debug(f"Dropping result for cleared generation {record_id}")
            return

        if steps:
            self._history.update(
                record_id,
                status="ready",
                generated_actions=steps,
                message=message,
            )
            if clear_draft and self._current_instruction == request.actions[0].instruction:
                self._current_instruction = ""
        else:
            self._history.update(
                record_id,
                status="error",
                error=message or "Unknown error",
                message=message,
            )

        log_with_context(
            logger,
            logging.INFO,
            "Generation finished",
            context={"status": self._history.get(record_id).status, "steps": len(steps)},
            record_id=record_id,
        )
        self._notify()

    async def wait_for(self, record_id: str) -> LLMExecutionState | None:
        """
        Wait until a generation finishes.

        Returns:
            The record, or None if it was cleared meanwhile
        """
        task = self._tasks.get(record_id)
        if task is not None:
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._history.get(record_id)

    async def join(self) -> tuple[LLMExecutionState, ...]:
        """Wait for every in-flight generation and return the history."""
        while True:
            pending = [t for t in self._tasks.values() if not t.done()]
            if not pending:
                break
            await asyncio.gather(*pending, return_exceptions=True)
        return self.history

    # ------------------------------------------------------------------
    # History management
    # ------------------------------------------------------------------

    def clear_history(self) -> None:
        """Cancel in-flight generations and drop every record."""
        in_flight = list(self._tasks.values())
        self._tasks.clear()
        for task in in_flight:
            task.cancel()

        self._history.clear()
        logger.info(f"Cleared history ({len(in_flight)} generations cancelled)")
        self._notify()

    def cancel_all(self) -> None:
        self.clear_history()

    def dismiss_error(self) -> None:
        self._last_error = None

    def mark_completed(self, record_id: str) -> LLMExecutionState:
        """
        Mark a ready plan as executed.

        Raises:
            KeyError: If the record does not exist
            InvalidTransitionError: If the record is not "ready"
        """
        record = self._history.get(record_id)
        if record is None:
            raise KeyError(f"No generation record with id '{record_id}'")
        if record.status != "ready":
            raise InvalidTransitionError(
                f"Record {record_id} is '{record.status}', expected 'ready'"
            )

        updated = self._history.update(record_id, status="completed")
        self._notify()
        return updated

    # ------------------------------------------------------------------
    # Instruction draft
    # ------------------------------------------------------------------

    def update_instruction(self, instruction: str) -> None:
        self._current_instruction = instruction

    def apply_quick_example(self, label: str) -> str:
        """
        Replace the draft with a predefined example instruction.

        Raises:
            KeyError: If label is not a known quick example
        """
        self._current_instruction = QUICK_EXAMPLES[label]
        return self._current_instruction

    def generate_actions(self) -> str:
        """
        Submit the current draft.

        The draft is cleared when its generation ends "ready".

        Raises:
            InstructionValidationError: If the draft is blank
        """
        return self._start(self._current_instruction, None, clear_draft=True)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """
        Cancel in-flight generations and release the HTTP client.

        In-flight records are left in "generating"; nothing is written to the
        history after this returns.
        """
        if self._closed:
            return
        self._closed = True

        in_flight = list(self._tasks.values())
        self._tasks.clear()
        for task in in_flight:
            task.cancel()
        if in_flight:
            await asyncio.gather(*in_flight, return_exceptions=True)

        await self.completion_client.aclose()
        logger.debug(f"Orchestrator closed ({len(in_flight)} generations cancelled)")
