"""Generation history and the execution orchestrator."""

from llm_rpa.orchestrator.history import ExecutionHistory, LLMExecutionState
from llm_rpa.orchestrator.orchestrator import ExecutionOrchestrator
from llm_rpa.orchestrator.targets import QUICK_EXAMPLES, BrowserTab, BrowserTargets

__all__ = [
    "QUICK_EXAMPLES",
    "BrowserTab",
    "BrowserTargets",
    "ExecutionHistory",
    "ExecutionOrchestrator",
    "LLMExecutionState",
]
