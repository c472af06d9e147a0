"""
Offline plan client used when no credential is configured.

MockRpaClient implements the LLMClient protocol without any network I/O. It
returns a deterministic single-step placeholder plan that tells the operator
to configure a credential, so the rest of the system (orchestrator, history,
CLI) is exercisable without live API keys.

Example:
    >>> client = MockRpaClient()
    >>> plan = await client.generate_plan(request)
    >>> plan.configuration[0].type
    'wait'
    >>> plan.status
    'success'
"""

import logging
from dataclasses import dataclass

from llm_rpa.llm_runner.models import (
    LLMRpaRequest,
    LLMRpaResponse,
    RpaActionConfig,
    SelectorInfo,
)

logger = logging.getLogger(__name__)

MOCK_NOTE = "Configure API key in Settings > LLM Providers"
MOCK_MESSAGE = "Mock response - configure an LLM API key to generate real actions"


def create_mock_response(request: LLMRpaRequest) -> LLMRpaResponse:
    """
    Build the placeholder plan for a request.

    Args:
        request: Completion request; its first instruction names the step

    Returns:
        LLMRpaResponse: One "wait" step, status "success"
    """
    instruction = request.actions[0].instruction if request.actions else "wait"

    return LLMRpaResponse(
        configuration=[
            RpaActionConfig(
                name=f"Example: {instruction}",
                action_type="default",
                type="wait",
                selector=SelectorInfo(type="none", value=None),
                value="1000",
                meta={"note": MOCK_NOTE},
            )
        ],
        status="success",
        message=MOCK_MESSAGE,
    )


@dataclass
class MockRpaClient:
    """
    LLMClient that never touches the network.

    Attributes:
        provider: Provider the mock stands in for
        model_name: Model identifier reported for logging
        calls: Number of generate_plan() calls served
    """

    provider: str = "mock"
    model_name: str = "mock-model"
    calls: int = 0

    async def generate_plan(self, request: LLMRpaRequest) -> LLMRpaResponse:
        self.calls += 1
        logger.info(
            f"No credential configured for provider '{self.provider}', "
            "returning mock plan"
        )
        return create_mock_response(request)
