"""
Tests for llm_runner.mock_client module.

Tests cover:
- Placeholder plan contents
- Call counting and provider labelling
"""

import pytest

from llm_rpa.llm_runner.mock_client import (
    MOCK_MESSAGE,
    MOCK_NOTE,
    MockRpaClient,
    create_mock_response,
)
from llm_rpa.llm_runner.models import LLMAction, LLMRpaRequest


def make_request(*instructions: str) -> LLMRpaRequest:
    return LLMRpaRequest(
        actions=[LLMAction(instruction=text) for text in instructions],
        source_url="https://example.com",
    )


class TestCreateMockResponse:
    """Test suite for create_mock_response()."""

    def test_single_wait_step(self):
        response = create_mock_response(make_request("Click the login button"))

        assert response.status == "success"
        assert response.message == MOCK_MESSAGE
        assert len(response.configuration) == 1

        step = response.configuration[0]
        assert step.name == "Example: Click the login button"
        assert step.type == "wait"
        assert step.action_type == "default"
        assert step.selector.type == "none"
        assert step.selector.value is None
        assert step.value == "1000"
        assert step.meta == {"note": MOCK_NOTE}

    def test_uses_first_instruction(self):
        response = create_mock_response(make_request("First", "Second"))

        assert response.configuration[0].name == "Example: First"

    def test_no_instructions(self):
        response = create_mock_response(make_request())

        assert response.configuration[0].name == "Example: wait"

    def test_note_text(self):
        assert MOCK_NOTE == "Configure API key in Settings > LLM Providers"


class TestMockRpaClient:
    """Test suite for MockRpaClient."""

    def test_defaults(self):
        client = MockRpaClient()

        assert client.provider == "mock"
        assert client.model_name == "mock-model"
        assert client.calls == 0

    @pytest.mark.asyncio
    async def test_generate_plan_counts_calls(self):
        client = MockRpaClient(provider="openai")

        await client.generate_plan(make_request("a"))
        response = await client.generate_plan(make_request("b"))

        assert client.calls == 2
        assert response.configuration[0].name == "Example: b"
