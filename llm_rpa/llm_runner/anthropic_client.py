"""
Anthropic Messages API adapter for LLM RPA Planner.

Request:
- POST https://api.anthropic.com/v1/messages
- Headers: x-api-key, anthropic-version
- Body: model, max_tokens, temperature, single user message

Response:
- Completion text at content[0].text

Example:
    >>> client = AnthropicClient("claude-3-5-haiku-20241022", "sk-ant-...", http_client)
    >>> plan = await client.generate_plan(request)
"""

from typing import Any

from llm_rpa.exceptions import MalformedEnvelopeError
from llm_rpa.llm_runner.base_client import PromptClient

# Anthropic API endpoint
ANTHROPIC_API_URL = "https://api.anthropic.com/v1/messages"

# Anthropic API version header (required)
ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient(PromptClient):
    """
    Anthropic Messages API adapter.

    Security:
        - API key is only sent in the x-api-key header
        - API key is NEVER logged
    """

    provider = "anthropic"
    api_url = ANTHROPIC_API_URL

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": [{"role": "user", "content": prompt}],
        }

    def build_headers(self) -> dict[str, str]:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
            "Content-Type": "application/json",
        }

    def extract_text(self, data: dict[str, Any]) -> str:
        """
        Extract text from the first content block.

        Raises:
            MalformedEnvelopeError: If content[0].text is missing or not a string
        """
        content = data.get("content")
        if not isinstance(content, list) or not content:
            raise MalformedEnvelopeError("Anthropic response missing 'content' array")

        first = content[0]
        text = first.get("text") if isinstance(first, dict) else None
        if not isinstance(text, str):
            raise MalformedEnvelopeError(
                "Anthropic response missing 'content[0].text'"
            )
        return text
