"""
OpenAI-compatible Chat Completions adapters for LLM RPA Planner.

OpenAIClient and TogetherClient share the same wire format and differ only in
endpoint URL:

Request:
- POST <endpoint>/v1/chat/completions
- Headers: Authorization: Bearer <key>
- Body: model, temperature, max_tokens, [system, user] messages

Response:
- Completion text at choices[0].message.content

Example:
    >>> client = OpenAIClient("gpt-4o-mini", "sk-...", http_client)
    >>> plan = await client.generate_plan(request)
"""

from typing import Any

from llm_rpa.exceptions import MalformedEnvelopeError
from llm_rpa.llm_runner.base_client import PromptClient
from llm_rpa.llm_runner.catalog import provider_display_name
from llm_rpa.llm_runner.prompt_builder import SYSTEM_MESSAGE

# OpenAI API endpoint
OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"

# Together AI API endpoint (OpenAI-compatible)
TOGETHER_API_URL = "https://api.together.xyz/v1/chat/completions"


class OpenAIClient(PromptClient):
    """
    OpenAI Chat Completions adapter.

    Security:
        - API key is only sent in the Authorization header
        - API key is NEVER logged
    """

    provider = "openai"
    api_url = OPENAI_API_URL

    def build_payload(self, prompt: str) -> dict[str, Any]:
        return {
            "model": self.model_name,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
        }

    def build_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def extract_text(self, data: dict[str, Any]) -> str:
        """
        Extract the assistant message from the first choice.

        Raises:
            MalformedEnvelopeError: If choices[0].message.content is missing
        """
        name = provider_display_name(self.provider)

        choices = data.get("choices")
        if not isinstance(choices, list) or not choices:
            raise MalformedEnvelopeError(f"{name} response missing 'choices' array")

        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise MalformedEnvelopeError(
                f"{name} response missing 'choices[0].message.content'"
            )
        return content


class TogetherClient(OpenAIClient):
    """Together AI adapter (OpenAI-compatible wire format)."""

    provider = "together"
    api_url = TOGETHER_API_URL
