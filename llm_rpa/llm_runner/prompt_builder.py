"""
Prompt rendering for prompt-based provider adapters.

Turns an LLMRpaRequest into the single user prompt sent to Anthropic,
OpenAI and Together AI. The custom provider receives the request as JSON
and never sees this text.

The prompt has four parts:
1. Bulleted instruction lines
2. Source URL of the target page
3. The JSON schema the model must follow
4. Action vocabulary and selector guidelines
"""

import json

from llm_rpa.llm_runner.models import ACTION_TYPES, SELECTOR_TYPES, LLMRpaRequest

# System message for chat-completion style providers (OpenAI, Together AI)
SYSTEM_MESSAGE = "You are an RPA assistant that generates browser automation actions."

RESPONSE_SCHEMA = """{
    "configuration": [
        {
            "name": "Action description",
            "action_type": "default",
            "type": "action_type",
            "selector": {
                "type": "%s",
                "value": "selector_value_or_null",
                "isUnique": true
            },
            "value": "value_if_needed",
            "meta": {}
        }
    ],
    "status": "success",
    "message": "Explanation of what the actions do"
}""" % "|".join(SELECTOR_TYPES)

SELECTOR_GUIDELINES = """Selector guidelines:
- For search fields, prefer name or id attributes
- Use CSS selectors over XPath when possible
- Use "input" type for typing text
- Use "keypress" with value "Enter" for form submission"""

PROMPT_TEMPLATE = """Generate RPA browser automation actions for the following instructions:

Instructions:
{instructions}

Source URL: {source_url}
{current_configuration}
Return the response as a JSON object with the following structure:
{schema}

Available action types: {action_types}

{guidelines}

Provide only the JSON response without additional text."""


def build_prompt(request: LLMRpaRequest) -> str:
    """
    Render the user prompt for a request.

    When the request carries a prior plan, it is embedded as
    "Current configuration" so the model refines it instead of starting over.

    Args:
        request: Completion request

    Returns:
        str: Prompt text

    Example:
        >>> request = LLMRpaRequest(
        ...     actions=[LLMAction(instruction="Click search")],
        ...     source_url="https://example.com",
        ... )
        >>> "- Click search" in build_prompt(request)
        True
    """
    instructions = "\n".join(f"- {action.instruction}" for action in request.actions)

    current_configuration = ""
    if request.configuration:
        steps = [
            step.model_dump(mode="json", by_alias=True)
            for step in request.configuration
        ]
        current_configuration = (
            "\nCurrent configuration (update it to satisfy the instructions):\n"
            f"{json.dumps(steps, indent=2)}\n"
        )

    return PROMPT_TEMPLATE.format(
        instructions=instructions,
        source_url=request.source_url,
        current_configuration=current_configuration,
        schema=RESPONSE_SCHEMA,
        action_types=", ".join(ACTION_TYPES),
        guidelines=SELECTOR_GUIDELINES,
    )
