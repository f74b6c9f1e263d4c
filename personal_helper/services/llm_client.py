"""
Language model clients.

Claude (Anthropic) serves the PR analyzer and the QA agent through `complete`;
OpenAI drafts Jira tickets and runs the chat assistant. Callers treat both as
plain remote functions: no streaming, failures raised as LLMClientError.
"""
import json
from typing import Optional, Dict, Any, List
from anthropic import Anthropic, APIError
from openai import OpenAI, OpenAIError
from personal_helper.config import settings


class LLMClientError(Exception):
    """Raised when an LLM API call or response handling fails."""
    pass


_anthropic_client: Optional[Anthropic] = None


def get_anthropic_client() -> Anthropic:
    """
    Return the process-wide Anthropic client, creating it on first use.

    Raises:
        LLMClientError: If ANTHROPIC_API_KEY is not configured
    """
    global _anthropic_client
    if _anthropic_client is None:
        if not settings.anthropic_api_key:
            raise LLMClientError("ANTHROPIC_API_KEY environment variable is not set")
        _anthropic_client = Anthropic(api_key=settings.anthropic_api_key)
    return _anthropic_client


def complete(system_prompt: str, user_prompt: str, max_tokens: int = 4000) -> str:
    """
    Generate a completion with Claude.

    Args:
        system_prompt: System instruction
        user_prompt: Single user message
        max_tokens: Response token cap

    Returns:
        Text of the first text block, or "" if the response has none

    Raises:
        LLMClientError: If the API call fails
    """
    client = get_anthropic_client()

    try:
        response = client.messages.create(
            model=settings.anthropic_model,
            max_tokens=max_tokens,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )
    except APIError as e:
        raise LLMClientError(f"Error calling Claude API: {str(e)}") from e

    for block in response.content:
        if block.type == "text":
            return block.text
    return ""


_openai_client: Optional[OpenAI] = None


def get_openai_client() -> OpenAI:
    """
    Return the process-wide OpenAI client, creating it on first use.

    Raises:
        LLMClientError: If OPENAI_API_KEY is not configured
    """
    global _openai_client
    if _openai_client is None:
        if not settings.openai_api_key:
            raise LLMClientError("OPENAI_API_KEY environment variable is not set")
        _openai_client = OpenAI(api_key=settings.openai_api_key)
    return _openai_client


def generate_json(system_prompt: str, user_prompt: str, max_tokens: int = 1000) -> Optional[Dict[str, Any]]:
    """
    Ask OpenAI for a JSON object.

    Args:
        system_prompt: System instruction (must demand JSON only)
        user_prompt: User message

    Returns:
        Parsed JSON object, or None if the model returned no content

    Raises:
        LLMClientError: If the API call fails or the content is not valid JSON
    """
    client = get_openai_client()

    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt}
            ],
            response_format={"type": "json_object"},
            temperature=0,
            max_completion_tokens=max_tokens
        )
    except OpenAIError as e:
        raise LLMClientError(f"Error generating AI content: {str(e)}") from e

    if not response.choices:
        raise LLMClientError("OpenAI API returned empty response")

    content = (response.choices[0].message.content or "").strip()
    if not content:
        return None

    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise LLMClientError(f"Failed to parse JSON response: {str(e)}") from e


def chat_reply(messages: List[Dict[str, str]], system_prompt: str, max_tokens: int = 300) -> str:
    """
    Continue a conversation with OpenAI.

    Args:
        messages: Prior messages as {"role", "content"} dicts, oldest first
        system_prompt: System instruction prepended to the conversation

    Returns:
        Assistant reply text (stripped)

    Raises:
        LLMClientError: If the API call fails
    """
    client = get_openai_client()

    try:
        response = client.chat.completions.create(
            model=settings.openai_model,
            messages=[{"role": "system", "content": system_prompt}, *messages],
            temperature=0.7,
            max_completion_tokens=max_tokens
        )
    except OpenAIError as e:
        raise LLMClientError(f"Error processing chat message: {str(e)}") from e

    if not response.choices:
        return ""
    return (response.choices[0].message.content or "").strip()
