"""Google Gemini API wrapper for auditor completions."""

import json
import logging

from google import genai
from google.genai import types

from config import settings
from services.errors import LLMServiceError

logger = logging.getLogger(__name__)

_client: genai.Client | None = None


def get_client() -> genai.Client | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - LLM review disabled")
        return None
    if _client is None:
        _client = genai.Client(api_key=settings.gemini_api_key)
    return _client


def is_configured() -> bool:
    return bool(settings.gemini_api_key)


async def complete(prompt: str, system_prompt: str | None = None) -> str:
    """Send a prompt to Gemini and return the raw reply text.

    The reply is unconstrained text; callers parse what they need from it.
    Raises LLMServiceError when the client is unconfigured or the call fails.
    """
    client = get_client()
    if client is None:
        raise LLMServiceError("LLM backend is not configured")

    logger.info("Calling %s with prompt length %d", settings.llm_model, len(prompt))
    try:
        response = await client.aio.models.generate_content(
            model=settings.llm_model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt or settings.auditor_system_prompt,
                temperature=settings.llm_temperature,
                max_output_tokens=settings.llm_max_output_tokens,
            ),
        )
    except Exception as e:
        logger.error("Gemini API error: %s", e)
        raise LLMServiceError(f"LLM call failed: {e}") from e

    return (response.text or "").strip()


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


def parse_json_reply(text: str) -> dict | None:
    """Parse a JSON object out of an LLM reply, tolerating code fences and prose."""
    cleaned = strip_code_fences(text)
    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start == -1 or end <= start:
        return None
    try:
        data = json.loads(cleaned[start:end + 1])
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse LLM reply as JSON: %s", e)
        return None
    return data if isinstance(data, dict) else None
