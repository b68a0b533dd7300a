import logging
from typing import Dict, List, Optional

import httpx

from config import settings

logger = logging.getLogger(__name__)


class GenerationError(Exception):
    """Hard failure while generating a routine; reported to the caller as a 500."""


class ConfigurationError(GenerationError):
    pass


class UpstreamError(GenerationError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyContentError(GenerationError):
    pass


def get_api_key() -> str:
    api_key = settings.GEMINI_API_KEY
    if not api_key:
        raise ConfigurationError("GEMINI_API_KEY is not configured")
    return api_key


async def create_chat_completion(
    messages: List[Dict[str, str]],
    api_key: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> dict:
    """Calls Gemini's OpenAI-compatible chat completion endpoint once, no retries."""
    headers = {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
    }
    payload = {
        "model": settings.GEMINI_MODEL,
        "messages": messages,
        "temperature": settings.TEMPERATURE,
        "max_tokens": settings.MAX_TOKENS,
    }

    async with httpx.AsyncClient(
        timeout=settings.REQUEST_TIMEOUT, transport=transport
    ) as client:
        try:
            url = f"{settings.GEMINI_BASE_URL.rstrip('/')}/chat/completions"
            response = await client.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            logger.error(f"Gemini API transport error: {str(e)}")
            raise UpstreamError(f"Gemini API request failed: {str(e)}") from e

        if not response.is_success:
            logger.error(f"Gemini API Error: {response.text}")
            raise UpstreamError(
                f"Gemini API request failed: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Gemini API returned invalid JSON: {str(e)}") from e


def get_message_content(data: dict) -> str:
    """choices[0].message.content of a chat completion, or EmptyContentError."""
    choices = data.get("choices") if isinstance(data, dict) else None
    content = None
    if choices:
        message = choices[0].get("message") or {}
        content = message.get("content")

    # Gemini sometimes sends content as a list of text blocks
    if isinstance(content, list):
        content = "".join(
            block.get("text", "") if isinstance(block, dict) else str(block)
            for block in content
        )

    if not content:
        raise EmptyContentError("No content generated from Gemini API")
    return content
