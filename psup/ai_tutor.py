import os
import logging
from typing import Iterator, List, Optional

import groq
from groq import Groq

from .config import CHAT_MODEL, CHAT_TEMPERATURE, CHAT_MAX_TOKENS
from .errors import ChatAPIError, ValidationError
from .schemas import ChatMessage, ModelInfo, StreamChunk

logger = logging.getLogger(__name__)


def _get_client(api_key: Optional[str]) -> Groq:
    """Build a Groq client from the request key, falling back to GROQ_API_KEY."""
    key = api_key or os.getenv("GROQ_API_KEY")
    if not key:
        raise ValidationError(
            "API key is required",
            detail="Pass api_key in the request or set GROQ_API_KEY"
        )
    return Groq(api_key=key)


def _to_chat_api_error(e: groq.APIError) -> ChatAPIError:
    """Translate SDK errors into user-facing messages."""
    status = getattr(e, "status_code", None)
    if status == 401:
        return ChatAPIError("Invalid API key", detail=str(e))
    if status == 429:
        return ChatAPIError("Rate limit exceeded. Try again in a minute.", detail=str(e))
    return ChatAPIError("Chat API error", detail=str(e))


def build_messages(messages: List[ChatMessage], system_prompt: str) -> List[dict]:
    """
    Normalize a transcript for the completion API.

    A non-empty system prompt goes first as a system message. Roles are
    passed through; callers validate them as user or assistant.
    """
    payload = []
    if system_prompt:
        payload.append({"role": "system", "content": system_prompt})

    for msg in messages:
        payload.append({
            "role": msg.role,
            "content": msg.content,
        })
    return payload


def chat(
    api_key: Optional[str],
    messages: List[ChatMessage],
    system_prompt: str = "",
    model: Optional[str] = None,
) -> str:
    """
    Send a transcript and return the full answer.

    Raises:
        ValidationError: No API key available
        ChatAPIError: The API call failed or returned nothing
    """
    client = _get_client(api_key)

    try:
        completion = client.chat.completions.create(
            messages=build_messages(messages, system_prompt),
            model=model or CHAT_MODEL,
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
        )
    except groq.APIError as e:
        logger.error(f"Groq API Error: {e}")
        raise _to_chat_api_error(e) from e

    if not completion.choices or completion.choices[0].message.content is None:
        raise ChatAPIError("No response from model")
    return completion.choices[0].message.content


def chat_stream(
    api_key: Optional[str],
    messages: List[ChatMessage],
    system_prompt: str = "",
    model: Optional[str] = None,
) -> Iterator[StreamChunk]:
    """
    Send a transcript and stream the answer.

    The request is sent before this returns, so a missing key or a
    rejected request raises here rather than on first iteration. The
    returned iterator yields one chunk per content delta, then a final
    empty chunk with done=True.
    """
    client = _get_client(api_key)

    try:
        stream = client.chat.completions.create(
            messages=build_messages(messages, system_prompt),
            model=model or CHAT_MODEL,
            temperature=CHAT_TEMPERATURE,
            max_tokens=CHAT_MAX_TOKENS,
            stream=True,
        )
    except groq.APIError as e:
        logger.error(f"Groq API Error: {e}")
        raise _to_chat_api_error(e) from e

    return _iter_stream(stream)


def _iter_stream(stream) -> Iterator[StreamChunk]:
    try:
        for chunk in stream:
            if not chunk.choices:
                continue
            text = chunk.choices[0].delta.content
            if text:
                yield StreamChunk(text=text, done=False)
    except groq.APIError as e:
        logger.error(f"Groq stream error: {e}")
        raise _to_chat_api_error(e) from e

    yield StreamChunk(text="", done=True)


def list_models(api_key: Optional[str]) -> List[ModelInfo]:
    """List the chat models available to the given key."""
    client = _get_client(api_key)

    try:
        response = client.models.list()
    except groq.APIError as e:
        logger.error(f"Groq model listing failed: {e}")
        raise _to_chat_api_error(e) from e

    return [ModelInfo(name=m.id, display_name=m.id) for m in response.data]
