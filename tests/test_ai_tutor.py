"""
Unit Tests for the Chat Proxy.
"""

from types import SimpleNamespace
from unittest.mock import patch

import groq
import httpx
import pytest

from psup import ai_tutor
from psup.config import CHAT_MODEL
from psup.errors import ChatAPIError, ValidationError
from psup.schemas import ChatMessage, StreamChunk


MESSAGES = [
    ChatMessage(role="user", content="Where do I start?"),
    ChatMessage(role="assistant", content="Read the input format."),
    ChatMessage(role="user", content="Thanks"),
]


def _completion(text):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


def _delta(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


def _auth_error():
    request = httpx.Request("POST", "https://api.groq.com/openai/v1/chat/completions")
    response = httpx.Response(401, request=request)
    return groq.AuthenticationError("Invalid API Key", response=response, body=None)


class TestBuildMessages:
    """Tests for transcript normalization."""

    def test_system_prompt_first(self):
        payload = ai_tutor.build_messages(MESSAGES, "You are a tutor.")

        assert payload[0] == {"role": "system", "content": "You are a tutor."}
        assert len(payload) == 4

    def test_empty_system_prompt_is_skipped(self):
        payload = ai_tutor.build_messages(MESSAGES, "")

        assert payload[0]["role"] == "user"
        assert len(payload) == 3

    def test_roles_pass_through(self):
        payload = ai_tutor.build_messages(MESSAGES, "")

        assert [m["role"] for m in payload] == ["user", "assistant", "user"]
        assert payload[1]["content"] == "Read the input format."


class TestChat:
    """Tests for the non-streaming call."""

    @patch("psup.ai_tutor.Groq")
    def test_returns_content(self, mock_groq):
        client = mock_groq.return_value
        client.chat.completions.create.return_value = _completion("Try a loop.")

        assert ai_tutor.chat("key", MESSAGES, "prompt") == "Try a loop."

        mock_groq.assert_called_once_with(api_key="key")
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == CHAT_MODEL
        assert kwargs["messages"][0]["role"] == "system"

    @patch("psup.ai_tutor.Groq")
    def test_model_override(self, mock_groq):
        client = mock_groq.return_value
        client.chat.completions.create.return_value = _completion("ok")

        ai_tutor.chat("key", MESSAGES, model="other-model")

        assert client.chat.completions.create.call_args.kwargs["model"] == "other-model"

    @patch("psup.ai_tutor.Groq")
    def test_env_key_fallback(self, mock_groq, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "env-key")
        mock_groq.return_value.chat.completions.create.return_value = _completion("ok")

        ai_tutor.chat(None, MESSAGES)

        mock_groq.assert_called_once_with(api_key="env-key")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("GROQ_API_KEY", raising=False)

        with pytest.raises(ValidationError):
            ai_tutor.chat(None, MESSAGES)

    @patch("psup.ai_tutor.Groq")
    def test_invalid_key_error(self, mock_groq):
        mock_groq.return_value.chat.completions.create.side_effect = _auth_error()

        with pytest.raises(ChatAPIError) as exc_info:
            ai_tutor.chat("bad", MESSAGES)
        assert exc_info.value.message == "Invalid API key"

    @patch("psup.ai_tutor.Groq")
    def test_empty_answer(self, mock_groq):
        mock_groq.return_value.chat.completions.create.return_value = SimpleNamespace(choices=[])

        with pytest.raises(ChatAPIError):
            ai_tutor.chat("key", MESSAGES)


class TestChatStream:
    """Tests for the streaming call."""

    @patch("psup.ai_tutor.Groq")
    def test_yields_deltas_then_done(self, mock_groq):
        client = mock_groq.return_value
        client.chat.completions.create.return_value = iter([
            _delta("Hel"),
            _delta(None),
            SimpleNamespace(choices=[]),
            _delta("lo"),
        ])

        chunks = list(ai_tutor.chat_stream("key", MESSAGES, "prompt"))

        assert chunks == [
            StreamChunk(text="Hel", done=False),
            StreamChunk(text="lo", done=False),
            StreamChunk(text="", done=True),
        ]
        assert client.chat.completions.create.call_args.kwargs["stream"] is True

    @patch("psup.ai_tutor.Groq")
    def test_request_error_raises_before_iteration(self, mock_groq):
        mock_groq.return_value.chat.completions.create.side_effect = _auth_error()

        with pytest.raises(ChatAPIError):
            ai_tutor.chat_stream("bad", MESSAGES)

    @patch("psup.ai_tutor.Groq")
    def test_error_mid_stream(self, mock_groq):
        def broken():
            yield _delta("partial")
            raise groq.APIConnectionError(request=httpx.Request("POST", "https://api.groq.com"))

        mock_groq.return_value.chat.completions.create.return_value = broken()
        stream = ai_tutor.chat_stream("key", MESSAGES)

        assert next(stream).text == "partial"
        with pytest.raises(ChatAPIError):
            next(stream)


class TestListModels:

    @patch("psup.ai_tutor.Groq")
    def test_lists_model_ids(self, mock_groq):
        mock_groq.return_value.models.list.return_value = SimpleNamespace(
            data=[SimpleNamespace(id="llama-3.3-70b-versatile"), SimpleNamespace(id="gemma2-9b-it")]
        )

        models = ai_tutor.list_models("key")

        assert [m.name for m in models] == ["llama-3.3-70b-versatile", "gemma2-9b-it"]
        assert models[0].display_name == "llama-3.3-70b-versatile"
