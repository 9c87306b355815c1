"""
Tests for the dialogue client
"""

import asyncio
from unittest.mock import Mock, patch

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from config.app_config import AppConfig
from services.ai_service.dialogue_client import (
    DialogueClient,
    extract_reply_text,
    to_langchain_messages,
)
from services.exceptions import DialogueError


REQUEST = [
    {"role": "system", "content": "You are GuardianBot."},
    {"role": "assistant", "content": "Hello"},
    {"role": "user", "content": "My neighbour collapsed"},
]


class TestMessageConversion:

    def test_roles_map_to_langchain_types(self):
        converted = to_langchain_messages(REQUEST)

        assert [type(m) for m in converted] == [SystemMessage, AIMessage, HumanMessage]
        assert converted[2].content == "My neighbour collapsed"

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError):
            to_langchain_messages([{"role": "tool", "content": "x"}])

    def test_extract_plain_text(self):
        assert extract_reply_text(AIMessage(content="Check breathing.")) == "Check breathing."

    def test_extract_content_blocks(self):
        response = AIMessage(content=[
            {"type": "text", "text": "Check "},
            {"type": "image_url", "image_url": {"url": "x"}},
            "breathing.",
        ])

        assert extract_reply_text(response) == "Check breathing."


class TestDialogueClient:
    """Test the dialogue request path"""

    def setup_method(self):
        self.config = AppConfig()
        self.config.resilience.max_retries = 2
        self.config.resilience.base_delay = 0
        self.chat_model = Mock()
        self.chat_model.invoke = Mock(return_value=AIMessage(content="Call an ambulance now."))
        self.client = DialogueClient(chat_model=self.chat_model, config=self.config, enable_tracing=False)

    def test_complete_returns_reply(self):
        reply = asyncio.run(self.client.complete(REQUEST))

        assert reply == "Call an ambulance now."
        sent = self.chat_model.invoke.call_args.args[0]
        assert [m.content for m in sent] == [m["content"] for m in REQUEST]
        assert self.chat_model.invoke.call_args.kwargs["config"] == {}

    def test_transient_error_is_retried(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        self.chat_model.invoke.side_effect = [
            openai.APIConnectionError(request=request),
            AIMessage(content="Stay with them."),
        ]

        assert asyncio.run(self.client.complete(REQUEST)) == "Stay with them."
        assert self.chat_model.invoke.call_count == 2

    def test_exhausted_retries_raise_dialogue_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        self.chat_model.invoke.side_effect = openai.APIConnectionError(request=request)

        with pytest.raises(DialogueError):
            asyncio.run(self.client.complete(REQUEST))
        assert self.chat_model.invoke.call_count == 3

    def test_authentication_error_raises_dialogue_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        response = httpx.Response(401, request=request)
        self.chat_model.invoke.side_effect = openai.AuthenticationError(
            "Invalid API key", response=response, body=None
        )

        with pytest.raises(DialogueError):
            asyncio.run(self.client.complete(REQUEST))
        assert self.chat_model.invoke.call_count == 1

    def test_tracing_adds_callback_handler(self):
        handler = object()
        client = DialogueClient(chat_model=self.chat_model, config=self.config, enable_tracing=True)

        with patch("services.ai_service.dialogue_client.get_langfuse_client") as get_client:
            get_client.return_value.get_callback_handler.return_value = handler
            asyncio.run(client.complete(REQUEST))

        assert self.chat_model.invoke.call_args.kwargs["config"] == {"callbacks": [handler]}


def chat_completion(content: str) -> dict:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "gpt-4o-mini",
        "choices": [{
            "index": 0,
            "message": {"role": "assistant", "content": content},
            "finish_reason": "stop",
        }],
        "usage": {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15},
    }


class TestDialogueClientAcrossPageRuns:
    """Each Streamlit run drives the client from a fresh event loop"""

    def setup_method(self):
        self.requests = []

        def handler(request):
            self.requests.append(request)
            return httpx.Response(200, json=chat_completion("Stay calm."))

        self.http_client = httpx.Client(transport=httpx.MockTransport(handler))
        chat_model = ChatOpenAI(
            model="gpt-4o-mini",
            api_key="sk-test",
            base_url="http://chat.test/v1",
            http_client=self.http_client,
            max_retries=0,
        )
        config = AppConfig()
        config.resilience.base_delay = 0
        self.client = DialogueClient(chat_model=chat_model, config=config, enable_tracing=False)

    def teardown_method(self):
        self.http_client.close()

    def test_consecutive_event_loops_reuse_chat_model(self):
        replies = [asyncio.run(self.client.complete(REQUEST)) for _ in range(3)]

        assert replies == ["Stay calm.", "Stay calm.", "Stay calm."]
        assert len(self.requests) == 3
        assert all(r.url.path == "/v1/chat/completions" for r in self.requests)
