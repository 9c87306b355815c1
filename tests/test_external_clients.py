"""
Tests for the OpenAI and Langfuse client adapters
"""

from unittest.mock import patch

import pytest

from config.app_config import AppConfig
from infrastructure.external.langfuse_client import LangfuseClient
from infrastructure.external.openai_client import OpenAIClient


class TestOpenAIClient:

    def setup_method(self):
        self.config = AppConfig()
        self.config.api.openai_api_key = "sk-test"

    def test_chat_client_uses_llm_config(self):
        self.config.llm.model_name = "gpt-4o-mini"
        self.config.llm.temperature = 0.3

        with patch("infrastructure.external.openai_client.ChatOpenAI") as chat_openai:
            client = OpenAIClient(self.config)
            first = client.get_chat_client()
            second = client.get_chat_client()

        assert first is second
        kwargs = chat_openai.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_retries"] == 0
        assert kwargs["api_key"] == "sk-test"

    def test_missing_key_raises(self):
        self.config.api.openai_api_key = ""
        client = OpenAIClient(self.config)

        assert client.has_api_key() is False
        with pytest.raises(ValueError):
            client.get_audio_client()

    def test_audio_client(self):
        with patch("infrastructure.external.openai_client.openai.OpenAI") as sdk:
            OpenAIClient(self.config).get_audio_client()

        assert sdk.call_args.kwargs["api_key"] == "sk-test"


class TestLangfuseClient:

    def setup_method(self):
        self.config = AppConfig()

    def test_disabled_tracing(self):
        self.config.logging.enable_langfuse_tracing = False

        assert LangfuseClient(self.config).get_callback_handler() is None

    def test_missing_keys(self):
        self.config.api.langfuse_secret_key = ""
        self.config.api.langfuse_public_key = ""

        assert LangfuseClient(self.config).get_client() is None

    def test_callback_handler_with_keys(self):
        self.config.api.langfuse_secret_key = "sk-lf"
        self.config.api.langfuse_public_key = "pk-lf"

        with patch("infrastructure.external.langfuse_client.Langfuse") as langfuse, \
                patch("infrastructure.external.langfuse_client.CallbackHandler") as handler:
            client = LangfuseClient(self.config)

            assert client.get_callback_handler() is handler.return_value
            assert langfuse.call_args.kwargs["public_key"] == "pk-lf"
