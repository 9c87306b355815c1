"""
Dialogue client - sends the conversation to the chat model and returns its reply.
"""

import asyncio
from typing import Dict, List, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from config.app_config import AppConfig, get_config
from infrastructure.external.langfuse_client import get_langfuse_client
from infrastructure.external.openai_client import get_openai_client
from services.exceptions import DialogueError
from utils.logging_config import get_logger, log_execution_time
from utils.retry_utils import CircuitBreaker, RETRIABLE_ERRORS, retry_with_circuit_breaker


_MESSAGE_TYPES = {
    "system": SystemMessage,
    "user": HumanMessage,
    "assistant": AIMessage,
}


def to_langchain_messages(messages: List[Dict[str, str]]) -> List[BaseMessage]:
    """
    Convert role/content dicts into LangChain messages

    Raises:
        ValueError: On an unknown role
    """
    converted = []
    for message in messages:
        role = message["role"]
        if role not in _MESSAGE_TYPES:
            raise ValueError(f"Unknown message role: {role}")
        converted.append(_MESSAGE_TYPES[role](content=message["content"]))
    return converted


def extract_reply_text(response: BaseMessage) -> str:
    """Get plain text out of a chat model response"""
    content = response.content
    if isinstance(content, str):
        return content

    # Content blocks: keep the text parts
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class DialogueClient:
    """
    Client for the dialogue backend.
    Wraps the chat model with retry, circuit breaker and optional tracing.
    """

    def __init__(
        self,
        chat_model: Optional[BaseChatModel] = None,
        config: Optional[AppConfig] = None,
        circuit_breaker: Optional[CircuitBreaker] = None,
        enable_tracing: bool = True
    ):
        self.logger = get_logger(__name__)
        self.config = config or get_config()
        self._chat_model = chat_model
        self.enable_tracing = enable_tracing

        resilience = self.config.resilience
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=resilience.failure_threshold,
            recovery_timeout=resilience.recovery_timeout,
            expected_exception=RETRIABLE_ERRORS,
            name="Dialogue_API"
        )

    def get_chat_model(self) -> BaseChatModel:
        """Get the chat model, creating the OpenAI one on first use"""
        if self._chat_model is None:
            self._chat_model = get_openai_client().get_chat_client()
        return self._chat_model

    def _get_run_config(self) -> Dict:
        if not self.enable_tracing:
            return {}
        handler = get_langfuse_client().get_callback_handler()
        if handler is None:
            return {}
        return {"callbacks": [handler]}

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """
        Request one assistant reply for an ordered list of messages

        Args:
            messages: Role/content dicts, system instruction first

        Returns:
            The reply text (may be empty)

        Raises:
            DialogueError: If the backend could not produce a reply
        """
        resilience = self.config.resilience

        try:
            chat_model = self.get_chat_model()
            lc_messages = to_langchain_messages(messages)
            run_config = self._get_run_config()

            # Sync invoke on a worker thread; each page run has its own event loop
            async def invoke():
                return await asyncio.to_thread(chat_model.invoke, lc_messages, config=run_config)

            with log_execution_time(self.logger, "dialogue_request", message_count=len(messages)):
                response = await retry_with_circuit_breaker(
                    invoke,
                    circuit_breaker=self.circuit_breaker,
                    max_retries=resilience.max_retries,
                    base_delay=resilience.base_delay,
                    max_delay=resilience.max_delay
                )

        except Exception as e:
            raise DialogueError(f"Dialogue request failed: {e}") from e

        return extract_reply_text(response)
