"""
OpenAI client adapter for the application.
Handles OpenAI API interactions and configuration.
"""

from langchain_openai import ChatOpenAI
from typing import Optional
import openai

from config.app_config import AppConfig, get_config
from utils.logging_config import get_logger


class OpenAIClient:
    """
    Adapter for OpenAI services: the chat model and the audio endpoints.
    Provides a centralized way to interact with OpenAI APIs.
    """
    
    def __init__(self, config: Optional[AppConfig] = None):
        self.logger = get_logger(__name__)
        self.config = config or get_config()
        self._chat_client = None
        self._audio_client = None
    
    def _require_api_key(self) -> str:
        api_key = self.config.api.openai_api_key
        if not api_key:
            raise ValueError("OpenAI API key not configured")
        return api_key
    
    def get_chat_client(self) -> ChatOpenAI:
        """
        Get configured ChatOpenAI client
        
        Returns:
            ChatOpenAI: Configured chat client
        """
        if self._chat_client is None:
            try:
                self._chat_client = ChatOpenAI(
                    model=self.config.llm.model_name,
                    temperature=self.config.llm.temperature,
                    max_tokens=self.config.llm.max_tokens,
                    timeout=self.config.llm.request_timeout,
                    max_retries=0,  # retries are handled by utils.retry_utils
                    api_key=self._require_api_key()
                )
                
                self.logger.info(f"OpenAI chat client initialized: {self.config.llm.model_name}")
                
            except Exception as e:
                self.logger.error(f"Error initializing OpenAI chat client: {e}")
                raise
        
        return self._chat_client
    
    def get_audio_client(self) -> openai.OpenAI:
        """
        Get configured OpenAI SDK client used for transcription and speech
        
        Returns:
            openai.OpenAI: Configured SDK client
        """
        if self._audio_client is None:
            try:
                self._audio_client = openai.OpenAI(
                    api_key=self._require_api_key(),
                    timeout=self.config.llm.request_timeout
                )
                
                self.logger.info("OpenAI audio client initialized")
                
            except Exception as e:
                self.logger.error(f"Error initializing OpenAI audio client: {e}")
                raise
        
        return self._audio_client
    
    def has_api_key(self) -> bool:
        """Whether an API key is configured"""
        return bool(self.config.api.openai_api_key)


# Global client instance
_openai_client: Optional[OpenAIClient] = None


def get_openai_client() -> OpenAIClient:
    """Get the global OpenAI client instance"""
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAIClient()
    return _openai_client
