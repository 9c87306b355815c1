"""
Langfuse client adapter for the application.
Handles Langfuse tracing of dialogue requests.
"""

from langfuse import Langfuse
from langfuse.langchain import CallbackHandler
from typing import Optional

from config.app_config import AppConfig, get_config
from utils.logging_config import get_logger


class LangfuseClient:
    """
    Adapter for Langfuse observability.
    Tracing is optional: without keys every accessor returns None.
    """
    
    def __init__(self, config: Optional[AppConfig] = None):
        self.logger = get_logger(__name__)
        self.config = config or get_config()
        self._client = None
        self._callback_handler = None
    
    def get_client(self) -> Optional[Langfuse]:
        """
        Get configured Langfuse client
        
        Returns:
            Optional[Langfuse]: Configured client or None if not available
        """
        if not self.config.logging.enable_langfuse_tracing:
            return None
        
        if self._client is None:
            langfuse_config = self.config.get_langfuse_config()
            
            if not langfuse_config["secret_key"] or not langfuse_config["public_key"]:
                self.logger.debug("Langfuse keys not configured, skipping initialization")
                return None
            
            try:
                self._client = Langfuse(
                    secret_key=langfuse_config["secret_key"],
                    public_key=langfuse_config["public_key"],
                    host=langfuse_config["host"]
                )
                
                self.logger.info("Langfuse client initialized successfully")
                
            except Exception as e:
                self.logger.warning(f"Failed to initialize Langfuse client: {e}")
                return None
        
        return self._client
    
    def get_callback_handler(self) -> Optional[CallbackHandler]:
        """
        Get Langfuse callback handler for LangChain integration
        
        Returns:
            Optional[CallbackHandler]: Callback handler or None if not available
        """
        if self._callback_handler is None:
            if self.get_client() is None:
                return None
            
            try:
                self._callback_handler = CallbackHandler()
                self.logger.debug("Langfuse callback handler created")
                
            except Exception as e:
                self.logger.warning(f"Failed to create Langfuse callback handler: {e}")
                return None
        
        return self._callback_handler


# Global client instance
_langfuse_client: Optional[LangfuseClient] = None


def get_langfuse_client() -> LangfuseClient:
    """Get the global Langfuse client instance"""
    global _langfuse_client
    if _langfuse_client is None:
        _langfuse_client = LangfuseClient()
    return _langfuse_client
