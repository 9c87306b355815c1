"""
Production environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig


@dataclass
class ProductionConfig(AppConfig):
    """Production environment configuration"""
    
    def __post_init__(self):
        
        # Production-specific overrides
        self.environment = "production"
        self.debug = False
        
        # Production logging - less verbose, focus on errors
        self.logging.level = "INFO"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/prod-app.log"
        
        # Production UI - clean and professional
        self.ui.app_title = "🛡️ Emergency Response Chat"
        
        # Production LLM settings - more conservative
        self.llm.temperature = 0.3
        self.llm.max_tokens = 800
        
        # Each request waits for the previous reply
        self.chat.serialize_submissions = True
        
        self.resilience.max_retries = 3


def get_production_config() -> ProductionConfig:
    """Get production-specific configuration"""
    return ProductionConfig.load()
