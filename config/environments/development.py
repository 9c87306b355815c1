"""
Development environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig


@dataclass
class DevelopmentConfig(AppConfig):
    """Development environment configuration"""
    
    def __post_init__(self):
        
        # Development-specific overrides
        self.environment = "development"
        self.debug = True
        
        # More verbose logging in development
        self.logging.level = "DEBUG"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/dev-app.log"
        
        # Keep development history apart from real sessions
        self.storage.db_path = "data/dev_guardian_chat.db"
        
        # Development UI changes
        self.ui.app_title = "🧪 Emergency Response Chat (DEV)"
        
        # Fail fast while iterating locally
        self.resilience.max_retries = 1
        self.resilience.base_delay = 0.5


def get_development_config() -> DevelopmentConfig:
    """Get development-specific configuration"""
    return DevelopmentConfig.load()
