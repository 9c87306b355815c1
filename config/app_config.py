"""
Unified Configuration System for Guardian Chat

This module provides a centralized configuration system that consolidates all application settings,
supports environment-based overrides, and provides type-safe configuration access.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, List
import streamlit as st
import os
from pathlib import Path


DEFAULT_SYSTEM_PROMPT = """You are GuardianBot, an AI emergency response assistant. Your role is to:
1. Help people report emergencies and incidents
2. Provide immediate safety guidance
3. Collect relevant information (location, situation details)
4. Offer emotional support
5. Guide users through the emergency response process

Always maintain a calm, professional tone. For serious emergencies, emphasize the importance of contacting emergency services first."""


@dataclass
class APIConfig:
    """API configuration settings"""
    openai_api_key: str = ""
    langfuse_secret_key: str = ""
    langfuse_public_key: str = ""
    langfuse_host: str = "https://cloud.langfuse.com"

    @classmethod
    def from_env(cls) -> 'APIConfig':
        """Load API config from environment variables"""
        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            langfuse_secret_key=os.getenv("LANGFUSE_SECRET_KEY", ""),
            langfuse_public_key=os.getenv("LANGFUSE_PUBLIC_KEY", ""),
            langfuse_host=os.getenv("LANGFUSE_HOST", "https://cloud.langfuse.com")
        )

    @classmethod
    def from_secrets(cls) -> 'APIConfig':
        """Load API config from Streamlit secrets"""
        # In test environment, prefer environment variables
        if os.getenv("PYTEST_CURRENT_TEST") is not None:
            return cls.from_env()

        try:
            return cls(
                openai_api_key=st.secrets.get("OPENAI_API_KEY", ""),
                langfuse_secret_key=st.secrets.get("LANGFUSE_SECRET_KEY", ""),
                langfuse_public_key=st.secrets.get("LANGFUSE_PUBLIC_KEY", ""),
                langfuse_host=st.secrets.get("LANGFUSE_HOST", "https://cloud.langfuse.com")
            )
        except Exception:
            # Fallback to environment variables if secrets not available
            return cls.from_env()


@dataclass
class LLMConfig:
    """Language model configuration"""
    model_name: str = "gpt-4o-mini"
    temperature: float = 0.5
    max_tokens: int = 1000
    request_timeout: float = 30.0


@dataclass
class ChatConfig:
    """Conversation session configuration"""
    system_prompt: str = DEFAULT_SYSTEM_PROMPT
    default_locale: str = "en"
    serialize_submissions: bool = False

    locales: Dict[str, str] = field(default_factory=lambda: {
        "en": "English",
        "hi": "हिंदी",
        "ta": "தமிழ்"
    })

    greetings: Dict[str, str] = field(default_factory=lambda: {
        "en": "Hello, I'm GuardianBot. I'm here to help you 24/7. "
              "Tell me what is happening and where you are. "
              "If anyone is in immediate danger, contact your local emergency services first.",
        "hi": "नमस्ते, मैं GuardianBot हूँ। मैं 24/7 आपकी मदद के लिए यहाँ हूँ। "
              "मुझे बताइए कि क्या हो रहा है और आप कहाँ हैं। "
              "अगर कोई तत्काल खतरे में है, तो पहले अपनी स्थानीय आपातकालीन सेवाओं से संपर्क करें।",
        "ta": "வணக்கம், நான் GuardianBot. 24/7 உங்களுக்கு உதவ நான் இங்கே இருக்கிறேன். "
              "என்ன நடக்கிறது, நீங்கள் எங்கே இருக்கிறீர்கள் என்று சொல்லுங்கள். "
              "யாராவது உடனடி ஆபத்தில் இருந்தால், முதலில் உள்ளூர் அவசர சேவைகளைத் தொடர்பு கொள்ளுங்கள்."
    })


@dataclass
class StorageConfig:
    """Message persistence configuration"""
    db_path: str = "data/guardian_chat.db"


@dataclass
class VoiceConfig:
    """Speech-to-text and text-to-speech configuration"""
    enable_voice_input: bool = True
    transcription_model: str = "whisper-1"
    speak_replies: bool = True
    speech_model: str = "tts-1"
    voice: str = "alloy"
    voices: Dict[str, str] = field(default_factory=dict)  # per-locale voice overrides
    audio_format: str = "mp3"


@dataclass
class LocationConfig:
    """Location sharing configuration"""
    enabled: bool = True
    provider: str = "ip"  # "ip" or "static"
    lookup_url: str = "https://ipapi.co/json/"
    timeout: float = 10.0
    static_latitude: Optional[float] = None
    static_longitude: Optional[float] = None


@dataclass
class ResilienceConfig:
    """Retry and circuit breaker configuration"""
    max_retries: int = 2
    base_delay: float = 1.0
    max_delay: float = 10.0
    failure_threshold: int = 5
    recovery_timeout: int = 60


@dataclass
class UIConfig:
    """User interface configuration"""
    app_title: str = "Emergency Response Chat"
    subtitle: str = "We're here to help 24/7"
    page_icon: str = "🛡️"
    map_zoom: int = 14
    typing_indicator: str = "GuardianBot is typing…"


@dataclass
class LoggingConfig:
    """Logging and monitoring configuration"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    enable_file_logging: bool = True
    log_file: str = "logs/app.log"
    enable_langfuse_tracing: bool = True


@dataclass
class AppConfig:
    """Main application configuration"""
    api: APIConfig = field(default_factory=APIConfig)
    llm: LLMConfig = field(default_factory=LLMConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    voice: VoiceConfig = field(default_factory=VoiceConfig)
    location: LocationConfig = field(default_factory=LocationConfig)
    resilience: ResilienceConfig = field(default_factory=ResilienceConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Environment settings
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    @classmethod
    def load(cls) -> 'AppConfig':
        """Load configuration with environment overrides"""
        config = cls()

        # Load API configuration from secrets/environment
        config.api = APIConfig.from_secrets()

        # Storage location can be moved without touching code
        db_path = os.getenv("GUARDIAN_CHAT_DB")
        if db_path:
            config.storage.db_path = db_path

        return config

    def validate(self) -> List[str]:
        """Validate configuration and return list of errors"""
        errors = []

        # Check required API keys
        if not self.api.openai_api_key:
            errors.append("OpenAI API key is required")

        # Check locale tables are consistent
        if self.chat.default_locale not in self.chat.locales:
            errors.append(f"Default locale '{self.chat.default_locale}' is not an available locale")
        if self.chat.default_locale not in self.chat.greetings:
            errors.append(f"No greeting configured for default locale '{self.chat.default_locale}'")

        # Static location provider needs coordinates
        if self.location.provider == "static" and (
            self.location.static_latitude is None or self.location.static_longitude is None
        ):
            errors.append("Static location provider requires static_latitude and static_longitude")

        # Check file paths exist
        if not Path(self.storage.db_path).parent.exists():
            Path(self.storage.db_path).parent.mkdir(parents=True, exist_ok=True)

        if self.logging.enable_file_logging:
            log_dir = Path(self.logging.log_file).parent
            if not log_dir.exists():
                log_dir.mkdir(parents=True, exist_ok=True)

        return errors

    def get_langfuse_config(self) -> Dict[str, str]:
        """Get Langfuse configuration"""
        return {
            "secret_key": self.api.langfuse_secret_key,
            "public_key": self.api.langfuse_public_key,
            "host": self.api.langfuse_host
        }


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance"""
    global _config
    if _config is None:
        from config.environments import get_environment_config
        _config = get_environment_config()

        # Validate configuration
        errors = _config.validate()
        if errors:
            import warnings
            for error in errors:
                warnings.warn(f"Configuration error: {error}")

    return _config


def reload_config() -> AppConfig:
    """Reload configuration (useful for testing)"""
    global _config
    _config = None
    return get_config()
