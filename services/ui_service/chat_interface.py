"""
Chat interface service - handles chat UI components and interactions.
"""

import asyncio
import streamlit as st
from typing import Dict, Iterable, Optional

from config.app_config import AppConfig, get_config
from services.chat_service.models import Location, Message, MessageRole
from services.voice_service.voice_output import VoiceOutputBridge
from utils.logging_config import get_logger


class ChatInterface:
    """
    Service for chat interface components.
    Renders session state; every state change goes through the session engine.
    """

    def __init__(self, config: Optional[AppConfig] = None):
        self.logger = get_logger(__name__)
        self.config = config or get_config()

    def render_header(self, current_locale: str) -> str:
        """Render title and language selector, returning the selected locale"""
        locales: Dict[str, str] = self.config.chat.locales
        codes = list(locales.keys())
        index = codes.index(current_locale) if current_locale in codes else 0

        title_col, locale_col = st.columns([4, 1])
        with title_col:
            st.title(self.config.ui.app_title)
            st.caption(self.config.ui.subtitle)
        with locale_col:
            selected = st.selectbox(
                "🌐 Language",
                codes,
                index=index,
                format_func=lambda code: locales[code]
            )
        return selected

    def render_chat_messages(self, messages: Iterable[Message]):
        """Render chat messages in the main interface"""
        try:
            for message in messages:
                if message.role == MessageRole.SYSTEM:
                    continue
                with st.chat_message(message.role.value):
                    st.markdown(message.content)

        except Exception as e:
            self.logger.error(f"Error rendering messages: {e}")
            st.error("Error displaying conversation history")

    def render_typing_indicator(self, placeholder):
        """Show the assistant typing indicator in a placeholder"""
        with placeholder.container():
            with st.chat_message(MessageRole.ASSISTANT.value):
                st.markdown(f"_{self.config.ui.typing_indicator}_")

    def render_location_map(self, location: Location):
        """Render the shared location on a map"""
        st.map(
            {"lat": [location.latitude], "lon": [location.longitude]},
            zoom=self.config.ui.map_zoom,
            height=200
        )

    def render_actions(self, is_recording: bool) -> Optional[str]:
        """
        Render location and voice buttons

        Returns:
            "share_location", "toggle_voice" or None
        """
        location_col, voice_col = st.columns(2)
        with location_col:
            if st.button("📍 Share location", use_container_width=True):
                return "share_location"
        with voice_col:
            label = "⏹️ Stop voice input" if is_recording else "🎤 Start voice input"
            if st.button(label, use_container_width=True, type="primary" if is_recording else "secondary"):
                return "toggle_voice"
        return None

    def render_voice_recorder(self) -> Optional[bytes]:
        """Render the microphone widget while recording; returns captured audio"""
        recording = st.audio_input("Speak now")
        if recording is None:
            return None
        return recording.getvalue()

    def render_input_form(self, input_text: str) -> Optional[str]:
        """
        Render the message input form

        Returns:
            The submitted text, or None if the form was not submitted
        """
        with st.form("chat_input_form", clear_on_submit=True):
            text = st.text_input(
                "Message",
                value=input_text,
                placeholder="Describe your emergency…",
                label_visibility="collapsed"
            )
            submitted = st.form_submit_button("Send", use_container_width=True)

        return text if submitted else None

    def play_pending_utterances(self, voice_output: VoiceOutputBridge):
        """Synthesize and autoplay replies queued for speech"""
        for utterance in voice_output.drain():
            audio = asyncio.run(voice_output.synthesize(utterance))
            if audio:
                st.audio(audio, format=f"audio/{self.config.voice.audio_format}", autoplay=True)


# Global interface instance
_chat_interface: Optional[ChatInterface] = None


def get_chat_interface() -> ChatInterface:
    """Get the global chat interface instance"""
    global _chat_interface
    if _chat_interface is None:
        _chat_interface = ChatInterface()
    return _chat_interface
