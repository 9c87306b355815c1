import asyncio
import streamlit as st

from config.app_config import get_config
from services.chat_service.session_engine import ConversationSession, create_conversation_session
from services.simple_user_session import get_simple_user_session
from services.ui_service import StreamlitNotifier, get_chat_interface
from utils.logging_config import initialize_logging, get_logger

# Initialize logging and error tracking
error_tracker = initialize_logging()
logger = get_logger(__name__)

# Get configuration
config = get_config()

st.set_page_config(page_title=config.ui.app_title, page_icon=config.ui.page_icon)


def get_session() -> ConversationSession:
    """Get the conversation session for this browser session, creating it on first run"""
    if "chat_session" not in st.session_state:
        user_session = get_simple_user_session()
        session = create_conversation_session(
            profile_id=user_session.get_profile_id(),
            notifier=StreamlitNotifier(),
            locale=user_session.get_locale(config.chat.default_locale),
            config=config,
            error_tracker=error_tracker
        )
        session.initialize()
        st.session_state.chat_session = session
        logger.info("Conversation session initialized")
    return st.session_state.chat_session


def main_app():
    """Main application content"""
    interface = get_chat_interface()

    try:
        session = get_session()
    except Exception as e:
        error_tracker.track_error(e, "session_initialization")
        st.error("Failed to initialize the conversation. Please refresh the page.")
        return

    # Language selection
    selected_locale = interface.render_header(session.locale)
    if selected_locale != session.locale:
        session.initialize(selected_locale)
        get_simple_user_session().set_locale(selected_locale)
        st.rerun()

    interface.render_chat_messages(session.messages)
    typing_placeholder = st.empty()

    # Speak replies produced on the previous run
    interface.play_pending_utterances(session.voice_output)

    if session.location is not None:
        interface.render_location_map(session.location)

    action = interface.render_actions(session.is_recording)
    if action == "share_location":
        asyncio.run(session.submit_location())
        st.rerun()
    elif action == "toggle_voice":
        session.toggle_voice_input()
        st.rerun()

    if session.is_recording:
        audio = interface.render_voice_recorder()
        if audio is not None:
            with st.spinner("Transcribing…"):
                asyncio.run(session.transcribe_recording(audio))
            st.rerun()

    submitted_text = interface.render_input_form(session.input_text)
    if submitted_text is not None:
        session.input_text = submitted_text
        interface.render_typing_indicator(typing_placeholder)
        try:
            asyncio.run(session.submit_text())
        finally:
            typing_placeholder.empty()
        st.rerun()


main_app()
