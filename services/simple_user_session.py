"""
Simple Profile Session Management
No login, no passwords - a short profile id that scopes the stored conversation
to one browser profile. The id lives in the page URL so a reload restores it.
"""

import streamlit as st
import uuid
import re
from typing import Optional

from utils.logging_config import get_logger


PROFILE_PARAM = "profile"
_PROFILE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{4,64}$")


def is_valid_profile_id(value: Optional[str]) -> bool:
    """Profile ids are short URL-safe tokens"""
    return bool(value) and bool(_PROFILE_ID_PATTERN.match(value))


class SimpleUserSession:
    """
    Profile identification kept in Streamlit query params and session state.
    """

    def __init__(self):
        self.logger = get_logger(__name__)

    def _ensure_profile(self):
        """Ensure a profile id exists for this browser profile"""
        if "profile_id" in st.session_state:
            return

        profile_id = st.query_params.get(PROFILE_PARAM)
        if not is_valid_profile_id(profile_id):
            profile_id = uuid.uuid4().hex[:12]
            st.query_params[PROFILE_PARAM] = profile_id
            self.logger.info(f"Created profile: {profile_id}")

        st.session_state.profile_id = profile_id

    def get_profile_id(self) -> str:
        """Get current profile ID"""
        self._ensure_profile()
        return st.session_state.profile_id

    def get_locale(self, default: str) -> str:
        """Locale chosen in this browser session"""
        return st.session_state.get("locale", default)

    def set_locale(self, locale: str):
        st.session_state.locale = locale
        self.logger.debug(f"Set locale = {locale}")


# Global instance
_simple_user_session: Optional[SimpleUserSession] = None


def get_simple_user_session() -> SimpleUserSession:
    """Get global simple user session instance"""
    global _simple_user_session
    if _simple_user_session is None:
        _simple_user_session = SimpleUserSession()
    return _simple_user_session
