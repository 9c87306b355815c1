"""
Notifier - transient, non-blocking notifications shown to the user.
"""

from abc import ABC, abstractmethod

import streamlit as st


class Notifier(ABC):
    """Surface for user-visible notifications"""

    @abstractmethod
    def success(self, message: str):
        pass

    @abstractmethod
    def error(self, message: str):
        pass


class StreamlitNotifier(Notifier):
    """Notifications rendered as Streamlit toasts"""

    def success(self, message: str):
        st.toast(message, icon="✅")

    def error(self, message: str):
        st.toast(message, icon="🚨")
