"""
UI service - handles user interface components and notifications.
"""

from .notifier import Notifier, StreamlitNotifier
from .chat_interface import ChatInterface, get_chat_interface

__all__ = [
    'Notifier',
    'StreamlitNotifier',
    'ChatInterface',
    'get_chat_interface'
]
