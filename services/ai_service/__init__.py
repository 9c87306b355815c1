"""
AI service - handles requests to the dialogue backend.
"""

from .dialogue_client import (
    DialogueClient,
    to_langchain_messages,
    extract_reply_text
)

__all__ = [
    'DialogueClient',
    'to_langchain_messages',
    'extract_reply_text'
]
