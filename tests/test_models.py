"""
Tests for chat and voice data models
"""

from datetime import datetime

import pytest

from services.chat_service.models import Location, Message, MessageRole
from services.voice_service.models import Utterance, VoiceEvent, VoiceEventKind


class TestMessage:

    def test_api_dict_drops_timestamp(self):
        message = Message(MessageRole.USER, "help", datetime(2024, 1, 1))

        assert message.to_api_dict() == {"role": "user", "content": "help"}

    def test_record_uses_iso_timestamp(self):
        message = Message(MessageRole.ASSISTANT, "ok", datetime(2024, 1, 1, 10, 30))

        assert message.to_record() == {
            "role": "assistant",
            "content": "ok",
            "created_at": "2024-01-01T10:30:00",
        }

    def test_from_record_accepts_datetime(self):
        created = datetime(2024, 1, 1, 10, 30)
        message = Message.from_record({"role": "user", "content": "hi", "created_at": created})

        assert message == Message(MessageRole.USER, "hi", created)

    def test_from_record_rejects_unknown_role(self):
        with pytest.raises(ValueError):
            Message.from_record({"role": "moderator", "content": "x", "created_at": "2024-01-01T00:00:00"})

    def test_from_record_rejects_missing_timestamp(self):
        with pytest.raises(ValueError):
            Message.from_record({"role": "user", "content": "x"})

    def test_messages_are_immutable(self):
        message = Message(MessageRole.USER, "help")

        with pytest.raises(AttributeError):
            message.content = "changed"


class TestLocation:

    def test_announcement_format(self):
        location = Location(latitude=13.0827, longitude=80.2707)

        assert location.to_announcement() == "📍 Location shared: 13.0827, 80.2707"


class TestVoiceModels:

    def test_event_constructors(self):
        assert VoiceEvent.result("hello").kind == VoiceEventKind.RESULT
        assert VoiceEvent.result("hello").transcript == "hello"
        assert VoiceEvent.failure("network").error == "network"
        assert VoiceEvent.end() == VoiceEvent(VoiceEventKind.END)

    def test_utterance_keeps_language(self):
        utterance = Utterance(text="Stay calm", language="ta")

        assert utterance.language == "ta"
        assert isinstance(utterance.requested_at, datetime)
