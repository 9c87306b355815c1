"""
Tests for the voice output bridge
"""

import asyncio
from unittest.mock import Mock

from config.app_config import VoiceConfig
from services.voice_service.voice_output import (
    OpenAISpeechSynthesizer,
    SpeechSynthesizer,
    VoiceOutputBridge,
    create_voice_output_bridge,
)


class TestVoiceOutputBridge:

    def setup_method(self):
        self.synthesizer = Mock(spec=SpeechSynthesizer)
        self.synthesizer.synthesize.return_value = b"mp3"
        self.bridge = VoiceOutputBridge(self.synthesizer)

    def test_speak_queues_utterances_in_order(self):
        self.bridge.speak("first", "en")
        self.bridge.speak("second", "ta")

        utterances = self.bridge.drain()
        assert [(u.text, u.language) for u in utterances] == [("first", "en"), ("second", "ta")]
        assert self.bridge.drain() == []

    def test_speak_without_synthesizer_is_silent(self):
        bridge = VoiceOutputBridge()

        bridge.speak("hello", "en")

        assert bridge.drain() == []

    def test_speak_when_muted_is_silent(self):
        bridge = VoiceOutputBridge(self.synthesizer, enabled=False)

        bridge.speak("hello", "en")

        assert bridge.drain() == []

    def test_blank_text_not_queued(self):
        self.bridge.speak("  ", "en")

        assert self.bridge.drain() == []

    def test_synthesize_uses_utterance_language(self):
        self.bridge.speak("नमस्ते", "hi")
        utterance = self.bridge.drain()[0]

        assert asyncio.run(self.bridge.synthesize(utterance)) == b"mp3"
        self.synthesizer.synthesize.assert_called_once_with("नमस्ते", "hi")

    def test_synthesis_failure_returns_none(self):
        self.synthesizer.synthesize.side_effect = RuntimeError("tts down")
        self.bridge.speak("hello", "en")

        assert asyncio.run(self.bridge.synthesize(self.bridge.drain()[0])) is None


class TestOpenAISpeechSynthesizer:

    def test_voice_per_language(self):
        synthesizer = OpenAISpeechSynthesizer(client=Mock(), voice="alloy", voices={"hi": "nova"})

        assert synthesizer.voice_for("hi") == "nova"
        assert synthesizer.voice_for("ta") == "alloy"

    def test_synthesize_calls_speech_api(self):
        client = Mock()
        client.audio.speech.create.return_value = Mock(content=b"audio-bytes")
        synthesizer = OpenAISpeechSynthesizer(client=client, model="tts-1", voice="alloy")

        assert synthesizer.synthesize("Stay calm", "en") == b"audio-bytes"
        client.audio.speech.create.assert_called_once_with(
            model="tts-1", voice="alloy", input="Stay calm", response_format="mp3"
        )


class TestCreateVoiceOutputBridge:

    def test_muted_by_config(self):
        bridge = create_voice_output_bridge(VoiceConfig(speak_replies=False), speech_available=True)

        assert bridge.is_supported
        assert bridge.enabled is False

    def test_unsupported_without_speech_access(self):
        assert not create_voice_output_bridge(VoiceConfig(), speech_available=False).is_supported
