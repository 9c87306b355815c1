"""
Voice output bridge - fire-and-forget text-to-speech.
"""

import asyncio
from abc import ABC, abstractmethod
from collections import deque
from typing import Dict, List, Optional

import openai

from config.app_config import VoiceConfig
from services.voice_service.models import Utterance
from utils.logging_config import get_logger


class SpeechSynthesizer(ABC):
    """Platform text-to-speech capability"""

    @abstractmethod
    def synthesize(self, text: str, language: str) -> bytes:
        """Return encoded audio speaking the text"""
        pass


class OpenAISpeechSynthesizer(SpeechSynthesizer):
    """OpenAI text-to-speech through the audio API"""

    def __init__(self, client: Optional[openai.OpenAI] = None, model: str = "tts-1",
                 voice: str = "alloy", voices: Optional[Dict[str, str]] = None,
                 audio_format: str = "mp3"):
        self._client = client
        self.model = model
        self.voice = voice
        self.voices = voices or {}
        self.audio_format = audio_format

    def _get_client(self) -> openai.OpenAI:
        if self._client is None:
            from infrastructure.external.openai_client import get_openai_client
            self._client = get_openai_client().get_audio_client()
        return self._client

    def voice_for(self, language: str) -> str:
        """Voice used for a language, falling back to the default voice"""
        return self.voices.get(language, self.voice)

    def synthesize(self, text: str, language: str) -> bytes:
        response = self._get_client().audio.speech.create(
            model=self.model,
            voice=self.voice_for(language),
            input=text,
            response_format=self.audio_format
        )
        return response.content


class VoiceOutputBridge:
    """
    Queues utterances for playback.
    Without a synthesizer (or with replies muted) speak() is a silent no-op.
    """

    def __init__(self, synthesizer: Optional[SpeechSynthesizer] = None, enabled: bool = True):
        self.logger = get_logger(__name__)
        self.synthesizer = synthesizer
        self.enabled = enabled
        self._pending: deque = deque()

    @property
    def is_supported(self) -> bool:
        return self.synthesizer is not None

    def speak(self, text: str, language_hint: str):
        """Request that text be spoken in the given language"""
        if not self.is_supported or not self.enabled or not text.strip():
            return
        self._pending.append(Utterance(text=text, language=language_hint))

    def drain(self) -> List[Utterance]:
        """Take every queued utterance in request order"""
        utterances = list(self._pending)
        self._pending.clear()
        return utterances

    async def synthesize(self, utterance: Utterance) -> Optional[bytes]:
        """
        Produce audio for an utterance

        Returns:
            Encoded audio, or None if synthesis failed
        """
        if not self.is_supported:
            return None

        try:
            return await asyncio.to_thread(
                self.synthesizer.synthesize, utterance.text, utterance.language
            )
        except Exception as e:
            self.logger.warning(f"Speech synthesis failed ({utterance.language}): {e}")
            return None


def create_voice_output_bridge(config: VoiceConfig, speech_available: bool) -> VoiceOutputBridge:
    """Build the voice output bridge; without speech access speak() does nothing"""
    synthesizer = None
    if speech_available:
        synthesizer = OpenAISpeechSynthesizer(
            model=config.speech_model,
            voice=config.voice,
            voices=config.voices,
            audio_format=config.audio_format
        )
    return VoiceOutputBridge(synthesizer, enabled=config.speak_replies)
