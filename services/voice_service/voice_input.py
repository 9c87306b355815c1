"""
Voice input bridge - speech-to-text behind a start/stop/result/error/end protocol.

Outcomes are delivered as VoiceEvents over a queue so the session engine can
apply them without nested callbacks.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import List, Optional

import openai

from config.app_config import VoiceConfig
from services.exceptions import SpeechRecognitionError, SpeechUnsupportedError
from services.voice_service.models import VoiceEvent, VoiceState
from utils.logging_config import get_logger


class SpeechRecognizer(ABC):
    """Platform speech-to-text capability"""

    @abstractmethod
    def transcribe(self, audio: bytes, language: str) -> str:
        """
        Transcribe one utterance

        Raises:
            SpeechRecognitionError: If recognition fails
        """
        pass


class WhisperSpeechRecognizer(SpeechRecognizer):
    """OpenAI Whisper transcription through the audio API"""

    def __init__(self, client: Optional[openai.OpenAI] = None, model: str = "whisper-1",
                 filename: str = "speech.wav"):
        self.logger = get_logger(__name__)
        self._client = client
        self.model = model
        self.filename = filename

    def _get_client(self) -> openai.OpenAI:
        if self._client is None:
            from infrastructure.external.openai_client import get_openai_client
            self._client = get_openai_client().get_audio_client()
        return self._client

    def transcribe(self, audio: bytes, language: str) -> str:
        # Whisper expects language code without region ("ta-IN" -> "ta")
        lang = language.split("-")[0] if language else None

        try:
            result = self._get_client().audio.transcriptions.create(
                model=self.model,
                file=(self.filename, audio),
                language=lang
            )
        except openai.APIConnectionError as e:
            raise SpeechRecognitionError("network", str(e)) from e
        except openai.APIError as e:
            raise SpeechRecognitionError("service", str(e)) from e

        return (result.text or "").strip()


class VoiceInputBridge:
    """
    Single-utterance, non-continuous recognition sessions.

    State machine: IDLE --start--> RECORDING; RECORDING --stop/result/error/end--> IDLE.
    Every session ends with an END event unless it fails with an ERROR event.
    """

    def __init__(self, recognizer: Optional[SpeechRecognizer] = None):
        self.logger = get_logger(__name__)
        self.recognizer = recognizer
        self.state = VoiceState.IDLE
        self.language_hint: Optional[str] = None
        self._recognizing = False
        self._events: asyncio.Queue = asyncio.Queue()

    @property
    def is_supported(self) -> bool:
        """Whether speech-to-text is available at all"""
        return self.recognizer is not None

    def start(self, language_hint: str):
        """
        Begin a recognition session tagged with a language

        Raises:
            SpeechUnsupportedError: If no recognizer is available
        """
        if not self.is_supported:
            raise SpeechUnsupportedError("Speech recognition is not available")

        if self.state == VoiceState.RECORDING:
            self.logger.debug("Recognition already in progress, ignoring start")
            return

        self.state = VoiceState.RECORDING
        self.language_hint = language_hint
        self.logger.info(f"Voice recognition started ({language_hint})")

    def stop(self):
        """Request early termination of the current session"""
        if self.state != VoiceState.RECORDING:
            return

        if self._recognizing:
            # The pending transcription still delivers its outcome
            self.logger.debug("Stop requested during recognition")
            return

        self._finish(VoiceEvent.end())

    async def recognize(self, audio: bytes):
        """
        Transcribe audio captured for the current session and emit its outcome

        Audio arriving while no session is recording is ignored.
        """
        if self.state != VoiceState.RECORDING or self._recognizing:
            self.logger.warning("Ignoring audio received outside a recognition session")
            return

        if not audio:
            # Silence: the session ends without a transcript
            self._finish(VoiceEvent.end())
            return

        self._recognizing = True
        try:
            transcript = await asyncio.to_thread(
                self.recognizer.transcribe, audio, self.language_hint
            )
        except SpeechRecognitionError as e:
            self.logger.warning(f"Speech recognition error: {e.reason}")
            self._finish(VoiceEvent.failure(e.reason))
            return
        finally:
            self._recognizing = False

        if transcript:
            self._events.put_nowait(VoiceEvent.result(transcript))
        self._finish(VoiceEvent.end())

    def _finish(self, event: VoiceEvent):
        self.state = VoiceState.IDLE
        self._events.put_nowait(event)
        self.logger.debug(f"Voice recognition finished with {event.kind.value}")

    def next_event(self) -> Optional[VoiceEvent]:
        """Pop the next pending event, if any"""
        try:
            return self._events.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def drain_events(self) -> List[VoiceEvent]:
        """Pop every pending event in emission order"""
        events = []
        event = self.next_event()
        while event is not None:
            events.append(event)
            event = self.next_event()
        return events


def create_voice_input_bridge(config: VoiceConfig, speech_available: bool) -> VoiceInputBridge:
    """Build the voice input bridge; without speech access it reports unsupported"""
    recognizer = None
    if config.enable_voice_input and speech_available:
        recognizer = WhisperSpeechRecognizer(model=config.transcription_model)
    return VoiceInputBridge(recognizer)
