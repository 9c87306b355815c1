"""
Voice service - speech-to-text and text-to-speech bridges.
"""

from .models import Utterance, VoiceEvent, VoiceEventKind, VoiceState
from .voice_input import (
    SpeechRecognizer,
    VoiceInputBridge,
    WhisperSpeechRecognizer,
    create_voice_input_bridge
)
from .voice_output import (
    OpenAISpeechSynthesizer,
    SpeechSynthesizer,
    VoiceOutputBridge,
    create_voice_output_bridge
)

__all__ = [
    'Utterance',
    'VoiceEvent',
    'VoiceEventKind',
    'VoiceState',
    'SpeechRecognizer',
    'VoiceInputBridge',
    'WhisperSpeechRecognizer',
    'create_voice_input_bridge',
    'OpenAISpeechSynthesizer',
    'SpeechSynthesizer',
    'VoiceOutputBridge',
    'create_voice_output_bridge'
]
