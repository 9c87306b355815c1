"""
Conversation session engine - owns the message history of one profile and
orchestrates typed text, voice input, location sharing and assistant replies.
"""

import asyncio
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

from config.app_config import AppConfig, DEFAULT_SYSTEM_PROMPT, get_config
from infrastructure.external.openai_client import OpenAIClient
from services.ai_service.dialogue_client import DialogueClient
from services.chat_service.message_store import MessageStore, create_message_store
from services.chat_service.models import Message, MessageRole
from services.exceptions import DialogueError, LocationError, StorageError
from services.location_service.location_bridge import LocationBridge, create_location_bridge
from services.ui_service.notifier import Notifier
from services.voice_service.models import VoiceEventKind
from services.voice_service.voice_input import VoiceInputBridge, create_voice_input_bridge
from services.voice_service.voice_output import VoiceOutputBridge, create_voice_output_bridge
from utils.logging_config import ErrorTracker, get_logger, log_conversation_event, log_user_interaction


REPLY_FAILED_MESSAGE = "Failed to get response. Please try again."
SAVE_FAILED_MESSAGE = "Your message could not be saved on this device."
SPEECH_UNSUPPORTED_MESSAGE = "Speech recognition is not supported on this device"
SPEECH_FAILED_MESSAGE = "Voice input failed. Please try again."
LOCATION_SHARED_MESSAGE = "Location shared successfully"
LOCATION_FAILED_MESSAGE = "Could not get your location"


class ConversationSession:
    """
    Conversation state for one profile.

    Messages are append-only and kept in acceptance order. Every collaborator
    is injected, so several sessions can coexist (e.g. under test).
    """

    def __init__(
        self,
        store: MessageStore,
        dialogue_client: DialogueClient,
        voice_input: VoiceInputBridge,
        voice_output: VoiceOutputBridge,
        location_bridge: LocationBridge,
        notifier: Notifier,
        locale: str = "en",
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        greetings: Optional[Dict[str, str]] = None,
        locales: Optional[Dict[str, str]] = None,
        serialize_submissions: bool = False,
        profile_id: str = "default",
        error_tracker: Optional[ErrorTracker] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        self.logger = get_logger(__name__)
        self.store = store
        self.dialogue_client = dialogue_client
        self.voice_input = voice_input
        self.voice_output = voice_output
        self.location_bridge = location_bridge
        self.notifier = notifier
        self.system_prompt = system_prompt
        self.greetings = greetings or {locale: "Hello, how can I help you?"}
        self.locales = locales
        self.serialize_submissions = serialize_submissions
        self.profile_id = profile_id
        self.error_tracker = error_tracker or ErrorTracker(self.logger)
        self._clock = clock

        self._messages: List[Message] = []
        self._in_flight = 0
        self._submit_lock = asyncio.Lock()

        self.locale = locale
        self.input_text = ""
        self.is_recording = False
        self.location = None
        self.active = True

    # -- state -----------------------------------------------------------------

    @property
    def messages(self) -> Tuple[Message, ...]:
        """Session messages in order"""
        return tuple(self._messages)

    @property
    def is_typing(self) -> bool:
        """True exactly while a dialogue request is outstanding"""
        return self._in_flight > 0

    @property
    def pending_requests(self) -> int:
        return self._in_flight

    def set_locale(self, locale: str):
        """
        Switch the active locale

        Raises:
            ValueError: If the locale is not one of the available locales
        """
        if self.locales is not None and locale not in self.locales:
            raise ValueError(f"Unsupported locale: {locale}")
        if locale != self.locale:
            self.logger.info(f"Locale changed from {self.locale} to {locale}")
        self.locale = locale

    def greeting_for(self, locale: str) -> str:
        if locale in self.greetings:
            return self.greetings[locale]
        return next(iter(self.greetings.values()))

    def close(self):
        """Detach the session; replies arriving afterwards are discarded"""
        self.active = False
        self.logger.debug(f"Session closed for profile {self.profile_id}")

    def _now(self) -> datetime:
        # Keep created_at non-decreasing even if the wall clock steps back
        now = self._clock()
        if self._messages and now < self._messages[-1].created_at:
            return self._messages[-1].created_at
        return now

    def _record(self, role: MessageRole, content: str) -> Message:
        """Append a message to the session and persist it"""
        message = Message(role=role, content=content, created_at=self._now())
        self._messages.append(message)

        try:
            self.store.append(message)
        except StorageError as e:
            self.error_tracker.track_error(e, "persist_message", profile_id=self.profile_id)
            self.notifier.error(SAVE_FAILED_MESSAGE)

        log_conversation_event(self.logger, "message_added", self.profile_id, role=role.value)
        return message

    # -- operations ------------------------------------------------------------

    def initialize(self, locale: Optional[str] = None):
        """
        Restore the session, seeding a greeting when nothing is stored

        Calling again (e.g. after a locale change) never re-seeds once the
        session has messages.
        """
        if locale is not None:
            self.set_locale(locale)

        if self._messages:
            return

        restored = self.store.load()
        if restored:
            self._messages = list(restored)
            log_conversation_event(self.logger, "restored", self.profile_id, message_count=len(restored))
            return

        self._record(MessageRole.ASSISTANT, self.greeting_for(self.locale))
        log_conversation_event(self.logger, "seeded", self.profile_id, locale=self.locale)

    def build_request(self, user_message: Message) -> List[Dict[str, str]]:
        """
        System instruction, then the history before user_message, then user_message

        Assistant replies recorded after user_message (e.g. while it waited
        for an earlier request) are part of its history; user messages
        accepted after it are not.
        """
        history = []
        seen_user_message = False
        for message in self._messages:
            if message is user_message:
                seen_user_message = True
            elif not seen_user_message or message.role == MessageRole.ASSISTANT:
                history.append(message.to_api_dict())

        return (
            [{"role": MessageRole.SYSTEM.value, "content": self.system_prompt}]
            + history
            + [user_message.to_api_dict()]
        )

    async def _request_reply(self, user_message: Message) -> str:
        if self.serialize_submissions:
            async with self._submit_lock:
                return await self.dialogue_client.complete(self.build_request(user_message))
        return await self.dialogue_client.complete(self.build_request(user_message))

    def _apply_reply(self, reply: str) -> Optional[Message]:
        if not self.active:
            log_conversation_event(self.logger, "reply_discarded", self.profile_id)
            return None

        assistant_message = self._record(MessageRole.ASSISTANT, reply)
        self.voice_output.speak(reply, self.locale)
        return assistant_message

    async def submit_text(self, text: Optional[str] = None) -> Optional[Message]:
        """
        Send user text to the assistant

        Args:
            text: Text to send; the input buffer is used when omitted

        Returns:
            The assistant message, or None when nothing was sent, the reply
            was empty, the request failed or the session was closed
        """
        if text is None:
            text = self.input_text
        text = (text or "").strip()
        if not text:
            return None

        user_message = self._record(MessageRole.USER, text)
        self.input_text = ""
        self._in_flight += 1
        log_user_interaction(self.logger, "submit_text", profile_id=self.profile_id,
                             locale=self.locale, pending=self._in_flight)

        try:
            reply = await self._request_reply(user_message)
            if not reply.strip():
                self.logger.warning("Dialogue backend returned an empty reply")
                return None
            return self._apply_reply(reply)
        except DialogueError as e:
            self.error_tracker.track_error(e, "submit_text", profile_id=self.profile_id)
            self.notifier.error(REPLY_FAILED_MESSAGE)
            return None
        finally:
            self._in_flight -= 1

    async def submit_location(self) -> Optional[Message]:
        """
        Share the current position as a user message

        The message is a local annotation; it is not sent to the assistant.
        """
        log_user_interaction(self.logger, "share_location", profile_id=self.profile_id)

        try:
            location = await self.location_bridge.get_current_position()
        except LocationError as e:
            self.error_tracker.track_error(e, "submit_location", profile_id=self.profile_id)
            self.notifier.error(LOCATION_FAILED_MESSAGE)
            return None

        if not self.active:
            return None

        self.location = location
        message = self._record(MessageRole.USER, location.to_announcement())
        self.notifier.success(LOCATION_SHARED_MESSAGE)
        return message

    def toggle_voice_input(self) -> bool:
        """
        Start or stop voice input

        Returns:
            Whether voice input is recording afterwards
        """
        if not self.voice_input.is_supported:
            self.notifier.error(SPEECH_UNSUPPORTED_MESSAGE)
            return False

        if self.is_recording:
            self.voice_input.stop()
            self.process_voice_events()
        else:
            self.voice_input.start(self.locale)
            self.is_recording = True
            log_user_interaction(self.logger, "voice_input_started", profile_id=self.profile_id,
                                 locale=self.locale)

        return self.is_recording

    def process_voice_events(self):
        """Apply pending recognition events to the session"""
        for event in self.voice_input.drain_events():
            if event.kind == VoiceEventKind.RESULT:
                # Replaces the input buffer; the user still submits it
                self.input_text = event.transcript
            elif event.kind == VoiceEventKind.ERROR:
                self.logger.warning(f"Voice input error: {event.error}")
                self.notifier.error(SPEECH_FAILED_MESSAGE)
                self.is_recording = False
            elif event.kind == VoiceEventKind.END:
                self.is_recording = False

    async def transcribe_recording(self, audio: bytes):
        """Recognize captured audio for the current recording and apply the outcome"""
        await self.voice_input.recognize(audio)
        self.process_voice_events()


def create_conversation_session(
    profile_id: str,
    notifier: Notifier,
    locale: Optional[str] = None,
    config: Optional[AppConfig] = None,
    store: Optional[MessageStore] = None,
    dialogue_client: Optional[DialogueClient] = None,
    error_tracker: Optional[ErrorTracker] = None
) -> ConversationSession:
    """Build a session wired to the configured store, backend and bridges"""
    config = config or get_config()
    speech_available = OpenAIClient(config).has_api_key()

    return ConversationSession(
        store=store or create_message_store(profile_id, db_path=config.storage.db_path),
        dialogue_client=dialogue_client or DialogueClient(config=config),
        voice_input=create_voice_input_bridge(config.voice, speech_available),
        voice_output=create_voice_output_bridge(config.voice, speech_available),
        location_bridge=create_location_bridge(config.location),
        notifier=notifier,
        locale=locale or config.chat.default_locale,
        system_prompt=config.chat.system_prompt,
        greetings=config.chat.greetings,
        locales=config.chat.locales,
        serialize_submissions=config.chat.serialize_submissions,
        profile_id=profile_id,
        error_tracker=error_tracker
    )
