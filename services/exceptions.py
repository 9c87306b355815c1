"""
Exception hierarchy for the chat services.
"""


class GuardianChatError(Exception):
    """Base error for the chat services"""
    pass


class DialogueError(GuardianChatError):
    """The dialogue backend could not produce a reply"""
    pass


class StorageError(GuardianChatError):
    """A message could not be written to the local store"""
    pass


class SpeechUnsupportedError(GuardianChatError):
    """No speech capability is available on this platform"""
    pass


class SpeechRecognitionError(GuardianChatError):
    """Speech recognition failed mid-session"""

    def __init__(self, reason: str, message: str = ""):
        self.reason = reason
        super().__init__(message or f"Speech recognition failed: {reason}")


class LocationError(GuardianChatError):
    """Base error for location lookups"""
    pass


class LocationDeniedError(LocationError):
    """Location sharing is not permitted"""
    pass


class LocationUnavailableError(LocationError):
    """The current position could not be determined"""
    pass
