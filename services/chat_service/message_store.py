"""
Message store - persists the conversation for one profile.
Append-only SQLite storage behind a narrow load/append contract.
"""

from typing import List, Optional
import sqlite3
import os

from services.chat_service.models import Message, MessageRole
from services.exceptions import StorageError
from utils.logging_config import get_logger


class MessageStore:
    """
    Repository for the messages of a single profile.
    Rows are returned in the order they were appended.
    """

    def __init__(self, profile_id: str, db_path: str = "data/guardian_chat.db"):
        """
        Initialize message store

        Args:
            profile_id: Profile the stored messages belong to
            db_path: Path to SQLite database for persistence
        """
        self.logger = get_logger(__name__)
        self.profile_id = profile_id
        self.db_path = db_path

        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_database(self):
        """Initialize SQLite schema for messages"""
        os.makedirs(os.path.dirname(self.db_path) if os.path.dirname(self.db_path) else ".", exist_ok=True)

        try:
            conn = self._connect()
            try:
                cursor = conn.cursor()

                cursor.execute('''
                    CREATE TABLE IF NOT EXISTS messages (
                        id INTEGER PRIMARY KEY AUTOINCREMENT,
                        profile_id TEXT NOT NULL,
                        role TEXT NOT NULL,
                        content TEXT NOT NULL,
                        created_at TEXT NOT NULL
                    )
                ''')

                cursor.execute('''
                    CREATE INDEX IF NOT EXISTS idx_messages_profile_id ON messages (profile_id)
                ''')

                conn.commit()
            finally:
                conn.close()

            self.logger.debug(f"Message store ready at {self.db_path}")

        except sqlite3.Error as e:
            self.logger.error(f"Error initializing message store: {e}")
            raise StorageError(f"Could not initialize message store: {e}") from e

    def load(self) -> List[Message]:
        """
        Load persisted messages for the profile

        Returns:
            Messages in append order, or an empty list if none are stored
            or the store cannot be read
        """
        try:
            conn = self._connect()
            try:
                cursor = conn.cursor()
                cursor.execute('''
                    SELECT role, content, created_at FROM messages
                    WHERE profile_id = ?
                    ORDER BY id ASC
                ''', (self.profile_id,))
                rows = cursor.fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            self.logger.error(f"Error loading messages for profile {self.profile_id}: {e}")
            return []

        messages = []
        for role, content, created_at in rows:
            try:
                message = Message.from_record({
                    "role": role,
                    "content": content,
                    "created_at": created_at
                })
            except (ValueError, KeyError) as e:
                self.logger.warning(f"Skipping malformed stored message: {e}")
                continue

            if message.role == MessageRole.SYSTEM:
                self.logger.warning("Skipping stored system message")
                continue

            messages.append(message)

        self.logger.debug(f"Loaded {len(messages)} messages for profile {self.profile_id}")
        return messages

    def append(self, message: Message) -> None:
        """
        Durably record one message after all previously recorded ones

        Args:
            message: Message to persist

        Raises:
            ValueError: If the message is a system message
            StorageError: If the write fails
        """
        if message.role == MessageRole.SYSTEM:
            raise ValueError("System messages are never persisted")

        record = message.to_record()

        try:
            conn = self._connect()
            try:
                conn.execute('''
                    INSERT INTO messages (profile_id, role, content, created_at)
                    VALUES (?, ?, ?, ?)
                ''', (self.profile_id, record["role"], record["content"], record["created_at"]))
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            self.logger.error(f"Error saving message for profile {self.profile_id}: {e}")
            raise StorageError(f"Could not save message: {e}") from e

        self.logger.debug(f"Appended {record['role']} message for profile {self.profile_id}")


def create_message_store(profile_id: str, db_path: Optional[str] = None) -> MessageStore:
    """Create a message store for a profile using the configured database"""
    if db_path is None:
        from config.app_config import get_config
        db_path = get_config().storage.db_path
    return MessageStore(profile_id, db_path=db_path)
