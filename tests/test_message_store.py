"""
Tests for the SQLite message store
"""

import os
import shutil
import sqlite3
import tempfile
from datetime import datetime

import pytest

from services.chat_service.message_store import MessageStore, create_message_store
from services.chat_service.models import Message, MessageRole
from services.exceptions import StorageError


class TestMessageStore:
    """Test message persistence"""

    def setup_method(self):
        """Set up test environment"""
        self.temp_dir = tempfile.mkdtemp()
        self.db_path = os.path.join(self.temp_dir, "nested", "chat.db")
        self.store = MessageStore("profile-a", db_path=self.db_path)

    def teardown_method(self):
        """Clean up test environment"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_creates_database_directory(self):
        assert os.path.exists(self.db_path)

    def test_load_empty(self):
        assert self.store.load() == []

    def test_append_then_load_preserves_order(self):
        messages = [
            Message(MessageRole.ASSISTANT, "Hello", datetime(2024, 3, 1, 8, 0, 0, 123456)),
            Message(MessageRole.USER, "There was an accident", datetime(2024, 3, 1, 8, 0, 5)),
            Message(MessageRole.ASSISTANT, "Is anyone injured?", datetime(2024, 3, 1, 8, 0, 9)),
        ]
        for message in messages:
            self.store.append(message)

        assert self.store.load() == messages

    def test_load_from_new_instance(self):
        message = Message(MessageRole.USER, "नमस्ते", datetime(2024, 3, 1, 8, 0))
        self.store.append(message)

        reopened = MessageStore("profile-a", db_path=self.db_path)
        assert reopened.load() == [message]

    def test_profiles_are_isolated(self):
        other = MessageStore("profile-b", db_path=self.db_path)
        self.store.append(Message(MessageRole.USER, "mine"))
        other.append(Message(MessageRole.USER, "theirs"))

        assert [m.content for m in self.store.load()] == ["mine"]
        assert [m.content for m in other.load()] == ["theirs"]

    def test_system_message_rejected(self):
        with pytest.raises(ValueError):
            self.store.append(Message(MessageRole.SYSTEM, "You are a bot"))
        assert self.store.load() == []

    def test_malformed_rows_are_skipped(self):
        self.store.append(Message(MessageRole.USER, "valid", datetime(2024, 3, 1, 8, 0)))

        conn = sqlite3.connect(self.db_path)
        conn.execute(
            "INSERT INTO messages (profile_id, role, content, created_at) VALUES (?, ?, ?, ?)",
            ("profile-a", "wizard", "bad role", "2024-03-01T08:01:00")
        )
        conn.execute(
            "INSERT INTO messages (profile_id, role, content, created_at) VALUES (?, ?, ?, ?)",
            ("profile-a", "user", "bad time", "yesterday")
        )
        conn.execute(
            "INSERT INTO messages (profile_id, role, content, created_at) VALUES (?, ?, ?, ?)",
            ("profile-a", "system", "stored prompt", "2024-03-01T08:02:00")
        )
        conn.commit()
        conn.close()

        assert [m.content for m in self.store.load()] == ["valid"]

    def test_unreadable_store_loads_empty(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("DROP TABLE messages")
        conn.commit()
        conn.close()

        assert self.store.load() == []

    def test_failed_write_raises_storage_error(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("DROP TABLE messages")
        conn.commit()
        conn.close()

        with pytest.raises(StorageError):
            self.store.append(Message(MessageRole.USER, "lost"))

    def test_create_message_store_with_path(self):
        store = create_message_store("profile-c", db_path=self.db_path)

        assert store.profile_id == "profile-c"
        assert store.db_path == self.db_path
