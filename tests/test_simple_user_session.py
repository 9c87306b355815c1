"""
Tests for profile identification
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest

from services.simple_user_session import SimpleUserSession, is_valid_profile_id


class FakeSessionState(dict):
    """Dict with attribute access, like st.session_state"""

    def __getattr__(self, name):
        try:
            return self[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __setattr__(self, name, value):
        self[name] = value


class TestProfileIds:

    @pytest.mark.parametrize("value", ["abcd", "a1b2c3d4e5f6", "kiosk_lobby-2"])
    def test_valid(self, value):
        assert is_valid_profile_id(value)

    @pytest.mark.parametrize("value", [None, "", "abc", "has space", "../../etc", "x" * 65])
    def test_invalid(self, value):
        assert not is_valid_profile_id(value)


class TestSimpleUserSession:

    def setup_method(self):
        self.st = SimpleNamespace(session_state=FakeSessionState(), query_params={})
        self.patcher = patch("services.simple_user_session.st", self.st)
        self.patcher.start()
        self.session = SimpleUserSession()

    def teardown_method(self):
        self.patcher.stop()

    def test_restores_profile_from_url(self):
        self.st.query_params["profile"] = "abc123def456"

        assert self.session.get_profile_id() == "abc123def456"

    def test_creates_profile_when_missing(self):
        profile_id = self.session.get_profile_id()

        assert is_valid_profile_id(profile_id)
        assert self.st.query_params["profile"] == profile_id
        assert self.session.get_profile_id() == profile_id

    def test_replaces_invalid_profile(self):
        self.st.query_params["profile"] = "../x"

        profile_id = self.session.get_profile_id()

        assert profile_id != "../x"
        assert self.st.query_params["profile"] == profile_id

    def test_locale_round_trip(self):
        assert self.session.get_locale("en") == "en"

        self.session.set_locale("ta")

        assert self.session.get_locale("en") == "ta"
