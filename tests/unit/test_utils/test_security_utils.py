"""
Unit tests for admin session tokens and cookie handling
"""

import base64
import json

import pytest

from utils.config_manager import AuthConfig
from utils.exceptions import AuthError, ConfigurationError
from utils.security_utils import (
    create_token, verify_token, extract_cookie, is_admin_session,
    constant_time_equals, sign_payload, SessionManager, SecurityValidator,
    SESSION_COOKIE_NAME, SESSION_MAX_AGE_MS
)

SECRET = "s3cret"
NOW = 1_700_000_000_000


def _encode(data) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


@pytest.mark.unit
class TestSessionToken:
    """Test cases for token signing and verification"""

    def test_fresh_token_is_valid(self):
        """Test a freshly issued token verifies"""
        token = create_token(SECRET, now_ms=NOW)
        assert verify_token(SECRET, token, now_ms=NOW)

    def test_token_format(self):
        """Test the token is payload.signature with a millisecond timestamp"""
        token = create_token(SECRET, now_ms=NOW)
        payload, _, signature = token.rpartition(".")
        assert "=" not in token
        decoded = json.loads(base64.urlsafe_b64decode(payload + "=" * (-len(payload) % 4)))
        assert decoded == {"t": NOW}
        assert signature == sign_payload(SECRET, payload)

    def test_token_valid_at_max_age(self):
        """Test a token exactly at the max age is still accepted"""
        token = create_token(SECRET, now_ms=NOW)
        assert verify_token(SECRET, token, now_ms=NOW + SESSION_MAX_AGE_MS)

    def test_expired_token_rejected(self):
        """Test a token older than seven days is rejected"""
        token = create_token(SECRET, now_ms=NOW)
        assert not verify_token(SECRET, token, now_ms=NOW + SESSION_MAX_AGE_MS + 1)

    def test_wrong_secret_rejected(self):
        token = create_token(SECRET, now_ms=NOW)
        assert not verify_token("other", token, now_ms=NOW)

    def test_tampered_payload_rejected(self):
        """Test replacing the payload invalidates the signature"""
        token = create_token(SECRET, now_ms=NOW)
        _, _, signature = token.rpartition(".")
        forged = f"{_encode({'t': NOW + 1000})}.{signature}"
        assert not verify_token(SECRET, forged, now_ms=NOW)

    def test_tampered_signature_rejected(self):
        token = create_token(SECRET, now_ms=NOW)
        flipped = token[:-1] + ("A" if token[-1] != "A" else "B")
        assert not verify_token(SECRET, flipped, now_ms=NOW)

    @pytest.mark.parametrize("token", [
        None, 123, "", ".", "abc", "abc.", ".abc", "not.base64.at.all",
    ])
    def test_malformed_tokens_rejected(self, token):
        """Test malformed tokens return False instead of raising"""
        assert verify_token(SECRET, token, now_ms=NOW) is False

    @pytest.mark.parametrize("payload", [
        {"t": "1700000000000"},
        {"t": True},
        {"t": None},
        {"time": NOW},
        [NOW],
    ])
    def test_correctly_signed_bad_payload_rejected(self, payload):
        """Test signed payloads without a numeric timestamp are rejected"""
        encoded = _encode(payload)
        token = f"{encoded}.{sign_payload(SECRET, encoded)}"
        assert verify_token(SECRET, token, now_ms=NOW) is False

    def test_signed_non_json_payload_rejected(self):
        encoded = base64.urlsafe_b64encode(b"\xff\xfe").rstrip(b"=").decode()
        token = f"{encoded}.{sign_payload(SECRET, encoded)}"
        assert verify_token(SECRET, token, now_ms=NOW) is False

    def test_empty_secret_never_verifies(self):
        token = create_token("", now_ms=NOW)
        assert verify_token("", token, now_ms=NOW) is False

    def test_constant_time_equals(self):
        assert constant_time_equals("abc", "abc")
        assert not constant_time_equals("abc", "abd")
        assert not constant_time_equals("abc", "abcd")


@pytest.mark.unit
class TestCookieParsing:
    """Test cases for cookie extraction and session checks"""

    def test_extract_cookie(self):
        header = f"theme=dark; {SESSION_COOKIE_NAME}=abc.def; other=1"
        assert extract_cookie(header, SESSION_COOKIE_NAME) == "abc.def"

    def test_extract_quoted_and_encoded_cookie(self):
        assert extract_cookie(f'{SESSION_COOKIE_NAME}="a%2Eb"', SESSION_COOKIE_NAME) == "a.b"

    def test_extract_missing_cookie(self):
        assert extract_cookie(None, SESSION_COOKIE_NAME) is None
        assert extract_cookie("", SESSION_COOKIE_NAME) is None
        assert extract_cookie("x-quotevault-admin=1", SESSION_COOKIE_NAME) is None

    def test_is_admin_session(self):
        token = create_token(SECRET, now_ms=NOW)
        header = f"{SESSION_COOKIE_NAME}={token}"
        assert is_admin_session(header, SECRET, now_ms=NOW)
        assert not is_admin_session(header, "", now_ms=NOW)
        assert not is_admin_session("a=b", SECRET, now_ms=NOW)
        assert not is_admin_session(header, SECRET, now_ms=NOW + SESSION_MAX_AGE_MS + 1)


@pytest.mark.unit
class TestSessionManager:
    """Test cases for SessionManager"""

    @pytest.fixture
    def sessions(self):
        return SessionManager(AuthConfig(admin_password="pw"))

    def test_check_password_success(self, sessions):
        sessions.check_password("pw")

    @pytest.mark.parametrize("password", ["wrong", "", None, 123, ["pw"]])
    def test_check_password_rejected(self, sessions, password):
        """Test wrong or non-string passwords raise AuthError"""
        with pytest.raises(AuthError):
            sessions.check_password(password)

    def test_check_password_not_configured(self):
        """Test login without a configured password raises ConfigurationError"""
        sessions = SessionManager(AuthConfig(session_secret="only-secret"))
        with pytest.raises(ConfigurationError):
            sessions.check_password("anything")

    def test_issue_and_check(self, sessions):
        token = sessions.issue_token(now_ms=NOW)
        assert sessions.is_admin(f"{sessions.cookie_name}={token}", now_ms=NOW)
        assert not sessions.is_admin(None)
        assert not sessions.is_admin("garbage")

    def test_session_secret_fallback(self):
        """Test session_secret signs tokens when no admin password is set"""
        sessions = SessionManager(AuthConfig(session_secret="fallback"))
        token = sessions.issue_token(now_ms=NOW)
        assert verify_token("fallback", token, now_ms=NOW)

    def test_max_age_seconds(self, sessions):
        assert sessions.max_age_seconds == 604800


@pytest.mark.unit
class TestSecurityValidator:
    """Test cases for masking"""

    def test_mask_sensitive_data(self):
        masked = SecurityValidator.mask_sensitive_data({
            "admin_password": "supersecret",
            "session_secret": "abc",
            "cookie_name": "quotevault-admin",
        })
        assert masked["admin_password"] == "********"
        assert masked["session_secret"] == "********"
        assert masked["cookie_name"] == "quotevault-admin"

    def test_mask_keeps_unset_values(self):
        masked = SecurityValidator.mask_sensitive_data({"admin_password": "", "session_secret": None})
        assert masked == {"admin_password": "", "session_secret": None}
