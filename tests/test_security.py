"""Unit tests for input validators and password hashing."""
import pytest
from unittest.mock import patch

from edusphere.core.errors import HashingFailed
from edusphere.core.security import (
    RANDOM_PASSWORD_ALPHABET,
    generate_random_password,
    hash_password,
    verify_password,
)
from edusphere.utils.validators import is_strong_password, is_valid_email


class TestEmailValidation:
    """Test the email shape check."""

    @pytest.mark.parametrize("email", [
        "a@b.com",
        "first.last@school.edu",
        "  padded@example.org  ",
        "x+tag@sub.domain.io",
    ])
    def test_valid_emails(self, email):
        assert is_valid_email(email) is True

    @pytest.mark.parametrize("email", [
        "",
        "   ",
        "plainaddress",
        "a@b",
        "@b.com",
        "a@.com.",
        "a b@c.com",
        "a@b c.com",
        "a@@b.com",
        None,
        42,
    ])
    def test_malformed_emails(self, email):
        assert is_valid_email(email) is False


class TestPasswordPolicy:
    """Test the strong password rule."""

    def test_strong_password(self):
        assert is_strong_password("Abcdef1!") is True
        assert is_strong_password("Zz9?longer-password") is True

    @pytest.mark.parametrize("password", [
        "Abcde1!",        # too short
        "abcdef1!",       # no uppercase
        "ABCDEF1!",       # no lowercase
        "Abcdefg!",       # no digit
        "Abcdefg1",       # no symbol
        "Abc def1",       # space is not a symbol
        "",
        None,
    ])
    def test_weak_passwords(self, password):
        assert is_strong_password(password) is False

    def test_surrounding_whitespace_is_ignored(self):
        assert is_strong_password("  Abc1!  ") is False
        assert is_strong_password("  Abcdef1!  ") is True


class TestHashing:
    """Test bcrypt hashing and verification."""

    def test_hash_is_not_plaintext(self):
        digest = hash_password("Abcdef1!")

        assert digest != "Abcdef1!"
        assert digest.startswith("$2")

    def test_hashes_are_salted(self):
        assert hash_password("Abcdef1!") != hash_password("Abcdef1!")

    def test_verify_password(self):
        digest = hash_password("Abcdef1!")

        assert verify_password("Abcdef1!", digest) is True
        assert verify_password("Abcdef1?", digest) is False

    def test_verify_rejects_malformed_hash(self):
        assert verify_password("Abcdef1!", "not-a-hash") is False
        assert verify_password("Abcdef1!", None) is False

    def test_hash_retries_then_succeeds(self):
        import bcrypt
        real_hashpw = bcrypt.hashpw
        calls = {"n": 0}

        def flaky(secret, salt):
            calls["n"] += 1
            if calls["n"] < 3:
                raise RuntimeError("entropy exhausted")
            return real_hashpw(secret, salt)

        with patch("edusphere.core.security.bcrypt.hashpw", side_effect=flaky):
            digest = hash_password("Abcdef1!")

        assert calls["n"] == 3
        assert verify_password("Abcdef1!", digest)

    def test_hash_gives_up_after_max_attempts(self):
        with patch(
            "edusphere.core.security.bcrypt.hashpw",
            side_effect=RuntimeError("entropy exhausted"),
        ) as mock_hash:
            with pytest.raises(HashingFailed) as exc_info:
                hash_password("Abcdef1!", max_attempts=3)

        assert mock_hash.call_count == 3
        assert exc_info.value.status_code == 500


class TestRandomPassword:
    """Test generated passwords for provisioned accounts."""

    def test_default_length(self):
        assert len(generate_random_password()) == 8

    def test_custom_length_and_alphabet(self):
        password = generate_random_password(32)

        assert len(password) == 32
        assert set(password) <= set(RANDOM_PASSWORD_ALPHABET)

    def test_passwords_differ(self):
        assert len({generate_random_password(16) for _ in range(20)}) == 20
