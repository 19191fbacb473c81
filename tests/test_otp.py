"""Tests for OTP issuance and consumption."""
import re

import pytest

from edusphere.core.errors import (
    AccountExists,
    CacheUnavailable,
    EmailDeliveryFailed,
    EmailRequired,
    InvalidEmail,
    OtpExpiredOrMissing,
    OtpMismatch,
)
from edusphere.services.otp import generate_otp


class TestGenerateOtp:
    def test_six_digits(self):
        for _ in range(50):
            code = generate_otp()
            assert re.fullmatch(r"\d{6}", code)


class TestOtpRequest:
    """Test sending verification codes."""

    def test_request_sends_and_stores_code(self, services, mailer):
        assert services.otp.request("new@example.com", "Ada", "Lovelace") is True

        code = services.otp.peek("new@example.com")
        assert re.fullmatch(r"\d{6}", code)
        assert len(mailer.sent) == 1
        assert mailer.sent[0]["to"] == "new@example.com"
        assert code in mailer.sent[0]["html"]

    def test_request_is_idempotent_while_active(self, services, mailer, clock):
        services.otp.request("new@example.com")
        first = services.otp.peek("new@example.com")

        clock.advance(120)
        assert services.otp.request("new@example.com") is False

        assert services.otp.peek("new@example.com") == first
        assert len(mailer.sent) == 1

    def test_new_code_after_expiry(self, services, mailer, clock):
        services.otp.request("new@example.com")
        clock.advance(300)

        assert services.otp.peek("new@example.com") is None
        assert services.otp.request("new@example.com") is True
        assert len(mailer.sent) == 2

    def test_delivery_failure_stores_nothing(self, services, mailer):
        mailer.fail = True

        with pytest.raises(EmailDeliveryFailed) as exc_info:
            services.otp.request("new@example.com")

        assert exc_info.value.status_code == 500
        assert services.otp.peek("new@example.com") is None

    def test_retry_after_delivery_failure(self, services, mailer):
        mailer.fail = True
        with pytest.raises(EmailDeliveryFailed):
            services.otp.request("new@example.com")

        mailer.fail = False
        assert services.otp.request("new@example.com") is True
        assert services.otp.peek("new@example.com") is not None

    def test_cache_write_failure(self, services, cache, monkeypatch):
        monkeypatch.setattr(cache, "set", lambda key, value, ttl_seconds: False)

        with pytest.raises(CacheUnavailable):
            services.otp.request("new@example.com")

    @pytest.mark.parametrize("email,error", [
        ("", EmailRequired),
        (None, EmailRequired),
        ("not-an-email", InvalidEmail),
    ])
    def test_request_validation(self, services, email, error):
        with pytest.raises(error) as exc_info:
            services.otp.request(email)

        assert exc_info.value.status_code == 400

    def test_request_for_existing_account(self, services, make_user, mailer):
        make_user(email="taken@example.com")

        with pytest.raises(AccountExists) as exc_info:
            services.otp.request("taken@example.com")

        assert exc_info.value.status_code == 409
        assert mailer.sent == []


class TestOtpConsume:
    """Test single-use consumption."""

    def test_consume_once(self, services, cache):
        cache.set("otp:a@b.com", "123456", 300)

        services.otp.consume("a@b.com", "123456")

        with pytest.raises(OtpExpiredOrMissing):
            services.otp.consume("a@b.com", "123456")

    def test_mismatch_keeps_code(self, services, cache):
        cache.set("otp:a@b.com", "123456", 300)

        with pytest.raises(OtpMismatch) as exc_info:
            services.otp.consume("a@b.com", "654321")

        assert exc_info.value.status_code == 401
        assert services.otp.peek("a@b.com") == "123456"

    def test_comparison_is_exact(self, services, cache):
        cache.set("otp:a@b.com", "012345", 300)

        with pytest.raises(OtpMismatch):
            services.otp.consume("a@b.com", "12345")

    def test_missing_code(self, services):
        with pytest.raises(OtpExpiredOrMissing) as exc_info:
            services.otp.consume("a@b.com", "123456")

        assert exc_info.value.status_code == 410

    def test_discard_skips_the_check(self, services, cache, clock):
        cache.set("otp:a@b.com", "123456", 300)
        clock.advance(301)

        services.otp.discard("a@b.com")
        services.otp.discard("a@b.com")

        assert services.otp.peek("a@b.com") is None
