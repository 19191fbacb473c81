"""Tests for the two-step password reset."""
import re
from datetime import datetime, timedelta, timezone

import pytest

from edusphere.core.errors import (
    EmailDeliveryFailed,
    InvalidOrExpiredLink,
    MissingFields,
    NoAccountFound,
    PasswordMismatch,
    WeakPassword,
)
from edusphere.services.session import login_cache_key


def token_from(message):
    return re.search(r"/change-password/([0-9a-f-]{36})", message["html"]).group(1)


class TestResetRequest:
    def test_request_stores_token_and_sends_link(self, services, store, mailer, make_user):
        make_user()

        services.password_reset.request("ada@example.com")

        user = store.get_user_by_email("ada@example.com")
        assert user.reset_token == token_from(mailer.sent[-1])
        assert user.reset_expires > datetime.now(timezone.utc)
        assert mailer.sent[-1]["subject"] == "EduSphere - Password Reset Link"

    def test_unknown_account(self, services, mailer):
        with pytest.raises(NoAccountFound) as exc_info:
            services.password_reset.request("ghost@example.com")

        assert exc_info.value.status_code == 400
        assert mailer.sent == []

    def test_email_failure_clears_token(self, services, store, mailer, make_user):
        make_user()
        mailer.fail = True

        with pytest.raises(EmailDeliveryFailed):
            services.password_reset.request("ada@example.com")

        user = store.get_user_by_email("ada@example.com")
        assert user.reset_token is None
        assert user.reset_expires is None

    def test_new_request_replaces_token(self, services, store, mailer, make_user):
        make_user()
        services.password_reset.request("ada@example.com")
        first = token_from(mailer.sent[-1])

        services.password_reset.request("ada@example.com")

        with pytest.raises(InvalidOrExpiredLink):
            services.password_reset.complete("Newpass1!", "Newpass1!", first)


class TestResetComplete:
    def test_round_trip(self, services, store, mailer, make_user):
        make_user()
        services.password_reset.request("ada@example.com")
        token = token_from(mailer.sent[-1])

        services.password_reset.complete("Newpass1!", "Newpass1!", token)

        user = store.get_user_by_email("ada@example.com")
        assert user.reset_token is None
        assert user.reset_expires is None
        assert services.sessions.login("ada@example.com", "Newpass1!").token

    def test_link_works_once(self, services, mailer, make_user):
        make_user()
        services.password_reset.request("ada@example.com")
        token = token_from(mailer.sent[-1])
        services.password_reset.complete("Newpass1!", "Newpass1!", token)

        with pytest.raises(InvalidOrExpiredLink) as exc_info:
            services.password_reset.complete("Other1!pass", "Other1!pass", token)

        assert exc_info.value.status_code == 400

    def test_expired_link(self, services, mailer, make_user):
        make_user()
        services.password_reset.request("ada@example.com")
        token = token_from(mailer.sent[-1])

        later = datetime.now(timezone.utc) + timedelta(minutes=6)
        services.password_reset.clock = lambda: later

        with pytest.raises(InvalidOrExpiredLink):
            services.password_reset.complete("Newpass1!", "Newpass1!", token)

    def test_unknown_token(self, services):
        with pytest.raises(InvalidOrExpiredLink):
            services.password_reset.complete("Newpass1!", "Newpass1!", "not-a-token")

    @pytest.mark.parametrize("new,confirm,token,error", [
        ("Newpass1!", "Newpass1!", None, MissingFields),
        ("weak", "weak", "not-a-token", WeakPassword),
        ("Newpass1!", "Newpass2!", "not-a-token", PasswordMismatch),
    ])
    def test_validation_precedes_lookup(self, services, store, monkeypatch, new, confirm, token, error):
        def fail_lookup(*args):
            raise AssertionError("store must not be queried")

        monkeypatch.setattr(store, "get_user_by_reset_token", fail_lookup)

        with pytest.raises(error):
            services.password_reset.complete(new, confirm, token)

    def test_reset_drops_login_snapshot(self, services, cache, mailer, make_user):
        make_user()
        services.sessions.login("ada@example.com", "Abcdef1!")
        services.password_reset.request("ada@example.com")

        services.password_reset.complete("Newpass1!", "Newpass1!", token_from(mailer.sent[-1]))

        assert cache.get(login_cache_key("ada@example.com")) is None
