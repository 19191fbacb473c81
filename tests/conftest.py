"""Pytest configuration and shared fixtures."""
import os

# Configure before any edusphere import reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ.pop("MAIL_HOST", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from edusphere.api.deps import build_services  # noqa: E402
from edusphere.core.config import settings  # noqa: E402
from edusphere.core.security import hash_password  # noqa: E402
from edusphere.domain.user import AccountType, Profile, User  # noqa: E402
from edusphere.infrastructure.media import UploadError  # noqa: E402
from edusphere.infrastructure.redis import MemoryTokenCache  # noqa: E402
from edusphere.infrastructure.store import MemoryCredentialStore  # noqa: E402


class FakeClock:
    """Monotonic clock the tests can move forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingMailer:
    """Mailer that records messages and can be told to fail."""

    def __init__(self):
        self.sent = []
        self.fail = False

    def send(self, to, subject, html_body):
        if self.fail:
            return False
        self.sent.append({"to": to, "subject": subject, "html": html_body})
        return True


class FakeUploader:
    def __init__(self):
        self.uploads = []
        self.error = None
        self.response = {"secure_url": "https://res.cloudinary.com/demo/image/upload/v1/EduSphere/pic.png"}

    def upload(self, content, filename, folder):
        if self.error:
            raise UploadError(self.error)
        self.uploads.append({"filename": filename, "folder": folder, "size": len(content)})
        return self.response


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def cache(clock):
    return MemoryTokenCache(clock=clock)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def services(store, cache, mailer, uploader):
    """Fresh service container per test."""
    return build_services(settings, store=store, cache=cache, mailer=mailer, uploader=uploader)


@pytest.fixture
def test_client(services):
    """FastAPI test client bound to the per-test services."""
    from main import create_app
    return TestClient(create_app(services))


@pytest.fixture
def make_user(store):
    """Create a user (and profile) directly in the store."""
    def _make(
        email="ada@example.com",
        password="Abcdef1!",
        account_type=AccountType.STUDENT,
        first_name="Ada",
        last_name="Lovelace",
    ):
        profile = store.create_profile(Profile.placeholder(first_name, last_name))
        return store.create_user(User(
            first_name=first_name,
            last_name=last_name,
            email=email,
            password=hash_password(password),
            account_type=account_type,
            profile_id=profile.id,
        ))
    return _make


@pytest.fixture
def signup_payload():
    return {
        "firstName": "A",
        "lastName": "B",
        "email": "a@b.com",
        "password": "Abcdef1!",
        "confirmPassword": "Abcdef1!",
        "otp": "123456",
    }
