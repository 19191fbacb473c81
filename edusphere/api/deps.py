"""Service wiring.

One ``Services`` container is built at process start and stored on
``app.state``; route handlers reach it through ``get_services``. Tests
build their own container with in-memory collaborators.
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from edusphere.core.config import Settings
from edusphere.infrastructure.mailer import Mailer, SmtpMailer
from edusphere.infrastructure.media import CloudinaryUploader, MediaUploader
from edusphere.infrastructure.redis import TokenCache, create_token_cache
from edusphere.infrastructure.store import CredentialStore, MemoryCredentialStore
from edusphere.services.otp import OtpService
from edusphere.services.password_change import PasswordChangeService
from edusphere.services.password_reset import PasswordResetService
from edusphere.services.session import SessionService
from edusphere.services.signup import SignupService
from edusphere.services.tags import TagService
from edusphere.services.uploads import UploadService


@dataclass
class Services:
    settings: Settings
    store: CredentialStore
    cache: TokenCache
    mailer: Mailer
    uploader: MediaUploader
    otp: OtpService
    sessions: SessionService
    signup: SignupService
    password_reset: PasswordResetService
    password_change: PasswordChangeService
    uploads: UploadService
    tags: TagService


def build_services(
    settings: Settings,
    *,
    store: Optional[CredentialStore] = None,
    cache: Optional[TokenCache] = None,
    mailer: Optional[Mailer] = None,
    uploader: Optional[MediaUploader] = None,
) -> Services:
    """Construct every service, creating default collaborators where none are given."""
    store = store or MemoryCredentialStore()
    cache = cache or create_token_cache(settings)
    mailer = mailer or SmtpMailer.from_settings(settings)
    uploader = uploader or CloudinaryUploader.from_settings(settings)

    otp = OtpService(store, cache, mailer, settings)
    sessions = SessionService(store, cache, settings)

    return Services(
        settings=settings,
        store=store,
        cache=cache,
        mailer=mailer,
        uploader=uploader,
        otp=otp,
        sessions=sessions,
        signup=SignupService(store, otp, sessions, mailer, settings),
        password_reset=PasswordResetService(store, mailer, sessions, settings),
        password_change=PasswordChangeService(store, sessions),
        uploads=UploadService(store, uploader, mailer, settings),
        tags=TagService(store),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services
