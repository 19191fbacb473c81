"""Image uploads to the media service with a stored metadata record.

Nothing account-related depends on an upload, so a failed upload leaves
no partial state behind.
"""
from pathlib import PurePath
from typing import Optional

from edusphere.core.config import Settings
from edusphere.core.errors import InvalidUpload, UploadFailed
from edusphere.core.logging import get_logger, redact_email
from edusphere.domain.user import UploadedFile
from edusphere.infrastructure.mailer import Mailer
from edusphere.infrastructure.media import MediaUploader, UploadError
from edusphere.infrastructure.store import CredentialStore
from edusphere.services.templates import upload_notice_email

logger = get_logger(__name__)

SUPPORTED_IMAGE_TYPES = {"jpg", "jpeg", "png"}


def file_extension(filename: str) -> str:
    return PurePath(filename).suffix.lstrip(".").lower()


class UploadService:
    def __init__(
        self,
        store: CredentialStore,
        uploader: MediaUploader,
        mailer: Mailer,
        settings: Settings,
    ):
        self.store = store
        self.uploader = uploader
        self.mailer = mailer
        self.folder = settings.upload_folder
        self.max_bytes = settings.max_upload_bytes

    def upload_image(
        self,
        name: Optional[str],
        email: Optional[str],
        filename: Optional[str],
        content: Optional[bytes],
        tag: Optional[str] = None,
    ) -> UploadedFile:
        """Upload an image and record where it landed.

        Raises:
            InvalidUpload: Missing data, oversize file or unsupported type
            UploadFailed: The media service failed or returned no URL
        """
        if not name or not email or not filename or not content:
            raise InvalidUpload()
        if len(content) > self.max_bytes:
            raise InvalidUpload("File too large")
        if file_extension(filename) not in SUPPORTED_IMAGE_TYPES:
            raise InvalidUpload("File type is not supported")

        try:
            response = self.uploader.upload(content, filename, self.folder)
        except UploadError:
            raise UploadFailed("File upload to media storage failed")

        secure_url = (response or {}).get("secure_url")
        if not secure_url:
            raise UploadFailed("Media storage returned no secure URL")

        record = self.store.create_file(
            UploadedFile(name=name, email=email, image_url=secure_url, tag=tag)
        )

        subject, html = upload_notice_email(secure_url)
        if not self.mailer.send(email, subject, html):
            logger.warning("Upload notice not delivered", extra={"email": redact_email(email)})

        logger.info(f"File uploaded: {record.id}")
        return record
