"""Image uploads to Cloudinary through its Python SDK."""
import io
from typing import Any, Dict, Optional, Protocol

import cloudinary
import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

from edusphere.core.config import Settings
from edusphere.core.logging import get_logger

logger = get_logger(__name__)


class UploadError(Exception):
    """Raised when the media service rejects or cannot take an upload."""


class MediaUploader(Protocol):
    def upload(self, content: bytes, filename: str, folder: str) -> Dict[str, Any]: ...


class CloudinaryUploader:
    """Uploads with ``resource_type="auto"``; returns the response including ``secure_url``."""

    def __init__(
        self,
        cloud_name: Optional[str],
        api_key: Optional[str],
        api_secret: Optional[str],
        timeout: int = 30,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.timeout = timeout

        if self.is_configured:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )
            logger.info(f"Cloudinary configured for cloud {cloud_name}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudinaryUploader":
        return cls(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            timeout=settings.upload_timeout_seconds,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def upload(self, content: bytes, filename: str, folder: str) -> Dict[str, Any]:
        if not self.is_configured:
            raise UploadError("Media storage is not configured")

        try:
            response = cloudinary.uploader.upload(
                io.BytesIO(content),
                folder=folder,
                resource_type="auto",
                filename=filename,
                timeout=self.timeout,
            )
        except CloudinaryError as e:
            logger.error(f"Cloudinary upload failed: {e}")
            raise UploadError(str(e)) from e

        logger.info(f"Uploaded {filename} to folder {folder}")
        return response
