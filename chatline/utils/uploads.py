import asyncio
import logging
from typing import Optional, Protocol

import cloudinary
import cloudinary.uploader

from chatline.config import Settings
from chatline.errors import UploadError


logger = logging.getLogger(__name__)


class Uploader(Protocol):

    enabled: bool

    async def upload(self, payload: str) -> str: ...


class DisabledUploader:

    enabled = False

    async def upload(self, payload: str) -> str:
        raise UploadError("Image uploads are not configured")


class CloudinaryUploader:
    # the SDK blocks, so uploads run in a worker thread

    enabled = True

    def __init__(self, cloud_name: str, api_key: str, api_secret: str, folder: Optional[str] = None) -> None:
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)
        self._folder = folder

    async def upload(self, payload: str) -> str:
        options = {"resource_type": "image"}
        if self._folder:
            options["folder"] = self._folder
        try:
            response = await asyncio.to_thread(cloudinary.uploader.upload, payload, **options)
        except Exception as exc:
            logger.error("Cloudinary upload failed: %s", exc)
            raise UploadError() from exc
        url = response.get("secure_url") or response.get("url")
        if not url:
            raise UploadError("Upload did not return a url")
        return url


def build_uploader(settings: Settings) -> Uploader:
    if not settings.uploads_enabled:
        logger.info("Cloudinary credentials missing; image uploads disabled")
        return DisabledUploader()
    return CloudinaryUploader(
        settings.cloudinary_cloud_name,
        settings.cloudinary_api_key,
        settings.cloudinary_api_secret,
        folder=settings.cloudinary_folder,
    )
