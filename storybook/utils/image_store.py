import io
import logging
import os
import uuid
from datetime import datetime
from typing import Optional

import requests
from PIL import Image

from storybook.utils.settings import Settings
from storybook.utils.upload_to_bucket import build_s3_client, upload_file_object_to_s3

logger = logging.getLogger(__name__)


class ImageStore:
    """Writes provider-returned image bytes under the images directory and hands back a public path.

    When an S3 client and bucket are configured the PNG is mirrored to the bucket and
    the bucket URL is returned instead; a failed upload falls back to the local path.
    """

    def __init__(
        self,
        images_dir: str = "uploads/images",
        url_prefix: str = "/images",
        s3_client=None,
        s3_bucket_name: Optional[str] = None,
        s3_region: str = "eu-north-1",
        timeout: float = 60.0,
    ):
        self.images_dir = images_dir
        self.url_prefix = url_prefix.rstrip("/")
        self.s3_client = s3_client
        self.s3_bucket_name = s3_bucket_name
        self.s3_region = s3_region
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImageStore":
        s3_client = None
        if settings.upload_to_s3 and settings.s3_bucket_name:
            s3_client = build_s3_client(settings)
        return cls(
            images_dir=settings.images_dir,
            url_prefix=settings.images_url_prefix,
            s3_client=s3_client,
            s3_bucket_name=settings.s3_bucket_name,
            s3_region=settings.s3_region,
            timeout=settings.provider_timeout,
        )

    def save(self, image_bytes: bytes) -> str:
        """Decode, re-encode as PNG and persist; raises if the bytes are not an image"""
        img = Image.open(io.BytesIO(image_bytes))
        img.load()
        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        png_bytes = buffer.getvalue()

        filename = f"{datetime.now().strftime('%Y%m%d_%H%M%S')}_{uuid.uuid4().hex[:8]}.png"

        if self.s3_client is not None and self.s3_bucket_name:
            upload_result = upload_file_object_to_s3(
                self.s3_client,
                io.BytesIO(png_bytes),
                bucket_name=self.s3_bucket_name,
                object_name=f"storybook/images/{filename}",
                region=self.s3_region,
            )
            if upload_result['success']:
                return upload_result['url']
            logger.warning(f"S3 upload failed, keeping image locally: {upload_result['message']}")

        os.makedirs(self.images_dir, exist_ok=True)
        with open(os.path.join(self.images_dir, filename), "wb") as f:
            f.write(png_bytes)
        return f"{self.url_prefix}/{filename}"

    def load(self, image_ref: str) -> bytes:
        """Read back an image reference produced by save() or a remote URL"""
        if image_ref.startswith(self.url_prefix + "/"):
            file_path = os.path.join(self.images_dir, os.path.basename(image_ref))
            with open(file_path, "rb") as f:
                return f.read()
        response = requests.get(image_ref, timeout=self.timeout)
        response.raise_for_status()
        return response.content
