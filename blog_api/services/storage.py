"""
DigitalOcean Spaces media storage for blog images
"""

import asyncio
import io
import logging
import uuid
from datetime import datetime
from functools import lru_cache, partial
from typing import Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel

from ..config import settings
from ..errors import MediaUploadError

logger = logging.getLogger(__name__)


class UploadedImage(BaseModel):
    url: str
    public_id: str


class MediaStorage(Protocol):
    """Opaque media host: bytes in, ``{url, public_id}`` out"""

    async def upload_image(
        self, file_content: bytes, original_filename: str, content_type: str
    ) -> UploadedImage: ...

    async def delete_image(self, public_id: str) -> None: ...


def optimize_image(file_content: bytes, max_width: int) -> bytes:
    """Downscale images wider than ``max_width``, keeping their format

    Bytes Pillow cannot decode, and images already narrow enough, are
    returned unchanged.
    """
    try:
        image = Image.open(io.BytesIO(file_content))
        image_format = image.format
        if image.width <= max_width or image_format is None:
            return file_content

        ratio = max_width / image.width
        resized = image.resize(
            (max_width, max(1, int(image.height * ratio))), Image.Resampling.LANCZOS
        )
        output = io.BytesIO()
        save_kwargs = {"optimize": True}
        if image_format == "JPEG":
            save_kwargs["quality"] = 85
        resized.save(output, format=image_format, **save_kwargs)
        return output.getvalue()
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning(f"Image optimization skipped: {str(e)}")
        return file_content


class SpacesStorage:
    """MediaStorage backed by an S3-compatible DigitalOcean Space"""

    def __init__(self):
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=settings.DO_SPACES_ENDPOINT,
            aws_access_key_id=settings.DO_SPACES_KEY,
            aws_secret_access_key=settings.DO_SPACES_SECRET,
            region_name=settings.DO_SPACES_REGION,
        )
        self.bucket_name = settings.DO_SPACES_BUCKET
        self.folder = settings.DO_SPACES_FOLDER

    def _generate_public_id(self, original_filename: str) -> str:
        """Generate a unique object key for an upload"""
        timestamp = datetime.now().strftime("%Y/%m/%d")
        file_extension = (
            original_filename.rsplit(".", 1)[-1].lower()
            if "." in original_filename
            else ""
        )
        unique_id = str(uuid.uuid4())

        if file_extension:
            return f"{self.folder}/{timestamp}/{unique_id}.{file_extension}"
        return f"{self.folder}/{timestamp}/{unique_id}"

    def _get_public_url(self, public_id: str) -> str:
        if settings.DO_SPACES_CDN_ENDPOINT:
            return f"{settings.DO_SPACES_CDN_ENDPOINT.rstrip('/')}/{public_id}"
        if settings.DO_SPACES_ENDPOINT:
            return f"{settings.DO_SPACES_ENDPOINT.rstrip('/')}/{self.bucket_name}/{public_id}"
        return f"https://{self.bucket_name}.s3.amazonaws.com/{public_id}"

    async def _run(self, func, **kwargs):
        # boto3 is blocking; run it off the event loop
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(func, **kwargs))

    async def upload_image(
        self, file_content: bytes, original_filename: str, content_type: str
    ) -> UploadedImage:
        """
        Upload an image to the Space

        Args:
            file_content: Raw image bytes
            original_filename: Name the client sent, used for the extension
            content_type: MIME type of the image

        Returns:
            UploadedImage with the public URL and the object key as public_id
        """
        public_id = self._generate_public_id(original_filename)
        body = await self._run(
            optimize_image, file_content=file_content, max_width=settings.MAX_IMAGE_WIDTH
        )

        try:
            await self._run(
                self.s3_client.put_object,
                Bucket=self.bucket_name,
                Key=public_id,
                Body=body,
                ContentType=content_type,
                ACL="public-read",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to upload {original_filename}: {str(e)}")
            raise MediaUploadError(f"Failed to upload image {original_filename}")

        return UploadedImage(url=self._get_public_url(public_id), public_id=public_id)

    async def delete_image(self, public_id: str) -> None:
        """Delete an object from the Space; errors propagate to the caller"""
        await self._run(
            self.s3_client.delete_object, Bucket=self.bucket_name, Key=public_id
        )


@lru_cache
def get_storage() -> MediaStorage:
    """Process-wide media storage, overridable as a FastAPI dependency"""
    return SpacesStorage()

