import logging
import mimetypes
import uuid
from functools import lru_cache

import boto3
import httpx
from botocore.exceptions import BotoCoreError, ClientError
from starlette.concurrency import run_in_threadpool

from movie_catalog.config import config

logger = logging.getLogger(__name__)


class UploadError(Exception):
    """The media storage rejected or failed an upload."""


class MediaStorage:
    """Stores binary images in an S3-compatible bucket and returns public URLs."""

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        public_url: str | None = None,
    ):
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_url = public_url
        self.client = boto3.client(
            "s3",
            region_name=region,
            endpoint_url=endpoint_url,
            aws_access_key_id=config.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
        )

    def build_key(self, folder: str, filename: str | None, content_type: str | None) -> str:
        extension = ""
        if filename and "." in filename:
            extension = "." + filename.rsplit(".", 1)[1].lower()
        elif content_type:
            extension = mimetypes.guess_extension(content_type) or ""
        return f"{folder}/{uuid.uuid4().hex}{extension}"

    def base_url(self) -> str:
        if self.public_url:
            return self.public_url.rstrip("/")
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com"

    def url_for(self, key: str) -> str:
        return f"{self.base_url()}/{key}"

    def key_for(self, url: str) -> str | None:
        prefix = self.base_url() + "/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix):]

    def _put(self, key: str, data: bytes, content_type: str | None):
        extra = {"ContentType": content_type} if content_type else {}
        self.client.put_object(Bucket=self.bucket, Key=key, Body=data, **extra)

    async def upload(
        self,
        data: bytes,
        folder: str,
        filename: str | None = None,
        content_type: str | None = None,
    ) -> str:
        if not self.bucket:
            raise UploadError("Media bucket is not configured")
        if not data:
            raise UploadError("Empty file")

        key = self.build_key(folder, filename, content_type)
        try:
            await run_in_threadpool(self._put, key, data, content_type)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Upload of {key} failed: {e}")
            raise UploadError(str(e)) from e

        logger.info(f"📤 Uploaded {key} ({len(data)} bytes)")
        return self.url_for(key)

    async def discard(self, url: str) -> bool:
        """Removes an uploaded object; a failure leaves it orphaned and is logged."""
        key = self.key_for(url)
        if key is None:
            logger.warning(f"⚠️ Not a media URL, nothing to discard: {url}")
            return False

        try:
            await run_in_threadpool(
                self.client.delete_object,
                Bucket=self.bucket,
                Key=key,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Could not discard {key}, object is orphaned: {e}")
            return False

        logger.info(f"🗑 Discarded {key}")
        return True


@lru_cache
def get_storage() -> MediaStorage:
    return MediaStorage(
        bucket=config.MEDIA_BUCKET,
        region=config.MEDIA_REGION,
        endpoint_url=config.MEDIA_ENDPOINT_URL,
        public_url=config.MEDIA_PUBLIC_URL,
    )


async def resolve_default_avatar(storage: MediaStorage | None = None) -> str:
    """
    Runs once at startup. Optionally mirrors the default avatar into our
    bucket; otherwise (or on any failure) the source URL is used as-is.
    """
    source_url = config.DEFAULT_AVATAR_URL
    if not config.MIRROR_DEFAULT_AVATAR:
        return source_url

    storage = storage or get_storage()
    try:
        async with httpx.AsyncClient(timeout=10.0, follow_redirects=True) as client:
            response = await client.get(source_url)
            response.raise_for_status()
        url = await storage.upload(
            response.content,
            folder="avatars",
            filename=source_url.rsplit("/", 1)[-1],
            content_type=response.headers.get("content-type"),
        )
    except (httpx.HTTPError, UploadError) as e:
        logger.warning(f"⚠️ Could not mirror default avatar, using source URL: {e}")
        return source_url

    logger.info(f"✅ Default avatar mirrored to {url}")
    return url
