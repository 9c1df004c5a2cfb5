import os
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError

logger = logging.getLogger(__name__)

FOLDER = "uploads"


def _bucket():
    return os.getenv("R2_BUCKET")


def _public_base_url():
    return os.getenv("R2_PUBLIC_URL", "").rstrip("/")


@lru_cache(maxsize=1)
def get_s3_client():
    return boto3.client(
        service_name="s3",
        endpoint_url=f"https://{os.getenv('CLOUDFLARE_ACCOUNT_ID')}.r2.cloudflarestorage.com",
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        region_name="auto",
    )


def build_key(original_name: str, ext: Optional[str] = None) -> str:
    base, original_ext = os.path.splitext(os.path.basename(original_name or "image"))
    ext = (ext or original_ext.lstrip(".") or "bin").lower()

    ts = int(datetime.now(timezone.utc).timestamp())
    return f"{FOLDER}/{base or 'image'}-{ts}.{ext}"


def key_from_url(url: str) -> Optional[str]:
    base = _public_base_url()

    if base and url.startswith(base + "/"):
        return url[len(base) + 1:]

    return None


def upload_image(data: bytes, original_name: str, content_type: Optional[str] = None) -> str:
    """Store the payload as-is and return the URL it is served from."""
    key = build_key(original_name)

    extra = {"ContentType": content_type} if content_type else {}
    get_s3_client().put_object(Bucket=_bucket(), Key=key, Body=data, **extra)

    logger.info("Uploaded image %s (%d bytes)", key, len(data))
    return f"{_public_base_url()}/{key}"


def delete_image(url: str) -> None:
    key = key_from_url(url)

    if not key:
        logger.warning("Not deleting image outside the bucket: %s", url)
        return

    try:
        get_s3_client().delete_object(Bucket=_bucket(), Key=key)
    except (BotoCoreError, ClientError) as e:
        logger.error("Error deleting S3 object %s: %s", key, e)
