import logging
import os
import uuid
from pathlib import Path
from typing import Dict, List, Optional

import boto3
from botocore.config import Config
from fastapi import UploadFile

from errors import DependencyError, ValidationError

logger = logging.getLogger(__name__)

AWS_REGION = os.environ.get("AWS_REGION")
S3_BUCKET_NAME = os.environ.get("S3_BUCKET_NAME")
S3_ACCESS_KEY = os.environ.get("S3_ACCESS_KEY") or os.environ.get("AWS_ACCESS_KEY_ID")
S3_SECRET_KEY = os.environ.get("S3_SECRET_KEY") or os.environ.get("AWS_SECRET_ACCESS_KEY")

IMAGE_CONTENT_TYPES = ["image/png", "image/jpeg", "image/webp"]

S3_CLIENT = None
if AWS_REGION and S3_BUCKET_NAME and S3_ACCESS_KEY and S3_SECRET_KEY:
    s3_config = Config(signature_version="s3v4", s3={"addressing_style": "virtual"})
    S3_CLIENT = boto3.client(
        "s3",
        region_name=AWS_REGION,
        aws_access_key_id=S3_ACCESS_KEY,
        aws_secret_access_key=S3_SECRET_KEY,
        endpoint_url=f"https://s3.{AWS_REGION}.amazonaws.com",
        config=s3_config,
    )


def _build_s3_url(key: str) -> str:
    if not S3_BUCKET_NAME or not AWS_REGION:
        raise RuntimeError("S3 configuration missing")
    return f"https://{S3_BUCKET_NAME}.s3.{AWS_REGION}.amazonaws.com/{key}"


def _build_key(folder: str, filename: str) -> str:
    extension = Path(filename or "").suffix.lower()
    return f"{folder.rstrip('/')}/{uuid.uuid4().hex}{extension}"


def upload_bytes(data: bytes, folder: str, filename: str, content_type: str = "application/octet-stream") -> Dict[str, str]:
    if not S3_CLIENT or not S3_BUCKET_NAME or not AWS_REGION:
        raise DependencyError("Blob store not configured")
    if not filename:
        raise ValidationError("Missing filename")

    key = _build_key(folder, filename)
    try:
        S3_CLIENT.put_object(
            Bucket=S3_BUCKET_NAME,
            Key=key,
            Body=data,
            ContentType=content_type
        )
    except Exception as exc:
        logger.error("S3 upload failed: %s", exc)
        raise DependencyError("Upload failed", error=str(exc)) from exc

    return {"url": _build_s3_url(key), "key": key}


def upload_image(file: UploadFile, folder: str, allowed_types: Optional[List[str]] = None) -> Dict[str, str]:
    allowed = allowed_types or IMAGE_CONTENT_TYPES
    if not file.filename:
        raise ValidationError("Missing filename")
    if not file.content_type:
        raise ValidationError("Missing file content type")
    if file.content_type not in allowed:
        raise ValidationError("Only image files are allowed")
    return upload_bytes(file.file.read(), folder, file.filename, file.content_type)


def delete_blob(key: Optional[str]) -> bool:
    """Remove a stored object. Failures are logged, never raised."""
    if not key:
        return False
    if not S3_CLIENT or not S3_BUCKET_NAME:
        logger.warning("Blob store not configured; leaving %s in place", key)
        return False
    try:
        S3_CLIENT.delete_object(Bucket=S3_BUCKET_NAME, Key=key)
    except Exception as exc:
        logger.warning("S3 delete failed for %s: %s", key, exc)
        return False
    return True
