"""
Avatar storage abstraction supporting both local filesystem and AWS S3.

Backends return the public URL stored in User.avatar.
"""

import logging
import os
import uuid
from typing import BinaryIO
import boto3
from botocore.exceptions import ClientError
from app.core.config import settings

logger = logging.getLogger(__name__)

AVATAR_FOLDER = "avatars"


class StorageError(Exception):
    """Raised when a backend cannot persist a file."""


class StorageBackend:
    """Abstract base class for storage backends"""

    def upload_file(self, file: BinaryIO, filename: str, content_type: str) -> str:
        """Store file and return its public URL"""
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Local filesystem backend, served by the app under AVATAR_URL_PREFIX"""

    def __init__(self, base_dir: str = None):
        self.base_dir = os.path.join(base_dir or settings.UPLOAD_DIR, AVATAR_FOLDER)
        os.makedirs(self.base_dir, exist_ok=True)

    def upload_file(self, file: BinaryIO, filename: str, content_type: str) -> str:
        file_path = os.path.join(self.base_dir, filename)
        try:
            with open(file_path, "wb") as buffer:
                buffer.write(file.read())
        except OSError as e:
            logger.error(f"Error writing avatar {file_path}: {e}")
            raise StorageError(str(e))

        return f"{settings.AVATAR_URL_PREFIX}/{filename}"


class S3Storage(StorageBackend):
    """AWS S3 storage backend"""

    def __init__(self):
        self.bucket_name = settings.S3_BUCKET_NAME

        # If AWS_ACCESS_KEY_ID is not set, boto3 will use IAM roles (for EC2/ECS)
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            self.s3_client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION
            )
        else:
            self.s3_client = boto3.client('s3', region_name=settings.AWS_REGION)

    def _key(self, filename: str) -> str:
        return f"{AVATAR_FOLDER}/{filename}"

    def upload_file(self, file: BinaryIO, filename: str, content_type: str) -> str:
        key = self._key(filename)
        try:
            self.s3_client.upload_fileobj(
                file,
                self.bucket_name,
                key,
                ExtraArgs={'ContentType': content_type}
            )
        except ClientError as e:
            logger.error(f"Error uploading avatar to S3: {e}")
            raise StorageError(str(e))

        return f"https://{self.bucket_name}.s3.{settings.AWS_REGION}.amazonaws.com/{key}"


def build_avatar_filename(original_name: str, owner: str = "avatar") -> str:
    """Unique file name keeping the upload's extension."""
    name = original_name or ""
    extension = name.rsplit(".", 1)[-1].lower() if "." in name else "jpg"
    return f"{owner}_{uuid.uuid4().hex}.{extension}"


# Storage factory - returns appropriate backend based on settings
def get_storage() -> StorageBackend:
    """Get storage backend based on USE_S3 setting"""
    if settings.USE_S3:
        if not settings.S3_BUCKET_NAME:
            raise ValueError("S3_BUCKET_NAME must be set when USE_S3=True")
        return S3Storage()
    else:
        return LocalStorage()


# Singleton instance
storage = get_storage()
