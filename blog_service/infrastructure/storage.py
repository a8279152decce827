"""
Storage management for S3 upload URLs
"""
from datetime import datetime
from typing import Optional
import logging

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from blog_service.config import settings
from blog_service.domain.exceptions import InternalError
from .auth import generate_id

logger = logging.getLogger(__name__)


class StorageManager:
    """Hand out pre-signed URLs so clients upload images straight to S3"""

    def __init__(self, client=None):
        self.client = client
        self.bucket_name = settings.S3_BUCKET_NAME

    def start(self):
        """Initialize storage client"""
        if self.client is None:
            self.client = boto3.client(
                "s3",
                endpoint_url=settings.S3_ENDPOINT_URL or None,
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
                region_name=settings.AWS_REGION,
                config=Config(signature_version="s3v4"),
            )
        logger.info(f"Storage client ready for bucket {self.bucket_name}")

    def stop(self):
        """Release storage client"""
        if self.client is not None:
            self.client.close()
            self.client = None

    @staticmethod
    def make_image_key(now: Optional[datetime] = None) -> str:
        now = now or datetime.now()
        return f"{generate_id()}-{int(now.timestamp() * 1000)}.jpeg"

    def generate_upload_url(self, key: Optional[str] = None) -> str:
        """
        Generate a presigned PUT URL for a new image

        Args:
            key: Object key; a fresh unique one when omitted

        Returns:
            Presigned URL

        Raises:
            InternalError: the URL could not be signed
        """
        if self.client is None:
            raise InternalError("Storage client is not initialized")

        key = key or self.make_image_key()
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket_name,
                    "Key": key,
                    "ContentType": settings.UPLOAD_CONTENT_TYPE,
                },
                ExpiresIn=settings.UPLOAD_URL_EXPIRES,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Failed to generate upload URL for {key}: {e}")
            raise InternalError(str(e))
