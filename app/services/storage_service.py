# app/services/storage_service.py
import asyncio
import os
import re
import uuid
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
from app.config import settings
from app.newsletter.exceptions import ImageUploadError
import logging

logger = logging.getLogger(__name__)

LOCAL_URL_PREFIX = "/uploads"

def safe_filename(filename: Optional[str]) -> str:
    """Keep only characters that are safe in object keys and file paths"""
    name = os.path.basename(filename or "") or "image"
    name = re.sub(r'[^A-Za-z0-9._-]', '-', name)
    return name.strip('.-') or "image"

class StorageService:
    """Hosts uploaded images on S3, or on local disk when S3 is unavailable"""

    def __init__(self, s3_client=None, bucket_name: Optional[str] = None, uploads_dir: Optional[str] = None):
        self.bucket_name = bucket_name if bucket_name is not None else settings.image_bucket_name
        self.uploads_dir = uploads_dir or settings.uploads_dir
        self.folder = settings.image_folder
        self.public_base_url = settings.image_public_base_url
        self.s3_client = s3_client
        if self.s3_client is None and self.bucket_name:
            self.s3_client = boto3.client('s3', region_name=settings.aws_region)
        self.executor = ThreadPoolExecutor(max_workers=2)

    async def upload_image(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """Store image bytes and return the URL they are served from"""
        if not data:
            raise ValueError("Image is empty")

        name = f"{uuid.uuid4().hex[:12]}-{safe_filename(filename)}"
        loop = asyncio.get_running_loop()

        if self.s3_client and self.bucket_name:
            try:
                return await loop.run_in_executor(
                    self.executor, self._upload_to_s3, data, name, content_type
                )
            except (BotoCoreError, ClientError) as e:
                logger.error(f"S3 upload failed for {name}, falling back to local storage: {e}")

        try:
            return await loop.run_in_executor(self.executor, self._save_locally, data, name)
        except OSError as e:
            logger.error(f"Local image save failed for {name}: {e}")
            raise ImageUploadError(f"Image upload failed: {e}")

    def _upload_to_s3(self, data: bytes, name: str, content_type: Optional[str]) -> str:
        key = f"{self.folder}/{name}"
        params = {
            'Bucket': self.bucket_name,
            'Key': key,
            'Body': data,
        }
        if content_type:
            params['ContentType'] = content_type

        self.s3_client.put_object(**params)

        if self.public_base_url:
            url = f"{self.public_base_url.rstrip('/')}/{key}"
        else:
            url = f"https://{self.bucket_name}.s3.{settings.aws_region}.amazonaws.com/{key}"
        logger.info(f"Image uploaded to S3: {url}")
        return url

    def _save_locally(self, data: bytes, name: str) -> str:
        os.makedirs(self.uploads_dir, exist_ok=True)
        with open(os.path.join(self.uploads_dir, name), 'wb') as f:
            f.write(data)
        logger.info(f"Image saved locally: {LOCAL_URL_PREFIX}/{name}")
        return f"{LOCAL_URL_PREFIX}/{name}"

storage_service = StorageService()
