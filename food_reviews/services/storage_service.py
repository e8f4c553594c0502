import os
import uuid
from datetime import datetime
from urllib.parse import urlparse
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from werkzeug.utils import secure_filename

ALLOWED_PHOTO_EXTENSIONS = {'jpg', 'jpeg', 'png', 'gif', 'webp'}


def is_allowed_photo(filename):
    ext = filename.rsplit('.', 1)[-1].lower() if filename and '.' in filename else ''
    return ext in ALLOWED_PHOTO_EXTENSIONS


class StorageService:
    """Review photo uploads to a public Cloudflare R2 bucket."""

    def __init__(self, bucket_name=None, account_id=None, access_key=None, secret_key=None, public_domain=None):
        self.s3_client = None
        self.bucket_name = bucket_name
        self.account_id = account_id
        self.public_domain = public_domain

        if all([bucket_name, account_id, access_key, secret_key]):
            self.s3_client = boto3.client(
                's3',
                endpoint_url=f'https://{account_id}.r2.cloudflarestorage.com',
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key,
                region_name='auto'  # R2 requires a region
            )

    @classmethod
    def from_config(cls, config):
        return cls(
            bucket_name=config.get('R2_BUCKET_NAME'),
            account_id=config.get('R2_ACCOUNT_ID'),
            access_key=config.get('R2_ACCESS_KEY_ID'),
            secret_key=config.get('R2_SECRET_ACCESS_KEY'),
            public_domain=config.get('R2_PUBLIC_DOMAIN'),
        )

    def is_configured(self) -> bool:
        return self.s3_client is not None

    def public_url(self, key):
        if self.public_domain:
            return f"{self.public_domain.rstrip('/')}/{key}"
        return f"https://{self.bucket_name}.{self.account_id}.r2.cloudflarestorage.com/{key}"

    def upload_file(self, file_obj, folder='food-photos'):
        """
        Uploads a file-like object (a werkzeug FileStorage) to R2.
        Returns the public URL, or None if the upload failed.
        """
        if not self.s3_client:
            current_app.logger.error("R2 client not initialized. Check environment variables.")
            return None

        # Generate a unique filename
        original_filename = secure_filename(file_obj.filename or '')
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
        unique_id = str(uuid.uuid4())[:8]
        extension = os.path.splitext(original_filename)[1].lower()
        key = f"{folder}/{timestamp}_{unique_id}{extension}"

        try:
            file_obj.seek(0)
            self.s3_client.upload_fileobj(
                file_obj,
                self.bucket_name,
                key,
                ExtraArgs={'ContentType': file_obj.content_type or 'application/octet-stream'}
            )
        except (ClientError, BotoCoreError) as e:
            current_app.logger.error(f"Error uploading file to R2: {e}")
            return None

        url = self.public_url(key)
        current_app.logger.info(f"Uploaded photo {original_filename} to {url}")
        return url

    def key_from_url(self, file_url):
        if self.public_domain and file_url.startswith(self.public_domain.rstrip('/') + '/'):
            return file_url[len(self.public_domain.rstrip('/')) + 1:]
        if file_url.startswith('http'):
            return urlparse(file_url).path.lstrip('/')
        return file_url

    def delete_file(self, file_url):
        """Deletes a previously uploaded photo. Returns True on success."""
        if not self.s3_client or not file_url:
            return False

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=self.key_from_url(file_url))
        except (ClientError, BotoCoreError) as e:
            current_app.logger.error(f"Error deleting file from R2: {e}")
            return False
        return True
