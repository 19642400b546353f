"""
Blob storage for product images, backed by S3.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from typing import BinaryIO, Callable, Dict, List, Optional, Sequence, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import AppConfig
from ..core.exceptions import BlobStorageError

logger = logging.getLogger(__name__)


def get_file_extension(filename: str) -> str:
    """Extension without the dot; "" when there is none or the name is a dotfile."""
    index = filename.rfind('.')
    if index <= 0:
        return ""
    return filename[index + 1:]


def validate_file_type(content_type: str, allowed_types: Sequence[str]) -> bool:
    return content_type in allowed_types


def validate_file_size(size_bytes: int, max_size_mb: float) -> bool:
    return size_bytes <= max_size_mb * 1024 * 1024


def stream_size(file_obj) -> Optional[int]:
    """Bytes remaining in a seekable stream, or None."""
    try:
        position = file_obj.tell()
        file_obj.seek(0, os.SEEK_END)
        size = file_obj.tell() - position
        file_obj.seek(position)
        return size
    except (AttributeError, OSError, ValueError):
        return None


class _ProgressCallback:
    """Adapts boto3's bytes-transferred callback to a percentage callback."""

    def __init__(self, total: Optional[int], on_progress: Callable[[float], None]):
        self.total = total
        self.on_progress = on_progress
        self.transferred = 0

    def __call__(self, bytes_amount: int) -> None:
        self.transferred += bytes_amount
        if self.total:
            self.on_progress(min(100.0, self.transferred / self.total * 100))


class BlobStorage:
    """Uploads, lists and deletes objects in the storefront bucket."""

    def __init__(self, config: AppConfig = None, s3_client=None):
        self.config = config or AppConfig.load()
        self.bucket_name = self.config.s3_bucket
        self.s3_client = s3_client
        self.connection_error = None

        if self.s3_client is None:
            self._initialize_client()

    def _initialize_client(self) -> None:
        """Initialize S3 client with credentials."""
        if not self.bucket_name:
            self.connection_error = "No bucket_name configured"
            return

        client_kwargs = {'region_name': self.config.aws_region}
        if self.config.aws_access_key and self.config.aws_secret_key:
            client_kwargs['aws_access_key_id'] = self.config.aws_access_key
            client_kwargs['aws_secret_access_key'] = self.config.aws_secret_key

        try:
            self.s3_client = boto3.client('s3', **client_kwargs)
        except (BotoCoreError, ValueError) as e:
            self.connection_error = f"S3 initialization error: {e}"
            self.s3_client = None

    def is_configured(self) -> bool:
        """Check if S3 is properly configured."""
        return self.s3_client is not None and bool(self.bucket_name)

    def _require_client(self, path: str = None) -> None:
        if not self.is_configured():
            raise BlobStorageError(self.connection_error or "S3 not configured", path)

    @staticmethod
    def _describe(error: Exception) -> str:
        if isinstance(error, ClientError):
            error_code = error.response.get('Error', {}).get('Code', 'Unknown')
            error_msg = error.response.get('Error', {}).get('Message', str(error))
            return f"{error_code}: {error_msg}"
        return str(error)

    def test_connection(self) -> Tuple[bool, str]:
        """Test S3 connection by attempting to list bucket contents."""
        if not self.is_configured():
            return False, self.connection_error or "S3 not configured"

        try:
            self.s3_client.list_objects_v2(Bucket=self.bucket_name, MaxKeys=1)
            return True, f"Connected to bucket: {self.bucket_name}"
        except (ClientError, BotoCoreError) as e:
            return False, f"S3 Error ({self._describe(e)})"

    def upload_file(
        self,
        file_obj: BinaryIO,
        path: str,
        content_type: str = None,
        on_progress: Callable[[float], None] = None,
    ) -> str:
        """
        Upload a file object and return a download URL for it.

        Args:
            file_obj: Readable binary stream
            path: Object key, e.g. "products/shoe_1714000000000.png"
            content_type: Optional MIME type stored with the object
            on_progress: Called with the uploaded percentage (0-100)

        Returns:
            Download URL of the stored object
        """
        self._require_client(path)

        kwargs = {}
        if content_type:
            kwargs['ExtraArgs'] = {'ContentType': content_type}
        if on_progress:
            kwargs['Callback'] = _ProgressCallback(stream_size(file_obj), on_progress)

        try:
            self.s3_client.upload_fileobj(file_obj, self.bucket_name, path, **kwargs)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Upload of {path} failed: {self._describe(e)}")
            raise BlobStorageError(f"Failed to upload {path}", path) from e

        logger.info(f"Uploaded s3://{self.bucket_name}/{path}")
        return self.get_file_url(path)

    def upload_multiple_files(
        self,
        files: Sequence[Tuple[str, BinaryIO]],
        base_path: str,
        on_progress: Callable[[int, float], None] = None,
    ) -> List[str]:
        """
        Upload (filename, stream) pairs under base_path concurrently.

        Returns:
            Download URLs in the order of `files`
        """
        if not files:
            return []

        def upload(index: int, name: str, stream: BinaryIO) -> str:
            callback = None
            if on_progress:
                def callback(progress: float) -> None:
                    on_progress(index, progress)
            return self.upload_file(stream, f"{base_path}/{name}", on_progress=callback)

        with ThreadPoolExecutor(max_workers=len(files)) as executor:
            futures = [
                executor.submit(upload, i, name, stream)
                for i, (name, stream) in enumerate(files)
            ]
            return [future.result() for future in futures]

    def delete_file(self, path: str) -> None:
        self._require_client(path)
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=path)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Delete of {path} failed: {self._describe(e)}")
            raise BlobStorageError(f"Failed to delete {path}", path) from e

    def get_file_url(self, path: str) -> str:
        """Presigned GET URL for an object."""
        self._require_client(path)
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket_name, 'Key': path},
                ExpiresIn=self.config.presigned_url_expiry,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Could not sign URL for {path}: {self._describe(e)}")
            raise BlobStorageError(f"Failed to get URL for {path}", path) from e

    def list_files(self, path: str) -> List[Dict[str, str]]:
        """
        List objects directly under a folder-like prefix.

        Returns:
            [{name, full_path, download_url}] for each object
        """
        self._require_client(path)
        prefix = path.rstrip('/') + '/' if path else ''

        keys = []
        try:
            response = self.s3_client.list_objects_v2(
                Bucket=self.bucket_name, Prefix=prefix, Delimiter='/'
            )
            keys.extend(obj['Key'] for obj in response.get('Contents', []))

            # Handle pagination
            while response.get('IsTruncated', False):
                response = self.s3_client.list_objects_v2(
                    Bucket=self.bucket_name,
                    Prefix=prefix,
                    Delimiter='/',
                    ContinuationToken=response['NextContinuationToken'],
                )
                keys.extend(obj['Key'] for obj in response.get('Contents', []))
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Listing {prefix} failed: {self._describe(e)}")
            raise BlobStorageError(f"Failed to list {path}", path) from e

        return [
            {
                'name': key.rsplit('/', 1)[-1],
                'full_path': key,
                'download_url': self.get_file_url(key),
            }
            for key in keys
        ]
