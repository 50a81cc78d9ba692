"""S3 storage for original and derived captures."""

from typing import Protocol

import boto3
import requests
from botocore.exceptions import BotoCoreError, ClientError

from skinflow.exceptions.client_errors import NotFoundError
from skinflow.exceptions.server_errors import StorageError

_CACHE_CONTROL = "max-age=3600"
_MISSING_OBJECT_CODES = frozenset({"404", "NoSuchKey", "NotFound"})


class AssetStorage(Protocol):
    """Object store collaborator used by the gateway and the persister."""

    def upload(self, path: str, data: bytes, *, content_type: str, overwrite: bool) -> None:
        """Store bytes at path."""
        ...

    def public_url(self, path: str) -> str:
        """Deterministic public URL for path."""
        ...

    def download(self, url: str) -> bytes:
        """Fetch the bytes behind a public URL."""
        ...


class S3Client:
    """Wrapper around S3 operations on the asset bucket."""

    def __init__(
        self,
        bucket_name: str,
        *,
        public_base_url: str,
        region_name: str | None = None,
        http_timeout_seconds: int = 30,
    ) -> None:
        """Initialize the S3 client.

        Args:
            bucket_name: S3 bucket name.
            public_base_url: URL prefix that public object URLs are built from.
            region_name: AWS region for the client.
            http_timeout_seconds: Timeout for URLs outside this bucket.
        """
        self._s3 = boto3.client("s3", region_name=region_name)  # type: ignore[call-overload]
        self._bucket_name = bucket_name
        self._public_base_url = public_base_url.rstrip("/")
        self._http_timeout_seconds = http_timeout_seconds

    def upload(self, path: str, data: bytes, *, content_type: str, overwrite: bool) -> None:
        """Write an object.

        Args:
            path: S3 object key.
            data: Object body.
            content_type: MIME type stored with the object.
            overwrite: Replace an existing object at path when True.

        Raises:
            StorageError: If the write fails, or the object exists and
                overwrite is False.
        """
        if not overwrite and self.exists(path):
            raise StorageError(f"Object already exists: {path}", path=path)

        try:
            self._s3.put_object(
                Bucket=self._bucket_name,
                Key=path,
                Body=data,
                ContentType=content_type,
                CacheControl=_CACHE_CONTROL,
            )
        except (BotoCoreError, ClientError) as error:
            raise StorageError(f"Failed to upload {path}: {error}", path=path) from error

    def exists(self, path: str) -> bool:
        """Check whether an object exists.

        Raises:
            StorageError: If the lookup fails for a reason other than absence.
        """
        try:
            self._s3.head_object(Bucket=self._bucket_name, Key=path)
        except ClientError as error:
            if error.response.get("Error", {}).get("Code") in _MISSING_OBJECT_CODES:
                return False
            raise StorageError(f"Failed to look up {path}: {error}", path=path) from error
        return True

    def get_bytes(self, path: str) -> bytes:
        """Read an object body.

        Raises:
            NotFoundError: If object does not exist.
            StorageError: If the read fails.
        """
        try:
            response = self._s3.get_object(Bucket=self._bucket_name, Key=path)
        except self._s3.exceptions.NoSuchKey as error:
            raise NotFoundError(
                f"S3 object not found: {path}",
                resource_type="s3_object",
                resource_id=path,
            ) from error
        except (BotoCoreError, ClientError) as error:
            raise StorageError(f"Failed to read {path}: {error}", path=path) from error
        body: bytes = response["Body"].read()
        return body

    def public_url(self, path: str) -> str:
        """Build the public URL for an object key."""
        return f"{self._public_base_url}/{path}"

    def path_from_url(self, url: str) -> str | None:
        """Return the object key behind a public URL, or None if it is foreign."""
        prefix = f"{self._public_base_url}/"
        if not url.startswith(prefix):
            return None
        return url[len(prefix) :].split("?", 1)[0]

    def download(self, url: str) -> bytes:
        """Fetch the bytes behind a URL.

        URLs under this bucket's public prefix are read through the S3 API;
        anything else is fetched over HTTP.

        Raises:
            NotFoundError: If the object does not exist.
            StorageError: If the fetch fails.
        """
        path = self.path_from_url(url)
        if path is not None:
            return self.get_bytes(path)

        try:
            response = requests.get(url, timeout=self._http_timeout_seconds)
            response.raise_for_status()
        except requests.RequestException as error:
            raise StorageError(f"Failed to download {url}: {error}") from error
        return response.content
