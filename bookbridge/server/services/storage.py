"""
Object storage on the local filesystem.

Each public bucket is a directory under the configured storage root. Keys are
``<user_id>/<random>.<ext>``; anything that would resolve outside the bucket
directory is refused.
"""

from __future__ import annotations

import asyncio
import mimetypes
import secrets
from pathlib import Path, PurePosixPath
from typing import AsyncIterable, Optional

from bookbridge.core.errors import AuthenticationError, InvalidOperationError, NotFoundError
from bookbridge.core.logging_config import get_logger
from bookbridge.core.models.io.storage import StoredObjectRead
from bookbridge.core.policy import PUBLIC_BUCKETS, Caller, Operation, Resource, enforce
from bookbridge.server.core.config import StorageConfig, settings

logger = get_logger(__name__)

ALLOWED_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "webp", "gif"})


class StorageService:
    """Upload, read and delete objects in the public buckets."""

    def __init__(self, caller: Caller, config: Optional[StorageConfig] = None) -> None:
        self.caller = caller
        self.config = config or settings.storage
        self.root = Path(self.config.root).resolve()

    def bucket_dir(self, bucket: str) -> Path:
        if bucket not in PUBLIC_BUCKETS:
            raise NotFoundError("bucket", bucket)
        return self.root / bucket

    def resolve(self, bucket: str, key: str) -> Path:
        """Map ``key`` to a file inside the bucket directory.

        Raises:
            NotFoundError: Unknown bucket.
            InvalidOperationError: The key escapes the bucket directory.
        """
        base = self.bucket_dir(bucket).resolve()
        parts = key.split("/")
        if any(part in ("..", ".", "") for part in parts):
            raise InvalidOperationError(f"Invalid object key: {key!r}")
        path = base.joinpath(*parts).resolve()
        if base not in path.parents:
            raise InvalidOperationError(f"Invalid object key: {key!r}")
        return path

    def public_url(self, bucket: str, key: str) -> str:
        return f"{self.config.public_base_url.rstrip('/')}/{bucket}/{key}"

    async def read_body(self, chunks: AsyncIterable[bytes], declared_length: Optional[int] = None) -> bytes:
        """Collect an upload body, refusing it as soon as it passes ``max_bytes``.

        Args:
            chunks: Body chunks as they arrive from the client
            declared_length: ``Content-Length`` sent by the client, if any

        Raises:
            InvalidOperationError: The declared or received size is over the limit.
        """
        limit = self.config.max_bytes
        if declared_length is not None and declared_length > limit:
            raise InvalidOperationError(f"Uploaded file exceeds {limit} bytes")
        body = bytearray()
        async for chunk in chunks:
            body.extend(chunk)
            if len(body) > limit:
                raise InvalidOperationError(f"Uploaded file exceeds {limit} bytes")
        return bytes(body)

    async def upload_stream(
        self,
        bucket: str,
        filename: str,
        chunks: AsyncIterable[bytes],
        declared_length: Optional[int] = None,
    ) -> StoredObjectRead:
        """Like ``upload``, but reads the body only after the caller, bucket and file type are accepted."""
        self._check_target(bucket, filename)
        return await self.upload(bucket, filename, await self.read_body(chunks, declared_length))

    def _check_target(self, bucket: str, filename: str) -> str:
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        self.bucket_dir(bucket)

        extension = PurePosixPath(filename).suffix.lower().lstrip(".")
        if extension not in ALLOWED_EXTENSIONS:
            raise InvalidOperationError(
                f"File type .{extension or '?'} is not allowed; use one of {', '.join(sorted(ALLOWED_EXTENSIONS))}"
            )
        return extension

    async def upload(self, bucket: str, filename: str, data: bytes) -> StoredObjectRead:
        """Store ``data`` under a fresh key owned by the caller.

        Raises:
            AuthenticationError: Anonymous caller.
            InvalidOperationError: Empty body, body too large or extension not allowed.
        """
        extension = self._check_target(bucket, filename)
        if not data:
            raise InvalidOperationError("Uploaded file is empty")
        if len(data) > self.config.max_bytes:
            raise InvalidOperationError(f"Uploaded file exceeds {self.config.max_bytes} bytes")

        key = f"{self.caller.user_id}/{secrets.token_hex(16)}.{extension}"
        enforce(Resource.storage_objects, Operation.insert, self.caller, new={"bucket": bucket, "key": key})

        path = self.resolve(bucket, key)
        await asyncio.to_thread(_write_file, path, data)
        logger.info(f"Stored {len(data)} bytes at {bucket}/{key}")
        return StoredObjectRead(
            bucket=bucket,
            key=key,
            size=len(data),
            content_type=content_type_for(key),
            public_url=self.public_url(bucket, key),
        )

    def open(self, bucket: str, key: str) -> Path:
        """Path of a stored object, readable by anyone."""
        path = self.resolve(bucket, key)
        enforce(Resource.storage_objects, Operation.select, self.caller, existing={"bucket": bucket, "key": key})
        if not path.is_file():
            raise NotFoundError("object", f"{bucket}/{key}")
        return path

    async def delete(self, bucket: str, key: str) -> None:
        if not self.caller.is_authenticated:
            raise AuthenticationError()
        path = self.resolve(bucket, key)
        enforce(Resource.storage_objects, Operation.delete, self.caller, existing={"bucket": bucket, "key": key})
        if not path.is_file():
            raise NotFoundError("object", f"{bucket}/{key}")
        await asyncio.to_thread(path.unlink)
        logger.info(f"Deleted {bucket}/{key}")


def content_type_for(key: str) -> str:
    return mimetypes.guess_type(key)[0] or "application/octet-stream"


def _write_file(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
