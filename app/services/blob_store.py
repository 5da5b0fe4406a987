"""Profile picture storage: persist an uploaded image and return a stable reference URL."""

from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import httpx

from app.core.errors import BlobStoreError, InputValidationError

if TYPE_CHECKING:
    from app.core.config import Settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_EXTENSIONS = frozenset({".jpg", ".jpeg", ".png"})

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class BlobStore(Protocol):
    async def store(self, filename: str, content: bytes, content_type: str | None) -> str:
        """Persist content and return its reference URL."""
        ...


def validate_image(filename: str | None, content: bytes, max_bytes: int) -> str:
    """Check extension, emptiness and size of an uploaded picture; return its extension."""
    if not filename:
        raise InputValidationError("No file uploaded")
    ext = Path(filename).suffix.lower()
    if ext not in ALLOWED_IMAGE_EXTENSIONS:
        raise InputValidationError(
            f"Unsupported image format. Allowed: {', '.join(sorted(e[1:] for e in ALLOWED_IMAGE_EXTENSIONS))}."
        )
    if not content:
        raise InputValidationError("Uploaded file is empty.")
    if len(content) > max_bytes:
        raise InputValidationError(f"File too large; maximum is {max_bytes} bytes.")
    return ext


def make_public_id(filename: str) -> str:
    """'<epoch millis>-<sanitized name>' so repeated uploads of one file never collide."""
    safe = _UNSAFE_FILENAME_CHARS.sub("_", Path(filename).name).strip("._") or "upload"
    return f"{int(time.time() * 1000)}-{safe}"


class LocalBlobStore:
    """Writes pictures under a local directory served at BLOB_PUBLIC_BASE_URL."""

    def __init__(self, root: str | Path, public_base_url: str, folder: str) -> None:
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")
        self.folder = folder.strip("/")

    async def store(self, filename: str, content: bytes, content_type: str | None) -> str:
        public_id = make_public_id(filename)
        target_dir = self.root / self.folder
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            (target_dir / public_id).write_bytes(content)
        except OSError as e:
            raise BlobStoreError() from e
        return f"{self.public_base_url}/{self.folder}/{public_id}"


class HttpBlobStore:
    """Uploads pictures to a remote media service that answers with {"url": ...}."""

    def __init__(
        self,
        upload_url: str,
        api_token: str | None,
        folder: str,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.upload_url = upload_url
        self.api_token = api_token
        self.folder = folder
        self.timeout = timeout
        self.transport = transport

    async def store(self, filename: str, content: bytes, content_type: str | None) -> str:
        public_id = make_public_id(filename)
        headers = {"Accept": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        files = {"file": (public_id, content, content_type or "application/octet-stream")}
        data = {"folder": self.folder, "public_id": public_id}
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                resp = await client.post(self.upload_url, headers=headers, files=files, data=data)
        except httpx.TimeoutException as e:
            logger.error("Blob store timed out", extra={"upload_url": self.upload_url})
            raise BlobStoreError() from e
        except httpx.HTTPError as e:
            logger.error(
                "Blob store unreachable",
                extra={"upload_url": self.upload_url, "error_type": type(e).__name__},
            )
            raise BlobStoreError() from e
        if resp.status_code >= 400:
            logger.error(
                "Blob store rejected upload",
                extra={"status_code": resp.status_code, "body": resp.text[:200]},
            )
            raise BlobStoreError()
        try:
            url = resp.json().get("url")
        except ValueError as e:
            raise BlobStoreError() from e
        if not url or not isinstance(url, str):
            logger.error("Blob store response missing url")
            raise BlobStoreError()
        return url


def build_blob_store(settings: Settings) -> BlobStore:
    """Return the configured backend. Raises BlobStoreError if http is selected but unconfigured."""
    if settings.BLOB_STORE_BACKEND == "http":
        if not settings.BLOB_UPLOAD_URL:
            logger.error("BLOB_STORE_BACKEND=http but BLOB_UPLOAD_URL is not set")
            raise BlobStoreError()
        token = settings.BLOB_API_TOKEN.get_secret_value() if settings.BLOB_API_TOKEN else None
        return HttpBlobStore(
            upload_url=settings.BLOB_UPLOAD_URL,
            api_token=token,
            folder=settings.BLOB_FOLDER,
            timeout=settings.BLOB_REQUEST_TIMEOUT_SEC,
        )
    return LocalBlobStore(
        root=settings.BLOB_LOCAL_DIR,
        public_base_url=settings.BLOB_PUBLIC_BASE_URL,
        folder=settings.BLOB_FOLDER,
    )


async def store_picture(
    store: BlobStore,
    filename: str | None,
    content: bytes,
    content_type: str | None,
    max_bytes: int,
) -> str:
    """Validate an uploaded picture, store it, and return the reference URL."""
    validate_image(filename, content, max_bytes)
    url = await store.store(filename or "upload", content, content_type)
    logger.info("Profile picture stored", extra={"blob_url": url, "size_bytes": len(content)})
    return url
