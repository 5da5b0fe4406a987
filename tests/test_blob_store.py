"""Unit tests for app.services.blob_store: validation, local and HTTP backends."""

import asyncio
import tempfile
import unittest
from pathlib import Path

import httpx

from app.core.config import Settings
from app.core.errors import BlobStoreError, InputValidationError
from app.services.blob_store import (
    HttpBlobStore,
    LocalBlobStore,
    build_blob_store,
    make_public_id,
    store_picture,
    validate_image,
)


class TestValidateImage(unittest.TestCase):
    def test_accepts_allowed_extensions_case_insensitively(self) -> None:
        self.assertEqual(validate_image("me.PNG", b"x", 10), ".png")
        self.assertEqual(validate_image("me.jpeg", b"x", 10), ".jpeg")

    def test_rejects_missing_name_format_empty_and_oversize(self) -> None:
        with self.assertRaises(InputValidationError):
            validate_image(None, b"x", 10)
        with self.assertRaises(InputValidationError):
            validate_image("script.svg", b"x", 10)
        with self.assertRaises(InputValidationError):
            validate_image("me.png", b"", 10)
        with self.assertRaises(InputValidationError):
            validate_image("me.png", b"x" * 11, 10)


class TestPublicId(unittest.TestCase):
    def test_timestamp_prefix_and_sanitized_name(self) -> None:
        public_id = make_public_id("../../my photo!.png")
        millis, _, name = public_id.partition("-")
        self.assertTrue(millis.isdigit())
        self.assertEqual(name, "my_photo_.png")


class TestLocalBlobStore(unittest.TestCase):
    def test_writes_file_and_returns_public_url(self) -> None:
        with tempfile.TemporaryDirectory() as root:
            store = LocalBlobStore(root, "https://media.test/", "profile_pics")
            url = asyncio.run(store.store("me.png", b"png-bytes", "image/png"))
            self.assertTrue(url.startswith("https://media.test/profile_pics/"))
            stored = Path(root) / "profile_pics" / url.rsplit("/", 1)[1]
            self.assertEqual(stored.read_bytes(), b"png-bytes")


class TestHttpBlobStore(unittest.TestCase):
    def _store(self, handler) -> HttpBlobStore:
        return HttpBlobStore(
            upload_url="https://blobs.test/upload",
            api_token="blob-token",
            folder="profile_pics",
            timeout=5.0,
            transport=httpx.MockTransport(handler),
        )

    def test_returns_url_from_response(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"url": "https://cdn.test/profile_pics/1-me.png"})

        url = asyncio.run(self._store(handler).store("me.png", b"data", "image/png"))
        self.assertEqual(url, "https://cdn.test/profile_pics/1-me.png")
        self.assertEqual(seen[0].headers["authorization"], "Bearer blob-token")
        self.assertIn(b"profile_pics", seen[0].content)

    def test_upstream_error_is_blob_store_error(self) -> None:
        store = self._store(lambda request: httpx.Response(502, text="bad gateway"))
        with self.assertRaises(BlobStoreError):
            asyncio.run(store.store("me.png", b"data", "image/png"))

    def test_response_without_url_is_blob_store_error(self) -> None:
        store = self._store(lambda request: httpx.Response(200, json={"id": "abc"}))
        with self.assertRaises(BlobStoreError):
            asyncio.run(store.store("me.png", b"data", "image/png"))

    def test_network_failure_is_blob_store_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with self.assertRaises(BlobStoreError):
            asyncio.run(self._store(handler).store("me.png", b"data", "image/png"))


class TestBuildBlobStore(unittest.TestCase):
    def test_local_is_default(self) -> None:
        store = build_blob_store(Settings(_env_file=None))
        self.assertIsInstance(store, LocalBlobStore)

    def test_http_requires_upload_url(self) -> None:
        with self.assertRaises(BlobStoreError):
            build_blob_store(Settings(_env_file=None, BLOB_STORE_BACKEND="http"))

    def test_http_backend(self) -> None:
        store = build_blob_store(
            Settings(
                _env_file=None,
                BLOB_STORE_BACKEND="http",
                BLOB_UPLOAD_URL="https://blobs.test/upload",
                BLOB_API_TOKEN="t",
            )
        )
        self.assertIsInstance(store, HttpBlobStore)
        self.assertEqual(store.api_token, "t")


class TestStorePicture(unittest.TestCase):
    def test_validation_happens_before_storing(self) -> None:
        calls: list[str] = []

        class RecordingStore:
            async def store(self, filename: str, content: bytes, content_type: str | None) -> str:
                calls.append(filename)
                return "https://cdn.test/x.png"

        with self.assertRaises(InputValidationError):
            asyncio.run(store_picture(RecordingStore(), "x.exe", b"data", None, 100))
        self.assertEqual(calls, [])
        url = asyncio.run(store_picture(RecordingStore(), "x.png", b"data", "image/png", 100))
        self.assertEqual(url, "https://cdn.test/x.png")


if __name__ == "__main__":
    unittest.main()
