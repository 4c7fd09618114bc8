# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides sample images and an in-memory storage backend
# =============================================================================

import io
import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ["STORAGE_BUCKET"] = "print-orders"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["ADMIN_USER"] = "admin"
os.environ["ADMIN_PASS"] = "s3cret"
os.environ["RENDER_DISPATCH"] = "celery"

import pytest
from PIL import Image

from core.errors import SourceNotFoundError, StorageWriteError


# =============================================================================
# Helpers
# =============================================================================

def make_image_bytes(
    width: int,
    height: int,
    color=(200, 120, 40),
    mode: str = "RGB",
    fmt: str = "JPEG",
    **save_options,
) -> bytes:
    """Encode a solid-color image."""
    image = Image.new(mode, (width, height), color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **save_options)
    return buffer.getvalue()


def open_image(data: bytes) -> Image.Image:
    """Decode bytes produced by the renderer."""
    image = Image.open(io.BytesIO(data))
    image.load()
    return image


class FakeStorage:
    """
    In-memory stand-in for StorageService.

    Objects live in a dict keyed by (bucket, key). Keys starting with any
    of fail_prefixes reject writes.
    """

    def __init__(self, fail_prefixes: tuple[str, ...] = ()):
        self.objects: dict[tuple[str, str], tuple[bytes, str]] = {}
        self.fail_prefixes = fail_prefixes
        self.uploads: list[str] = []

    def put(self, bucket: str, key: str, data: bytes, content_type: str = "image/jpeg") -> None:
        self.objects[(bucket, key)] = (data, content_type)

    def download(self, bucket: str, key: str) -> bytes:
        if (bucket, key) not in self.objects:
            raise SourceNotFoundError(bucket, key)
        return self.objects[(bucket, key)][0]

    def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> str:
        self.uploads.append(key)
        if any(key.startswith(prefix) for prefix in self.fail_prefixes):
            raise StorageWriteError(f"Failed to write {bucket}/{key}: denied")
        self.objects[(bucket, key)] = (data, content_type)
        return key

    def keys(self, bucket: str) -> set[str]:
        return {k for b, k in self.objects if b == bucket}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_storage():
    """Empty in-memory storage."""
    return FakeStorage()


@pytest.fixture
def landscape_jpeg():
    """4000x3000 JPEG, the size of a typical phone photo."""
    return make_image_bytes(4000, 3000)


@pytest.fixture
def small_jpeg():
    """Small JPEG for fast rendering tests."""
    return make_image_bytes(400, 300)


@pytest.fixture
def sample_metadata():
    """Checkout session metadata as the storefront sends it."""
    return {
        "objectKey": "raw/1718000000000_photo.jpg",
        "sizeId": "10x15",
        "wmm": "100",
        "hmm": "150",
        "cropArea": '{"x": 100, "y": 100, "width": 400, "height": 300}',
        "imageInfo": (
            '{"naturalWidth": 4000, "naturalHeight": 3000, '
            '"displayedWidth": 800, "displayedHeight": 600}'
        ),
    }
