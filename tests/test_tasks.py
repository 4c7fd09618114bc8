# =============================================================================
# tests/test_tasks.py - Worker Task Tests
# =============================================================================
# Runs the task body directly; no broker is needed.
#
# Run with: pytest tests/test_tasks.py -v
# =============================================================================

import pytest

import core.services.render_service as render_service_module
from core.models.render import RenderRequest
from tests.conftest import FakeStorage
from workers.tasks import run_render

BUCKET = "print-orders"


@pytest.fixture
def storage(monkeypatch, small_jpeg):
    storage = FakeStorage()
    storage.put(BUCKET, "raw/1_photo.jpg", small_jpeg)
    monkeypatch.setattr(render_service_module, "StorageService", storage)
    return storage


class TestRunRender:
    """Tests for run_render (shared by the Celery task and inline dispatch)."""

    def test_completed_outcome_is_json(self, storage, sample_metadata):
        # Arrange
        sample_metadata["objectKey"] = "raw/1_photo.jpg"
        sample_metadata["cropArea"] = "{}"
        payload = RenderRequest.from_checkout_metadata(sample_metadata, bucket=BUCKET).model_dump(mode="json")

        # Act
        result = run_render(payload)

        # Assert
        assert result["status"] == "completed"
        assert result["error"] is None
        assert result["result"]["raster_key"].startswith("prod/")
        assert result["result"]["raster_key"] in storage.keys(BUCKET)

    def test_failed_outcome_is_returned_not_raised(self, storage, sample_metadata):
        sample_metadata["objectKey"] = "raw/missing.jpg"
        payload = RenderRequest.from_checkout_metadata(sample_metadata, bucket=BUCKET).model_dump(mode="json")

        result = run_render(payload)

        assert result["status"] == "failed"
        assert result["error"]["code"] == "NOT_FOUND"
        assert result["error"]["stage"] == "fetch"
