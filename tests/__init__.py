# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Print Render API:
# - test_units.py: mm / px / pt conversion and rounding
# - test_models.py: Request parsing from checkout metadata
# - test_crop.py: Crop normalization
# - test_raster.py: Raster rendering with Pillow
# - test_page.py: Print PDF composition
# - test_output.py: Output keys and fanout
# - test_render_service.py: End-to-end pipeline
# - test_storage.py: Supabase storage wrapper
# - test_tasks.py: Celery task entry point
# - test_api.py: HTTP endpoints
#
# Run tests with: pytest
# =============================================================================
