# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas for render requests, results and orders
# - services/: The render pipeline (crop, raster, page, output, storage)
# - errors.py: Render pipeline error taxonomy
#
# Code in this package should NOT import from FastAPI or Celery.
# This keeps the logic testable and reusable.
# =============================================================================
