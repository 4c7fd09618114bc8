# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# This package contains the Celery configuration and task definitions for
# background print rendering.
#
# Components:
# - celery_app.py: Celery application configuration
# - tasks.py: Task definitions (render_order)
# - config.py: Worker-specific settings
#
# Usage:
#   # Start worker
#   celery -A workers.celery_app worker -Q render,default --loglevel=info
#
#   # Or use the start script
#   python scripts/start_worker.py
#
#   # Submit task (from API)
#   from workers.tasks import render_order
#   result = render_order.delay(request.model_dump(mode="json"))
# =============================================================================

from . import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
