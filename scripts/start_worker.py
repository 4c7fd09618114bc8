#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker that consumes the render queue.
#
# Usage:
#   # Start worker (development)
#   python scripts/start_worker.py
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker -Q render,default --loglevel=info
#
#   # Start with concurrency limit
#   celery -A workers.celery_app worker -Q render,default --concurrency=4
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from workers.celery_app import celery_app
from workers.config import RENDER_QUEUE


def main():
    """Start the Celery worker."""
    print("=" * 60)
    print("Print Render Worker")
    print("=" * 60)
    print()
    print("Starting worker...")
    print("Press Ctrl+C to stop")
    print()

    # Renders are CPU-bound: one process per core is plenty
    celery_app.worker_main([
        "worker",
        "--loglevel=info",
        f"--queues={RENDER_QUEUE},default",
        "--concurrency=2",
    ])


if __name__ == "__main__":
    main()
