# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - webhooks.py: Stripe webhook (starts renders)
# - assets.py: Signed upload URLs for source images
# - checkout.py: Stripe checkout sessions
# - admin.py: Output file browser (Basic auth)
# - tasks.py: Render task status endpoints
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import webhooks
from . import assets
from . import checkout
from . import admin
from . import tasks

__all__ = [
    "health",
    "webhooks",
    "assets",
    "checkout",
    "admin",
    "tasks",
]
