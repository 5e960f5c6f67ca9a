"""API v1 router aggregator.

All v1 endpoint routers are included here under ``/api/v1``.
"""

from fastapi import APIRouter

from jobtrail.api.v1 import applications, contacts, timeline_events

router = APIRouter()

router.include_router(
    applications.router, prefix="/applications", tags=["applications"]
)
router.include_router(contacts.router, prefix="/contacts", tags=["contacts"])
router.include_router(
    timeline_events.router, prefix="/timeline-events", tags=["timeline-events"]
)
