"""Admin API routes.

Every route under ``/api/admin`` requires an active admin:
- sync: single/batch sync and import against the external service
- scouts: account listing, creation, role and activation changes
"""

from fastapi import APIRouter, Depends

from scoutcrm.routes.admin.scouts import router as scouts_router
from scoutcrm.routes.admin.sync import router as sync_router
from scoutcrm.services.authz import require_admin

router = APIRouter(
    prefix="/api/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)

router.include_router(sync_router)
router.include_router(scouts_router)
