from fastapi import APIRouter

from clubhub.modules.admin.api import router as admin_router
from clubhub.modules.auth.api import router as auth_router
from clubhub.modules.clubs.api import router as clubs_router
from clubhub.modules.events.api import router as events_router
from clubhub.modules.manager.api import router as manager_router
from clubhub.modules.users.api import router as users_router

router = APIRouter()
router.include_router(auth_router, prefix="/auth", tags=["auth"])
router.include_router(users_router, prefix="/users", tags=["users"])
router.include_router(clubs_router, prefix="/clubs", tags=["clubs"])
router.include_router(events_router, prefix="/events", tags=["events"])
router.include_router(manager_router, prefix="/manager", tags=["manager"])
router.include_router(admin_router, prefix="/admin", tags=["admin"])
