from fastapi import APIRouter

from bookingpass.api.v1.routes import passes

router = APIRouter(prefix="/v1")
router.include_router(passes.router, prefix="/passes", tags=["passes"])
