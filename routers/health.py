# routers/health.py

from fastapi import APIRouter
from core.config import settings
from core.mongo_client import ping_mongo

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# MongoDB ping plus per-collection counts
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="MongoDB health check")
def health_db():
    """
    Safe for external health monitors (no auth required).
    Never raises; failures come back as status "error".
    """
    return ping_mongo()


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    return {
        "service": settings.PROJECT_NAME,
        "status": "ok",
    }
