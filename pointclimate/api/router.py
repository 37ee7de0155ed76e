from fastapi import APIRouter

from pointclimate.api.routes import areas, gestures, points

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(points.router, tags=["points"])
api_router.include_router(areas.router, tags=["areas"])
api_router.include_router(gestures.router, tags=["gestures"])


@api_router.get("/health", tags=["meta"])
async def health() -> dict[str, str]:
    return {"status": "ok"}
