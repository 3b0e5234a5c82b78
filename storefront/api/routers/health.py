# storefront/api/routers/health.py
from fastapi import APIRouter

router = APIRouter(tags=["health"])


@router.get("/")
def health():
    return {"success": True, "message": "Backend is running well"}
