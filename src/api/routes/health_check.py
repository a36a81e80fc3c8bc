from fastapi import APIRouter

from src.api.utils.dispatch import envelope

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check():
    return envelope({"status": "ok"})
