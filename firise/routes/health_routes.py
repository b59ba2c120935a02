from fastapi import APIRouter

from firise.config import API_PREFIX

router = APIRouter(prefix=API_PREFIX, tags=["Health"])


@router.get("/health")
def health():
    return {"status": "ok", "message": "Backend is alive!"}
