from fastapi import APIRouter, Depends, HTTPException

from firise.auth import get_current_user, hash_password
from firise.config import API_PREFIX
from firise.database import get_storage
from firise.errors import ValidationFailed, internal_error
from firise.schemas import PublicUser, UserCreate
from firise.services.storage import Storage

router = APIRouter(prefix=f"{API_PREFIX}/users", tags=["Users"])


@router.get("/current", response_model=PublicUser)
def current_user(storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        user = storage.get_user(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")
        return user.public()
    except HTTPException:
        raise
    except Exception:
        raise internal_error("reading current user")


@router.post("", response_model=PublicUser, status_code=201)
def register(payload: UserCreate, storage: Storage = Depends(get_storage)):
    """Create an account. The password is stored as a bcrypt hash and never returned."""
    try:
        user = storage.register_user(payload.model_copy(update={"password": hash_password(payload.password)}))
        if user is None:
            raise ValidationFailed.field("username", "Username is already taken")
        return user.public()
    except HTTPException:
        raise
    except Exception:
        raise internal_error("creating user")
