from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from firise.auth import get_current_user
from firise.config import API_PREFIX
from firise.database import get_storage
from firise.errors import ValidationFailed, internal_error
from firise.schemas import Category, CategoryCreate
from firise.services.storage import Storage

router = APIRouter(prefix=f"{API_PREFIX}/categories", tags=["Categories"])


def visible_to(category: Optional[Category], user_id: int) -> bool:
    return category is not None and (category.user_id is None or category.user_id == user_id)


def check_category(storage: Storage, category_id, user_id: int):
    """A category reference must point at a global category or one of the caller's."""
    if category_id is None:
        return
    if not visible_to(storage.get_category(category_id), user_id):
        raise ValidationFailed.field("categoryId", f"Category {category_id} does not exist")


@router.get("", response_model=list[Category])
def list_categories(
    scope_user_id: Optional[int] = Query(None, alias="userId"),
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    """Global categories plus the caller's own.

    ``userId`` may name the caller; naming anyone else narrows the list to the
    global categories rather than exposing that user's.
    """
    try:
        categories = storage.get_categories(user_id)
        if scope_user_id is not None and scope_user_id != user_id:
            return [c for c in categories if c.user_id is None]
        return categories
    except Exception:
        raise internal_error("listing categories")


@router.get("/{category_id}", response_model=Category)
def get_category(category_id: int, storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        category = storage.get_category(category_id)
        if not visible_to(category, user_id):
            raise HTTPException(status_code=404, detail="Category not found")
        return category
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"reading category {category_id}")


@router.post("", response_model=Category, status_code=201)
def create_category(
    payload: CategoryCreate,
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    try:
        return storage.create_category(payload, user_id=user_id)
    except Exception:
        raise internal_error("creating category")
