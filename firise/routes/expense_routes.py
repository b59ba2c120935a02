from fastapi import APIRouter, Depends, HTTPException, Query, Response

from firise.auth import get_current_user
from firise.config import API_PREFIX
from firise.database import get_storage
from firise.errors import internal_error
from firise.routes.category_routes import check_category
from firise.schemas import Expense, ExpenseCreate, ExpenseUpdate
from firise.services.storage import Storage

router = APIRouter(prefix=f"{API_PREFIX}/expenses", tags=["Expenses"])


def owned_expense(storage: Storage, expense_id: int, user_id: int) -> Expense:
    # Someone else's expense is reported exactly like a missing one
    expense = storage.get_expense(expense_id)
    if not expense or expense.user_id != user_id:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


@router.get("", response_model=list[Expense])
def list_expenses(storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        return storage.get_expenses(user_id)
    except Exception:
        raise internal_error("listing expenses")


@router.get("/recent", response_model=list[Expense])
def recent_expenses(
    limit: int = Query(5, ge=1, le=100),
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    try:
        return storage.get_recent_expenses(user_id, limit)
    except Exception:
        raise internal_error("listing recent expenses")


@router.get("/{expense_id}", response_model=Expense)
def get_expense(expense_id: int, storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        return owned_expense(storage, expense_id, user_id)
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"reading expense {expense_id}")


@router.post("", response_model=Expense, status_code=201)
def create_expense(
    payload: ExpenseCreate,
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    try:
        check_category(storage, payload.category_id, user_id)
        return storage.create_expense(user_id, payload)
    except HTTPException:
        raise
    except Exception:
        raise internal_error("creating expense")


@router.put("/{expense_id}", response_model=Expense)
def update_expense(
    expense_id: int,
    payload: ExpenseUpdate,
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    try:
        existing = owned_expense(storage, expense_id, user_id)

        data = payload.model_dump(exclude_unset=True)
        if not data:
            return existing
        if "category_id" in data:
            check_category(storage, data["category_id"], user_id)

        updated = storage.update_expense(expense_id, data)
        if updated is None:
            raise HTTPException(status_code=404, detail="Expense not found")
        return updated
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"updating expense {expense_id}")


@router.delete("/{expense_id}", status_code=204)
def delete_expense(expense_id: int, storage: Storage = Depends(get_storage), user_id: int = Depends(get_current_user)):
    try:
        owned_expense(storage, expense_id, user_id)
        if not storage.delete_expense(expense_id):
            raise HTTPException(status_code=404, detail="Expense not found")
        return Response(status_code=204)
    except HTTPException:
        raise
    except Exception:
        raise internal_error(f"deleting expense {expense_id}")
