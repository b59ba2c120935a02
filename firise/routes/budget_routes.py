from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from firise.auth import get_current_user
from firise.config import API_PREFIX
from firise.database import get_storage
from firise.errors import internal_error
from firise.routes.category_routes import check_category
from firise.schemas import Budget, BudgetCreate, BudgetOverview
from firise.services import finance_service
from firise.services.storage import Storage

router = APIRouter(prefix=f"{API_PREFIX}/budgets", tags=["Budgets"])


def _window(month: Optional[int], year: Optional[int]) -> tuple[int, int]:
    # Default to current month if not specified
    today = date.today()
    return month or today.month, year or today.year


@router.get("", response_model=list[Budget])
def list_budgets(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    month, year = _window(month, year)
    try:
        return storage.get_budgets(user_id, month, year)
    except Exception:
        raise internal_error(f"listing budgets for {month:02d}/{year}")


@router.get("/overview", response_model=BudgetOverview)
def budget_overview(
    month: Optional[int] = Query(None, ge=1, le=12),
    year: Optional[int] = Query(None, ge=2000, le=2100),
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    """Spent vs. budgeted per category for one month, with totals."""
    month, year = _window(month, year)
    try:
        return finance_service.budget_overview(
            storage.get_budgets(user_id, month, year),
            storage.get_expenses(user_id),
            storage.get_categories(user_id),
            month,
            year,
        )
    except Exception:
        raise internal_error(f"building budget overview for {month:02d}/{year}")


@router.post("", response_model=Budget)
def set_budget(
    payload: BudgetCreate,
    response: Response,
    storage: Storage = Depends(get_storage),
    user_id: int = Depends(get_current_user),
):
    """Set the budget for a category and month: 201 when new, 200 when the amount changed."""
    try:
        check_category(storage, payload.category_id, user_id)
        budget, created = finance_service.upsert_budget(storage, user_id, payload)
        response.status_code = 201 if created else 200
        return budget
    except HTTPException:
        raise
    except Exception:
        raise internal_error("setting budget")
