"""
storage.py — Storage contract
Abstract persistence operations shared by the in-memory and SQL backends.
Every method takes validated payloads and hands back frozen entity
snapshots, so routes and the finance calculations never see the medium.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Optional, TypeVar

from pydantic import BaseModel

from firise.schemas import (
    Article, ArticleCreate, Budget, BudgetCreate, Category, CategoryCreate,
    Expense, ExpenseCreate, Goal, GoalCreate, Resource, ResourceCreate,
    User, UserCreate,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=BaseModel)

# Never writable through a patch.
IMMUTABLE_FIELDS = frozenset({"id", "user_id"})


def merge(existing: E, patch: dict) -> E:
    """Return a new snapshot with the known fields of ``patch`` laid over ``existing``.

    Unknown keys and immutable fields are dropped; anything not mentioned in
    the patch keeps its current value. The result is validated again, so
    patched money is held to cents like everything else.
    """
    entity_cls = type(existing)
    changes = {k: v for k, v in patch.items() if k in entity_cls.model_fields and k not in IMMUTABLE_FIELDS}
    return entity_cls.model_validate({**existing.model_dump(), **changes})


class Storage(ABC):
    """Base class for every backend.

    ``self._lock`` is the instance's consistency boundary: backends take it
    around id assignment and every read-modify-write.
    """

    def __init__(self):
        self._lock = threading.RLock()

    # ── Users ─────────────────────────────────────────────────────
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, data: UserCreate) -> User:
        """``data.password`` must already be hashed."""

    def register_user(self, data: UserCreate) -> Optional[User]:
        """Create the user, or return None if the username is already taken."""
        with self._lock:
            if self.get_user_by_username(data.username):
                return None
            return self.create_user(data)

    # ── Categories ────────────────────────────────────────────────
    @abstractmethod
    def get_categories(self, user_id: Optional[int] = None) -> list[Category]:
        """All categories, or the global ones plus ``user_id``'s own."""

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]: ...

    @abstractmethod
    def create_category(self, data: CategoryCreate, user_id: Optional[int] = None) -> Category: ...

    # ── Expenses ──────────────────────────────────────────────────
    @abstractmethod
    def get_expenses(self, user_id: int) -> list[Expense]:
        """Most recent date first; same-day expenses in insertion order."""

    @abstractmethod
    def get_recent_expenses(self, user_id: int, limit: int) -> list[Expense]: ...

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[Expense]: ...

    @abstractmethod
    def create_expense(self, user_id: int, data: ExpenseCreate) -> Expense: ...

    @abstractmethod
    def update_expense(self, expense_id: int, patch: dict) -> Optional[Expense]: ...

    @abstractmethod
    def delete_expense(self, expense_id: int) -> bool: ...

    # ── Goals ─────────────────────────────────────────────────────
    @abstractmethod
    def get_goals(self, user_id: int) -> list[Goal]:
        """Earliest target date first; undated goals last."""

    @abstractmethod
    def get_goal(self, goal_id: int) -> Optional[Goal]: ...

    @abstractmethod
    def create_goal(self, user_id: int, data: GoalCreate) -> Goal: ...

    @abstractmethod
    def update_goal(self, goal_id: int, patch: dict) -> Optional[Goal]: ...

    @abstractmethod
    def delete_goal(self, goal_id: int) -> bool: ...

    # ── Budgets ───────────────────────────────────────────────────
    @abstractmethod
    def get_budgets(self, user_id: int, month: int, year: int) -> list[Budget]: ...

    @abstractmethod
    def get_budget(self, budget_id: int) -> Optional[Budget]: ...

    @abstractmethod
    def get_budget_by_category(self, user_id: int, category_id: int, month: int, year: int) -> Optional[Budget]: ...

    @abstractmethod
    def create_budget(self, user_id: int, data: BudgetCreate) -> Budget: ...

    @abstractmethod
    def update_budget(self, budget_id: int, patch: dict) -> Optional[Budget]: ...

    def upsert_budget(self, user_id: int, data: BudgetCreate) -> tuple[Budget, bool]:
        """Set the budget for (user, category, month, year).

        Updates the amount of the existing row or creates a new one, as one
        step under the storage lock. Returns ``(budget, created)``.
        """
        with self._lock:
            existing = self.get_budget_by_category(user_id, data.category_id, data.month, data.year)
            if existing:
                logger.debug("Budget %s updated to %s", existing.id, data.amount)
                return self.update_budget(existing.id, {"amount": data.amount}), False
            budget = self.create_budget(user_id, data)
            logger.debug("Budget %s created for category %s %02d/%s", budget.id, data.category_id, data.month, data.year)
            return budget, True

    # ── Resources ─────────────────────────────────────────────────
    @abstractmethod
    def get_resources(self, type: Optional[str] = None) -> list[Resource]: ...

    @abstractmethod
    def get_resource(self, resource_id: int) -> Optional[Resource]: ...

    @abstractmethod
    def create_resource(self, data: ResourceCreate) -> Resource: ...

    @abstractmethod
    def toggle_resource_bookmark(self, resource_id: int) -> Optional[Resource]: ...

    # ── Articles ──────────────────────────────────────────────────
    @abstractmethod
    def get_articles(self, category: Optional[str] = None) -> list[Article]: ...

    @abstractmethod
    def get_article(self, article_id: int) -> Optional[Article]: ...

    @abstractmethod
    def create_article(self, data: ArticleCreate) -> Article: ...

    # ── Lifecycle ─────────────────────────────────────────────────
    def is_empty(self) -> bool:
        return not (self.get_categories() or self.get_resources() or self.get_articles())

    def close(self):
        """Release backend resources. Nothing to do for in-process stores."""
