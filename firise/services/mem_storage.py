"""
mem_storage.py — In-process storage
Dictionaries keyed by id plus one counter per entity type. Every method
runs under the instance lock, so concurrent request threads never see a
half-applied write or hand out the same id twice. Stored values are frozen
snapshots; an update swaps in a new snapshot instead of mutating one.
"""

import logging
from datetime import date, datetime, timezone
from itertools import count
from typing import Optional

from firise.schemas import (
    Article, ArticleCreate, Budget, BudgetCreate, Category, CategoryCreate,
    Expense, ExpenseCreate, Goal, GoalCreate, Resource, ResourceCreate,
    User, UserCreate,
)
from firise.services.storage import Storage, merge

logger = logging.getLogger(__name__)


class MemStorage(Storage):
    def __init__(self):
        super().__init__()
        self._users: dict[int, User] = {}
        self._categories: dict[int, Category] = {}
        self._expenses: dict[int, Expense] = {}
        self._goals: dict[int, Goal] = {}
        self._budgets: dict[int, Budget] = {}
        self._resources: dict[int, Resource] = {}
        self._articles: dict[int, Article] = {}
        self._ids = {name: count(1) for name in ("user", "category", "expense", "goal", "budget", "resource", "article")}

    def _next_id(self, kind: str) -> int:
        with self._lock:
            return next(self._ids[kind])

    def _update(self, table: dict, key: int, patch: dict):
        with self._lock:
            existing = table.get(key)
            if existing is None:
                return None
            updated = merge(existing, patch)
            table[key] = updated
            return updated

    def _delete(self, table: dict, key: int) -> bool:
        with self._lock:
            return table.pop(key, None) is not None

    # ── Users ─────────────────────────────────────────────────────
    def get_user(self, user_id: int) -> Optional[User]:
        with self._lock:
            return self._users.get(user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._lock:
            return next((u for u in self._users.values() if u.username == username), None)

    def create_user(self, data: UserCreate) -> User:
        with self._lock:
            user = User(
                id=self._next_id("user"),
                username=data.username,
                password=data.password,
                full_name=data.full_name,
                email=data.email,
                created_at=datetime.now(timezone.utc),
            )
            self._users[user.id] = user
            return user

    # ── Categories ────────────────────────────────────────────────
    def get_categories(self, user_id: Optional[int] = None) -> list[Category]:
        with self._lock:
            categories = list(self._categories.values())
        if user_id is None:
            return categories
        return [c for c in categories if c.user_id is None or c.user_id == user_id]

    def get_category(self, category_id: int) -> Optional[Category]:
        with self._lock:
            return self._categories.get(category_id)

    def create_category(self, data: CategoryCreate, user_id: Optional[int] = None) -> Category:
        with self._lock:
            category = Category(id=self._next_id("category"), name=data.name, icon=data.icon, user_id=user_id)
            self._categories[category.id] = category
            return category

    # ── Expenses ──────────────────────────────────────────────────
    def get_expenses(self, user_id: int) -> list[Expense]:
        with self._lock:
            expenses = [e for e in self._expenses.values() if e.user_id == user_id]
        return sorted(expenses, key=lambda e: (-e.date.toordinal(), e.id))

    def get_recent_expenses(self, user_id: int, limit: int) -> list[Expense]:
        return self.get_expenses(user_id)[:limit]

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        with self._lock:
            return self._expenses.get(expense_id)

    def create_expense(self, user_id: int, data: ExpenseCreate) -> Expense:
        with self._lock:
            expense = Expense(
                id=self._next_id("expense"),
                description=data.description,
                amount=data.amount,
                date=data.date,
                category_id=data.category_id,
                user_id=user_id,
            )
            self._expenses[expense.id] = expense
            return expense

    def update_expense(self, expense_id: int, patch: dict) -> Optional[Expense]:
        return self._update(self._expenses, expense_id, patch)

    def delete_expense(self, expense_id: int) -> bool:
        return self._delete(self._expenses, expense_id)

    # ── Goals ─────────────────────────────────────────────────────
    def get_goals(self, user_id: int) -> list[Goal]:
        with self._lock:
            goals = [g for g in self._goals.values() if g.user_id == user_id]
        return sorted(goals, key=lambda g: (g.target_date is None, g.target_date or date.min, g.id))

    def get_goal(self, goal_id: int) -> Optional[Goal]:
        with self._lock:
            return self._goals.get(goal_id)

    def create_goal(self, user_id: int, data: GoalCreate) -> Goal:
        with self._lock:
            goal = Goal(
                id=self._next_id("goal"),
                name=data.name,
                target_amount=data.target_amount,
                current_amount=data.current_amount,
                target_date=data.target_date,
                completed=False,
                user_id=user_id,
            )
            self._goals[goal.id] = goal
            return goal

    def update_goal(self, goal_id: int, patch: dict) -> Optional[Goal]:
        return self._update(self._goals, goal_id, patch)

    def delete_goal(self, goal_id: int) -> bool:
        return self._delete(self._goals, goal_id)

    # ── Budgets ───────────────────────────────────────────────────
    def get_budgets(self, user_id: int, month: int, year: int) -> list[Budget]:
        with self._lock:
            return [
                b for b in self._budgets.values()
                if b.user_id == user_id and b.month == month and b.year == year
            ]

    def get_budget(self, budget_id: int) -> Optional[Budget]:
        with self._lock:
            return self._budgets.get(budget_id)

    def get_budget_by_category(self, user_id: int, category_id: int, month: int, year: int) -> Optional[Budget]:
        with self._lock:
            return next(
                (
                    b for b in self._budgets.values()
                    if b.user_id == user_id and b.category_id == category_id and b.month == month and b.year == year
                ),
                None,
            )

    def create_budget(self, user_id: int, data: BudgetCreate) -> Budget:
        with self._lock:
            budget = Budget(
                id=self._next_id("budget"),
                amount=data.amount,
                category_id=data.category_id,
                user_id=user_id,
                month=data.month,
                year=data.year,
            )
            self._budgets[budget.id] = budget
            return budget

    def update_budget(self, budget_id: int, patch: dict) -> Optional[Budget]:
        return self._update(self._budgets, budget_id, patch)

    # ── Resources ─────────────────────────────────────────────────
    def get_resources(self, type: Optional[str] = None) -> list[Resource]:
        with self._lock:
            resources = list(self._resources.values())
        if type:
            return [r for r in resources if r.type == type]
        return resources

    def get_resource(self, resource_id: int) -> Optional[Resource]:
        with self._lock:
            return self._resources.get(resource_id)

    def create_resource(self, data: ResourceCreate) -> Resource:
        with self._lock:
            resource = Resource(id=self._next_id("resource"), **data.model_dump())
            self._resources[resource.id] = resource
            return resource

    def toggle_resource_bookmark(self, resource_id: int) -> Optional[Resource]:
        with self._lock:
            resource = self._resources.get(resource_id)
            if resource is None:
                return None
            return self._update(self._resources, resource_id, {"bookmarked": not resource.bookmarked})

    # ── Articles ──────────────────────────────────────────────────
    def get_articles(self, category: Optional[str] = None) -> list[Article]:
        with self._lock:
            articles = list(self._articles.values())
        if category:
            return [a for a in articles if a.category == category]
        return articles

    def get_article(self, article_id: int) -> Optional[Article]:
        with self._lock:
            return self._articles.get(article_id)

    def create_article(self, data: ArticleCreate) -> Article:
        with self._lock:
            article = Article(id=self._next_id("article"), **data.model_dump())
            self._articles[article.id] = article
            return article
