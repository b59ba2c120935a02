"""
sql_storage.py — Relational storage
SQLAlchemy-backed implementation of the storage contract. Rows never leave
this module: every query result is copied into a frozen entity snapshot.
"""

import logging
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from firise import models
from firise.database import init_db, make_engine
from firise.schemas import (
    Article, ArticleCreate, Budget, BudgetCreate, Category, CategoryCreate,
    Expense, ExpenseCreate, Goal, GoalCreate, Resource, ResourceCreate,
    User, UserCreate,
)
from firise.services.storage import Storage, merge

logger = logging.getLogger(__name__)


def _to_entity(entity_cls, row):
    if row is None:
        return None
    return entity_cls.model_validate({c.key: getattr(row, c.key) for c in row.__table__.columns})


class SqlStorage(Storage):
    def __init__(self, database_url: str):
        super().__init__()
        self.engine = make_engine(database_url)
        init_db(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=self.engine)

    # ------------------------------------------------------------------
    def _get(self, model, entity_cls, key: int):
        with self.SessionLocal() as db:
            return _to_entity(entity_cls, db.get(model, key))

    def _add(self, row, entity_cls):
        with self._lock, self.SessionLocal() as db:
            try:
                db.add(row)
                db.commit()
                db.refresh(row)
                return _to_entity(entity_cls, row)
            except Exception:
                db.rollback()
                raise

    def _update(self, model, entity_cls, key: int, patch: dict):
        with self._lock, self.SessionLocal() as db:
            try:
                row = db.get(model, key)
                if row is None:
                    return None
                updated = merge(_to_entity(entity_cls, row), patch)
                for field, value in updated.model_dump().items():
                    setattr(row, field, value)
                db.commit()
                db.refresh(row)
                return _to_entity(entity_cls, row)
            except Exception:
                db.rollback()
                raise

    def _delete(self, model, key: int) -> bool:
        with self._lock, self.SessionLocal() as db:
            try:
                row = db.get(model, key)
                if row is None:
                    return False
                db.delete(row)
                db.commit()
                return True
            except Exception:
                db.rollback()
                raise

    # ── Users ─────────────────────────────────────────────────────
    def get_user(self, user_id: int) -> Optional[User]:
        return self._get(models.User, User, user_id)

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self.SessionLocal() as db:
            return _to_entity(User, db.query(models.User).filter_by(username=username).first())

    def create_user(self, data: UserCreate) -> User:
        return self._add(models.User(**data.model_dump()), User)

    def register_user(self, data: UserCreate) -> Optional[User]:
        try:
            return super().register_user(data)
        except IntegrityError:
            # Unique username constraint tripped by another process
            return None

    # ── Categories ────────────────────────────────────────────────
    def get_categories(self, user_id: Optional[int] = None) -> list[Category]:
        with self.SessionLocal() as db:
            query = db.query(models.Category)
            if user_id is not None:
                query = query.filter(or_(models.Category.user_id.is_(None), models.Category.user_id == user_id))
            return [_to_entity(Category, c) for c in query.order_by(models.Category.id).all()]

    def get_category(self, category_id: int) -> Optional[Category]:
        return self._get(models.Category, Category, category_id)

    def create_category(self, data: CategoryCreate, user_id: Optional[int] = None) -> Category:
        return self._add(models.Category(name=data.name, icon=data.icon, user_id=user_id), Category)

    # ── Expenses ──────────────────────────────────────────────────
    def _expense_query(self, db, user_id: int):
        return (
            db.query(models.Expense)
            .filter_by(user_id=user_id)
            .order_by(models.Expense.date.desc(), models.Expense.id.asc())
        )

    def get_expenses(self, user_id: int) -> list[Expense]:
        with self.SessionLocal() as db:
            return [_to_entity(Expense, e) for e in self._expense_query(db, user_id).all()]

    def get_recent_expenses(self, user_id: int, limit: int) -> list[Expense]:
        with self.SessionLocal() as db:
            return [_to_entity(Expense, e) for e in self._expense_query(db, user_id).limit(limit).all()]

    def get_expense(self, expense_id: int) -> Optional[Expense]:
        return self._get(models.Expense, Expense, expense_id)

    def create_expense(self, user_id: int, data: ExpenseCreate) -> Expense:
        return self._add(models.Expense(user_id=user_id, **data.model_dump()), Expense)

    def update_expense(self, expense_id: int, patch: dict) -> Optional[Expense]:
        return self._update(models.Expense, Expense, expense_id, patch)

    def delete_expense(self, expense_id: int) -> bool:
        return self._delete(models.Expense, expense_id)

    # ── Goals ─────────────────────────────────────────────────────
    def get_goals(self, user_id: int) -> list[Goal]:
        with self.SessionLocal() as db:
            goals = (
                db.query(models.Goal)
                .filter_by(user_id=user_id)
                .order_by(models.Goal.target_date.is_(None), models.Goal.target_date.asc(), models.Goal.id.asc())
                .all()
            )
            return [_to_entity(Goal, g) for g in goals]

    def get_goal(self, goal_id: int) -> Optional[Goal]:
        return self._get(models.Goal, Goal, goal_id)

    def create_goal(self, user_id: int, data: GoalCreate) -> Goal:
        return self._add(models.Goal(user_id=user_id, completed=False, **data.model_dump()), Goal)

    def update_goal(self, goal_id: int, patch: dict) -> Optional[Goal]:
        return self._update(models.Goal, Goal, goal_id, patch)

    def delete_goal(self, goal_id: int) -> bool:
        return self._delete(models.Goal, goal_id)

    # ── Budgets ───────────────────────────────────────────────────
    def get_budgets(self, user_id: int, month: int, year: int) -> list[Budget]:
        with self.SessionLocal() as db:
            rows = (
                db.query(models.Budget)
                .filter_by(user_id=user_id, month=month, year=year)
                .order_by(models.Budget.id)
                .all()
            )
            return [_to_entity(Budget, b) for b in rows]

    def get_budget(self, budget_id: int) -> Optional[Budget]:
        return self._get(models.Budget, Budget, budget_id)

    def get_budget_by_category(self, user_id: int, category_id: int, month: int, year: int) -> Optional[Budget]:
        with self.SessionLocal() as db:
            row = (
                db.query(models.Budget)
                .filter_by(user_id=user_id, category_id=category_id, month=month, year=year)
                .first()
            )
            return _to_entity(Budget, row)

    def create_budget(self, user_id: int, data: BudgetCreate) -> Budget:
        return self._add(models.Budget(user_id=user_id, **data.model_dump()), Budget)

    def update_budget(self, budget_id: int, patch: dict) -> Optional[Budget]:
        return self._update(models.Budget, Budget, budget_id, patch)

    def upsert_budget(self, user_id: int, data: BudgetCreate) -> tuple[Budget, bool]:
        try:
            return super().upsert_budget(user_id, data)
        except IntegrityError:
            # Another process inserted the same (user, category, month, year) first.
            logger.info("Budget upsert raced on category %s %02d/%s; updating instead", data.category_id, data.month, data.year)
            existing = self.get_budget_by_category(user_id, data.category_id, data.month, data.year)
            if existing is None:
                raise
            return self.update_budget(existing.id, {"amount": data.amount}), False

    # ── Resources ─────────────────────────────────────────────────
    def get_resources(self, type: Optional[str] = None) -> list[Resource]:
        with self.SessionLocal() as db:
            query = db.query(models.Resource)
            if type:
                query = query.filter_by(type=type)
            return [_to_entity(Resource, r) for r in query.order_by(models.Resource.id).all()]

    def get_resource(self, resource_id: int) -> Optional[Resource]:
        return self._get(models.Resource, Resource, resource_id)

    def create_resource(self, data: ResourceCreate) -> Resource:
        return self._add(models.Resource(**data.model_dump()), Resource)

    def toggle_resource_bookmark(self, resource_id: int) -> Optional[Resource]:
        with self._lock, self.SessionLocal() as db:
            try:
                # Single UPDATE so concurrent toggles from other processes cannot be lost
                changed = (
                    db.query(models.Resource)
                    .filter_by(id=resource_id)
                    .update({models.Resource.bookmarked: ~models.Resource.bookmarked}, synchronize_session=False)
                )
                db.commit()
            except Exception:
                db.rollback()
                raise
            if not changed:
                return None
            return _to_entity(Resource, db.get(models.Resource, resource_id))

    # ── Articles ──────────────────────────────────────────────────
    def get_articles(self, category: Optional[str] = None) -> list[Article]:
        with self.SessionLocal() as db:
            query = db.query(models.Article)
            if category:
                query = query.filter_by(category=category)
            return [_to_entity(Article, a) for a in query.order_by(models.Article.id).all()]

    def get_article(self, article_id: int) -> Optional[Article]:
        return self._get(models.Article, Article, article_id)

    def create_article(self, data: ArticleCreate) -> Article:
        return self._add(models.Article(**data.model_dump()), Article)

    # ── Lifecycle ─────────────────────────────────────────────────
    def close(self):
        self.engine.dispose()
