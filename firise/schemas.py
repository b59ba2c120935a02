"""
schemas.py — Entities and inbound payloads
Entities are frozen snapshots handed out by storage; payloads carry the
validation rules a request body must pass before storage ever sees it.
JSON uses camelCase (categoryId, targetAmount, ...); Python uses snake_case.
"""

import datetime as dt
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Annotated, Literal, Optional

from pydantic import (
    AfterValidator, BaseModel, BeforeValidator, ConfigDict, EmailStr, Field, StringConstraints, field_validator,
)
from pydantic.alias_generators import to_camel

ResourceType = Literal["employment", "housing", "financial", "education", "health", "legal", "community"]
ArticleCategory = Literal["budgeting", "credit", "saving", "debt", "banking", "career", "taxes"]

Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
CENT = Decimal("0.01")
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}")


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _iso_date(value):
    # Only YYYY-MM-DD text or a plain date; no timestamps, no datetimes
    if isinstance(value, dt.datetime) or not isinstance(value, (str, dt.date)):
        raise ValueError("must be a date in YYYY-MM-DD form")
    if isinstance(value, str) and not _ISO_DATE.fullmatch(value):
        raise ValueError("must be a date in YYYY-MM-DD form")
    return value


# Money always carries exactly two decimal places, whichever backend stores it.
Money = Annotated[Decimal, AfterValidator(_to_cents)]
PositiveMoney = Annotated[Decimal, Field(gt=0, max_digits=10, decimal_places=2), AfterValidator(_to_cents)]
NonNegativeMoney = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2), AfterValidator(_to_cents)]
IsoDate = Annotated[dt.date, BeforeValidator(_iso_date)]
Month = Annotated[int, Field(ge=1, le=12)]
Year = Annotated[int, Field(ge=2000, le=2100)]


class Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        frozen=True,
    )

    id: int


class Payload(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ── Entities ──────────────────────────────────────────────────────
class PublicUser(Entity):
    username: str
    full_name: str
    email: Optional[str] = None
    created_at: Optional[dt.datetime] = None


class User(PublicUser):
    password: str  # bcrypt hash

    def public(self) -> PublicUser:
        """The caller-facing shape; never carries the password."""
        return PublicUser.model_validate(self.model_dump(exclude={"password"}))


class Category(Entity):
    name: str
    icon: str
    user_id: Optional[int] = None  # None ⇒ global category


class Expense(Entity):
    description: str
    amount: Money
    date: dt.date
    category_id: Optional[int] = None
    user_id: int


class Goal(Entity):
    name: str
    target_amount: Money
    current_amount: Money = Decimal("0.00")
    target_date: Optional[dt.date] = None
    completed: bool = False
    user_id: int


class Budget(Entity):
    amount: Money
    category_id: int
    user_id: int
    month: int
    year: int


class Resource(Entity):
    name: str
    description: str
    address: Optional[str] = None
    distance: Optional[Decimal] = None  # miles
    type: str
    bookmarked: bool = False


class Article(Entity):
    title: str
    description: str
    content: str
    image_url: Optional[str] = None
    category: str


# ── Derived views ─────────────────────────────────────────────────
class View(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class BudgetLine(View):
    category_id: int
    name: str
    icon: str
    budget: Money
    spent: Money
    remaining: Money
    percentage: int
    overspent: bool


class BudgetOverview(View):
    month: int
    year: int
    categories: list[BudgetLine]
    total_budget: Money
    total_spent: Money
    total_remaining: Money
    total_percentage: int
    overspent: bool


class GoalProgress(View):
    goal: Goal
    progress: int
    status: str


class GoalsSummary(View):
    goals: list[GoalProgress]
    completed: int
    active: int


# ── Create payloads ───────────────────────────────────────────────
class UserCreate(Payload):
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=50)]
    password: Annotated[str, StringConstraints(min_length=6, max_length=72)]
    full_name: Text
    email: Optional[EmailStr] = None


class CategoryCreate(Payload):
    name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
    icon: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]


class ExpenseCreate(Payload):
    description: Text
    amount: PositiveMoney
    date: IsoDate
    category_id: Optional[int] = None


class GoalCreate(Payload):
    name: Text
    target_amount: PositiveMoney
    current_amount: NonNegativeMoney = Decimal("0.00")
    target_date: Optional[IsoDate] = None


class BudgetCreate(Payload):
    amount: PositiveMoney
    category_id: int
    month: Month
    year: Year


class ResourceCreate(Payload):
    name: Text
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    address: Optional[str] = None
    distance: Optional[Annotated[Decimal, Field(ge=0, max_digits=5, decimal_places=2)]] = None
    type: ResourceType
    bookmarked: bool = False


class ArticleCreate(Payload):
    title: Text
    description: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    content: Annotated[str, StringConstraints(min_length=1)]
    image_url: Optional[str] = None
    category: ArticleCategory


# ── Update payloads ───────────────────────────────────────────────
# Every field is optional, but a field that is sent must be valid; the
# non-nullable ones also refuse an explicit null.
class ExpenseUpdate(Payload):
    description: Optional[Text] = None
    amount: Optional[PositiveMoney] = None
    date: Optional[IsoDate] = None
    category_id: Optional[int] = None

    @field_validator("description", "amount", "date", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value


class GoalUpdate(Payload):
    name: Optional[Text] = None
    target_amount: Optional[PositiveMoney] = None
    current_amount: Optional[NonNegativeMoney] = None
    target_date: Optional[IsoDate] = None
    completed: Optional[bool] = None

    @field_validator("name", "target_amount", "current_amount", "completed", mode="before")
    @classmethod
    def _not_null(cls, value):
        if value is None:
            raise ValueError("may not be null")
        return value
