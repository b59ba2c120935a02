# Import all models so they register with SQLAlchemy Base.metadata
# This ensures Base.metadata.create_all() creates all tables

from firise.models.user import User
from firise.models.category import Category
from firise.models.expense import Expense
from firise.models.goal import Goal
from firise.models.budget import Budget
from firise.models.resource import Resource
from firise.models.article import Article

__all__ = [
    "User",
    "Category",
    "Expense",
    "Goal",
    "Budget",
    "Resource",
    "Article",
]
