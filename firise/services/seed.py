"""
seed.py — Baseline demo data
Populates an empty store with the demo user, default categories, a month of
budgets, sample expenses and goals, local resources and starter articles.
"""

import logging
from datetime import date

from firise.auth import hash_password
from firise.schemas import (
    ArticleCreate, BudgetCreate, CategoryCreate, ExpenseCreate, GoalCreate,
    ResourceCreate, UserCreate,
)

logger = logging.getLogger(__name__)

DEMO_USER = {
    "username": "jamie",
    "password": "password123",
    "full_name": "Jamie Smith",
    "email": "jamie@example.com",
}

DEFAULT_CATEGORIES = [
    ("Housing", "home"),
    ("Food", "restaurant"),
    ("Transportation", "directions_bus"),
    ("Utilities", "power"),
    ("Healthcare", "local_hospital"),
    ("Personal", "person"),
    ("Education", "school"),
    ("Other", "more_horiz"),
]

# (category name, monthly amount)
DEMO_BUDGETS = [
    ("Housing", "650"),
    ("Food", "300"),
    ("Transportation", "200"),
    ("Utilities", "150"),
    ("Healthcare", "100"),
    ("Personal", "100"),
]

# (description, amount, date, category name)
DEMO_EXPENSES = [
    ("Grocery Store", "78.25", "2023-09-15", "Food"),
    ("Lunch Cafe", "12.50", "2023-09-14", "Food"),
    ("Public Transit", "5.75", "2023-09-13", "Transportation"),
    ("Electric Bill", "87.32", "2023-09-10", "Utilities"),
    ("Rent", "650", "2023-09-01", "Housing"),
]

DEMO_GOALS = [
    {"name": "Emergency Fund", "target_amount": "1000", "current_amount": "450", "target_date": "2023-10-30"},
    {"name": "Pay Off Credit Card", "target_amount": "3000", "current_amount": "750", "target_date": "2024-03-15"},
]

DEMO_RESOURCES = [
    {
        "name": "Job Training Program",
        "description": "Free career training and placement services",
        "address": "123 Main St, City, State 12345",
        "distance": "3.2",
        "type": "employment",
    },
    {
        "name": "Financial Counseling",
        "description": "Free 1-on-1 sessions with a certified counselor",
        "address": "456 Oak Ave, City, State 12345",
        "distance": "5.7",
        "type": "financial",
    },
    {
        "name": "Community Action Agency",
        "description": "Assistance with housing, utilities, and more",
        "address": "789 Elm St, City, State 12345",
        "distance": "1.8",
        "type": "housing",
    },
]

_UNSPLASH = "https://images.unsplash.com/{}?ixlib=rb-4.0.3&auto=format&fit=crop&w=500&h=300&q=80"

DEMO_ARTICLES = [
    {
        "title": "Budgeting Basics",
        "description": "Learn the essentials of creating and sticking to a personal budget that works for you.",
        "content": (
            "<h1>Budgeting Basics</h1>"
            "<p>A budget is a plan for your money. It helps you track your income and expenses, "
            "so you can make sure you're not spending more than you earn.</p>"
            "<h2>How to Create a Budget</h2>"
            "<ol><li>Calculate your total income</li><li>Track your expenses for a month</li>"
            "<li>Categorize your expenses</li><li>Set spending limits for each category</li>"
            "<li>Review and adjust regularly</li></ol>"
        ),
        "image_url": _UNSPLASH.format("photo-1579621970588-a35d0e7ab9b6"),
        "category": "budgeting",
    },
    {
        "title": "Understanding Credit Scores",
        "description": "Demystifying credit scores and how to improve yours over time.",
        "content": (
            "<h1>Understanding Credit Scores</h1>"
            "<p>Your credit score is a number that represents your creditworthiness. Lenders use "
            "this score to decide whether to give you loans and what interest rates to charge.</p>"
            "<h2>How to Improve Your Credit Score</h2>"
            "<ol><li>Pay all your bills on time</li><li>Keep your credit card balances low</li>"
            "<li>Don't close old credit accounts</li><li>Limit applications for new credit</li></ol>"
        ),
        "image_url": _UNSPLASH.format("photo-1567427017947-545c5f8d16ad"),
        "category": "credit",
    },
    {
        "title": "Saving Strategies",
        "description": "Practical tips for building savings, even when money is tight.",
        "content": (
            "<h1>Saving Strategies</h1>"
            "<p>Saving money is an important part of financial health, but it can be challenging, "
            "especially when income is limited.</p>"
            "<h2>Emergency Fund Goal</h2>"
            "<p>Try to save at least $500 for emergencies, then work toward 3-6 months of essential expenses.</p>"
        ),
        "image_url": _UNSPLASH.format("photo-1434626881859-194d67b2b86f"),
        "category": "saving",
    },
    {
        "title": "Debt Management",
        "description": "Learn how to control and pay off your debts in a responsible way.",
        "content": (
            "<h1>Debt Management</h1>"
            "<p>Debt management is the process of controlling and paying off your debts in a "
            "responsible way.</p>"
            "<ul><li>Pay more than the minimum payment when possible.</li>"
            "<li>Avoid taking on new debt while paying off existing debt.</li></ul>"
        ),
        "image_url": _UNSPLASH.format("photo-1464983953574-0892a716854b"),
        "category": "debt",
    },
    {
        "title": "Banking",
        "description": "Understand the basics of banking and how to use financial institutions to your advantage.",
        "content": (
            "<h1>Banking</h1>"
            "<p>Banks offer a safe place to store your money and provide services like checking "
            "accounts, savings accounts, and loans.</p>"
        ),
        "image_url": _UNSPLASH.format("photo-1518183214770-9cffbec72538"),
        "category": "banking",
    },
    {
        "title": "Career",
        "description": "Explore how to build a successful career and achieve your professional goals.",
        "content": (
            "<h1>Career</h1>"
            "<p>A career is a path of learning, growth, and advancement in your chosen field.</p>"
        ),
        "image_url": _UNSPLASH.format("photo-1503676382389-4809596d5290"),
        "category": "career",
    },
    {
        "title": "Taxes",
        "description": "Understand the basics of taxes and how they affect your finances.",
        "content": (
            "<h1>Taxes</h1>"
            "<p>Taxes are mandatory payments made to the government to fund public services and "
            "infrastructure.</p>"
        ),
        "image_url": _UNSPLASH.format("photo-1464983953574-0892a716854b"),
        "category": "taxes",
    },
]


def seed_demo_data(storage, today: date = None) -> bool:
    """Fill an empty store. Returns False (and does nothing) if data already exists."""
    if not storage.is_empty():
        logger.info("Storage already populated; skipping demo seed.")
        return False

    today = today or date.today()

    user = storage.create_user(UserCreate(**{**DEMO_USER, "password": hash_password(DEMO_USER["password"])}))

    category_ids = {}
    for name, icon in DEFAULT_CATEGORIES:
        category_ids[name] = storage.create_category(CategoryCreate(name=name, icon=icon)).id

    for name, amount in DEMO_BUDGETS:
        storage.create_budget(
            user.id,
            BudgetCreate(amount=amount, category_id=category_ids[name], month=today.month, year=today.year),
        )

    for description, amount, when, category in DEMO_EXPENSES:
        storage.create_expense(
            user.id,
            ExpenseCreate(description=description, amount=amount, date=when, category_id=category_ids[category]),
        )

    for goal in DEMO_GOALS:
        storage.create_goal(user.id, GoalCreate(**goal))

    for resource in DEMO_RESOURCES:
        storage.create_resource(ResourceCreate(**resource))

    for article in DEMO_ARTICLES:
        storage.create_article(ArticleCreate(**article))

    logger.info("Seeded demo data for user %r (id %s)", user.username, user.id)
    return True
