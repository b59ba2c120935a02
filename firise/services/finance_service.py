"""
finance_service.py — Budgets, spending and goal progress
Pure calculations over already-loaded collections: monthly spend per
category, budget utilisation, goal progress and status labels. Nothing
here touches storage except upsert_budget, which delegates to the store's
atomic upsert.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable

from firise.schemas import (
    Budget, BudgetCreate, BudgetLine, BudgetOverview, Category, Expense, Goal,
    GoalProgress, GoalsSummary,
)

# Grouping key for expenses without a category.
UNCATEGORIZED = 0

ZERO = Decimal("0.00")


def calculate_percentage(current, total) -> int:
    """Whole-number share of ``total`` used by ``current``, capped to 0..100.

    A zero total yields 0 rather than a division error. Halves round up.
    """
    current, total = Decimal(current), Decimal(total)
    if total == 0:
        return 0
    pct = (current / total * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return max(0, min(int(pct), 100))


def in_month(expense: Expense, month: int, year: int) -> bool:
    return expense.date.month == month and expense.date.year == year


def spend_by_category(expenses: Iterable[Expense], month: int, year: int) -> dict[int, Decimal]:
    """Total spent per category id for one calendar month."""
    totals: dict[int, Decimal] = {}
    for e in expenses:
        if not in_month(e, month, year):
            continue
        key = e.category_id if e.category_id is not None else UNCATEGORIZED
        totals[key] = totals.get(key, ZERO) + e.amount
    return totals


def goal_progress(goal: Goal) -> int:
    return calculate_percentage(goal.current_amount, goal.target_amount)


def goal_status(goal: Goal) -> str:
    """Label for the goal's tier; an explicitly completed goal always wins."""
    if goal.completed:
        return "Completed"
    pct = goal_progress(goal)
    if pct >= 75:
        return "Almost There"
    if pct >= 25:
        return f"{pct}% Complete"
    return "Just Started"


def budget_overview(
    budgets: Iterable[Budget],
    expenses: Iterable[Expense],
    categories: Iterable[Category],
    month: int,
    year: int,
) -> BudgetOverview:
    """Per-budget spend for a month plus overall totals.

    The percentage is capped at 100, so overspending is reported through
    ``overspent`` and a negative ``remaining``.
    """
    spent_by_cat = spend_by_category(expenses, month, year)
    names = {c.id: c for c in categories}

    lines = []
    for b in budgets:
        cat = names.get(b.category_id)
        spent = spent_by_cat.get(b.category_id, ZERO)
        lines.append(BudgetLine(
            category_id=b.category_id,
            name=cat.name if cat else "Unknown",
            icon=cat.icon if cat else "help_outline",
            budget=b.amount,
            spent=spent,
            remaining=b.amount - spent,
            percentage=calculate_percentage(spent, b.amount),
            overspent=spent > b.amount,
        ))

    total_budget = sum((line.budget for line in lines), ZERO)
    # All spending in the window counts, including categories without a budget
    total_spent = sum(spent_by_cat.values(), ZERO)

    return BudgetOverview(
        month=month,
        year=year,
        categories=lines,
        total_budget=total_budget,
        total_spent=total_spent,
        total_remaining=total_budget - total_spent,
        total_percentage=calculate_percentage(total_spent, total_budget),
        overspent=total_spent > total_budget,
    )


def goals_summary(goals: Iterable[Goal]) -> GoalsSummary:
    goals = list(goals)
    completed = sum(1 for g in goals if g.completed)
    return GoalsSummary(
        goals=[GoalProgress(goal=g, progress=goal_progress(g), status=goal_status(g)) for g in goals],
        completed=completed,
        active=len(goals) - completed,
    )


def upsert_budget(storage, user_id: int, data: BudgetCreate) -> tuple[Budget, bool]:
    """Create or re-amount the budget for (user, category, month, year)."""
    return storage.upsert_budget(user_id, data)
