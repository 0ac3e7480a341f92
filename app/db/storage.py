"""
In-memory storage for categories and expenses.

Records live in two id-keyed maps for the lifetime of the process. Ids come
from per-collection counters that start at 1 and are never reused, even after
a delete. Reads always return expenses joined with their category; an expense
whose category cannot be resolved is left out of every read.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional

from app.core.config import settings
from app.core.errors import CategoryNotFoundError
from app.models.analytics import CategoryTotal
from app.models.category import Category, CategoryCreate
from app.models.expense import Expense, ExpenseCreate, ExpenseUpdate, ExpenseWithCategory
from app.utils.analyzer import ExpenseAnalyzer

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"name": "Food & Dining", "icon": "fas fa-utensils", "color": "red", "description": "Restaurants, cafes, groceries"},
    {"name": "Transportation", "icon": "fas fa-car", "color": "blue", "description": "Gas, public transport, ride-sharing"},
    {"name": "Shopping", "icon": "fas fa-shopping-cart", "color": "green", "description": "Clothes, electronics, household items"},
    {"name": "Entertainment", "icon": "fas fa-gamepad", "color": "purple", "description": "Movies, games, events"},
    {"name": "Utilities", "icon": "fas fa-bolt", "color": "yellow", "description": "Electricity, water, internet"},
    {"name": "Healthcare", "icon": "fas fa-heartbeat", "color": "pink", "description": "Medical expenses, pharmacy"},
    {"name": "Other", "icon": "fas fa-question", "color": "gray", "description": "Miscellaneous expenses"},
]


class Storage(ABC):
    """Contract shared by every storage backend."""

    analyzer: ExpenseAnalyzer

    # Categories
    @abstractmethod
    def get_categories(self) -> List[Category]: ...

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]: ...

    @abstractmethod
    def create_category(self, data: CategoryCreate) -> Category: ...

    @abstractmethod
    def delete_category(self, category_id: int) -> bool: ...

    # Expenses
    @abstractmethod
    def get_expenses(self) -> List[ExpenseWithCategory]: ...

    @abstractmethod
    def get_expense(self, expense_id: int) -> Optional[ExpenseWithCategory]: ...

    @abstractmethod
    def create_expense(self, data: ExpenseCreate) -> ExpenseWithCategory: ...

    @abstractmethod
    def update_expense(self, expense_id: int, changes: ExpenseUpdate) -> Optional[ExpenseWithCategory]: ...

    @abstractmethod
    def delete_expense(self, expense_id: int) -> bool: ...

    # Analytics
    @abstractmethod
    def get_expenses_by_date_range(self, start: datetime, end: datetime) -> List[ExpenseWithCategory]: ...

    @abstractmethod
    def get_expenses_by_category(self) -> List[CategoryTotal]: ...


class MemoryStorage(Storage):
    def __init__(self, seed: bool = True, analyzer: Optional[ExpenseAnalyzer] = None) -> None:
        self._seed = seed
        self.analyzer = analyzer or ExpenseAnalyzer(settings.TIMEZONE)
        self.reset()

    def reset(self) -> None:
        """Drop every record, restart both id counters and re-seed."""
        self._categories: Dict[int, Category] = {}
        self._expenses: Dict[int, Expense] = {}
        self._next_category_id = 1
        self._next_expense_id = 1
        if self._seed:
            for item in DEFAULT_CATEGORIES:
                self.create_category(CategoryCreate(**item))

    def _join(self, expense: Expense) -> Optional[ExpenseWithCategory]:
        category = self._categories.get(expense.category_id)
        if category is None:
            return None
        return ExpenseWithCategory(**expense.model_dump(), category=category)

    # Categories

    def get_categories(self) -> List[Category]:
        return list(self._categories.values())

    def get_category(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    def create_category(self, data: CategoryCreate) -> Category:
        category = Category(id=self._next_category_id, **data.model_dump())
        self._next_category_id += 1
        self._categories[category.id] = category
        logger.info(f"Created category {category.id} ({category.name})")
        return category

    def delete_category(self, category_id: int) -> bool:
        # Not exposed over HTTP; expenses pointing at it become orphans
        removed = self._categories.pop(category_id, None) is not None
        if removed:
            logger.info(f"Deleted category {category_id}")
        return removed

    # Expenses

    def get_expenses(self) -> List[ExpenseWithCategory]:
        joined = []
        for expense in self._expenses.values():
            item = self._join(expense)
            if item is None:
                logger.warning(
                    f"Skipping expense {expense.id}: category {expense.category_id} not found"
                )
                continue
            joined.append(item)
        joined.sort(key=lambda exp: exp.date, reverse=True)
        return joined

    def get_expense(self, expense_id: int) -> Optional[ExpenseWithCategory]:
        expense = self._expenses.get(expense_id)
        if expense is None:
            return None
        return self._join(expense)

    def create_expense(self, data: ExpenseCreate) -> ExpenseWithCategory:
        if data.category_id not in self._categories:
            raise CategoryNotFoundError(data.category_id)

        expense = Expense(id=self._next_expense_id, **data.model_dump())
        self._next_expense_id += 1
        self._expenses[expense.id] = expense
        logger.info(f"Created expense {expense.id} in category {expense.category_id}")
        return self._join(expense)

    def update_expense(self, expense_id: int, changes: ExpenseUpdate) -> Optional[ExpenseWithCategory]:
        """
        Replace only the fields present in ``changes``. Returns None when the
        expense does not exist or the resulting category id does not resolve;
        in the latter case nothing is written.
        """
        expense = self._expenses.get(expense_id)
        if expense is None:
            return None

        fields = changes.model_dump(exclude_unset=True)
        # An explicit null is treated as "leave unchanged"
        fields = {k: v for k, v in fields.items() if v is not None}
        updated = expense.model_copy(update=fields)

        joined = self._join(updated)
        if joined is None:
            logger.warning(
                f"Rejected update of expense {expense_id}: category {updated.category_id} not found"
            )
            return None

        self._expenses[expense_id] = updated
        if fields:
            logger.info(f"Updated expense {expense_id}: {sorted(fields)}")
        return joined

    def delete_expense(self, expense_id: int) -> bool:
        removed = self._expenses.pop(expense_id, None) is not None
        if removed:
            logger.info(f"Deleted expense {expense_id}")
        return removed

    # Analytics

    def get_expenses_by_date_range(self, start: datetime, end: datetime) -> List[ExpenseWithCategory]:
        return self.analyzer.filter_by_date_range(self.get_expenses(), start, end)

    def get_expenses_by_category(self) -> List[CategoryTotal]:
        return self.analyzer.category_totals(self.get_expenses())


storage = MemoryStorage(seed=settings.SEED_DEFAULT_CATEGORIES)


def get_storage() -> Storage:
    return storage
