from datetime import datetime
from typing import List

from app.models.base import ApiModel
from app.models.category import Category
from app.models.expense import ExpenseWithCategory


class CategoryTotal(ApiModel):
    category: Category
    total: float
    count: int


class SpendingSummary(ApiModel):
    today_total: float
    week_total: float
    month_total: float
    average_daily: float


class DateRangeReport(ApiModel):
    start: datetime
    end: datetime
    total: float
    count: int
    expenses: List[ExpenseWithCategory]


class SpendingTrend(ApiModel):
    this_week_total: float
    last_week_total: float
    change: float  # percent vs. last week


class DailyTotal(ApiModel):
    date: str  # YYYY-MM-DD
    weekday: str
    total: float
    count: int
