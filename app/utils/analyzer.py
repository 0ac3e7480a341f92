from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, time, timedelta, tzinfo
from decimal import Decimal
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from app.models.analytics import CategoryTotal, DailyTotal, SpendingSummary, SpendingTrend
from app.models.expense import ExpenseWithCategory


def _money(value: Decimal) -> float:
    return round(float(value), 2)


PERIODS = ("today", "week", "month", "all")

SORT_KEYS = {
    "date-newest": (lambda exp: exp.date, True),
    "date-oldest": (lambda exp: exp.date, False),
    "amount-high": (lambda exp: exp.amount, True),
    "amount-low": (lambda exp: exp.amount, False),
}


class ExpenseAnalyzer:
    """
    Aggregations over joined expenses, shared by the storage layer and the
    analytics routes. Every method is a pure function of its arguments; ``now``
    defaults to the current time in the analyzer's zone.
    """

    def __init__(self, tz: Optional[str | tzinfo] = None) -> None:
        if tz is None:
            tz = "UTC"
        self._tz = ZoneInfo(tz) if isinstance(tz, str) else tz

    def now(self) -> datetime:
        return datetime.now(self._tz)

    def _start_of_day(self, moment: datetime) -> datetime:
        local = moment.astimezone(self._tz)
        return datetime.combine(local.date(), time.min, tzinfo=self._tz)

    @staticmethod
    def _week_start(today: datetime) -> datetime:
        # Weeks start on Sunday
        return today - timedelta(days=(today.weekday() + 1) % 7)

    @staticmethod
    def filter_by_date_range(
        expenses: List[ExpenseWithCategory],
        start: datetime,
        end: datetime,
    ) -> List[ExpenseWithCategory]:
        return [exp for exp in expenses if start <= exp.date <= end]

    def filter_expenses(
        self,
        expenses: List[ExpenseWithCategory],
        search: Optional[str] = None,
        category_id: Optional[int] = None,
        period: str = "all",
        sort: str = "date-newest",
        now: Optional[datetime] = None,
    ) -> List[ExpenseWithCategory]:
        """
        Narrow the expense list the way the expenses page does: case-insensitive
        description search, a single category, and a period (``today``,
        ``week`` from Sunday, ``month``, or ``all``), then sort.
        """
        if sort not in SORT_KEYS:
            raise ValueError(f"Unknown sort order: {sort}")
        if period not in PERIODS:
            raise ValueError(f"Unknown period: {period}")

        result = list(expenses)
        if search:
            needle = search.lower()
            result = [exp for exp in result if needle in exp.description.lower()]
        if category_id is not None:
            result = [exp for exp in result if exp.category_id == category_id]

        if period != "all":
            now = (now or self.now()).astimezone(self._tz)
            today = self._start_of_day(now)
            if period == "today":
                tomorrow = today + timedelta(days=1)
                result = [exp for exp in result if today <= exp.date < tomorrow]
            else:
                start = self._week_start(today) if period == "week" else today.replace(day=1)
                result = self.filter_by_date_range(result, start, now)

        key, reverse = SORT_KEYS[sort]
        return sorted(result, key=key, reverse=reverse)

    @staticmethod
    def total(expenses: List[ExpenseWithCategory]) -> Decimal:
        return sum((exp.amount for exp in expenses), Decimal("0"))

    def category_totals(self, expenses: List[ExpenseWithCategory]) -> List[CategoryTotal]:
        grouped: Dict[int, List[ExpenseWithCategory]] = defaultdict(list)
        for exp in expenses:
            grouped[exp.category_id].append(exp)

        results = [
            CategoryTotal(
                category=items[0].category,
                total=_money(self.total(items)),
                count=len(items),
            )
            for items in grouped.values()
        ]
        results.sort(key=lambda item: item.total, reverse=True)
        return results

    def summarize(
        self,
        expenses: List[ExpenseWithCategory],
        now: Optional[datetime] = None,
    ) -> SpendingSummary:
        now = (now or self.now()).astimezone(self._tz)
        today = self._start_of_day(now)
        tomorrow = today + timedelta(days=1)
        week_start = self._week_start(today)
        month_start = today.replace(day=1)

        today_total = self.total(self.filter_by_date_range(expenses, today, tomorrow))
        week_total = self.total(self.filter_by_date_range(expenses, week_start, now))
        month_total = self.total(self.filter_by_date_range(expenses, month_start, now))

        return SpendingSummary(
            today_total=_money(today_total),
            week_total=_money(week_total),
            month_total=_money(month_total),
            average_daily=_money(month_total / now.day),
        )

    def weekly_trend(
        self,
        expenses: List[ExpenseWithCategory],
        now: Optional[datetime] = None,
    ) -> SpendingTrend:
        """
        Compare the last seven days with the seven days before them.
        ``change`` is a percentage and is 0 when there was no prior spending.
        """
        now = now or self.now()
        week_ago = now - timedelta(days=7)
        two_weeks_ago = now - timedelta(days=14)

        this_week = self.total([exp for exp in expenses if exp.date >= week_ago])
        last_week = self.total([exp for exp in expenses if two_weeks_ago <= exp.date < week_ago])

        change = 0.0
        if last_week > 0:
            change = round(float((this_week - last_week) / last_week * 100), 2)

        return SpendingTrend(
            this_week_total=_money(this_week),
            last_week_total=_money(last_week),
            change=change,
        )

    def daily_totals(
        self,
        expenses: List[ExpenseWithCategory],
        days: int = 7,
        now: Optional[datetime] = None,
    ) -> List[DailyTotal]:
        """One entry per calendar day, oldest first, ending today."""
        today = self._start_of_day(now or self.now()).date()

        buckets: Dict[date, List[ExpenseWithCategory]] = defaultdict(list)
        for exp in expenses:
            buckets[exp.date.astimezone(self._tz).date()].append(exp)

        results = []
        for offset in range(days - 1, -1, -1):
            day = today - timedelta(days=offset)
            items = buckets.get(day, [])
            results.append(
                DailyTotal(
                    date=day.isoformat(),
                    weekday=day.strftime("%a"),
                    total=_money(self.total(items)),
                    count=len(items),
                )
            )
        return results

    def top_expenses(
        self,
        expenses: List[ExpenseWithCategory],
        limit: int = 5,
        now: Optional[datetime] = None,
    ) -> List[ExpenseWithCategory]:
        month_start = self._start_of_day(now or self.now()).replace(day=1)
        this_month = [exp for exp in expenses if exp.date >= month_start]
        return sorted(this_month, key=lambda exp: exp.amount, reverse=True)[:limit]
