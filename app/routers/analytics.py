"""
Analytics Router
Aggregations over the joined expense list
"""
import logging
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from app.db.storage import Storage, get_storage
from app.models.analytics import (
    CategoryTotal,
    DailyTotal,
    DateRangeReport,
    SpendingSummary,
    SpendingTrend,
)
from app.models.expense import ExpenseWithCategory, localize
from app.utils.analyzer import ExpenseAnalyzer

router = APIRouter()
logger = logging.getLogger(__name__)


def get_analyzer(store: Storage = Depends(get_storage)) -> ExpenseAnalyzer:
    return store.analyzer


@router.get("/categories", response_model=List[CategoryTotal])
def category_analytics(store: Storage = Depends(get_storage)):
    """Per-category totals and counts, largest total first."""
    try:
        return store.get_expenses_by_category()
    except Exception as e:
        logger.error(f"Failed to fetch category analytics: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch category analytics")


@router.get("/summary", response_model=SpendingSummary)
def summary_analytics(
    store: Storage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
):
    """
    Today, this week (from Sunday), this month, and the month total averaged
    over the days elapsed so far.
    """
    try:
        return analyzer.summarize(store.get_expenses())
    except Exception as e:
        logger.error(f"Failed to fetch summary analytics: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch summary analytics")


@router.get("/range", response_model=DateRangeReport)
def range_analytics(
    start: datetime = Query(...),
    end: datetime = Query(...),
    store: Storage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
):
    """Expenses dated within [start, end], both ends included."""
    start, end = localize(start), localize(end)
    if start > end:
        raise HTTPException(status_code=400, detail="start must not be after end")
    try:
        expenses = store.get_expenses_by_date_range(start, end)
        return DateRangeReport(
            start=start,
            end=end,
            total=round(float(analyzer.total(expenses)), 2),
            count=len(expenses),
            expenses=expenses,
        )
    except Exception as e:
        logger.error(f"Failed to fetch range analytics: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch range analytics")


@router.get("/trend", response_model=SpendingTrend)
def trend_analytics(
    store: Storage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
):
    try:
        return analyzer.weekly_trend(store.get_expenses())
    except Exception as e:
        logger.error(f"Failed to fetch spending trend: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch spending trend")


@router.get("/daily", response_model=List[DailyTotal])
def daily_analytics(
    days: int = Query(7, ge=1, le=90),
    store: Storage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
):
    try:
        return analyzer.daily_totals(store.get_expenses(), days=days)
    except Exception as e:
        logger.error(f"Failed to fetch daily analytics: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch daily analytics")


@router.get("/top", response_model=List[ExpenseWithCategory])
def top_expenses(
    limit: int = Query(5, ge=1, le=50),
    store: Storage = Depends(get_storage),
    analyzer: ExpenseAnalyzer = Depends(get_analyzer),
):
    """This month's largest expenses."""
    try:
        return analyzer.top_expenses(store.get_expenses(), limit=limit)
    except Exception as e:
        logger.error(f"Failed to fetch top expenses: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch top expenses")
