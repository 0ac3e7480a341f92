import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from app.db.storage import Storage, get_storage
from app.models.expense import ExpenseCreate, ExpenseUpdate, ExpenseWithCategory
from app.utils.export import expenses_to_csv

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[ExpenseWithCategory])
def list_expenses(
    search: Optional[str] = None,
    category_id: Optional[int] = Query(None, alias="categoryId"),
    period: Literal["today", "week", "month", "all"] = "all",
    sort: Literal["date-newest", "date-oldest", "amount-high", "amount-low"] = "date-newest",
    store: Storage = Depends(get_storage),
):
    """
    Expenses joined with their category, most recent first unless ``sort``
    says otherwise. ``search`` matches the description case-insensitively.
    """
    try:
        return store.analyzer.filter_expenses(
            store.get_expenses(),
            search=search,
            category_id=category_id,
            period=period,
            sort=sort,
        )
    except Exception as e:
        logger.error(f"Failed to fetch expenses: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to fetch expenses")


@router.get("/export")
def export_expenses(store: Storage = Depends(get_storage)):
    """Download the expense list as CSV."""
    try:
        content = expenses_to_csv(store.get_expenses())
    except Exception as e:
        logger.error(f"Failed to export expenses: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to export expenses")
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="expenses.csv"'},
    )


@router.get("/{expense_id}", response_model=ExpenseWithCategory)
def get_expense(expense_id: int, store: Storage = Depends(get_storage)):
    expense = store.get_expense(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


@router.post("", response_model=ExpenseWithCategory, status_code=status.HTTP_201_CREATED)
def create_expense(expense: ExpenseCreate, store: Storage = Depends(get_storage)):
    try:
        return store.create_expense(expense)
    except Exception as e:
        # Dangling category references land here too
        logger.error(f"Failed to create expense: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create expense")


@router.put("/{expense_id}", response_model=ExpenseWithCategory)
def update_expense(
    expense_id: int,
    expense_update: ExpenseUpdate,
    store: Storage = Depends(get_storage),
):
    try:
        updated = store.update_expense(expense_id, expense_update)
    except Exception as e:
        logger.error(f"Failed to update expense {expense_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update expense")

    if not updated:
        raise HTTPException(status_code=404, detail="Expense not found")
    return updated


@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_expense(expense_id: int, store: Storage = Depends(get_storage)):
    try:
        deleted = store.delete_expense(expense_id)
    except Exception as e:
        logger.error(f"Failed to delete expense {expense_id}: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to delete expense")

    if not deleted:
        raise HTTPException(status_code=404, detail="Expense not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
