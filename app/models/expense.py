from datetime import datetime, timezone
from decimal import Decimal
from typing import Annotated, Optional
from zoneinfo import ZoneInfo

from pydantic import AfterValidator, Field

from app.core.config import settings
from app.models.base import ApiModel
from app.models.category import Category

TWO_PLACES = Decimal("0.01")


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES)


def localize(value: datetime) -> datetime:
    # Naive timestamps are read in the configured zone
    if value.tzinfo is not None:
        return value
    return value.replace(tzinfo=ZoneInfo(settings.TIMEZONE))


Amount = Annotated[Decimal, Field(max_digits=10, decimal_places=2), AfterValidator(_to_cents)]
Timestamp = Annotated[datetime, AfterValidator(localize)]


class ExpenseCreate(ApiModel):
    amount: Amount
    description: str
    category_id: int
    date: Timestamp


class ExpenseUpdate(ApiModel):
    amount: Optional[Amount] = None
    description: Optional[str] = None
    category_id: Optional[int] = None
    date: Optional[Timestamp] = None


class Expense(ExpenseCreate):
    id: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ExpenseWithCategory(Expense):
    category: Category
