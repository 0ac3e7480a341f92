import csv
import io
from typing import List

from app.models.expense import ExpenseWithCategory

CSV_FIELDS = ["id", "date", "description", "category", "amount"]


def expenses_to_csv(expenses: List[ExpenseWithCategory]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for e in expenses:
        writer.writerow({
            "id": e.id,
            "date": e.date.isoformat(),
            "description": e.description,
            "category": e.category.name,
            "amount": str(e.amount),
        })
    return output.getvalue()
