# finance_tracker/core/models.py
from dataclasses import dataclass
from datetime import date
from typing import Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)

TYPE_LABELS = {
    INCOME: "Revenu",
    EXPENSE: "Dépense",
}


@dataclass
class Transaction:
    id: str
    type: str               # 'income' | 'expense'
    category: str
    description: str
    amount: float
    date: date
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize using the field names of the stored blob."""
        data = {
            "id": self.id,
            "type": self.type,
            "category": self.category,
            "description": self.description,
            "amount": self.amount,
            "date": self.date.isoformat(),
        }
        if self.created_at:
            data["createdAt"] = self.created_at
        if self.updated_at:
            data["updatedAt"] = self.updated_at
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        raw_date = data["date"]
        if not isinstance(raw_date, date):
            raw_date = date.fromisoformat(str(raw_date))
        return cls(
            id=str(data["id"]),
            type=data["type"],
            category=data.get("category", ""),
            description=data.get("description", ""),
            amount=float(data["amount"]),
            date=raw_date,
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
        )
