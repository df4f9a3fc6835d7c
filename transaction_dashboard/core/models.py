# transaction_dashboard/core/models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone


@dataclass
class Transaction:
    title: str
    description: str
    price: float | None
    category: str
    date_of_sale: datetime | None
    sold: bool
    id: int | None = None

    @classmethod
    def from_record(cls, record: dict) -> "Transaction":
        """Cast one seed record, dropping keys the collection does not store."""
        if not isinstance(record, dict):
            raise ValueError(f"Transaction record must be an object, got {record!r}")
        price = record.get("price")
        return cls(
            title=_as_text(record.get("title")),
            description=_as_text(record.get("description")),
            price=float(price) if price is not None else None,
            category=_as_text(record.get("category")),
            date_of_sale=parse_sale_date(record.get("dateOfSale")),
            sold=_as_bool(record.get("sold")),
        )

    def to_dict(self) -> dict:
        return {
            "_id": self.id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "category": self.category,
            "dateOfSale": format_sale_date(self.date_of_sale),
            "sold": self.sold,
        }


@dataclass(frozen=True)
class TransactionFilter:
    month: int
    search: str = ""


def parse_sale_date(value) -> datetime | None:
    """Parse an ISO-8601 sale date into a naive UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        text = str(value).strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_sale_date(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds") + "Z"


def price_text(price: float | None) -> str:
    """Render a price the way it prints in the feed: 150.0 -> '150'."""
    if price is None:
        return ""
    text = repr(float(price))
    if text.endswith(".0"):
        text = text[:-2]
    return text


def _as_text(value) -> str:
    return "" if value is None else str(value)


def _as_bool(value) -> bool:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1"):
            return True
        if lowered in ("false", "0", ""):
            return False
        raise ValueError(f"Cannot cast {value!r} to a boolean")
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if value is None:
        return False
    raise ValueError(f"Cannot cast {value!r} to a boolean")
