from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Protocol

from transaction_dashboard import database
from transaction_dashboard.core.models import TransactionFilter

DEFAULT_PER_PAGE = 10


class QueryService(Protocol):
    """Read operations the HTTP layer depends on."""

    def list_transactions(
        self, filt: TransactionFilter, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> List[dict]:
        ...

    def count_transactions(self, filt: TransactionFilter) -> int:
        ...

    def statistics(self, filt: TransactionFilter) -> Dict[str, object]:
        ...

    def bar_chart(self, filt: TransactionFilter) -> List[int]:
        ...

    def pie_chart(self, filt: TransactionFilter) -> List[Dict[str, object]]:
        ...


@dataclass
class SQLiteQueryService:
    """QueryService backed by the SQLite transaction store."""

    db_path: str

    def list_transactions(
        self, filt: TransactionFilter, page: int = 1, per_page: int = DEFAULT_PER_PAGE
    ) -> List[dict]:
        if page < 1 or per_page < 1:
            raise ValueError("page and per_page must be positive")
        rows = database.query_transactions(
            self.db_path,
            filt,
            limit=per_page,
            offset=(page - 1) * per_page,
        )
        return [tx.to_dict() for tx in rows]

    def count_transactions(self, filt: TransactionFilter) -> int:
        return database.count_transactions(self.db_path, filt)

    def statistics(self, filt: TransactionFilter) -> Dict[str, object]:
        return database.sales_statistics(self.db_path, filt)

    def bar_chart(self, filt: TransactionFilter) -> List[int]:
        return database.price_range_counts(self.db_path, filt)

    def pie_chart(self, filt: TransactionFilter) -> List[Dict[str, object]]:
        return database.category_counts(self.db_path, filt)
