import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from transaction_dashboard.core.models import (
    Transaction,
    TransactionFilter,
    price_text,
)
from transaction_dashboard.errors import StoreReadError, StoreWriteError

logger = logging.getLogger(__name__)

# Inclusive upper bounds; the last range is open-ended.
PRICE_RANGES: List[Tuple[int, int | None]] = [
    (0, 100),
    (101, 200),
    (201, 300),
    (301, 400),
    (401, 500),
    (501, 600),
    (601, 700),
    (701, 800),
    (801, 900),
    (901, None),
]


def price_range_labels() -> List[str]:
    return [f"{low}-{high}" if high is not None else f"{low}+" for low, high in PRICE_RANGES]


def _price_bucket_expression() -> str:
    cases = " ".join(
        f"WHEN price <= {high} THEN {idx}"
        for idx, (_, high) in enumerate(PRICE_RANGES)
        if high is not None
    )
    return f"CASE {cases} ELSE {len(PRICE_RANGES) - 1} END"


def _contains_ci(haystack, needle) -> int:
    if haystack is None or needle is None:
        return 0
    return int(needle in str(haystack).casefold())


def _connect(db_path: str) -> sqlite3.Connection:
    path = Path(db_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.create_function("contains_ci", 2, _contains_ci, deterministic=True)
    conn.create_function("price_text", 1, price_text, deterministic=True)
    _init_db(conn)
    return conn


def _init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id INTEGER PRIMARY KEY,
            title TEXT NOT NULL,
            description TEXT NOT NULL,
            price REAL,
            category TEXT NOT NULL,
            date_of_sale TEXT,
            sold INTEGER NOT NULL
        )
        """
    )
    conn.commit()


def _row_to_transaction(row) -> Transaction:
    return Transaction(
        id=int(row[0]),
        title=row[1],
        description=row[2],
        price=float(row[3]) if row[3] is not None else None,
        category=row[4],
        date_of_sale=datetime.fromisoformat(row[5]) if row[5] else None,
        sold=bool(row[6]),
    )


def replace_transactions(transactions: Iterable[Transaction], db_path: str) -> int:
    """Replace the whole collection with *transactions*.

    The delete and the insert share one SQLite transaction, so a failed
    insert leaves the previous contents in place.

    Returns the number of inserted rows.
    """
    rows = [
        (
            tx.title,
            tx.description,
            tx.price,
            tx.category,
            tx.date_of_sale.isoformat() if tx.date_of_sale else None,
            int(tx.sold),
        )
        for tx in transactions
    ]
    try:
        conn = _connect(db_path)
    except sqlite3.Error as exc:
        raise StoreWriteError(f"Could not open store {db_path}: {exc}") from exc
    try:
        with conn:
            deleted = conn.execute("DELETE FROM transactions").rowcount
            conn.executemany(
                """
                INSERT INTO transactions
                (title, description, price, category, date_of_sale, sold)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                rows,
            )
    except sqlite3.Error as exc:
        raise StoreWriteError(f"Failed to replace transactions: {exc}") from exc
    finally:
        conn.close()
    logger.info("Replaced %d stored transaction(s) with %d", deleted, len(rows))
    return len(rows)


def _build_filters(filt: TransactionFilter | None, *, with_search: bool = True) -> tuple[str, list]:
    conditions: list[str] = []
    params: list = []
    if filt is not None:
        conditions.append("CAST(strftime('%m', date_of_sale) AS INTEGER) = ?")
        params.append(filt.month)
        search = filt.search.strip().casefold() if with_search else ""
        if search:
            conditions.append(
                "(contains_ci(title, ?) OR contains_ci(description, ?)"
                " OR contains_ci(price_text(price), ?))"
            )
            params.extend([search, search, search])
    where = " WHERE " + " AND ".join(conditions) if conditions else ""
    return where, params


def _read(db_path: str, sql: str, params: list) -> list:
    try:
        conn = _connect(db_path)
    except sqlite3.Error as exc:
        raise StoreReadError(f"Could not open store {db_path}: {exc}") from exc
    try:
        return conn.execute(sql, params).fetchall()
    except (sqlite3.Error, OverflowError) as exc:
        raise StoreReadError(f"Query failed: {exc}") from exc
    finally:
        conn.close()


def count_transactions(db_path: str, filt: TransactionFilter | None = None) -> int:
    """Count stored transactions, optionally restricted by *filt*."""
    where, params = _build_filters(filt)
    row = _read(db_path, f"SELECT COUNT(*) FROM transactions{where}", params)[0]
    return int(row[0] or 0)


def query_transactions(
    db_path: str,
    filt: TransactionFilter | None = None,
    limit: int | None = None,
    offset: int = 0,
) -> List[Transaction]:
    """Return matching transactions in insertion order.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file.
    filt:
        Month and search text to match; ``None`` returns everything.
    limit, offset:
        Slice of the ordered result to return.
    """
    where, params = _build_filters(filt)
    sql = (
        "SELECT id, title, description, price, category, date_of_sale, sold"
        f" FROM transactions{where} ORDER BY id"
    )
    if limit is not None:
        sql += " LIMIT ? OFFSET ?"
        params = params + [limit, offset]
    elif offset:
        sql += " LIMIT -1 OFFSET ?"
        params = params + [offset]
    return [_row_to_transaction(row) for row in _read(db_path, sql, params)]


def sales_statistics(db_path: str, filt: TransactionFilter) -> Dict[str, object]:
    """Total sold amount plus sold / not sold counts for the month."""
    where, params = _build_filters(filt, with_search=False)
    row = _read(
        db_path,
        f"""
        SELECT COALESCE(SUM(CASE WHEN sold THEN price END), 0) AS total,
               COALESCE(SUM(CASE WHEN sold THEN 1 ELSE 0 END), 0) AS sold_count,
               COALESCE(SUM(CASE WHEN sold THEN 0 ELSE 1 END), 0) AS unsold_count
        FROM transactions
        {where}
        """,
        params,
    )[0]
    return {
        "totalSales": float(row[0] or 0),
        "totalSoldItems": int(row[1]),
        "totalNotSoldItems": int(row[2]),
    }


def price_range_counts(db_path: str, filt: TransactionFilter) -> List[int]:
    """Count matching transactions per entry of PRICE_RANGES."""
    where, params = _build_filters(filt, with_search=False)
    where += " AND price IS NOT NULL" if where else " WHERE price IS NOT NULL"
    rows = _read(
        db_path,
        f"""
        SELECT {_price_bucket_expression()} AS bucket,
               COUNT(*) AS count
        FROM transactions
        {where}
        GROUP BY bucket
        """,
        params,
    )
    counts = [0] * len(PRICE_RANGES)
    for bucket, count in rows:
        counts[int(bucket)] = int(count)
    return counts


def category_counts(db_path: str, filt: TransactionFilter) -> List[Dict[str, object]]:
    """Number of matching transactions per category."""
    where, params = _build_filters(filt, with_search=False)
    rows = _read(
        db_path,
        f"""
        SELECT category, COUNT(*) AS count
        FROM transactions
        {where}
        GROUP BY category
        ORDER BY category
        """,
        params,
    )
    return [
        {"_id": row[0], "category": row[0], "count": int(row[1])}
        for row in rows
    ]
