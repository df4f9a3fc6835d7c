from __future__ import annotations

import json
import logging
import urllib.error
import urllib.parse
import urllib.request
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List

import anyio

from transaction_dashboard.core.months import month_name, parse_month
from transaction_dashboard.database import price_range_labels
from transaction_dashboard.errors import FetchError, InvalidQueryError

logger = logging.getLogger(__name__)

DEFAULT_MONTH = "March"

Fetch = Callable[[str, Dict[str, Any]], Awaitable[Any]]


@dataclass
class HttpFetcher:
    """Calls the dashboard API; blocking requests run in a worker thread."""

    base_url: str
    timeout: float = 30.0

    async def __call__(self, path: str, params: Dict[str, Any]) -> Any:
        return await anyio.to_thread.run_sync(self._get_json, path, params)

    def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        query = urllib.parse.urlencode(params)
        url = f"{self.base_url.rstrip('/')}{path}"
        if query:
            url = f"{url}?{query}"
        req = urllib.request.Request(url, method="GET")
        req.add_header("Accept", "application/json")
        try:
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                return json.load(resp)
        except urllib.error.HTTPError as exc:
            raise FetchError(f"GET {path} answered {exc.code}") from exc
        except (urllib.error.URLError, OSError) as exc:
            raise FetchError(f"GET {path} failed: {exc}") from exc
        except ValueError as exc:
            raise FetchError(f"GET {path} returned invalid JSON") from exc


class DashboardClient:
    """
    Dashboard state plus the four API reads that feed it.

    Every refresh takes a new generation number; a response that arrives
    after a newer refresh started is dropped, so state always reflects the
    latest month and search values.
    """

    def __init__(self, fetch: Fetch, month: str = DEFAULT_MONTH, search: str = "") -> None:
        self._fetch = fetch
        self.month = month
        self.search = search
        self.transactions: List[dict] = []
        self.statistics: Dict[str, Any] = {}
        self.bar_chart: List[int] = []
        self.pie_chart: List[dict] = []
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    async def mount(self) -> None:
        await self.refresh()

    async def set_month(self, month: str) -> None:
        self.month = month
        await self.refresh()

    async def set_search(self, search: str) -> None:
        self.search = search
        await self.refresh()

    async def refresh(self) -> None:
        self._generation += 1
        generation = self._generation
        month, search = self.month, self.search
        requests = [
            ("transactions", "/transactions", {"month": month, "search": search}),
            ("statistics", "/statistics", {"month": month}),
            ("bar_chart", "/bar-chart", {"month": month}),
            ("pie_chart", "/pie-chart", {"month": month}),
        ]
        async with anyio.create_task_group() as tg:
            for attr, path, params in requests:
                tg.start_soon(self._load, generation, attr, path, params)

    async def _load(self, generation: int, attr: str, path: str, params: Dict[str, Any]) -> None:
        try:
            payload = await self._fetch(path, params)
        except FetchError as exc:
            logger.error("Error fetching %s: %s", path, exc)
            return
        except Exception:
            logger.exception("Unexpected error fetching %s", path)
            return
        if generation != self._generation:
            logger.debug("Discarding stale %s response (generation %d)", path, generation)
            return
        setattr(self, attr, payload)


def _format_sale_date(value: str | None) -> str:
    if not value:
        return ""
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return parsed.date().isoformat()


def _format_amount(value: Any) -> str:
    if value is None:
        return ""
    return f"${float(value):,.2f}"


def _truncate(text: str, width: int) -> str:
    text = " ".join(str(text).split())
    return text if len(text) <= width else text[: width - 3] + "..."


def render_dashboard(client: DashboardClient, bar_width: int = 40) -> str:
    """Render the table, statistics and both charts as plain text."""
    lines = ["Transactions Dashboard", ""]
    try:
        month_label = month_name(parse_month(client.month))
    except InvalidQueryError:
        month_label = client.month
    lines.append(f"Month: {month_label}    Search: {client.search or '-'}")
    lines.append("")

    header = f"{'Title':<30} {'Description':<40} {'Price':>12} {'Date of Sale':<12} Sold"
    lines.append(header)
    lines.append("-" * len(header))
    for tx in client.transactions:
        lines.append(
            f"{_truncate(tx.get('title', ''), 30):<30} "
            f"{_truncate(tx.get('description', ''), 40):<40} "
            f"{_format_amount(tx.get('price')):>12} "
            f"{_format_sale_date(tx.get('dateOfSale')):<12} "
            f"{'Yes' if tx.get('sold') else 'No'}"
        )
    if not client.transactions:
        lines.append("(no transactions)")
    lines.append("")

    stats = client.statistics
    lines.append(f"Total Sales Amount: {_format_amount(stats.get('totalSales', 0))}")
    lines.append(f"Total Sold Items: {stats.get('totalSoldItems', 0)}")
    lines.append(f"Total Not Sold Items: {stats.get('totalNotSoldItems', 0)}")
    lines.append("")

    lines.append("Price Range Distribution")
    counts = list(client.bar_chart) or [0] * len(price_range_labels())
    peak = max(counts) or 1
    for label, count in zip(price_range_labels(), counts):
        bar = "#" * round(count / peak * bar_width)
        lines.append(f"{label:>8} | {bar} {count}")
    lines.append("")

    lines.append("Category Distribution")
    total = sum(int(item.get("count", 0)) for item in client.pie_chart)
    for item in client.pie_chart:
        count = int(item.get("count", 0))
        share = count / total * 100 if total else 0.0
        name = item.get("category", item.get("_id"))
        lines.append(f"{str(name):<30} {count:>5} ({share:.1f}%)")
    if not client.pie_chart:
        lines.append("(no categories)")
    return "\n".join(lines)
