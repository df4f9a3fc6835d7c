import json
import logging
import urllib.error
import urllib.request
from typing import Dict, List

from transaction_dashboard.config import DEFAULT_SEED_URL
from transaction_dashboard.core.models import Transaction
from transaction_dashboard.database import replace_transactions
from transaction_dashboard.errors import StoreWriteError, UpstreamFetchError

logger = logging.getLogger(__name__)


def fetch_seed_data(url: str = DEFAULT_SEED_URL, timeout: float = 30.0) -> List[dict]:
    """Download the seed feed and return its JSON array."""
    req = urllib.request.Request(url, method="GET")
    req.add_header("Accept", "application/json")
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            payload = json.load(resp)
    except urllib.error.HTTPError as exc:
        raise UpstreamFetchError(f"Seed source {url} answered {exc.code}") from exc
    except (urllib.error.URLError, OSError) as exc:
        raise UpstreamFetchError(f"Could not reach seed source {url}: {exc}") from exc
    except ValueError as exc:
        raise UpstreamFetchError(f"Seed source {url} returned invalid JSON") from exc

    if not isinstance(payload, list):
        raise UpstreamFetchError(
            f"Seed source {url} returned {type(payload).__name__}, expected a list"
        )
    return payload


def initialize_store(
    db_path: str,
    url: str = DEFAULT_SEED_URL,
    timeout: float = 30.0,
) -> Dict[str, object]:
    """
    Fetch the seed feed and replace the stored transactions with it.
    Nothing is deleted unless the fetch and every cast succeed.
    """
    records = fetch_seed_data(url, timeout=timeout)
    logger.info("Fetched %d seed record(s) from %s", len(records), url)

    transactions = []
    for idx, record in enumerate(records):
        try:
            transactions.append(Transaction.from_record(record))
        except (TypeError, ValueError) as exc:
            raise StoreWriteError(f"Seed record {idx} could not be stored: {exc}") from exc

    count = replace_transactions(transactions, db_path)
    return {"message": "Database initialized with seed data.", "count": count}
