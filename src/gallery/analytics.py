"""Sales analytics over the ArtworkSale projection.

Rankings are computed per request for a rolling period: top artists and top
artworks by revenue, and top categories (artwork medium) by number of sales.
"""

from collections import defaultdict
from datetime import UTC, datetime, timedelta

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from gallery.projections.artwork_sales import ArtworkSale
from shared.paging import iterate

PERIODS = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
    "quarter": timedelta(days=90),
    "year": timedelta(days=365),
    "all": None,
}
DEFAULT_PERIOD = "month"
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
REPORT_LIMIT = 5
UNCATEGORIZED = "uncategorized"


def _validate(period: str, limit: int) -> None:
    if period not in PERIODS:
        raise ValidationError({"period": [f"Period must be one of: {', '.join(PERIODS)}"]})
    if not 1 <= limit <= MAX_LIMIT:
        raise ValidationError({"limit": [f"Limit must be between 1 and {MAX_LIMIT}"]})


def _sales(period: str) -> list:
    query = current_domain.repository_for(ArtworkSale)._dao.query
    window = PERIODS[period]
    if window is not None:
        query = query.filter(sold_at__gte=datetime.now(UTC) - window)
    return list(iterate(query))


def _ranked(groups: dict, limit: int, key) -> list[dict]:
    rows = []
    for group in groups.values():
        group["total_revenue"] = round(group["total_revenue"], 2)
        group["average_price"] = round(group["total_revenue"] / group["sales_count"], 2)
        rows.append(group)
    rows.sort(key=key, reverse=True)
    return rows[:limit]


def top_selling_artists(period: str = DEFAULT_PERIOD, limit: int = DEFAULT_LIMIT) -> list[dict]:
    _validate(period, limit)
    groups = {}
    for sale in _sales(period):
        group = groups.setdefault(
            str(sale.artist_id),
            {
                "artist_id": str(sale.artist_id),
                "artist_name": sale.artist_name,
                "sales_count": 0,
                "total_revenue": 0.0,
            },
        )
        group["sales_count"] += 1
        group["total_revenue"] += sale.price
    return _ranked(groups, limit, key=lambda row: (row["total_revenue"], row["sales_count"]))


def top_selling_artworks(period: str = DEFAULT_PERIOD, limit: int = DEFAULT_LIMIT) -> list[dict]:
    _validate(period, limit)
    groups = {}
    for sale in _sales(period):
        group = groups.setdefault(
            str(sale.artwork_id),
            {
                "artwork_id": str(sale.artwork_id),
                "title": sale.title,
                "artist_id": str(sale.artist_id),
                "medium": sale.medium,
                "sales_count": 0,
                "total_revenue": 0.0,
            },
        )
        group["sales_count"] += 1
        group["total_revenue"] += sale.price
    return _ranked(groups, limit, key=lambda row: (row["total_revenue"], row["sales_count"]))


def top_selling_categories(period: str = DEFAULT_PERIOD, limit: int = DEFAULT_LIMIT) -> list[dict]:
    _validate(period, limit)
    groups = {}
    artists = defaultdict(set)
    for sale in _sales(period):
        category = (sale.medium or UNCATEGORIZED).lower()
        group = groups.setdefault(
            category,
            {"category": category, "sales_count": 0, "total_revenue": 0.0},
        )
        group["sales_count"] += 1
        group["total_revenue"] += sale.price
        artists[category].add(str(sale.artist_id))

    ranked = _ranked(groups, limit, key=lambda row: (row["sales_count"], row["total_revenue"]))
    for row in ranked:
        row["artist_count"] = len(artists[row["category"]])
    return ranked


def sales_report(period: str = DEFAULT_PERIOD) -> dict:
    """Top five of each ranking plus period totals."""
    _validate(period, REPORT_LIMIT)
    sales = _sales(period)
    return {
        "period": period,
        "generated_at": datetime.now(UTC),
        "summary": {
            "total_sales": len(sales),
            "total_revenue": round(sum(sale.price for sale in sales), 2),
        },
        "top_artists": top_selling_artists(period, REPORT_LIMIT),
        "top_artworks": top_selling_artworks(period, REPORT_LIMIT),
        "top_categories": top_selling_categories(period, REPORT_LIMIT),
    }
