"""
Metric derivation helpers

Pure functions shared by the domain aggregators. No database access here,
so everything can be unit tested on plain numbers.
"""
from typing import Iterable, Optional, Sequence

LTV_THRESHOLDS = (100, 500)
LTV_LABELS = ("Low", "Medium", "High")

# Turnover proxy: average inventory is approximated as (stock + 10) / 2
TURNOVER_STOCK_OFFSET = 10


def safe_divide(numerator: Optional[float], denominator: Optional[float], scale: float = 100) -> float:
    """Return numerator / denominator * scale, or 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return (numerator or 0) / denominator * scale


def percentage_growth(current: Optional[float], previous: Optional[float]) -> float:
    """Percent change from previous to current (0 if there is no previous value)."""
    if not previous:
        return 0.0
    return safe_divide((current or 0) - previous, abs(previous))


def bucketize(value: float, thresholds: Sequence[float], labels: Sequence[str]) -> str:
    """
    Ordered threshold lookup.

    ``labels[i]`` is returned for the first threshold with ``value < thresholds[i]``;
    values at or above the last threshold get the last label, so there must be
    exactly one more label than thresholds.
    """
    if len(labels) != len(thresholds) + 1:
        raise ValueError("bucketize needs exactly one more label than thresholds")
    for threshold, label in zip(thresholds, labels):
        if value < threshold:
            return label
    return labels[-1]


def ltv_bucket(total_spent: Optional[float]) -> str:
    """Lifetime value bucket: Low < $100, Medium < $500, else High."""
    return bucketize(total_spent or 0, LTV_THRESHOLDS, LTV_LABELS)


def churn_rate(total_customers: int, new_customers: int, returning_customers: int) -> float:
    """
    Share of previously existing customers that did not come back, in percent.

    previous = total - new, lost = previous - returning.
    Zero whenever there is no customer base to lose.
    """
    if total_customers == 0:
        return 0.0
    previous_customers = total_customers - new_customers
    if previous_customers <= 0:
        return 0.0
    lost_customers = previous_customers - returning_customers
    return safe_divide(lost_customers, previous_customers)


def product_turnover(quantity_sold: Optional[float], stock: Optional[int]) -> Optional[float]:
    """Quantity sold over the (stock + 10) / 2 proxy for average inventory."""
    if quantity_sold is None:
        return None
    average_inventory = ((stock or 0) + TURNOVER_STOCK_OFFSET) / 2
    return safe_divide(quantity_sold, average_inventory, scale=1)


def average(values: Iterable[Optional[float]]) -> float:
    """Mean of the non-None values, 0 for an empty input."""
    present = [v for v in values if v is not None]
    if not present:
        return 0.0
    return sum(present) / len(present)


def round_metric(value: Optional[float], places: int = 2) -> float:
    """Round for display; None becomes 0."""
    if value is None:
        return 0.0
    return round(float(value), places)


def inventory_value(stock_total: Optional[float], price_total: Optional[float]) -> float:
    """Stock on hand valued as sum(stock) * sum(price)."""
    return (stock_total or 0) * (price_total or 0)
