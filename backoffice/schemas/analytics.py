"""
Analytics snapshot types

Overview records and breakdown rows are pydantic models so they serialize to
the camelCase shape the dashboard expects. DomainSnapshot itself is a frozen
dataclass assembled by the aggregators.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from backoffice.utils.periods import Period


class Domain(str, Enum):
    SALES = "sales"
    CUSTOMER = "customer"
    INVENTORY = "inventory"
    MARKETING = "marketing"
    FINANCIAL = "financial"


class Record(BaseModel):
    """Immutable record serialized with camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ── Overviews ──────────────────────────────────────────

class SalesOverview(Record):
    total_sales: float = 0.0
    total_orders: int = 0
    average_order_value: float = 0.0


class CustomerOverview(Record):
    total_customers: int = 0
    new_customers: int = 0
    returning_customers: int = 0
    churn_rate: float = 0.0


class InventoryOverview(Record):
    total_products: int = 0
    low_stock_products: int = 0
    out_of_stock_products: int = 0
    inventory_value: float = 0.0
    inventory_turnover: float = 0.0


class MarketingOverview(Record):
    total_campaigns: int = 0
    active_campaigns: int = 0
    total_promo_usage: int = 0
    email_open_rate: float = 0.0
    email_click_rate: float = 0.0


class FinancialOverview(Record):
    total_revenue: float = 0.0
    total_expenses: float = 0.0
    net_income: float = 0.0
    profit_margin: float = 0.0
    pending_amount: float = 0.0
    overdue_amount: float = 0.0


Overview = Union[SalesOverview, CustomerOverview, InventoryOverview, MarketingOverview, FinancialOverview]


# ── Breakdown rows ─────────────────────────────────────

class ProductSalesRow(Record):
    product_id: int
    name: Optional[str] = None
    revenue: float = 0.0
    quantity: int = 0


class CategorySalesRow(Record):
    category: Optional[str] = None
    total: float = 0.0


class DailySalesRow(Record):
    date: str
    total: float = 0.0


class TopCustomerRow(Record):
    customer_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    total_spent: float = 0.0
    order_count: int = 0


class LocationCountRow(Record):
    location: Optional[str] = None
    count: int = 0


class LTVBucketRow(Record):
    ltv_category: str
    count: int = 0


class TopSellingProductRow(Record):
    product_id: int
    name: Optional[str] = None
    quantity_sold: int = 0


class StockRow(Record):
    id: int
    name: str
    sku: Optional[str] = None
    category: Optional[str] = None
    price: float = 0.0
    stock: int = 0


class CampaignRow(Record):
    id: int
    name: str
    status: Optional[str] = None
    budget: Optional[float] = None
    channels: Optional[List[Any]] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    created_at: datetime


class PromotionRow(Record):
    id: int
    name: str
    code: Optional[str] = None
    type: Optional[str] = None
    value: Optional[float] = None
    status: Optional[str] = None
    usage_limit: Optional[int] = None
    usage_count: int = 0
    created_at: datetime


class EmailCampaignRow(Record):
    id: int
    name: str
    subject: Optional[str] = None
    status: Optional[str] = None
    sent_count: int = 0
    open_count: int = 0
    click_count: int = 0
    sent_at: Optional[datetime] = None
    created_at: datetime


class SocialPostRow(Record):
    id: int
    content: Optional[str] = None
    platforms: Optional[List[Any]] = None
    status: Optional[str] = None
    published_at: Optional[datetime] = None
    created_at: datetime


class InvoiceRow(Record):
    id: int
    number: Optional[str] = None
    customer_id: Optional[int] = None
    amount: float = 0.0
    status: str
    date: datetime
    due_date: Optional[datetime] = None


# ── Snapshot ───────────────────────────────────────────

@dataclass(frozen=True)
class DomainSnapshot:
    """Overview + breakdowns for one domain over one period."""
    domain: Domain
    period: Period
    overview: Overview
    breakdowns: Mapping[str, Tuple[Record, ...]] = field(default_factory=dict)

    def __post_init__(self):
        frozen = {name: tuple(rows) for name, rows in self.breakdowns.items()}
        object.__setattr__(self, "breakdowns", MappingProxyType(frozen))

    def overview_items(self) -> List[Tuple[str, Any]]:
        """Overview metrics as ordered (metric, value) pairs."""
        return list(self.overview.to_dict().items())

    def to_response(self) -> Dict[str, Any]:
        """`{overview, ...breakdowns}` payload for the dashboard."""
        payload: Dict[str, Any] = {"overview": self.overview.to_dict()}
        for name, rows in self.breakdowns.items():
            payload[name] = [row.to_dict() for row in rows]
        return payload
