"""
Analytics Repository

Single query interface the domain aggregators read through. Aggregators never
touch the ORM directly, so they can be exercised against an in-memory fake.

SqlAnalyticsRepository implements the interface over the storefront,
marketing and finance tables with SQLAlchemy aggregate queries.
"""
from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy import func, and_, desc, asc, true
from sqlalchemy.orm import Session

from backoffice.models.commerce import Customer, Product, Order, OrderItem
from backoffice.models.marketing import Campaign, Promotion, EmailCampaign, SocialMediaPost
from backoffice.models.finance import Invoice, Expense
from backoffice.schemas.analytics import (
    ProductSalesRow,
    CategorySalesRow,
    DailySalesRow,
    TopCustomerRow,
    LocationCountRow,
    TopSellingProductRow,
    StockRow,
    CampaignRow,
    PromotionRow,
    EmailCampaignRow,
    SocialPostRow,
    InvoiceRow,
)


class AnalyticsRepository(ABC):
    """
    Read-only query capabilities needed by the five domain aggregators.

    Window arguments are inclusive ``[start, end]`` datetimes. Methods return
    plain numbers or typed rows, never ORM objects.
    """

    # ── Sales ──

    @abstractmethod
    def order_totals(self, start: datetime, end: datetime) -> Tuple[float, int, float]:
        """(revenue sum, order count, average order value) for orders in the window."""

    @abstractmethod
    def top_products_by_revenue(self, start: datetime, end: datetime, limit: int) -> List[ProductSalesRow]:
        """Products ranked by line revenue, highest first."""

    @abstractmethod
    def revenue_by_category(self, start: datetime, end: datetime) -> List[CategorySalesRow]:
        """Line revenue grouped by product category, highest first."""

    @abstractmethod
    def revenue_by_day(self, start: datetime, end: datetime) -> List[DailySalesRow]:
        """Order revenue per calendar day (YYYY-MM-DD), oldest first."""

    # ── Customers ──

    @abstractmethod
    def count_customers(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
        """Customers created in the window, or all customers when no window is given."""

    @abstractmethod
    def count_returning_customers(self, start: datetime, end: datetime) -> int:
        """Customers with more than one order in the window."""

    @abstractmethod
    def top_customers_by_spend(self, start: datetime, end: datetime, limit: int) -> List[TopCustomerRow]:
        """Customers ranked by order total in the window."""

    @abstractmethod
    def customers_by_location(self, start: datetime, end: datetime) -> List[LocationCountRow]:
        """New customers in the window grouped by location, largest first."""

    @abstractmethod
    def customer_lifetime_spend(self) -> List[float]:
        """All-time order total per customer, for customers with at least one order."""

    # ── Inventory ──

    @abstractmethod
    def count_products(self) -> int:
        """All products."""

    @abstractmethod
    def count_low_stock(self, threshold: int) -> int:
        """Products with 0 < stock < threshold."""

    @abstractmethod
    def count_out_of_stock(self) -> int:
        """Products with stock == 0."""

    @abstractmethod
    def stock_and_price_totals(self) -> Tuple[int, float]:
        """(sum of stock, sum of price) over all products."""

    @abstractmethod
    def product_sales_volume(self) -> List[Tuple[int, Optional[int]]]:
        """(stock, all-time quantity sold) per product; quantity is None when never sold."""

    @abstractmethod
    def top_products_by_quantity(self, start: datetime, end: datetime, limit: int) -> List[TopSellingProductRow]:
        """Products ranked by units sold in the window."""

    @abstractmethod
    def low_stock_products(self, threshold: int, limit: int) -> List[StockRow]:
        """Products with 0 < stock < threshold, lowest stock first."""

    # ── Marketing ──

    @abstractmethod
    def campaigns_created(self, start: datetime, end: datetime) -> List[CampaignRow]:
        """Campaigns created in the window, newest first."""

    @abstractmethod
    def promotions_created(self, start: datetime, end: datetime) -> List[PromotionRow]:
        """Promotions created in the window, newest first."""

    @abstractmethod
    def email_campaigns_created(self, start: datetime, end: datetime) -> List[EmailCampaignRow]:
        """Email campaigns created in the window, newest first."""

    @abstractmethod
    def social_posts_created(self, start: datetime, end: datetime) -> List[SocialPostRow]:
        """Social posts created in the window, newest first."""

    # ── Finance ──

    @abstractmethod
    def sum_invoices(self, status: str, start: Optional[datetime] = None, end: Optional[datetime] = None) -> float:
        """Invoice amount total for a status, optionally limited to a window on invoice date."""

    @abstractmethod
    def sum_expenses(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> float:
        """Expense total, optionally limited to a window."""

    @abstractmethod
    def expenses_by_category(self, start: datetime, end: datetime) -> List[Tuple[str, float]]:
        """(category, total) for expenses in the window, largest first."""

    @abstractmethod
    def invoices(self, status: str, start: datetime, end: datetime) -> List[InvoiceRow]:
        """Invoices with a status dated in the window.

        Paid invoices are newest first; pending and overdue are by due date,
        soonest first.
        """


def _window(column, start: Optional[datetime], end: Optional[datetime]):
    """Inclusive window filter on a datetime column."""
    clauses = []
    if start is not None:
        clauses.append(column >= start)
    if end is not None:
        clauses.append(column <= end)
    return and_(*clauses) if clauses else true()


def _day(value) -> str:
    """Normalize DATE() results across dialects (str on SQLite, date on Postgres)."""
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    return str(value)[:10]


class SqlAnalyticsRepository(AnalyticsRepository):
    """AnalyticsRepository backed by a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ── Sales ──

    def order_totals(self, start: datetime, end: datetime) -> Tuple[float, int, float]:
        result = self.db.query(
            func.coalesce(func.sum(Order.total), 0).label('revenue'),
            func.count(Order.id).label('orders'),
            func.coalesce(func.avg(Order.total), 0).label('average'),
        ).filter(
            _window(Order.created_at, start, end)
        ).first()

        return float(result.revenue or 0), int(result.orders or 0), float(result.average or 0)

    def top_products_by_revenue(self, start: datetime, end: datetime, limit: int) -> List[ProductSalesRow]:
        revenue = func.coalesce(func.sum(OrderItem.total), 0).label('revenue')
        results = self.db.query(
            OrderItem.product_id,
            Product.name,
            revenue,
            func.coalesce(func.sum(OrderItem.quantity), 0).label('quantity'),
        ).select_from(OrderItem).join(
            Order, OrderItem.order_id == Order.id
        ).outerjoin(
            Product, OrderItem.product_id == Product.id
        ).filter(
            _window(Order.created_at, start, end)
        ).group_by(
            OrderItem.product_id, Product.name
        ).order_by(
            desc(revenue)
        ).limit(limit).all()

        return [
            ProductSalesRow(
                product_id=r.product_id,
                name=r.name,
                revenue=float(r.revenue or 0),
                quantity=int(r.quantity or 0),
            )
            for r in results
        ]

    def revenue_by_category(self, start: datetime, end: datetime) -> List[CategorySalesRow]:
        total = func.coalesce(func.sum(OrderItem.total), 0).label('total')
        results = self.db.query(
            Product.category,
            total,
        ).select_from(OrderItem).join(
            Product, OrderItem.product_id == Product.id
        ).join(
            Order, OrderItem.order_id == Order.id
        ).filter(
            _window(Order.created_at, start, end)
        ).group_by(
            Product.category
        ).order_by(
            desc(total)
        ).all()

        return [CategorySalesRow(category=r.category, total=float(r.total or 0)) for r in results]

    def revenue_by_day(self, start: datetime, end: datetime) -> List[DailySalesRow]:
        day = func.date(Order.created_at).label('day')
        results = self.db.query(
            day,
            func.coalesce(func.sum(Order.total), 0).label('total'),
        ).filter(
            _window(Order.created_at, start, end)
        ).group_by(
            day
        ).order_by(
            asc(day)
        ).all()

        return [DailySalesRow(date=_day(r.day), total=float(r.total or 0)) for r in results]

    # ── Customers ──

    def count_customers(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> int:
        count = self.db.query(func.count(Customer.id)).filter(
            _window(Customer.created_at, start, end)
        ).scalar()
        return int(count or 0)

    def count_returning_customers(self, start: datetime, end: datetime) -> int:
        repeaters = self.db.query(
            Order.customer_id
        ).filter(
            Order.customer_id.isnot(None),
            _window(Order.created_at, start, end),
        ).group_by(
            Order.customer_id
        ).having(
            func.count(Order.id) > 1
        ).subquery()

        count = self.db.query(func.count()).select_from(repeaters).scalar()
        return int(count or 0)

    def top_customers_by_spend(self, start: datetime, end: datetime, limit: int) -> List[TopCustomerRow]:
        spent = func.coalesce(func.sum(Order.total), 0).label('total_spent')
        results = self.db.query(
            Order.customer_id,
            Customer.name,
            Customer.email,
            spent,
            func.count(Order.id).label('order_count'),
        ).select_from(Order).outerjoin(
            Customer, Order.customer_id == Customer.id
        ).filter(
            _window(Order.created_at, start, end)
        ).group_by(
            Order.customer_id, Customer.name, Customer.email
        ).order_by(
            desc(spent)
        ).limit(limit).all()

        return [
            TopCustomerRow(
                customer_id=r.customer_id,
                name=r.name,
                email=r.email,
                total_spent=float(r.total_spent or 0),
                order_count=int(r.order_count or 0),
            )
            for r in results
        ]

    def customers_by_location(self, start: datetime, end: datetime) -> List[LocationCountRow]:
        count = func.count(Customer.id).label('count')
        results = self.db.query(
            Customer.location,
            count,
        ).filter(
            _window(Customer.created_at, start, end)
        ).group_by(
            Customer.location
        ).order_by(
            desc(count)
        ).all()

        return [LocationCountRow(location=r.location, count=int(r.count or 0)) for r in results]

    def customer_lifetime_spend(self) -> List[float]:
        results = self.db.query(
            func.coalesce(func.sum(Order.total), 0).label('total')
        ).select_from(Customer).join(
            Order, Order.customer_id == Customer.id
        ).group_by(
            Customer.id
        ).all()

        return [float(r.total or 0) for r in results]

    # ── Inventory ──

    def count_products(self) -> int:
        return int(self.db.query(func.count(Product.id)).scalar() or 0)

    def count_low_stock(self, threshold: int) -> int:
        count = self.db.query(func.count(Product.id)).filter(
            Product.stock > 0,
            Product.stock < threshold,
        ).scalar()
        return int(count or 0)

    def count_out_of_stock(self) -> int:
        count = self.db.query(func.count(Product.id)).filter(
            Product.stock == 0
        ).scalar()
        return int(count or 0)

    def stock_and_price_totals(self) -> Tuple[int, float]:
        result = self.db.query(
            func.coalesce(func.sum(Product.stock), 0).label('stock'),
            func.coalesce(func.sum(Product.price), 0).label('price'),
        ).first()
        return int(result.stock or 0), float(result.price or 0)

    def product_sales_volume(self) -> List[Tuple[int, Optional[int]]]:
        results = self.db.query(
            Product.stock,
            func.sum(OrderItem.quantity).label('sold'),
        ).outerjoin(
            OrderItem, OrderItem.product_id == Product.id
        ).group_by(
            Product.id, Product.stock
        ).all()

        return [(int(r.stock or 0), int(r.sold) if r.sold is not None else None) for r in results]

    def top_products_by_quantity(self, start: datetime, end: datetime, limit: int) -> List[TopSellingProductRow]:
        sold = func.coalesce(func.sum(OrderItem.quantity), 0).label('quantity_sold')
        results = self.db.query(
            OrderItem.product_id,
            Product.name,
            sold,
        ).select_from(OrderItem).join(
            Order, OrderItem.order_id == Order.id
        ).outerjoin(
            Product, OrderItem.product_id == Product.id
        ).filter(
            _window(Order.created_at, start, end)
        ).group_by(
            OrderItem.product_id, Product.name
        ).order_by(
            desc(sold)
        ).limit(limit).all()

        return [
            TopSellingProductRow(product_id=r.product_id, name=r.name, quantity_sold=int(r.quantity_sold or 0))
            for r in results
        ]

    def low_stock_products(self, threshold: int, limit: int) -> List[StockRow]:
        products = self.db.query(Product).filter(
            Product.stock > 0,
            Product.stock < threshold,
        ).order_by(
            asc(Product.stock), asc(Product.id)
        ).limit(limit).all()

        return [StockRow.model_validate(p) for p in products]

    # ── Marketing ──

    def campaigns_created(self, start: datetime, end: datetime) -> List[CampaignRow]:
        return [CampaignRow.model_validate(c) for c in self._created(Campaign, start, end)]

    def promotions_created(self, start: datetime, end: datetime) -> List[PromotionRow]:
        return [PromotionRow.model_validate(p) for p in self._created(Promotion, start, end)]

    def email_campaigns_created(self, start: datetime, end: datetime) -> List[EmailCampaignRow]:
        return [EmailCampaignRow.model_validate(e) for e in self._created(EmailCampaign, start, end)]

    def social_posts_created(self, start: datetime, end: datetime) -> List[SocialPostRow]:
        return [SocialPostRow.model_validate(s) for s in self._created(SocialMediaPost, start, end)]

    def _created(self, model, start: datetime, end: datetime):
        return self.db.query(model).filter(
            _window(model.created_at, start, end)
        ).order_by(
            desc(model.created_at), desc(model.id)
        ).all()

    # ── Finance ──

    def sum_invoices(self, status: str, start: Optional[datetime] = None, end: Optional[datetime] = None) -> float:
        total = self.db.query(
            func.coalesce(func.sum(Invoice.amount), 0)
        ).filter(
            Invoice.status == status,
            _window(Invoice.date, start, end),
        ).scalar()
        return float(total or 0)

    def sum_expenses(self, start: Optional[datetime] = None, end: Optional[datetime] = None) -> float:
        total = self.db.query(
            func.coalesce(func.sum(Expense.amount), 0)
        ).filter(
            _window(Expense.date, start, end)
        ).scalar()
        return float(total or 0)

    def expenses_by_category(self, start: datetime, end: datetime) -> List[Tuple[str, float]]:
        total = func.sum(Expense.amount).label('total')
        results = self.db.query(
            Expense.category,
            total,
        ).filter(
            _window(Expense.date, start, end)
        ).group_by(
            Expense.category
        ).order_by(
            desc(total)
        ).all()

        return [(r.category or 'other', float(r.total or 0)) for r in results]

    def invoices(self, status: str, start: datetime, end: datetime) -> List[InvoiceRow]:
        if status == 'paid':
            ordering = (desc(Invoice.date), desc(Invoice.id))
        else:
            ordering = (asc(Invoice.due_date), asc(Invoice.id))

        invoices = self.db.query(Invoice).filter(
            Invoice.status == status,
            _window(Invoice.date, start, end),
        ).order_by(*ordering).all()

        return [InvoiceRow.model_validate(i) for i in invoices]
