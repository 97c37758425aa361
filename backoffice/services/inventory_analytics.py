"""
Inventory Analytics

Stock health (low / out of stock), inventory value and turnover, plus the
best sellers for the period and the products about to run out.

Note: inventory value is sum(stock) * sum(price) and turnover uses the
(stock + 10) / 2 average-inventory proxy. Both are kept as the dashboard
has always reported them.
"""
from backoffice.config import get_settings
from backoffice.schemas.analytics import Domain, DomainSnapshot, InventoryOverview
from backoffice.services.base_aggregator import BaseAggregator
from backoffice.utils.metrics import average, inventory_value, product_turnover, round_metric
from backoffice.utils.periods import Period


class InventoryAggregator(BaseAggregator):
    domain = Domain.INVENTORY

    def __init__(self, repository, top_n: int = None, low_stock_threshold: int = None):
        super().__init__(repository, top_n)
        self.low_stock_threshold = low_stock_threshold or get_settings().low_stock_threshold

    def _aggregate(self, period: Period) -> DomainSnapshot:
        repo = self.repository

        stock_total, price_total = repo.stock_and_price_totals()
        turnover = average(
            product_turnover(sold, stock) for stock, sold in repo.product_sales_volume()
        )

        overview = InventoryOverview(
            total_products=repo.count_products(),
            low_stock_products=repo.count_low_stock(self.low_stock_threshold),
            out_of_stock_products=repo.count_out_of_stock(),
            inventory_value=round_metric(inventory_value(stock_total, price_total)),
            inventory_turnover=round_metric(turnover),
        )

        low_stock = [
            p for p in repo.low_stock_products(self.low_stock_threshold, self.top_n)
            if 0 < p.stock < self.low_stock_threshold
        ]

        return DomainSnapshot(
            domain=self.domain,
            period=period,
            overview=overview,
            breakdowns={
                "topSellingProducts": repo.top_products_by_quantity(period.start, period.end, self.top_n),
                "lowStockProducts": low_stock,
            },
        )
