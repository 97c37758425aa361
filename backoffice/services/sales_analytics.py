"""
Sales Analytics

Revenue, order volume and AOV for the period, with the top products,
category split and daily revenue series.
"""
from backoffice.schemas.analytics import Domain, DomainSnapshot, SalesOverview
from backoffice.services.base_aggregator import BaseAggregator
from backoffice.utils.metrics import round_metric
from backoffice.utils.periods import Period


class SalesAggregator(BaseAggregator):
    domain = Domain.SALES

    def _aggregate(self, period: Period) -> DomainSnapshot:
        repo = self.repository

        total_sales, total_orders, average_order_value = repo.order_totals(period.start, period.end)

        overview = SalesOverview(
            total_sales=round_metric(total_sales),
            total_orders=total_orders,
            average_order_value=round_metric(average_order_value),
        )

        return DomainSnapshot(
            domain=self.domain,
            period=period,
            overview=overview,
            breakdowns={
                "salesByProduct": repo.top_products_by_revenue(period.start, period.end, self.top_n),
                "salesByCategory": repo.revenue_by_category(period.start, period.end),
                "salesByDay": repo.revenue_by_day(period.start, period.end),
            },
        )
