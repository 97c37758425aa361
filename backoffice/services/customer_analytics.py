"""
Customer Analytics

Customer base size, acquisition, repeat purchasing and churn, plus the top
spenders, geographic split and lifetime-value buckets.
"""
from collections import Counter

from backoffice.schemas.analytics import Domain, DomainSnapshot, CustomerOverview, LTVBucketRow
from backoffice.services.base_aggregator import BaseAggregator
from backoffice.utils.metrics import churn_rate, ltv_bucket, round_metric, LTV_LABELS
from backoffice.utils.periods import Period


class CustomerAggregator(BaseAggregator):
    domain = Domain.CUSTOMER

    def _aggregate(self, period: Period) -> DomainSnapshot:
        repo = self.repository

        total_customers = repo.count_customers()
        new_customers = repo.count_customers(period.start, period.end)
        returning_customers = repo.count_returning_customers(period.start, period.end)

        overview = CustomerOverview(
            total_customers=total_customers,
            new_customers=new_customers,
            returning_customers=returning_customers,
            churn_rate=round_metric(churn_rate(total_customers, new_customers, returning_customers)),
        )

        return DomainSnapshot(
            domain=self.domain,
            period=period,
            overview=overview,
            breakdowns={
                "topCustomers": repo.top_customers_by_spend(period.start, period.end, self.top_n),
                "customersByLocation": repo.customers_by_location(period.start, period.end),
                "customersByLTV": self._ltv_buckets(),
            },
        )

    def _ltv_buckets(self):
        """Customers per lifetime-value bucket, always Low, Medium, High."""
        counts = Counter(ltv_bucket(spent) for spent in self.repository.customer_lifetime_spend())
        return [LTVBucketRow(ltv_category=label, count=counts.get(label, 0)) for label in LTV_LABELS]
