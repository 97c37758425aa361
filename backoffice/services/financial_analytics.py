"""
Financial Analytics

Invoice revenue against expenses for the period, with the pending, paid and
overdue invoice lists.
"""
from backoffice.schemas.analytics import Domain, DomainSnapshot, FinancialOverview
from backoffice.services.base_aggregator import BaseAggregator
from backoffice.utils.metrics import safe_divide, round_metric
from backoffice.utils.periods import Period


class FinancialAggregator(BaseAggregator):
    domain = Domain.FINANCIAL

    def _aggregate(self, period: Period) -> DomainSnapshot:
        repo = self.repository

        total_revenue = repo.sum_invoices('paid', period.start, period.end)
        total_expenses = repo.sum_expenses(period.start, period.end)
        net_income = total_revenue - total_expenses

        pending = repo.invoices('pending', period.start, period.end)
        paid = repo.invoices('paid', period.start, period.end)
        overdue = repo.invoices('overdue', period.start, period.end)

        overview = FinancialOverview(
            total_revenue=round_metric(total_revenue),
            total_expenses=round_metric(total_expenses),
            net_income=round_metric(net_income),
            profit_margin=round_metric(safe_divide(net_income, total_revenue)),
            pending_amount=round_metric(sum(i.amount for i in pending)),
            overdue_amount=round_metric(sum(i.amount for i in overdue)),
        )

        return DomainSnapshot(
            domain=self.domain,
            period=period,
            overview=overview,
            breakdowns={
                "pendingInvoices": pending,
                "paidInvoices": paid,
                "overdueInvoices": overdue,
            },
        )
