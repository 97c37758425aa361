"""
Report Datasets

Builds the flat metric/value tables that exporters render. Domain reports
flatten a snapshot's overview; financial statements are derived from the
finance and inventory figures plus comparison rows against the previous
window of the same length.
"""
from typing import Callable, Dict

from backoffice.schemas.analytics import DomainSnapshot
from backoffice.schemas.reports import FinancialStatement, ReportDataset, ReportRow
from backoffice.services.analytics_repository import AnalyticsRepository
from backoffice.services.errors import AnalyticsError, UpstreamFailureError
from backoffice.services.financial_analytics import FinancialAggregator
from backoffice.utils.logger import log
from backoffice.utils.metrics import inventory_value, percentage_growth, round_metric
from backoffice.utils.periods import Period

DOMAIN_TITLES = {
    "sales": "Sales Report",
    "customer": "Customer Report",
    "inventory": "Inventory Report",
    "marketing": "Marketing Report",
    "financial": "Financial Report",
}

STATEMENT_TITLES = {
    FinancialStatement.INCOME_STATEMENT: "Income Statement",
    FinancialStatement.BALANCE_SHEET: "Balance Sheet",
    FinancialStatement.CASH_FLOW: "Cash Flow Statement",
}


def _window_label(period: Period) -> str:
    return f"{period.start:%Y-%m-%d} to {period.end:%Y-%m-%d}"


def snapshot_dataset(snapshot: DomainSnapshot) -> ReportDataset:
    """Overview metrics of a snapshot, in overview order. Breakdowns are not exported."""
    return ReportDataset(
        title=DOMAIN_TITLES.get(snapshot.domain.value, "Report"),
        subtitle=_window_label(snapshot.period),
        rows=[ReportRow(metric=k, value=v) for k, v in snapshot.overview_items()],
    )


class StatementBuilder:
    """Financial statement datasets over an AnalyticsRepository."""

    def __init__(self, repository: AnalyticsRepository):
        self.repository = repository

    def build(self, statement: FinancialStatement, period: Period) -> ReportDataset:
        builders: Dict[FinancialStatement, Callable[[Period], list]] = {
            FinancialStatement.INCOME_STATEMENT: self.income_statement,
            FinancialStatement.BALANCE_SHEET: self.balance_sheet,
            FinancialStatement.CASH_FLOW: self.cash_flow,
        }
        try:
            rows = builders[statement](period)
        except AnalyticsError:
            raise
        except Exception as e:
            log.error(f"{statement.value} build failed for {period.token}: {e}")
            raise UpstreamFailureError("Failed to fetch financial analytics") from e

        if statement == FinancialStatement.BALANCE_SHEET:
            subtitle = f"As of {period.end:%Y-%m-%d}"
        else:
            subtitle = _window_label(period)
        return ReportDataset(title=STATEMENT_TITLES[statement], subtitle=subtitle, rows=rows)

    def income_statement(self, period: Period) -> list:
        """Revenue, expenses by category, net income, margin and revenue growth."""
        overview = FinancialAggregator(self.repository).aggregate(period).overview
        previous = period.previous()
        previous_revenue = self.repository.sum_invoices('paid', previous.start, previous.end)

        rows = [ReportRow("totalRevenue", overview.total_revenue)]
        for category, amount in self.repository.expenses_by_category(period.start, period.end):
            rows.append(ReportRow(f"expense_{category}", round_metric(amount)))
        rows += [
            ReportRow("totalExpenses", overview.total_expenses),
            ReportRow("netIncome", overview.net_income),
            ReportRow("profitMargin", overview.profit_margin),
            ReportRow("previousRevenue", round_metric(previous_revenue)),
            ReportRow("revenueGrowth", round_metric(percentage_growth(overview.total_revenue, previous_revenue))),
        ]
        return rows

    def balance_sheet(self, period: Period) -> list:
        """Point-in-time position as of the end of the period."""
        repo = self.repository
        end = period.end

        collected = repo.sum_invoices('paid', end=end)
        spent = repo.sum_expenses(end=end)
        pending = repo.sum_invoices('pending', end=end)
        overdue = repo.sum_invoices('overdue', end=end)
        stock_total, price_total = repo.stock_and_price_totals()

        cash = collected - spent
        receivables = pending + overdue
        stock_value = inventory_value(stock_total, price_total)

        return [
            ReportRow("cash", round_metric(cash)),
            ReportRow("accountsReceivable", round_metric(receivables)),
            ReportRow("overdueReceivables", round_metric(overdue)),
            ReportRow("inventoryValue", round_metric(stock_value)),
            ReportRow("totalAssets", round_metric(cash + receivables + stock_value)),
        ]

    def cash_flow(self, period: Period) -> list:
        """Cash in (paid invoices) against cash out (expenses), with growth vs the previous window."""
        repo = self.repository
        previous = period.previous()

        cash_in = repo.sum_invoices('paid', period.start, period.end)
        cash_out = repo.sum_expenses(period.start, period.end)
        prev_in = repo.sum_invoices('paid', previous.start, previous.end)
        prev_out = repo.sum_expenses(previous.start, previous.end)

        net = cash_in - cash_out
        prev_net = prev_in - prev_out

        return [
            ReportRow("cashIn", round_metric(cash_in)),
            ReportRow("cashOut", round_metric(cash_out)),
            ReportRow("netCashFlow", round_metric(net)),
            ReportRow("cashInGrowth", round_metric(percentage_growth(cash_in, prev_in))),
            ReportRow("cashOutGrowth", round_metric(percentage_growth(cash_out, prev_out))),
            ReportRow("netCashFlowGrowth", round_metric(percentage_growth(net, prev_net))),
        ]
