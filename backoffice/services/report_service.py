"""
Report Service

Compiles a report end to end: validate the request, resolve the period,
build the dataset, render it with the exporter for the requested format and
record the result in the ledger. Every step depends on the previous one, so
the pipeline runs sequentially and stops at the first failure.
"""
from typing import Callable, Dict, Optional

from sqlalchemy.orm import Session

from backoffice.schemas.analytics import Domain
from backoffice.schemas.reports import (
    FinancialStatement,
    ReportArtifact,
    ReportDataset,
    ReportFormat,
    ReportJob,
    ReportLedgerEntry,
)
from backoffice.services.analytics_repository import AnalyticsRepository, SqlAnalyticsRepository
from backoffice.services.analytics_service import build_aggregator, parse_domain
from backoffice.services.errors import AnalyticsError, ExportFailureError, InvalidInputError
from backoffice.services.report_datasets import StatementBuilder, snapshot_dataset
from backoffice.services.report_exporters import ReportExporter, get_exporter
from backoffice.services.report_ledger import ReportLedger
from backoffice.utils.logger import log
from backoffice.utils.periods import Period, resolve_period

# Ledger period for inventory reports (stock on hand, not a window)
CURRENT_PERIOD = "current"


def parse_format(value) -> ReportFormat:
    try:
        return ReportFormat((value or "").strip().lower())
    except ValueError:
        raise InvalidInputError(f"Invalid format: {value}. Use pdf, excel or csv.")


def parse_statement(value) -> FinancialStatement:
    try:
        return FinancialStatement((value or "").strip().lower())
    except ValueError:
        raise InvalidInputError(
            f"Invalid report type: {value}. Use income_statement, balance_sheet or cash_flow."
        )


class ReportCompiler:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        ledger: Optional[ReportLedger] = None,
        exporters: Optional[Dict[ReportFormat, ReportExporter]] = None,
        repository_factory: Callable[[Session], AnalyticsRepository] = SqlAnalyticsRepository,
    ):
        self.session_factory = session_factory
        self.ledger = ledger or ReportLedger(session_factory)
        self.exporters = exporters or {}
        self.repository_factory = repository_factory

    def compile(
        self,
        report_type,
        period_token: Optional[str],
        fmt: str,
        requested_by: str,
        statement: Optional[str] = None,
    ) -> ReportLedgerEntry:
        """
        Generate a report file and record it.

        Args:
            report_type: Domain name (sales, customer, inventory, marketing, financial)
            period_token: week / month / year; anything else means last 30 days
            fmt: pdf, excel or csv
            requested_by: Identity of the requesting user
            statement: Financial reports only: income_statement, balance_sheet or cash_flow

        Returns:
            The new ledger entry

        Raises:
            InvalidInputError: bad domain, format or statement (nothing is rendered)
            UpstreamFailureError: a query failed
            ExportFailureError: the file could not be written (nothing is recorded)
            LedgerFailureError: the file was written but could not be recorded
        """
        domain = parse_domain(report_type)
        report_format = parse_format(fmt)
        financial_statement = parse_statement(statement) if domain == Domain.FINANCIAL else None

        period = resolve_period(period_token)
        job = ReportJob(
            type=f"financial_{financial_statement.value}" if financial_statement else domain.value,
            period=CURRENT_PERIOD if domain == Domain.INVENTORY else period.token,
            format=report_format,
            requested_by=str(requested_by),
        )
        log.info(f"Compiling {job.type} report ({job.format.value}, {job.period}) for {job.requested_by}")

        dataset = self._build_dataset(domain, period, financial_statement)
        artifact = self._render(report_format, dataset)
        return self.ledger.record(job, artifact)

    def _build_dataset(self, domain: Domain, period: Period, statement: Optional[FinancialStatement]) -> ReportDataset:
        db = self.session_factory()
        try:
            repository = self.repository_factory(db)
            if statement is not None:
                return StatementBuilder(repository).build(statement, period)
            return snapshot_dataset(build_aggregator(domain, repository).aggregate(period))
        finally:
            db.close()

    def _render(self, report_format: ReportFormat, dataset: ReportDataset) -> ReportArtifact:
        exporter = self.exporters.get(report_format) or get_exporter(report_format)
        try:
            return exporter.render(dataset)
        except AnalyticsError:
            raise
        except Exception as e:
            log.error(f"{report_format.value} exporter failed: {e}")
            raise ExportFailureError(f"Failed to write {report_format.value} report") from e
