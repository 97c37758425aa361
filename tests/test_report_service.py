"""
Report compilation end to end: dataset -> exporter -> ledger.
"""
import csv
import os
from datetime import datetime, timedelta

import pytest

from backoffice.models.report import Report
from backoffice.schemas.reports import ReportFormat
from backoffice.services.errors import (
    ExportFailureError,
    InvalidInputError,
    LedgerFailureError,
    UpstreamFailureError,
)
from backoffice.services.report_exporters import CsvExporter, ExcelExporter, ReportExporter
from backoffice.services.report_ledger import ReportLedger
from backoffice.services.report_service import ReportCompiler

from fakes import FakeRepository


class SpyExporter(ReportExporter):
    format = ReportFormat.CSV
    extension = "csv"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0

    def _write(self, dataset, path):
        self.calls += 1
        CsvExporter._write(self, dataset, path)


class BrokenExporter:
    def render(self, dataset):
        raise OSError("disk full")


@pytest.fixture
def ledger(session_factory):
    return ReportLedger(session_factory)


@pytest.fixture
def compiler(session_factory, ledger, reports_dir):
    return ReportCompiler(
        session_factory,
        ledger=ledger,
        exporters={
            ReportFormat.CSV: CsvExporter(output_dir=reports_dir, url_prefix="/reports"),
            ReportFormat.EXCEL: ExcelExporter(output_dir=reports_dir, url_prefix="/reports"),
        },
    )


def _read_csv(reports_dir, filename):
    with open(os.path.join(reports_dir, filename), newline="", encoding="utf-8") as f:
        return {row["Metric"]: row["Value"] for row in csv.DictReader(f)}


class TestCompile:

    def test_sales_csv_for_month(self, compiler, ledger, seed_store, reports_dir):
        seed_store(datetime.utcnow())

        entry = compiler.compile("sales", "month", "csv", "user-1")

        assert entry.type == "sales"
        assert entry.period == "month"
        assert entry.format == "csv"
        assert entry.generated_by == "user-1"
        assert entry.file_url == f"/reports/{entry.filename}"

        entries = ledger.list_reports()
        assert len(entries) == 1
        assert entries[0].id == entry.id

        values = _read_csv(reports_dir, entry.filename)
        assert values == {"totalSales": "150.0", "totalOrders": "3", "averageOrderValue": "50.0"}

    def test_unknown_period_is_recorded_as_default(self, compiler):
        entry = compiler.compile("sales", "fortnight", "excel", "user-1")
        assert entry.period == "default"
        assert entry.filename.endswith(".xlsx")

    @pytest.mark.parametrize("token", ["week", "year", None])
    def test_inventory_is_recorded_as_current(self, compiler, token):
        entry = compiler.compile("inventory", token, "csv", "user-1")
        assert entry.type == "inventory"
        assert entry.period == "current"

    def test_format_is_case_insensitive(self, compiler):
        assert compiler.compile("sales", "week", "CSV", "user-1").format == "csv"

    def test_financial_statement(self, compiler, seed_store, reports_dir):
        seed_store(datetime.utcnow())

        entry = compiler.compile("finance", "month", "csv", "user-2", statement="income_statement")

        assert entry.type == "financial_income_statement"
        values = _read_csv(reports_dir, entry.filename)
        assert values["totalRevenue"] == "1000.0"
        assert values["expense_rent"] == "400.0"
        assert values["netIncome"] == "500.0"
        assert values["profitMargin"] == "50.0"


class TestInvalidInput:

    def test_invalid_format_touches_nothing(self, session_factory, ledger, reports_dir):
        spy = SpyExporter(output_dir=reports_dir)
        compiler = ReportCompiler(session_factory, ledger=ledger, exporters={ReportFormat.CSV: spy})

        with pytest.raises(InvalidInputError):
            compiler.compile("sales", "month", "docx", "user-1")

        assert spy.calls == 0
        assert not os.path.exists(reports_dir)
        assert ledger.list_reports() == []

    @pytest.mark.parametrize("statement", [None, "", "profit_and_loss"])
    def test_financial_needs_a_statement(self, compiler, ledger, statement):
        with pytest.raises(InvalidInputError):
            compiler.compile("financial", "month", "csv", "user-1", statement=statement)
        assert ledger.list_reports() == []

    def test_unknown_domain(self, compiler):
        with pytest.raises(InvalidInputError):
            compiler.compile("weather", "month", "csv", "user-1")

    def test_missing_format(self, compiler):
        with pytest.raises(InvalidInputError):
            compiler.compile("sales", "month", None, "user-1")


class TestFailures:

    def test_exporter_failure_writes_no_ledger_entry(self, session_factory, ledger):
        compiler = ReportCompiler(session_factory, ledger=ledger, exporters={ReportFormat.CSV: BrokenExporter()})

        with pytest.raises(ExportFailureError) as exc:
            compiler.compile("sales", "month", "csv", "user-1")

        assert isinstance(exc.value.__cause__, OSError)
        assert ledger.list_reports() == []

    def test_query_failure_writes_nothing(self, session_factory, ledger, reports_dir):
        spy = SpyExporter(output_dir=reports_dir)
        compiler = ReportCompiler(
            session_factory,
            ledger=ledger,
            exporters={ReportFormat.CSV: spy},
            repository_factory=lambda db: FakeRepository(fail_on={"*"}),
        )

        with pytest.raises(UpstreamFailureError):
            compiler.compile("sales", "month", "csv", "user-1")

        assert spy.calls == 0
        assert ledger.list_reports() == []

    def test_ledger_failure_leaves_file(self, compiler, engine, reports_dir):
        Report.__table__.drop(bind=engine)

        with pytest.raises(LedgerFailureError):
            compiler.compile("sales", "month", "csv", "user-1")

        assert len(os.listdir(reports_dir)) == 1


class TestLedger:

    def test_newest_first_and_filters(self, compiler, ledger, session_factory):
        first = compiler.compile("sales", "week", "csv", "user-1")
        second = compiler.compile("inventory", "week", "csv", "user-1")
        third = compiler.compile("sales", "month", "csv", "user-2")

        assert [e.id for e in ledger.list_reports()] == [third.id, second.id, first.id]
        assert [e.id for e in ledger.list_reports(report_type="sales")] == [third.id, first.id]
        assert [e.id for e in ledger.list_reports(limit=1)] == [third.id]

        future = datetime.utcnow() + timedelta(days=1)
        assert ledger.list_reports(start=future) == []
        assert len(ledger.list_reports(end=future)) == 3

    def test_entry_serializes_camel_case(self, compiler):
        data = compiler.compile("sales", "week", "csv", "user-1").to_dict()

        assert set(data) == {"id", "type", "period", "format", "fileUrl", "filename", "generatedBy", "createdAt"}
        assert data["generatedBy"] == "user-1"
