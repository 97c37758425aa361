"""
Report Exporters

Each exporter turns a flattened metric/value dataset into one file in the
reports directory and returns a reference to it. Exporters keep no state
between calls; every render builds its own writer.
"""
import csv
import os
import secrets
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, Optional, Type

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment

from backoffice.config import get_settings
from backoffice.schemas.reports import ReportArtifact, ReportDataset, ReportFormat
from backoffice.services.errors import ExportFailureError
from backoffice.services.report_pdf import generate_report_pdf
from backoffice.utils.logger import log


def _unique_filename(extension: str) -> str:
    """report-<UTC timestamp>-<random>.<ext>; the suffix keeps parallel renders apart."""
    stamp = datetime.utcnow().strftime('%Y%m%d%H%M%S%f')
    return f"report-{stamp}-{secrets.token_hex(3)}.{extension}"


def _cell(value):
    """Spreadsheet/CSV friendly value."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    return value


class ReportExporter(ABC):
    """Dataset in, file artifact out."""

    format: ReportFormat
    extension: str

    def __init__(self, output_dir: Optional[str] = None, url_prefix: Optional[str] = None):
        settings = get_settings()
        self.output_dir = output_dir or settings.reports_dir
        self.url_prefix = (url_prefix if url_prefix is not None else settings.reports_url_prefix).rstrip("/")

    def render(self, dataset: ReportDataset) -> ReportArtifact:
        """
        Write the dataset to a new file.

        Raises:
            ExportFailureError: if the directory or file cannot be written
        """
        filename = _unique_filename(self.extension)
        path = os.path.join(self.output_dir, filename)

        try:
            os.makedirs(self.output_dir, exist_ok=True)
            self._write(dataset, path)
        except FileExistsError as e:
            # The existing file belongs to another render; leave it in place
            log.error(f"{self.format.value} export of '{dataset.title}' failed: {e}")
            raise ExportFailureError(f"Failed to write {self.format.value} report") from e
        except Exception as e:
            log.error(f"{self.format.value} export of '{dataset.title}' failed: {e}")
            if os.path.exists(path):
                os.remove(path)
            raise ExportFailureError(f"Failed to write {self.format.value} report") from e

        log.info(f"Wrote {self.format.value} report {filename} ({len(dataset.rows)} rows)")
        return ReportArtifact(
            url=f"{self.url_prefix}/{filename}",
            filename=filename,
            format=self.format,
            path=os.path.abspath(path),
        )

    @abstractmethod
    def _write(self, dataset: ReportDataset, path: str):
        pass


class CsvExporter(ReportExporter):
    format = ReportFormat.CSV
    extension = "csv"

    def _write(self, dataset: ReportDataset, path: str):
        with open(path, "x", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(["Metric", "Value"])
            for row in dataset.rows:
                writer.writerow([row.metric, _cell(row.value)])


class ExcelExporter(ReportExporter):
    format = ReportFormat.EXCEL
    extension = "xlsx"

    HEADER_FILL = PatternFill("solid", fgColor="2F3D33")

    def _write(self, dataset: ReportDataset, path: str):
        wb = Workbook()
        ws = wb.active
        ws.title = "Report"
        wb.properties.title = dataset.title

        ws.append(["Metric", "Value"])
        for cell in ws[1]:
            cell.font = Font(bold=True, color="FFFFFF")
            cell.fill = self.HEADER_FILL
            cell.alignment = Alignment(horizontal="center")

        for row in dataset.rows:
            ws.append([row.metric, _cell(row.value)])

        ws.column_dimensions["A"].width = max([len(r.metric) for r in dataset.rows] + [10]) + 4
        ws.column_dimensions["B"].width = 18
        ws.freeze_panes = "A2"

        wb.save(path)


class PdfExporter(ReportExporter):
    format = ReportFormat.PDF
    extension = "pdf"

    def _write(self, dataset: ReportDataset, path: str):
        generate_report_pdf(dataset, path)


EXPORTERS: Dict[ReportFormat, Type[ReportExporter]] = {
    ReportFormat.PDF: PdfExporter,
    ReportFormat.EXCEL: ExcelExporter,
    ReportFormat.CSV: CsvExporter,
}


def get_exporter(fmt: ReportFormat, output_dir: Optional[str] = None, url_prefix: Optional[str] = None) -> ReportExporter:
    return EXPORTERS[fmt](output_dir=output_dir, url_prefix=url_prefix)
