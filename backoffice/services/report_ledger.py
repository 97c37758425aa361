"""
Report Ledger

Append-only record of generated report files. Each record() call uses its
own session and transaction, so concurrent report requests never share
ORM state.
"""
from datetime import datetime
from typing import Callable, List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from backoffice.models.report import Report
from backoffice.schemas.reports import ReportArtifact, ReportJob, ReportLedgerEntry
from backoffice.services.errors import LedgerFailureError
from backoffice.utils.logger import log


class ReportLedger:
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def record(self, job: ReportJob, artifact: ReportArtifact) -> ReportLedgerEntry:
        """
        Persist one ledger entry for a rendered artifact.

        Raises:
            LedgerFailureError: if the insert fails. The artifact file is left
                on disk; it is simply never referenced.
        """
        db = self.session_factory()
        try:
            report = Report(
                type=job.type,
                period=job.period,
                format=job.format.value,
                file_url=artifact.url,
                filename=artifact.filename,
                generated_by=job.requested_by,
                created_at=datetime.utcnow(),
            )
            db.add(report)
            db.commit()
            db.refresh(report)

            entry = ReportLedgerEntry.model_validate(report)
        except Exception as e:
            db.rollback()
            log.error(f"Failed to record {job.type} report {artifact.filename}: {e}")
            raise LedgerFailureError("Failed to record generated report") from e
        finally:
            db.close()

        log.info(f"Recorded report #{entry.id}: {entry.type}/{entry.format} by {entry.generated_by}")
        return entry

    def list_reports(
        self,
        report_type: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        limit: int = 50,
    ) -> List[ReportLedgerEntry]:
        """Ledger entries, newest first, optionally filtered by type and creation window."""
        db = self.session_factory()
        try:
            query = db.query(Report)
            if report_type:
                query = query.filter(Report.type == report_type)
            if start:
                query = query.filter(Report.created_at >= start)
            if end:
                query = query.filter(Report.created_at <= end)

            reports = query.order_by(desc(Report.created_at), desc(Report.id)).limit(limit).all()
            return [ReportLedgerEntry.model_validate(r) for r in reports]
        finally:
            db.close()
