"""
Analytics API

Per-domain snapshots, the combined dashboard, report generation and the
report ledger listing.
"""
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request
from fastapi.responses import JSONResponse

from backoffice.models.base import get_session_factory
from backoffice.schemas.reports import ReportRequest
from backoffice.services.analytics_service import AnalyticsService, parse_domain
from backoffice.services.errors import AnalyticsError, ErrorKind, InvalidInputError
from backoffice.services.report_ledger import ReportLedger
from backoffice.services.report_service import ReportCompiler
from backoffice.utils.logger import log

router = APIRouter(prefix="/analytics", tags=["analytics"])


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService(get_session_factory())


def get_report_ledger() -> ReportLedger:
    return ReportLedger(get_session_factory())


def get_report_compiler(ledger: ReportLedger = Depends(get_report_ledger)) -> ReportCompiler:
    return ReportCompiler(get_session_factory(), ledger=ledger)


def get_requester(request: Request, x_user_id: Optional[str] = Header(None)) -> str:
    """Dependency: identity of the caller, or 401."""
    user = getattr(request.state, "user", None)
    if user is not None:
        return str(getattr(user, "id", user))
    if x_user_id:
        return x_user_id
    raise HTTPException(status_code=401, detail="Not authenticated")


def _error(status_code: int, message: str, kind: Optional[ErrorKind] = None) -> JSONResponse:
    content = {"error": message}
    if kind is not None:
        content["kind"] = kind.value
    return JSONResponse(status_code=status_code, content=content)


@router.get("/dashboard")
def get_dashboard(
    period: Optional[str] = Query(None, description="week, month or year (default: last 30 days)"),
    domains: Optional[str] = Query(None, description="Comma-separated domains (default: all)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Snapshots for several domains over one period. All or nothing."""
    requested = [d for d in (domains or "").split(",") if d.strip()] or None
    try:
        snapshots = service.dashboard(period, requested)
    except InvalidInputError as e:
        return _error(400, e.message, e.kind)
    except AnalyticsError as e:
        log.error(f"Dashboard request failed: {e.message}")
        return _error(500, "Failed to fetch dashboard analytics", e.kind)

    resolved = next(iter(snapshots.values())).period
    return {
        "period": resolved.to_dict(),
        "domains": {domain.value: snapshot.to_response() for domain, snapshot in snapshots.items()},
    }


@router.get("/reports")
def list_reports(
    type: Optional[str] = Query(None, description="Report type, e.g. sales or financial_cash_flow"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: int = Query(50, ge=1, le=500),
    ledger: ReportLedger = Depends(get_report_ledger),
):
    """Generated reports, newest first."""
    try:
        entries = ledger.list_reports(type, start, end, limit)
    except Exception as e:
        log.error(f"Error listing reports: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "reports": [entry.to_dict() for entry in entries],
        "count": len(entries),
    }


@router.get("/{domain}")
def get_domain_analytics(
    domain: str,
    period: Optional[str] = Query(None, description="week, month or year (default: last 30 days)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Overview and breakdowns for one domain."""
    try:
        resolved = parse_domain(domain)
    except InvalidInputError as e:
        return _error(404, e.message)

    try:
        return service.snapshot(resolved, period).to_response()
    except AnalyticsError as e:
        log.error(f"{resolved.value} analytics failed: {e.message}")
        return _error(500, f"Failed to fetch {resolved.value} analytics")


@router.post("/{domain}/report")
def generate_report(
    domain: str,
    body: ReportRequest,
    requester: str = Depends(get_requester),
    compiler: ReportCompiler = Depends(get_report_compiler),
):
    """Render a report file for one domain and record it in the ledger."""
    try:
        resolved = parse_domain(domain)
    except InvalidInputError as e:
        return _error(404, e.message)

    try:
        entry = compiler.compile(resolved, body.period, body.format, requester, statement=body.type)
    except AnalyticsError as e:
        if e.kind == ErrorKind.INVALID_INPUT:
            return _error(400, e.message, e.kind)
        log.error(f"{resolved.value} report failed ({e.kind.value}): {e.message}")
        return _error(500, f"Failed to generate {resolved.value} report", e.kind)

    return {
        "message": f"{resolved.value.capitalize()} report generated successfully",
        "report": entry.to_dict(),
    }
