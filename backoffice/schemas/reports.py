"""
Report generation types

ReportJob describes a request before it runs, ReportDataset is the flattened
metric/value table every exporter consumes, ReportArtifact is what an
exporter hands back, and ReportLedgerEntry is the persisted record.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReportFormat(str, Enum):
    PDF = "pdf"
    EXCEL = "excel"
    CSV = "csv"


class FinancialStatement(str, Enum):
    INCOME_STATEMENT = "income_statement"
    BALANCE_SHEET = "balance_sheet"
    CASH_FLOW = "cash_flow"


@dataclass(frozen=True)
class ReportRow:
    metric: str
    value: Any


@dataclass(frozen=True)
class ReportDataset:
    title: str
    rows: List[ReportRow] = field(default_factory=list)
    subtitle: Optional[str] = None


@dataclass(frozen=True)
class ReportArtifact:
    url: str
    filename: str
    format: ReportFormat
    path: str


@dataclass(frozen=True)
class ReportJob:
    type: str
    period: str
    format: ReportFormat
    requested_by: str
    created_at: datetime = field(default_factory=datetime.utcnow)


class ReportRequest(BaseModel):
    """POST body for report generation"""

    period: Optional[str] = None
    format: Optional[str] = None
    type: Optional[str] = Field(None, description="Financial statement: income_statement, balance_sheet or cash_flow")


class ReportLedgerEntry(BaseModel):
    """Ledger row as returned to the dashboard"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: int
    type: str
    period: str
    format: Optional[str] = None
    file_url: str
    filename: str
    generated_by: str
    created_at: datetime

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
