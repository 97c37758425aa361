"""
Report ledger model

One row per generated report file. Rows are only ever inserted.
"""
from sqlalchemy import Column, Integer, String, DateTime
from datetime import datetime

from backoffice.models.base import Base


class Report(Base):
    """Generated report record"""
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    type = Column(String, index=True, nullable=False)  # sales, customer, financial_income_statement, ...
    period = Column(String, nullable=False)  # week, month, year, default
    format = Column(String, nullable=False)  # pdf, excel, csv
    file_url = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    generated_by = Column(String, index=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, index=True, nullable=False)

    def __repr__(self):
        return f"<Report {self.id}: {self.type}/{self.format} {self.file_url}>"
