"""
Finance models (invoices, expenses)

Owned by the finance CRUD service; read-only here.
"""
from sqlalchemy import Column, Integer, String, Float, DateTime, ForeignKey

from backoffice.models.base import Base


class Invoice(Base):
    """Customer invoice"""
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=True)
    amount = Column(Float, nullable=False, default=0.0)
    status = Column(String, index=True, nullable=False)  # pending, paid, overdue
    date = Column(DateTime, index=True, nullable=False)
    due_date = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<Invoice {self.number}: ${self.amount} {self.status}>"


class Expense(Base):
    """Operating expense"""
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    category = Column(String, index=True, nullable=False, default="other")
    description = Column(String)
    amount = Column(Float, nullable=False, default=0.0)
    date = Column(DateTime, index=True, nullable=False)

    def __repr__(self):
        return f"<Expense {self.category}: ${self.amount} ({self.date})>"
