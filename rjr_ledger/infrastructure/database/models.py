"""SQLAlchemy ORM models for financial documents, ledger entries and payments"""

import uuid
from sqlalchemy import Column, String, Date, DateTime, Integer, ForeignKey, Numeric, Text, JSON, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()

Money = Numeric(12, 2, asdecimal=True)


class FinancialDocument(Base):
    """Receivable or payable document ("lançamento") split into ledger entries"""

    __tablename__ = "financial_document"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    type = Column(String(10), nullable=False)  # credito | debito
    document_number = Column(Text, nullable=True)
    counterparty_name = Column(Text, nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    payment_method = Column(String(20), nullable=False, default="pix")
    notes = Column(Text, nullable=False, default="")
    issue_date = Column(Date, nullable=False)
    document_value = Column(Money, nullable=False)
    discount = Column(Money, nullable=False, default=0)
    interest = Column(Money, nullable=False, default=0)
    total_value = Column(Money, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    entries = relationship(
        "LedgerEntryRow",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="LedgerEntryRow.installment_number",
    )


class LedgerEntryRow(Base):
    """Down payment (installment 0) or installment 1..n of a document"""

    __tablename__ = "ledger_entry"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    document_id = Column(Uuid, ForeignKey("financial_document.id", ondelete="CASCADE"), nullable=False, index=True)
    installment_number = Column(Integer, nullable=False)
    total_installments = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    expected_amount = Column(Money, nullable=False)
    paid_amount = Column(Money, nullable=False, default=0)
    status = Column(String(10), nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    document = relationship("FinancialDocument", back_populates="entries")
    payments = relationship("PaymentRow", back_populates="entry", cascade="all, delete-orphan")


class PaymentRow(Base):
    """Money actually received/paid against a ledger entry"""

    __tablename__ = "payment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    entry_id = Column(Uuid, ForeignKey("ledger_entry.id", ondelete="CASCADE"), nullable=False, index=True)
    paid_amount = Column(Money, nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String(20), nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    entry = relationship("LedgerEntryRow", back_populates="payments")


class FormDraft(Base):
    """Auto-saved form state, keyed by form identifier"""

    __tablename__ = "form_draft"

    key = Column(String(200), primary_key=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class AuditLog(Base):
    """Action trail for financial operations"""

    __tablename__ = "audit_log"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    action = Column(Text, nullable=False)
    details = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
