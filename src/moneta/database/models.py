"""SQLAlchemy models for moneta database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False, default="checking")
    balance = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_account_user_name"),)

    # Relationships
    transactions = relationship("Transaction", back_populates="account", cascade="all, delete-orphan")


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    normalized_name = Column(String, nullable=False)
    category_type = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Get-or-create relies on this constraint to tolerate concurrent inserts
    __table_args__ = (
        UniqueConstraint(
            "user_id", "normalized_name", "category_type", name="uq_category_user_name_type"
        ),
    )

    # Relationships
    transactions = relationship("Transaction", back_populates="category")


class ImportBatch(Base):
    """Statement import batch model."""

    __tablename__ = "import_batches"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    fingerprint = Column(String(64), nullable=False)
    transaction_count = Column(Integer, nullable=False)
    closing_balance = Column(Numeric(12, 2), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (UniqueConstraint("user_id", "fingerprint", name="uq_import_user_fingerprint"),)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    transaction_type = Column(String, nullable=False)
    description = Column(String, nullable=True)
    date = Column(Date, nullable=False)
    is_recurring = Column(Boolean, default=False, nullable=False)
    ai_generated = Column(Boolean, default=False, nullable=False)
    import_batch_id = Column(Integer, ForeignKey("import_batches.id"), nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="transactions")
    category = relationship("Category", back_populates="transactions")


class CreditCard(Base):
    """Credit card model."""

    __tablename__ = "credit_cards"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    last4 = Column(String(4), nullable=False)
    holder_name = Column(String, nullable=False)
    expiry_month = Column(String(2), nullable=False)
    expiry_year = Column(String(4), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    invoices = relationship("CreditCardInvoice", back_populates="credit_card", cascade="all, delete-orphan")


class CreditCardInvoice(Base):
    """Credit card invoice model."""

    __tablename__ = "credit_card_invoices"

    id = Column(Integer, primary_key=True)
    credit_card_id = Column(Integer, ForeignKey("credit_cards.id"), nullable=False)
    user_id = Column(String, nullable=False, index=True)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    due_date = Column(Date, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    ai_suggestions = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    credit_card = relationship("CreditCard", back_populates="invoices")
    items = relationship("CreditCardInvoiceItem", back_populates="invoice", cascade="all, delete-orphan")


class CreditCardInvoiceItem(Base):
    """Credit card invoice line model."""

    __tablename__ = "credit_card_invoice_items"

    id = Column(Integer, primary_key=True)
    invoice_id = Column(Integer, ForeignKey("credit_card_invoices.id"), nullable=False)
    description = Column(String, nullable=True)
    amount = Column(Numeric(12, 2), nullable=False)
    date = Column(Date, nullable=True)
    installments_current = Column(String, nullable=True)
    installments_total = Column(String, nullable=True)

    # Relationships
    invoice = relationship("CreditCardInvoice", back_populates="items")


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
