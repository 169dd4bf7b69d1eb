"""Mapper functions to convert between domain models and SQLAlchemy models.

This layer isolates the conversion logic, so the domain entities stay
stable when the database schema changes.
"""

from decimal import Decimal

from moneta.domain import entities as domain
from moneta.database.models import (
    Account as ORMAccount,
    Category as ORMCategory,
    Transaction as ORMTransaction,
    ImportBatch as ORMImportBatch,
    CreditCard as ORMCreditCard,
    CreditCardInvoice as ORMCreditCardInvoice,
    CreditCardInvoiceItem as ORMCreditCardInvoiceItem,
)


def _decimal(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def account_to_domain(orm_account: ORMAccount) -> domain.Account:
    """Convert SQLAlchemy Account model to domain Account entity."""
    return domain.Account(
        id=orm_account.id,
        user_id=orm_account.user_id,
        name=orm_account.name,
        account_type=orm_account.account_type,
        balance=_decimal(orm_account.balance),
        created_at=orm_account.created_at,
        updated_at=orm_account.updated_at,
    )


def category_to_domain(orm_category: ORMCategory) -> domain.Category:
    """Convert SQLAlchemy Category model to domain Category entity."""
    return domain.Category(
        id=orm_category.id,
        user_id=orm_category.user_id,
        name=orm_category.name,
        category_type=orm_category.category_type,
        normalized_name=orm_category.normalized_name,
        created_at=orm_category.created_at,
    )


def transaction_to_domain(orm_transaction: ORMTransaction) -> domain.Transaction:
    """Convert SQLAlchemy Transaction model to domain Transaction entity."""
    return domain.Transaction(
        id=orm_transaction.id,
        user_id=orm_transaction.user_id,
        account_id=orm_transaction.account_id,
        category_id=orm_transaction.category_id,
        amount=_decimal(orm_transaction.amount),
        transaction_type=orm_transaction.transaction_type,
        description=orm_transaction.description,
        date=orm_transaction.date,
        is_recurring=bool(orm_transaction.is_recurring),
        ai_generated=bool(orm_transaction.ai_generated),
        import_batch_id=orm_transaction.import_batch_id,
        created_at=orm_transaction.created_at,
    )


def import_batch_to_domain(orm_batch: ORMImportBatch) -> domain.ImportBatch:
    """Convert SQLAlchemy ImportBatch model to domain ImportBatch entity."""
    return domain.ImportBatch(
        id=orm_batch.id,
        user_id=orm_batch.user_id,
        account_id=orm_batch.account_id,
        fingerprint=orm_batch.fingerprint,
        transaction_count=orm_batch.transaction_count,
        closing_balance=(
            None if orm_batch.closing_balance is None else _decimal(orm_batch.closing_balance)
        ),
        created_at=orm_batch.created_at,
    )


def credit_card_to_domain(orm_card: ORMCreditCard) -> domain.CreditCard:
    """Convert SQLAlchemy CreditCard model to domain CreditCard entity."""
    return domain.CreditCard(
        id=orm_card.id,
        user_id=orm_card.user_id,
        last4=orm_card.last4,
        holder_name=orm_card.holder_name,
        expiry_month=orm_card.expiry_month,
        expiry_year=orm_card.expiry_year,
        created_at=orm_card.created_at,
    )


def credit_card_invoice_to_domain(orm_invoice: ORMCreditCardInvoice) -> domain.CreditCardInvoice:
    """Convert SQLAlchemy CreditCardInvoice model to domain entity."""
    return domain.CreditCardInvoice(
        id=orm_invoice.id,
        credit_card_id=orm_invoice.credit_card_id,
        user_id=orm_invoice.user_id,
        period_start=orm_invoice.period_start,
        period_end=orm_invoice.period_end,
        due_date=orm_invoice.due_date,
        total_amount=_decimal(orm_invoice.total_amount),
        ai_suggestions=orm_invoice.ai_suggestions,
        created_at=orm_invoice.created_at,
    )


def credit_card_invoice_item_to_domain(
    orm_item: ORMCreditCardInvoiceItem,
) -> domain.CreditCardInvoiceItem:
    """Convert SQLAlchemy CreditCardInvoiceItem model to domain entity."""
    return domain.CreditCardInvoiceItem(
        id=orm_item.id,
        invoice_id=orm_item.invoice_id,
        description=orm_item.description,
        amount=_decimal(orm_item.amount),
        date=orm_item.date,
        installments_current=orm_item.installments_current,
        installments_total=orm_item.installments_total,
    )
