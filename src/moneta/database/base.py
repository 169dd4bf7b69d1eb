"""Abstract database interface.

Every operation is scoped by the owning ``user_id``; rows belonging to other
users are invisible through this interface.
"""

from abc import ABC, abstractmethod
from typing import Optional, Any
from datetime import date
from decimal import Decimal

# Import entities directly to avoid circular import through domain/__init__.py
from moneta.domain.entities import (
    Account,
    Category,
    Transaction,
    ImportBatch,
    CreditCard,
    CreditCardInvoice,
    CreditCardInvoiceItem,
)


class Database(ABC):
    """Abstract database interface for moneta."""

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Account operations
    @abstractmethod
    def create_account(
        self, user_id: str, name: str, account_type: str, balance: Decimal = Decimal("0.00")
    ) -> int:
        """Create a new account. Returns account ID."""
        pass

    @abstractmethod
    def get_account(self, user_id: str, account_id: int) -> Optional[Account]:
        """Get account by ID."""
        pass

    @abstractmethod
    def list_accounts(self, user_id: str) -> list[Account]:
        """List all accounts of a user."""
        pass

    @abstractmethod
    def update_account(
        self,
        user_id: str,
        account_id: int,
        name: Optional[str] = None,
        account_type: Optional[str] = None,
        balance: Optional[Decimal] = None,
    ) -> None:
        """Update account fields that are not None."""
        pass

    @abstractmethod
    def delete_account(self, user_id: str, account_id: int) -> None:
        """Delete an account."""
        pass

    @abstractmethod
    def get_account_transaction_count(self, user_id: str, account_id: int) -> int:
        """Count transactions recorded against an account."""
        pass

    # Category operations
    @abstractmethod
    def create_category(
        self, user_id: str, name: str, normalized_name: str, category_type: str
    ) -> int:
        """Create a category. Returns category ID."""
        pass

    @abstractmethod
    def get_category(self, user_id: str, category_id: int) -> Optional[Category]:
        """Get category by ID."""
        pass

    @abstractmethod
    def find_category(
        self, user_id: str, normalized_name: str, category_type: str
    ) -> Optional[Category]:
        """Find a category by normalized name and type."""
        pass

    @abstractmethod
    def get_or_create_category(
        self, user_id: str, name: str, normalized_name: str, category_type: str
    ) -> Category:
        """Return the matching category, creating it if absent.

        Implementations must tolerate a concurrent insert of the same category.
        """
        pass

    @abstractmethod
    def list_categories(self, user_id: str, category_type: Optional[str] = None) -> list[Category]:
        """List categories, optionally filtered by type."""
        pass

    # Transaction operations
    @abstractmethod
    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        amount: Decimal,
        transaction_type: str,
        date: date,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        is_recurring: bool = False,
        ai_generated: bool = False,
    ) -> int:
        """Create a transaction. Returns transaction ID."""
        pass

    @abstractmethod
    def get_transaction(self, user_id: str, transaction_id: int) -> Optional[Transaction]:
        """Get transaction by ID."""
        pass

    @abstractmethod
    def list_transactions(
        self,
        user_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        account_id: Optional[int] = None,
        category_id: Optional[int] = None,
        transaction_type: Optional[str] = None,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> list[Transaction]:
        """List transactions with optional filters, newest first.

        Args:
            user_id: Owning user
            start_date: Optional inclusive start date
            end_date: Optional inclusive end date
            account_id: Optional account filter
            category_id: Optional category filter
            transaction_type: Optional type filter (income, expense, transfer)
            search: Optional case-insensitive substring of the description
            limit: Optional maximum number of rows
            offset: Rows to skip
        """
        pass

    @abstractmethod
    def delete_transaction(self, user_id: str, transaction_id: int) -> None:
        """Delete a transaction."""
        pass

    # Statement import operations
    @abstractmethod
    def import_batch_exists(self, user_id: str, fingerprint: str) -> bool:
        """Check whether a batch with this fingerprint was already imported."""
        pass

    @abstractmethod
    def record_statement_import(
        self,
        user_id: str,
        account_id: int,
        fingerprint: str,
        transactions: list[dict[str, Any]],
        closing_balance: Optional[Decimal] = None,
    ) -> ImportBatch:
        """Persist an import batch in a single database transaction.

        Inserts every transaction (keys: category_id, amount, transaction_type,
        description, date) flagged as AI generated, records the batch, and
        overwrites the account balance when closing_balance is not None.
        Nothing is written if any step fails.
        """
        pass

    # Credit card operations
    @abstractmethod
    def create_credit_card(
        self, user_id: str, last4: str, holder_name: str, expiry_month: str, expiry_year: str
    ) -> int:
        """Create a credit card. Returns card ID."""
        pass

    @abstractmethod
    def get_credit_card(self, user_id: str, card_id: int) -> Optional[CreditCard]:
        """Get credit card by ID."""
        pass

    @abstractmethod
    def list_credit_cards(self, user_id: str) -> list[CreditCard]:
        """List credit cards of a user."""
        pass

    @abstractmethod
    def create_credit_card_invoice(
        self,
        user_id: str,
        credit_card_id: int,
        period_start: date,
        period_end: date,
        due_date: Optional[date],
        total_amount: Decimal,
        ai_suggestions: Optional[str],
        items: list[dict[str, Any]],
    ) -> int:
        """Create an invoice with its items atomically. Returns invoice ID."""
        pass

    @abstractmethod
    def list_credit_card_invoices(
        self, user_id: str, credit_card_id: Optional[int] = None
    ) -> list[CreditCardInvoice]:
        """List invoices, newest period first."""
        pass

    @abstractmethod
    def get_invoice_items(self, user_id: str, invoice_id: int) -> list[CreditCardInvoiceItem]:
        """List the items of an invoice."""
        pass
