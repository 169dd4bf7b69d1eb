"""Transaction domain service."""

from typing import Optional
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from moneta.database.base import Database
from moneta.domain.entities import Transaction as TransactionEntity, TransactionType
from moneta.domain.errors import (
    NotFoundError,
    ValidationError,
    account_not_found,
    category_not_found,
    transaction_not_found,
)


class TransactionService:
    """Service for managing transactions."""

    def __init__(self, db: Database):
        """Initialize transaction service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_transaction(
        self,
        user_id: str,
        account_id: int,
        date: date,
        amount: Decimal,
        transaction_type: str,
        description: Optional[str] = None,
        category_id: Optional[int] = None,
        is_recurring: bool = False,
    ) -> int:
        """Create a manually entered transaction.

        Args:
            user_id: Owning user
            account_id: Account ID
            date: Transaction date
            amount: Unsigned amount; direction comes from transaction_type
            transaction_type: income, expense or transfer
            description: Optional description
            category_id: Optional category ID
            is_recurring: Whether the transaction repeats

        Returns:
            Transaction ID

        Raises:
            NotFoundError: If account or category doesn't exist
            ValidationError: If amount or type is invalid
        """
        account = self.db.get_account(user_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        try:
            transaction_type = TransactionType(transaction_type.strip().lower()).value
        except ValueError:
            raise ValidationError(f"Invalid transaction type '{transaction_type}'")

        if amount < 0:
            raise ValidationError("Amount must be positive; use the transaction type for direction")

        if category_id is not None:
            category = self.db.get_category(user_id, category_id)
            if category is None:
                raise NotFoundError(category_not_found(category_id))

        return self.db.create_transaction(
            user_id=user_id,
            account_id=account_id,
            amount=amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
            transaction_type=transaction_type,
            date=date,
            description=description.strip() if description else None,
            category_id=category_id,
            is_recurring=is_recurring,
            ai_generated=False,
        )

    def get_transaction(self, user_id: str, transaction_id: int) -> Optional[TransactionEntity]:
        """Get transaction by ID.

        Args:
            user_id: Owning user
            transaction_id: Transaction ID

        Returns:
            Transaction entity or None if not found
        """
        return self.db.get_transaction(user_id, transaction_id)

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
    ) -> list[TransactionEntity]:
        """List transactions with optional filters, newest first.

        Raises:
            ValidationError: If the date range is inverted or paging is negative
        """
        if start_date is not None and end_date is not None and start_date > end_date:
            raise ValidationError("Start date must be on or before end date")
        if (limit is not None and limit < 0) or offset < 0:
            raise ValidationError("Limit and offset must not be negative")

        return self.db.list_transactions(
            user_id,
            start_date=start_date,
            end_date=end_date,
            account_id=account_id,
            category_id=category_id,
            transaction_type=transaction_type,
            search=search,
            limit=limit,
            offset=offset,
        )

    def delete_transaction(self, user_id: str, transaction_id: int) -> None:
        """Delete a transaction.

        Raises:
            NotFoundError: If transaction doesn't exist
        """
        txn = self.db.get_transaction(user_id, transaction_id)
        if txn is None:
            raise NotFoundError(transaction_not_found(transaction_id))

        self.db.delete_transaction(user_id, transaction_id)
