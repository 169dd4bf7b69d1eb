"""Account domain service."""

from typing import Optional
from decimal import Decimal, ROUND_HALF_UP
from moneta.database.base import Database
from moneta.domain.entities import Account as AccountEntity, AccountType
from moneta.domain.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
    account_delete_blocked,
    account_not_found,
    duplicate_account_name,
)

CENT = Decimal("0.01")


def validate_account_type(account_type: str) -> str:
    """Return the canonical account type value or raise ValidationError."""
    try:
        return AccountType(account_type.strip().lower()).value
    except ValueError:
        allowed = ", ".join(t.value for t in AccountType)
        raise ValidationError(f"Invalid account type '{account_type}'. Use one of: {allowed}")


class AccountService:
    """Service for managing accounts."""

    def __init__(self, db: Database):
        """Initialize account service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_account(
        self,
        user_id: str,
        name: str,
        account_type: str = AccountType.CHECKING.value,
        balance: Decimal = Decimal("0.00"),
    ) -> int:
        """Create a new account.

        Args:
            user_id: Owning user
            name: Account name
            account_type: One of checking, savings, credit_card, investment, cash
            balance: Opening balance

        Returns:
            Account ID

        Raises:
            ValidationError: If the name is empty or the type is unknown
            ConflictError: If account name already exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Account name cannot be empty")
        account_type = validate_account_type(account_type)

        for acc in self.db.list_accounts(user_id):
            if acc.name == name:
                raise ConflictError(duplicate_account_name(name))

        return self.db.create_account(
            user_id=user_id,
            name=name,
            account_type=account_type,
            balance=balance.quantize(CENT, rounding=ROUND_HALF_UP),
        )

    def get_account(self, user_id: str, account_id: int) -> Optional[AccountEntity]:
        """Get account by ID.

        Args:
            user_id: Owning user
            account_id: Account ID

        Returns:
            Account entity or None if not found
        """
        return self.db.get_account(user_id, account_id)

    def list_accounts(self, user_id: str) -> list[AccountEntity]:
        """List all accounts of a user, ordered by name."""
        return self.db.list_accounts(user_id)

    def update_account(
        self,
        user_id: str,
        account_id: int,
        name: Optional[str] = None,
        account_type: Optional[str] = None,
        balance: Optional[Decimal] = None,
    ) -> None:
        """Update account name, type or balance.

        A balance given here is a manual correction; it replaces the stored
        snapshot exactly like a statement closing balance does.

        Raises:
            NotFoundError: If account not found
            ConflictError: If the new name is taken
            ValidationError: If the name is empty or the type is unknown
        """
        account = self.db.get_account(user_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        if name is not None:
            name = name.strip()
            if not name:
                raise ValidationError("Account name cannot be empty")
            for acc in self.db.list_accounts(user_id):
                if acc.id != account_id and acc.name == name:
                    raise ConflictError(duplicate_account_name(name))
        if account_type is not None:
            account_type = validate_account_type(account_type)
        if balance is not None:
            balance = balance.quantize(CENT, rounding=ROUND_HALF_UP)

        self.db.update_account(
            user_id,
            account_id,
            name=name,
            account_type=account_type,
            balance=balance,
        )

    def delete_account(self, user_id: str, account_id: int) -> None:
        """Delete an account.

        Args:
            user_id: Owning user
            account_id: Account ID to delete

        Raises:
            NotFoundError: If account not found
            DependencyError: If the account still has transactions
        """
        account = self.db.get_account(user_id, account_id)
        if account is None:
            raise NotFoundError(account_not_found(account_id))

        transaction_count = self.db.get_account_transaction_count(user_id, account_id)
        if transaction_count > 0:
            raise DependencyError(account_delete_blocked(account_id, transaction_count))

        self.db.delete_account(user_id, account_id)
