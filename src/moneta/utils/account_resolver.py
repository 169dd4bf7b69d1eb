"""Utility for resolving account names to IDs."""

from moneta.domain.account import AccountService
from moneta.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, user_id: str, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Args:
        account_service: AccountService instance
        user_id: Owning user
        account: Account name (str) or ID (int or string representation of int)

    Returns:
        Account ID

    Raises:
        NotFoundError: If account is not found
    """
    # If it's already an integer, use it as ID
    if isinstance(account, int):
        if account_service.get_account(user_id, account) is None:
            raise NotFoundError(f"Account ID {account} not found")
        return account

    # Try to parse as integer (handles string IDs like "1")
    try:
        account_id = int(account)
    except (ValueError, TypeError):
        account_id = None

    if account_id is not None:
        if account_service.get_account(user_id, account_id) is None:
            raise NotFoundError(f"Account ID {account_id} not found")
        return account_id

    # Try to find by name
    for acc in account_service.list_accounts(user_id):
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")
