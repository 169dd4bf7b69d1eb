"""Shared domain error messages and error types."""


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity does not exist for this user."""


class ConflictError(DomainError):
    """Domain conflict, such as uniqueness violations."""


class DependencyError(DomainError):
    """Operation blocked due to dependent domain data."""


class ExtractionError(DomainError):
    """Uploaded document could not be turned into text."""


class UnsupportedFormatError(ExtractionError):
    """File type is not one of the accepted statement formats."""


class FileTooLargeError(ExtractionError):
    """File exceeds the upload size cap."""


class EmptyExtractionError(ExtractionError):
    """Document produced no usable text."""


class PasswordError(ExtractionError):
    """Document is encrypted and could not be opened."""


class PasswordRequiredError(PasswordError):
    """Document is encrypted and no password was supplied."""


class PasswordIncorrectError(PasswordError):
    """Supplied password was rejected by every PDF engine."""


class MalformedAIResponseError(DomainError):
    """Model output is not valid JSON."""


class AIServiceError(DomainError):
    """LLM provider call failed."""


class AIConfigurationError(AIServiceError):
    """No LLM provider credential is configured."""


def account_not_found(account_id: int) -> str:
    """Return message for missing account."""
    return f"Account {account_id} not found"


def category_not_found(category_id: int) -> str:
    """Return message for missing category by ID."""
    return f"Category {category_id} not found"


def transaction_not_found(transaction_id: int) -> str:
    """Return message for missing transaction."""
    return f"Transaction {transaction_id} not found"


def credit_card_not_found(card_id: int) -> str:
    """Return message for missing credit card."""
    return f"Credit card {card_id} not found"


def duplicate_account_name(name: str) -> str:
    """Return message for duplicate account name."""
    return f"Account with name '{name}' already exists"


def duplicate_statement_import(account_id: int) -> str:
    """Return message when the same statement batch was already imported."""
    return (
        f"These transactions were already imported into account {account_id}. "
        "Use allow_duplicate to import them again."
    )


def account_delete_blocked(account_id: int, transaction_count: int) -> str:
    """Return message when account has dependent transactions."""
    return (
        f"Cannot delete account {account_id}: it has "
        f"{transaction_count} transaction{'s' if transaction_count != 1 else ''}. "
        "Please delete them first."
    )


def file_too_large(max_bytes: int) -> str:
    """Return message for an upload over the size cap."""
    return f"File is larger than {max_bytes // (1024 * 1024)} MB"


def unsupported_format(allowed: tuple[str, ...]) -> str:
    """Return message for a file type outside the allow-list."""
    names = ", ".join(ext.lstrip(".").upper() for ext in allowed)
    return f"Invalid format. Use {names}."
