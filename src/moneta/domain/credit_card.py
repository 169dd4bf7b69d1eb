"""Credit card domain service."""

import re
from typing import Optional
from moneta.database.base import Database
from moneta.domain.entities import (
    CreditCard as CreditCardEntity,
    CreditCardInvoice as CreditCardInvoiceEntity,
    CreditCardInvoiceItem as CreditCardInvoiceItemEntity,
)
from moneta.domain.errors import NotFoundError, ValidationError, credit_card_not_found

MAX_HOLDER_NAME_LENGTH = 100


def _digits(value: str) -> str:
    return re.sub(r"\D", "", value or "")


class CreditCardService:
    """Service for managing credit cards and their invoices."""

    def __init__(self, db: Database):
        """Initialize credit card service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_card(
        self, user_id: str, last4: str, holder_name: str, expiry_month: str, expiry_year: str
    ) -> int:
        """Register a credit card. Only the last four digits are kept.

        Args:
            user_id: Owning user
            last4: Card number or its last four digits
            holder_name: Name printed on the card
            expiry_month: Expiry month, 1-12
            expiry_year: Expiry year, two or four digits

        Returns:
            Credit card ID

        Raises:
            ValidationError: If any field is invalid
        """
        digits = _digits(last4)
        if len(digits) < 4:
            raise ValidationError("Card number must contain at least 4 digits")
        holder = (holder_name or "").strip()[:MAX_HOLDER_NAME_LENGTH]
        if not holder:
            raise ValidationError("Holder name cannot be empty")

        month_digits = _digits(expiry_month)[:2]
        if not month_digits or not 1 <= int(month_digits) <= 12:
            raise ValidationError(f"Invalid expiry month '{expiry_month}'")
        year_digits = _digits(expiry_year)
        if len(year_digits) not in (2, 4):
            raise ValidationError(f"Invalid expiry year '{expiry_year}'")

        return self.db.create_credit_card(
            user_id=user_id,
            last4=digits[-4:],
            holder_name=holder,
            expiry_month=month_digits.zfill(2),
            expiry_year=year_digits[-2:],
        )

    def get_card(self, user_id: str, card_id: int) -> Optional[CreditCardEntity]:
        """Get credit card by ID."""
        return self.db.get_credit_card(user_id, card_id)

    def list_cards(self, user_id: str) -> list[CreditCardEntity]:
        """List credit cards of a user."""
        return self.db.list_credit_cards(user_id)

    def list_invoices(
        self, user_id: str, card_id: Optional[int] = None
    ) -> list[CreditCardInvoiceEntity]:
        """List invoices, newest period first.

        Raises:
            NotFoundError: If card_id is given and does not belong to the user
        """
        if card_id is not None and self.db.get_credit_card(user_id, card_id) is None:
            raise NotFoundError(credit_card_not_found(card_id))
        return self.db.list_credit_card_invoices(user_id, credit_card_id=card_id)

    def get_invoice_items(self, user_id: str, invoice_id: int) -> list[CreditCardInvoiceItemEntity]:
        """List the purchase lines of an invoice."""
        return self.db.get_invoice_items(user_id, invoice_id)
