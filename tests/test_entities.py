"""Tests for domain entities."""

import pytest
from datetime import datetime, date, UTC
from decimal import Decimal

from moneta.domain.entities import (
    Account,
    ExtractedTransaction,
    ProcessStatementResult,
    StatementDocument,
    TransactionType,
)


class TestAccount:
    """Tests for Account entity."""

    def test_account_immutability(self):
        """Test that Account entities are immutable."""
        now = datetime.now(UTC)
        account = Account(
            id=1,
            user_id="user-1",
            name="Nubank",
            account_type="checking",
            balance=Decimal("0.00"),
            created_at=now,
            updated_at=now,
        )
        with pytest.raises(Exception):  # dataclass frozen raises FrozenInstanceError
            account.balance = Decimal("1.00")


class TestStatementDocument:
    """Tests for StatementDocument entity."""

    def test_size_and_extension(self):
        document = StatementDocument(filename="Extrato Março.PDF", content=b"12345")

        assert document.size == 5
        assert document.extension == ".pdf"

    def test_missing_extension(self):
        assert StatementDocument(filename="upload", content=b"").extension == ""


def test_extracted_transaction_to_dict():
    txn = ExtractedTransaction(
        date="2024-03-01", description="UBER", amount=25.9, type="expense", category="Transporte"
    )

    assert txn.to_dict() == {
        "date": "2024-03-01",
        "description": "UBER",
        "amount": 25.9,
        "type": "expense",
        "category": "Transporte",
    }


def test_process_result_failure():
    result = ProcessStatementResult.failure("Incorrect PDF password.", password_required=True)

    assert result.ok is False
    assert result.transactions == ()
    assert result.password_required is True


def test_transaction_type_values():
    assert TransactionType("income") is TransactionType.INCOME
    assert TransactionType.EXPENSE.value == "expense"
