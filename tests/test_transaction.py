"""Tests for transaction service and commands."""

from datetime import date
from decimal import Decimal
import pytest

from moneta.cli.main import cli
from moneta.domain.errors import NotFoundError, ValidationError


def _base(temp_db):
    return ["--db-path", temp_db.database_path, "--user", "user-1"]


def test_create_manual_transaction(transaction_service, sample_account, user_id):
    txn_id = transaction_service.create_transaction(
        user_id,
        sample_account.id,
        date(2024, 3, 1),
        Decimal("12.345"),
        "Expense",
        description="  Padaria ",
        is_recurring=True,
    )

    txn = transaction_service.get_transaction(user_id, txn_id)
    assert txn.amount == Decimal("12.35")
    assert txn.transaction_type == "expense"
    assert txn.description == "Padaria"
    assert txn.is_recurring is True
    assert txn.ai_generated is False


def test_create_transaction_validation(transaction_service, sample_account, user_id):
    with pytest.raises(ValidationError):
        transaction_service.create_transaction(
            user_id, sample_account.id, date(2024, 3, 1), Decimal("-1"), "expense"
        )
    with pytest.raises(ValidationError):
        transaction_service.create_transaction(
            user_id, sample_account.id, date(2024, 3, 1), Decimal("1"), "gift"
        )
    with pytest.raises(NotFoundError):
        transaction_service.create_transaction(
            user_id, sample_account.id, date(2024, 3, 1), Decimal("1"), "expense", category_id=99
        )
    with pytest.raises(NotFoundError):
        transaction_service.create_transaction(
            "user-2", sample_account.id, date(2024, 3, 1), Decimal("1"), "expense"
        )


def test_list_transactions_validation(transaction_service, user_id):
    with pytest.raises(ValidationError):
        transaction_service.list_transactions(
            user_id, start_date=date(2024, 3, 2), end_date=date(2024, 3, 1)
        )
    with pytest.raises(ValidationError):
        transaction_service.list_transactions(user_id, offset=-1)


def test_delete_transaction(transaction_service, sample_account, user_id):
    txn_id = transaction_service.create_transaction(
        user_id, sample_account.id, date(2024, 3, 1), Decimal("1.00"), "expense"
    )

    with pytest.raises(NotFoundError):
        transaction_service.delete_transaction("user-2", txn_id)
    transaction_service.delete_transaction(user_id, txn_id)

    assert transaction_service.get_transaction(user_id, txn_id) is None


def test_add_command_negative_amount_is_expense(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(
        cli,
        _base(temp_db)
        + [
            "add",
            "--account", "Checking",
            "--date", "01/03/2024",
            "--amount", "-25,90",
            "--type", "income",
            "--description", "Uber",
            "--category", "Transporte",
        ],
    )

    assert result.exit_code == 0
    assert "Amount: 25.90 (expense)" in result.output
    assert "Date: 2024-03-01" in result.output
    assert "Category: Transporte" in result.output


def test_add_command_invalid_amount(cli_runner, temp_db, sample_account):
    result = cli_runner.invoke(
        cli, _base(temp_db) + ["add", "--account", "Checking", "--date", "2024-03-01", "--amount", "lots"]
    )

    assert result.exit_code == 1
    assert "Invalid amount" in result.output


def test_transaction_list_command(cli_runner, temp_db, transaction_service, sample_account, user_id):
    transaction_service.create_transaction(
        user_id, sample_account.id, date(2024, 3, 1), Decimal("25.90"), "expense", "Uber"
    )
    transaction_service.create_transaction(
        user_id, sample_account.id, date(2024, 3, 2), Decimal("3000.00"), "income", "Salario"
    )

    result = cli_runner.invoke(cli, _base(temp_db) + ["transaction", "list"])

    assert result.exit_code == 0
    assert "Found 2 transaction(s)" in result.output
    assert result.output.index("Salario") < result.output.index("Uber")
    assert "Expenses: 25.90 | Income: 3,000.00 | Count: 2" in result.output

    filtered = cli_runner.invoke(cli, _base(temp_db) + ["transaction", "list", "--search", "uber", "-v"])
    assert "Found 1 transaction(s)" in filtered.output
    assert "Source: manual" in filtered.output


def test_transaction_list_empty(cli_runner, temp_db):
    result = cli_runner.invoke(cli, _base(temp_db) + ["transaction", "list"])

    assert result.exit_code == 0
    assert "No transactions found" in result.output


def test_transaction_delete_command(cli_runner, temp_db, transaction_service, sample_account, user_id):
    txn_id = transaction_service.create_transaction(
        user_id, sample_account.id, date(2024, 3, 1), Decimal("1.00"), "expense"
    )

    missing = cli_runner.invoke(cli, _base(temp_db) + ["transaction", "delete", "999", "--yes"])
    assert missing.exit_code == 1

    result = cli_runner.invoke(cli, _base(temp_db) + ["transaction", "delete", str(txn_id), "--yes"])
    assert result.exit_code == 0
    assert f"Deleted transaction {txn_id}" in result.output
