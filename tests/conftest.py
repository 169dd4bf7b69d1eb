"""Shared pytest fixtures for moneta tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from moneta.database.factories import create_sqlite_database
from moneta.domain.account import AccountService
from moneta.domain.category import CategoryService
from moneta.domain.transaction import TransactionService
from moneta.llm.base import CompletionResponse, LLMClient

USER_ID = "user-1"
TODAY = date(2024, 3, 15)


class FakeLLMClient(LLMClient):
    """LLM client returning scripted responses.

    Each scripted item is either the completion text or an exception to raise.
    """

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def complete(self, request):
        self.requests.append(request)
        if not self.responses:
            raise AssertionError("No scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return CompletionResponse(content=response)


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def user_id():
    return USER_ID


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def account_service(temp_db):
    """Create an AccountService with a temporary database."""
    return AccountService(temp_db)


@pytest.fixture
def category_service(temp_db):
    """Create a CategoryService with a temporary database."""
    return CategoryService(temp_db)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def sample_account(account_service, user_id):
    """Create a checking account with a zero balance."""
    account_id = account_service.create_account(user_id, name="Checking")
    return account_service.get_account(user_id, account_id)


@pytest.fixture
def savings_account(account_service, user_id):
    """Create a second account for transfer scenarios."""
    account_id = account_service.create_account(
        user_id, name="Savings", account_type="savings", balance=Decimal("100.00")
    )
    return account_service.get_account(user_id, account_id)


@pytest.fixture
def fake_llm():
    """Factory for scripted LLM clients."""
    return FakeLLMClient


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()
