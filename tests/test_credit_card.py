"""Tests for credit cards and invoice import."""

import json
from datetime import date
from decimal import Decimal
import pytest

from moneta.domain.credit_card import CreditCardService
from moneta.domain.entities import StatementDocument
from moneta.domain.errors import AIServiceError, MalformedAIResponseError, NotFoundError, ValidationError
from moneta.domain.invoice_import import InvoiceImportService, parse_invoice_response

INVOICE_TEXT = "FATURA NUBANK\nVencimento 10/04/2024\nLOJA X 1/3 99,90\nRESTAURANTE 50,10\nTotal 150,00"

INVOICE_RESPONSE = json.dumps(
    {
        "periodStart": "2024-03-01",
        "periodEnd": "2024-03-31",
        "dueDate": "2024-04-10",
        "totalAmount": 150.0,
        "items": [
            {
                "description": "LOJA X",
                "amount": 99.9,
                "date": "2024-03-05",
                "installmentsCurrent": "1",
                "installmentsTotal": 3,
            },
            {"description": "RESTAURANTE", "amount": -50.1, "date": None},
        ],
    }
)


@pytest.fixture
def card_service(temp_db):
    return CreditCardService(temp_db)


@pytest.fixture
def card(card_service, user_id):
    card_id = card_service.create_card(user_id, "5555 4444 3333 1234", "Maria Silva", "8", "2029")
    return card_service.get_card(user_id, card_id)


def _invoice_document(text=INVOICE_TEXT, filename="fatura.txt"):
    return StatementDocument(filename=filename, content=text.encode("utf-8"))


def test_create_card_keeps_last_four(card):
    assert card.last4 == "1234"
    assert card.holder_name == "Maria Silva"
    assert (card.expiry_month, card.expiry_year) == ("08", "29")


@pytest.mark.parametrize(
    "last4, holder, month, year",
    [
        ("12", "Maria", "08", "29"),
        ("1234", "  ", "08", "29"),
        ("1234", "Maria", "13", "29"),
        ("1234", "Maria", "", "29"),
        ("1234", "Maria", "08", "202"),
    ],
)
def test_create_card_validation(card_service, user_id, last4, holder, month, year):
    with pytest.raises(ValidationError):
        card_service.create_card(user_id, last4, holder, month, year)


def test_list_invoices_unknown_card(card_service, user_id):
    with pytest.raises(NotFoundError):
        card_service.list_invoices(user_id, card_id=77)


def test_parse_invoice_response():
    invoice = parse_invoice_response("```json\n" + INVOICE_RESPONSE + "\n```")

    assert invoice.period_start == date(2024, 3, 1)
    assert invoice.due_date == date(2024, 4, 10)
    assert invoice.total_amount == Decimal("150.00")
    first, second = invoice.items
    assert first.amount == Decimal("99.90")
    assert (first.installments_current, first.installments_total) == ("1", "3")
    assert second.amount == Decimal("50.10")
    assert second.date is None


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        json.dumps({"periodStart": "2024-03-01", "totalAmount": 10}),
        json.dumps({"periodStart": "2024-03-01", "periodEnd": "2024-03-31", "totalAmount": -5}),
    ],
)
def test_parse_invoice_response_rejects(raw):
    with pytest.raises(MalformedAIResponseError):
        parse_invoice_response(raw)


def test_process_invoice(temp_db, fake_llm, card, card_service, user_id, today):
    client = fake_llm(INVOICE_RESPONSE, "Evite parcelar compras pequenas.")
    service = InvoiceImportService(temp_db, llm_client=client)

    result = service.process_invoice(user_id, card.id, _invoice_document(), today=today)

    assert result.ok is True
    assert result.item_count == 2
    assert result.total_amount == Decimal("150.00")
    assert result.period_end == date(2024, 3, 31)
    assert result.ai_suggestions == "Evite parcelar compras pequenas."
    assert client.requests[0].json_mode is True
    assert INVOICE_TEXT in client.requests[0].messages[1].content

    invoices = card_service.list_invoices(user_id, card_id=card.id)
    assert len(invoices) == 1
    assert invoices[0].ai_suggestions == "Evite parcelar compras pequenas."
    assert len(card_service.get_invoice_items(user_id, result.invoice_id)) == 2


def test_process_invoice_survives_suggestion_failure(temp_db, fake_llm, card, user_id, today):
    client = fake_llm(INVOICE_RESPONSE, AIServiceError("Groq error: timeout"))

    result = InvoiceImportService(temp_db, llm_client=client).process_invoice(
        user_id, card.id, _invoice_document(), today=today
    )

    assert result.ok is True
    assert result.ai_suggestions is None


def test_process_invoice_without_suggestions(temp_db, fake_llm, card, user_id):
    client = fake_llm(INVOICE_RESPONSE)

    result = InvoiceImportService(temp_db, llm_client=client, with_suggestions=False).process_invoice(
        user_id, card.id, _invoice_document()
    )

    assert result.ok is True
    assert len(client.requests) == 1


def test_process_invoice_accepts_csv(temp_db, fake_llm, card, user_id):
    client = fake_llm(INVOICE_RESPONSE)

    result = InvoiceImportService(temp_db, llm_client=client, with_suggestions=False).process_invoice(
        user_id, card.id, _invoice_document(text="data;valor\n05/03;99,90", filename="fatura.csv")
    )

    assert result.ok is True


def test_process_invoice_failures(temp_db, fake_llm, card, user_id):
    service = InvoiceImportService(temp_db, llm_client=fake_llm("nope"), with_suggestions=False)

    unknown = service.process_invoice(user_id, 999, _invoice_document())
    assert unknown.ok is False
    assert "not found" in unknown.error

    other_user = service.process_invoice("user-2", card.id, _invoice_document())
    assert other_user.ok is False

    malformed = service.process_invoice(user_id, card.id, _invoice_document())
    assert malformed.ok is False
    assert "invalid JSON" in malformed.error
    assert temp_db.list_credit_card_invoices(user_id) == []
