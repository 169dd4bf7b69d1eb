"""Tests for statement text extraction."""

import pymupdf
import pytest
from pdfminer.pdfdocument import PDFPasswordIncorrect

from moneta.domain import statement_text
from moneta.domain.entities import StatementDocument
from moneta.domain.errors import (
    EmptyExtractionError,
    ExtractionError,
    FileTooLargeError,
    PasswordIncorrectError,
    PasswordRequiredError,
    UnsupportedFormatError,
    ValidationError,
)
from moneta.domain.statement_text import MAX_DOCUMENT_BYTES, extract_text, validate_upload

LINES = ["01/03 PADARIA -12,50", "Saldo final 1.234,56"]


def _make_pdf(lines=LINES, password=None):
    doc = pymupdf.open()
    page = doc.new_page()
    y = 72
    for line in lines:
        page.insert_text((72, y), line)
        y += 20
    if password is None:
        content = doc.tobytes()
    else:
        content = doc.tobytes(
            encryption=pymupdf.PDF_ENCRYPT_AES_256, user_pw=password, owner_pw=password + "-owner"
        )
    doc.close()
    return content


def test_plain_pdf():
    document = StatementDocument("extrato.pdf", _make_pdf(), "application/pdf")

    text = extract_text(document)

    assert "PADARIA" in text
    assert "Saldo final" in text


def test_encrypted_pdf_without_password():
    document = StatementDocument("extrato.pdf", _make_pdf(password="1234"))

    with pytest.raises(PasswordRequiredError):
        extract_text(document)


def test_encrypted_pdf_with_password():
    document = StatementDocument("extrato.pdf", _make_pdf(password="1234"))

    text = extract_text(document, password="1234")

    assert "PADARIA" in text


def test_encrypted_pdf_with_wrong_password():
    document = StatementDocument("extrato.pdf", _make_pdf(password="1234"))

    with pytest.raises(PasswordIncorrectError):
        extract_text(document, password="9999")


def test_fallback_engine_opens_pdf_rejected_by_primary(monkeypatch):
    """Test PyMuPDF gets a second try when pdfplumber rejects the password."""

    def reject(content, password):
        raise PDFPasswordIncorrect()

    monkeypatch.setattr(statement_text, "_extract_with_pdfplumber", reject)
    document = StatementDocument("extrato.pdf", _make_pdf(password="1234"))

    text = extract_text(document, password="1234")

    assert "PADARIA" in text


def test_corrupt_pdf_is_extraction_error():
    document = StatementDocument("extrato.pdf", b"%PDF-1.4 this is not really a pdf")

    with pytest.raises(ExtractionError) as exc_info:
        extract_text(document)

    assert not isinstance(exc_info.value, PasswordRequiredError)


def test_pdf_without_text_is_empty():
    document = StatementDocument("extrato.pdf", _make_pdf(lines=[]))

    with pytest.raises(EmptyExtractionError):
        extract_text(document)


def test_text_file_is_decoded():
    content = "01/03 PADARIA -12,50\nSaldo: 100,00".encode("utf-8")

    assert extract_text(StatementDocument("extrato.txt", content)) == content.decode("utf-8")


def test_ofx_file_is_decoded():
    content = b"<OFX><STMTTRN><TRNAMT>-12.50</TRNAMT></STMTTRN></OFX>"

    assert "TRNAMT" in extract_text(StatementDocument("extrato.OFX", content))


def test_invalid_utf8_is_replaced():
    text = extract_text(StatementDocument("extrato.txt", b"Caf\xe9 12,00"))

    assert "\ufffd" in text
    assert "12,00" in text


def test_blank_text_file_is_empty():
    with pytest.raises(EmptyExtractionError):
        extract_text(StatementDocument("extrato.txt", b"   \n\t "))


def test_empty_upload():
    with pytest.raises(ValidationError, match="No file uploaded"):
        validate_upload(StatementDocument("extrato.pdf", b""))


def test_file_too_large():
    document = StatementDocument("extrato.txt", b"a" * (MAX_DOCUMENT_BYTES + 1))

    with pytest.raises(FileTooLargeError):
        validate_upload(document)


def test_unsupported_extension():
    with pytest.raises(UnsupportedFormatError):
        validate_upload(StatementDocument("extrato.docx", b"data", "application/msword"))


def test_disallowed_extension_not_rescued_by_media_type():
    document = StatementDocument("extrato.docx", "01/03 Mercado 10,00".encode("utf-8"), "text/plain")

    with pytest.raises(UnsupportedFormatError):
        validate_upload(document)
    with pytest.raises(UnsupportedFormatError):
        extract_text(document)


def test_media_type_accepted_without_extension():
    assert validate_upload(StatementDocument("upload", b"data", "application/pdf")) == "pdf"
    assert validate_upload(StatementDocument("upload", b"data", "text/plain; charset=utf-8")) == "text"


def test_csv_only_when_allowed():
    document = StatementDocument("fatura.csv", b"data;valor")

    with pytest.raises(UnsupportedFormatError):
        validate_upload(document)
    assert validate_upload(document, allowed_extensions=(".csv",)) == "text"
