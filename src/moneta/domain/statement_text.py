"""Plain-text extraction from uploaded statement files.

PDFs are read with pdfplumber first. When a supplied password is rejected,
PyMuPDF gets a second attempt; the two engines support different PDF
encryption schemes. Text and OFX files are decoded as UTF-8. Table structure
is not interpreted here.
"""

import io
import logging
from typing import Optional

import pdfplumber
import pymupdf
from pdfminer.pdfdocument import PDFEncryptionError, PDFPasswordIncorrect

from moneta.domain.entities import StatementDocument
from moneta.domain.errors import (
    EmptyExtractionError,
    ExtractionError,
    FileTooLargeError,
    PasswordIncorrectError,
    PasswordRequiredError,
    UnsupportedFormatError,
    ValidationError,
    file_too_large,
    unsupported_format,
)

logger = logging.getLogger(__name__)

MAX_DOCUMENT_BYTES = 10 * 1024 * 1024

PDF = "pdf"
TEXT = "text"

STATEMENT_EXTENSIONS = (".pdf", ".txt", ".ofx")

EXTENSION_KINDS = {
    ".pdf": PDF,
    ".txt": TEXT,
    ".ofx": TEXT,
    ".csv": TEXT,
}

MEDIA_TYPE_EXTENSIONS = {
    "application/pdf": ".pdf",
    "text/plain": ".txt",
    "application/x-ofx": ".ofx",
    "text/ofx": ".ofx",
    "text/csv": ".csv",
}

PASSWORD_REQUIRED_MESSAGE = "This PDF is password protected. Provide the password to read it."
PASSWORD_INCORRECT_MESSAGE = "Incorrect PDF password."
EMPTY_MESSAGE = "No text could be extracted from the file. Try a different file."


def validate_upload(
    document: StatementDocument, allowed_extensions: tuple[str, ...] = STATEMENT_EXTENSIONS
) -> str:
    """Check size and type of an upload before any parsing.

    A file with an extension is judged by that extension alone. The declared
    media type is only consulted for files without one.

    Args:
        document: Uploaded file
        allowed_extensions: Accepted extensions, lower-case with leading dot

    Returns:
        Document kind, "pdf" or "text"

    Raises:
        ValidationError: If the file is empty
        FileTooLargeError: If the file exceeds MAX_DOCUMENT_BYTES
        UnsupportedFormatError: If the extension, or the media type of a file
            without an extension, is not allowed
    """
    if document.size == 0:
        raise ValidationError("No file uploaded")
    if document.size > MAX_DOCUMENT_BYTES:
        raise FileTooLargeError(file_too_large(MAX_DOCUMENT_BYTES))

    if document.extension:
        if document.extension in allowed_extensions:
            return EXTENSION_KINDS[document.extension]
        raise UnsupportedFormatError(unsupported_format(allowed_extensions))

    media_type = (document.media_type or "").split(";")[0].strip().lower()
    media_extension = MEDIA_TYPE_EXTENSIONS.get(media_type)
    if media_extension is not None and media_extension in allowed_extensions:
        return EXTENSION_KINDS[media_extension]

    raise UnsupportedFormatError(unsupported_format(allowed_extensions))


def extract_text(
    document: StatementDocument,
    password: Optional[str] = None,
    allowed_extensions: tuple[str, ...] = STATEMENT_EXTENSIONS,
) -> str:
    """Convert an uploaded statement into plain text.

    Args:
        document: Uploaded file
        password: Optional PDF password
        allowed_extensions: Accepted extensions

    Returns:
        Extracted text, never blank

    Raises:
        ExtractionError: Or one of its subclasses when the file cannot be read
        ValidationError: If the file is empty
    """
    kind = validate_upload(document, allowed_extensions)
    if kind == PDF:
        text = _extract_pdf(document.content, password)
    else:
        text = _decode_text(document.content)

    if not text.strip():
        raise EmptyExtractionError(EMPTY_MESSAGE)

    logger.info("Extracted %d characters from %s", len(text), document.filename or "upload")
    return text


def _decode_text(content: bytes) -> str:
    text = content.decode("utf-8-sig", errors="replace")
    if "\ufffd" in text:
        logger.warning("File is not valid UTF-8; undecodable bytes were replaced")
    return text


def _extract_pdf(content: bytes, password: Optional[str]) -> str:
    try:
        return _extract_with_pdfplumber(content, password)
    except Exception as exc:
        if not _is_password_error(exc):
            raise ExtractionError(f"Could not read PDF: {exc}") from exc
        if not password:
            raise PasswordRequiredError(PASSWORD_REQUIRED_MESSAGE) from exc
        primary_error = exc

    logger.info("pdfplumber rejected the password, retrying with PyMuPDF")
    try:
        return _extract_with_pymupdf(content, password)
    except PasswordIncorrectError:
        raise
    except Exception as exc:
        logger.warning("PyMuPDF could not open the PDF either: %s", exc)
        raise PasswordIncorrectError(PASSWORD_INCORRECT_MESSAGE) from primary_error


def _extract_with_pdfplumber(content: bytes, password: Optional[str]) -> str:
    with pdfplumber.open(io.BytesIO(content), password=password or "") as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return _join_pages(pages)


def _extract_with_pymupdf(content: bytes, password: str) -> str:
    with pymupdf.open(stream=content, filetype="pdf") as doc:
        if doc.needs_pass and not doc.authenticate(password):
            raise PasswordIncorrectError(PASSWORD_INCORRECT_MESSAGE)
        pages = [page.get_text() for page in doc]
    return _join_pages(pages)


def _join_pages(pages: list[str]) -> str:
    return "\n\n".join(page.strip() for page in pages if page and page.strip())


def _is_password_error(exc: BaseException) -> bool:
    """Look through wrapped and chained exceptions for an encryption failure.

    pdfplumber wraps pdfminer errors, so the original exception may sit in
    ``args`` rather than in the exception chain.
    """
    pending: list[BaseException] = [exc]
    seen: set[int] = set()
    while pending:
        err = pending.pop()
        if id(err) in seen:
            continue
        seen.add(id(err))

        if isinstance(err, (PDFPasswordIncorrect, PDFEncryptionError)):
            return True
        message = str(err).lower()
        if "password" in message or "encrypt" in message:
            return True

        pending.extend(arg for arg in err.args if isinstance(arg, BaseException))
        for linked in (err.__cause__, err.__context__):
            if linked is not None:
                pending.append(linked)
    return False
