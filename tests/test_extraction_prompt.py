"""Tests for the statement extraction prompt."""

from datetime import date

from moneta.domain.extraction_prompt import (
    INVESTMENT_CATEGORY,
    MAX_PROMPT_CHARS,
    build_extraction_request,
    truncate_statement_text,
)


def test_request_is_json_mode_with_system_and_user_messages():
    request = build_extraction_request("01/03 PADARIA -12,50", today=date(2024, 3, 15))

    assert request.json_mode is True
    assert [m.role for m in request.messages] == ["system", "user"]
    assert "JSON" in request.messages[0].content


def test_user_prompt_carries_rules_and_text():
    request = build_extraction_request("01/03 PADARIA -12,50", today=date(2024, 3, 15))
    prompt = request.messages[1].content

    assert "01/03 PADARIA -12,50" in prompt
    assert "use 2024" in prompt
    assert f'"{INVESTMENT_CATEGORY}"' in prompt
    assert "closingBalance" in prompt
    assert "saldo final" in prompt
    assert '{"transactions": [' in prompt


def test_long_text_is_truncated():
    text = "x" * (MAX_PROMPT_CHARS + 500)

    request = build_extraction_request(text, today=date(2024, 1, 1))

    assert "x" * MAX_PROMPT_CHARS in request.messages[1].content
    assert "x" * (MAX_PROMPT_CHARS + 1) not in request.messages[1].content


def test_truncate_keeps_short_text():
    assert truncate_statement_text("abc", limit=5) == "abc"
    assert truncate_statement_text("abcdef", limit=3) == "abc"
