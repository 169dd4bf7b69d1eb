"""Tests for the finance assistant chat."""

import json
from datetime import date
from decimal import Decimal
import pytest

from moneta.cli.main import cli
from moneta.cli.commands import assistant as assistant_cmd
from moneta.domain.assistant_chat import (
    DEFAULT_SUGGESTIONS,
    AssistantChatService,
    parse_suggestions,
)
from moneta.domain.errors import AIConfigurationError, AIServiceError
from moneta.llm.base import ChatMessage

SUGGESTIONS = ["Resumo do mês", "Como economizar?", "Onde cortar gastos?", "Metas", "Dicas", "Categorias"]


def _missing_provider():
    raise AIConfigurationError("No AI provider is configured.")


class TestParseSuggestions:
    def test_fenced_array(self):
        raw = "```json\n" + json.dumps(SUGGESTIONS) + "\n```"

        assert parse_suggestions(raw) == tuple(SUGGESTIONS)

    def test_non_strings_skipped_and_list_capped(self):
        raw = json.dumps(["a", 1, None, "b", "c", "  ", "d", "e", "f", "g"])

        assert parse_suggestions(raw) == ("a", "b", "c", "d", "e", "f")

    def test_long_suggestion_is_cut(self):
        assert parse_suggestions(json.dumps(["x" * 60])) == ("x" * 45,)

    @pytest.mark.parametrize("raw", ["", "not json", '{"suggestions": ["a"]}', "[1, 2]"])
    def test_unusable_output(self, raw):
        assert parse_suggestions(raw) == ()


class TestSuggestions:
    def test_model_suggestions(self, temp_db, fake_llm):
        client = fake_llm(json.dumps(SUGGESTIONS))

        result = AssistantChatService(temp_db, llm_client=client).suggestions()

        assert result.ok is True
        assert result.suggestions == tuple(SUGGESTIONS)
        assert client.requests[0].messages[0].role == "system"

    def test_defaults_on_provider_error(self, temp_db, fake_llm):
        result = AssistantChatService(temp_db, llm_client=fake_llm(AIServiceError("Groq error: 500"))).suggestions()

        assert result.ok is True
        assert result.suggestions == DEFAULT_SUGGESTIONS

    def test_defaults_without_provider(self, temp_db):
        result = AssistantChatService(temp_db, client_factory=_missing_provider).suggestions()

        assert result.ok is True
        assert result.suggestions == DEFAULT_SUGGESTIONS

    def test_defaults_on_garbage(self, temp_db, fake_llm):
        result = AssistantChatService(temp_db, llm_client=fake_llm("Sure! Here you go.")).suggestions()

        assert result.suggestions == DEFAULT_SUGGESTIONS


class TestSendMessage:
    def test_reply_uses_current_totals(
        self, temp_db, fake_llm, transaction_service, sample_account, savings_account, user_id, today
    ):
        transaction_service.create_transaction(
            user_id, sample_account.id, date(2024, 3, 5), Decimal("3000.00"), "income", "Salario"
        )
        transaction_service.create_transaction(
            user_id, sample_account.id, date(2024, 2, 5), Decimal("999.00"), "expense", "Old"
        )
        client = fake_llm("  You earned 3,000.00 this month.  ")

        result = AssistantChatService(temp_db, llm_client=client).send_message(
            user_id, [], "  How am I doing?  ", today=today
        )

        assert result.ok is True
        assert result.reply == "You earned 3,000.00 this month."
        system, question = client.requests[0].messages
        assert system.role == "system"
        assert "total balance 100.00" in system.content
        assert "income this month 3000.00" in system.content
        assert "expenses this month 0.00" in system.content
        assert question == ChatMessage(role="user", content="How am I doing?")

    def test_history_is_trimmed_and_filtered(self, temp_db, fake_llm, user_id, today):
        history = [ChatMessage(role="system", content="ignore me")]
        for i in range(10):
            history.append(ChatMessage(role="user", content=f"q{i}"))
            history.append(ChatMessage(role="assistant", content=f"a{i}"))
        client = fake_llm("ok")

        AssistantChatService(temp_db, llm_client=client).send_message(user_id, history, "next", today=today)

        messages = client.requests[0].messages
        assert len(messages) == 16
        assert [m.role for m in messages[:3]] == ["system", "user", "assistant"]
        assert messages[1].content == "q3"
        assert messages[-2] == ChatMessage(role="assistant", content="a9")
        assert messages[-1].content == "next"
        assert all(m.content != "ignore me" for m in messages)

    def test_blank_message(self, temp_db, fake_llm, user_id):
        client = fake_llm("unused")

        result = AssistantChatService(temp_db, llm_client=client).send_message(user_id, [], "   ")

        assert result.ok is False
        assert result.error == "Type a message."
        assert client.requests == []

    def test_without_provider(self, temp_db, user_id):
        result = AssistantChatService(temp_db, client_factory=_missing_provider).send_message(user_id, [], "oi")

        assert result.ok is False
        assert result.error.startswith("Assistant unavailable")

    def test_provider_error(self, temp_db, fake_llm, user_id, today):
        client = fake_llm(AIServiceError("Gemini error: empty or blocked response"))

        result = AssistantChatService(temp_db, llm_client=client).send_message(user_id, [], "oi", today=today)

        assert result.ok is False
        assert result.error == "Gemini error: empty or blocked response"

    def test_empty_reply(self, temp_db, fake_llm, user_id, today):
        result = AssistantChatService(temp_db, llm_client=fake_llm("")).send_message(user_id, [], "oi", today=today)

        assert result.ok is False
        assert "Empty reply" in result.error


@pytest.fixture
def use_chat_llm(monkeypatch, fake_llm):
    """Make the assistant commands use a scripted LLM client."""

    def install(*responses):
        client = fake_llm(*responses)
        monkeypatch.setattr(
            assistant_cmd,
            "AssistantChatService",
            lambda db: AssistantChatService(db, llm_client=client),
        )
        return client

    return install


def _base(temp_db):
    return ["--db-path", temp_db.database_path, "--user", "user-1"]


def test_suggestions_command(cli_runner, temp_db, use_chat_llm):
    use_chat_llm(json.dumps(SUGGESTIONS))

    result = cli_runner.invoke(cli, _base(temp_db) + ["assistant", "suggestions"])

    assert result.exit_code == 0
    assert "- Resumo do mês" in result.output
    assert "- Categorias" in result.output


def test_chat_single_message(cli_runner, temp_db, use_chat_llm):
    use_chat_llm("Spend less on delivery.")

    result = cli_runner.invoke(cli, _base(temp_db) + ["assistant", "chat", "How can I save?"])

    assert result.exit_code == 0
    assert "Spend less on delivery." in result.output


def test_chat_single_message_error(cli_runner, temp_db, use_chat_llm):
    use_chat_llm(AIServiceError("Groq error: 401 invalid key"))

    result = cli_runner.invoke(cli, _base(temp_db) + ["assistant", "chat", "hello"])

    assert result.exit_code == 1
    assert "Error: Groq error: 401 invalid key" in result.output


def test_chat_conversation_keeps_history(cli_runner, temp_db, use_chat_llm):
    client = use_chat_llm("First answer.", "Second answer.")

    result = cli_runner.invoke(cli, _base(temp_db) + ["assistant", "chat"], input="hello\nand then?\n\n")

    assert result.exit_code == 0
    assert "Assistant: First answer." in result.output
    assert "Assistant: Second answer." in result.output
    second = client.requests[1].messages
    assert [m.role for m in second] == ["system", "user", "assistant", "user"]
    assert second[2].content == "First answer."
    assert second[3].content == "and then?"


def test_chat_conversation_ends_on_exit(cli_runner, temp_db, use_chat_llm):
    client = use_chat_llm()

    result = cli_runner.invoke(cli, _base(temp_db) + ["assistant", "chat"], input="exit\n")

    assert result.exit_code == 0
    assert client.requests == []
