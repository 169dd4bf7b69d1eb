"""Finance assistant commands."""

import click
from moneta.domain.assistant_chat import AssistantChatService
from moneta.llm.base import ChatMessage

EXIT_WORDS = ("exit", "quit")


@click.group()
def assistant_group():
    """Ask the AI assistant about your finances."""
    pass


@assistant_group.command("suggestions")
@click.pass_context
def show_suggestions(ctx):
    """List questions you could ask the assistant."""
    result = AssistantChatService(ctx.obj["db"]).suggestions()
    for suggestion in result.suggestions:
        click.echo(f"- {suggestion}")


@assistant_group.command("chat")
@click.argument("message", required=False)
@click.pass_context
def chat(ctx, message: str | None):
    """Chat with the assistant.

    With MESSAGE, asks a single question. Without it, starts a conversation
    that ends on an empty line, "exit" or "quit".

    Examples:
        moneta assistant chat "How much did I spend this month?"
        moneta assistant chat
    """
    service = AssistantChatService(ctx.obj["db"])
    user_id = ctx.obj["user"]

    if message is not None:
        result = service.send_message(user_id, [], message)
        if not result.ok:
            click.echo(f"Error: {result.error}", err=True)
            ctx.exit(1)
        click.echo(result.reply)
        return

    history: list[ChatMessage] = []
    while True:
        text = click.prompt("You", default="", show_default=False).strip()
        if not text or text.lower() in EXIT_WORDS:
            break
        result = service.send_message(user_id, history, text)
        if not result.ok:
            click.echo(f"Error: {result.error}", err=True)
            continue
        click.echo(f"Assistant: {result.reply}")
        history.append(ChatMessage(role="user", content=text))
        history.append(ChatMessage(role="assistant", content=result.reply))


def register_commands(cli):
    """Register assistant commands with main CLI."""
    cli.add_command(assistant_group, name="assistant")
