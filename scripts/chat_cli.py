#!/usr/bin/env python3
"""Interactive chat CLI for trying the assistant without Slack."""

import asyncio

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt

from slackbot.config import BotConfig
from slackbot.models.messages import ConversationMessage
from slackbot.services.generation import ResponseGenerator
from slackbot.services.status import StatusReporter
from slackbot.utils.logging import LogConfig, setup_logging


class ChatCLI:
    """Interactive chat interface that runs the generation loop in-process."""

    def __init__(self, config: BotConfig):
        """Initialize chat CLI."""
        self.config = config
        self.generator = ResponseGenerator(config)
        self.history: list[ConversationMessage] = []
        self.console = Console()

    async def start(self) -> None:
        """Start the interactive chat session."""
        tools_line = (
            f"Remote tools: {self.config.mcp_server_url}" if self.config.mcp_server_url else "Remote tools: disabled"
        )
        self.console.print(
            Panel.fit(
                "[bold blue]Slack Assistant - Local Chat[/bold blue]\n"
                f"{tools_line}\n"
                "Commands: /help, /clear, /quit",
                border_style="blue",
            )
        )

        try:
            while True:
                user_input = Prompt.ask("\n[bold cyan]You[/bold cyan]")

                if user_input.lower() in ["/quit", "/exit", "quit", "exit"]:
                    break
                elif user_input.lower() == "/help":
                    self._show_help()
                    continue
                elif user_input.lower() == "/clear":
                    self.history = []
                    self.console.print("[yellow]Conversation cleared[/yellow]")
                    continue
                elif user_input.strip() == "":
                    continue

                await self._send_message(user_input)

        except (KeyboardInterrupt, EOFError):
            pass
        finally:
            self.console.print("\n[yellow]Goodbye![/yellow]")

    async def _send_message(self, message: str) -> None:
        self.history.append(ConversationMessage(role="user", content=message))
        status = StatusReporter(lambda text: self.console.print(f"[dim]{text}[/dim]"))

        try:
            answer = await self.generator.generate_response(self.history, status)
        except Exception as e:
            self.history.pop()
            self.console.print(f"[red]Error: {e}[/red]")
            return

        self.history.append(ConversationMessage(role="assistant", content=answer))
        # Slack mrkdwn, shown as-is
        self.console.print(
            Panel(answer, title="[bold green]Assistant[/bold green]", border_style="green", padding=(1, 2))
        )

    def _show_help(self) -> None:
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /clear - Forget the conversation so far
• /quit or /exit - Exit the chat

[bold]Things to try:[/bold]
1. "What's the weather in Lisbon right now?"
2. "Search python.org for what's new in the latest release"
3. Anything your configured MCP server can do
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    setup_logging(LogConfig(level="WARNING"))
    asyncio.run(ChatCLI(BotConfig.from_env()).start())


if __name__ == "__main__":
    main()
