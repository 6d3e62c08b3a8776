#!/usr/bin/env python3
"""Interactive terminal chat for the Brazilian cuisine assistant."""

import asyncio
import sys

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from cozinha.client.api import ChatApiClient
from cozinha.client.conversation import Conversation
from cozinha.models.messages import Message


class ChatCLI:
    """Renders a Conversation: message bubbles, typing indicator and error banner."""

    def __init__(self, base_url: str | None = None):
        """Initialize chat CLI."""
        self.api = ChatApiClient(base_url)
        self.conversation = Conversation(self.api)
        self.console = Console()
        self._shown = 0

    async def start(self) -> None:
        """Start the interactive chat session."""
        self.console.print(
            Panel.fit(
                "[bold green]Brazilian Cuisine Assistant[/bold green]\n"
                "Ask me about Brazilian food!\n"
                "Commands: /help, /quit",
                border_style="green",
            )
        )

        if not await self.api.health():
            self.console.print(f"[red]Cannot connect to the service at {self.api.base_url}.[/red]")
            await self.api.aclose()
            return

        self.console.print("[green]Connected[/green]\n")

        try:
            while True:
                user_input = await asyncio.to_thread(self.console.input, "\n[bold cyan]You[/bold cyan]: ")

                if user_input.lower() in ["/quit", "/exit", "quit", "exit"]:
                    break
                elif user_input.lower() == "/help":
                    self._show_help()
                    continue

                self.conversation.input_buffer = user_input
                attempt = self.conversation.submit()
                if attempt is None:
                    continue

                self._render_new_messages()
                with self.console.status("[dim]Typing...[/dim]"):
                    await attempt
                self._render_new_messages()

                if self.conversation.last_error:
                    self.console.print(Panel(self.conversation.last_error, border_style="red"))

        except (KeyboardInterrupt, EOFError):
            pass
        finally:
            self.console.print("\n[yellow]Tchau![/yellow]")
            await self.api.aclose()

    def _render_new_messages(self) -> None:
        for message in self.conversation.messages[self._shown :]:
            self._display_message(message)
        self._shown = len(self.conversation.messages)

    def _display_message(self, message: Message) -> None:
        time_label = message.timestamp.astimezone().strftime("%H:%M")

        if message.sender == "user":
            self.console.print(f"[dim]{time_label}[/dim] [bold cyan]You:[/bold cyan] {message.content}")
            return

        self.console.print(
            Panel(
                Markdown(message.content),
                title="[bold green]Assistant[/bold green]",
                subtitle=f"[dim]{time_label}[/dim]",
                border_style="green",
                padding=(1, 2),
            )
        )

    def _show_help(self) -> None:
        """Show help information."""
        help_text = """
[bold]Available Commands:[/bold]
• /help - Show this help message
• /quit or /exit - Exit the chat

[bold]Try asking:[/bold]
• "What is feijoada?"
• "Como fazer pão de queijo?"
• "Which drinks go well with moqueca?"

[bold]Notes:[/bold]
• Each question is answered on its own; earlier messages are not sent along
• Only a few questions per minute are allowed
        """

        self.console.print(Panel(help_text.strip(), title="[cyan]Help[/cyan]", border_style="cyan"))


def main():
    """Main entry point for the chat CLI."""
    base_url = sys.argv[1] if len(sys.argv) > 1 else None

    chat = ChatCLI(base_url)
    asyncio.run(chat.start())


if __name__ == "__main__":
    main()
