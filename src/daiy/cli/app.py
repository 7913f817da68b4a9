"""Main CLI application using Typer."""
import asyncio

import typer
import uvicorn
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..api import create_app
from ..client import ChatSession
from ..llm.models import AVAILABLE_MODELS
from ..reasoning.models import ParseState, TimelineTag
from ..turns import TurnOutcome
from ..utils import truncate
from .providers import get_api_keys, get_client, get_memory, get_settings

# Create Typer app
app = typer.Typer(
    name="daiy",
    help="Socratic tutor with visible multi-pass reasoning",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()

EXIT_WORDS = ("exit", "quit", "q")

TIMELINE_STYLES = {
    TimelineTag.QUESTION: "cyan",
    TimelineTag.ASSUMPTION: "yellow",
    TimelineTag.CHALLENGE: "magenta",
    TimelineTag.INSIGHT: "green",
    TimelineTag.BREAKTHROUGH: "bold green",
}


def render_state(state: ParseState) -> Group:
    """Renderable for a partially received turn."""
    parts = []

    if state.steps or state.is_thinking:
        steps = Table(show_header=False, box=None, padding=(0, 1))
        steps.add_column("Tag", style="bold cyan", no_wrap=True)
        steps.add_column("Step", style="dim")
        for step in state.steps:
            steps.add_row(step.tag.value, step.text)
        title = "Thinking..." if state.is_thinking else f"Reasoned in {len(state.steps)} steps"
        parts.append(Panel(steps, title=title, border_style="dim", title_align="left"))

    if state.response_content:
        parts.append(Text(state.response_content))

    return Group(*parts)


def print_outcome(outcome: TurnOutcome) -> None:
    if outcome.is_error:
        console.print(f"[red]{outcome.content}[/red]\n")
        return

    if outcome.timeline_events:
        markers = ", ".join(
            f"[{TIMELINE_STYLES[event.type]}]{event.type.value}[/]: {event.text}"
            for event in outcome.timeline_events
        )
        console.print(f"[dim]Timeline:[/dim] {markers}")
    if outcome.is_breakthrough:
        console.print("[bold green]Breakthrough![/bold green]")
    console.print()


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address (default: DAIY_HOST)"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port (default: DAIY_PORT)"),
):
    """Run the HTTP server."""
    settings = get_settings()
    uvicorn.run(
        create_app(settings),
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@app.command()
def models(
    url: str | None = typer.Option(None, "--url", "-u", help="Ask a running server instead"),
):
    """List the selectable models."""
    async def _models():
        settings = get_settings()
        default_model = settings.default_model
        catalogue = [model.model_dump(mode="json") for model in AVAILABLE_MODELS]

        if url:
            client = get_client(settings, url)
            try:
                data = await client.list_models()
                catalogue, default_model = data["models"], data["default_model"]
            except Exception as e:
                console.print(f"[red]Error: {e}[/red]")
                raise typer.Exit(code=1)
            finally:
                await client.close()

        table = Table(show_header=True, header_style="bold cyan")
        table.add_column("Model", style="cyan")
        table.add_column("Name")
        table.add_column("Provider", style="yellow")
        table.add_column("Free", width=5)
        table.add_column("Description", style="dim")

        for model in catalogue:
            marker = " *" if model["id"] == default_model else ""
            table.add_row(
                model["id"] + marker,
                model["name"],
                model["provider"],
                "yes" if model["is_free"] else "",
                model.get("description") or "",
            )

        console.print(table)
        console.print("[dim]* default model[/dim]")

    asyncio.run(_models())


@app.command()
def chat(
    model: str | None = typer.Option(None, "--model", "-m", help="Model id (default: DAIY_DEFAULT_MODEL)"),
    extended: bool = typer.Option(
        False,
        "--extended",
        "-e",
        help="Use three-pass extended thinking"
    ),
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Server URL; runs in-process when omitted"
    ),
    save: bool = typer.Option(
        True,
        "--save/--no-save",
        help="Store the conversation"
    ),
):
    """Interactive tutoring session."""
    async def _chat():
        settings = get_settings()
        client = get_client(settings, url)
        memory = get_memory(settings, console) if save else None

        try:
            if memory is not None:
                await memory.connect()

            session = ChatSession(
                client,
                model=model or settings.default_model,
                api_keys=get_api_keys(),
                extended=extended,
                memory=memory,
            )

            mode = "extended thinking" if extended else "standard"
            console.print(f"[bold cyan]DAIY[/bold cyan] [dim]{session.model}, {mode}[/dim]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave[/dim]\n")

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ")

                    if not user_input.strip():
                        continue

                    if user_input.strip().lower() in EXIT_WORDS:
                        console.print("[dim]Goodbye![/dim]")
                        break

                    console.print("[bold green]DAIY:[/bold green]")
                    with Live(render_state(ParseState()), console=console, refresh_per_second=12) as live:
                        outcome = await session.ask(
                            user_input,
                            on_state=lambda state: live.update(render_state(state)),
                        )
                    print_outcome(outcome)

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break

        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await client.close()
            if memory is not None:
                await memory.disconnect()

    asyncio.run(_chat())


@app.command()
def history(
    conversation_id: str | None = typer.Argument(None, help="Show the messages of one conversation"),
    limit: int = typer.Option(20, "--limit", "-l", help="Maximum number of conversations"),
):
    """List stored conversations, or show one of them."""
    async def _history():
        settings = get_settings()
        memory = get_memory(settings, console)

        try:
            await memory.connect()

            if conversation_id is None:
                conversations = await memory.list_conversations(limit=limit)
                if not conversations:
                    console.print("[yellow]No conversations stored[/yellow]")
                    return

                table = Table(show_header=True, header_style="bold cyan")
                table.add_column("ID", style="dim")
                table.add_column("Title")
                table.add_column("Model", style="yellow")
                table.add_column("Messages", width=8)
                table.add_column("Last message", style="green")
                for conversation in conversations:
                    table.add_row(
                        conversation.id,
                        conversation.title,
                        conversation.model,
                        str(conversation.message_count),
                        conversation.last_message_at.strftime("%Y-%m-%d %H:%M"),
                    )
                console.print(table)
                return

            conversation = await memory.get_conversation(conversation_id)
            if conversation is None:
                console.print(f"[red]Error: conversation {conversation_id} not found[/red]")
                raise typer.Exit(code=1)

            console.print(f"[bold cyan]{conversation.title}[/bold cyan] [dim]{conversation.model}[/dim]\n")
            for message in await memory.list_messages(conversation_id):
                label = "[bold yellow]You:[/bold yellow]" if message.role == "user" else "[bold green]DAIY:[/bold green]"
                marker = f" [dim]({message.timeline_event.value})[/dim]" if message.timeline_event else ""
                console.print(f"{label}{marker} {truncate(message.content, 200)}")

        finally:
            await memory.disconnect()

    asyncio.run(_history())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
