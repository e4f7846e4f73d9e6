"""
Memoradical: terminal front end.

A Rich terminal interface over the card selector, the stats engine and
the JSON card store.

Commands:
- memoradical study     - Start a study session
- memoradical stats     - Show deck statistics
- memoradical import    - Replace the deck with cards from a JSON file
- memoradical export    - Print the deck as JSON (or copy it)
- memoradical add       - Add a card
- memoradical edit      - Change the text of a card
- memoradical delete    - Delete a card
- memoradical convert   - Convert a tab-separated word list to JSON
"""
from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import numpy as np
import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from memoradical.config import get_settings

from .card_deck import cards_from_dat, export_json
from .clipboard import copy_to_clipboard
from .errors import MemoradicalError
from .scheduler import CardSelector
from .session import (
    AddCard,
    DeleteCard,
    EditCard,
    Face,
    Flip,
    GoNext,
    GoPrev,
    ImportCards,
    RecordHit,
    RecordMiss,
    StudyState,
    ToggleReverse,
    TogglePreferMissed,
    TogglePreferNeglected,
    apply,
    initial_state,
    visible_text,
)
from .state_store import CardStore
from .stats import StatsSnapshot, compute_stats

# =============================================================================
# CLI Setup
# =============================================================================

app = typer.Typer(
    name="memoradical",
    help="Memoradical: a no-frills local-only flashcard trainer",
    no_args_is_help=True,
)
console = Console()

KEY_COMMANDS = {
    "f": Flip,
    "h": RecordHit,
    "m": RecordMiss,
    "n": GoNext,
    "p": GoPrev,
    "r": ToggleReverse,
    "x": TogglePreferMissed,
    "g": TogglePreferNeglected,
}

HELP_TEXT = """\
[bold]f[/bold]  flip the card
[bold]h[/bold]  hit: you knew the answer
[bold]m[/bold]  miss: you did not
[bold]n[/bold]  next card without hitting or missing
[bold]p[/bold]  previous card (going forward again draws new cards)
[bold]r[/bold]  toggle reverse mode (answer side is asked)
[bold]x[/bold]  toggle preferring missed cards
[bold]g[/bold]  toggle preferring neglected cards
[bold]?[/bold]  this help
[bold]q[/bold]  quit

Misses make cards appear more often, hits make them appear less often.
Your deck is stored locally and never leaves your machine."""


@dataclass
class CLIContext:
    """Options shared by all commands."""

    cards_path: Path
    seed: int | None

    def store(self) -> CardStore:
        return CardStore(self.cards_path)

    def rng(self) -> np.random.Generator:
        return np.random.default_rng(self.seed)

    def selector(self) -> CardSelector:
        return CardSelector(get_settings().selector_config())


def _configure_logging(verbose: bool) -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else get_settings().log_level,
        format="<level>{message}</level>",
    )


def _fail(message: str) -> NoReturn:
    console.print(f"[red]{escape(message)}[/red]")
    raise typer.Exit(1)


def _load_state(ctx: CLIContext) -> tuple[CardStore, StudyState, np.random.Generator]:
    store = ctx.store()
    rng = ctx.rng()
    try:
        cards = store.load_or_default()
    except MemoradicalError as e:
        _fail(str(e))
    state = initial_state(cards, rng, get_settings().mode_flags(), ctx.selector())
    return store, state, rng


def _save(store: CardStore, state: StudyState) -> None:
    try:
        store.save(state.cards)
    except MemoradicalError as e:
        _fail(str(e))


@app.callback()
def main_callback(
    ctx: typer.Context,
    cards: Optional[Path] = typer.Option(
        None,
        "--cards", "-c",
        help="Deck file (default: ~/.memoradical/cards.json)",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducible card order",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Show debug logging",
    ),
) -> None:
    """Memoradical: a no-frills local-only flashcard trainer."""
    settings = get_settings()
    _configure_logging(verbose)
    ctx.obj = CLIContext(
        cards_path=cards or settings.cards_path,
        seed=seed if seed is not None else settings.seed,
    )


# =============================================================================
# Display Helpers
# =============================================================================


def display_card(state: StudyState) -> None:
    """Display the showing face of the current card."""
    text = visible_text(state)
    if text is None:
        console.print(Panel("[dim]There are no cards.[/dim]", border_style="yellow"))
        return

    flags = state.flags
    modes = []
    if flags.reverse_mode:
        modes.append("reverse")
    if flags.prefer_missed:
        modes.append("missed")
    if flags.prefer_neglected:
        modes.append("neglected")

    side = "prompt" if state.face is Face.PROMPT else "response"
    header = f"Card {state.current}  |  {side}  |  {', '.join(modes) or 'uniform'}"
    style = "cyan" if state.face is Face.PROMPT else "green"

    console.print(
        Panel(
            escape(text),
            title=header,
            title_align="left",
            border_style=style,
            padding=(1, 2),
        )
    )


def display_stats(snapshot: StatsSnapshot, rows: int) -> None:
    """Display summary figures and the per-card table."""
    if snapshot.total_cards == 0:
        console.print("There are no cards.")
        return

    prefix = "reverse " if snapshot.reverse_mode else ""

    summary = Table(show_header=False, box=None)
    summary.add_column("Metric", style="dim")
    summary.add_column("Value", style="bold")
    summary.add_row("Overall score", f"{snapshot.overall_score:.2f}")
    summary.add_row("Cards known well", f"{snapshot.percent_known_well:.2f}%")
    summary.add_row(
        "Cards visited", f"{snapshot.percent_visited:.2f}% of {snapshot.total_cards}"
    )
    summary.add_row("Number of responses", str(snapshot.total_responses))
    console.print(summary)

    if rows <= 0:
        return

    table = Table()
    table.add_column("#", justify="right", style="dim")
    table.add_column("prompt")
    table.add_column("response")
    table.add_column(f"{prefix}hits", justify="right")
    table.add_column(f"{prefix}misses", justify="right")
    table.add_column(f"{prefix}percent hit", justify="right")
    table.add_column(f"{prefix}goodness", justify="right")

    for row in snapshot.top(rows):
        table.add_row(
            str(row.position),
            escape(row.prompt),
            escape(row.response),
            str(row.hits),
            str(row.misses),
            f"{row.percent_hit:.2f}",
            f"{row.goodness:.2f}",
        )

    console.print(table)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def study(ctx: typer.Context) -> None:
    """
    Start an interactive study session.

    Hits and misses are saved to the deck file as you go.
    """
    cli: CLIContext = ctx.obj
    store, state, rng = _load_state(cli)
    selector = cli.selector()

    console.print("\n[bold cyan]Memoradical[/bold cyan]  [dim](? for help)[/dim]")

    try:
        while True:
            display_card(state)
            key = Prompt.ask(
                "[dim]f h m n p r x g ? q[/dim]",
                choices=[*KEY_COMMANDS, "?", "q"],
                show_choices=False,
                console=console,
            )

            if key == "q":
                break
            if key == "?":
                console.print(Panel(HELP_TEXT, title="Help", border_style="cyan"))
                continue

            command = KEY_COMMANDS[key]()
            state = apply(state, command, rng, selector)

            if isinstance(command, (RecordHit, RecordMiss)):
                _save(store, state)

    except (KeyboardInterrupt, EOFError):
        console.print("\n[yellow]Session interrupted.[/yellow]")

    display_stats(
        compute_stats(state.cards, state.flags.reverse_mode, get_settings().goodness_threshold),
        rows=0,
    )


@app.command()
def stats(
    ctx: typer.Context,
    reverse: bool = typer.Option(False, "--reverse", "-r", help="Use reverse-mode counters"),
    rows: Optional[int] = typer.Option(None, "--rows", "-n", help="Number of cards to list"),
    as_json: bool = typer.Option(False, "--json", help="Print summary figures as JSON"),
) -> None:
    """Show deck statistics, best-known cards first."""
    cli: CLIContext = ctx.obj
    settings = get_settings()
    _, state, _ = _load_state(cli)

    snapshot = compute_stats(state.cards, reverse, settings.goodness_threshold)

    if as_json:
        typer.echo(json.dumps(snapshot.to_dict(), indent=2))
        return

    display_stats(snapshot, rows if rows is not None else settings.stats_rows)


@app.command("import")
def import_cards(
    ctx: typer.Context,
    path: Path = typer.Argument(..., help="JSON deck file to import"),
) -> None:
    """Replace the whole deck with the cards in a JSON file."""
    cli: CLIContext = ctx.obj
    store, state, rng = _load_state(cli)

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        _fail(f"Cannot read {path}: {e}")

    try:
        state = apply(state, ImportCards(text), rng, cli.selector())
    except MemoradicalError as e:
        _fail(str(e))

    _save(store, state)
    console.print(f"[green]Imported {len(state.cards)} cards[/green]")


@app.command()
def export(
    ctx: typer.Context,
    copy: bool = typer.Option(False, "--copy", help="Copy to the clipboard instead of printing"),
) -> None:
    """Print the deck as pretty-printed JSON."""
    cli: CLIContext = ctx.obj
    _, state, _ = _load_state(cli)
    text = export_json(state.cards)

    if not copy:
        typer.echo(text)
        return

    result = copy_to_clipboard(text)
    if not result.ok:
        _fail(f"Could not copy to clipboard: {result.reason}")
    console.print(f"[green]Copied {len(state.cards)} cards to the clipboard[/green]")


@app.command()
def add(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Question side"),
    response: str = typer.Argument(..., help="Answer side"),
) -> None:
    """Add a card to the deck."""
    cli: CLIContext = ctx.obj
    store, state, rng = _load_state(cli)
    state = apply(state, AddCard(prompt, response), rng, cli.selector())
    _save(store, state)
    console.print(f"[green]Added card {len(state.cards) - 1}[/green]")


@app.command()
def edit(
    ctx: typer.Context,
    position: int = typer.Argument(..., help="Card position (see stats)"),
    prompt: Optional[str] = typer.Option(None, "--prompt", help="New question text"),
    response: Optional[str] = typer.Option(None, "--response", help="New answer text"),
) -> None:
    """Change the text of a card. Counters are kept."""
    cli: CLIContext = ctx.obj
    store, state, rng = _load_state(cli)

    try:
        state = apply(state, EditCard(position, prompt, response), rng, cli.selector())
    except MemoradicalError as e:
        _fail(str(e))

    _save(store, state)
    console.print(f"[green]Updated card {position}[/green]")


@app.command()
def delete(
    ctx: typer.Context,
    position: int = typer.Argument(..., help="Card position (see stats)"),
) -> None:
    """Delete a card from the deck."""
    cli: CLIContext = ctx.obj
    store, state, rng = _load_state(cli)

    try:
        state = apply(state, DeleteCard(position), rng, cli.selector())
    except MemoradicalError as e:
        _fail(str(e))

    _save(store, state)
    console.print(f"[green]Deleted card {position}, {len(state.cards)} left[/green]")


@app.command()
def convert(
    path: Path = typer.Argument(..., help="Tab-separated word list (rank, prompt, response)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON here"),
) -> None:
    """Convert a tab-separated word list into a JSON deck."""
    try:
        with open(path, encoding="utf-8") as f:
            cards = cards_from_dat(f)
    except OSError as e:
        _fail(f"Cannot read {path}: {e}")
    except MemoradicalError as e:
        _fail(f"{path}: {e}")

    text = export_json(cards)
    if output is None:
        typer.echo(text)
        return

    output.write_text(text + "\n", encoding="utf-8")
    console.print(f"[green]Wrote {len(cards)} cards to {output}[/green]")


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
