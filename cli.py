import logging
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from typing import Iterable, Optional
from datetime import datetime

from flashdeck.config import settings
from flashdeck.database import SessionLocal, init_db
from flashdeck.storage import BlobStore
from flashdeck.state import AppState
from flashdeck.crud import (
    create_deck, get_deck, list_decks, delete_deck,
    add_card, update_card, delete_card, cards_in_deck,
    due_cards, due_count,
    start_session, current_card, grade_card, skip_card, end_session,
    recent_activity
)
from flashdeck.exceptions import FlashdeckError
from flashdeck.schemas import CardCreate, DeckCreate
from flashdeck.sm2 import SM2Algorithm, get_grading_choices

app = typer.Typer(help="Flashdeck CLI - spaced repetition flashcards in the terminal")
console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging")):
    """Configure logging for every command"""
    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)]
    )


def get_state() -> AppState:
    """Load study data from the configured database"""
    init_db()
    return AppState.load(BlobStore(SessionLocal))


def resolve_id(ids: Iterable[str], prefix: str, kind: str) -> Optional[str]:
    """Match a full id or a unique id prefix"""
    matches = [i for i in ids if i.startswith(prefix)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        console.print(f"[red]✗[/red] {kind} '{prefix}' not found")
    else:
        console.print(f"[red]✗[/red] '{prefix}' matches {len(matches)} {kind.lower()}s; use a longer id")
    return None


def format_date(timestamp: Optional[datetime]) -> str:
    """Relative day for recent timestamps, calendar date otherwise"""
    if not timestamp:
        return "Never"
    diff_days = (datetime.now() - timestamp).days
    if diff_days == 0:
        return "Today"
    elif diff_days == 1:
        return "Yesterday"
    elif 1 < diff_days < 7:
        return f"{diff_days} days ago"
    return timestamp.strftime("%Y-%m-%d")


@app.command()
def init():
    """Initialize database tables"""
    init_db()
    console.print("[green]✓[/green] Database initialized successfully!")


@app.command()
def reset_data():
    """Delete all cards, decks, sessions and statistics (WARNING: irreversible!)"""
    confirm = typer.confirm("⚠️  This will DELETE ALL DATA. Are you sure?")
    if not confirm:
        console.print("[yellow]Cancelled.[/yellow]")
        return

    state = get_state()
    state.reset()
    console.print("[green]✓[/green] Reset complete! All data deleted.")


@app.command("create-deck")
def create_deck_command(
    name: str = typer.Option(..., prompt="Deck name"),
    description: str = typer.Option("", prompt="Description", show_default=False)
):
    """Create a new deck"""
    state = get_state()
    deck = create_deck(state, DeckCreate(name=name, description=description))
    console.print(f"[green]✓[/green] Deck created! ID: {deck.id[:8]}")


@app.command("list-decks")
def list_decks_command():
    """List decks with their due cards"""
    state = get_state()
    decks = list_decks(state)
    if not decks:
        console.print("[yellow]No decks yet. Create one with 'create-deck'.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=8)
    table.add_column("Deck", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("Due", style="yellow", justify="right")
    table.add_column("Last reviewed", style="green")

    for deck in decks:
        table.add_row(
            deck.id[:8],
            deck.name,
            str(len(deck.cards)),
            str(due_count(state, deck.id)),
            format_date(deck.last_reviewed)
        )

    console.print(table)


@app.command("view-deck")
def view_deck(deck_id: str):
    """Show a deck's cards and their review schedule"""
    state = get_state()
    deck_id = resolve_id(state.decks, deck_id, "Deck")
    if not deck_id:
        return

    deck = get_deck(state, deck_id)
    console.print(f"\n[bold]{deck.name}[/bold]")
    if deck.description:
        console.print(f"  {deck.description}")
    console.print(f"  Created: {deck.created.strftime('%Y-%m-%d')}  Last reviewed: {format_date(deck.last_reviewed)}\n")

    cards = cards_in_deck(state, deck_id)
    if not cards:
        console.print("[yellow]No cards in this deck yet. Add one with 'add-card'.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", width=8)
    table.add_column("Question", style="cyan")
    table.add_column("Answer", style="green")
    table.add_column("Interval", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Next review", style="yellow")

    for card in cards:
        if card.next_review is None:
            next_review = "New"
        elif SM2Algorithm.is_due(card.next_review):
            overdue = SM2Algorithm.get_days_overdue(card.next_review)
            next_review = f"Due ({overdue} days overdue)" if overdue else "Due"
        else:
            next_review = card.next_review.strftime("%Y-%m-%d")
        table.add_row(
            card.id[:8],
            card.question[:50],
            card.answer[:50],
            f"{card.interval}d",
            f"{card.ease_factor:.2f}",
            next_review
        )

    console.print(table)


@app.command("delete-deck")
def delete_deck_command(deck_id: str):
    """Delete a deck (its cards are kept)"""
    state = get_state()
    deck_id = resolve_id(state.decks, deck_id, "Deck")
    if deck_id and delete_deck(state, deck_id):
        console.print("[green]✓[/green] Deck deleted")


@app.command("add-card")
def add_card_command(
    deck_id: str = typer.Option(..., prompt="Deck ID"),
    question: str = typer.Option(..., prompt="Question"),
    answer: str = typer.Option(..., prompt="Answer")
):
    """Add a card to a deck"""
    state = get_state()
    resolved = resolve_id(state.decks, deck_id, "Deck")
    if not resolved:
        return
    try:
        card = add_card(state, resolved, CardCreate(question=question, answer=answer))
    except FlashdeckError as e:
        console.print(f"[red]✗[/red] Error: {str(e)}")
        return
    console.print(f"[green]✓[/green] Card added! ID: {card.id[:8]}")


@app.command("edit-card")
def edit_card(
    card_id: str,
    question: Optional[str] = typer.Option(None, help="New question text"),
    answer: Optional[str] = typer.Option(None, help="New answer text")
):
    """Edit a card's question or answer"""
    state = get_state()
    card_id = resolve_id(state.cards, card_id, "Card")
    if not card_id:
        return

    updates = {}
    if question:
        updates["question"] = question
    if answer:
        updates["answer"] = answer
    if not updates:
        console.print("[yellow]Nothing to update.[/yellow]")
        return

    update_card(state, card_id, updates)
    console.print("[green]✓[/green] Card updated!")


@app.command("delete-card")
def delete_card_command(card_id: str):
    """Delete a card and remove it from its decks"""
    state = get_state()
    card_id = resolve_id(state.cards, card_id, "Card")
    if card_id and delete_card(state, card_id):
        console.print("[green]✓[/green] Card deleted")


@app.command()
def due(deck_id: Optional[str] = typer.Option(None, help="Only count cards in this deck")):
    """Show cards due for review"""
    state = get_state()
    if deck_id:
        deck_id = resolve_id(state.decks, deck_id, "Deck")
        if not deck_id:
            return

    cards = due_cards(state, deck_id)
    console.print(f"\n[bold]{len(cards)} cards due for review[/bold]")
    for card in cards[:20]:
        status = "new" if card.next_review is None else f"{SM2Algorithm.get_days_overdue(card.next_review)} days overdue"
        console.print(f"  - {card.question[:60]} [dim]({status})[/dim]")
    if len(cards) > 20:
        console.print(f"[dim]... and {len(cards) - 20} more cards[/dim]")


@app.command()
def study(deck_id: Optional[str] = typer.Option(None, help="Study only this deck")):
    """Run a study session over due cards"""
    state = get_state()

    if state.session and state.session.is_active:
        console.print(f"[yellow]Resuming session ({state.session.remaining} cards left)[/yellow]")
    else:
        if deck_id:
            deck_id = resolve_id(state.decks, deck_id, "Deck")
            if not deck_id:
                return
        if not start_session(state, deck_id):
            console.print("[green]✓[/green] Nothing due. Come back later!")
            return

    choices = get_grading_choices()
    grade_help = "  ".join(f"[bold]{c.value}[/bold] {c.label}" for c in choices)

    while state.session:
        session = state.session
        card = current_card(state)
        if card is None:
            # Card deleted after the session started
            skip_card(state)
            continue

        console.print(f"\n[dim]Card {session.current_card_index + 1} of {session.total} ({session.progress:.0f}%)[/dim]")
        console.print(Panel(card.question, title="Question", border_style="cyan"))
        action = typer.prompt("Enter to reveal, s to skip, q to quit", default="", show_default=False).strip().lower()
        if action == "q":
            end_session(state)
            break
        if action == "s":
            skip_card(state)
            continue

        console.print(Panel(card.answer, title="Answer", border_style="green"))
        console.print(grade_help)
        while True:
            answer = typer.prompt("Grade (0-3, s to skip, q to quit)").strip().lower()
            if answer in ("s", "q"):
                break
            try:
                updated = grade_card(state, int(answer))
            except (ValueError, FlashdeckError):
                console.print(f"[red]✗[/red] Enter a grade from 0 to 3")
                continue
            console.print(f"  Next review in {updated.interval} days (ease {updated.ease_factor:.2f})")
            break
        if answer == "s":
            skip_card(state)
        elif answer == "q":
            end_session(state)
            break

    finished = state.completed_session
    if finished:
        minutes, seconds = divmod(int(finished.duration.total_seconds()), 60)
        console.print(f"\n[green]✓[/green] [bold]Session complete![/bold]")
        console.print(f"  Cards seen: {finished.current_card_index} of {finished.total}")
        console.print(f"  Time: {minutes}m {seconds}s")
        console.print(f"  Streak: {state.stats.streak_days} days")
        console.print(f"  Retention: {state.stats.retention:.0f}%")


@app.command()
def stats():
    """View review statistics and recent activity"""
    state = get_state()
    review_stats = state.stats

    console.print(f"\n[bold]Review Statistics[/bold]\n")
    console.print(f"  Retention: {review_stats.retention:.1f}%")
    console.print(f"  Study streak: {review_stats.streak_days} day{'s' if review_stats.streak_days != 1 else ''}")
    console.print(f"  Cards learned: {review_stats.cards_learned}")
    console.print(f"  Cards to review: {review_stats.cards_to_review}")
    console.print(f"  Total reviews: {review_stats.total_reviews} ({review_stats.correct_reviews} correct)")
    console.print(f"  Average ease: {review_stats.average_ease:.2f}")

    activity = recent_activity(review_stats)
    if activity:
        console.print(f"\n[cyan]Recent Activity:[/cyan]")
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Date", style="cyan")
        table.add_column("Total reviews", justify="right")
        table.add_column("Correct", style="green", justify="right")
        for day in activity:
            table.add_row(day.date[5:], str(day.count), str(day.correct))
        console.print(table)


if __name__ == "__main__":
    app()
