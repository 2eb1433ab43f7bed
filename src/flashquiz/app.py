"""Interactive CLI application."""
import json
import logging
import os
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table
from rich.text import Text

from flashquiz.catalog import get_navigation
from flashquiz.dashboard import get_badge_color
from flashquiz.db import DEFAULT_DB_PATH, init_db
from flashquiz.exceptions import CatalogNotFoundError, FlashquizError
from flashquiz.importer import import_catalog
from flashquiz.pages import load_category_page, load_quiz_page
from flashquiz.quiz import QuizSession
from flashquiz.seed import is_seeded, seed_all
from flashquiz.sync import (
    clear_session_snapshot, load_session_snapshot, save_session_snapshot, sync_quiz,
)
from flashquiz.users import apply_user_event, current_user_id, sign_in, sign_out, upsert_user

LOG_LEVEL = os.environ.get("FLASHQUIZ_LOG_LEVEL", "WARNING")
OPTION_LETTERS = "abcd"
EXIT_WORDS = ("q", "menu")

console = Console()
logger = logging.getLogger(__name__)


class SessionExitRequested(Exception):
    """Raised when the user leaves a quiz mid-way."""


def configure_logging(level: str = LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def show_welcome():
    console.print(Panel(
        "[bold]Flashquiz[/bold]\n[dim]Categorized multiple-choice flashcards[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu(user_id: str | None):
    who = f"[green]{user_id}[/green]" if user_id else "[dim]not signed in[/dim]"
    console.print(f"\n[bold]Commands:[/bold] ({who})")
    commands = [
        ("browse", "Categories and progress badges"),
        ("quiz", "Take a subcategory quiz"),
        ("login", "Sign in"),
        ("logout", "Sign out"),
        ("import", "Load a JSON/YAML catalog"),
        ("user-event", "Apply an identity event file"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


# --- Quiz loop ---


def parse_quiz_command(text: str) -> tuple[str, int | None]:
    """Map raw input to (action, argument); question numbers come in 1-based."""
    cmd = text.strip().lower()
    if len(cmd) == 1 and cmd in OPTION_LETTERS:
        return "answer", OPTION_LETTERS.index(cmd)
    if cmd.isdigit() and 1 <= int(cmd) <= len(OPTION_LETTERS):
        return "answer", int(cmd) - 1
    if cmd in ("n", "next", ""):
        return "next", None
    if cmd in ("p", "prev", "previous"):
        return "previous", None
    if cmd in ("r", "reset", "retry"):
        return "reset", None
    if cmd.startswith("j"):
        number = cmd[1:].strip()
        if number.isdigit():
            return "jump", int(number) - 1
    return "unknown", None


def apply_quiz_command(session: QuizSession, action: str, arg: int | None) -> None:
    if action == "answer":
        session.select_answer(arg)
    elif action == "next":
        session.advance()
    elif action == "previous":
        session.previous()
    elif action == "jump":
        session.jump_to_question(arg)
    elif action == "reset":
        session.reset()


def render_navigation(session: QuizSession) -> Text:
    line = Text()
    for index in range(session.total):
        status = session.question_status(index)
        style = {"correct": "green", "incorrect": "red"}.get(status, "white")
        if index == session.position:
            style += " bold reverse"
        line.append(f" {index + 1} ", style=style)
    return line


def render_question(session: QuizSession) -> None:
    card = session.current_flashcard
    if card is None:
        console.print("[dim]Loading flashcards...[/dim]")
        return
    console.print(render_navigation(session))
    console.print(Panel(
        card.question,
        title=f"Question {session.position + 1} of {session.total}",
        border_style="cyan",
    ))
    answer = session.current_answer
    for index, option in enumerate(card.options):
        label = f"  [cyan]{OPTION_LETTERS[index]})[/cyan] {option}"
        if session.show_results and index == card.correct_answer_index:
            label = f"  [bold green]{OPTION_LETTERS[index]}) {option}[/bold green]"
        elif session.show_results and answer and index == answer.selected_option_index:
            label = f"  [red strike]{OPTION_LETTERS[index]}) {option}[/red strike]"
        console.print(label)
    if session.show_results and answer:
        verdict = "[green]Correct![/green]" if answer.is_correct else "[red]Incorrect.[/red]"
        console.print(f"\n{verdict}")
        if card.explanation:
            console.print(f"[dim]{card.explanation}[/dim]")


def show_quiz_complete(session: QuizSession) -> None:
    score = session.score()
    table = Table(show_header=False, box=None)
    table.add_row("Total Questions:", str(score.total))
    table.add_row("Correct Answers:", f"[green]{score.correct_count}[/green]")
    table.add_row("Incorrect Answers:", f"[red]{score.incorrect_count}[/red]")
    console.print(Panel(
        table,
        title=f"Quiz Complete! You scored {score.percentage}% "
              f"({score.correct_count} out of {score.total})",
        border_style="green",
    ))


def leave_quiz(db_path: str, user_id: str | None, session: QuizSession) -> None:
    """Push answers to storage; navigation goes on even if saving fails."""
    if not user_id:
        console.print("[dim]Sign in to save your progress.[/dim]")
        return
    try:
        result = sync_quiz(db_path, user_id, session)
    except Exception:
        logger.exception("Error saving progress")
        console.print("[yellow]Progress could not be saved.[/yellow]")
        return
    if result.failed:
        console.print(f"[yellow]{result.failed} answers could not be saved.[/yellow]")


def run_quiz_session(db_path: str, session: QuizSession, subcategory_id: int, user_id: str | None):
    """Drive the session until the user finishes or leaves."""
    while True:
        try:
            while not session.is_completed:
                render_question(session)
                hint = "answer a-d" if not session.show_results else "n=next"
                raw = session_prompt(f"\n[dim]{hint}, p=prev, j<N>=jump, r=reset, q=exit[/dim]", default="")
                action, arg = parse_quiz_command(raw)
                if action == "unknown":
                    console.print("[red]Unknown input.[/red]")
                    continue
                apply_quiz_command(session, action, arg)
        except SessionExitRequested:
            if user_id:
                save_session_snapshot(db_path, user_id, subcategory_id, session)
            leave_quiz(db_path, user_id, session)
            raise

        show_quiz_complete(session)
        leave_quiz(db_path, user_id, session)
        if user_id:
            clear_session_snapshot(db_path, user_id, subcategory_id)
        again = Prompt.ask("[dim]r=try again, Enter=back to menu[/dim]", default="")
        if again.strip().lower() not in ("r", "retry"):
            return session.score()
        session.reset()


# --- Commands ---


def choose_category(db_path: str) -> dict | None:
    nav = get_navigation(db_path)
    if not nav:
        console.print("[yellow]The catalog is empty. Use 'import' to add flashcards.[/yellow]")
        return None
    for item in nav:
        console.print(f"  [cyan]{item['slug']}[/cyan]) {item['title']}")
    slug = Prompt.ask("Category", choices=[item["slug"] for item in nav])
    return next(item for item in nav if item["slug"] == slug)


def cmd_browse(db_path: str):
    category = choose_category(db_path)
    if category is None:
        return
    page = load_category_page(db_path, category["slug"], current_user_id(db_path))
    table = Table(title=page.category.name)
    table.add_column("Subcategory", style="cyan")
    table.add_column("Cards", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Badge")
    for row in page.rows:
        summary = row["summary"]
        color = get_badge_color(row["badge"])
        table.add_row(
            row["name"],
            str(row["card_count"]),
            f"{summary.score}%" if summary and summary.completed else "",
            f"[{color}]{row['badge']}[/{color}]" if row["badge"] else "",
        )
    console.print(table)


def cmd_quiz(db_path: str, session: QuizSession):
    category = choose_category(db_path)
    if category is None:
        return
    if not category["items"]:
        console.print("[yellow]No subcategories in this category yet.[/yellow]")
        return
    for item in category["items"]:
        console.print(f"  [cyan]{item['slug']}[/cyan]) {item['title']}")
    sub_slug = Prompt.ask("Subcategory", choices=[item["slug"] for item in category["items"]])

    user_id = current_user_id(db_path)
    page = load_quiz_page(db_path, category["slug"], sub_slug, user_id)
    if not page.flashcards:
        console.print("[yellow]No flashcards found for this subcategory yet.[/yellow]")
        return
    snapshot = load_session_snapshot(db_path, user_id, page.subcategory.id) if user_id else None
    session.clear()
    session.initialize(page.flashcards, page.outcomes, snapshot=snapshot)
    if snapshot and session.answers:
        console.print(f"[dim]Resuming: {len(session.answers)} answered so far.[/dim]")
    run_quiz_session(db_path, session, page.subcategory.id, user_id)


def cmd_login(db_path: str):
    user_id = Prompt.ask("User id").strip()
    if not user_id:
        return
    if not sign_in(db_path, user_id):
        email = Prompt.ask("Email")
        upsert_user(db_path, user_id, email)
        sign_in(db_path, user_id)
    console.print(f"[green]Signed in as {user_id}.[/green]")


def cmd_logout(db_path: str):
    sign_out(db_path)
    console.print("[dim]Signed out.[/dim]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_catalog(db_path, file_path)
    console.print(
        f"[green]Imported {result['filename']}: {result['categories']} categories, "
        f"{result['subcategories']} subcategories, {result['flashcards']} flashcards[/green]"
    )


def cmd_user_event(db_path: str):
    file_path = Prompt.ask("Event file")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    event = json.loads(Path(file_path).read_text(encoding="utf-8"))
    applied = apply_user_event(db_path, event)
    console.print(f"[green]Identity event: {applied}[/green]")


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    first_run = not is_seeded(db_path)
    if first_run:
        console.print("[dim]Setting up for first use...[/dim]")
    seed_all(db_path)
    if first_run:
        console.print("[green]Ready![/green]\n")

    show_welcome()
    session = QuizSession()

    while True:
        show_menu(current_user_id(db_path))
        choice = Prompt.ask("\n[bold]>[/bold]", default="browse").strip().lower()
        try:
            if choice == "browse":
                cmd_browse(db_path)
            elif choice == "quiz":
                cmd_quiz(db_path, session)
            elif choice == "login":
                cmd_login(db_path)
            elif choice == "logout":
                cmd_logout(db_path)
            elif choice == "import":
                cmd_import(db_path)
            elif choice == "user-event":
                cmd_user_event(db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you next time![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Progress saved. Back to menu.[/dim]")
        except CatalogNotFoundError as e:
            console.print(f"[red]Not found: {e}[/red]")
        except FlashquizError as e:
            console.print(f"[red]{e}[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
