"""Command-line interface for the library service.

Built with Typer for commands and Rich for beautiful output.
"""

import logging
import time
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .catalog import CatalogManager
from .config import get_config
from .db import get_db
from .db.schemas import BookCreate, BookFilter, BookUpdate, PageRequest
from .errors import LibraryError
from .lending import LendingManager, LoanFilter

DEFAULT_PAGE_SIZE = 20

# Create the main app
app = typer.Typer(
    name="library",
    help="Manage a library catalog and book loans.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
book_app = typer.Typer(help="Manage the book catalog.")
app.add_typer(book_app, name="book")

loan_app = typer.Typer(help="Issue, return and search loans.")
app.add_typer(loan_app, name="loan")

notify_app = typer.Typer(help="Overdue loan notifications.")
app.add_typer(notify_app, name="notify")

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{message}[/dim]")


def setup_logging(level: str) -> None:
    """Route log records through Rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def get_catalog() -> CatalogManager:
    return CatalogManager(get_db(str(get_config().db_path)))


def get_lending() -> LendingManager:
    config = get_config()
    db = get_db(str(config.db_path))
    return LendingManager(db, CatalogManager(db), grace_days=config.grace_days)


def build_job():
    """Wire the overdue notification job from configuration."""
    from .notify import notifier_from_config
    from .schedule import OverdueNotificationJob

    config = get_config()
    return OverdueNotificationJob(
        get_lending(),
        notifier_from_config(config),
        config.overdue_message,
    )


def format_book_table(books: list, title: str = "Books") -> Table:
    """Create a rich table for displaying books."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("ISBN", style="yellow")
    table.add_column("Title", style="cyan", no_wrap=False, max_width=40)
    table.add_column("Author", style="green", max_width=25)

    for book in books:
        table.add_row(str(book.id), book.isbn, book.title, book.author)

    return table


def format_loan_table(loans: list, title: str = "Loans") -> Table:
    """Create a rich table for displaying loans."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("ISBN", style="yellow")
    table.add_column("Customer", style="cyan")
    table.add_column("Email")
    table.add_column("Date")
    table.add_column("Status")

    for loan in loans:
        status = "[green]Returned[/green]" if loan.returned else "[yellow]Active[/yellow]"
        table.add_row(
            str(loan.id),
            loan.isbn,
            loan.customer,
            loan.customer_email or "-",
            loan.loan_date,
            status,
        )

    return table


def print_page_footer(page) -> None:
    print_info(f"Page {page.page + 1} of {max(page.total_pages, 1)} ({page.total} total)")


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Manage a library catalog and book loans."""
    setup_logging("DEBUG" if verbose else get_config().log_level)


# ============================================================================
# Book Commands
# ============================================================================


@book_app.command("add")
def book_add(
    isbn: str = typer.Option(..., "--isbn", "-i", help="Book ISBN"),
    title: str = typer.Option(..., "--title", "-t", help="Book title"),
    author: str = typer.Option(..., "--author", "-a", help="Book author"),
) -> None:
    """Add a book to the catalog."""
    try:
        book = get_catalog().add_book(BookCreate(isbn=isbn, title=title, author=author))
    except (LibraryError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Added: {book.title} (ID: {book.id})")


@book_app.command("show")
def book_show(
    book_id: Optional[int] = typer.Argument(None, help="Book ID"),
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="Look up by ISBN instead"),
) -> None:
    """Show a book by ID or ISBN."""
    catalog = get_catalog()
    try:
        if isbn:
            book = catalog.get_book_by_isbn(isbn)
        elif book_id is not None:
            book = catalog.get_book(book_id)
        else:
            print_error("Provide a book ID or --isbn")
            raise typer.Exit(1)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(format_book_table([book], title=book.title))


@book_app.command("update")
def book_update(
    book_id: int = typer.Argument(..., help="Book ID"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="New title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="New author"),
) -> None:
    """Update a book's title or author."""
    update = BookUpdate(**{k: v for k, v in {"title": title, "author": author}.items() if v})
    try:
        book = get_catalog().update_book(book_id, update)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Updated: {book.title}")


@book_app.command("delete")
def book_delete(
    book_id: int = typer.Argument(..., help="Book ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a book from the catalog."""
    catalog = get_catalog()
    try:
        book = catalog.get_book(book_id)
        if not yes and not typer.confirm(f"Delete '{book.title}'?"):
            print_info("Cancelled")
            return
        catalog.delete_book(book_id)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Deleted: {book.title}")


@book_app.command("find")
def book_find(
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="ISBN contains"),
    title: Optional[str] = typer.Option(None, "--title", "-t", help="Title contains"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author contains"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Page number (from 0)"),
    size: int = typer.Option(DEFAULT_PAGE_SIZE, "--size", "-s", min=1, help="Page size"),
) -> None:
    """Search the catalog."""
    result = get_catalog().find_books(
        BookFilter(isbn=isbn, title=title, author=author),
        PageRequest(page=page, size=size),
    )

    if not result.items:
        console.print("[dim]No books found[/dim]")
        return

    console.print(format_book_table(result.items))
    print_page_footer(result)


# ============================================================================
# Loan Commands
# ============================================================================


@loan_app.command("issue")
def loan_issue(
    isbn: str = typer.Argument(..., help="ISBN of the book to lend"),
    customer: str = typer.Argument(..., help="Customer name"),
    email: str = typer.Option(..., "--email", "-e", help="Customer email"),
) -> None:
    """Lend a book to a customer."""
    try:
        loan = get_lending().issue_loan_for_isbn(isbn, customer, email)
    except (LibraryError, ValueError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Loan {loan.id} issued to {customer}")


@loan_app.command("show")
def loan_show(
    loan_id: int = typer.Argument(..., help="Loan ID"),
) -> None:
    """Show a loan and its book."""
    lending = get_lending()
    try:
        loan = lending.get_loan(loan_id)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    console.print(format_loan_table([loan], title=f"Loan {loan.id}"))
    book = lending.get_book_for_loan(loan)
    if book:
        console.print(f"Book: [cyan]{book.title}[/cyan] by [green]{book.author}[/green]")
    else:
        print_info("Book has been removed from the catalog")


@loan_app.command("return")
def loan_return(
    loan_id: int = typer.Argument(..., help="Loan ID to return"),
) -> None:
    """Mark a loan as returned."""
    try:
        get_lending().mark_returned(loan_id)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success("Loan marked as returned")


@loan_app.command("find")
def loan_find(
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="Match ISBN"),
    customer: Optional[str] = typer.Option(None, "--customer", "-c", help="Match customer"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Page number (from 0)"),
    size: int = typer.Option(DEFAULT_PAGE_SIZE, "--size", "-s", min=1, help="Page size"),
) -> None:
    """Find loans by ISBN or customer."""
    result = get_lending().find_loans(
        LoanFilter(isbn=isbn, customer=customer),
        PageRequest(page=page, size=size),
    )

    if not result.items:
        console.print("[dim]No loans found[/dim]")
        return

    console.print(format_loan_table(result.items))
    print_page_footer(result)


@loan_app.command("history")
def loan_history(
    book_id: int = typer.Argument(..., help="Book ID"),
    page: int = typer.Option(0, "--page", "-p", min=0, help="Page number (from 0)"),
    size: int = typer.Option(DEFAULT_PAGE_SIZE, "--size", "-s", min=1, help="Page size"),
) -> None:
    """Show every loan of a book."""
    lending = get_lending()
    try:
        book = lending.catalog.get_book(book_id)
    except LibraryError as e:
        print_error(str(e))
        raise typer.Exit(1)

    result = lending.list_loans_for_book(book.id, PageRequest(page=page, size=size))
    if not result.items:
        console.print(f"[dim]'{book.title}' has never been loaned[/dim]")
        return

    console.print(format_loan_table(result.items, title=f"Loans of {book.title}"))
    print_page_footer(result)


@loan_app.command("overdue")
def loan_overdue() -> None:
    """List loans past the grace period."""
    lending = get_lending()
    loans = lending.get_overdue_loans()

    if not loans:
        console.print("[dim]No overdue loans[/dim]")
        return

    table = format_loan_table(loans, title="Overdue Loans")
    console.print(table)
    print_info(f"Loans issued before {lending.scanner.cutoff()} are overdue")


# ============================================================================
# Notification Commands
# ============================================================================


@notify_app.command("run")
def notify_run() -> None:
    """Send the overdue notification once, now."""
    run = build_job().run()

    if run.success:
        print_success(f"Notified {len(run.recipients)} recipients")
    else:
        print_error(f"Notification failed: {run.error}")
        raise typer.Exit(1)


@app.command()
def serve(
    interval: Optional[float] = typer.Option(
        None, "--interval", help="Seconds between runs (default from config)"
    ),
) -> None:
    """Run the overdue notification scheduler until interrupted."""
    from .schedule import PeriodicScheduler

    config = get_config()
    errors = config.validate()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)

    scheduler = PeriodicScheduler(build_job(), interval or config.schedule_interval)
    scheduler.start()
    console.print("[bold]Scheduler running.[/bold] Press Ctrl+C to stop.")
    try:
        while scheduler.running:
            time.sleep(1)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopping, waiting for the current run to finish...[/dim]")
    finally:
        scheduler.stop(wait=True)


# ============================================================================
# Version Command
# ============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from . import __version__

    console.print(f"library version {__version__}")


# ============================================================================
# Main Entry Point
# ============================================================================


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
