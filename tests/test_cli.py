"""Tests for the CLI interface."""

import os
import tempfile
from datetime import date, timedelta
from pathlib import Path

import pytest
from typer.testing import CliRunner

from libraryapi.cli import app
from libraryapi.config import reset_config
from libraryapi.db.sqlite import get_db, reset_db
from libraryapi.lending.models import Loan


@pytest.fixture(autouse=True)
def setup_test_db(clean_env):
    """Set up a test database for each test."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = f.name

    os.environ["LIBRARY_DB_PATH"] = db_path
    os.environ["LIBRARY_MAIL_BACKEND"] = "console"

    yield db_path

    # Cleanup
    reset_db()
    reset_config()
    if Path(db_path).exists():
        Path(db_path).unlink()


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


def add_book(runner: CliRunner, isbn: str = "123", title: str = "As Aventuras"):
    return runner.invoke(
        app, ["book", "add", "--isbn", isbn, "--title", title, "--author", "Autor"]
    )


def backdate_loans(days: int) -> None:
    """Move every loan's issue date into the past."""
    with get_db().get_session() as session:
        for loan in session.query(Loan).all():
            loan.loan_date = (date.today() - timedelta(days=days)).isoformat()


class TestCLIBasics:
    """Tests for basic CLI functionality."""

    def test_help(self, runner: CliRunner):
        """Test that help command works."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "library catalog" in result.stdout

    def test_version(self, runner: CliRunner):
        """Test version command."""
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout


class TestBookCommands:
    """Tests for book commands."""

    def test_add_book(self, runner: CliRunner):
        """Test adding a book."""
        result = add_book(runner)
        assert result.exit_code == 0
        assert "Added:" in result.stdout

    def test_add_duplicate(self, runner: CliRunner):
        """Test a duplicate ISBN is an error."""
        add_book(runner)
        result = add_book(runner, title="Other")

        assert result.exit_code == 1
        assert "ISBN already registered" in result.stdout

    def test_show_by_isbn(self, runner: CliRunner):
        """Test showing a book by ISBN."""
        add_book(runner)
        result = runner.invoke(app, ["book", "show", "--isbn", "123"])

        assert result.exit_code == 0
        assert "As Aventuras" in result.stdout

    def test_show_missing(self, runner: CliRunner):
        """Test showing a missing book."""
        result = runner.invoke(app, ["book", "show", "42"])
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_update(self, runner: CliRunner):
        """Test updating a book."""
        add_book(runner)
        result = runner.invoke(app, ["book", "update", "1", "--title", "Renamed"])

        assert result.exit_code == 0
        assert "Renamed" in result.stdout

    def test_delete(self, runner: CliRunner):
        """Test deleting a book with confirmation skipped."""
        add_book(runner)
        result = runner.invoke(app, ["book", "delete", "1", "--yes"])

        assert result.exit_code == 0
        assert "Deleted:" in result.stdout

    def test_find(self, runner: CliRunner):
        """Test searching the catalog."""
        add_book(runner, "111", "Dune")
        add_book(runner, "222", "Neuromancer")
        result = runner.invoke(app, ["book", "find", "--title", "dune"])

        assert result.exit_code == 0
        assert "Dune" in result.stdout
        assert "Neuromancer" not in result.stdout

    def test_find_empty(self, runner: CliRunner):
        """Test searching an empty catalog."""
        result = runner.invoke(app, ["book", "find"])
        assert result.exit_code == 0
        assert "No books found" in result.stdout


class TestLoanCommands:
    """Tests for loan commands."""

    def test_issue_and_return(self, runner: CliRunner):
        """Test the loan lifecycle through the CLI."""
        add_book(runner)

        result = runner.invoke(app, ["loan", "issue", "123", "Fulano", "--email", "f@email.com"])
        assert result.exit_code == 0
        assert "Loan 1 issued" in result.stdout

        result = runner.invoke(app, ["loan", "issue", "123", "Ciclano", "--email", "c@email.com"])
        assert result.exit_code == 1
        assert "Book already loaned" in result.stdout

        result = runner.invoke(app, ["loan", "return", "1"])
        assert result.exit_code == 0

        result = runner.invoke(app, ["loan", "issue", "123", "Ciclano", "--email", "c@email.com"])
        assert result.exit_code == 0

    def test_issue_unknown_isbn(self, runner: CliRunner):
        """Test issuing a loan for a book not in the catalog."""
        result = runner.invoke(app, ["loan", "issue", "999", "Fulano", "--email", "f@email.com"])

        assert result.exit_code == 1
        assert "Book not found for this ISBN" in result.stdout

    def test_find_and_history(self, runner: CliRunner):
        """Test loan search and per-book history."""
        add_book(runner)
        runner.invoke(app, ["loan", "issue", "123", "Fulano", "--email", "f@email.com"])

        result = runner.invoke(app, ["loan", "find", "--customer", "Fulano"])
        assert result.exit_code == 0
        assert "Fulano" in result.stdout

        result = runner.invoke(app, ["loan", "history", "1"])
        assert result.exit_code == 0
        assert "Fulano" in result.stdout

    def test_show_loan(self, runner: CliRunner):
        """Test showing a loan with its book."""
        add_book(runner)
        runner.invoke(app, ["loan", "issue", "123", "Fulano", "--email", "f@email.com"])

        result = runner.invoke(app, ["loan", "show", "1"])
        assert result.exit_code == 0
        assert "As Aventuras" in result.stdout

    def test_overdue(self, runner: CliRunner):
        """Test listing overdue loans."""
        add_book(runner)
        runner.invoke(app, ["loan", "issue", "123", "Fulano", "--email", "f@email.com"])

        result = runner.invoke(app, ["loan", "overdue"])
        assert "No overdue loans" in result.stdout

        backdate_loans(10)
        result = runner.invoke(app, ["loan", "overdue"])
        assert result.exit_code == 0
        assert "Fulano" in result.stdout


class TestNotifyCommands:
    """Tests for notification commands."""

    def test_notify_run(self, runner: CliRunner):
        """Test a one-off notification run with the console backend."""
        add_book(runner)
        runner.invoke(app, ["loan", "issue", "123", "Fulano", "--email", "f@email.com"])
        backdate_loans(10)

        result = runner.invoke(app, ["notify", "run"])

        assert result.exit_code == 0
        assert "Notified 1 recipients" in result.stdout

    def test_notify_run_nothing_overdue(self, runner: CliRunner):
        """Test a run with nothing overdue still succeeds."""
        result = runner.invoke(app, ["notify", "run"])

        assert result.exit_code == 0
        assert "Notified 0 recipients" in result.stdout
