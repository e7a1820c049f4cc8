import json
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from school_library.book import BookDraft
from school_library.errors import LookupFailed
from school_library.library import Library
from school_library.main import LibraryManager, app

runner = CliRunner()


@pytest.fixture(autouse=True)
def fresh_manager():
    LibraryManager.reset()
    yield
    LibraryManager.reset()


def test_list_shows_demo_books():
    result = runner.invoke(app, ["list"])
    assert result.exit_code == 0
    assert "1 - Laskar Pelangi by Andrea Hirata [available, stock 3]" in result.stdout
    assert "3 - Filosofi Teras by Henry Manampiring [borrowed, stock 0]" in result.stdout


def test_list_with_category_filter():
    result = runner.invoke(app, ["list", "--category", "History"])
    assert result.exit_code == 0
    assert "Sapiens" in result.stdout
    assert "Laskar Pelangi" not in result.stdout


def test_search_no_match():
    result = runner.invoke(app, ["search", "zzz"])
    assert result.exit_code == 0
    assert "No books found." in result.stdout


def test_json_output_mode():
    result = runner.invoke(app, ["--output", "json", "search", "Atomic"])
    assert result.exit_code == 0
    books = json.loads(result.stdout.strip().splitlines()[-1])
    assert books[0]["title"] == "Atomic Habits"
    assert books[0]["status"] == "available"


def test_loans_for_student():
    result = runner.invoke(app, ["loans", "12346"])
    assert result.exit_code == 0
    assert "Sejarah Dunia yang Disembunyikan | Siti Nurhaliza (XI IPS 2)" in result.stdout

    result = runner.invoke(app, ["loans", "99999"])
    assert "No active loans for NIS 99999." in result.stdout


def test_stats():
    result = runner.invoke(app, ["stats"])
    assert result.exit_code == 0
    assert "Total Books: 6" in result.stdout
    assert "Active Loans: 2" in result.stdout


def test_lookup_prints_draft(monkeypatch):
    draft = BookDraft(title="Bumi Manusia", author="Pramoedya Ananta Toer", year=1980, category="Novel")
    monkeypatch.setattr(Library, "lookup", AsyncMock(return_value=draft))

    result = runner.invoke(app, ["lookup", "Bumi Manusia"])
    assert result.exit_code == 0
    assert "Title: Bumi Manusia" in result.stdout
    assert "Author: Pramoedya Ananta Toer" in result.stdout


def test_lookup_failure_exits_non_zero(monkeypatch):
    monkeypatch.setattr(Library, "lookup", AsyncMock(side_effect=LookupFailed("Google Books returned HTTP 503")))

    result = runner.invoke(app, ["lookup", "Bumi Manusia"])
    assert result.exit_code == 1
    assert "Lookup failed: Google Books returned HTTP 503" in result.stdout


@patch("subprocess.run")
def test_serve_command(mock_subprocess_run):
    result = runner.invoke(app, ["serve", "--port", "8123"])
    assert result.exit_code == 0
    assert "Starting API on http://" in result.stdout
    args = mock_subprocess_run.call_args[0][0]
    assert "uvicorn" in args
    assert "school_library.api:app" in args
    assert args[args.index("--port") + 1] == "8123"
