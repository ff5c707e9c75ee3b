"""Tests for the maintenance CLI in src/manage.py."""

import asyncio
from datetime import UTC, datetime

import pytest
from manage import main
from reviews.review.model import Review
from reviews.store import set_store
from reviews.store.memory_adapter import InMemoryEntityStore


@pytest.fixture()
def cli_store():
    store = InMemoryEntityStore()

    async def _fill():
        await store.insert(Review("Widget", "old", "Dusty", datetime(2020, 1, 1, tzinfo=UTC)))
        await store.insert(Review("Widget", "new", "Fresh", datetime(2026, 5, 1, tzinfo=UTC)))
        await store.insert(Review("Gadget", "g1", "Meh", datetime(2026, 5, 2, tzinfo=UTC)))

    asyncio.run(_fill())
    set_store(store)
    return store


def test_archive_reports_count_per_product(cli_store, capsys):
    exit_code = main(["--quiet", "archive", "Widget", "Gadget", "--as-of", "2026-06-01T00:00:00+00:00"])

    out = capsys.readouterr().out
    assert exit_code == 0
    assert "Widget: archived 1 review(s)" in out
    assert "Gadget: archived 0 review(s)" in out
    assert [r.row_key for r in cli_store.partition("Widget_archive")] == ["old"]


def test_export_to_stdout(cli_store, capsys):
    exit_code = main(["--quiet", "export", "Widget"])

    lines = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert lines[0] == "CreatedAt,Text"
    assert lines[1].endswith('"Fresh"')
    assert lines[2].endswith('"Dusty"')


def test_export_to_file(cli_store, capsys, tmp_path):
    target = tmp_path / "widget.csv"

    main(["--quiet", "export", "Widget", "-o", str(target)])

    assert f"Wrote {target}" in capsys.readouterr().out
    assert target.read_text(encoding="utf-8").count("\n") == 3


def test_command_is_required():
    with pytest.raises(SystemExit):
        main(["--quiet"])
