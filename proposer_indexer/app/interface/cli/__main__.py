import asyncio
import logging
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer
from dotenv import load_dotenv
from InquirerPy import inquirer

from proposer_indexer.app.domain.errors import ProposerIndexerError
from proposer_indexer.app.interface.tasks import TASKS
from proposer_indexer.app.interface.tasks.height_gaps_task import height_gaps_task
from proposer_indexer.app.interface.tasks.index_proposers_task import (
    index_proposers_forever_task,
    index_proposers_once_task,
)
from proposer_indexer.app.interface.tasks.statistics_task import serve_statistics_task


load_dotenv()

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("proposer_indexer.cli")

T = TypeVar("T")

app = typer.Typer()
indexer_app = typer.Typer(help="cli for indexing block proposers.")
statistics_app = typer.Typer(help="cli for the proposer statistics API.")
app.add_typer(indexer_app, name="indexer")
app.add_typer(statistics_app, name="statistics")


def _run(task: Coroutine[Any, Any, T]) -> T:
    try:
        return asyncio.run(task)
    except ProposerIndexerError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)


@indexer_app.command("run")
def run() -> None:
    task_name = inquirer.select(
        message="Select task:",
        choices=list(TASKS.keys()),
        pointer="❯",
        instruction="Use ↑/↓ to move, Enter to select",
    ).execute()

    _run(TASKS[task_name]())


@indexer_app.command("forever")
def forever() -> None:
    """Index new blocks every INDEXER_INTERVAL_SECONDS until stopped."""
    _run(index_proposers_forever_task())


@indexer_app.command("once")
def once() -> None:
    """Run a single indexing cycle."""
    report = _run(index_proposers_once_task())
    typer.echo(
        f"heights=[{report.first_height}, {report.latest_height}) "
        f"batches={report.batches} records={report.records}"
    )


@indexer_app.command("gaps")
def gaps() -> None:
    """Report missing heights; exits with code 1 when any gap exists."""
    found = _run(height_gaps_task())
    if found:
        raise typer.Exit(code=1)


@statistics_app.command("serve")
def serve() -> None:
    """Serve GET /stat?validator=... until stopped."""
    _run(serve_statistics_task())


if __name__ == "__main__":
    app()
