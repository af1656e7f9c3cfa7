"""Command-line entry point.

Runs one blocking execution that prints a message, then one background
execution whose action sleeps for a second, and reports its timing::

    random-delay --max-duration 5s --message "hello"
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Optional

import typer

from .cancellation import CancellationToken
from .config import ExecutorOption, with_random_source
from .executor import RandomDelayExecutor
from .primitives.exceptions import InvalidConfigurationError
from .primitives.random_source import seeded_random_source

logger = logging.getLogger("random_delay.cli")

app = typer.Typer(
    name="random-delay",
    help="Execute an action at a random time within a maximum duration.",
    add_completion=False,
)

ASYNC_ACTION_SLEEP = 1.0


class LogLevel(str, enum.Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@app.command()
def main(
    max_duration: str = typer.Option(
        "1m",
        "--max-duration",
        "-d",
        envvar="RANDOM_DELAY_MAX_DURATION",
        help="Maximum duration for random execution (e.g., 1s, 5m, 2h)",
    ),
    message: str = typer.Option(
        "Action executed!",
        "--message",
        "-m",
        help="Message to print when action is executed",
    ),
    seed: Optional[int] = typer.Option(  # noqa: UP007
        None,
        "--seed",
        envvar="RANDOM_DELAY_SEED",
        help="Seed the random source for reproducible delays",
    ),
    log_level: LogLevel = typer.Option(
        LogLevel.INFO,
        "--log-level",
        case_sensitive=False,
        help="Logging verbosity",
    ),
) -> None:
    """Wait a random delay, print MESSAGE, then run one background execution."""
    logging.basicConfig(
        level=log_level.value,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    options: list[ExecutorOption] = []
    if seed is not None:
        options.append(with_random_source(seeded_random_source(seed)))

    try:
        executor = RandomDelayExecutor.create(max_duration, *options)
    except InvalidConfigurationError as exc:
        logger.critical("Failed to create executor: %s", exc)
        raise typer.Exit(code=1) from exc

    asyncio.run(_run(executor, max_duration, message))


async def _run(executor: RandomDelayExecutor, max_duration: str, message: str) -> None:
    token = CancellationToken()

    typer.echo(f"Waiting up to {max_duration} to execute the action...")
    try:
        await executor.execute(token, lambda: typer.echo(message))
    except Exception as exc:
        logger.critical("Execution failed: %s", exc)
        raise typer.Exit(code=1) from exc

    async def _async_action() -> None:
        await asyncio.sleep(ASYNC_ACTION_SLEEP)
        typer.echo("Async action executed!")

    result = await executor.execute_async(token, _async_action)
    if result.error is not None:
        logger.warning("Async execution failed: %s", result.error)
    else:
        typer.echo(
            f"Async execution completed. Start: {result.start_time}, "
            f"End: {result.end_time}"
        )
