"""Command-line interface for validating and executing request configs."""

import asyncio
import json
import logging
import sys
from typing import TextIO

import click

from httpexec.executor import HttpRequestExecutor
from httpexec.models import ExecutionResult
from httpexec.observability import configure_logging
from httpexec.settings import get_settings
from httpexec.validator import validate_request


@click.group()
@click.version_option(version="0.1.0")
@click.option("--verbose", "-v", is_flag=True, help="Log at debug level.")
@click.option(
    "--log-format",
    type=click.Choice(["json", "console"]),
    default="console",
    show_default=True,
    help="Log output format.",
)
def cli(verbose: bool, log_format: str) -> None:
    """Configuration-driven HTTP request executor."""
    configure_logging(
        level=logging.DEBUG if verbose else logging.WARNING,
        json_format=log_format == "json",
        sensitive_header_patterns=get_settings().sensitive_header_patterns,
    )


@cli.command()
@click.argument("config", type=click.File("r"))
def validate(config: TextIO) -> None:
    """Validate CONFIG (a JSON file, or - for stdin) without sending it."""
    result = validate_request(config.read())

    for error in result.errors:
        click.echo(f"error: {error}", err=True)
    for warning in result.warnings:
        click.echo(f"warning: {warning}", err=True)

    if not result.is_valid:
        sys.exit(1)
    click.echo("valid")


@cli.command()
@click.argument("config", type=click.File("r"))
@click.option(
    "--cancel-after",
    type=float,
    default=None,
    help="Cancel the call after this many seconds.",
)
@click.option(
    "--include-body/--no-include-body",
    default=True,
    show_default=True,
    help="Include the decoded response body in the output.",
)
def run(config: TextIO, cancel_after: float | None, include_body: bool) -> None:
    """Execute CONFIG and print a JSON summary of the result."""
    result = asyncio.run(_run(config.read(), cancel_after))
    click.echo(json.dumps(summarize(result, include_body=include_body), indent=2))
    if not result.is_success:
        sys.exit(1)


async def _run(text: str, cancel_after: float | None) -> ExecutionResult:
    cancel_event = asyncio.Event()
    timer: asyncio.TimerHandle | None = None
    if cancel_after is not None:
        loop = asyncio.get_running_loop()
        timer = loop.call_later(cancel_after, cancel_event.set)

    try:
        async with HttpRequestExecutor(get_settings()) as executor:
            return await executor.execute(text, cancel_event=cancel_event)
    finally:
        if timer is not None:
            timer.cancel()


def summarize(result: ExecutionResult, include_body: bool = True) -> dict[str, object]:
    """Build a JSON-serializable summary of a result.

    Args:
        result: Execution result.
        include_body: Whether to include the decoded body.

    Returns:
        Summary dictionary.
    """
    summary: dict[str, object] = {
        "success": result.is_success,
        "status_code": result.status_code,
        "reason": result.reason_phrase,
        "retry_attempts": result.retry_attempts,
        "elapsed_ms": round(result.elapsed_ms, 2),
        "error": result.error_message,
        "error_class": result.error_class.value if result.error_class else None,
    }
    if include_body:
        summary["body"] = result.content_as_string
    return summary


def main() -> None:
    """Entry point for the httpexec command."""
    cli()


if __name__ == "__main__":
    main()
