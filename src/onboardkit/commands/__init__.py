"""Operator CLI commands."""

import asyncio
import sys
from collections.abc import Awaitable, Callable
from typing import TypeVar

import typer
from rich.console import Console

from onboardkit.config import get_settings
from onboardkit.core.context import ServiceContext, open_context
from onboardkit.core.errors import AppException
from onboardkit.core.logging import configure_logging


T = TypeVar("T")

console = Console()


def run_operation(operation: Callable[[ServiceContext], Awaitable[T]]) -> T:
    """Run one async operation inside a fresh service context.

    Logs go to stderr so command output stays machine-readable. Application
    errors are printed and turned into exit code 1.
    """
    settings = get_settings()
    configure_logging(settings, stream=sys.stderr)

    async def _run() -> T:
        async with open_context(settings) as ctx:
            return await operation(ctx)

    try:
        return asyncio.run(_run())
    except AppException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e
