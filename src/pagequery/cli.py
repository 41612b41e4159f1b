from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any, Optional

import orjson
import typer

from .browser import BrowserSession
from .config import Settings
from .errors import ConfigurationError
from .logging import setup_logging
from .page import QueryEngine
from .processor import PageProcessor

app = typer.Typer(no_args_is_help=True)


class OutputMode(str, Enum):
    css = "css"
    xpath = "xpath"
    data = "data"


def main() -> None:
    app()


def _settings(provider: Optional[str]) -> Settings:
    settings = Settings.from_env()
    if provider:
        settings.llm_provider = provider  # type: ignore[assignment]
    settings.ensure_directories()
    setup_logging(settings.log_level, settings.log_dir / "pagequery.log")
    return settings


def resolve_headless(flag: Optional[bool], settings: Settings) -> bool:
    """An explicit --headless/--headful wins over HEADLESS_DEFAULT."""

    return settings.headless_default if flag is None else flag


def _echo_json(value: Any) -> None:
    typer.echo(orjson.dumps(value, option=orjson.OPT_INDENT_2, default=str).decode())


@app.command()
def query(
    url: str = typer.Argument(..., help="Page to open"),
    text: str = typer.Argument(..., help="Natural language or structured query"),
    mode: OutputMode = typer.Option(OutputMode.css, help="What to return for matched elements"),
    provider: Optional[str] = typer.Option(None, help="LLM provider override (gemini or openai)"),
    headless: Optional[bool] = typer.Option(None, "--headless/--headful", help="Browser mode (default: HEADLESS_DEFAULT)"),
) -> None:
    """Ask a question about a page and print the JSON answer."""

    settings = _settings(provider)
    try:
        engine = QueryEngine.from_settings(settings)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    result = asyncio.run(_query(engine, url, text, mode, headless=resolve_headless(headless, settings)))
    _echo_json(result)


async def _query(engine: QueryEngine, url: str, text: str, mode: OutputMode, headless: bool) -> Any:
    try:
        async with BrowserSession(headless=headless) as session:
            page = engine.wrap(await session.open(url))
            if mode is OutputMode.data:
                return await page.get_data_by_query(text)
            if mode is OutputMode.xpath:
                return await page.get_xpath_by_query(text)
            return await page.get_css_path_by_query(text)
    finally:
        await engine.close()


@app.command()
def compact(
    url: str = typer.Argument(..., help="Page to open"),
    headless: Optional[bool] = typer.Option(None, "--headless/--headful", help="Browser mode (default: HEADLESS_DEFAULT)"),
) -> None:
    """Print the compacted page exactly as it would be sent to the LLM."""

    settings = _settings(None)
    processor = PageProcessor(address_length=settings.address_length)

    async def _run() -> str:
        async with BrowserSession(headless=resolve_headless(headless, settings)) as session:
            compacted = await processor.compact(await session.open(url))
            return compacted.render()

    typer.echo(asyncio.run(_run()))


@app.command()
def markdown(
    url: str = typer.Argument(..., help="Page to open"),
    headless: Optional[bool] = typer.Option(None, "--headless/--headful", help="Browser mode (default: HEADLESS_DEFAULT)"),
) -> None:
    """Print the Markdown rendering used for data queries."""

    settings = _settings(None)

    async def _run() -> str:
        async with BrowserSession(headless=resolve_headless(headless, settings)) as session:
            return await PageProcessor().extract_markdown(await session.open(url))

    typer.echo(asyncio.run(_run()))
