"""Command-line interface for Site Chat."""

from __future__ import annotations

import logging
from datetime import datetime

import click
from dotenv import load_dotenv

from config.settings import Settings
from core.scraper import ANTHROPIC_KEY, FIRECRAWL_KEY, get_api_key, save_api_key
from core.session import build_session
from core.storage import SqliteStore

_KEY_NAMES = {"firecrawl": FIRECRAWL_KEY, "anthropic": ANTHROPIC_KEY}


def _fmt_ms(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000).strftime("%Y-%m-%d %H:%M")


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline steps.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Ask questions about web pages you have scraped."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("settings", Settings())


def _session(ctx: click.Context):
    if "session" not in ctx.obj:
        settings = ctx.obj["settings"]
        storage = SqliteStore(settings.db_path)
        try:
            settings.validate(get_api_key(storage, ANTHROPIC_KEY))
        except ValueError as exc:
            raise click.ClickException(str(exc)) from exc
        ctx.obj["session"] = build_session(settings, storage)
    return ctx.obj["session"]


@cli.command()
@click.argument("url")
@click.pass_context
def scrape(ctx: click.Context, url: str) -> None:
    """Fetch URL and add it to the content cache."""
    result = _session(ctx).scrape(url)
    if not result.success:
        raise click.ClickException(result.error or "Failed to scrape website")
    record = result.data
    click.echo(click.style(f"✓ {record.title}", fg="green"))
    click.echo(f"  {len(record.body)} chars, {len(record.links)} links")


@cli.command()
@click.argument("question", nargs=-1, required=True)
@click.option("-u", "--url", "urls", multiple=True, help="Limit to these cached pages.")
@click.pass_context
def ask(ctx: click.Context, question: tuple[str, ...], urls: tuple[str, ...]) -> None:
    """Ask QUESTION about cached pages."""
    result = _session(ctx).ask(" ".join(question), list(urls) or None)
    if not result.success:
        raise click.ClickException(result.error or "Failed to get response")
    click.echo(result.response)
    click.echo(click.style(f"\nSources: {len(result.sources)} website(s)", dim=True))


@cli.command()
@click.pass_context
def sites(ctx: click.Context) -> None:
    """List cached pages, most recent first."""
    records = _session(ctx).sites()
    if not records:
        click.echo("No websites scraped yet.")
        return
    for record in records:
        click.echo(f"{_fmt_ms(record.fetched_at)}  {record.title}\n    {record.url}")


@cli.command()
@click.pass_context
def history(ctx: click.Context) -> None:
    """Replay the conversation."""
    messages = _session(ctx).history()
    if not messages:
        click.echo("No messages yet.")
        return
    for message in messages:
        who = click.style("you", fg="cyan") if message.is_user else click.style("bot", fg="green")
        click.echo(f"[{_fmt_ms(message.timestamp)}] {who}: {message.content}")


@cli.command("clear-history")
@click.pass_context
def clear_history(ctx: click.Context) -> None:
    """Delete the conversation."""
    _session(ctx).clear_history()
    click.echo("Conversation history has been cleared.")


@cli.command("clear-sites")
@click.pass_context
def clear_sites(ctx: click.Context) -> None:
    """Delete all cached pages."""
    _session(ctx).clear_sites()
    click.echo("Content cache has been cleared.")


@cli.command("set-key")
@click.argument("service", type=click.Choice(sorted(_KEY_NAMES)))
@click.argument("value", default="")
@click.pass_context
def set_key(ctx: click.Context, service: str, value: str) -> None:
    """Store an API key for SERVICE locally (empty VALUE removes it)."""
    storage = SqliteStore(ctx.obj["settings"].db_path)
    save_api_key(storage, _KEY_NAMES[service], value)
    click.echo(f"{service} key {'saved' if value.strip() else 'removed'}.")


@cli.command()
@click.option("--port", type=int, default=None, help="Port (defaults to $PORT).")
@click.pass_context
def serve(ctx: click.Context, port: int | None) -> None:
    """Run the JSON API server."""
    from web.app import create_app

    settings = ctx.obj["settings"]
    logging.getLogger().setLevel(logging.INFO)
    create_app(settings).run(debug=settings.debug, host="0.0.0.0", port=port or settings.port)


if __name__ == "__main__":
    cli()
