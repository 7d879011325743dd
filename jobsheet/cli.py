"""Command-line interface for jobsheet."""
import logging
from pathlib import Path
from typing import List, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from .config import resolve_feeds, find_feed, load_pinned, config
from .dates import to_display
from .exams import exams_by_type
from .fetcher import PostingFetcher, ExamFetcher, FetchResult
from .mapper import RecordMapper
from .models import JobPosting
from .views import (
    category_facets,
    filter_postings,
    latest_postings,
    ticker_postings,
)

console = Console()


def _postings_fetcher(config_file: Optional[str]) -> Optional[PostingFetcher]:
    path = Path(config_file) if config_file else None
    feed = find_feed(resolve_feeds(path), "postings")
    if feed is None:
        console.print("[red]No postings feed configured (feeds.yml or SHEET_URL)[/red]")
        return None
    return PostingFetcher(feed, mapper=RecordMapper(pinned=load_pinned(path)))


def _load_postings(ctx: click.Context, refresh: bool = False) -> Optional[List[JobPosting]]:
    fetcher = _postings_fetcher(ctx.obj.get("config_file"))
    if fetcher is None:
        return None
    result = fetcher.fetch_postings(force_refresh=refresh)
    if not _report_error(result):
        return None
    return result.data


def _report_error(result: FetchResult) -> bool:
    if result.ok:
        return True
    console.print(f"[red]{result.error}[/red]")
    return False


def _postings_table(title: str, postings: List[JobPosting]) -> Table:
    table = Table(title=title)
    table.add_column("Title", style="cyan")
    table.add_column("Category", style="green")
    table.add_column("Start", style="blue")
    table.add_column("Last Date", style="magenta")
    table.add_column("Link", style="yellow")
    for posting in postings:
        table.add_row(
            posting.title,
            posting.category,
            to_display(posting.start_date),
            to_display(posting.last_date),
            posting.source_sheet_link or "",
        )
    return table


@click.group()
@click.option('--config-file', type=click.Path(exists=True, dir_okay=False), help='Path to feeds.yml')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx: click.Context, config_file: Optional[str], verbose: bool):
    """jobsheet - job postings and practice exams from spreadsheet exports."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file


@cli.command()
@click.option('--category', '-c', multiple=True, help='Category to include (repeatable)')
@click.option('--text', '-t', default='', help='Search text for title or description')
@click.option('--limit', type=int, default=50, help='Maximum number of postings to show')
@click.option('--refresh', is_flag=True, help='Bypass the cache')
@click.pass_context
def jobs(ctx: click.Context, category: Tuple[str, ...], text: str, limit: int, refresh: bool):
    """List postings, optionally filtered."""
    postings = _load_postings(ctx, refresh)
    if postings is None:
        ctx.exit(1)
    filtered = filter_postings(postings, categories=category, text=text)
    if not filtered:
        console.print("[yellow]No postings found matching your criteria[/yellow]")
        return
    console.print(_postings_table(f"Postings ({len(filtered)})", filtered[:limit]))


@cli.command()
@click.option('--limit', type=int, default=None, help='Number of postings to show')
@click.pass_context
def latest(ctx: click.Context, limit: Optional[int]):
    """Show the most recent postings."""
    postings = _load_postings(ctx)
    if postings is None:
        ctx.exit(1)
    if limit is None:
        limit = config.get_view_config()['latest_limit']
    console.print(_postings_table("Latest Updates", latest_postings(postings, limit=limit)))


@cli.command()
@click.option('--limit', type=int, default=None, help='Number of postings to show')
@click.pass_context
def ticker(ctx: click.Context, limit: Optional[int]):
    """Show recent postings that are still open."""
    postings = _load_postings(ctx)
    if postings is None:
        ctx.exit(1)
    if limit is None:
        limit = config.get_view_config()['ticker_limit']
    for posting in ticker_postings(postings, limit=limit):
        console.print(f"[green]•[/green] {posting.title} [dim](last date: {to_display(posting.last_date)})[/dim]")


@cli.command()
@click.pass_context
def categories(ctx: click.Context):
    """List the available category facets."""
    postings = _load_postings(ctx)
    if postings is None:
        ctx.exit(1)
    for facet in category_facets(postings):
        console.print(facet)


@cli.command()
@click.option('--refresh', is_flag=True, help='Bypass the cache')
@click.pass_context
def exams(ctx: click.Context, refresh: bool):
    """List published practice exams grouped by type."""
    config_file = ctx.obj.get("config_file")
    feed = find_feed(resolve_feeds(Path(config_file) if config_file else None), "exams")
    if feed is None:
        console.print("[red]No exams feed configured (feeds.yml or EXAMS_SHEET_URL)[/red]")
        ctx.exit(1)
    result = ExamFetcher(feed).fetch_exams(force_refresh=refresh)
    if not _report_error(result):
        ctx.exit(1)

    grouped = exams_by_type(result.data)
    if not grouped:
        console.print("[yellow]No published exams[/yellow]")
        return
    for exam_type, type_exams in grouped.items():
        table = Table(title=f"{exam_type} Exams")
        table.add_column("Exam", style="cyan")
        table.add_column("Questions", style="green")
        table.add_column("Minutes", style="blue")
        table.add_column("Negative Marking", style="magenta")
        for exam in type_exams:
            table.add_row(exam.name, str(exam.total_questions),
                          str(exam.duration_minutes), f"{exam.negative_marking:g}")
        console.print(table)


@cli.command()
@click.option('--host', default=None, help='Host to bind the server to')
@click.option('--port', type=int, default=None, help='Port to bind the server to')
@click.pass_context
def web(ctx: click.Context, host: Optional[str], port: Optional[int]):
    """Start the JSON API server."""
    from .web.app import run_server

    web_config = config.get_web_config()
    host = host or web_config['host']
    port = port or web_config['port']
    console.print(f"[green]Starting API at http://{host}:{port}[/green]")
    run_server(host=host, port=port, config_file=ctx.obj.get("config_file"))


def main():
    """Main entry point for the CLI."""
    cli(obj={})
