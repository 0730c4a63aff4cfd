"""Command line entry point for the cbrt-evds client."""

from __future__ import annotations

from pathlib import Path

import click
import pandas as pd
import structlog

from cbrt_evds.data import EvdsHttpClient, MetadataCatalog, SeriesDownloader
from cbrt_evds.data.endpoints import API_KEY_ENV, BASE_URL, DEFAULT_START_DATE
from cbrt_evds.errors import EvdsError
from cbrt_evds.logging import configure_logging
from cbrt_evds.search import SEARCH_FIELDS, search_catalog

API_KEY_HELP = f"Personal EVDS API key. May also be set via the {API_KEY_ENV} env var."
FREQ_HELP = (
    "Frequency ordinal: 1 day, 2 work day, 3 week, 4 biweekly, 5 month, "
    "6 quarter, 7 six months, 8 year. Defaults to the native frequency."
)
DATE_HELP = "Date as YYYY-MM-DD or DD-MM-YYYY."
OUTPUT_HELP = "Optional path to write the table as CSV instead of printing it."

LOG_FORMAT_CHOICES = ("console", "json")
LOG_LEVEL_CHOICES = ("critical", "error", "warning", "info", "debug")
AGG_CHOICES = ("avg", "first", "last", "max", "min", "sum")

logger = structlog.get_logger(__name__)


def _client(ctx: click.Context) -> EvdsHttpClient:
    """Return the HTTP client configured by the command group."""
    ctx.ensure_object(dict)
    client = ctx.obj.get("client")
    if client is None:
        client = EvdsHttpClient(
            api_key=ctx.obj.get("api_key"),
            base_url=ctx.obj.get("base_url") or BASE_URL,
            timeout=ctx.obj.get("timeout", 30.0),
        )
        ctx.obj["client"] = client
        ctx.call_on_close(client.close)
    return client


def _load_catalog(ctx: click.Context, *, max_workers: int = 1) -> MetadataCatalog:
    """Fetch the full metadata catalog for commands that need series listings."""
    catalog = MetadataCatalog(client=_client(ctx))
    try:
        return catalog.load(max_workers=max_workers)
    except EvdsError as exc:
        raise click.ClickException(str(exc)) from exc


def _emit_table(frame: pd.DataFrame, output: Path | None) -> None:
    """Print a table or write it to CSV."""
    if output is None:
        click.echo(frame.to_string(index=False))
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, index=False)
    click.echo(f"Wrote {len(frame)} rows to {output}")
    logger.debug("table.written", output=str(output), rows=len(frame))


@click.group()
@click.option("--api-key", envvar=API_KEY_ENV, default=None, help=API_KEY_HELP)
@click.option(
    "--base-url",
    envvar="EVDS_BASE_URL",
    default=BASE_URL,
    show_default=True,
    help="Root URL of the EVDS service.",
)
@click.option(
    "--timeout",
    type=float,
    default=30.0,
    show_default=True,
    help="HTTP timeout in seconds.",
)
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False),
    envvar="EVDS_LOG_LEVEL",
    default="warning",
    show_default=True,
    help="Verbosity for structured logs.",
)
@click.option(
    "--log-format",
    type=click.Choice(LOG_FORMAT_CHOICES, case_sensitive=False),
    envvar="EVDS_LOG_FORMAT",
    default="console",
    show_default=True,
    help="Render logs as console-friendly text or JSON.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    api_key: str | None,
    base_url: str,
    timeout: float,
    log_level: str,
    log_format: str,
) -> None:
    """Browse CBRT EVDS metadata and download time series."""
    configure_logging(level=log_level, json_output=log_format.lower() == "json")
    ctx.ensure_object(dict)
    ctx.obj.update({"api_key": api_key, "base_url": base_url, "timeout": timeout})
    logger.bind(command_group="cbrt-evds").debug(
        "cli.initialized",
        api_key=bool(api_key),
        base_url=base_url,
        log_level=log_level.lower(),
        log_format=log_format.lower(),
    )


@cli.command("categories")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help=OUTPUT_HELP)
@click.pass_context
def categories(ctx: click.Context, *, output: Path | None) -> None:
    """List data categories."""
    catalog = MetadataCatalog(client=_client(ctx))
    try:
        frame = catalog.categories_frame()
    except EvdsError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit_table(frame, output)


@cli.command("groups")
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help=OUTPUT_HELP)
@click.pass_context
def groups(ctx: click.Context, *, output: Path | None) -> None:
    """List data groups with their metadata."""
    catalog = MetadataCatalog(client=_client(ctx))
    try:
        frame = catalog.groups_frame()
    except EvdsError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit_table(frame, output)


@cli.command("series-catalog")
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of concurrent series-list requests.",
)
@click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help=OUTPUT_HELP)
@click.pass_context
def series_catalog(ctx: click.Context, *, workers: int, output: Path | None) -> None:
    """Fetch every group's series listing and print the enriched catalog."""
    catalog = _load_catalog(ctx, max_workers=workers)
    _emit_table(catalog.series_frame(), output)


@cli.command("search")
@click.argument("keywords", nargs=-1, required=True)
@click.option(
    "--field",
    type=click.Choice(SEARCH_FIELDS, case_sensitive=False),
    default="groups",
    show_default=True,
    help="Which listing to search.",
)
@click.option("--tags", is_flag=True, default=False, help="Search series tags instead.")
@click.option(
    "--regex",
    is_flag=True,
    default=False,
    help="Treat keywords as regular expressions.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of concurrent series-list requests.",
)
@click.pass_context
def search(
    ctx: click.Context,
    *,
    keywords: tuple[str, ...],
    field: str,
    tags: bool,
    regex: bool,
    workers: int,
) -> None:
    """Rank categories, groups, or series by how many KEYWORDS they contain."""
    field = field.lower()
    # Only series and tag searches need the per-group series listings.
    if field == "series" or tags:
        catalog = _load_catalog(ctx, max_workers=workers)
    else:
        catalog = MetadataCatalog(client=_client(ctx))
    try:
        result = search_catalog(catalog, list(keywords), field, use_tags=tags, regex=regex)
    except EvdsError as exc:
        raise click.ClickException(str(exc)) from exc
    if result.empty:
        click.echo("No matches.")
        return
    click.echo(result.to_string(index=False))


def _download_options(func):
    """Attach the shared date-range and frequency options."""
    options = [
        click.option("--freq", type=click.IntRange(1, 8), default=None, help=FREQ_HELP),
        click.option(
            "--start",
            "start_date",
            default=DEFAULT_START_DATE,
            show_default=True,
            help=DATE_HELP,
        ),
        click.option("--end", "end_date", default=None, help=f"{DATE_HELP} Defaults to today."),
        click.option(
            "--keep-missing",
            is_flag=True,
            default=False,
            help="Keep rows where every series is missing.",
        ),
        click.option(
            "--output", type=click.Path(dir_okay=False, path_type=Path), help=OUTPUT_HELP
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@cli.command("fetch-series")
@click.argument("codes", nargs=-1, required=True)
@_download_options
@click.option(
    "--agg",
    "agg_type",
    type=click.Choice(AGG_CHOICES, case_sensitive=False),
    default=None,
    help="Aggregation used when --freq is lower than the native frequency.",
)
@click.pass_context
def fetch_series(
    ctx: click.Context,
    *,
    codes: tuple[str, ...],
    freq: int | None,
    start_date: str,
    end_date: str | None,
    keep_missing: bool,
    output: Path | None,
    agg_type: str | None,
) -> None:
    """Download one or more series by CODES (e.g. TP.D1TOP)."""
    cmd_log = logger.bind(command="fetch-series", codes=list(codes))
    cmd_log.info("command.start", freq=freq, agg_type=agg_type)
    downloader = SeriesDownloader(client=_client(ctx))
    try:
        frame = downloader.get_series_data(
            list(codes),
            freq=freq,
            agg_type=agg_type,
            start_date=start_date,
            end_date=end_date,
            drop_all_missing_rows=not keep_missing,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    except EvdsError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit_table(frame, output)


@cli.command("fetch-group")
@click.argument("group_code")
@_download_options
@click.option(
    "--with-names",
    is_flag=True,
    default=False,
    help="Load the series catalog first and list the group's series names.",
)
@click.pass_context
def fetch_group(
    ctx: click.Context,
    *,
    group_code: str,
    freq: int | None,
    start_date: str,
    end_date: str | None,
    keep_missing: bool,
    output: Path | None,
    with_names: bool,
) -> None:
    """Download every series of the data group GROUP_CODE (e.g. bie_dbafod)."""
    cmd_log = logger.bind(command="fetch-group", group_code=group_code)
    cmd_log.info("command.start", freq=freq)
    catalog = _load_catalog(ctx) if with_names else None
    downloader = SeriesDownloader(client=_client(ctx), catalog=catalog)
    try:
        frame = downloader.get_group_data(
            group_code,
            freq=freq,
            start_date=start_date,
            end_date=end_date,
            drop_all_missing_rows=not keep_missing,
        )
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    except EvdsError as exc:
        raise click.ClickException(str(exc)) from exc
    _emit_table(frame, output)


@cli.command("group-info")
@click.argument("group_code")
@click.pass_context
def group_info(ctx: click.Context, *, group_code: str) -> None:
    """Describe the data group GROUP_CODE and list its series."""
    catalog = _load_catalog(ctx)
    try:
        names = catalog.show_group_info(group_code)
    except KeyError as exc:
        raise click.ClickException(f"Unknown data group {group_code!r}.") from exc
    click.echo(names.to_string(index=False))


if __name__ == "__main__":
    cli()
