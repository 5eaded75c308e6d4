"""Command-line interface for QueueTrack."""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Optional

import click

from . import controllers
from .config import BaseConfig, DevConfig
from .context import AppContext, create_app_context
from .errors import QueueTrackError
from .infra.repositories import assign_group, group_names, unassign_group
from .logging_config import get_logger, setup_logging
from .services.accounts import AccountFilter, FilterKind, SortKey, is_juice, list_accounts
from .services.export_csv import export_tests_csv
from .services.reports import color_bucket, dashboard_summary, format_change, format_num, timeline

logger = get_logger("cli")

_FILTER_CHOICES = [k.value for k in FilterKind if k not in (FilterKind.SEARCH, FilterKind.GROUP)]


def _ctx(click_ctx: click.Context) -> AppContext:
    return click_ctx.find_object(AppContext)


@click.group()
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the dataset and settings (default: $QUEUETRACK_DATA_DIR).",
)
@click.option("--dev", is_flag=True, default=False, help="Log INFO messages to the console.")
@click.pass_context
def cli(click_ctx: click.Context, data_dir: Optional[Path], dev: bool) -> None:
    """Track queue-position tests per account."""

    if isinstance(click_ctx.obj, AppContext):
        return
    config_cls = DevConfig if dev else BaseConfig
    config = config_cls(data_dir=data_dir)
    setup_logging(config)
    try:
        click_ctx.obj = create_app_context(config)
    except QueueTrackError as exc:
        raise click.ClickException(f"Could not load data: {exc}") from exc


@cli.command("import")
@click.argument("csv_path", type=click.Path(path_type=Path))
@click.pass_context
def import_command(click_ctx: click.Context, csv_path: Path) -> None:
    """Import tests from CSV_PATH."""

    app = _ctx(click_ctx)
    try:
        outcome = controllers.import_csv(app, csv_path)
    except QueueTrackError as exc:
        logger.warning(f"Import of {csv_path} rejected: {type(exc).__name__}")
        raise click.ClickException(f"Import failed: {exc}") from exc
    click.echo(outcome.message)
    for warning in outcome.warnings:
        click.echo(f"Warning: {warning}")


@cli.command("accounts")
@click.option("--filter", "filter_kind", type=click.Choice(_FILTER_CHOICES), default="all")
@click.option("--search", default=None, help="Case-insensitive email substring.")
@click.option("--group", "group_name", default=None, help="Only accounts in this group.")
@click.option("--sort", "sort_key", type=click.Choice([k.value for k in SortKey]), default="change")
@click.option("--asc", is_flag=True, default=False, help="Ascending order.")
@click.pass_context
def accounts_command(
    click_ctx: click.Context,
    filter_kind: str,
    search: Optional[str],
    group_name: Optional[str],
    sort_key: str,
    asc: bool,
) -> None:
    """List accounts with their latest result and overall change."""

    app = _ctx(click_ctx)
    if search is not None:
        account_filter = AccountFilter.search(search)
    elif group_name is not None:
        account_filter = AccountFilter.group(group_name)
    else:
        account_filter = AccountFilter(FilterKind(filter_kind))

    views = list_accounts(
        app.dataset,
        account_filter,
        settings=app.settings,
        sort=SortKey(sort_key),
        descending=not asc,
    )
    if not views:
        if not app.dataset.tests:
            click.echo("No data. Import a CSV to start!")
        elif account_filter.kind in (FilterKind.IMPROVING, FilterKind.DECLINING):
            click.echo("No results: accounts need at least 2 tests to show improvement/decline.")
        else:
            click.echo("No accounts match this filter.")
        return

    for view in views:
        latest = view.latest
        percent = latest.queue_percent or 0.0
        badge = " [juice]" if is_juice(view, app.settings) else ""
        click.echo(
            f"{view.email:<32} {format_change(view.change):>8}  "
            f"{format_num(latest.queue_number)}/{format_num(latest.queue_anchor)} "
            f"{percent:.1f}% ({color_bucket(percent)}) tests={len(view.tests)}{badge}"
        )


@cli.command("imports")
@click.pass_context
def imports_command(click_ctx: click.Context) -> None:
    """List import batches."""

    app = _ctx(click_ctx)
    if not app.dataset.imports:
        click.echo("No imports yet.")
        return
    for batch in app.dataset.imports:
        click.echo(f"{batch.id}  {batch.date}  {batch.filename}  ({batch.test_count} tests)")


@cli.command("remove-import")
@click.argument("import_id")
@click.pass_context
def remove_import_command(click_ctx: click.Context, import_id: str) -> None:
    """Delete an import batch and the tests it created."""

    app = _ctx(click_ctx)
    try:
        removed = controllers.remove_import(app, import_id)
    except QueueTrackError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Removed {removed} test(s).")


@cli.command("clear")
@click.confirmation_option(prompt="Delete all tests and imports?")
@click.pass_context
def clear_command(click_ctx: click.Context) -> None:
    """Delete every test and import batch."""

    removed = controllers.clear_all(_ctx(click_ctx))
    click.echo(f"Cleared {removed} test(s).")


@cli.command("undo")
@click.pass_context
def undo_command(click_ctx: click.Context) -> None:
    """Undo the last change made in this session."""

    click.echo(controllers.undo(_ctx(click_ctx)).message)


@cli.command("redo")
@click.pass_context
def redo_command(click_ctx: click.Context) -> None:
    """Redo the last undone change."""

    click.echo(controllers.redo(_ctx(click_ctx)).message)


@cli.command("summary")
@click.pass_context
def summary_command(click_ctx: click.Context) -> None:
    """Show account totals and the best position."""

    summary = dashboard_summary(_ctx(click_ctx).dataset)
    click.echo(f"Accounts: {summary.total_accounts}")
    click.echo(f"Tests: {summary.total_tests}")
    if summary.best_percent is None:
        click.echo("Best position: -")
    else:
        click.echo(f"Best position: {summary.best_percent:.1f}% ({summary.best_email})")


@cli.command("timeline")
@click.argument("email")
@click.pass_context
def timeline_command(click_ctx: click.Context, email: str) -> None:
    """Show every test for EMAIL, oldest first."""

    result = timeline(_ctx(click_ctx).dataset, email)
    if result is None:
        raise click.ClickException(f"No tests for {email}")
    click.echo(f"{email}: {result.total} total tests")
    click.echo(f"Best {result.best:.1f}%  Worst {result.worst:.1f}%  Average {result.average:.1f}%")
    for test in result.tests:
        click.echo(
            f"#{test.testing_num:<3} {test.testing_date}  {test.event_name}  "
            f"{format_num(test.queue_number)}/{format_num(test.queue_anchor)}  "
            f"{test.queue_percent or 0.0:.1f}%  {format_change(test.queue_change_percent)}"
        )


@cli.command("export")
@click.argument("output_path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_command(click_ctx: click.Context, output_path: Path) -> None:
    """Write all tests to OUTPUT_PATH as an importable CSV."""

    path = export_tests_csv(tests=_ctx(click_ctx).dataset.tests, output_path=output_path)
    click.echo(f"Export written: {path}")


@cli.command("settings")
@click.option("--juice-percent", type=float, default=None)
@click.option("--juice-anchor", type=click.IntRange(min=0), default=None)
@click.pass_context
def settings_command(
    click_ctx: click.Context, juice_percent: Optional[float], juice_anchor: Optional[int]
) -> None:
    """Show settings, or update the juice thresholds."""

    app = _ctx(click_ctx)
    changes = {}
    if juice_percent is not None:
        changes["juice_percent"] = juice_percent
    if juice_anchor is not None:
        changes["juice_anchor"] = juice_anchor
    if changes:
        controllers.update_settings(app, **changes)

    settings = app.settings
    click.echo(f"Juice percent: {settings.juice_percent:g}")
    click.echo(f"Juice anchor: {settings.juice_anchor:,}")
    click.echo(f"Groups: {', '.join(group_names(settings)) or '-'}")


@cli.command("group")
@click.argument("email")
@click.argument("name", required=False)
@click.option("--remove", is_flag=True, default=False, help="Take EMAIL out of its group.")
@click.pass_context
def group_command(click_ctx: click.Context, email: str, name: Optional[str], remove: bool) -> None:
    """Assign EMAIL to group NAME (an email belongs to at most one group)."""

    app = _ctx(click_ctx)
    if remove:
        removed = unassign_group(app.settings, email)
        app.save_settings()
        click.echo(f"{email} removed from its group." if removed else f"{email} is not in a group.")
        return
    if not name:
        current = app.settings.groups.get(email)
        click.echo(f"{email}: {current or 'no group'}")
        return
    try:
        assign_group(app.settings, email, name)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="NAME") from exc
    app.save_settings()
    click.echo(f"{email} -> {name.strip()}")


@cli.command("shell")
@click.pass_context
def shell_command(click_ctx: click.Context) -> None:
    """Interactive session; undo/redo history lasts until you quit."""

    app = _ctx(click_ctx)
    click.echo("QueueTrack shell. Type 'help' for commands, 'quit' to exit.")
    while True:
        try:
            line = click.prompt("queuetrack", prompt_suffix="> ", default="", show_default=False)
        except click.Abort:
            break
        line = line.strip()
        if not line:
            continue
        if line in {"quit", "exit"}:
            break
        if line == "help":
            line = "--help"
        try:
            args = shlex.split(line)
        except ValueError as exc:
            click.echo(f"Error: {exc}")
            continue
        if args[0] == "shell":
            continue
        try:
            cli.main(args, prog_name="queuetrack", standalone_mode=False, obj=app)
        except click.ClickException as exc:
            exc.show()
        except click.Abort:
            click.echo("Aborted.")


def main() -> None:
    cli(prog_name="queuetrack")


if __name__ == "__main__":
    main()
