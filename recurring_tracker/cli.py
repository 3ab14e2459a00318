# recurring_tracker/cli.py
import logging
import os

import click
from dotenv import load_dotenv

from recurring_tracker.clock import FixedClock, SystemClock
from recurring_tracker.config import load_config
from recurring_tracker.core.models import Frequency, TransactionType
from recurring_tracker.outputs import get_output
from recurring_tracker.recurring import (
    create_template,
    frequency_display_name,
    generate_future,
    upcoming,
)
from recurring_tracker.scheduler import process_due, set_active
from recurring_tracker.stores import get_store
from recurring_tracker.templates_file import load_templates
from recurring_tracker.utils import filter_transactions_by_month

DATE_FORMATS = ['%Y-%m-%d', '%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S']


def _now(ctx):
    return ctx.obj['clock'].now()


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults are used when it does not exist)'
)
@click.option(
    '--db', 'db_path',
    default=None,
    type=click.Path(dir_okay=False),
    help='SQLite database file (overrides config)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file to load before reading settings'
)
@click.option(
    '--log-level', 'log_level',
    default=None,
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    help='Logging level (default: RECURBOOK_LOG_LEVEL or config log_level)'
)
@click.option(
    '--now', 'now',
    default=None,
    type=click.DateTime(formats=DATE_FORMATS),
    help='Pretend the current time is this value'
)
@click.pass_context
def main(ctx, config_path, db_path, env_file, log_level, now):
    """
    Manage recurring transactions: store templates, generate the occurrences
    that are due, and preview what is coming up.
    """
    if env_file:
        load_dotenv(env_file)

    try:
        cfg = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    if db_path:
        cfg['db_path'] = db_path

    level = log_level or os.getenv('RECURBOOK_LOG_LEVEL') or cfg['log_level']
    logging.basicConfig(level=str(level).upper())

    ctx.ensure_object(dict)
    ctx.obj['config'] = cfg
    ctx.obj['clock'] = FixedClock(now) if now else SystemClock()
    ctx.obj['store'] = get_store(cfg['store'], cfg)


@main.command()
@click.option('--amount', required=True, type=float)
@click.option('--type', 'type_', default='expense',
              type=click.Choice([t.value for t in TransactionType]))
@click.option('--frequency', required=True,
              type=click.Choice([f.value for f in Frequency]))
@click.option('--category', required=True)
@click.option('--account', required=True)
@click.option('--description', default='')
@click.option('--start-date', type=click.DateTime(formats=DATE_FORMATS), default=None,
              help='First occurrence (default: now)')
@click.option('--end-date', type=click.DateTime(formats=DATE_FORMATS), default=None)
@click.option('--max-occurrences', type=click.IntRange(min=1), default=None)
@click.option('--target-day', type=click.IntRange(1, 31), default=None,
              help='Day of month to aim for (default: day of start date)')
@click.option('--include-start', is_flag=True, default=False,
              help='Make the start date itself the first due occurrence')
@click.pass_context
def add(ctx, amount, type_, frequency, category, account, description,
        start_date, end_date, max_occurrences, target_day, include_start):
    """Create a recurring template."""
    template = create_template(
        amount=amount,
        type=type_,
        category=category,
        account=account,
        frequency=frequency,
        description=description,
        start_date=start_date,
        end_date=end_date,
        max_occurrences=max_occurrences,
        original_target_day=target_day,
        include_start=include_start,
        now=_now(ctx),
    )
    ctx.obj['store'].add_template(template)
    click.echo(
        f"Created {template.id}; next due "
        f"{template.next_execution_date.date().isoformat()}."
    )


@main.command('import')
@click.argument('templates_file', required=False,
                type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_templates(ctx, templates_file):
    """Load templates from a YAML file into the store."""
    path = templates_file or ctx.obj['config'].get('templates_file')
    if not path:
        raise click.UsageError("No templates file given and none configured.")
    try:
        templates = load_templates(path, now=_now(ctx))
    except ValueError as e:
        raise click.ClickException(f"Error loading templates: {e}")

    store = ctx.obj['store']
    added = 0
    for template in templates:
        if store.get_template(template.id) is not None:
            click.echo(f"Skipping existing template {template.id}", err=True)
            continue
        store.add_template(template)
        added += 1
    click.echo(f"Imported {added} template(s).")


@main.command('list')
@click.pass_context
def list_templates(ctx):
    """Show stored templates."""
    locale = ctx.obj['config']['locale']
    templates = ctx.obj['store'].list_templates()
    if not templates:
        click.echo("No recurring templates.")
        return
    for t in templates:
        state = 'active' if t.is_active else 'paused'
        click.echo(
            f"{t.id}  {frequency_display_name(t.frequency, locale):<8} "
            f"{t.next_execution_date.date().isoformat()}  {t.amount:>10.2f}  "
            f"{state:<6}  {t.description}"
        )


@main.command()
@click.option('--enforce-max-occurrences', is_flag=True, default=False,
              help='Deactivate templates that reached max_occurrences')
@click.pass_context
def run(ctx, enforce_max_occurrences):
    """Generate one transaction for every template that is due."""
    cfg = ctx.obj['config']
    enforce = enforce_max_occurrences or bool(cfg['enforce_max_occurrences'])
    generated = process_due(
        ctx.obj['store'], now=_now(ctx), enforce_max_occurrences=enforce
    )
    for tx in generated:
        click.echo(f"{tx.date.date().isoformat()}  {tx.amount:>10.2f}  {tx.description}")
    click.echo(f"Generated {len(generated)} transaction(s).")


@main.command()
@click.option('--months', type=click.IntRange(min=0), default=None,
              help='How far ahead to look (default: config preview_months)')
@click.option('--template-id', 'template_ids', multiple=True,
              help='Only preview these templates')
@click.option('--month', 'month_str', default=None,
              help='Only show occurrences in this YYYY-MM')
@click.option('--output', 'output_format', default='console',
              type=click.Choice(['console', 'csv']))
@click.pass_context
def preview(ctx, months, template_ids, month_str, output_format):
    """Show future occurrences without changing any template."""
    cfg = ctx.obj['config']
    store = ctx.obj['store']
    horizon = months if months is not None else int(cfg['preview_months'])
    now = _now(ctx)

    templates = store.list_templates()
    if template_ids:
        templates = [t for t in templates if t.id in template_ids]
    txs = []
    for t in templates:
        if t.is_active:
            txs.extend(generate_future(t, horizon, now=now))

    if month_str:
        try:
            txs = filter_transactions_by_month(txs, month_str)
        except ValueError:
            raise click.BadParameter(f"expected YYYY-MM, got {month_str!r}",
                                     param_hint='--month')

    get_output(output_format, cfg).write(txs)


@main.command('upcoming')
@click.option('--days', type=click.IntRange(min=0), default=None,
              help='Window size in days (default: config upcoming_days)')
@click.pass_context
def upcoming_templates(ctx, days):
    """List active templates due within the next few days."""
    cfg = ctx.obj['config']
    window = days if days is not None else int(cfg['upcoming_days'])
    found = upcoming(ctx.obj['store'].list_templates(), now=_now(ctx), days=window)
    if not found:
        click.echo("Nothing due soon.")
        return
    for t in found:
        click.echo(
            f"{t.next_execution_date.date().isoformat()}  {t.amount:>10.2f}  "
            f"{t.description} ({t.id})"
        )


def _toggle(ctx, template_id, active):
    try:
        set_active(ctx.obj['store'], template_id, active, now=_now(ctx))
    except KeyError:
        raise click.ClickException(f"Unknown template: {template_id}")


@main.command()
@click.argument('template_id')
@click.pass_context
def pause(ctx, template_id):
    """Stop a template from firing."""
    _toggle(ctx, template_id, False)
    click.echo(f"Paused {template_id}.")


@main.command()
@click.argument('template_id')
@click.pass_context
def resume(ctx, template_id):
    """Let a paused template fire again."""
    _toggle(ctx, template_id, True)
    click.echo(f"Resumed {template_id}.")


@main.command()
@click.argument('template_id')
@click.pass_context
def delete(ctx, template_id):
    """Remove a template. Transactions it generated are kept."""
    store = ctx.obj['store']
    if store.get_template(template_id) is None:
        raise click.ClickException(f"Unknown template: {template_id}")
    store.delete_template(template_id)
    click.echo(f"Deleted {template_id}.")
