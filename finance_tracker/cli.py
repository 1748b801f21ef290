# finance_tracker/cli.py
from datetime import date
from pathlib import Path

import click
from dotenv import load_dotenv
from finance_tracker.app import configure_logging, create_app
from finance_tracker.config import load_config
from finance_tracker.core.models import TRANSACTION_TYPES
from finance_tracker.loaders import get_loader
from finance_tracker.outputs import get_output
from finance_tracker.utils import format_currency


def _echo_notification(note):
    prefix = {'error': '✗', 'success': '✓'}.get(note.level, '•')
    click.echo(f"{prefix} {note.message}", err=note.level == 'error')


@click.group()
@click.option(
    '--config', 'config_path',
    default='config.yaml',
    type=click.Path(dir_okay=False),
    help='Path to config.yaml (defaults apply when the file is missing)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with FINANCE_TRACKER_* overrides'
)
@click.option(
    '--data-dir', 'data_dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Directory holding the saved transactions (overrides config)'
)
@click.pass_context
def main(ctx, config_path, env_file, data_dir):
    """
    Record income and expenses, list and filter them, print statistics,
    draw the monthly chart and export the data.
    """
    if env_file:
        load_dotenv(env_file)

    cfg = load_config(config_path)
    if data_dir:
        cfg['data_dir'] = data_dir
    configure_logging(cfg.get('log_level'))

    ctx.obj = {'config': cfg, 'app': create_app(cfg, listener=_echo_notification)}


def _app(ctx):
    return ctx.obj['app']


@main.command()
@click.option('--type', 'type_', required=True, type=click.Choice(TRANSACTION_TYPES))
@click.option('--amount', required=True, help='Amount in euros, greater than zero')
@click.option('--category', required=True)
@click.option('--description', required=True)
@click.option('--date', 'date_', default=None, help='YYYY-MM-DD (default: today)')
@click.pass_context
def add(ctx, type_, amount, category, description, date_):
    """Add a transaction."""
    app = _app(ctx)
    app.open_form()
    app.set_form_type(type_)
    app.form.amount = amount
    app.form.category = category
    app.form.description = description
    if date_:
        app.form.date = date_
    tx = app.submit()
    if tx is None:
        ctx.exit(1)
    click.echo(tx.id)


@main.command()
@click.argument('tx_id')
@click.option('--type', 'type_', default=None, type=click.Choice(TRANSACTION_TYPES))
@click.option('--amount', default=None)
@click.option('--category', default=None)
@click.option('--description', default=None)
@click.option('--date', 'date_', default=None)
@click.pass_context
def edit(ctx, tx_id, type_, amount, category, description, date_):
    """Change fields of an existing transaction."""
    app = _app(ctx)
    form = app.edit_transaction(tx_id)
    if form is None:
        click.echo(f"Transaction not found: {tx_id}", err=True)
        ctx.exit(1)
    if type_:
        app.set_form_type(type_)
    for field, value in (('amount', amount), ('category', category),
                         ('description', description), ('date', date_)):
        if value is not None:
            setattr(form, field, value)
    if app.submit() is None:
        ctx.exit(1)


@main.command()
@click.argument('tx_id')
@click.option('--yes', is_flag=True, default=False, help='Do not ask for confirmation')
@click.pass_context
def delete(ctx, tx_id, yes):
    """Delete a transaction permanently."""
    app = _app(ctx)
    if app.store.get_transaction(tx_id) is None:
        click.echo(f"Transaction not found: {tx_id}", err=True)
        ctx.exit(1)
    confirm = (lambda _msg: True) if yes else (lambda msg: click.confirm(msg, default=False))
    app.delete_transaction(tx_id, confirm=confirm)


@main.command(name='list')
@click.option('--category', default=None)
@click.option('--type', 'type_', default=None, type=click.Choice(TRANSACTION_TYPES))
@click.option('--search', default=None)
@click.pass_context
def list_transactions(ctx, category, type_, search):
    """List transactions, newest first."""
    view = _app(ctx).set_filters({'category': category, 'type': type_, 'search': search})
    if view.is_empty:
        click.echo("Aucune transaction trouvée")
        return
    for row in view.rows:
        click.echo(
            f"{row.id}  {row.date:<16} {row.amount:>16}  {row.category:<20} {row.description}"
        )


@main.command()
@click.option('--date', 'date_', default=None, help='Reference date for the monthly figures')
@click.pass_context
def stats(ctx, date_):
    """Print the balance and monthly totals."""
    try:
        today = date.fromisoformat(date_) if date_ else None
    except ValueError as e:
        click.echo(f"Invalid date {date_}: {e}", err=True)
        ctx.exit(1)
    s = _app(ctx).store.get_stats(today)
    click.echo(f"Solde:             {format_currency(s['balance'])}")
    click.echo(f"Revenus du mois:   {format_currency(s['monthly_income'])}")
    click.echo(f"Dépenses du mois:  {format_currency(s['monthly_expense'])}")
    click.echo(f"Transactions:      {s['total_transactions']}")


@main.command()
@click.option('--monthly', 'monthly_path', default='monthly.svg', type=click.Path(dir_okay=False))
@click.option('--categories', 'categories_path', default=None, type=click.Path(dir_okay=False),
              help='Also write the category breakdown as HTML')
@click.option('--width', default=None, type=click.FloatRange(min=0, min_open=True),
              help='Chart width (default from config)')
@click.pass_context
def chart(ctx, monthly_path, categories_path, width):
    """Draw the six-month chart (SVG) and optionally the category breakdown."""
    app = _app(ctx)
    view = app.update_ui()
    svg = app.resize_chart(width) if width else view.monthly_svg
    Path(monthly_path).write_text(svg, encoding='utf-8')
    click.echo(f"Written monthly chart to {monthly_path}")
    if categories_path:
        Path(categories_path).write_text(view.category_html, encoding='utf-8')
        click.echo(f"Written category chart to {categories_path}")


@main.command()
@click.option(
    '--output', 'output_format',
    default='csv',
    type=click.Choice(['csv', 'html', 'excel']),
    help='Export format: csv, html, or excel'
)
@click.option('--path', 'out_path', default=None, type=click.Path(dir_okay=False),
              help='Destination file (default: <output_dir>/transactions.<ext>)')
@click.pass_context
def export(ctx, output_format, out_path):
    """Export every transaction."""
    cfg = ctx.obj['config']
    app = _app(ctx)
    outputter = get_output(output_format, cfg)
    if output_format == 'csv':
        content = app.export_data(outputter)
        target = Path(out_path) if out_path else None
        if target is None:
            target = Path(outputter.output_dir) / outputter.filename
            target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding='utf-8')
    else:
        target = outputter.write(app.store.get_all_transactions(), out_path)
    click.echo(f"Exported {len(app.store.transactions)} transaction(s) to {target}")


@main.command(name='import')
@click.argument('file_path', type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def import_file(ctx, file_path):
    """Add the transactions of an exported CSV or a YAML file."""
    app = _app(ctx)
    try:
        rows = list(get_loader(file_path).load(file_path))
    except (ValueError, RuntimeError) as e:
        click.echo(f"Error reading {file_path}: {e}", err=True)
        ctx.exit(1)

    added = 0
    for row in rows:
        if app.submit(row) is not None:
            added += 1
    click.echo(f"Imported {added} of {len(rows)} transaction(s) from {file_path}.")
    if added != len(rows):
        ctx.exit(1)


@main.command()
@click.option('--host', default='127.0.0.1', help='Host to bind')
@click.option('--port', default=8000, type=int, help='Port to bind')
@click.pass_context
def serve(ctx, host, port):
    """Run the local dashboard."""
    from finance_tracker.web import run_server
    run_server(_app(ctx), host, port)
