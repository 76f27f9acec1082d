# finbro/cli.py
import logging
from contextlib import contextmanager
from datetime import date

import click
from dotenv import load_dotenv

from finbro.config import load_config
from finbro.core.categorizer import parse_category
from finbro.core.models import Category, Expense, Income, check_amount
from finbro.outputs import get_output
from finbro.storage import Storage
from finbro.summary import (
    build_summary,
    format_budget,
    format_savings,
    format_summary,
    track_budget,
    track_savings,
)

logger = logging.getLogger(__name__)

CATEGORY_NAMES = [c.value for c in Category]


class AmountType(click.ParamType):
    name = "amount"

    def convert(self, value, param, ctx):
        try:
            return check_amount(value)
        except ValueError:
            self.fail(f"{value!r} is not a valid non-negative amount", param, ctx)


AMOUNT = AmountType()
DATE = click.DateTime(formats=["%Y-%m-%d"])


class Session:
    """Config, storage and the loaded ledger for one CLI invocation."""

    def __init__(self, config):
        self.config = config
        self.storage = Storage(str(config["data_dir"]))
        self._manager = None

    @property
    def manager(self):
        if self._manager is None:
            self._manager = self.storage.load()
        return self._manager

    def save(self):
        self.storage.save(self.manager)

    @property
    def currency(self):
        return self.config.get("currency", "$")


pass_session = click.make_pass_decorator(Session)


@contextmanager
def user_errors():
    try:
        yield
    except (ValueError, IndexError) as e:
        raise click.ClickException(str(e)) from e


def _check_tags(session, tags):
    limit = int(session.config.get("max_tags", 3))
    if len(tags) > limit:
        raise click.BadParameter(f"at most {limit} tags are allowed", param_hint="'--tag'")
    return list(tags)


def _period(month, year):
    today = date.today()
    return month or today.month, year or today.year


def _echo_numbered(session, transactions):
    """Echo transactions prefixed by their ledger position."""
    positions = {id(tx): i for i, tx in enumerate(session.manager.transactions, start=1)}
    for tx in transactions:
        click.echo(f"{positions[id(tx)]}. {tx.date.isoformat()} {tx.describe(session.currency)}")


def month_options(func):
    func = click.option("--year", type=int, default=None, help="Year (defaults to the current year)")(func)
    func = click.option(
        "--month", type=click.IntRange(1, 12), default=None,
        help="Month number 1-12 (defaults to the current month)",
    )(func)
    return func


@click.group()
@click.option(
    '--config', 'config_path',
    default='finbro.yaml',
    type=click.Path(dir_okay=False),
    help='Path to finbro.yaml (optional; defaults are used when missing)'
)
@click.option(
    '--env-file', 'env_file',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Optional .env file with FINBRO_* overrides'
)
@click.option(
    '--data-dir', 'data_dir',
    default=None,
    type=click.Path(file_okay=False),
    help='Directory holding transactions.csv and goals.csv'
)
@click.pass_context
def main(ctx, config_path, env_file, data_dir):
    """
    FinBro: track income and expenses, monthly budgets and savings goals.
    """
    if env_file:
        load_dotenv(env_file)

    with user_errors():
        cfg = load_config(config_path)
    if data_dir:
        cfg['data_dir'] = data_dir

    level = str(cfg.get('log_level', 'WARNING')).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise click.BadParameter(
            f"unknown log level '{level}'", param_hint="'log_level' (config or FINBRO_LOG_LEVEL)"
        )
    logging.basicConfig(level=level)
    logger.debug("Using data directory %s", cfg['data_dir'])
    ctx.obj = Session(cfg)


@main.command()
@click.argument('amount', type=AMOUNT)
@click.argument('description', nargs=-1, required=True)
@click.option('--date', 'when', type=DATE, default=None, help='Date as YYYY-MM-DD (defaults to today)')
@click.option('--tag', '-t', 'tags', multiple=True, help='Tag for the transaction (repeatable)')
@pass_session
def income(session, amount, description, when, tags):
    """Record an income."""
    tags = _check_tags(session, tags)
    with user_errors():
        tx = Income(
            amount=amount,
            description=" ".join(description),
            date=when.date() if when else date.today(),
            tags=tags,
        )
    session.manager.add_transaction(tx)
    session.save()
    click.echo(f"New income added: {tx.describe(session.currency)}")


@main.command()
@click.argument('amount', type=AMOUNT)
@click.argument('description', nargs=-1, required=True)
@click.option('--date', 'when', type=DATE, default=None, help='Date as YYYY-MM-DD (defaults to today)')
@click.option(
    '--category', '-c',
    default=None,
    help=f"One of {', '.join(CATEGORY_NAMES)}; anything else is filed under Others"
)
@click.option('--tag', '-t', 'tags', multiple=True, help='Tag for the transaction (repeatable)')
@pass_session
def expense(session, amount, description, when, category, tags):
    """Record an expense."""
    tags = _check_tags(session, tags)
    with user_errors():
        tx = Expense(
            amount=amount,
            description=" ".join(description),
            date=when.date() if when else date.today(),
            tags=tags,
            category=parse_category(category),
        )
    session.manager.add_transaction(tx)
    session.save()
    click.echo(f"New expense added: {tx.describe(session.currency)}")


@main.command(name='list')
@click.option('--limit', '-n', type=click.IntRange(min=0), default=None, help='Show only the N most recent')
@pass_session
def list_cmd(session, limit):
    """List transactions, most recent first."""
    txs = session.manager.list_transactions(limit)
    if not txs:
        click.echo("No transactions found.")
        return
    _echo_numbered(session, txs)


@main.command()
@click.argument('start', type=int)
@click.argument('end', type=int, required=False)
@pass_session
def delete(session, start, end):
    """Delete transaction START, or every transaction from START to END."""
    with user_errors():
        removed = session.manager.delete_transaction(start, end)
    session.save()
    click.echo(f"Deleted {len(removed)} transaction(s):")
    for tx in removed:
        click.echo(f"  {tx.describe(session.currency)}")


@main.command()
@click.argument('index', type=int)
@click.option('--amount', type=AMOUNT, default=None)
@click.option('--description', default=None)
@click.option('--date', 'when', type=DATE, default=None)
@click.option('--category', '-c', default=None)
@click.option('--tag', '-t', 'tags', multiple=True, help='Replace the tags (repeatable)')
@click.option('--clear-tags', is_flag=True, default=False, help='Remove all tags')
@pass_session
def edit(session, index, amount, description, when, category, tags, clear_tags):
    """Edit fields of the transaction at INDEX."""
    changes = {
        'amount': amount,
        'description': description,
        'date': when.date() if when else None,
        'category': category,
        'tags': _check_tags(session, tags) if tags else None,
    }
    if clear_tags:
        if tags:
            raise click.UsageError("--clear-tags cannot be combined with --tag")
        changes['tags'] = []
    with user_errors():
        tx = session.manager.edit_transaction(index, **changes)
    session.save()
    click.echo(f"Transaction updated: {tx.describe(session.currency)}")


@main.command(name='filter')
@click.argument('start_date', type=DATE)
@click.argument('end_date', type=DATE)
@pass_session
def filter_cmd(session, start_date, end_date):
    """Show transactions dated between START_DATE and END_DATE inclusive."""
    txs = session.manager.get_filtered_transactions(start_date.date(), end_date.date())
    if not txs:
        click.echo("No transactions found in that period.")
        return
    txs.sort(key=lambda tx: tx.date, reverse=True)
    _echo_numbered(session, txs)


@main.command()
@click.argument('keyword', nargs=-1, required=True)
@pass_session
def search(session, keyword):
    """Find transactions whose description contains KEYWORD."""
    txs = session.manager.search(" ".join(keyword))
    if not txs:
        click.echo("No matching transactions found.")
        return
    _echo_numbered(session, txs)


@main.command()
@pass_session
def balance(session):
    """Show current balance with total income and expenses."""
    m = session.manager
    cur = session.currency
    click.echo(f"Current Balance: {cur}{m.get_balance():.2f}")
    click.echo(f"Total Income: {cur}{m.get_total_income():.2f}")
    click.echo(f"Total Expenses: {cur}{m.get_total_expenses():.2f}")


@main.command()
@month_options
@pass_session
def summary(session, month, year):
    """Show the financial summary for a month."""
    month, year = _period(month, year)
    with user_errors():
        report = build_summary(
            session.manager, month, year,
            top_categories=int(session.config.get('top_categories', 3)),
        )
    click.echo(format_summary(report, session.currency))


@main.command(name='set-budget')
@click.argument('amount', type=AMOUNT)
@month_options
@pass_session
def set_budget(session, amount, month, year):
    """Set the budget for a month."""
    month, year = _period(month, year)
    with user_errors():
        session.manager.set_budget(month, year, amount)
    session.save()
    click.echo(format_budget(track_budget(session.manager, month, year), session.currency))


@main.command(name='track-budget')
@month_options
@pass_session
def track_budget_cmd(session, month, year):
    """Show the budget and what remains of it for a month."""
    month, year = _period(month, year)
    click.echo(format_budget(track_budget(session.manager, month, year), session.currency))


@main.command(name='set-savings')
@click.argument('amount', type=AMOUNT)
@month_options
@pass_session
def set_savings(session, amount, month, year):
    """Set the savings goal for a month."""
    month, year = _period(month, year)
    with user_errors():
        session.manager.set_savings_goal(month, year, amount)
    session.save()
    click.echo(format_savings(track_savings(session.manager, month, year), session.currency))


@main.command(name='track-savings')
@month_options
@pass_session
def track_savings_cmd(session, month, year):
    """Show progress towards the savings goal for a month."""
    month, year = _period(month, year)
    click.echo(format_savings(track_savings(session.manager, month, year), session.currency))


@main.command()
@click.option('--yes', is_flag=True, default=False, help='Skip the confirmation prompt')
@pass_session
def clear(session, yes):
    """Delete every transaction, budget and savings goal."""
    if not yes:
        click.confirm(
            "Are you sure you want to clear all data? This action cannot be undone.",
            abort=True,
        )
    session.manager.clear_all()
    session.save()
    click.echo("All data has been cleared.")


@main.command()
@click.option(
    '--format', 'output_format',
    default='csv',
    type=click.Choice(['csv', 'txt']),
    help='Export format: csv or txt'
)
@pass_session
def export(session, output_format):
    """Export all transactions to a file in the export directory."""
    with user_errors():
        outputter = get_output(output_format, session.config)
    path = outputter.write(session.manager.list_transactions())
    click.echo(f"Exported {len(session.manager)} transaction(s) to {path}")
