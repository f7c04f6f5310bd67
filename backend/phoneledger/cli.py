# Overview: Flask CLI command groups for bootstrap, the password gate, rollover and backups.

# backend/phoneledger/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Create tables and the period row for the current month (idempotent).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# Password gate:
# - python -m flask gate status
#   Show whether a password is set.
# - python -m flask gate set-password
#   Set (or overwrite) the gate password; revokes open sessions.
#
# Stock periods:
# - python -m flask periods list
# - python -m flask periods rollover [--month 2024-05] --yes
#   Move every unsold product to the next month. Cannot be undone.
#
# Backups:
# - python -m flask backup export --out backup.json
# - python -m flask backup import backup.json --yes
#   Replace ALL ledger data with the file's contents.

import json

import click
from flask.cli import with_appcontext

from .extensions import db
from .services import auth_service, backup_service, periods_service
from .services.accounting import current_month_year, parse_month_year
from .services.auth_service import PasswordValidationError
from .services.backup_service import BackupFormatError
from .time_utils import today


def _validate_month(ctx, param, value):
    if value is None:
        return None
    try:
        parse_month_year(value)
    except ValueError as e:
        raise click.BadParameter(str(e))
    return value


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Create the schema (if missing) and the current month's period row.
    """
    click.echo("START Initializing ledger...")
    db.create_all()

    period = periods_service.ensure_period(current_month_year())
    click.echo(f"PASS Active period: {period.month_year}")

    if auth_service.is_password_set():
        click.echo("PASS Gate password is set")
    else:
        click.echo("WARN No gate password yet. Run 'python -m flask gate set-password'.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


@click.group('gate')
def gate_group():
    """Password gate commands."""


@gate_group.command('status')
@with_appcontext
def gate_status():
    if auth_service.is_password_set():
        click.echo("Password is set")
    else:
        click.echo("Password is NOT set")


@gate_group.command('set-password')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='New password')
@with_appcontext
def gate_set_password(password):
    """Set or overwrite the gate password. Open sessions are revoked."""
    try:
        auth_service.reset_password(password)
    except PasswordValidationError as e:
        raise click.ClickException(str(e))
    click.echo("PASS Gate password saved")


@click.group('periods')
def periods_group():
    """Stock period commands."""


@periods_group.command('list')
@with_appcontext
def list_periods():
    result = periods_service.list_periods()
    if not result["items"]:
        click.echo("No periods recorded.")
        return
    click.echo(f"{'ID':<6} {'Month':<8} {'Active':<7} Created")
    click.echo("-" * 45)
    for p in result["items"]:
        active = "yes" if p["is_active"] else "no"
        click.echo(f"{p['id']:<6} {p['month_year']:<8} {active:<7} {p['created_at']}")


@periods_group.command('rollover')
@click.option('--month', 'current_month', callback=_validate_month, help='Month being closed (YYYY-MM, default: this month)')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def rollover(current_month, yes):
    """Move every unsold product to the next month. Cannot be undone."""
    preview = periods_service.preview_rollover(current_month)
    if preview["unsold_count"] == 0:
        click.echo(periods_service.NOTHING_TO_ROLL_OVER)
        return

    if not yes:
        click.confirm(
            f"Move {preview['unsold_count']} unsold products from "
            f"{preview['current_month']} to {preview['next_month']}? "
            f"This cannot be undone; make a backup first.",
            abort=True,
        )

    result = periods_service.perform_rollover(current_month)
    click.echo(f"PASS {result.message}")


@click.group('backup')
def backup_group():
    """Backup and restore commands."""


@backup_group.command('export')
@click.option('--out', 'out_path', type=click.Path(dir_okay=False, writable=True),
              help='Output file (default: phoneledger-backup-YYYY-MM-DD.json)')
@with_appcontext
def export_backup(out_path):
    document = backup_service.export_backup()
    out_path = out_path or f"phoneledger-backup-{today().isoformat()}.json"
    with open(out_path, "w", encoding="utf-8") as fh:
        json.dump(document, fh, ensure_ascii=False, indent=2)
    click.echo(
        f"PASS Wrote {out_path}: {len(document['products'])} products, "
        f"{len(document['sales'])} sales, {len(document['monthlyData'])} periods, "
        f"{len(document['debts'])} debts, {len(document['accessories'])} accessories"
    )


@backup_group.command('import')
@click.argument('path', type=click.Path(exists=True, dir_okay=False))
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def import_backup(path, yes):
    """Replace ALL ledger data with the contents of PATH."""
    with open(path, "r", encoding="utf-8") as fh:
        try:
            document = json.load(fh)
        except json.JSONDecodeError as e:
            raise click.ClickException(f"Not a JSON file: {e}")

    try:
        backup_service.parse_backup(document)
    except BackupFormatError as e:
        raise click.ClickException(str(e))

    if not yes:
        click.confirm("WARN All current data will be replaced by the backup. Continue?", abort=True)

    try:
        counts = backup_service.import_backup(document)
    except BackupFormatError as e:
        raise click.ClickException(str(e))
    click.echo(
        "PASS Restored "
        + ", ".join(f"{n} {section}" for section, n in counts.items())
    )


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(gate_group)
    app.cli.add_command(periods_group)
    app.cli.add_command(backup_group)
