"""Flask CLI entry points: ``flask erp ...`` and ``flask env ...``.

These are the external drivers for the connector; periodic syncs are
scheduled outside the app (Task Scheduler / cron) by calling ``flask erp sync``.
"""

from __future__ import annotations

import os
from pathlib import Path

import click
from flask import current_app
from flask.cli import AppGroup

from .. import db
from ..envcrypt import EnvDecryptError, decrypt_file, encrypt_file
from ..export import export_inventory
from ..models.log import DataSyncLog
from .codec import format_quantity
from .connector import get_connector
from .inventory import InventoryFilter, apply_filters, get_inventory_cache
from .sync import SyncType, sync_to_local_store

erp_cli = AppGroup("erp", help="Legacy ERP connector commands.")
env_cli = AppGroup("env", help="Encrypted .env helpers.")


@erp_cli.command("probe")
def probe_command():
    """Check that the legacy database answers a trivial query."""
    connector = get_connector()
    ok = connector.test_connection()
    if ok:
        click.echo("JDE connection OK")
        return
    current_app.logger.error("JDE connection probe failed")
    raise click.ClickException("JDE connection failed")


@erp_cli.command("sync")
@click.argument("record_type", type=click.Choice(
    [t.value for t in SyncType] + ["itemMaster", "purchaseOrders", "inventoryLevels"]
))
def sync_command(record_type):
    """Extract RECORD_TYPE from the legacy system and upsert it locally."""
    summary = sync_to_local_store(get_connector(), record_type, session=db.session)
    if not summary.success:
        current_app.logger.error("Sync %s failed: %s", summary.sync_type, summary.message)
        raise click.ClickException(summary.message)
    current_app.logger.info("Sync %s finished: %s", summary.sync_type, summary.message)
    click.echo(summary.message)


@erp_cli.command("last-sync")
@click.option("--type", "record_type", default=None, help="Restrict to one sync type.")
def last_sync_command(record_type):
    """Print when the last successful sync finished."""
    sync_type = SyncType.parse(record_type).value if record_type else None
    stamp = DataSyncLog.get_latest_success_timestamp(db.session, sync_type)
    click.echo(stamp.isoformat(sep=" ") if stamp else "never")


@erp_cli.command("gl-classes")
def gl_classes_command():
    """List distinct GL posting classes present in the item master."""
    for gl_class in get_connector().get_inventory_gl_classes():
        click.echo(gl_class)


@erp_cli.command("inventory")
@click.option("--search", default=None)
@click.option("--status", type=click.Choice(["OUT", "LOW", "OK", "all"], case_sensitive=False), default=None)
@click.option("--business-unit", default=None)
@click.option("--gl-class", default=None)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--page-size", type=int, default=50, show_default=True)
@click.option("--refresh", is_flag=True, default=False, help="Drop the cached extraction first.")
def inventory_command(search, status, business_unit, gl_class, page, page_size, refresh):
    """Print one page of cached inventory levels with a stock summary."""
    cache = get_inventory_cache()
    if refresh:
        cache.invalidate()
    filters = InventoryFilter(search=search, status=status, business_unit=business_unit, gl_class=gl_class)
    payload = cache.query(filters, page=page, page_size=page_size)
    if not payload["success"]:
        raise click.ClickException(f"Inventory extraction failed: {payload['error']}")

    for item in payload["inventory_levels"]:
        click.echo(
            f"{item.item_number:<25} {item.business_unit:<12} {item.stock_status.value:<4} "
            f"{format_quantity(item.available_stock, item.primary_uom):>14}  {item.description}"
        )
    pagination = payload["pagination"]
    summary = payload["summary"]
    click.echo(
        f"page {pagination['page']}/{pagination['total_pages']} ({pagination['total_count']} items); "
        f"OK {summary['in_stock']}, LOW {summary['low_stock']}, OUT {summary['out_of_stock']}"
    )


@erp_cli.command("export")
@click.option("--format", "fmt", type=click.Choice(["csv", "xlsx", "excel"]), default="csv", show_default=True)
@click.option("--out", "out_dir", type=click.Path(file_okay=False), default=".", show_default=True,
              help="Directory for the export file.")
@click.option("--search", default=None)
@click.option("--status", type=click.Choice(["OUT", "LOW", "OK", "all"], case_sensitive=False), default=None)
@click.option("--business-unit", default=None)
@click.option("--gl-class", default=None)
@click.option("--item", "items", multiple=True, help="Export only these item numbers (repeatable).")
@click.option("--columns", default=None, help="Comma separated field names to include.")
@click.option("--column-mode", type=click.Choice(["all", "compact"]), default="all", show_default=True)
@click.option("--no-headers", is_flag=True, default=False)
def export_command(fmt, out_dir, search, status, business_unit, gl_class, items, columns, column_mode, no_headers):
    """Export inventory levels to CSV or XLSX."""
    connector = get_connector()
    if items:
        records = []
        failed = []
        reason = None
        for item_number in items:
            result = connector.get_inventory_levels(item_number)
            if result.failed:
                failed.append(item_number)
                reason = result.reason
                continue
            records.extend(result.records[:1])
        if failed:
            raise click.ClickException(f"Inventory lookup failed for {', '.join(failed)}: {reason}")
    else:
        result = get_inventory_cache().get()
        if result.failed:
            raise click.ClickException(f"Inventory extraction failed: {result.reason}")
        filters = InventoryFilter(search=search, status=status, business_unit=business_unit, gl_class=gl_class)
        records = apply_filters(result.records, filters)

    payload, filename, _ = export_inventory(
        records,
        fmt,
        column_mode=column_mode,
        columns=columns,
        include_headers=not no_headers,
    )
    target = Path(out_dir) / filename
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(payload)
    click.echo(f"Exported {len(records)} item(s) -> {target}")


@env_cli.command("encrypt")
@click.option("--in", "src", default=".env", show_default=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--out", "dst", default=".env.enc", show_default=True)
@click.password_option("--passphrase", envvar="ENV_PASSPHRASE", prompt="Enter passphrase")
def encrypt_command(src, dst, passphrase):
    """Encrypt a .env file with AES-256-GCM (scrypt key derivation)."""
    encrypt_file(src, dst, passphrase)
    click.echo(f"Encrypted -> {dst}")
    click.echo("Share the passphrase out-of-band.")


@env_cli.command("decrypt")
@click.option("--in", "src", default=".env.enc", show_default=True, type=click.Path(exists=True, dir_okay=False))
@click.option("--out", "dst", default=".env", show_default=True)
@click.option("--passphrase", envvar="ENV_PASSPHRASE", prompt="Enter passphrase", hide_input=True)
def decrypt_command(src, dst, passphrase):
    """Decrypt a .env.enc back to plaintext."""
    try:
        decrypt_file(src, dst, passphrase)
    except EnvDecryptError as exc:
        raise click.ClickException(str(exc)) from exc
    if os.name != "nt":
        os.chmod(dst, 0o600)
    click.echo(f"Decrypted -> {dst}")
