# Overview: Flask CLI command groups for bootstrap, catalog, daily sales, settings and operators.

# backend/backoffice/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create the store_documents table (use "flask db upgrade" in production).
# - python -m flask system seed
#   Add the demo catalog (skips products that already exist).
#
# Catalog:
# - python -m flask catalog list [--status in-stock] [--search milk]
# - python -m flask catalog add --name "Milk" --price 1.20 --stock 40 --category Dairy
#
# Daily sales:
# - python -m flask sales summary
# - python -m flask sales reset-daily --yes
#   Move today's completed orders into the backup slot (replaces any earlier backup).
# - python -m flask sales revert-daily
#
# Settings:
# - python -m flask settings show
# - python -m flask settings set-tax 8.5
# - python -m flask settings set-discount 5
#
# Operators:
# - python -m flask operators create-admin
# - python -m flask operators create-cashier --username bob
# - python -m flask operators delete @cashierbob

import click
from flask.cli import with_appcontext

from .context import get_service
from .errors import PosError
from .extensions import db
from .money import display_money
from .validation import ConflictError, ValidationError

DEMO_CATALOG = [
    {"id": "PRD-DEMO-01", "name": "Whole Milk 1L", "price": "1.20", "stock": "40", "category": "Dairy", "unit": "liter"},
    {"id": "PRD-DEMO-02", "name": "Cheddar 200g", "price": "3.75", "stock": "25", "category": "Dairy", "discount": "10"},
    {"id": "PRD-DEMO-03", "name": "Sourdough Loaf", "price": "4.50", "stock": "12", "category": "Bakery"},
    {"id": "PRD-DEMO-04", "name": "Bananas", "price": "0.30", "stock": "120", "category": "Produce"},
    {"id": "PRD-DEMO-05", "name": "Coffee Beans 500g", "price": "9.90", "stock": "18", "category": "Pantry"},
    {"id": "PRD-DEMO-06", "name": "Sparkling Water 6-pack", "price": "5.40", "stock": "0", "category": "Drinks", "unit": "pack"},
]

DOMAIN_ERRORS = (PosError, ValidationError, ConflictError)


def _fail(exc: Exception):
    raise click.ClickException(str(exc))


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create the store_documents table if it does not exist."""
    db.create_all()
    click.echo("PASS Schema ready")


@system_group.command('seed')
@with_appcontext
def seed():
    """Load the demo catalog. Products already present are left alone."""
    service = get_service()
    added = 0
    for payload in DEMO_CATALOG:
        if service.catalog.has(payload["id"]):
            click.echo(f"WARN  Product '{payload['id']}' already exists, skipping...")
            continue
        product = service.add_product(dict(payload))
        added += 1
        click.echo(f"PASS Added {product.id}: {product.name} ({product.status})")
    click.echo(f"DONE {added} product(s) added")


@click.group('catalog')
def catalog_group():
    """Catalog inspection and maintenance."""


@catalog_group.command('list')
@click.option('--search', help='Match name or category')
@click.option('--category', help='Exact category')
@click.option('--status', type=click.Choice(['all', 'in-stock', 'out-of-stock']), default='all')
@with_appcontext
def list_products(search, category, status):
    products = get_service().list_products(search=search, category=category, status=status)
    if not products:
        click.echo("No products found.")
        return

    click.echo("\n" + "=" * 88)
    click.echo(f"{'ID':<16} {'Name':<28} {'Price':>9} {'Stock':>8} {'Sold':>6}  {'Category':<10} Status")
    click.echo("=" * 88)
    for p in products:
        click.echo(
            f"{p.id:<16} {p.name[:28]:<28} {display_money(p.price):>9} {str(p.stock):>8} "
            f"{str(p.sold):>6}  {p.category[:10]:<10} {p.status}"
        )
    click.echo("=" * 88 + "\n")


@catalog_group.command('add')
@click.option('--name', prompt=True, help='Product name')
@click.option('--price', prompt=True, help='Unit price')
@click.option('--stock', default='0', show_default=True, help='Initial stock')
@click.option('--category', default='', help='Category')
@click.option('--discount', default=None, help='Per-product discount percentage')
@click.option('--unit', default='item', show_default=True, help='Unit (item, pack, liter, ...)')
@click.option('--id', 'product_id', default=None, help='Product id (generated when omitted)')
@with_appcontext
def add_product(name, price, stock, category, discount, unit, product_id):
    payload = {"name": name, "price": price, "stock": stock, "category": category, "unit": unit}
    if discount is not None:
        payload["discount"] = discount
    if product_id:
        payload["id"] = product_id

    try:
        product = get_service().add_product(payload)
    except DOMAIN_ERRORS as e:
        _fail(e)
    click.echo(f"PASS Added {product.id}: {product.name} @ {display_money(product.price)}")


@click.group('sales')
def sales_group():
    """Daily sales figures, reset and revert."""


@sales_group.command('summary')
@with_appcontext
def sales_summary():
    summary = get_service().summary()
    click.echo(f"Date:              {summary['date']}")
    click.echo(f"Today's sales:     {summary['today_sales']} ({summary['today_order_count']} order(s))")
    click.echo(f"Total revenue:     {summary['total_revenue']} ({summary['order_count']} order(s))")
    click.echo(f"Pending orders:    {summary['pending_count']}")
    click.echo(f"Backup available:  {'yes' if summary['has_backup'] else 'no'}")


@sales_group.command('reset-daily')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_daily(yes):
    """
    Move today's completed orders into the backup slot and zero sold counters.

    Any earlier backup is replaced.
    """
    service = get_service()
    if service.has_backup() and not yes:
        click.confirm("WARN A backup already exists and will be replaced. Continue?", abort=True)
    moved = service.reset_daily_sales()
    click.echo(f"PASS {moved} order(s) moved to backup")


@sales_group.command('revert-daily')
@with_appcontext
def revert_daily():
    restored = get_service().revert_daily_sales()
    if not restored:
        click.echo("Nothing to revert.")
        return
    click.echo(f"PASS {restored} order(s) restored")


@click.group('settings')
def settings_group():
    """Tax rate and universal discount."""


@settings_group.command('show')
@with_appcontext
def show_settings():
    settings = get_service().settings
    click.echo(f"Tax rate:            {settings.tax_rate}%")
    click.echo(f"Universal discount:  {settings.universal_discount}%")


@settings_group.command('set-tax')
@click.argument('rate')
@with_appcontext
def set_tax(rate):
    try:
        value = get_service().update_tax_rate(rate)
    except DOMAIN_ERRORS as e:
        _fail(e)
    click.echo(f"PASS Tax rate set to {value}%")


@settings_group.command('set-discount')
@click.argument('rate')
@with_appcontext
def set_discount(rate):
    try:
        value = get_service().update_universal_discount(rate)
    except DOMAIN_ERRORS as e:
        _fail(e)
    click.echo(f"PASS Universal discount set to {value}%")


@click.group('operators')
def operators_group():
    """Admin and cashier accounts."""


@operators_group.command('create-admin')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_admin(password):
    try:
        admin = get_service().create_admin(password)
    except DOMAIN_ERRORS as e:
        _fail(e)
    click.echo(f"PASS Created {admin.username}")


@operators_group.command('create-cashier')
@click.option('--username', prompt=True, help='Username (stored with the @cashier prefix)')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_cashier(username, password):
    try:
        cashier = get_service().create_cashier(username, password)
    except DOMAIN_ERRORS as e:
        _fail(e)
    click.echo(f"PASS Created {cashier.username}")


@operators_group.command('delete')
@click.argument('username')
@with_appcontext
def delete_operator(username):
    try:
        operator = get_service().delete_operator(username)
    except DOMAIN_ERRORS as e:
        _fail(e)
    click.echo(f"PASS Deleted {operator.username}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(catalog_group)
    app.cli.add_command(sales_group)
    app.cli.add_command(settings_group)
    app.cli.add_command(operators_group)
