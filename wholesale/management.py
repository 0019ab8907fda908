"""
Management commands for production planning and inventory maintenance
"""
import click
from flask.cli import with_appcontext

from .extensions import db
from .services.errors import ValidationFailed
from .services.inventory_buckets import audit_buckets, release_if_orphaned
from .services.production_fulfillment import convert_outstanding_for_date
from .utils.coercion import to_date


@click.command('convert-outstanding')
@click.option('--date', 'shipping_date', required=True, help='Shipping date (YYYY-MM-DD)')
@click.option('--product-id', type=int, default=None, help='Limit to one product')
@with_appcontext
def convert_outstanding_command(shipping_date, product_id):
    """Create production requests for demand shipping on a date"""
    try:
        parsed = to_date(shipping_date)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint='--date') from exc

    try:
        created = convert_outstanding_for_date(parsed, product_id=product_id)
    except ValidationFailed as exc:
        raise click.ClickException(str(exc)) from exc

    if not created:
        click.echo(f"No uncovered demand for {parsed.isoformat()}.")
        return
    for production_request in created:
        click.echo(
            f"Bucket {production_request.product_inventory_id}: "
            f"requested {production_request.request_quantity} (request {production_request.id})"
        )
    click.echo(f"Created {len(created)} production requests.")


@click.command('audit-buckets')
@click.option('--release-orphans', is_flag=True, help='Delete buckets nothing references')
@with_appcontext
def audit_buckets_command(release_orphans):
    """Report orphaned and negative inventory buckets"""
    report = audit_buckets()

    for bucket in report['negative']:
        click.echo(f"NEGATIVE bucket {bucket.id} ({bucket.label}): quantity {bucket.quantity}")
    for bucket in report['orphaned']:
        click.echo(f"ORPHANED bucket {bucket.id} ({bucket.label}): quantity {bucket.quantity}")

    if release_orphans and report['orphaned']:
        released = sum(1 for bucket in report['orphaned'] if release_if_orphaned(bucket))
        db.session.commit()
        click.echo(f"Released {released} orphaned buckets.")

    click.echo(
        f"Audit complete: {len(report['orphaned'])} orphaned, {len(report['negative'])} negative."
    )


def register_commands(app):
    """Register CLI commands"""
    app.cli.add_command(convert_outstanding_command)
    app.cli.add_command(audit_buckets_command)
