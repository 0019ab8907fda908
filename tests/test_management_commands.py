from datetime import date

from wholesale.extensions import db
from wholesale.models import ProductInventory, ProductionRequest
from wholesale.services.inventory_buckets import acquire_bucket
from wholesale.services.order_lifecycle import create_order


def test_convert_outstanding_command(runner, order_attributes):
    create_order(order_attributes(item_quantity=20, receptacle_quantity=2))

    result = runner.invoke(args=['convert-outstanding', '--date', '2026-11-02'])

    assert result.exit_code == 0, result.output
    assert 'requested 20' in result.output
    assert ProductionRequest.query.count() == 1


def test_convert_outstanding_with_nothing_to_do(runner, app_context):
    result = runner.invoke(args=['convert-outstanding', '--date', '2026-11-02'])
    assert result.exit_code == 0
    assert 'No uncovered demand for 2026-11-02' in result.output


def test_convert_outstanding_rejects_bad_date(runner, app_context):
    result = runner.invoke(args=['convert-outstanding', '--date', 'tuesday'])
    assert result.exit_code != 0
    assert 'must be a date' in result.output


def test_audit_buckets_reports_and_releases_orphans(runner, reference_data, order_attributes):
    create_order(order_attributes())
    acquire_bucket(reference_data.variation, date(2026, 10, 1), date(2026, 10, 31))
    db.session.commit()

    result = runner.invoke(args=['audit-buckets'])
    assert result.exit_code == 0
    assert 'ORPHANED bucket' in result.output
    assert 'Audit complete: 1 orphaned, 0 negative.' in result.output
    assert ProductInventory.query.count() == 2

    result = runner.invoke(args=['audit-buckets', '--release-orphans'])
    assert 'Released 1 orphaned buckets.' in result.output
    assert ProductInventory.query.count() == 1
