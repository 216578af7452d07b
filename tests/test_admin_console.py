from datetime import timedelta

import pytest

from vending_machine import (
    AdminConsole,
    InsufficientStockError,
    InvalidDenominationError,
    ProductCategory,
    PurchaseCoordinator,
    TransactionStatus,
    beverage,
    snack,
)

from conftest import FIXED_NOW


def test_authenticate_wrong_password(context):
    console = AdminConsole(context)
    assert console.authenticate("letmein") is False
    assert console.is_authenticated() is False


def test_operations_require_authentication(context):
    console = AdminConsole(context)
    with pytest.raises(PermissionError):
        console.restock(1, 5)
    with pytest.raises(PermissionError):
        console.collect_earnings()
    with pytest.raises(PermissionError):
        console.statistics()


def test_logout_revokes_access(admin):
    admin.logout()
    with pytest.raises(PermissionError):
        admin.reconcile()


def test_restock(context, admin):
    assert admin.restock(3, 5) is True
    assert context.catalog.get_slot(3).get_quantity() == 13


def test_restock_unknown_slot_or_bad_amount(admin):
    assert admin.restock(99, 5) is False
    assert admin.restock(1, 0) is False


def test_add_product_takes_next_slot_number(context, admin):
    slot_number = admin.add_product(snack("Crackers", "1.50", 80), 6)
    assert slot_number == 5
    slot = context.catalog.get_slot(5)
    assert slot.get_product().category == ProductCategory.SNACK
    assert slot.get_quantity() == 6


def test_add_product_negative_quantity(admin):
    with pytest.raises(ValueError):
        admin.add_product(snack("Crackers", "1.50"), -1)


def test_refill_coins(context, admin):
    admin.refill_coins("0.50", 10)
    assert context.ledger.count(50) == 30
    assert context.ledger.current_balance() == 0


def test_refill_coins_rejects_unknown_denomination(admin):
    with pytest.raises(InvalidDenominationError):
        admin.refill_coins("0.20", 10)


def test_collect_earnings_reports_without_removing(context, admin):
    total = context.ledger.total_value()
    report = admin.collect_earnings()
    assert report.total == total
    assert report.lines[0] == (1000, 2, 2000)
    assert sum(value for _, _, value in report.lines) == total
    assert context.ledger.total_value() == total


def test_statistics(context, admin):
    context.catalog.add_product(
        beverage("Old Milk", "1.00", 200, expiry_date=FIXED_NOW - timedelta(days=2)), 0)
    coordinator = PurchaseCoordinator(context)
    coordinator.insert_coin("5.00")
    coordinator.purchase(3)

    stats = admin.statistics()

    assert stats.product_count == 5
    assert stats.total_items == 10 + 15 + 7 + 12
    assert stats.empty_slots == 1
    assert stats.expired_products == 1
    assert stats.completed_sales == 1
    assert stats.revenue == 300
    assert stats.open_faults == 0


def test_reconcile_restores_service(context, admin, monkeypatch):
    coordinator = PurchaseCoordinator(context)
    coordinator.insert_coin("5.00")

    def failing_commit(breakdown):
        raise InsufficientStockError(200, 2, 0)

    monkeypatch.setattr(context.ledger, "commit_withdrawal", failing_commit)
    result = coordinator.purchase(2)
    assert result.status == TransactionStatus.CHANGE_DISPENSE_FAILURE
    monkeypatch.undo()

    assert admin.statistics().open_faults == 1
    resolved = admin.reconcile()

    assert [f.product_name for f in resolved] == ["Water"]
    assert context.faults == []
    assert context.in_service is True
    assert coordinator.insert_coin("1.00").accepted
