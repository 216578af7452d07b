from datetime import datetime, timedelta

import pytest

from vending_machine import (
    DEFAULT_COIN_FLOAT,
    AdminConsole,
    CoinLedger,
    PurchaseCoordinator,
    Slot,
    TerminalConfig,
    beverage,
    build_terminal,
    snack,
)


FIXED_NOW = datetime(2026, 3, 1, 12, 0, 0)


def fixed_clock():
    return FIXED_NOW


def ledger_state(ledger):
    """Everything an aborted call must leave untouched"""
    return ledger.snapshot(), ledger.current_balance()


@pytest.fixture
def ledger():
    return CoinLedger(initial_counts=DEFAULT_COIN_FLOAT)


@pytest.fixture
def context():
    return build_terminal(clock=fixed_clock)


@pytest.fixture
def coordinator(context):
    return PurchaseCoordinator(context)


@pytest.fixture
def admin(context):
    console = AdminConsole(context)
    assert console.authenticate("admin123")
    return console


@pytest.fixture
def gum_slot(context):
    """A 0.50 snack in slot 5"""
    slot = Slot(5, snack("Gum", "0.50", 20), 10)
    context.catalog.add_slot(slot)
    return slot


@pytest.fixture
def expired_slot(context):
    """A beverage that went off a day before the fixed clock, in slot 6"""
    product = beverage("Old Juice", "1.00", 250, expiry_date=FIXED_NOW - timedelta(days=1))
    slot = Slot(6, product, 5)
    context.catalog.add_slot(slot)
    return slot


@pytest.fixture
def short_float_context():
    """No 1.00 or 0.50 coins and only three 0.10 coins in the float"""
    config = TerminalConfig(coin_float={10: 3, 200: 5, 500: 2, 1000: 1})
    context = build_terminal(config, clock=fixed_clock)
    context.catalog.add_slot(Slot(7, snack("Gift Box", "9.60", 400), 3))
    return context
